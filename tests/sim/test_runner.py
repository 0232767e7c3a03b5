"""
Tests for the iteration runner and result aggregation.
"""

import pytest
from character.character_stats import CombatantStats
from core.constants import Ability, AttackType, Buff, CharacterClass, WeaponType
from core.error_handling import ConfigurationError
from effects.event_system import BuffGainEvent, DamageEvent, HealEvent
from items.weapon import Weapon
from sim.config import SimulationConfig
from sim.result import SimulationResult
from sim.rogue_simulator import RogueSimulator
from sim.runner import SIMULATORS, IterationRunner, RunSummary, create_simulator


@pytest.fixture
def rogue_config():
    sword = Weapon(min_damage=100, max_damage=150, speed=2.6, weapon_type=WeaponType.SWORD)
    return SimulationConfig(
        character_class=CharacterClass.ROGUE,
        stats=CombatantStats(attack_power=900, crit_chance=15, main_hand=sword, off_hand=sword),
        fight_length=30,
        iterations=4,
        seed=21,
    )


def test_every_archetype_has_a_simulator():
    assert set(SIMULATORS) == set(CharacterClass)


def test_create_simulator(rogue_config: SimulationConfig):
    assert isinstance(create_simulator(rogue_config), RogueSimulator)


def test_run_many_uses_configured_iterations(rogue_config: SimulationConfig):
    summary = IterationRunner(rogue_config).run_many()
    assert summary.iterations == 4
    assert summary.execution_time >= 0
    assert summary.label == "DPS"
    assert summary.min_output_per_second <= summary.mean_output_per_second
    assert summary.mean_output_per_second <= summary.max_output_per_second


def test_seeded_runs_are_reproducible(rogue_config: SimulationConfig):
    first = IterationRunner(rogue_config).run_many(3)
    second = IterationRunner(rogue_config).run_many(3)
    assert first.outputs_per_second == second.outputs_per_second


def test_breakdown_shares_and_order(rogue_config: SimulationConfig):
    breakdown = IterationRunner(rogue_config).run_many().aggregate_breakdown()
    assert sum(entry.share for entry in breakdown) == pytest.approx(100.0)
    totals = [entry.total for entry in breakdown]
    assert totals == sorted(totals, reverse=True)
    assert {Ability.MAIN_HAND, Ability.OFF_HAND} <= {entry.ability for entry in breakdown}


def test_outcome_rates_sum_to_one_hundred(rogue_config: SimulationConfig):
    statistics = IterationRunner(rogue_config).run_many().aggregate_statistics()
    rates = sum(statistics[name] for name in ("crit", "hit", "glancing", "miss", "dodge"))
    assert rates == pytest.approx(100.0)
    assert statistics["events"] > 0
    assert statistics["average_total"] > 0


def test_non_positive_iterations_are_rejected(rogue_config: SimulationConfig):
    with pytest.raises(ConfigurationError):
        IterationRunner(rogue_config).run_many(0)


def test_single_worker_runs_in_process(rogue_config: SimulationConfig):
    summary = IterationRunner(rogue_config).run_parallel(iterations=2, workers=1)
    assert summary.iterations == 2


def test_empty_summary():
    summary = RunSummary()
    assert summary.iterations == 0
    assert summary.mean_output_per_second == 0.0
    assert summary.aggregate_breakdown() == []
    assert summary.aggregate_statistics()["events"] == 0


def test_result_from_events():
    events = [
        DamageEvent(timestamp=0, ability=Ability.MAIN_HAND, amount=100, outcome=AttackType.HIT),
        DamageEvent(timestamp=100, ability=Ability.MAIN_HAND, amount=0, outcome=AttackType.MISS),
        DamageEvent(
            timestamp=200, ability=Ability.EVISCERATE, amount=0, outcome=AttackType.DODGE
        ),
        DamageEvent(
            timestamp=300, ability=Ability.MAIN_HAND, amount=60, outcome=AttackType.GLANCING
        ),
        BuffGainEvent(timestamp=300, buff=Buff.SLICE_AND_DICE, duration=9000),
    ]
    result = SimulationResult.from_events(events, fight_length=10)
    assert result.total_output == 160
    assert result.output_per_second == pytest.approx(16.0)
    assert result.total_hit_damage == 160
    # Abilities without output are left out of the breakdown.
    assert list(result.breakdown) == [Ability.MAIN_HAND]
    stats = result.breakdown[Ability.MAIN_HAND]
    assert stats.landed == 2
    assert stats.misses == 1
    assert stats.glancing == 1
    assert stats.average_hit == pytest.approx(80.0)
    assert result.outcome_counts[AttackType.DODGE] == 1


def test_healer_result_counts_heals_only():
    events = [
        HealEvent(
            timestamp=0,
            ability=Ability.HEALING_WAVE,
            amount=500,
            overhealing=200,
            outcome=AttackType.CRIT,
        ),
        DamageEvent(timestamp=0, ability=Ability.MAIN_HAND, amount=100, outcome=AttackType.HIT),
    ]
    result = SimulationResult.from_events(events, fight_length=5, healer=True)
    assert result.label == "HPS"
    assert result.total_output == 500
    assert result.breakdown[Ability.HEALING_WAVE].overhealing == 200
    assert result.breakdown[Ability.HEALING_WAVE].crits == 1
