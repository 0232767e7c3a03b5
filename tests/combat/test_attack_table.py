"""
Tests for the melee attack table.
"""

from random import Random

import pytest
from combat.attack_table import (
    AttackTable,
    dodge_chance,
    glancing_chance,
    glancing_multiplier,
    miss_chance,
)
from core.constants import AttackType


class ScriptedRandom(Random):
    """A generator returning predetermined draws, repeating the last one."""

    def __init__(self, values: list[float]):
        super().__init__(0)
        self.values = list(values)

    def random(self) -> float:
        if len(self.values) > 1:
            return self.values.pop(0)
        return self.values[0]


@pytest.fixture
def boss_table():
    return AttackTable(attacker_level=60, weapon_skill=300, hit_chance=0, target_level=63)


@pytest.fixture
def dual_wield_table():
    return AttackTable(
        attacker_level=60, weapon_skill=300, hit_chance=0, target_level=63, dual_wield=True
    )


def test_boss_table_at_base_weapon_skill(boss_table: AttackTable):
    assert boss_table.miss_chance() == pytest.approx(0.08)
    assert boss_table.glancing == pytest.approx(0.4)
    assert boss_table.glancing_outcome.damage_multiplier == pytest.approx(0.65)


def test_boss_table_at_high_weapon_skill():
    table = AttackTable(attacker_level=60, weapon_skill=308, hit_chance=0, target_level=63)
    assert table.miss_chance() == pytest.approx(0.057)
    assert table.glancing == pytest.approx(0.4)
    assert table.glancing_outcome.damage_multiplier == pytest.approx(0.95)


def test_hit_chance_floors_miss_at_zero():
    assert miss_chance(300, 63, hit_chance=20) == 0.0


def test_dual_wield_rescales_single_wield_miss():
    assert miss_chance(300, 63, 0, dual_wield=True) == pytest.approx(0.08 * 0.8 + 0.2)
    # Hit chance is applied before the dual wield penalty.
    assert miss_chance(300, 63, 9, dual_wield=True) == pytest.approx(0.2)


def test_special_attacks_ignore_dual_wield_penalty(dual_wield_table: AttackTable):
    assert dual_wield_table.miss_chance() == pytest.approx(0.264)
    assert dual_wield_table.miss_chance(is_special_attack=True) == pytest.approx(0.08)


def test_dodge_shrinks_with_weapon_skill():
    assert dodge_chance(300, 63) == pytest.approx(0.065)
    assert dodge_chance(308, 63) == pytest.approx(0.065 - 8 * 0.0004)
    assert dodge_chance(300, 60) == pytest.approx(0.05)
    assert dodge_chance(600, 63) == 0.0


def test_no_glancing_against_lower_level_targets():
    assert glancing_chance(60, 300, 59) == 0.0
    assert glancing_multiplier(60, 300, 59) == pytest.approx(0.95)


def test_glancing_multiplier_breakpoints():
    assert glancing_multiplier(60, 305, 63) == pytest.approx(0.85)
    low = glancing_multiplier(60, 280, 63)
    assert 0.01 <= low < 0.65


@pytest.mark.parametrize("weapon_skill", range(251, 321))
def test_glancing_multiplier_never_drops_with_more_skill(weapon_skill: int):
    previous = glancing_multiplier(60, weapon_skill - 1, 63)
    current = glancing_multiplier(60, weapon_skill, 63)
    assert 0.01 <= previous <= 0.95
    assert 0.01 <= current <= 0.95
    assert current >= previous


@pytest.mark.parametrize("crit_chance", [0, 25, 60, 100, 250])
@pytest.mark.parametrize("is_special_attack", [False, True])
def test_probabilities_sum_to_one(
    dual_wield_table: AttackTable, crit_chance: float, is_special_attack: bool
):
    probabilities = dual_wield_table.probabilities(crit_chance, is_special_attack)
    assert probabilities.total == pytest.approx(1.0)
    for term in (
        probabilities.miss,
        probabilities.dodge,
        probabilities.glancing,
        probabilities.crit,
        probabilities.hit,
    ):
        assert term >= 0.0


def test_special_attacks_never_glance(boss_table: AttackTable):
    assert boss_table.probabilities(10, is_special_attack=True).glancing == 0.0


def test_undodgeable_attacks_move_dodge_into_hit(boss_table: AttackTable):
    dodgeable = boss_table.probabilities(10, is_special_attack=True)
    undodgeable = boss_table.probabilities(10, is_special_attack=True, can_dodge=False)
    assert undodgeable.dodge == 0.0
    assert undodgeable.hit == pytest.approx(dodgeable.hit + dodgeable.dodge)
    assert undodgeable.total == pytest.approx(1.0)


@pytest.mark.parametrize(
    "draw, expected",
    [
        (0.0, AttackType.MISS),
        (0.079, AttackType.MISS),
        (0.081, AttackType.DODGE),
        (0.2, AttackType.GLANCING),
        (0.6, AttackType.CRIT),
        (0.7, AttackType.HIT),
    ],
)
def test_roll_walks_outcomes_in_order(boss_table: AttackTable, draw: float, expected: AttackType):
    assert boss_table.roll(ScriptedRandom([draw]), crit_chance=10).kind == expected


def test_special_attack_roll_skips_glancing(boss_table: AttackTable):
    outcome = boss_table.roll(ScriptedRandom([0.2]), crit_chance=10, is_special_attack=True)
    assert outcome.kind == AttackType.CRIT


def test_undodgeable_roll_skips_dodge(boss_table: AttackTable):
    outcome = boss_table.roll(
        ScriptedRandom([0.1]), crit_chance=0, is_special_attack=True, can_dodge=False
    )
    assert outcome.kind == AttackType.HIT
