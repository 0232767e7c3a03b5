"""
Tests for the per-archetype damage and healing calculators.
"""

import math
from random import Random

import pytest
from character.character_stats import CombatantStats
from character.talents import MageTalents, RogueTalents, ShamanTalents, WarriorTalents
from combat.damage import (
    AbilityContext,
    roll_spell_outcome,
    spell_miss_chance,
)
from combat.mage_calculator import MageCalculator
from combat.melee_calculator import MeleeCalculator
from combat.rogue_calculator import RogueCalculator
from combat.shaman_calculator import ShamanCalculator, jump_factor
from combat.warrior_calculator import WarriorCalculator, rage_from_damage
from core.constants import Ability, AttackType, Buff, SpellSchool, WeaponType
from core.error_handling import ConfigurationError
from items.weapon import Weapon


class ScriptedRandom(Random):
    """A generator returning predetermined draws, repeating the last one."""

    def __init__(self, values: list[float]):
        super().__init__(0)
        self.values = list(values)

    def random(self) -> float:
        if len(self.values) > 1:
            return self.values.pop(0)
        return self.values[0]


class ActiveBuffs:
    """A buff view with a fixed set of active buffs."""

    def __init__(self, *buffs: Buff, stacks: int = 1):
        self.buffs = set(buffs)
        self.stacks = stacks

    def has_buff(self, buff: Buff) -> bool:
        return buff in self.buffs

    def buff_stacks(self, buff: Buff) -> int:
        return self.stacks if buff in self.buffs else 0


@pytest.fixture
def sword():
    return Weapon(min_damage=100, max_damage=150, speed=2.0, weapon_type=WeaponType.SWORD)


@pytest.fixture
def dagger():
    return Weapon(min_damage=100, max_damage=150, speed=2.0, weapon_type=WeaponType.DAGGER)


@pytest.fixture
def melee_stats(sword: Weapon):
    return CombatantStats(attack_power=1000, main_hand=sword)


@pytest.fixture
def dual_wield_stats(sword: Weapon):
    return CombatantStats(attack_power=1000, main_hand=sword, off_hand=sword)


# ==============================================================================
# MELEE
# ==============================================================================


def test_main_hand_hit(melee_stats: CombatantStats):
    calculator = MeleeCalculator(melee_stats, 63, 0, ScriptedRandom([0.5, 0.99]))
    result = calculator.compute(Ability.MAIN_HAND)
    # 125 weapon damage plus round(1000 / 14 * 2.0) attack power damage.
    assert result.outcome == AttackType.HIT
    assert result.amount == 268


def test_off_hand_is_halved(dual_wield_stats: CombatantStats):
    calculator = MeleeCalculator(dual_wield_stats, 63, 0, ScriptedRandom([0.5, 0.99]))
    result = calculator.compute(Ability.OFF_HAND)
    assert result.ability == Ability.OFF_HAND
    assert result.amount == 134


def test_armor_mitigates_swings(melee_stats: CombatantStats):
    calculator = MeleeCalculator(melee_stats, 63, 400, ScriptedRandom([0.5, 0.99]))
    assert calculator.compute(Ability.MAIN_HAND).amount == 134


def test_glancing_blow_damage(melee_stats: CombatantStats):
    calculator = MeleeCalculator(melee_stats, 63, 0, ScriptedRandom([0.5, 0.2]))
    result = calculator.compute(Ability.MAIN_HAND)
    assert result.outcome == AttackType.GLANCING
    assert result.amount == math.floor(268 * 0.65)


def test_miss_deals_no_damage(melee_stats: CombatantStats):
    calculator = MeleeCalculator(melee_stats, 63, 0, ScriptedRandom([0.5, 0.0]))
    result = calculator.compute(Ability.MAIN_HAND)
    assert result.is_avoided
    assert result.amount == 0


def test_crit_doubles_damage(sword: Weapon):
    stats = CombatantStats(attack_power=1000, crit_chance=50, main_hand=sword)
    calculator = MeleeCalculator(stats, 63, 0, ScriptedRandom([0.5, 0.6]))
    result = calculator.compute(Ability.MAIN_HAND)
    assert result.is_crit
    assert result.amount == 536


def test_crusader_raises_attack_power(melee_stats: CombatantStats):
    calculator = MeleeCalculator(
        melee_stats, 63, 0, ScriptedRandom([0.5, 0.99]), buffs=ActiveBuffs(Buff.CRUSADER)
    )
    assert calculator.attack_power == 1100
    assert calculator.compute(Ability.MAIN_HAND).amount == 125 + round(1100 / 14 * 2.0)


def test_missing_weapon_yields_no_weapon_result():
    calculator = MeleeCalculator(CombatantStats(), 63, 0, ScriptedRandom([0.5]))
    result = calculator.compute(Ability.MAIN_HAND)
    assert result.outcome == AttackType.NO_WEAPON
    assert result.amount == 0


def test_melee_rejects_spells(melee_stats: CombatantStats):
    calculator = MeleeCalculator(melee_stats, 63, 0, Random(1))
    with pytest.raises(ConfigurationError):
        calculator.compute(Ability.FIREBALL)


# ==============================================================================
# ROGUE
# ==============================================================================


def test_rogue_costs_and_durations(dagger: Weapon):
    stats = CombatantStats(main_hand=dagger)
    talents = RogueTalents(improved_sinister_strike=2, improved_slice_and_dice=3)
    calculator = RogueCalculator(stats, talents, 63, 0, Random(1))
    assert calculator.energy_cost(Ability.SINISTER_STRIKE) == 40
    assert calculator.energy_cost(Ability.EVISCERATE) == 35
    untalented = RogueCalculator(stats, RogueTalents(), 63, 0, Random(1))
    assert untalented.slice_and_dice_duration_ms(5) == 21000
    assert calculator.slice_and_dice_duration_ms(5) == 30450


def test_rogue_weapon_expertise(dagger: Weapon):
    stats = CombatantStats(main_hand=dagger)
    calculator = RogueCalculator(stats, RogueTalents(weapon_expertise=2), 63, 0, Random(1))
    assert calculator.weapon_skill == 305
    assert calculator.can_backstab


def test_cold_blood_forces_a_crit(dagger: Weapon):
    stats = CombatantStats(attack_power=1000, main_hand=dagger)
    calculator = RogueCalculator(
        stats,
        RogueTalents(),
        63,
        0,
        ScriptedRandom([0.5, 0.99]),
        buffs=ActiveBuffs(Buff.COLD_BLOOD),
    )
    assert calculator.compute(Ability.SINISTER_STRIKE).is_crit


def test_eviscerate_scales_with_combo_points(dagger: Weapon):
    stats = CombatantStats(attack_power=1000, main_hand=dagger)
    calculator = RogueCalculator(stats, RogueTalents(), 63, 0, ScriptedRandom([0.99]))
    result = calculator.compute(Ability.EVISCERATE, AbilityContext(combo_points=5))
    assert result.amount == 631 + 150


# ==============================================================================
# WARRIOR
# ==============================================================================


def test_warrior_costs_and_access(melee_stats: CombatantStats):
    talents = WarriorTalents(improved_heroic_strike=3)
    calculator = WarriorCalculator(melee_stats, talents, 63, 0, Random(1))
    assert calculator.rage_cost(Ability.HEROIC_STRIKE) == 12
    assert calculator.rage_cost(Ability.EXECUTE) == 15
    assert not calculator.knows(Ability.BLOODTHIRST)
    assert calculator.knows(Ability.WHIRLWIND)


def test_execute_converts_extra_rage(melee_stats: CombatantStats):
    calculator = WarriorCalculator(melee_stats, WarriorTalents(), 63, 0, ScriptedRandom([0.99]))
    result = calculator.compute(Ability.EXECUTE, AbilityContext(extra_rage=30))
    assert result.amount == 600 + 15 * 30


def test_impale_boosts_ability_crits(sword: Weapon):
    stats = CombatantStats(crit_chance=100, main_hand=sword)
    calculator = WarriorCalculator(stats, WarriorTalents(impale=2), 63, 0, ScriptedRandom([0.99]))
    result = calculator.compute(Ability.EXECUTE, AbilityContext(extra_rage=0))
    assert result.is_crit
    assert result.amount == 1440


def test_rage_from_damage():
    assert rage_from_damage(679) == pytest.approx(100.0)
    assert rage_from_damage(0) == 0.0


def test_berserker_stance_and_improved_overpower_add_crit(sword: Weapon):
    stats = CombatantStats(crit_chance=10, main_hand=sword)
    talents = WarriorTalents(cruelty=2, improved_overpower=2)
    calculator = WarriorCalculator(
        stats, talents, 63, 0, Random(1), buffs=ActiveBuffs(Buff.BERSERKER_STANCE)
    )
    assert calculator.crit_chance(Ability.MAIN_HAND, sword) == 15
    assert calculator.crit_chance(Ability.OVERPOWER, sword) == 65
    in_battle = WarriorCalculator(stats, talents, 63, 0, Random(1), buffs=ActiveBuffs())
    assert in_battle.crit_chance(Ability.MAIN_HAND, sword) == 12


def test_overpower_cannot_be_dodged(melee_stats: CombatantStats):
    # 0.1 falls between the 8% miss and the 14.5% miss plus dodge.
    whirlwind = WarriorCalculator(
        melee_stats, WarriorTalents(), 63, 0, ScriptedRandom([0.0, 0.1])
    ).compute(Ability.WHIRLWIND)
    assert whirlwind.outcome == AttackType.DODGE
    overpower = WarriorCalculator(
        melee_stats, WarriorTalents(), 63, 0, ScriptedRandom([0.0, 0.1])
    ).compute(Ability.OVERPOWER)
    assert overpower.outcome == AttackType.HIT
    # 35 plus 100 weapon damage plus round(1000 / 14 * 2.4) normalized attack power.
    assert overpower.amount == 306


def test_cleave_bonus_scales_with_improved_cleave(melee_stats: CombatantStats):
    talents = WarriorTalents(improved_cleave=3)
    calculator = WarriorCalculator(melee_stats, talents, 63, 0, ScriptedRandom([0.5, 0.0, 0.99]))
    result = calculator.compute(Ability.CLEAVE)
    # 135 * 1.3 bonus, 100 weapon damage and 143 attack power damage.
    assert result.outcome == AttackType.HIT
    assert result.amount == 418
    assert calculator.rage_cost(Ability.CLEAVE) == 20


def test_rend_only_rolls_whether_it_lands(melee_stats: CombatantStats):
    landed = WarriorCalculator(melee_stats, WarriorTalents(), 63, 0, ScriptedRandom([0.99]))
    result = landed.compute(Ability.REND)
    assert result.outcome == AttackType.HIT
    assert result.amount == 0
    missed = WarriorCalculator(melee_stats, WarriorTalents(), 63, 0, ScriptedRandom([0.0]))
    assert missed.compute(Ability.REND).outcome == AttackType.MISS
    improved = WarriorCalculator(melee_stats, WarriorTalents(improved_rend=3), 63, 0, Random(1))
    assert improved.rend_tick_damage() == pytest.approx(21 * 1.35)


# ==============================================================================
# SPELLS
# ==============================================================================


def test_spell_miss_by_level_gap():
    assert spell_miss_chance(60, 60, 0) == 4.0
    assert spell_miss_chance(60, 63, 0) == 16.0
    assert spell_miss_chance(60, 63, 20) == 0.0
    assert spell_miss_chance(60, 50, 0) == 4.0


def test_spell_outcome_uses_independent_draws():
    assert roll_spell_outcome(ScriptedRandom([0.1]), 16, 100) == AttackType.MISS
    assert roll_spell_outcome(ScriptedRandom([0.5, 0.05]), 16, 10) == AttackType.CRIT
    assert roll_spell_outcome(ScriptedRandom([0.5, 0.05]), 16, 10, can_crit=False) == (
        AttackType.HIT
    )


def test_fireball_hit():
    calculator = MageCalculator(
        CombatantStats(), MageTalents(), 63, ScriptedRandom([0.5, 0.99, 0.99])
    )
    result = calculator.compute(Ability.FIREBALL)
    assert result.outcome == AttackType.HIT
    assert result.amount == 678


def test_fireball_crit_and_fire_power():
    calculator = MageCalculator(
        CombatantStats(spell_crit=100),
        MageTalents(fire_power=5),
        63,
        ScriptedRandom([0.5, 0.99, 0.0]),
    )
    result = calculator.compute(Ability.FIREBALL)
    assert result.is_crit
    assert result.amount == round(678 * 1.1 * 1.5)


def test_mage_cast_times_and_costs():
    calculator = MageCalculator(
        CombatantStats(intellect=100),
        MageTalents(improved_fireball=5, frost_channeling=2),
        63,
        Random(1),
    )
    assert calculator.cast_time_ms(Ability.FIREBALL) == 3000
    assert calculator.cast_time_ms(Ability.FIRE_BLAST) == 0
    assert calculator.mana_cost(Ability.FROSTBOLT) == 261
    assert calculator.max_mana == 5000


def test_mage_buffs_change_casts():
    calculator = MageCalculator(
        CombatantStats(),
        MageTalents(),
        63,
        Random(1),
        buffs=ActiveBuffs(Buff.CLEARCAST, Buff.PRESENCE_OF_MIND),
    )
    assert calculator.mana_cost(Ability.FIREBALL) == 0
    assert calculator.base_mana_cost(Ability.FIREBALL) == 425
    assert calculator.cast_time_ms(Ability.FIREBALL) == 0


def test_combustion_adds_fire_crit():
    calculator = MageCalculator(
        CombatantStats(), MageTalents(), 63, Random(1), buffs=ActiveBuffs(Buff.COMBUSTION, stacks=2)
    )
    assert calculator.spell_crit(SpellSchool.FIRE) == 20
    assert calculator.spell_crit(SpellSchool.FROST) == 0


def test_mage_rejects_melee_abilities():
    calculator = MageCalculator(CombatantStats(), MageTalents(), 63, Random(1))
    with pytest.raises(ConfigurationError):
        calculator.compute(Ability.SINISTER_STRIKE)


# ==============================================================================
# HEALING
# ==============================================================================


def test_heal_against_full_missing_health():
    calculator = ShamanCalculator(CombatantStats(), ShamanTalents(), ScriptedRandom([0.5, 0.99]))
    result = calculator.compute(Ability.LESSER_HEALING_WAVE)
    assert result.amount == 523
    assert result.overhealing == 0


def test_heal_splits_overhealing():
    calculator = ShamanCalculator(CombatantStats(), ShamanTalents(), ScriptedRandom([0.5, 0.99]))
    result = calculator.compute(
        Ability.LESSER_HEALING_WAVE, AbilityContext(missing_health=100)
    )
    assert result.amount == 100
    assert result.overhealing == 423


def test_chain_heal_jumps_are_weaker():
    assert jump_factor(0) == 1.0
    assert jump_factor(1) == 0.5
    calculator = ShamanCalculator(CombatantStats(), ShamanTalents(), ScriptedRandom([0.5, 0.99]))
    result = calculator.compute(Ability.CHAIN_HEAL, AbilityContext(jump_index=1))
    assert result.amount == 324


def test_shaman_cast_times_and_costs():
    talents = ShamanTalents(improved_healing_wave=5, tidal_focus=5)
    calculator = ShamanCalculator(CombatantStats(), talents, Random(1))
    assert calculator.cast_time_ms(Ability.HEALING_WAVE) == 2500
    assert calculator.mana_cost(Ability.LESSER_HEALING_WAVE) == 185
    swift = ShamanCalculator(
        CombatantStats(), talents, Random(1), buffs=ActiveBuffs(Buff.NATURES_SWIFTNESS)
    )
    assert swift.cast_time_ms(Ability.HEALING_WAVE) == 0
