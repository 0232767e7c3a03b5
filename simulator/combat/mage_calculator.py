"""
Mage damage module for the simulator.

Defines the mage's spell ranks and the caster formula: a rolled base plus a
spell power share, school multipliers, and an independent miss/crit roll.
Cast times and mana costs after talents and buffs are exposed here as well.
"""

from random import Random
from typing import Optional

from character.character_stats import CombatantStats
from character.talents import MageTalents
from core.constants import Ability, AttackType, Buff, SpellSchool

from .damage import (
    SPELL_CRIT_MULTIPLIER,
    AbilityContext,
    BuffReader,
    DamageCalculator,
    DamageResult,
    SpellData,
    roll_spell_outcome,
    spell_miss_chance,
)

SPELLS = {
    Ability.FIREBALL: SpellData(596, 760, 3500, 425, 1.0, SpellSchool.FIRE),
    Ability.FROSTBOLT: SpellData(440, 475, 3000, 290, 0.814, SpellSchool.FROST),
    Ability.SCORCH: SpellData(233, 276, 1500, 180, 0.429, SpellSchool.FIRE),
    Ability.FIRE_BLAST: SpellData(431, 509, 0, 340, 0.204, SpellSchool.FIRE, 8000),
}

# Cooldowns (ms) of the mage's instant buffs.
BUFF_COOLDOWNS_MS = {
    Ability.ARCANE_POWER: 180000,
    Ability.COMBUSTION: 180000,
    Ability.PRESENCE_OF_MIND: 180000,
}
ARCANE_POWER_DURATION_MS = 15000
ARCANE_POWER_BONUS = 1.3
COMBUSTION_CHARGES = 3
IMPROVED_SCORCH_MAX_STACKS = 5
IMPROVED_SCORCH_DURATION_MS = 30000
IGNITE_DURATION_MS = 4000
IGNITE_TICK_MS = 2000
BASE_MAGE_MANA = 3500
# Share of spirit regeneration kept while casting.
ARCANE_MEDITATION_SHARE_PER_RANK = 0.05
MAGE_ARMOR_SHARE = 0.3


class MageCalculator(DamageCalculator):
    """Damage calculator of the mage archetype."""

    def __init__(
        self,
        stats: CombatantStats,
        talents: MageTalents,
        target_level: int,
        rng: Random,
        buffs: Optional[BuffReader] = None,
    ) -> None:
        super().__init__(rng, buffs)
        self.stats = stats
        self.talents = talents
        self.target_level = target_level

    # ============================================================================
    # TALENT AND BUFF ACCESSORS
    # ============================================================================

    @property
    def spell_power(self) -> float:
        if self.buffs.has_buff(Buff.ARCANE_POWER):
            return self.stats.spell_power * ARCANE_POWER_BONUS
        return self.stats.spell_power

    @property
    def max_mana(self) -> int:
        base = self.stats.mana or BASE_MAGE_MANA
        return round((base + self.stats.intellect * 15) * (1 + self.talents.arcane_mind * 0.02))

    @property
    def mana_per_tick(self) -> int:
        """Returns the mana regenerated every two seconds from spirit."""
        return round(self.stats.spirit / 5 * 2)

    def mana_per_tick_while_casting(self) -> int:
        """
        Returns the mana regenerated every two seconds while a cast is in
        progress: 5% of the spirit regeneration per rank of Arcane
        Meditation, plus 30% under Mage Armor.
        """
        share = self.talents.arcane_meditation * ARCANE_MEDITATION_SHARE_PER_RANK
        if self.buffs.has_buff(Buff.MAGE_ARMOR):
            share += MAGE_ARMOR_SHARE
        return round(self.stats.spirit / 5 * 2 * share)

    def spell_hit(self, school: SpellSchool) -> float:
        hit = self.stats.spell_hit
        if school in (SpellSchool.FIRE, SpellSchool.FROST):
            hit += self.talents.elemental_precision * 2
        elif school == SpellSchool.ARCANE:
            hit += self.talents.arcane_focus * 2
        return hit

    def miss_chance(self, school: SpellSchool) -> float:
        return spell_miss_chance(self.stats.level, self.target_level, self.spell_hit(school))

    def spell_crit(self, school: SpellSchool) -> float:
        crit = self.stats.spell_crit + self.stats.intellect / 60
        crit += self.talents.arcane_instability
        if school == SpellSchool.FIRE:
            crit += self.talents.critical_mass * 2
            crit += 10 * self.buffs.buff_stacks(Buff.COMBUSTION)
        return crit

    def crit_multiplier(self, school: SpellSchool) -> float:
        if school == SpellSchool.FROST:
            return SPELL_CRIT_MULTIPLIER + self.talents.ice_shards * 0.2
        return SPELL_CRIT_MULTIPLIER

    def school_multiplier(self, school: SpellSchool) -> float:
        multiplier = 1 + self.talents.arcane_instability * 0.01
        if school == SpellSchool.FIRE:
            multiplier *= 1 + self.talents.fire_power * 0.02
            multiplier *= 1 + 0.03 * self.buffs.buff_stacks(Buff.IMPROVED_SCORCH)
        elif school == SpellSchool.FROST:
            multiplier *= 1 + self.talents.piercing_ice * 0.02
        return multiplier

    def cast_time_ms(self, ability: Ability) -> int:
        """Returns the cast time of a spell after talents and Presence of Mind."""
        spell = SPELLS[ability]
        if spell.cast_time_ms == 0 or self.buffs.has_buff(Buff.PRESENCE_OF_MIND):
            return 0
        if ability == Ability.FIREBALL:
            return spell.cast_time_ms - 100 * self.talents.improved_fireball
        if ability == Ability.FROSTBOLT:
            return spell.cast_time_ms - 100 * self.talents.improved_frostbolt
        return spell.cast_time_ms

    def base_mana_cost(self, ability: Ability) -> float:
        """Returns the mana cost after talents, ignoring Clearcasting."""
        spell = SPELLS[ability]
        cost = spell.mana_cost
        if spell.school == SpellSchool.FROST:
            cost *= 1 - self.talents.frost_channeling * 0.05
        if self.buffs.has_buff(Buff.ARCANE_POWER):
            cost *= ARCANE_POWER_BONUS
        return round(cost)

    def mana_cost(self, ability: Ability) -> float:
        if self.buffs.has_buff(Buff.CLEARCAST):
            return 0
        return self.base_mana_cost(ability)

    def knows(self, ability: Ability) -> bool:
        """Returns True if the talents grant access to the ability."""
        return {
            Ability.ARCANE_POWER: self.talents.arcane_power,
            Ability.COMBUSTION: self.talents.combustion,
            Ability.PRESENCE_OF_MIND: self.talents.presence_of_mind,
        }.get(ability, ability in SPELLS)

    # ============================================================================
    # SPELLS
    # ============================================================================

    def spell_damage(self, ability: Ability) -> DamageResult:
        """
        Resolves one damage spell.

        Args:
            ability (Ability): The spell to resolve.

        Returns:
            DamageResult: The resolved spell.

        """
        spell = SPELLS[ability]
        base_amount = spell.roll(self.rng) + self.spell_power * spell.coefficient
        damage = base_amount * self.school_multiplier(spell.school)
        outcome = roll_spell_outcome(
            self.rng, self.miss_chance(spell.school), self.spell_crit(spell.school)
        )
        if outcome == AttackType.MISS:
            return DamageResult(ability, outcome, round(base_amount), 0)
        if outcome == AttackType.CRIT:
            damage *= self.crit_multiplier(spell.school)
        return DamageResult(ability, outcome, round(base_amount), round(damage))

    def compute(
        self, ability: Ability, context: Optional[AbilityContext] = None
    ) -> DamageResult:
        if ability not in SPELLS:
            raise self.unsupported(ability)
        return self.spell_damage(ability)
