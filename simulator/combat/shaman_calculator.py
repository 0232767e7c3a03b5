"""
Shaman healing module for the simulator.

Healing follows the caster formula without the miss roll, and splits each
heal into effective healing and overhealing against the health the target
is missing. Chain Heal scales every jump by a fixed reduction factor.
"""

import math
from random import Random
from typing import Optional

from character.character_stats import CombatantStats
from character.talents import ShamanTalents
from core.constants import Ability, AttackType, Buff, SpellSchool

from .damage import (
    SPELL_CRIT_MULTIPLIER,
    AbilityContext,
    BuffReader,
    DamageCalculator,
    DamageResult,
    SpellData,
)

HEALS = {
    Ability.HEALING_WAVE: SpellData(1620, 1851, 3000, 425, 1.5 / 3.5, SpellSchool.NATURE),
    Ability.LESSER_HEALING_WAVE: SpellData(489, 557, 1500, 195, 1.5 / 3.5, SpellSchool.NATURE),
    Ability.CHAIN_HEAL: SpellData(605, 691, 2500, 405, 0.714, SpellSchool.NATURE),
}

CHAIN_HEAL_JUMPS = 3
CHAIN_HEAL_REDUCTION_PER_JUMP = 0.5
MIN_HEALING_WAVE_CAST_MS = 1000
NATURES_SWIFTNESS_COOLDOWN_MS = 180000
BASE_SHAMAN_MANA = 4300
# Share of attack power converted to healing power by Mental Quickness.
MENTAL_QUICKNESS_SHARE = [0, 0.06, 0.12, 0.18, 0.20, 0.25]


def jump_factor(jump_index: int) -> float:
    """Returns the healing factor of the given Chain Heal jump."""
    return (1 - CHAIN_HEAL_REDUCTION_PER_JUMP) ** jump_index


class ShamanCalculator(DamageCalculator):
    """Healing calculator of the shaman archetype."""

    def __init__(
        self,
        stats: CombatantStats,
        talents: ShamanTalents,
        rng: Random,
        buffs: Optional[BuffReader] = None,
    ) -> None:
        super().__init__(rng, buffs)
        self.stats = stats
        self.talents = talents

    @property
    def healing_power(self) -> float:
        power = self.stats.healing_power + self.stats.spell_power
        power += self.stats.attack_power * MENTAL_QUICKNESS_SHARE[self.talents.mental_quickness]
        return power

    @property
    def healing_crit(self) -> float:
        return self.stats.spell_crit + self.stats.intellect / 60 + self.talents.tidal_mastery

    @property
    def max_mana(self) -> int:
        base = self.stats.mana or BASE_SHAMAN_MANA
        return round(
            (base + self.stats.intellect * 15) * (1 + self.talents.ancestral_knowledge * 0.01)
        )

    @property
    def mana_per_tick(self) -> int:
        """Returns the mana regenerated every two seconds from spirit and mp5."""
        return round(self.stats.spirit / 5 * 2 + self.stats.mp5 * 2 / 5)

    def cast_time_ms(self, ability: Ability) -> int:
        if self.buffs.has_buff(Buff.NATURES_SWIFTNESS):
            return 0
        cast_time = HEALS[ability].cast_time_ms
        if ability == Ability.HEALING_WAVE:
            cast_time -= 100 * self.talents.improved_healing_wave
            return max(MIN_HEALING_WAVE_CAST_MS, cast_time)
        return cast_time

    def mana_cost(self, ability: Ability) -> float:
        return round(HEALS[ability].mana_cost * (1 - self.talents.tidal_focus * 0.01))

    def heal(
        self, ability: Ability, missing_health: float = math.inf, jump_index: int = 0
    ) -> DamageResult:
        """
        Resolves one heal on a target missing the given amount of health.

        Args:
            ability (Ability): The healing spell.
            missing_health (float): Health the target can still receive.
            jump_index (int): The Chain Heal jump, 0 for the first target.

        Returns:
            DamageResult: The amount is the effective healing; the rest is
            reported as overhealing.

        """
        spell = HEALS[ability]
        base_amount = spell.roll(self.rng) + self.healing_power * spell.coefficient
        total = base_amount * (1 + self.talents.purification * 0.02)
        outcome = AttackType.HIT
        if self.rng.random() * 100 < self.healing_crit:
            outcome = AttackType.CRIT
            total *= SPELL_CRIT_MULTIPLIER
        total *= jump_factor(jump_index)
        effective = min(total, max(0.0, missing_health))
        return DamageResult(
            ability,
            outcome,
            round(base_amount),
            round(effective),
            overhealing=round(total - effective),
        )

    def compute(
        self, ability: Ability, context: Optional[AbilityContext] = None
    ) -> DamageResult:
        if ability not in HEALS:
            raise self.unsupported(ability)
        context = context or AbilityContext()
        return self.heal(ability, context.missing_health, context.jump_index)
