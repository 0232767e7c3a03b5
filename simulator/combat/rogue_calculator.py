"""
Rogue damage module for the simulator.

Adds the rogue's talents and abilities to the melee base: Sinister Strike,
Backstab, Hemorrhage and Eviscerate, plus the energy costs and Slice and
Dice duration the rogue simulator reads.
"""

from random import Random
from typing import Optional

from character.character_stats import CombatantStats
from character.talents import RogueTalents
from core.constants import Ability, Buff, WeaponType
from items.weapon import Weapon

from .damage import AbilityContext, BuffReader, DamageResult
from .melee_calculator import MeleeCalculator

# Eviscerate base damage by combo points spent.
EVISCERATE_DAMAGE = [0, 223, 325, 427, 529, 631]
# Attack power coefficient of Eviscerate, per combo point.
EVISCERATE_AP_PER_COMBO_POINT = 0.03

SLICE_AND_DICE_HASTE = 1.2

BASE_ENERGY_COSTS = {
    Ability.SINISTER_STRIKE: 45,
    Ability.BACKSTAB: 60,
    Ability.HEMORRHAGE: 35,
    Ability.EVISCERATE: 35,
    Ability.SLICE_AND_DICE: 25,
    Ability.COLD_BLOOD: 0,
}


class RogueCalculator(MeleeCalculator):
    """Damage calculator of the rogue archetype."""

    strength_to_attack_power = 1

    def __init__(
        self,
        stats: CombatantStats,
        talents: RogueTalents,
        target_level: int,
        target_armor: float,
        rng: Random,
        buffs: Optional[BuffReader] = None,
    ) -> None:
        self.talents = talents
        super().__init__(stats, target_level, target_armor, rng, buffs)

    @property
    def weapon_skill(self) -> int:
        skill = self.stats.weapon_skill
        if self.talents.weapon_expertise > 0 and self.main_hand_type in (
            WeaponType.SWORD,
            WeaponType.FIST,
            WeaponType.DAGGER,
        ):
            skill += 3 if self.talents.weapon_expertise == 1 else 5
        return skill

    @property
    def hit_chance(self) -> float:
        return self.stats.hit_chance + self.talents.precision

    @property
    def dual_wield_spec_bonus(self) -> float:
        return self.talents.dual_wield_specialization * 0.05

    @property
    def lethality_multiplier(self) -> float:
        return 1 + self.talents.lethality * 0.06

    @property
    def aggression_multiplier(self) -> float:
        return 1 + self.talents.aggression * 0.02

    def crit_bonus(self, ability: Ability, weapon: Weapon) -> float:
        """
        Returns the crit chance added by rogue talents and Cold Blood.

        Cold Blood makes the next special attack crit unless it misses or is
        dodged.
        """
        if not ability.is_white_damage and self.buffs.has_buff(Buff.COLD_BLOOD):
            return 100.0
        bonus = float(self.talents.malice)
        if weapon.weapon_type == WeaponType.DAGGER:
            bonus += self.talents.dagger_specialization
        if weapon.weapon_type == WeaponType.FIST:
            bonus += self.talents.fist_weapon_specialization
        if ability == Ability.BACKSTAB:
            bonus += self.talents.improved_backstab * 10
        return bonus

    def energy_cost(self, ability: Ability) -> int:
        """Returns the energy cost of an ability after talents."""
        if ability == Ability.SINISTER_STRIKE:
            return {0: 45, 1: 42, 2: 40}[self.talents.improved_sinister_strike]
        return BASE_ENERGY_COSTS.get(ability, 0)

    def slice_and_dice_duration_ms(self, combo_points: int) -> int:
        """Returns the Slice and Dice duration for the given combo points."""
        seconds = (6 + 3 * combo_points) * (1 + 0.15 * self.talents.improved_slice_and_dice)
        return round(seconds * 1000)

    @property
    def can_backstab(self) -> bool:
        return self.main_hand_type == WeaponType.DAGGER

    # ============================================================================
    # ABILITIES
    # ============================================================================

    def sinister_strike(self) -> DamageResult:
        weapon = self.stats.main_hand
        if weapon is None:
            return self.no_weapon(Ability.SINISTER_STRIKE)
        base_damage = (
            self.weapon_damage(weapon) + self.attack_power_damage(weapon, normalized=True) + 68
        )
        multipliers = self.damage_multipliers() + [
            self.aggression_multiplier,
            self.lethality_multiplier,
        ]
        return self.resolve(Ability.SINISTER_STRIKE, base_damage, weapon, multipliers)

    def backstab(self) -> DamageResult:
        weapon = self.stats.main_hand
        if weapon is None:
            return self.no_weapon(Ability.BACKSTAB)
        base_damage = (
            self.weapon_damage(weapon) + self.attack_power_damage(weapon, normalized=True) + 210
        ) * 1.5
        multipliers = self.damage_multipliers() + [
            1 + self.talents.opportunity * 0.04,
            self.lethality_multiplier,
        ]
        return self.resolve(Ability.BACKSTAB, base_damage, weapon, multipliers)

    def hemorrhage(self) -> DamageResult:
        weapon = self.stats.main_hand
        if weapon is None:
            return self.no_weapon(Ability.HEMORRHAGE)
        base_damage = (
            self.weapon_damage(weapon) + self.attack_power_damage(weapon, normalized=True) + 110
        ) * 1.1
        multipliers = self.damage_multipliers() + [self.lethality_multiplier]
        return self.resolve(Ability.HEMORRHAGE, base_damage, weapon, multipliers)

    def eviscerate(self, combo_points: int) -> DamageResult:
        """
        Resolves Eviscerate for the given number of combo points.

        Args:
            combo_points (int): The combo points spent, 1 to 5.

        Returns:
            DamageResult: The resolved finisher.

        """
        weapon = self.stats.main_hand
        if weapon is None:
            return self.no_weapon(Ability.EVISCERATE)
        combo_points = max(0, min(len(EVISCERATE_DAMAGE) - 1, combo_points))
        base_damage = (
            EVISCERATE_DAMAGE[combo_points]
            + self.attack_power * EVISCERATE_AP_PER_COMBO_POINT * combo_points
        )
        multipliers = self.damage_multipliers() + [
            1 + self.talents.improved_eviscerate * 0.05,
            self.aggression_multiplier,
            self.lethality_multiplier,
        ]
        return self.resolve(Ability.EVISCERATE, base_damage, weapon, multipliers)

    def compute(
        self, ability: Ability, context: Optional[AbilityContext] = None
    ) -> DamageResult:
        context = context or AbilityContext()
        if ability == Ability.SINISTER_STRIKE:
            return self.sinister_strike()
        if ability == Ability.BACKSTAB:
            return self.backstab()
        if ability == Ability.HEMORRHAGE:
            return self.hemorrhage()
        if ability == Ability.EVISCERATE:
            return self.eviscerate(context.combo_points)
        return super().compute(ability, context)
