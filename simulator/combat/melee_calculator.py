"""
Melee damage module for the simulator.

Implements the dual-wield melee base shared by rogues and warriors: weapon
rolls, attack power contribution, the attack table roll, armor mitigation
and the final floor.
"""

import math
from random import Random
from typing import Optional

from catchery import log_debug
from character.character_stats import CombatantStats
from core.constants import Ability, AttackType, Buff, WeaponType
from items.weapon import Weapon

from .armor import armor_multiplier
from .attack_table import AttackTable
from .damage import AbilityContext, BuffReader, DamageCalculator, DamageResult

# Strength granted by the Crusader enchant while its buff is up.
CRUSADER_STRENGTH = 100
# Damage multiplier of an off hand swing, before dual wield specialization.
OFF_HAND_PENALTY = 0.5


class MeleeCalculator(DamageCalculator):
    """
    Damage calculator for weapon-based archetypes.

    Subclasses expose their talents through the accessor properties
    (``hit_chance``, ``weapon_skill``, ``crit_bonus`` and so on) and add
    their abilities to ``compute``.
    """

    # Attack power granted per point of strength.
    strength_to_attack_power = 1

    def __init__(
        self,
        stats: CombatantStats,
        target_level: int,
        target_armor: float,
        rng: Random,
        buffs: Optional[BuffReader] = None,
    ) -> None:
        """
        Builds the calculator and the attack table for the given target.

        Args:
            stats (CombatantStats): The character's stat snapshot.
            target_level (int): The target's level.
            target_armor (float): The target's armor.
            rng (Random): The random generator to draw from.
            buffs (Optional[BuffReader]): The live buff view.

        """
        super().__init__(rng, buffs)
        self.stats = stats
        self.target_level = target_level
        self.armor_multiplier = armor_multiplier(target_armor, stats.level)
        self.attack_table = AttackTable(
            attacker_level=stats.level,
            weapon_skill=self.weapon_skill,
            hit_chance=self.hit_chance,
            target_level=target_level,
            dual_wield=stats.is_dual_wielding,
        )
        if stats.main_hand is None:
            log_debug(
                "Melee calculator built without a main hand weapon",
                {"class": type(self).__name__},
            )

    # ============================================================================
    # TALENT AND BUFF ACCESSORS
    # ============================================================================

    @property
    def weapon_skill(self) -> int:
        return self.stats.weapon_skill

    @property
    def hit_chance(self) -> float:
        return self.stats.hit_chance

    @property
    def dual_wield_spec_bonus(self) -> float:
        """Returns the off hand damage bonus from talents."""
        return 0.0

    @property
    def attack_power(self) -> float:
        """Returns the attack power, including temporary strength buffs."""
        attack_power = self.stats.attack_power
        if self.buffs.has_buff(Buff.CRUSADER):
            attack_power += CRUSADER_STRENGTH * self.strength_to_attack_power
        return attack_power

    def crit_bonus(self, ability: Ability, weapon: Weapon) -> float:
        """Returns the crit chance added by talents and buffs, in percent."""
        return 0.0

    def crit_chance(self, ability: Ability, weapon: Weapon) -> float:
        return self.stats.crit_chance + self.crit_bonus(ability, weapon)

    def damage_multipliers(self) -> list[float]:
        """Returns the multipliers applied to every swing and ability."""
        return []

    def ability_crit_multiplier(self) -> Optional[float]:
        """Returns the extra crit damage factor of special attacks, if any."""
        return None

    # ============================================================================
    # DAMAGE COMPONENTS
    # ============================================================================

    def weapon_damage(self, weapon: Weapon) -> float:
        return weapon.roll_damage(self.rng)

    def attack_power_damage(self, weapon: Weapon, normalized: bool = False) -> int:
        """
        Returns the damage added by attack power to one swing.

        Args:
            weapon (Weapon): The weapon swung.
            normalized (bool): Whether to use the weapon type's normalized speed.

        Returns:
            int: The attack power damage, rounded.

        """
        speed = weapon.weapon_type.normalized_speed if normalized else weapon.speed
        return round(self.attack_power / 14 * speed)

    def no_weapon(self, ability: Ability) -> DamageResult:
        """Returns the zero-damage result of an ability that needs an empty slot."""
        return DamageResult(ability, AttackType.NO_WEAPON, 0.0, 0)

    def resolve(
        self,
        ability: Ability,
        base_damage: float,
        weapon: Weapon,
        multipliers: Optional[list[float]] = None,
        is_special_attack: bool = True,
        crit_multiplier: Optional[float] = None,
        can_dodge: bool = True,
    ) -> DamageResult:
        """
        Resolves a melee hit through the attack table and armor.

        Multipliers are applied first, then the table's damage modifier, then
        the extra crit factor on crits, then armor, then the integer floor.

        Args:
            ability (Ability): The ability being resolved.
            base_damage (float): The damage before any multiplier.
            weapon (Weapon): The weapon used for crit bonuses.
            multipliers (Optional[list[float]]): Independent damage multipliers.
            is_special_attack (bool): Whether the attack is an ability.
            crit_multiplier (Optional[float]): Extra damage factor on crits.
            can_dodge (bool): Whether the target may dodge the attack.

        Returns:
            DamageResult: The resolved result.

        """
        damage = base_damage
        for multiplier in multipliers or []:
            damage *= multiplier
        outcome = self.attack_table.roll(
            self.rng, self.crit_chance(ability, weapon), is_special_attack, can_dodge
        )
        if outcome.damage_multiplier == 0:
            return DamageResult(ability, outcome.kind, base_damage, 0)
        damage *= outcome.damage_multiplier
        if outcome.kind == AttackType.CRIT and crit_multiplier:
            damage *= crit_multiplier
        damage = math.floor(damage * self.armor_multiplier)
        return DamageResult(ability, outcome.kind, base_damage, damage)

    def auto_attack(
        self, off_hand: bool = False, ability: Optional[Ability] = None
    ) -> DamageResult:
        """
        Resolves one auto-attack swing.

        Args:
            off_hand (bool): Whether the off hand swings.
            ability (Optional[Ability]): The label to log, defaults to the hand.

        Returns:
            DamageResult: The resolved swing.

        """
        if ability is None:
            ability = Ability.OFF_HAND if off_hand else Ability.MAIN_HAND
        weapon = self.stats.weapon(off_hand)
        if weapon is None:
            return self.no_weapon(ability)
        base_damage = self.weapon_damage(weapon) + self.attack_power_damage(weapon)
        multipliers = self.damage_multipliers()
        if off_hand:
            multipliers.append(OFF_HAND_PENALTY + self.dual_wield_spec_bonus)
        return self.resolve(
            ability, base_damage, weapon, multipliers, is_special_attack=False
        )

    def compute(
        self, ability: Ability, context: Optional[AbilityContext] = None
    ) -> DamageResult:
        if ability in (Ability.MAIN_HAND, Ability.EXTRA_ATTACK):
            return self.auto_attack(False, ability)
        if ability == Ability.OFF_HAND:
            return self.auto_attack(True)
        raise self.unsupported(ability)

    @property
    def main_hand_type(self) -> Optional[WeaponType]:
        if self.stats.main_hand is None:
            return None
        return self.stats.main_hand.weapon_type
