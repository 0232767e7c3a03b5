"""
Warrior damage module for the simulator.

Adds the warrior's talents and abilities to the melee base: the rage costs
and cooldowns of the strikes, the Berserker stance crit bonus, Overpower
(which cannot be dodged), the Rend bleed and the queued Heroic Strike and
Cleave.
"""

from random import Random
from typing import Optional

from character.character_stats import CombatantStats
from character.talents import WarriorTalents
from core.constants import Ability, Buff, Stance
from items.weapon import Weapon

from .damage import AbilityContext, BuffReader, DamageResult
from .melee_calculator import MeleeCalculator

# Rage cost and cooldown (ms) of each warrior ability.
RAGE_COSTS = {
    Ability.BLOODTHIRST: 30,
    Ability.MORTAL_STRIKE: 30,
    Ability.WHIRLWIND: 25,
    Ability.HEROIC_STRIKE: 15,
    Ability.EXECUTE: 15,
    Ability.OVERPOWER: 5,
    Ability.REND: 10,
    Ability.CLEAVE: 20,
    Ability.BLOODRAGE: 0,
}
COOLDOWNS_MS = {
    Ability.BLOODTHIRST: 6000,
    Ability.MORTAL_STRIKE: 6000,
    Ability.WHIRLWIND: 10000,
    Ability.OVERPOWER: 5000,
    Ability.BLOODRAGE: 60000,
}
# Cooldown shared by the three stance abilities.
STANCE_COOLDOWN_MS = 1000
STANCE_ABILITIES = frozenset(stance.ability for stance in Stance)

BLOODTHIRST_AP_COEFFICIENT = 0.45
MORTAL_STRIKE_BONUS = 160
HEROIC_STRIKE_BONUS = 157
EXECUTE_BASE = 600
EXECUTE_PER_RAGE = 15
OVERPOWER_BONUS = 35
OVERPOWER_CRIT_PER_RANK = 25
BERSERKER_STANCE_CRIT = 3
CLEAVE_MIN_BONUS = 50
CLEAVE_MAX_BONUS = 220
REND_TICK_DAMAGE = 21
REND_TICKS = 7
REND_TICK_MS = 3000
# Rend damage bonus by Improved Rend rank.
IMPROVED_REND_BONUS = [0.0, 0.15, 0.25, 0.35]

# Rage generated by white damage: damage / (RAGE_CONVERSION * 10).
RAGE_CONVERSION = 0.679


def rage_from_damage(damage: float) -> float:
    """Returns the rage generated by a white swing dealing the given damage."""
    return damage / (RAGE_CONVERSION * 10)


class WarriorCalculator(MeleeCalculator):
    """Damage calculator of the warrior archetype."""

    strength_to_attack_power = 2

    def __init__(
        self,
        stats: CombatantStats,
        talents: WarriorTalents,
        target_level: int,
        target_armor: float,
        rng: Random,
        buffs: Optional[BuffReader] = None,
    ) -> None:
        self.talents = talents
        super().__init__(stats, target_level, target_armor, rng, buffs)

    @property
    def hit_chance(self) -> float:
        return self.stats.hit_chance + self.talents.precision

    @property
    def dual_wield_spec_bonus(self) -> float:
        return self.talents.dual_wield_specialization * 0.05

    def crit_bonus(self, ability: Ability, weapon: Weapon) -> float:
        bonus = float(self.talents.cruelty)
        if self.buffs.has_buff(Buff.BERSERKER_STANCE):
            bonus += BERSERKER_STANCE_CRIT
        if ability == Ability.OVERPOWER:
            bonus += self.talents.improved_overpower * OVERPOWER_CRIT_PER_RANK
        return bonus

    def damage_multipliers(self) -> list[float]:
        multipliers = []
        if self.talents.enrage > 0 and self.buffs.has_buff(Buff.ENRAGE):
            multipliers.append(1 + self.talents.enrage * 0.05)
        main_hand = self.stats.main_hand
        if self.talents.two_handed_specialization > 0 and main_hand and main_hand.is_two_handed:
            multipliers.append(1 + self.talents.two_handed_specialization * 0.01)
        return multipliers

    def ability_crit_multiplier(self) -> Optional[float]:
        if self.talents.impale == 0:
            return None
        return 1 + self.talents.impale * 0.1

    def rage_cost(self, ability: Ability) -> int:
        """Returns the rage cost of an ability after talents."""
        if ability == Ability.HEROIC_STRIKE:
            return RAGE_COSTS[ability] - self.talents.improved_heroic_strike
        return RAGE_COSTS.get(ability, 0)

    def knows(self, ability: Ability) -> bool:
        """Returns True if the talents grant access to the ability."""
        if ability == Ability.BLOODTHIRST:
            return self.talents.bloodthirst
        if ability == Ability.MORTAL_STRIKE:
            return self.talents.mortal_strike
        return True

    # ============================================================================
    # ABILITIES
    # ============================================================================

    def special_attack(
        self, ability: Ability, base_damage: float, can_dodge: bool = True
    ) -> DamageResult:
        """Resolves a main hand special attack with Impale on crits."""
        weapon = self.stats.main_hand
        if weapon is None:
            return self.no_weapon(ability)
        return self.resolve(
            ability,
            base_damage,
            weapon,
            self.damage_multipliers(),
            crit_multiplier=self.ability_crit_multiplier(),
            can_dodge=can_dodge,
        )

    def normalized_damage(self) -> float:
        """Returns a main hand roll with normalized attack power damage."""
        weapon = self.stats.main_hand
        if weapon is None:
            return 0.0
        return self.weapon_damage(weapon) + self.attack_power_damage(weapon, normalized=True)

    def bloodthirst(self) -> DamageResult:
        return self.special_attack(
            Ability.BLOODTHIRST, self.attack_power * BLOODTHIRST_AP_COEFFICIENT
        )

    def mortal_strike(self) -> DamageResult:
        return self.special_attack(
            Ability.MORTAL_STRIKE, MORTAL_STRIKE_BONUS + self.normalized_damage()
        )

    def whirlwind(self) -> DamageResult:
        return self.special_attack(Ability.WHIRLWIND, self.normalized_damage())

    def heroic_strike(self) -> DamageResult:
        """Resolves Heroic Strike, which replaces a main hand swing."""
        weapon = self.stats.main_hand
        if weapon is None:
            return self.no_weapon(Ability.HEROIC_STRIKE)
        base_damage = (
            self.weapon_damage(weapon) + self.attack_power_damage(weapon) + HEROIC_STRIKE_BONUS
        )
        return self.special_attack(Ability.HEROIC_STRIKE, base_damage)

    def overpower(self) -> DamageResult:
        return self.special_attack(
            Ability.OVERPOWER, OVERPOWER_BONUS + self.normalized_damage(), can_dodge=False
        )

    def cleave(self) -> DamageResult:
        """Resolves Cleave, which replaces a main hand swing like Heroic Strike."""
        weapon = self.stats.main_hand
        if weapon is None:
            return self.no_weapon(Ability.CLEAVE)
        bonus = self.rng.uniform(CLEAVE_MIN_BONUS, CLEAVE_MAX_BONUS)
        bonus *= 1 + self.talents.improved_cleave * 0.1
        base_damage = self.weapon_damage(weapon) + self.attack_power_damage(weapon) + bonus
        return self.special_attack(Ability.CLEAVE, base_damage)

    def rend(self) -> DamageResult:
        """
        Rolls whether Rend lands. A bleed cannot crit, so the roll only
        decides between miss, dodge and hit; the damage comes from the ticks.
        """
        if self.stats.main_hand is None:
            return self.no_weapon(Ability.REND)
        outcome = self.attack_table.roll(self.rng, 0.0, is_special_attack=True)
        return DamageResult(Ability.REND, outcome.kind, 0.0, 0)

    def rend_tick_damage(self) -> float:
        """Returns the damage of one Rend tick; bleeds ignore armor."""
        return REND_TICK_DAMAGE * (1 + IMPROVED_REND_BONUS[self.talents.improved_rend])

    def execute(self, extra_rage: float) -> DamageResult:
        """
        Resolves Execute, converting the rage above its cost into damage.

        Args:
            extra_rage (float): The rage available beyond the base cost.

        Returns:
            DamageResult: The resolved ability.

        """
        base_damage = EXECUTE_BASE + EXECUTE_PER_RAGE * max(0.0, extra_rage)
        return self.special_attack(Ability.EXECUTE, base_damage)

    def compute(
        self, ability: Ability, context: Optional[AbilityContext] = None
    ) -> DamageResult:
        context = context or AbilityContext()
        if ability == Ability.BLOODTHIRST:
            return self.bloodthirst()
        if ability == Ability.MORTAL_STRIKE:
            return self.mortal_strike()
        if ability == Ability.WHIRLWIND:
            return self.whirlwind()
        if ability == Ability.HEROIC_STRIKE:
            return self.heroic_strike()
        if ability == Ability.EXECUTE:
            return self.execute(context.extra_rage)
        if ability == Ability.OVERPOWER:
            return self.overpower()
        if ability == Ability.CLEAVE:
            return self.cleave()
        if ability == Ability.REND:
            return self.rend()
        return super().compute(ability, context)
