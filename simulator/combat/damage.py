"""
Damage module for the simulator.

Holds the values shared by every calculator: the structured result of an
ability, the per-call context, spell data, and the spell hit/crit roll used
by casters and healers.
"""

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from random import Random
from typing import Optional, Protocol

from core.constants import Ability, AttackType, Buff, SpellSchool
from core.error_handling import ERROR_HANDLER

# Base spell miss chance, in percent, by level difference with the target.
SPELL_MISS_BY_LEVEL_GAP = {0: 4.0, 1: 5.0, 2: 6.0, 3: 16.0}
SPELL_CRIT_MULTIPLIER = 1.5


class BuffReader(Protocol):
    """Read-only view on the buffs active on the simulated character."""

    def has_buff(self, buff: Buff) -> bool: ...

    def buff_stacks(self, buff: Buff) -> int: ...


class NoBuffs:
    """A buff view with nothing active, for calculators used on their own."""

    def has_buff(self, buff: Buff) -> bool:
        return False

    def buff_stacks(self, buff: Buff) -> int:
        return 0


@dataclass(frozen=True)
class DamageResult:
    """
    The outcome of one ability use.

    Attributes:
        ability (Ability): The ability that produced the result.
        outcome (AttackType): How the ability resolved.
        base_amount (float): The amount before multipliers and the table roll.
        amount (int): The final damage, or effective healing for heals.
        overhealing (int): Healing wasted on a target already at full health.

    """

    ability: Ability
    outcome: AttackType
    base_amount: float
    amount: int
    overhealing: int = 0

    @property
    def is_crit(self) -> bool:
        return self.outcome == AttackType.CRIT

    @property
    def is_hit(self) -> bool:
        return self.outcome.is_hit

    @property
    def is_avoided(self) -> bool:
        return self.outcome.is_avoided


@dataclass(frozen=True)
class AbilityContext:
    """Per-call inputs that come from the simulation state, not the build."""

    combo_points: int = 0
    extra_rage: float = 0.0
    missing_health: float = math.inf
    jump_index: int = 0


@dataclass(frozen=True)
class SpellData:
    """Static data of one spell rank."""

    min_amount: float
    max_amount: float
    cast_time_ms: int
    mana_cost: float
    coefficient: float
    school: SpellSchool
    cooldown_ms: int = 0

    def roll(self, rng: Random) -> float:
        return rng.uniform(self.min_amount, self.max_amount)


def spell_miss_chance(attacker_level: int, target_level: int, spell_hit: float) -> float:
    """
    Computes the chance, in percent, for a spell to miss.

    Args:
        attacker_level (int): The caster's level.
        target_level (int): The target's level.
        spell_hit (float): The caster's spell hit, in percent.

    Returns:
        float: The miss chance in percent, floored at 0.

    """
    gap = max(0, min(3, target_level - attacker_level))
    return max(0.0, SPELL_MISS_BY_LEVEL_GAP[gap] - spell_hit)


def roll_spell_outcome(
    rng: Random, miss_chance: float, crit_chance: float, can_crit: bool = True
) -> AttackType:
    """
    Rolls the two-outcome spell table.

    The miss check and the crit check use independent draws; crit is only
    checked when the spell did not miss. Spells never glance or get dodged.

    Args:
        rng (Random): The random generator to draw from.
        miss_chance (float): The miss chance, in percent.
        crit_chance (float): The crit chance, in percent.
        can_crit (bool): Whether the spell can crit at all.

    Returns:
        AttackType: MISS, CRIT or HIT.

    """
    if rng.random() * 100 < max(0.0, miss_chance):
        return AttackType.MISS
    if can_crit and rng.random() * 100 < max(0.0, crit_chance):
        return AttackType.CRIT
    return AttackType.HIT


class DamageCalculator(ABC):
    """
    Shared contract of the per-archetype calculators.

    A calculator turns an ability into a ``DamageResult``. It reads the
    immutable stats and talents it was built with, and the live buffs through
    a ``BuffReader``; it never mutates the simulation state.
    """

    def __init__(self, rng: Random, buffs: Optional[BuffReader] = None) -> None:
        self.rng = rng
        self.buffs: BuffReader = buffs if buffs is not None else NoBuffs()

    @abstractmethod
    def compute(
        self, ability: Ability, context: Optional[AbilityContext] = None
    ) -> DamageResult:
        """
        Computes the result of one use of an ability.

        Args:
            ability (Ability): The ability to resolve.
            context (Optional[AbilityContext]): State-dependent inputs.

        Returns:
            DamageResult: The resolved result.

        """

    def unsupported(self, ability: Ability) -> Exception:
        """Builds the error raised for an ability the archetype does not have."""
        return ERROR_HANDLER.configuration_error(
            f"{type(self).__name__} cannot compute {ability.display_name}",
            {"ability": ability.value},
        )
