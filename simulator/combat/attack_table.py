"""
Attack table module for the simulator.

Computes the melee outcome probabilities of an attacker against a target
(miss, dodge, glancing blow, critical strike, hit) and samples one outcome
per attack with a single uniform draw.
"""

from dataclasses import dataclass
from random import Random

from core.constants import BOSS_LEVEL, AttackType

# Damage multiplier of a melee critical strike.
MELEE_CRIT_MULTIPLIER = 2.0
# Weapon skill above which dodge starts to shrink.
DODGE_SKILL_THRESHOLD = 300
# Highest glancing blow chance and damage multiplier.
MAX_GLANCING_CHANCE = 0.4
MAX_GLANCING_MULTIPLIER = 0.95
MIN_GLANCING_MULTIPLIER = 0.01


@dataclass(frozen=True)
class AttackOutcome:
    """The resolved outcome of one attack and its damage multiplier."""

    kind: AttackType
    damage_multiplier: float

    @property
    def is_hit(self) -> bool:
        return self.kind.is_hit


MISS = AttackOutcome(AttackType.MISS, 0.0)
DODGE = AttackOutcome(AttackType.DODGE, 0.0)
HIT = AttackOutcome(AttackType.HIT, 1.0)
CRIT = AttackOutcome(AttackType.CRIT, MELEE_CRIT_MULTIPLIER)
NO_WEAPON = AttackOutcome(AttackType.NO_WEAPON, 0.0)


@dataclass(frozen=True)
class OutcomeProbabilities:
    """Probability of each outcome kind; the five terms sum to one."""

    miss: float
    dodge: float
    glancing: float
    crit: float
    hit: float

    @property
    def total(self) -> float:
        return self.miss + self.dodge + self.glancing + self.crit + self.hit


def miss_chance(
    weapon_skill: int, target_level: int, hit_chance: float, dual_wield: bool = False
) -> float:
    """
    Computes the chance to miss the target.

    The base miss is 5% at equal skill, growing by 0.1% per point of
    defense above the attacker's skill, or 0.2% per point once the gap
    reaches 11. Hit chance lowers it, and dual wielding rescales it as
    ``miss * 0.8 + 0.2``.

    Args:
        weapon_skill (int): The attacker's weapon skill.
        target_level (int): The target's level.
        hit_chance (float): The attacker's hit chance, in percent.
        dual_wield (bool): Whether the attack comes from a dual wielder's auto-attack.

    Returns:
        float: The miss probability, never negative.

    """
    skill_gap = target_level * 5 - weapon_skill
    if skill_gap >= 11:
        base_miss = 0.05 + skill_gap * 0.002
    else:
        base_miss = 0.05 + skill_gap * 0.001
    single_wield = max(0.0, base_miss - hit_chance / 100)
    if dual_wield:
        return single_wield * 0.8 + 0.2
    return single_wield


def dodge_chance(weapon_skill: int, target_level: int) -> float:
    """Computes the chance of the target dodging, never negative."""
    base_dodge = 0.065 if target_level == BOSS_LEVEL else 0.05
    reduction = max(0, weapon_skill - DODGE_SKILL_THRESHOLD) * 0.0004
    return max(0.0, base_dodge - reduction)


def glancing_chance(attacker_level: int, weapon_skill: int, target_level: int) -> float:
    """Computes the chance of an auto-attack being a glancing blow."""
    if target_level < attacker_level:
        return 0.0
    effective_skill = min(attacker_level * 5, weapon_skill)
    chance = 0.1 + (target_level * 5 - effective_skill) * 0.02
    return max(0.0, min(MAX_GLANCING_CHANCE, chance))


def glancing_multiplier(attacker_level: int, weapon_skill: int, target_level: int) -> float:
    """
    Computes the damage multiplier of a glancing blow.

    Three skill breakpoints give 65%, 85% and 95% damage. Below the lowest
    breakpoint the penalty grows continuously with the defense gap.

    Returns:
        float: The multiplier, within [0.01, 0.95].

    """
    if target_level <= attacker_level:
        return MAX_GLANCING_MULTIPLIER
    if weapon_skill >= 308:
        return 0.95
    if weapon_skill >= 305:
        return 0.85
    if weapon_skill >= 300:
        return 0.65
    penalty = min(0.6, (target_level * 5 - weapon_skill) * 0.015)
    multiplier = 0.65 - penalty
    return max(MIN_GLANCING_MULTIPLIER, min(MAX_GLANCING_MULTIPLIER, multiplier))


class AttackTable:
    """
    Melee attack table of one attacker against one target.

    Miss, dodge and glancing chances are computed once at construction. The
    crit chance depends on the ability and is passed to each roll.
    """

    def __init__(
        self,
        attacker_level: int,
        weapon_skill: int,
        hit_chance: float,
        target_level: int,
        dual_wield: bool = False,
    ) -> None:
        """
        Builds the table from the attacker's and the target's statistics.

        Args:
            attacker_level (int): The attacker's level.
            weapon_skill (int): The attacker's weapon skill.
            hit_chance (float): The attacker's hit chance, in percent.
            target_level (int): The target's level.
            dual_wield (bool): Whether the attacker wields two weapons.

        """
        self.attacker_level = attacker_level
        self.weapon_skill = weapon_skill
        self.target_level = target_level
        self.dual_wield = dual_wield
        self.single_wield_miss = miss_chance(weapon_skill, target_level, hit_chance)
        self.dual_wield_miss = miss_chance(weapon_skill, target_level, hit_chance, True)
        self.dodge = dodge_chance(weapon_skill, target_level)
        self.glancing = glancing_chance(attacker_level, weapon_skill, target_level)
        self.glancing_outcome = AttackOutcome(
            AttackType.GLANCING,
            glancing_multiplier(attacker_level, weapon_skill, target_level),
        )

    def miss_chance(self, is_special_attack: bool = False) -> float:
        """Returns the miss chance; special attacks ignore the dual wield penalty."""
        if self.dual_wield and not is_special_attack:
            return self.dual_wield_miss
        return self.single_wield_miss

    def probabilities(
        self, crit_chance: float, is_special_attack: bool = False, can_dodge: bool = True
    ) -> OutcomeProbabilities:
        """
        Returns the outcome distribution used by ``roll``.

        Each term takes its share of whatever probability mass is left after
        the terms before it, so the five terms are non-negative and sum to one.

        Args:
            crit_chance (float): The crit chance of the attack, in percent.
            is_special_attack (bool): Whether the attack is an ability (no glancing).
            can_dodge (bool): Whether the target may dodge the attack.

        Returns:
            OutcomeProbabilities: The outcome distribution.

        """
        remaining = 1.0
        miss = min(remaining, self.miss_chance(is_special_attack))
        remaining -= miss
        dodge = min(remaining, self.dodge) if can_dodge else 0.0
        remaining -= dodge
        glancing = 0.0 if is_special_attack else min(remaining, self.glancing)
        remaining -= glancing
        crit = min(remaining, max(0.0, crit_chance / 100))
        remaining -= crit
        return OutcomeProbabilities(
            miss=miss, dodge=dodge, glancing=glancing, crit=crit, hit=max(0.0, remaining)
        )

    def roll(
        self,
        rng: Random,
        crit_chance: float,
        is_special_attack: bool = False,
        can_dodge: bool = True,
    ) -> AttackOutcome:
        """
        Samples one outcome against a single uniform draw.

        The order is fixed: miss, dodge, glancing (auto-attacks only), crit,
        then hit.

        Args:
            rng (Random): The random generator to draw from.
            crit_chance (float): The crit chance of the attack, in percent.
            is_special_attack (bool): Whether the attack is an ability.
            can_dodge (bool): Whether the target may dodge the attack.

        Returns:
            AttackOutcome: The sampled outcome.

        """
        roll = rng.random()
        cumulative = self.miss_chance(is_special_attack)
        if roll < cumulative:
            return MISS
        if can_dodge:
            cumulative += self.dodge
            if roll < cumulative:
                return DODGE
        if not is_special_attack:
            cumulative += self.glancing
            if roll < cumulative:
                return self.glancing_outcome
        cumulative += max(0.0, crit_chance / 100)
        if roll < cumulative:
            return CRIT
        return HIT
