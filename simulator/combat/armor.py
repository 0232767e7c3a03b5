"""
Armor module for the simulator.

Physical damage against an armored target is reduced by a fraction that
depends on the target's armor and the attacker's level. Spell damage and
healing never go through this model.
"""

from core.constants import MAX_PLAYER_LEVEL


def armor_reduction(armor: float, attacker_level: int = MAX_PLAYER_LEVEL) -> float:
    """
    Computes the fraction of physical damage absorbed by armor.

    Args:
        armor (float): The target's armor value.
        attacker_level (int): The attacker's level.

    Returns:
        float: The absorbed fraction, in [0, 1].

    """
    if armor <= 0:
        return 0.0
    denominator = armor + 400 + 85 * (attacker_level - MAX_PLAYER_LEVEL)
    if denominator <= 0:
        return 0.0
    return max(0.0, min(1.0, armor / denominator))


def armor_multiplier(armor: float, attacker_level: int = MAX_PLAYER_LEVEL) -> float:
    """Returns the multiplier applied to physical damage, ``1 - reduction``."""
    return 1.0 - armor_reduction(armor, attacker_level)
