"""
Weapon module for the simulator.

Defines the Weapon model: a damage range, a swing speed, a type tag that
drives type-gated talents, an optional enchant tag and an optional item
proc tag.
"""

from random import Random
from typing import Any

from core.constants import WeaponEnchant, WeaponProc, WeaponType
from pydantic import BaseModel, ConfigDict, Field


class Weapon(BaseModel):
    """
    Represents a weapon equipped in the main hand or the off hand.

    Weapons are immutable once created; the enchant's flat damage bonus is
    applied on top of the rolled damage range.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    min_damage: float = Field(
        description="The minimum damage of a swing, before modifiers.",
        ge=0,
    )
    max_damage: float = Field(
        description="The maximum damage of a swing, before modifiers.",
        ge=0,
    )
    speed: float = Field(
        description="The time between two swings, in seconds.",
        gt=0,
    )
    weapon_type: WeaponType = Field(
        default=WeaponType.SWORD,
        description="The type of weapon, used by type-gated talents.",
    )
    enchant: WeaponEnchant = Field(
        default=WeaponEnchant.NONE,
        description="The enchant applied to the weapon.",
    )
    proc: WeaponProc = Field(
        default=WeaponProc.NONE,
        description="The proc carried by the weapon item itself.",
    )

    def model_post_init(self, _: Any) -> None:
        """
        Validate the weapon's damage range.

        Raises:
            ValueError: If the maximum damage is lower than the minimum.

        """
        if self.max_damage < self.min_damage:
            raise ValueError(
                f"max_damage ({self.max_damage}) must not be lower than "
                f"min_damage ({self.min_damage})"
            )

    @property
    def average_damage(self) -> float:
        """Returns the average weapon damage, enchant included."""
        return (self.min_damage + self.max_damage) / 2 + self.enchant.flat_damage

    @property
    def speed_ms(self) -> float:
        """Returns the swing speed in milliseconds."""
        return self.speed * 1000

    @property
    def is_two_handed(self) -> bool:
        return self.weapon_type.is_two_handed

    def roll_damage(self, rng: Random) -> float:
        """
        Rolls the weapon's damage, enchant included.

        Args:
            rng (Random): The random generator to draw from.

        Returns:
            float: The rolled damage.

        """
        bonus = self.enchant.flat_damage
        return rng.uniform(self.min_damage + bonus, self.max_damage + bonus)

    def __str__(self) -> str:
        enchant = "" if self.enchant == WeaponEnchant.NONE else f" +{self.enchant.display_name}"
        return (
            f"{self.weapon_type.display_name} {self.min_damage:g}-{self.max_damage:g} "
            f"@ {self.speed:g}s{enchant}"
        )
