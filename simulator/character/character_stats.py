"""
Character stats module for the simulator.

Holds the immutable stat snapshot of a character build, derived from gear
by an external aggregator before any simulation runs.
"""

from typing import Any

from core.constants import MAX_PLAYER_LEVEL
from items.weapon import Weapon
from pydantic import BaseModel, ConfigDict, Field


class CombatantStats(BaseModel):
    """
    Immutable per-run snapshot of a character's combat statistics.

    Percentages (hit, crit, haste) are expressed in percent points, i.e. a
    value of 5 means 5%. Talent and buff effects are never baked into these
    numbers; calculators read them through their own accessors.

    Attributes:
        level (int):
            The character level.
        weapon_skill (int):
            The weapon skill of the main weapon type.
        main_hand (Weapon | None):
            The main hand weapon, if any.
        off_hand (Weapon | None):
            The off hand weapon, if any.

    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    level: int = Field(
        default=MAX_PLAYER_LEVEL,
        description="The character level.",
        ge=1,
        le=MAX_PLAYER_LEVEL,
    )
    weapon_skill: int = Field(
        default=300,
        description="The weapon skill of the equipped weapons.",
        ge=0,
    )
    hit_chance: float = Field(
        default=0.0,
        description="Melee hit chance from gear, in percent.",
        ge=0,
    )
    crit_chance: float = Field(
        default=0.0,
        description="Melee crit chance from gear and agility, in percent.",
        ge=0,
    )
    spell_hit: float = Field(
        default=0.0,
        description="Spell hit chance from gear, in percent.",
        ge=0,
    )
    spell_crit: float = Field(
        default=0.0,
        description="Spell crit chance from gear, in percent (intellect excluded).",
        ge=0,
    )
    haste: float = Field(
        default=0.0,
        description="Attack speed increase from gear, in percent.",
        ge=0,
    )
    attack_power: float = Field(
        default=0.0,
        description="Total melee attack power.",
        ge=0,
    )
    spell_power: float = Field(
        default=0.0,
        description="Spell damage bonus.",
        ge=0,
    )
    healing_power: float = Field(
        default=0.0,
        description="Healing bonus.",
        ge=0,
    )
    intellect: float = Field(default=0.0, description="Intellect.", ge=0)
    spirit: float = Field(default=0.0, description="Spirit.", ge=0)
    mana: float = Field(
        default=0.0,
        description="Base mana pool before intellect; 0 uses the class default.",
        ge=0,
    )
    mp5: float = Field(
        default=0.0,
        description="Mana regenerated every five seconds.",
        ge=0,
    )
    main_hand: Weapon | None = Field(
        default=None,
        description="The main hand weapon.",
    )
    off_hand: Weapon | None = Field(
        default=None,
        description="The off hand weapon.",
    )

    def model_post_init(self, _: Any) -> None:
        """
        Validate weapon combinations.

        Raises:
            ValueError: If an off hand is equipped next to a two-handed weapon.

        """
        if self.off_hand is not None and self.main_hand is not None:
            if self.main_hand.is_two_handed:
                raise ValueError("Cannot equip an off hand with a two-handed weapon.")
        if self.off_hand is not None and self.off_hand.is_two_handed:
            raise ValueError("A two-handed weapon cannot be equipped in the off hand.")

    @property
    def is_dual_wielding(self) -> bool:
        return self.off_hand is not None

    @property
    def haste_multiplier(self) -> float:
        """Returns the attack speed multiplier from gear haste."""
        return 1 + self.haste / 100

    def weapon(self, off_hand: bool = False) -> Weapon | None:
        """
        Returns the weapon in the requested hand.

        Args:
            off_hand (bool): Whether to return the off hand weapon.

        Returns:
            Weapon | None: The weapon, or None if the slot is empty.

        """
        return self.off_hand if off_hand else self.main_hand
