"""
Configuration module for the simulator.

Defines the character build a simulation consumes: the archetype, the
stat snapshot and talents, the setup options, the target, the fight
length, the number of iterations and an optional rotation.
"""

from typing import Any, Optional

from character.character_stats import CombatantStats
from character.talents import (
    MageTalents,
    RogueTalents,
    ShamanTalents,
    TalentSet,
    WarriorTalents,
    apply_talent_overrides,
)
from core.constants import BOSS_LEVEL, DEFAULT_TIME_STEP_MS, CharacterClass, Stance
from core.error_handling import ERROR_HANDLER
from pydantic import BaseModel, ConfigDict, Field, ValidationError

TALENT_MODELS: dict[CharacterClass, type[TalentSet]] = {
    CharacterClass.ROGUE: RogueTalents,
    CharacterClass.WARRIOR: WarriorTalents,
    CharacterClass.MAGE: MageTalents,
    CharacterClass.SHAMAN: ShamanTalents,
}


class TargetConfig(BaseModel):
    """
    The simulated target.

    Damage dealers hit a single enemy of the given level and armor. Healers
    heal a single tank with ``max_health`` taking ``incoming_dps`` damage.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    level: int = Field(
        default=BOSS_LEVEL,
        description="The target level.",
        ge=1,
        le=BOSS_LEVEL,
    )
    armor: float = Field(
        default=0.0,
        description="The target armor, applied to physical damage.",
        ge=0,
    )
    max_health: float = Field(
        default=10000.0,
        description="Maximum health of the tank healed by healers.",
        gt=0,
    )
    incoming_dps: float = Field(
        default=500.0,
        description="Damage per second taken by the tank.",
        ge=0,
    )


class SetupOptions(BaseModel):
    """
    Build options that are neither stats nor talents: set bonuses,
    self-buffs kept up for the whole fight, and the warrior's opening stance.

    Each option belongs to one archetype.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    stance: Stance = Field(
        default=Stance.BERSERKER,
        description="The stance a warrior starts every fight in.",
    )
    mage_armor: bool = Field(
        default=False,
        description="Mage Armor is active, keeping 30% of mana regeneration while casting.",
    )
    darkmantle_4: bool = Field(
        default=False,
        description="Four pieces of the Darkmantle set: landed swings may restore 35 energy.",
    )

    def check_archetype(self, character_class: CharacterClass) -> None:
        """
        Validate that every option set belongs to the archetype.

        Raises:
            ValueError: If an option is set for another archetype.

        """
        owners = {
            "mage_armor": CharacterClass.MAGE,
            "darkmantle_4": CharacterClass.ROGUE,
        }
        for name, owner in owners.items():
            if getattr(self, name) and character_class != owner:
                raise ValueError(f"Setup option '{name}' only applies to {owner.display_name}")
        if self.stance != Stance.BERSERKER and character_class != CharacterClass.WARRIOR:
            raise ValueError("Only a Warrior has stances")


class SimulationConfig(BaseModel):
    """
    The complete, immutable description of a simulation run.

    Attributes:
        character_class (CharacterClass):
            The simulated archetype.
        stats (CombatantStats):
            The gear-derived stat snapshot.
        talents (Optional[TalentSet]):
            The archetype's talents; None uses all-zero talents.
        setup (SetupOptions):
            Options outside stats and talents, checked against the archetype.
        rotation (list[str]):
            Rotation lines; empty uses the archetype's default priority.

    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    character_class: CharacterClass = Field(
        description="The simulated archetype.",
    )
    stats: CombatantStats = Field(
        default_factory=CombatantStats,
        description="The character's stat snapshot.",
    )
    talents: Optional[TalentSet] = Field(
        default=None,
        description="The archetype's talent model.",
    )
    setup: SetupOptions = Field(
        default_factory=SetupOptions,
        description="Set bonuses, fight-long self-buffs and the opening stance.",
    )
    target: TargetConfig = Field(
        default_factory=TargetConfig,
        description="The simulated target.",
    )
    fight_length: float = Field(
        default=60.0,
        description="Duration of one encounter, in seconds.",
        gt=0,
    )
    iterations: int = Field(
        default=1000,
        description="Number of encounters to simulate.",
        ge=1,
    )
    rotation: list[str] = Field(
        default_factory=list,
        description="Rotation lines, e.g. 'cp5+?evis:ss'.",
    )
    seed: Optional[int] = Field(
        default=None,
        description="Seed of the random generator, None for a random seed.",
    )
    time_step_ms: int = Field(
        default=DEFAULT_TIME_STEP_MS,
        description="Simulated time advanced per step, in milliseconds.",
        gt=0,
    )

    def model_post_init(self, _: Any) -> None:
        """
        Validate that the talents and setup belong to the configured archetype.

        Raises:
            ValueError: If the talent model or a setup option does not match
                the archetype.

        """
        expected = TALENT_MODELS[self.character_class]
        if self.talents is not None and not isinstance(self.talents, expected):
            raise ValueError(
                f"{self.character_class.display_name} expects {expected.__name__}, "
                f"got {type(self.talents).__name__}"
            )
        self.setup.check_archetype(self.character_class)

    @property
    def class_talents(self) -> TalentSet:
        """Returns the talents, or the archetype's default talents."""
        if self.talents is None:
            return TALENT_MODELS[self.character_class]()
        return self.talents

    @property
    def is_healer(self) -> bool:
        return self.character_class.is_healer

    def with_talent_overrides(self, text: Optional[str]) -> "SimulationConfig":
        """
        Returns a copy of the configuration with talent overrides applied.

        Args:
            text (Optional[str]): Overrides such as "malice:5,vigor:true".

        Raises:
            ConfigurationError: If an override is malformed or unknown.

        Returns:
            SimulationConfig: The updated configuration.

        """
        talents, _ = apply_talent_overrides(self.class_talents, text)
        return self.model_copy(update={"talents": talents})


def load_config(data: dict[str, Any]) -> SimulationConfig:
    """
    Builds a configuration from plain data, e.g. a parsed JSON document.

    The talents may be given as a name to rank mapping; they are validated
    against the archetype's talent model.

    Args:
        data (dict[str, Any]): The configuration data.

    Raises:
        ConfigurationError: If the data does not describe a valid configuration.

    Returns:
        SimulationConfig: The validated configuration.

    """
    data = dict(data)
    try:
        character_class = CharacterClass(str(data.get("character_class", "")).upper())
    except ValueError as e:
        raise ERROR_HANDLER.configuration_error(
            f"Unknown character class: {data.get('character_class')!r}",
            {"known": ", ".join(c.value for c in CharacterClass)},
        ) from e
    data["character_class"] = character_class
    try:
        if isinstance(data.get("talents"), dict):
            data["talents"] = TALENT_MODELS[character_class].model_validate(data["talents"])
        return SimulationConfig.model_validate(data)
    except ValidationError as e:
        raise ERROR_HANDLER.configuration_error(
            f"Invalid simulation configuration: {e.errors()[0]['msg']}",
            {"location": ".".join(str(part) for part in e.errors()[0]["loc"])},
        ) from e
    except ValueError as e:
        raise ERROR_HANDLER.configuration_error(
            f"Invalid simulation configuration: {e}", {"class": character_class.value}
        ) from e
