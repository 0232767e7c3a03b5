"""
Talent module for the simulator.

Defines one closed talent model per archetype. Every talent is a rank
bounded by its maximum, or a boolean for single-point talents. Unknown
talent names are rejected, both when building a model and when applying
command-line style overrides.
"""

import re
from typing import Any

from catchery import log_debug
from core.error_handling import ERROR_HANDLER, require_non_empty_string
from pydantic import BaseModel, ConfigDict, Field, ValidationError

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


class TalentSet(BaseModel):
    """Base class of the per-archetype talent models."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    def with_overrides(self, overrides: dict[str, Any]) -> "TalentSet":
        """
        Returns a copy of the talents with some values replaced.

        Args:
            overrides (dict[str, Any]): Talent names mapped to their new value.

        Raises:
            ConfigurationError: If a name is unknown or a value out of range.

        Returns:
            TalentSet: A new, validated, talent set.

        """
        for name in overrides:
            if name not in type(self).model_fields:
                raise ERROR_HANDLER.configuration_error(
                    f"Unknown talent '{name}' for {type(self).__name__}",
                    {"talent": name, "known": ", ".join(type(self).model_fields)},
                )
        try:
            return type(self).model_validate({**self.model_dump(), **overrides})
        except ValidationError as e:
            raise ERROR_HANDLER.configuration_error(
                f"Invalid talent override for {type(self).__name__}: {e.errors()[0]['msg']}",
                {"overrides": overrides},
            ) from e


class RogueTalents(TalentSet):
    """Talents of the rogue archetype."""

    malice: int = Field(default=0, ge=0, le=5, description="+1% crit per rank.")
    lethality: int = Field(
        default=0, ge=0, le=5, description="+6% damage per rank to builders and Eviscerate."
    )
    aggression: int = Field(
        default=0, ge=0, le=3, description="+2% Sinister Strike and Eviscerate damage per rank."
    )
    improved_sinister_strike: int = Field(
        default=0, ge=0, le=2, description="Reduces Sinister Strike cost by 3/5 energy."
    )
    improved_backstab: int = Field(
        default=0, ge=0, le=3, description="+10% Backstab crit per rank."
    )
    improved_eviscerate: int = Field(
        default=0, ge=0, le=3, description="+5% Eviscerate damage per rank."
    )
    improved_slice_and_dice: int = Field(
        default=0, ge=0, le=3, description="+15% Slice and Dice duration per rank."
    )
    precision: int = Field(default=0, ge=0, le=5, description="+1% hit per rank.")
    dagger_specialization: int = Field(
        default=0, ge=0, le=5, description="+1% crit per rank with daggers."
    )
    fist_weapon_specialization: int = Field(
        default=0, ge=0, le=5, description="+1% crit per rank with fist weapons."
    )
    sword_specialization: int = Field(
        default=0, ge=0, le=5, description="1% chance per rank of an extra attack with swords."
    )
    dual_wield_specialization: int = Field(
        default=0, ge=0, le=5, description="+5% off hand damage per rank."
    )
    weapon_expertise: int = Field(
        default=0, ge=0, le=2, description="+3/+5 skill with swords, fist weapons and daggers."
    )
    opportunity: int = Field(
        default=0, ge=0, le=5, description="+4% Backstab damage per rank."
    )
    seal_fate: int = Field(
        default=0, ge=0, le=5, description="20% chance per rank of an extra combo point on crit."
    )
    ruthlessness: int = Field(
        default=0, ge=0, le=3, description="20% chance per rank of a combo point after a finisher."
    )
    relentless_strikes: bool = Field(
        default=False, description="20% chance per combo point spent to restore 25 energy."
    )
    vigor: bool = Field(default=False, description="Raises maximum energy to 110.")
    cold_blood: bool = Field(default=False, description="Grants the Cold Blood ability.")
    hemorrhage: bool = Field(default=False, description="Grants the Hemorrhage ability.")


class WarriorTalents(TalentSet):
    """Talents of the warrior archetype."""

    cruelty: int = Field(default=0, ge=0, le=5, description="+1% crit per rank.")
    precision: int = Field(default=0, ge=0, le=3, description="+1% hit per rank.")
    impale: int = Field(
        default=0, ge=0, le=2, description="+10% ability crit damage per rank."
    )
    improved_heroic_strike: int = Field(
        default=0, ge=0, le=3, description="Reduces Heroic Strike cost by 1 rage per rank."
    )
    improved_rend: int = Field(
        default=0, ge=0, le=3, description="Rend damage +15/25/35%."
    )
    improved_overpower: int = Field(
        default=0, ge=0, le=2, description="+25% Overpower crit per rank."
    )
    tactical_mastery: int = Field(
        default=0, ge=0, le=5, description="Keeps up to 5 rage per rank when switching stance."
    )
    improved_cleave: int = Field(
        default=0, ge=0, le=3, description="+10% Cleave bonus damage per rank."
    )
    dual_wield_specialization: int = Field(
        default=0, ge=0, le=5, description="+5% off hand damage per rank."
    )
    two_handed_specialization: int = Field(
        default=0, ge=0, le=5, description="+1% damage per rank with two-handed weapons."
    )
    flurry: int = Field(
        default=0, ge=0, le=5, description="Attack speed after a crit: 10/15/20/25/30%."
    )
    enrage: int = Field(
        default=0, ge=0, le=5, description="+5% damage per rank after a crit."
    )
    unbridled_wrath: int = Field(
        default=0, ge=0, le=5, description="8% chance per rank of 1 rage on a white hit."
    )
    anger_management: bool = Field(
        default=False, description="Generates 1 rage every 3 seconds."
    )
    bloodthirst: bool = Field(default=False, description="Grants the Bloodthirst ability.")
    mortal_strike: bool = Field(default=False, description="Grants the Mortal Strike ability.")


class MageTalents(TalentSet):
    """Talents of the mage archetype."""

    arcane_focus: int = Field(default=0, ge=0, le=5, description="+2% arcane hit per rank.")
    arcane_concentration: int = Field(
        default=0, ge=0, le=5, description="2% chance per rank to make the next spell free."
    )
    arcane_mind: int = Field(default=0, ge=0, le=5, description="+2% maximum mana per rank.")
    arcane_meditation: int = Field(
        default=0, ge=0, le=3, description="Keeps 5% per rank of mana regeneration while casting."
    )
    arcane_instability: int = Field(
        default=0, ge=0, le=3, description="+1% spell damage and crit per rank."
    )
    arcane_power: bool = Field(default=False, description="Grants Arcane Power.")
    presence_of_mind: bool = Field(default=False, description="Grants Presence of Mind.")
    elemental_precision: int = Field(
        default=0, ge=0, le=3, description="+2% fire and frost hit per rank."
    )
    improved_fireball: int = Field(
        default=0, ge=0, le=5, description="-0.1s Fireball cast time per rank."
    )
    ignite: int = Field(
        default=0, ge=0, le=5, description="Fire crits burn for 8% per rank of their damage."
    )
    fire_power: int = Field(default=0, ge=0, le=5, description="+2% fire damage per rank.")
    critical_mass: int = Field(default=0, ge=0, le=3, description="+2% fire crit per rank.")
    improved_scorch: int = Field(
        default=0, ge=0, le=3, description="33% chance per rank to apply Fire Vulnerability."
    )
    master_of_elements: int = Field(
        default=0, ge=0, le=3, description="Crits refund 10% per rank of the spell's cost."
    )
    combustion: bool = Field(default=False, description="Grants Combustion.")
    improved_frostbolt: int = Field(
        default=0, ge=0, le=5, description="-0.1s Frostbolt cast time per rank."
    )
    ice_shards: int = Field(
        default=0, ge=0, le=5, description="+20% frost crit damage bonus per rank."
    )
    piercing_ice: int = Field(default=0, ge=0, le=3, description="+2% frost damage per rank.")
    frost_channeling: int = Field(
        default=0, ge=0, le=3, description="-5% frost spell cost per rank."
    )


class ShamanTalents(TalentSet):
    """Talents of the shaman archetype."""

    purification: int = Field(default=0, ge=0, le=5, description="+2% healing per rank.")
    tidal_mastery: int = Field(default=0, ge=0, le=5, description="+1% healing crit per rank.")
    improved_healing_wave: int = Field(
        default=0, ge=0, le=5, description="-0.1s Healing Wave cast time per rank."
    )
    tidal_focus: int = Field(default=0, ge=0, le=5, description="-1% healing cost per rank.")
    ancestral_knowledge: int = Field(
        default=0, ge=0, le=5, description="+1% maximum mana per rank."
    )
    mental_quickness: int = Field(
        default=0, ge=0, le=5, description="Converts a share of attack power to healing power."
    )
    natures_swiftness: bool = Field(default=False, description="Grants Nature's Swiftness.")


def normalize_talent_name(name: str) -> str:
    """
    Normalizes a talent name to the model's snake_case field name.

    Both "improvedSinisterStrike" and "improved_sinister_strike" map to
    "improved_sinister_strike".

    Args:
        name (str): The talent name as typed by a user.

    Returns:
        str: The snake_case field name.

    """
    name = name.strip().replace("-", "_")
    return _CAMEL_BOUNDARY.sub("_", name).lower().replace("__", "_")


def parse_talent_overrides(
    text: str, talents: TalentSet
) -> dict[str, int | bool]:
    """
    Parses an override string of the form "name:value,name:value".

    Boolean talents accept true/false/1/0, ranked talents accept integers.

    Args:
        text (str): The override string.
        talents (TalentSet): The talent model the overrides apply to.

    Raises:
        ConfigurationError: On malformed pairs, unknown names or bad values.

    Returns:
        dict[str, int | bool]: Field names mapped to parsed values.

    """
    text = require_non_empty_string(text, "talent overrides")
    fields = type(talents).model_fields
    overrides: dict[str, int | bool] = {}
    for pair in text.split(","):
        if not pair.strip():
            continue
        name, sep, raw_value = pair.partition(":")
        if not sep or not name.strip() or not raw_value.strip():
            raise ERROR_HANDLER.configuration_error(
                f"Invalid talent format: '{pair}' (expected NAME:VALUE, e.g. malice:5,lethality:5)",
                {"pair": pair},
            )
        field_name = normalize_talent_name(name)
        if field_name not in fields:
            raise ERROR_HANDLER.configuration_error(
                f"Unknown talent '{name.strip()}' for {type(talents).__name__}",
                {"talent": name.strip()},
            )
        raw_value = raw_value.strip().lower()
        if fields[field_name].annotation is bool:
            if raw_value not in ("true", "false", "1", "0"):
                raise ERROR_HANDLER.configuration_error(
                    f"Talent '{field_name}' expects true/false, got '{raw_value}'",
                    {"talent": field_name},
                )
            overrides[field_name] = raw_value in ("true", "1")
        else:
            try:
                overrides[field_name] = int(raw_value)
            except ValueError as e:
                raise ERROR_HANDLER.configuration_error(
                    f"Talent '{field_name}' expects an integer rank, got '{raw_value}'",
                    {"talent": field_name},
                ) from e
    return overrides


def apply_talent_overrides(
    talents: TalentSet, text: str | None
) -> tuple[TalentSet, dict[str, int | bool]]:
    """
    Applies an override string to a talent model.

    Args:
        talents (TalentSet): The talents to start from.
        text (str | None): The override string, or None for no overrides.

    Returns:
        tuple[TalentSet, dict[str, int | bool]]:
            The new talents and the overrides that were applied.

    """
    if not text:
        return talents, {}
    overrides = parse_talent_overrides(text, talents)
    log_debug(
        "Applying talent overrides",
        {"talents": type(talents).__name__, "overrides": overrides},
    )
    return talents.with_overrides(overrides), overrides
