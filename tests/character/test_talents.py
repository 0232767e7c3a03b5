"""
Tests for the talent models and talent overrides.
"""

import pytest
from character.talents import (
    MageTalents,
    RogueTalents,
    apply_talent_overrides,
    normalize_talent_name,
    parse_talent_overrides,
)
from core.error_handling import ConfigurationError
from pydantic import ValidationError


@pytest.fixture
def rogue_talents():
    return RogueTalents(malice=3)


def test_talents_default_to_zero():
    talents = MageTalents()
    assert talents.ignite == 0
    assert talents.combustion is False


def test_unknown_talents_are_rejected():
    with pytest.raises(ValidationError):
        RogueTalents(backstabbery=3)


def test_ranks_are_bounded():
    with pytest.raises(ValidationError):
        RogueTalents(malice=6)


@pytest.mark.parametrize(
    "name, expected",
    [
        ("improvedSinisterStrike", "improved_sinister_strike"),
        ("improved_sinister_strike", "improved_sinister_strike"),
        (" Malice ", "malice"),
        ("seal-fate", "seal_fate"),
    ],
)
def test_normalize_talent_name(name: str, expected: str):
    assert normalize_talent_name(name) == expected


def test_parse_overrides(rogue_talents: RogueTalents):
    overrides = parse_talent_overrides("malice:5, vigor:true,coldBlood:0", rogue_talents)
    assert overrides == {"malice": 5, "vigor": True, "cold_blood": False}


def test_apply_overrides_keeps_other_talents():
    talents = RogueTalents(malice=3, lethality=5)
    updated, applied = apply_talent_overrides(talents, "malice:5")
    assert applied == {"malice": 5}
    assert updated.malice == 5
    assert updated.lethality == 5
    # The original model is left untouched.
    assert talents.malice == 3


def test_apply_no_overrides(rogue_talents: RogueTalents):
    updated, applied = apply_talent_overrides(rogue_talents, None)
    assert updated is rogue_talents
    assert applied == {}


@pytest.mark.parametrize(
    "text",
    [
        "malice",
        "malice:",
        ":5",
        "backstabbery:5",
        "vigor:maybe",
        "malice:five",
        "   ",
    ],
)
def test_malformed_overrides_fail(rogue_talents: RogueTalents, text: str):
    with pytest.raises(ConfigurationError):
        parse_talent_overrides(text, rogue_talents)


def test_out_of_range_override_fails(rogue_talents: RogueTalents):
    with pytest.raises(ConfigurationError):
        apply_talent_overrides(rogue_talents, "malice:9")
