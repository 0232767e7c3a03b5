"""
Character system module for the combat simulator.

This module holds what describes a character build: its immutable stat
snapshot and its per-archetype talent models.
"""

from .character_stats import CombatantStats
from .talents import (
    MageTalents,
    RogueTalents,
    ShamanTalents,
    TalentSet,
    WarriorTalents,
    apply_talent_overrides,
    normalize_talent_name,
    parse_talent_overrides,
)

__all__ = [
    # Import from character_stats.py
    "CombatantStats",
    # Import from talents.py
    "MageTalents",
    "RogueTalents",
    "ShamanTalents",
    "TalentSet",
    "WarriorTalents",
    "apply_talent_overrides",
    "normalize_talent_name",
    "parse_talent_overrides",
]
