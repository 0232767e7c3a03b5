"""
Combat system module for the simulator.

This module holds the combat mechanics: the melee attack table, armor
mitigation, and the per-archetype damage and healing calculators.
"""

from .armor import armor_multiplier, armor_reduction
from .attack_table import (
    AttackOutcome,
    AttackTable,
    OutcomeProbabilities,
    dodge_chance,
    glancing_chance,
    glancing_multiplier,
    miss_chance,
)
from .damage import (
    AbilityContext,
    BuffReader,
    DamageCalculator,
    DamageResult,
    NoBuffs,
    SpellData,
    roll_spell_outcome,
    spell_miss_chance,
)
from .mage_calculator import MageCalculator
from .melee_calculator import MeleeCalculator
from .rogue_calculator import RogueCalculator
from .shaman_calculator import ShamanCalculator
from .warrior_calculator import WarriorCalculator

__all__ = [
    # Import from armor.py
    "armor_multiplier",
    "armor_reduction",
    # Import from attack_table.py
    "AttackOutcome",
    "AttackTable",
    "OutcomeProbabilities",
    "dodge_chance",
    "glancing_chance",
    "glancing_multiplier",
    "miss_chance",
    # Import from damage.py
    "AbilityContext",
    "BuffReader",
    "DamageCalculator",
    "DamageResult",
    "NoBuffs",
    "SpellData",
    "roll_spell_outcome",
    "spell_miss_chance",
    # Import from the calculators
    "MageCalculator",
    "MeleeCalculator",
    "RogueCalculator",
    "ShamanCalculator",
    "WarriorCalculator",
]
