"""
Core system module for the combat simulator.

This module contains the fundamental components shared by every other
package: game constants and enumerations, logging setup, error handling and
console utilities.
"""

from .constants import (
    BOSS_LEVEL,
    DEFAULT_TIME_STEP_MS,
    ENERGY_TICK_MS,
    GLOBAL_COOLDOWN_MS,
    MANA_TICK_MS,
    MAX_COMBO_POINTS,
    MAX_PLAYER_LEVEL,
    Ability,
    AttackType,
    Buff,
    CharacterClass,
    NiceEnum,
    SpellSchool,
    Stance,
    WeaponEnchant,
    WeaponProc,
    WeaponType,
)
from .error_handling import (
    ERROR_HANDLER,
    ConfigurationError,
    ErrorHandler,
    ErrorRecord,
    ErrorSeverity,
    SimulationError,
    require_non_empty_string,
    require_non_negative,
    require_positive,
    require_probability,
    safe_operation,
)
from .logging import get_logger, setup_logging
from .utils import (
    ccapture,
    clamp,
    cprint,
    crule,
    make_bar,
)

__all__ = [
    # Import from constants.py
    "BOSS_LEVEL",
    "DEFAULT_TIME_STEP_MS",
    "ENERGY_TICK_MS",
    "GLOBAL_COOLDOWN_MS",
    "MANA_TICK_MS",
    "MAX_COMBO_POINTS",
    "MAX_PLAYER_LEVEL",
    "Ability",
    "AttackType",
    "Buff",
    "CharacterClass",
    "NiceEnum",
    "SpellSchool",
    "Stance",
    "WeaponEnchant",
    "WeaponProc",
    "WeaponType",
    # Import from error_handling.py
    "ERROR_HANDLER",
    "ConfigurationError",
    "ErrorHandler",
    "ErrorRecord",
    "ErrorSeverity",
    "SimulationError",
    "require_non_empty_string",
    "require_non_negative",
    "require_positive",
    "require_probability",
    "safe_operation",
    # Import from logging.py
    "get_logger",
    "setup_logging",
    # Import from utils.py
    "ccapture",
    "clamp",
    "cprint",
    "crule",
    "make_bar",
]
