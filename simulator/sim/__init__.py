"""
Simulation module for the simulator.

This module contains the time-stepped simulation engine: the configuration
models, the per-iteration state, the rotation language, one simulator per
archetype, and the iteration runner that aggregates many encounters.
"""

from .base_simulator import BaseSimulator
from .config import TALENT_MODELS, SetupOptions, SimulationConfig, TargetConfig, load_config
from .mage_simulator import MageSimulator
from .result import AbilityStats, SimulationResult
from .rogue_simulator import RogueSimulator
from .rotation import (
    Predicate,
    RotationContext,
    RotationStep,
    compile_condition,
    compile_rotation,
    compile_step,
)
from .runner import (
    SIMULATORS,
    AbilitySummary,
    IterationRunner,
    RunSummary,
    create_simulator,
)
from .shaman_simulator import ShamanSimulator
from .state import (
    CasterResources,
    MageResources,
    ResourcePool,
    RogueResources,
    ShamanResources,
    SimulationState,
    WarriorResources,
)
from .warrior_simulator import WarriorSimulator

__all__ = [
    # Import from base_simulator.py
    "BaseSimulator",
    # Import from config.py
    "TALENT_MODELS",
    "SetupOptions",
    "SimulationConfig",
    "TargetConfig",
    "load_config",
    # Import from mage_simulator.py
    "MageSimulator",
    # Import from result.py
    "AbilityStats",
    "SimulationResult",
    # Import from rogue_simulator.py
    "RogueSimulator",
    # Import from rotation.py
    "Predicate",
    "RotationContext",
    "RotationStep",
    "compile_condition",
    "compile_rotation",
    "compile_step",
    # Import from runner.py
    "SIMULATORS",
    "AbilitySummary",
    "IterationRunner",
    "RunSummary",
    "create_simulator",
    # Import from shaman_simulator.py
    "ShamanSimulator",
    # Import from state.py
    "CasterResources",
    "MageResources",
    "ResourcePool",
    "RogueResources",
    "ShamanResources",
    "SimulationState",
    "WarriorResources",
    # Import from warrior_simulator.py
    "WarriorSimulator",
]
