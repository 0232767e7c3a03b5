"""
Effects system module for the simulator.

This module contains the timed effect record tracked by simulation states
and the typed events logged during a simulation.
"""

from .base_effect import ActiveBuff
from .event_system import (
    AnyEvent,
    BuffDropEvent,
    BuffGainEvent,
    DamageEvent,
    EventType,
    HealEvent,
    ProcEvent,
    SimulationEvent,
)

__all__ = [
    # Import from base_effect.py
    "ActiveBuff",
    # Import from event_system.py
    "AnyEvent",
    "BuffDropEvent",
    "BuffGainEvent",
    "DamageEvent",
    "EventType",
    "HealEvent",
    "ProcEvent",
    "SimulationEvent",
]
