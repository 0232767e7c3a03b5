"""
Items system module for the combat simulator.

This module contains equipment definitions: weapons with their damage range,
speed, type tag and enchant.
"""

from .weapon import Weapon

__all__ = [
    # Import from weapon.py
    "Weapon",
]
