"""
Cast bar module for the simulator.

Holds the helpers shared by the mana archetypes: mana ticks and the
single cast bar. Mana is spent when a cast starts and the effect lands
when it ends; the global cooldown of a cast runs from its start to
``cast time + 1500ms`` later.
"""

from typing import Callable

from core.constants import GLOBAL_COOLDOWN_MS, MANA_TICK_MS, Ability

from .state import CasterResources


def regenerate_mana(resources: CasterResources, now: int, amount: float) -> None:
    """Grants one mana tick if its time has come."""
    if now >= resources.next_mana_tick:
        resources.mana.gain(amount)
        resources.next_mana_tick += MANA_TICK_MS


def cast_global_cooldown(cast_time_ms: int) -> int:
    """Returns the global cooldown triggered by a cast of the given length."""
    return cast_time_ms + GLOBAL_COOLDOWN_MS


def start_cast(
    resources: CasterResources,
    now: int,
    ability: Ability,
    cast_time_ms: int,
    complete: Callable[[Ability], None],
) -> None:
    """
    Puts a spell on the cast bar, or lands it at once if it is instant.

    Args:
        resources (CasterResources): The caster's cast bar.
        now (int): The current time, in milliseconds.
        ability (Ability): The spell being cast.
        cast_time_ms (int): The cast time after talents and buffs.
        complete (Callable[[Ability], None]): Lands the spell.

    """
    if cast_time_ms <= 0:
        complete(ability)
        return
    resources.casting = ability
    resources.cast_end = now + cast_time_ms


def finish_cast(
    resources: CasterResources, now: int, complete: Callable[[Ability], None]
) -> None:
    """Lands the spell on the cast bar if its cast time has elapsed."""
    if resources.casting is None or now < resources.cast_end:
        return
    ability = resources.casting
    resources.casting = None
    complete(ability)
