"""
Playback module for the simulator.

Replays one iteration event by event, optionally throttled to wall-clock
time. Playback only presents a finished event log; it never alters the
simulation itself.
"""

import time
from typing import Callable

from core.constants import AttackType
from core.error_handling import ErrorSeverity, safe_operation
from core.utils import cprint, crule, make_bar
from effects.event_system import (
    AnyEvent,
    BuffDropEvent,
    BuffGainEvent,
    DamageEvent,
    HealEvent,
    ProcEvent,
)
from sim.base_simulator import BaseSimulator
from sim.result import SimulationResult


def format_event(event: AnyEvent) -> str:
    """
    Formats one event as a colored console line.

    Args:
        event (AnyEvent): The event to format.

    Returns:
        str: The formatted line, prefixed with the event time.

    """
    stamp = f"[dim]{event.seconds:7.2f}s[/]"
    if isinstance(event, (DamageEvent, HealEvent)):
        color = event.outcome.color
        line = f"{stamp} [{color}]{event}[/]"
        if event.outcome == AttackType.CRIT:
            line += " [bold yellow]![/]"
        return line
    if isinstance(event, BuffGainEvent):
        return f"{stamp} [green]{event}[/]"
    if isinstance(event, BuffDropEvent):
        return f"{stamp} [dim white]{event}[/]"
    if isinstance(event, ProcEvent):
        return f"{stamp} [cyan]{event}[/]"
    return f"{stamp} {event}"


def play(
    simulator: BaseSimulator,
    speed: float = 0.0,
    sleep: Callable[[float], None] = time.sleep,
    printer: Callable[[str], None] = cprint,
) -> SimulationResult:
    """
    Runs one iteration and prints its events in order.

    Errors raised by the simulation propagate; only a failure while
    printing is logged and skipped.

    Args:
        simulator (BaseSimulator): The simulator to run.
        speed (float): Simulated seconds per wall-clock second; 0 prints
            everything at once.
        sleep (Callable[[float], None]): Waits for the given wall-clock seconds.
        printer (Callable[[str], None]): Prints one line.

    Returns:
        SimulationResult: The played iteration's result.

    """
    result = simulator.simulate()
    render_events(simulator, result, speed, sleep, printer)
    return result


@safe_operation(
    default_value=None,
    error_message="Playback interrupted",
    severity=ErrorSeverity.LOW,
)
def render_events(
    simulator: BaseSimulator,
    result: SimulationResult,
    speed: float,
    sleep: Callable[[float], None],
    printer: Callable[[str], None],
) -> None:
    """Prints the events of a finished iteration, then its resource bar and output."""
    crule(f"Playback: {simulator.character_class.colored_name}", style="bold green")
    previous = 0
    for event in result.events:
        if speed > 0 and event.timestamp > previous:
            sleep((event.timestamp - previous) / 1000 / speed)
        previous = event.timestamp
        printer(format_event(event))
    pool = simulator.pool
    printer(
        f"{simulator.resource_name.title()}: "
        f"{make_bar(pool.current, pool.maximum)} {pool.current:.0f}/{pool.maximum:.0f}"
    )
    printer(f"[bold]{result.label}[/]: {result.output_per_second:.1f}")
