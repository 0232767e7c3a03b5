"""
Utilities module for the simulator.

Provides common utility functions and helpers, including console printing
with rich formatting, resource bars and small numeric helpers.
"""

from typing import Any

from rich.console import Console
from rich.rule import Rule

# Initialize the rich console.
_console = Console(markup=True, width=120, force_terminal=True, force_jupyter=False)


def cprint(*args: Any, **kwargs: Any) -> None:
    """
    Custom print function to handle colored output.

    Args:
        *args: Arguments to pass to the console print function.
        **kwargs: Keyword arguments to pass to the console print function.

    """
    _console.print(*args, **kwargs)


def crule(*args: Any, **kwargs: Any) -> None:
    """
    Custom print function to handle colored output with a rule.

    Args:
        *args: Arguments to pass to the Rule constructor.
        **kwargs: Keyword arguments to pass to the Rule constructor.

    """
    _console.print(Rule(*args, **kwargs))


def ccapture(content: Any) -> str:
    """
    Captures console output as a string.

    Args:
        content (Any): The content to capture.

    Returns:
        str: The captured output as a string.

    """
    with _console.capture() as capture:
        _console.print(content, markup=True, end="")
    return capture.get()


def clamp(value: float, minimum: float, maximum: float) -> float:
    """Clamps a value to the closed interval [minimum, maximum]."""
    return max(minimum, min(maximum, value))


def make_bar(current: float, maximum: float, length: int = 20, color: str = "yellow") -> str:
    """
    Creates a visual progress bar representation.

    Args:
        current (float): The current value.
        maximum (float): The maximum value.
        length (int): The length of the bar in characters. Defaults to 20.
        color (str): The color for the filled portion. Defaults to "yellow".

    Returns:
        str: A formatted progress bar string.

    """
    ratio = clamp(current / maximum, 0.0, 1.0) if maximum > 0 else 0.0
    filled = int(ratio * length)
    empty = length - filled
    bar = f"[{color}]" + "█" * filled + "[/]"
    if empty > 0:
        bar += "[dim white]" + "░" * empty + "[/]"
    return bar
