"""
User interface module for the simulator.

This module renders finished runs for the console: the aggregate report of
many iterations and the event by event playback of a single one.
"""

from .playback import format_event, play
from .report import (
    breakdown_table,
    format_summary,
    print_report,
    statistics_table,
)

__all__ = [
    # Import from playback.py
    "format_event",
    "play",
    # Import from report.py
    "breakdown_table",
    "format_summary",
    "print_report",
    "statistics_table",
]
