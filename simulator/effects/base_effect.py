"""
Base effect module for the simulator.

Defines the record of a timed effect active on the simulated character:
its expiry, and optional stacks and charges.
"""

from typing import Optional

from core.constants import Buff
from pydantic import BaseModel, Field


class ActiveBuff(BaseModel):
    """
    A buff or debuff currently tracked by a simulation state.

    A buff is active strictly before its expiry: once the current time
    reaches the expiry it no longer counts, even if the expiry sweep has not
    removed it yet.
    """

    buff: Buff = Field(
        description="The buff being tracked.",
    )
    expiry: int = Field(
        description="Simulated time at which the buff ends, in milliseconds.",
    )
    stacks: int = Field(
        default=1,
        description="Number of stacks, for stacking effects.",
        ge=0,
    )
    charges: Optional[int] = Field(
        default=None,
        description="Remaining uses before the buff is consumed, None if unlimited.",
    )

    @property
    def display_name(self) -> str:
        return self.buff.display_name

    def is_active(self, now: int) -> bool:
        return self.expiry > now

    def remaining(self, now: int) -> int:
        """Returns the remaining duration in milliseconds, never negative."""
        return max(0, self.expiry - now)

    def refresh(self, now: int, duration: int) -> None:
        """Restarts the buff's duration from the given time."""
        self.expiry = now + duration

    def consume_charge(self) -> bool:
        """
        Uses one charge of the buff.

        Returns:
            bool: True if the buff has no charges left and must be removed.

        """
        if self.charges is None:
            return False
        self.charges = max(0, self.charges - 1)
        return self.charges == 0

    def __str__(self) -> str:
        extra = f" x{self.stacks}" if self.stacks > 1 else ""
        return f"{self.display_name}{extra} (until {self.expiry}ms)"
