"""
Event system module for the simulator.

Defines the append-only events a simulation logs: damage, healing, buff
gains and drops, and procs. The event log is the only source the end of
iteration statistics are reduced from.
"""

from enum import Enum
from typing import Union

from core.constants import Ability, AttackType, Buff
from pydantic import BaseModel, ConfigDict, Field


class EventType(Enum):
    """Enumeration of available event types."""

    DAMAGE = "damage"  # An ability or swing resolved against the target
    HEAL = "heal"  # A heal landed on the tank
    BUFF_GAIN = "buff_gain"  # A timed effect started
    BUFF_DROP = "buff_drop"  # A timed effect expired or was consumed
    PROC = "proc"  # A probabilistic secondary effect triggered


class SimulationEvent(BaseModel):
    """Base class for all logged events."""

    model_config = ConfigDict(frozen=True)

    event_type: EventType = Field(
        description="The type of event.",
    )
    timestamp: int = Field(
        description="Simulated time of the event, in milliseconds.",
        ge=0,
    )

    @property
    def seconds(self) -> float:
        return self.timestamp / 1000


class DamageEvent(SimulationEvent):
    """Event data for a resolved attack, ability or damage tick."""

    event_type: EventType = Field(
        default=EventType.DAMAGE,
        description="The type of event.",
    )
    ability: Ability = Field(description="The ability that dealt the damage.")
    amount: int = Field(description="Final damage dealt.", ge=0)
    outcome: AttackType = Field(description="How the attack resolved.")
    resource_generated: float = Field(
        default=0.0,
        description="Resource (rage, combo points) generated by the attack.",
    )
    white_damage: bool = Field(
        default=False,
        description="Whether the damage comes from an auto-attack swing.",
    )

    @property
    def is_crit(self) -> bool:
        return self.outcome == AttackType.CRIT

    def __str__(self) -> str:
        """
        String representation of the DamageEvent.

        Returns:
            str:
                Formatted string representing the DamageEvent.
        """
        return (
            f"DamageEvent({self.ability.display_name}, {self.outcome.display_name}, "
            f"amount={self.amount}, t={self.seconds:.2f}s)"
        )


class HealEvent(SimulationEvent):
    """Event data for a heal landing on the tank."""

    event_type: EventType = Field(
        default=EventType.HEAL,
        description="The type of event.",
    )
    ability: Ability = Field(description="The healing spell.")
    amount: int = Field(description="Effective healing done.", ge=0)
    overhealing: int = Field(default=0, description="Healing wasted.", ge=0)
    outcome: AttackType = Field(description="HIT or CRIT.")
    jump_index: int = Field(
        default=0, description="Chain Heal jump, 0 for the first target.", ge=0
    )

    @property
    def is_crit(self) -> bool:
        return self.outcome == AttackType.CRIT

    def __str__(self) -> str:
        """
        String representation of the HealEvent.

        Returns:
            str:
                Formatted string representing the HealEvent.
        """
        return (
            f"HealEvent({self.ability.display_name}, heal={self.amount}, "
            f"overheal={self.overhealing}, t={self.seconds:.2f}s)"
        )


class BuffGainEvent(SimulationEvent):
    """Event data for a timed effect starting."""

    event_type: EventType = Field(
        default=EventType.BUFF_GAIN,
        description="The type of event.",
    )
    buff: Buff = Field(description="The buff gained.")
    duration: int = Field(description="Duration of the buff, in milliseconds.", ge=0)

    def __str__(self) -> str:
        return f"BuffGainEvent({self.buff.display_name}, {self.duration}ms)"


class BuffDropEvent(SimulationEvent):
    """Event data for a timed effect ending."""

    event_type: EventType = Field(
        default=EventType.BUFF_DROP,
        description="The type of event.",
    )
    buff: Buff = Field(description="The buff dropped.")

    def __str__(self) -> str:
        return f"BuffDropEvent({self.buff.display_name})"


class ProcEvent(SimulationEvent):
    """Event data for a proc such as Seal Fate or an extra attack."""

    event_type: EventType = Field(
        default=EventType.PROC,
        description="The type of event.",
    )
    name: str = Field(description="Name of the proc.")
    detail: str = Field(default="", description="Optional detail, e.g. a stack count.")

    def __str__(self) -> str:
        detail = f", {self.detail}" if self.detail else ""
        return f"ProcEvent({self.name}{detail})"


AnyEvent = Union[DamageEvent, HealEvent, BuffGainEvent, BuffDropEvent, ProcEvent]
