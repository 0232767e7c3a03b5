"""
Result module for the simulator.

Reduces the event log of one iteration into its totals: output, output per
second, the per-ability breakdown and the outcome counts.
"""

from collections import Counter
from typing import Sequence

from core.constants import Ability, AttackType
from effects.event_system import AnyEvent, DamageEvent, HealEvent
from pydantic import BaseModel, Field


class AbilityStats(BaseModel):
    """Totals of one ability over one or more iterations."""

    ability: Ability = Field(description="The ability.")
    total: int = Field(default=0, description="Total damage or effective healing.")
    overhealing: int = Field(default=0, description="Total overhealing.")
    count: int = Field(default=0, description="Number of logged uses.")
    landed: int = Field(default=0, description="Uses that dealt or healed a non-zero amount.")
    crits: int = Field(default=0, description="Critical uses.")
    misses: int = Field(default=0, description="Missed uses.")
    dodges: int = Field(default=0, description="Dodged uses.")
    glancing: int = Field(default=0, description="Glancing uses.")

    @property
    def average_hit(self) -> float:
        return self.total / self.landed if self.landed else 0.0

    @property
    def miss_percent(self) -> float:
        attempts = self.landed + self.misses
        return 100 * self.misses / attempts if attempts else 0.0

    def add(self, event: DamageEvent | HealEvent) -> None:
        """Accumulates one damage or heal event."""
        self.count += 1
        self.total += event.amount
        if event.amount > 0:
            self.landed += 1
        if isinstance(event, HealEvent):
            self.overhealing += event.overhealing
        if event.outcome == AttackType.CRIT:
            self.crits += 1
        elif event.outcome == AttackType.MISS:
            self.misses += 1
        elif event.outcome == AttackType.DODGE:
            self.dodges += 1
        elif event.outcome == AttackType.GLANCING:
            self.glancing += 1


class SimulationResult(BaseModel):
    """
    The outcome of one simulated encounter.

    Attributes:
        total_output (int):
            Total damage, or effective healing for healers.
        output_per_second (float):
            ``total_output`` divided by the fight length.
        breakdown (dict[Ability, AbilityStats]):
            Per-ability totals, for abilities that produced any output.
        outcome_counts (dict[AttackType, int]):
            Number of damage or heal events per outcome kind.

    """

    total_output: int = Field(description="Total damage or effective healing.")
    output_per_second: float = Field(description="Damage or healing per second.")
    total_hit_damage: int = Field(
        default=0, description="Output of landed hits, crits and glancing blows."
    )
    fight_length: float = Field(description="Fight length, in seconds.")
    healer: bool = Field(default=False, description="Whether the output is healing.")
    events: list[AnyEvent] = Field(default_factory=list, description="The event log.")
    breakdown: dict[Ability, AbilityStats] = Field(default_factory=dict)
    outcome_counts: dict[AttackType, int] = Field(default_factory=dict)

    @property
    def label(self) -> str:
        return "HPS" if self.healer else "DPS"

    @classmethod
    def from_events(
        cls, events: Sequence[AnyEvent], fight_length: float, healer: bool = False
    ) -> "SimulationResult":
        """
        Reduces an event log into a result.

        Damage events count for damage dealers and heal events for healers.

        Args:
            events (Sequence[AnyEvent]): The iteration's event log.
            fight_length (float): The fight length, in seconds.
            healer (bool): Whether the output is healing.

        Returns:
            SimulationResult: The reduced result.

        """
        output_type = HealEvent if healer else DamageEvent
        breakdown: dict[Ability, AbilityStats] = {}
        outcomes: Counter[AttackType] = Counter()
        hit_damage = 0
        for event in events:
            if not isinstance(event, output_type):
                continue
            outcomes[event.outcome] += 1
            if event.outcome.is_hit:
                hit_damage += event.amount
            stats = breakdown.setdefault(event.ability, AbilityStats(ability=event.ability))
            stats.add(event)
        breakdown = {ability: s for ability, s in breakdown.items() if s.total > 0}
        total = sum(s.total for s in breakdown.values())
        return cls(
            total_output=total,
            output_per_second=total / fight_length if fight_length > 0 else 0.0,
            total_hit_damage=hit_damage,
            fight_length=fight_length,
            healer=healer,
            events=list(events),
            breakdown=breakdown,
            outcome_counts=dict(outcomes),
        )
