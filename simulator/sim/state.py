"""
Simulation state module for the simulator.

Holds the mutable record of one encounter: the simulated clock, swing
timers, the global cooldown, active buffs, per-ability cooldowns, and an
archetype-specific resource payload. A fresh state is built for every
iteration and never shared between iterations.
"""

from dataclasses import dataclass, field
from typing import Optional, Union

from core.constants import ENERGY_TICK_MS, MANA_TICK_MS, MAX_COMBO_POINTS, Ability, Buff
from core.utils import clamp
from effects.base_effect import ActiveBuff


@dataclass
class ResourcePool:
    """A resource bounded by [0, maximum]: energy, rage or mana."""

    current: float
    maximum: float

    @property
    def percent(self) -> float:
        return 100 * self.current / self.maximum if self.maximum > 0 else 0.0

    def gain(self, amount: float) -> float:
        """
        Adds resource, clamped to the pool's bounds.

        Returns:
            float: The amount actually gained.

        """
        before = self.current
        self.current = clamp(self.current + amount, 0, self.maximum)
        return self.current - before

    def can_afford(self, cost: float) -> bool:
        return self.current >= cost

    def spend(self, cost: float) -> bool:
        """Spends the cost if the pool can afford it; never spends partially."""
        if not self.can_afford(cost):
            return False
        self.current -= cost
        return True


@dataclass
class RogueResources:
    """Energy and combo points of a rogue."""

    energy: ResourcePool
    combo_points: int = 0
    next_energy_tick: int = ENERGY_TICK_MS
    seal_fate_ready_at: int = 0
    sword_specialization_ready_at: int = 0

    def add_energy(self, amount: float) -> None:
        self.energy.current = clamp(round(self.energy.current + amount), 0, self.energy.maximum)

    def add_combo_points(self, amount: int = 1) -> None:
        self.combo_points = min(MAX_COMBO_POINTS, self.combo_points + amount)


@dataclass
class WarriorResources:
    """Rage and the warrior's queued, reactive and periodic effects."""

    rage: ResourcePool
    # Heroic Strike or Cleave, replacing the next main hand swing.
    queued_ability: Optional[Ability] = None
    overpower_until: int = 0
    rend_ticks: int = 0
    rend_tick_damage: float = 0.0
    next_rend_tick: int = 0
    next_anger_tick: int = 3000
    bloodrage_ticks: int = 0
    next_bloodrage_tick: int = 0


@dataclass
class CasterResources:
    """Mana and the cast bar of a mage or shaman."""

    mana: ResourcePool
    next_mana_tick: int = MANA_TICK_MS
    casting: Optional[Ability] = None
    cast_end: int = 0

    @property
    def is_casting(self) -> bool:
        return self.casting is not None


@dataclass
class MageResources(CasterResources):
    """Mana, cast bar and the Ignite damage-over-time of a mage."""

    ignite_damage: float = 0.0
    ignite_ticks: int = 0
    next_ignite_tick: int = 0


@dataclass
class ShamanResources(CasterResources):
    """Mana, cast bar and the health of the healed tank."""

    tank_health: float = 0.0
    tank_max_health: float = 0.0

    @property
    def tank_health_percent(self) -> float:
        return 100 * self.tank_health / self.tank_max_health if self.tank_max_health else 0.0

    @property
    def tank_missing_health(self) -> float:
        return max(0.0, self.tank_max_health - self.tank_health)


ResourcePayload = Union[RogueResources, WarriorResources, MageResources, ShamanResources]


@dataclass
class SimulationState:
    """
    Mutable record of one encounter.

    Attributes:
        current_time (int): The simulated clock, in milliseconds.
        global_cooldown_expiry (int): Time at which the global cooldown ends.
        main_hand_next_swing (float): Time of the next main hand swing.
        off_hand_next_swing (float): Time of the next off hand swing.
        buffs (dict[Buff, ActiveBuff]): Buffs currently tracked.
        cooldowns (dict[Ability, int]): Per-ability cooldown expiries.
        resources (ResourcePayload): The archetype-specific payload.

    """

    resources: ResourcePayload
    current_time: int = 0
    global_cooldown_expiry: int = 0
    main_hand_next_swing: float = 0.0
    off_hand_next_swing: float = 0.0
    buffs: dict[Buff, ActiveBuff] = field(default_factory=dict)
    cooldowns: dict[Ability, int] = field(default_factory=dict)

    # ============================================================================
    # BUFFS
    # ============================================================================

    def get_buff(self, buff: Buff) -> Optional[ActiveBuff]:
        """Returns the active buff record, or None if the buff is not active."""
        active = self.buffs.get(buff)
        if active is None or not active.is_active(self.current_time):
            return None
        return active

    def has_buff(self, buff: Buff) -> bool:
        return self.get_buff(buff) is not None

    def buff_stacks(self, buff: Buff) -> int:
        active = self.get_buff(buff)
        return active.stacks if active else 0

    def buff_remaining(self, buff: Buff) -> int:
        active = self.get_buff(buff)
        return active.remaining(self.current_time) if active else 0

    def expired_buffs(self) -> list[ActiveBuff]:
        """Returns the tracked buffs whose expiry has been reached."""
        return [b for b in self.buffs.values() if not b.is_active(self.current_time)]

    # ============================================================================
    # COOLDOWNS
    # ============================================================================

    @property
    def global_cooldown_ready(self) -> bool:
        return self.current_time >= self.global_cooldown_expiry

    def cooldown_ready(self, ability: Ability) -> bool:
        return self.current_time >= self.cooldowns.get(ability, 0)

    def cooldown_remaining(self, ability: Ability) -> int:
        return max(0, self.cooldowns.get(ability, 0) - self.current_time)

    def start_cooldown(self, ability: Ability, duration: int) -> None:
        self.cooldowns[ability] = self.current_time + duration
