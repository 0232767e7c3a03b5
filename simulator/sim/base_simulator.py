"""
Base simulator module for the simulator.

Defines the time-stepped state machine shared by every archetype. One call
to ``simulate`` runs a whole encounter: the clock advances in fixed steps,
and every step runs, in order, resource regeneration, attacks or cast
completion, the buff expiry sweep, and the rotation.
"""

from abc import ABC, abstractmethod
from random import Random
from typing import ClassVar, Optional

from catchery import log_warning
from combat.damage import DamageCalculator, DamageResult
from core.constants import GLOBAL_COOLDOWN_MS, Ability, Buff, CharacterClass, Stance
from core.error_handling import ERROR_HANDLER
from effects.base_effect import ActiveBuff
from effects.event_system import (
    AnyEvent,
    BuffDropEvent,
    BuffGainEvent,
    DamageEvent,
    HealEvent,
    ProcEvent,
)

from .config import SimulationConfig
from .result import SimulationResult
from .rotation import RotationStep, compile_rotation
from .state import ResourcePool, SimulationState


class BaseSimulator(ABC):
    """
    Common interface of the per-archetype simulators.

    Subclasses own their calculator and resource payload and implement the
    archetype-specific phases. The simulator itself is the buff view its
    calculator reads, and the context its rotation predicates read.
    """

    character_class: ClassVar[CharacterClass]
    # Abilities a rotation line may name.
    abilities: ClassVar[frozenset[Ability]] = frozenset()
    # Abilities that neither need nor trigger the global cooldown.
    off_global_cooldown: ClassVar[frozenset[Ability]] = frozenset()
    resource_name: ClassVar[str] = ""

    def __init__(self, config: SimulationConfig, rng: Optional[Random] = None) -> None:
        """
        Builds the simulator and compiles its rotation.

        Args:
            config (SimulationConfig): The run's configuration.
            rng (Optional[Random]): The random generator; a new one seeded
                from the configuration when omitted.

        Raises:
            ConfigurationError: If the configuration targets another archetype
                or the rotation is invalid.

        """
        if config.character_class != self.character_class:
            raise ERROR_HANDLER.configuration_error(
                f"{type(self).__name__} cannot simulate a {config.character_class.display_name}",
                {"class": config.character_class.value},
            )
        self.config = config
        self.stats = config.stats
        self.talents = config.class_talents
        self.rng = rng if rng is not None else Random(config.seed)
        self.fight_length_ms = round(config.fight_length * 1000)
        self.time_step_ms = config.time_step_ms
        self.rotation: list[RotationStep] = compile_rotation(
            config.rotation, self.abilities, self.resource_name
        )
        self.rotation_index = 0
        self.events: list[AnyEvent] = []
        self.calculator = self.build_calculator()
        self.state = self.initialize_state()

    # ============================================================================
    # ARCHETYPE HOOKS
    # ============================================================================

    @abstractmethod
    def build_calculator(self) -> DamageCalculator:
        """Builds the calculator, reading live buffs from this simulator."""

    @abstractmethod
    def initialize_state(self) -> SimulationState:
        """Builds a fresh state for a new iteration."""

    @abstractmethod
    def process_attacks(self) -> None:
        """Resolves auto-attacks or completes the current cast."""

    @abstractmethod
    def use_ability(self, ability: Ability) -> bool:
        """
        Attempts an ability.

        Returns:
            bool: True if the ability was used. False is a normal outcome,
            meaning the ability is not eligible at this time.

        """

    @abstractmethod
    def run_default_rotation(self) -> bool:
        """Runs the archetype's built-in priority list."""

    def regenerate_resources(self) -> None:
        """Grants resource ticks whose time has come."""

    def on_buff_expired(self, buff: ActiveBuff) -> None:
        """Applies side effects of a buff running out."""

    @property
    def pool(self) -> ResourcePool:
        """Returns the archetype's main resource pool."""
        raise NotImplementedError

    # ============================================================================
    # BUFF VIEW AND ROTATION CONTEXT
    # ============================================================================

    @property
    def now(self) -> int:
        return self.state.current_time

    def has_buff(self, buff: Buff) -> bool:
        return self.state.has_buff(buff)

    def buff_stacks(self, buff: Buff) -> int:
        return self.state.buff_stacks(buff)

    def cooldown_ready(self, ability: Ability) -> bool:
        return self.state.cooldown_ready(ability)

    @property
    def resource(self) -> float:
        return self.pool.current

    @property
    def resource_percent(self) -> float:
        return self.pool.percent

    @property
    def combo_points(self) -> int:
        return 0

    @property
    def target_health_percent(self) -> float:
        """Returns the target's health, falling linearly over the fight."""
        return max(0.0, 100 * (1 - self.now / self.fight_length_ms))

    @property
    def stance(self) -> Optional[Stance]:
        return None

    @property
    def overpower_available(self) -> bool:
        return False

    # ============================================================================
    # READINESS
    # ============================================================================

    def can_act(self) -> bool:
        """Returns True if the rotation may run at the current step."""
        return self.state.global_cooldown_ready

    def is_ability_ready(self, ability: Ability) -> bool:
        """
        Returns True if the global cooldown and the ability's own cooldown
        have both elapsed. Resource checks are added by each archetype.
        """
        if ability not in self.off_global_cooldown and not self.state.global_cooldown_ready:
            return False
        return self.state.cooldown_ready(ability)

    def trigger_global_cooldown(self, duration: int = GLOBAL_COOLDOWN_MS) -> None:
        self.state.global_cooldown_expiry = self.now + duration

    # ============================================================================
    # BUFFS
    # ============================================================================

    def activate_buff(
        self,
        buff: Buff,
        duration: int,
        stacks: int = 1,
        charges: Optional[int] = None,
    ) -> ActiveBuff:
        """
        Starts a buff, or refreshes it if it is already tracked.

        Args:
            buff (Buff): The buff to start.
            duration (int): Its duration, in milliseconds.
            stacks (int): The stack count to set.
            charges (Optional[int]): Uses before the buff is consumed.

        Returns:
            ActiveBuff: The tracked buff record.

        """
        active = self.state.buffs.get(buff)
        if active is None:
            active = ActiveBuff(
                buff=buff, expiry=self.now + duration, stacks=stacks, charges=charges
            )
            self.state.buffs[buff] = active
        else:
            active.refresh(self.now, duration)
            active.stacks = stacks
            active.charges = charges
        self.events.append(BuffGainEvent(timestamp=self.now, buff=buff, duration=duration))
        return active

    def drop_buff(self, buff: Buff) -> None:
        """Removes a buff before its expiry, e.g. when it is consumed."""
        if self.state.buffs.pop(buff, None) is not None:
            self.events.append(BuffDropEvent(timestamp=self.now, buff=buff))

    def consume_charge(self, buff: Buff) -> None:
        """Uses one charge of a buff, dropping it when no charge is left."""
        active = self.state.get_buff(buff)
        if active is not None and active.consume_charge():
            self.drop_buff(buff)

    def expire_buffs(self) -> None:
        """Drops every buff whose expiry has been reached."""
        for active in self.state.expired_buffs():
            del self.state.buffs[active.buff]
            self.events.append(BuffDropEvent(timestamp=self.now, buff=active.buff))
            self.on_buff_expired(active)

    # ============================================================================
    # EVENT LOG
    # ============================================================================

    def log_damage(self, result: DamageResult, resource_generated: float = 0.0) -> DamageEvent:
        event = DamageEvent(
            timestamp=self.now,
            ability=result.ability,
            amount=result.amount,
            outcome=result.outcome,
            resource_generated=resource_generated,
            white_damage=result.ability.is_white_damage,
        )
        self.events.append(event)
        return event

    def log_heal(self, result: DamageResult, jump_index: int = 0) -> HealEvent:
        event = HealEvent(
            timestamp=self.now,
            ability=result.ability,
            amount=result.amount,
            overhealing=result.overhealing,
            outcome=result.outcome,
            jump_index=jump_index,
        )
        self.events.append(event)
        return event

    def log_proc(self, name: str, detail: str = "") -> None:
        self.events.append(ProcEvent(timestamp=self.now, name=name, detail=detail))

    # ============================================================================
    # MAIN LOOP
    # ============================================================================

    def evaluate_rotation(self) -> bool:
        """
        Attempts the configured rotation, or the default one.

        Rotation lines are walked cyclically, starting after the last line
        tried, until one ability is used or every line has been tried once.

        Returns:
            bool: True if an ability was used.

        """
        if not self.rotation:
            return self.run_default_rotation()
        start = self.rotation_index
        while True:
            step = self.rotation[self.rotation_index]
            ability = step.select(self)
            used = ability is not None and self.use_ability(ability)
            self.rotation_index = (self.rotation_index + 1) % len(self.rotation)
            if used or self.rotation_index == start:
                return used

    def advance_step(self) -> None:
        """Runs the five phases of one time step, in order."""
        self.regenerate_resources()
        self.process_attacks()
        self.expire_buffs()
        if self.can_act():
            self.evaluate_rotation()
        self.state.current_time += self.time_step_ms

    def reset(self) -> None:
        """Prepares a fresh iteration."""
        self.state = self.initialize_state()
        self.events = []
        self.rotation_index = 0

    def simulate(self) -> SimulationResult:
        """
        Runs one full encounter.

        Returns:
            SimulationResult: The iteration's result, reduced from its events.

        """
        self.reset()
        while self.state.current_time < self.fight_length_ms:
            self.advance_step()
        result = SimulationResult.from_events(
            self.events, self.config.fight_length, self.config.is_healer
        )
        if result.total_output == 0:
            log_warning(
                "Simulation produced no output",
                {"class": self.character_class.value, "fight_length": self.config.fight_length},
            )
        return result
