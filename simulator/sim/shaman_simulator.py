"""
Shaman simulator module for the simulator.

Heals a single tank that loses health at a fixed rate. Only healing that
restores missing health counts as output; the remainder is logged as
overhealing. Rotation health guards read the tank's health.
"""

from typing import cast

from character.talents import ShamanTalents
from combat.damage import AbilityContext
from combat.shaman_calculator import (
    CHAIN_HEAL_JUMPS,
    HEALS,
    NATURES_SWIFTNESS_COOLDOWN_MS,
    ShamanCalculator,
)
from core.constants import Ability, Buff, CharacterClass

from .base_simulator import BaseSimulator
from .caster import cast_global_cooldown, finish_cast, regenerate_mana, start_cast
from .state import ResourcePool, ShamanResources, SimulationState

# Tank health, in percent, below which the default rotation escalates.
EMERGENCY_HEALTH = 40.0
LOW_HEALTH = 70.0
# Share of maximum health a tank is reset to when it would die.
TANK_RESET_SHARE = 0.5


class ShamanSimulator(BaseSimulator):
    """Time-stepped simulator of the shaman archetype."""

    character_class = CharacterClass.SHAMAN
    abilities = frozenset(HEALS) | {Ability.NATURES_SWIFTNESS}
    off_global_cooldown = frozenset({Ability.NATURES_SWIFTNESS})
    resource_name = "mana"

    calculator: ShamanCalculator
    talents: ShamanTalents

    def build_calculator(self) -> ShamanCalculator:
        return ShamanCalculator(self.stats, self.talents, self.rng, buffs=self)

    def initialize_state(self) -> SimulationState:
        max_mana = self.calculator.max_mana
        max_health = self.config.target.max_health
        return SimulationState(
            resources=ShamanResources(
                mana=ResourcePool(max_mana, max_mana),
                tank_health=max_health,
                tank_max_health=max_health,
            )
        )

    @property
    def resources(self) -> ShamanResources:
        return cast(ShamanResources, self.state.resources)

    @property
    def pool(self) -> ResourcePool:
        return self.resources.mana

    @property
    def target_health_percent(self) -> float:
        return self.resources.tank_health_percent

    def can_act(self) -> bool:
        return super().can_act() and not self.resources.is_casting

    # ============================================================================
    # PHASES
    # ============================================================================

    def regenerate_resources(self) -> None:
        regenerate_mana(self.resources, self.now, self.calculator.mana_per_tick)

    def process_attacks(self) -> None:
        self.damage_tank()
        finish_cast(self.resources, self.now, self.land_heal)

    def damage_tank(self) -> None:
        """Applies one step of incoming damage to the tank."""
        resources = self.resources
        resources.tank_health -= self.config.target.incoming_dps * self.time_step_ms / 1000
        if resources.tank_health <= 0:
            resources.tank_health = resources.tank_max_health * TANK_RESET_SHARE
            self.log_proc("Tank reset", f"{resources.tank_health:.0f} HP")

    # ============================================================================
    # ABILITIES
    # ============================================================================

    def use_ability(self, ability: Ability) -> bool:
        if not self.is_ability_ready(ability):
            return False
        if ability == Ability.NATURES_SWIFTNESS:
            return self.use_natures_swiftness()
        cost = self.calculator.mana_cost(ability)
        if not self.resources.mana.spend(cost):
            return False
        cast_time = self.calculator.cast_time_ms(ability)
        if self.has_buff(Buff.NATURES_SWIFTNESS):
            self.drop_buff(Buff.NATURES_SWIFTNESS)
        self.trigger_global_cooldown(cast_global_cooldown(cast_time))
        start_cast(self.resources, self.now, ability, cast_time, self.land_heal)
        return True

    def use_natures_swiftness(self) -> bool:
        if not self.talents.natures_swiftness or self.has_buff(Buff.NATURES_SWIFTNESS):
            return False
        self.state.start_cooldown(Ability.NATURES_SWIFTNESS, NATURES_SWIFTNESS_COOLDOWN_MS)
        # Lasts until the next nature spell consumes it.
        self.activate_buff(Buff.NATURES_SWIFTNESS, self.fight_length_ms)
        return True

    def land_heal(self, ability: Ability) -> None:
        """
        Lands a completed heal on the tank.

        Every Chain Heal jump lands on the same tank, each one weaker than
        the last, and is logged with its jump index.
        """
        jumps = CHAIN_HEAL_JUMPS if ability == Ability.CHAIN_HEAL else 1
        resources = self.resources
        for jump_index in range(jumps):
            result = self.calculator.compute(
                ability,
                AbilityContext(
                    missing_health=resources.tank_missing_health, jump_index=jump_index
                ),
            )
            resources.tank_health = min(
                resources.tank_max_health, resources.tank_health + result.amount
            )
            self.log_heal(result, jump_index)

    # ============================================================================
    # DEFAULT ROTATION
    # ============================================================================

    def run_default_rotation(self) -> bool:
        health = self.target_health_percent
        if health < EMERGENCY_HEALTH:
            used = self.use_ability(Ability.NATURES_SWIFTNESS)
            return self.use_ability(Ability.HEALING_WAVE) or used
        if health < LOW_HEALTH:
            if self.rng.random() < 0.5:
                return self.use_ability(Ability.CHAIN_HEAL)
            return self.use_ability(Ability.LESSER_HEALING_WAVE)
        return self.use_ability(Ability.LESSER_HEALING_WAVE)
