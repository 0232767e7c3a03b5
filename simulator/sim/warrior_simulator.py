"""
Warrior simulator module for the simulator.

Rage comes from white damage dealt and is spent on abilities. Heroic
Strike and Cleave are queued and replace the next main hand swing. Execute
becomes available once the target falls below 20% health, which happens
linearly over the fight.

The warrior is always in one stance, tracked as a fight-long stance buff.
Switching stance shares a one second cooldown between the three stances and
keeps only the rage Tactical Mastery allows. A dodged attack opens a five
second window for Overpower.
"""

from random import Random
from typing import Optional, cast

from character.talents import WarriorTalents
from combat.damage import AbilityContext, DamageResult
from combat.warrior_calculator import (
    COOLDOWNS_MS,
    REND_TICK_MS,
    REND_TICKS,
    STANCE_ABILITIES,
    STANCE_COOLDOWN_MS,
    WarriorCalculator,
    rage_from_damage,
)
from core.constants import Ability, AttackType, Buff, CharacterClass, Stance
from effects.base_effect import ActiveBuff

from .base_simulator import BaseSimulator
from .config import SimulationConfig
from .melee import SwingTimers
from .state import ResourcePool, SimulationState, WarriorResources

MAX_RAGE = 100
EXECUTE_THRESHOLD = 20.0
ANGER_MANAGEMENT_TICK_MS = 3000
BLOODRAGE_INSTANT_RAGE = 10
BLOODRAGE_TICKS = 10
BLOODRAGE_TICK_MS = 1000
# Attack speed bonus of Flurry by talent rank.
FLURRY_HASTE = [0.0, 0.10, 0.15, 0.20, 0.25, 0.30]
FLURRY_CHARGES = 3
FLURRY_DURATION_MS = 15000
ENRAGE_CHARGES = 12
ENRAGE_DURATION_MS = 12000
OVERPOWER_WINDOW_MS = 5000
TACTICAL_MASTERY_RAGE_PER_RANK = 5
# Rage levels steering the default rotation.
HEROIC_STRIKE_RAGE_THRESHOLD = 50
BLOODRAGE_RAGE_THRESHOLD = 30

QUEUED_ABILITIES = frozenset({Ability.HEROIC_STRIKE, Ability.CLEAVE})


class WarriorSimulator(BaseSimulator):
    """Time-stepped simulator of the warrior archetype."""

    character_class = CharacterClass.WARRIOR
    abilities = (
        frozenset(
            {
                Ability.BLOODTHIRST,
                Ability.MORTAL_STRIKE,
                Ability.WHIRLWIND,
                Ability.OVERPOWER,
                Ability.REND,
                Ability.EXECUTE,
                Ability.BLOODRAGE,
            }
        )
        | QUEUED_ABILITIES
        | STANCE_ABILITIES
    )
    off_global_cooldown = QUEUED_ABILITIES | {Ability.BLOODRAGE}
    resource_name = "rage"

    calculator: WarriorCalculator
    talents: WarriorTalents

    def __init__(self, config: SimulationConfig, rng: Optional[Random] = None) -> None:
        self.swings = SwingTimers(config.stats)
        super().__init__(config, rng)

    def build_calculator(self) -> WarriorCalculator:
        return WarriorCalculator(
            self.stats,
            self.talents,
            self.config.target.level,
            self.config.target.armor,
            self.rng,
            buffs=self,
        )

    def initialize_state(self) -> SimulationState:
        stance_buff = self.config.setup.stance.buff
        return SimulationState(
            resources=WarriorResources(
                rage=ResourcePool(0, MAX_RAGE), next_anger_tick=ANGER_MANAGEMENT_TICK_MS
            ),
            buffs={stance_buff: ActiveBuff(buff=stance_buff, expiry=self.fight_length_ms)},
        )

    @property
    def resources(self) -> WarriorResources:
        return cast(WarriorResources, self.state.resources)

    @property
    def pool(self) -> ResourcePool:
        return self.resources.rage

    @property
    def stance(self) -> Optional[Stance]:
        for stance in Stance:
            if self.has_buff(stance.buff):
                return stance
        return None

    @property
    def overpower_available(self) -> bool:
        return self.now < self.resources.overpower_until

    @property
    def in_execute_phase(self) -> bool:
        return self.target_health_percent < EXECUTE_THRESHOLD

    @property
    def attack_haste(self) -> float:
        """Returns the attack speed multiplier, gear haste and Flurry."""
        haste = self.stats.haste_multiplier
        if self.has_buff(Buff.FLURRY):
            haste *= 1 + FLURRY_HASTE[self.talents.flurry]
        return haste

    # ============================================================================
    # PHASES
    # ============================================================================

    def regenerate_resources(self) -> None:
        resources = self.resources
        if self.talents.anger_management and self.now >= resources.next_anger_tick:
            resources.rage.gain(1)
            resources.next_anger_tick += ANGER_MANAGEMENT_TICK_MS
        if resources.bloodrage_ticks > 0 and self.now >= resources.next_bloodrage_tick:
            resources.rage.gain(1)
            resources.bloodrage_ticks -= 1
            resources.next_bloodrage_tick += BLOODRAGE_TICK_MS

    def process_attacks(self) -> None:
        self.tick_rend()
        for off_hand in self.swings.due(self.state):
            # Swings consume the charges of the haste they were scheduled with.
            self.consume_charge(Buff.FLURRY)
            self.consume_charge(Buff.ENRAGE)
            if not off_hand and self.resources.queued_ability is not None:
                result = self.swing_queued_ability()
            else:
                result = self.swing(off_hand)
            self.swings.reschedule(self.state, off_hand, self.attack_haste)
            if result.is_hit:
                self.swings.roll_procs(self, off_hand, self.rng)

    def swing(self, off_hand: bool) -> DamageResult:
        """Resolves a white swing and converts its damage into rage."""
        result = self.calculator.auto_attack(off_hand)
        generated = 0.0
        if result.amount > 0:
            generated += self.resources.rage.gain(rage_from_damage(result.amount))
            rank = self.talents.unbridled_wrath
            if rank and self.rng.random() < rank * 0.08:
                generated += self.resources.rage.gain(1)
        self.log_damage(result, generated)
        self.on_outcome(result)
        return result

    def swing_queued_ability(self) -> DamageResult:
        """Replaces the main hand swing with the queued Heroic Strike or Cleave."""
        ability = self.resources.queued_ability
        self.resources.queued_ability = None
        if ability is None or not self.resources.rage.spend(self.calculator.rage_cost(ability)):
            return self.swing(False)
        result = self.calculator.compute(ability)
        self.log_damage(result)
        self.on_outcome(result)
        return result

    def on_outcome(self, result: DamageResult) -> None:
        """Reacts to an attack's outcome: dodges open Overpower, crits start Flurry and Enrage."""
        if result.outcome == AttackType.DODGE:
            self.resources.overpower_until = self.now + OVERPOWER_WINDOW_MS
        if not result.is_crit:
            return
        if self.talents.flurry:
            self.activate_buff(Buff.FLURRY, FLURRY_DURATION_MS, charges=FLURRY_CHARGES)
        if self.talents.enrage:
            self.activate_buff(Buff.ENRAGE, ENRAGE_DURATION_MS, charges=ENRAGE_CHARGES)

    def tick_rend(self) -> None:
        """Deals one Rend tick if one is due."""
        resources = self.resources
        if resources.rend_ticks == 0 or self.now < resources.next_rend_tick:
            return
        resources.rend_ticks -= 1
        resources.next_rend_tick += REND_TICK_MS
        damage = resources.rend_tick_damage
        self.log_damage(DamageResult(Ability.REND, AttackType.HIT, damage, round(damage)))

    def on_buff_expired(self, buff: ActiveBuff) -> None:
        if buff.buff == Buff.REND:
            self.resources.rend_ticks = 0

    # ============================================================================
    # ABILITIES
    # ============================================================================

    def use_ability(self, ability: Ability) -> bool:
        if not self.is_ability_ready(ability) or not self.calculator.knows(ability):
            return False
        if ability in STANCE_ABILITIES:
            return self.switch_stance(Stance(ability.value))
        if ability == Ability.BLOODRAGE:
            return self.use_bloodrage()
        if ability in QUEUED_ABILITIES:
            return self.queue_ability(ability)
        if ability == Ability.EXECUTE:
            return self.use_execute()
        if ability == Ability.REND:
            return self.use_rend()
        if not self.stance_allows(ability):
            return False
        if ability == Ability.OVERPOWER and not self.overpower_available:
            return False
        if not self.resources.rage.spend(self.calculator.rage_cost(ability)):
            return False
        result = self.calculator.compute(ability)
        self.state.start_cooldown(ability, COOLDOWNS_MS[ability])
        if ability == Ability.OVERPOWER:
            self.resources.overpower_until = 0
        self.trigger_global_cooldown()
        self.log_damage(result)
        self.on_outcome(result)
        return True

    def stance_allows(self, ability: Ability) -> bool:
        """Returns True if the current stance permits the ability."""
        stance = self.stance
        if ability == Ability.WHIRLWIND:
            return stance == Stance.BERSERKER
        if ability == Ability.OVERPOWER:
            return stance == Stance.BATTLE
        if ability == Ability.REND:
            return stance != Stance.BERSERKER
        if ability == Ability.EXECUTE:
            return stance != Stance.DEFENSIVE
        return True

    def switch_stance(self, stance: Stance) -> bool:
        """
        Switches to another stance.

        Rage above what Tactical Mastery retains is lost. The switch starts
        the shared stance cooldown and the global cooldown.

        Args:
            stance (Stance): The stance to switch to.

        Returns:
            bool: False if the warrior is already in that stance.

        """
        current = self.stance
        if current == stance:
            return False
        rage = self.resources.rage
        retained = self.talents.tactical_mastery * TACTICAL_MASTERY_RAGE_PER_RANK
        rage.current = min(rage.current, retained)
        if current is not None:
            self.drop_buff(current.buff)
        self.activate_buff(stance.buff, max(0, self.fight_length_ms - self.now))
        for ability in STANCE_ABILITIES:
            self.state.start_cooldown(ability, STANCE_COOLDOWN_MS)
        self.trigger_global_cooldown()
        return True

    def use_execute(self) -> bool:
        if not self.in_execute_phase or not self.stance_allows(Ability.EXECUTE):
            return False
        rage = self.resources.rage
        cost = self.calculator.rage_cost(Ability.EXECUTE)
        if not rage.can_afford(cost):
            return False
        extra_rage = rage.current - cost
        rage.spend(rage.current)
        result = self.calculator.compute(Ability.EXECUTE, AbilityContext(extra_rage=extra_rage))
        self.trigger_global_cooldown()
        self.log_damage(result)
        self.on_outcome(result)
        return True

    def use_rend(self) -> bool:
        """Applies Rend; a landed Rend bleeds for seven ticks, ignoring armor."""
        if not self.stance_allows(Ability.REND):
            return False
        if not self.resources.rage.spend(self.calculator.rage_cost(Ability.REND)):
            return False
        self.trigger_global_cooldown()
        result = self.calculator.compute(Ability.REND)
        if not result.is_hit:
            self.log_damage(result)
            self.on_outcome(result)
            return True
        resources = self.resources
        resources.rend_ticks = REND_TICKS
        resources.rend_tick_damage = self.calculator.rend_tick_damage()
        resources.next_rend_tick = self.now + REND_TICK_MS
        self.activate_buff(Buff.REND, REND_TICKS * REND_TICK_MS)
        return True

    def queue_ability(self, ability: Ability) -> bool:
        """Queues Heroic Strike or Cleave; its rage is spent when the swing lands."""
        if self.resources.queued_ability is not None:
            return False
        if not self.resources.rage.can_afford(self.calculator.rage_cost(ability)):
            return False
        self.resources.queued_ability = ability
        return True

    def use_bloodrage(self) -> bool:
        resources = self.resources
        resources.rage.gain(BLOODRAGE_INSTANT_RAGE)
        resources.bloodrage_ticks = BLOODRAGE_TICKS
        resources.next_bloodrage_tick = self.now + BLOODRAGE_TICK_MS
        self.state.start_cooldown(Ability.BLOODRAGE, COOLDOWNS_MS[Ability.BLOODRAGE])
        self.activate_buff(Buff.BLOODRAGE, BLOODRAGE_TICKS * BLOODRAGE_TICK_MS)
        return True

    # ============================================================================
    # DEFAULT ROTATION
    # ============================================================================

    def run_default_rotation(self) -> bool:
        if self.in_execute_phase:
            return self.use_ability(Ability.EXECUTE)
        used = False
        if self.resources.rage.current < BLOODRAGE_RAGE_THRESHOLD:
            used = self.use_ability(Ability.BLOODRAGE)
        for ability in (
            Ability.BLOODTHIRST,
            Ability.MORTAL_STRIKE,
            Ability.WHIRLWIND,
            Ability.OVERPOWER,
        ):
            if self.use_ability(ability):
                return True
        if self.resources.rage.current > HEROIC_STRIKE_RAGE_THRESHOLD:
            used = self.use_ability(Ability.HEROIC_STRIKE) or used
        return used
