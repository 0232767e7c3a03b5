"""
Rogue simulator module for the simulator.

Energy ticks every two seconds, builders add combo points and finishers
spend them. Both hands swing on their own timers, sped up by Slice and
Dice.
"""

from random import Random
from typing import Optional, cast

from character.talents import RogueTalents
from combat.damage import AbilityContext, DamageResult
from combat.rogue_calculator import SLICE_AND_DICE_HASTE, RogueCalculator
from core.constants import ENERGY_TICK_MS, Ability, Buff, CharacterClass
from items.weapon import Weapon

from .base_simulator import BaseSimulator
from .config import SimulationConfig
from .melee import SwingTimers, proc_chance
from .state import ResourcePool, RogueResources, SimulationState

MAX_ENERGY = 100
VIGOR_ENERGY = 10
ENERGY_PER_TICK = 20
# Share of the energy cost refunded when a builder or finisher is avoided.
AVOIDED_REFUND = 0.8
COLD_BLOOD_COOLDOWN_MS = 180000
SEAL_FATE_COOLDOWN_MS = 500
SWORD_SPECIALIZATION_COOLDOWN_MS = 200
RELENTLESS_STRIKES_ENERGY = 25
DARKMANTLE_PPM = 1.0
DARKMANTLE_ENERGY = 35

BUILDERS = frozenset({Ability.SINISTER_STRIKE, Ability.BACKSTAB, Ability.HEMORRHAGE})


class RogueSimulator(BaseSimulator):
    """Time-stepped simulator of the rogue archetype."""

    character_class = CharacterClass.ROGUE
    abilities = BUILDERS | {Ability.EVISCERATE, Ability.SLICE_AND_DICE, Ability.COLD_BLOOD}
    off_global_cooldown = frozenset({Ability.COLD_BLOOD})
    resource_name = "energy"

    calculator: RogueCalculator
    talents: RogueTalents

    def __init__(self, config: SimulationConfig, rng: Optional[Random] = None) -> None:
        self.swings = SwingTimers(config.stats)
        super().__init__(config, rng)

    def build_calculator(self) -> RogueCalculator:
        return RogueCalculator(
            self.stats,
            self.talents,
            self.config.target.level,
            self.config.target.armor,
            self.rng,
            buffs=self,
        )

    def initialize_state(self) -> SimulationState:
        max_energy = MAX_ENERGY + (VIGOR_ENERGY if self.talents.vigor else 0)
        return SimulationState(
            resources=RogueResources(energy=ResourcePool(max_energy, max_energy))
        )

    @property
    def resources(self) -> RogueResources:
        return cast(RogueResources, self.state.resources)

    @property
    def pool(self) -> ResourcePool:
        return self.resources.energy

    @property
    def combo_points(self) -> int:
        return self.resources.combo_points

    @property
    def attack_haste(self) -> float:
        """Returns the attack speed multiplier, gear haste and Slice and Dice."""
        haste = self.stats.haste_multiplier
        if self.has_buff(Buff.SLICE_AND_DICE):
            haste *= SLICE_AND_DICE_HASTE
        return haste

    # ============================================================================
    # PHASES
    # ============================================================================

    def regenerate_resources(self) -> None:
        if self.now >= self.resources.next_energy_tick:
            self.resources.add_energy(ENERGY_PER_TICK)
            self.resources.next_energy_tick += ENERGY_TICK_MS

    def process_attacks(self) -> None:
        for off_hand in self.swings.due(self.state):
            result = self.calculator.auto_attack(off_hand)
            self.log_damage(result)
            self.swings.reschedule(self.state, off_hand, self.attack_haste)
            if result.is_hit:
                self.on_landed(off_hand)
                self.roll_darkmantle(off_hand)

    def on_landed(self, off_hand: bool = False) -> None:
        """Rolls the weapon procs of a landed swing or strike."""
        weapon = self.stats.weapon(off_hand)
        if weapon is None:
            return
        self.swings.roll_procs(self, off_hand, self.rng)
        self.roll_sword_specialization(weapon)

    def roll_darkmantle(self, off_hand: bool) -> None:
        """Rolls the Darkmantle set bonus of a landed white swing."""
        weapon = self.stats.weapon(off_hand)
        if not self.config.setup.darkmantle_4 or weapon is None:
            return
        if self.rng.random() >= proc_chance(weapon, DARKMANTLE_PPM):
            return
        self.log_proc("Darkmantle", f"+{DARKMANTLE_ENERGY} energy")
        self.resources.add_energy(DARKMANTLE_ENERGY)

    def roll_sword_specialization(self, weapon: Weapon) -> None:
        """Rolls Sword Specialization, which grants an immediate extra swing."""
        rank = self.talents.sword_specialization
        if rank == 0 or not weapon.weapon_type.is_sword:
            return
        if self.now < self.resources.sword_specialization_ready_at:
            return
        if self.rng.random() >= rank * 0.01:
            return
        self.resources.sword_specialization_ready_at = self.now + SWORD_SPECIALIZATION_COOLDOWN_MS
        self.log_proc("Sword Specialization")
        result = self.calculator.compute(Ability.EXTRA_ATTACK)
        self.log_damage(result)
        if result.is_hit:
            self.swings.roll_procs(self, False, self.rng)

    # ============================================================================
    # ABILITIES
    # ============================================================================

    def use_ability(self, ability: Ability) -> bool:
        if not self.is_ability_ready(ability):
            return False
        if ability == Ability.COLD_BLOOD:
            return self.use_cold_blood()
        if ability == Ability.SLICE_AND_DICE:
            return self.use_slice_and_dice()
        if ability == Ability.EVISCERATE:
            return self.use_eviscerate()
        return self.use_builder(ability)

    def use_builder(self, ability: Ability) -> bool:
        """Uses a combo point builder, refunding most of its cost if avoided."""
        if ability == Ability.BACKSTAB and not self.calculator.can_backstab:
            return False
        if ability == Ability.HEMORRHAGE and not self.talents.hemorrhage:
            return False
        cost = self.calculator.energy_cost(ability)
        if not self.resources.energy.spend(cost):
            return False
        result = self.calculator.compute(ability)
        self.trigger_global_cooldown()
        self.drop_buff(Buff.COLD_BLOOD)
        generated = 0
        if result.is_avoided:
            self.resources.add_energy(cost * AVOIDED_REFUND)
        elif result.amount > 0:
            generated = self.gain_combo_points(1 + self.roll_seal_fate(result))
        self.log_damage(result, generated)
        if result.is_hit:
            self.on_landed()
        return True

    def use_eviscerate(self) -> bool:
        combo_points = self.resources.combo_points
        if combo_points == 0:
            return False
        cost = self.calculator.energy_cost(Ability.EVISCERATE)
        if not self.resources.energy.spend(cost):
            return False
        result = self.calculator.compute(
            Ability.EVISCERATE, AbilityContext(combo_points=combo_points)
        )
        self.trigger_global_cooldown()
        self.drop_buff(Buff.COLD_BLOOD)
        self.log_damage(result)
        if result.is_avoided:
            self.resources.add_energy(cost * AVOIDED_REFUND)
            return True
        self.finish(combo_points)
        if result.is_hit:
            self.on_landed()
        return True

    def use_slice_and_dice(self) -> bool:
        combo_points = self.resources.combo_points
        if combo_points == 0:
            return False
        if not self.resources.energy.spend(self.calculator.energy_cost(Ability.SLICE_AND_DICE)):
            return False
        self.trigger_global_cooldown()
        self.activate_buff(
            Buff.SLICE_AND_DICE, self.calculator.slice_and_dice_duration_ms(combo_points)
        )
        self.finish(combo_points)
        return True

    def use_cold_blood(self) -> bool:
        if not self.talents.cold_blood:
            return False
        self.state.start_cooldown(Ability.COLD_BLOOD, COLD_BLOOD_COOLDOWN_MS)
        # Lasts until the next strike consumes it.
        self.activate_buff(Buff.COLD_BLOOD, self.fight_length_ms)
        return True

    # ============================================================================
    # COMBO POINTS
    # ============================================================================

    def gain_combo_points(self, amount: int) -> int:
        """Adds combo points up to the cap and returns how many were gained."""
        before = self.resources.combo_points
        self.resources.add_combo_points(amount)
        return self.resources.combo_points - before

    def roll_seal_fate(self, result: DamageResult) -> int:
        """Returns 1 if Seal Fate grants an extra combo point for the crit."""
        rank = self.talents.seal_fate
        if rank == 0 or not result.is_crit:
            return 0
        if self.now < self.resources.seal_fate_ready_at:
            return 0
        if self.rng.random() >= rank * 0.2:
            return 0
        self.resources.seal_fate_ready_at = self.now + SEAL_FATE_COOLDOWN_MS
        self.log_proc("Seal Fate")
        return 1

    def finish(self, combo_points: int) -> None:
        """Spends the combo points of a finisher and rolls finisher talents."""
        self.resources.combo_points = 0
        if self.talents.relentless_strikes and self.rng.random() < combo_points * 0.2:
            self.resources.add_energy(RELENTLESS_STRIKES_ENERGY)
            self.log_proc("Relentless Strikes")
        if self.talents.ruthlessness and self.rng.random() < self.talents.ruthlessness * 0.2:
            self.gain_combo_points(1)
            self.log_proc("Ruthlessness")

    # ============================================================================
    # DEFAULT ROTATION
    # ============================================================================

    def run_default_rotation(self) -> bool:
        combo_points = self.resources.combo_points
        slice_and_dice = self.has_buff(Buff.SLICE_AND_DICE)
        if combo_points >= 5:
            if not slice_and_dice:
                return self.use_ability(Ability.SLICE_AND_DICE)
            if self.talents.cold_blood:
                self.use_ability(Ability.COLD_BLOOD)
            return self.use_ability(Ability.EVISCERATE)
        if combo_points >= 1 and not slice_and_dice:
            return self.use_ability(Ability.SLICE_AND_DICE)
        if self.talents.hemorrhage:
            return self.use_ability(Ability.HEMORRHAGE)
        if self.calculator.can_backstab:
            return self.use_ability(Ability.BACKSTAB)
        return self.use_ability(Ability.SINISTER_STRIKE)
