"""
Mage simulator module for the simulator.

Spells are cast one at a time from a mana pool. Fire crits feed Ignite,
consume Combustion stacks and refund mana through Master of Elements;
Scorch stacks the Improved Scorch debuff.
"""

from typing import cast

from character.talents import MageTalents
from combat.damage import DamageResult
from combat.mage_calculator import (
    ARCANE_POWER_DURATION_MS,
    BUFF_COOLDOWNS_MS,
    COMBUSTION_CHARGES,
    IGNITE_DURATION_MS,
    IGNITE_TICK_MS,
    IMPROVED_SCORCH_DURATION_MS,
    IMPROVED_SCORCH_MAX_STACKS,
    SPELLS,
    MageCalculator,
)
from core.constants import Ability, AttackType, Buff, CharacterClass, SpellSchool
from effects.base_effect import ActiveBuff

from .base_simulator import BaseSimulator
from .caster import cast_global_cooldown, finish_cast, regenerate_mana, start_cast
from .state import MageResources, ResourcePool, SimulationState

# Share of a fire crit's damage added to Ignite, per talent rank.
IGNITE_SHARE_PER_RANK = 0.08
IGNITE_TICKS = IGNITE_DURATION_MS // IGNITE_TICK_MS
IMPROVED_SCORCH_CHANCE_PER_RANK = 0.33
CLEARCAST_CHANCE_PER_RANK = 0.02
MASTER_OF_ELEMENTS_REFUND_PER_RANK = 0.1


class MageSimulator(BaseSimulator):
    """Time-stepped simulator of the mage archetype."""

    character_class = CharacterClass.MAGE
    abilities = frozenset(SPELLS) | frozenset(BUFF_COOLDOWNS_MS)
    off_global_cooldown = frozenset(BUFF_COOLDOWNS_MS)
    resource_name = "mana"

    calculator: MageCalculator
    talents: MageTalents

    def build_calculator(self) -> MageCalculator:
        return MageCalculator(
            self.stats, self.talents, self.config.target.level, self.rng, buffs=self
        )

    def initialize_state(self) -> SimulationState:
        max_mana = self.calculator.max_mana
        state = SimulationState(resources=MageResources(mana=ResourcePool(max_mana, max_mana)))
        if self.config.setup.mage_armor:
            state.buffs[Buff.MAGE_ARMOR] = ActiveBuff(
                buff=Buff.MAGE_ARMOR, expiry=self.fight_length_ms
            )
        return state

    @property
    def resources(self) -> MageResources:
        return cast(MageResources, self.state.resources)

    @property
    def pool(self) -> ResourcePool:
        return self.resources.mana

    def can_act(self) -> bool:
        return super().can_act() and not self.resources.is_casting

    # ============================================================================
    # PHASES
    # ============================================================================

    def regenerate_resources(self) -> None:
        if self.resources.is_casting:
            amount = self.calculator.mana_per_tick_while_casting()
        else:
            amount = self.calculator.mana_per_tick
        regenerate_mana(self.resources, self.now, amount)

    def process_attacks(self) -> None:
        self.tick_ignite()
        finish_cast(self.resources, self.now, self.land_spell)

    def tick_ignite(self) -> None:
        """Deals one Ignite tick from the remaining damage pool."""
        resources = self.resources
        if resources.ignite_ticks == 0 or self.now < resources.next_ignite_tick:
            return
        damage = resources.ignite_damage / resources.ignite_ticks
        resources.ignite_damage -= damage
        resources.ignite_ticks -= 1
        resources.next_ignite_tick += IGNITE_TICK_MS
        self.log_damage(DamageResult(Ability.IGNITE, AttackType.HIT, damage, round(damage)))

    def on_buff_expired(self, buff: ActiveBuff) -> None:
        if buff.buff == Buff.IGNITE:
            self.resources.ignite_damage = 0.0
            self.resources.ignite_ticks = 0

    # ============================================================================
    # ABILITIES
    # ============================================================================

    def use_ability(self, ability: Ability) -> bool:
        if not self.calculator.knows(ability) or not self.is_ability_ready(ability):
            return False
        if ability in BUFF_COOLDOWNS_MS:
            return self.use_cooldown(ability)
        cost = self.calculator.mana_cost(ability)
        if not self.resources.mana.spend(cost):
            return False
        cast_time = self.calculator.cast_time_ms(ability)
        if self.has_buff(Buff.CLEARCAST):
            self.drop_buff(Buff.CLEARCAST)
        if SPELLS[ability].cast_time_ms > 0 and self.has_buff(Buff.PRESENCE_OF_MIND):
            self.drop_buff(Buff.PRESENCE_OF_MIND)
        if SPELLS[ability].cooldown_ms:
            self.state.start_cooldown(ability, SPELLS[ability].cooldown_ms)
        self.trigger_global_cooldown(cast_global_cooldown(cast_time))
        start_cast(self.resources, self.now, ability, cast_time, self.land_spell)
        return True

    def use_cooldown(self, ability: Ability) -> bool:
        """Activates Arcane Power, Combustion or Presence of Mind."""
        self.state.start_cooldown(ability, BUFF_COOLDOWNS_MS[ability])
        if ability == Ability.ARCANE_POWER:
            self.activate_buff(Buff.ARCANE_POWER, ARCANE_POWER_DURATION_MS)
        elif ability == Ability.COMBUSTION:
            self.activate_buff(Buff.COMBUSTION, self.fight_length_ms, stacks=COMBUSTION_CHARGES)
        else:
            self.activate_buff(Buff.PRESENCE_OF_MIND, self.fight_length_ms)
        return True

    def land_spell(self, ability: Ability) -> None:
        """Resolves a spell whose cast has completed, with its side effects."""
        result = self.calculator.compute(ability)
        self.log_damage(result)
        if result.is_crit:
            self.on_spell_crit(ability, result)
        if ability == Ability.SCORCH and result.is_hit:
            self.roll_improved_scorch()
        rank = self.talents.arcane_concentration
        if rank and self.rng.random() < rank * CLEARCAST_CHANCE_PER_RANK:
            self.log_proc("Clearcasting", ability.display_name)
            self.activate_buff(Buff.CLEARCAST, self.fight_length_ms)

    def on_spell_crit(self, ability: Ability, result: DamageResult) -> None:
        school = SPELLS[ability].school
        rank = self.talents.master_of_elements
        if rank and school in (SpellSchool.FIRE, SpellSchool.FROST):
            refund = rank * MASTER_OF_ELEMENTS_REFUND_PER_RANK
            self.resources.mana.gain(self.calculator.base_mana_cost(ability) * refund)
        if school == SpellSchool.FIRE and self.talents.ignite:
            self.add_ignite(result.amount)
        if school == SpellSchool.FIRE:
            self.remove_combustion_stack()

    def add_ignite(self, crit_damage: int) -> None:
        """Adds a share of a fire crit to Ignite and restarts its ticks."""
        resources = self.resources
        resources.ignite_damage += crit_damage * IGNITE_SHARE_PER_RANK * self.talents.ignite
        resources.ignite_ticks = IGNITE_TICKS
        resources.next_ignite_tick = self.now + IGNITE_TICK_MS
        self.activate_buff(Buff.IGNITE, IGNITE_DURATION_MS)

    def roll_improved_scorch(self) -> None:
        rank = self.talents.improved_scorch
        if rank == 0 or self.rng.random() >= rank * IMPROVED_SCORCH_CHANCE_PER_RANK:
            return
        stacks = min(IMPROVED_SCORCH_MAX_STACKS, self.buff_stacks(Buff.IMPROVED_SCORCH) + 1)
        self.activate_buff(Buff.IMPROVED_SCORCH, IMPROVED_SCORCH_DURATION_MS, stacks=stacks)

    def remove_combustion_stack(self) -> None:
        active = self.state.get_buff(Buff.COMBUSTION)
        if active is None:
            return
        active.stacks -= 1
        if active.stacks == 0:
            self.drop_buff(Buff.COMBUSTION)

    # ============================================================================
    # DEFAULT ROTATION
    # ============================================================================

    def run_default_rotation(self) -> bool:
        used = False
        for ability in (Ability.COMBUSTION, Ability.ARCANE_POWER):
            used = self.use_ability(ability) or used
        return self.use_ability(Ability.FIREBALL) or used
