"""
Melee swing module for the simulator.

Drives the two independent swing timers of a melee simulator and the
weapon procs that fire on landed swings: the Crusader enchant and the
Thunderfury item proc. Swing timers are never aligned to the step grid: a
swing at time ``t`` schedules the next one at ``t + speed / haste`` so no
drift builds up over a long fight.
"""

from random import Random
from typing import TYPE_CHECKING, Optional

from character.character_stats import CombatantStats
from combat.damage import DamageResult
from core.constants import Ability, AttackType, Buff, WeaponEnchant, WeaponProc
from core.error_handling import require_probability
from items.weapon import Weapon

from .state import SimulationState

if TYPE_CHECKING:
    from .base_simulator import BaseSimulator

CRUSADER_DURATION_MS = 15000
# Procs per minute of the Crusader enchant.
CRUSADER_PPM = 1.0
THUNDERFURY_PPM = 6.0
# Flat nature damage of a Thunderfury proc, unaffected by spell power.
THUNDERFURY_DAMAGE = 300


def swing_interval_ms(weapon: Weapon, haste_multiplier: float) -> float:
    """Returns the time between two swings of the weapon, in milliseconds."""
    return weapon.speed_ms / haste_multiplier


def proc_chance(weapon: Weapon, procs_per_minute: float) -> float:
    """Returns the per-swing chance of a procs-per-minute effect."""
    return weapon.speed / 60 * procs_per_minute


class SwingTimers:
    """
    The main hand and off hand swing timers of one character.

    The timers themselves live in the ``SimulationState`` so that a fresh
    state also means fresh timers; this class only reads and updates them.
    """

    def __init__(self, stats: CombatantStats) -> None:
        self.stats = stats
        # Per-hand Crusader chance, 0 for hands without the enchant.
        self.crusader_chances = {
            off_hand: self._crusader_chance(stats.weapon(off_hand)) for off_hand in (False, True)
        }
        self.thunderfury_chances = {
            off_hand: self._thunderfury_chance(stats.weapon(off_hand)) for off_hand in (False, True)
        }

    @staticmethod
    def _crusader_chance(weapon: Optional[Weapon]) -> float:
        if weapon is None or weapon.enchant != WeaponEnchant.CRUSADER:
            return 0.0
        return require_probability(proc_chance(weapon, CRUSADER_PPM), "Crusader proc chance")

    @staticmethod
    def _thunderfury_chance(weapon: Optional[Weapon]) -> float:
        if weapon is None or weapon.proc != WeaponProc.THUNDERFURY:
            return 0.0
        return require_probability(
            proc_chance(weapon, THUNDERFURY_PPM), "Thunderfury proc chance"
        )

    def due(self, state: SimulationState) -> list[bool]:
        """
        Returns the hands whose swing timer has elapsed.

        Returns:
            list[bool]: One entry per due hand, True for the off hand.

        """
        hands = []
        if self.stats.main_hand is not None and state.current_time >= state.main_hand_next_swing:
            hands.append(False)
        if self.stats.off_hand is not None and state.current_time >= state.off_hand_next_swing:
            hands.append(True)
        return hands

    def reschedule(self, state: SimulationState, off_hand: bool, haste_multiplier: float) -> None:
        """Schedules the next swing of a hand from the current time."""
        weapon = self.stats.weapon(off_hand)
        if weapon is None:
            return
        next_swing = state.current_time + swing_interval_ms(weapon, haste_multiplier)
        if off_hand:
            state.off_hand_next_swing = next_swing
        else:
            state.main_hand_next_swing = next_swing

    def roll_crusader(self, simulator: "BaseSimulator", off_hand: bool, rng: Random) -> bool:
        """
        Rolls the Crusader enchant of a hand after a landed swing.

        Args:
            simulator (BaseSimulator): The simulator the proc applies to.
            off_hand (bool): Whether the off hand landed the swing.
            rng (Random): The random generator to draw from.

        Returns:
            bool: True if the enchant procced.

        """
        chance = self.crusader_chances[off_hand]
        if chance == 0 or rng.random() >= chance:
            return False
        simulator.log_proc("Crusader", "off hand" if off_hand else "main hand")
        simulator.activate_buff(Buff.CRUSADER, CRUSADER_DURATION_MS)
        return True

    def roll_thunderfury(self, simulator: "BaseSimulator", off_hand: bool, rng: Random) -> bool:
        """Rolls the Thunderfury proc of a hand, dealing its flat nature damage."""
        chance = self.thunderfury_chances[off_hand]
        if chance == 0 or rng.random() >= chance:
            return False
        simulator.log_proc("Thunderfury", "off hand" if off_hand else "main hand")
        damage = THUNDERFURY_DAMAGE
        simulator.log_damage(DamageResult(Ability.THUNDERFURY, AttackType.HIT, damage, damage))
        return True

    def roll_procs(self, simulator: "BaseSimulator", off_hand: bool, rng: Random) -> None:
        """Rolls every weapon proc of a hand after a landed swing."""
        self.roll_crusader(simulator, off_hand, rng)
        self.roll_thunderfury(simulator, off_hand, rng)
