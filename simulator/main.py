"""
Main entry point for the classic combat DPS simulator.

This script builds one configuration per archetype, runs the iterations of
each and prints the aggregate report. The first configuration is also
played back event by event.

The simulator supports:
- Melee archetypes with dual swing timers, combo points, energy and rage
- Caster and healer archetypes with mana, cast times and cooldowns
- Talent overrides such as "malice:5,vigor:true"
- Custom rotations such as "cp5+?evis:ss"
"""

import logging
import sys

from core.error_handling import ConfigurationError
from core.logging import setup_logging
from core.utils import cprint, crule
from sim.config import SimulationConfig, load_config
from sim.runner import IterationRunner, create_simulator
from ui.playback import play
from ui.report import print_report

# Sets up rich logging.
setup_logging(logging.INFO)

DAGGER = {
    "min_damage": 68,
    "max_damage": 127,
    "speed": 1.8,
    "weapon_type": "DAGGER",
    "enchant": "CRUSADER",
}
SWORD = {
    "min_damage": 80,
    "max_damage": 150,
    "speed": 2.7,
    "weapon_type": "SWORD",
    "enchant": "CRUSADER",
}

CONFIGURATIONS = [
    {
        "character_class": "rogue",
        "stats": {
            "hit_chance": 5,
            "crit_chance": 25,
            "attack_power": 1200,
            "main_hand": DAGGER,
            "off_hand": DAGGER,
        },
        "talents": {
            "malice": 5,
            "lethality": 5,
            "improved_backstab": 3,
            "seal_fate": 5,
            "relentless_strikes": True,
            "cold_blood": True,
            "vigor": True,
        },
        "target": {"armor": 3731},
        "iterations": 200,
        "seed": 42,
    },
    {
        "character_class": "warrior",
        "stats": {
            "hit_chance": 6,
            "crit_chance": 25,
            "attack_power": 1500,
            "main_hand": SWORD,
            "off_hand": SWORD,
        },
        "talents": {
            "cruelty": 5,
            "impale": 2,
            "flurry": 5,
            "enrage": 5,
            "unbridled_wrath": 5,
            "bloodthirst": True,
        },
        "target": {"armor": 3731},
        "iterations": 200,
        "seed": 42,
    },
    {
        "character_class": "mage",
        "stats": {"spell_hit": 6, "spell_crit": 15, "spell_power": 600, "intellect": 300},
        "talents": {"ignite": 5, "critical_mass": 3, "fire_power": 5, "combustion": True},
        "iterations": 200,
        "seed": 42,
    },
    {
        "character_class": "shaman",
        "stats": {"spell_crit": 10, "healing_power": 900, "intellect": 300, "mp5": 40},
        "talents": {"purification": 5, "tidal_mastery": 5, "natures_swiftness": True},
        "target": {"max_health": 9000, "incoming_dps": 600},
        "iterations": 200,
        "seed": 42,
    },
]


def build_configurations() -> list[SimulationConfig]:
    """Validates the demo configurations."""
    return [load_config(data) for data in CONFIGURATIONS]


def main() -> int:
    crule("Combat Simulator", style="bold green")
    cprint(
        "Estimates the damage or healing per second of a character build over many "
        "simulated encounters.\n",
        style="bold blue",
    )
    try:
        configurations = build_configurations()
    except ConfigurationError as e:
        cprint(f"[bold red]Invalid configuration:[/] {e}")
        return 1

    # =========================================================================

    play(create_simulator(configurations[0]))

    # =========================================================================

    for config in configurations:
        runner = IterationRunner(config)
        print_report(config, runner.run_many())
    return 0


if __name__ == "__main__":
    sys.exit(main())
