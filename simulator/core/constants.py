"""
Constants and enumerations for the simulator.

Defines global constants, enumerations for character classes, attack outcomes,
weapon types, spell schools, abilities and buffs used throughout the
simulator.
"""

from enum import Enum

# Timing constants, all in milliseconds.
GLOBAL_COOLDOWN_MS = 1500
DEFAULT_TIME_STEP_MS = 100
ENERGY_TICK_MS = 2000
MANA_TICK_MS = 2000

# Level of a regular player character and of a raid boss.
MAX_PLAYER_LEVEL = 60
BOSS_LEVEL = 63

# Maximum combo points a rogue can hold.
MAX_COMBO_POINTS = 5


class NiceEnum(Enum):
    """An enumeration that provides a nicer string representation."""

    def __str__(self) -> str:
        return self.name

    @property
    def display_name(self) -> str:
        return self.name.replace("_", " ").title()


class CharacterClass(NiceEnum):
    """Defines the simulated character archetypes."""

    ROGUE = "ROGUE"
    WARRIOR = "WARRIOR"
    MAGE = "MAGE"
    SHAMAN = "SHAMAN"

    @property
    def is_healer(self) -> bool:
        """Returns True if this archetype produces healing instead of damage."""
        return self == CharacterClass.SHAMAN

    @property
    def color(self) -> str:
        """Returns the color string associated with this class."""
        return {
            CharacterClass.ROGUE: "bold yellow",
            CharacterClass.WARRIOR: "bold dark_orange3",
            CharacterClass.MAGE: "bold cyan",
            CharacterClass.SHAMAN: "bold blue",
        }.get(self, "dim white")

    @property
    def colored_name(self) -> str:
        return self.colorize(self.display_name)

    def colorize(self, message: str) -> str:
        """Applies class color formatting to a message."""
        return f"[{self.color}]{message}[/]"


class AttackType(NiceEnum):
    """Defines the outcome kinds an attack or spell can resolve to."""

    MISS = "MISS"
    DODGE = "DODGE"
    GLANCING = "GLANCING"
    HIT = "HIT"
    CRIT = "CRIT"
    NO_WEAPON = "NO_WEAPON"

    @property
    def is_hit(self) -> bool:
        """Returns True if the attack landed (hit, crit or glancing blow)."""
        return self in (AttackType.HIT, AttackType.CRIT, AttackType.GLANCING)

    @property
    def is_avoided(self) -> bool:
        """Returns True if the target avoided the attack entirely."""
        return self in (AttackType.MISS, AttackType.DODGE)

    @property
    def color(self) -> str:
        """Returns the color string associated with this outcome."""
        return {
            AttackType.MISS: "magenta",
            AttackType.DODGE: "magenta",
            AttackType.GLANCING: "dim white",
            AttackType.HIT: "white",
            AttackType.CRIT: "bold yellow",
        }.get(self, "dim white")


class WeaponType(NiceEnum):
    """Defines the weapon type tags used by type-gated talents."""

    DAGGER = "DAGGER"
    SWORD = "SWORD"
    MACE = "MACE"
    FIST = "FIST"
    AXE = "AXE"
    TWO_HANDED_SWORD = "TWO_HANDED_SWORD"
    TWO_HANDED_MACE = "TWO_HANDED_MACE"
    TWO_HANDED_AXE = "TWO_HANDED_AXE"
    POLEARM = "POLEARM"
    STAFF = "STAFF"

    @property
    def is_two_handed(self) -> bool:
        """Returns True if the weapon occupies both hands."""
        return self in (
            WeaponType.TWO_HANDED_SWORD,
            WeaponType.TWO_HANDED_MACE,
            WeaponType.TWO_HANDED_AXE,
            WeaponType.POLEARM,
            WeaponType.STAFF,
        )

    @property
    def is_sword(self) -> bool:
        return self in (WeaponType.SWORD, WeaponType.TWO_HANDED_SWORD)

    @property
    def normalized_speed(self) -> float:
        """Returns the fixed speed used for normalized ability damage."""
        if self == WeaponType.DAGGER:
            return 1.7
        if self.is_two_handed:
            return 3.3
        return 2.4


class WeaponEnchant(NiceEnum):
    """Defines the weapon enchants that matter inside a simulation."""

    NONE = "NONE"
    CRUSADER = "CRUSADER"
    DAMAGE_3 = "DAMAGE_3"
    DAMAGE_4 = "DAMAGE_4"
    DAMAGE_5 = "DAMAGE_5"

    @property
    def flat_damage(self) -> int:
        """Returns the flat weapon damage added by this enchant."""
        return {
            WeaponEnchant.DAMAGE_3: 3,
            WeaponEnchant.DAMAGE_4: 4,
            WeaponEnchant.DAMAGE_5: 5,
        }.get(self, 0)


class WeaponProc(NiceEnum):
    """Defines the item procs a weapon can carry besides its enchant."""

    NONE = "NONE"
    THUNDERFURY = "THUNDERFURY"


class Stance(NiceEnum):
    """Defines the warrior stances."""

    BATTLE = "BATTLE"
    BERSERKER = "BERSERKER"
    DEFENSIVE = "DEFENSIVE"

    @property
    def buff(self) -> "Buff":
        """Returns the buff that marks this stance as active."""
        return Buff[f"{self.name}_STANCE"]

    @property
    def ability(self) -> "Ability":
        """Returns the ability that switches to this stance."""
        return Ability[f"{self.name}_STANCE"]


class SpellSchool(NiceEnum):
    """Defines the magic schools spells belong to."""

    ARCANE = "ARCANE"
    FIRE = "FIRE"
    FROST = "FROST"
    NATURE = "NATURE"


class Ability(NiceEnum):
    """
    Defines every ability the simulators know about.

    The value is the identifier used by rotation strings, matched
    case-insensitively.
    """

    # White damage.
    MAIN_HAND = "MH"
    OFF_HAND = "OH"
    EXTRA_ATTACK = "EXTRA"
    # Rogue.
    SINISTER_STRIKE = "SS"
    BACKSTAB = "BS"
    HEMORRHAGE = "HEMO"
    EVISCERATE = "EVIS"
    SLICE_AND_DICE = "SND"
    COLD_BLOOD = "CB"
    # Warrior.
    BLOODTHIRST = "BT"
    MORTAL_STRIKE = "MS"
    WHIRLWIND = "WW"
    HEROIC_STRIKE = "HS"
    EXECUTE = "EXECUTE"
    BLOODRAGE = "BLOODRAGE"
    OVERPOWER = "OP"
    REND = "REND"
    CLEAVE = "CLEAVE"
    BATTLE_STANCE = "BATTLE"
    BERSERKER_STANCE = "BERSERKER"
    DEFENSIVE_STANCE = "DEFENSIVE"
    # Mage.
    FIREBALL = "FIREBALL"
    FROSTBOLT = "FROSTBOLT"
    SCORCH = "SCORCH"
    FIRE_BLAST = "FIREBLAST"
    ARCANE_POWER = "AP"
    COMBUSTION = "COMBUSTION"
    PRESENCE_OF_MIND = "POM"
    IGNITE = "IGNITE"
    # Shaman.
    HEALING_WAVE = "HW"
    LESSER_HEALING_WAVE = "LHW"
    CHAIN_HEAL = "CH"
    NATURES_SWIFTNESS = "NS"
    # Weapon procs.
    THUNDERFURY = "THUNDERFURY"

    @property
    def is_white_damage(self) -> bool:
        """Returns True for auto-attack swings."""
        return self in (Ability.MAIN_HAND, Ability.OFF_HAND, Ability.EXTRA_ATTACK)

    @classmethod
    def from_identifier(cls, identifier: str) -> "Ability":
        """
        Resolves a rotation identifier (e.g. "ss", "Fireball") to an ability.

        Args:
            identifier (str): The identifier to resolve.

        Raises:
            ValueError: If no ability uses the identifier.

        Returns:
            Ability: The matching ability.

        """
        key = identifier.strip().upper()
        for ability in cls:
            if ability.value == key or ability.name == key:
                return ability
        raise ValueError(f"Unknown ability: {identifier}")


class Buff(NiceEnum):
    """Defines the named timed effects tracked in a simulation state."""

    SLICE_AND_DICE = "SND"
    COLD_BLOOD = "COLDBLOOD"
    CRUSADER = "CRUSADER"
    FLURRY = "FLURRY"
    ENRAGE = "ENRAGE"
    BLOODRAGE = "BLOODRAGE"
    BATTLE_STANCE = "BATTLESTANCE"
    BERSERKER_STANCE = "BERSERKERSTANCE"
    DEFENSIVE_STANCE = "DEFENSIVESTANCE"
    REND = "REND"
    ARCANE_POWER = "ARCANEPOWER"
    COMBUSTION = "COMBUSTION"
    PRESENCE_OF_MIND = "PRESENCEOFMIND"
    CLEARCAST = "CLEARCAST"
    IMPROVED_SCORCH = "IMPROVEDSCORCH"
    IGNITE = "IGNITE"
    MAGE_ARMOR = "MAGEARMOR"
    NATURES_SWIFTNESS = "NATURESSWIFTNESS"

    @classmethod
    def from_identifier(cls, identifier: str) -> "Buff":
        """
        Resolves a rotation buff identifier (e.g. "snd", "ArcanePower").

        Args:
            identifier (str): The identifier to resolve.

        Raises:
            ValueError: If no buff uses the identifier.

        Returns:
            Buff: The matching buff.

        """
        key = identifier.strip().upper().replace("_", "").replace(" ", "")
        for buff in cls:
            if buff.value == key or buff.name.replace("_", "") == key:
                return buff
        raise ValueError(f"Unknown buff: {identifier}")
