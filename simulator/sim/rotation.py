"""
Rotation module for the simulator.

A rotation is a list of lines such as ``"cp5+?evis:ss"`` or
``"buff:snd?ss:snd"``. Each line is compiled once, before the first
iteration, into a ``RotationStep``: an optional guard predicate, the ability
to attempt when it holds, and an optional step to fall back to when it does
not. Compilation rejects unknown abilities, buffs and condition kinds.

Condition syntax:
    buff:NAME       the buff is active
    nobuff:NAME     the buff is not active
    cd:ABILITY      the ability's cooldown has elapsed
    cpN+, cp>=N     at least N combo points
    cpN             exactly N combo points
    RES>N, RES<N    resource above/below N (energy, rage: absolute; mana: percent)
    hp>N, hp<N      target health above/below N percent
    scorch<N        fewer than N Improved Scorch stacks
    stance:NAME     the warrior is in the stance (battle, berserker, defensive)
    op              Overpower's dodge window is open
    !COND           negation
"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Protocol, Sequence

from catchery import log_debug
from core.constants import Ability, Buff, Stance
from core.error_handling import ERROR_HANDLER


class RotationContext(Protocol):
    """What a predicate can read from a running simulator."""

    def has_buff(self, buff: Buff) -> bool: ...

    def buff_stacks(self, buff: Buff) -> int: ...

    def cooldown_ready(self, ability: Ability) -> bool: ...

    @property
    def resource(self) -> float: ...

    @property
    def resource_percent(self) -> float: ...

    @property
    def combo_points(self) -> int: ...

    @property
    def target_health_percent(self) -> float: ...

    @property
    def stance(self) -> Optional[Stance]: ...

    @property
    def overpower_available(self) -> bool: ...


# ==============================================================================
# PREDICATES
# ==============================================================================


class Predicate(ABC):
    """A guard condition of a rotation step."""

    @abstractmethod
    def evaluate(self, context: RotationContext) -> bool:
        """Returns True if the condition holds for the given simulator."""


@dataclass(frozen=True)
class BuffActive(Predicate):
    buff: Buff

    def evaluate(self, context: RotationContext) -> bool:
        return context.has_buff(self.buff)


@dataclass(frozen=True)
class BuffInactive(Predicate):
    buff: Buff

    def evaluate(self, context: RotationContext) -> bool:
        return not context.has_buff(self.buff)


@dataclass(frozen=True)
class BuffStacksBelow(Predicate):
    buff: Buff
    stacks: int

    def evaluate(self, context: RotationContext) -> bool:
        return context.buff_stacks(self.buff) < self.stacks


@dataclass(frozen=True)
class CooldownReady(Predicate):
    ability: Ability

    def evaluate(self, context: RotationContext) -> bool:
        return context.cooldown_ready(self.ability)


@dataclass(frozen=True)
class ResourceAbove(Predicate):
    value: float

    def evaluate(self, context: RotationContext) -> bool:
        return context.resource > self.value


@dataclass(frozen=True)
class ResourceBelow(Predicate):
    value: float

    def evaluate(self, context: RotationContext) -> bool:
        return context.resource < self.value


@dataclass(frozen=True)
class ResourcePercentAbove(Predicate):
    percent: float

    def evaluate(self, context: RotationContext) -> bool:
        return context.resource_percent > self.percent


@dataclass(frozen=True)
class ResourcePercentBelow(Predicate):
    percent: float

    def evaluate(self, context: RotationContext) -> bool:
        return context.resource_percent < self.percent


@dataclass(frozen=True)
class ComboPointsAtLeast(Predicate):
    combo_points: int

    def evaluate(self, context: RotationContext) -> bool:
        return context.combo_points >= self.combo_points


@dataclass(frozen=True)
class ComboPointsExactly(Predicate):
    combo_points: int

    def evaluate(self, context: RotationContext) -> bool:
        return context.combo_points == self.combo_points


@dataclass(frozen=True)
class TargetHealthBelow(Predicate):
    percent: float

    def evaluate(self, context: RotationContext) -> bool:
        return context.target_health_percent < self.percent


@dataclass(frozen=True)
class TargetHealthAbove(Predicate):
    percent: float

    def evaluate(self, context: RotationContext) -> bool:
        return context.target_health_percent > self.percent


@dataclass(frozen=True)
class InStance(Predicate):
    stance: Stance

    def evaluate(self, context: RotationContext) -> bool:
        return context.stance == self.stance


@dataclass(frozen=True)
class OverpowerAvailable(Predicate):
    def evaluate(self, context: RotationContext) -> bool:
        return context.overpower_available


@dataclass(frozen=True)
class Not(Predicate):
    predicate: Predicate

    def evaluate(self, context: RotationContext) -> bool:
        return not self.predicate.evaluate(context)


# ==============================================================================
# ROTATION STEPS
# ==============================================================================


@dataclass(frozen=True)
class RotationStep:
    """
    One compiled rotation line.

    Attributes:
        ability (Ability): The ability attempted when the condition holds.
        condition (Optional[Predicate]): The guard, None to always attempt.
        otherwise (Optional[RotationStep]): The step tried when the guard fails.
        source (str): The line the step was compiled from.

    """

    ability: Ability
    condition: Optional[Predicate] = None
    otherwise: Optional["RotationStep"] = None
    source: str = ""

    def select(self, context: RotationContext) -> Optional[Ability]:
        """Returns the ability this step wants to attempt, or None."""
        if self.condition is None or self.condition.evaluate(context):
            return self.ability
        if self.otherwise is not None:
            return self.otherwise.select(context)
        return None


_COMBO_POINTS = re.compile(r"^cp(?:>=)?(\d)(\+?)$")
_COMPARISON = re.compile(r"^([a-z]+)([<>])(\d+(?:\.\d+)?)$")
_MANA_RESOURCES = ("mana",)
_ABSOLUTE_RESOURCES = ("energy", "rage")


def _invalid(message: str, line: str) -> Exception:
    return ERROR_HANDLER.configuration_error(message, {"rotation": line})


def _require_rage(text: str, resource_name: str, line: str) -> None:
    if resource_name != "rage":
        raise _invalid(f"Warrior condition '{text}' needs rage", line)


def compile_condition(text: str, resource_name: str, line: str = "") -> Predicate:
    """
    Compiles one condition into a predicate.

    Args:
        text (str): The condition text, e.g. "buff:snd" or "mana>50".
        resource_name (str): The resource of the simulated archetype.
        line (str): The full rotation line, for error messages.

    Raises:
        ConfigurationError: If the condition is malformed or unknown.

    Returns:
        Predicate: The compiled predicate.

    """
    text = text.strip().lower()
    if not text:
        raise _invalid(f"Empty condition in rotation line '{line}'", line)
    if text.startswith("!"):
        return Not(compile_condition(text[1:], resource_name, line))
    kind, sep, argument = text.partition(":")
    if sep:
        if kind == "stance":
            _require_rage(text, resource_name, line)
        try:
            if kind == "buff":
                return BuffActive(Buff.from_identifier(argument))
            if kind == "nobuff":
                return BuffInactive(Buff.from_identifier(argument))
            if kind == "cd":
                return CooldownReady(Ability.from_identifier(argument))
            if kind == "stance":
                return InStance(Stance(argument.strip().upper()))
        except ValueError as e:
            raise _invalid(f"{e} in rotation line '{line}'", line) from e
        raise _invalid(f"Unknown condition '{text}' in rotation line '{line}'", line)
    if text == "op":
        _require_rage(text, resource_name, line)
        return OverpowerAvailable()
    match = _COMBO_POINTS.match(text)
    if match:
        if resource_name != "energy":
            raise _invalid(f"Combo point condition '{text}' needs combo points", line)
        combo_points = int(match.group(1))
        if match.group(2) or ">=" in text:
            return ComboPointsAtLeast(combo_points)
        return ComboPointsExactly(combo_points)
    match = _COMPARISON.match(text)
    if match:
        name, operator, raw_value = match.groups()
        value = float(raw_value)
        if name == "hp":
            return TargetHealthAbove(value) if operator == ">" else TargetHealthBelow(value)
        if name == "scorch" and operator == "<":
            return BuffStacksBelow(Buff.IMPROVED_SCORCH, int(value))
        if name in _MANA_RESOURCES + _ABSOLUTE_RESOURCES:
            if name != resource_name:
                raise _invalid(
                    f"Condition '{text}' reads {name}, but the archetype uses {resource_name}",
                    line,
                )
            if name in _MANA_RESOURCES:
                if operator == ">":
                    return ResourcePercentAbove(value)
                return ResourcePercentBelow(value)
            return ResourceAbove(value) if operator == ">" else ResourceBelow(value)
    raise _invalid(f"Unknown condition '{text}' in rotation line '{line}'", line)


def compile_step(
    text: str, abilities: frozenset[Ability], resource_name: str, line: str = ""
) -> RotationStep:
    """
    Compiles ``cond?ability:else`` text into a rotation step.

    The else branch may itself be a conditional, so lines chain:
    ``cp5+?evis:buff:snd?ss:snd``.

    Raises:
        ConfigurationError: If the text is malformed or names an ability the
            archetype does not have.

    """
    line = line or text
    text = text.strip()
    condition: Optional[Predicate] = None
    otherwise: Optional[RotationStep] = None
    if "?" in text:
        condition_text, _, rest = text.partition("?")
        condition = compile_condition(condition_text, resource_name, line)
        ability_text, sep, else_text = rest.partition(":")
        if sep:
            if not else_text.strip():
                raise _invalid(f"Empty else branch in rotation line '{line}'", line)
            otherwise = compile_step(else_text, abilities, resource_name, line)
    else:
        ability_text = text
    if not ability_text.strip():
        raise _invalid(f"Missing ability in rotation line '{line}'", line)
    try:
        ability = Ability.from_identifier(ability_text)
    except ValueError as e:
        raise _invalid(f"{e} in rotation line '{line}'", line) from e
    if ability not in abilities:
        raise _invalid(
            f"{ability.display_name} is not available in rotation line '{line}'", line
        )
    return RotationStep(ability, condition, otherwise, line)


def compile_rotation(
    lines: Sequence[str], abilities: frozenset[Ability], resource_name: str
) -> list[RotationStep]:
    """
    Compiles a whole rotation.

    Args:
        lines (Sequence[str]): The rotation lines; empty means the default rotation.
        abilities (frozenset[Ability]): The abilities the archetype can use.
        resource_name (str): The archetype's resource, "energy", "rage" or "mana".

    Raises:
        ConfigurationError: If any line is invalid.

    Returns:
        list[RotationStep]: One step per line.

    """
    steps = [compile_step(line, abilities, resource_name) for line in lines if line.strip()]
    if steps:
        log_debug("Compiled rotation", {"steps": [s.source for s in steps]})
    return steps
