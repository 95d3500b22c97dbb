"""Unlock predicates.

Unlock conditions are a closed set of predicate kinds combined with
boolean combinators. Predicates are plain data (they serialize with the
definitions they belong to) and are interpreted by ``evaluate``, which
never raises: any problem while evaluating makes the predicate unmet.

Example:
    >>> condition = AllOf(predicates=[
    ...     TalentAtLeast(element="fire", value=20),
    ...     SkillAtLeast(skill_id="fire_affinity", value=3),
    ... ])
    >>> evaluate(condition, PredicateContext(talents={"fire": 30}, skill_levels={"fire_affinity": 3}))
    True
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from spellbinder.core.exceptions import ValidationError
from spellbinder.core.logging import get_logger
from spellbinder.models.enums import Element


logger = get_logger(__name__)


# =============================================================================
# Predicate Kinds
# =============================================================================


class TalentAtLeast(BaseModel):
    """Holds when the talent of an element is at least ``value``."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["talent_at_least"] = "talent_at_least"
    element: Element
    value: float


class SkillAtLeast(BaseModel):
    """Holds when a skill's current level is at least ``value``."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["skill_at_least"] = "skill_at_least"
    skill_id: str
    value: int


class LevelAtLeast(BaseModel):
    """Holds when the player level is at least ``value``."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["level_at_least"] = "level_at_least"
    value: int


class PrerequisiteUnlocked(BaseModel):
    """Holds when a class node is already unlocked."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["prerequisite_unlocked"] = "prerequisite_unlocked"
    class_id: str


class AllOf(BaseModel):
    """Holds when every nested predicate holds (true when empty)."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["all_of"] = "all_of"
    predicates: list[Predicate] = Field(default_factory=list)


class AnyOf(BaseModel):
    """Holds when at least one nested predicate holds (false when empty)."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["any_of"] = "any_of"
    predicates: list[Predicate] = Field(default_factory=list)


class Not(BaseModel):
    """Holds when the nested predicate does not hold."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["not"] = "not"
    predicate: Predicate


Predicate = Annotated[
    Union[TalentAtLeast, SkillAtLeast, LevelAtLeast, PrerequisiteUnlocked, AllOf, AnyOf, Not],
    Field(discriminator="kind"),
]

AllOf.model_rebuild()
AnyOf.model_rebuild()
Not.model_rebuild()

NEVER: AnyOf = AnyOf()
"""A predicate that can never hold."""


# =============================================================================
# Evaluation
# =============================================================================


@dataclass(frozen=True)
class PredicateContext:
    """Variables a predicate may read.

    Attributes:
        talents: Talent value per element name.
        skill_levels: Current level per registered skill id.
        player_level: Player level.
        unlocked_classes: Ids of unlocked class nodes.
    """

    talents: Mapping[str, float] = field(default_factory=dict)
    skill_levels: Mapping[str, int] = field(default_factory=dict)
    player_level: int = 1
    unlocked_classes: frozenset[str] = frozenset()


class _UnknownVariable(LookupError):
    pass


def _walk(predicate: Any, context: PredicateContext) -> bool:
    if isinstance(predicate, TalentAtLeast):
        if predicate.element.value not in context.talents:
            raise _UnknownVariable(predicate.element.value)
        return context.talents[predicate.element.value] >= predicate.value
    if isinstance(predicate, SkillAtLeast):
        if predicate.skill_id not in context.skill_levels:
            raise _UnknownVariable(predicate.skill_id)
        return context.skill_levels[predicate.skill_id] >= predicate.value
    if isinstance(predicate, LevelAtLeast):
        return context.player_level >= predicate.value
    if isinstance(predicate, PrerequisiteUnlocked):
        return predicate.class_id in context.unlocked_classes
    if isinstance(predicate, AllOf):
        return all(_walk(p, context) for p in predicate.predicates)
    if isinstance(predicate, AnyOf):
        return any(_walk(p, context) for p in predicate.predicates)
    if isinstance(predicate, Not):
        return not _walk(predicate.predicate, context)
    raise TypeError(f"unsupported predicate {type(predicate).__name__}")


def evaluate(predicate: Predicate | None, context: PredicateContext) -> bool:
    """Evaluate a predicate against a context.

    A missing predicate always holds. Evaluation fails closed: a reference
    to an unknown variable anywhere in the tree, including below a
    ``Not``, makes the whole predicate unmet.

    Args:
        predicate: The predicate tree, or None.
        context: Variable values.

    Returns:
        True if the predicate holds.
    """
    if predicate is None:
        return True
    try:
        return _walk(predicate, context)
    except Exception as exc:
        logger.warning(
            "Predicate evaluation failed",
            predicate=getattr(predicate, "kind", type(predicate).__name__),
            error=str(exc),
        )
        return False


# =============================================================================
# Condition Strings
# =============================================================================


_OR_SPLIT = re.compile(r"\|\||\bor\b")
_AND_SPLIT = re.compile(r"&&|\band\b")
_COMPARISON = re.compile(r"^\s*([A-Za-z_]\w*)\s*(>=|<)\s*(-?\d+(?:\.\d+)?)\s*$")
_TALENT_NAMES = {"fire", "water", "earth", "wind"}


def _parse_comparison(clause: str, text: str) -> Predicate:
    match = _COMPARISON.match(clause)
    if match is None:
        raise ValidationError(
            "Malformed condition clause",
            field_name="unlock_condition",
            invalid_value=text,
        )
    name, operator, raw_value = match.groups()
    value = float(raw_value)

    predicate: Predicate
    if name in _TALENT_NAMES:
        predicate = TalentAtLeast(element=Element(name), value=value)
    elif name == "level":
        predicate = LevelAtLeast(value=int(value))
    else:
        predicate = SkillAtLeast(skill_id=name, value=int(value))

    if operator == "<":
        return Not(predicate=predicate)
    return predicate


def parse_condition(text: str) -> Predicate:
    """Parse a condition string into a predicate tree.

    The accepted language is comparisons ``name >= number`` or
    ``name < number`` joined with ``&&``/``and`` and ``||``/``or``, where
    ``&&`` binds tighter. Names are an element (talent), ``level`` (player
    level) or any other identifier (a skill id).

    Args:
        text: Condition such as ``"fire >= 20 && fire_affinity >= 3"``.

    Returns:
        The predicate tree.

    Raises:
        ValidationError: If the string does not match the language.
    """
    alternatives: list[Predicate] = []
    for branch in _OR_SPLIT.split(text):
        clauses = [_parse_comparison(c, text) for c in _AND_SPLIT.split(branch)]
        alternatives.append(clauses[0] if len(clauses) == 1 else AllOf(predicates=clauses))
    if len(alternatives) == 1:
        return alternatives[0]
    return AnyOf(predicates=alternatives)


def coerce_condition(value: Any) -> Any:
    """Accept condition strings wherever a predicate is expected.

    Intended as a ``mode="before"`` field validator. Malformed strings
    turn into a predicate that never holds.
    """
    if isinstance(value, str):
        if not value.strip():
            return None
        try:
            return parse_condition(value)
        except ValidationError as exc:
            logger.warning("Unparseable unlock condition", condition=value, error=exc.message)
            return NEVER
    return value


__all__ = [
    "TalentAtLeast",
    "SkillAtLeast",
    "LevelAtLeast",
    "PrerequisiteUnlocked",
    "AllOf",
    "AnyOf",
    "Not",
    "Predicate",
    "NEVER",
    "PredicateContext",
    "evaluate",
    "parse_condition",
    "coerce_condition",
]
