"""Skill definitions, leveling and the skill manager.

Skills start locked. Unlocking a skill puts it at level 1; experience
then levels it along ``floor(100 * 1.3 ** level)`` up to its maximum
level, which class effects may raise.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from spellbinder.core.constants import (
    ACHIEVEMENT_FIRST_SKILL,
    ACHIEVEMENT_SKILL_MASTER,
    SKILL_EXP_BASE,
    SKILL_EXP_GROWTH,
)
from spellbinder.core.exceptions import DefinitionNotFoundError
from spellbinder.core.logging import get_logger
from spellbinder.models.achievements import AchievementManager
from spellbinder.models.enums import Element
from spellbinder.models.formulas import effect_value
from spellbinder.models.predicates import Predicate, PredicateContext, coerce_condition, evaluate


logger = get_logger(__name__)


def required_exp_for_level(level: int) -> int:
    """Experience needed to advance from ``level`` to ``level + 1``."""
    return math.floor(SKILL_EXP_BASE * SKILL_EXP_GROWTH**level)


# =============================================================================
# Definitions
# =============================================================================


class SkillEffect(BaseModel):
    """A typed contribution of a skill, scaled by its level."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    type: str
    value: float = 0
    formula: str | None = None
    element: Element | None = None


class SkillDefinition(BaseModel):
    """Static skill data."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    name: str
    description: str = ""
    element: Element = Element.NEUTRAL
    max_level: Annotated[int, Field(ge=1)] = 10
    unlock_condition: Predicate | None = None
    effects: list[SkillEffect] = Field(default_factory=list)

    @field_validator("unlock_condition", mode="before")
    @classmethod
    def parse_unlock_condition(cls, value: Any) -> Any:
        return coerce_condition(value)


class SkillSnapshot(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str
    current_level: int = Field(ge=0)
    current_exp: float = Field(ge=0)
    required_exp: int


# =============================================================================
# Runtime Skill
# =============================================================================


class Skill:
    """An acquired skill and its leveling state."""

    def __init__(
        self,
        definition: SkillDefinition,
        *,
        level: int = 0,
        exp: float = 0.0,
        max_level_bonus: int = 0,
    ) -> None:
        self._definition = definition
        self._level = level
        self._exp = exp
        self._max_level_bonus = max_level_bonus

    @property
    def id(self) -> str:
        return self._definition.id

    @property
    def name(self) -> str:
        return self._definition.name

    @property
    def element(self) -> Element:
        return self._definition.element

    @property
    def definition(self) -> SkillDefinition:
        return self._definition

    @property
    def current_level(self) -> int:
        return self._level

    @property
    def current_exp(self) -> float:
        return self._exp

    @property
    def required_exp(self) -> int:
        return required_exp_for_level(self._level)

    @property
    def max_level(self) -> int:
        """Get the level cap including class bonuses."""
        return self._definition.max_level + self._max_level_bonus

    @property
    def is_unlocked(self) -> bool:
        return self._level > 0

    @property
    def is_max_level(self) -> bool:
        return self._level >= self.max_level

    @property
    def progress(self) -> float:
        """Get progress towards the next level in [0, 1]."""
        if self.is_max_level:
            return 1.0
        return min(self._exp / self.required_exp, 1.0)

    def set_max_level_bonus(self, bonus: int) -> None:
        self._max_level_bonus = max(0, bonus)

    def unlock(self) -> bool:
        """Raise a locked skill to level 1.

        Returns:
            True if the skill was locked before the call.
        """
        if self._level > 0:
            return False
        self._level = 1
        self._exp = 0.0
        return True

    def add_exp(self, amount: float) -> int:
        """Add experience, carrying overflow across level-ups.

        Experience beyond the level cap is discarded.

        Args:
            amount: Experience to add.

        Returns:
            Number of levels gained.
        """
        if amount <= 0 or self.is_max_level:
            return 0

        self._exp += amount
        gained = 0
        while not self.is_max_level and self._exp >= self.required_exp:
            self._exp -= self.required_exp
            self._level += 1
            gained += 1

        if self.is_max_level:
            self._exp = 0.0
        return gained

    def get_effect_value(self, effect_type: str, element: Element | None = None) -> float:
        """Sum the contributions of every effect of a type at the current level.

        Args:
            effect_type: Effect tag to sum.
            element: If given, only effects scoped to this element (or
                unscoped effects of a skill of this element) count.

        Returns:
            The summed contribution, 0 for a locked skill.
        """
        if not self.is_unlocked:
            return 0.0
        total = 0.0
        for effect in self._definition.effects:
            if effect.type != effect_type:
                continue
            if element is not None and (effect.element or self.element) != element:
                continue
            total += effect_value(effect.value, self._level, effect.formula)
        return total

    def can_unlock(self, context: PredicateContext) -> bool:
        return evaluate(self._definition.unlock_condition, context)

    def to_snapshot(self) -> dict[str, Any]:
        return SkillSnapshot(
            id=self.id,
            current_level=self._level,
            current_exp=self._exp,
            required_exp=self.required_exp,
        ).model_dump(mode="json")


# =============================================================================
# Skill Manager
# =============================================================================


class SkillManager:
    """Owns the skill definitions and the acquired skills of one player.

    A skill is locked exactly when it is absent from the acquired mapping.
    """

    def __init__(
        self,
        definitions: Iterable[SkillDefinition] = (),
        *,
        achievements: AchievementManager | None = None,
    ) -> None:
        """Initialize the manager.

        Args:
            definitions: Skill definitions to register.
            achievements: Shared achievement tracker to report into.
        """
        self._definitions: dict[str, SkillDefinition] = {}
        self._skills: dict[str, Skill] = {}
        self._max_level_bonuses: dict[str, int] = {}
        self._achievements = achievements
        for definition in definitions:
            self.register_definition(definition)

    def register_definition(self, definition: SkillDefinition) -> None:
        self._definitions[definition.id] = definition

    def get_definition(self, skill_id: str) -> SkillDefinition | None:
        return self._definitions.get(skill_id)

    @property
    def definitions(self) -> list[SkillDefinition]:
        return list(self._definitions.values())

    def get_skill(self, skill_id: str) -> Skill | None:
        return self._skills.get(skill_id)

    def has_skill(self, skill_id: str) -> bool:
        return skill_id in self._skills

    def can_unlock_skill(self, skill_id: str, context: PredicateContext) -> bool:
        definition = self._definitions.get(skill_id)
        if definition is None:
            return False
        return evaluate(definition.unlock_condition, context)

    def unlock_skill(self, skill_id: str, context: PredicateContext | None = None) -> bool:
        """Acquire a skill.

        Args:
            skill_id: Skill to unlock.
            context: If given, the unlock condition must hold in it.

        Returns:
            True if the skill is acquired after the call (including when it
            already was), False if it is unknown or its condition fails.
        """
        if skill_id in self._skills:
            return True

        definition = self._definitions.get(skill_id)
        if definition is None:
            logger.warning("Cannot unlock unknown skill", skill_id=skill_id)
            return False
        if context is not None and not evaluate(definition.unlock_condition, context):
            logger.warning("Skill unlock condition not met", skill_id=skill_id)
            return False

        skill = Skill(definition, max_level_bonus=self._max_level_bonuses.get(skill_id, 0))
        skill.unlock()
        self._skills[skill_id] = skill

        if self._achievements is not None:
            self._achievements.increment(ACHIEVEMENT_FIRST_SKILL)
            self._achievements.increment(ACHIEVEMENT_SKILL_MASTER)

        logger.info("Skill unlocked", skill_id=skill_id)
        return True

    def add_exp_to_skill(self, skill_id: str, amount: float) -> bool:
        """Give experience to an acquired skill.

        Returns:
            True if the skill exists and received the experience.
        """
        skill = self._skills.get(skill_id)
        if skill is None:
            logger.warning("Cannot add experience to missing skill", skill_id=skill_id)
            return False
        gained = skill.add_exp(amount)
        if gained:
            logger.info("Skill leveled up", skill_id=skill_id, level=skill.current_level)
        return True

    def get_unlocked_skills(self) -> list[Skill]:
        return list(self._skills.values())

    def get_locked_skills(self) -> list[SkillDefinition]:
        return [d for d in self._definitions.values() if d.id not in self._skills]

    def get_available_skills(self, context: PredicateContext) -> list[SkillDefinition]:
        """Get locked skills whose unlock condition currently holds."""
        return [d for d in self.get_locked_skills() if evaluate(d.unlock_condition, context)]

    def skill_levels(self) -> dict[str, int]:
        """Get the level of every registered skill, 0 when locked."""
        levels = {skill_id: 0 for skill_id in self._definitions}
        for skill_id, skill in self._skills.items():
            levels[skill_id] = skill.current_level
        return levels

    def get_total_effect(self, effect_type: str, element: Element | None = None) -> float:
        return sum(s.get_effect_value(effect_type, element) for s in self._skills.values())

    def set_max_level_bonuses(self, bonuses: Mapping[str, int]) -> None:
        """Apply level cap bonuses, replacing any previous ones."""
        self._max_level_bonuses = dict(bonuses)
        for skill_id, skill in self._skills.items():
            skill.set_max_level_bonus(self._max_level_bonuses.get(skill_id, 0))

    def to_snapshot(self) -> list[dict[str, Any]]:
        return [s.to_snapshot() for s in self._skills.values()]

    def load_snapshot(self, data: list[dict[str, Any]]) -> None:
        """Replace acquired skills with a snapshot.

        Raises:
            DefinitionNotFoundError: If the snapshot names an unknown skill.
        """
        restored: dict[str, Skill] = {}
        for payload in data:
            snapshot = SkillSnapshot.model_validate(payload)
            definition = self._definitions.get(snapshot.id)
            if definition is None:
                raise DefinitionNotFoundError(
                    "Save references an unknown skill",
                    kind="skill",
                    definition_id=snapshot.id,
                )
            restored[snapshot.id] = Skill(
                definition,
                level=snapshot.current_level,
                exp=snapshot.current_exp,
                max_level_bonus=self._max_level_bonuses.get(snapshot.id, 0),
            )
        self._skills = restored


__all__ = [
    "required_exp_for_level",
    "SkillEffect",
    "SkillDefinition",
    "SkillSnapshot",
    "Skill",
    "SkillManager",
]
