"""Spell definitions, cooldowns and the spell manager."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from enum import StrEnum
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from spellbinder.core.constants import ACHIEVEMENT_SPELL_LEARNER
from spellbinder.core.exceptions import DefinitionNotFoundError
from spellbinder.core.logging import get_logger
from spellbinder.models.achievements import AchievementManager
from spellbinder.models.enums import Element
from spellbinder.models.predicates import Predicate, PredicateContext, coerce_condition, evaluate


logger = get_logger(__name__)


class SpellEffectType(StrEnum):
    """What a spell effect does when applied in combat."""

    DAMAGE = "damage"
    HEAL = "heal"
    BUFF = "buff"
    DEBUFF = "debuff"
    SUMMON = "summon"


class SpellTarget(StrEnum):
    SELF = "self"
    ENEMY = "enemy"
    ALLY = "ally"
    AREA = "area"


class SpellEffect(BaseModel):
    """One effect of a spell.

    Attributes:
        type: Effect kind.
        target: Intended target.
        value: Base magnitude.
        element: Element override for damage; defaults to the spell's.
        duration: Rounds a buff or debuff lasts.
        stat: Stat modified by a buff or debuff.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    type: SpellEffectType
    target: SpellTarget = SpellTarget.ENEMY
    value: float = 0
    element: Element | None = None
    duration: Annotated[int, Field(ge=1)] | None = None
    stat: str | None = None


class RequiredSkill(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    skill_id: str
    level: Annotated[int, Field(ge=1)] = 1


class SpellDefinition(BaseModel):
    """Static spell data."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    name: str
    description: str = ""
    element: Element
    level: Annotated[int, Field(ge=1)] = 1
    mana_cost: Annotated[float, Field(ge=0)] = 0
    cooldown: Annotated[float, Field(ge=0)] = 0
    cast_time: Annotated[float, Field(ge=0)] = 0
    effects: list[SpellEffect] = Field(default_factory=list)
    unlock_condition: Predicate | None = None
    required_skill: RequiredSkill | None = None

    @field_validator("unlock_condition", mode="before")
    @classmethod
    def parse_unlock_condition(cls, value: Any) -> Any:
        return coerce_condition(value)

    @property
    def mana_resource_id(self) -> str | None:
        return self.element.mana_resource


class SpellSnapshot(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str
    is_learned: bool = False
    current_cooldown: float = Field(default=0, ge=0)


class Spell:
    """Runtime state of one spell: whether it is learned and its cooldown."""

    def __init__(self, definition: SpellDefinition) -> None:
        self._definition = definition
        self.is_learned = False
        self.current_cooldown = 0.0

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
    def definition(self) -> SpellDefinition:
        return self._definition

    @property
    def mana_cost(self) -> float:
        return self._definition.mana_cost

    @property
    def effects(self) -> list[SpellEffect]:
        return self._definition.effects

    @property
    def is_on_cooldown(self) -> bool:
        return self.current_cooldown > 0

    def has_effect_type(self, effect_type: SpellEffectType | str) -> bool:
        return any(e.type == effect_type for e in self._definition.effects)

    def meets_skill_requirement(self, skill_levels: Mapping[str, int]) -> bool:
        required = self._definition.required_skill
        if required is None:
            return True
        return skill_levels.get(required.skill_id, 0) >= required.level

    def can_cast(self, available_mana: float, skill_levels: Mapping[str, int]) -> bool:
        """Check whether the spell can be cast right now.

        Args:
            available_mana: Mana in the pool of the spell's element.
            skill_levels: Current skill levels.

        Returns:
            True if learned, off cooldown, affordable and skill-qualified.
        """
        if not self.is_learned or self.is_on_cooldown:
            return False
        if self.mana_cost > 0 and self._definition.mana_resource_id is None:
            return False
        if available_mana < self.mana_cost:
            return False
        return self.meets_skill_requirement(skill_levels)

    def cast(self) -> bool:
        """Start the cooldown of a learned spell.

        Returns:
            False if the spell is unlearned or still cooling down.
        """
        if not self.is_learned or self.is_on_cooldown:
            return False
        self.current_cooldown = self._definition.cooldown
        return True

    def update(self, delta_seconds: float) -> None:
        if self.current_cooldown > 0 and delta_seconds > 0:
            self.current_cooldown = max(0.0, self.current_cooldown - delta_seconds)

    def can_learn(self, context: PredicateContext) -> bool:
        """Check the unlock condition and the skill prerequisite."""
        if not evaluate(self._definition.unlock_condition, context):
            return False
        return self.meets_skill_requirement(context.skill_levels)

    def to_snapshot(self) -> dict[str, Any]:
        return SpellSnapshot(
            id=self.id,
            is_learned=self.is_learned,
            current_cooldown=self.current_cooldown,
        ).model_dump(mode="json")


class SpellManager:
    """Owns every spell of one player, learned or not."""

    def __init__(
        self,
        definitions: Iterable[SpellDefinition] = (),
        *,
        achievements: AchievementManager | None = None,
    ) -> None:
        self._spells: dict[str, Spell] = {}
        self._achievements = achievements
        for definition in definitions:
            self.register_definition(definition)

    def register_definition(self, definition: SpellDefinition) -> None:
        self._spells[definition.id] = Spell(definition)

    def get_spell(self, spell_id: str) -> Spell | None:
        return self._spells.get(spell_id)

    def get_all_spells(self) -> list[Spell]:
        return list(self._spells.values())

    def learn_spell(self, spell_id: str, context: PredicateContext | None = None) -> bool:
        """Mark a spell as learned.

        Args:
            spell_id: Spell to learn.
            context: If given, the spell's learn requirements must hold in it.

        Returns:
            True if the spell is learned after the call.
        """
        spell = self._spells.get(spell_id)
        if spell is None:
            logger.warning("Cannot learn unknown spell", spell_id=spell_id)
            return False
        if spell.is_learned:
            return True
        if context is not None and not spell.can_learn(context):
            logger.warning("Spell requirements not met", spell_id=spell_id)
            return False

        spell.is_learned = True
        if self._achievements is not None:
            self._achievements.increment(ACHIEVEMENT_SPELL_LEARNER)
        logger.info("Spell learned", spell_id=spell_id)
        return True

    def get_learned_spells(self) -> list[Spell]:
        return [s for s in self._spells.values() if s.is_learned]

    def get_learnable_spells(self, context: PredicateContext) -> list[Spell]:
        return [s for s in self._spells.values() if not s.is_learned and s.can_learn(context)]

    def get_locked_spells(self, context: PredicateContext) -> list[Spell]:
        return [s for s in self._spells.values() if not s.is_learned and not s.can_learn(context)]

    def update(self, delta_seconds: float) -> None:
        for spell in self._spells.values():
            spell.update(delta_seconds)

    def to_snapshot(self) -> list[dict[str, Any]]:
        return [
            s.to_snapshot()
            for s in self._spells.values()
            if s.is_learned or s.is_on_cooldown
        ]

    def load_snapshot(self, data: list[dict[str, Any]]) -> None:
        """Restore learned flags and cooldowns from a snapshot.

        The snapshot is validated completely before any spell changes.

        Raises:
            DefinitionNotFoundError: If the snapshot names an unknown spell.
        """
        snapshots = [SpellSnapshot.model_validate(payload) for payload in data]
        for snapshot in snapshots:
            if snapshot.id not in self._spells:
                raise DefinitionNotFoundError(
                    "Save references an unknown spell",
                    kind="spell",
                    definition_id=snapshot.id,
                )

        for spell in self._spells.values():
            spell.is_learned = False
            spell.current_cooldown = 0.0
        for snapshot in snapshots:
            spell = self._spells[snapshot.id]
            spell.is_learned = snapshot.is_learned
            spell.current_cooldown = snapshot.current_cooldown


__all__ = [
    "SpellEffectType",
    "SpellTarget",
    "SpellEffect",
    "RequiredSkill",
    "SpellDefinition",
    "SpellSnapshot",
    "Spell",
    "SpellManager",
]
