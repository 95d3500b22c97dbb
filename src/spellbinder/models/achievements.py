"""Achievement definitions and tracking.

An achievement counts progress towards a required value and unlocks
exactly once when the requirement is reached. Unlocks are announced to
subscribers; applying rewards is the subscriber's business.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Iterable
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from spellbinder.core.exceptions import DefinitionNotFoundError
from spellbinder.core.logging import get_logger


logger = get_logger(__name__)


class RewardType(StrEnum):
    """Kinds of achievement rewards."""

    RESOURCE = "resource"
    """Adds ``value`` to the resource named by ``target``."""

    TALENT = "talent"
    """Adds ``value`` to the talent of the element named by ``target``."""

    SKILL_UNLOCK = "skill_unlock"
    """Unlocks the skill named by ``target``."""


class AchievementCondition(BaseModel):
    """What an achievement counts."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    type: str
    target: str | None = None
    required: float = Field(default=1, gt=0)


class AchievementReward(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    type: RewardType
    target: str
    value: float = 0


class AchievementDefinition(BaseModel):
    """Static achievement data."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    name: str
    description: str = ""
    category: str = "general"
    icon: str = ""
    hidden: bool = False
    condition: AchievementCondition
    rewards: list[AchievementReward] = Field(default_factory=list)


class AchievementSnapshot(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str
    unlocked: bool = False
    unlocked_at: float | None = None
    current: float = Field(default=0, ge=0)
    progress: float = Field(default=0, ge=0, le=1)


class Achievement:
    """Runtime progress of one achievement."""

    def __init__(self, definition: AchievementDefinition) -> None:
        self._definition = definition
        self._current = 0.0
        self._unlocked = False
        self._unlocked_at: float | None = None

    @property
    def id(self) -> str:
        return self._definition.id

    @property
    def definition(self) -> AchievementDefinition:
        return self._definition

    @property
    def current(self) -> float:
        return self._current

    @property
    def required(self) -> float:
        return self._definition.condition.required

    @property
    def unlocked(self) -> bool:
        return self._unlocked

    @property
    def unlocked_at(self) -> float | None:
        return self._unlocked_at

    @property
    def progress(self) -> float:
        """Get completion in [0, 1]."""
        return min(self._current / self.required, 1.0)

    def update_progress(self, value: float, now: float) -> bool:
        """Set the counted value, clamped to the requirement.

        Args:
            value: New counted value.
            now: Timestamp recorded if this call unlocks.

        Returns:
            True if this call unlocked the achievement.
        """
        if self._unlocked:
            return False
        self._current = max(0.0, min(value, self.required))
        if self._current >= self.required:
            return self.unlock(now)
        return False

    def unlock(self, now: float) -> bool:
        """Unlock the achievement.

        Returns:
            True on the first call, False if it was already unlocked.
        """
        if self._unlocked:
            return False
        self._unlocked = True
        self._unlocked_at = now
        self._current = self.required
        return True

    def to_snapshot(self) -> dict[str, Any]:
        return AchievementSnapshot(
            id=self.id,
            unlocked=self._unlocked,
            unlocked_at=self._unlocked_at,
            current=self._current,
            progress=self.progress,
        ).model_dump(mode="json")

    @classmethod
    def from_snapshot(cls, snapshot: AchievementSnapshot, definition: AchievementDefinition) -> Achievement:
        achievement = cls(definition)
        achievement._current = min(snapshot.current, definition.condition.required)
        achievement._unlocked = snapshot.unlocked
        achievement._unlocked_at = snapshot.unlocked_at
        return achievement


AchievementListener = Callable[[Achievement], None]


class AchievementManager:
    """Tracks every achievement of one player.

    Achievements are created lazily from their definitions the first time
    progress is reported. The manager is shared by reference with the
    skill, spell and activity subsystems, which all report into it.
    """

    def __init__(
        self,
        definitions: Iterable[AchievementDefinition] = (),
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the manager.

        Args:
            definitions: Achievement definitions to track.
            clock: Source of unlock timestamps.
        """
        self._definitions = {d.id: d for d in definitions}
        self._achievements: dict[str, Achievement] = {}
        self._listeners: list[AchievementListener] = []
        self._clock = clock

    def register_definition(self, definition: AchievementDefinition) -> None:
        self._definitions[definition.id] = definition

    def get(self, achievement_id: str) -> Achievement | None:
        """Get an achievement, creating it from its definition if needed."""
        achievement = self._achievements.get(achievement_id)
        if achievement is None:
            definition = self._definitions.get(achievement_id)
            if definition is None:
                return None
            achievement = Achievement(definition)
            self._achievements[achievement_id] = achievement
        return achievement

    def increment(self, achievement_id: str, amount: float = 1) -> bool:
        """Add to an achievement's counted value.

        Args:
            achievement_id: Target achievement.
            amount: Amount to add.

        Returns:
            True if progress was recorded, False for unknown ids.
        """
        achievement = self.get(achievement_id)
        if achievement is None:
            logger.warning("Unknown achievement", achievement_id=achievement_id)
            return False
        if achievement.update_progress(achievement.current + amount, self._clock()):
            self._notify(achievement)
        return True

    def update_progress(self, achievement_id: str, value: float) -> bool:
        """Set an achievement's counted value.

        Args:
            achievement_id: Target achievement.
            value: New counted value.

        Returns:
            True if progress was recorded, False for unknown ids.
        """
        achievement = self.get(achievement_id)
        if achievement is None:
            logger.warning("Unknown achievement", achievement_id=achievement_id)
            return False
        if achievement.update_progress(value, self._clock()):
            self._notify(achievement)
        return True

    def unlock_achievement(self, achievement_id: str) -> bool:
        """Unlock an achievement regardless of its progress.

        Returns:
            True if the achievement is unlocked after the call.
        """
        achievement = self.get(achievement_id)
        if achievement is None:
            logger.warning("Unknown achievement", achievement_id=achievement_id)
            return False
        if achievement.unlock(self._clock()):
            self._notify(achievement)
        return True

    def is_unlocked(self, achievement_id: str) -> bool:
        achievement = self._achievements.get(achievement_id)
        return achievement is not None and achievement.unlocked

    def subscribe(self, listener: AchievementListener) -> Callable[[], None]:
        """Register an unlock listener.

        Args:
            listener: Called with each newly unlocked achievement.

        Returns:
            A callable that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, achievement: Achievement) -> None:
        logger.info("Achievement unlocked", achievement_id=achievement.id)
        for listener in list(self._listeners):
            try:
                listener(achievement)
            except Exception:
                logger.exception("Achievement listener error", achievement_id=achievement.id)

    def get_all(self) -> list[Achievement]:
        """Get every defined achievement, creating missing ones."""
        return [a for a in (self.get(i) for i in self._definitions) if a is not None]

    def get_unlocked(self) -> list[Achievement]:
        return [a for a in self._achievements.values() if a.unlocked]

    def get_visible(self) -> list[Achievement]:
        """Get achievements that are not hidden or are already unlocked."""
        return [a for a in self.get_all() if a.unlocked or not a.definition.hidden]

    def get_by_category(self, category: str) -> list[Achievement]:
        return [a for a in self.get_all() if a.definition.category == category]

    def get_by_condition_type(self, condition_type: str) -> list[Achievement]:
        return [a for a in self.get_all() if a.definition.condition.type == condition_type]

    def to_snapshot(self) -> list[dict[str, Any]]:
        return [a.to_snapshot() for a in self._achievements.values()]

    def load_snapshot(self, data: list[dict[str, Any]]) -> None:
        """Replace tracked progress with a snapshot.

        The snapshot is validated completely before any state changes.

        Raises:
            DefinitionNotFoundError: If the snapshot names an unknown achievement.
        """
        restored: dict[str, Achievement] = {}
        for payload in data:
            snapshot = AchievementSnapshot.model_validate(payload)
            definition = self._definitions.get(snapshot.id)
            if definition is None:
                raise DefinitionNotFoundError(
                    "Save references an unknown achievement",
                    kind="achievement",
                    definition_id=snapshot.id,
                )
            restored[snapshot.id] = Achievement.from_snapshot(snapshot, definition)
        self._achievements = restored


__all__ = [
    "RewardType",
    "AchievementCondition",
    "AchievementReward",
    "AchievementDefinition",
    "AchievementSnapshot",
    "Achievement",
    "AchievementManager",
]
