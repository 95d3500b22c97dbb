"""Explorable locales and the locale manager."""

from __future__ import annotations

import random
import time
from collections.abc import Callable, Iterable
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field

from spellbinder.core.constants import ACHIEVEMENT_EXPLORER, ACHIEVEMENT_SEASONED_EXPLORER
from spellbinder.core.exceptions import DefinitionNotFoundError
from spellbinder.core.logging import get_logger
from spellbinder.models.achievements import AchievementManager
from spellbinder.models.enums import Element
from spellbinder.models.monsters import LootTable


logger = get_logger(__name__)


class LocaleDefinition(BaseModel):
    """Static locale data.

    Attributes:
        element: Element whose mana the locale's resource events yield.
        level_requirement: Minimum player level to explore.
        stamina_cost: Stamina paid to start an exploration.
        duration: Seconds an exploration takes.
        monsters: Monster ids that may be encountered.
        rewards: Loot rolled by treasure events.
        discovered: Whether the locale is known from the start.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    name: str
    description: str = ""
    element: Element = Element.NEUTRAL
    level_requirement: Annotated[int, Field(ge=1)] = 1
    stamina_cost: Annotated[float, Field(ge=0)] = 0
    duration: Annotated[float, Field(gt=0)] = 60
    monsters: list[str] = Field(default_factory=list)
    rewards: LootTable = Field(default_factory=LootTable)
    discovered: bool = False


class LocaleState(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str
    discovered: bool = False
    explored_count: int = Field(default=0, ge=0)
    last_explored: float | None = None


class LocaleManager:
    """Discovery and exploration history of every locale."""

    def __init__(
        self,
        definitions: Iterable[LocaleDefinition] = (),
        *,
        achievements: AchievementManager | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._definitions: dict[str, LocaleDefinition] = {}
        self._states: dict[str, LocaleState] = {}
        self._achievements = achievements
        self._clock = clock
        for definition in definitions:
            self.register_definition(definition)

    def register_definition(self, definition: LocaleDefinition) -> None:
        self._definitions[definition.id] = definition
        self._states[definition.id] = LocaleState(id=definition.id, discovered=definition.discovered)

    def get_locale(self, locale_id: str) -> LocaleDefinition | None:
        return self._definitions.get(locale_id)

    def get_state(self, locale_id: str) -> LocaleState | None:
        return self._states.get(locale_id)

    def get_all_locales(self) -> list[LocaleDefinition]:
        return list(self._definitions.values())

    def get_discovered_locales(self) -> list[LocaleDefinition]:
        return [d for d in self._definitions.values() if self._states[d.id].discovered]

    def is_discovered(self, locale_id: str) -> bool:
        state = self._states.get(locale_id)
        return state is not None and state.discovered

    def discover(self, locale_id: str) -> bool:
        """Mark a locale as discovered.

        Returns:
            True if the locale was newly discovered.
        """
        state = self._states.get(locale_id)
        if state is None:
            logger.warning("Cannot discover unknown locale", locale_id=locale_id)
            return False
        if state.discovered:
            return False
        state.discovered = True
        logger.info("Locale discovered", locale_id=locale_id)
        return True

    def can_explore(self, locale_id: str, player_level: int) -> bool:
        definition = self._definitions.get(locale_id)
        if definition is None or not self.is_discovered(locale_id):
            return False
        return player_level >= definition.level_requirement

    def get_available_locales(self, player_level: int) -> list[LocaleDefinition]:
        return [d for d in self.get_discovered_locales() if self.can_explore(d.id, player_level)]

    def record_exploration(self, locale_id: str) -> None:
        """Count a finished exploration towards history and achievements."""
        state = self._states.get(locale_id)
        if state is None:
            logger.warning("Cannot record exploration of unknown locale", locale_id=locale_id)
            return
        state.explored_count += 1
        state.last_explored = self._clock()

        if self._achievements is not None:
            self._achievements.increment(ACHIEVEMENT_EXPLORER)
            self._achievements.increment(ACHIEVEMENT_SEASONED_EXPLORER)

    def generate_rewards(self, locale_id: str, rng: random.Random) -> dict[str, Any]:
        """Roll a locale's treasure loot.

        Returns:
            Rolled loot, empty for unknown locales.
        """
        definition = self._definitions.get(locale_id)
        if definition is None:
            return {}
        return definition.rewards.roll(rng)

    def to_snapshot(self) -> list[dict[str, Any]]:
        return [state.model_dump(mode="json") for state in self._states.values()]

    def load_snapshot(self, data: list[dict[str, Any]]) -> None:
        """Restore discovery state and history.

        Locales missing from the snapshot keep their initial state.

        Raises:
            DefinitionNotFoundError: If the snapshot names an unknown locale.
        """
        states = [LocaleState.model_validate(payload) for payload in data]
        for state in states:
            if state.id not in self._definitions:
                raise DefinitionNotFoundError(
                    "Save references an unknown locale",
                    kind="locale",
                    definition_id=state.id,
                )

        self._states = {
            d.id: LocaleState(id=d.id, discovered=d.discovered) for d in self._definitions.values()
        }
        for state in states:
            self._states[state.id] = state


__all__ = [
    "LocaleDefinition",
    "LocaleState",
    "LocaleManager",
]
