"""Exploration activities and their resolution.

An exploration is an activity whose events are rolled when it is
created and played out when it completes. Combat events are resolved
synchronously; losing a fight ends the exploration early.
"""

from __future__ import annotations

import random
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field

from spellbinder.core.logging import get_logger
from spellbinder.engine.combat import CombatOutcome, CombatSystem
from spellbinder.models.activities import ActivityCost, ActivityData, ActivityType
from spellbinder.models.enums import MAGIC_ELEMENTS, ResourceId, RewardKey
from spellbinder.models.locales import LocaleDefinition
from spellbinder.models.monsters import Monster


if TYPE_CHECKING:
    from spellbinder.engine.player import Player
    from spellbinder.models.definitions import GameDefinitions

logger = get_logger(__name__)


class ExploreEventType(StrEnum):
    COMBAT = "combat"
    TREASURE = "treasure"
    RESOURCE = "resource"
    EMPTY = "empty"


EVENT_WEIGHTS: dict[ExploreEventType, float] = {
    ExploreEventType.COMBAT: 0.4,
    ExploreEventType.TREASURE: 0.3,
    ExploreEventType.RESOURCE: 0.2,
    ExploreEventType.EMPTY: 0.1,
}


class ExploreEvent(BaseModel):
    type: ExploreEventType
    description: str = ""
    monster_id: str | None = None


class ExploreEventResult(BaseModel):
    event: ExploreEvent
    outcome: str
    rewards: dict[str, Any] = Field(default_factory=dict)


class ExplorationReport(BaseModel):
    """What happened during one exploration."""

    locale_id: str
    completed: bool = True
    results: list[ExploreEventResult] = Field(default_factory=list)


# =============================================================================
# Creation
# =============================================================================


def _combat_event(locale: LocaleDefinition, rng: random.Random) -> ExploreEvent:
    monster_id = rng.choice(locale.monsters)
    return ExploreEvent(
        type=ExploreEventType.COMBAT,
        description=f"A {monster_id.replace('_', ' ')} blocks the way",
        monster_id=monster_id,
    )


def roll_event(locale: LocaleDefinition, rng: random.Random) -> ExploreEvent:
    """Roll one exploration event by weight."""
    event_type = rng.choices(list(EVENT_WEIGHTS), weights=list(EVENT_WEIGHTS.values()))[0]
    if event_type == ExploreEventType.COMBAT:
        if locale.monsters:
            return _combat_event(locale, rng)
        event_type = ExploreEventType.EMPTY
    descriptions = {
        ExploreEventType.TREASURE: "You uncover a hidden cache",
        ExploreEventType.RESOURCE: "You find a pulsing mana node",
        ExploreEventType.EMPTY: "The area is quiet",
    }
    return ExploreEvent(type=event_type, description=descriptions[event_type])


def roll_events(
    locale: LocaleDefinition,
    rng: random.Random,
    *,
    min_events: int = 3,
    max_events: int = 5,
) -> list[ExploreEvent]:
    """Roll the events of one exploration.

    At least one event is a combat whenever the locale has monsters.

    Args:
        locale: Locale being explored.
        rng: Random source.
        min_events: Fewest events.
        max_events: Most events.

    Returns:
        The events in order.
    """
    count = rng.randint(min_events, max_events)
    events = [roll_event(locale, rng) for _ in range(count)]
    if locale.monsters and events and not any(e.type == ExploreEventType.COMBAT for e in events):
        events[rng.randrange(len(events))] = _combat_event(locale, rng)
    return events


def create_exploration_activity(
    locale: LocaleDefinition,
    rng: random.Random,
    *,
    min_events: int = 3,
    max_events: int = 5,
) -> ActivityData:
    """Build the activity that explores a locale.

    The rolled events travel in the activity metadata so that a saved
    exploration replays the same events.
    """
    events = roll_events(locale, rng, min_events=min_events, max_events=max_events)
    costs = []
    if locale.stamina_cost > 0:
        costs.append(ActivityCost(resource=ResourceId.STAMINA, amount=locale.stamina_cost))
    return ActivityData(
        id=f"explore_{locale.id}",
        name=f"Explore {locale.name}",
        description=locale.description,
        duration=locale.duration,
        costs=costs,
        type=ActivityType.EXPLORATION,
        category="exploration",
        metadata={
            "locale_id": locale.id,
            "events": [e.model_dump(mode="json") for e in events],
        },
    )


# =============================================================================
# Resolution
# =============================================================================


def grant_loot(player: Player, loot: dict[str, Any]) -> None:
    """Credit rolled loot to the player."""
    for key, value in loot.items():
        if key == "items":
            for item_id in value:
                player.inventory.add_item(item_id)
        elif key == RewardKey.EXPERIENCE:
            player.add_experience(value)
        else:
            player.resources.add(key, value)


def resolve_exploration(
    activity: ActivityData,
    player: Player,
    definitions: GameDefinitions,
    rng: random.Random,
    *,
    max_rounds: int = 100,
) -> ExplorationReport:
    """Play out the events of a finished exploration.

    Args:
        activity: The completed exploration activity.
        player: The exploring player.
        definitions: Definition tables for locales and monsters.
        rng: Random source.
        max_rounds: Round limit of each combat.

    Returns:
        The report of every resolved event.

    Raises:
        DefinitionNotFoundError: If the locale or a monster is not defined.
    """
    locale = definitions.get_locale(activity.metadata["locale_id"])
    events = [ExploreEvent.model_validate(e) for e in activity.metadata.get("events", [])]
    report = ExplorationReport(locale_id=locale.id)

    for event in events:
        if event.type == ExploreEventType.COMBAT and event.monster_id:
            monster = Monster(definitions.get_monster(event.monster_id))
            combat = CombatSystem(player, [monster], rng=rng)
            outcome = combat.auto_execute(max_rounds)
            rewards = combat.rewards.model_dump() if combat.rewards else {}
            report.results.append(ExploreEventResult(event=event, outcome=outcome.value, rewards=rewards))
            if outcome != CombatOutcome.PLAYER_WON:
                report.completed = False
                logger.info("Exploration cut short", locale_id=locale.id, outcome=outcome.value)
                break

        elif event.type == ExploreEventType.TREASURE:
            loot = player.locales.generate_rewards(locale.id, rng)
            grant_loot(player, loot)
            report.results.append(ExploreEventResult(event=event, outcome="found", rewards=loot))

        elif event.type == ExploreEventType.RESOURCE:
            element = locale.element if locale.element.is_magic else rng.choice(MAGIC_ELEMENTS)
            amount = rng.randint(1, 5)
            loot = {element.mana_resource: amount}
            grant_loot(player, loot)
            report.results.append(ExploreEventResult(event=event, outcome="gathered", rewards=loot))

        else:
            report.results.append(ExploreEventResult(event=event, outcome="nothing"))

    player.locales.record_exploration(locale.id)
    logger.info(
        "Exploration resolved",
        locale_id=locale.id,
        events=len(report.results),
        completed=report.completed,
    )
    return report


__all__ = [
    "ExploreEventType",
    "EVENT_WEIGHTS",
    "ExploreEvent",
    "ExploreEventResult",
    "ExplorationReport",
    "roll_event",
    "roll_events",
    "create_exploration_activity",
    "grant_loot",
    "resolve_exploration",
]
