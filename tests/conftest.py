"""Pytest configuration and shared fixtures.

This module provides common fixtures and configuration for all tests
in the Spellbinder test suite.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pytest

from spellbinder.core.config import Settings
from spellbinder.engine.game import Game, GameContext
from spellbinder.engine.player import Player
from spellbinder.models.catalog import build_default_definitions
from spellbinder.models.definitions import GameDefinitions
from spellbinder.models.talent import Talent


if TYPE_CHECKING:
    from collections.abc import Generator


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None, None, None]:
    """Reset the settings cache before and after each test."""
    from spellbinder.core.config import clear_settings_cache

    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture(autouse=True)
def reset_log_context() -> Generator[None, None, None]:
    """Clear bound logging context after each test."""
    from spellbinder.core.logging import clear_context

    yield
    clear_context()


@pytest.fixture
def settings() -> Settings:
    """Provide settings with the built-in defaults.

    Returns:
        A fresh Settings instance.
    """
    return Settings()


# =============================================================================
# Time Fixtures
# =============================================================================


class FakeClock:
    """Manually advanced time source."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> float:
        self.now += seconds
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    """Provide a fake clock starting at t=1000.

    Returns:
        The clock; call it to read the time.
    """
    return FakeClock()


# =============================================================================
# Definition Fixtures
# =============================================================================


@pytest.fixture
def definitions() -> GameDefinitions:
    """Provide the built-in definition tables.

    Returns:
        Definitions of the default game.
    """
    return build_default_definitions()


@pytest.fixture
def duel_definitions_data() -> dict[str, Any]:
    """Provide raw tables for a minimal one-on-one fight.

    The player's only spell costs 5 fire mana with no cooldown and deals
    10 damage; the dummy has 10 health and no defense.

    Returns:
        Raw definition tables.
    """
    return {
        "spells": [
            {
                "id": "spark",
                "name": "Spark",
                "element": "fire",
                "mana_cost": 5,
                "cooldown": 0,
                "effects": [{"type": "damage", "target": "enemy", "value": 10}],
            },
            {
                "id": "mend",
                "name": "Mend",
                "element": "water",
                "mana_cost": 5,
                "cooldown": 0,
                "effects": [{"type": "heal", "target": "self", "value": 15}],
            },
        ],
        "items": [
            {"id": "dummy_stuffing", "name": "Stuffing", "type": "material"},
        ],
        "monsters": [
            {
                "id": "training_dummy",
                "name": "Training Dummy",
                "element": "neutral",
                "max_health": 10,
                "attack": 2,
                "defense": 0,
                "drops": {"gold": "3~7", "experience": "4~6", "items": ["dummy_stuffing"]},
            },
            {
                "id": "iron_dummy",
                "name": "Iron Dummy",
                "element": "neutral",
                "max_health": 500,
                "attack": 1,
                "defense": 0,
            },
            {
                "id": "brute",
                "name": "Brute",
                "element": "neutral",
                "max_health": 50,
                "attack": 500,
            },
        ],
        "locales": [
            {
                "id": "practice_yard",
                "name": "Practice Yard",
                "element": "fire",
                "duration": 10,
                "stamina_cost": 5,
                "monsters": ["training_dummy"],
                "rewards": {"gold": "10~10", "items": ["dummy_stuffing"]},
                "discovered": True,
            },
            {
                "id": "empty_field",
                "name": "Empty Field",
                "duration": 5,
                "discovered": True,
            },
        ],
        "achievements": [
            {
                "id": "monster_slayer",
                "name": "Monster Slayer",
                "condition": {"type": "combat_victory", "required": 1},
                "rewards": [{"type": "resource", "target": "gold", "value": 50}],
            },
            {
                "id": "explorer",
                "name": "Explorer",
                "condition": {"type": "exploration", "required": 1},
                "rewards": [{"type": "resource", "target": "research", "value": 5}],
            },
        ],
    }


@pytest.fixture
def duel_definitions(duel_definitions_data: dict[str, Any]) -> GameDefinitions:
    """Provide definitions for a minimal one-on-one fight.

    Returns:
        Validated definition tables.
    """
    return GameDefinitions.from_dict(duel_definitions_data)


# =============================================================================
# Player and Game Fixtures
# =============================================================================


@pytest.fixture
def fire_talent() -> Talent:
    """Provide the fire talent preset.

    Returns:
        Talent leaning towards fire (fire 70).
    """
    return Talent.create_preset("fire")


@pytest.fixture
def player(definitions: GameDefinitions, fire_talent: Talent, clock: FakeClock) -> Player:
    """Provide a fresh fire-leaning player on the built-in definitions.

    Returns:
        A new player.
    """
    return Player(
        "Tester",
        definitions,
        talent=fire_talent,
        clock=clock,
        class_clock=clock,
    )


@pytest.fixture
def duel_player(duel_definitions: GameDefinitions, clock: FakeClock) -> Player:
    """Provide a player who knows Spark and holds 100 fire mana.

    Returns:
        A player ready for a duel.
    """
    player = Player("Duelist", duel_definitions, clock=clock, class_clock=clock)
    player.spells.learn_spell("spark")
    player.resources.add("mana_fire", 100)
    return player


@pytest.fixture
def context(definitions: GameDefinitions, settings: Settings, clock: FakeClock) -> GameContext:
    """Provide a seeded game context on the fake clock.

    Returns:
        The shared services of one game.
    """
    return GameContext.create_default(
        definitions=definitions,
        settings=settings,
        seed=42,
        clock=clock,
    )


@pytest.fixture
def game(context: GameContext, fire_talent: Talent) -> Game:
    """Provide a started game with a fire-leaning player.

    Returns:
        A new game.
    """
    game = Game("Tester", context=context, talent=fire_talent)
    game.begin("Tester", fire_talent)
    return game
