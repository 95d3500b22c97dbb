"""Simulation engine of the Spellbinder core.

Submodules:
    player: The player aggregate owning every progression manager.
    combat: Turn-based combat resolution with element multipliers.
    scheduler: Single-slot activity runner with a FIFO queue.
    learning: Spell learning, skill practice and training activities.
    exploration: Exploration activities and their event resolution.
    game: The game orchestrator, its clock and shared context.
    game_loop: Fixed-interval driver with event publishing and autosave.

Example:
    >>> from spellbinder.engine import Game
    >>> game = Game("Ember")
    >>> game.start_exploration("whispering_meadow")
    True
    >>> game.tick()
"""

from __future__ import annotations

# =============================================================================
# Player
# =============================================================================
from spellbinder.engine.player import (
    Player,
    PlayerSnapshot,
    experience_required_for_level,
)

# =============================================================================
# Combat
# =============================================================================
from spellbinder.engine.combat import (
    CombatLogEntry,
    CombatLogType,
    CombatOutcome,
    CombatResult,
    CombatRewards,
    CombatSystem,
    CombatTurn,
    calculate_damage,
    element_multiplier,
)

# =============================================================================
# Activities
# =============================================================================
from spellbinder.engine.exploration import (
    ExplorationReport,
    ExploreEvent,
    ExploreEventType,
    create_exploration_activity,
    resolve_exploration,
)
from spellbinder.engine.learning import LearningActivityFactory, learning_duration
from spellbinder.engine.scheduler import ActivityRunner

# =============================================================================
# Orchestration
# =============================================================================
from spellbinder.engine.game import Game, GameClock, GameContext
from spellbinder.engine.game_loop import GameLoop, LoopEvent


__all__ = [
    # Player
    "Player",
    "PlayerSnapshot",
    "experience_required_for_level",
    # Combat
    "CombatLogEntry",
    "CombatLogType",
    "CombatOutcome",
    "CombatResult",
    "CombatRewards",
    "CombatSystem",
    "CombatTurn",
    "calculate_damage",
    "element_multiplier",
    # Activities
    "ActivityRunner",
    "ExplorationReport",
    "ExploreEvent",
    "ExploreEventType",
    "LearningActivityFactory",
    "create_exploration_activity",
    "learning_duration",
    "resolve_exploration",
    # Orchestration
    "Game",
    "GameClock",
    "GameContext",
    "GameLoop",
    "LoopEvent",
]
