"""Spellbinder - simulation core of an idle fantasy RPG.

A time-driven progression engine: resource pools with passive regen,
elemental talents, skill/spell/class unlock graphs, an activity
scheduler and a turn-based combat resolver, all serializable to a
versioned save document.

Example:
    >>> from spellbinder import Game, SaveSystem, Talent, Element
    >>>
    >>> game = Game("Ember", talent=Talent.create_preset(Element.FIRE))
    >>> game.start_exploration("whispering_meadow")
    True
    >>> game.tick()
    >>>
    >>> SaveSystem("save.json").save(game)
    True

Modules:
    core: Configuration, logging, exceptions and the player-facing log.
    models: Definitions and progression subsystems.
    engine: Player aggregate, combat, activities and the game loop.
    storage: Save file persistence.
"""

from __future__ import annotations

# Core
from spellbinder.core.config import Settings, get_settings
from spellbinder.core.exceptions import SpellbinderError
from spellbinder.core.logging import configure_logging, get_logger

# Models
from spellbinder.models.catalog import build_default_definitions
from spellbinder.models.definitions import GameDefinitions
from spellbinder.models.enums import Element
from spellbinder.models.talent import Talent

# Engine
from spellbinder.engine.combat import CombatOutcome, CombatSystem
from spellbinder.engine.game import Game, GameContext
from spellbinder.engine.game_loop import GameLoop
from spellbinder.engine.player import Player

# Storage
from spellbinder.storage.save_system import SaveSystem


__version__ = "0.1.0"
__all__ = [
    # Version info
    "__version__",
    # Core
    "SpellbinderError",
    "Settings",
    "get_settings",
    "configure_logging",
    "get_logger",
    # Models
    "Element",
    "GameDefinitions",
    "Talent",
    "build_default_definitions",
    # Engine
    "CombatOutcome",
    "CombatSystem",
    "Game",
    "GameContext",
    "GameLoop",
    "Player",
    # Storage
    "SaveSystem",
]
