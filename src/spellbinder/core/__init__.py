"""Core module providing configuration, logging, and base exceptions.

Exports:
    Exceptions:
        SpellbinderError: Base exception for all application errors.
        ConfigurationError: Configuration-related errors.
        ValidationError: Data validation errors.

    Configuration:
        Settings: Main application settings class.
        get_settings: Get the settings singleton.
        clear_settings_cache: Force settings reload.

    Logging:
        configure_logging: Set up application logging.
        get_logger: Get a configured logger instance.
        GameLog: Player-facing leveled log sink.
"""

from __future__ import annotations

from spellbinder.core.config import (
    GameSettings,
    Settings,
    StorageSettings,
    clear_settings_cache,
    get_settings,
)
from spellbinder.core.exceptions import (
    ActivityError,
    CombatError,
    ConfigurationError,
    DataIntegrityError,
    DefinitionNotFoundError,
    FormulaError,
    GameEngineError,
    InvalidGameStateError,
    PersistenceError,
    SaveLoadError,
    SpellbinderError,
    ValidationError,
)
from spellbinder.core.game_log import GameLog, LogEntry, LogLevel
from spellbinder.core.logging import (
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
)


__all__ = [
    # Base exception
    "SpellbinderError",
    # Game engine exceptions
    "GameEngineError",
    "InvalidGameStateError",
    "CombatError",
    "ActivityError",
    "FormulaError",
    # Data integrity exceptions
    "DataIntegrityError",
    "DefinitionNotFoundError",
    # Persistence exceptions
    "PersistenceError",
    "SaveLoadError",
    # Configuration exceptions
    "ConfigurationError",
    "ValidationError",
    # Configuration
    "Settings",
    "GameSettings",
    "StorageSettings",
    "get_settings",
    "clear_settings_cache",
    # Logging
    "configure_logging",
    "get_logger",
    "bind_context",
    "clear_context",
    "GameLog",
    "LogEntry",
    "LogLevel",
]
