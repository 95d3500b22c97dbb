"""Configuration management for the Spellbinder simulation core.

This module provides centralized configuration management using pydantic-settings,
supporting environment variables, .env files, and runtime configuration overrides.

Example:
    >>> from spellbinder.core.config import get_settings
    >>> settings = get_settings()
    >>> settings.game.tick_interval
    0.1

Environment Variables:
    SPELLBINDER_GAME_TICK_INTERVAL: Seconds between simulation ticks
    SPELLBINDER_GAME_CLASS_CACHE_WINDOW: Class availability cache window in seconds
    SPELLBINDER_SAVE_PATH: Path to the save file
    SPELLBINDER_AUTOSAVE_INTERVAL: Seconds between autosaves
    SPELLBINDER_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from spellbinder.core.exceptions import ConfigurationError


class GameSettings(BaseSettings):
    """Configuration for simulation behavior.

    Attributes:
        tick_interval: Seconds between ticks of the game loop.
        class_cache_window: Seconds a class availability listing stays cached.
        combat_turn_delay: Pause between interactive combat turns.
        default_max_rounds: Round cap for synchronous combat resolution.
        log_max_entries: Capacity of the player-facing game log.
        explore_min_events: Fewest events rolled per exploration.
        explore_max_events: Most events rolled per exploration.
    """

    model_config = SettingsConfigDict(
        env_prefix="SPELLBINDER_GAME_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    tick_interval: float = Field(
        default=0.1,
        gt=0,
        le=10,
        description="Seconds between simulation ticks",
    )
    class_cache_window: float = Field(
        default=0.5,
        ge=0,
        le=60,
        description="Class availability cache window",
    )
    combat_turn_delay: float = Field(
        default=0.5,
        ge=0,
        le=10,
        description="Delay between interactive combat turns",
    )
    default_max_rounds: int = Field(
        default=100,
        ge=1,
        le=10_000,
        description="Round cap for synchronous combat",
    )
    log_max_entries: int = Field(
        default=200,
        ge=1,
        le=10_000,
        description="Maximum retained game log entries",
    )
    explore_min_events: int = Field(
        default=3,
        ge=1,
        le=20,
        description="Minimum events per exploration",
    )
    explore_max_events: int = Field(
        default=5,
        ge=1,
        le=20,
        description="Maximum events per exploration",
    )

    @model_validator(mode="after")
    def validate_explore_event_range(self) -> "GameSettings":
        """Ensure the exploration event range is not inverted.

        Returns:
            Self if validation passes.

        Raises:
            ConfigurationError: If explore_min_events > explore_max_events.
        """
        if self.explore_min_events > self.explore_max_events:
            raise ConfigurationError(
                f"explore_min_events ({self.explore_min_events}) must not exceed "
                f"explore_max_events ({self.explore_max_events})",
                config_key="explore_min_events",
            )
        return self


class StorageSettings(BaseSettings):
    """Configuration for save file storage.

    Attributes:
        save_path: Location of the primary save file.
        autosave_interval: Seconds between automatic saves.
        save_retry_attempts: Attempts made for a single save write.
    """

    model_config = SettingsConfigDict(
        env_prefix="SPELLBINDER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    save_path: Path = Field(
        default=Path("data/spellbinder_save.json"),
        description="Path to the save file",
    )
    autosave_interval: float = Field(
        default=30.0,
        gt=0,
        le=3600,
        description="Seconds between autosaves",
    )
    save_retry_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Write attempts per save",
    )


class Settings(BaseSettings):
    """Main application settings aggregating all configuration domains.

    Attributes:
        app_name: Application name.
        app_version: Application version string.
        debug: Enable debug mode.
        log_level: Application logging level.
        game: Simulation settings.
        storage: Save file settings.
    """

    model_config = SettingsConfigDict(
        env_prefix="SPELLBINDER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_nested_delimiter="__",
    )

    app_name: str = Field(
        default="Rise of the Spellbinder",
        description="Application name",
    )
    app_version: str = Field(
        default="0.1.0",
        description="Application version",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )

    game: GameSettings = Field(default_factory=GameSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)

    @property
    def is_production(self) -> bool:
        """Check if running in production mode.

        Returns:
            True if not in debug mode.
        """
        return not self.debug


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the application settings singleton.

    Returns:
        The application Settings instance.

    Raises:
        ConfigurationError: If required configuration is missing or invalid.
    """
    try:
        return Settings()
    except Exception as exc:
        raise ConfigurationError(
            f"Failed to load application settings: {exc}",
            details={"original_error": str(exc)},
        ) from exc


def clear_settings_cache() -> None:
    """Clear the settings cache, forcing a reload on next access."""
    get_settings.cache_clear()


__all__ = [
    "GameSettings",
    "StorageSettings",
    "Settings",
    "get_settings",
    "clear_settings_cache",
]
