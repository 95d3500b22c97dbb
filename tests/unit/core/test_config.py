"""Tests for configuration management."""

from __future__ import annotations

from pathlib import Path

import pytest

from spellbinder.core.config import (
    GameSettings,
    Settings,
    StorageSettings,
    clear_settings_cache,
    get_settings,
)
from spellbinder.core.exceptions import ConfigurationError


class TestGameSettings:
    """Tests for GameSettings configuration."""

    def test_default_values(self) -> None:
        """Test default simulation settings."""
        settings = GameSettings()

        assert settings.tick_interval == 0.1
        assert settings.class_cache_window == 0.5
        assert settings.default_max_rounds == 100
        assert settings.explore_min_events == 3
        assert settings.explore_max_events == 5

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that environment variables override defaults."""
        monkeypatch.setenv("SPELLBINDER_GAME_TICK_INTERVAL", "0.25")

        settings = GameSettings()

        assert settings.tick_interval == 0.25

    def test_explore_range_validation(self) -> None:
        """Test that the exploration event range cannot be inverted."""
        with pytest.raises(ConfigurationError) as exc_info:
            GameSettings(explore_min_events=6, explore_max_events=4)

        assert "explore_min_events" in str(exc_info.value)


class TestStorageSettings:
    """Tests for StorageSettings configuration."""

    def test_default_values(self) -> None:
        """Test default storage settings."""
        settings = StorageSettings()

        assert settings.save_path == Path("data/spellbinder_save.json")
        assert settings.autosave_interval == 30.0
        assert settings.save_retry_attempts == 3

    def test_custom_path(self, tmp_path: Path) -> None:
        """Test a custom save path."""
        custom = tmp_path / "slot1.json"

        settings = StorageSettings(save_path=custom)

        assert settings.save_path == custom


class TestSettings:
    """Tests for main Settings configuration."""

    def test_default_settings(
        self,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Test default settings initialization."""
        monkeypatch.chdir(tmp_path)

        settings = Settings()

        assert settings.app_name == "Rise of the Spellbinder"
        assert settings.app_version == "0.1.0"
        assert settings.debug is False
        assert settings.log_level == "INFO"
        assert isinstance(settings.game, GameSettings)
        assert isinstance(settings.storage, StorageSettings)

    def test_debug_mode(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test debug mode setting."""
        monkeypatch.setenv("SPELLBINDER_DEBUG", "true")
        monkeypatch.chdir(tmp_path)

        settings = Settings()

        assert settings.debug is True
        assert settings.is_production is False

    def test_is_production_property(
        self,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Test is_production property."""
        monkeypatch.setenv("SPELLBINDER_DEBUG", "false")
        monkeypatch.chdir(tmp_path)

        settings = Settings()

        assert settings.is_production is True


class TestGetSettings:
    """Tests for get_settings singleton function."""

    def test_returns_settings_instance(
        self,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Test that get_settings returns a Settings instance."""
        monkeypatch.chdir(tmp_path)
        clear_settings_cache()

        settings = get_settings()

        assert isinstance(settings, Settings)

    def test_caching(
        self,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Test that settings are cached."""
        monkeypatch.chdir(tmp_path)
        clear_settings_cache()

        settings1 = get_settings()
        settings2 = get_settings()

        assert settings1 is settings2

    def test_cache_clear(
        self,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Test that cache can be cleared."""
        monkeypatch.chdir(tmp_path)
        clear_settings_cache()

        settings1 = get_settings()
        clear_settings_cache()
        settings2 = get_settings()

        assert settings1 is not settings2
