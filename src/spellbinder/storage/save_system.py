"""JSON save file persistence.

A save is a versioned document wrapping the game snapshot:

    {version, game_time, is_paused, last_update, has_started, player,
     activity_runner: {current_activity, queue}, monsters, combat,
     meta: {saved_at, play_time}}

Writes go through a temporary file that replaces the save atomically.
Loading is all-or-nothing: a save that fails validation or references
unknown definitions leaves the running game untouched.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from spellbinder.core.config import get_settings
from spellbinder.core.constants import SAVE_VERSION
from spellbinder.core.exceptions import DataIntegrityError, PersistenceError, SaveLoadError
from spellbinder.core.logging import get_logger


if TYPE_CHECKING:
    from spellbinder.engine.game import Game

logger = get_logger(__name__)


# =============================================================================
# Save Document
# =============================================================================


class SaveMeta(BaseModel):
    saved_at: float
    play_time: float = Field(default=0.0, ge=0)


class SaveData(BaseModel):
    """A complete save document."""

    model_config = ConfigDict(extra="ignore")

    version: str = SAVE_VERSION
    game_time: float = Field(default=0.0, ge=0)
    is_paused: bool = False
    last_update: float = 0.0
    has_started: bool = False
    player: dict[str, Any]
    activity_runner: dict[str, Any] = Field(default_factory=dict)
    monsters: list[dict[str, Any]] = Field(default_factory=list)
    combat: dict[str, Any] | None = None
    meta: SaveMeta

    def game_snapshot(self) -> dict[str, Any]:
        """Get the game snapshot without the save envelope."""
        return self.model_dump(mode="json", exclude={"version", "meta"})


# =============================================================================
# Save System
# =============================================================================


class SaveSystem:
    """Reads and writes one save file.

    Attributes:
        path: Location of the save file.
        retry_attempts: Attempts made for a single write.
    """

    def __init__(
        self,
        path: str | Path | None = None,
        *,
        retry_attempts: int | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the save system.

        Args:
            path: Save file location; defaults to the storage settings.
            retry_attempts: Write attempts; defaults to the storage settings.
            clock: Source of the ``saved_at`` timestamp.
        """
        storage = get_settings().storage
        self.path = Path(path) if path is not None else storage.save_path
        self.retry_attempts = retry_attempts or storage.save_retry_attempts
        self._clock = clock

    def has_save(self) -> bool:
        return self.path.is_file()

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    def build_save_data(self, game: Game) -> SaveData:
        snapshot = game.to_snapshot()
        return SaveData(
            version=SAVE_VERSION,
            meta=SaveMeta(saved_at=self._clock(), play_time=game.clock.game_time),
            **snapshot,
        )

    def export_save(self, game: Game) -> str:
        """Serialize a game to save file text."""
        return self.build_save_data(game).model_dump_json(indent=2)

    def parse(self, text: str) -> SaveData:
        """Validate save file text.

        Raises:
            SaveLoadError: If the text is not a valid save document.
        """
        try:
            return SaveData.model_validate_json(text)
        except ValidationError as e:
            raise SaveLoadError(
                "Save document is malformed",
                path=str(self.path),
                details={"errors": e.error_count()},
            ) from e

    # -------------------------------------------------------------------------
    # Writing
    # -------------------------------------------------------------------------

    def _write(self, text: str) -> None:
        @retry(
            retry=retry_if_exception_type(OSError),
            stop=stop_after_attempt(self.retry_attempts),
            wait=wait_exponential(multiplier=0.05, max=1),
            reraise=True,
        )
        def _attempt() -> None:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            temp_path = self.path.with_name(self.path.name + ".tmp")
            temp_path.write_text(text, encoding="utf-8")
            temp_path.replace(self.path)

        try:
            _attempt()
        except OSError as e:
            raise PersistenceError(f"Failed to write save: {e}", path=str(self.path)) from e

    def save(self, game: Game) -> bool:
        """Write the game to the save file.

        Returns:
            True if the save was written. Failures are logged.
        """
        try:
            self._write(self.export_save(game))
        except PersistenceError as e:
            logger.error("Save failed", path=str(self.path), error=e.message)
            game.log.error("Saving failed")
            return False

        logger.info("Game saved", path=str(self.path))
        game.log.info("Game saved")
        return True

    def delete_save(self) -> bool:
        """Remove the save file.

        Returns:
            True if a file was removed.
        """
        try:
            self.path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.error("Failed to delete save", path=str(self.path), error=str(e))
            return False
        logger.info("Save deleted", path=str(self.path))
        return True

    # -------------------------------------------------------------------------
    # Reading
    # -------------------------------------------------------------------------

    def import_save(self, game: Game, text: str) -> bool:
        """Load a game from save file text.

        A version mismatch is reported but does not prevent loading.

        Returns:
            True if the game now reflects the save; on False the game is
            unchanged.
        """
        try:
            data = self.parse(text)
            if data.version != SAVE_VERSION:
                logger.warning(
                    "Save version mismatch",
                    save_version=data.version,
                    expected_version=SAVE_VERSION,
                )
                game.log.warning(f"Save was written by version {data.version}")
            game.load_snapshot(data.game_snapshot())
        except (SaveLoadError, DataIntegrityError) as e:
            logger.error("Load failed", path=str(self.path), error=str(e))
            game.log.error("Loading failed")
            return False

        logger.info("Game loaded", path=str(self.path), play_time=data.meta.play_time)
        game.log.info("Game loaded")
        return True

    def load(self, game: Game) -> bool:
        """Load the save file into a game.

        Returns:
            True if loaded; False if there is no readable, valid save.
        """
        if not self.has_save():
            logger.info("No save file", path=str(self.path))
            return False
        try:
            text = self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.error("Failed to read save", path=str(self.path), error=str(e))
            game.log.error("Loading failed")
            return False
        return self.import_save(game, text)


__all__ = [
    "SaveMeta",
    "SaveData",
    "SaveSystem",
]
