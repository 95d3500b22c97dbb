"""Main game loop orchestration.

The loop drives a ``Game`` at a fixed tick interval and publishes
``tick``, ``update``, ``pause``, ``resume``, ``save`` and ``load``
events to registered handlers. It is cooperative: ``step`` performs at
most one tick and ``run`` simply calls it until stopped.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from spellbinder.core.exceptions import InvalidGameStateError
from spellbinder.core.logging import get_logger


if TYPE_CHECKING:
    from spellbinder.engine.game import Game
    from spellbinder.storage.save_system import SaveSystem

logger = get_logger(__name__)

EventHandler = Callable[..., None]


class LoopEvent(StrEnum):
    """Events published by the game loop."""

    TICK = "tick"
    UPDATE = "update"
    PAUSE = "pause"
    RESUME = "resume"
    SAVE = "save"
    LOAD = "load"


class GameLoop:
    """Fixed-interval driver of one game.

    Attributes:
        game: The driven game.
        tick_interval: Minimum seconds between ticks.
        autosave_interval: Seconds between automatic saves.
        is_running: Whether the loop accepts steps.
        tick_count: Ticks performed since construction.
    """

    def __init__(
        self,
        game: Game,
        *,
        tick_interval: float | None = None,
        time_source: Callable[[], float] | None = None,
        save_system: SaveSystem | None = None,
        autosave_interval: float | None = None,
    ) -> None:
        """Initialize the game loop.

        Args:
            game: The game to drive.
            tick_interval: Seconds between ticks; defaults to the game settings.
            time_source: Wall-clock source; defaults to the game context clock.
            save_system: Save system used for saving, loading and autosave.
            autosave_interval: Seconds between autosaves; defaults to the
                storage settings.
        """
        settings = game.context.settings
        self.game = game
        self.tick_interval = tick_interval if tick_interval is not None else settings.game.tick_interval
        self.autosave_interval = (
            autosave_interval if autosave_interval is not None else settings.storage.autosave_interval
        )
        self.is_running = False
        self.tick_count = 0

        self._time = time_source or game.context.clock
        self._save_system = save_system
        self._event_handlers: dict[str, list[EventHandler]] = {}
        self._last_tick_time = 0.0
        self._last_save_time = 0.0

        logger.info("GameLoop initialized", tick_interval=self.tick_interval)

    # -------------------------------------------------------------------------
    # Events
    # -------------------------------------------------------------------------

    def on(self, event: LoopEvent | str, handler: EventHandler) -> Callable[[], None]:
        """Register an event handler.

        Args:
            event: Event to handle.
            handler: Callback; ``tick`` handlers receive the elapsed seconds.

        Returns:
            A callable that removes the handler.

        Raises:
            ValueError: If the event name is unknown.
        """
        event = LoopEvent(event)
        self._event_handlers.setdefault(event, []).append(handler)
        return lambda: self.off(event, handler)

    def off(self, event: LoopEvent | str, handler: EventHandler) -> None:
        handlers = self._event_handlers.get(LoopEvent(event), [])
        if handler in handlers:
            handlers.remove(handler)

    def _emit_event(self, event: LoopEvent, *args: Any) -> None:
        for handler in list(self._event_handlers.get(event, [])):
            try:
                handler(*args)
            except Exception:
                logger.exception("Event handler error", event_type=event.value)

    # -------------------------------------------------------------------------
    # Driving
    # -------------------------------------------------------------------------

    def attach_save_system(self, save_system: SaveSystem | None) -> None:
        self._save_system = save_system

    def start(self) -> None:
        if self.is_running:
            return
        now = self._time()
        self.is_running = True
        self._last_tick_time = now
        self._last_save_time = now
        logger.info("GameLoop started")

    def stop(self) -> None:
        if self.is_running:
            self.is_running = False
            logger.info("GameLoop stopped", ticks=self.tick_count)

    def step(self, now: float | None = None) -> bool:
        """Tick the game if a full interval has elapsed.

        Args:
            now: Current time; the time source is read when omitted.

        Returns:
            True if a tick was performed.

        Raises:
            InvalidGameStateError: If the loop is not running.
        """
        if not self.is_running:
            raise InvalidGameStateError(
                "Game loop is not running",
                current_state="stopped",
                expected_states=["running"],
            )

        now = self._time() if now is None else now
        delta = now - self._last_tick_time
        if delta < self.tick_interval:
            return False

        self.game.tick(now)
        self._last_tick_time = now
        self.tick_count += 1
        self._emit_event(LoopEvent.TICK, delta)
        self._emit_event(LoopEvent.UPDATE)

        if self._save_system is not None and now - self._last_save_time >= self.autosave_interval:
            self.save(now)
        return True

    def run(
        self,
        max_ticks: int | None = None,
        *,
        sleep: Callable[[float], None] = time.sleep,
    ) -> int:
        """Drive the game until stopped or ``max_ticks`` ticks were made.

        Args:
            max_ticks: Tick limit; unlimited when None.
            sleep: Waits between steps.

        Returns:
            Number of ticks performed by this call.
        """
        self.start()
        ticks = 0
        while self.is_running and (max_ticks is None or ticks < max_ticks):
            if self.step():
                ticks += 1
            else:
                sleep(self.tick_interval)
        return ticks

    # -------------------------------------------------------------------------
    # Pause
    # -------------------------------------------------------------------------

    def pause(self) -> None:
        self.game.pause()
        self._emit_event(LoopEvent.PAUSE)
        logger.info("Game paused")

    def resume(self) -> None:
        self.game.resume(self._time())
        self._emit_event(LoopEvent.RESUME)
        logger.info("Game resumed")

    def toggle_pause(self) -> bool:
        """Flip the pause state.

        Returns:
            True if the game is paused afterwards.
        """
        if self.game.is_paused:
            self.resume()
        else:
            self.pause()
        return self.game.is_paused

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def save(self, now: float | None = None) -> bool:
        """Save through the attached save system.

        Returns:
            True if the game was written.
        """
        if self._save_system is None:
            logger.warning("No save system attached")
            return False
        self._last_save_time = self._time() if now is None else now
        if not self._save_system.save(self.game):
            return False
        self._emit_event(LoopEvent.SAVE)
        return True

    def load(self) -> bool:
        """Load through the attached save system.

        Returns:
            True if a save was loaded.
        """
        if self._save_system is None:
            logger.warning("No save system attached")
            return False
        if not self._save_system.load(self.game):
            return False
        self._last_tick_time = self._time()
        self._emit_event(LoopEvent.LOAD)
        return True


__all__ = [
    "EventHandler",
    "LoopEvent",
    "GameLoop",
]
