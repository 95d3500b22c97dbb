"""Activity scheduler.

At most one activity runs at a time; further activities wait in a FIFO
queue. Costs are paid when an activity is started, whether it runs
immediately or is queued, and are never refunded.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, Field

from spellbinder.core.logging import get_logger
from spellbinder.models.activities import ActivityData, ActivityInstance
from spellbinder.models.resources import ResourceManager


logger = get_logger(__name__)

CompletionListener = Callable[[ActivityInstance], None]


class RunnerSnapshot(BaseModel):
    current_activity: ActivityInstance | None = None
    queue: list[ActivityInstance] = Field(default_factory=list)


class ActivityRunner:
    """Runs timed activities one at a time.

    Attributes:
        current_activity: The running instance, if any.
    """

    def __init__(
        self,
        resources: ResourceManager,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the runner.

        Args:
            resources: Ledger that activity costs are paid from.
            clock: Time source used when no explicit time is given.
        """
        self._resources = resources
        self._clock = clock
        self.current_activity: ActivityInstance | None = None
        self._queue: list[ActivityInstance] = []
        self._listeners: list[CompletionListener] = []

    @property
    def queue(self) -> list[ActivityInstance]:
        return list(self._queue)

    def bind_resources(self, resources: ResourceManager) -> None:
        """Pay future costs from another ledger."""
        self._resources = resources

    # -------------------------------------------------------------------------
    # Listeners
    # -------------------------------------------------------------------------

    def on_complete(self, listener: CompletionListener) -> Callable[[], None]:
        """Register a completion listener.

        Returns:
            A callable that removes the listener.
        """
        self._listeners.append(listener)
        return lambda: self.off_complete(listener)

    def off_complete(self, listener: CompletionListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self, instance: ActivityInstance) -> None:
        for listener in list(self._listeners):
            try:
                listener(instance)
            except Exception:
                logger.exception(
                    "Activity completion handler error",
                    activity_id=instance.activity.id,
                    instance_id=instance.id,
                )

    # -------------------------------------------------------------------------
    # Scheduling
    # -------------------------------------------------------------------------

    def start_activity(self, activity: ActivityData, now: float | None = None) -> bool:
        """Pay for an activity and run or enqueue it.

        Args:
            activity: The activity to start.
            now: Start time; the clock is read when omitted.

        Returns:
            False if the costs could not be paid; nothing is deducted then.
        """
        if not self._resources.consume_all(activity.cost_pairs()):
            logger.warning("Cannot afford activity", activity_id=activity.id)
            return False

        instance = ActivityInstance(
            id=str(uuid4()),
            activity=activity,
            start_time=self._clock() if now is None else now,
        )
        if self.current_activity is None and not self._queue:
            self.current_activity = instance
            logger.debug("Activity started", activity_id=activity.id)
        else:
            self._queue.append(instance)
            logger.debug("Activity queued", activity_id=activity.id, position=len(self._queue))
        return True

    def _promote(self, now: float) -> None:
        instance = self._queue.pop(0)
        instance.start_time = now
        instance.progress = 0.0
        self.current_activity = instance

    def update(self, now: float | None = None) -> ActivityInstance | None:
        """Advance the running activity.

        A waiting activity is promoted when nothing runs; its start time
        becomes the promotion time. An activity whose progress reaches 1
        completes exactly once: it is removed, the next queued activity is
        promoted and then listeners are notified. An activity started by a
        listener waits behind those already queued.

        Args:
            now: Current time; the clock is read when omitted.

        Returns:
            The instance completed by this call, if any.
        """
        now = self._clock() if now is None else now
        if self.current_activity is None:
            if not self._queue:
                return None
            self._promote(now)

        instance = self.current_activity
        elapsed = max(0.0, now - instance.start_time)
        instance.progress = min(elapsed / instance.activity.duration, 1.0)
        if instance.progress < 1.0 or instance.is_completed:
            return None

        instance.is_completed = True
        self.current_activity = None
        logger.info("Activity completed", activity_id=instance.activity.id)
        if self._queue:
            self._promote(now)
        self._notify(instance)
        return instance

    def cancel_current_activity(self) -> ActivityInstance | None:
        """Drop the running activity without refunding its costs."""
        instance, self.current_activity = self.current_activity, None
        if instance is not None:
            logger.info("Activity cancelled", activity_id=instance.activity.id)
        return instance

    def clear_queue(self) -> None:
        """Drop every waiting activity without refunding costs."""
        self._queue.clear()

    def get_progress(self) -> float:
        return self.current_activity.progress if self.current_activity else 0.0

    def get_remaining_time(self, now: float | None = None) -> float:
        if self.current_activity is None:
            return 0.0
        now = self._clock() if now is None else now
        elapsed = now - self.current_activity.start_time
        return max(0.0, self.current_activity.activity.duration - elapsed)

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def to_snapshot(self) -> dict[str, Any]:
        return RunnerSnapshot(
            current_activity=self.current_activity,
            queue=self._queue,
        ).model_dump(mode="json")

    def load_snapshot(self, data: dict[str, Any]) -> None:
        snapshot = RunnerSnapshot.model_validate(data)
        self.current_activity = snapshot.current_activity
        self._queue = list(snapshot.queue)


__all__ = [
    "CompletionListener",
    "RunnerSnapshot",
    "ActivityRunner",
]
