"""Tests for the activity runner."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from spellbinder.engine.scheduler import ActivityRunner
from spellbinder.models.activities import ActivityData, ActivityInstance
from spellbinder.models.resources import ResourceManager


if TYPE_CHECKING:
    from tests.conftest import FakeClock


def make_activity(activity_id: str, duration: float = 10, gold: float = 10) -> ActivityData:
    return ActivityData(
        id=activity_id,
        name=activity_id.title(),
        duration=duration,
        costs=[{"resource": "gold", "amount": gold}],
    )


@pytest.fixture
def resources() -> ResourceManager:
    """Provide a fresh ledger with 100 gold."""
    return ResourceManager.create_default()


@pytest.fixture
def runner(resources: ResourceManager, clock: FakeClock) -> ActivityRunner:
    """Provide a runner on the fake clock."""
    return ActivityRunner(resources, clock=clock)


class TestStartActivity:
    """Tests for starting activities."""

    def test_start_pays_and_runs(self, runner: ActivityRunner, resources: ResourceManager) -> None:
        """Test that an idle runner starts the activity immediately."""
        assert runner.start_activity(make_activity("chores"))

        assert resources.value_of("gold") == 90
        assert runner.current_activity.activity.id == "chores"
        assert runner.current_activity.start_time == 1000.0

    def test_unaffordable(self, runner: ActivityRunner, resources: ResourceManager) -> None:
        """Test that an unaffordable activity is refused without charge."""
        assert runner.start_activity(make_activity("feast", gold=1_000)) is False

        assert resources.value_of("gold") == 100
        assert runner.current_activity is None
        assert runner.queue == []

    def test_busy_runner_queues_and_pays(self, runner: ActivityRunner, resources: ResourceManager) -> None:
        """Test that queued activities are paid up front."""
        runner.start_activity(make_activity("first"))
        runner.start_activity(make_activity("second"))

        assert [i.activity.id for i in runner.queue] == ["second"]
        assert resources.value_of("gold") == 80


class TestUpdate:
    """Tests for advancing activities."""

    def test_progress(self, runner: ActivityRunner) -> None:
        """Test progress and remaining time mid-way."""
        runner.start_activity(make_activity("chores"))

        assert runner.update(1005.0) is None

        assert runner.get_progress() == 0.5
        assert runner.get_remaining_time(1005.0) == 5.0

    def test_completion_promotes_next(self, runner: ActivityRunner) -> None:
        """Test completion, notification and promotion of the next activity."""
        completed: list[str] = []
        runner.on_complete(lambda i: completed.append(i.activity.id))
        runner.start_activity(make_activity("first"))
        runner.start_activity(make_activity("second"))

        finished = runner.update(1012.0)

        assert finished.activity.id == "first"
        assert finished.is_completed
        assert completed == ["first"]
        assert runner.current_activity.activity.id == "second"
        assert runner.current_activity.start_time == 1012.0
        assert runner.queue == []

    def test_activity_started_on_completion_waits_its_turn(self, runner: ActivityRunner) -> None:
        """Test that a listener cannot jump ahead of queued activities."""
        runner.on_complete(lambda i: runner.start_activity(make_activity("third")))
        runner.start_activity(make_activity("first"))
        runner.start_activity(make_activity("second"))

        runner.update(1010.0)

        assert runner.current_activity.activity.id == "second"
        assert [i.activity.id for i in runner.queue] == ["third"]

    def test_completes_once(self, runner: ActivityRunner) -> None:
        """Test that an activity is reported complete exactly once."""
        completed: list[ActivityInstance] = []
        runner.on_complete(completed.append)
        runner.start_activity(make_activity("chores"))

        runner.update(1010.0)
        runner.update(1020.0)

        assert len(completed) == 1
        assert runner.current_activity is None

    def test_idle_runner_promotes_queue(self, runner: ActivityRunner) -> None:
        """Test that a waiting activity starts when the runner is idle."""
        runner.start_activity(make_activity("first"))
        runner.start_activity(make_activity("second"))
        runner.cancel_current_activity()

        runner.update(1003.0)

        assert runner.current_activity.activity.id == "second"
        assert runner.current_activity.start_time == 1003.0
        assert runner.get_progress() == 0

    def test_nothing_to_do(self, runner: ActivityRunner) -> None:
        """Test updating an idle runner."""
        assert runner.update() is None
        assert runner.get_progress() == 0
        assert runner.get_remaining_time() == 0

    def test_failing_listener_is_isolated(self, runner: ActivityRunner) -> None:
        """Test that a raising listener does not block completion."""
        completed: list[str] = []

        def broken(instance: ActivityInstance) -> None:
            raise RuntimeError("boom")

        runner.on_complete(broken)
        runner.on_complete(lambda i: completed.append(i.activity.id))
        runner.start_activity(make_activity("chores"))

        assert runner.update(1010.0) is not None
        assert completed == ["chores"]

    def test_remove_listener(self, runner: ActivityRunner) -> None:
        """Test unregistering a completion listener."""
        completed: list[ActivityInstance] = []
        remove = runner.on_complete(completed.append)
        remove()
        runner.start_activity(make_activity("chores"))

        runner.update(1010.0)

        assert completed == []


class TestCancellation:
    """Tests for cancelling work."""

    def test_cancel_does_not_refund(self, runner: ActivityRunner, resources: ResourceManager) -> None:
        """Test that cancelling keeps the payment."""
        runner.start_activity(make_activity("chores"))

        cancelled = runner.cancel_current_activity()

        assert cancelled.activity.id == "chores"
        assert runner.current_activity is None
        assert resources.value_of("gold") == 90

    def test_clear_queue(self, runner: ActivityRunner) -> None:
        """Test dropping waiting activities."""
        runner.start_activity(make_activity("first"))
        runner.start_activity(make_activity("second"))

        runner.clear_queue()

        assert runner.queue == []
        assert runner.current_activity is not None


class TestRunnerSnapshot:
    """Tests for runner snapshots."""

    def test_round_trip(self, runner: ActivityRunner, resources: ResourceManager) -> None:
        """Test restoring the running and waiting activities."""
        runner.start_activity(make_activity("first"))
        runner.start_activity(make_activity("second", duration=20))
        runner.update(1004.0)
        restored = ActivityRunner(resources)

        restored.load_snapshot(runner.to_snapshot())

        assert restored.to_snapshot() == runner.to_snapshot()
        assert restored.current_activity.progress == pytest.approx(0.4)
