"""Tests for the resource ledger."""

from __future__ import annotations

import pydantic
import pytest

from spellbinder.models.resources import Resource, ResourceManager


class TestResource:
    """Tests for a single bounded pool."""

    def test_add_clamps_at_capacity(self) -> None:
        """Test that add returns only the amount that fit."""
        resource = Resource(id="mana_fire", value=90, max=100)

        added = resource.add(25)

        assert added == 10
        assert resource.value == 100
        assert resource.is_full

    def test_add_ignores_non_positive(self) -> None:
        """Test that zero and negative amounts change nothing."""
        resource = Resource(id="gold", value=5)

        assert resource.add(0) == 0
        assert resource.add(-3) == 0
        assert resource.value == 5

    def test_unbounded_add(self) -> None:
        """Test adding to a pool without capacity."""
        resource = Resource(id="gold", value=5)

        assert resource.add(1_000) == 1_000
        assert resource.value == 1_005
        assert not resource.is_bounded

    def test_consume_is_all_or_nothing(self) -> None:
        """Test that an unaffordable consume leaves the pool unchanged."""
        resource = Resource(id="gold", value=10)

        assert resource.consume(11) is False
        assert resource.value == 10
        assert resource.consume(10) is True
        assert resource.value == 0

    def test_set_max_clamps_value(self) -> None:
        """Test that lowering capacity clamps the current value."""
        resource = Resource(id="mana_water", value=80, max=100)

        resource.set_max(50)

        assert resource.max == 50
        assert resource.value == 50

    def test_regeneration(self) -> None:
        """Test passive regeneration over elapsed time."""
        resource = Resource(id="stamina", value=0, max=10, rate_per_second=2)

        resource.update(3)
        assert resource.value == 6

        resource.update(10)
        assert resource.value == 10

    def test_negative_rate_drains(self) -> None:
        """Test that a negative rate drains without going below zero."""
        resource = Resource(id="health", value=5, max=10, rate_per_second=-1)

        resource.update(2)
        assert resource.value == 3

        resource.update(10)
        assert resource.value == 0

    def test_value_above_max_rejected(self) -> None:
        """Test that a pool cannot be created over capacity."""
        with pytest.raises(pydantic.ValidationError):
            Resource(id="health", value=150, max=100)

    def test_percentage(self) -> None:
        """Test fill ratio of bounded and unbounded pools."""
        assert Resource(id="health", value=25, max=100).percentage == 0.25
        assert Resource(id="gold", value=25).percentage == 0.0


class TestResourceManager:
    """Tests for the ResourceManager ledger."""

    def test_default_ledger(self) -> None:
        """Test the starting pools of a new player."""
        ledger = ResourceManager.create_default()

        assert ledger.value_of("gold") == 100
        assert ledger.value_of("research") == 0
        assert ledger.value_of("health") == 100
        assert ledger.value_of("stamina") == 100
        for pool in ("mana_fire", "mana_water", "mana_earth", "mana_wind"):
            assert ledger.value_of(pool) == 0
            assert ledger.get(pool).max == 100

    def test_unknown_resource(self) -> None:
        """Test that unknown ids are reported, not raised."""
        ledger = ResourceManager.create_default()

        assert ledger.add("moonstone", 5) == 0
        assert ledger.consume("moonstone", 5) is False
        assert ledger.value_of("moonstone") == 0
        assert not ledger.has("moonstone")

    def test_register(self) -> None:
        """Test adding a custom pool."""
        ledger = ResourceManager.create_default()

        ledger.register(Resource(id="moonstone", value=1))

        assert ledger.add("moonstone", 2) == 2
        assert ledger.value_of("moonstone") == 3

    def test_can_afford_sums_repeated_ids(self) -> None:
        """Test that repeated costs of one resource are summed."""
        ledger = ResourceManager.create_default()

        assert ledger.can_afford([("gold", 60)])
        assert not ledger.can_afford([("gold", 60), ("gold", 60)])

    def test_consume_all_is_atomic(self) -> None:
        """Test that a partially affordable cost list deducts nothing."""
        ledger = ResourceManager.create_default()

        paid = ledger.consume_all([("gold", 10), ("research", 5)])

        assert paid is False
        assert ledger.value_of("gold") == 100
        assert ledger.value_of("research") == 0

    def test_consume_all_pays_every_cost(self) -> None:
        """Test that an affordable cost list is deducted exactly once."""
        ledger = ResourceManager.create_default()
        ledger.add("research", 20)

        assert ledger.consume_all([("gold", 10), ("research", 5)])

        assert ledger.value_of("gold") == 90
        assert ledger.value_of("research") == 15

    def test_update_regenerates_every_pool(self) -> None:
        """Test regeneration across the ledger."""
        ledger = ResourceManager.create_default()

        ledger.update(4)

        assert ledger.value_of("mana_fire") == 4
        assert ledger.value_of("stamina") == 100

    def test_snapshot_round_trip(self) -> None:
        """Test restoring a ledger from its snapshot."""
        ledger = ResourceManager.create_default()
        ledger.add("mana_earth", 42)
        ledger.consume("gold", 30)

        restored = ResourceManager.from_snapshot(ledger.to_snapshot())

        assert restored.to_snapshot() == ledger.to_snapshot()

    def test_snapshot_missing_pools_keep_defaults(self) -> None:
        """Test that pools absent from an old snapshot get default state."""
        restored = ResourceManager.from_snapshot({"gold": {"id": "gold", "value": 7}})

        assert restored.value_of("gold") == 7
        assert restored.value_of("health") == 100
        assert restored.has("mana_wind")
