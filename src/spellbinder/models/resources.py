"""Resource ledger models.

A Resource is a bounded numeric pool with passive regeneration. The
ResourceManager owns every pool of one player, keyed by resource id.

All failures in this module are reported through return values: ``add``
returns the amount that actually fit, ``consume`` returns False and leaves
the pool untouched when it cannot pay.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Annotated, Any, Self

from pydantic import BaseModel, ConfigDict, Field, model_validator

from spellbinder.core.constants import (
    BASE_MANA_CAPACITY,
    BASE_MANA_REGEN,
    DEFAULT_HEALTH,
    DEFAULT_HEALTH_REGEN,
    DEFAULT_STAMINA,
    DEFAULT_STAMINA_REGEN,
    DEFAULT_STARTING_GOLD,
)
from spellbinder.core.logging import get_logger
from spellbinder.models.enums import MAGIC_ELEMENTS, ResourceId


logger = get_logger(__name__)

NonNegativeFloat = Annotated[float, Field(ge=0)]


class Resource(BaseModel):
    """A bounded numeric pool.

    Attributes:
        id: Unique resource id within a ledger.
        value: Current amount, always within ``[0, max]``.
        max: Capacity, or None for an unbounded pool.
        rate_per_second: Passive regeneration per second.
    """

    model_config = ConfigDict(extra="forbid")

    id: str
    value: NonNegativeFloat = 0.0
    max: NonNegativeFloat | None = None
    rate_per_second: float = 0.0

    @model_validator(mode="after")
    def validate_within_capacity(self) -> Self:
        """Reject a value above capacity.

        Returns:
            Self if validation passes.

        Raises:
            ValueError: If value exceeds max.
        """
        if self.max is not None and self.value > self.max:
            raise ValueError(f"resource {self.id!r} value {self.value} exceeds max {self.max}")
        return self

    @property
    def is_bounded(self) -> bool:
        return self.max is not None

    @property
    def is_full(self) -> bool:
        """Check whether the pool is at capacity."""
        return self.max is not None and self.value >= self.max

    @property
    def percentage(self) -> float:
        """Get the fill ratio in [0, 1]; unbounded pools report 0."""
        if not self.max:
            return 0.0
        return self.value / self.max

    def add(self, amount: float) -> float:
        """Add to the pool, clamped at capacity.

        Args:
            amount: Amount to add. Non-positive amounts are ignored.

        Returns:
            The amount actually added, never more than ``max - value``.
        """
        if amount <= 0:
            return 0.0
        if self.max is None:
            self.value += amount
            return amount

        room = self.max - self.value
        if amount >= room:
            self.value = self.max
            return room
        self.value += amount
        return amount

    def consume(self, amount: float) -> bool:
        """Remove an amount from the pool, all or nothing.

        Args:
            amount: Amount to remove.

        Returns:
            True if the full amount was removed, False if the pool could
            not cover it (the pool is then unchanged).
        """
        if amount < 0 or self.value < amount:
            return False
        self.value -= amount
        return True

    def set_max(self, new_max: float | None) -> None:
        """Change the capacity, clamping the current value down.

        Args:
            new_max: New capacity, or None for unbounded.
        """
        if new_max is not None and new_max < 0:
            new_max = 0.0
        self.max = new_max
        if new_max is not None and self.value > new_max:
            self.value = new_max

    def update(self, delta_seconds: float) -> None:
        """Apply passive regeneration for an elapsed interval."""
        if delta_seconds <= 0 or self.rate_per_second == 0:
            return
        amount = self.rate_per_second * delta_seconds
        if amount > 0:
            self.add(amount)
        else:
            self.consume(min(self.value, -amount))


def _default_resources() -> dict[str, Resource]:
    resources = [
        Resource(id=ResourceId.GOLD, value=DEFAULT_STARTING_GOLD),
        Resource(id=ResourceId.RESEARCH, value=0),
        Resource(
            id=ResourceId.HEALTH,
            value=DEFAULT_HEALTH,
            max=DEFAULT_HEALTH,
            rate_per_second=DEFAULT_HEALTH_REGEN,
        ),
        Resource(
            id=ResourceId.STAMINA,
            value=DEFAULT_STAMINA,
            max=DEFAULT_STAMINA,
            rate_per_second=DEFAULT_STAMINA_REGEN,
        ),
    ]
    for element in MAGIC_ELEMENTS:
        resources.append(
            Resource(
                id=element.mana_resource,
                value=0,
                max=BASE_MANA_CAPACITY,
                rate_per_second=BASE_MANA_REGEN,
            )
        )
    return {r.id: r for r in resources}


class ResourceManager(BaseModel):
    """The resource ledger of one player.

    Attributes:
        resources: Mapping of resource id to pool.
    """

    model_config = ConfigDict(extra="forbid")

    resources: dict[str, Resource] = Field(default_factory=dict)

    @model_validator(mode="after")
    def validate_keys(self) -> Self:
        """Ensure every pool is stored under its own id."""
        for key, resource in self.resources.items():
            if key != resource.id:
                raise ValueError(f"resource stored under {key!r} has id {resource.id!r}")
        return self

    @classmethod
    def create_default(cls) -> ResourceManager:
        """Create the starting ledger of a new player.

        Returns:
            Ledger with gold, research, health, stamina and four mana pools.
        """
        return cls(resources=_default_resources())

    def get(self, resource_id: str) -> Resource | None:
        return self.resources.get(resource_id)

    def has(self, resource_id: str) -> bool:
        return resource_id in self.resources

    def value_of(self, resource_id: str) -> float:
        """Get the current value of a pool, 0 for unknown ids."""
        resource = self.resources.get(resource_id)
        return resource.value if resource else 0.0

    def register(self, resource: Resource) -> None:
        """Add a pool to the ledger, replacing any pool with the same id."""
        self.resources[resource.id] = resource

    def add(self, resource_id: str, amount: float) -> float:
        """Add to a pool.

        Args:
            resource_id: Target pool.
            amount: Amount to add.

        Returns:
            The amount actually added; 0 for unknown ids.
        """
        resource = self.resources.get(resource_id)
        if resource is None:
            logger.warning("Unknown resource", resource_id=resource_id, amount=amount)
            return 0.0
        return resource.add(amount)

    def consume(self, resource_id: str, amount: float) -> bool:
        """Consume from a pool.

        Args:
            resource_id: Target pool.
            amount: Amount to remove.

        Returns:
            True if paid in full, False otherwise.
        """
        resource = self.resources.get(resource_id)
        if resource is None:
            logger.warning("Unknown resource", resource_id=resource_id, amount=amount)
            return False
        return resource.consume(amount)

    def can_afford(self, costs: Iterable[tuple[str, float]]) -> bool:
        """Check whether every listed cost can be paid right now.

        Repeated resource ids are summed before comparing.

        Args:
            costs: ``(resource_id, amount)`` pairs.

        Returns:
            True if all costs are covered.
        """
        totals: dict[str, float] = {}
        for resource_id, amount in costs:
            totals[resource_id] = totals.get(resource_id, 0.0) + amount

        for resource_id, amount in totals.items():
            resource = self.resources.get(resource_id)
            if resource is None:
                logger.warning("Cost references unknown resource", resource_id=resource_id)
                return False
            if resource.value < amount:
                return False
        return True

    def consume_all(self, costs: Iterable[tuple[str, float]]) -> bool:
        """Pay a list of costs atomically.

        Costs are validated first and then deducted in the given order.
        Should a deduction still fail, everything already deducted is put
        back before returning.

        Args:
            costs: ``(resource_id, amount)`` pairs.

        Returns:
            True if every cost was paid, False if nothing was paid.
        """
        cost_list = list(costs)
        if not self.can_afford(cost_list):
            return False

        paid: list[tuple[str, float]] = []
        for resource_id, amount in cost_list:
            if not self.consume(resource_id, amount):
                logger.error(
                    "Cost deduction failed after validation",
                    resource_id=resource_id,
                    amount=amount,
                )
                for refund_id, refund_amount in reversed(paid):
                    self.resources[refund_id].add(refund_amount)
                return False
            paid.append((resource_id, amount))
        return True

    def update(self, delta_seconds: float) -> None:
        for resource in self.resources.values():
            resource.update(delta_seconds)

    def to_snapshot(self) -> dict[str, Any]:
        return {rid: r.model_dump(mode="json") for rid, r in self.resources.items()}

    @classmethod
    def from_snapshot(cls, data: dict[str, Any]) -> ResourceManager:
        """Rebuild a ledger from a snapshot.

        Pools absent from the snapshot keep their default state so that
        saves made before a pool existed still load.

        Args:
            data: Mapping of resource id to pool snapshot.

        Returns:
            The restored ledger.
        """
        resources = _default_resources()
        for resource_id, payload in data.items():
            resources[resource_id] = Resource.model_validate(payload)
        return cls(resources=resources)


__all__ = [
    "Resource",
    "ResourceManager",
]
