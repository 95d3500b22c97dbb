"""Timed activity models.

An activity is a description of work that takes ``duration`` seconds,
costs resources up front and grants rewards on completion. Instances
are created by the scheduler when an activity is started.
"""

from __future__ import annotations

import random
from enum import StrEnum
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ActivityType(StrEnum):
    """Activity kinds with a type-specific completion effect."""

    LEARNING = "learning"
    PRACTICE = "practice"
    TRAINING = "training"
    EXPLORATION = "exploration"


class ActivityReward(BaseModel):
    """A reward granted when an activity completes.

    Attributes:
        resource: Ledger resource id, or ``experience`` / ``skill_exp``.
        amount: Fixed amount, used when no random range is set.
        random_range: Inclusive integer range to roll the amount from.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    resource: str
    amount: float = 0
    random_range: tuple[int, int] | None = None

    @model_validator(mode="after")
    def check_range(self) -> ActivityReward:
        if self.random_range is not None and self.random_range[0] > self.random_range[1]:
            raise ValueError(f"reward range {self.random_range} is inverted")
        return self


class ActivityCost(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    resource: str
    amount: Annotated[float, Field(ge=0)]


class ActivityData(BaseModel):
    """Description of a timed activity."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    name: str
    description: str = ""
    duration: Annotated[float, Field(gt=0)]
    rewards: list[ActivityReward] = Field(default_factory=list)
    costs: list[ActivityCost] = Field(default_factory=list)
    type: ActivityType | None = None
    category: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)

    def cost_pairs(self) -> list[tuple[str, float]]:
        return [(c.resource, c.amount) for c in self.costs]


class ActivityInstance(BaseModel):
    """A started activity.

    ``progress`` is ``elapsed / duration`` clamped to [0, 1]; queued
    instances keep progress 0 until they are promoted.
    """

    model_config = ConfigDict(validate_assignment=True)

    id: str
    activity: ActivityData
    start_time: float
    progress: float = Field(default=0, ge=0, le=1)
    is_completed: bool = False


def roll_reward_amount(reward: ActivityReward, rng: random.Random) -> float:
    """Resolve the amount of a reward.

    Args:
        reward: The reward.
        rng: Random source for ranged rewards.

    Returns:
        A uniform integer from ``random_range`` when set, else ``amount``.
    """
    if reward.random_range is None:
        return reward.amount
    low, high = reward.random_range
    return rng.randint(low, high)


__all__ = [
    "ActivityType",
    "ActivityReward",
    "ActivityCost",
    "ActivityData",
    "ActivityInstance",
    "roll_reward_amount",
]
