"""Monster definitions and combat instances."""

from __future__ import annotations

import random
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field

from spellbinder.core.exceptions import ValidationError
from spellbinder.core.logging import get_logger
from spellbinder.models.enums import Element


logger = get_logger(__name__)


DropAmount = str | int
"""A drop amount: a fixed number or a ``"min~max"`` range."""


def parse_drop_range(value: DropAmount | None) -> tuple[int, int]:
    """Parse a drop amount into an inclusive ``(min, max)`` range.

    Args:
        value: ``"3~8"``, ``"5"``, ``5`` or None.

    Returns:
        The range; a fixed amount gives ``(n, n)`` and None gives ``(0, 0)``.

    Raises:
        ValidationError: If the text is not a number or a range, or the
            range is inverted.
    """
    if value is None:
        return 0, 0
    if isinstance(value, int):
        return value, value

    text = value.strip()
    try:
        if "~" in text:
            low_text, high_text = text.split("~", 1)
            low, high = int(low_text or 0), int(high_text or 0)
        else:
            low = high = int(text or 0)
    except ValueError as exc:
        raise ValidationError(
            "Malformed drop range",
            field_name="drops",
            invalid_value=value,
        ) from exc

    if low > high:
        raise ValidationError("Drop range minimum exceeds maximum", field_name="drops", invalid_value=value)
    return low, high


class LootTable(BaseModel):
    """Loot declared by a monster or a locale."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    gold: DropAmount | None = None
    experience: DropAmount | None = None
    mana_fire: DropAmount | None = None
    mana_water: DropAmount | None = None
    mana_earth: DropAmount | None = None
    mana_wind: DropAmount | None = None
    items: list[str] = Field(default_factory=list)

    def amounts(self) -> dict[str, DropAmount]:
        """Get the declared numeric drops keyed by reward name."""
        return {
            key: value
            for key, value in self.model_dump(exclude={"items"}).items()
            if value is not None
        }

    def roll(self, rng: random.Random) -> dict[str, Any]:
        """Roll the loot.

        Numeric drops are uniform integers over their range; one item is
        picked at random when an item list is declared.

        Args:
            rng: Random source.

        Returns:
            Mapping of reward name to amount, plus ``items`` when present.
        """
        loot: dict[str, Any] = {}
        for key, amount in self.amounts().items():
            low, high = parse_drop_range(amount)
            loot[key] = rng.randint(low, high)
        if self.items:
            loot["items"] = [rng.choice(self.items)]
        return loot


class MonsterDefinition(BaseModel):
    """Static monster data."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    name: str
    element: Element = Element.NEUTRAL
    max_health: Annotated[float, Field(gt=0)]
    attack: Annotated[float, Field(ge=0)] = 0
    defense: Annotated[float, Field(ge=0)] = 0
    spells: list[str] = Field(default_factory=list)
    drops: LootTable = Field(default_factory=LootTable)
    level: Annotated[int, Field(ge=1)] = 1


class Buff(BaseModel):
    """A timed stat modifier.

    Attributes:
        type: Stat it modifies, ``attack`` or ``defense``.
        value: Amount added (buff) or subtracted (debuff).
        duration: Remaining rounds.
        source: What applied it, usually a spell id.
    """

    model_config = ConfigDict(validate_assignment=True)

    type: str
    value: float
    duration: int = Field(ge=0)
    source: str = ""


class MonsterSnapshot(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str
    current_health: float = Field(ge=0)
    is_alive: bool
    buffs: list[Buff] = Field(default_factory=list)
    debuffs: list[Buff] = Field(default_factory=list)


class Monster:
    """A monster taking part in one combat."""

    def __init__(self, definition: MonsterDefinition) -> None:
        self._definition = definition
        self.current_health = definition.max_health
        self.is_alive = True
        self.buffs: list[Buff] = []
        self.debuffs: list[Buff] = []

    @property
    def id(self) -> str:
        return self._definition.id

    @property
    def name(self) -> str:
        return self._definition.name

    @property
    def element(self) -> Element:
        return self._definition.element

    @property
    def level(self) -> int:
        return self._definition.level

    @property
    def definition(self) -> MonsterDefinition:
        return self._definition

    @property
    def max_health(self) -> float:
        return self._definition.max_health

    def _modified(self, stat: str, base: float) -> float:
        value = base
        value += sum(b.value for b in self.buffs if b.type == stat)
        value -= sum(d.value for d in self.debuffs if d.type == stat)
        return max(0.0, value)

    @property
    def attack(self) -> float:
        return self._modified("attack", self._definition.attack)

    @property
    def defense(self) -> float:
        return self._modified("defense", self._definition.defense)

    @property
    def health_percentage(self) -> float:
        return self.current_health / self.max_health * 100

    def take_damage(self, raw: float) -> float:
        """Apply incoming damage reduced by defense.

        Every hit deals at least 1.

        Args:
            raw: Damage before defense.

        Returns:
            Damage actually dealt.
        """
        dealt = max(1.0, raw - self.defense)
        self.current_health -= dealt
        if self.current_health <= 0:
            self.current_health = 0.0
            self.is_alive = False
        return dealt

    def heal(self, amount: float) -> float:
        healed = max(0.0, min(amount, self.max_health - self.current_health))
        self.current_health += healed
        return healed

    def add_buff(self, buff: Buff) -> None:
        self.buffs.append(buff)

    def add_debuff(self, debuff: Buff) -> None:
        self.debuffs.append(debuff)

    def tick_modifiers(self) -> None:
        """Advance buffs and debuffs by one round, dropping expired ones."""
        for modifier in (*self.buffs, *self.debuffs):
            modifier.duration = max(0, modifier.duration - 1)
        self.buffs = [b for b in self.buffs if b.duration > 0]
        self.debuffs = [d for d in self.debuffs if d.duration > 0]

    def generate_drops(self, rng: random.Random) -> dict[str, Any]:
        """Roll this monster's loot."""
        return self._definition.drops.roll(rng)

    def to_snapshot(self) -> dict[str, Any]:
        return MonsterSnapshot(
            id=self.id,
            current_health=self.current_health,
            is_alive=self.is_alive,
            buffs=self.buffs,
            debuffs=self.debuffs,
        ).model_dump(mode="json")

    @classmethod
    def from_snapshot(cls, data: dict[str, Any], definition: MonsterDefinition) -> Monster:
        snapshot = MonsterSnapshot.model_validate(data)
        monster = cls(definition)
        monster.current_health = min(snapshot.current_health, definition.max_health)
        monster.is_alive = snapshot.is_alive
        monster.buffs = list(snapshot.buffs)
        monster.debuffs = list(snapshot.debuffs)
        return monster


__all__ = [
    "DropAmount",
    "parse_drop_range",
    "LootTable",
    "MonsterDefinition",
    "Buff",
    "MonsterSnapshot",
    "Monster",
]
