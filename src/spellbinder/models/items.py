"""Items, equipment slots and the player inventory."""

from __future__ import annotations

from collections.abc import Iterable
from enum import StrEnum
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field

from spellbinder.core.exceptions import DefinitionNotFoundError
from spellbinder.core.logging import get_logger
from spellbinder.models.enums import Element


logger = get_logger(__name__)


class ItemType(StrEnum):
    CONSUMABLE = "consumable"
    EQUIPMENT = "equipment"
    MATERIAL = "material"


class EquipmentSlot(StrEnum):
    WEAPON = "weapon"
    ARMOR = "armor"
    ACCESSORY1 = "accessory1"
    ACCESSORY2 = "accessory2"


class ItemRarity(StrEnum):
    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"
    EPIC = "epic"
    LEGENDARY = "legendary"


class ItemEffect(BaseModel):
    """A typed effect of an item.

    Consumables use ``restore_health``, ``restore_stamina`` and
    ``restore_mana`` (with ``target`` naming the element); equipment
    contributes passive bonuses such as ``defense`` or ``attack``.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    type: str
    value: float = 0
    target: str | None = None


class ItemDefinition(BaseModel):
    """Static item data."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    name: str
    description: str = ""
    type: ItemType
    rarity: ItemRarity = ItemRarity.COMMON
    value: Annotated[int, Field(ge=0)] = 0
    slot: EquipmentSlot | None = None
    element: Element | None = None
    effects: list[ItemEffect] = Field(default_factory=list)


class InventorySnapshot(BaseModel):
    model_config = ConfigDict(extra="forbid")

    items: dict[str, Annotated[int, Field(gt=0)]] = Field(default_factory=dict)
    equipment: dict[EquipmentSlot, str | None] = Field(default_factory=dict)


class Inventory:
    """Item stacks and equipped items of one player.

    Equipping moves one unit out of the stacks into the slot; unequipping
    moves it back.
    """

    def __init__(self, definitions: Iterable[ItemDefinition] = ()) -> None:
        self._definitions = {d.id: d for d in definitions}
        self._items: dict[str, int] = {}
        self._equipment: dict[EquipmentSlot, str | None] = {slot: None for slot in EquipmentSlot}

    @property
    def items(self) -> dict[str, int]:
        return dict(self._items)

    @property
    def equipment(self) -> dict[EquipmentSlot, str | None]:
        return dict(self._equipment)

    def get_definition(self, item_id: str) -> ItemDefinition | None:
        return self._definitions.get(item_id)

    def quantity(self, item_id: str) -> int:
        return self._items.get(item_id, 0)

    def has_item(self, item_id: str, quantity: int = 1) -> bool:
        return self.quantity(item_id) >= quantity

    def add_item(self, item_id: str, quantity: int = 1) -> bool:
        """Add units of an item.

        Returns:
            False for unknown items or non-positive quantities.
        """
        if quantity <= 0:
            return False
        if item_id not in self._definitions:
            logger.warning("Cannot add unknown item", item_id=item_id)
            return False
        self._items[item_id] = self._items.get(item_id, 0) + quantity
        return True

    def remove_item(self, item_id: str, quantity: int = 1) -> bool:
        """Remove units of an item, all or nothing.

        Returns:
            True if enough units were held and have been removed.
        """
        if quantity <= 0 or not self.has_item(item_id, quantity):
            return False
        remaining = self._items[item_id] - quantity
        if remaining:
            self._items[item_id] = remaining
        else:
            del self._items[item_id]
        return True

    def equip(self, item_id: str) -> bool:
        """Equip a held equipment item into its slot.

        Whatever occupied the slot goes back into the stacks.

        Returns:
            True if the item is now equipped.
        """
        definition = self._definitions.get(item_id)
        if definition is None or definition.type != ItemType.EQUIPMENT or definition.slot is None:
            logger.warning("Item cannot be equipped", item_id=item_id)
            return False
        if not self.remove_item(item_id):
            return False

        previous = self._equipment[definition.slot]
        if previous is not None:
            self.add_item(previous)
        self._equipment[definition.slot] = item_id
        logger.debug("Item equipped", item_id=item_id, slot=definition.slot.value)
        return True

    def unequip(self, slot: EquipmentSlot | str) -> str | None:
        """Empty a slot.

        Returns:
            The id of the item returned to the stacks, or None if the slot
            was empty.
        """
        slot = EquipmentSlot(slot)
        item_id = self._equipment[slot]
        if item_id is None:
            return None
        self._equipment[slot] = None
        self.add_item(item_id)
        return item_id

    def get_equipment_bonus(self, effect_type: str) -> float:
        """Sum an effect type over every equipped item."""
        total = 0.0
        for item_id in self._equipment.values():
            definition = self._definitions.get(item_id) if item_id else None
            if definition is None:
                continue
            total += sum(e.value for e in definition.effects if e.type == effect_type)
        return total

    def to_snapshot(self) -> dict[str, Any]:
        return InventorySnapshot(
            items=self._items,
            equipment=self._equipment,
        ).model_dump(mode="json")

    def load_snapshot(self, data: dict[str, Any]) -> None:
        """Replace contents with a snapshot.

        Raises:
            DefinitionNotFoundError: If the snapshot names an unknown item.
        """
        snapshot = InventorySnapshot.model_validate(data)
        referenced = list(snapshot.items) + [i for i in snapshot.equipment.values() if i]
        for item_id in referenced:
            if item_id not in self._definitions:
                raise DefinitionNotFoundError(
                    "Save references an unknown item",
                    kind="item",
                    definition_id=item_id,
                )
        self._items = dict(snapshot.items)
        self._equipment = {slot: None for slot in EquipmentSlot}
        self._equipment.update(snapshot.equipment)


__all__ = [
    "ItemType",
    "EquipmentSlot",
    "ItemRarity",
    "ItemEffect",
    "ItemDefinition",
    "InventorySnapshot",
    "Inventory",
]
