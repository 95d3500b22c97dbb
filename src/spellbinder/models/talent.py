"""Elemental talent profile."""

from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

from spellbinder.core.constants import TALENT_MAX, TALENT_MIN
from spellbinder.models.enums import MAGIC_ELEMENTS, Element


TalentValue = Annotated[float, Field(ge=TALENT_MIN, le=TALENT_MAX)]

TALENT_PRESETS: dict[Element, dict[Element, float]] = {
    Element.FIRE: {Element.FIRE: 70, Element.WATER: 20, Element.EARTH: 25, Element.WIND: 30},
    Element.WATER: {Element.FIRE: 25, Element.WATER: 70, Element.EARTH: 30, Element.WIND: 20},
    Element.EARTH: {Element.FIRE: 20, Element.WATER: 30, Element.EARTH: 70, Element.WIND: 25},
    Element.WIND: {Element.FIRE: 30, Element.WATER: 25, Element.EARTH: 20, Element.WIND: 70},
}
"""Starting talents for each elemental affinity."""


def clamp_talent(value: float) -> float:
    """Clamp a talent value to the valid range."""
    return max(TALENT_MIN, min(TALENT_MAX, value))


class Talent(BaseModel):
    """Per-element affinity of the player, each value in [0, 100].

    Talent scales mana capacity and learning speed, and gates unlocks.
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    fire: TalentValue = 0
    water: TalentValue = 0
    earth: TalentValue = 0
    wind: TalentValue = 0

    @classmethod
    def create_preset(cls, element: Element | str) -> Talent:
        """Create a talent profile leaning towards one element.

        Args:
            element: The favoured element.

        Returns:
            Talent profile for the preset.

        Raises:
            KeyError: If the element has no preset.
        """
        preset = TALENT_PRESETS[Element(element)]
        return cls(**{e.value: v for e, v in preset.items()})

    def get(self, element: Element | str) -> float:
        """Get the talent for an element.

        Neutral has no talent of its own and reports the average of the
        four magic elements.
        """
        element = Element(element)
        if element is Element.NEUTRAL:
            return sum(getattr(self, e.value) for e in MAGIC_ELEMENTS) / len(MAGIC_ELEMENTS)
        return getattr(self, element.value)

    def set(self, element: Element | str, value: float) -> None:
        element = Element(element)
        if not element.is_magic:
            return
        setattr(self, element.value, clamp_talent(value))

    def add(self, element: Element | str, amount: float) -> None:
        self.set(element, self.get(element) + amount)

    def get_learning_speed_multiplier(self, element: Element | str) -> float:
        """Get the learning speed multiplier, ``1 + talent / 100``."""
        return 1 + self.get(element) / 100

    def get_mana_capacity_multiplier(self, element: Element | str) -> float:
        """Get the mana capacity multiplier, ``1 + talent / 200``."""
        return 1 + self.get(element) / 200

    def as_dict(self) -> dict[str, float]:
        return {e.value: getattr(self, e.value) for e in MAGIC_ELEMENTS}


__all__ = [
    "TALENT_PRESETS",
    "Talent",
    "clamp_talent",
]
