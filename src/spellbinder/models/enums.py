"""Enumeration types for the Spellbinder simulation core.

This module defines the elements, resource identifiers and effect tags
shared by the progression models and the combat engine.
"""

from __future__ import annotations

from enum import StrEnum


class Element(StrEnum):
    """Magical elements.

    The four magic elements form a strict dominance cycle used by the
    combat damage formula. Neutral sits outside the cycle.
    """

    FIRE = "fire"
    WATER = "water"
    EARTH = "earth"
    WIND = "wind"
    NEUTRAL = "neutral"

    @property
    def is_magic(self) -> bool:
        """Check whether the element has a talent and a mana pool.

        Returns:
            True for fire, water, earth and wind.
        """
        return self is not Element.NEUTRAL

    @property
    def mana_resource(self) -> str | None:
        """Get the id of the mana pool backing this element.

        Returns:
            Resource id such as ``mana_fire``, or None for neutral.
        """
        if not self.is_magic:
            return None
        return f"mana_{self.value}"


MAGIC_ELEMENTS: tuple[Element, ...] = (
    Element.FIRE,
    Element.WATER,
    Element.EARTH,
    Element.WIND,
)
"""Elements that own a talent value and a mana pool."""


class ResourceId(StrEnum):
    """Identifiers of the built-in resource pools."""

    GOLD = "gold"
    RESEARCH = "research"
    MANA_FIRE = "mana_fire"
    MANA_WATER = "mana_water"
    MANA_EARTH = "mana_earth"
    MANA_WIND = "mana_wind"
    HEALTH = "health"
    STAMINA = "stamina"


class RewardKey(StrEnum):
    """Reward keys that are not ledger resources."""

    EXPERIENCE = "experience"
    """Player experience, credited through the level curve."""

    SKILL_EXP = "skill_exp"
    """Experience for the skill named by the activity metadata."""


class SkillEffectType(StrEnum):
    """Well-known skill effect tags read by the player aggregate.

    Skill definitions may carry any other tag; those are exposed through
    effect totals but carry no built-in meaning.
    """

    MANA_REGEN = "mana_regen"
    MANA_CAPACITY = "mana_capacity"
    DAMAGE_REDUCTION = "damage_reduction"
    SPELL_POWER = "spell_power"
    LEARNING_SPEED = "learning_speed"


__all__ = [
    "Element",
    "MAGIC_ELEMENTS",
    "ResourceId",
    "RewardKey",
    "SkillEffectType",
]
