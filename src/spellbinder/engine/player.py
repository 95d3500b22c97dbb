"""The player aggregate.

The player owns the resource ledger, the talent profile, the inventory
and every progression manager. The achievement manager is shared: the
skill, spell and locale managers report into the same instance, and the
player applies achievement rewards when it announces an unlock.
"""

from __future__ import annotations

import math
import time
from collections.abc import Callable
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field

from spellbinder.core.constants import (
    BASE_MANA_CAPACITY,
    BASE_MANA_REGEN,
    PLAYER_EXP_BASE,
    PLAYER_EXP_GROWTH,
)
from spellbinder.core.logging import get_logger
from spellbinder.models.achievements import Achievement, AchievementManager, RewardType
from spellbinder.models.classes import ClassCost, ClassEffectType, ClassManager
from spellbinder.models.definitions import GameDefinitions
from spellbinder.models.enums import MAGIC_ELEMENTS, Element, ResourceId, RewardKey, SkillEffectType
from spellbinder.models.items import Inventory, ItemType
from spellbinder.models.locales import LocaleManager
from spellbinder.models.predicates import PredicateContext
from spellbinder.models.resources import ResourceManager
from spellbinder.models.skills import SkillManager
from spellbinder.models.spells import SpellManager
from spellbinder.models.talent import Talent


logger = get_logger(__name__)


def experience_required_for_level(level: int) -> int:
    """Experience needed to advance from ``level`` to ``level + 1``."""
    return math.floor(PLAYER_EXP_BASE * PLAYER_EXP_GROWTH ** (level - 1))


class PlayerSnapshot(BaseModel):
    """Serialized player state. Definitions are referenced by id only."""

    model_config = ConfigDict(extra="ignore")

    name: str
    level: Annotated[int, Field(ge=1)] = 1
    experience: Annotated[float, Field(ge=0)] = 0
    talent: Talent = Field(default_factory=Talent)
    resources: dict[str, Any] = Field(default_factory=dict)
    inventory: dict[str, Any] = Field(default_factory=dict)
    skills: list[dict[str, Any]] = Field(default_factory=list)
    spells: list[dict[str, Any]] = Field(default_factory=list)
    classes: dict[str, Any] = Field(default_factory=dict)
    locales: list[dict[str, Any]] = Field(default_factory=list)
    achievements: list[dict[str, Any]] = Field(default_factory=list)


class Player:
    """One player and everything they own.

    Attributes:
        name: Display name.
        level: Player level, starting at 1.
        experience: Experience towards the next level.
        talent: Elemental talent profile.
        resources: Resource ledger.
        inventory: Items and equipment.
        skills: Skill manager.
        spells: Spell manager.
        classes: Class manager.
        locales: Locale manager.
        achievements: Shared achievement manager.
    """

    def __init__(
        self,
        name: str,
        definitions: GameDefinitions,
        *,
        talent: Talent | None = None,
        achievements: AchievementManager | None = None,
        clock: Callable[[], float] = time.time,
        class_clock: Callable[[], float] = time.monotonic,
        class_cache_window: float = 0.5,
    ) -> None:
        """Create a fresh player.

        Args:
            name: Display name.
            definitions: Definition tables to build the managers from.
            talent: Starting talent profile; all zero when omitted.
            achievements: Achievement manager to share; a new one is
                created when omitted.
            clock: Wall-clock source for timestamps.
            class_clock: Monotonic source for the class availability cache.
            class_cache_window: Seconds a class availability listing stays valid.
        """
        self.name = name
        self.level = 1
        self.experience = 0.0
        self.talent = talent if talent is not None else Talent()
        self.resources = ResourceManager.create_default()
        self.inventory = Inventory(definitions.items)

        self.achievements = achievements or AchievementManager(definitions.achievements, clock=clock)
        self.skills = SkillManager(definitions.skills, achievements=self.achievements)
        self.spells = SpellManager(definitions.spells, achievements=self.achievements)
        self.classes = ClassManager(
            definitions.build_class_tree(),
            clock=class_clock,
            cache_window=class_cache_window,
        )
        self.locales = LocaleManager(definitions.locales, achievements=self.achievements, clock=clock)

        self._definitions = definitions
        self._unsubscribe = self.achievements.subscribe(self._apply_achievement_rewards)
        self.apply_bonuses()

    def detach(self) -> None:
        """Stop receiving achievement unlocks from the shared manager."""
        self._unsubscribe()

    # -------------------------------------------------------------------------
    # Level and Experience
    # -------------------------------------------------------------------------

    def get_experience_required_for_next_level(self) -> int:
        return experience_required_for_level(self.level)

    def add_experience(self, amount: float) -> int:
        """Add experience, levelling up through every threshold reached.

        Overflow carries into the next level.

        Args:
            amount: Experience to add.

        Returns:
            Number of levels gained.
        """
        if amount <= 0:
            return 0
        self.experience += amount
        gained = 0
        while self.experience >= self.get_experience_required_for_next_level():
            self.experience -= self.get_experience_required_for_next_level()
            self.level += 1
            gained += 1
        if gained:
            logger.info("Player leveled up", player=self.name, level=self.level)
        return gained

    # -------------------------------------------------------------------------
    # Derived Stats
    # -------------------------------------------------------------------------

    def _skill_effect(self, effect_type: str, element: Element) -> float:
        """Sum skill effects scoped to an element plus the neutral ones."""
        return self.skills.get_total_effect(effect_type, element) + self.skills.get_total_effect(
            effect_type, Element.NEUTRAL
        )

    def apply_bonuses(self) -> None:
        """Recompute mana capacity, mana regeneration and skill level caps.

        Everything is derived from scratch from talent, class effects and
        skill effects, so calling this repeatedly changes nothing.
        """
        for element in MAGIC_ELEMENTS:
            resource = self.resources.get(element.mana_resource)
            if resource is None:
                continue
            capacity = (
                BASE_MANA_CAPACITY * self.talent.get_mana_capacity_multiplier(element)
                + self.classes.get_effect_total(ClassEffectType.MANA_CAPACITY, element.value)
                + self._skill_effect(SkillEffectType.MANA_CAPACITY, element)
            )
            regen = (
                BASE_MANA_REGEN
                + self.classes.get_effect_total(ClassEffectType.MANA_REGEN, element.value)
                + self._skill_effect(SkillEffectType.MANA_REGEN, element)
            )
            resource.set_max(capacity)
            resource.rate_per_second = regen

        self.skills.set_max_level_bonuses(self.classes.get_skill_max_bonuses())

    @property
    def damage_reduction(self) -> float:
        """Get the flat reduction applied to every hit the player takes."""
        return (
            self.inventory.get_equipment_bonus("defense")
            + self.skills.get_total_effect(SkillEffectType.DAMAGE_REDUCTION)
            + self.classes.get_custom_effect("defense")
        )

    @property
    def spell_power(self) -> float:
        return (
            self.inventory.get_equipment_bonus(SkillEffectType.SPELL_POWER)
            + self.skills.get_total_effect(SkillEffectType.SPELL_POWER)
            + self.classes.get_effect_total(ClassEffectType.SPELL_POWER)
        )

    @property
    def health(self) -> float:
        return self.resources.value_of(ResourceId.HEALTH)

    def predicate_context(self) -> PredicateContext:
        """Snapshot the variables unlock predicates may read."""
        return PredicateContext(
            talents=self.talent.as_dict(),
            skill_levels=self.skills.skill_levels(),
            player_level=self.level,
            unlocked_classes=frozenset(self.classes.unlocked_classes),
        )

    # -------------------------------------------------------------------------
    # Class Wallet
    # -------------------------------------------------------------------------

    def can_afford(self, cost: ClassCost) -> bool:
        return self.experience >= cost.experience and self.resources.can_afford(cost.resource_costs())

    def pay(self, cost: ClassCost) -> bool:
        """Pay a class cost from the ledger and current experience, all or nothing."""
        if not self.can_afford(cost):
            return False
        if not self.resources.consume_all(cost.resource_costs()):
            return False
        self.experience -= cost.experience
        return True

    # -------------------------------------------------------------------------
    # Actions
    # -------------------------------------------------------------------------

    def unlock_skill(self, skill_id: str) -> bool:
        """Unlock a skill whose condition currently holds."""
        unlocked = self.skills.unlock_skill(skill_id, self.predicate_context())
        if unlocked:
            self.apply_bonuses()
        return unlocked

    def learn_spell(self, spell_id: str) -> bool:
        return self.spells.learn_spell(spell_id, self.predicate_context())

    def unlock_class(self, class_id: str) -> bool:
        """Unlock a class and apply its one-time effects.

        ``skill_unlock`` and ``talent_bonus`` effects are applied only when
        the class becomes unlocked by this call; the passive effects are
        picked up by ``apply_bonuses``.

        Args:
            class_id: Class to unlock.

        Returns:
            True if the class is unlocked after the call.
        """
        if self.classes.is_unlocked(class_id):
            return True
        if not self.classes.unlock_class(class_id, self.predicate_context(), self):
            return False

        node = self.classes.tree.get_node(class_id)
        for effect in node.effects if node else []:
            if effect.type == ClassEffectType.SKILL_UNLOCK and effect.target:
                self.skills.unlock_skill(effect.target)
            elif effect.type == ClassEffectType.TALENT_BONUS and effect.target:
                self.talent.add(effect.target, effect.value)
        self.apply_bonuses()
        return True

    def use_item(self, item_id: str) -> bool:
        """Use a held item.

        Consumables are spent and their restore effects applied; equipment
        is equipped. Materials cannot be used.

        Args:
            item_id: Item to use.

        Returns:
            True if the item was used.
        """
        definition = self.inventory.get_definition(item_id)
        if definition is None or not self.inventory.has_item(item_id):
            return False

        if definition.type == ItemType.EQUIPMENT:
            return self.inventory.equip(item_id)
        if definition.type != ItemType.CONSUMABLE:
            return False

        self.inventory.remove_item(item_id)
        for effect in definition.effects:
            if effect.type == "restore_health":
                self.resources.add(ResourceId.HEALTH, effect.value)
            elif effect.type == "restore_stamina":
                self.resources.add(ResourceId.STAMINA, effect.value)
            elif effect.type == "restore_mana":
                elements = [Element(effect.target)] if effect.target else list(MAGIC_ELEMENTS)
                for element in elements:
                    if element.mana_resource:
                        self.resources.add(element.mana_resource, effect.value)
            else:
                logger.warning("Unknown item effect", item_id=item_id, effect=effect.type)
        logger.debug("Item used", item_id=item_id)
        return True

    def update(self, delta_seconds: float) -> None:
        """Advance the player by an elapsed interval."""
        self.apply_bonuses()
        self.resources.update(delta_seconds)
        self.spells.update(delta_seconds)

    def _apply_achievement_rewards(self, achievement: Achievement) -> None:
        for reward in achievement.definition.rewards:
            if reward.type == RewardType.RESOURCE:
                if reward.target == RewardKey.EXPERIENCE:
                    self.add_experience(reward.value)
                else:
                    self.resources.add(reward.target, reward.value)
            elif reward.type == RewardType.TALENT:
                self.talent.add(reward.target, reward.value)
            elif reward.type == RewardType.SKILL_UNLOCK:
                self.skills.unlock_skill(reward.target)
        self.apply_bonuses()

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def to_snapshot(self) -> dict[str, Any]:
        return PlayerSnapshot(
            name=self.name,
            level=self.level,
            experience=self.experience,
            talent=self.talent,
            resources=self.resources.to_snapshot(),
            inventory=self.inventory.to_snapshot(),
            skills=self.skills.to_snapshot(),
            spells=self.spells.to_snapshot(),
            classes=self.classes.to_snapshot(),
            locales=self.locales.to_snapshot(),
            achievements=self.achievements.to_snapshot(),
        ).model_dump(mode="json")

    @classmethod
    def from_snapshot(
        cls,
        data: dict[str, Any],
        definitions: GameDefinitions,
        achievements: AchievementManager | None = None,
        **kwargs: Any,
    ) -> Player:
        """Rebuild a player from a snapshot against live definitions.

        Args:
            data: Output of ``to_snapshot``.
            definitions: Definition tables to re-bind ids to.
            achievements: Achievement manager to restore into and share.
            **kwargs: Passed through to the constructor.

        Returns:
            The restored player.

        Raises:
            pydantic.ValidationError: If the snapshot is malformed.
            DefinitionNotFoundError: If it references unknown definitions.
        """
        snapshot = PlayerSnapshot.model_validate(data)
        player = cls(
            snapshot.name,
            definitions,
            talent=snapshot.talent.model_copy(),
            achievements=achievements,
            **kwargs,
        )
        try:
            player.level = snapshot.level
            player.experience = snapshot.experience
            player.classes.load_snapshot(snapshot.classes)
            player.skills.load_snapshot(snapshot.skills)
            player.spells.load_snapshot(snapshot.spells)
            player.inventory.load_snapshot(snapshot.inventory)
            player.locales.load_snapshot(snapshot.locales)
            player.achievements.load_snapshot(snapshot.achievements)
            player.apply_bonuses()
            player.resources = ResourceManager.from_snapshot(snapshot.resources)
            player.apply_bonuses()
        except Exception:
            player.detach()
            raise
        return player


__all__ = [
    "experience_required_for_level",
    "PlayerSnapshot",
    "Player",
]
