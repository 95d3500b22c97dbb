"""Data models and progression subsystems of the Spellbinder simulation.

Static definitions are pydantic V2 models; runtime progression (skills,
spells, achievements, classes, monsters, inventory) lives in plain
classes that snapshot into pydantic models for persistence.

Submodules:
    enums: Elements, resource ids and effect tags.
    resources: Bounded resource pools and the resource ledger.
    talent: Elemental talent profile.
    predicates: Unlock condition predicates and their evaluator.
    formulas: Effect formula evaluation.
    skills, spells, achievements, classes: Progression subsystems.
    items, monsters, locales, activities: Game content models.
    definitions, catalog: Definition tables and the built-in content.

Example:
    >>> from spellbinder.models import ResourceManager, Talent, Element
    >>> resources = ResourceManager.create_default()
    >>> talent = Talent.create_preset(Element.FIRE)
"""

from __future__ import annotations

# =============================================================================
# Enumerations
# =============================================================================
from spellbinder.models.enums import (
    MAGIC_ELEMENTS,
    Element,
    ResourceId,
    RewardKey,
    SkillEffectType,
)

# =============================================================================
# Resources and Talent
# =============================================================================
from spellbinder.models.resources import Resource, ResourceManager
from spellbinder.models.talent import TALENT_PRESETS, Talent

# =============================================================================
# Predicates and Formulas
# =============================================================================
from spellbinder.models.predicates import (
    NEVER,
    AllOf,
    AnyOf,
    LevelAtLeast,
    Not,
    Predicate,
    PredicateContext,
    PrerequisiteUnlocked,
    SkillAtLeast,
    TalentAtLeast,
    coerce_condition,
    evaluate,
    parse_condition,
)
from spellbinder.models.formulas import effect_value, evaluate_formula

# =============================================================================
# Progression
# =============================================================================
from spellbinder.models.achievements import (
    Achievement,
    AchievementDefinition,
    AchievementManager,
    RewardType,
)
from spellbinder.models.skills import Skill, SkillDefinition, SkillManager
from spellbinder.models.spells import (
    Spell,
    SpellDefinition,
    SpellEffectType,
    SpellManager,
    SpellTarget,
)
from spellbinder.models.classes import (
    ClassCost,
    ClassEffectType,
    ClassManager,
    ClassNode,
    ClassTree,
    ClassWallet,
)

# =============================================================================
# Content
# =============================================================================
from spellbinder.models.items import EquipmentSlot, Inventory, ItemDefinition, ItemType
from spellbinder.models.monsters import Buff, LootTable, Monster, MonsterDefinition, parse_drop_range
from spellbinder.models.locales import LocaleDefinition, LocaleManager
from spellbinder.models.activities import (
    ActivityCost,
    ActivityData,
    ActivityInstance,
    ActivityReward,
    ActivityType,
    roll_reward_amount,
)
from spellbinder.models.definitions import GameDefinitions
from spellbinder.models.catalog import build_default_class_tree, build_default_definitions


__all__ = [
    # Enumerations
    "Element",
    "MAGIC_ELEMENTS",
    "ResourceId",
    "RewardKey",
    "SkillEffectType",
    # Resources and Talent
    "Resource",
    "ResourceManager",
    "Talent",
    "TALENT_PRESETS",
    # Predicates and Formulas
    "Predicate",
    "PredicateContext",
    "TalentAtLeast",
    "SkillAtLeast",
    "LevelAtLeast",
    "PrerequisiteUnlocked",
    "AllOf",
    "AnyOf",
    "Not",
    "NEVER",
    "evaluate",
    "parse_condition",
    "coerce_condition",
    "evaluate_formula",
    "effect_value",
    # Progression
    "Achievement",
    "AchievementDefinition",
    "AchievementManager",
    "RewardType",
    "Skill",
    "SkillDefinition",
    "SkillManager",
    "Spell",
    "SpellDefinition",
    "SpellEffectType",
    "SpellManager",
    "SpellTarget",
    "ClassCost",
    "ClassEffectType",
    "ClassManager",
    "ClassNode",
    "ClassTree",
    "ClassWallet",
    # Content
    "EquipmentSlot",
    "Inventory",
    "ItemDefinition",
    "ItemType",
    "Buff",
    "LootTable",
    "Monster",
    "MonsterDefinition",
    "parse_drop_range",
    "LocaleDefinition",
    "LocaleManager",
    "ActivityCost",
    "ActivityData",
    "ActivityInstance",
    "ActivityReward",
    "ActivityType",
    "roll_reward_amount",
    "GameDefinitions",
    "build_default_class_tree",
    "build_default_definitions",
]
