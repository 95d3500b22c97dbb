"""Built-in game content.

This module contains the static definition tables of the default game:
- Skills and spells for each element
- Items, monsters and explorable locales
- Achievements
- The class tree

The tables are plain data in the same shape as the JSON files accepted by
``GameDefinitions.from_directory`` and go through the same validation.
"""

from __future__ import annotations

from typing import Any

from spellbinder.models.classes import ClassNode, ClassTree
from spellbinder.models.definitions import GameDefinitions


# =============================================================================
# Skills
# =============================================================================

SKILLS: list[dict[str, Any]] = [
    {
        "id": "meditation",
        "name": "Meditation",
        "description": "Calm focus that quickens mana recovery.",
        "element": "neutral",
        "max_level": 10,
        "effects": [{"type": "mana_regen", "value": 0.1}],
    },
    {
        "id": "arcane_study",
        "name": "Arcane Study",
        "description": "Disciplined reading of old grimoires.",
        "element": "neutral",
        "max_level": 10,
        "unlock_condition": "level >= 2",
        "effects": [{"type": "learning_speed", "value": 0.02}],
    },
    {
        "id": "fire_affinity",
        "name": "Fire Affinity",
        "description": "Attunement to the flame.",
        "element": "fire",
        "max_level": 10,
        "unlock_condition": "fire >= 10",
        "effects": [{"type": "spell_power", "value": 1}],
    },
    {
        "id": "water_affinity",
        "name": "Water Affinity",
        "description": "Attunement to the tide.",
        "element": "water",
        "max_level": 10,
        "unlock_condition": "water >= 10",
        "effects": [{"type": "spell_power", "value": 1}],
    },
    {
        "id": "earth_affinity",
        "name": "Earth Affinity",
        "description": "Attunement to stone and soil.",
        "element": "earth",
        "max_level": 10,
        "unlock_condition": "earth >= 10",
        "effects": [{"type": "spell_power", "value": 1}],
    },
    {
        "id": "wind_affinity",
        "name": "Wind Affinity",
        "description": "Attunement to the open sky.",
        "element": "wind",
        "max_level": 10,
        "unlock_condition": "wind >= 10",
        "effects": [{"type": "spell_power", "value": 1}],
    },
    {
        "id": "fire_mastery",
        "name": "Fire Mastery",
        "description": "Deep reserves of fire mana.",
        "element": "fire",
        "max_level": 10,
        "unlock_condition": "fire >= 30 && fire_affinity >= 5",
        "effects": [{"type": "mana_capacity", "value": 5}],
    },
    {
        "id": "water_mastery",
        "name": "Water Mastery",
        "description": "Deep reserves of water mana.",
        "element": "water",
        "max_level": 10,
        "unlock_condition": "water >= 30 && water_affinity >= 5",
        "effects": [{"type": "mana_capacity", "value": 5}],
    },
    {
        "id": "earth_mastery",
        "name": "Earth Mastery",
        "description": "Deep reserves of earth mana.",
        "element": "earth",
        "max_level": 10,
        "unlock_condition": "earth >= 30 && earth_affinity >= 5",
        "effects": [{"type": "mana_capacity", "value": 5}],
    },
    {
        "id": "wind_mastery",
        "name": "Wind Mastery",
        "description": "Deep reserves of wind mana.",
        "element": "wind",
        "max_level": 10,
        "unlock_condition": "wind >= 30 && wind_affinity >= 5",
        "effects": [{"type": "mana_capacity", "value": 5}],
    },
    {
        "id": "stone_skin",
        "name": "Stone Skin",
        "description": "Skin hardened against blows.",
        "element": "earth",
        "max_level": 5,
        "unlock_condition": "earth >= 20",
        "effects": [{"type": "damage_reduction", "formula": "level * 2"}],
    },
]

# =============================================================================
# Spells
# =============================================================================

SPELLS: list[dict[str, Any]] = [
    {
        "id": "fireball",
        "name": "Fireball",
        "description": "A ball of flame hurled at the enemy.",
        "element": "fire",
        "level": 1,
        "mana_cost": 10,
        "cooldown": 3,
        "effects": [{"type": "damage", "target": "enemy", "value": 10}],
    },
    {
        "id": "flame_burst",
        "name": "Flame Burst",
        "description": "An eruption of fire around the target.",
        "element": "fire",
        "level": 3,
        "mana_cost": 25,
        "cooldown": 8,
        "unlock_condition": "fire >= 30",
        "required_skill": {"skill_id": "fire_affinity", "level": 3},
        "effects": [{"type": "damage", "target": "area", "value": 25}],
    },
    {
        "id": "water_bolt",
        "name": "Water Bolt",
        "description": "A pressurised jet of water.",
        "element": "water",
        "level": 1,
        "mana_cost": 8,
        "cooldown": 2,
        "effects": [{"type": "damage", "target": "enemy", "value": 8}],
    },
    {
        "id": "healing_wave",
        "name": "Healing Wave",
        "description": "Soothing water that closes wounds.",
        "element": "water",
        "level": 2,
        "mana_cost": 15,
        "cooldown": 10,
        "unlock_condition": "water >= 20",
        "effects": [{"type": "heal", "target": "self", "value": 20}],
    },
    {
        "id": "stone_spike",
        "name": "Stone Spike",
        "description": "A spike of rock bursting from the ground.",
        "element": "earth",
        "level": 1,
        "mana_cost": 12,
        "cooldown": 4,
        "effects": [{"type": "damage", "target": "enemy", "value": 12}],
    },
    {
        "id": "stone_armor",
        "name": "Stone Armor",
        "description": "A shell of stone that absorbs blows.",
        "element": "earth",
        "level": 2,
        "mana_cost": 15,
        "cooldown": 12,
        "unlock_condition": "earth >= 20",
        "effects": [
            {"type": "buff", "target": "self", "value": 5, "stat": "defense", "duration": 3},
        ],
    },
    {
        "id": "wind_blade",
        "name": "Wind Blade",
        "description": "A slicing gust of air.",
        "element": "wind",
        "level": 1,
        "mana_cost": 9,
        "cooldown": 2,
        "effects": [{"type": "damage", "target": "enemy", "value": 9}],
    },
    {
        "id": "weaken",
        "name": "Weaken",
        "description": "A howling wind that strips the enemy's guard.",
        "element": "wind",
        "level": 2,
        "mana_cost": 10,
        "cooldown": 6,
        "unlock_condition": "wind >= 20",
        "effects": [{"type": "debuff", "target": "enemy", "value": 3}],
    },
]

# =============================================================================
# Items
# =============================================================================

ITEMS: list[dict[str, Any]] = [
    {
        "id": "health_potion",
        "name": "Health Potion",
        "type": "consumable",
        "value": 20,
        "effects": [{"type": "restore_health", "value": 30}],
    },
    {
        "id": "stamina_tonic",
        "name": "Stamina Tonic",
        "type": "consumable",
        "value": 15,
        "effects": [{"type": "restore_stamina", "value": 25}],
    },
    {
        "id": "mana_potion",
        "name": "Mana Potion",
        "type": "consumable",
        "rarity": "uncommon",
        "value": 30,
        "effects": [{"type": "restore_mana", "value": 20}],
    },
    {
        "id": "apprentice_staff",
        "name": "Apprentice Staff",
        "type": "equipment",
        "slot": "weapon",
        "value": 50,
        "effects": [{"type": "spell_power", "value": 2}],
    },
    {
        "id": "leather_robe",
        "name": "Leather Robe",
        "type": "equipment",
        "slot": "armor",
        "value": 40,
        "effects": [{"type": "defense", "value": 2}],
    },
    {
        "id": "iron_ring",
        "name": "Iron Ring",
        "type": "equipment",
        "slot": "accessory1",
        "rarity": "uncommon",
        "value": 60,
        "effects": [{"type": "defense", "value": 1}],
    },
    {"id": "slime_gel", "name": "Slime Gel", "type": "material", "value": 2},
    {"id": "wolf_pelt", "name": "Wolf Pelt", "type": "material", "value": 8},
    {"id": "fire_essence", "name": "Fire Essence", "type": "material", "element": "fire", "value": 15},
    {"id": "golem_core", "name": "Golem Core", "type": "material", "element": "earth", "value": 40},
]

# =============================================================================
# Monsters
# =============================================================================

MONSTERS: list[dict[str, Any]] = [
    {
        "id": "slime",
        "name": "Slime",
        "element": "neutral",
        "max_health": 20,
        "attack": 3,
        "defense": 0,
        "level": 1,
        "drops": {"gold": "2~6", "experience": "5~10", "items": ["slime_gel"]},
    },
    {
        "id": "forest_wolf",
        "name": "Forest Wolf",
        "element": "wind",
        "max_health": 35,
        "attack": 6,
        "defense": 1,
        "level": 2,
        "drops": {"gold": "5~12", "experience": "10~18", "items": ["wolf_pelt"]},
    },
    {
        "id": "river_sprite",
        "name": "River Sprite",
        "element": "water",
        "max_health": 28,
        "attack": 5,
        "defense": 1,
        "level": 2,
        "drops": {"gold": "5~10", "experience": "8~15", "mana_water": "1~3"},
    },
    {
        "id": "fire_imp",
        "name": "Fire Imp",
        "element": "fire",
        "max_health": 30,
        "attack": 7,
        "defense": 2,
        "level": 3,
        "spells": ["fireball"],
        "drops": {
            "gold": "8~15",
            "experience": "12~20",
            "mana_fire": "1~4",
            "items": ["fire_essence"],
        },
    },
    {
        "id": "stone_golem",
        "name": "Stone Golem",
        "element": "earth",
        "max_health": 80,
        "attack": 10,
        "defense": 5,
        "level": 5,
        "drops": {
            "gold": "20~40",
            "experience": "30~50",
            "mana_earth": "2~6",
            "items": ["golem_core"],
        },
    },
]

# =============================================================================
# Locales
# =============================================================================

LOCALES: list[dict[str, Any]] = [
    {
        "id": "whispering_meadow",
        "name": "Whispering Meadow",
        "description": "Gentle fields at the edge of the academy grounds.",
        "element": "neutral",
        "level_requirement": 1,
        "stamina_cost": 10,
        "duration": 30,
        "monsters": ["slime", "forest_wolf"],
        "rewards": {"gold": "5~15", "experience": "5~10", "items": ["health_potion"]},
        "discovered": True,
    },
    {
        "id": "crystal_lake",
        "name": "Crystal Lake",
        "description": "Still water humming with old magic.",
        "element": "water",
        "level_requirement": 2,
        "stamina_cost": 15,
        "duration": 45,
        "monsters": ["river_sprite", "slime"],
        "rewards": {"gold": "8~20", "mana_water": "3~8", "items": ["mana_potion"]},
    },
    {
        "id": "ember_caves",
        "name": "Ember Caves",
        "description": "Tunnels warmed by a sleeping volcano.",
        "element": "fire",
        "level_requirement": 3,
        "stamina_cost": 20,
        "duration": 60,
        "monsters": ["fire_imp", "slime"],
        "rewards": {"gold": "15~30", "mana_fire": "3~8", "items": ["fire_essence"]},
    },
    {
        "id": "stone_ridge",
        "name": "Stone Ridge",
        "description": "A windswept ridge patrolled by golems.",
        "element": "earth",
        "level_requirement": 5,
        "stamina_cost": 25,
        "duration": 90,
        "monsters": ["stone_golem", "forest_wolf"],
        "rewards": {"gold": "25~50", "mana_earth": "4~10", "items": ["iron_ring"]},
    },
]

# =============================================================================
# Achievements
# =============================================================================

ACHIEVEMENTS: list[dict[str, Any]] = [
    {
        "id": "first_skill",
        "name": "First Steps",
        "description": "Unlock your first skill.",
        "category": "skills",
        "condition": {"type": "skill_unlock", "required": 1},
        "rewards": [{"type": "resource", "target": "research", "value": 10}],
    },
    {
        "id": "skill_master",
        "name": "Skill Collector",
        "description": "Unlock five skills.",
        "category": "skills",
        "condition": {"type": "skill_unlock", "required": 5},
        "rewards": [{"type": "talent", "target": "fire", "value": 2}],
    },
    {
        "id": "spell_learner",
        "name": "Spell Learner",
        "description": "Learn your first spell.",
        "category": "spells",
        "condition": {"type": "spell_learn", "required": 1},
        "rewards": [{"type": "resource", "target": "research", "value": 20}],
    },
    {
        "id": "monster_slayer",
        "name": "Monster Slayer",
        "description": "Win ten battles.",
        "category": "combat",
        "condition": {"type": "combat_victory", "required": 10},
        "rewards": [{"type": "resource", "target": "gold", "value": 50}],
    },
    {
        "id": "wealthy_adventurer",
        "name": "Wealthy Adventurer",
        "description": "Earn a hundred gold from a single battle.",
        "category": "combat",
        "hidden": True,
        "condition": {"type": "combat_gold", "required": 1},
        "rewards": [{"type": "resource", "target": "gold", "value": 100}],
    },
    {
        "id": "explorer",
        "name": "Explorer",
        "description": "Complete an exploration.",
        "category": "exploration",
        "condition": {"type": "exploration", "required": 1},
        "rewards": [{"type": "resource", "target": "gold", "value": 25}],
    },
    {
        "id": "seasoned_explorer",
        "name": "Seasoned Explorer",
        "description": "Complete ten explorations.",
        "category": "exploration",
        "condition": {"type": "exploration", "required": 10},
        "rewards": [{"type": "skill_unlock", "target": "meditation"}],
    },
]

# =============================================================================
# Class Tree
# =============================================================================


def _acolyte(element: str, name: str, bonus: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": f"{element}_acolyte",
        "name": name,
        "description": f"A novice devoted to {element} magic.",
        "tier": 1,
        "element": element,
        "prerequisites": ["apprentice"],
        "requirements": [f"{element} >= 20"],
        "cost": {"gold": 100, "experience": 50},
        "effects": [
            {"type": "mana_capacity", "value": 20},
            {"type": "skill_unlock", "target": f"{element}_affinity"},
            {"type": "talent_bonus", "target": element, "value": 5},
            bonus,
        ],
    }


def _mage(element: str, name: str, bonus: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": f"{element}_mage",
        "name": name,
        "description": f"A caster who has mastered {element} magic.",
        "tier": 2,
        "element": element,
        "prerequisites": [f"{element}_acolyte"],
        "requirements": [f"{element} >= 40"],
        "cost": {"gold": 500, "experience": 200},
        "effects": [
            {"type": "mana_capacity", "value": 50},
            {"type": "skill_max", "target": f"{element}_affinity", "value": 5},
            bonus,
        ],
    }


CLASSES: list[dict[str, Any]] = [
    {
        "id": "apprentice",
        "name": "Apprentice",
        "description": "You have just set out on the path of magic.",
        "tier": 0,
        "flavor": "Every great mage starts here.",
    },
    _acolyte("fire", "Fire Acolyte", {"type": "spell_power", "value": 5}),
    _acolyte("water", "Water Acolyte", {"type": "mana_regen", "value": 0.5}),
    _acolyte("earth", "Earth Acolyte", {"type": "custom", "target": "defense", "value": 5}),
    _acolyte("wind", "Wind Acolyte", {"type": "custom", "target": "evasion", "value": 5}),
    _mage("fire", "Fire Mage", {"type": "spell_power", "value": 15}),
    _mage("water", "Water Mage", {"type": "mana_regen", "value": 1.5}),
    _mage("earth", "Earth Mage", {"type": "custom", "target": "defense", "value": 15}),
    _mage("wind", "Wind Mage", {"type": "custom", "target": "evasion", "value": 15}),
    {
        "id": "battle_mage",
        "name": "Battle Mage",
        "description": "A warrior who fights with spell and staff alike.",
        "tier": 2,
        "prerequisites": ["apprentice"],
        "requirements": ["fire_affinity >= 5"],
        "cost": {"gold": 800, "experience": 300},
        "effects": [
            {"type": "spell_power", "value": 10},
            {"type": "custom", "target": "defense", "value": 10},
            {"type": "mana_capacity", "value": 60},
        ],
        "flavor": "Magic is my blade, will is my shield.",
    },
    {
        "id": "archmage",
        "name": "Archmage",
        "description": "A legendary master of every element.",
        "tier": 3,
        "secret": True,
        "prerequisites": ["fire_mage", "water_mage", "earth_mage", "wind_mage"],
        "requirements": [
            "fire >= 70 && water >= 70 && earth >= 70 && wind >= 70",
            {"kind": "level_at_least", "value": 10},
        ],
        "cost": {"gold": 5000, "experience": 2000},
        "effects": [
            {"type": "spell_power", "value": 50},
            {"type": "mana_regen", "value": 5},
            {"type": "mana_capacity", "value": 200},
        ],
        "flavor": "A true master needs no ornate robes.",
    },
]


def build_default_definitions() -> GameDefinitions:
    """Build the definitions of the default game.

    Returns:
        Validated definition tables for every built-in table.
    """
    return GameDefinitions.from_dict(
        {
            "skills": SKILLS,
            "spells": SPELLS,
            "items": ITEMS,
            "monsters": MONSTERS,
            "locales": LOCALES,
            "achievements": ACHIEVEMENTS,
            "classes": CLASSES,
        }
    )


def build_default_class_tree() -> ClassTree:
    """Build the built-in class tree on its own.

    Apprentice at the root, one acolyte and one mage per element, and the
    secret archmage above all four mages.
    """
    return ClassTree(ClassNode.model_validate(data) for data in CLASSES)


__all__ = [
    "SKILLS",
    "SPELLS",
    "ITEMS",
    "MONSTERS",
    "LOCALES",
    "ACHIEVEMENTS",
    "CLASSES",
    "build_default_definitions",
    "build_default_class_tree",
]
