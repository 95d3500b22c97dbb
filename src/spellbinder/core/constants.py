"""Application-wide constants for the Spellbinder simulation core.

This module defines the numeric tuning values of the progression curves,
the learning activity factory and the built-in resource ledger.
"""

from __future__ import annotations

# =============================================================================
# Talent
# =============================================================================

TALENT_MIN = 0
"""Lowest value of a single elemental talent."""

TALENT_MAX = 100
"""Highest value of a single elemental talent."""

# =============================================================================
# Experience Curves
# =============================================================================

SKILL_EXP_BASE = 100
"""Experience needed to reach skill level 1."""

SKILL_EXP_GROWTH = 1.3
"""Per-level growth factor of the skill experience curve."""

PLAYER_EXP_BASE = 100
"""Experience needed for the first player level-up."""

PLAYER_EXP_GROWTH = 1.5
"""Per-level growth factor of the player experience curve."""

# =============================================================================
# Resources
# =============================================================================

BASE_MANA_CAPACITY = 100
"""Mana pool size before talent and class bonuses."""

BASE_MANA_REGEN = 1.0
"""Mana regenerated per second before bonuses."""

DEFAULT_STARTING_GOLD = 100
"""Gold held by a freshly created player."""

DEFAULT_HEALTH = 100
"""Maximum health of a freshly created player."""

DEFAULT_HEALTH_REGEN = 0.5
"""Health regenerated per second."""

DEFAULT_STAMINA = 100
"""Maximum stamina of a freshly created player."""

DEFAULT_STAMINA_REGEN = 1.0
"""Stamina regenerated per second."""

# =============================================================================
# Combat
# =============================================================================

ADVANTAGE_MULTIPLIER = 1.5
"""Damage multiplier when the attacker's element beats the defender's."""

DISADVANTAGE_MULTIPLIER = 0.75
"""Damage multiplier when the attacker's element is beaten."""

DEFAULT_DEBUFF_DURATION = 3
"""Rounds a debuff lasts when its spell effect declares no duration."""

WEALTHY_GOLD_THRESHOLD = 100
"""Gold from a single victory that counts towards the wealth achievement."""

# =============================================================================
# Learning Activities
# =============================================================================

SPELL_LEARNING_BASE_DURATION = 30
SPELL_LEARNING_MIN_DURATION = 5
SKILL_PRACTICE_BASE_DURATION = 20
SKILL_PRACTICE_MIN_DURATION = 3
SKILL_TRAINING_BASE_DURATION = 25
SKILL_TRAINING_MIN_DURATION = 5

SKILL_PRACTICE_MANA_COST = 10
SKILL_TRAINING_MANA_COST = 15
SKILL_TRAINING_RESEARCH_COST = 20
SKILL_TRAINING_GOLD_COST = 10

SKILL_PRACTICE_EXP = 50
"""Base skill experience granted by one practice session."""

SKILL_TRAINING_EXP = 100
"""Skill experience granted by one training session."""

# =============================================================================
# Achievement Ids
# =============================================================================

ACHIEVEMENT_FIRST_SKILL = "first_skill"
ACHIEVEMENT_SKILL_MASTER = "skill_master"
ACHIEVEMENT_SPELL_LEARNER = "spell_learner"
ACHIEVEMENT_MONSTER_SLAYER = "monster_slayer"
ACHIEVEMENT_WEALTHY_ADVENTURER = "wealthy_adventurer"
ACHIEVEMENT_EXPLORER = "explorer"
ACHIEVEMENT_SEASONED_EXPLORER = "seasoned_explorer"

# =============================================================================
# Persistence
# =============================================================================

SAVE_VERSION = "1.0.0"
"""Version stamped into every save document."""
