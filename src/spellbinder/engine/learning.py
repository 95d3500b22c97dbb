"""Factories for learning, practice and training activities.

Durations shrink with the talent of the activity's element:
``max(floor, floor(base * (1 - talent / 200)))``. Neutral skills and
spells use the average talent.
"""

from __future__ import annotations

import math

from spellbinder.core.constants import (
    SKILL_PRACTICE_BASE_DURATION,
    SKILL_PRACTICE_EXP,
    SKILL_PRACTICE_MANA_COST,
    SKILL_PRACTICE_MIN_DURATION,
    SKILL_TRAINING_BASE_DURATION,
    SKILL_TRAINING_EXP,
    SKILL_TRAINING_GOLD_COST,
    SKILL_TRAINING_MANA_COST,
    SKILL_TRAINING_MIN_DURATION,
    SKILL_TRAINING_RESEARCH_COST,
    SPELL_LEARNING_BASE_DURATION,
    SPELL_LEARNING_MIN_DURATION,
)
from spellbinder.models.activities import ActivityCost, ActivityData, ActivityReward, ActivityType
from spellbinder.models.enums import Element, ResourceId, RewardKey
from spellbinder.models.skills import Skill, SkillDefinition
from spellbinder.models.spells import SpellDefinition
from spellbinder.models.talent import Talent


def learning_duration(base: float, minimum: float, talent: float) -> int:
    """Compute a talent-scaled activity duration in whole seconds."""
    return max(int(minimum), math.floor(base * (1 - talent / 200)))


def _mana_cost(element: Element, amount: float) -> list[ActivityCost]:
    if element.mana_resource is None:
        return []
    return [ActivityCost(resource=element.mana_resource, amount=amount)]


class LearningActivityFactory:
    """Builds the activity descriptions for spell and skill progression."""

    @staticmethod
    def create_spell_learning(spell: SpellDefinition, talent: Talent) -> ActivityData:
        """Build the activity that teaches a spell.

        Costs research ``level * 10`` and gold ``level * 5``; grants
        ``level * 5`` player experience.
        """
        duration = learning_duration(
            SPELL_LEARNING_BASE_DURATION,
            SPELL_LEARNING_MIN_DURATION,
            talent.get(spell.element),
        )
        return ActivityData(
            id=f"learn_{spell.id}",
            name=f"Learn {spell.name}",
            description=spell.description,
            duration=duration,
            costs=[
                ActivityCost(resource=ResourceId.RESEARCH, amount=spell.level * 10),
                ActivityCost(resource=ResourceId.GOLD, amount=spell.level * 5),
            ],
            rewards=[ActivityReward(resource=RewardKey.EXPERIENCE, amount=spell.level * 5)],
            type=ActivityType.LEARNING,
            category="learning",
            metadata={"spell_id": spell.id},
        )

    @staticmethod
    def create_skill_practice(skill: Skill, talent: Talent) -> ActivityData:
        """Build the activity that practices an acquired skill.

        Elemental skills cost 10 mana of their element; every practice
        costs gold equal to the current level. The skill gains
        ``50 + 2 * level`` experience on completion.
        """
        duration = learning_duration(
            SKILL_PRACTICE_BASE_DURATION,
            SKILL_PRACTICE_MIN_DURATION,
            talent.get(skill.element),
        )
        costs = _mana_cost(skill.element, SKILL_PRACTICE_MANA_COST)
        if skill.current_level > 0:
            costs.append(ActivityCost(resource=ResourceId.GOLD, amount=skill.current_level))

        return ActivityData(
            id=f"practice_{skill.id}",
            name=f"Practice {skill.name}",
            description=skill.definition.description,
            duration=duration,
            costs=costs,
            rewards=[
                ActivityReward(resource=RewardKey.SKILL_EXP, amount=SKILL_PRACTICE_EXP),
                ActivityReward(resource=RewardKey.EXPERIENCE, amount=5),
            ],
            type=ActivityType.PRACTICE,
            category="training",
            metadata={
                "skill_id": skill.id,
                "exp_gain": SKILL_PRACTICE_EXP + math.floor(skill.current_level * 2),
            },
        )

    @staticmethod
    def create_skill_training(skill: SkillDefinition, talent: Talent) -> ActivityData:
        """Build the activity that unlocks a skill through formal training.

        Costs 15 mana of the skill's element (none for neutral skills),
        20 research and 10 gold. On completion the skill is unlocked and
        gains 100 experience.
        """
        duration = learning_duration(
            SKILL_TRAINING_BASE_DURATION,
            SKILL_TRAINING_MIN_DURATION,
            talent.get(skill.element),
        )
        costs = _mana_cost(skill.element, SKILL_TRAINING_MANA_COST)
        costs += [
            ActivityCost(resource=ResourceId.RESEARCH, amount=SKILL_TRAINING_RESEARCH_COST),
            ActivityCost(resource=ResourceId.GOLD, amount=SKILL_TRAINING_GOLD_COST),
        ]
        return ActivityData(
            id=f"train_{skill.id}",
            name=f"Train {skill.name}",
            description=skill.description,
            duration=duration,
            costs=costs,
            rewards=[
                ActivityReward(resource=RewardKey.SKILL_EXP, amount=SKILL_TRAINING_EXP),
                ActivityReward(resource=RewardKey.EXPERIENCE, amount=10),
            ],
            type=ActivityType.TRAINING,
            category="training",
            metadata={"skill_id": skill.id},
        )


__all__ = [
    "learning_duration",
    "LearningActivityFactory",
]
