"""Tests for unlock predicates and condition strings."""

from __future__ import annotations

import pytest
from pydantic import TypeAdapter

from spellbinder.core.exceptions import ValidationError
from spellbinder.models.enums import Element
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


@pytest.fixture
def context() -> PredicateContext:
    """Provide a context with some talents, skills and classes."""
    return PredicateContext(
        talents={"fire": 30, "water": 10, "earth": 0, "wind": 0},
        skill_levels={"fire_affinity": 3, "meditation": 0},
        player_level=2,
        unlocked_classes=frozenset({"apprentice"}),
    )


class TestParseCondition:
    """Tests for the condition string language."""

    def test_talent_comparison(self) -> None:
        """Test a single talent clause."""
        assert parse_condition("fire >= 20") == TalentAtLeast(element=Element.FIRE, value=20)

    def test_level_comparison(self) -> None:
        """Test the player level variable."""
        assert parse_condition("level >= 2") == LevelAtLeast(value=2)

    def test_skill_comparison(self) -> None:
        """Test that other names refer to skills."""
        assert parse_condition("fire_affinity >= 5") == SkillAtLeast(skill_id="fire_affinity", value=5)

    def test_conjunction(self) -> None:
        """Test clauses joined with && and 'and'."""
        for text in ("fire >= 20 && fire_affinity >= 3", "fire >= 20 and fire_affinity >= 3"):
            predicate = parse_condition(text)
            assert isinstance(predicate, AllOf)
            assert len(predicate.predicates) == 2

    def test_disjunction_binds_looser(self) -> None:
        """Test that || splits before &&."""
        predicate = parse_condition("level >= 5 || fire >= 20 && water >= 20")

        assert isinstance(predicate, AnyOf)
        assert predicate.predicates[0] == LevelAtLeast(value=5)
        assert isinstance(predicate.predicates[1], AllOf)

    def test_less_than_is_negated(self) -> None:
        """Test that < becomes a negated at-least."""
        assert parse_condition("water < 10") == Not(predicate=TalentAtLeast(element="water", value=10))

    @pytest.mark.parametrize("text", [">= 5", "fire >=", "fire == 5", "fire >= 5 &&", "1fire >= 2"])
    def test_malformed(self, text: str) -> None:
        """Test that malformed strings raise ValidationError."""
        with pytest.raises(ValidationError):
            parse_condition(text)


class TestCoerceCondition:
    """Tests for coerce_condition."""

    def test_blank_means_no_condition(self) -> None:
        """Test that blank strings mean no condition."""
        assert coerce_condition("") is None
        assert coerce_condition("   ") is None

    def test_malformed_never_holds(self) -> None:
        """Test that a malformed string becomes a never-holding predicate."""
        predicate = coerce_condition("fire is hot")

        assert predicate == NEVER
        assert evaluate(predicate, PredicateContext()) is False

    def test_non_strings_pass_through(self) -> None:
        """Test that structured values are left to validation."""
        payload = {"kind": "level_at_least", "value": 3}

        assert coerce_condition(payload) is payload


class TestEvaluate:
    """Tests for predicate evaluation."""

    def test_missing_predicate_holds(self, context: PredicateContext) -> None:
        """Test that no condition always holds."""
        assert evaluate(None, context) is True

    def test_talent_and_skill(self, context: PredicateContext) -> None:
        """Test talent and skill thresholds."""
        assert evaluate(parse_condition("fire >= 30 && fire_affinity >= 3"), context)
        assert not evaluate(parse_condition("water >= 20"), context)

    def test_level(self, context: PredicateContext) -> None:
        """Test the level threshold."""
        assert evaluate(LevelAtLeast(value=2), context)
        assert not evaluate(LevelAtLeast(value=3), context)

    def test_prerequisite(self, context: PredicateContext) -> None:
        """Test class prerequisites."""
        assert evaluate(PrerequisiteUnlocked(class_id="apprentice"), context)
        assert not evaluate(PrerequisiteUnlocked(class_id="fire_acolyte"), context)

    def test_unknown_skill_fails_closed(self, context: PredicateContext) -> None:
        """Test that an unknown variable makes the predicate unmet."""
        assert not evaluate(SkillAtLeast(skill_id="necromancy", value=0), context)
        assert not evaluate(Not(predicate=SkillAtLeast(skill_id="necromancy", value=5)), context)
        assert not evaluate(
            AnyOf(predicates=[LevelAtLeast(value=3), SkillAtLeast(skill_id="necromancy", value=1)]),
            context,
        )

    def test_empty_combinators(self, context: PredicateContext) -> None:
        """Test the identities of empty combinators."""
        assert evaluate(AllOf(), context) is True
        assert evaluate(AnyOf(), context) is False
        assert evaluate(NEVER, context) is False

    def test_structured_payload(self, context: PredicateContext) -> None:
        """Test validating nested predicates from plain data."""
        adapter = TypeAdapter(Predicate)
        predicate = adapter.validate_python(
            {
                "kind": "all_of",
                "predicates": [
                    {"kind": "talent_at_least", "element": "fire", "value": 20},
                    {"kind": "not", "predicate": {"kind": "level_at_least", "value": 5}},
                ],
            }
        )

        assert evaluate(predicate, context) is True
