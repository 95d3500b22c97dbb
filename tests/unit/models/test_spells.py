"""Tests for spells and the spell manager."""

from __future__ import annotations

import pytest

from spellbinder.core.exceptions import DefinitionNotFoundError
from spellbinder.models.achievements import AchievementManager
from spellbinder.models.definitions import GameDefinitions
from spellbinder.models.predicates import PredicateContext
from spellbinder.models.spells import Spell, SpellDefinition, SpellEffectType, SpellManager


@pytest.fixture
def bolt() -> SpellDefinition:
    """Provide a fire spell with a cooldown and a skill prerequisite."""
    return SpellDefinition(
        id="bolt",
        name="Bolt",
        element="fire",
        mana_cost=10,
        cooldown=3,
        required_skill={"skill_id": "fire_affinity", "level": 2},
        effects=[{"type": "damage", "value": 10}],
    )


@pytest.fixture
def spell_manager(definitions: GameDefinitions) -> SpellManager:
    """Provide a manager with the built-in spells and achievements."""
    return SpellManager(definitions.spells, achievements=AchievementManager(definitions.achievements))


class TestSpell:
    """Tests for a runtime Spell."""

    def test_unlearned_cannot_cast(self, bolt: SpellDefinition) -> None:
        """Test that an unlearned spell is never castable."""
        spell = Spell(bolt)

        assert not spell.can_cast(100, {"fire_affinity": 5})
        assert spell.cast() is False

    def test_can_cast_checks_mana_and_skill(self, bolt: SpellDefinition) -> None:
        """Test mana and skill requirements."""
        spell = Spell(bolt)
        spell.is_learned = True

        assert spell.can_cast(10, {"fire_affinity": 2})
        assert not spell.can_cast(9, {"fire_affinity": 2})
        assert not spell.can_cast(10, {"fire_affinity": 1})
        assert not spell.can_cast(10, {})

    def test_cast_starts_cooldown(self, bolt: SpellDefinition) -> None:
        """Test that casting starts the cooldown and blocks recasting."""
        spell = Spell(bolt)
        spell.is_learned = True

        assert spell.cast() is True
        assert spell.is_on_cooldown
        assert spell.current_cooldown == 3
        assert spell.cast() is False
        assert not spell.can_cast(100, {"fire_affinity": 5})

    def test_update_decreases_cooldown_to_zero(self, bolt: SpellDefinition) -> None:
        """Test cooldown decay with a floor of zero."""
        spell = Spell(bolt)
        spell.is_learned = True
        spell.cast()

        spell.update(1.5)
        assert spell.current_cooldown == pytest.approx(1.5)

        spell.update(10)
        assert spell.current_cooldown == 0
        assert not spell.is_on_cooldown

    def test_neutral_spell_with_mana_cost(self) -> None:
        """Test that a neutral spell with a mana cost cannot be paid for."""
        spell = Spell(SpellDefinition(id="n", name="N", element="neutral", mana_cost=5))
        spell.is_learned = True

        assert not spell.can_cast(1_000, {})

    def test_effect_types(self, bolt: SpellDefinition) -> None:
        """Test effect type lookup."""
        spell = Spell(bolt)

        assert spell.has_effect_type(SpellEffectType.DAMAGE)
        assert not spell.has_effect_type("heal")

    def test_can_learn(self, bolt: SpellDefinition) -> None:
        """Test the learn check with a skill prerequisite."""
        spell = Spell(bolt)

        assert not spell.can_learn(PredicateContext(skill_levels={"fire_affinity": 1}))
        assert spell.can_learn(PredicateContext(skill_levels={"fire_affinity": 2}))


class TestSpellManager:
    """Tests for the SpellManager."""

    def test_every_spell_is_registered_unlearned(self, spell_manager: SpellManager) -> None:
        """Test that spells start registered but unlearned."""
        assert spell_manager.get_spell("fireball") is not None
        assert spell_manager.get_learned_spells() == []

    def test_learn_spell(self, definitions: GameDefinitions) -> None:
        """Test learning a spell counts towards achievements once."""
        achievements = AchievementManager(definitions.achievements)
        manager = SpellManager(definitions.spells, achievements=achievements)

        assert manager.learn_spell("fireball")
        assert manager.learn_spell("fireball")

        assert manager.get_spell("fireball").is_learned
        assert achievements.get("spell_learner").current == 1

    def test_learn_unknown(self, spell_manager: SpellManager) -> None:
        """Test that unknown spells cannot be learned."""
        assert spell_manager.learn_spell("meteor") is False

    def test_learn_checks_requirements(self, spell_manager: SpellManager) -> None:
        """Test that requirements are enforced when a context is given."""
        context = PredicateContext(talents={"fire": 30}, skill_levels={"fire_affinity": 2})

        assert spell_manager.learn_spell("flame_burst", context) is False
        assert spell_manager.get_locked_spells(context)
        assert "flame_burst" not in {s.id for s in spell_manager.get_learnable_spells(context)}

    def test_update(self, spell_manager: SpellManager) -> None:
        """Test that update advances every cooldown."""
        spell_manager.learn_spell("fireball")
        spell_manager.get_spell("fireball").cast()

        spell_manager.update(3)

        assert not spell_manager.get_spell("fireball").is_on_cooldown

    def test_snapshot_contains_only_progress(self, spell_manager: SpellManager) -> None:
        """Test that untouched spells are not serialized."""
        spell_manager.learn_spell("fireball")
        spell_manager.get_spell("fireball").cast()

        snapshot = spell_manager.to_snapshot()

        assert snapshot == [{"id": "fireball", "is_learned": True, "current_cooldown": 3.0}]

    def test_snapshot_round_trip(self, spell_manager: SpellManager, definitions: GameDefinitions) -> None:
        """Test restoring learned flags and cooldowns."""
        spell_manager.learn_spell("fireball")
        spell_manager.learn_spell("water_bolt")
        spell_manager.get_spell("water_bolt").cast()
        restored = SpellManager(definitions.spells)

        restored.load_snapshot(spell_manager.to_snapshot())

        assert restored.to_snapshot() == spell_manager.to_snapshot()

    def test_snapshot_unknown_spell_changes_nothing(self, spell_manager: SpellManager) -> None:
        """Test that a snapshot with an unknown spell is rejected as a whole."""
        spell_manager.learn_spell("fireball")

        with pytest.raises(DefinitionNotFoundError):
            spell_manager.load_snapshot(
                [
                    {"id": "water_bolt", "is_learned": True},
                    {"id": "meteor", "is_learned": True},
                ]
            )

        assert spell_manager.get_spell("fireball").is_learned
        assert not spell_manager.get_spell("water_bolt").is_learned
