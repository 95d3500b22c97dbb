"""Integration tests for character progression.

Tests the complete flow: create, study, queue activities, and grow.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from spellbinder.engine.game import Game


if TYPE_CHECKING:
    from tests.conftest import FakeClock


class TestCharacterFlow:
    """Test progression through queued activities and classes."""

    def test_queued_activities_run_back_to_back(self, game: Game, clock: FakeClock) -> None:
        """Learn a spell while a practice session waits in the queue."""
        player = game.player
        player.resources.add("research", 10)
        player.resources.add("mana_fire", 10)
        assert player.unlock_skill("fire_affinity")

        assert game.start_learning_spell("fireball")
        assert game.start_skill_practice("fire_affinity")
        assert len(game.runner.queue) == 1
        assert player.resources.value_of("gold") == 94

        finished = game.tick(clock.advance(19.0))
        assert finished.activity.id == "learn_fireball"
        assert game.runner.current_activity.activity.id == "practice_fire_affinity"
        assert game.runner.current_activity.start_time == 1019.0

        finished = game.tick(clock.advance(13.0))
        assert finished.activity.id == "practice_fire_affinity"

        assert player.spells.get_spell("fireball").is_learned
        assert player.skills.get_skill("fire_affinity").current_exp == 52
        assert player.experience == 10
        assert game.runner.current_activity is None

    def test_class_path(self, game: Game) -> None:
        """Walk from apprentice to acolyte and feel the bonuses."""
        player = game.player
        player.add_experience(50)

        assert player.unlock_class("apprentice")
        assert player.unlock_class("fire_acolyte")

        assert player.skills.has_skill("fire_affinity")
        assert player.talent.fire == 75
        assert player.resources.get("mana_fire").max == 157.5
        assert not game.start_skill_training("fire_affinity")

    def test_levelling_through_activities(self, game: Game, clock: FakeClock) -> None:
        """Enough completed work raises the player level."""
        player = game.player
        player.resources.add("research", 100)
        player.resources.add("gold", 100)

        for spell_id in ("fireball", "water_bolt"):
            assert game.start_learning_spell(spell_id)
        while game.runner.current_activity is not None:
            game.tick(clock.advance(5.0))
        player.add_experience(90)

        assert player.level == 2
        assert player.experience == 0
        assert len(player.spells.get_learned_spells()) == 2
