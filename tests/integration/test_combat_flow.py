"""Integration tests for combat flow.

Tests complete encounters from the first spell to reward settlement.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from spellbinder.engine.combat import CombatResult, CombatTurn
from spellbinder.engine.game import Game


if TYPE_CHECKING:
    from tests.conftest import FakeClock


class TestCombatFlow:
    """Test complete combat scenarios against catalog monsters."""

    def test_turn_by_turn_victory(self, game: Game, clock: FakeClock) -> None:
        """Fight a slime turn by turn, letting cooldowns recover between rounds."""
        player = game.player
        player.learn_spell("fireball")
        player.resources.add("mana_fire", 20)
        combat = game.start_combat(["slime"])
        slime = combat.monsters[0]

        combat.execute_player_turn()
        assert slime.current_health == 10
        assert player.resources.value_of("mana_fire") == 10
        assert combat.current_turn == CombatTurn.MONSTER

        combat.execute_monster_turn()
        assert player.resources.value_of("health") == 97
        assert combat.current_turn == CombatTurn.PLAYER

        # Fireball is still cooling down.
        assert combat.select_spell() is None
        game.tick(clock.advance(3.0))

        combat.execute_player_turn()

        assert combat.result == CombatResult.VICTORY
        assert not combat.is_active
        assert combat.turn_count == 1
        assert player.inventory.quantity("slime_gel") == 1
        assert 2 <= combat.rewards.gold <= 6
        assert player.resources.value_of("gold") == 100 + combat.rewards.gold
        assert player.achievements.get("monster_slayer").current == 1

    def test_auto_execute_draw_without_spells(self, game: Game) -> None:
        """A player with nothing to cast cannot win inside the round limit."""
        combat = game.start_combat(["slime"])

        outcome = combat.auto_execute(max_rounds=5)

        assert outcome.value == "draw"
        assert combat.is_active
        assert game.player.resources.value_of("health") == 85

    def test_combat_survives_save_and_load(self, game: Game, clock: FakeClock) -> None:
        """An interrupted encounter resumes from a snapshot."""
        game.player.learn_spell("fireball")
        game.player.resources.add("mana_fire", 20)
        combat = game.start_combat(["slime"])
        combat.execute_player_turn()
        snapshot = game.to_snapshot()
        game.end_combat()

        game.load_snapshot(snapshot)

        restored = game.combat
        assert restored.is_active
        assert restored.current_turn == CombatTurn.MONSTER
        assert restored.monsters[0].current_health == 10
        assert restored.player is game.player

    def test_flee(self, game: Game) -> None:
        """Fleeing ends the encounter without loot."""
        combat = game.start_combat(["slime", "slime"])

        assert combat.flee()

        assert combat.result == CombatResult.FLED
        assert combat.rewards is None
        assert game.player.resources.value_of("gold") == 100
        assert game.start_combat(["slime"]) is not None
