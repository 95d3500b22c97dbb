"""Tests for monsters and loot tables."""

from __future__ import annotations

import random

import pytest

from spellbinder.core.exceptions import ValidationError
from spellbinder.models.monsters import Buff, LootTable, Monster, MonsterDefinition, parse_drop_range


@pytest.fixture
def golem() -> MonsterDefinition:
    """Provide a sturdy monster with some defense."""
    return MonsterDefinition(id="golem", name="Golem", element="earth", max_health=40, attack=10, defense=2)


class TestParseDropRange:
    """Tests for drop amount parsing."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [("3~8", (3, 8)), ("5", (5, 5)), (5, (5, 5)), (None, (0, 0)), (" 2~2 ", (2, 2))],
    )
    def test_valid(self, value: str | int | None, expected: tuple[int, int]) -> None:
        """Test ranges, fixed amounts and missing values."""
        assert parse_drop_range(value) == expected

    @pytest.mark.parametrize("value", ["a~b", "8~3", "many"])
    def test_invalid(self, value: str) -> None:
        """Test that malformed and inverted ranges raise."""
        with pytest.raises(ValidationError) as exc_info:
            parse_drop_range(value)

        assert exc_info.value.details["field_name"] == "drops"


class TestLootTable:
    """Tests for rolling loot."""

    def test_roll_within_ranges(self) -> None:
        """Test that rolled amounts respect their ranges."""
        table = LootTable(gold="3~8", experience=4, items=["a", "b"])
        rng = random.Random(7)

        for _ in range(20):
            loot = table.roll(rng)
            assert 3 <= loot["gold"] <= 8
            assert loot["experience"] == 4
            assert len(loot["items"]) == 1
            assert loot["items"][0] in {"a", "b"}

    def test_empty_table(self) -> None:
        """Test that an empty table rolls nothing."""
        assert LootTable().roll(random.Random(1)) == {}
        assert LootTable(mana_fire="1~2").amounts() == {"mana_fire": "1~2"}


class TestMonster:
    """Tests for monster combat instances."""

    def test_defense_reduces_damage(self, golem: MonsterDefinition) -> None:
        """Test damage mitigation with a minimum of one."""
        monster = Monster(golem)

        assert monster.take_damage(10) == 8
        assert monster.take_damage(1) == 1
        assert monster.current_health == 31

    def test_death(self, golem: MonsterDefinition) -> None:
        """Test that health stops at zero and the monster dies."""
        monster = Monster(golem)

        monster.take_damage(1_000)

        assert monster.current_health == 0
        assert not monster.is_alive

    def test_heal_caps_at_max(self, golem: MonsterDefinition) -> None:
        """Test that healing never exceeds max health."""
        monster = Monster(golem)
        monster.take_damage(12)

        assert monster.heal(100) == 10
        assert monster.health_percentage == 100

    def test_modifiers(self, golem: MonsterDefinition) -> None:
        """Test buffs and debuffs on stats."""
        monster = Monster(golem)
        monster.add_buff(Buff(type="defense", value=3, duration=2))
        monster.add_debuff(Buff(type="attack", value=15, duration=1))

        assert monster.defense == 5
        assert monster.attack == 0

    def test_modifiers_expire(self, golem: MonsterDefinition) -> None:
        """Test that modifiers are dropped when their duration runs out."""
        monster = Monster(golem)
        monster.add_buff(Buff(type="defense", value=3, duration=2))
        monster.add_debuff(Buff(type="attack", value=4, duration=1))

        monster.tick_modifiers()
        assert monster.debuffs == []
        assert monster.buffs[0].duration == 1

        monster.tick_modifiers()
        assert monster.buffs == []
        assert monster.defense == 2

    def test_snapshot_round_trip(self, golem: MonsterDefinition) -> None:
        """Test restoring health and modifiers."""
        monster = Monster(golem)
        monster.take_damage(20)
        monster.add_debuff(Buff(type="defense", value=1, duration=3, source="weaken"))

        restored = Monster.from_snapshot(monster.to_snapshot(), golem)

        assert restored.to_snapshot() == monster.to_snapshot()
        assert restored.defense == 1
