"""Tests for the elemental talent profile."""

from __future__ import annotations

import pydantic
import pytest

from spellbinder.models.enums import Element
from spellbinder.models.talent import Talent, clamp_talent


class TestTalent:
    """Tests for Talent."""

    def test_preset(self) -> None:
        """Test that a preset favours its element."""
        talent = Talent.create_preset(Element.FIRE)

        assert talent.fire == 70
        assert talent.water == 20
        assert max(talent.as_dict(), key=talent.as_dict().get) == "fire"

    def test_neutral_has_no_preset(self) -> None:
        """Test that the neutral element has no preset."""
        with pytest.raises(KeyError):
            Talent.create_preset("neutral")

    def test_neutral_is_average(self) -> None:
        """Test that neutral talent averages the magic elements."""
        talent = Talent(fire=70, water=20, earth=25, wind=30)

        assert talent.get(Element.NEUTRAL) == pytest.approx(36.25)

    def test_set_clamps(self) -> None:
        """Test that set keeps values within range."""
        talent = Talent()

        talent.set("fire", 150)
        talent.set("water", -20)

        assert talent.fire == 100
        assert talent.water == 0

    def test_set_neutral_is_ignored(self) -> None:
        """Test that neutral cannot be set directly."""
        talent = Talent(fire=10)

        talent.set("neutral", 90)

        assert talent.as_dict() == {"fire": 10, "water": 0, "earth": 0, "wind": 0}

    def test_add(self) -> None:
        """Test adding to a talent."""
        talent = Talent(earth=95)

        talent.add("earth", 10)

        assert talent.earth == 100

    def test_multipliers(self) -> None:
        """Test mana capacity and learning speed multipliers."""
        talent = Talent(fire=70)

        assert talent.get_mana_capacity_multiplier("fire") == pytest.approx(1.35)
        assert talent.get_learning_speed_multiplier("fire") == pytest.approx(1.7)

    def test_out_of_range_rejected(self) -> None:
        """Test that construction validates the range."""
        with pytest.raises(pydantic.ValidationError):
            Talent(fire=101)

    def test_clamp_talent(self) -> None:
        """Test the clamp helper."""
        assert clamp_talent(-1) == 0
        assert clamp_talent(50) == 50
        assert clamp_talent(101) == 100
