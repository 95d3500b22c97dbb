"""Tests for the class tree and class manager."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from spellbinder.core.exceptions import DataIntegrityError, DefinitionNotFoundError
from spellbinder.models.classes import ClassCost, ClassEffectType, ClassManager, ClassNode, ClassTree
from spellbinder.models.definitions import GameDefinitions
from spellbinder.models.predicates import PredicateContext


if TYPE_CHECKING:
    from tests.conftest import FakeClock


class StubWallet:
    """Wallet holding gold and experience."""

    def __init__(self, gold: float = 0, experience: float = 0) -> None:
        self.gold = gold
        self.experience = experience
        self.payments = 0

    def can_afford(self, cost: ClassCost) -> bool:
        return cost.gold <= self.gold and cost.experience <= self.experience

    def pay(self, cost: ClassCost) -> bool:
        if not self.can_afford(cost):
            return False
        self.gold -= cost.gold
        self.experience -= cost.experience
        self.payments += 1
        return True


ALL_MAGES = [
    "apprentice",
    "fire_acolyte",
    "water_acolyte",
    "earth_acolyte",
    "wind_acolyte",
    "fire_mage",
    "water_mage",
    "earth_mage",
    "wind_mage",
]


@pytest.fixture
def tree(definitions: GameDefinitions) -> ClassTree:
    """Provide the built-in class tree."""
    return definitions.build_class_tree()


@pytest.fixture
def manager(tree: ClassTree, clock: FakeClock) -> ClassManager:
    """Provide a class manager on the fake clock."""
    return ClassManager(tree, clock=clock, cache_window=0.5)


@pytest.fixture
def talented() -> PredicateContext:
    """Provide a context meeting every acolyte requirement."""
    return PredicateContext(talents={"fire": 70, "water": 20, "earth": 25, "wind": 30})


@pytest.fixture
def rich() -> StubWallet:
    """Provide a wallet that can pay for anything."""
    return StubWallet(gold=100_000, experience=100_000)


class TestClassTree:
    """Tests for ClassTree construction and queries."""

    def test_children(self, tree: ClassTree) -> None:
        """Test listing dependent classes."""
        children = {node.id for node in tree.get_children("apprentice")}

        assert children == {"fire_acolyte", "water_acolyte", "earth_acolyte", "wind_acolyte", "battle_mage"}
        assert tree.get_children("nope") == []

    def test_path_to_class(self, tree: ClassTree) -> None:
        """Test the unlock path of a tier 2 class."""
        path = [node.id for node in tree.get_path_to_class("fire_mage")]

        assert path == ["apprentice", "fire_acolyte", "fire_mage"]

    def test_path_orders_lower_tiers_first(self, tree: ClassTree) -> None:
        """Test that a path lists every acolyte before any mage."""
        path = [node.id for node in tree.get_path_to_class("archmage")]

        assert path == [
            "apprentice",
            "earth_acolyte",
            "fire_acolyte",
            "water_acolyte",
            "wind_acolyte",
            "earth_mage",
            "fire_mage",
            "water_mage",
            "wind_mage",
            "archmage",
        ]

    def test_path_to_unknown(self, tree: ClassTree) -> None:
        """Test that unknown classes have no path."""
        assert tree.get_path_to_class("nope") == []

    def test_tree_structure(self, tree: ClassTree) -> None:
        """Test grouping by tier."""
        structure = tree.get_tree_structure()

        assert list(structure) == [0, 1, 2, 3]
        assert structure[0] == ["apprentice"]
        assert structure[1] == ["earth_acolyte", "fire_acolyte", "water_acolyte", "wind_acolyte"]
        assert structure[3] == ["archmage"]

    def test_cycle_rejected(self) -> None:
        """Test that a prerequisite cycle is rejected."""
        with pytest.raises(DataIntegrityError, match="cycle"):
            ClassTree(
                [
                    ClassNode(id="a", name="A", prerequisites=["b"]),
                    ClassNode(id="b", name="B", prerequisites=["a"]),
                ]
            )

    def test_unknown_prerequisite_rejected(self) -> None:
        """Test that prerequisites must exist."""
        with pytest.raises(DataIntegrityError) as exc_info:
            ClassTree([ClassNode(id="a", name="A", prerequisites=["ghost"])])

        assert exc_info.value.details["prerequisite"] == "ghost"

    def test_failed_batch_leaves_tree_unchanged(self, tree: ClassTree) -> None:
        """Test that a rejected batch adds nothing."""
        size = len(tree)

        with pytest.raises(DataIntegrityError):
            tree.add_nodes(
                [
                    ClassNode(id="hermit", name="Hermit", prerequisites=["apprentice"]),
                    ClassNode(id="apprentice", name="Duplicate"),
                ]
            )

        assert len(tree) == size
        assert "hermit" not in tree

    def test_requirement_strings_are_parsed(self) -> None:
        """Test that string requirements become predicates and blanks are dropped."""
        node = ClassNode(id="a", name="A", requirements=["fire >= 20", ""])

        assert len(node.requirements) == 1


class TestClassManager:
    """Tests for ClassManager."""

    def test_only_apprentice_available_at_start(
        self,
        manager: ClassManager,
        talented: PredicateContext,
        rich: StubWallet,
    ) -> None:
        """Test that prerequisites gate availability."""
        available = manager.get_available_classes(talented, rich)

        assert [node.id for node in available] == ["apprentice"]

    def test_unlock_invalidates_cache(
        self,
        manager: ClassManager,
        talented: PredicateContext,
        rich: StubWallet,
    ) -> None:
        """Test that an unlock is visible immediately."""
        manager.get_available_classes(talented, rich)

        assert manager.unlock_class("apprentice", talented, rich)
        available = manager.get_available_classes(talented, rich)

        assert [node.id for node in available] == [
            "earth_acolyte",
            "fire_acolyte",
            "water_acolyte",
            "wind_acolyte",
        ]

    def test_listing_is_cached(
        self,
        manager: ClassManager,
        talented: PredicateContext,
        rich: StubWallet,
        clock: FakeClock,
    ) -> None:
        """Test that a listing is reused within the cache window."""
        manager.unlock_class("apprentice", talented, rich)
        first = manager.get_available_classes(talented, rich)
        untalented = PredicateContext(talents={"fire": 0, "water": 0, "earth": 0, "wind": 0})

        clock.advance(0.25)
        assert manager.get_available_classes(untalented, rich) == first

        clock.advance(0.25)
        assert manager.get_available_classes(untalented, rich) == []

    def test_unlock_pays_once(self, manager: ClassManager, talented: PredicateContext) -> None:
        """Test that unlocking is idempotent and charges once."""
        wallet = StubWallet(gold=100, experience=50)
        manager.unlock_class("apprentice", talented, wallet)

        assert manager.unlock_class("fire_acolyte", talented, wallet)
        assert manager.unlock_class("fire_acolyte", talented, wallet)

        assert wallet.gold == 0
        assert wallet.payments == 2
        assert manager.unlocked_classes == ("apprentice", "fire_acolyte")

    def test_unlock_requires_funds(self, manager: ClassManager, talented: PredicateContext) -> None:
        """Test that unaffordable classes stay locked."""
        wallet = StubWallet(gold=50, experience=50)
        manager.unlock_class("apprentice", talented, wallet)

        assert manager.unlock_class("fire_acolyte", talented, wallet) is False
        assert not manager.is_unlocked("fire_acolyte")
        assert wallet.gold == 50

    def test_unlock_requires_prerequisites(
        self,
        manager: ClassManager,
        talented: PredicateContext,
        rich: StubWallet,
    ) -> None:
        """Test that prerequisites are enforced."""
        assert manager.unlock_class("fire_mage", talented, rich) is False
        assert manager.unlock_class("nope", talented, rich) is False

    def test_unlock_requires_conditions(self, manager: ClassManager, rich: StubWallet) -> None:
        """Test that requirement predicates are enforced."""
        weak = PredicateContext(talents={"fire": 10, "water": 10, "earth": 10, "wind": 10})
        manager.unlock_class("apprentice", weak, rich)

        assert manager.can_unlock_class("fire_acolyte", weak, rich) is False

    def test_effects(self, manager: ClassManager, talented: PredicateContext, rich: StubWallet) -> None:
        """Test summing effects of unlocked classes."""
        for class_id in ("apprentice", "fire_acolyte", "earth_acolyte", "fire_mage"):
            assert manager.unlock_class(class_id, talented, rich)

        assert manager.get_effect_total(ClassEffectType.MANA_CAPACITY, "mana_fire") == 90
        assert manager.get_effect_total("spell_power") == 20
        assert manager.get_effect_total("talent_bonus", "fire") == 5
        assert manager.get_custom_effect("defense") == 5
        assert manager.get_skill_max_bonuses() == {"fire_affinity": 5}
        assert manager.get_unlocked_skills() == ["fire_affinity", "earth_affinity"]

    def test_secret_class_revealed_by_prerequisites(
        self,
        manager: ClassManager,
        rich: StubWallet,
    ) -> None:
        """Test that the secret class appears once its prerequisites are unlocked."""
        master = PredicateContext(
            talents={"fire": 70, "water": 70, "earth": 70, "wind": 70},
            player_level=10,
        )
        manager.load_snapshot({"unlocked_classes": ALL_MAGES})

        assert [node.id for node in manager.get_available_classes(master, rich)] == ["archmage"]

    def test_snapshot_deduplicates(self, manager: ClassManager) -> None:
        """Test that duplicate saved ids collapse."""
        manager.load_snapshot({"unlocked_classes": ["apprentice", "apprentice"]})

        assert manager.to_snapshot() == {"unlocked_classes": ["apprentice"]}

    def test_snapshot_unknown_class(self, manager: ClassManager, talented: PredicateContext, rich: StubWallet) -> None:
        """Test that unknown saved ids are rejected without changes."""
        manager.unlock_class("apprentice", talented, rich)

        with pytest.raises(DefinitionNotFoundError):
            manager.load_snapshot({"unlocked_classes": ["apprentice", "lich"]})

        assert manager.unlocked_classes == ("apprentice",)
