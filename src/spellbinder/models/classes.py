"""Class tree: unlockable class nodes arranged as a DAG.

Each class node lists prerequisite nodes, requirement predicates, a cost
and a set of passive effects. The tree is stored as a networkx directed
graph with an edge from every prerequisite to the node that requires it;
cycles are rejected when nodes are added.

Unlocking is monotonic: the unlocked set only ever grows.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Iterable
from enum import StrEnum
from typing import Annotated, Any, Protocol

import networkx as nx
from pydantic import BaseModel, ConfigDict, Field, field_validator

from spellbinder.core.exceptions import DataIntegrityError, DefinitionNotFoundError
from spellbinder.core.logging import get_logger
from spellbinder.models.enums import Element
from spellbinder.models.predicates import Predicate, PredicateContext, coerce_condition, evaluate


logger = get_logger(__name__)


# =============================================================================
# Definitions
# =============================================================================


class ClassEffectType(StrEnum):
    """Passive effects granted by an unlocked class."""

    SKILL_UNLOCK = "skill_unlock"
    """Unlocks the skill named by ``target``."""

    SKILL_MAX = "skill_max"
    """Raises the level cap of the skill named by ``target``."""

    TALENT_BONUS = "talent_bonus"
    """Adds to the talent of the element named by ``target``, once."""

    MANA_CAPACITY = "mana_capacity"
    """Adds capacity to one mana pool, or all of them without a target."""

    MANA_REGEN = "mana_regen"
    """Adds regeneration to one mana pool, or all of them without a target."""

    SPELL_POWER = "spell_power"
    CUSTOM = "custom"


class ClassEffect(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    type: ClassEffectType
    target: str | None = None
    value: float = 0


class ClassCost(BaseModel):
    """Price of unlocking a class."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    gold: Annotated[float, Field(ge=0)] = 0
    experience: Annotated[float, Field(ge=0)] = 0
    research: Annotated[float, Field(ge=0)] = 0

    def resource_costs(self) -> list[tuple[str, float]]:
        """Get the ledger part of the cost as ``(resource_id, amount)`` pairs."""
        costs = [("gold", self.gold), ("research", self.research)]
        return [(rid, amount) for rid, amount in costs if amount > 0]


class ClassNode(BaseModel):
    """Static data of one class in the tree."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    name: str
    description: str = ""
    tier: Annotated[int, Field(ge=0)] = 0
    element: Element | None = None
    prerequisites: list[str] = Field(default_factory=list)
    requirements: list[Predicate] = Field(default_factory=list)
    cost: ClassCost = Field(default_factory=ClassCost)
    effects: list[ClassEffect] = Field(default_factory=list)
    secret: bool = False
    icon: str = ""
    flavor: str = ""

    @field_validator("requirements", mode="before")
    @classmethod
    def parse_requirements(cls, value: Any) -> Any:
        if isinstance(value, list):
            parsed = (coerce_condition(item) for item in value)
            return [item for item in parsed if item is not None]
        return value


class ClassWallet(Protocol):
    """Whoever pays for class unlocks."""

    def can_afford(self, cost: ClassCost) -> bool: ...

    def pay(self, cost: ClassCost) -> bool: ...


# =============================================================================
# Class Tree
# =============================================================================


class ClassTree:
    """The class DAG.

    Attributes:
        graph: Directed graph with prerequisite -> dependent edges.
    """

    def __init__(self, nodes: Iterable[ClassNode] = ()) -> None:
        """Initialize the tree.

        Args:
            nodes: Initial nodes, in any order.

        Raises:
            DataIntegrityError: If the nodes do not form a valid DAG.
        """
        self.graph: nx.DiGraph = nx.DiGraph()
        self._nodes: dict[str, ClassNode] = {}
        self.add_nodes(nodes)

    def __contains__(self, class_id: object) -> bool:
        return class_id in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    @property
    def nodes(self) -> list[ClassNode]:
        return list(self._nodes.values())

    def add_node(self, node: ClassNode) -> None:
        self.add_nodes([node])

    def add_nodes(self, nodes: Iterable[ClassNode]) -> None:
        """Add nodes, validating prerequisites and acyclicity as a batch.

        Args:
            nodes: Nodes to add.

        Raises:
            DataIntegrityError: On duplicate ids, unknown prerequisites or
                a prerequisite cycle. The tree is unchanged on error.
        """
        new_nodes: dict[str, ClassNode] = {}
        for node in nodes:
            if node.id in self._nodes or node.id in new_nodes:
                raise DataIntegrityError("Duplicate class id", details={"class_id": node.id})
            new_nodes[node.id] = node

        known = self._nodes.keys() | new_nodes.keys()
        candidate = self.graph.copy()
        for node in new_nodes.values():
            candidate.add_node(node.id)
            for prerequisite in node.prerequisites:
                if prerequisite not in known:
                    raise DataIntegrityError(
                        "Class prerequisite does not exist",
                        details={"class_id": node.id, "prerequisite": prerequisite},
                    )
                candidate.add_edge(prerequisite, node.id)

        if not nx.is_directed_acyclic_graph(candidate):
            cycle = nx.find_cycle(candidate)
            raise DataIntegrityError(
                "Class prerequisites form a cycle",
                details={"cycle": [edge[0] for edge in cycle]},
            )

        self.graph = candidate
        self._nodes.update(new_nodes)

    def get_node(self, class_id: str) -> ClassNode | None:
        return self._nodes.get(class_id)

    def get_children(self, class_id: str) -> list[ClassNode]:
        """Get the nodes that list ``class_id`` as a prerequisite."""
        if class_id not in self._nodes:
            return []
        return [self._nodes[child] for child in self.graph.successors(class_id)]

    def get_path_to_class(self, class_id: str) -> list[ClassNode]:
        """Get every node needed to reach a class, ending with the class itself.

        Args:
            class_id: Target class.

        Returns:
            Ancestors and the target in a valid unlock order (lower tiers
            first), or an empty list for unknown ids.
        """
        if class_id not in self._nodes:
            return []
        members = nx.ancestors(self.graph, class_id) | {class_id}
        subgraph = self.graph.subgraph(members)
        order = nx.lexicographical_topological_sort(
            subgraph,
            key=lambda node_id: (self._nodes[node_id].tier, node_id),
        )
        return [self._nodes[node_id] for node_id in order]

    def get_tree_structure(self) -> dict[int, list[str]]:
        """Group class ids by tier, tiers ascending."""
        structure: dict[int, list[str]] = {}
        for node in sorted(self._nodes.values(), key=lambda n: (n.tier, n.id)):
            structure.setdefault(node.tier, []).append(node.id)
        return structure


# =============================================================================
# Class Manager
# =============================================================================


class ClassManager:
    """Tracks unlocked classes and answers availability queries.

    Availability listings are cached for a short window so that frequent
    polling does not re-evaluate every requirement; unlocking a class
    drops the cache immediately.
    """

    def __init__(
        self,
        tree: ClassTree,
        *,
        clock: Callable[[], float] = time.monotonic,
        cache_window: float = 0.5,
    ) -> None:
        """Initialize the manager.

        Args:
            tree: The class tree.
            clock: Monotonic time source for the cache.
            cache_window: Seconds an availability listing stays valid.
        """
        self._tree = tree
        self._clock = clock
        self._cache_window = cache_window
        self._unlocked: list[str] = []
        self._cached_at: float | None = None
        self._cached_available: list[ClassNode] = []

    @property
    def tree(self) -> ClassTree:
        return self._tree

    @property
    def unlocked_classes(self) -> tuple[str, ...]:
        return tuple(self._unlocked)

    def is_unlocked(self, class_id: str) -> bool:
        return class_id in self._unlocked

    def invalidate_cache(self) -> None:
        self._cached_at = None

    def _prerequisites_met(self, node: ClassNode) -> bool:
        return all(p in self._unlocked for p in node.prerequisites)

    def _requirements_met(self, node: ClassNode, context: PredicateContext) -> bool:
        return all(evaluate(r, context) for r in node.requirements)

    def _is_revealed(self, node: ClassNode) -> bool:
        return not node.secret or self._prerequisites_met(node)

    def can_unlock_class(
        self,
        class_id: str,
        context: PredicateContext,
        wallet: ClassWallet,
    ) -> bool:
        """Check whether a class could be unlocked right now.

        Args:
            class_id: Class to check.
            context: Current predicate variables.
            wallet: Payer of the cost.

        Returns:
            True if the class is locked, every prerequisite is unlocked,
            every requirement holds and the cost is affordable.
        """
        node = self._tree.get_node(class_id)
        if node is None or class_id in self._unlocked:
            return False
        return (
            self._prerequisites_met(node)
            and self._requirements_met(node, context)
            and wallet.can_afford(node.cost)
        )

    def get_available_classes(
        self,
        context: PredicateContext,
        wallet: ClassWallet,
    ) -> list[ClassNode]:
        """List the classes that can be unlocked right now, by tier.

        Hidden secret classes never appear. The result is reused for
        ``cache_window`` seconds after it is computed.

        Args:
            context: Current predicate variables.
            wallet: Payer of the costs.

        Returns:
            Unlockable class nodes sorted by ascending tier.
        """
        now = self._clock()
        if self._cached_at is not None and now - self._cached_at < self._cache_window:
            return list(self._cached_available)

        available = [
            node
            for node in self._tree.nodes
            if node.id not in self._unlocked
            and self._is_revealed(node)
            and self.can_unlock_class(node.id, context, wallet)
        ]
        available.sort(key=lambda n: (n.tier, n.id))

        self._cached_at = now
        self._cached_available = available
        return list(available)

    def unlock_class(
        self,
        class_id: str,
        context: PredicateContext,
        wallet: ClassWallet,
    ) -> bool:
        """Unlock a class, paying its cost.

        All conditions are re-checked at call time. Unlocking an already
        unlocked class succeeds without paying again.

        Args:
            class_id: Class to unlock.
            context: Current predicate variables.
            wallet: Payer of the cost.

        Returns:
            True if the class is unlocked after the call.
        """
        if class_id in self._unlocked:
            return True

        node = self._tree.get_node(class_id)
        if node is None:
            logger.warning("Cannot unlock unknown class", class_id=class_id)
            return False
        if not self.can_unlock_class(class_id, context, wallet):
            logger.warning("Class unlock conditions not met", class_id=class_id)
            return False
        if not wallet.pay(node.cost):
            logger.warning("Class cost could not be paid", class_id=class_id)
            return False

        self._unlocked.append(class_id)
        self.invalidate_cache()
        logger.info("Class unlocked", class_id=class_id, tier=node.tier)
        return True

    def get_class_effects(self) -> list[ClassEffect]:
        """Get the effects of every unlocked class."""
        effects: list[ClassEffect] = []
        for class_id in self._unlocked:
            node = self._tree.get_node(class_id)
            if node is not None:
                effects.extend(node.effects)
        return effects

    def get_effect_total(self, effect_type: ClassEffectType | str, target: str | None = None) -> float:
        """Sum unlocked effects of a type.

        Args:
            effect_type: Effect kind to sum.
            target: If given, only effects with this target or no target count.

        Returns:
            The summed value.
        """
        return sum(
            e.value
            for e in self.get_class_effects()
            if e.type == effect_type and (target is None or e.target in (None, target))
        )

    def get_custom_effect(self, name: str) -> float:
        """Sum the ``custom`` effects targeting a named stat, e.g. ``defense``."""
        return sum(
            e.value
            for e in self.get_class_effects()
            if e.type == ClassEffectType.CUSTOM and e.target == name
        )

    def get_skill_max_bonuses(self) -> dict[str, int]:
        bonuses: dict[str, int] = {}
        for effect in self.get_class_effects():
            if effect.type == ClassEffectType.SKILL_MAX and effect.target:
                bonuses[effect.target] = bonuses.get(effect.target, 0) + int(effect.value)
        return bonuses

    def get_unlocked_skills(self) -> list[str]:
        """Get the skill ids granted by unlocked classes."""
        return [
            e.target
            for e in self.get_class_effects()
            if e.type == ClassEffectType.SKILL_UNLOCK and e.target
        ]

    def to_snapshot(self) -> dict[str, Any]:
        return {"unlocked_classes": list(self._unlocked)}

    def load_snapshot(self, data: dict[str, Any]) -> None:
        """Restore the unlocked set.

        Raises:
            DefinitionNotFoundError: If a saved class id is not in the tree.
        """
        unlocked = list(data.get("unlocked_classes", []))
        for class_id in unlocked:
            if class_id not in self._tree:
                raise DefinitionNotFoundError(
                    "Save references an unknown class",
                    kind="class",
                    definition_id=class_id,
                )
        self._unlocked = list(dict.fromkeys(unlocked))
        self.invalidate_cache()


__all__ = [
    "ClassEffectType",
    "ClassEffect",
    "ClassCost",
    "ClassNode",
    "ClassWallet",
    "ClassTree",
    "ClassManager",
]
