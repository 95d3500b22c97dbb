"""Turn-based combat between the player and a group of monsters.

Turns alternate strictly between the player and the monsters. On the
player turn one spell is chosen from a priority list of effect types and
all of its effects are applied to the first living monster. On the
monster turn every living monster attacks the player once.

Elements form the dominance cycle fire -> wind -> earth -> water -> fire:
an attacker deals 1.5x damage to the element it dominates and 0.75x to
the element that dominates it.
"""

from __future__ import annotations

import math
import random
import time
from collections.abc import Callable, Iterable
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field

from spellbinder.core.constants import (
    ACHIEVEMENT_MONSTER_SLAYER,
    ACHIEVEMENT_WEALTHY_ADVENTURER,
    ADVANTAGE_MULTIPLIER,
    DEFAULT_DEBUFF_DURATION,
    DISADVANTAGE_MULTIPLIER,
    WEALTHY_GOLD_THRESHOLD,
)
from spellbinder.core.exceptions import CombatError
from spellbinder.core.logging import get_logger
from spellbinder.models.enums import Element, ResourceId, RewardKey
from spellbinder.models.monsters import Buff, Monster
from spellbinder.models.spells import Spell, SpellEffect, SpellEffectType, SpellTarget


if TYPE_CHECKING:
    from spellbinder.engine.player import Player
    from spellbinder.models.definitions import GameDefinitions

logger = get_logger(__name__)


ELEMENT_CYCLE: dict[Element, Element] = {
    Element.FIRE: Element.WIND,
    Element.WIND: Element.EARTH,
    Element.EARTH: Element.WATER,
    Element.WATER: Element.FIRE,
}
"""Maps each magic element to the element it dominates."""

DEFAULT_ACTION_PRIORITY: tuple[str, ...] = ("damage", "heal", "buff")


def element_multiplier(attacker: Element | str, defender: Element | str) -> float:
    """Get the damage multiplier of an attacker element against a defender.

    Args:
        attacker: Element of the attack.
        defender: Element of the target.

    Returns:
        1.5 with advantage, 0.75 with disadvantage, 1.0 otherwise.
    """
    attacker, defender = Element(attacker), Element(defender)
    if ELEMENT_CYCLE.get(attacker) is defender:
        return ADVANTAGE_MULTIPLIER
    if ELEMENT_CYCLE.get(defender) is attacker:
        return DISADVANTAGE_MULTIPLIER
    return 1.0


def calculate_damage(base: float, attacker: Element | str, defender: Element | str) -> int:
    """Compute elemental damage before defense, at least 1."""
    return math.floor(max(1.0, base * element_multiplier(attacker, defender)))


# =============================================================================
# State Models
# =============================================================================


class CombatTurn(StrEnum):
    PLAYER = "player"
    MONSTER = "monster"


class CombatResult(StrEnum):
    ONGOING = "ongoing"
    VICTORY = "victory"
    DEFEAT = "defeat"
    FLED = "fled"


class CombatOutcome(StrEnum):
    """Coarse result of a simulated combat."""

    PLAYER_WON = "player_won"
    ENEMY_WON = "enemy_won"
    DRAW = "draw"


class CombatLogType(StrEnum):
    INFO = "info"
    DAMAGE = "damage"
    HEAL = "heal"
    BUFF = "buff"
    DEBUFF = "debuff"
    VICTORY = "victory"
    DEFEAT = "defeat"
    FLEE = "flee"


class CombatLogEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    timestamp: float
    message: str
    type: CombatLogType = CombatLogType.INFO
    actor: str | None = None
    target: str | None = None
    value: float | None = None


class CombatRewards(BaseModel):
    """Loot settled after a victory."""

    gold: int = 0
    experience: int = 0
    items: list[str] = Field(default_factory=list)
    mana: dict[str, int] = Field(default_factory=dict)


class CombatSnapshot(BaseModel):
    model_config = ConfigDict(extra="ignore")

    monsters: list[dict[str, Any]]
    current_turn: CombatTurn = CombatTurn.PLAYER
    is_active: bool = True
    result: CombatResult = CombatResult.ONGOING
    turn_count: int = Field(default=0, ge=0)
    log: list[CombatLogEntry] = Field(default_factory=list)
    player_buffs: list[Buff] = Field(default_factory=list)
    action_priority: list[str] = Field(default_factory=lambda: list(DEFAULT_ACTION_PRIORITY))


# =============================================================================
# Combat System
# =============================================================================


class CombatSystem:
    """One encounter between the player and a group of monsters.

    Attributes:
        player: The fighting player.
        monsters: Monster instances in attack order.
        current_turn: Whose turn it is.
        result: Ongoing or the terminal result.
        is_active: False once the combat reached a terminal result.
        turn_count: Completed player turns.
        log: Append-only combat log.
        player_buffs: Timed modifiers on the player.
        rewards: Settled loot after a victory.
    """

    def __init__(
        self,
        player: Player,
        monsters: Iterable[Monster],
        *,
        rng: random.Random | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the encounter.

        Args:
            player: The fighting player.
            monsters: Monster instances; at least one.
            rng: Random source for loot.
            clock: Timestamp source for log entries.

        Raises:
            CombatError: If no monsters are given.
        """
        self.player = player
        self.monsters: list[Monster] = list(monsters)
        if not self.monsters:
            raise CombatError("Combat needs at least one monster")

        self.current_turn = CombatTurn.PLAYER
        self.result = CombatResult.ONGOING
        self.is_active = True
        self.turn_count = 0
        self.log: list[CombatLogEntry] = []
        self.player_buffs: list[Buff] = []
        self.rewards: CombatRewards | None = None

        self._rng = rng or random.Random()
        self._clock = clock
        self._action_priority: list[str] = list(DEFAULT_ACTION_PRIORITY)
        self._started = False

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def add_log(
        self,
        message: str,
        entry_type: CombatLogType = CombatLogType.INFO,
        *,
        actor: str | None = None,
        target: str | None = None,
        value: float | None = None,
    ) -> CombatLogEntry:
        entry = CombatLogEntry(
            timestamp=self._clock(),
            message=message,
            type=entry_type,
            actor=actor,
            target=target,
            value=value,
        )
        self.log.append(entry)
        return entry

    @property
    def living_monsters(self) -> list[Monster]:
        return [m for m in self.monsters if m.is_alive]

    @property
    def action_priority(self) -> list[str]:
        return list(self._action_priority)

    @property
    def player_mitigation(self) -> float:
        """Get the player's damage reduction including defense buffs."""
        buffs = sum(b.value for b in self.player_buffs if b.type == "defense")
        return max(0.0, self.player.damage_reduction + buffs)

    def set_action_priority(self, priority: Iterable[str]) -> None:
        """Set the effect types the player tries, in order."""
        self._action_priority = list(priority)

    def _finish(self, result: CombatResult) -> None:
        if not self.is_active:
            return
        self.result = result
        self.is_active = False
        if result == CombatResult.VICTORY:
            self.add_log("Victory!", CombatLogType.VICTORY)
            self.rewards = self.give_rewards()
        elif result == CombatResult.DEFEAT:
            self.add_log("Defeat.", CombatLogType.DEFEAT)
        logger.info("Combat ended", result=result.value, turns=self.turn_count)

    def _check_victory(self) -> bool:
        if not self.living_monsters:
            self._finish(CombatResult.VICTORY)
            return True
        return False

    # -------------------------------------------------------------------------
    # Turn Flow
    # -------------------------------------------------------------------------

    def start(self) -> None:
        """Open the encounter.

        A player who enters with no health is defeated immediately.
        """
        if self._started or not self.is_active:
            return
        self._started = True
        self.add_log(f"Combat started against {len(self.monsters)} monster(s)")
        self._check_player_down()

    def _check_player_down(self) -> bool:
        if self.is_active and self.player.health <= 0:
            self._finish(CombatResult.DEFEAT)
            return True
        return False

    def select_spell(self) -> Spell | None:
        """Choose the spell for the player turn.

        Only learned, off-cooldown spells the player can pay for qualify.
        The first qualifying spell with an effect of the highest-priority
        type wins; without any match the first qualifying spell is used.

        Returns:
            The chosen spell, or None if nothing can be cast.
        """
        skill_levels = self.player.skills.skill_levels()
        candidates = []
        for spell in self.player.spells.get_learned_spells():
            mana_id = spell.definition.mana_resource_id
            mana = self.player.resources.value_of(mana_id) if mana_id else 0.0
            if spell.can_cast(mana, skill_levels):
                candidates.append(spell)

        if not candidates:
            return None
        for effect_type in self._action_priority:
            for spell in candidates:
                if spell.has_effect_type(effect_type):
                    return spell
        return candidates[0]

    def execute_player_turn(self) -> None:
        """Cast one spell at the first living monster, then end the turn."""
        if not self.is_active or self.current_turn != CombatTurn.PLAYER:
            return

        spell = self.select_spell()
        if spell is None:
            self.add_log(f"{self.player.name} has no spell to cast", actor=self.player.name)
            self.end_player_turn()
            return

        target = next(iter(self.living_monsters), None)
        if target is None:
            self.end_player_turn()
            return

        mana_id = spell.definition.mana_resource_id
        if mana_id and spell.mana_cost > 0:
            self.player.resources.consume(mana_id, spell.mana_cost)
        spell.cast()
        self.add_log(f"{self.player.name} casts {spell.name}", actor=self.player.name)

        for effect in spell.effects:
            if not self.is_active:
                break
            self._apply_effect(spell, effect, target)

        self.end_player_turn()

    def _apply_effect(self, spell: Spell, effect: SpellEffect, target: Monster) -> None:
        source = self.player.name
        if effect.type == SpellEffectType.DAMAGE:
            element = effect.element or spell.element
            raw = calculate_damage(effect.value, element, target.element)
            dealt = target.take_damage(raw)
            self.add_log(
                f"{target.name} takes {dealt:g} damage",
                CombatLogType.DAMAGE,
                actor=source,
                target=target.name,
                value=dealt,
            )
            if not target.is_alive:
                self.add_log(f"{target.name} is defeated", target=target.name)
                self._check_victory()

        elif effect.type == SpellEffectType.HEAL:
            healed = self.player.resources.add(ResourceId.HEALTH, effect.value)
            self.add_log(
                f"{source} recovers {healed:g} health",
                CombatLogType.HEAL,
                actor=source,
                target=source,
                value=healed,
            )

        elif effect.type == SpellEffectType.BUFF:
            buff = Buff(
                type=effect.stat or "attack",
                value=effect.value,
                duration=effect.duration or DEFAULT_DEBUFF_DURATION,
                source=spell.id,
            )
            if effect.target in (SpellTarget.SELF, SpellTarget.ALLY):
                self.player_buffs.append(buff)
                recipient = source
            else:
                target.add_buff(buff)
                recipient = target.name
            self.add_log(
                f"{recipient} gains {buff.type} +{buff.value:g}",
                CombatLogType.BUFF,
                actor=source,
                target=recipient,
                value=buff.value,
            )

        elif effect.type == SpellEffectType.DEBUFF:
            debuff = Buff(
                type=effect.stat or "defense",
                value=effect.value,
                duration=effect.duration or DEFAULT_DEBUFF_DURATION,
                source=spell.id,
            )
            target.add_debuff(debuff)
            self.add_log(
                f"{target.name} suffers {debuff.type} -{debuff.value:g}",
                CombatLogType.DEBUFF,
                actor=source,
                target=target.name,
                value=debuff.value,
            )

        else:
            self.add_log(f"{spell.name} has no effect in combat", actor=source)

    def end_player_turn(self) -> None:
        """Hand the turn to the monsters and advance timed modifiers."""
        if not self.is_active:
            return
        self.current_turn = CombatTurn.MONSTER
        self.turn_count += 1
        for monster in self.monsters:
            monster.tick_modifiers()
        for buff in self.player_buffs:
            buff.duration = max(0, buff.duration - 1)
        self.player_buffs = [b for b in self.player_buffs if b.duration > 0]
        self._check_victory()

    def execute_monster_turn(self) -> None:
        """Let every living monster attack the player once."""
        if not self.is_active or self.current_turn != CombatTurn.MONSTER:
            return

        health = self.player.resources.get(ResourceId.HEALTH)
        if health is None:
            raise CombatError("Player has no health resource", combatant_id=self.player.name)

        for monster in self.living_monsters:
            raw = calculate_damage(monster.attack, monster.element, Element.NEUTRAL)
            damage = max(1.0, raw - self.player_mitigation)
            self.player.resources.consume(ResourceId.HEALTH, min(damage, health.value))
            self.add_log(
                f"{monster.name} hits {self.player.name} for {damage:g}",
                CombatLogType.DAMAGE,
                actor=monster.name,
                target=self.player.name,
                value=damage,
            )
            if health.value <= 0:
                self.add_log(f"{self.player.name} falls", actor=monster.name, target=self.player.name)
                self._finish(CombatResult.DEFEAT)
                return

        self.end_monster_turn()

    def end_monster_turn(self) -> None:
        if not self.is_active:
            return
        if self._check_victory():
            return
        self.current_turn = CombatTurn.PLAYER

    def flee(self) -> bool:
        """Leave the combat without rewards.

        Returns:
            False if the combat was already over.
        """
        if not self.is_active:
            return False
        self.add_log(f"{self.player.name} flees", CombatLogType.FLEE, actor=self.player.name)
        self._finish(CombatResult.FLED)
        return True

    # -------------------------------------------------------------------------
    # Settlement
    # -------------------------------------------------------------------------

    def give_rewards(self) -> CombatRewards | None:
        """Settle loot of a won combat into the player's state.

        Settlement happens once; later calls return the same rewards.

        Returns:
            The rewards, or None if the combat was not won.
        """
        if self.result != CombatResult.VICTORY:
            return None
        if self.rewards is not None:
            return self.rewards

        rewards = CombatRewards()
        for monster in self.monsters:
            if monster.is_alive:
                continue
            for key, value in monster.generate_drops(self._rng).items():
                if key == "items":
                    rewards.items.extend(value)
                elif key == ResourceId.GOLD:
                    rewards.gold += value
                elif key == RewardKey.EXPERIENCE:
                    rewards.experience += value
                elif key.startswith("mana_"):
                    rewards.mana[key] = rewards.mana.get(key, 0) + value

        self.player.resources.add(ResourceId.GOLD, rewards.gold)
        self.player.add_experience(rewards.experience)
        for mana_id, amount in rewards.mana.items():
            self.player.resources.add(mana_id, amount)
        for item_id in rewards.items:
            self.player.inventory.add_item(item_id)

        achievements = self.player.achievements
        achievements.increment(ACHIEVEMENT_MONSTER_SLAYER)
        if rewards.gold >= WEALTHY_GOLD_THRESHOLD:
            achievements.increment(ACHIEVEMENT_WEALTHY_ADVENTURER)

        self.add_log(
            f"Gained {rewards.gold} gold and {rewards.experience} experience",
            value=rewards.gold,
        )
        self.rewards = rewards
        return rewards

    # -------------------------------------------------------------------------
    # Drivers
    # -------------------------------------------------------------------------

    def _outcome(self) -> CombatOutcome:
        if self.result == CombatResult.VICTORY:
            return CombatOutcome.PLAYER_WON
        if self.result == CombatResult.DEFEAT:
            return CombatOutcome.ENEMY_WON
        return CombatOutcome.DRAW

    def _step(self) -> None:
        if self.current_turn == CombatTurn.PLAYER:
            self.execute_player_turn()
        else:
            self.execute_monster_turn()

    def auto_execute(self, max_rounds: int = 100) -> CombatOutcome:
        """Resolve the whole combat synchronously.

        A round is one player turn followed by one monster turn. The
        combat stops after ``max_rounds`` rounds at the latest.

        Args:
            max_rounds: Round limit.

        Returns:
            ``player_won``, ``enemy_won``, or ``draw`` if the limit was hit
            with both sides standing.
        """
        self.start()
        self._check_player_down()
        rounds = 0
        while self.is_active and rounds < max_rounds:
            self._step()
            if self.is_active and self.current_turn == CombatTurn.MONSTER:
                self._step()
            rounds += 1
        return self._outcome()

    def run_interactive(
        self,
        delay: float = 0.5,
        *,
        max_rounds: int = 100,
        sleep: Callable[[float], None] = time.sleep,
    ) -> CombatOutcome:
        """Resolve the combat with a pause between turns.

        Args:
            delay: Seconds to wait between turns.
            max_rounds: Round limit.
            sleep: Blocking wait function.

        Returns:
            The combat outcome.
        """
        self.start()
        self._check_player_down()
        turns = 0
        while self.is_active and turns < max_rounds * 2:
            self._step()
            turns += 1
            if self.is_active:
                sleep(delay)
        return self._outcome()

    # -------------------------------------------------------------------------
    # State and Persistence
    # -------------------------------------------------------------------------

    def get_combat_state(self) -> dict[str, Any]:
        health = self.player.resources.get(ResourceId.HEALTH)
        return {
            "player_health": {
                "current": health.value if health else 0.0,
                "max": health.max if health else 0.0,
            },
            "player_mana": {
                e.mana_resource: self.player.resources.value_of(e.mana_resource)
                for e in Element
                if e.mana_resource
            },
            "monsters": [
                {
                    "id": m.id,
                    "name": m.name,
                    "health": m.current_health,
                    "max_health": m.max_health,
                    "element": m.element.value,
                    "is_alive": m.is_alive,
                }
                for m in self.monsters
            ],
            "current_turn": self.current_turn.value,
            "is_active": self.is_active,
            "result": self.result.value,
            "turn_count": self.turn_count,
        }

    def to_snapshot(self) -> dict[str, Any]:
        return CombatSnapshot(
            monsters=[m.to_snapshot() for m in self.monsters],
            current_turn=self.current_turn,
            is_active=self.is_active,
            result=self.result,
            turn_count=self.turn_count,
            log=self.log,
            player_buffs=self.player_buffs,
            action_priority=self._action_priority,
        ).model_dump(mode="json")

    @classmethod
    def from_snapshot(
        cls,
        data: dict[str, Any],
        player: Player,
        definitions: GameDefinitions,
        *,
        rng: random.Random | None = None,
        clock: Callable[[], float] = time.time,
    ) -> CombatSystem:
        """Restore an encounter, re-binding monsters to their definitions.

        Raises:
            DefinitionNotFoundError: If a monster id is not defined.
        """
        snapshot = CombatSnapshot.model_validate(data)
        monsters = [
            Monster.from_snapshot(payload, definitions.get_monster(payload["id"]))
            for payload in snapshot.monsters
        ]
        combat = cls(player, monsters, rng=rng, clock=clock)
        combat.current_turn = snapshot.current_turn
        combat.is_active = snapshot.is_active
        combat.result = snapshot.result
        combat.turn_count = snapshot.turn_count
        combat.log = list(snapshot.log)
        combat.player_buffs = list(snapshot.player_buffs)
        combat._action_priority = list(snapshot.action_priority)
        combat._started = True
        return combat


__all__ = [
    "ELEMENT_CYCLE",
    "DEFAULT_ACTION_PRIORITY",
    "element_multiplier",
    "calculate_damage",
    "CombatTurn",
    "CombatResult",
    "CombatOutcome",
    "CombatLogType",
    "CombatLogEntry",
    "CombatRewards",
    "CombatSnapshot",
    "CombatSystem",
]
