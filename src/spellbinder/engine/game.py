"""Game orchestrator.

The game owns the clock, the player, the shared achievement manager and
the activity runner, and routes activity completions to their
progression side effects. Shared services (definitions, settings, the
player-facing log, randomness and time) travel in a ``GameContext``.
"""

from __future__ import annotations

import random
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from spellbinder.core.config import Settings, get_settings
from spellbinder.core.constants import SKILL_PRACTICE_EXP, SKILL_TRAINING_EXP
from spellbinder.core.exceptions import (
    ActivityError,
    DataIntegrityError,
    DefinitionNotFoundError,
    InvalidGameStateError,
    SpellbinderError,
)
from spellbinder.core.game_log import GameLog
from spellbinder.core.logging import bind_context, get_logger
from spellbinder.engine.combat import CombatSystem
from spellbinder.engine.exploration import (
    ExplorationReport,
    create_exploration_activity,
    resolve_exploration,
)
from spellbinder.engine.learning import LearningActivityFactory
from spellbinder.engine.player import Player
from spellbinder.engine.scheduler import ActivityRunner, RunnerSnapshot
from spellbinder.models.achievements import AchievementManager
from spellbinder.models.activities import ActivityData, ActivityInstance, ActivityType, roll_reward_amount
from spellbinder.models.catalog import build_default_definitions
from spellbinder.models.definitions import GameDefinitions
from spellbinder.models.enums import RewardKey
from spellbinder.models.monsters import Monster
from spellbinder.models.talent import Talent


logger = get_logger(__name__)

SKILL_EXP_ACTIVITIES = frozenset({ActivityType.PRACTICE, ActivityType.TRAINING})


# =============================================================================
# Clock
# =============================================================================


class GameClock(BaseModel):
    """Accumulated game time.

    Attributes:
        game_time: Seconds of unpaused play.
        is_paused: Whether time is frozen.
        last_update: Wall-clock time of the last update.
    """

    model_config = ConfigDict(validate_assignment=True)

    game_time: float = Field(default=0.0, ge=0)
    is_paused: bool = False
    last_update: float = 0.0

    def update(self, now: float) -> float:
        """Advance to ``now``.

        Returns:
            Seconds added to the game time; 0 while paused.
        """
        delta = 0.0 if self.is_paused else max(0.0, now - self.last_update)
        self.game_time += delta
        self.last_update = now
        return delta

    def pause(self) -> None:
        self.is_paused = True

    def resume(self, now: float) -> None:
        self.is_paused = False
        self.last_update = now

    def toggle_pause(self, now: float) -> bool:
        """Flip the pause state.

        Returns:
            The new pause state.
        """
        if self.is_paused:
            self.resume(now)
        else:
            self.pause()
        return self.is_paused

    def reset(self, now: float) -> None:
        self.game_time = 0.0
        self.is_paused = False
        self.last_update = now


# =============================================================================
# Context
# =============================================================================


@dataclass
class GameContext:
    """Services shared by every part of one game.

    Attributes:
        definitions: Read-only definition tables.
        settings: Application settings.
        log: Player-facing log sink.
        rng: Random source for rewards, loot and exploration.
        clock: Wall-clock source.
    """

    definitions: GameDefinitions
    settings: Settings
    log: GameLog
    rng: random.Random = field(default_factory=random.Random)
    clock: Callable[[], float] = time.time

    @classmethod
    def create_default(
        cls,
        *,
        definitions: GameDefinitions | None = None,
        settings: Settings | None = None,
        seed: int | None = None,
        clock: Callable[[], float] = time.time,
    ) -> GameContext:
        """Build a context from the built-in catalog and loaded settings."""
        settings = settings or get_settings()
        return cls(
            definitions=definitions or build_default_definitions(),
            settings=settings,
            log=GameLog(max_entries=settings.game.log_max_entries, clock=clock),
            rng=random.Random(seed),
            clock=clock,
        )


class GameSnapshot(BaseModel):
    """Serialized game state without the save envelope."""

    model_config = ConfigDict(extra="ignore")

    game_time: float = Field(default=0.0, ge=0)
    is_paused: bool = False
    last_update: float = 0.0
    has_started: bool = False
    player: dict[str, Any]
    activity_runner: RunnerSnapshot = Field(default_factory=RunnerSnapshot)
    monsters: list[dict[str, Any]] = Field(default_factory=list)
    combat: dict[str, Any] | None = None


# =============================================================================
# Game
# =============================================================================


class Game:
    """One running game.

    Attributes:
        context: Shared services.
        clock: Game clock.
        achievements: Achievement manager shared by the player's managers.
        player: The player.
        runner: Activity runner paying from the player's ledger.
        combat: The current encounter, if any.
        has_started: Whether the player finished character creation.
        last_exploration: Report of the most recent exploration.
    """

    def __init__(
        self,
        player_name: str = "Apprentice",
        *,
        context: GameContext | None = None,
        talent: Talent | None = None,
    ) -> None:
        """Create a fresh game.

        Args:
            player_name: Name of the new player.
            context: Shared services; a default context is built when omitted.
            talent: Starting talent of the player.
        """
        self.context = context or GameContext.create_default()
        self.clock = GameClock(last_update=self.context.clock())
        self.achievements = self._new_achievements()
        self.player = self._new_player(player_name, talent=talent)
        self.runner = ActivityRunner(self.player.resources, clock=self.context.clock)
        self.runner.on_complete(self._handle_activity_complete)
        self.combat: CombatSystem | None = None
        self.has_started = False
        self.last_exploration: ExplorationReport | None = None

    @property
    def definitions(self) -> GameDefinitions:
        return self.context.definitions

    @property
    def log(self) -> GameLog:
        return self.context.log

    def _new_achievements(self) -> AchievementManager:
        return AchievementManager(self.definitions.achievements, clock=self.context.clock)

    def _player_kwargs(self) -> dict[str, Any]:
        return {
            "clock": self.context.clock,
            "class_cache_window": self.context.settings.game.class_cache_window,
        }

    def _new_player(self, name: str, *, talent: Talent | None = None) -> Player:
        return Player(
            name,
            self.definitions,
            talent=talent,
            achievements=self.achievements,
            **self._player_kwargs(),
        )

    def begin(self, name: str, talent: Talent | None = None) -> None:
        """Finish character creation.

        Args:
            name: Player name.
            talent: Chosen talent profile.
        """
        self.player.name = name
        if talent is not None:
            self.player.talent = talent.model_copy()
        self.player.apply_bonuses()
        self.has_started = True
        bind_context(player=name)
        self.log.success(f"Welcome, {name}!")
        logger.info("Game started", player=name)

    # -------------------------------------------------------------------------
    # Time
    # -------------------------------------------------------------------------

    def tick(self, now: float | None = None) -> ActivityInstance | None:
        """Advance the simulation to ``now``.

        Nothing moves while the game is paused.

        Args:
            now: Current wall-clock time; the context clock is read when omitted.

        Returns:
            The activity completed during this tick, if any.
        """
        now = self.context.clock() if now is None else now
        delta = self.clock.update(now)
        if self.clock.is_paused:
            return None
        self.player.update(delta)
        return self.runner.update(now)

    def pause(self) -> None:
        self.clock.pause()

    def resume(self, now: float | None = None) -> None:
        self.clock.resume(self.context.clock() if now is None else now)

    def toggle_pause(self, now: float | None = None) -> bool:
        return self.clock.toggle_pause(self.context.clock() if now is None else now)

    @property
    def is_paused(self) -> bool:
        return self.clock.is_paused

    # -------------------------------------------------------------------------
    # Activity Completion
    # -------------------------------------------------------------------------

    def _handle_activity_complete(self, instance: ActivityInstance) -> None:
        activity = instance.activity
        try:
            self._apply_activity_effect(activity)
        except SpellbinderError as e:
            logger.warning(
                "Activity could not be settled",
                activity_id=activity.id,
                error=e.message,
            )
            self.log.error(f"{activity.name} failed: {e.message}", activity_id=activity.id)
            return

        self._grant_activity_rewards(activity)
        self.log.success(f"{activity.name} completed", activity_id=activity.id)

    def _apply_activity_effect(self, activity: ActivityData) -> None:
        """Apply the single type-specific effect of a finished activity.

        Raises:
            DefinitionNotFoundError: If the referenced definition is missing.
            ActivityError: If the effect cannot be applied.
        """
        metadata = activity.metadata
        player = self.player

        if activity.type == ActivityType.LEARNING:
            spell_id = self._metadata_id(activity, "spell_id")
            self.definitions.get_spell(spell_id)
            if not player.learn_spell(spell_id):
                raise ActivityError("Spell could not be learned", activity_id=activity.id)
            self.log.success(f"Learned {player.spells.get_spell(spell_id).name}")

        elif activity.type == ActivityType.PRACTICE:
            skill_id = self._metadata_id(activity, "skill_id")
            self.definitions.get_skill(skill_id)
            exp_gain = metadata.get("exp_gain", SKILL_PRACTICE_EXP)
            if not player.skills.add_exp_to_skill(skill_id, exp_gain):
                raise ActivityError("Practiced skill is not acquired", activity_id=activity.id)

        elif activity.type == ActivityType.TRAINING:
            skill_id = self._metadata_id(activity, "skill_id")
            self.definitions.get_skill(skill_id)
            if not player.skills.unlock_skill(skill_id):
                raise ActivityError("Skill could not be unlocked", activity_id=activity.id)
            player.skills.add_exp_to_skill(skill_id, SKILL_TRAINING_EXP)
            player.apply_bonuses()

        elif activity.type == ActivityType.EXPLORATION:
            self._metadata_id(activity, "locale_id")
            self.last_exploration = resolve_exploration(
                activity,
                player,
                self.definitions,
                self.context.rng,
                max_rounds=self.context.settings.game.default_max_rounds,
            )
            if not self.last_exploration.completed:
                self.log.warning("You retreat from the exploration", locale_id=self.last_exploration.locale_id)

    @staticmethod
    def _metadata_id(activity: ActivityData, key: str) -> str:
        value = activity.metadata.get(key)
        if not isinstance(value, str) or not value:
            raise ActivityError(f"Activity metadata lacks {key}", activity_id=activity.id)
        return value

    def _grant_activity_rewards(self, activity: ActivityData) -> None:
        for reward in activity.rewards:
            if reward.resource == RewardKey.SKILL_EXP and activity.type in SKILL_EXP_ACTIVITIES:
                continue

            amount = roll_reward_amount(reward, self.context.rng)
            if reward.resource == RewardKey.EXPERIENCE:
                self.player.add_experience(amount)
            elif reward.resource == RewardKey.SKILL_EXP:
                skill_id = activity.metadata.get("skill_id")
                if not skill_id or not self.player.skills.add_exp_to_skill(skill_id, amount):
                    self._warn_reward(activity, reward.resource)
            elif self.player.resources.has(reward.resource):
                self.player.resources.add(reward.resource, amount)
            else:
                self._warn_reward(activity, reward.resource)

    def _warn_reward(self, activity: ActivityData, resource: str) -> None:
        logger.warning("Reward could not be granted", activity_id=activity.id, resource=resource)
        self.log.warning(f"Unknown reward {resource}", activity_id=activity.id)

    # -------------------------------------------------------------------------
    # Starting Activities
    # -------------------------------------------------------------------------

    def start_activity(self, activity: ActivityData) -> bool:
        """Pay for an activity and run or queue it.

        Returns:
            False if the costs cannot be paid.
        """
        if not self.runner.start_activity(activity):
            self.log.warning(f"Not enough resources for {activity.name}", activity_id=activity.id)
            return False
        self.log.info(f"Started {activity.name}", activity_id=activity.id)
        return True

    def _reject(self, message: str, **details: Any) -> bool:
        logger.warning(message, **details)
        self.log.warning(message, **details)
        return False

    def start_learning_spell(self, spell_id: str) -> bool:
        """Start learning a spell whose requirements hold."""
        try:
            definition = self.definitions.get_spell(spell_id)
        except DefinitionNotFoundError:
            return self._reject("Unknown spell", spell_id=spell_id)

        spell = self.player.spells.get_spell(spell_id)
        if spell is None or spell.is_learned:
            return self._reject("Spell already learned", spell_id=spell_id)
        if not spell.can_learn(self.player.predicate_context()):
            return self._reject("Spell requirements not met", spell_id=spell_id)

        activity = LearningActivityFactory.create_spell_learning(definition, self.player.talent)
        return self.start_activity(activity)

    def start_skill_practice(self, skill_id: str) -> bool:
        """Start practicing an acquired skill."""
        skill = self.player.skills.get_skill(skill_id)
        if skill is None:
            return self._reject("Skill not acquired", skill_id=skill_id)
        if skill.is_max_level:
            return self._reject("Skill already at max level", skill_id=skill_id)

        activity = LearningActivityFactory.create_skill_practice(skill, self.player.talent)
        return self.start_activity(activity)

    def start_skill_training(self, skill_id: str) -> bool:
        """Start training a skill that is not acquired yet."""
        try:
            definition = self.definitions.get_skill(skill_id)
        except DefinitionNotFoundError:
            return self._reject("Unknown skill", skill_id=skill_id)

        if self.player.skills.has_skill(skill_id):
            return self._reject("Skill already acquired", skill_id=skill_id)
        if not self.player.skills.can_unlock_skill(skill_id, self.player.predicate_context()):
            return self._reject("Skill requirements not met", skill_id=skill_id)

        activity = LearningActivityFactory.create_skill_training(definition, self.player.talent)
        return self.start_activity(activity)

    def start_exploration(self, locale_id: str) -> bool:
        """Start exploring a discovered locale."""
        try:
            locale = self.definitions.get_locale(locale_id)
        except DefinitionNotFoundError:
            return self._reject("Unknown locale", locale_id=locale_id)

        if not self.player.locales.can_explore(locale_id, self.player.level):
            return self._reject("Locale cannot be explored yet", locale_id=locale_id)

        settings = self.context.settings.game
        activity = create_exploration_activity(
            locale,
            self.context.rng,
            min_events=settings.explore_min_events,
            max_events=settings.explore_max_events,
        )
        return self.start_activity(activity)

    # -------------------------------------------------------------------------
    # Combat
    # -------------------------------------------------------------------------

    def start_combat(self, monster_ids: Iterable[str]) -> CombatSystem | None:
        """Begin an encounter against freshly spawned monsters.

        Args:
            monster_ids: Definition ids of the monsters, in attack order.

        Returns:
            The new encounter, or None if a monster id is unknown or the
            list is empty.

        Raises:
            InvalidGameStateError: If an encounter is still active.
        """
        if self.combat is not None and self.combat.is_active:
            raise InvalidGameStateError(
                "Already in combat",
                current_state="combat",
                expected_states=["idle"],
            )

        monster_ids = list(monster_ids)
        if not monster_ids:
            self._reject("No monsters to fight")
            return None
        try:
            monsters = [Monster(self.definitions.get_monster(m)) for m in monster_ids]
        except DefinitionNotFoundError as e:
            self._reject("Unknown monster", monster_id=e.details.get("definition_id"))
            return None

        self.combat = CombatSystem(
            self.player,
            monsters,
            rng=self.context.rng,
            clock=self.context.clock,
        )
        self.combat.start()
        self.log.info(f"Combat against {', '.join(m.name for m in monsters)}")
        return self.combat

    def end_combat(self) -> CombatSystem | None:
        """Discard the current encounter."""
        combat, self.combat = self.combat, None
        return combat

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def to_snapshot(self) -> dict[str, Any]:
        combat = self.combat.to_snapshot() if self.combat is not None else None
        return GameSnapshot(
            game_time=self.clock.game_time,
            is_paused=self.clock.is_paused,
            last_update=self.clock.last_update,
            has_started=self.has_started,
            player=self.player.to_snapshot(),
            activity_runner=self.runner.to_snapshot(),
            monsters=combat["monsters"] if combat else [],
            combat=combat,
        ).model_dump(mode="json")

    def load_snapshot(self, data: dict[str, Any]) -> None:
        """Replace the game state with a snapshot.

        Everything is rebuilt aside first; the live state is swapped only
        once the whole snapshot has been restored.

        Raises:
            DataIntegrityError: If the snapshot is malformed or references
                unknown definitions. The game is left untouched.
        """
        try:
            snapshot = GameSnapshot.model_validate(data)
            achievements = self._new_achievements()
            player = Player.from_snapshot(
                snapshot.player,
                self.definitions,
                achievements=achievements,
                **self._player_kwargs(),
            )
        except ValidationError as e:
            raise DataIntegrityError(
                "Save data is malformed",
                details={"errors": e.errors(include_url=False)},
            ) from e

        combat = None
        try:
            if snapshot.combat is not None:
                combat = CombatSystem.from_snapshot(
                    snapshot.combat,
                    player,
                    self.definitions,
                    rng=self.context.rng,
                    clock=self.context.clock,
                )
        except ValidationError as e:
            player.detach()
            raise DataIntegrityError("Combat state is malformed") from e
        except DataIntegrityError:
            player.detach()
            raise

        self.player.detach()
        self.achievements = achievements
        self.player = player
        self.runner.bind_resources(player.resources)
        self.runner.load_snapshot(snapshot.activity_runner.model_dump(mode="json"))
        self.combat = combat
        self.has_started = snapshot.has_started
        bind_context(player=player.name)
        self.clock = GameClock(
            game_time=snapshot.game_time,
            is_paused=snapshot.is_paused,
            last_update=snapshot.last_update,
        )
        logger.info("Game state loaded", player=player.name, game_time=snapshot.game_time)


__all__ = [
    "GameClock",
    "GameContext",
    "GameSnapshot",
    "Game",
]
