"""Definition tables shared by every subsystem.

Definitions are static game data: skills, spells, items, monsters,
locales, achievements and the class tree. They are loaded once and
only read afterwards; runtime state lives in the managers.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import Path
from typing import Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from spellbinder.core.exceptions import DataIntegrityError, DefinitionNotFoundError, PersistenceError
from spellbinder.core.logging import get_logger
from spellbinder.models.achievements import AchievementDefinition
from spellbinder.models.classes import ClassNode, ClassTree
from spellbinder.models.items import ItemDefinition
from spellbinder.models.locales import LocaleDefinition
from spellbinder.models.monsters import MonsterDefinition
from spellbinder.models.skills import SkillDefinition
from spellbinder.models.spells import SpellDefinition


logger = get_logger(__name__)

DefinitionT = TypeVar("DefinitionT", bound=BaseModel)

_TABLE_FILES: dict[str, type[BaseModel]] = {
    "skills": SkillDefinition,
    "spells": SpellDefinition,
    "items": ItemDefinition,
    "monsters": MonsterDefinition,
    "locales": LocaleDefinition,
    "achievements": AchievementDefinition,
    "classes": ClassNode,
}


def _index(kind: str, definitions: Iterable[DefinitionT]) -> dict[str, DefinitionT]:
    table: dict[str, DefinitionT] = {}
    for definition in definitions:
        definition_id = getattr(definition, "id")
        if definition_id in table:
            raise DataIntegrityError(
                f"Duplicate {kind} id",
                details={"kind": kind, "id": definition_id},
            )
        table[definition_id] = definition
    return table


class GameDefinitions:
    """Read-only definition tables keyed by id."""

    def __init__(
        self,
        *,
        skills: Iterable[SkillDefinition] = (),
        spells: Iterable[SpellDefinition] = (),
        items: Iterable[ItemDefinition] = (),
        monsters: Iterable[MonsterDefinition] = (),
        locales: Iterable[LocaleDefinition] = (),
        achievements: Iterable[AchievementDefinition] = (),
        classes: Iterable[ClassNode] = (),
    ) -> None:
        """Build the tables.

        Raises:
            DataIntegrityError: On duplicate ids within a table or an
                invalid class tree.
        """
        self._skills = _index("skill", skills)
        self._spells = _index("spell", spells)
        self._items = _index("item", items)
        self._monsters = _index("monster", monsters)
        self._locales = _index("locale", locales)
        self._achievements = _index("achievement", achievements)
        self._classes = _index("class", classes)
        ClassTree(self._classes.values())

    # -------------------------------------------------------------------------
    # Tables
    # -------------------------------------------------------------------------

    @property
    def skills(self) -> list[SkillDefinition]:
        return list(self._skills.values())

    @property
    def spells(self) -> list[SpellDefinition]:
        return list(self._spells.values())

    @property
    def items(self) -> list[ItemDefinition]:
        return list(self._items.values())

    @property
    def monsters(self) -> list[MonsterDefinition]:
        return list(self._monsters.values())

    @property
    def locales(self) -> list[LocaleDefinition]:
        return list(self._locales.values())

    @property
    def achievements(self) -> list[AchievementDefinition]:
        return list(self._achievements.values())

    @property
    def classes(self) -> list[ClassNode]:
        return list(self._classes.values())

    def build_class_tree(self) -> ClassTree:
        """Create a fresh class tree from the class table."""
        return ClassTree(self._classes.values())

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    @staticmethod
    def _lookup(kind: str, table: dict[str, DefinitionT], definition_id: str) -> DefinitionT:
        definition = table.get(definition_id)
        if definition is None:
            raise DefinitionNotFoundError(
                f"Unknown {kind}",
                kind=kind,
                definition_id=definition_id,
            )
        return definition

    def get_skill(self, skill_id: str) -> SkillDefinition:
        return self._lookup("skill", self._skills, skill_id)

    def get_spell(self, spell_id: str) -> SpellDefinition:
        return self._lookup("spell", self._spells, spell_id)

    def get_item(self, item_id: str) -> ItemDefinition:
        return self._lookup("item", self._items, item_id)

    def get_monster(self, monster_id: str) -> MonsterDefinition:
        return self._lookup("monster", self._monsters, monster_id)

    def get_locale(self, locale_id: str) -> LocaleDefinition:
        return self._lookup("locale", self._locales, locale_id)

    def get_achievement(self, achievement_id: str) -> AchievementDefinition:
        return self._lookup("achievement", self._achievements, achievement_id)

    def get_class(self, class_id: str) -> ClassNode:
        return self._lookup("class", self._classes, class_id)

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GameDefinitions:
        """Build definitions from raw table payloads.

        Args:
            data: Mapping of table name (``skills``, ``spells``, ...) to a
                list of definition objects. Missing tables are empty.

        Raises:
            DataIntegrityError: If a definition fails validation, an id is
                duplicated or the class tree is invalid.
        """
        tables: dict[str, list[Any]] = {}
        for name, model in _TABLE_FILES.items():
            try:
                tables[name] = [model.model_validate(raw) for raw in data.get(name, [])]
            except PydanticValidationError as exc:
                raise DataIntegrityError(
                    f"Invalid {name} definition",
                    details={"table": name, "errors": exc.error_count()},
                ) from exc
        return cls(**tables)

    @classmethod
    def from_directory(cls, path: Path | str) -> GameDefinitions:
        """Load definitions from ``<table>.json`` files in a directory.

        Each file holds either a JSON array or an object with the table
        name as its only key, e.g. ``{"skills": [...]}``. Missing files
        give empty tables.

        Args:
            path: Directory containing the JSON files.

        Returns:
            The loaded definitions.

        Raises:
            PersistenceError: If a file cannot be read or parsed.
            DataIntegrityError: If the content is invalid.
        """
        directory = Path(path)
        data: dict[str, Any] = {}
        for name in _TABLE_FILES:
            file_path = directory / f"{name}.json"
            if not file_path.exists():
                continue
            try:
                payload = json.loads(file_path.read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError) as exc:
                raise PersistenceError(
                    f"Failed to read definition file: {exc}",
                    path=str(file_path),
                ) from exc
            data[name] = payload.get(name, []) if isinstance(payload, dict) else payload

        definitions = cls.from_dict(data)
        logger.info(
            "Definitions loaded",
            path=str(directory),
            tables={name: len(raw) for name, raw in data.items()},
        )
        return definitions


__all__ = ["GameDefinitions"]
