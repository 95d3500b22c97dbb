"""Storage module for Spellbinder persistence.

Provides JSON save files for:
- The versioned game snapshot (player, activities, combat)
- Text export and import of the same document
"""

from spellbinder.storage.save_system import (
    SaveData,
    SaveMeta,
    SaveSystem,
)

__all__ = [
    "SaveData",
    "SaveMeta",
    "SaveSystem",
]
