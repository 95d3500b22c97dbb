"""Custom exception hierarchy for the Spellbinder simulation core.

This module defines the exception hierarchy used across the game engine,
the progression models and the persistence layer. All exceptions inherit
from SpellbinderError, enabling unified error handling at the application
boundary while preserving domain-specific context.

Only data integrity problems (missing definitions, corrupt saves) and
programming errors raise. Ordinary validation failures such as an
unaffordable cost are reported as a ``False`` return value instead.

Example:
    >>> from spellbinder.core.exceptions import DefinitionNotFoundError
    >>> raise DefinitionNotFoundError("Unknown skill", kind="skill", definition_id="fireball")
"""

from __future__ import annotations

from typing import Any


class SpellbinderError(Exception):
    """Base exception for all Spellbinder errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary containing additional error context.
    """

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        """Initialize the base exception.

        Args:
            message: Human-readable error description.
            details: Optional dictionary containing additional error context.
        """
        self.message = message
        self.details = details or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the exception message with optional details.

        Returns:
            Formatted error message including any provided details.
        """
        if self.details:
            detail_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            return f"{self.message} [{detail_str}]"
        return self.message

    def __repr__(self) -> str:
        """Return a detailed string representation of the exception.

        Returns:
            String representation suitable for debugging.
        """
        return f"{self.__class__.__name__}(message={self.message!r}, details={self.details!r})"


# =============================================================================
# Game Engine Domain Exceptions
# =============================================================================


class GameEngineError(SpellbinderError):
    """Base exception for all game engine errors.

    Raised when there are issues with tick processing, combat resolution
    or activity settlement.
    """


class InvalidGameStateError(GameEngineError):
    """Raised when the game enters an invalid or inconsistent state.

    This typically occurs when an operation is attempted from a state
    that does not allow it, such as acting in a finished combat.
    """

    def __init__(
        self,
        message: str,
        *,
        current_state: str | None = None,
        expected_states: list[str] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize invalid game state error with state context.

        Args:
            message: Human-readable error description.
            current_state: The current invalid state identifier.
            expected_states: List of valid states that were expected.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if current_state:
            combined_details["current_state"] = current_state
        if expected_states:
            combined_details["expected_states"] = expected_states
        super().__init__(message, details=combined_details)


class CombatError(GameEngineError):
    """Raised when combat resolution encounters an error.

    This includes invalid turn transitions and acting on a combat that
    has already reached a terminal result.
    """

    def __init__(
        self,
        message: str,
        *,
        combatant_id: str | None = None,
        round_number: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize combat error with combat context.

        Args:
            message: Human-readable error description.
            combatant_id: Identifier of the combatant involved.
            round_number: Current combat round when error occurred.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if combatant_id:
            combined_details["combatant_id"] = combatant_id
        if round_number is not None:
            combined_details["round_number"] = round_number
        super().__init__(message, details=combined_details)


class ActivityError(GameEngineError):
    """Raised when a completed activity cannot be settled."""

    def __init__(
        self,
        message: str,
        *,
        activity_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize activity error with activity context.

        Args:
            message: Human-readable error description.
            activity_id: Identifier of the activity template.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if activity_id:
            combined_details["activity_id"] = activity_id
        super().__init__(message, details=combined_details)


class FormulaError(GameEngineError):
    """Raised when an effect formula cannot be evaluated.

    This typically occurs when a definition carries a malformed
    arithmetic expression.
    """

    def __init__(
        self,
        message: str,
        *,
        expression: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize formula error with expression context.

        Args:
            message: Human-readable error description.
            expression: The formula that caused the error.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if expression:
            combined_details["expression"] = expression
        super().__init__(message, details=combined_details)


# =============================================================================
# Data Integrity Exceptions
# =============================================================================


class DataIntegrityError(SpellbinderError):
    """Raised when static data or a snapshot is structurally broken.

    Loading aborts as a whole when this is raised; a partially applied
    load is never left behind.
    """


class DefinitionNotFoundError(DataIntegrityError):
    """Raised when a referenced definition id does not exist."""

    def __init__(
        self,
        message: str,
        *,
        kind: str | None = None,
        definition_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with the kind and id of the missing definition.

        Args:
            message: Human-readable error description.
            kind: Definition table name (skill, spell, monster...).
            definition_id: The id that could not be resolved.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if kind:
            combined_details["kind"] = kind
        if definition_id:
            combined_details["definition_id"] = definition_id
        super().__init__(message, details=combined_details)


# =============================================================================
# Persistence Exceptions
# =============================================================================


class PersistenceError(SpellbinderError):
    """Raised when a save file cannot be written or read."""

    def __init__(
        self,
        message: str,
        *,
        path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize persistence error with file context.

        Args:
            message: Human-readable error description.
            path: Path of the save file involved.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if path:
            combined_details["path"] = path
        super().__init__(message, details=combined_details)


class SaveLoadError(PersistenceError):
    """Raised when a save document is corrupt or missing required sections."""

    def __init__(
        self,
        message: str,
        *,
        path: str | None = None,
        section: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize save load error with section context.

        Args:
            message: Human-readable error description.
            path: Path of the save file involved.
            section: Name of the snapshot section that failed.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if section:
            combined_details["section"] = section
        super().__init__(message, path=path, details=combined_details)


# =============================================================================
# Configuration & Validation Exceptions
# =============================================================================


class ConfigurationError(SpellbinderError):
    """Raised when application configuration is invalid.

    This includes missing required settings, invalid values, or
    incompatible configuration combinations.
    """

    def __init__(
        self,
        message: str,
        *,
        config_key: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize configuration error with config key context.

        Args:
            message: Human-readable error description.
            config_key: The configuration key that caused the error.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if config_key:
            combined_details["config_key"] = config_key
        super().__init__(message, details=combined_details)


class ValidationError(SpellbinderError):
    """Raised when data validation fails.

    This includes malformed unlock conditions and constraint violations
    in definition tables.
    """

    def __init__(
        self,
        message: str,
        *,
        field_name: str | None = None,
        invalid_value: Any | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize validation error with field context.

        Args:
            message: Human-readable error description.
            field_name: Name of the field that failed validation.
            invalid_value: The value that failed validation.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if field_name:
            combined_details["field_name"] = field_name
        if invalid_value is not None:
            combined_details["invalid_value"] = invalid_value
        super().__init__(message, details=combined_details)


__all__ = [
    # Base exception
    "SpellbinderError",
    # Game engine exceptions
    "GameEngineError",
    "InvalidGameStateError",
    "CombatError",
    "ActivityError",
    "FormulaError",
    # Data integrity exceptions
    "DataIntegrityError",
    "DefinitionNotFoundError",
    # Persistence exceptions
    "PersistenceError",
    "SaveLoadError",
    # Configuration exceptions
    "ConfigurationError",
    "ValidationError",
]
