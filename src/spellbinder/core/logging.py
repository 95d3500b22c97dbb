"""Structured logging for the Spellbinder simulation core.

Every module logs through a structlog logger obtained from ``get_logger``
with keyword payloads instead of formatted strings. ``configure_logging``
installs the processor chain once per process; its defaults come from
the application settings.

Example:
    >>> from spellbinder.core.logging import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.info("Combat started", monsters=2, turn="player")
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, Any

import structlog
from structlog.types import Processor


if TYPE_CHECKING:
    from structlog.types import EventDict, WrappedLogger

    from spellbinder.core.config import Settings


_PLAIN_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def app_context_processor(app_name: str, app_version: str) -> Processor:
    """Build a processor stamping the application identity on each event.

    Args:
        app_name: Value of the ``app`` key.
        app_version: Value of the ``version`` key.

    Returns:
        The processor.
    """

    def add_app_context(
        logger: WrappedLogger,
        method_name: str,
        event_dict: EventDict,
    ) -> EventDict:
        event_dict.setdefault("app", app_name)
        event_dict.setdefault("version", app_version)
        return event_dict

    return add_app_context


def build_processors(settings: Settings, *, json_format: bool) -> list[Processor]:
    """Assemble the structlog processor chain.

    Console output is meant for interactive sessions; JSON output renders
    exception info inline so each event stays on one line.
    """
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        app_context_processor(settings.app_name, settings.app_version),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    if json_format:
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(
                colors=sys.stdout.isatty(),
                exception_formatter=structlog.dev.plain_traceback,
            )
        )
    return processors


def configure_logging(
    settings: Settings | None = None,
    *,
    level: str | None = None,
    json_format: bool | None = None,
    log_file: str | None = None,
) -> None:
    """Configure application-wide logging.

    Args:
        settings: Application settings; loaded when omitted.
        level: Level name overriding ``settings.log_level``.
        json_format: Render events as JSON lines; defaults to JSON outside
            debug mode.
        log_file: Optional file that also receives stdlib log records.

    Example:
        >>> configure_logging(level="DEBUG")
    """
    if settings is None:
        from spellbinder.core.config import get_settings

        settings = get_settings()

    if json_format is None:
        json_format = settings.is_production
    level_name = (level or settings.log_level).upper()
    numeric_level = getattr(logging, level_name, logging.INFO)

    structlog.configure(
        processors=build_processors(settings, json_format=json_format),
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    for handler in handlers:
        handler.setFormatter(logging.Formatter(_PLAIN_FORMAT))
    logging.basicConfig(level=numeric_level, handlers=handlers, force=True)


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """Get a logger, typically with ``__name__``."""
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Bind values included in every later event of this context.

    Example:
        >>> bind_context(player="Merlin")
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


__all__ = [
    "app_context_processor",
    "build_processors",
    "configure_logging",
    "get_logger",
    "bind_context",
    "clear_context",
]
