"""Structured logging configuration for eventadmin.

Modules log through structlog (``logger.debug("event_posted", topic=...)``).
Hosts that do not configure structlog themselves can call
``configure_logging`` or ``configure_from_env`` once at startup.
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Mapping
from pathlib import Path
from typing import TextIO

import structlog

_TRUE_VALUES = ("1", "true", "True", "yes")


def _processors(json_output: bool, colors: bool) -> list[structlog.types.Processor]:
    """Processor chain shared by console and JSON output."""
    processors: list[structlog.types.Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]
    if json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=colors))
    return processors


def configure_logging(
    level: str = "INFO",
    json_output: bool = False,
    log_file: Path | None = None,
    colors: bool = True,
    stream: TextIO | None = None,
) -> None:
    """Route structlog through stdlib logging.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: Render records as JSON lines
        log_file: Append to this file instead of a stream
        colors: Colorize console output
        stream: Output stream (default stderr)
    """
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        stream = open(log_file, "a")  # noqa: SIM115

    logging.basicConfig(
        format="%(message)s",
        stream=stream or sys.stderr,
        level=getattr(logging, level.upper()),
        force=True,
    )
    structlog.configure(
        processors=_processors(json_output, colors),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_from_env(
    environ: Mapping[str, str] | None = None,
    stream: TextIO | None = None,
) -> None:
    """Configure logging from EVENTADMIN_LOG_* environment variables.

    EVENTADMIN_LOG_LEVEL selects the level (default INFO),
    EVENTADMIN_LOG_JSON=1 switches to JSON output and
    EVENTADMIN_LOG_FILE appends to a file.
    """
    env = os.environ if environ is None else environ
    json_output = env.get("EVENTADMIN_LOG_JSON", "") in _TRUE_VALUES
    log_file = env.get("EVENTADMIN_LOG_FILE")
    configure_logging(
        level=env.get("EVENTADMIN_LOG_LEVEL", "INFO"),
        json_output=json_output,
        log_file=Path(log_file) if log_file else None,
        colors=not json_output,
        stream=stream,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return the structlog logger for a module (typically ``__name__``)."""
    return structlog.get_logger(name)
