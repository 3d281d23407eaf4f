"""
Forge Allowlist - Logging Configuration

structlog renders events; the stdlib root logger filters by level and
writes to stderr, so stdout stays reserved for command output (roots,
proofs, JSON) that callers may pipe into other tools.
"""

import logging
import sys

import structlog

from forge_allowlist.core.config import settings


def resolve_level(level: str | int | None = None) -> int:
    """
    Map a level name (any case) or number to a stdlib level.

    Raises:
        ValueError: If the name is not a stdlib level
    """
    if level is None:
        level = settings.LOG_LEVEL
    if isinstance(level, int):
        return level

    value = logging.getLevelName(level.strip().upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {level}")
    return value


def setup_logging(level: str | int | None = None, json_output: bool | None = None) -> None:
    """
    Configure structured logging.

    Args:
        level: Level name or number (defaults to LOG_LEVEL)
        json_output: Render JSON lines (defaults to ENV == "production")
    """
    if json_output is None:
        json_output = settings.ENV == "production"

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]

    if json_output:
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer(sort_keys=True))
    else:
        # ConsoleRenderer formats exc_info itself
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(message)s"))
    # Replace handlers from earlier calls; the CLI and tests configure repeatedly
    logging.basicConfig(handlers=[handler], level=resolve_level(level), force=True)
