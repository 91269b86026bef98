"""Structured logging for tokenplan-core.

This module provides:
- Structured logging setup via structlog
- A stage helper that logs start, completion and failure of a pipeline step
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from structlog.stdlib import BoundLogger

LOGGER_NAME = "tokenplan"

_logger: BoundLogger | None = None


def get_logger() -> BoundLogger:
    """Get the package logger, creating it if necessary.

    Example:
        >>> logger = get_logger()
        >>> logger.info("plan_written", path=".tokenplan/deployment_plan.json")
    """
    global _logger
    if _logger is None:
        _logger = structlog.get_logger(LOGGER_NAME)
    assert _logger is not None  # Type narrowing for mypy
    return _logger


def configure_logging(
    *,
    log_level: str = "INFO",
    json_format: bool = True,
    add_timestamp: bool = True,
) -> None:
    """Configure structured logging for tokenplan.

    Args:
        log_level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_format: If True, output JSON format. If False, output human-readable.
        add_timestamp: If True, add ISO timestamp to log entries.

    Example:
        >>> configure_logging(log_level="DEBUG", json_format=False)
    """
    level = getattr(logging, log_level.upper())

    processors: list[Any] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if add_timestamp:
        processors.insert(1, structlog.processors.TimeStamper(fmt="iso"))

    if json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    logging.basicConfig(format="%(message)s", level=level, force=True)


@contextmanager
def stage(name: str, **attributes: Any) -> Iterator[None]:
    """Log a pipeline stage.

    Emits ``<name>_started`` at debug, ``<name>_completed`` with the
    duration on success, and ``<name>_failed`` before re-raising.

    Example:
        >>> with stage("compile", distribution="squiggle"):
        ...     artifacts = compiler.compile(spec)
    """
    logger = get_logger()
    logger.debug(f"{name}_started", **attributes)
    started = time.perf_counter()
    try:
        yield
    except Exception as exc:
        logger.error(f"{name}_failed", error=str(exc), **attributes)
        raise
    logger.info(
        f"{name}_completed",
        duration_ms=round((time.perf_counter() - started) * 1000, 3),
        **attributes,
    )
