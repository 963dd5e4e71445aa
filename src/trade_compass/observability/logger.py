"""Structured logging with run_id support.

Uses structlog for structured logging with JSON or console output.
Every log entry includes a run_id so that all records produced by one
CLI invocation (or one dashboard refresh) can be correlated.
"""

from __future__ import annotations

import logging
import sys
import uuid
from contextvars import ContextVar
from typing import Any

import structlog

# Context var for run_id propagation
_run_id: ContextVar[str] = ContextVar("run_id", default="")


def new_run_id() -> str:
    """Start a new run: generate, store and return a fresh run ID."""
    rid = uuid.uuid4().hex[:12]
    _run_id.set(rid)
    return rid


def _add_run_id(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Structlog processor: add run_id to every log entry."""
    event_dict["run_id"] = _run_id.get() or new_run_id()
    return event_dict


def setup_logging(
    level: str = "INFO",
    format: str = "console",
) -> None:
    """Configure structured logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR).
        format: "json" for machine-readable output, "console" for humans.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        _add_run_id,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Log records go to stderr so stdout stays clean JSON for the CLI
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=log_level,
    )


def bind_context(**values: Any) -> None:
    """Attach key/values (command, account, ...) to every following entry."""
    structlog.contextvars.bind_contextvars(**values)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger for a module."""
    return structlog.get_logger(name)
