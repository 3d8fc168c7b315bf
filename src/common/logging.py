"""Structured logging configuration (structlog)."""

from __future__ import annotations

import logging
from pathlib import Path

import structlog


def configure_structlog(level: int = logging.INFO, *, json_output: bool = False) -> None:
    """Configure structlog console output for the agent process.

    Human-readable by default; ``json_output`` emits one JSON object per
    line for fleet log collectors. Call once at process startup.
    """
    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def bind_agent(agent_id: str) -> None:
    """Tag every later log line of this process with the agent's identifier."""
    structlog.contextvars.bind_contextvars(agent_id=agent_id)


def get_json_file_logger(log_path: Path) -> structlog.BoundLogger:
    """Return a structlog logger that appends JSON lines to *log_path*.

    Backs the agent journal (one event per executed command and per
    accepted report); it survives restarts and self-updates because the
    file is opened in append mode.
    """
    log_path.parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(str(log_path), mode="a")
    file_handler.setLevel(logging.DEBUG)

    stdlib_logger = logging.getLogger(f"journal.{log_path}")
    stdlib_logger.handlers = [file_handler]
    stdlib_logger.setLevel(logging.DEBUG)
    stdlib_logger.propagate = False

    return structlog.wrap_logger(
        stdlib_logger,
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer(),
        ],
    )
