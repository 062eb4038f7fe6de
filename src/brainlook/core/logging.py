"""Structured logging configuration for brainlook.

Provides structlog setup and per-session context binding so every log line
emitted while a session is active carries its room code and participant name.
"""

from __future__ import annotations

import logging
import sys

import structlog


def configure_logging(*, debug: bool = False, json_logs: bool = False) -> None:
    """Configure structured logging for the client.

    Logs go to stderr so they never interleave with the terminal game on stdout.

    Args:
        debug: Enable debug level logging.
        json_logs: Output logs as JSON (for production).
    """
    processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if json_logs:
        # Machine-readable: one JSON object per line
        processors.extend(
            [
                structlog.processors.format_exc_info,
                structlog.processors.JSONRenderer(),
            ]
        )
    else:
        # Interactive: colored only when stderr is a terminal
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    level = logging.DEBUG if debug else logging.WARNING

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def bind_session_context(room_code: str, participant: str) -> None:
    """Bind room and participant to the structlog context.

    Args:
        room_code: The room the session is connected to.
        participant: The participant's display name.
    """
    structlog.contextvars.bind_contextvars(room_code=room_code, participant=participant)


def clear_session_context() -> None:
    """Remove the session keys bound by :func:`bind_session_context`."""
    structlog.contextvars.unbind_contextvars("room_code", "participant")
