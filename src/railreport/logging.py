"""structlog setup for the railreport commands."""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar
from typing import TYPE_CHECKING, TextIO

import structlog

if TYPE_CHECKING:
    from structlog.typing import EventDict, WrappedLogger

# TestRail run the current command works on
run_id_ctx: ContextVar[str] = ContextVar("run_id", default="")


def add_run_id(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Tag the event with the run id of the current command, if any."""
    run_id = run_id_ctx.get()
    if run_id:
        event_dict["run_id"] = run_id
    return event_dict


def configure_logging(
    log_level: str = "INFO",
    json_format: bool = False,
    stream: TextIO | None = None,
) -> None:
    """
    Route structlog events to ``stream``, filtered by ``log_level``.

    Args:
        log_level: Minimum level name, e.g. ``"DEBUG"``. Unknown names mean INFO.
        json_format: Render one JSON object per line instead of key=value text.
        stream: Destination; sys.stderr when omitted, since stdout carries
            command output such as a new run id.
    """
    renderer = (
        structlog.processors.JSONRenderer()
        if json_format
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", key="timestamp"),
            add_run_id,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, log_level.upper(), logging.INFO)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream or sys.stderr),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str) -> structlog.typing.FilteringBoundLogger:
    """Return a logger for module ``name``.

    The logger is a lazy proxy, so module-level loggers created at import
    follow whatever ``configure_logging`` set up last.
    """
    return structlog.get_logger(logger_name=name)
