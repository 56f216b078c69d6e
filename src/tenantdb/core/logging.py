"""Logging configuration using structlog.

Logs go to stderr so stdout carries only command output. Operations bind
``tenant`` and ``table`` through contextvars, so every line emitted while
serving a request names the database it touched.
"""

import logging
import sys
from typing import Any

import structlog

_LOG_LEVELS: dict[str, int] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


class _StderrLoggerFactory:
    """Look up sys.stderr when each logger is built.

    CliRunner swaps stderr between invocations; a handle captured at
    configure() time would point at a closed stream.
    """

    def __call__(self, *args: Any, **kwargs: Any) -> structlog.PrintLogger:
        return structlog.PrintLogger(file=sys.stderr)


def setup_logging(verbose: bool = False, json_output: bool = False) -> None:
    """Configure structlog for tenantdb.

    Args:
        verbose: Log at DEBUG (every statement) instead of INFO.
        json_output: Render JSON lines instead of the console format.
    """
    level = _LOG_LEVELS["debug" if verbose else "info"]
    renderer: Any
    if json_output:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=_StderrLoggerFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> Any:
    """Return a structlog logger, bound with ``logger=name`` when given.

    Call inside functions, never at import time, so setup_logging()
    has already run.
    """
    logger = structlog.get_logger()
    if name:
        logger = logger.bind(logger=name)
    return logger
