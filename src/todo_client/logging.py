"""Structured logging for the todo client.

Log lines go to stderr so they never interleave with the task table the
REPL prints on stdout. The level and renderer come from TodoSettings
(``TODO_CLIENT_LOG_LEVEL``, ``TODO_CLIENT_LOG_FORMAT``).
"""

import logging
import sys
from typing import TYPE_CHECKING

import structlog
from structlog.types import Processor

if TYPE_CHECKING:
    from todo_client.config import TodoSettings

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}

# Third-party loggers that log every request at INFO
_QUIET_LOGGERS = ("httpx", "httpcore")


def _renderer(log_format: str) -> list[Processor]:
    if log_format == "json":
        return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    return [
        structlog.dev.ConsoleRenderer(
            colors=sys.stderr.isatty(),
            exception_formatter=structlog.dev.plain_traceback,
        )
    ]


def configure_logging(settings: "TodoSettings | None" = None) -> None:
    """Configure structlog and the stdlib root logger from settings.

    Without settings, logs warnings and above to the console.
    """
    log_level = logging.WARNING
    log_format = "console"
    if settings is not None:
        log_level = _LEVELS[settings.log_level]
        log_format = settings.log_format

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.UnicodeDecoder(),
            *_renderer(log_format),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        level=log_level,
        handlers=[logging.StreamHandler(sys.stderr)],
    )
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def bind_context(**kwargs: object) -> None:
    """Attach fields to every log line of the current context.

    Example:
        bind_context(api_host="http://localhost:5000")
        logger.info("tasks_refreshed", count=3)  # includes api_host
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


class Loggers:
    """Named loggers, one per component."""

    @staticmethod
    def cli() -> structlog.stdlib.BoundLogger:
        return get_logger("todo_client.cli")

    @staticmethod
    def sync() -> structlog.stdlib.BoundLogger:
        """Task store, edit session and session container."""
        return get_logger("todo_client.sync")

    @staticmethod
    def remote() -> structlog.stdlib.BoundLogger:
        return get_logger("todo_client.remote")

    @staticmethod
    def credentials() -> structlog.stdlib.BoundLogger:
        return get_logger("todo_client.credentials")

    @staticmethod
    def config() -> structlog.stdlib.BoundLogger:
        return get_logger("todo_client.config")
