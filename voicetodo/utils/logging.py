"""
Structured logging for voicetodo, built on structlog.

Console output while developing, JSON lines when `VOICETODO_LOG_JSON` is
set. Every entry carries the conversation session and tool call it belongs
to when those are set with `set_log_context`, and credential-like fields
(including Mongo connection URIs) are redacted before rendering.

Usage:
    from voicetodo.utils.logging import get_logger

    logger = get_logger(__name__)
    logger.info("approval_requested", tool_name="addTodo", request_id=request.id)
"""

import logging
import sys
from contextvars import ContextVar

import structlog
from structlog.types import EventDict, FilteringBoundLogger, Processor

from voicetodo.config.settings import settings

session_id_var: ContextVar[str | None] = ContextVar("session_id", default=None)
tool_call_id_var: ContextVar[str | None] = ContextVar("tool_call_id", default=None)

REDACTED = "***REDACTED***"

# Matched as substrings of lower-cased keys
SENSITIVE_KEYS = (
    "password",
    "secret",
    "api_key",
    "apikey",
    "token",
    "authorization",
    "mongo_uri",
)


def filter_sensitive_data(logger, method_name: str, event_dict: EventDict) -> EventDict:
    """Redact values whose key looks like a credential."""
    for key in event_dict:
        lowered = key.lower()
        if any(marker in lowered for marker in SENSITIVE_KEYS):
            event_dict[key] = REDACTED
    return event_dict


def add_context(logger, method_name: str, event_dict: EventDict) -> EventDict:
    """Attach session / tool call ids unless the entry sets them itself."""
    for key, var in (("session_id", session_id_var), ("tool_call_id", tool_call_id_var)):
        value = var.get()
        if value:
            event_dict.setdefault(key, value)
    return event_dict


def _processors(json_logs: bool) -> list[Processor]:
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        add_context,
        filter_sensitive_data,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]
    if json_logs:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(exception_formatter=structlog.dev.plain_traceback)
        )
    return processors


def configure_logging(
    log_level: str = "INFO", json_logs: bool = False, log_file: str | None = None
) -> None:
    """
    Configure stdlib logging and structlog.

    Args:
        log_level: Minimum level (DEBUG, INFO, WARNING, ERROR)
        json_logs: Render JSON lines instead of console output
        log_file: Also write entries to this file
    """
    level = getattr(logging, log_level.upper())
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    logging.getLogger().setLevel(level)
    if log_file:
        handler = logging.FileHandler(log_file)
        handler.setLevel(level)
        logging.getLogger().addHandler(handler)

    structlog.configure(
        processors=_processors(json_logs),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str = "voicetodo") -> FilteringBoundLogger:
    return structlog.get_logger(name)


def set_log_context(session_id: str | None = None, tool_call_id: str | None = None) -> None:
    """
    Set the conversation context for log entries of the current task.

    Context variables are copied into tasks on creation, so concurrent tool
    calls started with `asyncio.create_task` do not see each other's ids.
    """
    if session_id:
        session_id_var.set(session_id)
    if tool_call_id:
        tool_call_id_var.set(tool_call_id)


def clear_log_context() -> None:
    session_id_var.set(None)
    tool_call_id_var.set(None)


configure_logging(
    log_level=settings.log_level, json_logs=settings.log_json, log_file=settings.log_file
)


__all__ = [
    "configure_logging",
    "get_logger",
    "set_log_context",
    "clear_log_context",
    "filter_sensitive_data",
    "add_context",
]
