"""Structured logging for an interactive CLI.

Log output goes to stderr and defaults to WARNING so prompts and the
generated message stay readable; ``--debug`` shows every tracker, git and
LLM call. Diffs and prompts travel through events, so every entry is
redacted and long values are clipped before rendering.
"""

from __future__ import annotations

import functools
import logging
import sys
from collections.abc import MutableMapping
from enum import StrEnum
from pathlib import Path
from typing import Any

import structlog

from auto_commit._version import __version__
from auto_commit.utils.security import SecretRedactor

EventDict = MutableMapping[str, Any]

# Longest string value kept in a log entry; diffs are clipped to this
MAX_VALUE_LENGTH = 2_000


class LogFormat(StrEnum):
    JSON = "json"
    CONSOLE = "console"


class LogLevel(StrEnum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


@functools.cache
def _redactor() -> SecretRedactor:
    return SecretRedactor()


def sanitize_log_value(value: Any) -> Any:
    """Redact secrets from a value, descending into dicts, lists and tuples."""
    if isinstance(value, str):
        return _redactor().redact(value)
    if isinstance(value, dict):
        return {key: sanitize_log_value(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return type(value)(sanitize_log_value(item) for item in value)
    return value


def secret_sanitizer(logger: logging.Logger, method_name: str, event_dict: EventDict) -> EventDict:
    """Processor: redact secrets from every field of the entry."""
    for key, value in event_dict.items():
        event_dict[key] = sanitize_log_value(value)
    return event_dict


def clip_long_values(logger: logging.Logger, method_name: str, event_dict: EventDict) -> EventDict:
    """Processor: shorten string fields longer than MAX_VALUE_LENGTH."""
    for key, value in event_dict.items():
        if isinstance(value, str) and len(value) > MAX_VALUE_LENGTH:
            clipped = len(value) - MAX_VALUE_LENGTH
            event_dict[key] = f"{value[:MAX_VALUE_LENGTH]}... [{clipped} chars clipped]"
    return event_dict


def add_context_processor(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Processor: tag every entry with the service name and version."""
    event_dict["service"] = "auto-commit"
    event_dict["version"] = __version__
    return event_dict


def _renderer(log_format: LogFormat) -> Any:
    if log_format == LogFormat.JSON:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(
        colors=sys.stderr.isatty(),
        exception_formatter=structlog.dev.plain_traceback,
    )


def _file_handler(file_path: Path | str) -> logging.Handler | None:
    path = Path(file_path).expanduser()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        return logging.FileHandler(path, encoding="utf-8")
    except OSError as e:
        print(f"Warning: cannot write log file {path}: {e}", file=sys.stderr)
        return None


def configure_logging(
    level: LogLevel | str = LogLevel.WARNING,
    log_format: LogFormat | str = LogFormat.CONSOLE,
    file_path: Path | str | None = None,
    file_enabled: bool = False,
) -> None:
    """Configure structlog on top of stdlib logging.

    Safe to call more than once; the CLI configures early with defaults and
    again after the config file is loaded.

    Args:
        level: Minimum level, case-insensitive when given as a string
        log_format: "json" or "console"
        file_path: Log file, also written when file_enabled is set
        file_enabled: Whether to add the file handler
    """
    level = LogLevel(level.upper()) if isinstance(level, str) else level
    log_format = LogFormat(log_format.lower()) if isinstance(log_format, str) else log_format

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            add_context_processor,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            clip_long_values,
            secret_sanitizer,
            _renderer(log_format),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if file_enabled and file_path:
        handler = _file_handler(file_path)
        if handler is not None:
            handlers.append(handler)

    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, level.value),
        handlers=handlers,
        force=True,
    )


def bind_context(**kwargs: Any) -> None:
    """Attach values to every following log entry in this context.

    Example:
        bind_context(provider="ollama", model="llama3")
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


class LogEventNames:
    """Event names shared across modules."""

    # Workflow
    WORKFLOW_STARTED = "workflow_started"
    WORKFLOW_ABORTED = "workflow_aborted"
    COMMIT_CREATED = "commit_created"
    COMMIT_MESSAGE_GENERATED = "commit_message_generated"
    STYLE_LEARNED = "style_learned"
    STYLE_LEARNING_FAILED = "style_learning_failed"

    # Issue selection
    SELECTION_STATE = "issue_selection_state"
    ISSUE_SELECTED = "issue_selected"
    ISSUE_NOT_SELECTED = "issue_not_selected"
    TRACKER_UNAVAILABLE = "tracker_unavailable"
    TRACKER_FETCH_FAILED = "tracker_fetch_failed"

    # Keywords and scoring
    KEYWORDS_EXTRACTED = "keywords_extracted"
    SEMANTIC_KEYWORDS_FALLBACK = "semantic_keywords_fallback"
    ISSUES_SCORED = "issues_scored"

    # LLM
    LLM_REQUEST_START = "llm_request_start"
    LLM_REQUEST_COMPLETE = "llm_request_complete"
    LLM_REQUEST_ERROR = "llm_request_error"
    DIFF_TRUNCATED = "diff_truncated"
    SECRETS_REDACTED = "secrets_redacted"

    # Issue cache
    CACHE_HIT = "cache_hit"
    CACHE_MISS = "cache_miss"
