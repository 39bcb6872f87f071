"""Exceptions and async helpers shared across the commit workflow.

Errors fall in two groups. Enrichment failures (tracker lookups) are
reported as notices and the workflow carries on without an issue
reference. Failures in mandatory steps (diff, LLM generation, commit) end
the run with a non-zero exit code and nothing committed.

Nothing here retries: a failed network call is reported once.
"""

from __future__ import annotations

import asyncio
import builtins
from collections.abc import Awaitable
from enum import Enum
from typing import TypeVar

import structlog

log = structlog.get_logger()

T = TypeVar("T")


# =============================================================================
# Custom Exceptions
# =============================================================================


class AutoCommitError(Exception):
    """Base exception for all auto-commit errors."""


class TrackerUnavailableError(AutoCommitError):
    """No recognised issue tracker for this repository."""


class FetchFailureError(AutoCommitError):
    """A network, authentication or CLI failure while fetching data."""


class MalformedResponseError(FetchFailureError):
    """A collaborator returned a payload that could not be parsed."""


class EmptyStagedSetError(AutoCommitError):
    """Nothing is staged for commit."""


class VCSError(AutoCommitError):
    """A git operation failed."""


class LLMErrorKind(Enum):
    """Classified cause of an LLM failure."""

    UNAUTHORIZED = "unauthorized"
    MODEL_NOT_FOUND = "model_not_found"
    CONNECTION_REFUSED = "connection_refused"
    TIMEOUT = "timeout"
    UNKNOWN = "unknown"


class LLMError(FetchFailureError):
    """An LLM request failed.

    Attributes:
        kind: Classified cause, set once at the provider boundary.
        provider: Provider name ("anthropic", "openai", "ollama").
        model: Model identifier the request was made against.
    """

    def __init__(
        self,
        message: str,
        kind: LLMErrorKind = LLMErrorKind.UNKNOWN,
        provider: str = "",
        model: str = "",
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.provider = provider
        self.model = model

    def hint(self) -> str:
        """Return guidance for the user based on the error kind."""
        if self.kind is LLMErrorKind.UNAUTHORIZED:
            return (
                f"Invalid API key for {self.provider}. "
                "Remove the stored key or pass a new one and try again."
            )
        if self.kind is LLMErrorKind.MODEL_NOT_FOUND:
            return (
                f"Model '{self.model}' not found for {self.provider}. "
                "Run with --list-models to see available models."
            )
        if self.kind is LLMErrorKind.CONNECTION_REFUSED:
            return (
                f"Could not connect to {self.provider}. "
                "Make sure the server is running and the base URL is correct."
            )
        if self.kind is LLMErrorKind.TIMEOUT:
            return f"The request to {self.provider} timed out."
        return str(self)


class TimeoutError(AutoCommitError):
    """Operation timed out."""


# =============================================================================
# Timeout Utilities
# =============================================================================


async def with_timeout(
    coro: Awaitable[T],
    timeout: float,
    error_message: str | None = None,
) -> T:
    """Execute an awaitable with a timeout.

    Args:
        coro: The coroutine to execute.
        timeout: Timeout in seconds.
        error_message: Custom error message for timeout.

    Returns:
        The result of the coroutine.

    Raises:
        TimeoutError: If the operation times out.
    """
    try:
        return await asyncio.wait_for(coro, timeout=timeout)
    except builtins.TimeoutError as e:
        msg = error_message or f"Operation timed out after {timeout}s"
        log.warning("operation_timeout", timeout=timeout)
        raise TimeoutError(msg) from e
