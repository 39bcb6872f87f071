"""Utility functions and helpers.

- security: Secret redaction, input validation
- safe_subprocess: Safe git and gh execution
- async_helpers: Exceptions and timeouts
- logging: Structured logging with secret sanitization
"""

from auto_commit.utils.logging import (
    LogFormat,
    LogLevel,
    bind_context,
    clear_context,
    configure_logging,
)
from auto_commit.utils.security import (
    RedactionError,
    SecretRedactor,
    SecurityError,
)

__all__ = [
    # Logging
    "LogFormat",
    "LogLevel",
    "bind_context",
    "clear_context",
    "configure_logging",
    # Security
    "RedactionError",
    "SecretRedactor",
    "SecurityError",
]
