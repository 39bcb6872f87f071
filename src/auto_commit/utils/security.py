"""Security utilities for secret redaction and input validation.

Staged diffs routinely contain credentials that were never meant to leave
the machine. Everything that is sent to an LLM passes through
:class:`SecretRedactor` first, and redaction fails closed: if a pattern
cannot be applied the request is blocked instead of sent unredacted.
"""

from __future__ import annotations

import ipaddress
import re
from typing import NamedTuple
from urllib.parse import urlparse

import structlog

log = structlog.get_logger()


class SecurityError(Exception):
    """Base exception for security-related errors."""


class RedactionError(SecurityError):
    """Raised when secret redaction fails."""


class SecretPattern(NamedTuple):
    """A named regular expression that detects one kind of secret."""

    name: str
    regex: str


# owner/repo, as accepted by gh --repo
REPO_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9_.-]+/[a-zA-Z0-9_.-]+$")

SHELL_METACHARACTERS = frozenset(";|&`$(){}<>\\\n\r\t\x00")

# Ollama runs locally unless explicitly allowed otherwise
ALLOWED_OLLAMA_HOSTS = frozenset({"localhost", "127.0.0.1", "::1"})

SECRET_PATTERNS: tuple[SecretPattern, ...] = (
    SecretPattern(
        "Assigned secret",
        r"(?i)(api[_-]?key|secret|token|passw(?:or)?d|credential)\s*[=:]\s*[\"']?[\w-]{16,}",
    ),
    SecretPattern("Anthropic API key", r"sk-ant-[\w-]{40,}"),
    SecretPattern("OpenAI project key", r"sk-proj-[a-zA-Z0-9_-]{20,}"),
    SecretPattern("OpenAI key", r"sk-[a-zA-Z0-9]{48}"),
    SecretPattern("GitHub token", r"gh[pousr]_[a-zA-Z0-9]{36}"),
    SecretPattern("GitHub fine-grained PAT", r"github_pat_[a-zA-Z0-9_]{22,}"),
    SecretPattern("GitLab PAT", r"glpat-[a-zA-Z0-9_-]{20}"),
    SecretPattern("npm token", r"npm_[a-zA-Z0-9]{36}"),
    SecretPattern("Slack token", r"xox[baprs]-[\w-]+"),
    SecretPattern("AWS access key ID", r"AKIA[0-9A-Z]{16}"),
    SecretPattern(
        "AWS secret access key",
        r"(?i)aws[_-]?secret[_-]?access[_-]?key\s*[=:]\s*[\"']?[a-zA-Z0-9/+=]{40}",
    ),
    SecretPattern("Google API key", r"AIza[0-9A-Za-z\-_]{35}"),
    SecretPattern("Stripe live key", r"[spr]k_live_[a-zA-Z0-9]{24,}"),
    SecretPattern(
        "Connection string",
        r"(?i)(postgres(?:ql)?|mysql|mongodb(?:\+srv)?|redis|amqp)://[^:\s]+:[^@\s]+@\S+",
    ),
    SecretPattern(
        "Private key block",
        r"-----BEGIN (?:RSA |EC |DSA |OPENSSH |PGP )?PRIVATE KEY(?: BLOCK)?-----",
    ),
    SecretPattern("JWT", r"eyJ[a-zA-Z0-9_-]*\.eyJ[a-zA-Z0-9_-]*\.[a-zA-Z0-9_-]*"),
)


class SecretRedactor:
    """Detects and redacts secrets from text before it leaves the machine.

    Usage:
        redactor = SecretRedactor()
        safe_diff = redactor.redact(diff)
    """

    def __init__(
        self,
        placeholder: str = "[REDACTED]",
        extra_patterns: tuple[SecretPattern, ...] = (),
    ) -> None:
        """Compile the redaction patterns.

        Args:
            placeholder: Replacement text for each detected secret.
            extra_patterns: Patterns applied in addition to SECRET_PATTERNS.

        Raises:
            RedactionError: If any pattern fails to compile.
        """
        self.placeholder = placeholder
        self._compiled: list[tuple[re.Pattern[str], str]] = []
        for pattern in (*SECRET_PATTERNS, *extra_patterns):
            try:
                self._compiled.append((re.compile(pattern.regex), pattern.name))
            except re.error as e:
                log.error("pattern_compilation_failed", pattern=pattern.name, error=str(e))
                raise RedactionError(f"Invalid secret pattern {pattern.name!r}: {e}") from e

    def redact(self, text: str) -> str:
        """Replace every detected secret with the placeholder.

        Raises:
            RedactionError: If any pattern cannot be applied.
        """
        if not text:
            return text
        try:
            for compiled, _ in self._compiled:
                text = compiled.sub(self.placeholder, text)
        except Exception as e:
            log.error("redaction_failed", error=str(e))
            raise RedactionError(f"Redaction failed: {e}") from e
        return text

    def find(self, text: str) -> list[str]:
        """Return the names of the secret kinds present in ``text``."""
        if not text:
            return []
        try:
            return [name for compiled, name in self._compiled if compiled.search(text)]
        except Exception as e:
            log.error("secret_scan_failed", error=str(e))
            raise RedactionError(f"Secret scan failed: {e}") from e

    def has_secrets(self, text: str) -> bool:
        return bool(self.find(text))


def validate_repo_name(repo: str) -> bool:
    """Return True if ``repo`` is a safe ``owner/repo`` slug."""
    if not repo or any(char in repo for char in SHELL_METACHARACTERS):
        return False
    if ".." in repo:
        return False
    return bool(REPO_NAME_PATTERN.match(repo))


def validate_ollama_url(url: str, allow_remote: bool = False) -> bool:
    """Validate that an Ollama base URL is safe to call.

    Only loopback hosts are accepted unless ``allow_remote`` is set.
    """
    if not url:
        return False

    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        return False

    host = parsed.hostname
    if host in ALLOWED_OLLAMA_HOSTS:
        return True
    try:
        if ipaddress.ip_address(host).is_loopback:
            return True
    except ValueError:
        pass  # hostname, not an IP literal
    return allow_remote


def sanitize_for_logging(text: str) -> str:
    """Strip ANSI escape codes and control characters.

    Tracker titles and bodies are user-controlled; they are cleaned before
    being logged or rendered in the terminal.
    """
    if not text:
        return text
    text = re.sub(r"\x1b\[[0-9;?]*[A-Za-z]", "", text)
    return re.sub(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]", "", text)


def mask_config_value(key: str, value: str) -> str:
    """Mask values whose key name suggests a credential."""
    sensitive = ("token", "key", "secret", "password", "credential")
    if any(s in key.lower() for s in sensitive):
        if len(value) > 8:
            return f"{value[:4]}...{value[-4:]}"
        return "***"
    return value
