"""Shared behaviour for the LLM adapters.

Security features:
- Secret redaction BEFORE all API calls (fail-closed)
- Output length limits enforced
- Provider failures classified once, here, into LLMErrorKind
"""

from __future__ import annotations

import structlog

from ...utils.async_helpers import LLMError, LLMErrorKind
from ...utils.logging import LogEventNames
from ...utils.security import RedactionError, SecretRedactor, SecurityError

log = structlog.get_logger()

# Maximum response length in characters
MAX_RESPONSE_LENGTH = 50000


class BaseLLMAdapter:
    """Common plumbing for adapters implementing the LLMProvider protocol."""

    PROVIDER = ""

    def __init__(self, model: str, redactor: SecretRedactor | None = None) -> None:
        self._model = model
        self._redactor = redactor or SecretRedactor()

    @property
    def provider_name(self) -> str:
        return self.PROVIDER

    @property
    def model_name(self) -> str:
        """Return the model identifier being used."""
        return self._model

    def _redact_text(self, text: str) -> str:
        """Redact secrets from text, failing closed on error.

        Raises:
            SecurityError: If redaction fails.
        """
        try:
            redacted = self._redactor.redact(text)
        except RedactionError as e:
            log.error("redaction_failed_blocking_llm_call", error=str(e))
            raise SecurityError(f"Cannot send to LLM: redaction failed: {e}") from e
        if redacted != text:
            log.info(LogEventNames.SECRETS_REDACTED, provider=self.PROVIDER)
        return redacted

    def _check_response(self, text: str) -> str:
        """Validate the response text before handing it back.

        Raises:
            LLMError: If the response is empty or too long.
        """
        text = text.strip()
        if not text:
            raise self._error("Empty response from model", LLMErrorKind.UNKNOWN)
        if len(text) > MAX_RESPONSE_LENGTH:
            raise self._error(
                f"Response exceeds maximum length: {len(text)}", LLMErrorKind.UNKNOWN
            )
        log.debug(
            LogEventNames.LLM_REQUEST_COMPLETE,
            provider=self.PROVIDER,
            model=self._model,
            response_length=len(text),
        )
        return text

    def _error(self, message: str, kind: LLMErrorKind) -> LLMError:
        log.error(
            LogEventNames.LLM_REQUEST_ERROR,
            provider=self.PROVIDER,
            model=self._model,
            kind=kind.value,
            error=message,
        )
        return LLMError(message, kind=kind, provider=self.PROVIDER, model=self._model)
