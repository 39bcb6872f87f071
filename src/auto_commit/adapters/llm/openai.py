"""OpenAI chat completions adapter.

Implements the LLMProvider protocol with the official ``openai`` SDK.
``base_url`` allows OpenAI-compatible endpoints.
"""

from __future__ import annotations

import openai
import structlog

from ...config.schema import OpenAIConfig
from ...utils.async_helpers import LLMErrorKind
from ...utils.logging import LogEventNames
from ...utils.security import SecretRedactor
from .base import BaseLLMAdapter

log = structlog.get_logger()

_MODEL_MISSING_MARKERS = ("model_not_found", "does not exist", "not supported")


def classify_openai_error(error: openai.APIError) -> LLMErrorKind:
    """Map an SDK exception to an LLMErrorKind."""
    if isinstance(error, openai.APITimeoutError):
        return LLMErrorKind.TIMEOUT
    if isinstance(error, openai.APIConnectionError):
        return LLMErrorKind.CONNECTION_REFUSED
    if isinstance(error, (openai.AuthenticationError, openai.PermissionDeniedError)):
        return LLMErrorKind.UNAUTHORIZED
    if isinstance(error, openai.NotFoundError):
        return LLMErrorKind.MODEL_NOT_FOUND

    code = getattr(error, "code", None) or ""
    message = str(error).lower()
    if code == "invalid_api_key":
        return LLMErrorKind.UNAUTHORIZED
    if code == "model_not_found" or any(m in message for m in _MODEL_MISSING_MARKERS):
        return LLMErrorKind.MODEL_NOT_FOUND
    return LLMErrorKind.UNKNOWN


class OpenAIAdapter(BaseLLMAdapter):
    """OpenAI LLM adapter implementing the LLMProvider protocol."""

    PROVIDER = "openai"

    def __init__(
        self,
        config: OpenAIConfig,
        redactor: SecretRedactor | None = None,
    ) -> None:
        super().__init__(config.model, redactor)
        self._config = config
        self._client = openai.AsyncOpenAI(
            api_key=config.api_key,
            base_url=config.base_url,
            timeout=config.timeout,
            max_retries=0,
        )

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        """Run a single chat completion.

        Raises:
            LLMError: If the request fails.
            SecurityError: If redaction fails.
        """
        messages = [
            {"role": "system", "content": self._redact_text(system_prompt)},
            {"role": "user", "content": self._redact_text(user_prompt)},
        ]

        log.debug(LogEventNames.LLM_REQUEST_START, provider=self.PROVIDER, model=self._model)

        try:
            response = await self._client.chat.completions.create(
                model=self._config.model,
                messages=messages,  # type: ignore[arg-type]
                max_tokens=max_tokens or self._config.max_tokens,
                temperature=self._config.temperature if temperature is None else temperature,
            )
        except openai.APIError as e:
            raise self._error(f"OpenAI API error: {e}", classify_openai_error(e)) from e

        if not response.choices:
            return self._check_response("")
        return self._check_response(response.choices[0].message.content or "")
