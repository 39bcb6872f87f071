"""Anthropic Claude LLM adapter.

This module implements the LLMProvider protocol for Anthropic's Claude
models using the official SDK. SDK retries are disabled: a failed request
is reported once.
"""

from __future__ import annotations

import anthropic
import structlog

from ...config.schema import AnthropicConfig
from ...utils.async_helpers import LLMErrorKind
from ...utils.logging import LogEventNames
from ...utils.security import SecretRedactor
from .base import BaseLLMAdapter

log = structlog.get_logger()


def classify_anthropic_error(error: anthropic.APIError) -> LLMErrorKind:
    """Map an SDK exception to an LLMErrorKind."""
    # APITimeoutError subclasses APIConnectionError; check it first
    if isinstance(error, anthropic.APITimeoutError):
        return LLMErrorKind.TIMEOUT
    if isinstance(error, anthropic.APIConnectionError):
        return LLMErrorKind.CONNECTION_REFUSED
    if isinstance(error, (anthropic.AuthenticationError, anthropic.PermissionDeniedError)):
        return LLMErrorKind.UNAUTHORIZED
    if isinstance(error, anthropic.NotFoundError):
        return LLMErrorKind.MODEL_NOT_FOUND
    return LLMErrorKind.UNKNOWN


class AnthropicAdapter(BaseLLMAdapter):
    """Anthropic LLM adapter implementing the LLMProvider protocol.

    Example:
        config = AnthropicConfig(api_key="sk-ant-...")
        adapter = AnthropicAdapter(config)
        text = await adapter.complete(system_prompt, diff_prompt)
    """

    PROVIDER = "anthropic"

    def __init__(
        self,
        config: AnthropicConfig,
        redactor: SecretRedactor | None = None,
    ) -> None:
        """Initialize the Anthropic adapter.

        Args:
            config: Anthropic-specific configuration.
            redactor: Secret redactor. If None, creates default.
        """
        super().__init__(config.model, redactor)
        self._config = config
        self._client = anthropic.AsyncAnthropic(
            api_key=config.api_key,
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
        """Run a single Messages API call.

        Raises:
            LLMError: If the request fails.
            SecurityError: If redaction fails.
        """
        system = self._redact_text(system_prompt)
        content = self._redact_text(user_prompt)

        log.debug(LogEventNames.LLM_REQUEST_START, provider=self.PROVIDER, model=self._model)

        try:
            response = await self._client.messages.create(
                model=self._config.model,
                max_tokens=max_tokens or self._config.max_tokens,
                temperature=self._config.temperature if temperature is None else temperature,
                system=system,
                messages=[{"role": "user", "content": content}],
            )
        except anthropic.APIError as e:
            raise self._error(
                f"Anthropic API error: {e}", classify_anthropic_error(e)
            ) from e

        response_text = ""
        for block in response.content:
            if hasattr(block, "text"):
                response_text += block.text

        return self._check_response(response_text)


__all__ = ["AnthropicAdapter", "classify_anthropic_error"]
