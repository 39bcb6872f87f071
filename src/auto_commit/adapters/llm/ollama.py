"""Ollama adapter for locally hosted models.

Talks to the Ollama ``/api/chat`` endpoint over HTTP with ``httpx``. The
base URL is validated against SSRF in ``OllamaConfig``.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from ...config.schema import OllamaConfig
from ...utils.async_helpers import LLMErrorKind
from ...utils.logging import LogEventNames
from ...utils.security import SecretRedactor
from .base import BaseLLMAdapter

log = structlog.get_logger()


def classify_ollama_error(error: httpx.HTTPError) -> LLMErrorKind:
    """Map an httpx exception to an LLMErrorKind."""
    if isinstance(error, httpx.TimeoutException):
        return LLMErrorKind.TIMEOUT
    if isinstance(error, (httpx.ConnectError, httpx.NetworkError)):
        return LLMErrorKind.CONNECTION_REFUSED
    if isinstance(error, httpx.HTTPStatusError):
        status = error.response.status_code
        if status in (401, 403):
            return LLMErrorKind.UNAUTHORIZED
        if status == 404:
            return LLMErrorKind.MODEL_NOT_FOUND
    return LLMErrorKind.UNKNOWN


class OllamaAdapter(BaseLLMAdapter):
    """Ollama adapter implementing the LLMProvider protocol.

    Example:
        adapter = OllamaAdapter(OllamaConfig(model="llama3"))
        text = await adapter.complete(system_prompt, diff_prompt)
    """

    PROVIDER = "ollama"

    def __init__(
        self,
        config: OllamaConfig,
        redactor: SecretRedactor | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the Ollama adapter.

        Args:
            config: Ollama-specific configuration.
            redactor: Secret redactor. If None, creates default.
            transport: Optional httpx transport, used by tests.
        """
        super().__init__(config.model, redactor)
        self._config = config
        self._transport = transport

    @property
    def chat_url(self) -> str:
        return f"{self._config.base_url.rstrip('/')}/api/chat"

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        """Run a single non-streaming chat request.

        Raises:
            LLMError: If the request fails.
            SecurityError: If redaction fails.
        """
        options: dict[str, Any] = {
            "temperature": self._config.temperature if temperature is None else temperature,
        }
        if max_tokens:
            options["num_predict"] = max_tokens

        payload = {
            "model": self._config.model,
            "stream": False,
            "messages": [
                {"role": "system", "content": self._redact_text(system_prompt)},
                {"role": "user", "content": self._redact_text(user_prompt)},
            ],
            "options": options,
        }

        log.debug(LogEventNames.LLM_REQUEST_START, provider=self.PROVIDER, url=self.chat_url)

        try:
            async with httpx.AsyncClient(
                timeout=self._config.timeout, transport=self._transport
            ) as client:
                response = await client.post(self.chat_url, json=payload)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as e:
            raise self._error(f"Ollama request failed: {e}", classify_ollama_error(e)) from e
        except ValueError as e:
            raise self._error(f"Ollama returned invalid JSON: {e}", LLMErrorKind.UNKNOWN) from e

        message = data.get("message") if isinstance(data, dict) else None
        content = message.get("content") if isinstance(message, dict) else None
        if not isinstance(content, str):
            raise self._error("Ollama response has no message content", LLMErrorKind.UNKNOWN)

        return self._check_response(content)
