"""Abstract interface for LLM integrations."""

from typing import Protocol


class LLMProvider(Protocol):
    """Abstract interface for LLM integrations.

    This protocol defines the contract that all LLM provider adapters
    (Anthropic, OpenAI, Ollama) must implement. Adapters classify SDK and
    HTTP failures into ``LLMError`` with an ``LLMErrorKind`` so callers
    never inspect provider-specific exceptions.
    """

    @property
    def provider_name(self) -> str:
        """Return the provider identifier ("anthropic", "openai", "ollama")."""
        ...

    @property
    def model_name(self) -> str:
        """Return the model identifier being used."""
        ...

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        """
        Run a single completion and return the response text.

        Security: implementations redact secrets from both prompts before
        the request leaves the machine, and block the request if redaction
        fails.

        Args:
            system_prompt: Instructions for the model
            user_prompt: User content (diff, commit history, ...)
            temperature: Override the configured temperature
            max_tokens: Override the configured output limit

        Returns:
            The response text

        Raises:
            LLMError: If the request fails, with a classified kind
            SecurityError: If redaction fails
        """
        ...
