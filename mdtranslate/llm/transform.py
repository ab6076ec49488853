"""Transform-service interfaces and provider adapters.

Responsibilities:
- Define the one capability the pipeline needs: `transform(text, hint) -> text`.
- Adapt each supported provider's chat API to that capability.

Each adapter performs exactly one provider attempt per call; retries are a
caller concern.
"""

from __future__ import annotations

from typing import Protocol

from ..models.datatypes import TransformHint
from .http_client import AnthropicMessagesClient, OpenAIChatClient
from .prompts import PromptLibrary


class TransformClient(Protocol):
    """Protocol for text transformation providers."""

    def transform(self, text: str, hint: TransformHint) -> str:
        """Return transformed text or raise `ServiceError`."""


class OpenAITransformClient:
    """OpenAI-backed Markdown translator."""

    def __init__(
        self,
        *,
        target_language: str,
        model: str = "gpt-4o",
        api_key: str | None = None,
        base_url: str | None = None,
        timeout_seconds: float = 120.0,
        temperature: float = 0.3,
        max_tokens: int | None = 4000,
    ) -> None:
        """Initialize translation settings and the OpenAI HTTP client."""

        self.target_language = target_language
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.client = OpenAIChatClient(
            api_key=api_key,
            base_url=base_url,
            timeout_seconds=timeout_seconds,
        )
        self.prompts = PromptLibrary()

    def transform(self, text: str, hint: TransformHint) -> str:
        """Translate text with one chat-completions request."""

        return self.client.chat_completion_text(
            model=self.model,
            system_prompt=self.prompts.translation_system_prompt(),
            user_prompt=self.prompts.translate_prompt(
                source_text=text,
                target_language=self.target_language,
                hint=hint,
            ),
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )


class AnthropicTransformClient:
    """Anthropic-backed Markdown translator."""

    def __init__(
        self,
        *,
        target_language: str,
        model: str = "claude-3-5-sonnet-20241022",
        api_key: str | None = None,
        base_url: str | None = None,
        timeout_seconds: float = 120.0,
        temperature: float = 0.3,
        max_tokens: int = 4096,
    ) -> None:
        """Initialize translation settings and the Anthropic HTTP client."""

        self.target_language = target_language
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.client = AnthropicMessagesClient(
            api_key=api_key,
            base_url=base_url,
            timeout_seconds=timeout_seconds,
        )
        self.prompts = PromptLibrary()

    def transform(self, text: str, hint: TransformHint) -> str:
        """Translate text with one messages API request."""

        return self.client.message_text(
            model=self.model,
            system_prompt=self.prompts.translation_system_prompt(),
            user_prompt=self.prompts.translate_prompt(
                source_text=text,
                target_language=self.target_language,
                hint=hint,
            ),
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )
