"""Provider factory for transform clients.

Responsibilities:
- Resolve provider identifiers to concrete `TransformClient` implementations.
- Keep orchestration independent from concrete provider class construction.
"""

from __future__ import annotations

from .llm.transform import AnthropicTransformClient, OpenAITransformClient, TransformClient


class ProviderFactory:
    """Factory for provider-backed transform clients used by the pipeline."""

    @staticmethod
    def create_transform_client(
        provider_id: str,
        *,
        target_language: str,
        model: str,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout_seconds: float = 120.0,
        temperature: float = 0.3,
        max_tokens: int = 4000,
    ) -> TransformClient:
        """Create a transform client for a configured provider identifier."""

        if provider_id == "openai":
            return OpenAITransformClient(
                target_language=target_language,
                model=model,
                api_key=api_key,
                base_url=base_url,
                timeout_seconds=timeout_seconds,
                temperature=temperature,
                max_tokens=max_tokens,
            )
        if provider_id == "anthropic":
            return AnthropicTransformClient(
                target_language=target_language,
                model=model,
                api_key=api_key,
                base_url=base_url,
                timeout_seconds=timeout_seconds,
                temperature=temperature,
                max_tokens=max_tokens,
            )
        raise ValueError(f"Unsupported transform provider `{provider_id}`.")
