"""LLM-facing abstractions for document translation.

This package defines the transform-client protocol, provider adapters,
prompt construction, and dispatch pacing.
"""

from .http_client import AnthropicMessagesClient, OpenAIChatClient
from .prompts import PromptLibrary
from .rate_limiter import RateLimiter
from .transform import AnthropicTransformClient, OpenAITransformClient, TransformClient

__all__ = [
    "AnthropicMessagesClient",
    "AnthropicTransformClient",
    "OpenAIChatClient",
    "OpenAITransformClient",
    "PromptLibrary",
    "RateLimiter",
    "TransformClient",
]
