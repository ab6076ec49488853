"""Provider HTTP client utilities for translation calls.

Responsibilities:
- Send minimal chat requests to OpenAI-compatible and Anthropic-compatible REST APIs.
- Normalize response extraction into plain text.
- Raise `ServiceError` with a failure classification for every unusable outcome.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
import json
import re
import socket
from typing import Any

import requests

from ..errors import ServiceError


class _ProviderHTTPClient(ABC):
    """Shared HTTP settings and error mapping used by provider-specific clients."""

    _MAX_PROVIDER_MESSAGE_CHARS = 180
    provider_label = "provider"
    provider_id = "provider"

    def __init__(
        self,
        *,
        api_key: str | None,
        base_url: str,
        timeout_seconds: float = 120.0,
    ) -> None:
        """Initialize provider HTTP client settings."""

        self.api_key = api_key.strip() if isinstance(api_key, str) else ""
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds

    def _require_api_key(self) -> None:
        """Require API key presence before issuing provider requests."""

        if not self.api_key:
            raise ServiceError(
                f"Missing {self.provider_label} API key.",
                failure_kind="missing_api_key",
                provider=self.provider_id,
            )

    @abstractmethod
    def _auth_headers(self) -> dict[str, str]:
        """Return provider-specific authentication headers."""

    def _post_json(self, *, endpoint_path: str, payload: dict[str, Any]) -> Any:
        """POST a JSON payload and return the decoded JSON response."""

        endpoint = f"{self.base_url}{endpoint_path}"
        headers = {"Content-Type": "application/json", **self._auth_headers()}
        try:
            response = requests.post(
                endpoint,
                headers=headers,
                json=payload,
                timeout=self.timeout_seconds,
            )
            response.raise_for_status()
            response_bytes = bytes(response.content)
        except requests.HTTPError as exc:
            raise self._http_error_to_service_error(exc) from exc
        except requests.RequestException as exc:
            failure_kind = self._classify_transport_failure(exc)
            if failure_kind == "timeout":
                detail = f"{self.provider_label} request timed out."
            else:
                detail = (
                    f"{self.provider_label} request transport error: "
                    f"{self._short_message(self._redact_sensitive_tokens(str(exc)))}"
                )
            raise ServiceError(
                detail,
                failure_kind=failure_kind,
                provider=self.provider_id,
            ) from exc
        except TimeoutError as exc:
            raise ServiceError(
                f"{self.provider_label} request timed out.",
                failure_kind="timeout",
                provider=self.provider_id,
            ) from exc

        if not response_bytes:
            raise self._malformed(f"{self.provider_label} response is empty.", "empty_response")
        try:
            return json.loads(response_bytes.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise self._malformed(f"{self.provider_label} returned invalid JSON payload.") from exc

    def _malformed(self, message: str, failure_kind: str = "malformed_response") -> ServiceError:
        """Build a service error for unusable response payloads."""

        return ServiceError(message, failure_kind=failure_kind, provider=self.provider_id)

    def _require_text(self, text: str) -> str:
        """Return stripped response text, rejecting blank results."""

        normalized = text.strip()
        if not normalized:
            raise self._malformed(
                f"{self.provider_label} response message content is empty.",
                "empty_response",
            )
        return normalized

    @staticmethod
    def _decode_error_body(exc: requests.HTTPError) -> str:
        """Decode an HTTP error body into a best-effort UTF-8 payload string."""

        response = exc.response
        if response is None:
            return ""
        return bytes(response.content).decode("utf-8", errors="replace").strip()

    @classmethod
    def _redact_sensitive_tokens(cls, text: str) -> str:
        """Redact API-key-like tokens from provider error content."""

        redacted = re.sub(r"\bsk-[A-Za-z0-9_-]{8,}\b", "[redacted-key]", text)
        redacted = re.sub(
            r"(?i)bearer\s+[A-Za-z0-9._-]{12,}",
            "Bearer [redacted-token]",
            redacted,
        )
        return redacted

    @classmethod
    def _short_message(cls, text: str) -> str:
        """Normalize and cap user-facing provider message length."""

        compact = " ".join(text.split())
        if len(compact) <= cls._MAX_PROVIDER_MESSAGE_CHARS:
            return compact
        return f"{compact[: cls._MAX_PROVIDER_MESSAGE_CHARS - 1]}..."

    @classmethod
    def _extract_provider_message(cls, body: str) -> tuple[str, str | None]:
        """Extract a concise provider-facing message and optional provider error code."""

        if not body:
            return "", None

        try:
            payload = json.loads(body)
        except json.JSONDecodeError:
            return cls._short_message(cls._redact_sensitive_tokens(body)), None

        provider_code: str | None = None
        message: str | None = None
        if isinstance(payload, dict):
            error_payload = payload.get("error")
            if isinstance(error_payload, dict):
                for code_key in ("code", "type"):
                    code_value = error_payload.get(code_key)
                    if isinstance(code_value, str) and code_value.strip():
                        provider_code = code_value.strip()
                        break
                message_value = error_payload.get("message")
                if isinstance(message_value, str) and message_value.strip():
                    message = message_value.strip()

        if message is None:
            message = body

        return cls._short_message(cls._redact_sensitive_tokens(message)), provider_code

    @staticmethod
    def _classify_http_failure(
        status_code: int,
        provider_message: str,
        provider_code: str | None,
    ) -> str:
        """Classify HTTP errors into deterministic diagnostic kinds."""

        message_lower = provider_message.lower()
        normalized_code = provider_code.lower() if provider_code is not None else ""

        if (
            status_code == 401
            or normalized_code == "authentication_error"
            or "api key" in message_lower
        ):
            return "invalid_api_key"
        if normalized_code == "insufficient_quota" or (
            status_code == 429 and "quota" in message_lower
        ):
            return "insufficient_quota"
        if status_code == 429 or normalized_code == "rate_limit_error":
            return "rate_limited"
        if normalized_code in {"model_not_found", "not_found_error"} or (
            "model" in message_lower
            and any(phrase in message_lower for phrase in ("not found", "does not exist", "invalid"))
        ):
            return "invalid_model"
        if status_code in {408, 504} or "timeout" in message_lower or "timed out" in message_lower:
            return "timeout"
        return "http_error"

    @staticmethod
    def _classify_transport_failure(reason: object) -> str:
        """Classify network-layer failures into deterministic diagnostic kinds."""

        if isinstance(reason, TimeoutError | socket.timeout | requests.Timeout):
            return "timeout"
        return "transport"

    def _http_error_to_service_error(self, exc: requests.HTTPError) -> ServiceError:
        """Convert HTTP errors into normalized service errors with metadata."""

        status_code = exc.response.status_code if exc.response is not None else 0
        body = self._decode_error_body(exc)
        provider_message, provider_code = self._extract_provider_message(body)
        failure_kind = self._classify_http_failure(status_code, provider_message, provider_code)

        headline = {
            "invalid_api_key": f"{self.provider_label} authentication failed",
            "insufficient_quota": f"{self.provider_label} quota is insufficient for this request",
            "rate_limited": f"{self.provider_label} rate limit exceeded",
            "invalid_model": f"{self.provider_label} rejected the selected model",
            "timeout": f"{self.provider_label} request timed out",
        }.get(failure_kind, f"{self.provider_label} request failed")

        if provider_message:
            detail = f"{headline} (HTTP {status_code}): {provider_message}"
        else:
            detail = f"{headline} (HTTP {status_code})."

        return ServiceError(
            detail,
            failure_kind=failure_kind,
            provider=self.provider_id,
            status_code=status_code,
            provider_code=provider_code,
        )


class OpenAIChatClient(_ProviderHTTPClient):
    """Minimal requests-based client for OpenAI-compatible chat-completions APIs."""

    provider_label = "OpenAI"
    provider_id = "openai"
    DEFAULT_BASE_URL = "https://api.openai.com/v1"

    def __init__(
        self,
        *,
        api_key: str | None,
        base_url: str | None = None,
        timeout_seconds: float = 120.0,
    ) -> None:
        super().__init__(
            api_key=api_key,
            base_url=base_url or self.DEFAULT_BASE_URL,
            timeout_seconds=timeout_seconds,
        )

    def _auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.api_key}"}

    def chat_completion_text(
        self,
        *,
        model: str,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.3,
        max_tokens: int | None = None,
    ) -> str:
        """Return the first assistant text response from a chat-completions request."""

        self._require_api_key()

        payload: dict[str, Any] = {
            "model": model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": temperature,
        }
        if max_tokens is not None:
            payload["max_tokens"] = max_tokens
        response_payload = self._post_json(endpoint_path="/chat/completions", payload=payload)
        return self._extract_message_text(response_payload)

    def _extract_message_text(self, payload: Any) -> str:
        """Extract first assistant message text from a chat-completions payload."""

        if not isinstance(payload, dict):
            raise self._malformed("OpenAI response is not a JSON object.")
        choices = payload.get("choices")
        if not isinstance(choices, list) or not choices:
            raise self._malformed("OpenAI response missing non-empty `choices` list.")

        first_choice = choices[0]
        if not isinstance(first_choice, dict):
            raise self._malformed("OpenAI response `choices[0]` is malformed.")

        message = first_choice.get("message")
        if not isinstance(message, dict):
            raise self._malformed("OpenAI response missing `choices[0].message` object.")

        return self._require_text(self._message_content_to_text(message.get("content")))

    @staticmethod
    def _message_content_to_text(content: Any) -> str:
        """Convert OpenAI message content variants into a plain text string."""

        if isinstance(content, str):
            return content
        if isinstance(content, list):
            parts: list[str] = []
            for item in content:
                if not isinstance(item, dict):
                    continue
                if item.get("type") == "text" and isinstance(item.get("text"), str):
                    parts.append(item["text"])
            return "".join(parts)
        return ""


class AnthropicMessagesClient(_ProviderHTTPClient):
    """Minimal requests-based client for Anthropic-compatible messages APIs."""

    provider_label = "Anthropic"
    provider_id = "anthropic"
    DEFAULT_BASE_URL = "https://api.anthropic.com/v1"
    API_VERSION = "2023-06-01"

    def __init__(
        self,
        *,
        api_key: str | None,
        base_url: str | None = None,
        timeout_seconds: float = 120.0,
    ) -> None:
        super().__init__(
            api_key=api_key,
            base_url=base_url or self.DEFAULT_BASE_URL,
            timeout_seconds=timeout_seconds,
        )

    def _auth_headers(self) -> dict[str, str]:
        return {"x-api-key": self.api_key, "anthropic-version": self.API_VERSION}

    def message_text(
        self,
        *,
        model: str,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.3,
        max_tokens: int = 4096,
    ) -> str:
        """Return concatenated text blocks from a messages API response."""

        self._require_api_key()

        payload = {
            "model": model,
            "max_tokens": max_tokens,
            "system": system_prompt,
            "messages": [{"role": "user", "content": user_prompt}],
            "temperature": temperature,
        }
        response_payload = self._post_json(endpoint_path="/messages", payload=payload)
        return self._extract_content_text(response_payload)

    def _extract_content_text(self, payload: Any) -> str:
        """Extract text blocks from a messages API payload."""

        if not isinstance(payload, dict):
            raise self._malformed("Anthropic response is not a JSON object.")
        content = payload.get("content")
        if not isinstance(content, list) or not content:
            raise self._malformed("Anthropic response missing non-empty `content` list.")

        parts = [
            block["text"]
            for block in content
            if isinstance(block, dict)
            and block.get("type") == "text"
            and isinstance(block.get("text"), str)
        ]
        return self._require_text("".join(parts))
