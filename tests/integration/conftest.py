"""Integration-test fixtures for deterministic provider and credential behavior."""

from __future__ import annotations

import threading

import pytest

from mdtranslate.errors import ServiceError
from mdtranslate.llm.http_client import OpenAIChatClient

_SOURCE_MARKER = "Source:\n"


class InMemoryCredentialStore:
    """Credential store stand-in that never touches the OS keyring."""

    def __init__(self) -> None:
        self.keys: dict[str, str] = {}

    def is_available(self) -> bool:
        return True

    def get_api_key(self, provider_id: str) -> str | None:
        return self.keys.get(provider_id)

    def set_api_key(self, provider_id: str, api_key: str) -> None:
        self.keys[provider_id] = api_key.strip()

    def clear_api_key(self, provider_id: str) -> bool:
        return self.keys.pop(provider_id, None) is not None


class MockedChatCompletions:
    """Record mocked chat calls and optionally fail on a trigger substring."""

    def __init__(self) -> None:
        self.sources: list[str] = []
        self.fail_on: str | None = None
        self._lock = threading.Lock()

    def __call__(self, **kwargs: object) -> str:
        """Return the tagged source text; installed unbound on the client class."""

        user_prompt = str(kwargs["user_prompt"])
        source = user_prompt.split(_SOURCE_MARKER, 1)[1]
        with self._lock:
            self.sources.append(source)
        if self.fail_on is not None and self.fail_on in source:
            raise ServiceError("OpenAI request timed out.", failure_kind="timeout")
        return f"[zh] {source}"


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove host configuration and disable pacing delays for fast runs."""

    for name in (
        "MDTRANSLATE_DOCS_DIR",
        "MDTRANSLATE_OUTPUT_DIR",
        "MDTRANSLATE_CACHE_DIR",
        "MDTRANSLATE_PROVIDER",
        "MDTRANSLATE_MODEL",
        "MDTRANSLATE_BASE_URL",
        "OPENAI_BASE_URL",
        "ANTHROPIC_API_KEY",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("OPENAI_API_KEY", "sk-integration-test")
    monkeypatch.setenv("MDTRANSLATE_DELAY_BETWEEN_FILES", "0")
    monkeypatch.setenv("MDTRANSLATE_DELAY_BETWEEN_CHUNKS", "0")


@pytest.fixture(autouse=True)
def credential_store(monkeypatch: pytest.MonkeyPatch) -> InMemoryCredentialStore:
    """Route CLI credential access to an in-memory store."""

    store = InMemoryCredentialStore()
    monkeypatch.setattr("mdtranslate.cli.create_credential_store", lambda: store)
    return store


@pytest.fixture(autouse=True)
def mocked_chat(monkeypatch: pytest.MonkeyPatch) -> MockedChatCompletions:
    """Mock OpenAI chat completions to avoid network/key requirements."""

    mock = MockedChatCompletions()
    monkeypatch.setattr(OpenAIChatClient, "chat_completion_text", mock)
    return mock
