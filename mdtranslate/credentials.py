"""Secure credential storage helpers for the mdtranslate CLI.

Responsibilities:
- Persist provider API keys in an OS-backed secure credential store.
- Keep one keyring account per provider so keys never cross providers.
- Avoid logging or exposing secret values in diagnostics.

Key types:
- `CredentialStore`: interface for provider credential persistence.
- `KeyringCredentialStore`: keyring-backed secure credential storage.
"""

from __future__ import annotations

from dataclasses import dataclass

import keyring
from keyring.backends import fail
from keyring.errors import KeyringError, PasswordDeleteError

_DEFAULT_SERVICE_NAME = "mdtranslate"


def account_name_for(provider_id: str) -> str:
    """Return the keyring account name that stores a provider's API key."""

    return f"{provider_id}_api_key"


class CredentialStore:
    """Interface for secure provider credential operations."""

    def is_available(self) -> bool:
        """Return whether secure credential operations are available."""

        raise NotImplementedError

    def get_api_key(self, provider_id: str) -> str | None:
        """Load a provider API key from secure storage, when available."""

        raise NotImplementedError

    def set_api_key(self, provider_id: str, api_key: str) -> None:
        """Persist a provider API key in secure storage."""

        raise NotImplementedError

    def clear_api_key(self, provider_id: str) -> bool:
        """Delete a stored provider API key and return whether one existed."""

        raise NotImplementedError


@dataclass(slots=True)
class KeyringCredentialStore(CredentialStore):
    """Secure credential store backed by the `keyring` package."""

    service_name: str = _DEFAULT_SERVICE_NAME

    def is_available(self) -> bool:
        """Return `True` when a usable keyring backend is configured."""

        return not isinstance(keyring.get_keyring(), fail.Keyring)

    def get_api_key(self, provider_id: str) -> str | None:
        """Get a normalized API key, returning `None` when missing or unreadable."""

        if not self.is_available():
            return None
        try:
            value = keyring.get_password(self.service_name, account_name_for(provider_id))
        except KeyringError:
            return None
        if value is None:
            return None
        normalized = value.strip()
        if not normalized:
            return None
        return normalized

    def set_api_key(self, provider_id: str, api_key: str) -> None:
        """Persist a normalized API key or raise when no backend is usable."""

        if not self.is_available():
            raise RuntimeError(
                "Secure credential storage is unavailable because no keyring backend "
                "is configured for this environment."
            )

        normalized = api_key.strip()
        if not normalized:
            raise ValueError("API key must be a non-empty string.")
        keyring.set_password(self.service_name, account_name_for(provider_id), normalized)

    def clear_api_key(self, provider_id: str) -> bool:
        """Remove a stored API key and report whether one was present."""

        if self.get_api_key(provider_id) is None:
            return False
        try:
            keyring.delete_password(self.service_name, account_name_for(provider_id))
        except PasswordDeleteError:
            return False
        return True


def create_credential_store() -> CredentialStore:
    """Create the default secure credential store implementation."""

    return KeyringCredentialStore()
