"""CLI provider runtime resolution helpers.

This module isolates API-key prompt flow, runtime source assembly,
and secure API-key persistence from the command wiring layer.
"""

from __future__ import annotations

from typing import Callable, Protocol

from keyring.errors import KeyringError
import typer

from .credentials import create_credential_store
from .errors import PipelineStageError
from .parsing import normalize_optional_string


class CredentialStoreProtocol(Protocol):
    """Protocol for secure credential store operations used by CLI runtime resolution."""

    def get_api_key(self, provider_id: str) -> str | None:
        """Return the stored API key for a provider, if available."""

    def set_api_key(self, provider_id: str, api_key: str) -> None:
        """Persist a provider API key in secure storage."""


def _set_runtime_cli_value(
    runtime_cli_values: dict[str, str],
    key: str,
    value: str | None,
) -> None:
    """Set a normalized runtime CLI value when user input is present."""

    normalized = normalize_optional_string(value)
    if normalized is not None:
        runtime_cli_values[key] = normalized


def prompt_hidden_api_key(provider_id: str, *, optional: bool = True) -> str | None:
    """Prompt for a provider API key with hidden input."""

    suffix = "hidden; leave blank to skip" if optional else "hidden input"
    return normalize_optional_string(
        typer.prompt(
            f"{provider_id} API key ({suffix})",
            default="",
            hide_input=True,
            show_default=False,
        )
    )


def resolve_provider_runtime_sources(
    provider: str | None,
    model: str | None,
    base_url: str | None,
    api_key: str | None,
    prompt_api_key: bool,
    store_api_key: bool,
    default_provider: str = "openai",
    credential_store_factory: Callable[[], CredentialStoreProtocol] = create_credential_store,
) -> tuple[dict[str, str], dict[str, str]]:
    """Resolve CLI and secure runtime source mappings for provider configuration.

    Args:
        provider: Provider passed on the command line, if any.
        model: Model passed on the command line, if any.
        base_url: Base URL passed on the command line, if any.
        api_key: API key passed on the command line, if any.
        prompt_api_key: Whether to prompt for the API key with hidden input.
        store_api_key: Whether a key entered in this run is persisted to keyring.
        default_provider: Provider used to select the keyring account when
            `provider` is not given.
        credential_store_factory: Factory for the secure credential store.

    Returns:
        `(cli_values, secure_values)` mappings for `RuntimeConfigSources`.
    """

    runtime_cli_values: dict[str, str] = {}
    _set_runtime_cli_value(runtime_cli_values, "provider", provider)
    _set_runtime_cli_value(runtime_cli_values, "model", model)
    _set_runtime_cli_value(runtime_cli_values, "base_url", base_url)
    _set_runtime_cli_value(runtime_cli_values, "api_key", api_key)
    provider_id = runtime_cli_values.get("provider", default_provider)

    api_key_entered_in_run = "api_key" in runtime_cli_values
    if prompt_api_key and "api_key" not in runtime_cli_values:
        prompted_api_key = prompt_hidden_api_key(provider_id)
        if prompted_api_key is not None:
            runtime_cli_values["api_key"] = prompted_api_key
            api_key_entered_in_run = True

    credential_store = credential_store_factory()
    runtime_secure_values: dict[str, str] = {}
    stored_api_key = credential_store.get_api_key(provider_id)
    if stored_api_key is not None:
        runtime_secure_values["api_key"] = stored_api_key

    if api_key_entered_in_run and store_api_key:
        try:
            credential_store.set_api_key(provider_id, runtime_cli_values["api_key"])
            typer.echo("Stored API key in secure credential storage.")
        except (KeyringError, RuntimeError) as exc:
            raise PipelineStageError(
                stage="credentials",
                detail=f"Failed to store API key securely: {exc}",
                hint=(
                    "Install and configure a keyring backend, or rerun with "
                    "`--no-store-api-key` for one-off usage."
                ),
            ) from exc

    return runtime_cli_values, runtime_secure_values
