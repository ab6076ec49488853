"""Configuration model and loaders for mdtranslate.

Responsibilities:
- Define runtime configuration as a typed dataclass with documented defaults.
- Provide deterministic precedence resolution for provider/model/API-key settings.
- Provide loader entry points for file- and environment-based configuration.

Key types:
- `TranslateConfig`: normalized runtime settings for a translation run.
- `ProviderRuntimeConfig`: resolved provider/model runtime values.
- `RuntimeConfigSources`: optional value sources for precedence resolution.
- `ConfigLoader`: static construction helpers for `TranslateConfig`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import os
from pathlib import Path
from typing import Any, Mapping

import yaml

from .parsing import (
    normalize_optional_string,
    parse_non_negative_float,
    parse_positive_int,
)

DEFAULT_MODELS: Mapping[str, str] = {
    "openai": "gpt-4o",
    "anthropic": "claude-3-5-sonnet-20241022",
}
API_KEY_ENV_KEYS: Mapping[str, str] = {
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
}
BASE_URL_ENV_KEYS: Mapping[str, str] = {
    "openai": "OPENAI_BASE_URL",
    "anthropic": "ANTHROPIC_BASE_URL",
}
SUPPORTED_PROVIDER_IDS = frozenset(DEFAULT_MODELS)

_DEFAULT_LANGUAGE = "zh-CN"
_DEFAULT_OUTPUT_DIR = Path("docs-translated")
_DEFAULT_CACHE_DIR = Path(".translation-cache")
_DEFAULT_MANIFEST_NAME = "toc.json"


@dataclass(frozen=True, slots=True)
class RuntimeConfigSources:
    """Source mappings used for deterministic runtime value precedence.

    Attributes:
        cli: Values explicitly provided by CLI arguments.
        secure: Values loaded from secure local credential storage.
        env: Values loaded from environment variables.
    """

    cli: Mapping[str, str] = field(default_factory=dict)
    secure: Mapping[str, str] = field(default_factory=dict)
    env: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ProviderRuntimeConfig:
    """Resolved provider settings for one run.

    Attributes:
        provider: Provider identifier (`openai` or `anthropic`).
        model: Model identifier.
        base_url: Optional API base URL override for compatible endpoints.
        api_key: Optional provider API key (never persisted in artifacts).
    """

    provider: str
    model: str
    base_url: str | None = None
    api_key: str | None = None

    def as_report_metadata(self) -> dict[str, str]:
        """Return non-secret runtime metadata safe to persist in the run report."""

        return {
            "provider": self.provider,
            "model": self.model,
            "base_url": self.base_url or "default",
        }


@dataclass(slots=True)
class TranslateConfig:
    """Runtime configuration for one translation run.

    Attributes:
        docs_dir: Directory holding the manifest and source documents.
        output_dir: Directory translated documents are written to.
        cache_dir: Root of the content-addressed translation cache.
        manifest_name: Manifest file name inside `docs_dir`.
        language: Target language identifier passed to the provider.
        provider: Transform provider identifier.
        model: Model identifier, or `None` for the provider default.
        base_url: Optional provider API base URL.
        api_key: Optional provider API key.
        temperature: Sampling temperature for provider calls.
        max_tokens: Maximum output tokens per provider call.
        document_concurrency: Documents translated concurrently.
        chunk_concurrency: Chunks translated concurrently per document.
        document_delay_seconds: Minimum spacing between document dispatches.
        chunk_delay_seconds: Minimum spacing between chunk dispatches of one document.
        max_chunk_chars: Chunk size cap in characters.
        request_timeout_seconds: Timeout for each provider call.
        runtime_sources: Optional runtime source overrides injected by CLI.
    """

    docs_dir: Path
    output_dir: Path = _DEFAULT_OUTPUT_DIR
    cache_dir: Path = _DEFAULT_CACHE_DIR
    manifest_name: str = _DEFAULT_MANIFEST_NAME
    language: str = _DEFAULT_LANGUAGE
    provider: str = "openai"
    model: str | None = None
    base_url: str | None = None
    api_key: str | None = None
    temperature: float = 0.3
    max_tokens: int = 4000
    document_concurrency: int = 3
    chunk_concurrency: int = 2
    document_delay_seconds: float = 0.5
    chunk_delay_seconds: float = 0.2
    max_chunk_chars: int = 3000
    request_timeout_seconds: float = 120.0
    runtime_sources: RuntimeConfigSources = field(default_factory=RuntimeConfigSources)

    @property
    def manifest_path(self) -> Path:
        """Return the manifest path inside the docs directory."""

        return self.docs_dir / self.manifest_name

    def language_cache_dir(self) -> Path:
        """Return the cache root namespaced by target language."""

        return self.cache_dir / self.language

    def validate(self) -> None:
        """Validate runtime configuration values before pipeline execution."""

        self._validate_provider_id(self.provider)
        self._require_non_empty(self.language, "language")
        self._require_non_empty(self.manifest_name, "manifest_name")
        for name in (
            "max_tokens",
            "document_concurrency",
            "chunk_concurrency",
            "max_chunk_chars",
        ):
            if getattr(self, name) <= 0:
                raise ValueError(f"`{name}` must be a positive integer.")
        for name in ("document_delay_seconds", "chunk_delay_seconds", "temperature"):
            if getattr(self, name) < 0:
                raise ValueError(f"`{name}` must be a non-negative number.")
        if self.request_timeout_seconds <= 0:
            raise ValueError("`request_timeout_seconds` must be a positive number.")

    def resolved_provider_runtime(
        self, sources: RuntimeConfigSources | None = None
    ) -> ProviderRuntimeConfig:
        """Resolve provider settings with deterministic source precedence.

        Precedence for each key is:
        `cli` > `secure` > `env` > config field value.
        """

        resolved_sources = sources if sources is not None else self.runtime_sources

        provider = self._resolve_runtime_value(
            key="provider",
            env_keys=("MDTRANSLATE_PROVIDER",),
            default_value=self.provider,
            sources=resolved_sources,
        )
        self._validate_provider_id(provider)
        model = self._resolve_runtime_value(
            key="model",
            env_keys=("MDTRANSLATE_MODEL",),
            default_value=self.model or DEFAULT_MODELS[provider],
            sources=resolved_sources,
        )
        base_url = self._resolve_optional_runtime_value(
            key="base_url",
            env_keys=("MDTRANSLATE_BASE_URL", BASE_URL_ENV_KEYS[provider]),
            default_value=self.base_url,
            sources=resolved_sources,
        )
        api_key = self._resolve_optional_runtime_value(
            key="api_key",
            env_keys=(API_KEY_ENV_KEYS[provider],),
            default_value=self.api_key,
            sources=resolved_sources,
        )
        return ProviderRuntimeConfig(
            provider=provider,
            model=model,
            base_url=base_url,
            api_key=api_key,
        )

    def _resolve_runtime_value(
        self,
        key: str,
        env_keys: tuple[str, ...],
        default_value: str | None,
        sources: RuntimeConfigSources,
    ) -> str:
        """Resolve a required runtime value from sources in precedence order."""

        value = self._resolve_optional_runtime_value(key, env_keys, default_value, sources)
        if value is None:
            raise ValueError(
                f"`{key}` could not be resolved from CLI, secure storage, env, or defaults."
            )
        return value

    def _resolve_optional_runtime_value(
        self,
        key: str,
        env_keys: tuple[str, ...],
        default_value: str | None,
        sources: RuntimeConfigSources,
    ) -> str | None:
        """Resolve an optional runtime value from sources in precedence order."""

        cli_value = self._normalized_lookup(sources.cli, key)
        if cli_value is not None:
            return cli_value

        secure_value = self._normalized_lookup(sources.secure, key)
        if secure_value is not None:
            return secure_value

        for env_key in env_keys:
            env_value = self._normalized_lookup(sources.env, env_key)
            if env_value is not None:
                return env_value

        return normalize_optional_string(default_value)

    @staticmethod
    def _normalized_lookup(mapping: Mapping[str, str], key: str) -> str | None:
        """Return a stripped mapping value for a key or `None` when missing/blank."""

        if key not in mapping:
            return None
        return normalize_optional_string(mapping.get(key))

    @staticmethod
    def _validate_provider_id(provider_id: str) -> None:
        """Validate provider identifiers against supported providers."""

        if provider_id not in SUPPORTED_PROVIDER_IDS:
            supported = ", ".join(sorted(SUPPORTED_PROVIDER_IDS))
            raise ValueError(
                f"Unsupported `provider` value `{provider_id}`; supported: {supported}."
            )

    @staticmethod
    def _require_non_empty(value: str, field_name: str) -> None:
        """Validate that string fields are not empty."""

        if not isinstance(value, str) or not value.strip():
            raise ValueError(f"`{field_name}` must be a non-empty string.")


class ConfigLoader:
    """Factory methods for creating `TranslateConfig` from external sources."""

    _REQUIRED_YAML_KEYS = frozenset({"docs_dir"})
    _PATH_KEYS = ("output_dir", "cache_dir")
    _STRING_KEYS = ("manifest_name", "language", "provider", "model", "base_url", "api_key")
    _INT_KEYS = ("max_tokens", "document_concurrency", "chunk_concurrency", "max_chunk_chars")
    _FLOAT_KEYS = (
        "temperature",
        "document_delay_seconds",
        "chunk_delay_seconds",
        "request_timeout_seconds",
    )
    _SUPPORTED_YAML_KEYS = frozenset(
        {"docs_dir", *_PATH_KEYS, *_STRING_KEYS, *_INT_KEYS, *_FLOAT_KEYS}
    )
    _ENV_KEYS: Mapping[str, str] = {
        "docs_dir": "MDTRANSLATE_DOCS_DIR",
        "output_dir": "MDTRANSLATE_OUTPUT_DIR",
        "cache_dir": "MDTRANSLATE_CACHE_DIR",
        "manifest_name": "MDTRANSLATE_MANIFEST_NAME",
        "language": "MDTRANSLATE_TARGET_LANGUAGE",
        "provider": "MDTRANSLATE_PROVIDER",
        "model": "MDTRANSLATE_MODEL",
        "base_url": "MDTRANSLATE_BASE_URL",
        "temperature": "MDTRANSLATE_TEMPERATURE",
        "max_tokens": "MDTRANSLATE_MAX_TOKENS",
        "document_concurrency": "MDTRANSLATE_CONCURRENT_FILES",
        "chunk_concurrency": "MDTRANSLATE_CONCURRENT_CHUNKS",
        "document_delay_seconds": "MDTRANSLATE_DELAY_BETWEEN_FILES",
        "chunk_delay_seconds": "MDTRANSLATE_DELAY_BETWEEN_CHUNKS",
        "max_chunk_chars": "MDTRANSLATE_MAX_CHUNK_CHARS",
        "request_timeout_seconds": "MDTRANSLATE_REQUEST_TIMEOUT",
    }

    @staticmethod
    def from_yaml(path: Path) -> TranslateConfig:
        """Create a validated config from a YAML file."""

        payload = yaml.safe_load(path.read_text(encoding="utf-8"))
        if payload is None:
            payload = {}
        if not isinstance(payload, Mapping):
            raise ValueError(f"YAML config `{path}` must contain a top-level mapping/object.")

        source_label = f"YAML `{path}`"
        ConfigLoader._validate_yaml_keys(payload, source_label)
        return ConfigLoader._build_config(
            payload,
            lambda key: f"{source_label} field `{key}`",
        )

    @staticmethod
    def from_env(env: Mapping[str, str] | None = None) -> TranslateConfig:
        """Create a validated config from environment variables.

        Provider API keys are resolved at run time from the environment
        through `RuntimeConfigSources.env`, not copied into the config.
        """

        env_map: Mapping[str, str] = os.environ if env is None else env
        payload = {
            key: env_map[env_key]
            for key, env_key in ConfigLoader._ENV_KEYS.items()
            if normalize_optional_string(env_map.get(env_key)) is not None
        }
        if "docs_dir" not in payload:
            raise ValueError(
                f"Environment variable `{ConfigLoader._ENV_KEYS['docs_dir']}` is required."
            )
        config = ConfigLoader._build_config(
            payload,
            lambda key: f"Environment variable `{ConfigLoader._ENV_KEYS[key]}`",
        )
        config.runtime_sources = RuntimeConfigSources(env=dict(env_map))
        return config

    @staticmethod
    def _build_config(payload: Mapping[str, Any], label: Any) -> TranslateConfig:
        """Build a validated config from a normalized mapping payload."""

        docs_dir = normalize_optional_string(payload.get("docs_dir"))
        if docs_dir is None:
            raise ValueError(f"{label('docs_dir')} must be a non-empty path.")

        values: dict[str, Any] = {"docs_dir": Path(docs_dir)}
        for key in ConfigLoader._PATH_KEYS:
            value = normalize_optional_string(payload.get(key))
            if value is not None:
                values[key] = Path(value)
        for key in ConfigLoader._STRING_KEYS:
            value = normalize_optional_string(payload.get(key))
            if value is not None:
                values[key] = value
        for key in ConfigLoader._INT_KEYS:
            if normalize_optional_string(payload.get(key)) is not None:
                values[key] = parse_positive_int(payload[key], label(key))
        for key in ConfigLoader._FLOAT_KEYS:
            if normalize_optional_string(payload.get(key)) is not None:
                values[key] = parse_non_negative_float(payload[key], label(key))

        config = TranslateConfig(**values)
        config.validate()
        return config

    @staticmethod
    def _validate_yaml_keys(payload: Mapping[str, Any], source_label: str) -> None:
        """Validate supported and required YAML keys."""

        unknown = sorted(set(payload).difference(ConfigLoader._SUPPORTED_YAML_KEYS))
        if unknown:
            key_list = ", ".join(str(key) for key in unknown)
            raise ValueError(f"{source_label} includes unsupported key(s): {key_list}.")

        missing = sorted(
            key for key in ConfigLoader._REQUIRED_YAML_KEYS if key not in payload
        )
        if missing:
            key_list = ", ".join(missing)
            raise ValueError(f"{source_label} is missing required key(s): {key_list}.")
