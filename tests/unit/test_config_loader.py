"""Unit tests for YAML/environment configuration loader behavior."""

from __future__ import annotations

from pathlib import Path

import pytest

from mdtranslate.config import (
    ConfigLoader,
    ProviderRuntimeConfig,
    RuntimeConfigSources,
    TranslateConfig,
)


def test_config_loader_from_yaml_loads_valid_config_and_normalizes_values(
    tmp_path: Path,
) -> None:
    """YAML loader should parse valid payloads and normalize typed/blank values."""

    config_path = tmp_path / "mdtranslate.yml"
    config_path.write_text(
        """
docs_dir: " docs "
output_dir: " docs-zh "
cache_dir: " .cache "
language: " ja "
provider: " anthropic "
model: "  "
temperature: 0
max_tokens: " 2000 "
document_concurrency: 5
chunk_concurrency: "4"
document_delay_seconds: 0
chunk_delay_seconds: " 0.1 "
max_chunk_chars: 1500
request_timeout_seconds: 30
""".strip(),
        encoding="utf-8",
    )

    config = ConfigLoader.from_yaml(config_path)

    assert config.docs_dir == Path("docs")
    assert config.output_dir == Path("docs-zh")
    assert config.cache_dir == Path(".cache")
    assert config.language == "ja"
    assert config.provider == "anthropic"
    assert config.model is None
    assert config.temperature == 0.0
    assert config.max_tokens == 2000
    assert config.document_concurrency == 5
    assert config.chunk_concurrency == 4
    assert config.document_delay_seconds == 0.0
    assert config.chunk_delay_seconds == pytest.approx(0.1)
    assert config.max_chunk_chars == 1500
    assert config.request_timeout_seconds == 30.0
    assert config.manifest_path == Path("docs") / "toc.json"
    assert config.language_cache_dir() == Path(".cache") / "ja"


def test_config_loader_from_yaml_applies_defaults(tmp_path: Path) -> None:
    config_path = tmp_path / "minimal.yml"
    config_path.write_text("docs_dir: docs\n", encoding="utf-8")

    config = ConfigLoader.from_yaml(config_path)

    assert config.output_dir == Path("docs-translated")
    assert config.cache_dir == Path(".translation-cache")
    assert config.language == "zh-CN"
    assert config.provider == "openai"
    assert (config.document_concurrency, config.chunk_concurrency) == (3, 2)
    assert (config.document_delay_seconds, config.chunk_delay_seconds) == (0.5, 0.2)
    assert config.max_chunk_chars == 3000


def test_config_loader_from_yaml_rejects_missing_and_unknown_keys(tmp_path: Path) -> None:
    """YAML loader should fail clearly on missing required or unknown fields."""

    missing_path = tmp_path / "missing.yml"
    missing_path.write_text("output_dir: out\n", encoding="utf-8")

    with pytest.raises(ValueError, match=r"missing required key\(s\): docs_dir"):
        ConfigLoader.from_yaml(missing_path)

    unknown_path = tmp_path / "unknown.yml"
    unknown_path.write_text("docs_dir: docs\nconcurrency: 3\n", encoding="utf-8")

    with pytest.raises(ValueError, match=r"unsupported key\(s\): concurrency"):
        ConfigLoader.from_yaml(unknown_path)


@pytest.mark.parametrize(
    ("payload", "message"),
    [
        ("docs_dir: docs\nchunk_concurrency: 0\n", "must be a positive integer"),
        ("docs_dir: docs\nmax_chunk_chars: many\n", "must be a positive integer"),
        ("docs_dir: docs\nchunk_delay_seconds: -1\n", "must be a non-negative number"),
        ("docs_dir: docs\nprovider: mystery\n", "Unsupported `provider` value `mystery`"),
        ("docs_dir: docs\nrequest_timeout_seconds: 0\n", "request_timeout_seconds"),
        ("- docs\n", "top-level mapping"),
    ],
)
def test_config_loader_from_yaml_rejects_invalid_values(
    tmp_path: Path, payload: str, message: str
) -> None:
    config_path = tmp_path / "invalid.yml"
    config_path.write_text(payload, encoding="utf-8")

    with pytest.raises(ValueError, match=message):
        ConfigLoader.from_yaml(config_path)


def test_config_loader_from_env_reads_documented_variables() -> None:
    config = ConfigLoader.from_env(
        {
            "MDTRANSLATE_DOCS_DIR": "site/docs",
            "MDTRANSLATE_OUTPUT_DIR": "site/docs-zh",
            "MDTRANSLATE_TARGET_LANGUAGE": "zh-TW",
            "MDTRANSLATE_CONCURRENT_FILES": "6",
            "MDTRANSLATE_CONCURRENT_CHUNKS": "3",
            "MDTRANSLATE_DELAY_BETWEEN_FILES": "1.5",
            "MDTRANSLATE_DELAY_BETWEEN_CHUNKS": "0",
            "MDTRANSLATE_MAX_CHUNK_CHARS": "800",
            "MDTRANSLATE_REQUEST_TIMEOUT": "45",
            "MDTRANSLATE_MODEL": "",
            "OPENAI_API_KEY": "env-key",
        }
    )

    assert config.docs_dir == Path("site/docs")
    assert config.output_dir == Path("site/docs-zh")
    assert config.language == "zh-TW"
    assert (config.document_concurrency, config.chunk_concurrency) == (6, 3)
    assert config.document_delay_seconds == 1.5
    assert config.chunk_delay_seconds == 0.0
    assert config.max_chunk_chars == 800
    assert config.request_timeout_seconds == 45.0
    assert config.model is None
    assert config.api_key is None
    assert config.resolved_provider_runtime().api_key == "env-key"


def test_config_loader_from_env_requires_docs_dir() -> None:
    with pytest.raises(ValueError, match="MDTRANSLATE_DOCS_DIR"):
        ConfigLoader.from_env({})


def test_config_loader_from_env_names_offending_variable() -> None:
    with pytest.raises(ValueError, match="MDTRANSLATE_CONCURRENT_FILES"):
        ConfigLoader.from_env(
            {"MDTRANSLATE_DOCS_DIR": "docs", "MDTRANSLATE_CONCURRENT_FILES": "zero"}
        )


def test_resolved_provider_runtime_precedence_cli_secure_env_default() -> None:
    """CLI values beat secure storage, which beats env, which beats config fields."""

    config = TranslateConfig(docs_dir=Path("docs"), model="config-model", api_key="config-key")

    runtime = config.resolved_provider_runtime(
        RuntimeConfigSources(
            cli={"model": "cli-model"},
            secure={"api_key": "secure-key", "model": "secure-model"},
            env={
                "OPENAI_API_KEY": "env-key",
                "MDTRANSLATE_BASE_URL": "https://proxy.example.test/v1",
            },
        )
    )

    assert runtime == ProviderRuntimeConfig(
        provider="openai",
        model="cli-model",
        base_url="https://proxy.example.test/v1",
        api_key="secure-key",
    )


def test_resolved_provider_runtime_uses_provider_defaults() -> None:
    config = TranslateConfig(docs_dir=Path("docs"))

    runtime = config.resolved_provider_runtime(
        RuntimeConfigSources(
            cli={"provider": "anthropic"},
            env={"ANTHROPIC_API_KEY": "a-key", "OPENAI_API_KEY": "o-key"},
        )
    )

    assert runtime.provider == "anthropic"
    assert runtime.model == "claude-3-5-sonnet-20241022"
    assert runtime.api_key == "a-key"
    assert runtime.base_url is None
    assert runtime.as_report_metadata() == {
        "provider": "anthropic",
        "model": "claude-3-5-sonnet-20241022",
        "base_url": "default",
    }


def test_resolved_provider_runtime_rejects_unknown_provider() -> None:
    config = TranslateConfig(docs_dir=Path("docs"))

    with pytest.raises(ValueError, match="Unsupported `provider` value `local`"):
        config.resolved_provider_runtime(RuntimeConfigSources(cli={"provider": "local"}))

