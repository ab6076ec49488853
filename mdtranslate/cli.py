"""Command-line interface for mdtranslate.

Responsibilities:
- Expose user-facing commands for translation runs and manifest inspection.
- Convert CLI arguments into `TranslateConfig` and execute the pipeline.
- Manage provider API keys in secure credential storage.

Key public functions:
- `app`: Typer application instance.
- `main`: invoke the Typer application.
"""

from __future__ import annotations

from dataclasses import replace
import os
from pathlib import Path
from typing import Annotated

from keyring.errors import KeyringError
import typer
import yaml

from .cli_rendering import echo_document_list, echo_run_summary, exit_with_command_error
from .cli_runtime import prompt_hidden_api_key, resolve_provider_runtime_sources
from .config import SUPPORTED_PROVIDER_IDS, ConfigLoader, RuntimeConfigSources, TranslateConfig
from .credentials import create_credential_store
from .errors import PipelineStageError
from .pipeline import TranslationPipeline
from .telemetry.logger import RunLogger

app = typer.Typer(
    name="mdtranslate",
    no_args_is_help=True,
    help="Translate Markdown documentation trees with an LLM provider.",
)


class RunProgressIndicator:
    """Render deterministic per-stage progress lines for long-running commands."""

    _SPINNER_FRAMES = "|/-\\"

    def __init__(self, command_name: str) -> None:
        """Initialize progress indicator metadata for a command invocation."""

        self._command_name = command_name

    def on_stage_start(self, stage_name: str, stage_index: int, stage_total: int) -> None:
        """Print one progress line for a stage start transition."""

        spinner = self._SPINNER_FRAMES[(stage_index - 1) % len(self._SPINNER_FRAMES)]
        typer.echo(
            f"[progress] command={self._command_name} "
            f"{spinner} {stage_index}/{stage_total} stage={stage_name}"
        )


def _load_yaml_config(config_path: Path) -> TranslateConfig:
    """Load a YAML config file and map failures to stage errors."""

    try:
        return ConfigLoader.from_yaml(config_path)
    except FileNotFoundError as exc:
        raise PipelineStageError(
            stage="config",
            detail=f"Config file not found: `{config_path}`.",
            hint="Provide an existing path via `--config <path.yaml>`.",
        ) from exc
    except yaml.YAMLError as exc:
        raise PipelineStageError(
            stage="config",
            detail=f"Failed to parse config file `{config_path}`: {exc}",
            hint="Verify YAML syntax and rerun.",
        ) from exc
    except ValueError as exc:
        raise PipelineStageError(
            stage="config",
            detail=f"Invalid config file `{config_path}`: {exc}",
            hint="Fix config schema/values and rerun.",
        ) from exc


def _load_env_config(docs_dir: Path | None) -> TranslateConfig:
    """Load config from the environment, with `docs_dir` taken from the CLI when given."""

    env = dict(os.environ)
    if docs_dir is not None:
        env["MDTRANSLATE_DOCS_DIR"] = str(docs_dir)
    try:
        return ConfigLoader.from_env(env)
    except ValueError as exc:
        raise PipelineStageError(
            stage="config",
            detail=str(exc),
            hint="Pass `<DOCS_DIR>` or use `--config <path.yaml>` with `docs_dir`.",
        ) from exc


def _resolve_command_base_config(
    config_file: Path | None,
    docs_dir: Path | None,
    overrides: dict[str, object],
) -> TranslateConfig:
    """Resolve effective command config from file/env defaults and explicit CLI overrides."""

    if config_file is not None:
        loaded_config = _load_yaml_config(config_file)
        if docs_dir is not None:
            loaded_config = replace(loaded_config, docs_dir=docs_dir)
    else:
        loaded_config = _load_env_config(docs_dir)

    explicit = {key: value for key, value in overrides.items() if value is not None}
    return replace(loaded_config, **explicit)


def _apply_runtime_sources(
    base_config: TranslateConfig,
    runtime_cli_values: dict[str, str],
    runtime_secure_values: dict[str, str],
) -> TranslateConfig:
    """Attach runtime source mappings while keeping base config defaults intact."""

    return replace(
        base_config,
        runtime_sources=RuntimeConfigSources(
            cli=runtime_cli_values,
            secure=runtime_secure_values,
            env=os.environ,
        ),
    )


def _validate_provider_option(provider: str) -> None:
    """Reject unknown provider identifiers before touching secure storage."""

    if provider not in SUPPORTED_PROVIDER_IDS:
        supported = ", ".join(sorted(SUPPORTED_PROVIDER_IDS))
        raise PipelineStageError(
            stage="credentials",
            detail=f"Unsupported provider `{provider}`.",
            hint=f"Use one of: {supported}.",
        )


@app.command("translate")
def translate_command(
    docs_dir: Annotated[
        Path | None,
        typer.Argument(
            help="Docs directory holding `toc.json`. Required unless provided by config/env.",
        ),
    ] = None,
    out: Annotated[
        Path | None,
        typer.Option("--out", help="Output directory (overrides config value)."),
    ] = None,
    cache_dir: Annotated[
        Path | None,
        typer.Option("--cache-dir", help="Translation cache directory."),
    ] = None,
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to YAML config file with run defaults."),
    ] = None,
    language: Annotated[
        str | None,
        typer.Option("--language", help="Target language, e.g. `zh-CN`."),
    ] = None,
    provider: Annotated[
        str | None,
        typer.Option("--provider", help="Transform provider id (`openai` or `anthropic`)."),
    ] = None,
    model: Annotated[
        str | None,
        typer.Option("--model", help="Model id override."),
    ] = None,
    base_url: Annotated[
        str | None,
        typer.Option("--base-url", help="API base URL for compatible endpoints."),
    ] = None,
    api_key: Annotated[
        str | None,
        typer.Option(
            "--api-key",
            help="Provider API key override. Prefer `--prompt-api-key` to avoid shell history.",
        ),
    ] = None,
    prompt_api_key: Annotated[
        bool,
        typer.Option(
            "--prompt-api-key",
            help="Prompt for API key with hidden input (never echoed).",
        ),
    ] = False,
    store_api_key: Annotated[
        bool,
        typer.Option(
            "--store-api-key/--no-store-api-key",
            help="Persist CLI-entered API key to secure credential storage.",
        ),
    ] = False,
    concurrent_files: Annotated[
        int | None,
        typer.Option("--concurrent-files", min=1, help="Documents translated at once."),
    ] = None,
    concurrent_chunks: Annotated[
        int | None,
        typer.Option("--concurrent-chunks", min=1, help="Chunks translated at once per document."),
    ] = None,
    max_chunk_chars: Annotated[
        int | None,
        typer.Option("--max-chunk-chars", min=1, help="Chunk size cap in characters."),
    ] = None,
    timeout: Annotated[
        float | None,
        typer.Option("--timeout", min=0.001, help="Per-request timeout in seconds."),
    ] = None,
    fail_on_fallback: Annotated[
        bool,
        typer.Option(
            "--fail-on-fallback",
            help="Exit with code 1 when any document fell back or failed.",
        ),
    ] = False,
) -> None:
    """Translate every document listed in the docs manifest."""

    try:
        base_config = _resolve_command_base_config(
            config_file=config_file,
            docs_dir=docs_dir,
            overrides={
                "output_dir": out,
                "cache_dir": cache_dir,
                "language": language,
                "document_concurrency": concurrent_files,
                "chunk_concurrency": concurrent_chunks,
                "max_chunk_chars": max_chunk_chars,
                "request_timeout_seconds": timeout,
            },
        )
        runtime_cli_values, runtime_secure_values = resolve_provider_runtime_sources(
            provider=provider,
            model=model,
            base_url=base_url,
            api_key=api_key,
            prompt_api_key=prompt_api_key,
            store_api_key=store_api_key,
            default_provider=base_config.provider,
            credential_store_factory=create_credential_store,
        )
        config = _apply_runtime_sources(
            base_config=base_config,
            runtime_cli_values=runtime_cli_values,
            runtime_secure_values=runtime_secure_values,
        )
        progress = RunProgressIndicator(command_name="translate")
        pipeline = TranslationPipeline(
            run_logger=RunLogger(),
            stage_progress_callback=progress.on_stage_start,
        )
        summary = pipeline.run(config)
    except Exception as exc:
        exit_with_command_error("translate", exc)

    echo_run_summary(summary)
    if fail_on_fallback and summary.attention_required:
        typer.secho(
            f"{len(summary.attention_required)} document(s) were not translated.",
            fg=typer.colors.YELLOW,
            err=True,
        )
        raise typer.Exit(code=1)


@app.command("list-docs")
def list_docs_command(
    docs_dir: Annotated[Path, typer.Argument(help="Docs directory holding the manifest.")],
    manifest_name: Annotated[
        str,
        typer.Option("--manifest-name", help="Manifest file name inside the docs directory."),
    ] = "toc.json",
) -> None:
    """List manifest documents without translating them."""

    try:
        descriptors = TranslationPipeline(run_logger=RunLogger()).list_documents(
            docs_dir, manifest_name
        )
    except Exception as exc:
        exit_with_command_error("list-docs", exc)

    echo_document_list(descriptors)
    typer.echo(f"Documents: {len(descriptors)}")


@app.command("credentials")
def credentials_command(
    provider: Annotated[
        str,
        typer.Option("--provider", help="Provider whose API key is managed."),
    ] = "openai",
    set_api_key: Annotated[
        bool,
        typer.Option(
            "--set-api-key",
            help="Prompt for API key with hidden input and store it securely.",
        ),
    ] = False,
    clear_api_key: Annotated[
        bool,
        typer.Option(
            "--clear-api-key",
            help="Clear stored API key from secure credential storage.",
        ),
    ] = False,
) -> None:
    """Manage securely stored provider API keys."""

    try:
        _validate_provider_option(provider)
        if set_api_key and clear_api_key:
            raise PipelineStageError(
                stage="credentials",
                detail="`--set-api-key` and `--clear-api-key` cannot be used together.",
                hint="Run one credentials action per command invocation.",
            )
    except PipelineStageError as exc:
        exit_with_command_error("credentials", exc)

    credential_store = create_credential_store()
    if set_api_key:
        prompted_api_key = prompt_hidden_api_key(provider, optional=False)
        if prompted_api_key is None:
            exit_with_command_error(
                "credentials",
                PipelineStageError(
                    stage="credentials",
                    detail="No API key entered.",
                    hint="Provide a non-empty API key when using `--set-api-key`.",
                ),
            )
        try:
            credential_store.set_api_key(provider, prompted_api_key)
        except (KeyringError, RuntimeError) as exc:
            exit_with_command_error(
                "credentials",
                PipelineStageError(
                    stage="credentials",
                    detail=f"Failed to store API key securely: {exc}",
                    hint="Install and configure a keyring backend and retry.",
                ),
            )
        typer.echo(f"{provider} API key stored in secure credential storage.")
        return

    if clear_api_key:
        removed = credential_store.clear_api_key(provider)
        if removed:
            typer.echo(f"Stored {provider} API key cleared from secure credential storage.")
        else:
            typer.echo(f"No stored {provider} API key found in secure credential storage.")
        return

    availability = "available" if credential_store.is_available() else "unavailable"
    status = "present" if credential_store.get_api_key(provider) is not None else "not set"
    typer.echo(f"Secure credential storage: {availability}")
    typer.echo(f"Stored {provider} API key: {status}")


def main() -> None:
    """CLI entrypoint for console scripts."""
    app()


if __name__ == "__main__":
    main()
