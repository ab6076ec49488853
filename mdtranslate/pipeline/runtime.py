"""Runtime configuration helpers for the translation pipeline.

Responsibilities:
- Validate pipeline configuration before execution.
- Resolve provider runtime values with precedence rules.
"""

from __future__ import annotations

import os

from ..config import ProviderRuntimeConfig, RuntimeConfigSources, TranslateConfig
from ..errors import PipelineStageError


class PipelineRuntimeMixin:
    """Provide runtime/config helper methods for pipeline orchestration."""

    def _validate_config(self, config: TranslateConfig) -> None:
        """Validate top-level configuration and map failures to stage-aware error."""

        try:
            config.validate()
        except ValueError as exc:
            raise PipelineStageError(
                stage="config",
                detail=str(exc),
                hint="Update the translation options and rerun the command.",
            ) from exc
        if not config.docs_dir.is_dir():
            raise PipelineStageError(
                stage="config",
                detail=f"Docs directory not found: `{config.docs_dir}`.",
                hint="Pass an existing directory containing the manifest and documents.",
            )

    def _resolve_runtime_config(self, config: TranslateConfig) -> ProviderRuntimeConfig:
        """Resolve runtime provider settings with deterministic source precedence."""

        try:
            env_source = config.runtime_sources.env or os.environ
            runtime_sources = RuntimeConfigSources(
                cli=config.runtime_sources.cli,
                secure=config.runtime_sources.secure,
                env=env_source,
            )
            return config.resolved_provider_runtime(runtime_sources)
        except ValueError as exc:
            raise PipelineStageError(
                stage="config",
                detail=str(exc),
                hint=(
                    "Set a supported provider ID and a non-empty model in CLI, "
                    "secure storage, environment, or config defaults."
                ),
            ) from exc
