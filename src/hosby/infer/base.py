"""Schema inference port and strategy factory."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from hosby.auth.store import CredentialStore
from hosby.config import HosbyConfig
from hosby.logging_config import LogConfig
from hosby.scan.reducer import ContentReducer
from hosby.scan.selector import FileSelector, SelectionLimits
from hosby.schema.models import SchemaDocument


class SchemaInferencer(Protocol):
    """Anything that turns a project directory into a raw schema document."""

    def infer(self, path: Path) -> SchemaDocument:
        """Return ``{"tables": {...}}`` inferred from the project under *path*."""
        ...


def make_inferencer(
    use_ai: bool,
    config: HosbyConfig,
    store: CredentialStore,
    *,
    provider: str | None = None,
    api_key: str | None = None,
    timeout: float | None = None,
    log_config: LogConfig | None = None,
) -> SchemaInferencer:
    """Build the AI or structural inferencer from configuration.

    Raises:
        ProviderNotConfiguredError: ``use_ai`` is set but no provider or key resolves.
    """
    scan = config.scan
    if use_ai:
        from hosby.infer.ai import AIInferencer

        return AIInferencer.from_config(
            config.ai,
            store,
            provider=provider,
            api_key=api_key,
            timeout=timeout,
            ignore_patterns=scan.ignore,
            ignored_components=scan.ignored_components,
            log_config=log_config,
        )

    from hosby.infer.structural import StructuralInferencer

    selector = FileSelector(
        limits=SelectionLimits(
            max_file_size=scan.max_file_size,
            max_files=scan.max_files,
            max_total_size=scan.max_total_size,
        ),
        reducer=ContentReducer(
            include_comments=scan.include_comments,
            include_imports=scan.include_imports,
            ignored_components=scan.ignored_components,
            log_config=log_config,
        ),
        ignore_patterns=scan.ignore,
        ignored_components=scan.ignored_components,
        log_config=log_config,
    )
    return StructuralInferencer(selector=selector, log_config=log_config)
