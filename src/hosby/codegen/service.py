"""CRUD service generation for one schema table.

    table name ─▶ validate against hosby.schema.json
               ─▶ template render  |  AI completion (timeout falls back to template)
               ─▶ src/services/<table>.service.ts
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from hosby.codegen.templates import SERVICE_SYSTEM_PROMPT, build_service_prompt, render_service
from hosby.codegen.writer import service_path, services_dir, write_service
from hosby.exceptions import InferenceTimeoutError, ValidationError
from hosby.infer.ai import strip_code_fence, translate_error
from hosby.infer.llm_client import complete
from hosby.infer.providers import ProviderSpec
from hosby.logging_config import LogConfig, null_config
from hosby.schema.models import SchemaDocument, Table
from hosby.schema.store import SchemaStore

SERVICE_AI_TIMEOUT = 45.0


@dataclass
class GeneratedService:
    table: str
    path: Path
    code: str
    source: str  # "template" or "ai"
    fell_back: bool = False


@dataclass
class ServiceAI:
    """Provider settings for AI generation."""

    provider: ProviderSpec
    api_key: str
    model: str | None = None
    timeout: float = SERVICE_AI_TIMEOUT
    max_tokens: int = 4_000


def table_names(doc: SchemaDocument) -> list[str]:
    tables = doc.get("tables")
    return list(tables) if isinstance(tables, dict) else []


class ServiceGenerator:
    """Generate TypeScript CRUD services for the tables of one project.

    Args:
        store: Schema file of the project.
        output_dir: Where services are written; defaults to ``<project>/src/services``.
        log_config: Logging configuration for this component.
    """

    def __init__(
        self,
        store: SchemaStore,
        output_dir: Path | None = None,
        log_config: LogConfig | None = None,
    ) -> None:
        self.store = store
        self.output_dir = output_dir if output_dir is not None else services_dir(store.project_dir)
        self._log = (log_config or null_config()).logger("codegen")

    def tables(self) -> list[str]:
        """Table names in the schema.

        Raises:
            ValidationError: If the schema is missing or has no tables.
        """
        names = table_names(self.store.load())
        if not names:
            raise ValidationError("No tables found in schema. Run `hosby scan` first.")
        return names

    def table(self, name: str) -> Table:
        """Columns of *name*.

        Raises:
            ValidationError: If the table is not in the schema.
        """
        tables = self.store.load().get("tables") or {}
        if not isinstance(tables, dict) or not tables:
            raise ValidationError("No tables found in schema. Run `hosby scan` first.")
        if name not in tables or not isinstance(tables[name], dict):
            available = ", ".join(sorted(tables)) or "none"
            raise ValidationError(f"Table '{name}' not found in schema (available: {available}).")
        return tables[name]

    def target(self, name: str) -> Path:
        return service_path(self.output_dir, name)

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    def render(self, name: str, ai: ServiceAI | None = None) -> GeneratedService:
        """Produce the service code for *name* without writing it.

        With *ai*, the completion provider writes the service; a timeout falls
        back to the template, any other provider failure is raised.
        """
        columns = self.table(name)
        path = self.target(name)
        if ai is None:
            return GeneratedService(name, path, render_service(name, columns), "template")

        try:
            code = self._complete(name, columns, ai)
        except InferenceTimeoutError:
            self._log.warning(
                "AI generation timed out after %gs; falling back to the template", ai.timeout
            )
            return GeneratedService(
                name, path, render_service(name, columns), "template", fell_back=True
            )
        return GeneratedService(name, path, code, "ai")

    def generate(self, name: str, ai: ServiceAI | None = None) -> GeneratedService:
        """Render the service for *name* and write it under ``output_dir``."""
        service = self.render(name, ai)
        write_service(service.path, service.code)
        self._log.info("Service for %s written to %s (%s)", name, service.path, service.source)
        return service

    def _complete(self, name: str, columns: Table, ai: ServiceAI) -> str:
        model = ai.model or ai.provider.default_model
        messages = [
            {"role": "system", "content": SERVICE_SYSTEM_PROMPT},
            {"role": "user", "content": build_service_prompt(name, columns)},
        ]
        self._log.info("Generating %s service with %s (%s)", name, ai.provider.name, model)
        try:
            text = complete(
                model,
                messages,
                api_key=ai.api_key,
                max_tokens=ai.max_tokens,
                temperature=0.0,
                timeout=ai.timeout,
            )
        except Exception as exc:
            raise translate_error(exc, ai.timeout) from exc

        code = strip_code_fence(text).strip()
        if not code:
            raise ValidationError(f"AI returned an empty service for '{name}'.")
        return code + "\n"
