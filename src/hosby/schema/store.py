"""Local persistence of the canonical schema document (hosby.schema.json)."""

from __future__ import annotations

import copy
import json
from datetime import datetime, timezone
from pathlib import Path

from hosby.exceptions import StorageError, ValidationError
from hosby.logging_config import LogConfig, null_config
from hosby.schema.models import (
    EPOCH,
    ProjectIdentity,
    SchemaDocument,
    column_count,
    empty_schema,
    table_count,
    truncate_ms,
)

SCHEMA_FILENAME = "hosby.schema.json"


class SchemaStore:
    """Reads and writes ``hosby.schema.json`` in *project_dir*.

    Writes are plain overwrites (2-space indented UTF-8 JSON); there is no
    atomic rename and no locking.
    """

    def __init__(self, project_dir: Path, log_config: LogConfig | None = None) -> None:
        self.project_dir = Path(project_dir)
        self.path = self.project_dir / SCHEMA_FILENAME
        self._log = (log_config or null_config()).logger("store")

    def exists(self) -> bool:
        return self.path.is_file()

    def load(self) -> SchemaDocument:
        """Return the parsed schema document.

        Raises:
            ValidationError: if the file is missing, unreadable, or not a JSON object.
        """
        if not self.exists():
            raise ValidationError(
                f"No {SCHEMA_FILENAME} found in {self.project_dir}. Run `hosby scan` first."
            )
        try:
            text = self.path.read_text(encoding="utf-8")
            doc = json.loads(text)
        except (OSError, json.JSONDecodeError) as exc:
            raise ValidationError(
                f"Failed to read {self.path}: the file may be corrupted ({exc})"
            ) from exc
        if not isinstance(doc, dict):
            raise ValidationError(f"{self.path} must contain a JSON object")
        self._log.debug(
            "Schema loaded: %d bytes, %d tables", len(text), table_count(doc)
        )
        return doc

    def _existing_metadata(self) -> dict | None:
        if not self.exists():
            return None
        try:
            existing = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            self._log.debug("Could not read existing schema metadata: %s", exc)
            return None
        if isinstance(existing, dict) and isinstance(existing.get("metadata"), dict):
            return existing["metadata"]
        return None

    def save(self, doc: SchemaDocument) -> SchemaDocument:
        """Write *doc*, keeping the on-disk ``metadata`` when *doc* has none.

        Returns the document as written.
        """
        to_write = copy.deepcopy(doc)
        if not to_write.get("metadata"):
            existing = self._existing_metadata()
            if existing is not None:
                to_write["metadata"] = existing
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(
                json.dumps(to_write, indent=2, ensure_ascii=False) + "\n", encoding="utf-8"
            )
        except OSError as exc:
            raise StorageError(f"Failed to write {self.path}: {exc}", path=self.path) from exc
        self._log.debug("Schema written to %s", self.path)
        return to_write

    def mtime(self) -> datetime:
        """Last modification time at millisecond precision (epoch if missing)."""
        try:
            stamp = self.path.stat().st_mtime
        except OSError:
            return EPOCH
        return truncate_ms(datetime.fromtimestamp(stamp, tz=timezone.utc))

    def project_identity(self) -> ProjectIdentity | None:
        if not self.exists():
            return None
        return ProjectIdentity.from_metadata(self.load())

    def set_project_identity(self, project_id: str, project_name: str) -> SchemaDocument:
        """Bind the schema to a remote project; creates the file if needed."""
        doc = self.load() if self.exists() else empty_schema()
        metadata = dict(doc.get("metadata") or {})
        metadata["project"] = ProjectIdentity(id=project_id, name=project_name).to_dict()
        doc["metadata"] = metadata
        return self.save(doc)

    @staticmethod
    def stats(doc: SchemaDocument) -> tuple[int, int]:
        return table_count(doc), column_count(doc)
