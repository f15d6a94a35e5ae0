"""Last-push / last-pull markers (``.hosby-last-push``, ``.hosby-last-pull``)."""

from __future__ import annotations

from pathlib import Path

from hosby.exceptions import StorageError
from hosby.logging_config import LogConfig, null_config
from hosby.schema.models import SyncRecord

LAST_PUSH_FILENAME = ".hosby-last-push"
LAST_PULL_FILENAME = ".hosby-last-pull"


class SyncStateStore:
    """Reads and writes the sync markers next to the schema file.

    A missing or unreadable marker reads as ``None``: the next push is then
    treated as changed and the next pull compares against the epoch.
    """

    def __init__(self, project_dir: Path, log_config: LogConfig | None = None) -> None:
        self.project_dir = Path(project_dir)
        self.push_path = self.project_dir / LAST_PUSH_FILENAME
        self.pull_path = self.project_dir / LAST_PULL_FILENAME
        self._log = (log_config or null_config()).logger("state")

    def _read(self, path: Path) -> SyncRecord | None:
        if not path.exists():
            return None
        try:
            return SyncRecord.from_json(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            self._log.warning("Ignoring unreadable sync marker %s: %s", path.name, exc)
            return None

    def _write(self, path: Path, record: SyncRecord) -> None:
        try:
            path.write_text(record.to_json(), encoding="utf-8")
        except OSError as exc:
            raise StorageError(f"Failed to write {path}: {exc}", path=path) from exc
        self._log.debug("Wrote %s (hash %s)", path.name, record.hash)

    def read_push(self) -> SyncRecord | None:
        return self._read(self.push_path)

    def read_pull(self) -> SyncRecord | None:
        return self._read(self.pull_path)

    def write_push(self, record: SyncRecord) -> None:
        self._write(self.push_path, record)

    def write_pull(self, record: SyncRecord) -> None:
        self._write(self.pull_path, record)
