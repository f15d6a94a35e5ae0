"""Domain models for Hosby schemas and sync state."""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

# A schema document is plain JSON data: {"tables": {...}, "metadata": {...}, "version": "..."}
SchemaDocument = dict[str, Any]
# One table: column name -> column type from COLUMN_TYPES (or an enum)
Table = dict[str, Any]

COLUMN_TYPES: tuple[str, ...] = ("string", "number", "boolean", "date", "array", "object", "enum")
DEFAULT_VERSION = "1.0.0"

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def empty_schema() -> SchemaDocument:
    return {"tables": {}}


def table_count(doc: SchemaDocument) -> int:
    tables = doc.get("tables")
    return len(tables) if isinstance(tables, dict) else 0


def column_count(doc: SchemaDocument) -> int:
    tables = doc.get("tables")
    if not isinstance(tables, dict):
        return 0
    return sum(len(cols) for cols in tables.values() if isinstance(cols, dict))


@dataclass(frozen=True)
class ProjectIdentity:
    """Binding between the local schema and a remote project."""

    id: str
    name: str

    @classmethod
    def from_metadata(cls, doc: SchemaDocument) -> ProjectIdentity | None:
        metadata = doc.get("metadata")
        if not isinstance(metadata, dict):
            return None
        project = metadata.get("project")
        if not isinstance(project, dict) or not project.get("id"):
            return None
        return cls(id=str(project["id"]), name=str(project.get("name", "")))

    def to_dict(self) -> dict[str, str]:
        return {"id": self.id, "name": self.name}


@dataclass
class CandidateFile:
    path: str
    size: int
    content: str
    score: int


def format_timestamp(moment: datetime) -> str:
    """ISO-8601 UTC with millisecond precision and a ``Z`` suffix."""
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def parse_timestamp(value: str) -> datetime:
    """Inverse of :func:`format_timestamp`; also accepts ``+00:00`` offsets."""
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    moment = datetime.fromisoformat(text)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def truncate_ms(moment: datetime) -> datetime:
    return moment.replace(microsecond=(moment.microsecond // 1000) * 1000)


@dataclass
class SyncRecord:
    """Last push / last pull marker, persisted as compact JSON."""

    time: datetime
    hash: str
    id: str | None = None

    def to_json(self) -> str:
        data: dict[str, str] = {"time": format_timestamp(self.time), "hash": self.hash}
        if self.id is not None:
            data["id"] = self.id
        return json.dumps(data, separators=(",", ":"))

    @classmethod
    def from_json(cls, text: str) -> SyncRecord:
        data = json.loads(text)
        if not isinstance(data, dict) or "time" not in data:
            raise ValueError("sync record must be an object with a 'time' field")
        project_id = data.get("id")
        return cls(
            time=parse_timestamp(str(data["time"])),
            hash=str(data.get("hash", "")),
            id=str(project_id) if project_id is not None else None,
        )
