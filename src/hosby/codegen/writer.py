"""Service file output: path confinement, overwrite guard, atomic write.

Table names come from the schema file, which may have been pulled from the
backend, so the service path is checked against the services directory
before anything is written.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

import typer

from hosby.exceptions import StorageError, ValidationError

SERVICES_SUBDIR = Path("src") / "services"
SERVICE_SUFFIX = ".service.ts"


# ------------------------------------------------------------------
# Paths
# ------------------------------------------------------------------


def services_dir(project_dir: Path) -> Path:
    """``<project>/src/services``; not created here."""
    return Path(project_dir).resolve() / SERVICES_SUBDIR


def service_path(base: Path, table_name: str) -> Path:
    """Resolve ``<base>/<table_name>.service.ts`` and confine it to *base*.

    Raises:
        ValidationError: If the table name would place the file outside *base*.
    """
    base = base.resolve()
    resolved = (base / f"{table_name}{SERVICE_SUFFIX}").resolve()
    if resolved.parent != base:
        raise ValidationError(
            f"Table name '{table_name}' resolves outside {base}. "
            "Rename the table in hosby.schema.json."
        )
    return resolved


# ------------------------------------------------------------------
# Overwrite guard
# ------------------------------------------------------------------


def check_overwrite(path: Path, yes: bool) -> bool:
    """Return True if we should proceed with writing, False if the user declines."""
    if yes or not path.exists():
        return True
    return typer.confirm(f"  File exists: {path.name}\n  Overwrite?", default=False)


# ------------------------------------------------------------------
# Atomic write
# ------------------------------------------------------------------


def write_service(path: Path, content: str) -> None:
    """Write *content* to *path* atomically (temp → rename).

    Creates parent directories if needed.

    Raises:
        StorageError: If the directory or file cannot be written.
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
    except OSError as exc:
        raise StorageError(f"Failed to write {path}: {exc}", path=path) from exc

    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        os.replace(tmp_path, path)
    except OSError as exc:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise StorageError(f"Failed to write {path}: {exc}", path=path) from exc
