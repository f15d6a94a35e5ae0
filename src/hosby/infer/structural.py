"""Structural schema inference from interface and object type declarations.

Every ``interface X {...}`` and ``type X = {...}`` in the selected files
becomes a table named ``x + "s"``; each member becomes a column whose type
is mapped from its declared type text.
"""

from __future__ import annotations

import re
from pathlib import Path

from hosby.exceptions import ValidationError
from hosby.logging_config import LogConfig, null_config
from hosby.scan.reducer import find_matching, strip_comments
from hosby.scan.selector import FileSelector
from hosby.schema.models import SchemaDocument

_DECL_RE = re.compile(
    r"(?:\bexport\s+)?(?:\bdeclare\s+)?"
    r"(?:\binterface\s+([A-Za-z_$][\w$]*)(?:\s*<[^{]*?>)?(?:\s+extends\s+[^{]+?)?\s*\{"
    r"|\btype\s+([A-Za-z_$][\w$]*)(?:\s*<[^=]*?>)?\s*=\s*\{)"
)

# First match wins.
_TYPE_MARKERS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("string", ("string",)),
    ("number", ("number",)),
    ("boolean", ("boolean",)),
    ("date", ("Date",)),
    ("array", ("Array", "[]")),
    ("object", ("Object", "Record", "{")),
)

_OPENERS = "{([<"
_CLOSERS = "})]>"


def map_type(type_text: str) -> str:
    """Normalize a declared member type to a column type."""
    for column_type, markers in _TYPE_MARKERS:
        if any(marker in type_text for marker in markers):
            return column_type
    return "string"


def table_name(declaration: str) -> str:
    return declaration.lower() + "s"


def _split_members(body: str) -> list[str]:
    """Split a declaration body on top-level ``;``, ``,`` and newlines."""
    members: list[str] = []
    depth = 0
    start = 0
    for i, ch in enumerate(body):
        if ch in _OPENERS:
            depth += 1
        elif ch in _CLOSERS:
            # "=>" in a function type is not a closing bracket
            if ch == ">" and i > 0 and body[i - 1] == "=":
                continue
            depth = max(0, depth - 1)
        elif ch in ";,\n" and depth == 0:
            members.append(body[start:i])
            start = i + 1
    members.append(body[start:])
    return [m.strip() for m in members if m.strip()]


def _top_level_colon(member: str) -> int:
    depth = 0
    for i, ch in enumerate(member):
        if ch in _OPENERS:
            depth += 1
        elif ch in _CLOSERS:
            depth = max(0, depth - 1)
        elif ch == ":" and depth == 0:
            return i
    return -1


def parse_members(body: str) -> dict[str, str]:
    """Columns declared in an interface or object-type body."""
    columns: dict[str, str] = {}
    for member in _split_members(body):
        if member.startswith(("...", "[")):
            continue
        if member.startswith("readonly "):
            member = member[len("readonly "):].lstrip()
        colon = _top_level_colon(member)
        if colon == -1:
            continue
        name = member[:colon].strip()
        if "(" in name or "<" in name:
            continue
        name = name.rstrip("?").strip().strip("'\"")
        if not name:
            continue
        columns[name] = map_type(member[colon + 1:].strip())
    return columns


def parse_declarations(text: str) -> dict[str, dict[str, str]]:
    """Map declaration name to its columns, in source order."""
    found: dict[str, dict[str, str]] = {}
    pos = 0
    while True:
        match = _DECL_RE.search(text, pos)
        if match is None:
            break
        name = match.group(1) or match.group(2)
        open_idx = match.end() - 1
        end = find_matching(text, open_idx)
        if end is None:
            pos = match.end()
            continue
        found[name] = parse_members(text[open_idx + 1:end - 1])
        pos = end
    return found


class StructuralInferencer:
    """Infer tables from type declarations in the selected project files.

    Args:
        selector: File selector deciding which files are read.
        log_config: Logging configuration for this component.
    """

    def __init__(self, selector: FileSelector | None = None, log_config: LogConfig | None = None) -> None:
        self.selector = selector or FileSelector(log_config=log_config)
        self._log = (log_config or null_config()).logger("structural")

    def infer(self, path: Path) -> SchemaDocument:
        root = Path(path)
        if not root.is_dir():
            raise ValidationError(f"Scan path is not a directory: {root}")

        selection = self.selector.select(root)
        tables: dict[str, dict[str, str]] = {}
        declarations = 0
        for file_path in selection.selected_files:
            try:
                text = Path(file_path).read_text(encoding="utf-8", errors="replace")
            except OSError as exc:
                self._log.warning("Could not read %s: %s", file_path, exc)
                continue
            for name, columns in parse_declarations(strip_comments(text)).items():
                declarations += 1
                tables[table_name(name)] = columns

        self._log.info(
            "Found %d type declarations in %d files", declarations, len(selection.selected_files)
        )
        return {"tables": tables}
