"""File selector — pick the project files most likely to hold data models.

Walks the project tree, keeps business-logic candidates, scores them, and
takes the best ones until the file-count or reduced-content budget runs out.

Scoring (start at 50, clamp to 0–100):
  +20  filename contains model / entity / schema / type
  +5   per ``interface X`` and per ``class X`` occurrence
  +3   per ``type X =`` alias
  -15  import lines make up more than 30 % of all lines
"""

from __future__ import annotations

import os
import re
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path

from hosby.logging_config import LogConfig, null_config
from hosby.scan.patterns import (
    IGNORE_PATTERNS,
    IGNORED_COMPONENTS,
    glob_to_regex,
    is_ui_component_name,
)
from hosby.scan.reducer import ContentReducer, estimate_tokens
from hosby.schema.models import CandidateFile

SKIPPED_DIRS: frozenset[str] = frozenset(["node_modules", "dist", "build", "coverage"])

SOURCE_EXTENSIONS: tuple[str, ...] = (
    ".ts", ".tsx", ".js", ".jsx", ".vue", ".svelte", ".astro", ".solid", ".elm",
)
COMPOUND_EXTENSIONS: tuple[str, ...] = (
    ".component.ts", ".module.ts", ".directive.ts", ".pipe.ts",
)
# Files with these extensions are view templates: a UI-named stem disqualifies them.
VIEW_EXTENSIONS: frozenset[str] = frozenset([".tsx", ".jsx", ".vue", ".svelte", ".astro"])

_MODEL_NAME_MARKERS = ("model", "entity", "schema", "type")
_HELPER_NAME_MARKERS = ("utils", "helpers", "constants", "config")
_TEST_NAME_MARKERS = (".test.", ".spec.")
_TEST_DIR_MARKERS = ("/test/", "/tests/")

_INTERFACE_RE = re.compile(r"interface\s+\w+")
_CLASS_RE = re.compile(r"class\s+\w+")
_TYPE_ALIAS_RE = re.compile(r"type\s+\w+\s*=")
_IMPORT_RE = re.compile(r"import\s+.+from")

_MAX_WORKERS = 8


@dataclass
class SelectionLimits:
    max_file_size: int = 100 * 1024
    max_files: int = 50
    max_total_size: int = 500 * 1024


@dataclass
class SelectionResult:
    """Outcome of a selection run.

    Attributes:
        selected_files: Absolute paths, highest score first.
        total_size: Sum of reduced content lengths actually included.
        content: Concatenated reduced content, each file under a
            ``// File: <relative path>`` header.
        estimated_tokens: ``ceil(len(content) / 4)``.
    """

    selected_files: list[str] = field(default_factory=list)
    total_size: int = 0
    content: str = ""
    estimated_tokens: int = 0


def score_file(path: str, content: str) -> int:
    """Heuristic business-logic importance of a file, 0–100."""
    score = 50
    name = os.path.basename(path).lower()
    if any(marker in name for marker in _MODEL_NAME_MARKERS):
        score += 20

    score += len(_INTERFACE_RE.findall(content)) * 5
    score += len(_CLASS_RE.findall(content)) * 5
    score += len(_TYPE_ALIAS_RE.findall(content)) * 3

    import_lines = len(_IMPORT_RE.findall(content))
    total_lines = len(content.split("\n"))
    if import_lines > 0 and import_lines / total_lines > 0.3:
        score -= 15

    return max(0, min(100, score))


class FileSelector:
    """Select and concatenate business-logic files under a project root.

    Args:
        limits: Size and count budgets.
        reducer: Content reducer applied to each file before budgeting.
        ignore_patterns: Extra globs on top of the built-in ignore list.
        ignored_components: Extra component names on top of the built-in list.
        log_config: Logging configuration for this component.
    """

    def __init__(
        self,
        limits: SelectionLimits | None = None,
        reducer: ContentReducer | None = None,
        ignore_patterns: Iterable[str] = (),
        ignored_components: Iterable[str] = (),
        log_config: LogConfig | None = None,
    ) -> None:
        self.limits = limits or SelectionLimits()
        self._ignored = tuple(IGNORED_COMPONENTS) + tuple(ignored_components)
        self._ignore_res = [glob_to_regex(p) for p in (*IGNORE_PATTERNS, *ignore_patterns)]
        self.reducer = reducer or ContentReducer(
            ignored_components=ignored_components, log_config=log_config
        )
        self._log = (log_config or null_config()).logger("selector")

    # ------------------------------------------------------------------
    # Enumeration + candidate rules
    # ------------------------------------------------------------------

    def walk(self, root: Path) -> list[Path]:
        """All files under *root*, pruning dot and build/dependency directories."""
        files: list[Path] = []
        for dirpath, dirnames, filenames in os.walk(root):
            dirnames[:] = sorted(
                d for d in dirnames if not d.startswith(".") and d not in SKIPPED_DIRS
            )
            files.extend(Path(dirpath) / f for f in sorted(filenames))
        return files

    def is_candidate(self, path: Path, root: Path) -> bool:
        rel = path.relative_to(root).as_posix()
        posix = "/" + rel
        name = path.name.lower()

        if any(regex.search(posix) for regex in self._ignore_res):
            return False
        if any(comp.lower() in name for comp in self._ignored):
            return False
        if any(marker in name for marker in _TEST_NAME_MARKERS):
            return False
        if any(marker in posix for marker in _TEST_DIR_MARKERS):
            return False
        if any(marker in name for marker in _HELPER_NAME_MARKERS):
            return False

        suffix = path.suffix.lower()
        if suffix in VIEW_EXTENSIONS and is_ui_component_name(name.split(".")[0], self._ignored):
            return False
        if suffix in SOURCE_EXTENSIONS or name.endswith(COMPOUND_EXTENSIONS):
            return True
        return any(marker in name for marker in _MODEL_NAME_MARKERS)

    def candidates(self, root: Path) -> list[Path]:
        return [p for p in self.walk(root) if self.is_candidate(p, root)]

    # ------------------------------------------------------------------
    # Scoring
    # ------------------------------------------------------------------

    def _load(self, path: Path) -> CandidateFile | None:
        try:
            size = path.stat().st_size
            if size > self.limits.max_file_size:
                self._log.debug("Skipping %s (%d bytes > max_file_size)", path, size)
                return None
            content = path.read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            self._log.debug("Skipping unreadable file %s: %s", path, exc)
            return None
        return CandidateFile(
            path=str(path), size=size, content=content, score=score_file(str(path), content)
        )

    def score_candidates(self, paths: list[Path]) -> list[CandidateFile]:
        """Read and score *paths* concurrently; result sorted best-first."""
        with ThreadPoolExecutor(max_workers=_MAX_WORKERS) as pool:
            loaded = list(pool.map(self._load, paths))
        scored = [c for c in loaded if c is not None]
        scored.sort(key=lambda c: (-c.score, c.path))
        return scored

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def select(self, root: Path) -> SelectionResult:
        """Pick top-scoring files until the file-count or total-size budget is hit.

        Selection stops at the first file whose reduced content would overflow
        ``max_total_size``; lower-scored files are not considered after that.
        """
        root = Path(root).resolve()
        ranked = self.score_candidates(self.candidates(root))
        result = SelectionResult()
        parts: list[str] = []

        for candidate in ranked:
            if len(result.selected_files) >= self.limits.max_files:
                break
            reduced = self.reducer.reduce(candidate.content)
            if result.total_size + len(reduced) > self.limits.max_total_size:
                self._log.debug("Stopping at %s: total size budget reached", candidate.path)
                break
            result.selected_files.append(candidate.path)
            result.total_size += len(reduced)
            rel = Path(candidate.path).relative_to(root).as_posix()
            parts.append(f"\n// File: {rel}\n{reduced}\n")

        result.content = "".join(parts)
        result.estimated_tokens = estimate_tokens(result.content)
        self._log.info(
            "Selected %d business logic files (%dKB, ~%d tokens)",
            len(result.selected_files),
            round(result.total_size / 1024),
            result.estimated_tokens,
        )
        return result
