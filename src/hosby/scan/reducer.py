"""Content reducer — shrink selected source files to model-relevant code.

Steps, in order:
  1. strip block and line comments (unless comments are kept)
  2. strip relative import statements (unless imports are kept)
  3. collapse blank lines
  4. UI-exclusion: remove presentation-layer declarations, one rule per
     framework idiom, and drop Props/State/... shape types after harvesting
     the model type names they reference.

This is a pattern matcher, not a parser. Each rule finds a declaration header
with a regex and bounds the declaration by balanced-delimiter scanning; a
block that cannot be bounded is left as-is. Output is deterministic for a
given input.
"""

from __future__ import annotations

import math
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from hosby.logging_config import LogConfig, null_config
from hosby.scan.patterns import IGNORED_COMPONENTS, is_ui_component_name

_BLOCK_COMMENT_RE = re.compile(r"/\*[\s\S]*?\*/")
_LINE_COMMENT_RE = re.compile(r"//.*$", re.MULTILINE)
_RELATIVE_IMPORT_RE = re.compile(
    r"^[ \t]*import\s+(?:[^;'\"]*?\s+from\s+)?['\"]\.{1,2}/[^'\"]*['\"][ \t]*;?[ \t]*(?:\r?\n|$)",
    re.MULTILINE,
)
_BLANK_LINE_RE = re.compile(r"^\s*[\r\n]", re.MULTILINE)

_IDENT_RE = re.compile(r"[A-Za-z_$][\w$]*")
_RETURN_TYPE_RE = re.compile(r"\s*(?::\s*[^;={}]*)?")
_DECORATED_CLASS_RE = re.compile(
    r"\s*(?:export\s+)?(?:default\s+)?(?:abstract\s+)?class\s+(?P<name>[A-Z][\w$]*)[^{]*"
)

_FRAMEWORK_BUILTINS = frozenset(["React", "Component", "Element", "Node", "JSX"])

_SHAPE_SUFFIXES = r"(?:Props|State|Config|Options|Attrs|Events)"
_SHAPE_DECL_RE = re.compile(
    r"(?:export\s+)?(?:declare\s+)?(?:interface|type)\s+"
    rf"(?P<name>[A-Z][\w$]*{_SHAPE_SUFFIXES})\b"
    r"\s*(?:<[^>{]*>)?\s*(?:extends\s+[^{=;]+)?\s*=?\s*(?=\{)"
)
_TYPE_REF_RE = re.compile(r"[\w$]+\??\s*:\s*([A-Z]\w+)(?:\[\]|\s*\|\s*null)?")


def estimate_tokens(text: str) -> int:
    """Rough token estimate: 4 characters ≈ 1 token."""
    return math.ceil(len(text) / 4)


def strip_comments(text: str) -> str:
    text = _BLOCK_COMMENT_RE.sub("", text)
    return _LINE_COMMENT_RE.sub("", text)


def strip_relative_imports(text: str) -> str:
    return _RELATIVE_IMPORT_RE.sub("", text)


def collapse_blank_lines(text: str) -> str:
    return _BLANK_LINE_RE.sub("", text)


# ------------------------------------------------------------------
# Balanced-delimiter scanning
# ------------------------------------------------------------------

_PAIRS = {"{": "}", "(": ")", "[": "]"}


def _skip_ws(text: str, i: int) -> int:
    n = len(text)
    while i < n and text[i].isspace():
        i += 1
    return i


def find_matching(text: str, open_idx: int) -> int | None:
    """Return the index just past the delimiter closing ``text[open_idx]``.

    String literals and comments are skipped. Quoted strings end at a newline
    so a stray apostrophe in JSX text cannot swallow the rest of the file.
    """
    n = len(text)
    if open_idx >= n or text[open_idx] not in _PAIRS:
        return None
    stack = [_PAIRS[text[open_idx]]]
    i = open_idx + 1
    while i < n:
        ch = text[i]
        if ch in "'\"":
            i += 1
            while i < n and text[i] != ch and text[i] != "\n":
                i += 2 if text[i] == "\\" else 1
        elif ch == "`":
            i += 1
            while i < n and text[i] != "`":
                i += 2 if text[i] == "\\" else 1
        elif text.startswith("//", i):
            eol = text.find("\n", i)
            i = n if eol == -1 else eol
            continue
        elif text.startswith("/*", i):
            close = text.find("*/", i + 2)
            i = n if close == -1 else close + 1
        elif ch in _PAIRS:
            stack.append(_PAIRS[ch])
        elif ch in ")]}":
            if ch != stack[-1]:
                return None
            stack.pop()
            if not stack:
                return i + 1
        i += 1
    return None


def _braces_end(text: str, i: int) -> int | None:
    """Bound a block whose body is the next ``{...}`` after *i*."""
    open_idx = text.find("{", i)
    if open_idx == -1:
        return None
    return find_matching(text, open_idx)


def _call_end(text: str, i: int) -> int | None:
    """Bound a call expression whose argument list starts at/after *i*."""
    j = _skip_ws(text, i)
    if j >= len(text) or text[j] != "(":
        return None
    return find_matching(text, j)


def _function_end(text: str, i: int) -> int | None:
    """``(params) [: ReturnType] { body }`` starting at/after *i*."""
    params_end = _call_end(text, i)
    if params_end is None:
        return None
    m = _RETURN_TYPE_RE.match(text, params_end)
    j = m.end() if m else params_end
    if j >= len(text) or text[j] != "{":
        return None
    return find_matching(text, j)


def _arrow_end(text: str, i: int) -> int | None:
    """Right-hand side of ``const X = ...``: arrow function or function expression."""
    n = len(text)
    j = _skip_ws(text, i)
    if text.startswith("async", j):
        j = _skip_ws(text, j + len("async"))
    if text.startswith("function", j):
        k = j + len("function")
        m = _IDENT_RE.match(text, _skip_ws(text, k))
        return _function_end(text, m.end() if m else k)

    if j < n and text[j] == "(":
        params_end = find_matching(text, j)
    else:
        m = _IDENT_RE.match(text, j)
        params_end = m.end() if m else None
    if params_end is None:
        return None

    arrow = text.find("=>", params_end)
    if arrow == -1 or not _RETURN_TYPE_RE.fullmatch(text, params_end, arrow):
        return None

    body = _skip_ws(text, arrow + 2)
    if body < n and text[body] in "{(":
        return find_matching(text, body)
    eol = text.find("\n", body)
    return n if eol == -1 else eol


def _consume_terminator(text: str, end: int) -> int:
    """Swallow a trailing ``;`` and the rest of the line after a removed block."""
    n = len(text)
    j = end
    while j < n and text[j] in " \t":
        j += 1
    if j < n and text[j] == ";":
        j += 1
    while j < n and text[j] in " \t":
        j += 1
    if j < n and text[j] == "\r":
        j += 1
    if j < n and text[j] == "\n":
        j += 1
    return j


# ------------------------------------------------------------------
# UI rules
# ------------------------------------------------------------------

BlockFinder = Callable[[str, int], "int | None"]


def _identity(name: str) -> str:
    return name


def _strip_prefix(prefix: str) -> Callable[[str], str]:
    return lambda name: name[len(prefix):] if name.startswith(prefix) else name


def _strip_suffix(pattern: str) -> Callable[[str], str]:
    regex = re.compile(f"(?:{pattern})$")
    return lambda name: regex.sub("", name)


@dataclass(frozen=True)
class _UIRule:
    """One framework idiom: header regex + how to bound its body.

    ``header`` must define a ``name`` group unless ``decorated`` is set, in
    which case the class name is read after the decorator call.
    """

    label: str
    header: re.Pattern[str]
    finder: BlockFinder
    normalize: Callable[[str], str] = _identity
    decorated: bool = False


_EXPORT = r"(?:export\s+(?:default\s+)?)?"

UI_RULES: tuple[_UIRule, ...] = (
    _UIRule(
        "react-function-component",
        re.compile(_EXPORT + r"(?:async\s+)?function\s+(?P<name>[A-Z][\w$]*)\s*(?:<[^>()]*>)?\s*(?=\()"),
        _function_end,
    ),
    _UIRule(
        "react-arrow-component",
        re.compile(
            _EXPORT + r"(?:const|let)\s+(?P<name>[A-Z][\w$]*)\s*(?::\s*[^=\n;]+?)?\s*=\s*"
            r"(?=async\b|function\b|\(|[A-Za-z_$][\w$]*\s*=>)"
        ),
        _arrow_end,
    ),
    _UIRule(
        "react-class-component",
        re.compile(
            _EXPORT + r"class\s+(?P<name>[A-Z][\w$]*)\s*(?:<[^>{]*>)?\s+extends\s+"
            r"(?:React\.)?(?:Pure)?Component\b"
        ),
        _braces_end,
    ),
    _UIRule(
        "react-hook-function",
        re.compile(_EXPORT + r"function\s+(?P<name>use[A-Z][\w$]*)\s*(?:<[^>()]*>)?\s*(?=\()"),
        _function_end,
        normalize=_strip_prefix("use"),
    ),
    _UIRule(
        "react-hook-arrow",
        re.compile(
            _EXPORT + r"(?:const|let)\s+(?P<name>use[A-Z][\w$]*)\s*(?::\s*[^=\n;]+?)?\s*=\s*"
            r"(?=async\b|function\b|\(|[A-Za-z_$][\w$]*\s*=>)"
        ),
        _arrow_end,
        normalize=_strip_prefix("use"),
    ),
    _UIRule(
        "react-context",
        re.compile(
            _EXPORT + r"const\s+(?P<name>[A-Z][\w$]*Context)\s*(?::\s*[^=\n;]+?)?\s*=\s*"
            r"(?:React\.)?createContext\s*(?:<[^(]*>)?\s*(?=\()"
        ),
        _call_end,
        normalize=_strip_suffix("Context"),
    ),
    _UIRule(
        "decorated-component",
        re.compile(r"@(?:Component|Options|Directive)\s*(?=\()"),
        _call_end,
        decorated=True,
    ),
    _UIRule(
        "vue-extend",
        re.compile(
            _EXPORT + r"const\s+(?P<name>[A-Z][\w$]*)\s*=\s*(?:Vue\.extend|defineComponent)\s*(?=\()"
        ),
        _call_end,
    ),
    _UIRule(
        "svelte-helper-class",
        re.compile(_EXPORT + r"class\s+(?P<name>[A-Z][\w$]*(?:Component|Store|Action))\b"),
        _braces_end,
        normalize=_strip_suffix("Component|Store|Action"),
    ),
)


class ContentReducer:
    """Reduce raw file text to the parts relevant for schema inference.

    Args:
        include_comments: Keep ``/* */`` and ``//`` comments.
        include_imports: Keep import statements that reference relative paths.
        ignored_components: Extra UI names on top of the built-in ignore list.
        log_config: Logging configuration for this component.
    """

    def __init__(
        self,
        include_comments: bool = False,
        include_imports: bool = True,
        ignored_components: Iterable[str] = (),
        log_config: LogConfig | None = None,
    ) -> None:
        self.include_comments = include_comments
        self.include_imports = include_imports
        self._ignored = tuple(IGNORED_COMPONENTS) + tuple(ignored_components)
        self._log = (log_config or null_config()).logger("reducer")

    def is_ui_name(self, name: str) -> bool:
        return is_ui_component_name(name, self._ignored)

    def reduce(self, content: str) -> str:
        text = content
        if not self.include_comments:
            text = strip_comments(text)
        if not self.include_imports:
            text = strip_relative_imports(text)
        text = collapse_blank_lines(text)
        return self.filter_ui(text)

    # ------------------------------------------------------------------
    # UI exclusion
    # ------------------------------------------------------------------

    def filter_ui(self, content: str) -> str:
        text = content
        for rule in UI_RULES:
            text = self._apply_rule(text, rule)

        model_types = self.referenced_model_types(text)
        text = self._remove_shape_declarations(text)

        if model_types:
            self._log.info(
                "Extracted %d potential model types from UI components: %s",
                len(model_types),
                ", ".join(model_types),
            )
            text = f"// Extracted model types: {', '.join(model_types)}\n" + text
        return text

    def _apply_rule(self, text: str, rule: _UIRule) -> str:
        out: list[str] = []
        pos = 0
        for m in rule.header.finditer(text):
            if m.start() < pos:
                continue
            end = rule.finder(text, m.end())
            if end is None:
                continue
            name = m.group("name") if not rule.decorated else None
            if rule.decorated:
                cls = _DECORATED_CLASS_RE.match(text, end)
                if cls is None:
                    continue
                name = cls.group("name")
                end = _braces_end(text, cls.end())
                if end is None:
                    continue
            if not self.is_ui_name(rule.normalize(name)):
                continue
            self._log.debug("Removing %s %s", rule.label, name)
            out.append(text[pos:m.start()])
            pos = _consume_terminator(text, end)
        out.append(text[pos:])
        return "".join(out)

    def _shape_declarations(self, text: str) -> list[tuple[int, int, str]]:
        spans: list[tuple[int, int, str]] = []
        pos = 0
        for m in _SHAPE_DECL_RE.finditer(text):
            if m.start() < pos:
                continue
            end = _braces_end(text, m.end())
            if end is None:
                continue
            spans.append((m.start(), end, text[m.end():end]))
            pos = end
        return spans

    def referenced_model_types(self, text: str) -> list[str]:
        """Capitalised, non-UI type names referenced by Props/State/... members."""
        found: dict[str, None] = {}
        for _, _, body in self._shape_declarations(text):
            for ref in _TYPE_REF_RE.finditer(body):
                name = ref.group(1)
                if name in _FRAMEWORK_BUILTINS or self.is_ui_name(name):
                    continue
                found.setdefault(name, None)
        return list(found)

    def _remove_shape_declarations(self, text: str) -> str:
        out: list[str] = []
        pos = 0
        for start, end, _ in self._shape_declarations(text):
            out.append(text[pos:start])
            pos = _consume_terminator(text, end)
        out.append(text[pos:])
        return "".join(out)
