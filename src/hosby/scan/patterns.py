"""Built-in ignore lists and UI-name heuristics shared by scanning and filtering."""

from __future__ import annotations

import re
from collections.abc import Iterable

# Globs matched against the path relative to the scan root.
IGNORE_PATTERNS: tuple[str, ...] = (
    # Build and dependency directories
    "**/node_modules/**",
    "**/dist/**",
    "**/build/**",
    "**/public/**",
    "**/coverage/**",
    # Style directories
    "**/styles/**",
    "**/css/**",
    # Generated Hosby files
    "**/src/lib/hosbyClient.ts",
    "**/**/hosbyClient.ts",
    "hosby.schema.json",
    # Configuration files
    "components.json",
    "tailwind.config.*",
    "vite.config.*",
    "postcss.config.*",
    "esbuild.config.*",
    "tsconfig.json",
    "jsconfig.json",
    "package.json",
    "next.config.*",
    "tsconfig.*.*",
    "jsconfig.*.*",
    # Lock files
    "yarn.lock",
    "pnpm-lock.yaml",
    "package-lock.json",
)

# Component and table names that never represent data models.
# Both singular and naively pluralised spellings are listed because the
# structural inferencer appends "s" to every declaration name.
IGNORED_COMPONENTS: tuple[str, ...] = (
    "buttonprops",
    "buttonpropss",
    "badgeprops",
    "badgepropss",
    "sheetcontentprops",
    "sheetcontentpropss",
    "sheetprops",
    "sheetpropss",
    "tooltipprops",
    "tooltippropss",
    "toastprops",
    "toastpropss",
    "modalprops",
    "modalpropss",
    "columnmodalprops",
    "columnmodalpropss",
    "droppablecolumnprops",
    "droppablecolumnpropss",
    "taskcardprops",
    "taskcardpropss",
    "taskmodalprops",
    "taskmodalpropss",
    "calendar",
    "calendars",
    "command",
    "commands",
    "dialog",
    "dialogs",
    "alert",
    "alerts",
    "alertdialog",
    "alertdialogs",
    "accordion",
    "accordions",
    "tooltip",
    "tooltips",
    "toast",
    "toasts",
    "state",
    "states",
)

UI_NAME_PATTERNS: tuple[str, ...] = (
    # basic elements
    "button", "modal", "dialog", "card", "panel", "menu", "nav", "sidebar",
    "header", "footer", "layout", "container", "wrapper", "grid", "flex",
    "form", "input", "select", "checkbox", "radio", "switch", "toggle",
    "dropdown", "tooltip", "popover", "toast", "notification", "alert",
    "spinner", "loader", "progress", "skeleton", "placeholder", "icon",
    "avatar", "badge", "tag", "label", "tab", "accordion", "carousel",
    "slider", "pagination", "breadcrumb", "stepper", "timeline", "divider",
    "view", "page", "screen", "section", "row", "col", "item", "list",
    # animation
    "animation", "transition", "motion", "animate", "fade", "slide", "zoom",
    # styling
    "theme", "style", "styled", "css", "scss", "sass", "less",
    # event handling
    "handler", "listener", "callback", "click", "hover", "focus", "blur",
    "change", "submit", "drag", "drop", "scroll", "resize", "touch",
    # accessibility
    "accessible", "aria", "a11y",
    # generic ui roles
    "ui", "widget", "element", "component", "control",
    # framework terms
    "hook", "provider", "consumer", "context", "hoc", "render",
    # mobile
    "swipe", "gesture", "tap", "pinch",
    # data visualization
    "chart", "graph", "plot", "diagram", "visualization", "canvas",
    # media playback
    "player", "audio", "video", "media", "stream", "playback",
    # presentation helpers
    "format", "validate", "transform", "convert", "parse", "stringify",
)

UI_NAME_SUFFIXES: tuple[str, ...] = (
    "component", "element", "control", "view", "widget", "renderer", "display",
)

# Table-name suffixes (singular or with a trailing "s") that mark a UI artifact.
UI_TABLE_SUFFIXES: tuple[str, ...] = (
    "props", "state", "config", "options", "context",
    "button", "modal", "dialog", "card", "panel", "menu", "nav",
    "form", "input", "select", "checkbox", "radio", "switch",
    "dropdown", "tooltip", "popover", "toast", "notification",
    "spinner", "loader", "progress", "skeleton", "icon",
    "avatar", "badge", "tag", "label", "tab", "accordion",
    "slider", "pagination", "breadcrumb", "stepper", "timeline",
    "component", "element", "widget", "view", "control", "renderer",
)

UI_TABLE_SUBSTRINGS: tuple[str, ...] = ("ui", "layout", "style", "theme", "display")


def glob_to_regex(pattern: str) -> re.Pattern[str]:
    """Translate a path glob: ``**`` spans segments, ``*`` stays in one, ``?`` is one char."""
    out: list[str] = []
    i = 0
    while i < len(pattern):
        ch = pattern[i]
        if pattern.startswith("**", i):
            out.append(".*")
            i += 2
            continue
        if ch == "*":
            out.append("[^/]*")
        elif ch == "?":
            out.append(".")
        else:
            out.append(re.escape(ch))
        i += 1
    return re.compile("".join(out))


def is_ui_component_name(name: str, ignored: Iterable[str] = IGNORED_COMPONENTS) -> bool:
    """Heuristic: does *name* look like a presentation-layer declaration?"""
    lower = name.lower()
    if any(comp.lower() in lower for comp in ignored):
        return True
    if any(pattern in lower for pattern in UI_NAME_PATTERNS):
        return True
    return lower.endswith(UI_NAME_SUFFIXES)


def matches_ignored_component(table: str, ignored: Iterable[str] = IGNORED_COMPONENTS) -> bool:
    """Exact (case-insensitive) or ``*``-wildcard match against *ignored*."""
    lower = table.lower()
    for pattern in ignored:
        if "*" in pattern:
            regex = "^" + ".*".join(re.escape(p) for p in pattern.split("*")) + "$"
            if re.match(regex, lower, re.IGNORECASE):
                return True
        elif lower == pattern.lower():
            return True
    return False


def is_ui_component_table(table: str) -> bool:
    lower = table.lower()
    for suffix in UI_TABLE_SUFFIXES:
        if lower.endswith(suffix) or lower.endswith(suffix + "s"):
            return True
    return any(sub in lower for sub in UI_TABLE_SUBSTRINGS)
