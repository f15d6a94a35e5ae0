"""Logging configuration object.

Components never touch a global log level. The entry point builds one
``LogConfig`` and hands it to each component, which derives a named child
logger from it::

    log_config = LogConfig.from_level("debug")
    selector = FileSelector(limits, log_config=log_config)

Records go through a ``rich.logging.RichHandler`` on the config's console.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from rich.console import Console
from rich.logging import RichHandler

_ROOT_LOGGER = "hosby"

_LEVELS: dict[str, int] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "none": logging.CRITICAL + 10,
}


def parse_level(value: str | int | None, default: int = logging.INFO) -> int:
    """Translate a level name (``debug``, ``info``, ``warn``, ``error``, ``none``) to an int.

    Unknown names fall back to *default*.
    """
    if value is None:
        return default
    if isinstance(value, int):
        return value
    return _LEVELS.get(str(value).strip().lower(), default)


@dataclass
class LogConfig:
    """Explicit logging configuration passed to every component.

    Each ``LogConfig`` owns its loggers and its ``RichHandler``; they are not
    registered with ``logging.getLogger``, so two configs in one process never
    change each other's level or console.

    Attributes:
        level: Minimum level emitted by ``hosby.*`` loggers.
        console: Rich console the handler writes to (stderr by default).
        show_path: Include the source location in each record.
    """

    level: int = logging.INFO
    console: Console = field(default_factory=lambda: Console(stderr=True))
    show_path: bool = False
    _handler: logging.Handler | None = field(default=None, init=False, repr=False, compare=False)
    _loggers: dict[str, logging.Logger] = field(
        default_factory=dict, init=False, repr=False, compare=False
    )

    @classmethod
    def from_level(cls, level: str | int | None) -> LogConfig:
        return cls(level=parse_level(level))

    @property
    def debug_enabled(self) -> bool:
        return self.level <= logging.DEBUG

    def handler(self) -> logging.Handler:
        """The RichHandler shared by every logger of this config."""
        if self._handler is None:
            self._handler = RichHandler(
                console=self.console,
                show_path=self.show_path,
                show_time=False,
                markup=False,
                rich_tracebacks=True,
            )
        return self._handler

    def logger(self, component: str) -> logging.Logger:
        """Return the ``hosby.<component>`` logger bound to this config."""
        log = self._loggers.get(component)
        if log is None:
            log = logging.Logger(f"{_ROOT_LOGGER}.{component}", self.level)
            log.propagate = False
            log.addHandler(self.handler())
            self._loggers[component] = log
        return log


def null_config() -> LogConfig:
    """A config that emits nothing, for library use and tests."""
    return LogConfig(level=_LEVELS["none"])
