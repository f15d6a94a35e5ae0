"""Credential storage.

``CredentialStore`` is the port the rest of the package depends on;
``FileCredentialStore`` keeps values in ``~/.hosby/credentials.json``,
protected by file permissions only (0o600 file in a 0o700 directory).
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Protocol

from hosby.config import GLOBAL_CONFIG_DIR
from hosby.exceptions import StorageError
from hosby.logging_config import LogConfig, null_config

_CREDENTIALS_PATH: Path = GLOBAL_CONFIG_DIR / "credentials.json"

SESSION_TOKEN_KEY = "hosby-session-token"
CLI_TOKEN_KEY = "hosby-cli-token"
USER_ID_KEY = "hosby-user-id"


class CredentialStore(Protocol):
    """Opaque key/value secret storage."""

    def get(self, key: str) -> str | None:
        """Return the stored value, or None."""
        ...

    def set(self, key: str, value: str) -> None:
        """Store *value* under *key*, replacing any previous value."""
        ...

    def remove(self, key: str) -> None:
        """Delete *key*; a missing key is not an error."""
        ...


class FileCredentialStore:
    """JSON-file credential store. An unreadable file is treated as empty."""

    def __init__(self, path: Path | None = None, log_config: LogConfig | None = None) -> None:
        self.path = path if path is not None else _CREDENTIALS_PATH
        self._log = (log_config or null_config()).logger("credentials")

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            self._log.warning("Ignoring unreadable credential store %s: %s", self.path, exc)
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(k): str(v) for k, v in data.items() if v is not None}

    def _write(self, data: dict[str, str]) -> None:
        try:
            self.path.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
            # 0o600 from creation; chmod covers a pre-existing file with looser bits
            fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(json.dumps(data, indent=2) + "\n")
            self.path.chmod(0o600)
        except OSError as exc:
            raise StorageError(f"Failed to write {self.path}: {exc}", path=self.path) from exc

    def get(self, key: str) -> str | None:
        return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def remove(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)


class MemoryCredentialStore:
    """In-process store; nothing touches disk."""

    def __init__(self, values: dict[str, str] | None = None) -> None:
        self.values: dict[str, str] = dict(values or {})

    def get(self, key: str) -> str | None:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        self.values[key] = value

    def remove(self, key: str) -> None:
        self.values.pop(key, None)
