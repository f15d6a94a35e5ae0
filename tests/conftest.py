"""Shared pytest fixtures."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from hosby.auth.store import CLI_TOKEN_KEY, SESSION_TOKEN_KEY, USER_ID_KEY, FileCredentialStore

_ENV_VARS = (
    "HOSBY_API_URL",
    "HOSBY_LOG_LEVEL",
    "HOSBY_AI_PROVIDER",
    "OPENAI_API_KEY",
    "ANTHROPIC_API_KEY",
    "OPENAI_MODEL",
    "ANTHROPIC_MODEL",
)


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point global config and credentials at tmp_path; clear Hosby env vars."""
    home = tmp_path / "home" / ".hosby"
    monkeypatch.setattr("hosby.config._GLOBAL_CONFIG_PATH", home / "config.yaml")
    monkeypatch.setattr("hosby.auth.store._CREDENTIALS_PATH", home / "credentials.json")
    for var in _ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    return home


@pytest.fixture
def credentials_store(isolated_home: Path) -> FileCredentialStore:
    return FileCredentialStore(isolated_home / "credentials.json")


@pytest.fixture
def logged_in(credentials_store: FileCredentialStore) -> FileCredentialStore:
    credentials_store.set(SESSION_TOKEN_KEY, "sess-123")
    credentials_store.set(CLI_TOKEN_KEY, "cli-456")
    credentials_store.set(USER_ID_KEY, "42")
    return credentials_store


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """Project directory holding a schema linked to project p1."""
    root = tmp_path / "project"
    root.mkdir()
    schema = {
        "tables": {"users": {"id": "string", "age": "number"}},
        "version": "1.0.0",
        "metadata": {"project": {"id": "p1", "name": "Demo"}},
    }
    (root / "hosby.schema.json").write_text(json.dumps(schema, indent=2), encoding="utf-8")
    return root


def write_files(root: Path, files: dict[str, str]) -> None:
    """Create *files* (relative path → content) under *root*."""
    for rel, content in files.items():
        target = root / rel
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")


@pytest.fixture
def make_project(tmp_path: Path):
    """Factory: build a source tree under tmp_path/src_project and return its root."""

    def _make(files: dict[str, str]) -> Path:
        root = tmp_path / "src_project"
        root.mkdir(exist_ok=True)
        write_files(root, files)
        return root

    return _make
