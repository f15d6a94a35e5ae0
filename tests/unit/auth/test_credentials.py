"""Tests for credential storage and session helpers."""

from __future__ import annotations

import json
import os
import stat
from unittest.mock import patch

import pytest

from hosby.auth.session import (
    AuthCredentials,
    load_credentials,
    logout,
    require_login,
    save_credentials,
)
from hosby.auth.store import (
    CLI_TOKEN_KEY,
    SESSION_TOKEN_KEY,
    USER_ID_KEY,
    FileCredentialStore,
    MemoryCredentialStore,
)
from hosby.exceptions import AuthenticationError, StorageError

_CREDS = AuthCredentials(user_id="42", cli_token="cli-456", session_token="sess-123")


# ------------------------------------------------------------------
# FileCredentialStore
# ------------------------------------------------------------------


def test_file_store_round_trip(tmp_path):
    store = FileCredentialStore(tmp_path / "creds" / "credentials.json")
    assert store.get("openai-api-key") is None

    store.set("openai-api-key", "sk-1")
    store.set("ai-provider", "openai")

    assert store.get("openai-api-key") == "sk-1"
    data = json.loads((tmp_path / "creds" / "credentials.json").read_text(encoding="utf-8"))
    assert data == {"openai-api-key": "sk-1", "ai-provider": "openai"}


def test_file_store_permissions(tmp_path):
    path = tmp_path / "creds" / "credentials.json"
    FileCredentialStore(path).set("k", "v")
    assert stat.S_IMODE(path.stat().st_mode) == 0o600


def test_file_store_created_private(tmp_path):
    path = tmp_path / "credentials.json"
    with patch("hosby.auth.store.os.open", wraps=os.open) as mock_open:
        FileCredentialStore(path).set("k", "v")

    assert mock_open.call_args.args[0] == path
    assert mock_open.call_args.args[2] == 0o600


def test_file_store_tightens_existing_file(tmp_path):
    path = tmp_path / "credentials.json"
    path.write_text("{}", encoding="utf-8")
    path.chmod(0o644)
    FileCredentialStore(path).set("k", "v")
    assert stat.S_IMODE(path.stat().st_mode) == 0o600


def test_file_store_write_failure(tmp_path):
    path = tmp_path / "credentials.json"
    path.mkdir()
    with pytest.raises(StorageError, match="Failed to write") as excinfo:
        FileCredentialStore(path).set("k", "v")
    assert excinfo.value.path == path


def test_file_store_remove(tmp_path):
    store = FileCredentialStore(tmp_path / "credentials.json")
    store.set("k", "v")
    store.remove("k")
    store.remove("never-set")
    assert store.get("k") is None


def test_file_store_corrupt_file_reads_empty(tmp_path):
    path = tmp_path / "credentials.json"
    path.write_text("{oops", encoding="utf-8")
    store = FileCredentialStore(path)
    assert store.get("k") is None
    store.set("k", "v")
    assert store.get("k") == "v"


def test_file_store_default_path(isolated_home):
    store = FileCredentialStore()
    store.set("k", "v")
    assert (isolated_home / "credentials.json").exists()


# ------------------------------------------------------------------
# Session helpers
# ------------------------------------------------------------------


def test_headers():
    assert _CREDS.headers() == {
        "Authorization": "Bearer sess-123",
        "x-hosby-cli": "true",
        "x-hosby-user-id": "42",
    }


def test_save_and_load_credentials():
    store = MemoryCredentialStore()
    save_credentials(store, _CREDS)
    assert store.values == {
        SESSION_TOKEN_KEY: "sess-123",
        CLI_TOKEN_KEY: "cli-456",
        USER_ID_KEY: "42",
    }
    assert load_credentials(store) == _CREDS


def test_partial_session_is_not_logged_in():
    store = MemoryCredentialStore({SESSION_TOKEN_KEY: "sess-123", USER_ID_KEY: "42"})
    assert load_credentials(store) is None
    with pytest.raises(AuthenticationError, match="hosby login"):
        require_login(store)


def test_require_login_with_file_store(logged_in):
    assert require_login(logged_in) == _CREDS


def test_logout_keeps_provider_keys():
    store = MemoryCredentialStore({"openai-api-key": "sk-1"})
    save_credentials(store, _CREDS)
    logout(store)
    assert store.values == {"openai-api-key": "sk-1"}
