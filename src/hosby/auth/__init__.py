"""Credential storage and backend session handling."""

from hosby.auth.session import (
    AuthCredentials,
    load_credentials,
    logout,
    require_login,
    save_credentials,
)
from hosby.auth.store import CredentialStore, FileCredentialStore, MemoryCredentialStore

__all__ = [
    "AuthCredentials",
    "CredentialStore",
    "FileCredentialStore",
    "MemoryCredentialStore",
    "load_credentials",
    "logout",
    "require_login",
    "save_credentials",
]
