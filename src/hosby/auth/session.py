"""Session credentials for the Hosby backend."""

from __future__ import annotations

from dataclasses import dataclass

from hosby.auth.store import CLI_TOKEN_KEY, SESSION_TOKEN_KEY, USER_ID_KEY, CredentialStore
from hosby.exceptions import AuthenticationError

_SESSION_KEYS = (SESSION_TOKEN_KEY, CLI_TOKEN_KEY, USER_ID_KEY)


@dataclass(frozen=True)
class AuthCredentials:
    user_id: str
    cli_token: str
    session_token: str

    def headers(self) -> dict[str, str]:
        """Request headers identifying the CLI session."""
        return {
            "Authorization": f"Bearer {self.session_token}",
            "x-hosby-cli": "true",
            "x-hosby-user-id": self.user_id,
        }


def load_credentials(store: CredentialStore) -> AuthCredentials | None:
    session_token = store.get(SESSION_TOKEN_KEY)
    cli_token = store.get(CLI_TOKEN_KEY)
    user_id = store.get(USER_ID_KEY)
    if not (session_token and cli_token and user_id):
        return None
    return AuthCredentials(user_id=user_id, cli_token=cli_token, session_token=session_token)


def require_login(store: CredentialStore) -> AuthCredentials:
    """Return stored credentials or raise AuthenticationError."""
    credentials = load_credentials(store)
    if credentials is None:
        raise AuthenticationError("Not logged in. Run `hosby login` first.")
    return credentials


def save_credentials(store: CredentialStore, credentials: AuthCredentials) -> None:
    store.set(SESSION_TOKEN_KEY, credentials.session_token)
    store.set(CLI_TOKEN_KEY, credentials.cli_token)
    store.set(USER_ID_KEY, credentials.user_id)


def logout(store: CredentialStore) -> None:
    for key in _SESSION_KEYS:
        store.remove(key)
