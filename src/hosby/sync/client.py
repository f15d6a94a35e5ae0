"""HTTP client for the Hosby backend.

JSON over HTTPS with ``urllib.request``; every call carries a fixed timeout.
Transport failures are mapped onto the ``NetworkError`` family and a 401 onto
``AuthenticationError``, so callers never see urllib exceptions.
"""

from __future__ import annotations

import http.client
import importlib.metadata
import json
import socket
import urllib.error
import urllib.parse
import urllib.request
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from hosby.auth.session import AuthCredentials
from hosby.config import DEFAULT_API_URL
from hosby.exceptions import AuthenticationError, NetworkError, NetworkTimeoutError
from hosby.logging_config import LogConfig, null_config
from hosby.schema.models import SchemaDocument, format_timestamp

_TIMEOUT = 30.0
_LOGIN_TIMEOUT = 10.0


def client_version() -> str:
    try:
        return importlib.metadata.version("hosby-cli")
    except importlib.metadata.PackageNotFoundError:
        return "0.0.0"


@dataclass
class PullResponse:
    """Decoded ``GET /projects/{id}/pull`` reply.

    ``schema`` is read from the top level or from ``data.schema``.
    """

    schema: SchemaDocument | None = None
    updated: bool = False
    message: str | None = None

    @classmethod
    def from_payload(cls, payload: Any) -> PullResponse:
        if not isinstance(payload, dict):
            return cls()
        data = payload.get("data") if isinstance(payload.get("data"), dict) else {}
        schema = payload.get("schema")
        if schema is None:
            schema = data.get("schema")
        return cls(
            schema=schema if isinstance(schema, dict) else None,
            updated=data.get("updated") is True,
            message=payload.get("message"),
        )


class BackendClient:
    """Thin JSON client for the pull, push and login endpoints.

    Args:
        base_url: API root, e.g. ``https://cli.hosby.io/cli``.
        credentials: Session used for authenticated calls.
        timeout: Per-request timeout in seconds.
        log_config: Logging configuration for this component.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        credentials: AuthCredentials | None = None,
        timeout: float = _TIMEOUT,
        log_config: LogConfig | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.credentials = credentials
        self.timeout = timeout
        self._log = (log_config or null_config()).logger("client")

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _headers(self, authenticated: bool) -> dict[str, str]:
        headers = {"Content-Type": "application/json", "x-hosby-cli": "true"}
        if authenticated:
            if self.credentials is None:
                raise AuthenticationError("Not logged in. Run `hosby login` first.")
            headers.update(self.credentials.headers())
        return headers

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        body: Any = None,
        authenticated: bool = True,
        timeout: float | None = None,
    ) -> Any:
        url = f"{self.base_url}{path}"
        if params:
            url = f"{url}?{urllib.parse.urlencode(params)}"
        data = json.dumps(body).encode("utf-8") if body is not None else None
        request = urllib.request.Request(
            url, data=data, method=method, headers=self._headers(authenticated)
        )
        self._log.debug("%s %s", method, url)

        try:
            with urllib.request.urlopen(request, timeout=timeout or self.timeout) as response:
                raw = response.read()
        except urllib.error.HTTPError as exc:
            payload = _decode(exc.read())
            if exc.code == 401:
                raise AuthenticationError(
                    "Authentication failed (401). Run `hosby login` again."
                ) from exc
            message = _server_message(payload) or exc.reason
            raise NetworkError(
                f"Server returned {exc.code}: {message}", status=exc.code, payload=payload
            ) from exc
        except (socket.timeout, TimeoutError) as exc:
            raise NetworkTimeoutError(
                f"Request to {url} timed out after {timeout or self.timeout:g} seconds."
            ) from exc
        except urllib.error.URLError as exc:
            if isinstance(exc.reason, (socket.timeout, TimeoutError)):
                raise NetworkTimeoutError(
                    f"Request to {url} timed out after {timeout or self.timeout:g} seconds."
                ) from exc
            raise NetworkError(f"Could not reach {self.base_url}: {exc.reason}") from exc
        except (OSError, http.client.HTTPException) as exc:
            # dropped connections surface while reading the response, unwrapped by urlopen
            raise NetworkError(f"Could not reach {self.base_url}: {exc}") from exc

        return _decode(raw)

    # ------------------------------------------------------------------
    # Endpoints
    # ------------------------------------------------------------------

    def pull(
        self, project_id: str, schema_hash: str, last_pull_time: datetime | None = None
    ) -> PullResponse:
        params = {"schemaHash": schema_hash}
        if last_pull_time is not None:
            params["lastPullTime"] = format_timestamp(last_pull_time)
        payload = self._request("GET", f"/projects/{urllib.parse.quote(project_id)}/pull", params=params)
        return PullResponse.from_payload(payload)

    def push(self, project_id: str, document: SchemaDocument, schema_hash: str) -> Any:
        body = {
            **document,
            "_meta": {
                "schemaHash": schema_hash,
                "clientVersion": client_version(),
                "timestamp": format_timestamp(datetime.now(timezone.utc)),
            },
        }
        return self._request("POST", f"/projects/{urllib.parse.quote(project_id)}/push", body=body)

    def login(self, email: str, cli_token: str) -> AuthCredentials:
        """Exchange an email and CLI token for session credentials.

        Raises:
            AuthenticationError: The server rejected the credentials.
        """
        try:
            payload = self._request(
                "POST",
                "/auth/login",
                body={"email": email, "cliToken": cli_token},
                authenticated=False,
                timeout=_LOGIN_TIMEOUT,
            )
        except NetworkError as exc:
            if exc.status is not None and 400 <= exc.status < 500:
                raise AuthenticationError(
                    _server_message(exc.payload) or "Authentication failed"
                ) from exc
            raise

        if not isinstance(payload, dict) or not payload.get("success"):
            message = _server_message(payload) or "Authentication failed"
            raise AuthenticationError(message)
        data = payload.get("data") or {}
        try:
            return AuthCredentials(
                user_id=str(data["userId"]),
                cli_token=str(data["userCliToken"]),
                session_token=str(data["sessionToken"]),
            )
        except (KeyError, TypeError) as exc:
            raise AuthenticationError("Login response is missing session credentials") from exc


def _decode(raw: bytes) -> Any:
    if not raw:
        return None
    try:
        return json.loads(raw.decode("utf-8"))
    except ValueError:
        return raw.decode("utf-8", errors="replace")


def _server_message(payload: Any) -> str | None:
    if isinstance(payload, dict):
        message = payload.get("message") or payload.get("error")
        return str(message) if message else None
    if isinstance(payload, str) and payload.strip():
        return payload.strip()[:200]
    return None
