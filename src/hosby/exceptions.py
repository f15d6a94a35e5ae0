"""Hosby exception hierarchy.

Every error that reaches the command boundary derives from ``HosbyError``.
The CLI catches it, prints a one-line diagnostic and exits with code 1.

  HosbyError
  ├── ValidationError          bad path, missing/malformed schema, missing project id
  │   └── ConfigError          invalid or forbidden config value
  ├── StorageError             a local file (schema, sync marker, credentials) could not be written
  ├── AuthenticationError      missing/invalid credentials, HTTP 401
  ├── NetworkError             connection failure, non-2xx response
  │   └── NetworkTimeoutError
  ├── InferenceError           AI schema inference failures
  │   ├── InferenceParseError
  │   ├── InferenceTimeoutError
  │   ├── RateLimitError
  │   ├── InvalidCredentialError
  │   ├── ContextLengthError
  │   └── ProviderNotConfiguredError
  └── ConflictUnresolved       pull conflict without a valid resolution choice
"""

from __future__ import annotations

from typing import Any


class HosbyError(Exception):
    """Base class for all user-facing Hosby errors."""


class ValidationError(HosbyError):
    """Input is locally invalid; the operation aborts without side effects."""


class ConfigError(ValidationError):
    """Raised when a config file contains an invalid or forbidden value."""


class StorageError(HosbyError):
    """A local file could not be written.

    Attributes:
        path: The file that failed.
    """

    def __init__(self, message: str, path: Any = None) -> None:
        super().__init__(message)
        self.path = path


class AuthenticationError(HosbyError):
    """Credentials are missing or were rejected by the backend."""


class NetworkError(HosbyError):
    """Backend request failed.

    Attributes:
        status: HTTP status code, or None when no response was received.
        payload: Server-provided diagnostic body (decoded JSON or raw text).
    """

    def __init__(self, message: str, status: int | None = None, payload: Any = None) -> None:
        super().__init__(message)
        self.status = status
        self.payload = payload


class NetworkTimeoutError(NetworkError):
    """Backend request exceeded the configured timeout."""


class InferenceError(HosbyError):
    """AI schema inference failed."""


class InferenceParseError(InferenceError):
    """The AI response was not a JSON object."""

    def __init__(self, message: str, raw: str = "") -> None:
        super().__init__(message)
        self.raw = raw


class InferenceTimeoutError(InferenceError):
    """The AI request was aborted after *timeout* seconds."""

    def __init__(self, timeout: float) -> None:
        super().__init__(
            f"AI analysis timed out after {timeout:g} seconds. "
            "Try with fewer files or a smaller project."
        )
        self.timeout = timeout


class RateLimitError(InferenceError):
    """The AI provider rejected the request due to rate limiting."""


class InvalidCredentialError(InferenceError):
    """The AI provider rejected the API key."""


class ContextLengthError(InferenceError):
    """The reduced project content exceeds the model's context window."""


class ProviderNotConfiguredError(InferenceError):
    """No AI provider or API key could be resolved."""


class ConflictUnresolved(HosbyError):
    """A pull conflict requires a resolution choice and none was given."""
