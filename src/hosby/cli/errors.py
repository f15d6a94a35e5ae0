"""Hosby rich error messages — actionable feedback.

Every error shown to the user must contain:
  1. What went wrong (clear cause)
  2. The exact action the user should take to fix it

Usage:
    from hosby.cli.errors import format_error
    console.print(format_error(exc))
    raise typer.Exit(1)
"""

from __future__ import annotations

from rich.markup import escape

from hosby.exceptions import (
    AuthenticationError,
    ConfigError,
    ConflictUnresolved,
    ContextLengthError,
    HosbyError,
    InferenceError,
    InferenceParseError,
    InferenceTimeoutError,
    InvalidCredentialError,
    NetworkError,
    NetworkTimeoutError,
    ProviderNotConfiguredError,
    RateLimitError,
    StorageError,
)


def err_auth(message: str) -> str:
    """Missing session or a 401 from the backend."""
    return (
        f"[red]Error:[/] {escape(message)}\n"
        "  Run:  hosby login"
    )


def err_network(message: str, payload: object = None) -> str:
    text = f"[red]Error:[/] {escape(message)}\n"
    if isinstance(payload, dict) and payload.get("details"):
        text += f"  Server details: {escape(str(payload['details']))}\n"
    return text + "  Check your connection and HOSBY_API_URL, then retry."


def err_network_timeout(message: str) -> str:
    return (
        f"[red]Error:[/] {escape(message)}\n"
        "  The Hosby backend did not answer in time. Retry in a moment."
    )


def err_no_provider(message: str) -> str:
    return (
        f"[red]Error:[/] {escape(message)}\n"
        "  Configure one:  hosby config ai --provider openai --api-key sk-..."
    )


def err_ai_timeout(message: str) -> str:
    return (
        f"[red]Error:[/] {escape(message)}\n"
        "  Tip:  hosby scan --ai --timeout 120  or scan a subdirectory."
    )


def err_ai_parse(message: str) -> str:
    return (
        f"[red]Error:[/] {escape(message)}\n"
        "  The AI reply could not be used; no schema was written.\n"
        "  Retry, or run  hosby scan  without --ai."
    )


def err_ai_failure(message: str) -> str:
    return (
        f"[red]Error:[/] {escape(message)}\n"
        "  Retry, switch provider with  hosby config ai, or run  hosby scan  without --ai."
    )


def err_conflict_unresolved(message: str) -> str:
    return (
        f"[yellow]Pull aborted:[/] {escape(message)}\n"
        "  Run  hosby pull  again and choose server, local or merge."
    )


def err_invalid_api_key(provider: str, reason: str) -> str:
    return (
        f"[red]Error:[/] {escape(reason)}\n"
        f"  Run:  hosby config ai --provider {escape(provider)} --api-key <key>"
    )


def err_storage(message: str) -> str:
    return (
        f"[red]Error:[/] {escape(message)}\n"
        "  Check that the directory exists and is writable, then retry."
    )


def err_config(message: str) -> str:
    return (
        f"[red]Error:[/] {escape(message)}\n"
        "  Fix the config file (hosby.yaml or ~/.hosby/config.yaml) and retry."
    )


def format_error(exc: HosbyError) -> str:
    """Pick the message builder for *exc*."""
    message = str(exc)
    if isinstance(exc, ConfigError):
        return err_config(message)
    if isinstance(exc, StorageError):
        return err_storage(message)
    if isinstance(exc, AuthenticationError):
        return err_auth(message)
    if isinstance(exc, NetworkTimeoutError):
        return err_network_timeout(message)
    if isinstance(exc, NetworkError):
        return err_network(message, exc.payload)
    if isinstance(exc, ProviderNotConfiguredError):
        return err_no_provider(message)
    if isinstance(exc, InferenceTimeoutError):
        return err_ai_timeout(message)
    if isinstance(exc, InferenceParseError):
        return err_ai_parse(message)
    if isinstance(exc, (RateLimitError, InvalidCredentialError, ContextLengthError)):
        return f"[red]Error:[/] {escape(message)}"
    if isinstance(exc, InferenceError):
        return err_ai_failure(message)
    if isinstance(exc, ConflictUnresolved):
        return err_conflict_unresolved(message)
    return f"[red]Error:[/] {escape(message)}"
