"""Tests for hosby error messages."""

from __future__ import annotations

import pytest

from hosby.cli.errors import err_network, format_error
from hosby.exceptions import (
    AuthenticationError,
    ConfigError,
    ConflictUnresolved,
    ContextLengthError,
    HosbyError,
    InferenceError,
    InferenceParseError,
    InferenceTimeoutError,
    NetworkError,
    NetworkTimeoutError,
    ProviderNotConfiguredError,
    StorageError,
    ValidationError,
)


@pytest.mark.parametrize(
    "exc,action",
    [
        (AuthenticationError("Not logged in."), "hosby login"),
        (NetworkError("Could not reach host"), "HOSBY_API_URL"),
        (NetworkTimeoutError("timed out"), "Retry"),
        (ProviderNotConfiguredError("No AI provider configured."), "hosby config ai"),
        (InferenceTimeoutError(60.0), "--timeout"),
        (InferenceParseError("AI response is not valid JSON"), "no schema was written"),
        (InferenceError("AI analysis failed: boom"), "without --ai"),
        (ConflictUnresolved("No choice."), "hosby pull"),
        (ConfigError("bad yaml"), "hosby.yaml"),
        (StorageError("Failed to write /ro/hosby.schema.json"), "writable"),
    ],
)
def test_errors_carry_an_action(exc: HosbyError, action: str) -> None:
    message = format_error(exc)
    assert str(exc) in message
    assert action in message


def test_conflict_is_an_abort_not_an_error() -> None:
    assert format_error(ConflictUnresolved("x")).startswith("[yellow]Pull aborted:[/]")


def test_specific_inference_errors_print_message_only() -> None:
    message = format_error(ContextLengthError("Scan a smaller directory."))
    assert message == "[red]Error:[/] Scan a smaller directory."


def test_plain_errors() -> None:
    assert format_error(ValidationError("nope")) == "[red]Error:[/] nope"


def test_network_details_from_payload() -> None:
    message = err_network("Server returned 400: bad", {"details": "tables.users empty"})
    assert "Server details: tables.users empty" in message


def test_markup_in_messages_is_escaped() -> None:
    message = format_error(ValidationError("value [bold]x[/bold]"))
    assert "\\[bold]" in message
