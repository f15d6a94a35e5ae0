"""Tests for the LogConfig object."""

from __future__ import annotations

import logging
from io import StringIO

import pytest
from rich.console import Console

from hosby.logging_config import LogConfig, null_config, parse_level


@pytest.mark.parametrize(
    "value,expected",
    [
        ("debug", logging.DEBUG),
        ("INFO", logging.INFO),
        ("warn", logging.WARNING),
        ("warning", logging.WARNING),
        (" error ", logging.ERROR),
        (logging.ERROR, logging.ERROR),
        (None, logging.INFO),
        ("verbose", logging.INFO),
    ],
)
def test_parse_level(value, expected):
    assert parse_level(value) == expected


def test_none_level_silences_everything():
    assert parse_level("none") > logging.CRITICAL
    assert null_config().logger("quiet").isEnabledFor(logging.CRITICAL) is False


def test_logger_is_namespaced_child():
    log = LogConfig.from_level("debug").logger("selector")
    assert log.name == "hosby.selector"
    assert log.level == logging.DEBUG
    assert log.isEnabledFor(logging.DEBUG)


def test_debug_enabled():
    assert LogConfig.from_level("debug").debug_enabled
    assert not LogConfig.from_level("info").debug_enabled


def test_one_handler_per_config():
    cfg = LogConfig()
    a, b = cfg.logger("a"), cfg.logger("b")
    assert a.handlers == b.handlers == [cfg.handler()]
    assert a.propagate is False
    assert cfg.logger("a") is a


def test_configs_do_not_share_level():
    loud = LogConfig.from_level("debug").logger("client")
    quiet = null_config().logger("client")

    assert loud is not quiet
    assert loud.isEnabledFor(logging.DEBUG)
    assert not quiet.isEnabledFor(logging.CRITICAL)


def test_configs_write_to_their_own_console():
    first_out, second_out = StringIO(), StringIO()
    first = LogConfig(console=Console(file=first_out, width=120))
    second = LogConfig(console=Console(file=second_out, width=120))

    first.logger("sync").info("first message")
    second.logger("sync").info("second message")

    assert "first message" in first_out.getvalue()
    assert "second message" not in first_out.getvalue()
    assert "second message" in second_out.getvalue()


def test_global_logging_tree_untouched():
    LogConfig.from_level("debug").logger("store")
    assert "hosby.store" not in logging.Logger.manager.loggerDict
