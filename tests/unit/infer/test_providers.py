"""Tests for provider specs and key validation."""

from __future__ import annotations

import pytest

from hosby.infer.providers import AI_PROVIDERS, get_provider


def test_get_provider_is_case_insensitive():
    assert get_provider("OpenAI").id == "openai"
    assert get_provider("claude").name == "Claude AI"


def test_get_provider_unknown():
    with pytest.raises(ValueError, match="Choose one of: claude, openai"):
        get_provider("gemini")


def test_openai_key_must_start_with_sk():
    spec = AI_PROVIDERS["openai"]
    assert spec.validate_key("sk-abc") is None
    assert "sk-" in spec.validate_key("abc")


def test_claude_key_only_required():
    spec = AI_PROVIDERS["claude"]
    assert spec.validate_key("anything") is None
    assert spec.validate_key("") == "API key is required"


def test_default_model_env_override(monkeypatch):
    spec = AI_PROVIDERS["openai"]
    assert spec.default_model == "openai/gpt-4o-mini"
    monkeypatch.setenv("OPENAI_MODEL", "openai/gpt-4o")
    assert spec.default_model == "openai/gpt-4o"


def test_only_openai_uses_json_mode():
    assert AI_PROVIDERS["openai"].json_mode is True
    assert AI_PROVIDERS["claude"].json_mode is False
