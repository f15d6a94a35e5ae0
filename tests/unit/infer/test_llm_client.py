"""Tests for the LiteLLM completion wrapper."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

from hosby.infer.llm_client import complete, count_tokens

_MESSAGES = [{"role": "user", "content": "Hi"}]


def test_complete_returns_content():
    mock_response = MagicMock()
    mock_response.choices[0].message.content = '{"tables": {}}'

    with patch("hosby.infer.llm_client.litellm.completion", return_value=mock_response):
        result = complete("openai/gpt-4o-mini", _MESSAGES)

    assert result == '{"tables": {}}'


def test_complete_returns_empty_string_on_none_content():
    mock_response = MagicMock()
    mock_response.choices[0].message.content = None

    with patch("hosby.infer.llm_client.litellm.completion", return_value=mock_response):
        assert complete("openai/gpt-4o-mini", _MESSAGES) == ""


def test_complete_passes_params_without_retries():
    mock_response = MagicMock()
    mock_response.choices[0].message.content = "ok"

    with patch("hosby.infer.llm_client.litellm.completion", return_value=mock_response) as mock_comp:
        complete(
            "openai/gpt-4o-mini",
            _MESSAGES,
            api_key="sk-test",
            max_tokens=123,
            timeout=9.0,
            json_mode=True,
        )

    kwargs = mock_comp.call_args.kwargs
    assert kwargs["model"] == "openai/gpt-4o-mini"
    assert kwargs["max_tokens"] == 123
    assert kwargs["timeout"] == 9.0
    assert kwargs["num_retries"] == 0
    assert kwargs["temperature"] == 0.0
    assert kwargs["api_key"] == "sk-test"
    assert kwargs["response_format"] == {"type": "json_object"}


def test_complete_omits_optional_params():
    mock_response = MagicMock()
    mock_response.choices[0].message.content = "ok"

    with patch("hosby.infer.llm_client.litellm.completion", return_value=mock_response) as mock_comp:
        complete("anthropic/claude-3-haiku-20240307", _MESSAGES)

    kwargs = mock_comp.call_args.kwargs
    assert "api_key" not in kwargs
    assert "response_format" not in kwargs


def test_count_tokens_uses_litellm():
    with patch("hosby.infer.llm_client.litellm.token_counter", return_value=42):
        assert count_tokens("openai/gpt-4o-mini", "hello") == 42


def test_count_tokens_falls_back_to_char_estimate():
    with patch("hosby.infer.llm_client.litellm.token_counter", side_effect=Exception("unknown")):
        assert count_tokens("mystery/model", "a" * 10) == 3
