"""LiteLLM client wrapper for schema inference.

All AI completion calls route through this module. Retries are disabled
(num_retries=0): a failed or timed-out inference is reported to the user,
who re-runs the command. The request timeout is enforced by litellm's HTTP
layer, which aborts the in-flight request when it elapses.
"""

from __future__ import annotations

from typing import Any

import litellm

# Disable LiteLLM verbose logging unless explicitly enabled
litellm.suppress_debug_info = True
litellm.set_verbose = False  # type: ignore[assignment]


def complete(
    model: str,
    messages: list[dict],
    *,
    api_key: str | None = None,
    max_tokens: int = 4_000,
    temperature: float = 0.0,
    timeout: float = 60.0,
    json_mode: bool = False,
) -> str:
    """Call litellm.completion() once. Returns content string.

    Args:
        model: LiteLLM model string (provider/model format).
        messages: OpenAI-style message list.
        api_key: Provider API key; litellm falls back to the provider's env var when None.
        max_tokens: Maximum output tokens.
        temperature: Sampling temperature (0 = deterministic).
        timeout: Hard wall-clock limit in seconds for the request.
        json_mode: Ask the provider for a JSON object response.

    Returns:
        The text content of the first choice.

    Raises:
        litellm.exceptions.Timeout: When *timeout* elapses.
        litellm.exceptions.APIError: And subclasses, on provider failure.
    """
    kwargs: dict[str, Any] = {
        "model": model,
        "messages": messages,
        "max_tokens": max_tokens,
        "temperature": temperature,
        "timeout": timeout,
        "num_retries": 0,
    }
    if api_key:
        kwargs["api_key"] = api_key
    if json_mode:
        kwargs["response_format"] = {"type": "json_object"}

    response = litellm.completion(**kwargs)
    return response.choices[0].message.content or ""


def count_tokens(model: str, text: str) -> int:
    """Count tokens in *text* for *model* using LiteLLM's provider-aware counter.

    Falls back to character-based approximation (4 chars ≈ 1 token) if the model
    is not supported by litellm.token_counter().
    """
    try:
        return litellm.token_counter(model=model, text=text)
    except Exception:
        return max(1, -(-len(text) // 4))
