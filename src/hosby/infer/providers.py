"""Supported AI providers and their credential conventions."""

from __future__ import annotations

import os
from collections.abc import Callable
from dataclasses import dataclass

# Credential-store key holding the persisted provider selection.
PROVIDER_CREDENTIAL_KEY = "ai-provider"


def _validate_openai_key(key: str) -> str | None:
    if not key.startswith("sk-"):
        return "Invalid OpenAI API key format (should start with 'sk-')"
    return None


def _validate_required(key: str) -> str | None:
    if not key:
        return "API key is required"
    return None


@dataclass(frozen=True)
class ProviderSpec:
    """One completion provider.

    Attributes:
        id: Short identifier used on the command line and in the store.
        name: Display name.
        credential_key: Credential-store key for the API key.
        env_var: Environment variable consulted when the store has no key.
        model_env_var: Environment variable overriding the default model.
        fallback_model: LiteLLM model string used when nothing overrides it.
        json_mode: Whether the provider supports a JSON response format.
        validate_key: Returns an error message for a malformed key, else None.
    """

    id: str
    name: str
    credential_key: str
    env_var: str
    model_env_var: str
    fallback_model: str
    json_mode: bool
    validate_key: Callable[[str], str | None]

    @property
    def default_model(self) -> str:
        return os.environ.get(self.model_env_var) or self.fallback_model


AI_PROVIDERS: dict[str, ProviderSpec] = {
    "openai": ProviderSpec(
        id="openai",
        name="OpenAI",
        credential_key="openai-api-key",
        env_var="OPENAI_API_KEY",
        model_env_var="OPENAI_MODEL",
        fallback_model="openai/gpt-4o-mini",
        json_mode=True,
        validate_key=_validate_openai_key,
    ),
    "claude": ProviderSpec(
        id="claude",
        name="Claude AI",
        credential_key="claude-api-key",
        env_var="ANTHROPIC_API_KEY",
        model_env_var="ANTHROPIC_MODEL",
        fallback_model="anthropic/claude-3-haiku-20240307",
        json_mode=False,
        validate_key=_validate_required,
    ),
}


def get_provider(provider_id: str) -> ProviderSpec:
    try:
        return AI_PROVIDERS[provider_id.lower()]
    except KeyError:
        known = ", ".join(sorted(AI_PROVIDERS))
        raise ValueError(f"Unsupported AI provider '{provider_id}'. Choose one of: {known}") from None
