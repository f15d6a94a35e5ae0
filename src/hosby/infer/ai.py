"""AI schema inference through a completion provider.

The reduced project content is sent with a fixed instruction; the reply must
be a JSON object with a ``tables`` key. Provider failures are translated into
the ``InferenceError`` family so the CLI can print an actionable message.
"""

from __future__ import annotations

import json
import os
import re
from pathlib import Path
from typing import Any

import litellm

from hosby.auth.store import CredentialStore
from hosby.config import AICfg
from hosby.exceptions import (
    ContextLengthError,
    InferenceError,
    InferenceParseError,
    InferenceTimeoutError,
    InvalidCredentialError,
    ProviderNotConfiguredError,
    RateLimitError,
    ValidationError,
)
from hosby.infer.llm_client import complete, count_tokens
from hosby.infer.prompts import SYSTEM_PROMPT, build_user_prompt
from hosby.infer.providers import PROVIDER_CREDENTIAL_KEY, ProviderSpec, get_provider
from hosby.logging_config import LogConfig, null_config
from hosby.scan.reducer import ContentReducer
from hosby.scan.selector import FileSelector, SelectionLimits
from hosby.schema.models import SchemaDocument, empty_schema, table_count

_CODE_FENCE_RE = re.compile(r"^\s*```[\w-]*\s*\n?(.*?)\n?\s*```\s*$", re.DOTALL)


# ------------------------------------------------------------------
# Provider / key resolution
# ------------------------------------------------------------------


def resolve_provider(
    explicit: str | None,
    store: CredentialStore,
    configured: str | None = None,
) -> ProviderSpec:
    """Explicit option, then the saved selection, then config."""
    provider_id = explicit or store.get(PROVIDER_CREDENTIAL_KEY) or configured
    if not provider_id:
        raise ProviderNotConfiguredError(
            "No AI provider configured. Run `hosby config ai --provider openai|claude`."
        )
    try:
        return get_provider(provider_id)
    except ValueError as exc:
        raise ProviderNotConfiguredError(str(exc)) from exc


def resolve_api_key(provider: ProviderSpec, explicit: str | None, store: CredentialStore) -> str:
    """Explicit key, then the credential store, then the provider's env var."""
    key = explicit or store.get(provider.credential_key) or os.environ.get(provider.env_var)
    if not key:
        raise ProviderNotConfiguredError(
            f"No API key found for {provider.name}. Run "
            f"`hosby config ai --provider {provider.id} --api-key ...` "
            f"or set {provider.env_var}."
        )
    return key


# ------------------------------------------------------------------
# Response parsing
# ------------------------------------------------------------------


def strip_code_fence(text: str) -> str:
    match = _CODE_FENCE_RE.match(text)
    return match.group(1) if match else text


def parse_response(text: str) -> dict[str, Any]:
    """Parse the provider reply strictly as a JSON object.

    Raises:
        InferenceParseError: If the reply is not JSON or not an object.
    """
    try:
        data = json.loads(strip_code_fence(text).strip())
    except ValueError as exc:
        raise InferenceParseError(f"AI response is not valid JSON: {exc}", raw=text) from exc
    if not isinstance(data, dict):
        raise InferenceParseError("AI response is not a JSON object", raw=text)
    return data


def translate_error(exc: Exception, timeout: float) -> InferenceError:
    """Map a litellm failure onto the InferenceError family."""
    if isinstance(exc, litellm.exceptions.Timeout):
        return InferenceTimeoutError(timeout)
    if isinstance(exc, litellm.exceptions.RateLimitError):
        return RateLimitError(
            "AI provider rate limit reached. Wait a moment and retry, or switch provider "
            "with `hosby config ai`."
        )
    if isinstance(exc, litellm.exceptions.AuthenticationError):
        return InvalidCredentialError(
            "AI provider rejected the API key. Update it with "
            "`hosby config ai --provider <id> --api-key ...`."
        )
    if isinstance(exc, litellm.exceptions.ContextWindowExceededError) or (
        "maximum context length" in str(exc)
    ):
        return ContextLengthError(
            "Project content exceeds the model's context length. Scan a smaller directory "
            "or lower ai.max_total_size in hosby.yaml."
        )
    return InferenceError(f"AI analysis failed: {exc}")


# ------------------------------------------------------------------
# Inferencer
# ------------------------------------------------------------------


class AIInferencer:
    """Infer a schema by asking a completion provider.

    Args:
        provider: Provider to call.
        api_key: Provider API key.
        model: LiteLLM model string; defaults to the provider's model.
        timeout: Wall-clock limit for the completion request, in seconds.
        max_tokens: Response-size cap.
        token_warning: Warn when the request is estimated above this many tokens.
        selector: File selector; defaults to the AI selection limits with
            comments removed and imports kept.
        system_prompt: Overrides the built-in instruction.
        log_config: Logging configuration for this component.
    """

    def __init__(
        self,
        provider: ProviderSpec,
        api_key: str,
        *,
        model: str | None = None,
        timeout: float = 60.0,
        max_tokens: int = 4_000,
        token_warning: int = 120_000,
        selector: FileSelector | None = None,
        system_prompt: str | None = None,
        log_config: LogConfig | None = None,
    ) -> None:
        self.provider = provider
        self.api_key = api_key
        self.model = model or provider.default_model
        self.timeout = timeout
        self.max_tokens = max_tokens
        self.token_warning = token_warning
        self.system_prompt = system_prompt or SYSTEM_PROMPT
        self.selector = selector or FileSelector(
            reducer=ContentReducer(include_comments=False, include_imports=True, log_config=log_config),
            log_config=log_config,
        )
        self._log = (log_config or null_config()).logger("ai")

    @classmethod
    def from_config(
        cls,
        cfg: AICfg,
        store: CredentialStore,
        *,
        provider: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
        ignore_patterns: tuple[str, ...] | list[str] = (),
        ignored_components: tuple[str, ...] | list[str] = (),
        log_config: LogConfig | None = None,
    ) -> AIInferencer:
        spec = resolve_provider(provider, store, cfg.provider)
        key = resolve_api_key(spec, api_key, store)
        selector = FileSelector(
            limits=SelectionLimits(
                max_file_size=cfg.max_file_size,
                max_files=cfg.max_files,
                max_total_size=cfg.max_total_size,
            ),
            reducer=ContentReducer(
                include_comments=False,
                include_imports=True,
                ignored_components=ignored_components,
                log_config=log_config,
            ),
            ignore_patterns=ignore_patterns,
            ignored_components=ignored_components,
            log_config=log_config,
        )
        return cls(
            spec,
            key,
            model=cfg.model,
            timeout=timeout if timeout is not None else cfg.timeout,
            max_tokens=cfg.max_tokens,
            token_warning=cfg.token_warning,
            selector=selector,
            system_prompt=cfg.system_prompt,
            log_config=log_config,
        )

    def infer(self, path: Path) -> SchemaDocument:
        root = Path(path)
        if not root.is_dir():
            raise ValidationError(f"Scan path is not a directory: {root}")

        selection = self.selector.select(root)
        if not selection.selected_files:
            self._log.warning("No business logic files found under %s", root)
            return empty_schema()

        tokens = count_tokens(self.model, selection.content)
        if tokens > self.token_warning:
            self._log.warning(
                "Project content is large (~%d tokens); the %s request may fail or be slow",
                tokens,
                self.provider.name,
            )

        messages = [
            {"role": "system", "content": self.system_prompt},
            {"role": "user", "content": build_user_prompt(selection.content)},
        ]
        self._log.info("Analyzing %d files with %s (%s)", len(selection.selected_files),
                       self.provider.name, self.model)
        try:
            text = complete(
                self.model,
                messages,
                api_key=self.api_key,
                max_tokens=self.max_tokens,
                temperature=0.0,
                timeout=self.timeout,
                json_mode=self.provider.json_mode,
            )
        except Exception as exc:
            raise translate_error(exc, self.timeout) from exc

        data = parse_response(text)
        if not isinstance(data.get("tables"), dict):
            self._log.warning("AI response has no 'tables' object; using an empty schema")
            return empty_schema()
        if table_count(data) == 0:
            self._log.warning("AI analysis found no tables")
        return data
