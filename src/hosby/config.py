"""Hosby configuration loader.

Priority (high → low):
  1. CLI flags           (handled at call site — not in this module)
  2. Environment variables  (HOSBY_API_URL, HOSBY_LOG_LEVEL, HOSBY_AI_PROVIDER)
  3. Per-project hosby.yaml  (next to hosby.schema.json)
  4. Global ~/.hosby/config.yaml  (defaults only — no API keys)
  5. Hardcoded defaults

Global config must never contain API keys; they belong in the credential
store (``hosby config ai``) or in environment variables.
All YAML reads use yaml.safe_load() — never yaml.load().
"""

from __future__ import annotations

import os
import re
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from hosby.exceptions import ConfigError, StorageError

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

GLOBAL_CONFIG_DIR: Path = Path.home() / ".hosby"
_GLOBAL_CONFIG_PATH: Path = GLOBAL_CONFIG_DIR / "config.yaml"
_PROJECT_CONFIG_NAME: str = "hosby.yaml"

DEFAULT_API_URL = "https://cli.hosby.io/cli"

# Matches: api_key, apikey, api-key, api_secret, _token (suffix), standalone token,
# standalone secret, _secret (suffix), password, passwd, credential(s).
# Does NOT match legitimate config keys like max_tokens or token_warning.
_API_KEY_RE: re.Pattern[str] = re.compile(
    r"api[_\-]?(?:key|secret)"
    r"|_token$"
    r"|^token$"
    r"|_secret$"
    r"|^secret$"
    r"|passw(?:ord|d)"
    r"|credential",
    re.IGNORECASE,
)

_KNOWN_SECTIONS: frozenset[str] = frozenset(["scan", "ai", "sync", "logging"])


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------


@dataclass
class ScanCfg:
    """File selection limits and extra exclusions (hosby.yaml: scan:).

    Attributes:
        max_file_size: Files larger than this many bytes are never candidates.
        max_files: Upper bound on the number of selected files.
        max_total_size: Upper bound on the summed reduced content length.
        include_comments: Keep comments in reduced content.
        include_imports: Keep relative import statements in reduced content.
        ignore: Extra glob patterns appended to the built-in ignore list.
        ignored_components: Extra component/table names appended to the
            built-in ignored-component list (``*`` wildcards allowed).
    """

    max_file_size: int = 100 * 1024
    max_files: int = 50
    max_total_size: int = 500 * 1024
    include_comments: bool = False
    include_imports: bool = True
    ignore: list[str] = field(default_factory=list)
    ignored_components: list[str] = field(default_factory=list)


@dataclass
class AICfg:
    """AI inference configuration (hosby.yaml: ai:)."""

    provider: str | None = None
    model: str | None = None
    timeout: float = 60.0
    max_tokens: int = 4_000
    max_file_size: int = 50 * 1024
    max_files: int = 30
    max_total_size: int = 300 * 1024
    token_warning: int = 120_000
    system_prompt: str | None = None


@dataclass
class SyncCfg:
    """Backend synchronization configuration (hosby.yaml: sync:)."""

    api_url: str = DEFAULT_API_URL
    timeout: float = 30.0


@dataclass
class LoggingCfg:
    """Log level name: debug | info | warn | error | none."""

    level: str = "info"


@dataclass
class HosbyConfig:
    """Root configuration object, built by load_config() from merged YAML layers."""

    scan: ScanCfg = field(default_factory=ScanCfg)
    ai: AICfg = field(default_factory=AICfg)
    sync: SyncCfg = field(default_factory=SyncCfg)
    logging: LoggingCfg = field(default_factory=LoggingCfg)


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------


def _check_no_api_keys(data: dict[str, Any], source: Path) -> None:
    """Raise ConfigError if *data* contains any API-key-like key names."""

    def _scan(obj: Any, path: str) -> None:
        if isinstance(obj, dict):
            for k, v in obj.items():
                full = f"{path}.{k}" if path else k
                if _API_KEY_RE.search(str(k)):
                    raise ConfigError(
                        f"Config file '{source}' contains a forbidden key '{full}'.\n"
                        f"  API keys must not be stored in config files.\n"
                        f"  Remove '{full}' from {source.name} and use:\n"
                        f"    hosby config ai --provider <provider> --api-key <key>"
                    )
                _scan(v, full)

    _scan(data, "")


def _validate_api_url(url: str) -> None:
    if not url.startswith(("https://", "http://")):
        raise ConfigError(
            f"sync.api_url must be an http(s) URL: '{url}'\n"
            f"  Example: sync.api_url: {DEFAULT_API_URL}"
        )


def _warn_unknown_keys(data: dict[str, Any], source: Path) -> None:
    """Emit a UserWarning for unrecognised top-level keys."""
    for key in data:
        if key not in _KNOWN_SECTIONS:
            warnings.warn(
                f"Unknown config key '{key}' in '{source}' — ignored.",
                UserWarning,
                stacklevel=4,
            )


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Could not parse config file '{path}': {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Config file '{path}' must contain a mapping at the top level.")
    return data


# ---------------------------------------------------------------------------
# Merge + build
# ---------------------------------------------------------------------------


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return a new dict that is *base* deep-merged with *override*."""
    result = dict(base)
    for k, v in override.items():
        if k in result and isinstance(result[k], dict) and isinstance(v, dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


def _str_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    return [str(v) for v in value]


def _cfg_from_dict(data: dict[str, Any]) -> HosbyConfig:
    """Build a *HosbyConfig* from a merged raw YAML dict."""
    cfg = HosbyConfig()

    if "scan" in data:
        s = data["scan"] or {}
        cfg.scan = ScanCfg(
            max_file_size=int(s.get("max_file_size", cfg.scan.max_file_size)),
            max_files=int(s.get("max_files", cfg.scan.max_files)),
            max_total_size=int(s.get("max_total_size", cfg.scan.max_total_size)),
            include_comments=bool(s.get("include_comments", cfg.scan.include_comments)),
            include_imports=bool(s.get("include_imports", cfg.scan.include_imports)),
            ignore=_str_list(s.get("ignore")),
            ignored_components=_str_list(s.get("ignored_components")),
        )

    if "ai" in data:
        a = data["ai"] or {}
        cfg.ai = AICfg(
            provider=a.get("provider") or cfg.ai.provider,
            model=a.get("model") or cfg.ai.model,
            timeout=float(a.get("timeout", cfg.ai.timeout)),
            max_tokens=int(a.get("max_tokens", cfg.ai.max_tokens)),
            max_file_size=int(a.get("max_file_size", cfg.ai.max_file_size)),
            max_files=int(a.get("max_files", cfg.ai.max_files)),
            max_total_size=int(a.get("max_total_size", cfg.ai.max_total_size)),
            token_warning=int(a.get("token_warning", cfg.ai.token_warning)),
            system_prompt=a.get("system_prompt") or cfg.ai.system_prompt,
        )

    if "sync" in data:
        y = data["sync"] or {}
        cfg.sync = SyncCfg(
            api_url=str(y.get("api_url", cfg.sync.api_url)).rstrip("/"),
            timeout=float(y.get("timeout", cfg.sync.timeout)),
        )

    if "logging" in data:
        lg = data["logging"] or {}
        cfg.logging = LoggingCfg(level=str(lg.get("level", cfg.logging.level)))

    return cfg


def _apply_env_overrides(cfg: HosbyConfig) -> HosbyConfig:
    """Apply HOSBY_* environment variable overrides (layer 2)."""
    if url := os.environ.get("HOSBY_API_URL"):
        cfg.sync.api_url = url.rstrip("/")
    if level := os.environ.get("HOSBY_LOG_LEVEL"):
        cfg.logging.level = level
    if provider := os.environ.get("HOSBY_AI_PROVIDER"):
        cfg.ai.provider = provider
    return cfg


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(
    project_dir: Path | None = None,
    *,
    global_config_path: Path | None = None,
) -> HosbyConfig:
    """Load and return a merged *HosbyConfig*.

    Applies layers in order: global → per-project → env vars.
    CLI flag overrides must be applied by the caller after this function.

    Args:
        project_dir: Directory to search for *hosby.yaml*. Defaults to CWD.
        global_config_path: Override the global config path (for testing).

    Raises:
        ConfigError: If a config file is not a mapping, the global config
            contains API-key-like fields, or ``sync.api_url`` is not http(s).
    """
    global_path = global_config_path if global_config_path is not None else _GLOBAL_CONFIG_PATH
    search_dir = project_dir if project_dir is not None else Path.cwd()

    merged: dict[str, Any] = {}

    if global_path.exists():
        raw_global = _read_yaml(global_path)
        _check_no_api_keys(raw_global, global_path)
        _warn_unknown_keys(raw_global, global_path)
        merged = _deep_merge(merged, raw_global)

    project_cfg_path = search_dir / _PROJECT_CONFIG_NAME
    if project_cfg_path.exists():
        raw_project = _read_yaml(project_cfg_path)
        _check_no_api_keys(raw_project, project_cfg_path)
        _warn_unknown_keys(raw_project, project_cfg_path)
        merged = _deep_merge(merged, raw_project)

    cfg = _apply_env_overrides(_cfg_from_dict(merged))
    _validate_api_url(cfg.sync.api_url)
    return cfg


_GLOBAL_CONFIG_TEMPLATE = (
    "# Hosby global configuration — defaults only.\n"
    "# NEVER store API keys here — use:\n"
    "#   hosby config ai --provider openai --api-key sk-...\n"
    "\n"
    "ai:\n"
    "  timeout: 60\n"
    "\n"
    "sync:\n"
    f"  api_url: {DEFAULT_API_URL}\n"
    "\n"
    "logging:\n"
    "  level: info\n"
)


def ensure_global_config(
    global_config_path: Path | None = None,
) -> Path:
    """Create ``~/.hosby/config.yaml`` with defaults if it does not exist.

    Creates parent directory with mode 0o700 and the config file with
    mode 0o600 (owner-readable only). Called by the commands that first
    populate ``~/.hosby`` (``hosby login``, ``hosby config ai``).

    Raises:
        StorageError: If the directory or file cannot be created.
    """
    target = global_config_path if global_config_path is not None else _GLOBAL_CONFIG_PATH
    if target.exists():
        return target
    try:
        target.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
        fd = os.open(target, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(_GLOBAL_CONFIG_TEMPLATE)
    except FileExistsError:
        return target
    except OSError as exc:
        raise StorageError(f"Failed to write {target}: {exc}", path=target) from exc
    return target
