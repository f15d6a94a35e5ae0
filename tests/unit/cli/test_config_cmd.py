"""Tests for hosby config project / hosby config ai."""

from __future__ import annotations

import json
from pathlib import Path

from typer.testing import CliRunner

from hosby.cli.main import app

runner = CliRunner()


# ------------------------------------------------------------------
# hosby config project
# ------------------------------------------------------------------


def test_config_project_creates_schema(tmp_path: Path) -> None:
    result = runner.invoke(
        app, ["config", "project", "--id", "p7", "--name", "Shop", "--dir", str(tmp_path)]
    )

    assert result.exit_code == 0, result.output
    assert "Project configured: Shop (p7)" in result.output
    doc = json.loads((tmp_path / "hosby.schema.json").read_text(encoding="utf-8"))
    assert doc["metadata"]["project"] == {"id": "p7", "name": "Shop"}
    assert doc["tables"] == {}


def test_config_project_keeps_tables(project_dir: Path) -> None:
    result = runner.invoke(
        app, ["config", "project", "--id", "p2", "--name", "Next", "--dir", str(project_dir)]
    )

    assert result.exit_code == 0, result.output
    doc = json.loads((project_dir / "hosby.schema.json").read_text(encoding="utf-8"))
    assert doc["tables"] == {"users": {"id": "string", "age": "number"}}
    assert doc["metadata"]["project"]["id"] == "p2"


def test_config_project_rejects_empty_id(tmp_path: Path) -> None:
    result = runner.invoke(
        app, ["config", "project", "--id", "  ", "--name", "Shop", "--dir", str(tmp_path)]
    )

    assert result.exit_code == 1
    assert "must not be empty" in result.output
    assert not (tmp_path / "hosby.schema.json").exists()


# ------------------------------------------------------------------
# hosby config ai
# ------------------------------------------------------------------


def test_config_ai_stores_provider_and_key(credentials_store) -> None:
    result = runner.invoke(app, ["config", "ai", "--provider", "openai", "--api-key", "sk-abc"])

    assert result.exit_code == 0, result.output
    assert "AI provider set to OpenAI" in result.output
    assert credentials_store.get("ai-provider") == "openai"
    assert credentials_store.get("openai-api-key") == "sk-abc"


def test_config_ai_rejects_malformed_key(credentials_store) -> None:
    result = runner.invoke(app, ["config", "ai", "--provider", "openai", "--api-key", "abc"])

    assert result.exit_code == 1
    assert "should start with 'sk-'" in result.output
    assert credentials_store.get("openai-api-key") is None
    assert credentials_store.get("ai-provider") is None


def test_config_ai_unknown_provider(credentials_store) -> None:
    result = runner.invoke(app, ["config", "ai", "--provider", "gemini"])

    assert result.exit_code == 1
    assert "Unsupported AI provider" in result.output
    assert credentials_store.get("ai-provider") is None


def test_config_ai_without_key_warns(credentials_store) -> None:
    result = runner.invoke(app, ["config", "ai", "--provider", "claude"])

    assert result.exit_code == 0, result.output
    assert "No API key stored" in result.output
    assert credentials_store.get("ai-provider") == "claude"


def test_config_ai_creates_global_config(credentials_store, isolated_home: Path) -> None:
    result = runner.invoke(app, ["config", "ai", "--provider", "claude", "--api-key", "sk-ant-abc"])

    assert result.exit_code == 0, result.output
    assert (isolated_home / "config.yaml").is_file()


def test_config_ai_rejected_key_writes_nothing(isolated_home: Path) -> None:
    runner.invoke(app, ["config", "ai", "--provider", "openai", "--api-key", "abc"])
    assert not (isolated_home / "config.yaml").exists()
