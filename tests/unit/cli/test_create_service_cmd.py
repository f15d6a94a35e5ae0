"""Tests for hosby create-service (litellm is mocked)."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

from typer.testing import CliRunner

from hosby.cli.main import app

runner = CliRunner()

_COMPLETE = "hosby.codegen.service.complete"


def _service_file(project_dir: Path) -> Path:
    return project_dir / "src" / "services" / "users.service.ts"


def test_create_service_from_template(project_dir: Path) -> None:
    result = runner.invoke(app, ["create-service", "users", "--template", "--dir", str(project_dir)])

    assert result.exit_code == 0, result.output
    assert "generated successfully using template" in result.output
    code = _service_file(project_dir).read_text(encoding="utf-8")
    assert "export class UsersService" in code
    assert "  age: number;" in code


def test_create_service_unknown_table(project_dir: Path) -> None:
    result = runner.invoke(app, ["create-service", "orders", "--template", "--dir", str(project_dir)])

    assert result.exit_code == 1
    assert "not found in schema" in result.output
    assert not (project_dir / "src").exists()


def test_create_service_without_schema(tmp_path: Path) -> None:
    result = runner.invoke(app, ["create-service", "users", "--template", "--dir", str(tmp_path)])
    assert result.exit_code == 1
    assert "hosby scan" in result.output


def test_create_service_picks_table_by_number(project_dir: Path) -> None:
    schema_path = project_dir / "hosby.schema.json"
    schema = json.loads(schema_path.read_text(encoding="utf-8"))
    schema["tables"]["orders"] = {"id": "string", "total": "number"}
    schema_path.write_text(json.dumps(schema), encoding="utf-8")

    result = runner.invoke(app, ["create-service", "--template", "--dir", str(project_dir)], input="2\n")

    assert result.exit_code == 0, result.output
    assert "2) orders" in result.output
    assert (project_dir / "src" / "services" / "orders.service.ts").is_file()


def test_create_service_invalid_pick(project_dir: Path) -> None:
    result = runner.invoke(app, ["create-service", "--template", "--dir", str(project_dir)], input="7\n")

    assert result.exit_code == 1
    assert "Invalid choice" in result.output
    assert not (project_dir / "src").exists()


def test_create_service_declined_overwrite(project_dir: Path) -> None:
    target = _service_file(project_dir)
    target.parent.mkdir(parents=True)
    target.write_text("// mine\n", encoding="utf-8")

    result = runner.invoke(
        app, ["create-service", "users", "--template", "--dir", str(project_dir)], input="n\n"
    )

    assert result.exit_code == 0, result.output
    assert "Cancelled" in result.output
    assert target.read_text(encoding="utf-8") == "// mine\n"


def test_create_service_yes_overwrites(project_dir: Path) -> None:
    target = _service_file(project_dir)
    target.parent.mkdir(parents=True)
    target.write_text("// mine\n", encoding="utf-8")

    result = runner.invoke(
        app, ["create-service", "users", "--template", "--yes", "--dir", str(project_dir)]
    )

    assert result.exit_code == 0, result.output
    assert "export class UsersService" in target.read_text(encoding="utf-8")


def test_create_service_asks_for_ai(project_dir: Path) -> None:
    with patch(_COMPLETE) as mock_complete:
        result = runner.invoke(app, ["create-service", "users", "--dir", str(project_dir)], input="n\n")

    assert result.exit_code == 0, result.output
    assert "use AI" in result.output
    mock_complete.assert_not_called()
    assert _service_file(project_dir).is_file()


def test_create_service_with_ai(project_dir: Path, credentials_store) -> None:
    credentials_store.set("ai-provider", "openai")
    credentials_store.set("openai-api-key", "sk-test")

    with patch(_COMPLETE, return_value="```ts\nexport const usersService = {};\n```") as mock_complete:
        result = runner.invoke(app, ["create-service", "users", "--ai", "--dir", str(project_dir)])

    assert result.exit_code == 0, result.output
    assert "generated successfully with AI" in result.output
    assert mock_complete.call_args.kwargs["api_key"] == "sk-test"
    assert mock_complete.call_args.kwargs["timeout"] == 45.0
    assert _service_file(project_dir).read_text(encoding="utf-8") == "export const usersService = {};\n"


def test_create_service_ai_without_provider(project_dir: Path) -> None:
    with patch(_COMPLETE) as mock_complete:
        result = runner.invoke(app, ["create-service", "users", "--ai", "--dir", str(project_dir)])

    assert result.exit_code == 1
    assert "hosby config ai" in result.output
    mock_complete.assert_not_called()
    assert not _service_file(project_dir).exists()


def test_create_service_ai_failure_writes_nothing(project_dir: Path, credentials_store) -> None:
    credentials_store.set("openai-api-key", "sk-test")

    with patch(_COMPLETE, side_effect=RuntimeError("boom")):
        result = runner.invoke(
            app, ["create-service", "users", "--ai", "--provider", "openai", "--dir", str(project_dir)]
        )

    assert result.exit_code == 1
    assert "boom" in result.output
    assert not _service_file(project_dir).exists()
