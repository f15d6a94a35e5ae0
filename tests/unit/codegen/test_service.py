"""Tests for ServiceGenerator (litellm is mocked)."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

import litellm
import pytest

from hosby.codegen.service import GeneratedService, ServiceAI, ServiceGenerator, table_names
from hosby.exceptions import InferenceError, InferenceTimeoutError, InvalidCredentialError, ValidationError
from hosby.infer.providers import get_provider
from hosby.schema.store import SchemaStore

_COMPLETE = "hosby.codegen.service.complete"
_AI_CODE = "export class UsersService {}"


class _Timeout(litellm.exceptions.Timeout):
    def __init__(self):
        Exception.__init__(self, "Request timed out")


class _AuthError(litellm.exceptions.AuthenticationError):
    def __init__(self):
        Exception.__init__(self, "invalid api key")


def _ai(timeout: float = 45.0) -> ServiceAI:
    return ServiceAI(provider=get_provider("openai"), api_key="sk-test", timeout=timeout)


@pytest.fixture
def generator(project_dir: Path) -> ServiceGenerator:
    return ServiceGenerator(SchemaStore(project_dir))


# ------------------------------------------------------------------
# Table lookup
# ------------------------------------------------------------------


def test_table_names():
    assert table_names({"tables": {"a": {}, "b": {}}}) == ["a", "b"]
    assert table_names({"tables": []}) == []
    assert table_names({}) == []


def test_tables_and_lookup(generator):
    assert generator.tables() == ["users"]
    assert generator.table("users") == {"id": "string", "age": "number"}


def test_unknown_table(generator):
    with pytest.raises(ValidationError, match=r"Table 'orders' not found.*available: users"):
        generator.table("orders")


def test_no_tables(tmp_path: Path):
    (tmp_path / "hosby.schema.json").write_text(json.dumps({"tables": {}}), encoding="utf-8")
    generator = ServiceGenerator(SchemaStore(tmp_path))
    with pytest.raises(ValidationError, match="No tables found"):
        generator.tables()
    with pytest.raises(ValidationError, match="No tables found"):
        generator.table("users")


def test_missing_schema(tmp_path: Path):
    with pytest.raises(ValidationError, match="hosby scan"):
        ServiceGenerator(SchemaStore(tmp_path)).tables()


def test_default_output_dir(generator, project_dir):
    assert generator.target("users") == project_dir.resolve() / "src" / "services" / "users.service.ts"


# ------------------------------------------------------------------
# Rendering
# ------------------------------------------------------------------


def test_render_template(generator):
    with patch(_COMPLETE) as mock_complete:
        service = generator.render("users")

    mock_complete.assert_not_called()
    assert service.source == "template"
    assert service.fell_back is False
    assert "export class UsersService" in service.code
    assert "  age: number;" in service.code


def test_render_with_ai_strips_fence(generator):
    with patch(_COMPLETE, return_value=f"```typescript\n{_AI_CODE}\n```") as mock_complete:
        service = generator.render("users", _ai(timeout=12.0))

    assert service == GeneratedService(
        table="users", path=generator.target("users"), code=_AI_CODE + "\n", source="ai"
    )
    model, messages = mock_complete.call_args.args
    assert model == "openai/gpt-4o-mini"
    assert messages[0]["role"] == "system"
    assert '"age": "number"' in messages[1]["content"]
    assert mock_complete.call_args.kwargs["api_key"] == "sk-test"
    assert mock_complete.call_args.kwargs["timeout"] == 12.0


def test_render_with_ai_uses_configured_model(generator):
    ai = ServiceAI(provider=get_provider("claude"), api_key="k", model="anthropic/claude-3-5-sonnet")
    with patch(_COMPLETE, return_value=_AI_CODE) as mock_complete:
        generator.render("users", ai)
    assert mock_complete.call_args.args[0] == "anthropic/claude-3-5-sonnet"


def test_ai_timeout_falls_back_to_template(generator):
    with patch(_COMPLETE, side_effect=_Timeout()):
        service = generator.render("users", _ai())

    assert service.source == "template"
    assert service.fell_back is True
    assert "export class UsersService" in service.code


def test_ai_failure_is_raised(generator):
    with patch(_COMPLETE, side_effect=RuntimeError("boom")):
        with pytest.raises(InferenceError, match="boom") as excinfo:
            generator.render("users", _ai())
    assert not isinstance(excinfo.value, InferenceTimeoutError)


def test_ai_rejected_key(generator):
    with patch(_COMPLETE, side_effect=_AuthError()):
        with pytest.raises(InvalidCredentialError):
            generator.render("users", _ai())


def test_ai_empty_reply(generator):
    with patch(_COMPLETE, return_value="```ts\n```"):
        with pytest.raises(ValidationError, match="empty service"):
            generator.render("users", _ai())


# ------------------------------------------------------------------
# generate
# ------------------------------------------------------------------


def test_generate_writes_file(generator, project_dir):
    service = generator.generate("users")

    target = project_dir / "src" / "services" / "users.service.ts"
    assert service.path == target.resolve()
    assert target.read_text(encoding="utf-8") == service.code


def test_generate_ai_failure_writes_nothing(generator, project_dir):
    with patch(_COMPLETE, side_effect=RuntimeError("boom")):
        with pytest.raises(InferenceError):
            generator.generate("users", _ai())
    assert not (project_dir / "src").exists()


def test_custom_output_dir(project_dir, tmp_path):
    out = tmp_path / "out"
    service = ServiceGenerator(SchemaStore(project_dir), output_dir=out).generate("users")
    assert service.path == out.resolve() / "users.service.ts"
    assert service.path.is_file()
