"""Tests for service file output."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from hosby.codegen.writer import check_overwrite, service_path, services_dir, write_service
from hosby.exceptions import StorageError, ValidationError


def test_services_dir(tmp_path: Path):
    assert services_dir(tmp_path) == tmp_path.resolve() / "src" / "services"


def test_service_path(tmp_path: Path):
    assert service_path(tmp_path, "users") == tmp_path.resolve() / "users.service.ts"


@pytest.mark.parametrize("name", ["../evil", "nested/users", "/etc/passwd"])
def test_service_path_stays_in_base(tmp_path: Path, name: str):
    with pytest.raises(ValidationError, match="resolves outside"):
        service_path(tmp_path, name)


def test_check_overwrite_missing_file(tmp_path: Path):
    with patch("hosby.codegen.writer.typer.confirm") as mock_confirm:
        assert check_overwrite(tmp_path / "users.service.ts", yes=False) is True
    mock_confirm.assert_not_called()


def test_check_overwrite_yes(tmp_path: Path):
    target = tmp_path / "users.service.ts"
    target.write_text("old", encoding="utf-8")
    with patch("hosby.codegen.writer.typer.confirm") as mock_confirm:
        assert check_overwrite(target, yes=True) is True
    mock_confirm.assert_not_called()


@pytest.mark.parametrize("answer", [True, False])
def test_check_overwrite_asks(tmp_path: Path, answer: bool):
    target = tmp_path / "users.service.ts"
    target.write_text("old", encoding="utf-8")
    with patch("hosby.codegen.writer.typer.confirm", return_value=answer) as mock_confirm:
        assert check_overwrite(target, yes=False) is answer
    assert mock_confirm.call_args.kwargs["default"] is False


def test_write_service_creates_dirs(tmp_path: Path):
    target = tmp_path / "src" / "services" / "users.service.ts"
    write_service(target, "export {};\n")

    assert target.read_text(encoding="utf-8") == "export {};\n"
    assert [p.name for p in target.parent.iterdir()] == ["users.service.ts"]


def test_write_service_replace_failure_cleans_up(tmp_path: Path):
    target = tmp_path / "users.service.ts"
    target.write_text("old", encoding="utf-8")

    with patch("hosby.codegen.writer.os.replace", side_effect=PermissionError(13, "Permission denied")):
        with pytest.raises(StorageError, match="Failed to write") as excinfo:
            write_service(target, "new")

    assert excinfo.value.path == target
    assert target.read_text(encoding="utf-8") == "old"
    assert [p.name for p in tmp_path.iterdir()] == ["users.service.ts"]


def test_write_service_unwritable_dir(tmp_path: Path):
    blocker = tmp_path / "src"
    blocker.write_text("not a directory", encoding="utf-8")
    with pytest.raises(StorageError):
        write_service(blocker / "services" / "users.service.ts", "x")
