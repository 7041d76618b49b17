"""CLI tests for configuration commands."""

import os
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from snapdiff.cli import cli
from snapdiff.config import ConfigManager


def _env_with_home(tmp_path: Path) -> dict[str, Any]:
    env = {key: value for key, value in os.environ.items() if not key.startswith("SNAPDIFF__")}
    env["HOME"] = str(tmp_path)
    return env


def _manager(tmp_path: Path) -> ConfigManager:
    return ConfigManager(config_path=tmp_path / ".snapdiff" / "config.yaml", env={})


def test_config_view_displays_defaults_without_creating_file(tmp_path: Path) -> None:
    result = CliRunner().invoke(cli, ["config", "view"], env=_env_with_home(tmp_path))

    assert result.exit_code == 0
    assert "scan:" in result.output
    assert "fail_fast" in result.output
    assert not (tmp_path / ".snapdiff" / "config.yaml").exists()


def test_config_set_updates_value(tmp_path: Path) -> None:
    result = CliRunner().invoke(
        cli, ["config", "set", "scan.fail_fast", "--value", "false"], env=_env_with_home(tmp_path)
    )

    assert result.exit_code == 0, result.output
    assert "Updated scan.fail_fast" in result.output
    assert _manager(tmp_path).load().scan.fail_fast is False


def test_config_set_rejects_invalid_value(tmp_path: Path) -> None:
    result = CliRunner().invoke(
        cli,
        ["config", "set", "snapshot.on_corrupt", "--value", "ignore"],
        env=_env_with_home(tmp_path),
    )

    assert result.exit_code == 1
    assert _manager(tmp_path).load().snapshot.on_corrupt == "warn"


def test_config_set_same_value_is_a_no_op(tmp_path: Path) -> None:
    result = CliRunner().invoke(
        cli, ["config", "set", "scan.fail_fast", "--value", "true"], env=_env_with_home(tmp_path)
    )

    assert result.exit_code == 0
    assert "No changes applied" in result.output


def test_config_edit_applies_changes(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _manager(tmp_path).ensure_exists()

    def _mock_edit(text: str, **_: Any) -> str:
        return text.replace("include_type_changes: false", "include_type_changes: true")

    monkeypatch.setattr("snapdiff.cli.click.edit", _mock_edit)

    result = CliRunner().invoke(cli, ["config", "edit"], env=_env_with_home(tmp_path))

    assert result.exit_code == 0
    assert "updated" in result.output.lower()
    assert _manager(tmp_path).load().detection.include_type_changes is True
