"""CLI tests for configuration commands."""

import os
from pathlib import Path
from typing import Any

from click.testing import CliRunner

from ifshelf.cli import cli
from ifshelf.config import ConfigManager


def _env_with_home(tmp_path: Path) -> dict[str, Any]:
    env = dict(os.environ)
    env["HOME"] = str(tmp_path)
    return env


def _config_path(tmp_path: Path) -> Path:
    return tmp_path / ".ifshelf" / "config.yaml"


def test_config_view_creates_and_displays_config(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    result = runner.invoke(cli, ["config", "view"], env=env)

    assert result.exit_code == 0
    assert "storage:" in result.output
    assert _config_path(tmp_path).exists()


def test_config_set_updates_value_and_writes_diff(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    result = runner.invoke(
        cli, ["config", "set", "storage.copy_chunk_size", "--value", "8192"], env=env
    )

    assert result.exit_code == 0
    assert "8192" in result.output

    manager = ConfigManager(config_path=_config_path(tmp_path))
    config = manager.load(include_env=False)
    assert config.storage.copy_chunk_size == 8192


def test_config_set_rejects_invalid_value(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    result = runner.invoke(
        cli, ["config", "set", "storage.copy_chunk_size", "--value=-5"], env=env
    )

    assert result.exit_code != 0
    assert "Invalid configuration values" in result.output


def test_config_edit_applies_changes(tmp_path: Path, monkeypatch) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    manager = ConfigManager(config_path=_config_path(tmp_path))
    manager.ensure_exists()

    def _mock_edit(text: str, **_: Any) -> str:
        return text.replace("level: WARNING", "level: DEBUG")

    monkeypatch.setattr("ifshelf.cli.click.edit", _mock_edit)

    result = runner.invoke(cli, ["config", "edit"], env=env)

    assert result.exit_code == 0
    assert "updated" in result.output.lower()

    config = manager.load(include_env=False)
    assert config.logging.level == "DEBUG"


def test_config_set_same_value_reports_no_change(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)
    args = ["config", "set", "logging.level", "--value", "WARNING"]

    result = runner.invoke(cli, args, env=env)

    assert result.exit_code == 0
    assert "already set" in result.output


def test_config_edit_rejects_invalid_document(tmp_path: Path, monkeypatch) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)
    manager = ConfigManager(config_path=_config_path(tmp_path))
    manager.ensure_exists()
    before = manager.read_text()

    monkeypatch.setattr("ifshelf.cli.click.edit", lambda text, **_: "storage: [unclosed")

    result = runner.invoke(cli, ["config", "edit"], env=env)

    assert result.exit_code == 1
    assert "Failed to parse" in result.output
    assert manager.read_text() == before
