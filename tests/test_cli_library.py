"""CLI integration tests for library and quick-command commands."""

from __future__ import annotations

import hashlib
import json
import os
from pathlib import Path

from click.testing import CliRunner

from ifshelf.cli import cli


def _env_with_home(tmp_path: Path) -> dict[str, str]:
    """Return environment variables pointing HOME to a temp directory.

    Args:
        tmp_path: Temporary directory provided by pytest.

    Returns:
        dict[str, str]: Environment mapping with HOME set.
    """
    env = dict(os.environ)
    env["HOME"] = str(tmp_path / "home")
    return env


def _invoke(tmp_path: Path, *args: str, input: str | None = None):
    runner = CliRunner()
    root = tmp_path / "library"
    return runner.invoke(
        cli, ["--root", str(root), *args], env=_env_with_home(tmp_path), input=input
    )


def _game(tmp_path: Path, name: str = "zork.z5") -> Path:
    path = tmp_path / name
    path.write_bytes(b"zmachine story")
    return path


def test_import_and_list_json(tmp_path: Path) -> None:
    """Imported games show up in the JSON listing.

    Args:
        tmp_path: Temporary directory provided by pytest.
    """
    result = _invoke(tmp_path, "import", str(_game(tmp_path)))
    assert result.exit_code == 0, result.output
    assert "Imported zork.z5" in result.output
    assert (tmp_path / "library" / "games" / "zork.z5").read_bytes() == b"zmachine story"

    result = _invoke(tmp_path, "list", "--json")

    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert [game["name"] for game in payload["games"]] == ["zork.z5"]
    assert payload["games"][0]["location"] == "games"


def test_list_table_output(tmp_path: Path) -> None:
    _invoke(tmp_path, "import", str(_game(tmp_path)))

    result = _invoke(tmp_path, "list")

    assert result.exit_code == 0
    assert "zork.z5" in result.output
    assert "game" in result.output


def test_import_missing_source_fails(tmp_path: Path) -> None:
    result = _invoke(tmp_path, "import", str(tmp_path / "missing.z5"))

    assert result.exit_code == 1
    assert "could not be imported" in result.output
    assert not (tmp_path / "library" / "savegames" / "missing.z5").exists()


def test_stuff_from_file_records_fingerprint(tmp_path: Path) -> None:
    game = _game(tmp_path)

    result = _invoke(tmp_path, "stuff", "zork.z5", "--from-file", str(game), "--catalog-id", "IFDB1")

    assert result.exit_code == 0, result.output
    shadow = tmp_path / "library" / "games-meta" / "zork.z5"
    expected = hashlib.sha256(b"zmachine story").hexdigest()
    assert shadow.read_text(encoding="utf-8").splitlines() == [expected, "IFDB1"]
    assert (tmp_path / "library" / "savegames" / "zork.z5").is_dir()


def test_stuff_requires_exactly_one_source(tmp_path: Path) -> None:
    result = _invoke(tmp_path, "stuff", "zork.z5")

    assert result.exit_code == 2
    assert "--fingerprint" in result.output


def test_saves_lists_newest_first(tmp_path: Path) -> None:
    _invoke(tmp_path, "import", str(_game(tmp_path)))
    save_dir = tmp_path / "library" / "savegames" / "zork.z5"
    for name, stamp in (("old.sav", 1_000), ("new.sav", 2_000)):
        (save_dir / name).write_bytes(b"save")
        os.utime(save_dir / name, (stamp, stamp))

    result = _invoke(tmp_path, "saves", "zork.z5", "--json")

    assert result.exit_code == 0, result.output
    assert json.loads(result.output)["saves"] == ["new.sav", "old.sav"]


def test_delete_with_confirmation(tmp_path: Path) -> None:
    _invoke(tmp_path, "import", str(_game(tmp_path)))

    aborted = _invoke(tmp_path, "delete", "zork.z5", input="n\n")
    assert aborted.exit_code == 1
    assert (tmp_path / "library" / "games" / "zork.z5").exists()

    result = _invoke(tmp_path, "delete", "zork.z5", "--yes")

    assert result.exit_code == 0, result.output
    assert not (tmp_path / "library" / "games" / "zork.z5").exists()
    assert not (tmp_path / "library" / "savegames" / "zork.z5").exists()


def test_delete_unknown_game_fails(tmp_path: Path) -> None:
    result = _invoke(tmp_path, "delete", "nothing.z5", "--yes")

    assert result.exit_code == 1
    assert "No game named nothing.z5" in result.output


def test_dirs_creates_per_game_directories(tmp_path: Path) -> None:
    result = _invoke(tmp_path, "dirs", "zork.z5")

    assert result.exit_code == 0
    assert (tmp_path / "library" / "savegames" / "zork.z5").is_dir()
    assert (tmp_path / "library" / "gamedata" / "zork.z5").is_dir()


def test_commands_set_show_and_reset(tmp_path: Path) -> None:
    result = _invoke(tmp_path, "commands", "set", "zork.z5", "0", "--cmd", "xyzzy", "--imgid", "5", "--at-once")
    assert result.exit_code == 0, result.output

    result = _invoke(tmp_path, "commands", "show", "zork.z5", "--json")
    assert result.exit_code == 0, result.output
    definitions = json.loads(result.output)
    assert definitions[0] == {"cmd": "xyzzy", "imgid": 5, "atOnce": True}

    result = _invoke(tmp_path, "commands", "reset", "zork.z5")
    assert result.exit_code == 0
    assert not (tmp_path / "library" / "gamedata" / "zork.z5" / "quickcommands.json").exists()


def test_commands_set_out_of_range(tmp_path: Path) -> None:
    result = _invoke(tmp_path, "commands", "set", "zork.z5", "99", "--cmd", "xyzzy")

    assert result.exit_code == 1
    assert "out of range" in result.output


def test_dirs_rejects_parent_directory_name(tmp_path: Path) -> None:
    result = _invoke(tmp_path, "dirs", "..")

    assert result.exit_code == 1
    assert "Invalid game name" in result.output
