"""Smoke tests for the CLI entrypoint."""

from click.testing import CliRunner

from ifshelf.cli import cli


def test_cli_help_displays_commands() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["--help"])

    assert result.exit_code == 0
    assert "interactive-fiction games" in result.output
    for command in ("list", "import", "stuff", "saves", "delete", "commands", "config"):
        assert command in result.output
