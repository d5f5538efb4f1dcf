"""Command line interface for the ifshelf library."""

from __future__ import annotations

import difflib
from pathlib import Path
from typing import Any

import click
import yaml
from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table

from ifshelf.config import (
    STAMP_PREFIX,
    ConfigError,
    ConfigManager,
    IfShelfConfig,
)
from ifshelf.input import QuickCommandDefinition, QuickCommandStore
from ifshelf.library import LibraryError, LibraryStore, compute_fingerprint
from ifshelf.logconfig import configure_logging

console = Console()


def _handle_cli_error(
    message: str,
    *,
    code: str,
    json_output: bool,
    details: Any | None = None,
    original: Exception | None = None,
) -> None:
    """Emit a standardized error and terminate the command appropriately.

    Args:
        message: Human-readable error message.
        code: Machine-readable error identifier.
        json_output: Indicates whether JSON mode is active.
        details: Optional structured details to include in the payload.
        original: Original exception for chaining when not using JSON.

    Raises:
        SystemExit: When emitting JSON output to terminate the command.
        click.ClickException: For non-JSON flows to surface the error.
    """

    if json_output:
        payload: dict[str, Any] = {"error": {"code": code, "message": message}}
        if details is not None:
            payload["error"]["details"] = details
        console.print_json(data=payload)
        raise SystemExit(1)

    if isinstance(original, click.ClickException):
        raise original

    raise click.ClickException(message) from original


def _emit_message(message: Any, *, quiet: bool) -> None:
    """Print CLI output unless quiet mode is active."""
    if quiet:
        return
    console.print(message)


def _open_library(obj: dict[str, Any]) -> tuple[IfShelfConfig, LibraryStore]:
    """Load configuration, set up logging and return the configured library.

    Args:
        obj: Click context object holding global options.

    Returns:
        tuple[IfShelfConfig, LibraryStore]: Effective configuration and store.

    Raises:
        ConfigError: If configuration cannot be loaded.
    """
    overrides = {"storage.root": obj["root"]} if obj.get("root") else None
    config = ConfigManager().load(cli_overrides=overrides)
    configure_logging(config.logging)
    return config, LibraryStore(config.storage)


def _dispatch_errors(exc: Exception, *, json_output: bool) -> None:
    """Map known exceptions onto CLI errors."""
    if isinstance(exc, ConfigError):
        _handle_cli_error(str(exc), code="config_error", json_output=json_output, original=exc)
    elif isinstance(exc, LibraryError):
        _handle_cli_error(str(exc), code="library_error", json_output=json_output, original=exc)
    elif isinstance(exc, click.ClickException):
        _handle_cli_error(exc.format_message(), code="cli_error", json_output=json_output, original=exc)
    else:
        raise exc


def _format_timestamp(value: Any) -> str:
    return value.strftime("%Y-%m-%d %H:%M") if value is not None else "-"


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="ifshelf")
@click.option(
    "--root",
    type=click.Path(file_okay=False, path_type=str),
    help="Library storage root (overrides storage.root).",
)
@click.pass_context
def cli(ctx: click.Context, root: str | None) -> None:
    """Manage a library of interactive-fiction games."""
    ctx.ensure_object(dict)
    ctx.obj["root"] = root


@cli.command("list")
@click.option("--json", "json_output", is_flag=True, help="Emit the library listing as JSON.")
@click.pass_obj
def list_games(obj: dict[str, Any], json_output: bool) -> None:
    """List games and metadata-shadow entries."""
    try:
        _, library = _open_library(obj)
        entries = library.list_games()
    except (ConfigError, LibraryError) as exc:
        _dispatch_errors(exc, json_output=json_output)
        return

    if json_output:
        console.print_json(
            data={
                "root": str(library.root),
                "games": [entry.model_dump(mode="json") for entry in entries],
            }
        )
        return

    if not entries:
        console.print(f"[yellow]No games in {library.root}.[/yellow]")
        return

    table = Table(title=f"Library at {library.root}")
    table.add_column("Name")
    table.add_column("Kind")
    table.add_column("Modified")
    table.add_column("Saves", justify="right")
    for entry in entries:
        kind = "shadow" if entry.is_shadow else "game"
        saves = len(library.list_save_names(entry))
        table.add_row(entry.name, kind, _format_timestamp(entry.modified_at), str(saves))
    console.print(table)


@cli.command("import")
@click.argument("sources", nargs=-1, required=True, type=click.Path(path_type=str))
@click.option("--quiet", is_flag=True, help="Suppress non-error output.")
@click.pass_obj
def import_games(obj: dict[str, Any], sources: tuple[str, ...], quiet: bool) -> None:
    """Copy game files into the library."""
    try:
        config, library = _open_library(obj)
    except ConfigError as exc:
        _dispatch_errors(exc, json_output=False)
        return

    quiet_enabled = quiet or config.cli.quiet_default
    failures: list[str] = []
    for source in sources:
        try:
            entry = library.import_game(Path(source).expanduser())
        except LibraryError as exc:
            failures.append(str(exc))
            console.print(f"[red]{escape(str(exc))}[/red]")
            continue
        _emit_message(f"[green]Imported {entry.name}.[/green]", quiet=quiet_enabled)

    if failures:
        raise click.ClickException(f"{len(failures)} of {len(sources)} file(s) could not be imported.")


@cli.command()
@click.argument("name")
@click.option("--fingerprint", help="Hex content hash of the game file.")
@click.option(
    "--from-file",
    "source",
    type=click.Path(exists=True, dir_okay=False, path_type=str),
    help="Compute the fingerprint from this file instead of copying it.",
)
@click.option("--catalog-id", help="External catalog (IFDB) identifier.")
@click.pass_obj
def stuff(
    obj: dict[str, Any],
    name: str,
    fingerprint: str | None,
    source: str | None,
    catalog_id: str | None,
) -> None:
    """Record NAME as a metadata-shadow entry without copying the game."""
    if (fingerprint is None) == (source is None):
        raise click.UsageError("Provide exactly one of --fingerprint or --from-file.")

    try:
        config, library = _open_library(obj)
    except ConfigError as exc:
        _dispatch_errors(exc, json_output=False)
        return

    if source is not None:
        try:
            digest = compute_fingerprint(Path(source), config.storage.copy_chunk_size)
        except OSError as exc:
            raise click.ClickException(f"Unable to fingerprint {source}: {exc}") from exc
    else:
        digest = fingerprint or ""

    if not library.stuff_metadata_shadow(name, digest, catalog_id):
        raise click.ClickException(f"Failed to write metadata entry for {name}.")
    console.print(f"[green]Stuffed {name} ({digest}).[/green]")


@cli.command()
@click.argument("game")
@click.option("--json", "json_output", is_flag=True, help="Emit save games as JSON.")
@click.pass_obj
def saves(obj: dict[str, Any], game: str, json_output: bool) -> None:
    """List save games for GAME, newest first."""
    try:
        _, library = _open_library(obj)
        paths = library.list_saves(game)
    except (ConfigError, LibraryError) as exc:
        _dispatch_errors(exc, json_output=json_output)
        return

    if json_output:
        console.print_json(data={"game": game, "saves": [path.name for path in paths]})
        return

    if not paths:
        console.print(f"[yellow]No save games for {game}.[/yellow]")
        return
    for path in paths:
        console.print(path.name)


@cli.command()
@click.argument("game")
@click.pass_obj
def dirs(obj: dict[str, Any], game: str) -> None:
    """Show (and create) the save and data directories for GAME."""
    try:
        _, library = _open_library(obj)
        save_dir = library.resolve_save_dir(game)
        data_dir = library.resolve_data_dir(game)
    except (ConfigError, LibraryError) as exc:
        _dispatch_errors(exc, json_output=False)
        return

    console.print(f"saves: {save_dir}", soft_wrap=True)
    console.print(f"data:  {data_dir}", soft_wrap=True)


@cli.command()
@click.argument("game")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation.")
@click.pass_obj
def delete(obj: dict[str, Any], game: str, yes: bool) -> None:
    """Delete GAME together with its save games and data."""
    try:
        _, library = _open_library(obj)
    except ConfigError as exc:
        _dispatch_errors(exc, json_output=False)
        return

    entry = library.find_game(game)
    if entry is None:
        raise click.ClickException(f"No game named {game} in {library.root}.")
    if not yes:
        click.confirm(f"Delete {entry.name} and all of its save games?", abort=True)

    library.delete_game(entry)
    console.print(f"[green]Deleted {entry.name}.[/green]")


@cli.group()
def commands() -> None:
    """Manage the quick-command buttons of a game."""


@commands.command("show")
@click.argument("game")
@click.option("--json", "json_output", is_flag=True, help="Emit the definitions as JSON.")
@click.pass_obj
def commands_show(obj: dict[str, Any], game: str, json_output: bool) -> None:
    """Display the quick commands configured for GAME."""
    try:
        _, library = _open_library(obj)
        definitions = QuickCommandStore(library).load(game)
    except (ConfigError, LibraryError) as exc:
        _dispatch_errors(exc, json_output=json_output)
        return

    if json_output:
        console.print_json(data=[definition.model_dump(by_alias=True) for definition in definitions])
        return

    table = Table(title=f"Quick commands for {game}")
    table.add_column("#", justify="right")
    table.add_column("Command")
    table.add_column("Icon", justify="right")
    table.add_column("At once")
    for index, definition in enumerate(definitions):
        table.add_row(
            str(index),
            definition.cmd,
            str(definition.imgid),
            "yes" if definition.at_once else "no",
        )
    console.print(table)


@commands.command("set")
@click.argument("game")
@click.argument("index", type=int)
@click.option("--cmd", "command", required=True, help="Verb or object text.")
@click.option("--imgid", type=click.IntRange(min=0), default=0, show_default=True, help="Icon index.")
@click.option("--at-once", is_flag=True, help="Send the command immediately when tapped.")
@click.pass_obj
def commands_set(
    obj: dict[str, Any],
    game: str,
    index: int,
    command: str,
    imgid: int,
    at_once: bool,
) -> None:
    """Replace the quick command at INDEX for GAME."""
    try:
        _, library = _open_library(obj)
    except ConfigError as exc:
        _dispatch_errors(exc, json_output=False)
        return

    definition = QuickCommandDefinition(cmd=command, imgid=imgid, at_once=at_once)
    try:
        QuickCommandStore(library).replace(game, index, definition)
    except IndexError as exc:
        raise click.ClickException(str(exc)) from exc
    except LibraryError as exc:
        _dispatch_errors(exc, json_output=False)
        return
    console.print(f"[green]Quick command {index} for {game} set to '{command}'.[/green]")


@commands.command("reset")
@click.argument("game")
@click.pass_obj
def commands_reset(obj: dict[str, Any], game: str) -> None:
    """Restore the default quick commands for GAME."""
    try:
        _, library = _open_library(obj)
        QuickCommandStore(library).reset(game)
    except (ConfigError, LibraryError) as exc:
        _dispatch_errors(exc, json_output=False)
        return

    console.print(f"[green]Quick commands for {game} reset to defaults.[/green]")


@cli.group()
def config() -> None:
    """Manage ifshelf configuration files and overrides."""


@config.command("view")
@click.option("--no-env", is_flag=True, help="Ignore environment overrides when displaying output.")
def config_view(no_env: bool) -> None:
    """Display the effective configuration after applying precedence rules.

    Raises:
        click.ClickException: If configuration cannot be loaded.
    """
    try:
        loaded = ConfigManager().load(include_env=not no_env)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    yaml_text = yaml.safe_dump(loaded.model_dump(mode="json"), sort_keys=False)
    console.print(Syntax(yaml_text, "yaml", word_wrap=True))


@config.command("set")
@click.argument("key")
@click.option("--value", required=True, help="YAML literal to store under KEY.")
def config_set(key: str, value: str) -> None:
    """Store VALUE under the dotted KEY (for example ``storage.root``) and show the diff.

    Raises:
        click.ClickException: If the value does not parse or the result is invalid.
    """
    manager = ConfigManager()
    try:
        parsed_value = yaml.safe_load(value)
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Unable to parse value: {exc}") from exc

    try:
        manager.ensure_exists()
        before = manager.read_text()
        manager.set_value(key.strip(), parsed_value)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    changes = _settings_diff(before, manager.read_text())
    if not changes:
        console.print(f"[yellow]{escape(key)} is already set to {escape(value)}.[/yellow]")
        return
    console.print(Syntax("\n".join(changes), "diff", word_wrap=False))
    console.print(f"[green]Updated {escape(key)}.[/green]")


@config.command("edit")
def config_edit() -> None:
    """Edit the settings file in $EDITOR; the result is validated before saving."""
    manager = ConfigManager()
    try:
        manager.ensure_exists()
        original = manager.read_text()
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    edited = click.edit(original, extension=".yaml")
    if edited is None or edited == original:
        console.print("[yellow]No changes applied.[/yellow]")
        return

    try:
        manager.replace_text(edited)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc
    console.print(f"[green]Settings updated in {manager.config_path}.[/green]")


def _settings_diff(before: str, after: str) -> list[str]:
    """Return a unified diff of two settings texts, ignoring the timestamp line."""
    old = [line for line in before.splitlines() if not line.startswith(STAMP_PREFIX)]
    new = [line for line in after.splitlines() if not line.startswith(STAMP_PREFIX)]
    return list(
        difflib.unified_diff(old, new, "config.yaml (before)", "config.yaml (after)", lineterm="")
    )


def main() -> None:
    """Invoke the Click CLI as the console script entry point."""
    cli()


if __name__ == "__main__":
    main()
