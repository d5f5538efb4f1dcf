"""On-disk library of interactive-fiction games and their per-game state."""

from __future__ import annotations

import logging
import os
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import Union

from ifshelf.config.models import StorageSettings

from .errors import GameImportError, LibraryError, LibraryIOError
from .fingerprint import compute_fingerprint
from .models import GameEntry, GameLocation, MetadataShadowEntry
from .ordering import library_order, newest_first

LOGGER = logging.getLogger(__name__)

GAMES_DIRNAME = "games"
META_DIRNAME = "games-meta"
SAVES_DIRNAME = "savegames"
DATA_DIRNAME = "gamedata"

GameRef = Union[GameEntry, Path, str]


def basename(game: GameRef) -> str:
    """Return the game's file name without its last extension.

    A leading dot does not start an extension, so ``.hidden`` is returned as is.

    Args:
        game: Library entry, path or file name.

    Returns:
        str: File name with the final ``.suffix`` removed.
    """
    name = _game_name(game)
    idx = name.rfind(".")
    if idx > 0:
        return name[:idx]
    return name


def read_text_file(path: Path | str) -> str:
    """Read a text file, terminating every line with the host line separator.

    Args:
        path: File to read.

    Returns:
        str: File contents with normalized line endings.

    Raises:
        LibraryIOError: If the file cannot be opened or decoded.
    """
    try:
        with Path(path).open("r", encoding="utf-8") as handle:
            return "".join(line.rstrip("\n") + os.linesep for line in handle)
    except (OSError, UnicodeDecodeError) as exc:
        raise LibraryIOError(f"Unable to read {path}: {exc}") from exc


def _game_name(game: GameRef) -> str:
    if isinstance(game, GameEntry):
        return game.name
    return Path(game).name


def _checked_name(game: GameRef) -> str:
    """Return the game's file name, refusing names that point at a directory itself."""
    name = _game_name(game)
    if name in ("", ".", ".."):
        raise LibraryError(f"Invalid game name: {str(game)!r}")
    return name


def _list_files(directory: Path) -> list[Path]:
    """Return the regular files directly inside ``directory``; nothing if unreadable."""
    try:
        children = list(directory.iterdir())
    except OSError:
        return []
    return [child for child in children if child.is_file()]


class LibraryStore:
    """Manage games, metadata shadows, save games and game data under one root.

    Every public operation first makes sure the four library directories exist.
    Per-game directories are resolved on demand and created when missing.
    """

    def __init__(self, settings: StorageSettings | None = None) -> None:
        """Initialize the store for the given storage settings.

        Args:
            settings: Storage root and copy options; defaults are used when omitted.
        """
        self._settings = settings or StorageSettings()
        self._root = self._settings.root.expanduser()
        self._games_dir = self._root / GAMES_DIRNAME
        self._meta_dir = self._root / META_DIRNAME
        self._saves_dir = self._root / SAVES_DIRNAME
        self._data_dir = self._root / DATA_DIRNAME

    @property
    def root(self) -> Path:
        return self._root

    @property
    def games_dir(self) -> Path:
        return self._games_dir

    @property
    def meta_dir(self) -> Path:
        return self._meta_dir

    @property
    def saves_dir(self) -> Path:
        return self._saves_dir

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def ensure_layout(self) -> None:
        """Create the games, games-meta, savegames and gamedata directories if missing."""
        for directory in (self._games_dir, self._meta_dir, self._saves_dir, self._data_dir):
            try:
                directory.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                LOGGER.warning("Unable to create library directory %s: %s", directory, exc)

    # Listing ----------------------------------------------------------

    def list_games(self) -> list[GameEntry]:
        """Return games and metadata shadows, sorted together by file name.

        Returns:
            list[GameEntry]: Entries from both directories; same-named entries are
            both listed.
        """
        self.ensure_layout()
        entries = [
            *self._scan(self._games_dir, GameLocation.GAMES),
            *self._scan(self._meta_dir, GameLocation.META),
        ]
        return sorted(entries, key=library_order)

    def find_game(self, name: str) -> GameEntry | None:
        """Locate an entry by file name, preferring real games over shadows."""
        self.ensure_layout()
        for directory, location in (
            (self._games_dir, GameLocation.GAMES),
            (self._meta_dir, GameLocation.META),
        ):
            candidate = directory / name
            if candidate.is_file():
                return self._entry(candidate, location)
        return None

    def list_saves(self, game: GameRef) -> list[Path]:
        """Return the save files of a game, most recently modified first.

        Args:
            game: Library entry, path or file name.

        Returns:
            list[Path]: Save files; empty when the save directory cannot be listed.
        """
        self.ensure_layout()
        return sorted(_list_files(self.resolve_save_dir(game)), key=newest_first)

    def list_save_names(self, game: GameRef) -> list[str]:
        """Return the file names of :meth:`list_saves`, in the same order."""
        return [path.name for path in self.list_saves(game)]

    # Mutation ---------------------------------------------------------

    def import_game(self, source: Path | str) -> GameEntry:
        """Copy a file into the games directory and prepare its save directory.

        Args:
            source: File to import; its base name becomes the game name.

        Returns:
            GameEntry: The imported library entry.

        Raises:
            GameImportError: If the source cannot be read or the copy cannot be written.
        """
        self.ensure_layout()
        source_path = Path(source)
        destination = self._games_dir / source_path.name
        if destination.exists() and source_path.exists() and source_path.samefile(destination):
            LOGGER.info("%s is already in the library", source_path)
            self.resolve_save_dir(destination)
            return self._entry(destination, GameLocation.GAMES)
        try:
            with source_path.open("rb") as src, destination.open("wb") as dst:
                shutil.copyfileobj(src, dst, self._settings.copy_chunk_size)
        except OSError as exc:
            raise GameImportError(f"Failed to import {source_path}: {exc}") from exc

        self.resolve_save_dir(destination)
        LOGGER.info("Imported %s into %s", source_path, destination)
        return self._entry(destination, GameLocation.GAMES)

    def stuff_metadata_shadow(
        self,
        name: str,
        fingerprint: str,
        catalog_id: str | None = None,
    ) -> bool:
        """Write a metadata-shadow entry standing in for a game stored elsewhere.

        Args:
            name: Game file name the shadow represents.
            fingerprint: Hex content hash of the real game file.
            catalog_id: Optional external catalog identifier.

        Returns:
            bool: True when the entry was written, False on any I/O failure.
        """
        self.ensure_layout()
        destination = self._meta_dir / Path(name).name
        shadow = MetadataShadowEntry(fingerprint=fingerprint, catalog_id=catalog_id)
        try:
            destination.write_text(shadow.to_text(), encoding="utf-8")
        except OSError as exc:
            LOGGER.warning(
                "Failed to stuff %s (fingerprint %s, catalog id %s): %s",
                destination,
                fingerprint,
                catalog_id,
                exc,
            )
            return False

        LOGGER.info("Stuffed %s (fingerprint %s, catalog id %s)", destination, fingerprint, catalog_id)
        self.resolve_save_dir(destination)
        return True

    def load_metadata_shadow(self, name: str) -> MetadataShadowEntry | None:
        """Read back a metadata-shadow entry, or None if it is missing or empty."""
        self.ensure_layout()
        try:
            text = (self._meta_dir / Path(name).name).read_text(encoding="utf-8")
        except OSError:
            return None
        return MetadataShadowEntry.from_text(text)

    def delete_game(self, game: GameRef) -> None:
        """Remove a game together with its save games and data.

        Only files directly inside the save and data directories are removed; a
        directory that still holds nested directories is left in place.

        Args:
            game: Library entry, path or file name.

        Raises:
            LibraryError: If the name is empty, ``.`` or ``..``.
        """
        self.ensure_layout()
        _checked_name(game)
        path = self._game_path(game)
        directories = [self.resolve_save_dir(game), self.resolve_data_dir(game)]

        for directory in directories:
            for child in _list_files(directory):
                try:
                    child.unlink()
                except OSError as exc:
                    LOGGER.debug("Could not remove %s: %s", child, exc)
        for directory in directories:
            try:
                directory.rmdir()
            except OSError as exc:
                LOGGER.debug("Could not remove directory %s: %s", directory, exc)
        try:
            path.unlink()
        except OSError as exc:
            LOGGER.debug("Could not remove game file %s: %s", path, exc)
        LOGGER.info("Deleted %s", path)

    # Per-game directories ---------------------------------------------

    def resolve_save_dir(self, game: GameRef) -> Path:
        """Return the save-game directory of a game, creating it if necessary."""
        self.ensure_layout()
        return self._resolve_dir(self._saves_dir / _checked_name(game))

    def resolve_data_dir(self, game: GameRef) -> Path:
        """Return the misc-data directory of a game, creating it if necessary."""
        self.ensure_layout()
        return self._resolve_dir(self._data_dir / _checked_name(game))

    @staticmethod
    def basename(game: GameRef) -> str:
        """Return the game's file name without its last extension."""
        return basename(game)

    # Internal helpers -------------------------------------------------

    def _resolve_dir(self, directory: Path) -> Path:
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            LOGGER.warning("Unable to create %s: %s", directory, exc)
        return directory

    def _game_path(self, game: GameRef) -> Path:
        if isinstance(game, GameEntry):
            return game.path
        if isinstance(game, Path) or os.sep in game or "/" in game:
            return Path(game)
        found = self.find_game(game)
        return found.path if found is not None else self._games_dir / game

    def _scan(self, directory: Path, location: GameLocation) -> list[GameEntry]:
        return [self._entry(path, location) for path in _list_files(directory)]

    def _entry(self, path: Path, location: GameLocation) -> GameEntry:
        try:
            modified = datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc)
        except OSError:
            modified = None
        return GameEntry(name=path.name, path=path, location=location, modified_at=modified)


__all__ = [
    "LibraryStore",
    "GameRef",
    "GameEntry",
    "GameLocation",
    "MetadataShadowEntry",
    "LibraryError",
    "LibraryIOError",
    "GameImportError",
    "basename",
    "read_text_file",
    "compute_fingerprint",
    "GAMES_DIRNAME",
    "META_DIRNAME",
    "SAVES_DIRNAME",
    "DATA_DIRNAME",
]
