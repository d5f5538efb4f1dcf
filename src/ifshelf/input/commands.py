"""Quick-command button definitions and their per-game persistence."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, List, Sequence

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from ifshelf.library import GameRef, LibraryIOError, read_text_file

if TYPE_CHECKING:
    from ifshelf.library import LibraryStore

LOGGER = logging.getLogger(__name__)

QUICK_COMMANDS_FILENAME = "quickcommands.json"


class QuickCommandDefinition(BaseModel):
    """One tappable command fragment.

    Attributes:
        cmd: Verb or object text inserted into the command line.
        imgid: Index into the host's icon catalog.
        at_once: Whether tapping sends the fragment immediately as a full command.
    """

    model_config = ConfigDict(populate_by_name=True)

    cmd: str
    imgid: int = Field(default=0, ge=0)
    at_once: bool = Field(default=False, alias="atOnce")


_DEFINITIONS = TypeAdapter(List[QuickCommandDefinition])

DEFAULT_QUICK_COMMANDS: tuple[QuickCommandDefinition, ...] = (
    QuickCommandDefinition(cmd="look", imgid=0, at_once=True),
    QuickCommandDefinition(cmd="inventory", imgid=1, at_once=True),
    QuickCommandDefinition(cmd="examine", imgid=2),
    QuickCommandDefinition(cmd="take", imgid=3),
    QuickCommandDefinition(cmd="drop", imgid=4),
    QuickCommandDefinition(cmd="open", imgid=5),
    QuickCommandDefinition(cmd="talk to", imgid=6),
    QuickCommandDefinition(cmd="wait", imgid=7, at_once=True),
)


def default_quick_commands() -> list[QuickCommandDefinition]:
    """Return a fresh copy of the built-in button set."""
    return [definition.model_copy() for definition in DEFAULT_QUICK_COMMANDS]


def parse_quick_commands(text: str) -> list[QuickCommandDefinition] | None:
    """Parse a quick-command JSON document.

    Args:
        text: JSON array of ``{"cmd", "imgid", "atOnce"}`` objects.

    Returns:
        list[QuickCommandDefinition] | None: Parsed definitions, or None when the
        document is not valid JSON or an element does not describe a button.
    """
    try:
        return _DEFINITIONS.validate_json(text)
    except ValidationError as exc:
        LOGGER.debug("Rejected quick-command document: %s", exc)
        return None


def dump_quick_commands(definitions: Sequence[QuickCommandDefinition]) -> str:
    """Serialize definitions into the on-disk JSON array format."""
    payload = [definition.model_dump(by_alias=True) for definition in definitions]
    return json.dumps(payload, indent=2)


class QuickCommandStore:
    """Load and persist the quick-command buttons of each game."""

    def __init__(self, library: "LibraryStore") -> None:
        self._library = library

    def path_for(self, game: GameRef) -> Path:
        """Return the per-game document path inside the game's data directory."""
        return self._library.resolve_data_dir(game) / QUICK_COMMANDS_FILENAME

    def load(self, game: GameRef) -> list[QuickCommandDefinition]:
        """Return the game's buttons, falling back to the defaults.

        A missing, unreadable or malformed per-game document yields the defaults;
        the malformed case is logged.
        """
        path = self.path_for(game)
        if not path.exists():
            return default_quick_commands()
        try:
            text = read_text_file(path)
        except LibraryIOError as exc:
            LOGGER.warning("Unable to read quick commands %s: %s", path, exc)
            return default_quick_commands()

        definitions = parse_quick_commands(text)
        if definitions is None:
            LOGGER.warning("Ignoring malformed quick commands in %s; using defaults.", path)
            return default_quick_commands()
        return definitions

    def save(self, game: GameRef, definitions: Sequence[QuickCommandDefinition]) -> Path:
        """Write the game's buttons and return the document path."""
        path = self.path_for(game)
        path.write_text(dump_quick_commands(definitions), encoding="utf-8")
        return path

    def replace(
        self,
        game: GameRef,
        index: int,
        definition: QuickCommandDefinition,
    ) -> list[QuickCommandDefinition]:
        """Swap one button for another and persist the updated set.

        Raises:
            IndexError: If ``index`` does not address an existing button.
        """
        definitions = self.load(game)
        if not 0 <= index < len(definitions):
            raise IndexError(f"Quick command index {index} is out of range (0-{len(definitions) - 1}).")
        definitions[index] = definition
        self.save(game, definitions)
        return definitions

    def reset(self, game: GameRef) -> None:
        """Drop the per-game document so the defaults apply again."""
        self.path_for(game).unlink(missing_ok=True)


__all__ = [
    "QuickCommandDefinition",
    "QuickCommandStore",
    "DEFAULT_QUICK_COMMANDS",
    "QUICK_COMMANDS_FILENAME",
    "default_quick_commands",
    "parse_quick_commands",
    "dump_quick_commands",
]
