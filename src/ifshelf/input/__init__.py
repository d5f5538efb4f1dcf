"""Player input: quick-command buttons and command composition."""

from .commands import (
    DEFAULT_QUICK_COMMANDS,
    QUICK_COMMANDS_FILENAME,
    QuickCommandDefinition,
    QuickCommandStore,
    default_quick_commands,
    dump_quick_commands,
    parse_quick_commands,
)
from .composer import CommandComposer
from .keys import ControlCode, Direction, EngineDispatcher

__all__ = [
    "CommandComposer",
    "ControlCode",
    "Direction",
    "EngineDispatcher",
    "QuickCommandDefinition",
    "QuickCommandStore",
    "DEFAULT_QUICK_COMMANDS",
    "QUICK_COMMANDS_FILENAME",
    "default_quick_commands",
    "dump_quick_commands",
    "parse_quick_commands",
]
