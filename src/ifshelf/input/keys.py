"""Key codes understood by the game engine and the dispatch protocol."""

from __future__ import annotations

from enum import Enum, IntEnum
from typing import Protocol, Sequence


class ControlCode(IntEnum):
    """Single-character input codes reserved by the Z-Machine Standard, section 3.8."""

    DELETE = 8
    ENTER = 13
    SPACE = 32
    UP = 129
    DOWN = 130
    LEFT = 131
    RIGHT = 132

    def to_keys(self) -> list[str]:
        return [chr(self.value)]


class Direction(str, Enum):
    """Cursor directions offered as on-screen shortcuts."""

    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"

    @property
    def code(self) -> ControlCode:
        return ControlCode[self.name]


class EngineDispatcher(Protocol):
    """Receives input events destined for the running game."""

    def execute_command(self, keys: Sequence[str]) -> None:
        """Deliver one input event as a sequence of single characters."""


__all__ = ["ControlCode", "Direction", "EngineDispatcher"]
