"""Data models describing games held in the library."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel


class GameLocation(str, Enum):
    """Directory a library entry lives in."""

    GAMES = "games"
    META = "games-meta"


class GameEntry(BaseModel):
    """A game file or metadata-shadow entry found in the library.

    Attributes:
        name: File name, unique within its directory.
        path: Absolute path of the entry on disk.
        location: Whether the entry is a real game or a metadata shadow.
        modified_at: Last modification time of the file.
    """

    name: str
    path: Path
    location: GameLocation
    modified_at: Optional[datetime] = None

    @property
    def is_shadow(self) -> bool:
        return self.location is GameLocation.META


class MetadataShadowEntry(BaseModel):
    """Stand-in for a game that is not physically stored in the library.

    Attributes:
        fingerprint: Hex content hash of the real game file.
        catalog_id: Optional identifier in an external story catalog (IFDB).
    """

    fingerprint: str
    catalog_id: Optional[str] = None

    def to_text(self) -> str:
        """Render the entry in its on-disk line format."""
        lines = [self.fingerprint]
        if self.catalog_id is not None:
            lines.append(self.catalog_id)
        return "".join(f"{line}\n" for line in lines)

    @classmethod
    def from_text(cls, text: str) -> MetadataShadowEntry | None:
        """Parse the on-disk format, returning None when no fingerprint is present."""
        lines = [line.strip() for line in text.splitlines()]
        if not lines or not lines[0]:
            return None
        catalog_id = lines[1] if len(lines) > 1 and lines[1] else None
        return cls(fingerprint=lines[0], catalog_id=catalog_id)


__all__ = ["GameLocation", "GameEntry", "MetadataShadowEntry"]
