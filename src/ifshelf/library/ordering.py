"""Sort keys used when listing library content."""

from __future__ import annotations

from pathlib import Path

from .models import GameEntry, GameLocation

_LOCATION_RANK = {GameLocation.GAMES: 0, GameLocation.META: 1}


def library_order(entry: GameEntry) -> tuple[str, int]:
    """Order entries by file name; real games precede shadows of the same name."""
    return entry.name, _LOCATION_RANK[entry.location]


def newest_first(path: Path) -> float:
    """Order files by descending modification time; unreadable files sort last."""
    try:
        return -path.stat().st_mtime
    except OSError:
        return float("inf")


__all__ = ["library_order", "newest_first"]
