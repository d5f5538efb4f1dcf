"""Content fingerprints for games referenced by metadata-shadow entries."""

from __future__ import annotations

import hashlib
from pathlib import Path

DEFAULT_CHUNK_SIZE = 64 * 1024


def compute_fingerprint(path: Path, chunk_size: int = DEFAULT_CHUNK_SIZE) -> str:
    """Return the SHA-256 hex digest of a file, streamed in chunks.

    Args:
        path: File to hash.
        chunk_size: Number of bytes read per iteration.

    Returns:
        str: Lowercase hexadecimal digest.

    Raises:
        OSError: If the file cannot be read.
    """
    digest = hashlib.sha256()
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(chunk_size), b""):
            digest.update(chunk)
    return digest.hexdigest()


__all__ = ["compute_fingerprint", "DEFAULT_CHUNK_SIZE"]
