"""Content digests used to detect a changed artifact."""

import hashlib
from pathlib import Path
from typing import BinaryIO

CHUNK_SIZE = 64 * 1024


def digest(stream: BinaryIO, chunk_size: int = CHUNK_SIZE) -> str:
    """Return the hex SHA-256 of everything left in a binary stream.

    The stream is read to EOF in chunks of at most ``chunk_size`` bytes, so the
    result does not depend on how the data is split.
    """
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")
    h = hashlib.sha256()
    while True:
        chunk = stream.read(chunk_size)
        if not chunk:
            break
        h.update(chunk)
    return h.hexdigest()


def digest_file(path: Path | str, chunk_size: int = CHUNK_SIZE) -> str:
    """Return the hex SHA-256 of a file on disk."""
    with open(path, "rb") as f:
        return digest(f, chunk_size)


def digest_bytes(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()
