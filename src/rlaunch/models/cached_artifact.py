"""Cached artifact model."""

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class CachedArtifact:
    """A remote artifact and the single local file that mirrors it."""

    local_path: Path
    remote_url: str
    filename: str

    def exists(self) -> bool:
        return self.local_path.is_file()
