"""Configuration model for rlaunch."""

from pathlib import Path

from pydantic import BaseModel, Field

DEFAULT_DOWNLOAD_URL = "https://media.z-kris.com/runelite-event-inspector-client.jar"
DEFAULT_ARTIFACT_FILENAME = "RuneLite.jar"
DEFAULT_CREDENTIALS_FILE = "credentials.properties"
DEFAULT_LAUNCHER_VARS = (
    "JX_ACCESS_TOKEN",
    "JX_REFRESH_TOKEN",
    "JX_SESSION_ID",
    "JX_CHARACTER_ID",
    "JX_DISPLAY_NAME",
)
DEFAULT_NETWORK_TIMEOUT_SECONDS = 60.0


def _default_cache_dir() -> Path:
    return Path.home() / ".runelite_inspector_clients"


def _default_credentials_dir() -> Path:
    return Path.home() / ".runelite"


class LauncherConfig(BaseModel):
    """Runtime configuration for rlaunch."""

    download_url: str = DEFAULT_DOWNLOAD_URL
    cache_dir: Path = Field(default_factory=_default_cache_dir)
    artifact_filename: str = DEFAULT_ARTIFACT_FILENAME
    credentials_dir: Path = Field(default_factory=_default_credentials_dir)
    credentials_file: str = DEFAULT_CREDENTIALS_FILE
    launcher_vars: tuple[str, ...] = DEFAULT_LAUNCHER_VARS
    java_executable: str | None = None
    network_timeout_seconds: float = Field(default=DEFAULT_NETWORK_TIMEOUT_SECONDS, gt=0)
    allow_stale_cache: bool = False

    @property
    def artifact_path(self) -> Path:
        return self.cache_dir / self.artifact_filename

    @property
    def credentials_path(self) -> Path:
        # An absolute credentials_file replaces the directory entirely.
        return self.credentials_dir / self.credentials_file
