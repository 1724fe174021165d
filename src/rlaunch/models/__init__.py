"""Model package for rlaunch."""

from rlaunch.models.cached_artifact import CachedArtifact
from rlaunch.models.launch_spec import LaunchSpec
from rlaunch.models.launcher_config import (
    DEFAULT_ARTIFACT_FILENAME,
    DEFAULT_DOWNLOAD_URL,
    DEFAULT_LAUNCHER_VARS,
    LauncherConfig,
)

__all__ = [
    "CachedArtifact",
    "DEFAULT_ARTIFACT_FILENAME",
    "DEFAULT_DOWNLOAD_URL",
    "DEFAULT_LAUNCHER_VARS",
    "LaunchSpec",
    "LauncherConfig",
]
