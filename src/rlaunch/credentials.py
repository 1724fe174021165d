"""Resolve launcher credentials from the environment and a properties file."""

import logging
import os
from collections.abc import Iterable, Mapping
from pathlib import Path

from rlaunch.errors import CredentialParseError
from rlaunch.models import LauncherConfig
from rlaunch.properties import load_properties

log = logging.getLogger(__name__)

CREDENTIALS_PATH_ENV = "RLAUNCH_CREDENTIALS_PATH"


def credentials_path(config: LauncherConfig, environ: Mapping[str, str] | None = None) -> Path:
    """Return the credentials file location, honouring RLAUNCH_CREDENTIALS_PATH."""
    env = os.environ if environ is None else environ
    override = env.get(CREDENTIALS_PATH_ENV, "").strip()
    if override:
        return config.credentials_dir / Path(override).expanduser()
    return config.credentials_path


class CredentialStore:
    """Overlay live environment variables on values stored in a properties file."""

    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        self._environ = os.environ if environ is None else environ

    def load(self, properties_path: Path | str) -> dict[str, str]:
        """Return the file's entries, or an empty dict if it is missing or unreadable."""
        path = Path(properties_path)
        if not path.exists():
            log.debug("No credentials file at %s", path)
            return {}
        try:
            entries = load_properties(path)
        except CredentialParseError as e:
            log.warning("unable to load credentials from disk: %s", e)
            return {}
        if entries:
            log.info("read %d credentials from disk", len(entries))
        return entries

    def resolve(
        self, properties_path: Path | str, recognized_names: Iterable[str]
    ) -> dict[str, str]:
        """Build the credential set for the recognized names.

        A variable present in the environment wins even when it is empty, which
        then drops the name entirely. Names without a non-empty value are omitted.
        """
        stored = self.load(properties_path)
        resolved: dict[str, str] = {}
        for name in recognized_names:
            value = self._environ.get(name)
            if value is None:
                value = stored.get(name)
            if not value:
                continue
            resolved[name] = value
            log.info("Set environment variable %s before launching client", name)
        return resolved
