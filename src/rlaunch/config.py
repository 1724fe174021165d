"""Configuration loading for rlaunch."""

import json
import logging
import os
import time
from collections.abc import Mapping
from pathlib import Path

from pydantic import ValidationError

from rlaunch.models import LauncherConfig

log = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".rlaunch"
CONFIG_FILE = CONFIG_DIR / "config.json"

ENV_OVERRIDES = {
    "RLAUNCH_DOWNLOAD_URL": "download_url",
    "RLAUNCH_CACHE_DIR": "cache_dir",
    "RLAUNCH_JAVA": "java_executable",
    "RLAUNCH_ALLOW_STALE": "allow_stale_cache",
}
TRUE_VALUES = {"1", "true", "yes", "on"}


def _read_config_file(path: Path) -> dict:
    try:
        with open(path, encoding="utf-8") as f:
            payload = json.load(f)
    except FileNotFoundError:
        return {}
    except (OSError, json.JSONDecodeError) as e:
        log.warning("Ignoring unreadable config %s: %s", path, e)
        return {}
    if not isinstance(payload, dict):
        log.warning("Ignoring config %s: expected a JSON object", path)
        return {}
    return payload


def _env_overrides(environ: Mapping[str, str]) -> dict:
    overrides: dict = {}
    for env_key, field in ENV_OVERRIDES.items():
        value = environ.get(env_key, "").strip()
        if not value:
            continue
        if field == "allow_stale_cache":
            overrides[field] = value.lower() in TRUE_VALUES
        elif field == "cache_dir":
            overrides[field] = Path(value).expanduser()
        else:
            overrides[field] = value
    return overrides


def load_config(
    path: Path | None = None, environ: Mapping[str, str] | None = None
) -> LauncherConfig:
    """Load config from disk, then apply RLAUNCH_* environment overrides."""
    config_path = CONFIG_FILE if path is None else path
    env = os.environ if environ is None else environ

    data = _read_config_file(config_path)
    try:
        config = LauncherConfig(**data)
    except ValidationError as e:
        log.warning("Ignoring invalid config %s: %s", config_path, e)
        config = LauncherConfig()

    overrides = _env_overrides(env)
    if overrides:
        log.debug("environment overrides: %s", sorted(overrides))
        config = config.model_copy(update=overrides)
    return config


def save_config(config: LauncherConfig, path: Path | None = None) -> Path:
    """Atomically write config as JSON, readable only by the current user."""
    config_path = CONFIG_FILE if path is None else path
    os.makedirs(config_path.parent, mode=0o700, exist_ok=True)
    temp_file = config_path.with_name(f".{config_path.name}.{os.getpid()}.{time.time_ns()}.tmp")
    fd = os.open(temp_file, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(config.model_dump_json(indent=2, exclude_defaults=True))
            f.flush()
            os.fsync(f.fileno())
        os.replace(temp_file, config_path)
    except OSError:
        temp_file.unlink(missing_ok=True)
        raise
    return config_path
