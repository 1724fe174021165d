"""`rlaunch update` command implementation."""

import argparse
import sys

from rlaunch.cache import ArtifactCache
from rlaunch.cli.shared import add_verbosity_arguments, configure_logging, load_config_with_overrides
from rlaunch.errors import LauncherError
from rlaunch.launcher import Launcher
from rlaunch.progress import DownloadProgress

STATUS_MESSAGES = {
    "created": "Downloaded client to {path}",
    "updated": "Updated client at {path}",
    "unchanged": "Client at {path} is up to date",
}


def build_parser() -> argparse.ArgumentParser:
    """Build parser for the update command."""
    parser = argparse.ArgumentParser(
        prog="rlaunch update",
        description="Check the cached client against the server without launching it",
    )
    add_verbosity_arguments(parser)
    parser.add_argument("--url", help="Download the client from this URL instead")
    return parser


def run(argv: list[str]) -> int:
    """Execute the update command."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args)

    config = load_config_with_overrides(args)
    progress = DownloadProgress()
    cache = ArtifactCache(timeout=config.network_timeout_seconds, progress=progress)

    try:
        status = Launcher(config, cache=cache).check_for_update()
    except LauncherError as e:
        progress.finish()
        print(f"Error: {e}", file=sys.stderr)
        return 1
    progress.finish()

    print(STATUS_MESSAGES[status].format(path=config.artifact_path))
    return 0
