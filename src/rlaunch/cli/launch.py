"""Default mode: refresh the cached client and launch it."""

import argparse
import sys

from rlaunch import __version__
from rlaunch.cache import ArtifactCache
from rlaunch.cli.shared import add_verbosity_arguments, configure_logging, load_config_with_overrides
from rlaunch.errors import LauncherError
from rlaunch.launcher import Launcher
from rlaunch.progress import DownloadProgress


def build_parser() -> argparse.ArgumentParser:
    """Build parser for launch mode."""
    parser = argparse.ArgumentParser(
        prog="rlaunch",
        description="Update the cached client jar and launch it with stored credentials",
        epilog="Subcommands: `rlaunch update` checks for updates only, "
        "`rlaunch configure` edits ~/.rlaunch/config.json.",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    add_verbosity_arguments(parser)
    parser.add_argument(
        "--offline",
        action="store_true",
        help="Skip the update check and launch the cached client",
    )
    parser.add_argument(
        "--allow-stale",
        action="store_true",
        help="Launch the cached client when the update check cannot reach the server",
    )
    parser.add_argument("--java", metavar="PATH", help="Java runtime used to run the client")
    parser.add_argument("--url", help="Download the client from this URL instead")
    parser.add_argument(
        "client_args",
        nargs="*",
        metavar="CLIENT_ARG",
        help="Extra arguments passed to the client (put them after `--`)",
    )
    return parser


def run(argv: list[str]) -> int:
    """Execute launch mode."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args)

    config = load_config_with_overrides(args)
    progress = DownloadProgress()
    cache = ArtifactCache(timeout=config.network_timeout_seconds, progress=progress)
    launcher = Launcher(config, cache=cache)

    try:
        launcher.run(args.client_args, check_updates=not args.offline)
    except LauncherError as e:
        progress.finish()
        print(f"Error: {e}", file=sys.stderr)
        return 1
    progress.finish()

    return 0
