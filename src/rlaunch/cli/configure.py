"""`rlaunch configure` command implementation."""

import argparse
import logging
import sys
from pathlib import Path

from rlaunch.config import CONFIG_FILE, load_config, save_config
from rlaunch.models import DEFAULT_DOWNLOAD_URL

log = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build parser for the configure command."""
    parser = argparse.ArgumentParser(
        prog="rlaunch configure",
        description="Show or change the settings stored in ~/.rlaunch/config.json",
    )
    parser.add_argument("-d", "--debug", action="store_true", help="Enable debug logging")
    url_group = parser.add_mutually_exclusive_group()
    url_group.add_argument("--url", help="Client download URL")
    url_group.add_argument(
        "--reset-url", action="store_true", help="Go back to the default download URL"
    )
    parser.add_argument("--cache-dir", help="Directory holding the cached client")
    parser.add_argument(
        "--credentials-file",
        help="Credentials properties file (relative to the credentials directory)",
    )
    java_group = parser.add_mutually_exclusive_group()
    java_group.add_argument("--java", metavar="PATH", help="Java runtime used to run the client")
    java_group.add_argument(
        "--clear-java", action="store_true", help="Find Java via JAVA_HOME or PATH again"
    )
    parser.add_argument(
        "--timeout", type=float, metavar="SECONDS", help="Network timeout for the update check"
    )
    stale_group = parser.add_mutually_exclusive_group()
    stale_group.add_argument(
        "--allow-stale",
        action="store_true",
        help="Launch the cached client when the update check cannot reach the server",
    )
    stale_group.add_argument(
        "--require-fresh",
        action="store_true",
        help="Refuse to launch when the update check fails (default)",
    )
    return parser


def run(argv: list[str]) -> int:
    """Execute the configure command."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(name)s %(levelname)s: %(message)s",
    )

    if args.timeout is not None and args.timeout <= 0:
        print("Error: --timeout must be greater than zero", file=sys.stderr)
        return 2

    updates: dict = {}
    if args.url is not None:
        updates["download_url"] = args.url
    if args.reset_url:
        updates["download_url"] = DEFAULT_DOWNLOAD_URL
    if args.cache_dir is not None:
        updates["cache_dir"] = Path(args.cache_dir).expanduser()
    if args.credentials_file is not None:
        updates["credentials_file"] = args.credentials_file
    if args.java is not None:
        updates["java_executable"] = args.java
    if args.clear_java:
        updates["java_executable"] = None
    if args.timeout is not None:
        updates["network_timeout_seconds"] = args.timeout
    if args.allow_stale:
        updates["allow_stale_cache"] = True
    if args.require_fresh:
        updates["allow_stale_cache"] = False

    # Stored settings only; RLAUNCH_* overrides must not leak into the file.
    config = load_config(environ={})
    if updates:
        config = config.model_copy(update=updates)
        try:
            save_config(config)
        except OSError as e:
            print(f"Error: could not save {CONFIG_FILE}: {e}", file=sys.stderr)
            return 1
        print(f"\nConfiguration saved to {CONFIG_FILE}")
    else:
        log.debug("no changes requested")
        print(f"\nConfiguration from {CONFIG_FILE}")

    print(f"  download_url: {config.download_url}")
    print(f"  cache_dir: {config.cache_dir}")
    print(f"  credentials: {config.credentials_path}")
    print(f"  java: {config.java_executable or '(JAVA_HOME or PATH)'}")
    print(f"  network_timeout_seconds: {config.network_timeout_seconds:g}")
    print("  allow_stale_cache: " + ("true" if config.allow_stale_cache else "false"))
    print("")
    return 0
