"""Shared CLI helpers."""

import argparse
import logging

from rlaunch.config import load_config
from rlaunch.models import LauncherConfig


def add_verbosity_arguments(parser: argparse.ArgumentParser) -> None:
    group = parser.add_mutually_exclusive_group()
    group.add_argument("-d", "--debug", action="store_true", help="Enable debug logging")
    group.add_argument("-q", "--quiet", action="store_true", help="Only show warnings and errors")


def configure_logging(args: argparse.Namespace) -> None:
    """Set up root logging from -d/-q flags; progress is shown at INFO."""
    level = logging.INFO
    if args.debug:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(name)s %(levelname)s: %(message)s")


def load_config_with_overrides(args: argparse.Namespace) -> LauncherConfig:
    """Load config and apply --url / --java / --allow-stale when given."""
    config = load_config()
    updates: dict = {}
    if getattr(args, "url", None):
        updates["download_url"] = args.url
    if getattr(args, "java", None):
        updates["java_executable"] = args.java
    if getattr(args, "allow_stale", False):
        updates["allow_stale_cache"] = True
    if updates:
        config = config.model_copy(update=updates)
    return config
