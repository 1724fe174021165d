"""Command-line interface for rlaunch."""

from rlaunch.cli.app import entrypoint, main

__all__ = ["entrypoint", "main"]
