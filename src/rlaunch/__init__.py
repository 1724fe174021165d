"""rlaunch - keep a client jar cached and launch it with stored credentials."""

__version__ = "0.1.0"
