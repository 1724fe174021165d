"""Exceptions raised by rlaunch components."""


class LauncherError(Exception):
    """Base class for failures the CLI reports to the user."""


class FetchError(LauncherError):
    """The freshness check could not complete."""


class NetworkError(FetchError):
    """The artifact could not be downloaded (unreachable, timeout, truncated)."""


class BadStatusError(NetworkError):
    """The server answered with a non-2xx status."""

    def __init__(self, url: str, status: int, reason: str = "") -> None:
        self.url = url
        self.status = status
        self.reason = reason
        detail = f"{status} {reason}".strip()
        super().__init__(f"Download of {url} failed with HTTP {detail}")


class FilesystemError(FetchError):
    """A local read or write of the cache failed."""


class CredentialParseError(LauncherError):
    """The credentials properties file could not be read or parsed."""


class SpawnError(LauncherError):
    """The client process could not be started."""
