"""Keep a single cached copy of a remote artifact up to date."""

from __future__ import annotations

import logging
import os
import time
from collections.abc import Callable
from http.client import HTTPException
from pathlib import Path
from typing import BinaryIO, Literal
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from rlaunch import __version__
from rlaunch.errors import BadStatusError, FilesystemError, NetworkError
from rlaunch.hasher import CHUNK_SIZE, digest_file
from rlaunch.models.launcher_config import DEFAULT_NETWORK_TIMEOUT_SECONDS

log = logging.getLogger(__name__)

CacheStatus = Literal["created", "updated", "unchanged"]
ProgressCallback = Callable[[int, int | None], None]
USER_AGENT = f"rlaunch/{__version__}"


def _temp_path_for(local_path: Path) -> Path:
    return local_path.with_name(f".{local_path.name}.{os.getpid()}.{time.time_ns()}.tmp")


def _discard(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        pass
    except OSError as e:
        log.warning("Could not remove temporary file %s: %s", path, e)


def _content_length(response) -> int | None:
    headers = getattr(response, "headers", None)
    value = headers.get("Content-Length") if headers is not None else None
    if value is None:
        return None
    try:
        length = int(value)
    except ValueError:
        return None
    return length if length >= 0 else None


class ArtifactCache:
    """Download an artifact and replace the cached copy only when its digest changed."""

    def __init__(
        self,
        timeout: float = DEFAULT_NETWORK_TIMEOUT_SECONDS,
        chunk_size: int = CHUNK_SIZE,
        progress: ProgressCallback | None = None,
    ) -> None:
        self.timeout = timeout
        self.chunk_size = chunk_size
        self.progress = progress

    def ensure_fresh(self, remote_url: str, local_path: Path | str) -> CacheStatus:
        """Make ``local_path`` hold the bytes currently served at ``remote_url``.

        Returns ``"created"`` on first download, ``"updated"`` when the cached
        copy was replaced and ``"unchanged"`` when the digests matched, in which
        case ``local_path`` is not touched.
        """
        local_path = Path(local_path)
        temp_path = _temp_path_for(local_path)
        try:
            self._download(remote_url, temp_path)

            if not local_path.exists():
                log.info("No cached copy at %s, installing download", local_path)
                self._install(temp_path, local_path)
                return "created"

            log.info("Checking %s for updates...", local_path.name)
            remote_digest = self._digest(temp_path)
            local_digest = self._digest(local_path)
            log.debug("remote=%s local=%s", remote_digest, local_digest)
            if remote_digest == local_digest:
                log.info("%s is up to date", local_path.name)
                return "unchanged"

            log.info("Replacing %s with the downloaded version", local_path.name)
            self._install(temp_path, local_path)
            return "updated"
        finally:
            _discard(temp_path)

    def _open(self, remote_url: str):
        try:
            request = Request(remote_url, headers={"User-Agent": USER_AGENT})
            response = urlopen(request, timeout=self.timeout)
        except HTTPError as e:
            raise BadStatusError(remote_url, e.code, str(e.reason or "")) from e
        except URLError as e:
            raise NetworkError(f"Could not reach {remote_url}: {e.reason}") from e
        except TimeoutError as e:
            raise NetworkError(f"Timed out connecting to {remote_url}") from e
        except OSError as e:
            raise NetworkError(f"Could not reach {remote_url}: {e}") from e
        except ValueError as e:
            raise NetworkError(f"Invalid download URL {remote_url!r}: {e}") from e
        except HTTPException as e:
            # BadStatusLine, InvalidURL and friends are not wrapped by urllib
            raise NetworkError(f"Bad response from {remote_url}: {e!r}") from e

        # file:// responses carry no status
        status = getattr(response, "status", None)
        if status is not None and not 200 <= status < 300:
            response.close()
            raise BadStatusError(remote_url, status, getattr(response, "reason", "") or "")
        return response

    def _download(self, remote_url: str, temp_path: Path) -> None:
        log.info("Downloading %s", remote_url)
        with self._open(remote_url) as response:
            total = _content_length(response)
            fd = self._create_temp(temp_path)
            with os.fdopen(fd, "wb") as out:
                received = self._copy(remote_url, response, out, temp_path, total)
                if total is None and self.progress is not None:
                    # final size is only known now; lets the progress line close
                    self.progress(received, received)
                try:
                    out.flush()
                    os.fsync(out.fileno())
                except OSError as e:
                    raise FilesystemError(f"Could not write {temp_path}: {e}") from e

        if total is not None and received != total:
            raise NetworkError(
                f"Download of {remote_url} was truncated ({received} of {total} bytes)"
            )
        log.debug("Downloaded %d bytes to %s", received, temp_path)

    def _create_temp(self, temp_path: Path) -> int:
        try:
            return os.open(temp_path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o644)
        except OSError as e:
            raise FilesystemError(f"Could not create {temp_path}: {e}") from e

    def _copy(
        self,
        remote_url: str,
        response,
        out: BinaryIO,
        temp_path: Path,
        total: int | None,
    ) -> int:
        received = 0
        while True:
            try:
                chunk = response.read(self.chunk_size)
            except TimeoutError as e:
                raise NetworkError(f"Timed out downloading {remote_url}") from e
            except (OSError, HTTPException) as e:
                raise NetworkError(f"Connection lost while downloading {remote_url}: {e}") from e
            if not chunk:
                return received
            try:
                out.write(chunk)
            except OSError as e:
                raise FilesystemError(f"Could not write {temp_path}: {e}") from e
            received += len(chunk)
            if self.progress is not None:
                self.progress(received, total)

    def _digest(self, path: Path) -> str:
        try:
            return digest_file(path, self.chunk_size)
        except OSError as e:
            raise FilesystemError(f"Could not read {path}: {e}") from e

    def _install(self, temp_path: Path, local_path: Path) -> None:
        try:
            os.replace(temp_path, local_path)
        except OSError as e:
            raise FilesystemError(f"Could not replace {local_path}: {e}") from e
