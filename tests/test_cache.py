"""Unit tests for rlaunch.cache."""

import io
import os
import socket
from http.client import BadStatusLine, InvalidURL
from unittest.mock import patch
from urllib.error import HTTPError, URLError

import pytest

from rlaunch.cache import ArtifactCache
from rlaunch.errors import BadStatusError, FetchError, FilesystemError, NetworkError
from rlaunch.hasher import digest_bytes, digest_file

URL = "https://example.invalid/client.jar"


class FakeResponse:
    """Minimal stand-in for the object urlopen returns."""

    def __init__(self, body: bytes, status: int = 200, content_length: int | None = -1):
        self._body = io.BytesIO(body)
        self.status = status
        self.reason = "OK" if status == 200 else "Error"
        if content_length == -1:
            content_length = len(body)
        self.headers = {} if content_length is None else {"Content-Length": str(content_length)}
        self.closed = False

    def read(self, size: int = -1) -> bytes:
        return self._body.read(size)

    def close(self) -> None:
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False


class FailingResponse(FakeResponse):
    def read(self, size: int = -1) -> bytes:
        raise socket.timeout("read timed out")


def _serve(*bodies: bytes):
    """Patch urlopen to answer successive requests with the given bodies."""
    responses = [FakeResponse(body) for body in bodies]
    return patch("rlaunch.cache.urlopen", side_effect=responses)


def _leftover_temp_files(directory):
    return [p for p in directory.iterdir() if p.name.endswith(".tmp")]


class TestEnsureFreshFirstRun:
    def test_downloads_when_cache_is_absent(self, tmp_path):
        local = tmp_path / "RuneLite.jar"
        with _serve(b"v1"):
            status = ArtifactCache().ensure_fresh(URL, local)

        assert status == "created"
        assert local.read_bytes() == b"v1"
        assert _leftover_temp_files(tmp_path) == []

    def test_sends_user_agent_and_timeout(self, tmp_path):
        with _serve(b"v1") as mock_urlopen:
            ArtifactCache(timeout=5).ensure_fresh(URL, tmp_path / "RuneLite.jar")

        request = mock_urlopen.call_args[0][0]
        assert request.full_url == URL
        assert request.get_header("User-agent").startswith("rlaunch/")
        assert mock_urlopen.call_args[1] == {"timeout": 5}

    def test_reports_progress(self, tmp_path):
        seen = []
        cache = ArtifactCache(chunk_size=2, progress=lambda got, total: seen.append((got, total)))
        with _serve(b"abcde"):
            cache.ensure_fresh(URL, tmp_path / "RuneLite.jar")

        assert seen == [(2, 5), (4, 5), (5, 5)]


class TestEnsureFreshExistingCache:
    def test_unchanged_content_is_not_rewritten(self, tmp_path):
        local = tmp_path / "RuneLite.jar"
        local.write_bytes(b"v1")
        os.utime(local, (1_000_000, 1_000_000))

        with _serve(b"v1"):
            status = ArtifactCache().ensure_fresh(URL, local)

        assert status == "unchanged"
        assert local.read_bytes() == b"v1"
        assert local.stat().st_mtime == 1_000_000
        assert _leftover_temp_files(tmp_path) == []

    def test_changed_content_replaces_cache(self, tmp_path):
        local = tmp_path / "RuneLite.jar"
        local.write_bytes(b"v1")

        with _serve(b"v2"):
            status = ArtifactCache().ensure_fresh(URL, local)

        assert status == "updated"
        assert digest_file(local) == digest_bytes(b"v2")
        assert _leftover_temp_files(tmp_path) == []

    def test_v1_then_v2_scenario(self, tmp_path):
        local = tmp_path / "RuneLite.jar"
        cache = ArtifactCache()

        with _serve(b"v1"):
            assert cache.ensure_fresh(URL, local) == "created"
        assert local.read_bytes() == b"v1"

        with _serve(b"v2"):
            assert cache.ensure_fresh(URL, local) == "updated"
        assert local.read_bytes() == b"v2"
        assert digest_file(local) == digest_bytes(b"v2")

    def test_issues_request_on_every_call(self, tmp_path):
        local = tmp_path / "RuneLite.jar"
        cache = ArtifactCache()
        with _serve(b"v1", b"v1", b"v1") as mock_urlopen:
            for _ in range(3):
                cache.ensure_fresh(URL, local)

        assert mock_urlopen.call_count == 3

    def test_large_artifact_streams_in_chunks(self, tmp_path):
        body = os.urandom(300_000)
        local = tmp_path / "RuneLite.jar"
        local.write_bytes(b"old")
        with _serve(body):
            ArtifactCache(chunk_size=4096).ensure_fresh(URL, local)

        assert local.read_bytes() == body


class TestEnsureFreshNetworkErrors:
    def test_http_error_status(self, tmp_path):
        error = HTTPError(URL, 404, "Not Found", hdrs=None, fp=None)
        with patch("rlaunch.cache.urlopen", side_effect=error):
            with pytest.raises(BadStatusError) as exc_info:
                ArtifactCache().ensure_fresh(URL, tmp_path / "RuneLite.jar")

        assert exc_info.value.status == 404
        assert "404" in str(exc_info.value)

    def test_non_2xx_response_without_http_error(self, tmp_path):
        response = FakeResponse(b"", status=304)
        with patch("rlaunch.cache.urlopen", return_value=response):
            with pytest.raises(BadStatusError):
                ArtifactCache().ensure_fresh(URL, tmp_path / "RuneLite.jar")

        assert response.closed

    def test_unreachable_host(self, tmp_path):
        with patch("rlaunch.cache.urlopen", side_effect=URLError("Name or service not known")):
            with pytest.raises(NetworkError, match="Could not reach"):
                ArtifactCache().ensure_fresh(URL, tmp_path / "RuneLite.jar")

    def test_malformed_status_line(self, tmp_path):
        with patch("rlaunch.cache.urlopen", side_effect=BadStatusLine("GARBAGE")):
            with pytest.raises(NetworkError, match="Bad response"):
                ArtifactCache().ensure_fresh(URL, tmp_path / "RuneLite.jar")

    def test_invalid_port(self, tmp_path):
        with patch("rlaunch.cache.urlopen", side_effect=InvalidURL("nonnumeric port: 'x'")):
            with pytest.raises(NetworkError):
                ArtifactCache().ensure_fresh(URL, tmp_path / "RuneLite.jar")

    def test_url_without_scheme(self, tmp_path):
        local = tmp_path / "RuneLite.jar"
        with pytest.raises(NetworkError, match="Invalid download URL"):
            ArtifactCache().ensure_fresh("example.com/c.jar", local)

        assert list(tmp_path.iterdir()) == []

    def test_connect_timeout(self, tmp_path):
        with patch("rlaunch.cache.urlopen", side_effect=TimeoutError()):
            with pytest.raises(NetworkError, match="Timed out"):
                ArtifactCache().ensure_fresh(URL, tmp_path / "RuneLite.jar")

    def test_read_timeout_keeps_existing_cache(self, tmp_path):
        local = tmp_path / "RuneLite.jar"
        local.write_bytes(b"v1")
        with patch("rlaunch.cache.urlopen", return_value=FailingResponse(b"v2")):
            with pytest.raises(NetworkError):
                ArtifactCache().ensure_fresh(URL, local)

        assert local.read_bytes() == b"v1"
        assert _leftover_temp_files(tmp_path) == []

    def test_truncated_download_is_rejected(self, tmp_path):
        local = tmp_path / "RuneLite.jar"
        local.write_bytes(b"v1")
        response = FakeResponse(b"v2-partial", content_length=1000)
        with patch("rlaunch.cache.urlopen", return_value=response):
            with pytest.raises(NetworkError, match="truncated"):
                ArtifactCache().ensure_fresh(URL, local)

        assert local.read_bytes() == b"v1"
        assert _leftover_temp_files(tmp_path) == []

    def test_unknown_length_reports_completion(self, tmp_path):
        seen = []
        cache = ArtifactCache(chunk_size=2, progress=lambda got, total: seen.append((got, total)))
        response = FakeResponse(b"abc", content_length=None)
        with patch("rlaunch.cache.urlopen", return_value=response):
            cache.ensure_fresh(URL, tmp_path / "RuneLite.jar")

        assert seen == [(2, None), (3, None), (3, 3)]

    def test_missing_content_length_is_accepted(self, tmp_path):
        local = tmp_path / "RuneLite.jar"
        with patch("rlaunch.cache.urlopen", return_value=FakeResponse(b"v1", content_length=None)):
            assert ArtifactCache().ensure_fresh(URL, local) == "created"

    def test_network_errors_are_fetch_errors(self):
        assert issubclass(NetworkError, FetchError)
        assert issubclass(BadStatusError, NetworkError)


class TestEnsureFreshFilesystemErrors:
    def test_missing_directory(self, tmp_path):
        local = tmp_path / "missing" / "RuneLite.jar"
        with _serve(b"v1"):
            with pytest.raises(FilesystemError, match="Could not create"):
                ArtifactCache().ensure_fresh(URL, local)

    def test_replace_failure_leaves_cache_intact(self, tmp_path):
        local = tmp_path / "RuneLite.jar"
        local.write_bytes(b"v1")
        with _serve(b"v2"):
            with patch("rlaunch.cache.os.replace", side_effect=PermissionError("denied")):
                with pytest.raises(FilesystemError, match="Could not replace"):
                    ArtifactCache().ensure_fresh(URL, local)

        assert local.read_bytes() == b"v1"
        assert _leftover_temp_files(tmp_path) == []

    def test_write_failure(self, tmp_path):
        local = tmp_path / "RuneLite.jar"
        with _serve(b"v1"):
            with patch("rlaunch.cache.os.fsync", side_effect=OSError(28, "No space left on device")):
                with pytest.raises(FilesystemError, match="No space"):
                    ArtifactCache().ensure_fresh(URL, local)

        assert not local.exists()
        assert _leftover_temp_files(tmp_path) == []

    def test_filesystem_errors_are_fetch_errors(self):
        assert issubclass(FilesystemError, FetchError)
