"""Terminal progress line shown while the client downloads."""

import shutil
import sys
from typing import TextIO

SPINNER_FRAMES = ("|", "/", "-", "\\")


def _format_size(num_bytes: int) -> str:
    size = float(num_bytes)
    for unit in ("B", "KiB", "MiB"):
        if size < 1024:
            return f"{size:.0f} {unit}" if unit == "B" else f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} GiB"


class DownloadProgress:
    """Render a single rewriting status line on a TTY; do nothing elsewhere."""

    def __init__(self, stream: TextIO | None = None, label: str = "Downloading client") -> None:
        self._stream = stream if stream is not None else sys.stderr
        self._label = label
        self._frame = 0
        self._enabled = hasattr(self._stream, "isatty") and self._stream.isatty()
        self._dirty = False

    def __call__(self, received: int, total: int | None) -> None:
        if not self._enabled:
            return
        if total is not None and received >= total:
            # download complete; clear before anything else is logged
            self.finish()
            return
        frame = SPINNER_FRAMES[self._frame % len(SPINNER_FRAMES)]
        self._frame += 1
        if total:
            percent = min(100, received * 100 // total)
            text = f"{frame} {self._label}: {_format_size(received)} / {_format_size(total)} ({percent}%)"
        else:
            text = f"{frame} {self._label}: {_format_size(received)}"
        self._write_line(text)

    def finish(self) -> None:
        if self._enabled and self._dirty:
            self._clear_line()

    def _write_line(self, text: str) -> None:
        cols = shutil.get_terminal_size(fallback=(80, 24)).columns
        max_width = max(cols - 1, 10)
        clipped = text[:max_width]
        try:
            self._stream.write("\r" + clipped.ljust(max_width))
            self._stream.flush()
            self._dirty = True
        except OSError:
            self._enabled = False

    def _clear_line(self) -> None:
        cols = shutil.get_terminal_size(fallback=(80, 24)).columns
        max_width = max(cols - 1, 10)
        try:
            self._stream.write("\r" + (" " * max_width) + "\r")
            self._stream.flush()
        except OSError:
            pass
        self._dirty = False
