"""Reader for Java-style ``.properties`` files."""

import re
from pathlib import Path

from rlaunch.errors import CredentialParseError

COMMENT_PREFIXES = ("#", "!")
SEPARATORS = "=:"
WHITESPACE = " \t\f"
LINE_BREAK = re.compile(r"\r\n|\r|\n")
ESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}


def _logical_lines(text: str) -> list[str]:
    """Join backslash-continued physical lines and drop comments and blanks."""
    lines: list[str] = []
    pending: str | None = None
    for raw in LINE_BREAK.split(text):
        line = raw.lstrip(WHITESPACE)
        if pending is None:
            if not line or line.startswith(COMMENT_PREFIXES):
                continue
        else:
            line = pending + line

        if _ends_with_continuation(line):
            pending = line[:-1]
            continue
        pending = None
        lines.append(line)

    if pending is not None:
        lines.append(pending)
    return lines


def _ends_with_continuation(line: str) -> bool:
    # An odd number of trailing backslashes means the last one escapes the newline.
    count = len(line) - len(line.rstrip("\\"))
    return count % 2 == 1


def _unescape(value: str, line_number: int) -> str:
    out: list[str] = []
    i = 0
    while i < len(value):
        ch = value[i]
        if ch != "\\":
            out.append(ch)
            i += 1
            continue
        i += 1
        if i >= len(value):
            break
        ch = value[i]
        if ch == "u":
            code = value[i + 1 : i + 5]
            if len(code) != 4 or any(c not in "0123456789abcdefABCDEF" for c in code):
                raise CredentialParseError(
                    f"Malformed \\uXXXX escape in properties entry {line_number}"
                )
            out.append(chr(int(code, 16)))
            i += 5
            continue
        out.append(ESCAPES.get(ch, ch))
        i += 1
    return "".join(out)


def _split_entry(line: str) -> tuple[str, str]:
    """Split a logical line at the first unescaped separator."""
    i = 0
    while i < len(line):
        ch = line[i]
        if ch == "\\":
            i += 2
            continue
        if ch in SEPARATORS or ch in WHITESPACE:
            break
        i += 1
    key = line[:i]
    rest = line[i:].lstrip(WHITESPACE)
    if rest[:1] and rest[0] in SEPARATORS:
        rest = rest[1:].lstrip(WHITESPACE)
    return key, rest


def parse_properties(text: str) -> dict[str, str]:
    """Parse properties text into a dict. Later duplicate keys win."""
    entries: dict[str, str] = {}
    for number, line in enumerate(_logical_lines(text), start=1):
        raw_key, raw_value = _split_entry(line)
        entries[_unescape(raw_key, number)] = _unescape(raw_value, number)
    return entries


def load_properties(path: Path | str) -> dict[str, str]:
    """Read and parse a UTF-8 properties file.

    Raises CredentialParseError when the file cannot be read or decoded.
    """
    try:
        with open(path, encoding="utf-8") as f:
            text = f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise CredentialParseError(f"Unable to read {path}: {e}") from e
    return parse_properties(text)
