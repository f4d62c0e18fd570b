"""Git utility functions for gitcmd."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any, Iterator, Optional

logger = logging.getLogger(__name__)

_SIMPLE_ESCAPES = {
    "a": 0x07,
    "b": 0x08,
    "t": 0x09,
    "n": 0x0A,
    "v": 0x0B,
    "f": 0x0C,
    "r": 0x0D,
    '"': 0x22,
    "\\": 0x5C,
}

_OCTAL_RE = re.compile(r"[0-7]{3}")


def escape(value: Any) -> str:
    """Quote a single argument for inclusion in a shell command line.

    None becomes the empty token ''. Embedded single quotes are closed,
    escaped and reopened ('\\'') so a POSIX shell reads back the original
    string.

    Args:
        value: Value to quote; converted with str().

    Returns:
        The single-quoted token.
    """
    text = "" if value is None else str(value)
    return "'" + text.replace("'", "'\\''") + "'"


def flatten(args: Any) -> Iterator[Any]:
    """Yield the leaves of an arbitrarily nested list/tuple of arguments."""
    if isinstance(args, (list, tuple)):
        for item in args:
            yield from flatten(item)
    else:
        yield args


def join_args(args: Any) -> str:
    """Flatten, escape and space-join an argument list."""
    if args is None:
        return ""
    return " ".join(escape(arg) for arg in flatten(args))


def find_git_root(start_path: Path | str) -> Optional[Path]:
    """Find the root of a git repository.

    Walks up the directory tree from start_path looking for a .git directory.

    Args:
        start_path: Path to start searching from.

    Returns:
        Path to the repository root, or None if not in a git repository.
    """
    path = Path(start_path).resolve()

    # Check current path and parents
    for parent in [path] + list(path.parents):
        git_dir = parent / ".git"
        if git_dir.exists():
            return parent

    return None


def is_git_repository(path: Path | str) -> bool:
    """Check if a path is inside a git repository."""
    return find_git_root(path) is not None


def unquote_path(path: str) -> str:
    """Undo git's C-style quoting of a path.

    git wraps paths containing special characters in double quotes and
    escapes them with backslashes, writing non-ASCII bytes as three-digit
    octal escapes ("\\303\\251" for "é"). Unquoted paths are returned as-is.
    """
    if len(path) < 2 or not (path.startswith('"') and path.endswith('"')):
        return path

    body = path[1:-1]
    out = bytearray()
    i = 0
    while i < len(body):
        char = body[i]
        if char != "\\" or i + 1 >= len(body):
            out.extend(char.encode("utf-8"))
            i += 1
            continue

        nxt = body[i + 1]
        if nxt in _SIMPLE_ESCAPES:
            out.append(_SIMPLE_ESCAPES[nxt])
            i += 2
        elif _OCTAL_RE.match(body, i + 1):
            out.append(int(body[i + 1:i + 4], 8) & 0xFF)
            i += 4
        else:
            # Unknown escape, keep it literally
            out.extend(char.encode("utf-8"))
            i += 1

    return out.decode("utf-8", errors="surrogateescape")


def to_int(value: Optional[str]) -> int:
    """Read a leading integer from value, 0 when there is none.

    numstat reports binary files as "-", which counts as 0.
    """
    if not value:
        return 0
    match = re.match(r"\s*([+-]?\d+)", value)
    return int(match.group(1)) if match else 0


def split_lines(text: str) -> list[str]:
    """Split command output into lines; empty output has no lines."""
    if not text:
        return []
    return text.split("\n")
