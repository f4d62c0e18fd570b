"""Parsers for line-oriented git output.

Each parser takes the lines of one command's output and returns plain
Python structures. Parsers never raise on unexpected input: lines that do
not have the expected shape are skipped and logged at DEBUG level, since
warnings and progress messages are merged into the captured output.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Iterable, Optional, Union

from gitcmd.git.models import (
    BranchEntry,
    DiffEntry,
    DiffStats,
    FileStat,
    IndexEntry,
    StashEntry,
    TreeEntry,
)
from gitcmd.git.utils import to_int, unquote_path

logger = logging.getLogger(__name__)

CommitRecord = dict[str, Any]

RAW_LOG_INDENT = 4

_GREP_RE = re.compile(r"(.*):(\d+):(.*)")
_UNMERGED_RE = re.compile(r"^(?:\* )?Unmerged path (.*)")
_STASH_RE = re.compile(r"^stash@\{(\d+)\}: (.*)$")
_VERSION_RE = re.compile(r"\d+\.\d+(?:\.\d+)+")


def _new_commit(sha: Optional[str]) -> CommitRecord:
    return {"sha": sha, "message": "", "parent": []}


def parse_commit_data(
    lines: Iterable[str],
    sha: Optional[str] = None,
    indent: Optional[int] = None,
) -> Union[CommitRecord, list[CommitRecord]]:
    """Parse raw commit objects.

    With ``sha`` the lines are one object as printed by ``git cat-file
    commit`` and a single record is returned. Without it the lines are
    ``git log --pretty=raw`` output; each ``commit`` header starts a new
    record and a list is returned.

    The first blank line of a record ends its header block. Header lines
    are split into a key and a value; ``parent`` collects into a list, other
    keys overwrite, and lines starting with a space continue the previous
    header. Everything after the header block is message: lines lose
    ``indent`` leading columns (4 for log output, 0 for cat-file output by
    default), blank lines between message lines are kept and trailing
    blank lines are dropped.

    Args:
        lines: Output lines.
        sha: Sha of the single object being parsed.
        indent: Columns to strip from message lines.

    Returns:
        A commit record, or a list of them.
    """
    single = sha is not None
    if indent is None:
        indent = 0 if single else RAW_LOG_INDENT

    records: list[CommitRecord] = []
    current: Optional[CommitRecord] = _new_commit(sha) if single else None
    last_key: Optional[str] = None
    in_message = False
    pending_blanks = 0

    for line in lines:
        line = line.rstrip("\r\n")

        if in_message:
            if not single and line.startswith("commit "):
                # Log records are separated by a blank line and an unindented header
                in_message = False
            elif line == "":
                pending_blanks += 1
                continue
            else:
                current["message"] += "\n" * pending_blanks + line[indent:] + "\n"  # type: ignore[index]
                pending_blanks = 0
                continue

        if line == "":
            if current is not None:
                in_message = True
                pending_blanks = 0
            continue

        if line.startswith(" ") and current is not None and last_key:
            # Continuation of a multi-line header such as gpgsig or mergetag
            if last_key != "parent":
                current[last_key] += "\n" + line[1:]
            continue

        parts = line.split()
        if not parts:
            continue
        key, value = parts[0], " ".join(parts[1:])

        if key == "commit" and not single:
            if current is not None:
                records.append(current)
            current = _new_commit(value)
            last_key = None
            continue

        if current is None:
            logger.debug(f"Skipping commit header before first commit line: {line!r}")
            continue

        if key == "parent":
            current["parent"].append(value)
        else:
            current[key] = value
        last_key = key

    if single:
        return current  # type: ignore[return-value]
    if current is not None:
        records.append(current)
    return records


def parse_numstat(lines: Iterable[str]) -> DiffStats:
    """Parse ``git diff --numstat`` output into per-file and total counts."""
    stats = DiffStats()
    for line in lines:
        fields = line.split("\t")
        if len(fields) < 3:
            logger.debug(f"Skipping numstat line: {line!r}")
            continue
        insertions, deletions, filename = fields[0], fields[1], "\t".join(fields[2:])
        stat = FileStat(insertions=to_int(insertions), deletions=to_int(deletions))
        stats.files[filename] = stat
        stats.total.add(stat)
    return stats


def parse_raw_diff(lines: Iterable[str]) -> dict[str, DiffEntry]:
    """Parse ``git diff-index`` / ``git diff-files`` raw output.

    Lines look like ``:100644 100644 <sha> <sha> M<TAB>path``. The leading
    colon is dropped from the source mode.
    """
    entries: dict[str, DiffEntry] = {}
    for line in lines:
        info, sep, path = line.partition("\t")
        fields = info.split()
        if not sep or len(fields) < 5:
            logger.debug(f"Skipping raw diff line: {line!r}")
            continue
        mode_src, mode_dest, sha_src, sha_dest, change = fields[:5]
        entries[path] = DiffEntry(
            mode_index=mode_dest,
            mode_repo=mode_src[1:8],
            path=path,
            sha_repo=sha_src,
            sha_index=sha_dest,
            type=change,
        )
    return entries


def parse_unmerged(lines: Iterable[str]) -> list[str]:
    """Collect conflicted paths from ``git diff --cached`` output."""
    paths = []
    for line in lines:
        match = _UNMERGED_RE.match(line)
        if match:
            paths.append(match.group(1))
    return paths


def parse_ls_tree(lines: Iterable[str]) -> dict[str, dict[str, TreeEntry]]:
    """Parse ``git ls-tree`` output into ``blob`` and ``tree`` buckets.

    Other object types (``commit`` for submodules) get their own bucket.
    """
    data: dict[str, dict[str, TreeEntry]] = {"blob": {}, "tree": {}}
    for line in lines:
        info, sep, name = line.partition("\t")
        fields = info.split()
        if not sep or len(fields) < 3:
            logger.debug(f"Skipping ls-tree line: {line!r}")
            continue
        mode, obj_type, sha = fields[:3]
        data.setdefault(obj_type, {})[unquote_path(name)] = TreeEntry(mode=mode, sha=sha)
    return data


def parse_ls_files(lines: Iterable[str]) -> dict[str, IndexEntry]:
    """Parse ``git ls-files --stage`` output keyed by (unquoted) path."""
    entries: dict[str, IndexEntry] = {}
    for line in lines:
        info, sep, path = line.partition("\t")
        fields = info.split()
        if not sep or len(fields) < 3:
            logger.debug(f"Skipping ls-files line: {line!r}")
            continue
        mode, sha, stage = fields[:3]
        path = unquote_path(path)
        entries[path] = IndexEntry(path=path, mode_index=mode, sha_index=sha, stage=stage)
    return entries


def parse_config_list(lines: Iterable[str]) -> dict[str, str]:
    """Parse ``git config --list`` output.

    Only the first ``=`` separates key from value. A key repeated later
    overwrites the earlier value.
    """
    config: dict[str, str] = {}
    for line in lines:
        if not line:
            continue
        key, _, value = line.partition("=")
        config[key] = value
    return config


def parse_branches(lines: Iterable[str]) -> list[BranchEntry]:
    """Parse ``git branch`` output; ``* `` marks the current branch."""
    branches = []
    for line in lines:
        if not line.strip():
            continue
        current = line[:2] == "* "
        name = line.replace("* ", "", 1).strip() if current else line.strip()
        branches.append(BranchEntry(name=name, current=current))
    return branches


def parse_stash_list(lines: Iterable[str]) -> list[StashEntry]:
    """Parse ``git stash list`` output.

    The message is the text after the ``On <branch>:`` or
    ``WIP on <branch>:`` prefix.
    """
    stashes = []
    for position, line in enumerate(lines):
        match = _STASH_RE.match(line)
        if not match:
            logger.debug(f"Skipping stash line: {line!r}")
            continue
        description = match.group(2)
        _, sep, message = description.partition(":")
        stashes.append(
            StashEntry(index=int(match.group(1)), message=(message if sep else description).strip())
        )
    return stashes


def parse_grep(lines: Iterable[str]) -> dict[str, list[tuple[int, str]]]:
    """Parse ``git grep -n`` output into ``{path: [(line_no, text), ...]}``.

    The path is everything up to the last ``:<digits>:`` so tree-ish prefixes
    like ``HEAD:`` stay part of it.
    """
    hits: dict[str, list[tuple[int, str]]] = {}
    for line in lines:
        match = _GREP_RE.match(line)
        if not match:
            logger.debug(f"Skipping grep line: {line!r}")
            continue
        hits.setdefault(match.group(1), []).append((int(match.group(2)), match.group(3)))
    return hits


def parse_version(text: str) -> tuple[int, ...]:
    """Extract the version numbers from ``git version`` output."""
    match = _VERSION_RE.search(text or "")
    if not match:
        return ()
    return tuple(int(part) for part in match.group(0).split("."))
