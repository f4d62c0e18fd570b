"""Git command layer for gitcmd.

This package runs git subcommands as subprocesses and parses their
output into Python structures.
"""

from gitcmd.errors import GitError, GitExecuteError, NotARepositoryError
from gitcmd.git.lib import GitLib
from gitcmd.git.models import (
    BranchEntry,
    DiffEntry,
    DiffStats,
    DiffTotals,
    FileStat,
    IndexEntry,
    StashEntry,
    TreeEntry,
)
from gitcmd.git.parsers import (
    parse_branches,
    parse_commit_data,
    parse_config_list,
    parse_grep,
    parse_ls_files,
    parse_ls_tree,
    parse_numstat,
    parse_raw_diff,
    parse_stash_list,
    parse_unmerged,
    parse_version,
)
from gitcmd.git.runner import CommandRunner, RepositoryLocation
from gitcmd.git.utils import escape, find_git_root, is_git_repository, unquote_path

__all__ = [
    # Main classes
    "GitLib",
    "CommandRunner",
    "RepositoryLocation",
    # Errors
    "GitError",
    "GitExecuteError",
    "NotARepositoryError",
    # Data classes
    "BranchEntry",
    "DiffEntry",
    "DiffStats",
    "DiffTotals",
    "FileStat",
    "IndexEntry",
    "StashEntry",
    "TreeEntry",
    # Parsers
    "parse_branches",
    "parse_commit_data",
    "parse_config_list",
    "parse_grep",
    "parse_ls_files",
    "parse_ls_tree",
    "parse_numstat",
    "parse_raw_diff",
    "parse_stash_list",
    "parse_unmerged",
    "parse_version",
    # Utility functions
    "escape",
    "find_git_root",
    "is_git_repository",
    "unquote_path",
]
