"""Git subcommand wrappers for gitcmd.

GitLib has one method per git subcommand. Each method turns its keyword
options into an argument list and hands it to the CommandRunner, then
parses the output where the command has structured output.
"""

from __future__ import annotations

import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Any, Iterator, Optional, Sequence, Union

from gitcmd.config import Settings
from gitcmd.errors import InputValidationError, NotARepositoryError, UnsupportedVersionError
from gitcmd.git.models import (
    BranchEntry,
    DiffEntry,
    DiffStats,
    IndexEntry,
    StashEntry,
    TreeEntry,
)
from gitcmd.git.parsers import (
    CommitRecord,
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
from gitcmd.git.runner import CommandRunner, Consumer, RepositoryLocation
from gitcmd.git.utils import escape, find_git_root

logger = logging.getLogger(__name__)

__all__ = ["GitLib"]

_SHA_RE = re.compile(r"[A-Fa-f0-9]{40}")
ARCHIVE_FORMATS = ("zip", "tar", "tgz", "tar.gz")

PathArg = Union[str, Sequence[str]]


class GitLib:
    """Runs git subcommands for one repository location."""

    def __init__(
        self,
        location: Optional[RepositoryLocation] = None,
        logger: Optional[logging.Logger] = None,
        settings: Optional[Settings] = None,
        *,
        git_dir: Optional[str] = None,
        work_dir: Optional[str] = None,
        index_file: Optional[str] = None,
    ):
        """Initialize a GitLib.

        Args:
            location: Repository location. Mutually exclusive with the
                individual path keywords.
            logger: Optional logger receiving each command and its output.
            settings: Settings to use; defaults to the global settings.
            git_dir: Control directory, if no location is given.
            work_dir: Working tree, if no location is given.
            index_file: Index file, if no location is given.
        """
        if location is None:
            location = RepositoryLocation(
                git_dir=git_dir, work_dir=work_dir, index_file=index_file
            )
        elif git_dir or work_dir or index_file:
            raise InputValidationError("location", "pass either a location or paths, not both")

        self.runner = CommandRunner(location, logger=logger, settings=settings)

    @classmethod
    def discover(
        cls,
        start_path: Path | str = ".",
        logger: Optional[logging.Logger] = None,
        settings: Optional[Settings] = None,
    ) -> "GitLib":
        """Create a GitLib for the repository containing start_path.

        Raises:
            NotARepositoryError: If no enclosing repository is found.
        """
        root = find_git_root(start_path)
        if root is None:
            raise NotARepositoryError(str(Path(start_path).resolve()))
        return cls(RepositoryLocation.for_work_tree(root), logger=logger, settings=settings)

    @property
    def location(self) -> RepositoryLocation:
        return self.runner.location

    @property
    def settings(self) -> Settings:
        return self.runner.settings

    def _command(self, subcommand: str, args: Any = None, chdir: bool = True, redirect: str = "") -> str:
        return self.runner.execute(subcommand, args, chdir, redirect)

    def _command_lines(self, subcommand: str, args: Any = None, chdir: bool = True) -> list[str]:
        return self.runner.execute_lines(subcommand, args, chdir)

    # -------------------------------------------------------------------------
    # Repository setup
    # -------------------------------------------------------------------------

    def init(self, bare: bool = False) -> str:
        """Create or reinitialize the repository at the configured location."""
        args = []
        if bare:
            args.append("--bare")
        return self._command("init", args, False)

    def clone(
        self,
        repository: str,
        name: str,
        path: Optional[str] = None,
        bare: bool = False,
        recursive: bool = False,
        remote: Optional[str] = None,
        depth: Optional[int] = None,
        config: Optional[str] = None,
    ) -> dict[str, str]:
        """Clone a repository.

        Later calls on this GitLib run from ``path`` until a repository
        directory is configured.

        Args:
            repository: URL or path to clone from.
            name: Directory name of the clone.
            path: Parent directory for the clone (default: current directory).
            bare: Create a bare repository.
            recursive: Initialize submodules after cloning.
            remote: Name for the remote instead of ``origin``.
            depth: Create a shallow clone with this many commits.
            config: A ``key=value`` config entry for the new repository.

        Returns:
            ``{"repository": dir}`` for bare clones, otherwise
            ``{"working_directory": dir}``.
        """
        self.runner.location = self.location.with_path(path or ".")
        clone_dir = os.path.join(path, name) if path else name

        args: list[Any] = []
        if bare:
            args.append("--bare")
        if recursive:
            args.append("--recursive")
        if remote:
            args.extend(["-o", remote])
        if depth and int(depth) > 0:
            args.extend(["--depth", int(depth)])
        if config:
            args.extend(["--config", config])
        args.extend(["--", repository, clone_dir])

        # clone_dir already includes path, so run from the caller's directory
        self._command("clone", args, False)

        return {"repository": clone_dir} if bare else {"working_directory": clone_dir}

    # -------------------------------------------------------------------------
    # Read commands
    # -------------------------------------------------------------------------

    def log_commits(self, **opts: Any) -> list[str]:
        """List commit shas, newest first.

        Accepts the options of full_log_commits except ``skip``.
        """
        args = self._log_common_options(**opts)
        args.append("--pretty=oneline")
        args.extend(self._log_path_options(**opts))
        return [line.split()[0] for line in self._command_lines("log", args) if line.strip()]

    def full_log_commits(self, skip: Optional[int] = None, **opts: Any) -> list[CommitRecord]:
        """Get commit records from ``git log --pretty=raw``.

        Args:
            skip: Number of commits to skip.
            count: Maximum number of commits.
            since: Only commits after this date.
            until: Only commits before this date.
            grep: Only commits whose message matches.
            author: Only commits by this author.
            between: ``(from, to)`` revision range.
            object: Revision to start from.
            path_limiter: Only commits touching this path.

        Returns:
            Commit records, newest first.
        """
        args = self._log_common_options(**opts)
        args.append("--pretty=raw")
        if skip:
            args.append(f"--skip={skip}")
        args.extend(self._log_path_options(**opts))
        return parse_commit_data(self._command_lines("log", args))  # type: ignore[return-value]

    def revparse(self, ref: str) -> str:
        """Resolve a ref to a sha, reading loose ref files when possible."""
        if _SHA_RE.fullmatch(ref):
            return ref
        if self.location.git_dir:
            for ref_dir in ("heads", "remotes", "tags"):
                ref_file = Path(self.location.git_dir) / "refs" / ref_dir / ref
                sha = _read_loose_ref(ref_file)
                if sha:
                    logger.debug(f"Resolved {ref} from loose ref {ref_file}")
                    return sha
        return self._command("rev-parse", ref)

    def namerev(self, ref: str) -> Optional[str]:
        parts = self._command("name-rev", ref).split()
        return parts[1] if len(parts) > 1 else None

    def object_type(self, sha: str) -> str:
        return self._command("cat-file", ["-t", sha])

    def object_size(self, sha: str) -> int:
        return int(self._command("cat-file", ["-s", sha]))

    def commit_data(self, sha: str) -> CommitRecord:
        """Get the parsed contents of one commit object."""
        sha = str(sha)
        lines = self._command_lines("cat-file", ["commit", sha])
        return parse_commit_data(lines, sha, 0)  # type: ignore[return-value]

    def object_contents(self, sha: str, consumer: Optional[Consumer] = None) -> Any:
        """Print an object, or stream it to consumer as raw bytes."""
        return self.runner.execute("cat-file", ["-p", sha], consumer=consumer)

    def ls_tree(self, sha: str) -> dict[str, dict[str, TreeEntry]]:
        return parse_ls_tree(self._command_lines("ls-tree", sha))

    def full_tree(self, sha: str) -> list[str]:
        return self._command_lines("ls-tree", ["-r", sha])

    def tree_depth(self, sha: str) -> int:
        return len(self.full_tree(sha))

    def branches_all(self) -> list[BranchEntry]:
        """List local and remote-tracking branches."""
        return parse_branches(self._command_lines("branch", "-a"))

    def branch_current(self) -> Optional[str]:
        for branch in self.branches_all():
            if branch.current:
                return branch.name
        return None

    def list_files(self, ref_dir: str) -> list[str]:
        """List loose ref files under ``refs/<ref_dir>``, relative to it."""
        if not self.location.git_dir:
            return []
        root = Path(self.location.git_dir) / "refs" / ref_dir
        if not root.is_dir():
            return []
        return sorted(p.relative_to(root).as_posix() for p in root.rglob("*") if p.is_file())

    def grep(
        self,
        pattern: str,
        object: Optional[str] = "HEAD",
        ignore_case: bool = False,
        invert_match: bool = False,
        path_limiter: Optional[str] = None,
    ) -> dict[str, list[tuple[int, str]]]:
        """Search tracked content.

        Args:
            pattern: Pattern passed with ``-e``.
            object: Tree-ish to search (default ``HEAD``).
            ignore_case: Case-insensitive match.
            invert_match: Select non-matching lines.
            path_limiter: Only search under this path.

        Returns:
            ``{"<tree-ish>:<path>": [(line_no, text), ...]}``; empty when
            nothing matched.
        """
        args: list[Any] = ["-n"]
        if ignore_case:
            args.append("-i")
        if invert_match:
            args.append("-v")
        args.extend(["-e", pattern])
        if object:
            args.append(object)
        if path_limiter:
            args.extend(["--", path_limiter])
        return parse_grep(self._command_lines("grep", args))

    def diff_full(
        self,
        obj1: str = "HEAD",
        obj2: Optional[str] = None,
        path_limiter: Optional[str] = None,
    ) -> str:
        """Get a patch between two revisions (or a revision and the work tree)."""
        return self._command("diff", self._diff_args("-p", obj1, obj2, path_limiter))

    def diff_stats(
        self,
        obj1: str = "HEAD",
        obj2: Optional[str] = None,
        path_limiter: Optional[str] = None,
    ) -> DiffStats:
        """Get per-file and total line counts of a diff."""
        lines = self._command_lines("diff", self._diff_args("--numstat", obj1, obj2, path_limiter))
        return parse_numstat(lines)

    def diff_files(self) -> dict[str, DiffEntry]:
        """Compare the index with the working tree."""
        return parse_raw_diff(self._command_lines("diff-files"))

    def diff_index(self, treeish: str) -> dict[str, DiffEntry]:
        """Compare the index with a tree-ish."""
        return parse_raw_diff(self._command_lines("diff-index", treeish))

    def ls_files(self, location: Optional[str] = None) -> dict[str, IndexEntry]:
        args = ["--stage"]
        if location:
            args.append(location)
        return parse_ls_files(self._command_lines("ls-files", args))

    def ignored_files(self) -> list[str]:
        return self._command_lines("ls-files", ["--others", "-i", "--exclude-standard"])

    def config_remote(self, name: str) -> dict[str, str]:
        """Get the settings of one remote with the ``remote.<name>.`` prefix removed."""
        prefix = f"remote.{name}."
        return {
            key[len(prefix):]: value
            for key, value in self.config_list().items()
            if key.startswith(prefix)
        }

    def config_get(self, name: str) -> str:
        return self._command("config", ["--get", name])

    def global_config_get(self, name: str) -> str:
        return self._command("config", ["--global", "--get", name], False)

    def config_list(self) -> dict[str, str]:
        return parse_config_list(self._command_lines("config", ["--list"]))

    def global_config_list(self) -> dict[str, str]:
        return parse_config_list(self._command_lines("config", ["--global", "--list"], False))

    def parse_config(self, file: str) -> dict[str, str]:
        """Read a config file without touching any repository."""
        return parse_config_list(self._command_lines("config", ["--list", "--file", file], False))

    def stashes_all(self) -> list[StashEntry]:
        return parse_stash_list(self._command_lines("stash list"))

    def stash_list(self) -> str:
        return self._command("stash list")

    def unmerged(self) -> list[str]:
        """List paths with unresolved merge conflicts."""
        return parse_unmerged(self._command_lines("diff", ["--cached"]))

    def conflicts(self) -> Iterator[tuple[str, str, str]]:
        """Yield ``(path, ours_file, theirs_file)`` for each conflicted path.

        ``ours_file`` and ``theirs_file`` are temporary files holding stages
        2 and 3 of the path. They are removed once the caller moves on to
        the next conflict.
        """
        for path in self.unmerged():
            ours = _temp_path(f"YOUR-{os.path.basename(path)}")
            theirs = _temp_path(f"THEIR-{os.path.basename(path)}")
            try:
                self._command("show", f":2:{path}", True, f"> {escape(ours)}")
                self._command("show", f":3:{path}", True, f"> {escape(theirs)}")
                yield path, ours, theirs
            finally:
                for temp in (ours, theirs):
                    if os.path.exists(temp):
                        os.unlink(temp)

    def remotes(self) -> list[str]:
        return self._command_lines("remote")

    def tags(self) -> list[str]:
        return self._command_lines("tag")

    def tag_sha(self, tag_name: str) -> str:
        if self.location.git_dir:
            sha = _read_loose_ref(Path(self.location.git_dir) / "refs" / "tags" / tag_name)
            if sha:
                return sha
        return self._command("show-ref", ["--tags", "-s", tag_name])

    # -------------------------------------------------------------------------
    # Write commands
    # -------------------------------------------------------------------------

    def config_set(self, name: str, value: str) -> str:
        return self._command("config", [name, value])

    def global_config_set(self, name: str, value: str) -> str:
        return self._command("config", ["--global", name, value], False)

    def add(self, paths: PathArg = ".", all: bool = False, force: bool = False) -> str:
        """Update the index from the working tree.

        Args:
            paths: A path or list of paths.
            all: Also stage removals (``--all``).
            force: Add ignored files too.
        """
        args: list[Any] = []
        if all:
            args.append("--all")
        if force:
            args.append("--force")
        args.append("--")
        args.append(paths)
        return self._command("add", args)

    def remove(self, path: PathArg = ".", recursive: bool = False) -> str:
        # -f skips the up-to-date check
        args: list[Any] = ["-f"]
        if recursive:
            args.append("-r")
        args.append("--")
        args.append(path)
        return self._command("rm", args)

    def mv(self, file1: str, file2: str) -> list[str]:
        return self._command_lines("mv", ["--", file1, file2])

    def commit(
        self,
        message: Optional[str],
        amend: bool = False,
        all: bool = False,
        allow_empty: bool = False,
        author: Optional[str] = None,
    ) -> str:
        """Record the index as a new commit.

        Args:
            message: Commit message.
            amend: Replace the tip commit, keeping its message.
            all: Stage modified and deleted files first.
            allow_empty: Allow a commit with no changes.
            author: Override the author (``"Name <email>"``).

        Returns:
            git's commit summary.
        """
        args = []
        if message:
            args.append(f"--message={message}")
        if amend:
            args.extend(["--amend", "--no-edit"])
        if all:
            args.append("--all")
        if allow_empty:
            args.append("--allow-empty")
        if author:
            args.append(f"--author={author}")
        return self._command("commit", args)

    def reset(self, commit: Optional[str] = None, hard: bool = False) -> str:
        args = []
        if hard:
            args.append("--hard")
        if commit:
            args.append(commit)
        return self._command("reset", args)

    def clean(self, force: bool = False, d: bool = False, x: bool = False) -> str:
        args = []
        if force:
            args.append("--force")
        if d:
            args.append("-d")
        if x:
            args.append("-x")
        return self._command("clean", args)

    def revert(self, commitish: str, no_edit: bool = True) -> str:
        """Revert a commit; ``--no-edit`` by default since there is no editor."""
        args = []
        if no_edit:
            args.append("--no-edit")
        args.append(commitish)
        return self._command("revert", args)

    def apply(self, patch_file: Optional[str]) -> str:
        args = []
        if patch_file:
            args.extend(["--", patch_file])
        return self._command("apply", args)

    def apply_mail(self, patch_file: Optional[str]) -> str:
        args = []
        if patch_file:
            args.extend(["--", patch_file])
        return self._command("am", args)

    def stash_save(self, message: str) -> bool:
        """Stash local changes; True if anything was stashed."""
        output = self._command("stash save", message)
        return "Saved working directory" in output or "HEAD is now at" in output

    def stash_apply(self, id: Optional[str] = None) -> str:
        return self._command("stash apply", [id] if id else None)

    def stash_clear(self) -> str:
        return self._command("stash clear")

    def branch_new(self, branch: str) -> str:
        return self._command("branch", branch)

    def branch_delete(self, branch: str) -> str:
        return self._command("branch", ["-D", branch])

    def change_head_branch(self, branch_name: str) -> str:
        return self._command("symbolic-ref", ["HEAD", f"refs/heads/{branch_name}"])

    def checkout(self, branch: str, force: bool = False, new_branch: Optional[str] = None) -> str:
        """Switch branches.

        Args:
            branch: Branch or commit to check out.
            force: Throw away local changes.
            new_branch: Create this branch starting at ``branch``.
        """
        args = []
        if force:
            args.append("-f")
        if new_branch:
            args.extend(["-b", new_branch])
        args.append(branch)
        return self._command("checkout", args)

    def checkout_file(self, version: str, file: str) -> str:
        return self._command("checkout", [version, file])

    def merge(self, branch: str, message: Optional[str] = None) -> str:
        args = []
        if message:
            args.extend(["-m", message])
        args.append(branch)
        return self._command("merge", args)

    def remote_add(
        self,
        name: str,
        url: str,
        fetch: bool = False,
        track: Optional[str] = None,
    ) -> str:
        args = ["add"]
        if fetch:
            args.append("-f")
        if track:
            args.extend(["-t", track])
        args.extend(["--", name, url])
        return self._command("remote", args)

    def remote_remove(self, name: str) -> str:
        return self._command("remote", ["rm", name])

    def tag(self, tag: str) -> str:
        return self._command("tag", tag)

    def fetch(self, remote: str) -> str:
        return self._command("fetch", remote)

    def push(
        self,
        remote: str,
        branch: str = "master",
        force: bool = False,
        tags: bool = False,
    ) -> None:
        """Push a branch, then all tags if requested."""
        args = []
        if force:
            args.append("--force")
        args.append(remote)

        self._command("push", args + [branch])
        if tags:
            self._command("push", ["--tags"] + args)

    def pull(self, remote: str = "origin", branch: str = "master") -> str:
        return self._command("pull", [remote, branch])

    def repack(self) -> str:
        return self._command("repack", ["-a", "-d"])

    def gc(self) -> str:
        return self._command("gc", ["--prune", "--aggressive", "--auto"])

    def read_tree(self, treeish: str, prefix: Optional[str] = None) -> str:
        """Read a tree into the index."""
        args = []
        if prefix:
            args.append(f"--prefix={prefix}")
        args.append(treeish)
        return self._command("read-tree", args)

    def write_tree(self) -> str:
        return self._command("write-tree")

    def commit_tree(
        self,
        tree: str,
        message: Optional[str] = None,
        parent: Optional[str] = None,
        parents: Optional[Sequence[str]] = None,
    ) -> str:
        """Create a commit object for a tree and return its sha.

        The message is fed through a temporary file on stdin.
        """
        message = message or f"commit tree {tree}"
        message_file = _temp_path("commit-message")
        try:
            Path(message_file).write_text(message, encoding="utf-8")

            args: list[Any] = [tree]
            if parent:
                args.extend(["-p", parent])
            for extra in parents or []:
                args.extend(["-p", extra])
            return self._command("commit-tree", args, True, f"< {escape(message_file)}")
        finally:
            os.unlink(message_file)

    def update_ref(self, branch: str, commit: str) -> str:
        return self._command("update-ref", [branch, commit])

    def checkout_index(
        self,
        prefix: Optional[str] = None,
        force: bool = False,
        all: bool = False,
        path_limiter: Optional[str] = None,
    ) -> str:
        args = []
        if prefix:
            args.append(f"--prefix={prefix}")
        if force:
            args.append("--force")
        if all:
            args.append("--all")
        if path_limiter:
            args.extend(["--", path_limiter])
        return self._command("checkout-index", args)

    def archive(
        self,
        sha: str,
        file: Optional[str] = None,
        format: str = "zip",
        prefix: Optional[str] = None,
        remote: Optional[str] = None,
        path: Optional[str] = None,
    ) -> str:
        """Write an archive of a tree.

        Args:
            sha: Tree-ish to archive.
            file: Destination; a temporary file is created when omitted.
            format: ``zip``, ``tar``, ``tar.gz`` or ``tgz`` (tar piped
                through gzip).
            prefix: Path prefix for every archive entry.
            remote: Retrieve the archive from a remote repository.
            path: Only archive this path.

        Returns:
            The archive path.
        """
        if format not in ARCHIVE_FORMATS:
            raise InputValidationError("format", f"expected one of {', '.join(ARCHIVE_FORMATS)}")

        add_gzip = format == "tgz"
        if add_gzip:
            format = "tar"

        file = file or _temp_path("archive")

        args = [f"--format={format}"]
        if prefix:
            args.append(f"--prefix={prefix}")
        if remote:
            args.append(f"--remote={remote}")
        args.append(sha)
        if path:
            args.extend(["--", path])

        redirect = ("| gzip" if add_gzip else "") + f" > {escape(file)}"
        self._command("archive", args, True, redirect)
        return file

    # -------------------------------------------------------------------------
    # Version checks
    # -------------------------------------------------------------------------

    def current_command_version(self) -> tuple[int, ...]:
        return parse_version(self._command("version", [], False))

    def required_command_version(self) -> tuple[int, ...]:
        return self.settings.required_version

    def meets_required_version(self) -> bool:
        return self.current_command_version() >= self.required_command_version()

    def ensure_required_version(self) -> None:
        """Raise UnsupportedVersionError if git is too old."""
        current = self.current_command_version()
        required = self.required_command_version()
        if current < required:
            raise UnsupportedVersionError(current, required)

    # -------------------------------------------------------------------------
    # Option builders
    # -------------------------------------------------------------------------

    @staticmethod
    def _log_common_options(
        count: Optional[int] = None,
        since: Optional[str] = None,
        until: Optional[str] = None,
        grep: Optional[str] = None,
        author: Optional[str] = None,
        between: Optional[Sequence[str]] = None,
        **_: Any,
    ) -> list[Any]:
        args: list[Any] = []
        if count:
            args.append(f"-{count}")
        args.append("--no-color")
        if since:
            args.append(f"--since={since}")
        if until:
            args.append(f"--until={until}")
        if grep:
            args.append(f"--grep={grep}")
        if author:
            args.append(f"--author={author}")
        if between and len(between) == 2:
            args.append(f"{between[0]}..{between[1]}")
        return args

    @staticmethod
    def _log_path_options(
        object: Optional[str] = None,
        path_limiter: Optional[str] = None,
        **_: Any,
    ) -> list[Any]:
        args: list[Any] = []
        if object:
            args.append(object)
        if path_limiter:
            args.extend(["--", path_limiter])
        return args

    @staticmethod
    def _diff_args(
        mode: str,
        obj1: str,
        obj2: Optional[str],
        path_limiter: Optional[str],
    ) -> list[Any]:
        args: list[Any] = [mode, obj1]
        if obj2:
            args.append(obj2)
        if path_limiter:
            args.extend(["--", path_limiter])
        return args


def _temp_path(prefix: str) -> str:
    """Create an empty temporary file and return its path."""
    handle, path = tempfile.mkstemp(prefix=f"{prefix}-")
    os.close(handle)
    return path


def _read_loose_ref(ref_file: Path) -> Optional[str]:
    """Return the sha stored in a loose ref file.

    Symbolic refs (``ref: refs/...``) and missing files give None so the
    caller can ask git to resolve them.
    """
    if not ref_file.is_file():
        return None
    content = ref_file.read_text(encoding="utf-8").strip()
    return content if _SHA_RE.fullmatch(content) else None
