"""Command execution for gitcmd.

Every operation funnels through CommandRunner.execute: build the command
line, point git at the repository, run it, classify the exit status and
hand back the captured text.
"""

from __future__ import annotations

import logging
import os
import subprocess
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, BinaryIO, Callable, Mapping, Optional

from gitcmd.config import Settings, get_settings
from gitcmd.errors import GitExecuteError, NotARepositoryError
from gitcmd.git.utils import join_args, split_lines

logger = logging.getLogger(__name__)

GIT_DIR_ENV = "GIT_DIR"
GIT_WORK_TREE_ENV = "GIT_WORK_TREE"
GIT_INDEX_FILE_ENV = "GIT_INDEX_FILE"

Consumer = Callable[[BinaryIO], Any]


@dataclass(frozen=True)
class RepositoryLocation:
    """Where git should look for the repository.

    Attributes:
        git_dir: The control directory (usually ``<work tree>/.git``).
        work_dir: The working tree.
        index_file: The index file.
        path: Fallback directory used when neither git_dir nor work_dir is
            set, e.g. the parent directory of a clone.
    """

    git_dir: Optional[str] = None
    work_dir: Optional[str] = None
    index_file: Optional[str] = None
    path: Optional[str] = None

    @classmethod
    def for_work_tree(cls, work_dir: Path | str) -> "RepositoryLocation":
        """Location of a checkout whose ``.git`` sits inside the work tree.

        Linked worktrees and submodules have a ``.git`` file holding a
        ``gitdir: <path>`` pointer instead of a directory; the pointer is
        followed so the index is looked up in the real control directory.
        """
        work_dir = str(work_dir)
        git_dir = os.path.join(work_dir, ".git")
        if os.path.isfile(git_dir):
            git_dir = _read_gitdir_pointer(git_dir)
        return cls(
            git_dir=git_dir,
            work_dir=work_dir,
            index_file=os.path.join(git_dir, "index"),
        )

    def with_path(self, path: Optional[str]) -> "RepositoryLocation":
        return replace(self, path=path)

    def execution_dir(self) -> str:
        return self.work_dir or self.git_dir or self.path or "."

    def env(self, base: Optional[Mapping[str, str]] = None) -> dict[str, str]:
        """Build the child environment for one invocation.

        Paths are made absolute because the child may run from a different
        directory than the caller. Unset locations are removed so an
        inherited GIT_DIR cannot leak into the invocation.
        """
        env = dict(os.environ if base is None else base)
        for name, value in (
            (GIT_DIR_ENV, self.git_dir),
            (GIT_WORK_TREE_ENV, self.work_dir),
            (GIT_INDEX_FILE_ENV, self.index_file),
        ):
            if value:
                env[name] = os.path.abspath(value)
            else:
                env.pop(name, None)
        return env


class CommandRunner:
    """Runs git subcommands against one repository location.

    The runner is synchronous: each call blocks until git exits (or, in
    streaming mode, until the consumer returns). Nothing is shared between
    calls except the location, so separate runners are independent; the
    environment and working directory are passed to the child process
    rather than changed in this process.
    """

    def __init__(
        self,
        location: Optional[RepositoryLocation] = None,
        logger: Optional[logging.Logger] = None,
        settings: Optional[Settings] = None,
    ):
        """Initialize a CommandRunner.

        Args:
            location: Repository to operate on; defaults to the current
                directory with no git variables set.
            logger: Optional logger that receives each command line (INFO)
                and its output (DEBUG).
            settings: Settings to use; defaults to the global settings.
        """
        self.location = location or RepositoryLocation()
        self.logger = logger
        self.settings = settings or get_settings()

    @property
    def binary(self) -> str:
        return self.settings.runner.binary

    def build_command(self, subcommand: str, args: Any = None, redirect: str = "") -> str:
        """Assemble the full shell command line for one invocation."""
        parts = [self.binary, subcommand, join_args(args), redirect or "", "2>&1"]
        return " ".join(parts)

    def execute(
        self,
        subcommand: str,
        args: Any = None,
        use_working_dir: bool = True,
        redirect: str = "",
        consumer: Optional[Consumer] = None,
    ) -> Any:
        """Run a git subcommand and return its output.

        Args:
            subcommand: The git subcommand, e.g. ``"log"`` or ``"stash list"``.
            args: Arguments, possibly nested; each is escaped.
            use_working_dir: Run from the repository's execution directory.
            redirect: Raw shell fragment appended after the arguments, such
                as ``"> out.zip"`` or ``"| gzip > out.tgz"``. Not escaped.
            consumer: If given, called with the process's stdout stream
                instead of capturing text; its return value is returned.

        Returns:
            Combined stdout/stderr with one trailing newline removed, or the
            consumer's return value.

        Raises:
            GitExecuteError: If git exits with a status that is not tolerated.
        """
        command = self.build_command(subcommand, args, redirect)
        cwd = self._resolve_cwd(use_working_dir)
        env = self.location.env()

        logger.debug(f"Running git command: {command} (cwd={cwd or os.getcwd()})")

        if consumer is not None:
            returncode, output = self._stream(command, cwd, env, consumer)
        else:
            returncode, output = self._capture(command, cwd, env)

        if self.logger:
            self.logger.info(command)
            if self.settings.runner.log_output:
                self.logger.debug(output)

        return self._classify(subcommand, command, returncode, output)

    def execute_lines(
        self,
        subcommand: str,
        args: Any = None,
        use_working_dir: bool = True,
        redirect: str = "",
    ) -> list[str]:
        """Run a git subcommand and split its output on newlines."""
        return split_lines(self.execute(subcommand, args, use_working_dir, redirect))

    def _resolve_cwd(self, use_working_dir: bool) -> Optional[str]:
        if not use_working_dir:
            return None
        path = self.location.execution_dir()
        if Path(path).resolve() == Path.cwd().resolve():
            return None
        return path

    def _capture(
        self, command: str, cwd: Optional[str], env: dict[str, str]
    ) -> tuple[int, str]:
        result = subprocess.run(
            command,
            shell=True,
            cwd=cwd,
            env=env,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
        )
        output = result.stdout.decode("utf-8", errors="replace")
        return result.returncode, _chomp(output)

    def _stream(
        self,
        command: str,
        cwd: Optional[str],
        env: dict[str, str],
        consumer: Consumer,
    ) -> tuple[int, Any]:
        with subprocess.Popen(
            command,
            shell=True,
            cwd=cwd,
            env=env,
            stdout=subprocess.PIPE,
        ) as proc:
            result = consumer(proc.stdout)
        return proc.returncode, result

    def _classify(self, subcommand: str, command: str, returncode: int, output: Any) -> Any:
        if returncode == 0:
            return output
        if (
            returncode == 1
            and output == ""
            and self.settings.runner.tolerates_empty_exit(subcommand)
        ):
            logger.debug(f"Treating exit status 1 with no output as empty result: {command}")
            return ""
        text = output if isinstance(output, str) else ""
        raise GitExecuteError(command, text, returncode)


def _read_gitdir_pointer(git_file: str) -> str:
    """Resolve the ``gitdir:`` line of a ``.git`` file to a directory path."""
    with open(git_file, "r", encoding="utf-8") as f:
        content = f.read().strip()
    prefix = "gitdir:"
    if not content.startswith(prefix):
        raise NotARepositoryError(git_file)
    target = content[len(prefix):].strip()
    # Relative pointers (submodules) are relative to the work tree
    return os.path.normpath(os.path.join(os.path.dirname(git_file), target))


def _chomp(text: str) -> str:
    """Remove one trailing line terminator."""
    if text.endswith("\r\n"):
        return text[:-2]
    if text.endswith("\n") or text.endswith("\r"):
        return text[:-1]
    return text
