"""gitcmd - run git subcommands from Python and parse their output."""

__version__ = "0.1.0"

from gitcmd.errors import GitCmdError, GitExecuteError
from gitcmd.git import CommandRunner, GitLib, RepositoryLocation

__all__ = [
    "__version__",
    "CommandRunner",
    "GitCmdError",
    "GitExecuteError",
    "GitLib",
    "RepositoryLocation",
]
