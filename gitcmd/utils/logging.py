"""Logging for gitcmd.

Everything logs under the ``gitcmd`` logger. The runner logs each command
line at DEBUG on its module logger; a logger handed to GitLib (the CLI uses
``gitcmd.commands``) additionally receives the command at INFO and its
output at DEBUG.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER = "gitcmd"

FILE_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
FILE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _resolve_level(level: Union[int, str]) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        raise ValueError(f"unknown log level: {level}")
    return resolved


def _console_handler(verbose: bool) -> logging.Handler:
    # Command lines and git output contain brackets, so no markup
    handler = RichHandler(
        console=Console(stderr=True),
        show_time=verbose,
        show_path=verbose,
        rich_tracebacks=True,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    return handler


def _file_handler(log_file: Path) -> logging.Handler:
    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_file, encoding="utf-8")
    # The file keeps full command output regardless of the console level
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=FILE_DATE_FORMAT))
    return handler


def setup_logging(
    level: Union[int, str] = logging.WARNING,
    log_file: Optional[Path] = None,
    verbose: bool = False,
) -> logging.Logger:
    """Configure the ``gitcmd`` logger.

    Calling it again replaces the handlers installed by the previous call.

    Args:
        level: Console level, as a number or a name such as ``"WARNING"``.
        log_file: Optional file that receives every record at DEBUG.
        verbose: Show DEBUG records (every git command) on the console.

    Returns:
        The ``gitcmd`` logger.
    """
    console_level = logging.DEBUG if verbose else _resolve_level(level)

    logger = logging.getLogger(ROOT_LOGGER)
    logger.handlers.clear()

    console = _console_handler(verbose)
    console.setLevel(console_level)
    logger.addHandler(console)

    if log_file:
        logger.addHandler(_file_handler(log_file))
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(console_level)

    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get ``gitcmd`` or one of its children, e.g. ``get_logger("commands")``."""
    if name:
        return logging.getLogger(f"{ROOT_LOGGER}.{name}")
    return logging.getLogger(ROOT_LOGGER)


class LogCapture(logging.Handler):
    """Collects records from a logger while the ``with`` block runs.

    Used by tests to check what parsers skip and what the runner logs.
    """

    def __init__(self, logger_name: str = ROOT_LOGGER, level: int = logging.DEBUG):
        super().__init__(level)
        self.logger_name = logger_name
        self.records: list[logging.LogRecord] = []
        self._previous_level = logging.NOTSET

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)

    def __enter__(self) -> "LogCapture":
        logger = logging.getLogger(self.logger_name)
        self._previous_level = logger.level
        logger.setLevel(self.level)
        logger.addHandler(self)
        return self

    def __exit__(self, *args) -> None:
        logger = logging.getLogger(self.logger_name)
        logger.removeHandler(self)
        logger.setLevel(self._previous_level)

    @property
    def messages(self) -> list[str]:
        return [record.getMessage() for record in self.records]

    def has_message(self, substring: str) -> bool:
        return any(substring in message for message in self.messages)
