"""Tests for logging setup."""

import logging
from pathlib import Path

import pytest
from rich.logging import RichHandler

from gitcmd.utils.logging import ROOT_LOGGER, LogCapture, get_logger, setup_logging


class TestSetupLogging:
    """Tests for setup_logging."""

    def teardown_method(self) -> None:
        logger = logging.getLogger(ROOT_LOGGER)
        for handler in logger.handlers:
            handler.close()
        logger.handlers.clear()
        logger.setLevel(logging.NOTSET)

    def test_rich_console_handler(self) -> None:
        """Test a single RichHandler is installed at the requested level."""
        logger = setup_logging(level=logging.WARNING)

        assert logger.name == ROOT_LOGGER
        assert logger.level == logging.WARNING
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0], RichHandler)
        assert logger.handlers[0].markup is False

    def test_level_name_from_settings(self) -> None:
        """Test level names as stored in the config are accepted."""
        logger = setup_logging(level="ERROR")

        assert logger.level == logging.ERROR
        assert logger.handlers[0].level == logging.ERROR

    def test_unknown_level_name(self) -> None:
        """Test a misspelled level is rejected."""
        with pytest.raises(ValueError):
            setup_logging(level="LOUD")

    def test_verbose_forces_debug(self) -> None:
        """Test verbose overrides the level."""
        logger = setup_logging(level=logging.ERROR, verbose=True)

        assert logger.level == logging.DEBUG
        assert logger.handlers[0].level == logging.DEBUG

    def test_repeated_setup_replaces_handlers(self) -> None:
        """Test handlers do not pile up."""
        setup_logging()
        logger = setup_logging()

        assert len(logger.handlers) == 1

    def test_log_file_gets_debug_records(self, temp_dir: Path) -> None:
        """Test the file receives command output the console filters out."""
        log_file = temp_dir / "logs" / "gitcmd.log"
        logger = setup_logging(level="WARNING", log_file=log_file)

        get_logger("commands").debug("git status  2>&1")
        for handler in logger.handlers:
            handler.flush()

        assert logger.handlers[0].level == logging.WARNING
        content = log_file.read_text(encoding="utf-8")
        assert "gitcmd.commands: git status" in content
        assert "DEBUG" in content


class TestGetLogger:
    """Tests for get_logger."""

    def test_child_logger(self) -> None:
        """Test names are placed under the package logger."""
        assert get_logger("commands").name == "gitcmd.commands"

    def test_root_logger(self) -> None:
        """Test no name gives the package logger."""
        assert get_logger().name == ROOT_LOGGER


class TestLogCapture:
    """Tests for LogCapture."""

    def test_captures_child_loggers(self) -> None:
        """Test records from module loggers are captured."""
        with LogCapture() as capture:
            logging.getLogger("gitcmd.git.parsers").debug("Skipping grep line: 'x'")

        assert capture.has_message("Skipping grep line")
        assert not capture.has_message("something else")

    def test_detached_on_exit(self) -> None:
        """Test records after the block are not collected."""
        with LogCapture() as capture:
            pass
        logging.getLogger("gitcmd.git.parsers").warning("late")

        assert capture.records == []

    def test_level_is_restored(self) -> None:
        """Test the logger level is put back on exit."""
        logger = logging.getLogger(ROOT_LOGGER)
        logger.setLevel(logging.ERROR)

        with LogCapture():
            assert logger.level == logging.DEBUG

        assert logger.level == logging.ERROR
        logger.setLevel(logging.NOTSET)
