"""Tests for the gitcmd exception hierarchy."""

import pytest

from gitcmd.errors import (
    ConfigurationError,
    GitCmdError,
    GitError,
    GitExecuteError,
    InputValidationError,
    InvalidConfigError,
    NotARepositoryError,
    UnsupportedVersionError,
)


class TestGitCmdError:
    """Tests for the base error."""

    def test_str_with_code(self):
        """Test the code prefixes the message."""
        assert str(GitCmdError("boom", code="X")) == "[X] boom"

    def test_str_without_code(self):
        """Test a bare message."""
        assert str(GitCmdError("boom")) == "boom"

    def test_to_dict(self):
        """Test serialization for logging."""
        error = GitCmdError("boom", code="X", details={"k": "v"})

        assert error.to_dict() == {
            "error_type": "GitCmdError",
            "message": "boom",
            "code": "X",
            "details": {"k": "v"},
        }


class TestGitExecuteError:
    """Tests for command failures."""

    def test_message_starts_with_command(self):
        """Test the message is the command line followed by the output."""
        error = GitExecuteError("git merge 'topic'  2>&1", "CONFLICT (content)", 1)

        assert error.message == "git merge 'topic'  2>&1:CONFLICT (content)"
        assert error.command == "git merge 'topic'  2>&1"
        assert error.output == "CONFLICT (content)"
        assert error.returncode == 1
        assert error.code == "GIT_EXECUTE_ERROR"

    def test_details(self):
        """Test command and status are kept in details."""
        error = GitExecuteError("git log  2>&1", "fatal: bad revision", 128)

        assert error.details == {
            "command": "git log  2>&1",
            "returncode": 128,
            "output": "fatal: bad revision",
        }

    def test_is_git_error(self):
        """Test callers can catch every git failure at once."""
        with pytest.raises(GitError):
            raise GitExecuteError("git status  2>&1")


class TestOtherErrors:
    """Tests for the remaining error types."""

    def test_not_a_repository(self):
        """Test the path is reported."""
        error = NotARepositoryError("/tmp/nowhere")

        assert error.code == "NOT_A_REPOSITORY"
        assert error.details["path"] == "/tmp/nowhere"
        assert "/tmp/nowhere" in str(error)

    def test_unsupported_version(self):
        """Test versions are formatted with dots."""
        error = UnsupportedVersionError((1, 5, 6), (1, 6))

        assert error.message == "git 1.5.6 is older than required 1.6"
        assert error.details == {"current": "1.5.6", "required": "1.6"}

    def test_invalid_config(self):
        """Test config errors are configuration errors."""
        error = InvalidConfigError("runner.binary", "", "cannot be empty")

        assert isinstance(error, ConfigurationError)
        assert error.details["field"] == "runner.binary"

    def test_input_validation(self):
        """Test the field and reason are reported."""
        error = InputValidationError("format", "expected one of zip, tar")

        assert error.message == "Invalid input for 'format': expected one of zip, tar"
        assert isinstance(error, GitCmdError)
