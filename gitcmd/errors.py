"""Centralized exception hierarchy for gitcmd.

This module defines all custom exceptions used throughout gitcmd,
organized in a hierarchy for easy handling and specificity.
"""

from __future__ import annotations

from typing import Any, Optional


class GitCmdError(Exception):
    """Base exception for all gitcmd errors.

    Attributes:
        message: Human-readable error message.
        code: Optional error code for programmatic handling.
        details: Optional dictionary with additional error context.
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.code:
            return f"[{self.code}] {self.message}"
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "code": self.code,
            "details": self.details,
        }


# =============================================================================
# Configuration Errors
# =============================================================================

class ConfigurationError(GitCmdError):
    """Raised when there's a configuration problem."""
    pass


class InvalidConfigError(ConfigurationError):
    """Raised when configuration values are invalid."""

    def __init__(self, field: str, value: Any, reason: str):
        super().__init__(
            message=f"Invalid configuration for '{field}': {reason}",
            code="INVALID_CONFIG",
            details={"field": field, "value": str(value)[:100], "reason": reason},
        )


# =============================================================================
# Git Errors
# =============================================================================

class GitError(GitCmdError):
    """Raised when a git operation fails."""

    def __init__(
        self,
        message: str,
        returncode: Optional[int] = None,
        output: Optional[str] = None,
        code: str = "GIT_ERROR",
    ):
        details: dict[str, Any] = {}
        if returncode is not None:
            details["returncode"] = returncode
        if output:
            details["output"] = output[:500]
        super().__init__(message, code, details)
        self.returncode = returncode
        self.output = output


class GitExecuteError(GitError):
    """Raised when a git invocation exits with a non-tolerated status.

    The message always begins with the full command line that was run,
    followed by the combined stdout/stderr it produced.
    """

    def __init__(self, command: str, output: str = "", returncode: Optional[int] = None):
        super().__init__(
            message=f"{command}:{output}",
            returncode=returncode,
            output=output,
            code="GIT_EXECUTE_ERROR",
        )
        self.command = command
        self.details["command"] = command


class NotARepositoryError(GitError):
    """Raised when path is not a git repository."""

    def __init__(self, path: str):
        super().__init__(
            message=f"Not a git repository: {path}",
        )
        self.details["path"] = path
        self.code = "NOT_A_REPOSITORY"


class UnsupportedVersionError(GitError):
    """Raised when the installed git is older than the required version."""

    def __init__(self, current: tuple[int, ...], required: tuple[int, ...]):
        current_str = ".".join(str(part) for part in current)
        required_str = ".".join(str(part) for part in required)
        super().__init__(
            message=f"git {current_str} is older than required {required_str}",
            code="UNSUPPORTED_VERSION",
        )
        self.details.update({"current": current_str, "required": required_str})


# =============================================================================
# Input Errors
# =============================================================================

class InputValidationError(GitCmdError):
    """Raised when arguments to an operation are invalid."""

    def __init__(self, field: str, reason: str):
        super().__init__(
            message=f"Invalid input for '{field}': {reason}",
            code="INPUT_VALIDATION_ERROR",
            details={"field": field, "reason": reason},
        )
