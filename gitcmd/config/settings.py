"""Configuration settings models using Pydantic."""

from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

# Query subcommands whose idiomatic "no results" signal is exit 1 with no output.
DEFAULT_EMPTY_RESULT_COMMANDS = [
    "grep",
    "config",
    "diff",
    "diff-files",
    "diff-index",
    "log",
    "ls-files",
    "ls-tree",
    "show-ref",
    "name-rev",
    "describe",
    "rev-list",
    "branch",
    "tag",
    "remote",
    "stash",
]


class RunnerConfig(BaseModel):
    """Configuration for the git command runner."""

    binary: str = "git"
    empty_result_commands: list[str] = Field(
        default_factory=lambda: list(DEFAULT_EMPTY_RESULT_COMMANDS)
    )
    log_output: bool = True

    @field_validator("binary")
    @classmethod
    def validate_binary(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("binary cannot be empty")
        return v.strip()

    def tolerates_empty_exit(self, subcommand: str) -> bool:
        """Check if exit status 1 with no output counts as an empty result."""
        if "*" in self.empty_result_commands:
            return True
        # "stash list" and friends are keyed by their first word.
        name = subcommand.split(" ", 1)[0] if subcommand else subcommand
        return name in self.empty_result_commands


class LoggingConfig(BaseModel):
    """Configuration for log output."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"
    log_file: Optional[str] = None

    @property
    def resolved_log_file(self) -> Optional[Path]:
        """Get the resolved log file path with ~ expanded."""
        if not self.log_file:
            return None
        return Path(self.log_file).expanduser()


class VersionConfig(BaseModel):
    """Minimum git version this library is known to work with."""

    required: list[int] = Field(default_factory=lambda: [1, 6])

    @field_validator("required")
    @classmethod
    def validate_required(cls, v: list[int]) -> list[int]:
        if not v:
            raise ValueError("required version cannot be empty")
        if any(part < 0 for part in v):
            raise ValueError("version parts must be non-negative")
        return v


class Settings(BaseSettings):
    """Main library settings."""

    model_config = SettingsConfigDict(
        env_prefix="GITCMD_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    runner: RunnerConfig = Field(default_factory=RunnerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    version: VersionConfig = Field(default_factory=VersionConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Rank GITCMD_ environment variables above values passed in.

        load_settings passes the merged YAML files as keyword arguments;
        nested sections are merged field by field, so one variable such as
        GITCMD_LOGGING__LEVEL leaves the rest of the file's section alone.
        """
        return env_settings, init_settings, dotenv_settings, file_secret_settings

    @property
    def required_version(self) -> tuple[int, ...]:
        return tuple(self.version.required)
