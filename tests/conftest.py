"""Pytest configuration and fixtures for gitcmd tests."""

import os
import tempfile
from pathlib import Path
from typing import Generator

import pytest

from gitcmd.config import Settings, reset_settings
from gitcmd.git import GitLib, RepositoryLocation



@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_config_file(temp_dir: Path) -> Path:
    """Create a temporary config file."""
    config_path = temp_dir / "config.yaml"
    config_path.write_text(
        """
runner:
  binary: /usr/local/bin/git
  empty_result_commands:
    - grep
    - log

logging:
  level: DEBUG
  log_file: "{log_path}"

version:
  required: [2, 20]
""".format(log_path=str(temp_dir / "gitcmd.log").replace("\\", "/"))
    )
    return config_path


@pytest.fixture
def clean_env() -> Generator[None, None, None]:
    """Clean environment variables for testing."""
    # Store original values
    original = {}
    env_vars = [name for name in os.environ if name.startswith("GITCMD_")]
    env_vars += ["GIT_DIR", "GIT_WORK_TREE", "GIT_INDEX_FILE"]
    for var in env_vars:
        original[var] = os.environ.pop(var, None)

    reset_settings()

    yield

    # Drop anything a test set, then restore original values
    for var in [name for name in os.environ if name.startswith("GITCMD_")]:
        del os.environ[var]
    for var, value in original.items():
        if value is not None:
            os.environ[var] = value
        elif var in os.environ:
            del os.environ[var]

    reset_settings()


@pytest.fixture
def test_settings(clean_env: None) -> Settings:
    """Create settings from defaults only."""
    return Settings()


@pytest.fixture
def git_env(temp_dir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Isolate git from the user's configuration and fix the identity."""
    home = temp_dir / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.delenv("GIT_CONFIG_GLOBAL", raising=False)
    monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
    for name in ("AUTHOR", "COMMITTER"):
        monkeypatch.setenv(f"GIT_{name}_NAME", "Test User")
        monkeypatch.setenv(f"GIT_{name}_EMAIL", "test@example.com")


@pytest.fixture
def repo(temp_dir: Path, git_env: None, test_settings: Settings) -> GitLib:
    """A real repository on branch main with one commit of README.md."""
    work_dir = temp_dir / "repo"
    work_dir.mkdir()

    lib = GitLib(RepositoryLocation.for_work_tree(work_dir), settings=test_settings)
    lib.init()
    lib.change_head_branch("main")

    (work_dir / "README.md").write_text("hello\nworld\n", encoding="utf-8")
    lib.add("README.md")
    lib.commit("Initial commit")
    return lib
