"""Tests for Git utility functions."""

import shlex

import pytest

from gitcmd.git.utils import (
    escape,
    find_git_root,
    flatten,
    is_git_repository,
    join_args,
    split_lines,
    to_int,
    unquote_path,
)


class TestEscape:
    """Tests for escape function."""

    def test_plain_value(self):
        """Test plain strings are single-quoted."""
        assert escape("main") == "'main'"

    def test_none_is_empty_token(self):
        """Test None becomes an empty quoted token."""
        assert escape(None) == "''"
        assert escape("") == "''"

    def test_non_string_value(self):
        """Test values are converted with str()."""
        assert escape(5) == "'5'"

    def test_single_quote(self):
        """Test embedded quotes are closed, escaped and reopened."""
        assert escape("it's") == "'it'\\''s'"

    @pytest.mark.parametrize(
        "value",
        [
            "it's",
            "'",
            "''",
            "a b\tc",
            "$HOME `id` $(id)",
            "semi;colon && pipe | redirect > file",
            "back\\slash",
            "line\nbreak",
            "--grep=*.py",
        ],
    )
    def test_shell_reads_back_original(self, value):
        """Test a POSIX shell splits the token back to the original value."""
        assert shlex.split(escape(value)) == [value]


class TestFlatten:
    """Tests for flatten and join_args."""

    def test_flatten_nested(self):
        """Test nested lists and tuples are flattened in order."""
        assert list(flatten(["a", ["b", ("c", ["d"])], "e"])) == ["a", "b", "c", "d", "e"]

    def test_flatten_scalar(self):
        """Test a scalar yields itself."""
        assert list(flatten("HEAD")) == ["HEAD"]

    def test_join_args(self):
        """Test arguments are escaped and space-joined."""
        assert join_args(["-n", ["a b", None]]) == "'-n' 'a b' ''"

    def test_join_args_none(self):
        """Test no arguments give an empty string."""
        assert join_args(None) == ""
        assert join_args([]) == ""


class TestFindGitRoot:
    """Tests for find_git_root function."""

    def test_find_git_root_exists(self, tmp_path):
        """Test finding git root when .git exists."""
        (tmp_path / ".git").mkdir()
        subdir = tmp_path / "src" / "lib"
        subdir.mkdir(parents=True)

        assert find_git_root(subdir) == tmp_path.resolve()

    def test_find_git_root_from_root(self, tmp_path):
        """Test finding git root from the root itself."""
        (tmp_path / ".git").mkdir()

        assert find_git_root(tmp_path) == tmp_path.resolve()

    def test_git_file_counts(self, tmp_path):
        """Test a .git file (worktrees, submodules) marks a root."""
        (tmp_path / ".git").write_text("gitdir: /elsewhere\n")

        assert find_git_root(tmp_path) == tmp_path.resolve()

    def test_is_git_repository(self, tmp_path, monkeypatch):
        """Test is_git_repository follows find_git_root."""
        (tmp_path / ".git").mkdir()
        assert is_git_repository(tmp_path) is True

        monkeypatch.setattr("gitcmd.git.utils.find_git_root", lambda path: None)
        assert is_git_repository(tmp_path) is False


class TestUnquotePath:
    """Tests for unquote_path function."""

    def test_plain_path(self):
        """Test unquoted paths are returned unchanged."""
        assert unquote_path("src/main.py") == "src/main.py"

    def test_lone_quote(self):
        """Test a single quote character is not treated as quoting."""
        assert unquote_path('"') == '"'

    def test_simple_escapes(self):
        """Test backslash escapes inside quotes."""
        assert unquote_path('"tab\\there"') == "tab\there"
        assert unquote_path('"quote\\"d"') == 'quote"d'
        assert unquote_path('"back\\\\slash"') == "back\\slash"

    def test_octal_utf8(self):
        """Test octal byte escapes are decoded as UTF-8."""
        assert unquote_path('"caf\\303\\251.txt"') == "café.txt"

    def test_unknown_escape_kept(self):
        """Test unknown escapes are kept literally."""
        assert unquote_path('"a\\qb"') == "a\\qb"


class TestToInt:
    """Tests for to_int function."""

    @pytest.mark.parametrize(
        "value,expected",
        [("12", 12), ("-", 0), ("", 0), (None, 0), ("7abc", 7), (" 3", 3), ("x", 0)],
    )
    def test_to_int(self, value, expected):
        """Test leading integers are read, anything else is 0."""
        assert to_int(value) == expected


class TestSplitLines:
    """Tests for split_lines."""

    def test_empty_output(self):
        """Test empty output has no lines."""
        assert split_lines("") == []

    def test_split(self):
        """Test output is split on newlines."""
        assert split_lines("a\nb") == ["a", "b"]

    def test_blank_lines_are_kept(self):
        """Test blank lines survive for parsers that depend on them."""
        assert split_lines("a\n\nb") == ["a", "", "b"]
