"""CLI entry point for gitcmd."""

from pathlib import Path
from typing import NoReturn, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from gitcmd import __version__
from gitcmd.config import get_settings, load_settings
from gitcmd.errors import GitCmdError, GitExecuteError
from gitcmd.git import GitLib
from gitcmd.utils import get_logger, setup_logging

app = typer.Typer(
    name="gitcmd",
    help="Run git subcommands and show their parsed output",
    add_completion=True,
    no_args_is_help=True,
)

console = Console()

# Repository path chosen with --repo, shared by every command
_state: dict = {"repo": Path(".")}


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold]gitcmd[/bold] version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    repo: Path = typer.Option(
        Path("."),
        "--repo",
        "-C",
        help="Path inside the repository to operate on",
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to configuration file",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log every git command and its output",
    ),
    version: bool = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """gitcmd - structured access to git output."""
    try:
        settings = load_settings(config_path=config, force_reload=True) if config else get_settings()
    except GitCmdError as e:
        console.print(f"[red]{escape(e.message)}[/red]")
        raise typer.Exit(1)

    setup_logging(level=settings.logging.level, log_file=settings.logging.resolved_log_file, verbose=verbose)

    _state["repo"] = repo


def _open_repo() -> GitLib:
    try:
        return GitLib.discover(_state["repo"], logger=get_logger("commands"))
    except GitCmdError as e:
        console.print(f"[red]{escape(e.message)}[/red]")
        raise typer.Exit(1)


def _fail(error: GitExecuteError) -> NoReturn:
    console.print(Panel(escape(error.command), title="git command failed", border_style="red"))
    if error.output:
        console.print(error.output, markup=False, highlight=False)
    raise typer.Exit(1)


@app.command()
def log(
    count: int = typer.Option(10, "--count", "-n", help="Number of commits to show"),
    author: Optional[str] = typer.Option(None, "--author", help="Filter by author"),
    grep: Optional[str] = typer.Option(None, "--grep", help="Filter by message"),
    path: Optional[str] = typer.Option(None, "--path", help="Only commits touching this path"),
) -> None:
    """Show recent commits."""
    lib = _open_repo()
    try:
        commits = lib.full_log_commits(count=count, author=author, grep=grep, path_limiter=path)
    except GitExecuteError as e:
        _fail(e)

    if not commits:
        console.print("[dim]No commits found.[/dim]")
        return

    table = Table(title="Commits")
    table.add_column("Sha", style="cyan", no_wrap=True)
    table.add_column("Author", style="green")
    table.add_column("Message")

    for commit in commits:
        subject = commit["message"].split("\n", 1)[0]
        author_name = commit.get("author", "").split(" <", 1)[0]
        table.add_row(commit["sha"][:8], escape(author_name), escape(subject))

    console.print(table)


@app.command()
def show(
    sha: str = typer.Argument("HEAD", help="Commit to show"),
) -> None:
    """Show the headers and message of one commit."""
    lib = _open_repo()
    try:
        commit = lib.commit_data(lib.revparse(sha))
    except GitExecuteError as e:
        _fail(e)

    lines = [f"[bold]commit[/bold] {escape(commit['sha'])}"]
    for key, value in commit.items():
        if key in ("sha", "message", "parent"):
            continue
        lines.append(f"[bold]{key}[/bold] {escape(value.splitlines()[0]) if value else ''}")
    for parent in commit["parent"]:
        lines.append(f"[bold]parent[/bold] {escape(parent)}")
    console.print(Panel("\n".join(lines), border_style="blue"))
    console.print(commit["message"], markup=False, highlight=False)


@app.command("diff-stats")
def diff_stats(
    obj1: str = typer.Argument("HEAD", help="First revision"),
    obj2: Optional[str] = typer.Argument(None, help="Second revision"),
    path: Optional[str] = typer.Option(None, "--path", help="Limit to this path"),
) -> None:
    """Show per-file line counts of a diff."""
    lib = _open_repo()
    try:
        stats = lib.diff_stats(obj1, obj2, path_limiter=path)
    except GitExecuteError as e:
        _fail(e)

    table = Table(title=stats.summary())
    table.add_column("File", style="cyan")
    table.add_column("+", style="green", justify="right")
    table.add_column("-", style="red", justify="right")
    for filename, stat in stats.files.items():
        table.add_row(escape(filename), str(stat.insertions), str(stat.deletions))
    console.print(table)


@app.command("ls-tree")
def ls_tree(
    sha: str = typer.Argument("HEAD", help="Tree-ish to list"),
) -> None:
    """List the entries of a tree."""
    lib = _open_repo()
    try:
        listing = lib.ls_tree(sha)
    except GitExecuteError as e:
        _fail(e)

    table = Table(title=f"Tree {escape(sha)}")
    table.add_column("Mode", style="dim")
    table.add_column("Type", style="yellow")
    table.add_column("Sha", style="cyan", no_wrap=True)
    table.add_column("Name", style="green")
    for obj_type, entries in listing.items():
        for name, entry in sorted(entries.items()):
            table.add_row(entry.mode, obj_type, entry.sha[:8], escape(name))
    console.print(table)


@app.command("ls-files")
def ls_files(
    location: Optional[str] = typer.Argument(None, help="Limit to this path"),
) -> None:
    """List files in the index with their stage."""
    lib = _open_repo()
    try:
        entries = lib.ls_files(location)
    except GitExecuteError as e:
        _fail(e)

    table = Table(title="Index")
    table.add_column("Mode", style="dim")
    table.add_column("Sha", style="cyan", no_wrap=True)
    table.add_column("Stage", justify="center")
    table.add_column("Path", style="green")
    for path, entry in entries.items():
        table.add_row(entry.mode_index, entry.sha_index[:8], entry.stage, escape(path))
    console.print(table)


@app.command()
def branches() -> None:
    """List branches, marking the current one."""
    lib = _open_repo()
    try:
        entries = lib.branches_all()
    except GitExecuteError as e:
        _fail(e)

    if not entries:
        console.print("[dim]No branches found.[/dim]")
        return

    for branch in entries:
        if branch.current:
            console.print(f"[bold green]* {escape(branch.name)}[/bold green]")
        else:
            console.print(f"  {escape(branch.name)}")


@app.command("config-list")
def config_list(
    global_: bool = typer.Option(False, "--global", help="Read the global config"),
) -> None:
    """Show git configuration values."""
    lib = _open_repo()
    try:
        values = lib.global_config_list() if global_ else lib.config_list()
    except GitExecuteError as e:
        _fail(e)

    table = Table(title="Global config" if global_ else "Repository config")
    table.add_column("Key", style="cyan")
    table.add_column("Value", style="green")
    for key, value in values.items():
        table.add_row(escape(key), escape(value))
    console.print(table)


@app.command()
def grep(
    pattern: str = typer.Argument(..., help="Pattern to search for"),
    ignore_case: bool = typer.Option(False, "--ignore-case", "-i", help="Ignore case"),
    tree: str = typer.Option("HEAD", "--tree", help="Tree-ish to search"),
) -> None:
    """Search tracked files."""
    lib = _open_repo()
    try:
        hits = lib.grep(pattern, object=tree, ignore_case=ignore_case)
    except GitExecuteError as e:
        _fail(e)

    if not hits:
        console.print(f"[dim]No matches for '{escape(pattern)}'[/dim]")
        return

    for path, matches in hits.items():
        console.print(f"[bold cyan]{escape(path)}[/bold cyan]")
        for line_no, text in matches:
            console.print(f"  [yellow]{line_no:>5}[/yellow] {escape(text)}", highlight=False)


@app.command()
def version() -> None:
    """Show the installed git version and whether it is supported."""
    lib = GitLib(logger=get_logger("commands"))
    try:
        current = lib.current_command_version()
    except GitExecuteError as e:
        _fail(e)

    required = lib.required_command_version()
    current_str = ".".join(str(part) for part in current) or "unknown"
    required_str = ".".join(str(part) for part in required)
    if current >= required:
        console.print(f"git {current_str} [green](>= {required_str})[/green]")
    else:
        console.print(f"git {current_str} [red](requires >= {required_str})[/red]")
        raise typer.Exit(1)


@app.command()
def settings() -> None:
    """Show current configuration."""
    current = get_settings()

    console.print(Panel("[bold]Current Configuration[/bold]", border_style="blue"))

    console.print("\n[bold]Runner:[/bold]")
    console.print(f"  Binary: {escape(current.runner.binary)}")
    console.print(f"  Log output: {current.runner.log_output}")
    console.print(f"  Empty-result commands: {escape(', '.join(current.runner.empty_result_commands))}")

    console.print("\n[bold]Logging:[/bold]")
    console.print(f"  Level: {current.logging.level}")
    console.print(f"  Log file: {escape(str(current.logging.resolved_log_file or '-'))}")

    console.print("\n[bold]Version:[/bold]")
    console.print(f"  Required: {'.'.join(str(part) for part in current.required_version)}")


if __name__ == "__main__":
    app()
