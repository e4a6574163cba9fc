"""Main CLI entry point for Coeus."""

import logging
from pathlib import Path
from typing import List, NoReturn, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.text import Text

from coeus.constants import (
    COEUS_DIR,
    DEFAULT_LOG_LEVEL,
    EXIT_SYSTEM_ERROR,
    EXIT_USER_ERROR,
    LOG_LEVEL_ENV,
    SHORT_HASH_LENGTH,
)
from coeus.core import ChangeStatus, FileChange, Repository
from coeus.diff import DiffEngine, SegmentKind, split_lines
from coeus.errors import (
    ChainCorruptError,
    CoeusError,
    CommitNotFoundError,
    IndexCorruptError,
    NotARepositoryError,
    ObjectNotFoundError,
    StorageError,
)

console = Console()
app = typer.Typer(
    name="coeus",
    help="Minimal local version control: snapshots, staging, history and diffs",
    add_completion=False,
)

_SYSTEM_ERRORS = (StorageError, ChainCorruptError, IndexCorruptError, ObjectNotFoundError)

_SEGMENT_STYLES = {
    SegmentKind.ADDED: ("++", "green"),
    SegmentKind.REMOVED: ("--", "red"),
    SegmentKind.UNCHANGED: ("  ", "grey50"),
}


def _configure_logging(level_name: str) -> None:
    """Route library log records to stderr through rich."""
    level = logging.getLevelName(level_name.upper())
    if not isinstance(level, int):
        raise typer.BadParameter(f"Unknown log level: {level_name}")
    handler = RichHandler(console=Console(stderr=True), show_path=False)
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))

    package_logger = logging.getLogger("coeus")
    package_logger.handlers = [handler]
    package_logger.setLevel(level)
    package_logger.propagate = False


def _fail(error: Exception) -> NoReturn:
    """Report an error and exit with the matching exit code."""
    console.print(f"[bold red]Error:[/bold red] {escape(str(error))}", style="red")
    code = EXIT_SYSTEM_ERROR if isinstance(error, _SYSTEM_ERRORS) else EXIT_USER_ERROR
    raise typer.Exit(code)


def _open_repository() -> Repository:
    """Find the repository containing the current directory."""
    try:
        return Repository.discover(Path.cwd())
    except NotARepositoryError:
        console.print("[bold red]Error:[/bold red] Not a Coeus repository", style="red")
        console.print(f"  No {COEUS_DIR}/ directory found in {Path.cwd()}", style="dim")
        console.print(
            "\nRun [bold]coeus init[/bold] to initialize a repository",
            style="yellow",
        )
        raise typer.Exit(EXIT_USER_ERROR)


def _display(text: str) -> str:
    """Escape surrogates left by undecodable command-line arguments."""
    return text.encode("utf-8", "backslashreplace").decode("utf-8")


def _short(commit_hash: str) -> str:
    return commit_hash[:SHORT_HASH_LENGTH]


@app.callback()
def main_callback(
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show debug logging on stderr",
    ),
    log_level: str = typer.Option(
        DEFAULT_LOG_LEVEL,
        "--log-level",
        envvar=LOG_LEVEL_ENV,
        help="Log level (DEBUG, INFO, WARNING, ERROR)",
    ),
) -> None:
    """Coeus version control."""
    _configure_logging("DEBUG" if verbose else log_level)


@app.command()
def version() -> None:
    """Show Coeus version."""
    from coeus import __version__
    typer.echo(f"Coeus version {__version__}")


@app.command()
def init(
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Suppress output except errors",
    ),
) -> None:
    """Initialize a Coeus repository in the current directory."""
    workspace_root = Path.cwd()

    try:
        repo, created = Repository.init(workspace_root)
    except CoeusError as e:
        _fail(e)

    if quiet:
        return

    if not created:
        console.print(f"[yellow]Already initialized the {COEUS_DIR} folder[/yellow]")
        return

    success_message = f"""[bold green]✓[/bold green] Initialized Coeus repository

[dim]Repository root:[/dim] {repo.workspace_root}
[dim]Storage location:[/dim] {repo.coeus_dir}

[bold]Next steps:[/bold]
  1. Stage files: [cyan]coeus add <file>[/cyan]
  2. Create a commit: [cyan]coeus commit "Initial version"[/cyan]
  3. Review history: [cyan]coeus log[/cyan]
"""
    console.print(Panel(success_message, border_style="green", title="Coeus Initialized"))


@app.command()
def add(
    paths: List[str] = typer.Argument(..., help="Files to stage"),
) -> None:
    """Add files to the staging area."""
    repo = _open_repository()

    errors: List[str] = []
    try:
        already_staged = {entry.path for entry in repo.status().staged}
    except CoeusError as e:
        _fail(e)

    for path_str in paths:
        try:
            entry = repo.add(Path.cwd() / path_str)
        except FileNotFoundError:
            errors.append(f"{_display(path_str)}: file not found")
            continue
        except CoeusError as e:
            if isinstance(e, _SYSTEM_ERRORS):
                _fail(e)
            errors.append(f"{_display(path_str)}: {e}")
            continue

        marker = "[yellow]*[/yellow]" if entry.path in already_staged else "[green]+[/green]"
        already_staged.add(entry.path)
        console.print(f"  {marker} {escape(entry.path)}  [dim]({entry.hash[:8]})[/dim]")

    if errors:
        console.print("\n[bold red]Errors:[/bold red]")
        for error in errors:
            console.print(f"  [red]x[/red] {escape(error)}")
        raise typer.Exit(EXIT_USER_ERROR)


@app.command()
def commit(
    message: str = typer.Argument(..., help="Commit message, stored verbatim"),
    allow_empty: bool = typer.Option(
        False,
        "--allow-empty",
        help="Allow a commit with nothing staged",
    ),
) -> None:
    """Commit staged files as a snapshot."""
    repo = _open_repository()

    try:
        created = repo.commit(message, allow_empty=allow_empty)
    except CoeusError as e:
        _fail(e)

    console.print(f"Commit successfully created: [bold cyan]{created.hash}[/bold cyan]")
    console.print(f"  [dim]Files:[/dim]   {len(created.files)}")
    parent = _short(created.parent) if created.parent else "(root commit)"
    console.print(f"  [dim]Parent:[/dim]  {parent}")


@app.command()
def log(
    max_count: Optional[int] = typer.Option(
        None,
        "--max-count",
        "-n",
        min=1,
        help="Limit number of commits to show",
    ),
    oneline: bool = typer.Option(
        False,
        "--oneline",
        help="Show each commit on a single line",
    ),
) -> None:
    """Show commit history, newest first."""
    repo = _open_repository()

    shown = 0
    try:
        for record in repo.log(limit=max_count):
            if oneline:
                first_line = record.message.split("\n")[0]
                console.print(f"[yellow]{_short(record.hash)}[/yellow] {escape(first_line)}")
            else:
                if shown:
                    console.print()
                console.print(f"[bold yellow]commit {record.hash}[/bold yellow]")
                parent = _short(record.parent) if record.parent else "(root commit)"
                console.print(f"[dim]Parent: {parent}[/dim]")
                console.print(f"[bold]Date:[/bold]   {record.timestamp}")
                console.print()
                for line in record.message.split("\n"):
                    console.print(f"    {escape(line)}")
            shown += 1
    except CoeusError as e:
        _fail(e)

    if not shown:
        console.print("[dim]No commits yet[/dim]")


def _print_change(change: FileChange, diff_engine: DiffEngine) -> None:
    console.print(f"[bold]File:[/bold] {escape(change.path)}")
    if change.content:
        console.print(Text(change.content.rstrip("\n")))

    if change.status is ChangeStatus.FIRST_COMMIT:
        console.print("  [dim]First commit[/dim]")
        return
    if change.status is ChangeStatus.NEW_FILE:
        console.print("  [green]New file in this commit[/green]")
        return

    summary = diff_engine.summarize(change.segments)
    console.print(
        f"  [dim]Diff:[/dim] [green]+{summary['added']}[/green] "
        f"[red]-{summary['removed']}[/red]"
    )
    for segment in change.segments:
        prefix, style = _SEGMENT_STYLES[segment.kind]
        for line in split_lines(segment.text):
            console.print(Text(prefix + line.rstrip("\n"), style=style))


@app.command()
def show(
    commit_hash: str = typer.Argument(..., help="Full or abbreviated commit hash"),
) -> None:
    """Show the changes a commit made against its parent."""
    repo = _open_repository()

    try:
        report = repo.show(commit_hash)
    except CommitNotFoundError:
        console.print(
            f"[bold red]Error:[/bold red] Commit not found: {escape(commit_hash)}",
            style="red",
        )
        raise typer.Exit(EXIT_USER_ERROR)
    except CoeusError as e:
        _fail(e)

    diff_engine = DiffEngine()
    shown = report.commit
    console.print(f"[bold yellow]commit {shown.hash}[/bold yellow]")
    console.print(f"[bold]Date:[/bold]   {shown.timestamp}")
    console.print()
    for line in shown.message.split("\n"):
        console.print(f"    {escape(line)}")
    console.print()

    if not report.changes:
        console.print("[dim]No files in this commit[/dim]")
    for change in report.changes:
        _print_change(change, diff_engine)


@app.command()
def status() -> None:
    """Show HEAD and the staging area."""
    repo = _open_repository()

    try:
        current = repo.status()
    except CoeusError as e:
        _fail(e)

    if current.head:
        console.print(f"[bold]HEAD:[/bold] {_short(current.head)}  [dim]({current.head})[/dim]")
    else:
        console.print("[bold]HEAD:[/bold] [dim](no commits yet)[/dim]")
    console.print()

    if current.staged:
        console.print("[bold green]Changes to be committed:[/bold green]")
        for entry in current.staged:
            console.print(f"  [green]+[/green] {escape(entry.path)}  [dim]({entry.hash[:8]})[/dim]")
    else:
        console.print("[dim]Nothing staged[/dim]")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
