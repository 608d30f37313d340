"""
Notely CLI.

Command-line client for the Notely note-taking service.
Built with Typer for type-safe commands and Rich for formatted output.

Usage:
    notely --help                               # Show help

    # Account
    notely auth signup                          # Create an account
    notely auth login -u ada@example.com        # Log in
    notely auth whoami                          # Show the current user
    notely auth password                        # Change password
    notely auth logout                          # Log out

    # First run
    notely onboarding start                     # Welcome, profile, topics, first note

    # Notes
    notely dashboard show                       # Statistics and recent notes
    notely notes list                           # Active notes
    notely notes new -t "Title" -s "Synopsis"   # Create a note
    notely notes show <id>                      # Read a note
    notely notes pin <id>                       # Toggle pin
    notely notes delete <id>                    # Move to trash
    notely notes trash                          # Trashed notes
    notely notes analyze <id>                   # AI sentiment analysis

    # Profile and system
    notely profile show
    notely system info

    # Interactive mode
    notely shell

Options:
    --verbose, -v     Enable verbose output
    --debug           Enable debug mode (detailed logging)
    --help            Show help message
"""

import asyncio

import structlog
import typer

from notely.app import NotelyApp
from notely.cli.commands import (
    auth_app,
    dashboard_app,
    notes_app,
    onboarding_app,
    profile_app,
    system_app,
)
from notely.cli.common import console, get_factory
from notely.core.config import find_project_root
from notely.core.logging import setup_logging

app = typer.Typer(
    name="notely",
    help="Notely CLI - Notes, account, onboarding and dashboard from the terminal.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.add_typer(auth_app, name="auth")
app.add_typer(notes_app, name="notes")
app.add_typer(profile_app, name="profile")
app.add_typer(onboarding_app, name="onboarding")
app.add_typer(dashboard_app, name="dashboard")
app.add_typer(system_app, name="system")


@app.command()
def shell(ctx: typer.Context) -> None:
    """
    Start interactive shell mode.

    Keeps one session and cache open across commands.
    """
    from notely.cli.shell import run_shell

    try:
        asyncio.run(run_shell(get_factory(ctx)()))
    except KeyboardInterrupt:
        console.print("\n[dim]Goodbye![/dim]")


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output (INFO level logging)",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        "-d",
        help="Enable debug mode (DEBUG level logging)",
    ),
) -> None:
    """
    Notely CLI.

    Notes, account, onboarding and dashboard from the terminal.
    Built with Typer for type-safe commands and Rich for formatted output.
    """
    try:
        find_project_root()
    except RuntimeError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    if ctx.obj is None:
        ctx.obj = NotelyApp

    if debug:
        setup_logging(level="DEBUG", format_type="console")
        console.print("[dim]Debug mode enabled[/dim]")
    elif verbose:
        setup_logging(level="INFO", format_type="console")
    else:
        setup_logging(level="WARNING")

    structlog.contextvars.bind_contextvars(source="cli")


if __name__ == "__main__":
    app()
