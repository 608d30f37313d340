"""
CLI Helpers.

Shared plumbing for command groups: building the application for one
command, consulting the route guard, reporting failures and rendering
notes with Rich.

Commands that read or write notes run inside a ViewScope named after
their view. Interrupting the command closes the scope, so a response that
arrives afterwards is never written into the local cache.
"""

import asyncio
from typing import Any, Awaitable, Callable, NoReturn

import typer
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table

from notely.app import NotelyApp
from notely.core.exceptions import ApplicationError, ValidationError, describe_error
from notely.routing import LOGIN_ROUTE, ONBOARDING_ROUTE
from notely.schemas.note import Note
from notely.sync.scope import ViewScope

console = Console()

AppFactory = Callable[[], NotelyApp]


def get_factory(ctx: typer.Context) -> AppFactory:
    """The application factory stored on the root context (tests inject their own)."""
    root = ctx.find_root()
    return root.obj if callable(root.obj) else NotelyApp


def run_with_app(
    ctx: typer.Context,
    handler: Callable[..., Awaitable[Any]],
    *args: Any,
    **kwargs: Any,
) -> None:
    """Build an app, run an async handler against it and close it."""
    factory = get_factory(ctx)

    async def runner() -> None:
        async with factory() as app:
            await handler(app, *args, **kwargs)

    try:
        asyncio.run(runner())
    except KeyboardInterrupt:
        console.print("\n[yellow]Cancelled[/yellow]")
        raise typer.Exit(130)


def run_in_view(
    ctx: typer.Context,
    view: str,
    handler: Callable[..., Awaitable[Any]],
    *args: Any,
    **kwargs: Any,
) -> None:
    """Like run_with_app, with the handler running in a ViewScope passed as ``scope``."""

    async def scoped(app: NotelyApp) -> None:
        async with ViewScope(view) as scope:
            await scope.run(handler(app, *args, scope=scope, **kwargs))

    run_with_app(ctx, scoped)


def fail(message: str) -> NoReturn:
    console.print(f"[red]Error: {message}[/red]")
    raise typer.Exit(1)


def fail_with(exc: ApplicationError, store_error: str | None, fallback: str) -> NoReturn:
    """Report a failed operation, preferring the message the store recorded."""
    if isinstance(exc, ValidationError) and exc.details:
        fail(describe_error(exc, fallback))
    fail(store_error or describe_error(exc, fallback))


def require_route(app: NotelyApp, path: str) -> str:
    """
    Consult the route guard before a command that needs a session.

    Returns:
        The resolved route when the command may proceed
    """
    route = app.guard(path)
    if route == LOGIN_ROUTE and path != LOGIN_ROUTE:
        if app.session.error:
            fail(app.session.error)
        fail("You are not logged in. Run [cyan]notely auth login[/cyan] first.")
    if route == ONBOARDING_ROUTE and path != ONBOARDING_ROUTE:
        fail("Finish onboarding first. Run [cyan]notely onboarding start[/cyan].")
    return route


def _flags(note: Note) -> str:
    flags = []
    if note.is_pinned:
        flags.append("📌")
    if note.is_bookmarked:
        flags.append("🔖")
    return " ".join(flags)


def notes_table(notes: list[Note], title: str) -> Table:
    table = Table(title=title, show_header=True)
    table.add_column("ID", style="dim")
    table.add_column("Title", style="cyan")
    table.add_column("Synopsis")
    table.add_column("Updated")
    table.add_column("")

    for note in notes:
        table.add_row(
            note.id,
            note.title,
            note.synopsis,
            note.last_updated.strftime("%Y-%m-%d %H:%M"),
            _flags(note),
        )
    return table


def show_notes(notes: list[Note], title: str, empty: str) -> None:
    if not notes:
        console.print(f"[dim]{empty}[/dim]")
        return
    console.print(notes_table(notes, title))


def note_panel(note: Note) -> Panel:
    header = f"[bold]{note.title}[/bold]"
    if note.synopsis:
        header += f"\n[italic]{note.synopsis}[/italic]"
    meta = (
        f"[dim]Created {note.date_created:%Y-%m-%d %H:%M} · "
        f"updated {note.last_updated:%Y-%m-%d %H:%M}[/dim]"
    )
    flags = _flags(note)
    subtitle = f"{note.id} {flags}".strip()
    return Panel.fit(
        f"{header}\n{meta}",
        title="Note",
        subtitle=subtitle,
    )


def show_note(note: Note) -> None:
    console.print(note_panel(note))
    console.print(Markdown(note.content))
