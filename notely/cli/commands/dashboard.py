"""
Dashboard Commands.
"""

import typer
from rich.columns import Columns
from rich.panel import Panel

from notely.app import NotelyApp
from notely.cli.common import console, fail_with, require_route, run_in_view, show_notes
from notely.core.exceptions import ApplicationError
from notely.routing import DASHBOARD_ROUTE
from notely.services.stats import dashboard_stats
from notely.sync.scope import ViewScope

app = typer.Typer(help="Dashboard commands")


@app.command()
def show(ctx: typer.Context) -> None:
    """
    Show note statistics and recently updated notes.
    """
    run_in_view(ctx, "dashboard", _show)


async def _show(app: NotelyApp, *, scope: ViewScope | None = None) -> None:
    require_route(app, DASHBOARD_ROUTE)
    try:
        await app.sync.load_notes(scope=scope)
    except ApplicationError as e:
        fail_with(e, app.notes.error, "Failed to load notes")

    stats = dashboard_stats(app.notes.notes)
    user = app.session.user
    trend_color = "green" if stats.trend >= 0 else "red"

    if user is not None:
        console.print(f"[bold]Welcome back, {user.first_name or user.username}![/bold]")

    console.print(Columns([
        Panel(
            f"[bold]{stats.total}[/bold]\n[{trend_color}]{stats.trend:+d}% this week[/{trend_color}]",
            title="Total Notes",
        ),
        Panel(f"[bold]{stats.pinned}[/bold]", title="Pinned"),
        Panel(f"[bold]{stats.bookmarked}[/bold]", title="Bookmarked"),
        Panel(f"[bold]{stats.trashed}[/bold]", title="Trash"),
    ]))
    console.print(
        f"This week: {stats.this_week}/{stats.weekly_goal} notes "
        f"({stats.weekly_progress:.0f}% of goal) · "
        f"today: {stats.today} · streak: {stats.streak} day{'s' if stats.streak != 1 else ''}"
    )
    console.print()
    show_notes(stats.recent, "Recent Notes", "No notes yet. Create one with: notely notes new")
