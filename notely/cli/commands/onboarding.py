"""
Onboarding Commands.

Walks a new user through Welcome, Profile, Preferences and First Note.
Every step can be answered interactively or through options, so the
flow also runs unattended.
"""

from typing import Optional

import typer
from rich.panel import Panel
from rich.table import Table

from notely.app import NotelyApp
from notely.cli.common import console, fail_with, require_route, run_with_app
from notely.core.exceptions import ApplicationError
from notely.routing import DASHBOARD_ROUTE, ONBOARDING_ROUTE
from notely.schemas.note import NoteCreate
from notely.services.onboarding import PREFERENCE_OPTIONS, OnboardingFlow, OnboardingStep

app = typer.Typer(help="First-run onboarding")


@app.command()
def start(
    ctx: typer.Context,
    bio: Optional[str] = typer.Option(None, "--bio", help="Short bio"),
    avatar: Optional[str] = typer.Option(None, "--avatar", help="Avatar image URL"),
    topics: Optional[list[str]] = typer.Option(None, "--topic", help="Interest topic id (repeatable)"),
    note_title: Optional[str] = typer.Option(None, "--note-title", help="Title of a first note"),
    note_synopsis: Optional[str] = typer.Option(None, "--note-synopsis"),
    note_content: Optional[str] = typer.Option(None, "--note-content"),
    skip_note: bool = typer.Option(False, "--skip-note", help="Do not create a first note"),
    interactive: bool = typer.Option(True, "--interactive/--no-interactive", help="Prompt for missing answers"),
) -> None:
    """
    Complete onboarding for the logged-in user.

    Examples:
        notely onboarding start
        notely onboarding start --no-interactive --topic tech --topic books --skip-note
    """
    run_with_app(
        ctx, _start,
        bio, avatar, topics or [], note_title, note_synopsis, note_content, skip_note, interactive,
    )


@app.command()
def topics() -> None:
    """
    List the interest topics offered during onboarding.
    """
    table = Table(title="Topics", show_header=True)
    table.add_column("ID", style="cyan")
    table.add_column("Topic")
    for option in PREFERENCE_OPTIONS:
        table.add_row(option.id, option.label)
    console.print(table)


def _header(flow: OnboardingFlow) -> None:
    position = flow.steps.index(flow.step) + 1
    console.print(f"\n[bold cyan]Step {position}/{len(flow.steps)}: {flow.step.title}[/bold cyan]")


async def _start(
    app: NotelyApp,
    bio: str | None,
    avatar: str | None,
    topics: list[str],
    note_title: str | None,
    note_synopsis: str | None,
    note_content: str | None,
    skip_note: bool,
    interactive: bool,
) -> None:
    route = require_route(app, ONBOARDING_ROUTE)
    if route == DASHBOARD_ROUTE:
        console.print("[dim]Onboarding is already complete.[/dim]")
        return

    flow = app.onboarding()
    user = app.session.user

    # Welcome
    _header(flow)
    console.print(Panel(
        f"Welcome to Notely, {user.first_name if user else 'there'}!\n"
        "Let's set up your account in a few quick steps.",
        title="Welcome",
    ))
    flow.next()

    # Profile
    _header(flow)
    if bio is None and interactive:
        bio = typer.prompt("Bio", default=flow.bio or "", show_default=False)
    if avatar is None and interactive:
        avatar = typer.prompt("Avatar URL", default=flow.avatar or "", show_default=False)
    flow.set_profile(bio=bio, avatar=avatar)
    flow.next()

    # Preferences
    _header(flow)
    if not topics and interactive:
        for index, option in enumerate(PREFERENCE_OPTIONS, start=1):
            console.print(f"  {index:2d}. {option.label} [dim]({option.id})[/dim]")
        answer = typer.prompt("Choose topics (ids or numbers, comma-separated)", default="", show_default=False)
        topics = [part.strip() for part in answer.split(",") if part.strip()]
    try:
        for topic in topics:
            if topic.isdigit() and 1 <= int(topic) <= len(PREFERENCE_OPTIONS):
                topic = PREFERENCE_OPTIONS[int(topic) - 1].id
            if topic not in flow.preferences:
                flow.toggle_preference(topic)
    except ApplicationError as e:
        fail_with(e, None, "Unknown topic")
    flow.next()

    # First note
    first_note = None
    if flow.step is OnboardingStep.FIRST_NOTE:
        _header(flow)
        if not skip_note and note_title is None and interactive:
            if typer.confirm("Create your first note now?", default=True):
                note_title = typer.prompt("Title")
                note_synopsis = typer.prompt("Synopsis")
                note_content = typer.prompt("Content")
        if not skip_note and note_title is not None:
            first_note = NoteCreate(
                title=note_title,
                synopsis=note_synopsis or "",
                content=note_content or "",
            )

    try:
        await flow.finish(first_note)
    except ApplicationError as e:
        fail_with(e, app.session.error, "Failed to complete onboarding. Please try again.")

    if first_note is not None and app.notes.error:
        console.print(f"[yellow]Your first note was not saved: {app.notes.error}[/yellow]")
    console.print("[green]You're all set![/green] Run [cyan]notely dashboard show[/cyan] to get started.")
