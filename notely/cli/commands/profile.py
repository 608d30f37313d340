"""
Profile Commands.
"""

from pathlib import Path
from typing import Optional

import typer
from rich.table import Table

from notely.app import NotelyApp
from notely.cli.common import console, fail, fail_with, require_route, run_with_app
from notely.core.exceptions import ApplicationError

app = typer.Typer(help="Profile commands")

PROFILE_ROUTE = "/app/profile"


@app.command()
def show(ctx: typer.Context) -> None:
    """
    Show the profile of the logged-in user.
    """
    run_with_app(ctx, _show)


async def _show(app: NotelyApp) -> None:
    require_route(app, PROFILE_ROUTE)
    user = app.session.user
    if user is None:
        fail("Not logged in.")

    table = Table(title="Profile", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Name", user.display_name)
    table.add_row("Username", user.username)
    table.add_row("Email", user.email)
    table.add_row("Bio", user.bio or "-")
    table.add_row("Avatar", user.avatar or "-")
    table.add_row("Interests", ", ".join(sorted(user.preferences)) or "-")
    if user.date_joined is not None:
        table.add_row("Joined", user.date_joined.strftime("%Y-%m-%d"))
    console.print(table)


@app.command()
def update(
    ctx: typer.Context,
    first_name: Optional[str] = typer.Option(None, "--first-name"),
    last_name: Optional[str] = typer.Option(None, "--last-name"),
    username: Optional[str] = typer.Option(None, "--username"),
    email: Optional[str] = typer.Option(None, "--email"),
    bio: Optional[str] = typer.Option(None, "--bio"),
) -> None:
    """
    Update profile fields. Fields not given keep their current value.
    """
    run_with_app(ctx, _update, first_name, last_name, username, email, bio)


async def _update(
    app: NotelyApp,
    first_name: str | None,
    last_name: str | None,
    username: str | None,
    email: str | None,
    bio: str | None,
) -> None:
    require_route(app, PROFILE_ROUTE)
    user = app.session.user
    if user is None:
        fail("Not logged in.")
    if all(value is None for value in (first_name, last_name, username, email, bio)):
        fail("Nothing to change.")

    try:
        await app.profile.update_profile(
            first_name=first_name if first_name is not None else user.first_name,
            last_name=last_name if last_name is not None else user.last_name,
            username=username if username is not None else user.username,
            email=email if email is not None else user.email,
            bio=bio if bio is not None else user.bio,
        )
    except ApplicationError as e:
        fail_with(e, app.session.error, "Failed to update profile. Please try again.")
    console.print("[green]Profile updated.[/green]")


@app.command()
def avatar(
    ctx: typer.Context,
    source: str = typer.Argument(..., help="Image file to upload, or an https:// image URL"),
) -> None:
    """
    Change the avatar from an image file or URL.
    """
    run_with_app(ctx, _avatar, source)


async def _avatar(app: NotelyApp, source: str) -> None:
    require_route(app, PROFILE_ROUTE)
    try:
        if source.startswith(("http://", "https://")):
            await app.profile.update_avatar(source)
        else:
            await app.profile.upload_avatar(Path(source).expanduser())
    except ApplicationError as e:
        fail_with(e, app.session.error, "Failed to update avatar. Please try again.")
    console.print("[green]Avatar updated.[/green]")
