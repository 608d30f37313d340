"""
Auth Commands.

Log in, sign up, log out, show the current user and change the password.
"""

import typer
from rich.panel import Panel

from notely.app import NotelyApp
from notely.cli.common import console, fail, fail_with, run_with_app
from notely.core.exceptions import ApplicationError
from notely.routing import DASHBOARD_ROUTE, ONBOARDING_ROUTE

app = typer.Typer(help="Account and session commands")

NEXT_STEP_HINTS = {
    ONBOARDING_ROUTE: "Next: run [cyan]notely onboarding start[/cyan] to set up your account.",
    DASHBOARD_ROUTE: "Next: run [cyan]notely dashboard show[/cyan].",
}


@app.command()
def login(
    ctx: typer.Context,
    identifier: str = typer.Option(..., "--user", "-u", prompt="Email or username", help="Email or username"),
    password: str = typer.Option(..., "--password", "-p", prompt=True, hide_input=True, help="Password"),
) -> None:
    """
    Log in with email or username.

    Examples:
        notely auth login -u ada@example.com
    """
    run_with_app(ctx, _login, identifier, password)


async def _login(app: NotelyApp, identifier: str, password: str) -> None:
    try:
        route = await app.auth.login(identifier, password)
    except ApplicationError as e:
        fail_with(e, app.session.error, "Login failed. Please try again.")

    user = app.session.user
    console.print(f"[green]Welcome back, {user.display_name if user else identifier}![/green]")
    if route in NEXT_STEP_HINTS:
        console.print(NEXT_STEP_HINTS[route])


@app.command()
def signup(
    ctx: typer.Context,
    first_name: str = typer.Option(..., "--first-name", prompt="First name"),
    last_name: str = typer.Option(..., "--last-name", prompt="Last name"),
    username: str = typer.Option(..., "--username", prompt="Username"),
    email: str = typer.Option(..., "--email", prompt="Email"),
    password: str = typer.Option(
        ..., "--password", prompt=True, hide_input=True, confirmation_prompt=True,
    ),
) -> None:
    """
    Create an account and log in.
    """
    run_with_app(ctx, _signup, first_name, last_name, username, email, password)


async def _signup(
    app: NotelyApp,
    first_name: str,
    last_name: str,
    username: str,
    email: str,
    password: str,
) -> None:
    try:
        route = await app.auth.signup(first_name, last_name, username, email, password)
    except ApplicationError as e:
        fail_with(e, app.session.error, "Signup failed. Please try again.")

    console.print(f"[green]Account created. Welcome, {first_name.strip()}![/green]")
    if route in NEXT_STEP_HINTS:
        console.print(NEXT_STEP_HINTS[route])


@app.command()
def logout(ctx: typer.Context) -> None:
    """
    Log out and clear the local cache.
    """
    run_with_app(ctx, _logout)


async def _logout(app: NotelyApp) -> None:
    was_logged_in = app.session.user is not None
    app.auth.logout()
    if was_logged_in:
        console.print("[green]Logged out.[/green]")
    else:
        console.print("[dim]Not logged in.[/dim]")


@app.command()
def whoami(ctx: typer.Context) -> None:
    """
    Show the logged-in user.
    """
    run_with_app(ctx, _whoami)


async def _whoami(app: NotelyApp) -> None:
    user = app.session.user
    if user is None or not app.session.is_authenticated:
        fail("Not logged in.")

    lines = [
        f"[bold]{user.display_name}[/bold] (@{user.username})",
        f"Email: {user.email}",
        f"Onboarding: {'complete' if user.has_completed_onboarding else 'pending'}",
    ]
    if user.preferences:
        lines.append(f"Interests: {', '.join(sorted(user.preferences))}")
    console.print(Panel("\n".join(lines), title="Current User"))


@app.command()
def password(
    ctx: typer.Context,
    current: str = typer.Option(..., "--current", prompt="Current password", hide_input=True),
    new: str = typer.Option(..., "--new", prompt="New password", hide_input=True),
    confirm: str = typer.Option(..., "--confirm", prompt="Confirm new password", hide_input=True),
) -> None:
    """
    Change the account password.
    """
    run_with_app(ctx, _password, current, new, confirm)


async def _password(app: NotelyApp, current: str, new: str, confirm: str) -> None:
    try:
        await app.auth.change_password(current, new, confirm)
    except ApplicationError as e:
        fail_with(e, app.session.error, "Failed to change password. Please try again.")
    console.print("[green]Password changed.[/green]")
