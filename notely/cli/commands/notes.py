"""
Note Commands.

List, read, write, pin, bookmark, trash and analyze notes. Every change
is sent to the API first; the local cache only changes after the server
confirms it.
"""

from pathlib import Path
from typing import Optional

import typer
from rich.panel import Panel

from notely.app import NotelyApp
from notely.cli.common import (
    console,
    fail,
    fail_with,
    require_route,
    run_in_view,
    show_note,
    show_notes,
)
from notely.core.exceptions import ApplicationError, ValidationError
from notely.schemas.note import NoteCreate, NoteUpdate
from notely.services.validators import validate_note
from notely.sync.scope import ViewScope

app = typer.Typer(help="Note commands")

NOTES_ROUTE = "/app/notes"
PINNED_ROUTE = "/app/pinned"
BOOKMARKS_ROUTE = "/app/bookmarks"
TRASH_ROUTE = "/app/trash"

SENTIMENT_COLORS = {"positive": "green", "negative": "red", "neutral": "yellow"}


def _read_content(content: str | None, content_file: Path | None) -> str | None:
    if content_file is not None:
        if not content_file.is_file():
            fail(f"File not found: {content_file}")
        return content_file.read_text(encoding="utf-8")
    return content


# =============================================================================
# Reading
# =============================================================================


@app.command("list")
def list_notes(
    ctx: typer.Context,
    refresh: bool = typer.Option(False, "--refresh", "-r", help="Ignore cached results"),
) -> None:
    """
    List active notes, most recently updated first.
    """
    run_in_view(ctx, "notes-list", _list, refresh)


async def _list(app: NotelyApp, refresh: bool = False, *, scope: ViewScope | None = None) -> None:
    require_route(app, NOTES_ROUTE)
    try:
        await app.sync.load_notes(scope=scope, force=refresh)
    except ApplicationError as e:
        fail_with(e, app.notes.error, "Failed to load notes")
    notes = sorted(app.notes.active(), key=lambda note: note.last_updated, reverse=True)
    show_notes(notes, "All Notes", "No notes yet. Create one with: notely notes new")


@app.command()
def pinned(ctx: typer.Context) -> None:
    """
    List pinned notes.
    """
    run_in_view(ctx, "pinned", _pinned)


async def _pinned(app: NotelyApp, *, scope: ViewScope | None = None) -> None:
    require_route(app, PINNED_ROUTE)
    try:
        await app.sync.load_pinned(scope=scope)
    except ApplicationError as e:
        fail_with(e, app.notes.error, "Failed to load pinned notes")
    show_notes(app.notes.pinned(), "Pinned Notes", "No pinned notes.")


@app.command()
def bookmarked(ctx: typer.Context) -> None:
    """
    List bookmarked notes.
    """
    run_in_view(ctx, "bookmarks", _bookmarked)


async def _bookmarked(app: NotelyApp, *, scope: ViewScope | None = None) -> None:
    require_route(app, BOOKMARKS_ROUTE)
    try:
        await app.sync.load_notes(scope=scope)
    except ApplicationError as e:
        fail_with(e, app.notes.error, "Failed to load notes")
    show_notes(app.notes.bookmarked(), "Bookmarked Notes", "No bookmarked notes.")


@app.command()
def show(
    ctx: typer.Context,
    note_id: str = typer.Argument(..., help="Note ID"),
) -> None:
    """
    Show one note with its Markdown content rendered.
    """
    run_in_view(ctx, "note-detail", _show, note_id)


async def _show(app: NotelyApp, note_id: str, *, scope: ViewScope | None = None) -> None:
    require_route(app, f"{NOTES_ROUTE}/{note_id}")
    try:
        note = await app.sync.load_note(note_id, scope=scope)
    except ApplicationError as e:
        fail_with(e, app.notes.error, "Failed to load note")
    show_note(note)


@app.command()
def trash(ctx: typer.Context) -> None:
    """
    List notes in the trash.
    """
    run_in_view(ctx, "trash", _trash)


async def _trash(app: NotelyApp, *, scope: ViewScope | None = None) -> None:
    require_route(app, TRASH_ROUTE)
    try:
        await app.sync.load_trash(scope=scope)
    except ApplicationError as e:
        fail_with(e, app.notes.error, "Failed to load trash")
    show_notes(app.notes.deleted(), "Trash", "Trash is empty.")


# =============================================================================
# Writing
# =============================================================================


@app.command()
def new(
    ctx: typer.Context,
    title: str = typer.Option(..., "--title", "-t", prompt="Title"),
    synopsis: str = typer.Option(..., "--synopsis", "-s", prompt="Synopsis"),
    content: Optional[str] = typer.Option(None, "--content", "-c", help="Markdown content"),
    content_file: Optional[Path] = typer.Option(None, "--file", "-f", help="Read content from a Markdown file"),
) -> None:
    """
    Create a note.

    Examples:
        notely notes new -t "Trip" -s "Packing list" -f trip.md
    """
    body = _read_content(content, content_file)
    if body is None:
        body = typer.prompt("Content")
    run_in_view(ctx, "note-new", _new, title, synopsis, body)


async def _new(
    app: NotelyApp,
    title: str,
    synopsis: str,
    content: str,
    *,
    scope: ViewScope | None = None,
) -> None:
    require_route(app, f"{NOTES_ROUTE}/new")
    errors = validate_note(title, synopsis, content)
    if errors:
        fail_with(ValidationError("Invalid note", details=errors), None, "Invalid note")
    try:
        draft = NoteCreate(title=title, synopsis=synopsis, content=content)
        note = await app.sync.create_note(draft, scope=scope)
    except ApplicationError as e:
        fail_with(e, app.notes.error, "Failed to create note")
    console.print(f"[green]Created note {note.id}.[/green]")


@app.command()
def edit(
    ctx: typer.Context,
    note_id: str = typer.Argument(..., help="Note ID"),
    title: Optional[str] = typer.Option(None, "--title", "-t"),
    synopsis: Optional[str] = typer.Option(None, "--synopsis", "-s"),
    content: Optional[str] = typer.Option(None, "--content", "-c", help="Markdown content"),
    content_file: Optional[Path] = typer.Option(None, "--file", "-f", help="Read content from a Markdown file"),
) -> None:
    """
    Edit a note's title, synopsis or content.
    """
    body = _read_content(content, content_file)
    run_in_view(ctx, "note-edit", _edit, note_id, title, synopsis, body)


async def _edit(
    app: NotelyApp,
    note_id: str,
    title: str | None,
    synopsis: str | None,
    content: str | None,
    *,
    scope: ViewScope | None = None,
) -> None:
    require_route(app, f"{NOTES_ROUTE}/{note_id}/edit")
    changes = {
        key: value
        for key, value in (("title", title), ("synopsis", synopsis), ("content", content))
        if value is not None
    }
    if not changes:
        fail("Nothing to change. Pass --title, --synopsis, --content or --file.")

    try:
        current = await app.sync.load_note(note_id, scope=scope)
    except ApplicationError as e:
        fail_with(e, app.notes.error, "Failed to load note")

    merged = {"title": current.title, "synopsis": current.synopsis, "content": current.content, **changes}
    errors = validate_note(merged["title"], merged["synopsis"], merged["content"])
    if errors:
        fail_with(ValidationError("Invalid note", details=errors), None, "Invalid note")

    try:
        await app.sync.edit_note(note_id, NoteUpdate(**changes), scope=scope)
    except ApplicationError as e:
        fail_with(e, app.notes.error, "Failed to update note")
    console.print(f"[green]Updated note {note_id}.[/green]")


async def _toggle(app: NotelyApp, note_id: str, kind: str, *, scope: ViewScope | None = None) -> None:
    require_route(app, f"{NOTES_ROUTE}/{note_id}")
    action = app.sync.toggle_pin if kind == "pin" else app.sync.toggle_bookmark
    try:
        await action(note_id, scope=scope)
    except ApplicationError as e:
        fail_with(e, app.notes.error, f"Failed to update {kind}")

    note = app.notes.by_id(note_id)
    if note is None:
        console.print(f"[green]Updated {kind} for {note_id}.[/green]")
        return
    state = note.is_pinned if kind == "pin" else note.is_bookmarked
    verb = {"pin": ("Pinned", "Unpinned"), "bookmark": ("Bookmarked", "Removed bookmark from")}[kind]
    console.print(f"[green]{verb[0] if state else verb[1]} {note.title}.[/green]")


@app.command()
def pin(
    ctx: typer.Context,
    note_id: str = typer.Argument(..., help="Note ID"),
) -> None:
    """
    Pin or unpin a note.
    """
    run_in_view(ctx, "note-detail", _toggle, note_id, "pin")


@app.command()
def bookmark(
    ctx: typer.Context,
    note_id: str = typer.Argument(..., help="Note ID"),
) -> None:
    """
    Bookmark or unbookmark a note.
    """
    run_in_view(ctx, "note-detail", _toggle, note_id, "bookmark")


@app.command()
def delete(
    ctx: typer.Context,
    note_id: str = typer.Argument(..., help="Note ID"),
) -> None:
    """
    Move a note to the trash.
    """
    run_in_view(ctx, "note-detail", _delete, note_id)


async def _delete(app: NotelyApp, note_id: str, *, scope: ViewScope | None = None) -> None:
    require_route(app, f"{NOTES_ROUTE}/{note_id}")
    try:
        await app.sync.delete_note(note_id, scope=scope)
    except ApplicationError as e:
        fail_with(e, app.notes.error, "Failed to delete note")
    console.print(f"[green]Moved {note_id} to the trash.[/green]")


@app.command()
def restore(
    ctx: typer.Context,
    note_id: str = typer.Argument(..., help="Note ID"),
) -> None:
    """
    Restore a note from the trash.
    """
    run_in_view(ctx, "trash", _restore, note_id)


async def _restore(app: NotelyApp, note_id: str, *, scope: ViewScope | None = None) -> None:
    require_route(app, TRASH_ROUTE)
    try:
        await app.sync.restore_note(note_id, scope=scope)
    except ApplicationError as e:
        fail_with(e, app.notes.error, "Failed to restore note")
    console.print(f"[green]Restored {note_id}.[/green]")


@app.command()
def purge(
    ctx: typer.Context,
    note_id: str = typer.Argument(..., help="Note ID"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """
    Permanently delete a note. This cannot be undone.
    """
    if not yes:
        typer.confirm(f"Permanently delete {note_id}?", abort=True)
    run_in_view(ctx, "trash", _purge, note_id)


async def _purge(app: NotelyApp, note_id: str, *, scope: ViewScope | None = None) -> None:
    require_route(app, TRASH_ROUTE)
    try:
        await app.sync.purge_note(note_id, scope=scope)
    except ApplicationError as e:
        fail_with(e, app.notes.error, "Failed to permanently delete note")
    console.print(f"[green]Permanently deleted {note_id}.[/green]")


# =============================================================================
# AI
# =============================================================================


@app.command()
def analyze(
    ctx: typer.Context,
    note_id: str = typer.Argument(..., help="Note ID"),
) -> None:
    """
    Analyze the sentiment of a note with AI.
    """
    run_in_view(ctx, "note-detail", _analyze, note_id)


async def _analyze(app: NotelyApp, note_id: str, *, scope: ViewScope | None = None) -> None:
    require_route(app, f"{NOTES_ROUTE}/{note_id}")
    try:
        note = await app.sync.load_note(note_id, scope=scope)
    except ApplicationError as e:
        fail_with(e, app.notes.error, "Failed to load note")

    try:
        with console.status("Analyzing..."):
            analysis = await app.sentiment.analyze(note)
    except ApplicationError as e:
        fail_with(e, None, "Failed to analyze sentiment")

    color = SENTIMENT_COLORS[analysis.sentiment]
    console.print(Panel(
        f"[{color}]{analysis.sentiment.upper()}[/{color}]  "
        f"score {analysis.score:+.2f} · confidence {analysis.confidence:.0%}\n\n"
        f"{analysis.summary}",
        title=f"Sentiment: {note.title}",
    ))
