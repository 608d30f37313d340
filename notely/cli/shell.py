"""
Interactive Shell Mode.

REPL-style shell over one NotelyApp. The session, note cache and query
cache live for the whole shell, so repeated reads are served from the
cache until a change marks them stale.

Each command runs in its own ViewScope. Interrupting a command closes
its scope and returns to the prompt; a late response is dropped.
"""

import asyncio
import shlex
from typing import Awaitable, Callable

import typer
from rich.panel import Panel
from rich.table import Table

from notely.app import NotelyApp
from notely.cli.commands import auth, dashboard, notes, profile, system
from notely.cli.common import console
from notely.core.logging import get_logger, log_with_source
from notely.sync.scope import ViewScope

logger = get_logger(__name__)

ShellCommand = Callable[[list[str], ViewScope], Awaitable[None]]


class InteractiveShell:
    """
    Interactive shell for Notely commands.

    Usage:
        shell = InteractiveShell(NotelyApp())
        await shell.run()
    """

    def __init__(self, app: NotelyApp) -> None:
        self.app = app
        self.running = False
        self.commands: dict[str, ShellCommand] = {
            "help": self._cmd_help,
            "login": self._cmd_login,
            "logout": self._cmd_logout,
            "whoami": self._cmd_whoami,
            "dashboard": self._cmd_dashboard,
            "list": self._cmd_list,
            "pinned": self._cmd_pinned,
            "bookmarked": self._cmd_bookmarked,
            "trash": self._cmd_trash,
            "show": self._cmd_show,
            "new": self._cmd_new,
            "pin": self._cmd_pin,
            "bookmark": self._cmd_bookmark,
            "delete": self._cmd_delete,
            "restore": self._cmd_restore,
            "purge": self._cmd_purge,
            "analyze": self._cmd_analyze,
            "profile": self._cmd_profile,
            "info": self._cmd_info,
            "version": self._cmd_version,
            "clear": self._cmd_clear,
            "quit": self._cmd_quit,
            "exit": self._cmd_quit,
        }

    async def run(self) -> None:
        """Run the interactive shell."""
        self.running = True

        console.print(Panel(
            "[bold]Notely Shell[/bold]\n"
            "Type [cyan]help[/cyan] for available commands, [cyan]quit[/cyan] to exit.",
            title="Welcome",
        ))
        console.print()

        while self.running:
            try:
                user_input = console.input("[bold cyan]notely>[/bold cyan] ").strip()
                if not user_input:
                    continue
                parts = shlex.split(user_input)
            except KeyboardInterrupt:
                console.print("\n[dim]Use 'quit' to exit[/dim]")
                continue
            except EOFError:
                break
            except ValueError as e:
                console.print(f"[red]Error: {e}[/red]")
                continue

            await self.execute(parts[0].lower(), parts[1:])

        console.print("[dim]Goodbye![/dim]")

    async def execute(self, command: str, args: list[str]) -> None:
        """Run one shell command; failures are reported and the shell keeps going."""
        handler = self.commands.get(command)
        if handler is None:
            console.print(f"[red]Unknown command: {command}[/red]")
            console.print("Type [cyan]help[/cyan] for available commands.")
            return

        log_with_source(logger, "shell", "debug", "Shell command", command=command)
        scope = ViewScope(f"shell:{command}")
        try:
            await scope.run(handler(args, scope))
        except (typer.Exit, typer.Abort):
            # command already reported its failure
            pass
        except (KeyboardInterrupt, asyncio.CancelledError):
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                current.uncancel()
            log_with_source(logger, "shell", "info", "Shell command cancelled", command=command)
            console.print("\n[yellow]Cancelled[/yellow]")
        finally:
            await scope.aclose()

    def _need_id(self, args: list[str], usage: str) -> str | None:
        if not args:
            console.print(f"[yellow]Usage: {usage}[/yellow]")
            return None
        return args[0]

    async def _cmd_help(self, args: list[str], scope: ViewScope) -> None:
        table = Table(title="Available Commands", show_header=True)
        table.add_column("Command", style="cyan")
        table.add_column("Description")

        table.add_row("login <user>", "Log in (prompts for the password)")
        table.add_row("logout", "Log out and clear the local cache")
        table.add_row("whoami", "Show the logged-in user")
        table.add_row("dashboard", "Show statistics and recent notes")
        table.add_row("list [-r]", "List notes (-r refetches)")
        table.add_row("pinned / bookmarked / trash", "List pinned, bookmarked or trashed notes")
        table.add_row("show <id>", "Show a note")
        table.add_row("new", "Create a note")
        table.add_row("pin <id> / bookmark <id>", "Toggle pin or bookmark")
        table.add_row("delete <id> / restore <id>", "Move to or out of the trash")
        table.add_row("purge <id>", "Permanently delete a note")
        table.add_row("analyze <id>", "AI sentiment analysis")
        table.add_row("profile", "Show your profile")
        table.add_row("info / version", "Application information")
        table.add_row("clear", "Clear the screen")
        table.add_row("quit / exit", "Exit the shell")

        console.print(table)

    async def _cmd_login(self, args: list[str], scope: ViewScope) -> None:
        identifier = args[0] if args else console.input("Email or username: ")
        password = console.input("Password: ", password=True)
        await auth._login(self.app, identifier, password)

    async def _cmd_logout(self, args: list[str], scope: ViewScope) -> None:
        await auth._logout(self.app)

    async def _cmd_whoami(self, args: list[str], scope: ViewScope) -> None:
        await auth._whoami(self.app)

    async def _cmd_dashboard(self, args: list[str], scope: ViewScope) -> None:
        await dashboard._show(self.app, scope=scope)

    async def _cmd_list(self, args: list[str], scope: ViewScope) -> None:
        await notes._list(self.app, refresh="-r" in args or "--refresh" in args, scope=scope)

    async def _cmd_pinned(self, args: list[str], scope: ViewScope) -> None:
        await notes._pinned(self.app, scope=scope)

    async def _cmd_bookmarked(self, args: list[str], scope: ViewScope) -> None:
        await notes._bookmarked(self.app, scope=scope)

    async def _cmd_trash(self, args: list[str], scope: ViewScope) -> None:
        await notes._trash(self.app, scope=scope)

    async def _cmd_show(self, args: list[str], scope: ViewScope) -> None:
        note_id = self._need_id(args, "show <id>")
        if note_id:
            await notes._show(self.app, note_id, scope=scope)

    async def _cmd_new(self, args: list[str], scope: ViewScope) -> None:
        title = console.input("Title: ")
        synopsis = console.input("Synopsis: ")
        content = console.input("Content: ")
        await notes._new(self.app, title, synopsis, content, scope=scope)

    async def _cmd_pin(self, args: list[str], scope: ViewScope) -> None:
        note_id = self._need_id(args, "pin <id>")
        if note_id:
            await notes._toggle(self.app, note_id, "pin", scope=scope)

    async def _cmd_bookmark(self, args: list[str], scope: ViewScope) -> None:
        note_id = self._need_id(args, "bookmark <id>")
        if note_id:
            await notes._toggle(self.app, note_id, "bookmark", scope=scope)

    async def _cmd_delete(self, args: list[str], scope: ViewScope) -> None:
        note_id = self._need_id(args, "delete <id>")
        if note_id:
            await notes._delete(self.app, note_id, scope=scope)

    async def _cmd_restore(self, args: list[str], scope: ViewScope) -> None:
        note_id = self._need_id(args, "restore <id>")
        if note_id:
            await notes._restore(self.app, note_id, scope=scope)

    async def _cmd_purge(self, args: list[str], scope: ViewScope) -> None:
        note_id = self._need_id(args, "purge <id>")
        if note_id and typer.confirm(f"Permanently delete {note_id}?"):
            await notes._purge(self.app, note_id, scope=scope)

    async def _cmd_analyze(self, args: list[str], scope: ViewScope) -> None:
        note_id = self._need_id(args, "analyze <id>")
        if note_id:
            await notes._analyze(self.app, note_id, scope=scope)

    async def _cmd_profile(self, args: list[str], scope: ViewScope) -> None:
        await profile._show(self.app)

    async def _cmd_info(self, args: list[str], scope: ViewScope) -> None:
        system.info()

    async def _cmd_version(self, args: list[str], scope: ViewScope) -> None:
        system.version()

    async def _cmd_clear(self, args: list[str], scope: ViewScope) -> None:
        console.clear()

    async def _cmd_quit(self, args: list[str], scope: ViewScope) -> None:
        self.running = False


async def run_shell(app: NotelyApp) -> None:
    """Run the interactive shell until the user quits."""
    async with app:
        await InteractiveShell(app).run()
