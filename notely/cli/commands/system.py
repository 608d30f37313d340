"""
System Commands.

Commands for application information and configuration.
"""

from typing import Any, Optional

import typer
from pydantic import BaseModel
from rich.panel import Panel
from rich.tree import Tree

from notely.cli.common import console, fail

app = typer.Typer(help="System information commands")


@app.command()
def info() -> None:
    """
    Display application information.

    Shows app name, version, API address and local storage location.
    """
    from notely.core.config import get_app_config, get_storage_dir

    try:
        app_config = get_app_config()
        storage_dir = get_storage_dir()
    except (RuntimeError, FileNotFoundError, ValueError) as e:
        fail(f"Error loading configuration: {e}")

    application = app_config.application
    console.print(Panel(
        f"[bold]{application.name}[/bold]\n"
        f"Version: {application.version}\n"
        f"Description: {application.description}\n"
        f"API: {application.api.base_url}\n"
        f"Storage: {storage_dir}",
        title="Application Info",
    ))


@app.command()
def config(
    section: Optional[str] = typer.Argument(None, help="Config section to show (application, logging, features, integrations)"),
) -> None:
    """
    Display configuration settings.

    Shows all configuration or a specific section. Secrets are never shown.
    """
    from notely.core.config import get_app_config

    try:
        app_config = get_app_config()
    except (RuntimeError, FileNotFoundError, ValueError) as e:
        fail(f"Error loading configuration: {e}")

    sections: dict[str, BaseModel] = {
        "application": app_config.application,
        "logging": app_config.logging,
        "features": app_config.features,
        "integrations": app_config.integrations,
    }

    if section:
        if section not in sections:
            console.print(f"[red]Unknown section: {section}[/red]")
            console.print(f"Available sections: {', '.join(sections.keys())}")
            raise typer.Exit(1)
        _display_config_section(section, sections[section].model_dump())
        return

    for name, data in sections.items():
        _display_config_section(name, data.model_dump())
        console.print()


def _display_config_section(name: str, data: dict[str, Any]) -> None:
    """Display a configuration section as a tree."""
    tree = Tree(f"[bold cyan]{name}[/bold cyan]")

    def add_items(parent: Tree, items: dict[str, Any]) -> None:
        for key, value in items.items():
            if isinstance(value, dict):
                branch = parent.add(f"[cyan]{key}[/cyan]")
                add_items(branch, value)
            else:
                parent.add(f"[cyan]{key}[/cyan]: {value}")

    add_items(tree, data)
    console.print(tree)


@app.command()
def version() -> None:
    """
    Display version information.
    """
    from notely import __version__

    console.print(f"[bold]{__version__}[/bold]")
