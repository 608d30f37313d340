"""
CLI Commands.

Organized by feature area.
"""

from notely.cli.commands.auth import app as auth_app
from notely.cli.commands.dashboard import app as dashboard_app
from notely.cli.commands.notes import app as notes_app
from notely.cli.commands.onboarding import app as onboarding_app
from notely.cli.commands.profile import app as profile_app
from notely.cli.commands.system import app as system_app

__all__ = [
    "auth_app",
    "dashboard_app",
    "notes_app",
    "onboarding_app",
    "profile_app",
    "system_app",
]
