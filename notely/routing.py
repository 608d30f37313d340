"""
Route Guard.

Decides which view a request for a path actually lands on, given the
current session. The terminal front end consults it before every command
that needs a session.
"""

from notely.schemas.user import User
from notely.stores.session import SessionStore

HOME_ROUTE = "/"
LOGIN_ROUTE = "/login"
REGISTER_ROUTE = "/register"
APP_PREFIX = "/app"
ONBOARDING_ROUTE = "/app/onboarding"
DASHBOARD_ROUTE = "/app/dashboard"

PUBLIC_ROUTES = frozenset({HOME_ROUTE, LOGIN_ROUTE, REGISTER_ROUTE})


def is_protected(path: str) -> bool:
    return path == APP_PREFIX or path.startswith(APP_PREFIX + "/")


def landing_route(user: User | None) -> str:
    """Where a user goes right after logging in or signing up."""
    if user is None:
        return LOGIN_ROUTE
    if not user.has_completed_onboarding:
        return ONBOARDING_ROUTE
    return DASHBOARD_ROUTE


def resolve_route(session: SessionStore, path: str) -> str:
    """
    Return the route to show for path.

    - Protected routes need a user; without one the answer is the login page.
    - A user who has not finished onboarding is held on the onboarding route.
    - A user who has finished it is moved off the onboarding route.
    - Public routes are always reachable.
    """
    if not is_protected(path):
        return path

    user = session.user
    if user is None or not session.is_authenticated:
        return LOGIN_ROUTE
    if not user.has_completed_onboarding and path != ONBOARDING_ROUTE:
        return ONBOARDING_ROUTE
    if user.has_completed_onboarding and path == ONBOARDING_ROUTE:
        return DASHBOARD_ROUTE
    return path
