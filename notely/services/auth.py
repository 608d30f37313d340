"""
Auth Service.

Login, signup, logout and password change. Successful calls write into
the SessionStore; failures leave one human-readable message in
``session.error`` and re-raise.
"""

from notely.client.api import NotelyAPI
from notely.core.exceptions import ApplicationError, AuthenticationError, describe_error
from notely.routing import LOGIN_ROUTE, landing_route
from notely.schemas.user import LoginRequest, PasswordChange, SignupRequest
from notely.services.base import BaseService
from notely.services.validators import (
    validate_login,
    validate_password_change,
    validate_signup,
)
from notely.stores.session import SessionStore
from notely.sync.query_cache import QueryCache

LOGIN_FAILED_MESSAGE = "Login failed. Please try again."
SIGNUP_FAILED_MESSAGE = "Signup failed. Please try again."
PASSWORD_FAILED_MESSAGE = "Failed to change password. Please try again."

LOGIN_STATUS_MESSAGES = {
    401: "Invalid email/username or password.",
    404: "User not found. Please check your credentials.",
    500: "Server error. Please try again later.",
}

SIGNUP_STATUS_MESSAGES = {
    409: "An account with that email or username already exists.",
    500: "Server error. Please try again later.",
}


class AuthService(BaseService):
    """
    Account session lifecycle.

    Usage:
        auth = AuthService(api, session, cache)
        route = await auth.login("ada", "secret")
    """

    def __init__(self, api: NotelyAPI, session: SessionStore, cache: QueryCache) -> None:
        super().__init__(api)
        self.session = session
        self.cache = cache

    async def login(self, identifier: str, password: str) -> str:
        """
        Authenticate with email or username.

        Returns:
            The route to land on (onboarding or dashboard)

        Raises:
            ValidationError: If the form is incomplete
            ApplicationError: If the API rejects the login
        """
        self._raise_if_invalid(validate_login(identifier, password), "Invalid login details")

        self._log_operation("Logging in")
        self.session.clear_error()
        self.session.set_loading(True)
        try:
            payload = await self.api.login(LoginRequest(identifier=identifier.strip(), password=password))
        except ApplicationError as e:
            self.session.set_error(describe_error(e, LOGIN_FAILED_MESSAGE, LOGIN_STATUS_MESSAGES))
            self._log_failure("Login", e)
            raise
        finally:
            self.session.set_loading(False)

        self.cache.clear()
        self.session.set_auth(payload.user, payload.jwt_token)
        return landing_route(payload.user)

    async def signup(
        self,
        first_name: str,
        last_name: str,
        username: str,
        email: str,
        password: str,
    ) -> str:
        """
        Register a new account and start its session.

        Returns:
            The route to land on, normally onboarding
        """
        self._raise_if_invalid(
            validate_signup(first_name, last_name, username, email, password),
            "Invalid signup details",
        )

        self._log_operation("Signing up", username=username)
        self.session.clear_error()
        self.session.set_loading(True)
        try:
            payload = await self.api.register(SignupRequest(
                first_name=first_name.strip(),
                last_name=last_name.strip(),
                username=username.strip(),
                email=email.strip(),
                password=password,
            ))
        except ApplicationError as e:
            self.session.set_error(describe_error(e, SIGNUP_FAILED_MESSAGE, SIGNUP_STATUS_MESSAGES))
            self._log_failure("Signup", e)
            raise
        finally:
            self.session.set_loading(False)

        self.cache.clear()
        self.session.set_auth(payload.user, payload.jwt_token)
        return landing_route(payload.user)

    def logout(self) -> str:
        """End the session locally and drop every cached query."""
        self._log_operation("Logging out")
        self.cache.clear()
        self.session.logout()
        return LOGIN_ROUTE

    async def change_password(self, current: str, new: str, confirm: str) -> None:
        """
        Change the account password.

        Raises:
            ValidationError: If the form is invalid
            AuthenticationError: If nobody is logged in
            ApplicationError: If the API rejects the change
        """
        self._raise_if_invalid(validate_password_change(current, new, confirm), "Invalid password change")
        if not self.session.is_authenticated:
            raise AuthenticationError("You need to log in first")

        self._log_operation("Changing password")
        self.session.clear_error()
        self.session.set_loading(True)
        try:
            await self.api.change_password(PasswordChange(current_password=current, new_password=new))
        except ApplicationError as e:
            self.session.set_error(describe_error(e, PASSWORD_FAILED_MESSAGE))
            self._log_failure("Password change", e)
            raise
        finally:
            self.session.set_loading(False)
