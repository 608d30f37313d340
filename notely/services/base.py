"""
Base Service.

Common patterns for the client-side services. Services orchestrate the
API endpoints and the local stores: they validate input, call the API,
and write confirmed results into the stores.

Usage:
    from notely.services.base import BaseService

    class ProfileService(BaseService):
        def __init__(self, api: NotelyAPI, session: SessionStore) -> None:
            super().__init__(api)
            self.session = session
"""

from typing import Any

from notely.client.api import NotelyAPI
from notely.core.exceptions import ValidationError
from notely.core.logging import get_logger, log_with_source


class BaseService:
    """
    Base class for all services.

    Provides:
    - Access to the API endpoint layer
    - Logging with the services source
    - Raising validator results as ValidationError
    """

    def __init__(self, api: NotelyAPI) -> None:
        self._api = api
        self._logger = get_logger(self.__class__.__module__)

    @property
    def api(self) -> NotelyAPI:
        return self._api

    def _raise_if_invalid(self, errors: dict[str, str], message: str = "Validation failed") -> None:
        """
        Raise when a validator reported any field errors.

        Args:
            errors: Field → message map returned by a validator
            message: Summary message for the exception

        Raises:
            ValidationError: If errors is not empty
        """
        if errors:
            self._log_debug("Input rejected", fields=sorted(errors))
            raise ValidationError(message, details=errors)

    def _log_operation(self, operation: str, **context: Any) -> None:
        log_with_source(
            self._logger, "services", "info", operation,
            service=self.__class__.__name__, **context,
        )

    def _log_debug(self, message: str, **context: Any) -> None:
        log_with_source(
            self._logger, "services", "debug", message,
            service=self.__class__.__name__, **context,
        )

    def _log_failure(self, operation: str, error: Exception) -> None:
        log_with_source(
            self._logger, "services", "warning", f"{operation} failed",
            service=self.__class__.__name__, error=str(error),
        )
