"""
HTTP Client.

Async HTTP client for the Notely REST API.

Every request carries the bearer token read from persisted token storage.
Any 401 response clears that token and notifies the owner through the
``on_unauthorized`` callback. Transport failures and error statuses are
translated into the typed exceptions of notely.core.exceptions.
"""

from typing import Any, Callable

import httpx

from notely.core.config import get_api_base_url, get_app_config
from notely.core.exceptions import (
    ApplicationError,
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NetworkError,
    NotFoundError,
    RequestTimeoutError,
    ServerError,
    ValidationError,
)
from notely.core.logging import get_logger, log_with_source
from notely.schemas.base import ErrorBody
from notely.stores.persistence import TokenStorage

logger = get_logger(__name__)


def _get_client_config() -> tuple[str, float, str]:
    """Load base URL, timeout and frontend id from application.yaml."""
    base_url, timeout = get_api_base_url()
    frontend_id = get_app_config().application.api.frontend_id
    return base_url, timeout, frontend_id


def error_from_response(response: httpx.Response) -> ApplicationError:
    """Build the typed exception for a non-2xx response."""
    try:
        body = ErrorBody.model_validate(response.json())
    except ValueError:
        body = ErrorBody()

    status = response.status_code
    message = body.message or f"HTTP {status}"
    details = body.field_errors()

    if status in (400, 422):
        exc: ApplicationError = ValidationError(message, details=details, status_code=status)
    elif status == 401:
        exc = AuthenticationError(message)
    elif status == 403:
        exc = AuthorizationError(message)
    elif status == 404:
        exc = NotFoundError(message, status_code=status)
    elif status == 409:
        exc = ConflictError(message)
    elif status >= 500:
        exc = ServerError(message, status_code=status)
    else:
        exc = ApplicationError(message, code="HTTP_ERROR", status_code=status)

    exc.server_message = body.message
    return exc


class APIClient:
    """
    HTTP client for Notely API communication.

    Features:
    - Base URL and timeout from config/settings/application.yaml
    - Bearer token attached from persisted storage on every request
    - Global 401 handling: token cleared, owner notified
    - Structured logging of requests/responses
    - Typed errors instead of raw httpx exceptions

    Usage:
        client = APIClient(tokens=tokens, on_unauthorized=session.expire)
        response = await client.get("/entries")
        body = await client.call("POST", "/entries", json={"title": "Hello"})
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        tokens: TokenStorage | None = None,
        on_unauthorized: Callable[[], None] | None = None,
        frontend_id: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the API client.

        Args:
            base_url: API base URL. If None, reads from config/settings/application.yaml.
            timeout: Request timeout in seconds. If None, reads from config/settings/application.yaml.
            tokens: Persisted bearer token storage.
            on_unauthorized: Called after a 401 response cleared the token.
            frontend_id: Value of the X-Frontend-ID header.
            transport: Optional httpx transport (tests use httpx.MockTransport).
        """
        try:
            config_base_url, config_timeout, config_frontend_id = _get_client_config()
        except Exception as e:
            if base_url is None:
                raise RuntimeError(
                    "Could not determine API URL from config/settings/application.yaml"
                ) from e
            config_base_url = base_url
            config_timeout = timeout if timeout is not None else 10.0
            config_frontend_id = "cli"

        self.base_url = (base_url or config_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else config_timeout
        self.frontend_id = frontend_id or config_frontend_id
        self._tokens = tokens
        self._on_unauthorized = on_unauthorized
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers={
                    "Content-Type": "application/json",
                    "X-Frontend-ID": self.frontend_id,
                },
                event_hooks={
                    "request": [self._attach_token],
                    "response": [self._handle_unauthorized],
                },
                transport=self._transport,
            )
        return self._client

    async def _attach_token(self, request: httpx.Request) -> None:
        token = self._tokens.get() if self._tokens is not None else None
        if token:
            request.headers["Authorization"] = f"Bearer {token}"

    async def _handle_unauthorized(self, response: httpx.Response) -> None:
        if response.status_code != 401:
            return
        log_with_source(
            logger, "api", "warning",
            "API rejected credentials, clearing token",
            path=response.request.url.path,
        )
        if self._tokens is not None:
            self._tokens.clear()
        if self._on_unauthorized is not None:
            self._on_unauthorized()

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def request(
        self,
        method: str,
        path: str,
        **kwargs: Any,
    ) -> httpx.Response:
        """
        Make an HTTP request to the API.

        Args:
            method: HTTP method (GET, POST, etc.)
            path: API path (e.g., /entries, /entry/abc)
            **kwargs: Additional arguments for httpx

        Returns:
            httpx.Response

        Raises:
            RequestTimeoutError: When the request exceeds the timeout
            NetworkError: When the API cannot be reached
        """
        client = await self._get_client()

        log_with_source(
            logger,
            "api",
            "debug",
            "API request",
            method=method,
            path=path,
        )

        try:
            response = await client.request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            log_with_source(
                logger, "api", "error", "API request timed out",
                method=method, path=path, error=str(e),
            )
            raise RequestTimeoutError() from e
        except httpx.TransportError as e:
            log_with_source(
                logger, "api", "error", "API request failed",
                method=method, path=path, error=str(e),
            )
            raise NetworkError() from e

        log_with_source(
            logger,
            "api",
            "debug",
            "API response",
            method=method,
            path=path,
            status_code=response.status_code,
        )
        return response

    async def call(self, method: str, path: str, **kwargs: Any) -> Any:
        """
        Make a request and return the decoded JSON body.

        Returns:
            The decoded body, or None for empty responses

        Raises:
            ApplicationError: Typed subclass for any non-2xx status
        """
        response = await self.request(method, path, **kwargs)
        if response.is_error:
            raise error_from_response(response)
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    async def get(self, path: str, **kwargs: Any) -> httpx.Response:
        """Make a GET request."""
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs: Any) -> httpx.Response:
        """Make a POST request."""
        return await self.request("POST", path, **kwargs)

    async def patch(self, path: str, **kwargs: Any) -> httpx.Response:
        """Make a PATCH request."""
        return await self.request("PATCH", path, **kwargs)

    async def delete(self, path: str, **kwargs: Any) -> httpx.Response:
        """Make a DELETE request."""
        return await self.request("DELETE", path, **kwargs)
