"""
Base Schemas.

The canonical response envelope of the Notely API and shared model bases.

Success bodies always carry their payload under ``data``:

    {"data": {"entries": [...]}}          note lists
    {"data": {"entry": {...}}}            single notes
    {"data": {"user": {...}, "jwt_token": "..."}}
    {"data": {"updatedUser": {...}}}

Error bodies carry ``message`` and optionally ``errors`` (a field map or a
list of strings).
"""

from datetime import datetime, timezone
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def utc_now() -> datetime:
    """Return current UTC time as a timezone-aware datetime."""
    return datetime.now(timezone.utc)


def local_now() -> datetime:
    """Return current time in the local timezone, timezone-aware."""
    return datetime.now().astimezone()


class CamelModel(BaseModel):
    """Base for models exchanged with the API in camelCase."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_wire(self, **kwargs: Any) -> dict[str, Any]:
        """Serialize for a request body or the local cache."""
        return self.model_dump(mode="json", by_alias=True, **kwargs)


DataT = TypeVar("DataT")


class ApiEnvelope(BaseModel, Generic[DataT]):
    """Standard success envelope. Extra top-level keys are ignored."""

    data: DataT
    message: str | None = None


class ErrorBody(BaseModel):
    """Standard error body."""

    message: str | None = None
    errors: dict[str, Any] | list[Any] | None = None

    model_config = ConfigDict(extra="ignore")

    def field_errors(self) -> dict[str, str]:
        """Normalize ``errors`` into a field → message map."""
        if isinstance(self.errors, dict):
            return {field: str(message) for field, message in self.errors.items()}
        if isinstance(self.errors, list):
            return {str(index): str(message) for index, message in enumerate(self.errors)}
        return {}

