"""
Note Schemas.

Pydantic schemas for note records, request payloads and response bodies.
"""

from datetime import datetime, timezone

from pydantic import AliasChoices, ConfigDict, Field, field_validator, model_validator

from notely.schemas.base import CamelModel


class Note(CamelModel):
    """A single user-authored note as returned by the API and cached locally."""

    id: str = Field(min_length=1, description="Server-assigned identifier")
    title: str = ""
    synopsis: str = ""
    content: str = Field(default="", description="Markdown body")
    date_created: datetime
    last_updated: datetime
    is_deleted: bool = False
    is_pinned: bool = False
    is_bookmarked: bool = Field(
        default=False,
        validation_alias=AliasChoices("isBookmarked", "isBookMarked", "is_bookmarked"),
    )
    user_id: str | None = None

    model_config = ConfigDict(frozen=True)

    @field_validator("date_created", "last_updated")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @model_validator(mode="after")
    def _check_timestamps(self) -> "Note":
        if self.last_updated < self.date_created:
            raise ValueError("lastUpdated must not be earlier than dateCreated")
        return self


class NoteCreate(CamelModel):
    """Payload for creating a note."""

    title: str
    synopsis: str = ""
    content: str = ""


class NoteUpdate(CamelModel):
    """Payload for a partial note update. Unset fields are not sent."""

    title: str | None = None
    synopsis: str | None = None
    content: str | None = None
    is_deleted: bool | None = None
    is_pinned: bool | None = None
    is_bookmarked: bool | None = None

    def changes(self) -> dict[str, object]:
        """Snake-case map of the fields the caller actually set."""
        return self.model_dump(exclude_unset=True)


class NoteListData(CamelModel):
    entries: list[Note] = Field(default_factory=list)


class NoteData(CamelModel):
    entry: Note
