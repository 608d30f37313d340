"""
User Schemas.

Account profile, authentication payloads and profile update requests.
"""

from datetime import datetime

from pydantic import AliasChoices, ConfigDict, Field, field_serializer

from notely.schemas.base import CamelModel


class User(CamelModel):
    """The authenticated account."""

    id: str
    first_name: str = ""
    last_name: str = ""
    username: str = ""
    email: str = ""
    bio: str | None = None
    avatar: str | None = Field(
        default=None,
        validation_alias=AliasChoices("avatar", "avatarUrl"),
    )
    preferences: frozenset[str] = frozenset()
    has_completed_onboarding: bool = False
    date_joined: datetime | None = None

    model_config = ConfigDict(frozen=True)

    @field_serializer("preferences")
    def _sorted_preferences(self, preferences: frozenset[str]) -> list[str]:
        return sorted(preferences)

    @property
    def display_name(self) -> str:
        full_name = f"{self.first_name} {self.last_name}".strip()
        return full_name or self.username or self.email


class AuthPayload(CamelModel):
    """Body of a successful login or registration."""

    user: User
    jwt_token: str = Field(alias="jwt_token", min_length=1)


class UpdatedUserData(CamelModel):
    updated_user: User


class LoginRequest(CamelModel):
    identifier: str
    password: str


class SignupRequest(CamelModel):
    first_name: str
    last_name: str
    username: str
    email: str
    password: str


class ProfileUpdate(CamelModel):
    first_name: str
    last_name: str
    username: str
    email: str
    bio: str | None = None


class PasswordChange(CamelModel):
    current_password: str
    new_password: str
