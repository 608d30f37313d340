"""
Pydantic schemas for the Notely API.

Wire format is camelCase; Python attributes are snake_case.
"""

from notely.schemas.base import ApiEnvelope, ErrorBody
from notely.schemas.note import Note, NoteCreate, NoteUpdate
from notely.schemas.user import (
    AuthPayload,
    LoginRequest,
    PasswordChange,
    ProfileUpdate,
    SignupRequest,
    User,
)

__all__ = [
    "ApiEnvelope",
    "AuthPayload",
    "ErrorBody",
    "LoginRequest",
    "Note",
    "NoteCreate",
    "NoteUpdate",
    "PasswordChange",
    "ProfileUpdate",
    "SignupRequest",
    "User",
]
