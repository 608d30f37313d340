"""
Profile Service.

Edits the current user's profile and avatar. The server's updated record
is merged into the SessionStore only after the PATCH succeeds.
"""

from pathlib import Path

from notely.client.api import NotelyAPI
from notely.core.exceptions import (
    ApplicationError,
    AuthenticationError,
    NotConfiguredError,
    describe_error,
)
from notely.schemas.user import ProfileUpdate, User
from notely.services.base import BaseService
from notely.services.media import MediaUploader
from notely.services.validators import validate_profile
from notely.stores.session import SessionStore

PROFILE_FAILED_MESSAGE = "Failed to update profile. Please try again."
AVATAR_FAILED_MESSAGE = "Failed to update avatar. Please try again."


class ProfileService(BaseService):
    """
    Profile edits for the logged-in user.

    Args:
        api: API endpoint layer
        session: Session store holding the current user
        uploader: Image host client used for avatar files
        avatar_upload_enabled: Feature flag from features.yaml
    """

    def __init__(
        self,
        api: NotelyAPI,
        session: SessionStore,
        uploader: MediaUploader | None = None,
        avatar_upload_enabled: bool = True,
    ) -> None:
        super().__init__(api)
        self.session = session
        self.uploader = uploader
        self.avatar_upload_enabled = avatar_upload_enabled

    def _require_user(self) -> User:
        if self.session.user is None or not self.session.is_authenticated:
            raise AuthenticationError("You need to log in first")
        return self.session.user

    def _merge(self, updated: User) -> None:
        self.session.update_user(**updated.model_dump(exclude={"id"}))

    async def update_profile(
        self,
        first_name: str,
        last_name: str,
        username: str,
        email: str,
        bio: str | None = None,
    ) -> User:
        """
        Save profile fields.

        Raises:
            ValidationError: If a field is invalid
            AuthenticationError: If nobody is logged in
            ApplicationError: If the API rejects the update
        """
        self._raise_if_invalid(validate_profile(first_name, last_name, username, email), "Invalid profile")
        self._require_user()

        update = ProfileUpdate(
            first_name=first_name.strip(),
            last_name=last_name.strip(),
            username=username.strip(),
            email=email.strip(),
            bio=bio,
        )
        self._log_operation("Updating profile")
        self.session.clear_error()
        self.session.set_loading(True)
        try:
            updated = await self.api.update_user(update.to_wire(exclude_none=True))
        except ApplicationError as e:
            self.session.set_error(describe_error(e, PROFILE_FAILED_MESSAGE))
            self._log_failure("Profile update", e)
            raise
        finally:
            self.session.set_loading(False)

        self._merge(updated)
        return self.session.user or updated

    async def update_avatar(self, url: str) -> User:
        """Point the avatar at an already hosted image URL."""
        self._require_user()

        self._log_operation("Updating avatar")
        self.session.clear_error()
        try:
            updated = await self.api.update_user({"avatar": url})
        except ApplicationError as e:
            self.session.set_error(describe_error(e, AVATAR_FAILED_MESSAGE))
            self._log_failure("Avatar update", e)
            raise

        self._merge(updated)
        if self.session.user is not None and self.session.user.avatar is None:
            self.session.update_user(avatar=url)
        return self.session.user or updated

    async def upload_avatar(self, path: Path) -> User:
        """
        Upload an image file to the media host, then save it as the avatar.

        Raises:
            NotConfiguredError: If avatar upload is disabled or unconfigured
        """
        if not self.avatar_upload_enabled or self.uploader is None:
            raise NotConfiguredError("Avatar upload is disabled")
        self._require_user()

        try:
            url = await self.uploader.upload(path)
        except ApplicationError as e:
            self.session.set_error(describe_error(e, AVATAR_FAILED_MESSAGE))
            raise
        return await self.update_avatar(url)
