"""Unit tests for ProfileService and MediaUploader."""

import httpx
import pytest

from notely.core.exceptions import (
    AuthenticationError,
    ConflictError,
    ExternalServiceError,
    NotConfiguredError,
    ValidationError,
)
from notely.services.media import MediaUploader
from notely.services.profile import ProfileService


@pytest.fixture
def image(tmp_path):
    path = tmp_path / "me.png"
    path.write_bytes(b"\x89PNG fake image")
    return path


class TestUpdateProfile:
    @pytest.mark.asyncio
    async def test_merges_server_record(self, notely_app, fake_server, logged_in):
        user = logged_in(notely_app)

        updated = await notely_app.profile.update_profile(
            "Ada", "King", "ada", "ada@example.com", bio="Mathematician",
        )

        assert updated.last_name == "King"
        assert notely_app.session.user.bio == "Mathematician"
        assert notely_app.session.user.id == user["id"]
        assert fake_server.users[user["id"]]["lastName"] == "King"

    @pytest.mark.asyncio
    async def test_merge_keeps_token_and_onboarding(self, notely_app, logged_in):
        logged_in(notely_app)
        token = notely_app.session.token

        await notely_app.profile.update_profile("Ada", "King", "ada", "ada@example.com")

        assert notely_app.session.token == token
        assert notely_app.session.user.has_completed_onboarding is True

    @pytest.mark.asyncio
    async def test_invalid_profile_sends_nothing(self, notely_app, fake_server, logged_in):
        logged_in(notely_app)

        with pytest.raises(ValidationError) as exc_info:
            await notely_app.profile.update_profile("", "King", "ada", "nope")

        assert set(exc_info.value.details) == {"first_name", "email"}
        assert fake_server.count("PATCH", "/user") == 0

    @pytest.mark.asyncio
    async def test_requires_login(self, notely_app):
        with pytest.raises(AuthenticationError):
            await notely_app.profile.update_profile("Ada", "King", "ada", "ada@example.com")

    @pytest.mark.asyncio
    async def test_server_rejection_keeps_user(self, notely_app, fake_server, logged_in):
        logged_in(notely_app)
        fake_server.fail("PATCH", "/user", 409, message="Username already taken")

        with pytest.raises(ConflictError):
            await notely_app.profile.update_profile("Ada", "King", "taken", "ada@example.com")

        assert notely_app.session.error == "Username already taken"
        assert notely_app.session.user.last_name == "Lovelace"
        assert notely_app.session.is_loading is False


class TestAvatar:
    @pytest.mark.asyncio
    async def test_update_avatar_url(self, notely_app, fake_server, logged_in):
        user = logged_in(notely_app)

        await notely_app.profile.update_avatar("https://media.test/a.png")

        assert notely_app.session.user.avatar == "https://media.test/a.png"
        assert fake_server.users[user["id"]]["avatar"] == "https://media.test/a.png"

    @pytest.mark.asyncio
    async def test_upload_avatar(self, notely_app, fake_server, logged_in, image):
        logged_in(notely_app)

        updated = await notely_app.profile.upload_avatar(image)

        assert updated.avatar == "https://media.test/avatars/1.png"
        assert len(fake_server.uploads) == 1
        assert b"notely-avatars" in fake_server.uploads[0]

    @pytest.mark.asyncio
    async def test_missing_file(self, notely_app, fake_server, logged_in, tmp_path):
        logged_in(notely_app)

        with pytest.raises(ValidationError) as exc_info:
            await notely_app.profile.upload_avatar(tmp_path / "missing.png")

        assert "file" in exc_info.value.details
        assert fake_server.uploads == []

    @pytest.mark.asyncio
    async def test_unsupported_type(self, notely_app, fake_server, logged_in, tmp_path):
        logged_in(notely_app)
        document = tmp_path / "cv.pdf"
        document.write_bytes(b"%PDF")

        with pytest.raises(ValidationError):
            await notely_app.profile.upload_avatar(document)

        assert fake_server.uploads == []

    @pytest.mark.asyncio
    async def test_disabled_by_feature_flag(self, notely_app, logged_in, image):
        logged_in(notely_app)
        service = ProfileService(
            notely_app.api, notely_app.session, notely_app.profile.uploader, avatar_upload_enabled=False,
        )

        with pytest.raises(NotConfiguredError):
            await service.upload_avatar(image)

    @pytest.mark.asyncio
    async def test_uploader_without_preset(self, notely_app, logged_in, image):
        logged_in(notely_app)
        service = ProfileService(notely_app.api, notely_app.session, MediaUploader("https://media.test/upload", ""))

        with pytest.raises(NotConfiguredError):
            await service.upload_avatar(image)

    @pytest.mark.asyncio
    async def test_upload_requires_login(self, notely_app, fake_server, image):
        with pytest.raises(AuthenticationError):
            await notely_app.profile.upload_avatar(image)

        assert fake_server.uploads == []


class TestMediaUploader:
    @pytest.mark.asyncio
    async def test_host_rejection(self, image):
        uploader = MediaUploader(
            "https://media.test/upload",
            "preset",
            transport=httpx.MockTransport(lambda request: httpx.Response(500)),
        )

        with pytest.raises(ExternalServiceError, match="500"):
            await uploader.upload(image)

    @pytest.mark.asyncio
    async def test_missing_url_in_response(self, image):
        uploader = MediaUploader(
            "https://media.test/upload",
            "preset",
            transport=httpx.MockTransport(lambda request: httpx.Response(200, json={})),
        )

        with pytest.raises(ExternalServiceError, match="no URL"):
            await uploader.upload(image)

    @pytest.mark.asyncio
    async def test_unreachable_host(self, image):
        def refuse(request):
            raise httpx.ConnectError("refused", request=request)

        uploader = MediaUploader("https://media.test/upload", "preset", transport=httpx.MockTransport(refuse))

        with pytest.raises(ExternalServiceError, match="reach"):
            await uploader.upload(image)

    def test_is_configured(self):
        assert MediaUploader("https://media.test/upload", "preset").is_configured
        assert not MediaUploader("", "preset").is_configured
