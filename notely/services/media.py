"""
Media Upload.

Uploads avatar images to the configured image host (an unsigned upload
endpoint with an upload preset) and returns the hosted URL.
"""

from pathlib import Path

import httpx

from notely.core.config import get_app_config, get_settings
from notely.core.exceptions import ExternalServiceError, NotConfiguredError, ValidationError
from notely.core.logging import get_logger, log_with_source

logger = get_logger(__name__)

ALLOWED_SUFFIXES = frozenset({".png", ".jpg", ".jpeg", ".gif", ".webp"})


class MediaUploader:
    """
    Client for the image host.

    Usage:
        uploader = MediaUploader.from_config()
        url = await uploader.upload(Path("me.png"))
    """

    def __init__(
        self,
        upload_url: str,
        upload_preset: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.upload_url = upload_url
        self.upload_preset = upload_preset
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_config(cls, transport: httpx.AsyncBaseTransport | None = None) -> "MediaUploader":
        media = get_app_config().integrations.media
        return cls(
            upload_url=media.upload_url,
            upload_preset=get_settings().media_upload_preset,
            timeout=media.timeout_seconds,
            transport=transport,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.upload_url and self.upload_preset)

    async def upload(self, path: Path) -> str:
        """
        Upload an image file.

        Args:
            path: Local image file

        Returns:
            The HTTPS URL of the hosted image

        Raises:
            NotConfiguredError: If no upload URL or preset is configured
            ValidationError: If the file is missing or not an image
            ExternalServiceError: If the host rejects the upload
        """
        if not self.is_configured:
            raise NotConfiguredError("Image upload is not configured")
        if not path.is_file():
            raise ValidationError("Image file not found", details={"file": f"No such file: {path}"})
        if path.suffix.lower() not in ALLOWED_SUFFIXES:
            raise ValidationError(
                "Unsupported image type",
                details={"file": "Please choose a PNG, JPEG, GIF or WebP image"},
            )

        log_with_source(logger, "services", "info", "Uploading image", file=path.name)

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(
                    self.upload_url,
                    data={"upload_preset": self.upload_preset},
                    files={"file": (path.name, path.read_bytes())},
                )
        except httpx.TransportError as e:
            log_with_source(logger, "services", "error", "Image upload failed", error=str(e))
            raise ExternalServiceError("Could not reach the image host") from e

        if response.is_error:
            log_with_source(
                logger, "services", "error", "Image host rejected upload",
                status_code=response.status_code,
            )
            raise ExternalServiceError(f"Image upload failed ({response.status_code})")

        url = response.json().get("secure_url")
        if not url:
            raise ExternalServiceError("Image host returned no URL")

        log_with_source(logger, "services", "info", "Image uploaded", url=url)
        return url
