"""
Configuration Schemas.

Pydantic models defining the expected structure of each YAML config file.
Used by AppConfig to validate configuration at load time. If a YAML file
has missing keys, wrong types, or unknown fields, a clear ValidationError
is raised at startup instead of a cryptic KeyError deep in application code.

Each top-level class corresponds to one file in config/settings/:
    ApplicationSchema   → application.yaml
    LoggingSchema       → logging.yaml
    FeaturesSchema      → features.yaml
    IntegrationsSchema  → integrations.yaml
"""

from pydantic import BaseModel, ConfigDict, Field


class _StrictBase(BaseModel):
    """Base with extra='forbid' so unknown YAML keys are caught immediately."""

    model_config = ConfigDict(extra="forbid")


# =============================================================================
# application.yaml
# =============================================================================


class EndpointsSchema(_StrictBase):
    """Path templates for the remote API. Placeholders use str.format names."""

    login: str
    register: str
    change_password: str
    user: str
    notes: str
    note: str
    create_note: str
    pin_note: str
    bookmark_note: str
    trash: str


class ApiSchema(_StrictBase):
    base_url: str
    timeout_seconds: float = Field(gt=0)
    frontend_id: str
    endpoints: EndpointsSchema


class ReadsSchema(_StrictBase):
    retry_attempts: int = Field(ge=0)
    retry_delay_seconds: float = Field(ge=0)


class StorageKeysSchema(_StrictBase):
    token: str
    session: str
    notes: str


class StorageSchema(_StrictBase):
    directory: str
    keys: StorageKeysSchema


class ApplicationSchema(_StrictBase):
    name: str
    version: str
    description: str
    environment: str
    debug: bool
    api: ApiSchema
    reads: ReadsSchema
    storage: StorageSchema


# =============================================================================
# logging.yaml
# =============================================================================


class ConsoleHandlerSchema(_StrictBase):
    enabled: bool


class FileHandlerSchema(_StrictBase):
    enabled: bool
    path: str
    max_bytes: int
    backup_count: int


class HandlersSchema(_StrictBase):
    console: ConsoleHandlerSchema
    file: FileHandlerSchema


class LoggingSchema(_StrictBase):
    level: str
    format: str
    handlers: HandlersSchema


# =============================================================================
# features.yaml
# =============================================================================


class FeaturesSchema(_StrictBase):
    ai_sentiment_enabled: bool
    avatar_upload_enabled: bool
    onboarding_first_note_enabled: bool


# =============================================================================
# integrations.yaml
# =============================================================================


class SentimentSchema(_StrictBase):
    model: str
    neutral_band: float = Field(ge=0, le=1)


class MediaSchema(_StrictBase):
    upload_url: str
    timeout_seconds: float = Field(gt=0)


class IntegrationsSchema(_StrictBase):
    sentiment: SentimentSchema
    media: MediaSchema
