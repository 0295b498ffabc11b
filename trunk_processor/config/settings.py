import json
from typing import Annotated, Optional
from urllib.parse import quote_plus

from pydantic import Field, SecretStr, ValidationError, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from trunk_processor.errors import ConfigurationError


def _split_list(value):
    """Accept JSON arrays or comma separated strings for list settings."""

    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            return None
        if stripped.startswith("["):
            return json.loads(stripped)
        return [item.strip() for item in stripped.split(",") if item.strip()]
    return value


class DatabaseConfig(BaseSettings):
    """Database configuration"""

    url_override: Optional[str] = Field(
        default=None,
        validation_alias="DATABASE_URL",
        description="Full SQLAlchemy URL; takes precedence over the individual parts.",
    )
    host: str = "localhost"
    port: int = 5432
    username: str = "postgres"
    password: SecretStr = Field(default=SecretStr("postgres"))
    database: str = "trunk_processor"
    pool_size: int = Field(default=10, ge=1)
    pool_timeout: float = Field(
        default=5.0,
        gt=0,
        description="Seconds to wait for a pooled connection before failing.",
    )
    reference_upserts_in_transaction: bool = Field(
        default=False,
        description="Fold source/talkgroup upserts into the call transaction.",
    )
    create_tables: bool = True

    @property
    def url(self) -> str:
        """Get database URL"""
        if self.url_override:
            return self.url_override
        username = quote_plus(self.username)
        password = quote_plus(self.password.get_secret_value())
        return (
            "postgresql+asyncpg://"
            f"{username}:{password}"
            f"@{self.host}:{self.port}/{self.database}"
        )

    model_config = SettingsConfigDict(
        env_prefix="DB_",
        env_file=".env",
        secrets_dir=".secrets",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )


class S3Config(BaseSettings):
    """S3 configuration"""

    access_key: Optional[str] = None
    secret_key: Optional[str] = None
    region: str = "us-east-1"
    bucket_name: str = ""
    endpoint_url: Optional[str] = None
    connect_timeout: float = 20.0
    read_timeout: float = 60.0

    model_config = SettingsConfigDict(
        env_prefix="S3_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )


class TranscriptionConfig(BaseSettings):
    """Speech-to-text endpoint configuration."""

    endpoint: str = Field(
        default="",
        validation_alias="TRANSCRIPTION_ENDPOINT",
    )
    model_name: str = Field(
        default="whisper-1",
        validation_alias="MODEL_NAME",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )


class WebhookConfig(BaseSettings):
    """Notification webhook configuration."""

    url: str = Field(
        default="",
        validation_alias="DISCORD_WEBHOOK",
    )
    username: str = Field(
        default="Trunk Recorder",
        validation_alias="WEBHOOK_USERNAME",
    )
    avatar_url: str = Field(
        default=(
            "https://raw.githubusercontent.com/TrunkRecorder/trunkrecorder.github.io"
            "/refs/heads/main/static/img/radio.png"
        ),
        validation_alias="WEBHOOK_AVATAR_URL",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )


class FilterConfig(BaseSettings):
    """Talkgroup include/exclude lists deciding which calls get transcribed.

    ``tg_id`` entries are bare talkgroup ids to allow or ``!``-prefixed ids to
    deny. ``tg_group`` entries are talkgroup group names to allow. When neither
    list is set, ``default_transcribe`` decides.
    """

    tg_id: Annotated[Optional[list[str]], NoDecode] = None
    tg_group: Annotated[Optional[list[str]], NoDecode] = None
    default_transcribe: bool = False

    @field_validator("tg_id", "tg_group", mode="before")
    @classmethod
    def _parse_list(cls, value):
        return _split_list(value)

    @field_validator("tg_id", mode="after")
    @classmethod
    def _strip_ids(cls, value: Optional[list[str]]) -> Optional[list[str]]:
        if value is None:
            return None
        return [str(item).strip() for item in value]

    def enabled(self) -> bool:
        return self.tg_id is not None or self.tg_group is not None

    def ids(self) -> list[str]:
        return list(self.tg_id or [])

    def groups(self) -> list[str]:
        return list(self.tg_group or [])

    model_config = SettingsConfigDict(
        env_prefix="FILTER_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )


class UploadConfig(BaseSettings):
    """Multipart intake limits."""

    max_file_size: int = Field(default=50 * 1024 * 1024, gt=0)
    audio_extensions: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: [".m4a", ".wav"]
    )

    @field_validator("audio_extensions", mode="before")
    @classmethod
    def _parse_extensions(cls, value):
        return _split_list(value) or []

    @field_validator("audio_extensions", mode="after")
    @classmethod
    def _dotted(cls, value: list[str]) -> list[str]:
        return [ext if ext.startswith(".") else f".{ext}" for ext in value]

    model_config = SettingsConfigDict(
        env_prefix="UPLOAD_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )


class Settings(BaseSettings):
    """Application settings"""

    app_name: str = "trunk-processor"
    app_version: str = "0.1.0"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"
    log_file: Optional[str] = None
    http_timeout: float = 60.0
    http_connect_timeout: float = 20.0

    # Database
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)

    # S3
    s3: S3Config = Field(default_factory=S3Config)

    # Speech-to-text
    transcription: TranscriptionConfig = Field(default_factory=TranscriptionConfig)

    # Notifications
    webhook: WebhookConfig = Field(default_factory=WebhookConfig)

    # Transcription filter
    filter: FilterConfig = Field(default_factory=FilterConfig)

    # Multipart intake
    upload: UploadConfig = Field(default_factory=UploadConfig)

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    def check_required(self) -> None:
        """Raise ConfigurationError when a collaborator the service needs is unset."""

        missing: list[str] = []
        if not self.s3.bucket_name:
            missing.append("S3_BUCKET_NAME")
        if self.filter.enabled() or self.filter.default_transcribe:
            if not self.transcription.endpoint:
                missing.append("TRANSCRIPTION_ENDPOINT")
            if not self.webhook.url:
                missing.append("DISCORD_WEBHOOK")
        if missing:
            raise ConfigurationError(
                "Environment configuration error: missing " + ", ".join(missing)
            )


def load_settings(**overrides) -> Settings:
    """Build settings from the environment, wrapping validation failures."""

    try:
        settings = Settings(**overrides)
    except (ValidationError, ValueError) as exc:
        raise ConfigurationError(f"Environment configuration error: {exc}") from exc
    settings.check_required()
    return settings
