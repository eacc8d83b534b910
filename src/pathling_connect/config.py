"""
pathling-connect Configuration Module

Centralized configuration management using Pydantic Settings.
Supports environment variables and .env files.

The aggregated Settings value is built once at process start and handed to
whatever needs it; nothing in the library reads the environment on its own.
"""

from typing import Optional
from urllib.parse import urlparse

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from pathling_connect.errors import ConfigurationError


class AppSettings(BaseSettings):
    """Process-wide settings."""

    model_config = SettingsConfigDict(
        env_prefix="PATHLING_CONNECT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = "INFO"
    log_json: bool = True

    # Seconds; unset means requests wait until the server responds
    request_timeout: Optional[float] = None


class EndpointSettings(BaseSettings):
    """A FHIR endpoint, optionally protected by SMART Backend Services."""

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    endpoint: str = ""
    client_id: Optional[str] = None
    client_secret: Optional[SecretStr] = None
    scopes: str = "system/*.read"

    # Discovered from .well-known/smart-configuration when not set
    token_endpoint: Optional[str] = None

    @property
    def base_url(self) -> str:
        """Endpoint without a trailing slash."""
        if not self.endpoint:
            raise ConfigurationError(
                f"No endpoint configured ({self.model_config.get('env_prefix')}ENDPOINT)"
            )
        return self.endpoint.rstrip("/")

    @property
    def requires_auth(self) -> bool:
        return bool(self.client_id)


class SourceSettings(EndpointSettings):
    """Source FHIR server that bulk data is exported from."""

    model_config = SettingsConfigDict(
        env_prefix="SOURCE_",
        env_file=".env",
        extra="ignore",
    )

    # Comma-separated resource types passed as _type
    types: Optional[str] = None

    # FHIR instant passed as _since
    since: Optional[str] = None

    @property
    def type_list(self) -> list[str]:
        if not self.types:
            return []
        return [t.strip() for t in self.types.split(",") if t.strip()]


class TargetSettings(EndpointSettings):
    """Pathling server that staged data is imported into."""

    model_config = SettingsConfigDict(
        env_prefix="TARGET_",
        env_file=".env",
        extra="ignore",
    )

    scopes: str = "system/*.write"


class StagingSettings(BaseSettings):
    """S3 location that exported files are staged in before import."""

    model_config = SettingsConfigDict(
        env_prefix="STAGING_",
        env_file=".env",
        extra="ignore",
    )

    url: str = ""
    region: str = "us-east-1"
    endpoint_url: Optional[str] = None

    @property
    def bucket(self) -> str:
        return self._parsed()[0]

    @property
    def prefix(self) -> str:
        return self._parsed()[1]

    def _parsed(self) -> tuple[str, str]:
        parsed = urlparse(self.url)
        if parsed.scheme != "s3" or not parsed.netloc:
            raise ConfigurationError(
                f"Staging URL must be of the form s3://bucket/prefix, got {self.url!r}"
            )
        return parsed.netloc, parsed.path.strip("/")


class Settings:
    """
    Aggregated settings container.

    Usage:
        from pathling_connect.config import Settings
        settings = Settings.from_environment()
        print(settings.target.base_url)
    """

    def __init__(
        self,
        app: AppSettings = None,
        source: SourceSettings = None,
        target: TargetSettings = None,
        staging: StagingSettings = None,
    ):
        self.app = app or AppSettings()
        self.source = source or SourceSettings()
        self.target = target or TargetSettings()
        self.staging = staging or StagingSettings()

    @classmethod
    def from_environment(cls) -> "Settings":
        """Read every settings group from the environment and .env file."""
        return cls(
            app=AppSettings(),
            source=SourceSettings(),
            target=TargetSettings(),
            staging=StagingSettings(),
        )
