"""Application settings powered by Pydantic BaseSettings."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from wsdottie.constants import DEFAULT_TIMEOUT_SECONDS, WSDOT_HOST


class ApiSettings(BaseSettings):
    """Centralized environment configuration."""

    model_config = SettingsConfigDict(
        env_prefix="", case_sensitive=False, env_file=".env", env_file_encoding="utf-8"
    )

    access_token: str | None = Field(
        default=None, validation_alias="WSDOT_ACCESS_TOKEN"
    )
    force_relay: bool = Field(default=False, validation_alias="FORCE_JSONP")
    request_timeout_seconds: float = Field(
        default=DEFAULT_TIMEOUT_SECONDS,
        gt=0,
        validation_alias="WSDOTTIE_TIMEOUT_SECONDS",
    )
    log_level: str = Field(default="INFO", validation_alias="WSDOTTIE_LOG_LEVEL")
    json_logs: bool = Field(default=False, validation_alias="WSDOTTIE_JSON_LOGS")


class ApiConfig(BaseModel):
    """Immutable per-pipeline configuration.

    Carries the upstream access credential explicitly so that independent
    pipelines never share ambient credential state.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    access_token: str = Field(default="", description="Upstream access code")
    base_url: str = Field(
        default=WSDOT_HOST, description="Host prefix for relative templates"
    )
    request_timeout_seconds: float = Field(default=DEFAULT_TIMEOUT_SECONDS, gt=0)
    force_relay: bool = Field(
        default=False, description="Always use the script relay transport"
    )

    @classmethod
    def from_settings(cls, settings: ApiSettings) -> "ApiConfig":
        """Build a config from environment settings.

        Args:
            settings: Loaded application settings.

        Returns:
            ApiConfig carrying the configured credential.
        """
        return cls(
            access_token=settings.access_token or "",
            request_timeout_seconds=settings.request_timeout_seconds,
            force_relay=settings.force_relay,
        )


def get_settings() -> ApiSettings:
    """Get a settings instance."""
    return ApiSettings()
