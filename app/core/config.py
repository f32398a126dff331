from functools import lru_cache
from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _env(name: str) -> AliasChoices:
    # accept both the env var name and the field name (tests construct by field)
    return AliasChoices(name, name.lower())


class Settings(BaseSettings):
    """Application settings loaded from environment (and .env) with defaults.

    OXR_APP_ID and AUTH_TOKEN are required; constructing Settings without them
    raises pydantic.ValidationError, which is fatal at startup.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Basic app metadata
    app_name: str = "Currency Converter API"
    debug: bool = Field(default=False, validation_alias=_env("DEBUG"))
    version: str = "0.1.0"

    # Upstream provider
    oxr_app_id: str = Field(..., min_length=1, validation_alias=_env("OXR_APP_ID"))
    oxr_base_url: str = Field(
        default="https://openexchangerates.org/api",
        validation_alias=_env("OXR_BASE_URL"),
    )
    http_timeout_seconds: float = Field(
        default=10.0, gt=0, le=60, validation_alias=_env("HTTP_TIMEOUT_SECONDS")
    )
    http_retries: int = Field(default=2, ge=0, le=5, validation_alias=_env("HTTP_RETRIES"))

    # API auth
    auth_token: str = Field(..., min_length=1, validation_alias=_env("AUTH_TOKEN"))

    # Server
    host: str = Field(default="0.0.0.0", validation_alias=_env("HOST"))
    port: int = Field(default=3000, ge=1, le=65535, validation_alias=_env("PORT"))

    # Cache & refresh
    data_dir: Path = Field(default=Path("data"), validation_alias=_env("DATA_DIR"))
    rates_ttl_seconds: int = Field(
        default=3600, gt=0, validation_alias=_env("RATES_TTL_SECONDS")
    )
    symbols_ttl_seconds: int = Field(
        default=86400, gt=0, validation_alias=_env("SYMBOLS_TTL_SECONDS")
    )
    enable_background_refresh: bool = Field(
        default=True, validation_alias=_env("ENABLE_BACKGROUND_REFRESH")
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
