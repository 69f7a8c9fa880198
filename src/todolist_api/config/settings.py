"""Application settings."""

from functools import lru_cache
from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

PROJECT_ROOT = Path(__file__).resolve().parents[3]


class Settings(BaseSettings):
    """Runtime settings loaded from environment variables and ``.env`` files.

    ``port``, ``database_url`` and ``secret_key`` also accept the unprefixed
    ``PORT``, ``DATABASE_URL`` and ``SECRET_KEY``; the prefixed name wins.
    """

    app_name: str = "todolist-api"
    host: str = "0.0.0.0"
    port: int = Field(
        default=5000,
        ge=1,
        le=65535,
        validation_alias=AliasChoices("TODOLIST_PORT", "PORT"),
    )
    log_level: str = "INFO"
    database_url: str = Field(
        default="",
        validation_alias=AliasChoices("TODOLIST_DATABASE_URL", "DATABASE_URL"),
    )
    db_connect_timeout_s: int = Field(default=5, ge=1)
    secret_key: str = Field(
        default="",
        validation_alias=AliasChoices("TODOLIST_SECRET_KEY", "SECRET_KEY"),
    )
    token_ttl_s: int = Field(default=3600, ge=1)
    bcrypt_rounds: int = Field(default=10, ge=4, le=31)
    # The Authorization header is the token verbatim unless this is enabled.
    strip_bearer_prefix: bool = False
    cors_allow_origins: list[str] = Field(default_factory=lambda: ["*"])

    model_config = SettingsConfigDict(
        env_prefix="TODOLIST_",
        extra="ignore",
        populate_by_name=True,
        env_file=(PROJECT_ROOT / ".env", PROJECT_ROOT / ".env.local"),
        env_file_encoding="utf-8",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
