"""Configuration model for the bot."""

from __future__ import annotations

import os
from enum import Enum
from functools import lru_cache
from typing import Optional

from pydantic import Field, PositiveInt, SecretStr, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from suzbot.errors import ConfigurationError

ENV_PREFIX = "SUZ_"


class IdentityStrategy(str, Enum):
    """How already announced articles are recognised in the channel history."""

    URL = "url"
    DATE = "date"


class Settings(BaseSettings):
    """Environment settings, read once at startup."""

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )

    auth_token: SecretStr = Field(..., alias="SUZ_AUTH_TOKEN", description="Discord bot token.")
    channel_id: str = Field(..., alias="SUZ_CHANNEL_ID", description="Destination channel snowflake.")
    poll_interval_minutes: PositiveInt = Field(..., alias="SUZ_SLEEP_MINS", description="Sleep between polls (minutes).")
    domain: str = Field("suz.cvut.cz", alias="SUZ_DOMAIN", description="News site domain.")
    root_archive_url: str = Field(
        "https://www.suz.cvut.cz/cz/aktuality",
        alias="SUZ_ROOT_ARCHIVE_URL",
        description="Listing page archived after a cycle that published something.",
    )
    history_limit: PositiveInt = Field(32, alias="SUZ_HISTORY_LIMIT", description="Messages read back from the channel.")
    identity_strategy: IdentityStrategy = Field(
        IdentityStrategy.URL,
        alias="SUZ_IDENTITY_STRATEGY",
        description="url or date.",
    )
    http_timeout_seconds: PositiveInt = Field(15, alias="SUZ_HTTP_TIMEOUT_SECONDS", description="Page/Discord timeout.")
    archive_timeout_seconds: PositiveInt = Field(
        60,
        alias="SUZ_ARCHIVE_TIMEOUT_SECONDS",
        description="Wayback Machine save timeout.",
    )
    discord_api_base: str = Field(
        "https://discord.com/api/v10",
        alias="SUZ_DISCORD_API_BASE",
        description="Discord REST API base URL.",
    )
    drop_privileges: bool = Field(True, alias="SUZ_DROP_PRIVILEGES", description="Switch to nobody when run as root.")
    celery_broker_url: Optional[str] = Field(
        None,
        alias="SUZ_CELERY_BROKER_URL",
        description="Broker DSN for the Celery beat runner.",
    )
    log_level: str = Field("INFO", alias="LOG_LEVEL", description="Log level.")
    log_json: bool = Field(False, alias="LOG_JSON", description="Emit JSON log lines.")

    @field_validator("auth_token")
    @classmethod
    def _validate_token(cls, value: SecretStr) -> SecretStr:
        if not value.get_secret_value().strip():
            raise ValueError("SUZ_AUTH_TOKEN must not be empty.")
        return value

    @field_validator("channel_id")
    @classmethod
    def _validate_channel_id(cls, value: str) -> str:
        channel = value.strip()
        if not channel.isdigit():
            raise ValueError("SUZ_CHANNEL_ID must be a numeric channel id.")
        return channel

    @field_validator("domain")
    @classmethod
    def _normalize_domain(cls, value: str) -> str:
        domain = value.strip().strip("/")
        if not domain or "://" in domain:
            raise ValueError("SUZ_DOMAIN must be a bare host name.")
        return domain

    @field_validator("root_archive_url", "discord_api_base")
    @classmethod
    def _validate_http_url(cls, value: str) -> str:
        url = value.strip().rstrip("/")
        if not url.startswith(("http://", "https://")):
            raise ValueError("URL settings must start with http:// or https://.")
        return url

    @field_validator("history_limit")
    @classmethod
    def _validate_history_limit(cls, v: int) -> int:
        if v > 100:
            raise ValueError("SUZ_HISTORY_LIMIT must be at most 100.")
        return v

    @property
    def listing_url(self) -> str:
        return f"https://{self.domain}/cz/aktuality"


@lru_cache()
def get_settings() -> Settings:
    """Return the Settings built from the environment."""
    try:
        return Settings()
    except ValidationError as exc:
        raise ConfigurationError(f"Failed to read/parse the environment: {exc}") from exc


def reset_settings_cache() -> None:
    """Reset the Settings LRU cache (for tests)."""
    get_settings.cache_clear()  # type: ignore[attr-defined]


def clear_environment(prefix: str = ENV_PREFIX) -> list[str]:
    """Remove the bot's variables from ``os.environ`` once Settings hold them.

    Returns the names that were removed.
    """
    removed = [key for key in os.environ if key.upper().startswith(prefix)]
    for key in removed:
        del os.environ[key]
    return removed
