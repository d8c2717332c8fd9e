"""Application configuration settings."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"


class Settings(BaseSettings):
    """Application configuration values loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE, env_file_encoding=ENV_FILE_ENCODING, extra="ignore"
    )

    database_url: str = Field(
        default="sqlite:///./goout.db",
        description="Database connection URL used by SQLAlchemy to connect to the DB",
        min_length=1,
    )
    secret_key: str = Field(
        description="Secret used to verify the JWTs issued by the identity provider",
        min_length=1,
    )
    app_timezone: str = Field(
        default="America/Sao_Paulo",
        description="IANA timezone (or UTC offset) used to interpret stored datetimes",
    )
    cors_origins: str = Field(
        default="http://localhost:5173",
        description="Comma separated origins allowed to call the API from a browser",
    )

    notification_compact_limit: int = Field(
        default=5, gt=0, description="Items shown in the notification dropdown"
    )
    notification_compact_fetch_window: int = Field(
        default=10,
        gt=0,
        description="Most recent messages inspected when building the compact feed",
    )
    notification_full_fetch_window: int = Field(
        default=20,
        gt=0,
        description="Most recent messages inspected when building the full feed",
    )
    notification_compact_snippet_length: int = Field(default=50, gt=0)
    notification_full_snippet_length: int = Field(default=100, gt=0)
    notification_message_scope: Literal["participant", "global"] = Field(
        default="participant",
        description=(
            "'participant' only inspects threads the user takes part in; 'global' "
            "inspects the most recent messages of the whole system"
        ),
    )

    poll_thread_list_seconds: float = Field(default=10.0, gt=0)
    poll_open_thread_seconds: float = Field(default=5.0, gt=0)
    poll_notification_badge_seconds: float = Field(default=30.0, gt=0)

    @model_validator(mode="after")
    def _validate_fetch_windows(self) -> "Settings":
        if self.notification_full_fetch_window < self.notification_compact_fetch_window:
            raise ValueError(
                "NOTIFICATION_FULL_FETCH_WINDOW must not be smaller than "
                "NOTIFICATION_COMPACT_FETCH_WINDOW"
            )
        return self

    def cors_origin_list(self) -> list[str]:
        """Return ``cors_origins`` split into individual origins."""

        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = ["Settings", "get_settings", "reset_settings_cache"]
