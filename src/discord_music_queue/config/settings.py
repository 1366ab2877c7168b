"""Runtime configuration.

Everything is read from the environment (and an optional ``.env`` file) into
frozen pydantic models, one sub-model per subsystem. Nested values use a
double-underscore delimiter, e.g. ``QUEUE__IDLE_DISCONNECT_SECONDS=30``.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, BaseModel, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..domain.shared.messages import ErrorMessages


class DatabaseSettings(BaseModel):
    """SQLite snapshot database."""

    model_config = SettingsConfigDict(frozen=True, strict=True, populate_by_name=True)

    url: str = Field(
        default="sqlite:///data/queue.db",
        validation_alias=AliasChoices("url", "database_url", "db_url"),
    )
    busy_timeout_ms: int = Field(
        default=5000,
        ge=1000,
        le=30000,
        validation_alias=AliasChoices("busy_timeout_ms", "busy_timeout"),
    )
    connection_timeout_s: int = Field(
        default=10,
        ge=1,
        le=60,
        validation_alias=AliasChoices("connection_timeout_s", "connection_timeout"),
    )

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        if not v.startswith("sqlite://"):
            raise ValueError(ErrorMessages.INVALID_DATABASE_URL)
        return v


class DiscordSettings(BaseModel):
    """Gateway login and shard identity."""

    model_config = SettingsConfigDict(frozen=True, strict=True, populate_by_name=True)

    token: SecretStr = Field(
        default=SecretStr(""), validation_alias=AliasChoices("token", "bot_token", "discord_token")
    )
    command_prefix: str = Field(
        default="!",
        min_length=1,
        max_length=5,
        validation_alias=AliasChoices("command_prefix", "prefix"),
    )
    shard_id: int = Field(default=0, ge=0, validation_alias=AliasChoices("shard_id", "shard"))
    sync_on_startup: bool = False


class AudioSettings(BaseModel):
    """FFmpeg and yt-dlp playback options."""

    model_config = SettingsConfigDict(frozen=True, strict=True, populate_by_name=True)

    default_volume: float = Field(default=0.5, ge=0.0, le=2.0)
    ffmpeg_options: dict[str, str] = Field(
        default_factory=lambda: {
            "before_options": "-reconnect 1 -reconnect_streamed 1 -reconnect_delay_max 5",
            "options": "-vn",
        }
    )
    ytdlp_format: str = "bestaudio/best"


class QueueSettings(BaseModel):
    """Queue lifecycle timings."""

    model_config = SettingsConfigDict(frozen=True, strict=True)

    idle_disconnect_seconds: float = Field(default=20.0, gt=0)
    restore_grace_seconds: float = Field(default=120.0, gt=0)
    autosave_interval_seconds: float = Field(default=60.0, gt=0)
    related_limit: int = Field(default=10, ge=1, le=50)
    voice_wait_timeout_seconds: float = Field(default=30.0, gt=0)


class FriskySettings(BaseModel):
    """Frisky Radio station feed configuration."""

    model_config = SettingsConfigDict(frozen=True, strict=True, populate_by_name=True)

    api_url: str = Field(
        default="https://api.frisky.fm/api",
        validation_alias=AliasChoices("api_url", "frisky_api_url"),
    )
    poll_interval_seconds: float = Field(default=30.0, gt=0)
    retry_attempts: int = Field(default=5, ge=1, le=20)
    retry_delay_seconds: float = Field(default=1.0, ge=0.0)
    request_timeout_seconds: float = Field(default=10.0, gt=0)


class InvidiousSettings(BaseModel):
    """Invidious metadata API configuration."""

    model_config = SettingsConfigDict(frozen=True, strict=True, populate_by_name=True)

    origin: str = Field(
        default="https://invidious.io.lol",
        validation_alias=AliasChoices("origin", "invidious_origin"),
    )
    timeout_seconds: float = Field(default=10.0, gt=0)

    @field_validator("origin")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


class Settings(BaseSettings):
    """Top-level settings.

    Recognised variables:
    - ENVIRONMENT, DEBUG, LOG_LEVEL (top-level)
    - DISCORD__TOKEN, DISCORD__SHARD_ID, etc. (nested with ``__``)
    - QUEUE__IDLE_DISCONNECT_SECONDS, FRISKY__API_URL, INVIDIOUS__ORIGIN, ...
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
        strict=True,
    )

    environment: Literal["development", "production", "test"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    discord: DiscordSettings = Field(default_factory=DiscordSettings)
    audio: AudioSettings = Field(default_factory=AudioSettings)
    queue: QueueSettings = Field(default_factory=QueueSettings)
    frisky: FriskySettings = Field(default_factory=FriskySettings)
    invidious: InvidiousSettings = Field(default_factory=InvidiousSettings)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(ErrorMessages.INVALID_LOG_LEVEL.format(level=v, valid_levels=sorted(valid_levels)))
        return v_upper


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Process-wide settings, built once on first use."""
    return Settings()


def clear_settings_cache() -> None:
    """Forget the cached settings so the next call re-reads the environment."""
    get_settings.cache_clear()
