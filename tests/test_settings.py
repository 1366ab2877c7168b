"""
Unit Tests for Application Settings Configuration

Tests for:
- Default values for every settings group
- Range validation and aliases
- Loading from environment variables, including nested groups
- Settings caching and clearing
"""

import pytest
from pydantic import SecretStr, ValidationError

from discord_music_queue.config.settings import (
    AudioSettings,
    DatabaseSettings,
    DiscordSettings,
    FriskySettings,
    InvidiousSettings,
    QueueSettings,
    Settings,
    clear_settings_cache,
    get_settings,
)


class TestDatabaseSettings:
    """Unit tests for DatabaseSettings configuration."""

    def test_defaults(self):
        db = DatabaseSettings()

        assert db.url == "sqlite:///data/queue.db"
        assert db.busy_timeout_ms == 5000

    def test_invalid_url_scheme(self):
        with pytest.raises(ValidationError, match="sqlite://"):
            DatabaseSettings(url="postgresql://localhost/db")

    def test_url_alias(self):
        assert DatabaseSettings(database_url="sqlite:///aliased.db").url == "sqlite:///aliased.db"

    def test_busy_timeout_range(self):
        with pytest.raises(ValidationError):
            DatabaseSettings(busy_timeout_ms=999)


class TestDiscordSettings:
    """Unit tests for DiscordSettings configuration."""

    def test_defaults(self):
        discord = DiscordSettings()

        assert discord.token.get_secret_value() == ""
        assert discord.shard_id == 0
        assert discord.sync_on_startup is False

    def test_token_alias(self):
        assert DiscordSettings(bot_token=SecretStr("abc")).token.get_secret_value() == "abc"

    def test_negative_shard_rejected(self):
        with pytest.raises(ValidationError):
            DiscordSettings(shard_id=-1)


class TestQueueSettings:
    """Unit tests for queue lifecycle timings."""

    def test_defaults(self):
        queue = QueueSettings()

        assert queue.idle_disconnect_seconds == 20.0
        assert queue.restore_grace_seconds == 120.0
        assert queue.autosave_interval_seconds == 60.0
        assert queue.related_limit == 10

    def test_timings_must_be_positive(self):
        with pytest.raises(ValidationError):
            QueueSettings(idle_disconnect_seconds=0.0)

    def test_immutability(self):
        queue = QueueSettings()

        with pytest.raises(ValidationError):
            queue.related_limit = 3


class TestExternalServiceSettings:
    """Unit tests for Frisky, Invidious and audio settings."""

    def test_frisky_defaults(self):
        frisky = FriskySettings()

        assert frisky.api_url == "https://api.frisky.fm/api"
        assert frisky.retry_attempts == 5

    def test_invidious_origin_trailing_slash(self):
        assert InvidiousSettings(origin="https://yewtu.be/").origin == "https://yewtu.be"

    def test_audio_volume_range(self):
        with pytest.raises(ValidationError):
            AudioSettings(default_volume=2.5)


class TestSettings:
    """Unit tests for the main Settings container."""

    def test_create_with_all_defaults(self, monkeypatch):
        monkeypatch.delenv("ENVIRONMENT", raising=False)
        monkeypatch.delenv("DEBUG", raising=False)
        monkeypatch.delenv("LOG_LEVEL", raising=False)

        settings = Settings(_env_file=None)

        assert settings.environment == "development"
        assert settings.log_level == "INFO"
        assert isinstance(settings.queue, QueueSettings)
        assert isinstance(settings.frisky, FriskySettings)
        assert isinstance(settings.invidious, InvidiousSettings)

    def test_load_from_environment_variables(self, monkeypatch):
        monkeypatch.setenv("ENVIRONMENT", "production")
        monkeypatch.setenv("LOG_LEVEL", "warning")

        settings = Settings(_env_file=None)

        assert settings.environment == "production"
        assert settings.log_level == "WARNING"

    def test_load_nested_settings_from_env(self, monkeypatch):
        """Should load nested settings using env_nested_delimiter."""
        monkeypatch.setenv("INVIDIOUS__ORIGIN", "https://invidious.example/")
        monkeypatch.setenv("FRISKY__API_URL", "https://frisky.example/api")

        settings = Settings(_env_file=None)

        assert settings.invidious.origin == "https://invidious.example"
        assert settings.frisky.api_url == "https://frisky.example/api"

    def test_invalid_log_level(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "LOUD")

        with pytest.raises(ValidationError, match="Invalid log level"):
            Settings(_env_file=None)


class TestSettingsCaching:
    """Unit tests for get_settings caching."""

    def test_get_settings_returns_cached_instance(self):
        clear_settings_cache()

        assert get_settings() is get_settings()

    def test_clear_settings_cache(self, monkeypatch):
        clear_settings_cache()
        first = get_settings()

        clear_settings_cache()

        assert get_settings() is not first
        clear_settings_cache()
