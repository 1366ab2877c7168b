"""Dependency Injection Container

Manages the application's dependency graph, providing lazy initialization
and lifecycle management for the queue engine, its ports and their adapters.
Components are created on-demand and cached for reuse throughout the application.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..domain.shared.messages import ErrorMessages

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from discord.ext.commands import Bot

    from ..application.interfaces.metadata_client import MetadataClient
    from ..application.interfaces.presenter import QueuePresenter
    from ..application.interfaces.snapshot_store import SnapshotStore
    from ..application.interfaces.track_resolver import TrackResolver
    from ..application.interfaces.voice_adapter import VoiceAdapter
    from ..application.services.queue_store import QueueStore
    from ..application.services.remote_control import RemoteControlService
    from ..application.services.voice_state_waiter import VoiceStateWaiter
    from ..application.songs.factory import SongFactory
    from ..domain.shared.events import EventBus
    from ..infrastructure.frisky.station_feed import FriskyStationFeed
    from ..infrastructure.persistence.database import Database
    from .settings import Settings


@dataclass
class Container:
    """Dependency injection container.

    This container manages all application dependencies and their lifecycle.
    Components are lazily initialized when first accessed.
    """

    settings: Settings
    _bot: Bot | None = None

    # Persistence layer
    _database: Database | None = None
    _snapshot_store: SnapshotStore | None = None

    # Infrastructure adapters
    _track_resolver: TrackResolver | None = None
    _metadata_client: MetadataClient | None = None
    _station_feed: FriskyStationFeed | None = None
    _voice_adapter: VoiceAdapter | None = None
    _presenter: QueuePresenter | None = None

    # Queue engine
    _event_bus: EventBus | None = None
    _song_factory: SongFactory | None = None
    _queue_store: QueueStore | None = None
    _remote_control: RemoteControlService | None = None
    _voice_state_waiter: VoiceStateWaiter | None = None

    def set_bot(self, bot: Bot) -> None:
        """Set the Discord bot instance."""
        self._bot = bot

    @property
    def bot(self) -> Bot:
        """Get the Discord bot instance."""
        if self._bot is None:
            raise RuntimeError(ErrorMessages.BOT_NOT_INITIALIZED)
        return self._bot

    # === Database ===

    @property
    def database(self) -> Database:
        """Get the database connection manager."""
        if self._database is None:
            from ..infrastructure.persistence.database import Database

            self._database = Database(self.settings.database.url, settings=self.settings.database)
        return self._database

    @property
    def snapshot_store(self) -> SnapshotStore:
        """Get the durable store for queue snapshots."""
        if self._snapshot_store is None:
            from ..infrastructure.persistence.repositories.snapshot_repository import (
                SQLiteSnapshotStore,
            )

            self._snapshot_store = SQLiteSnapshotStore(self.database)
        return self._snapshot_store

    # === Infrastructure Adapters ===

    @property
    def track_resolver(self) -> TrackResolver:
        """Get the yt-dlp track resolver."""
        if self._track_resolver is None:
            from ..infrastructure.audio.ytdlp_resolver import YtDlpTrackResolver

            self._track_resolver = YtDlpTrackResolver(self.settings.audio)
        return self._track_resolver

    @property
    def metadata_client(self) -> MetadataClient:
        """Get the Invidious metadata client."""
        if self._metadata_client is None:
            from ..infrastructure.metadata.invidious_client import InvidiousMetadataClient

            self._metadata_client = InvidiousMetadataClient(self.settings.invidious)
        return self._metadata_client

    @property
    def station_feed(self) -> FriskyStationFeed:
        """Get the Frisky Radio station feed."""
        if self._station_feed is None:
            from ..infrastructure.frisky.station_feed import FriskyStationFeed

            self._station_feed = FriskyStationFeed(self.settings.frisky)
        return self._station_feed

    @property
    def voice_adapter(self) -> VoiceAdapter:
        """Get the voice adapter."""
        if self._voice_adapter is None:
            from ..infrastructure.discord.adapters.voice_adapter import (
                DiscordVoiceAdapter,
            )

            self._voice_adapter = DiscordVoiceAdapter(self.bot, self.settings.audio)
        return self._voice_adapter

    @property
    def presenter(self) -> QueuePresenter:
        """Get the Discord presenter for queue messages."""
        if self._presenter is None:
            from ..infrastructure.discord.presenter import DiscordQueuePresenter

            self._presenter = DiscordQueuePresenter(self.bot)
        return self._presenter

    # === Queue Engine ===

    @property
    def event_bus(self) -> EventBus:
        """Get the event bus shared by the queue store and its observers."""
        if self._event_bus is None:
            from ..domain.shared.events import EventBus

            self._event_bus = EventBus()
        return self._event_bus

    @property
    def song_factory(self) -> SongFactory:
        """Get the song factory."""
        if self._song_factory is None:
            from ..application.songs.factory import SongFactory

            self._song_factory = SongFactory(
                resolver=self.track_resolver,
                metadata=self.metadata_client,
                feed=self.station_feed,
                related_limit=self.settings.queue.related_limit,
                retry_attempts=self.settings.frisky.retry_attempts,
                retry_delay_seconds=self.settings.frisky.retry_delay_seconds,
            )
        return self._song_factory

    @property
    def queue_store(self) -> QueueStore:
        """Get the process-wide queue store."""
        if self._queue_store is None:
            from ..application.services.queue_store import QueueStore

            queue_settings = self.settings.queue
            self._queue_store = QueueStore(
                voice=self.voice_adapter,
                presenter=self.presenter,
                event_bus=self.event_bus,
                snapshot_store=self.snapshot_store,
                song_factory=self.song_factory,
                shard_id=self.settings.discord.shard_id,
                idle_disconnect_seconds=queue_settings.idle_disconnect_seconds,
                restore_grace_seconds=queue_settings.restore_grace_seconds,
                autosave_interval_seconds=queue_settings.autosave_interval_seconds,
            )
        return self._queue_store

    @property
    def remote_control(self) -> RemoteControlService:
        """Get the remote control bridge."""
        if self._remote_control is None:
            from ..application.services.remote_control import RemoteControlService

            self._remote_control = RemoteControlService(self.queue_store)
        return self._remote_control

    @property
    def voice_state_waiter(self) -> VoiceStateWaiter:
        """Get the voice-state waiter."""
        if self._voice_state_waiter is None:
            from ..application.services.voice_state_waiter import VoiceStateWaiter

            self._voice_state_waiter = VoiceStateWaiter(self.settings.queue.voice_wait_timeout_seconds)
        return self._voice_state_waiter

    # === Lifecycle ===

    async def initialize(self) -> None:
        """Initialize all async resources."""
        await self.database.initialize()
        self.station_feed.start()

    async def shutdown(self) -> None:
        """Shutdown and cleanup all resources."""
        if self._queue_store is not None:
            await self._queue_store.shutdown()

        if self._voice_state_waiter is not None:
            self._voice_state_waiter.reset()

        try:
            if self._station_feed is not None:
                await self._station_feed.stop()
        except Exception as exc:
            logger.warning("Failed stopping station feed: %r", exc)

        try:
            if self._metadata_client is not None:
                await self._metadata_client.aclose()
        except Exception as exc:
            logger.warning("Failed closing metadata client: %r", exc)

        if self._database is not None:
            await self._database.close()

        if self._event_bus is not None:
            self._event_bus.clear()


def create_container(settings: Settings) -> Container:
    """Create a new dependency injection container."""
    return Container(settings)
