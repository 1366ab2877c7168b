"""Process-wide registry of guild queues, with durable snapshots."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from discord_music_queue.application.interfaces.presenter import QueuePresenter
from discord_music_queue.application.interfaces.snapshot_store import SnapshotStore
from discord_music_queue.application.interfaces.voice_adapter import VoiceAdapter
from discord_music_queue.application.services.guild_queue import GuildQueue
from discord_music_queue.application.songs.factory import SongFactory
from discord_music_queue.domain.music.snapshots import QueueSnapshot, QueueStoreSnapshot
from discord_music_queue.domain.shared.datetime_utils import now_ms
from discord_music_queue.domain.shared.events import EventBus, QueueCreated, QueueDeleted
from discord_music_queue.domain.shared.exceptions import (
    DomainError,
    InvalidOperationError,
    QueueRestoreError,
)
from discord_music_queue.domain.shared.messages import ErrorMessages, LogTemplates

logger = logging.getLogger(__name__)


class QueueStore:
    """One GuildQueue per guild, plus save/restore across restarts.

    Registry mutations happen before the first ``await`` of ``create`` and
    ``delete``, so no lock is needed around ``queues``.
    """

    def __init__(
        self,
        *,
        voice: VoiceAdapter,
        presenter: QueuePresenter,
        event_bus: EventBus,
        snapshot_store: SnapshotStore,
        song_factory: SongFactory,
        shard_id: int = 0,
        idle_disconnect_seconds: float = 20,
        restore_grace_seconds: float = 120,
        autosave_interval_seconds: float = 60,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self._voice = voice
        self._presenter = presenter
        self._events = event_bus
        self._snapshots = snapshot_store
        self._songs = song_factory
        self._shard_id = shard_id
        self._idle_disconnect_seconds = idle_disconnect_seconds
        self._restore_grace_seconds = restore_grace_seconds
        self._autosave_interval_seconds = autosave_interval_seconds
        self._clock = clock

        self.queues: dict[int, GuildQueue] = {}
        self.songs_played = 0

        self._autosave_running = False
        self._autosave_task: asyncio.Task[None] | None = None
        self._clear_task: asyncio.Task[None] | None = None

    @property
    def key(self) -> str:
        return f"QueueStore_{self._shard_id}"

    # ── Registry ────────────────────────────────────────────────────

    def has(self, guild_id: int) -> bool:
        return guild_id in self.queues

    def get(self, guild_id: int) -> GuildQueue | None:
        return self.queues.get(guild_id)

    def find_by_message(self, message_id: int) -> GuildQueue | None:
        """The queue whose now-playing message is ``message_id``, if any."""
        for queue in self.queues.values():
            if queue.now_playing_message_id == message_id:
                return queue
        return None

    async def get_or_create(self, guild_id: int, voice_channel_id: int, text_channel_id: int) -> GuildQueue:
        queue = self.queues.get(guild_id)
        if queue is not None:
            return queue
        return await self.create(guild_id, voice_channel_id, text_channel_id)

    async def create(self, guild_id: int, voice_channel_id: int, text_channel_id: int) -> GuildQueue:
        if guild_id in self.queues:
            raise InvalidOperationError("create", "exists", f"Guild {guild_id} already has a queue")
        queue = GuildQueue(
            guild_id,
            voice_channel_id,
            text_channel_id,
            store=self,
            voice=self._voice,
            presenter=self._presenter,
            event_bus=self._events,
            idle_disconnect_seconds=self._idle_disconnect_seconds,
            clock=self._clock,
        )
        self.queues[guild_id] = queue
        logger.info(LogTemplates.QUEUE_CREATED, guild_id)
        await self._events.publish(QueueCreated(guild_id=guild_id))
        return queue

    async def delete(self, guild_id: int) -> None:
        if self.queues.pop(guild_id, None) is None:
            return
        logger.info(LogTemplates.QUEUE_DELETED, guild_id)
        await self._events.publish(QueueDeleted(guild_id=guild_id))

    def record_song_played(self) -> None:
        self.songs_played += 1

    # ── Persistence ─────────────────────────────────────────────────

    def to_snapshot(self) -> QueueStoreSnapshot:
        return QueueStoreSnapshot(
            id=self.key,
            queues=[queue.to_snapshot() for queue in self.queues.values() if queue.songs],
        )

    async def save(self) -> None:
        snapshot = self.to_snapshot()
        await self._snapshots.upsert(self.key, snapshot.model_dump(mode="json"))
        logger.debug(LogTemplates.SNAPSHOT_SAVED, self.key, len(snapshot.queues))

    async def restore(self) -> list[GuildQueue]:
        """Rebuild saved queues. One bad queue never stops the others.

        The saved record is cleared after the grace period so a later restart
        does not restore the same queues twice.
        """
        document = await self._snapshots.get(self.key)
        if not document:
            logger.info(LogTemplates.SNAPSHOT_MISSING, self.key)
            return []

        snapshot = QueueStoreSnapshot.model_validate(document)
        logger.info(LogTemplates.STORE_RESTORE_STARTED, len(snapshot.queues))

        restored: list[GuildQueue] = []
        for saved in snapshot.queues:
            try:
                queue = await self._restore_queue(saved)
            except QueueRestoreError as e:
                logger.warning(LogTemplates.STORE_RESTORE_FAILED, e.guild_id, e.message)
                continue
            except Exception as e:
                logger.exception(LogTemplates.STORE_RESTORE_FAILED, saved.guild_id, e)
                await self.delete(saved.guild_id)
                continue
            if queue is not None:
                restored.append(queue)

        self._schedule_clear()
        return restored

    async def _restore_queue(self, saved: QueueSnapshot) -> GuildQueue | None:
        if self.has(saved.guild_id):
            logger.info(LogTemplates.QUEUE_ALREADY_EXISTS, saved.guild_id)
            return None
        if not self._voice.has_voice_channel(saved.voice_channel_id) or not self._presenter.has_text_channel(
            saved.text_channel_id
        ):
            raise QueueRestoreError(
                saved.guild_id, ErrorMessages.RESTORE_CHANNELS_MISSING.format(guild_id=saved.guild_id)
            )
        if not saved.songs:
            raise QueueRestoreError(saved.guild_id, ErrorMessages.RESTORE_NO_SONGS.format(guild_id=saved.guild_id))

        logger.info(LogTemplates.STORE_RESTORE_QUEUE, saved.voice_channel_id, saved.guild_id)
        try:
            songs = [self._songs.from_snapshot(song) for song in saved.songs]
        except DomainError as e:
            raise QueueRestoreError(saved.guild_id, e.message) from e
        for song in songs:
            logger.info(LogTemplates.STORE_RESTORE_SONG, song.kind, song.id)

        message_id = saved.now_playing_message_id
        if message_id is not None and not await self._presenter.message_exists(saved.text_channel_id, message_id):
            logger.info(LogTemplates.STORE_RESTORE_MESSAGE_MISSING, message_id, saved.guild_id)
            message_id = None

        queue = await self.create(saved.guild_id, saved.voice_channel_id, saved.text_channel_id)
        queue.auto = saved.auto
        queue.song_started_at_ms = saved.song_started_at_ms
        queue.paused_at_ms = saved.paused_at_ms
        if not await queue.restore_playback(
            songs,
            elapsed_ms=saved.elapsed_ms(self._clock()),
            now_playing_message_id=message_id,
            paused=saved.paused_at_ms is not None,
        ):
            return None
        return queue

    def _schedule_clear(self) -> None:
        if self._clear_task is not None and not self._clear_task.done():
            self._clear_task.cancel()
        self._clear_task = asyncio.create_task(self._clear_after_grace())

    async def _clear_after_grace(self) -> None:
        await asyncio.sleep(self._restore_grace_seconds)
        await self._snapshots.upsert(self.key, QueueStoreSnapshot(id=self.key).model_dump(mode="json"))
        logger.info(LogTemplates.SNAPSHOT_CLEARED, self.key)

    # ── Lifecycle ───────────────────────────────────────────────────

    def start_autosave(self) -> None:
        if self._autosave_running:
            logger.warning(LogTemplates.STORE_AUTOSAVE_ALREADY_RUNNING)
            return

        self._autosave_running = True
        self._autosave_task = asyncio.create_task(self._autosave_loop())
        logger.info(LogTemplates.STORE_AUTOSAVE_STARTED, self._autosave_interval_seconds)

    async def _autosave_loop(self) -> None:
        while self._autosave_running:
            try:
                await asyncio.sleep(self._autosave_interval_seconds)
            except asyncio.CancelledError:
                break
            try:
                await self.save()
            except Exception:
                logger.exception(LogTemplates.STORE_SAVE_FAILED)

    async def _stop_background(self) -> None:
        self._autosave_running = False
        for task in (self._autosave_task, self._clear_task):
            if task is None:
                continue
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        if self._autosave_task is not None:
            logger.info(LogTemplates.STORE_AUTOSAVE_STOPPED)
        self._autosave_task = None
        self._clear_task = None

    async def shutdown(self) -> None:
        """Stop background work and write a final snapshot. Queues stay in memory."""
        await self._stop_background()
        try:
            await self.save()
        except Exception:
            logger.exception(LogTemplates.STORE_SAVE_FAILED)

    async def reset(self) -> None:
        """Stop background work and forget every queue without touching voice or storage."""
        await self._stop_background()
        self.queues.clear()
        self.songs_played = 0
