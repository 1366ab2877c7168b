"""Per-guild playback queue.

One ``GuildQueue`` owns the song list, the voice connection and the
now-playing message of a guild. Every mutation and every advancement runs
under the queue's ``asyncio.Lock``. Voice transport callbacks only schedule
work, so a stream that ends inside ``skip()`` is handled after ``skip()``
has released the lock.
"""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Callable, Coroutine
from typing import TYPE_CHECKING, Any

from discord_music_queue.application.interfaces.presenter import NowPlayingCard, QueuePresenter
from discord_music_queue.application.interfaces.voice_adapter import (
    StreamHandle,
    StreamListener,
    VoiceAdapter,
    VoiceConnection,
    VoiceJoinError,
)
from discord_music_queue.domain.music.snapshots import QueueSnapshot, QueueView
from discord_music_queue.domain.music.value_objects import (
    ActionOrigin,
    ActionOutcome,
    ActionResult,
    QueueAction,
    QueueState,
    VoiceConnectionState,
)
from discord_music_queue.domain.shared.datetime_utils import now_ms
from discord_music_queue.domain.shared.events import EventBus, QueueUpdated, SongUpdated
from discord_music_queue.domain.shared.exceptions import InvalidOperationError
from discord_music_queue.domain.shared.messages import DiscordUIMessages, EmojiConstants, LogTemplates

if TYPE_CHECKING:
    from discord_music_queue.application.services.queue_store import QueueStore
    from discord_music_queue.application.songs.base import Song

logger = logging.getLogger(__name__)


class _QueueStreamListener(StreamListener):
    """Forwards transport events for one stream back into its queue."""

    def __init__(self, queue: GuildQueue) -> None:
        self._queue = queue

    def stream_started(self) -> None:
        self._queue._spawn(self._queue._on_stream_started(self))

    def stream_errored(self, reason: str) -> None:
        logger.error(LogTemplates.STREAM_ERROR, self._queue.guild_id, reason)

    def stream_ended(self) -> None:
        self._queue._spawn(self._queue._on_stream_ended(self))


class GuildQueue:
    def __init__(
        self,
        guild_id: int,
        voice_channel_id: int,
        text_channel_id: int,
        *,
        store: QueueStore,
        voice: VoiceAdapter,
        presenter: QueuePresenter,
        event_bus: EventBus,
        idle_disconnect_seconds: float = 20,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self.guild_id = guild_id
        self.voice_channel_id = voice_channel_id
        self.text_channel_id = text_channel_id
        self._store = store
        self._voice = voice
        self._presenter = presenter
        self._events = event_bus
        self._idle_disconnect_seconds = idle_disconnect_seconds
        self._clock = clock

        self.songs: list[Song] = []
        self.played_song_ids: set[str] = set()
        self.playing = True
        self.is_skippable = False
        self.auto = False
        self.state = QueueState.IDLE
        self.voice_connection_state = VoiceConnectionState.DISCONNECTED
        self.connection: VoiceConnection | None = None

        self.now_playing_message_id: int | None = None
        self.controls_attached = False
        self._controls_hint = False

        self.song_started_at_ms: int | None = None
        self.paused_at_ms: int | None = None
        self._start_offset_ms = 0
        self._pause_on_start = False

        self._lock = asyncio.Lock()
        self._stream: StreamHandle | None = None
        self._listener: _QueueStreamListener | None = None
        self._idle_task: asyncio.Task[None] | None = None
        self._np_task: asyncio.Task[None] | None = None
        self._tasks: set[asyncio.Task[Any]] = set()

    def __repr__(self) -> str:
        return f"<GuildQueue guild={self.guild_id} state={self.state.value} songs={len(self.songs)}>"

    # ── Read-only views ─────────────────────────────────────────────

    @property
    def destroyed(self) -> bool:
        return self.state is QueueState.DESTROYED

    @property
    def is_connected(self) -> bool:
        return self.connection is not None and self.voice_connection_state is VoiceConnectionState.CONNECTED

    @property
    def has_active_stream(self) -> bool:
        return self._stream is not None

    @property
    def region_hint(self) -> str | None:
        return self.connection.region_hint if self.connection is not None else None

    @property
    def idle_timer_active(self) -> bool:
        return self._idle_task is not None and not self._idle_task.done()

    @property
    def elapsed_ms(self) -> int:
        if self.song_started_at_ms is None:
            return 0
        end = self.paused_at_ms if self.paused_at_ms is not None else self._clock()
        return max(0, end - self.song_started_at_ms)

    def to_snapshot(self) -> QueueSnapshot:
        return QueueSnapshot(
            guild_id=self.guild_id,
            voice_channel_id=self.voice_channel_id,
            text_channel_id=self.text_channel_id,
            songs=[song.to_snapshot() for song in self.songs],
            song_started_at_ms=self.song_started_at_ms,
            paused_at_ms=self.paused_at_ms,
            now_playing_message_id=self.now_playing_message_id,
            auto=self.auto,
        )

    def to_view(self) -> QueueView:
        return QueueView(
            guild_id=self.guild_id,
            voice_channel_id=self.voice_channel_id,
            text_channel_id=self.text_channel_id,
            state=self.state.value,
            playing=self.playing,
            is_skippable=self.is_skippable,
            auto=self.auto,
            elapsed_ms=self.elapsed_ms,
            songs=[song.get_state() for song in self.songs],
        )

    # ── Song list ───────────────────────────────────────────────────

    async def add_song(self, song: Song, insert: bool = False) -> None:
        """Queue ``song`` at the end, or right after the playing song when ``insert``.

        The first song of a queue joins voice if needed and starts playback.
        """
        async with self._lock:
            if self.destroyed:
                raise InvalidOperationError("add_song", self.state.value)
            self._insert(song, insert)
            if len(self.songs) == 1:
                if self.is_connected or await self._connect():
                    await self._play()
            else:
                song.delete_cache()
        await self._broadcast()

    def _insert(self, song: Song, insert: bool) -> None:
        song.bind(self)
        if insert and self.songs:
            self.songs.insert(1, song)
        else:
            self.songs.append(song)

    async def notify_song_updated(self, song: Song) -> None:
        if self.destroyed or song not in self.songs:
            return
        await self._events.publish(
            SongUpdated(guild_id=self.guild_id, song_index=self.songs.index(song), song=song.get_state())
        )

    # ── Control actions ─────────────────────────────────────────────

    async def perform(self, action: QueueAction, origin: ActionOrigin = ActionOrigin.CHAT) -> ActionOutcome:
        """Run one control action under the queue lock and broadcast the result.

        CHAT callers show ``outcome.result.message`` themselves; REMOTE callers
        read ``outcome.status_code``.
        """
        handlers = {
            QueueAction.PAUSE: self._pause,
            QueueAction.RESUME: self._resume,
            QueueAction.SKIP: self._skip,
            QueueAction.STOP: self._stop,
            QueueAction.SHUFFLE: self._shuffle,
            QueueAction.TOGGLE_AUTO: self._toggle_auto,
        }
        async with self._lock:
            result = await handlers[action]()
        logger.info(LogTemplates.QUEUE_ACTION, action.value, self.guild_id, result.success)
        await self._broadcast()
        return ActionOutcome.for_origin(result, origin)

    async def pause(self, origin: ActionOrigin = ActionOrigin.CHAT) -> ActionOutcome:
        return await self.perform(QueueAction.PAUSE, origin)

    async def resume(self, origin: ActionOrigin = ActionOrigin.CHAT) -> ActionOutcome:
        return await self.perform(QueueAction.RESUME, origin)

    async def skip(self, origin: ActionOrigin = ActionOrigin.CHAT) -> ActionOutcome:
        return await self.perform(QueueAction.SKIP, origin)

    async def stop(self, origin: ActionOrigin = ActionOrigin.CHAT) -> ActionOutcome:
        return await self.perform(QueueAction.STOP, origin)

    async def shuffle(self, origin: ActionOrigin = ActionOrigin.CHAT) -> ActionOutcome:
        return await self.perform(QueueAction.SHUFFLE, origin)

    async def toggle_auto(self, origin: ActionOrigin = ActionOrigin.CHAT) -> ActionOutcome:
        return await self.perform(QueueAction.TOGGLE_AUTO, origin)

    async def _pause(self) -> ActionResult:
        song = self.songs[0] if self.songs else None
        if self._stream is not None and self.playing and song is not None and not song.live:
            self.playing = False
            self.paused_at_ms = self._clock()
            self._stream.pause()
            self._set_state(QueueState.PAUSED)
            await self._edit_now_playing()
            return ActionResult.ok()
        if not self.playing:
            return ActionResult.rejected(DiscordUIMessages.ALREADY_PAUSED)
        if song is not None and song.live:
            return ActionResult.rejected(song.no_pause_reason or DiscordUIMessages.LIVE_NO_PAUSE)
        return ActionResult.rejected(DiscordUIMessages.NOT_CONNECTED.format(action="paused"))

    async def _resume(self) -> ActionResult:
        if self._stream is not None and not self.playing:
            self.playing = True
            if self.paused_at_ms is not None and self.song_started_at_ms is not None:
                self.song_started_at_ms += self._clock() - self.paused_at_ms
            self.paused_at_ms = None
            self._stream.resume()
            self._set_state(QueueState.PLAYING)
            await self._edit_now_playing()
            return ActionResult.ok()
        if self.playing:
            return ActionResult.rejected(DiscordUIMessages.NOT_PAUSED)
        return ActionResult.rejected(DiscordUIMessages.NOT_CONNECTED.format(action="resumed"))

    async def _skip(self) -> ActionResult:
        if self._stream is not None and self.playing and self.is_skippable:
            self.is_skippable = False
            self._stream.stop()
            return ActionResult.ok()
        if not self.playing:
            return ActionResult.rejected(DiscordUIMessages.SKIP_WHILE_PAUSED)
        if self._stream is not None:
            return ActionResult.rejected(DiscordUIMessages.SKIP_NOT_READY)
        return ActionResult.rejected(DiscordUIMessages.NOT_CONNECTED.format(action="skipped"))

    async def _stop(self) -> ActionResult:
        if self.destroyed:
            return ActionResult.rejected(DiscordUIMessages.ALREADY_STOPPED)
        if self.connection is None:
            return ActionResult.rejected(DiscordUIMessages.NOT_CONNECTED.format(action="stopped"))
        await self._dissolve()
        return ActionResult.ok()

    async def _shuffle(self) -> ActionResult:
        if len(self.songs) < 3:
            return ActionResult.rejected(DiscordUIMessages.NOTHING_TO_SHUFFLE)
        upcoming = self.songs[1:]
        random.shuffle(upcoming)
        self.songs[1:] = upcoming
        return ActionResult.ok(DiscordUIMessages.SHUFFLED)

    async def _toggle_auto(self) -> ActionResult:
        if self.destroyed:
            return ActionResult.rejected(DiscordUIMessages.ALREADY_STOPPED)
        self.auto = not self.auto
        await self._edit_now_playing()
        return ActionResult.ok(DiscordUIMessages.AUTO_ON if self.auto else DiscordUIMessages.AUTO_OFF)

    async def handle_control(self, emoji: str, user_id: int) -> ActionOutcome | None:
        """Apply a reaction control from a user, if that user is in our voice channel."""
        if self.destroyed or self.connection is None or not self.connection.has_member(user_id):
            return None
        if emoji == EmojiConstants.PLAY_PAUSE:
            action = QueueAction.PAUSE if self.playing else QueueAction.RESUME
        elif emoji == EmojiConstants.SKIP:
            action = QueueAction.SKIP
        elif emoji == EmojiConstants.STOP:
            action = QueueAction.STOP
        else:
            return None

        outcome = await self.perform(action, ActionOrigin.CHAT)
        if outcome.result.message:
            await self._notify(outcome.result.message)
        return outcome

    # ── Voice membership and connection ─────────────────────────────

    async def handle_membership_change(self, non_bot_count: int | None = None) -> None:
        """React to somebody joining or leaving our voice channel."""
        if self.destroyed:
            return
        if non_bot_count is None:
            if self.connection is None:
                return
            non_bot_count = self.connection.non_bot_member_count()

        if non_bot_count == 0:
            if self.idle_timer_active:
                return
            seconds = self._idle_disconnect_seconds
            logger.info(LogTemplates.IDLE_TIMER_ARMED, self.guild_id, seconds)
            self._idle_task = asyncio.create_task(self._idle_countdown())
            await self._notify(DiscordUIMessages.IDLE_WARNING.format(seconds=f"{seconds:g}"))
        elif self.idle_timer_active:
            self._cancel_idle_timer()
            logger.info(LogTemplates.IDLE_TIMER_CANCELLED, self.guild_id)

    async def _idle_countdown(self) -> None:
        await asyncio.sleep(self._idle_disconnect_seconds)
        async with self._lock:
            if self.destroyed:
                return
            logger.info(LogTemplates.IDLE_TIMER_FIRED, self.guild_id)
            await self._notify(DiscordUIMessages.IDLE_LEFT)
            await self._dissolve()

    def _cancel_idle_timer(self) -> None:
        task = self._idle_task
        self._idle_task = None
        if task is not None and task is not asyncio.current_task():
            task.cancel()

    async def handle_connection_lost(self) -> None:
        """The voice connection is gone for good; tear the queue down."""
        async with self._lock:
            if self.destroyed:
                return
            logger.warning(LogTemplates.QUEUE_CONNECTION_LOST, self.guild_id)
            self.voice_connection_state = VoiceConnectionState.DISCONNECTED
            await self._notify(DiscordUIMessages.CONNECTION_LOST)
            await self._dissolve()

    async def _connect(self) -> bool:
        logger.info(LogTemplates.QUEUE_CONNECTING, self.voice_channel_id, self.guild_id)
        self._set_state(QueueState.CONNECTING)
        self.voice_connection_state = VoiceConnectionState.CONNECTING
        try:
            self.connection = await self._voice.join(self.guild_id, self.voice_channel_id)
        except VoiceJoinError as e:
            logger.warning(LogTemplates.QUEUE_CONNECT_FAILED, self.voice_channel_id, self.guild_id)
            logger.debug("Voice join failure reason: %s", e.reason)
            self.voice_connection_state = VoiceConnectionState.DISCONNECTED
            await self._notify(DiscordUIMessages.VOICE_JOIN_FAILED)
            await self._dissolve()
            return False
        self.voice_connection_state = VoiceConnectionState.CONNECTED
        return True

    # ── Restore ─────────────────────────────────────────────────────

    async def restore_playback(
        self,
        songs: list[Song],
        *,
        elapsed_ms: int,
        now_playing_message_id: int | None,
        paused: bool = False,
    ) -> bool:
        """Rebuild a saved queue and resume its first song at ``elapsed_ms``.

        The saved now-playing message is reused, so nothing new is posted.
        A queue saved while paused comes back paused once its stream starts.
        Returns False if voice could not be joined.
        """
        async with self._lock:
            if self.destroyed or self.songs:
                raise InvalidOperationError("restore_playback", self.state.value)
            for song in songs:
                self._insert(song, insert=False)
            if not await self._connect():
                return False
            if now_playing_message_id is not None:
                self.now_playing_message_id = now_playing_message_id
                await self._attach_controls()
            self._pause_on_start = paused
            await self._play(start_ms=elapsed_ms, resuming=True)
        await self._broadcast()
        return not self.destroyed

    # ── Playback pipeline ───────────────────────────────────────────

    async def _play(self, start_ms: int = 0, resuming: bool = False) -> None:
        """Start ``songs[0]``, dropping songs that fail to resolve. Lock must be held."""
        while self.songs and not self.destroyed:
            song = self.songs[0]
            self.played_song_ids.add(song.id)
            self._store.record_song_played()

            if resuming:
                await song.resume()
            else:
                await song.prepare()
            if self.destroyed:
                return

            if song.error or not song.is_resolved or self.connection is None:
                error = song.error or DiscordUIMessages.NOT_CONNECTED.format(action="played")
                logger.warning(LogTemplates.PLAYBACK_SONG_ERROR, song.id, self.guild_id, error)
                await self._notify(DiscordUIMessages.SONG_FAILED.format(title=song.title, error=error))
                self.songs.pop(0)
                song.destroy()
                start_ms, resuming = 0, False
                self._pause_on_start = False
                continue

            offset = 0 if song.live else max(0, start_ms)
            logger.info(LogTemplates.PLAYBACK_STARTING, song.id, self.guild_id, offset)
            listener = _QueueStreamListener(self)
            self._listener = listener
            self._start_offset_ms = offset
            self.is_skippable = False
            self.playing = True
            self.paused_at_ms = None
            self._set_state(QueueState.PLAYING)
            self._stream = await self.connection.play(str(song.track), listener, offset)
            return

        await self._dissolve()

    async def _on_stream_started(self, listener: _QueueStreamListener) -> None:
        async with self._lock:
            if listener is not self._listener or self.destroyed or not self.songs:
                logger.debug(LogTemplates.STREAM_STALE_EVENT, "start", self.guild_id)
                return
            song = self.songs[0]
            logger.debug(LogTemplates.STREAM_STARTED, song.id, self.guild_id)
            self.is_skippable = True
            self.song_started_at_ms = self._clock() - self._start_offset_ms
            self.paused_at_ms = None
            if self._pause_on_start:
                self._pause_on_start = False
                if self._stream is not None and not song.live:
                    self._stream.pause()
                    self.playing = False
                    self.paused_at_ms = self._clock()
                    self._set_state(QueueState.PAUSED)
            await self._show_now_playing()
            self._start_now_playing_refresh(song)
        await self._broadcast()

    async def _on_stream_ended(self, listener: _QueueStreamListener) -> None:
        async with self._lock:
            if listener is not self._listener or self.destroyed:
                logger.debug(LogTemplates.STREAM_STALE_EVENT, "end", self.guild_id)
                return
            self._listener = None
            self._stream = None
            self._pause_on_start = False
            self.is_skippable = False
            self._cancel_now_playing_refresh()

            if not self.songs:
                await self._dissolve()
                return

            finished = self.songs[0]
            logger.debug(LogTemplates.STREAM_ENDED, finished.id, self.guild_id)
            if self.auto and len(self.songs) == 1:
                await self._auto_advance(finished)

            self.songs.pop(0)
            finished.destroy()
            self.song_started_at_ms = None
            self.paused_at_ms = None
            if self.songs:
                await self._play()
            else:
                await self._dissolve()
        await self._broadcast()

    async def _auto_advance(self, finished: Song) -> None:
        # Only the first related candidate is considered.
        related = await finished.get_related()
        candidate = related[0] if related else None
        if candidate is None or candidate.id in self.played_song_ids:
            logger.info(LogTemplates.AUTO_ADVANCE_EXHAUSTED, self.guild_id)
            await self._notify(DiscordUIMessages.AUTO_EXHAUSTED)
            return
        self._insert(candidate, insert=False)
        logger.info(LogTemplates.AUTO_ADVANCE_ADDED, candidate.id, finished.id, self.guild_id)

    # ── Now playing card ────────────────────────────────────────────

    def _now_playing_card(self) -> NowPlayingCard | None:
        if not self.songs:
            return None
        song = self.songs[0]
        return NowPlayingCard(
            title=song.title,
            progress=song.get_progress(self.elapsed_ms, not self.playing),
            auto=self.auto,
            controls_hint=self._controls_hint,
            thumbnail_url=song.thumbnail.url or None,
        )

    async def _show_now_playing(self) -> None:
        card = self._now_playing_card()
        if card is None:
            return
        if self.now_playing_message_id is None:
            self.now_playing_message_id = await self._presenter.send_now_playing(self.text_channel_id, card)
            await self._attach_controls()
        else:
            await self._edit_now_playing()

    async def _edit_now_playing(self) -> None:
        card = self._now_playing_card()
        if card is None or self.now_playing_message_id is None:
            return
        edited = await self._presenter.edit_now_playing(self.text_channel_id, self.now_playing_message_id, card)
        if not edited:
            logger.warning(LogTemplates.NOW_PLAYING_UPDATE_FAILED, self.guild_id)

    async def _attach_controls(self) -> None:
        if self.now_playing_message_id is None:
            return
        self.controls_attached = await self._presenter.attach_controls(
            self.text_channel_id, self.now_playing_message_id
        )
        if not self.controls_attached and not self._controls_hint:
            self._controls_hint = True
            await self._edit_now_playing()

    def _start_now_playing_refresh(self, song: Song) -> None:
        self._cancel_now_playing_refresh()
        self._np_task = asyncio.create_task(self._refresh_now_playing(song))

    def _cancel_now_playing_refresh(self) -> None:
        task = self._np_task
        self._np_task = None
        if task is not None and task is not asyncio.current_task():
            task.cancel()

    async def _refresh_now_playing(self, song: Song) -> None:
        interval = song.np_update_interval_ms
        while not self.destroyed and self.songs and self.songs[0] is song:
            await asyncio.sleep((interval - self.elapsed_ms % interval) / 1000)
            if self.destroyed or not self.songs or self.songs[0] is not song:
                return
            try:
                await self._edit_now_playing()
            except Exception:
                logger.exception(LogTemplates.NOW_PLAYING_UPDATE_FAILED, self.guild_id)

    # ── Teardown ────────────────────────────────────────────────────

    async def _dissolve(self) -> None:
        """Tear everything down and leave the store. Lock must be held."""
        if self.destroyed:
            return
        self._set_state(QueueState.DESTROYED)
        songs, self.songs = self.songs, []
        self.auto = False
        self.is_skippable = False
        self._cancel_idle_timer()
        self._cancel_now_playing_refresh()

        stream, self._stream, self._listener = self._stream, None, None
        if stream is not None:
            stream.stop()
        for song in songs:
            song.destroy()

        if self.connection is not None:
            try:
                await self.connection.leave()
            finally:
                self.voice_connection_state = VoiceConnectionState.DISCONNECTED
        if self.now_playing_message_id is not None and self.controls_attached:
            await self._presenter.clear_controls(self.text_channel_id, self.now_playing_message_id)
            self.controls_attached = False

        logger.info(LogTemplates.QUEUE_DISSOLVED, self.guild_id)
        await self._store.delete(self.guild_id)

    async def drain(self) -> None:
        """Wait for scheduled transport callbacks to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # ── Helpers ─────────────────────────────────────────────────────

    def _set_state(self, target: QueueState) -> None:
        if target is self.state:
            return
        if not self.state.can_transition_to(target):
            raise InvalidOperationError(f"transition to {target.value}", self.state.value)
        self.state = target

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)

    def _task_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("Queue task failed in guild %s", self.guild_id, exc_info=task.exception())

    async def _notify(self, text: str) -> None:
        await self._presenter.send_text(self.text_channel_id, text)

    async def _broadcast(self) -> None:
        await self._events.publish(QueueUpdated(guild_id=self.guild_id, queue=self.to_view()))
