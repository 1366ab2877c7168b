"""Live Frisky Radio stations."""

from __future__ import annotations

import asyncio
import logging
import math
from dataclasses import dataclass
from typing import ClassVar

from discord_music_queue.application.interfaces.station_feed import (
    AlbumArt,
    Mix,
    MixData,
    StationFeed,
    StationStream,
)
from discord_music_queue.application.interfaces.track_resolver import NoResultError, TrackResolver
from discord_music_queue.application.songs.base import Song
from discord_music_queue.domain.music.progress import pretty_seconds, short_duration
from discord_music_queue.domain.music.snapshots import FriskySongSnapshot
from discord_music_queue.domain.music.stations import get_station
from discord_music_queue.domain.music.value_objects import UNRESOLVED_TRACK, Thumbnail
from discord_music_queue.domain.shared.datetime_utils import now_ms
from discord_music_queue.domain.shared.enums import SongKind
from discord_music_queue.domain.shared.exceptions import StationInfoUnavailableError
from discord_music_queue.domain.shared.messages import DiscordUIMessages, ErrorMessages, LogTemplates
from discord_music_queue.utils.async_cache import AsyncValueCache

logger = logging.getLogger(__name__)

FRISKY_PLACEHOLDER_THUMBNAIL = "https://beta.frisky.fm/favicon.png"
BAR_PATTERN = "= ⋄ ==== ⋄ ==="
BAR_WINDOW = 7
BAR_REPEAT = 5
TRACK_LIST_SHOWN = 6
DEFAULT_RETRY_ATTEMPTS = 5
DEFAULT_RETRY_DELAY_SECONDS = 1.0


@dataclass(frozen=True, slots=True)
class OnAir:
    """A schedule slot whose mix, episode and artwork are all present."""

    stream: StationStream
    mix: Mix
    data: MixData
    art: AlbumArt


class FriskySong(Song):
    kind: ClassVar[str] = SongKind.FRISKY

    def __init__(
        self,
        station: str,
        *,
        feed: StationFeed,
        resolver: TrackResolver,
        track: str | None = None,
        retry_attempts: int = DEFAULT_RETRY_ATTEMPTS,
        retry_delay_seconds: float = DEFAULT_RETRY_DELAY_SECONDS,
    ) -> None:
        super().__init__()
        self.station_info = get_station(station)
        self.station = self.station_info.key
        self._feed = feed
        self._resolver = resolver
        self._retry_attempts = retry_attempts
        self._retry_delay_seconds = retry_delay_seconds
        self._bound = False

        self.id = self.station
        self.title = self.station_info.title
        self.queue_line = self.station_info.queue_line
        self.length_seconds = 0
        self.live = True
        self.thumbnail = Thumbnail(url=FRISKY_PLACEHOLDER_THUMBNAIL, width=320, height=180)
        self.np_update_interval_ms = 15000
        self.type_while_get_related = False
        self.no_pause_reason = DiscordUIMessages.LIVE_NO_PAUSE
        if track:
            self.track = track

        self._prepare_cache: AsyncValueCache[None] = AsyncValueCache(self._prepare, memoize=False)
        self._station_info: AsyncValueCache[OnAir] = AsyncValueCache(self._fetch_station_info)

        self.validate()

    @classmethod
    def from_snapshot(
        cls,
        snapshot: FriskySongSnapshot,
        *,
        feed: StationFeed,
        resolver: TrackResolver,
        retry_attempts: int = DEFAULT_RETRY_ATTEMPTS,
        retry_delay_seconds: float = DEFAULT_RETRY_DELAY_SECONDS,
    ) -> FriskySong:
        return cls(
            snapshot.station,
            feed=feed,
            resolver=resolver,
            track=snapshot.track,
            retry_attempts=retry_attempts,
            retry_delay_seconds=retry_delay_seconds,
        )

    # ── Playback ────────────────────────────────────────────────────

    async def prepare(self) -> None:
        await self._prepare_cache.get()

    async def resume(self) -> None:
        await self.prepare()

    async def _prepare(self) -> None:
        if not self._bound:
            self._feed.subscribe(self.station, self.station_update)
            self._bound = True
        await self.station_update()

        # Live tracks expire, so every prepare resolves a fresh one.
        self.track = UNRESOLVED_TRACK
        self.error = None
        try:
            self.track = await self._resolver.resolve_track(self._feed.stream_url(self.station), self._region_hint())
            logger.debug(LogTemplates.SONG_RESOLVED, self.kind, self.station)
        except NoResultError:
            self.error = ErrorMessages.NO_TRACKS_FOR_STATION.format(station=self.station)
            logger.warning(LogTemplates.SONG_RESOLUTION_FAILED, self.station, self.error)
        except Exception as e:
            self.error = ErrorMessages.RESOLUTION_ERROR.format(name=type(e).__name__, message=e)
            logger.warning(LogTemplates.SONG_RESOLUTION_FAILED, self.station, self.error)

    def get_progress(self, elapsed_ms: int, paused: bool) -> str:
        offset = (max(elapsed_ms, 0) // self.np_update_interval_ms) % BAR_WINDOW
        fragment = BAR_PATTERN[BAR_WINDOW - offset : 2 * BAR_WINDOW - offset]
        bar = fragment * BAR_REPEAT
        return f"`[ {pretty_seconds(max(elapsed_ms, 0) // 1000)} \u200b{bar}\u200b LIVE ]`"

    # ── Station feed ────────────────────────────────────────────────

    async def _fetch_station_info(self) -> OnAir:
        reason = ErrorMessages.STATION_ITEM_UNKNOWN
        for attempt in range(1, self._retry_attempts + 1):
            on_air, reason = self._read_station()
            if on_air is not None:
                return on_air
            if attempt < self._retry_attempts:
                logger.debug(LogTemplates.STATION_RETRY, self.station, reason, attempt, self._retry_attempts)
                await asyncio.sleep(self._retry_delay_seconds)
        raise StationInfoUnavailableError(self.station, reason)

    def _read_station(self) -> tuple[OnAir | None, str]:
        index = self._feed.now_playing_index(self.station)
        if index is None:
            return None, ErrorMessages.STATION_ITEM_UNKNOWN
        schedule = self._feed.schedule(self.station)
        stream = schedule[index] if 0 <= index < len(schedule) else None
        if stream is None:
            return None, ErrorMessages.STATION_STREAM_UNAVAILABLE
        mix = stream.mix
        if mix is None:
            return None, ErrorMessages.STATION_MIX_UNAVAILABLE
        if mix.data is None:
            return None, ErrorMessages.STATION_MIX_DATA_UNAVAILABLE
        if mix.episode is None:
            return None, ErrorMessages.STATION_EPISODE_UNAVAILABLE
        if mix.episode.data is None:
            return None, ErrorMessages.STATION_EPISODE_DATA_UNAVAILABLE
        return OnAir(stream=stream, mix=mix, data=mix.data, art=mix.episode.data.album_art), ""

    async def station_update(self) -> None:
        """Refresh title and artwork from the feed and tell the owning queue."""
        self._station_info.clear()
        try:
            on_air = await self._station_info.get()
        except StationInfoUnavailableError as e:
            logger.warning(LogTemplates.STATION_UPDATE_FAILED, self.station, e.reason)
            return

        art = on_air.art
        self.title = on_air.data.title
        self.thumbnail = Thumbnail(url=art.url, width=art.image_width, height=art.image_height)
        if self.queue is not None:
            await self.queue.notify_song_updated(self)

    # ── Related content ─────────────────────────────────────────────

    async def get_related(self) -> list[Song]:
        return []

    async def show_related(self) -> str:
        return DiscordUIMessages.RELATED_FRISKY

    async def show_info(self) -> str:
        try:
            on_air = await self._station_info.get()
        except StationInfoUnavailableError as e:
            logger.warning(LogTemplates.STATION_INFO_FAILED, self.station, e.reason)
            return DiscordUIMessages.STATION_INFO_FAILED

        stream, mix, data = on_air.stream, on_air.mix, on_air.data
        now = now_ms()
        started_ago = -stream.time_until_ms(now)
        remaining = stream.time_until_ms(now) + stream.duration_seconds * 1000
        if stream.duration_seconds:
            percent = math.floor(started_ago / (stream.duration_seconds * 1000) * 100)
        else:
            percent = 0
        percent = min(max(percent, 0), 100)

        show_name = data.title.split(" - ")[0]
        show_link = f" / <https://beta.frisky.fm/shows/{data.show_id.id}>" if data.show_id else ""
        rows = [
            ("Episode", f"{data.title} / <https://beta.frisky.fm/mix/{mix.id}>"),
            ("Show", f"{show_name}{show_link}"),
            ("Genre", ", ".join(data.genre)),
            ("Station", self.station.capitalize()),
            (
                "Schedule",
                f"started {short_duration(started_ago)} ago, "
                f"{short_duration(remaining)} remaining ({percent}%)",
            ),
        ]
        width = max(len(label) for label, _ in rows)
        lines = [f"**FRISKY: {data.title}**"]
        lines.extend(f"`{label.ljust(width)}` {value}" for label, value in rows)

        if data.track_list:
            lines.append("**Track list**")
            lines.extend(f"{entry.artist} - {entry.title}" for entry in data.track_list[:TRACK_LIST_SHOWN])
            hidden = len(data.track_list) - TRACK_LIST_SHOWN
            if hidden > 0:
                lines.append(f"_and {hidden} more..._")
        return "\n".join(lines)

    # ── Lifecycle ───────────────────────────────────────────────────

    def destroy(self) -> None:
        if self._bound:
            self._feed.unsubscribe(self.station, self.station_update)
            self._bound = False

    def to_snapshot(self) -> FriskySongSnapshot:
        return FriskySongSnapshot(station=self.station, track=self.track if self.is_resolved else None)
