"""On-demand YouTube videos."""

from __future__ import annotations

import logging
from typing import ClassVar

from discord_music_queue.application.interfaces.metadata_client import (
    MetadataClient,
    MetadataError,
    RelatedVideo,
)
from discord_music_queue.application.interfaces.track_resolver import NoResultError, TrackResolver
from discord_music_queue.application.songs.base import Song
from discord_music_queue.domain.music.progress import pretty_seconds, progress_bar
from discord_music_queue.domain.music.snapshots import YouTubeSongSnapshot
from discord_music_queue.domain.music.value_objects import Thumbnail
from discord_music_queue.domain.shared.enums import SongKind
from discord_music_queue.domain.shared.messages import DiscordUIMessages, ErrorMessages, LogTemplates
from discord_music_queue.utils.async_cache import AsyncValueCache

logger = logging.getLogger(__name__)

PROGRESS_BAR_CELLS = 35
PAUSED_LABEL = " [PAUSED] "
DEFAULT_RELATED_LIMIT = 10


class YouTubeSong(Song):
    kind: ClassVar[str] = SongKind.YOUTUBE

    def __init__(
        self,
        video_id: str,
        title: str,
        length_seconds: int,
        *,
        resolver: TrackResolver,
        metadata: MetadataClient,
        track: str | None = None,
        related_limit: int = DEFAULT_RELATED_LIMIT,
    ) -> None:
        super().__init__()
        self._resolver = resolver
        self._metadata = metadata
        self._related_limit = related_limit

        self.id = video_id
        self.title = title
        self.length_seconds = length_seconds
        self.live = False
        self.thumbnail = Thumbnail(url=f"https://i.ytimg.com/vi/{video_id}/mqdefault.jpg", width=320, height=180)
        self.queue_line = f"**{title}** ({pretty_seconds(length_seconds)})"
        self.np_update_interval_ms = 5000
        if track:
            self.track = track

        self._prepare_cache: AsyncValueCache[None] = AsyncValueCache(self._resolve)
        self._related: AsyncValueCache[list[RelatedVideo]] = AsyncValueCache(self._fetch_related)

        self.validate()

    @classmethod
    def from_snapshot(
        cls,
        snapshot: YouTubeSongSnapshot,
        *,
        resolver: TrackResolver,
        metadata: MetadataClient,
        related_limit: int = DEFAULT_RELATED_LIMIT,
    ) -> YouTubeSong:
        return cls(
            snapshot.id,
            snapshot.title,
            snapshot.length_seconds,
            resolver=resolver,
            metadata=metadata,
            track=snapshot.track,
            related_limit=related_limit,
        )

    # ── Playback ────────────────────────────────────────────────────

    async def prepare(self) -> None:
        await self._prepare_cache.get()

    async def resume(self) -> None:
        await self.prepare()

    async def _resolve(self) -> None:
        if self.is_resolved:
            return
        try:
            self.track = await self._resolver.resolve_track(self.id, self._region_hint())
            self.error = None
            logger.debug(LogTemplates.SONG_RESOLVED, self.kind, self.id)
        except NoResultError:
            self.error = ErrorMessages.NO_RESULTS_FOR_ID.format(id=self.id)
            logger.warning(LogTemplates.SONG_RESOLUTION_FAILED, self.id, self.error)
        except Exception as e:
            self.error = ErrorMessages.RESOLUTION_ERROR.format(name=type(e).__name__, message=e)
            logger.warning(LogTemplates.SONG_RESOLUTION_FAILED, self.id, self.error)

    def get_progress(self, elapsed_ms: int, paused: bool) -> str:
        maximum = self.length_seconds
        elapsed = min(max(elapsed_ms, 0) // 1000, maximum)
        bar = progress_bar(PROGRESS_BAR_CELLS, elapsed, maximum, PAUSED_LABEL if paused else "")
        return f"`[ {pretty_seconds(elapsed)} {bar} {pretty_seconds(maximum)} ]`"

    # ── Related content ─────────────────────────────────────────────

    async def _fetch_related(self) -> list[RelatedVideo]:
        related = await self._metadata.get_related(self.id)
        self.type_while_get_related = False
        return [video for video in related if video.length_seconds > 0][: self._related_limit]

    async def _load_related(self) -> list[RelatedVideo] | None:
        """Cached related videos, or None when the lookup failed."""
        try:
            return await self._related.get()
        except MetadataError as e:
            logger.warning(LogTemplates.SONG_RELATED_FAILED, self.id, e)
        except Exception as e:
            logger.exception(LogTemplates.SONG_RELATED_FAILED, self.id, e)
        self.type_while_get_related = False
        return None

    async def get_related(self) -> list[Song]:
        related = await self._load_related()
        if related is None:
            return []
        return [
            YouTubeSong(
                video.id,
                video.title,
                video.length_seconds,
                resolver=self._resolver,
                metadata=self._metadata,
                related_limit=self._related_limit,
            )
            for video in related
        ]

    async def show_related(self) -> str:
        related = await self._load_related()
        if related is None:
            origin = self._metadata.origin
            return "\n".join(
                [
                    DiscordUIMessages.RELATED_INVALID,
                    f"<{origin}/api/v1/videos/{self.id}>",
                    f"<{origin}/v/{self.id}>",
                    f"<https://youtu.be/{self.id}>",
                ]
            )

        if not related:
            return DiscordUIMessages.RELATED_NONE

        lines = [f"**{DiscordUIMessages.RELATED_HEADER}**"]
        for number, video in enumerate(related, start=1):
            lines.append(f"{number}. **{video.title}** ({pretty_seconds(video.length_seconds)})")
            if video.author:
                lines.append(f" — {video.author}")
        lines.append(DiscordUIMessages.RELATED_FOOTER)
        return "\n".join(lines)

    async def show_info(self) -> str:
        return f"https://www.youtube.com/watch?v={self.id}"

    def delete_cache(self) -> None:
        self._related.clear()

    # ── Lifecycle ───────────────────────────────────────────────────

    def destroy(self) -> None:
        self._related.clear()

    def to_snapshot(self) -> YouTubeSongSnapshot:
        return YouTubeSongSnapshot(
            id=self.id,
            title=self.title,
            length_seconds=self.length_seconds,
            track=self.track if self.is_resolved else None,
        )
