"""Builds songs with their collaborators wired in."""

from __future__ import annotations

import logging

from discord_music_queue.application.interfaces.metadata_client import MetadataClient
from discord_music_queue.application.interfaces.station_feed import StationFeed
from discord_music_queue.application.interfaces.track_resolver import TrackResolver
from discord_music_queue.application.songs.base import Song
from discord_music_queue.application.songs.frisky import FriskySong
from discord_music_queue.application.songs.youtube import YouTubeSong
from discord_music_queue.domain.music.snapshots import (
    FriskySongSnapshot,
    SongSnapshot,
    YouTubeSongSnapshot,
)
from discord_music_queue.domain.shared.messages import LogTemplates

logger = logging.getLogger(__name__)


class SongFactory:
    def __init__(
        self,
        *,
        resolver: TrackResolver,
        metadata: MetadataClient,
        feed: StationFeed,
        related_limit: int = 10,
        retry_attempts: int = 5,
        retry_delay_seconds: float = 1.0,
    ) -> None:
        self._resolver = resolver
        self._metadata = metadata
        self._feed = feed
        self._related_limit = related_limit
        self._retry_attempts = retry_attempts
        self._retry_delay_seconds = retry_delay_seconds

    def youtube(self, video_id: str, title: str, length_seconds: int, track: str | None = None) -> YouTubeSong:
        return YouTubeSong(
            video_id,
            title,
            length_seconds,
            resolver=self._resolver,
            metadata=self._metadata,
            track=track,
            related_limit=self._related_limit,
        )

    async def youtube_from_metadata(self, video_id: str) -> YouTubeSong:
        """Look the video up and build a song from what comes back.

        Raises MetadataNotFoundError or MetadataTransportError.
        """
        logger.debug(LogTemplates.METADATA_FETCH, video_id, self._metadata.origin)
        info = await self._metadata.resolve_by_id(video_id)
        return self.youtube(info.id, info.title, info.length_seconds)

    def frisky(self, station: str, track: str | None = None) -> FriskySong:
        """Raises UnknownStationError for stations we don't carry."""
        return FriskySong(
            station,
            feed=self._feed,
            resolver=self._resolver,
            track=track,
            retry_attempts=self._retry_attempts,
            retry_delay_seconds=self._retry_delay_seconds,
        )

    def from_snapshot(self, snapshot: SongSnapshot) -> Song:
        if isinstance(snapshot, YouTubeSongSnapshot):
            return self.youtube(snapshot.id, snapshot.title, snapshot.length_seconds, snapshot.track)
        if isinstance(snapshot, FriskySongSnapshot):
            return self.frisky(snapshot.station, snapshot.track)
        raise TypeError(f"Unknown song snapshot: {snapshot!r}")
