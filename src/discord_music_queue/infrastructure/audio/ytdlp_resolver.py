"""TrackResolver implementation using yt-dlp."""

from __future__ import annotations

import asyncio
import logging
import re
import time
from typing import Any, Final, cast

from yt_dlp import YoutubeDL
from yt_dlp.utils import DownloadError

from discord_music_queue.application.interfaces.track_resolver import (
    NoResultError,
    TrackResolver,
    TrackTransportError,
)
from discord_music_queue.config.settings import AudioSettings
from discord_music_queue.domain.shared.messages import LogTemplates
from discord_music_queue.infrastructure.audio.models import (
    CACHE_MAX_SIZE,
    CACHE_TTL,
    LOG_URL_TRUNCATE,
    CacheEntry,
    YtDlpOpts,
    YtDlpTrackInfo,
)

logger = logging.getLogger(__name__)

VIDEO_ID_PATTERN: Final[re.Pattern[str]] = re.compile(r"^[a-zA-Z0-9_-]{11}$")
YOUTUBE_HOST_PATTERN: Final[re.Pattern[str]] = re.compile(r"^https?://([a-z0-9-]+\.)*(youtube\.com|youtu\.be)/")
URL_PATTERN: Final[re.Pattern[str]] = re.compile(r"^https?://")

# Discord voice regions mapped to the country yt-dlp should appear to be in.
REGION_COUNTRIES: Final[dict[str, str]] = {
    "us-east": "US",
    "us-central": "US",
    "us-south": "US",
    "us-west": "US",
    "brazil": "BR",
    "europe": "DE",
    "rotterdam": "NL",
    "russia": "RU",
    "hongkong": "HK",
    "india": "IN",
    "japan": "JP",
    "singapore": "SG",
    "south-korea": "KR",
    "southafrica": "ZA",
    "sydney": "AU",
}


def region_to_country(region_hint: str | None) -> str | None:
    if not region_hint:
        return None
    return REGION_COUNTRIES.get(region_hint.lower())


class YtDlpTrackResolver(TrackResolver):
    """Resolves YouTube video ids to direct stream URLs.

    Plain radio stream URLs need no extraction and are returned as-is.
    """

    def __init__(self, settings: AudioSettings | None = None) -> None:
        self._settings = settings or AudioSettings()
        self._base_opts = YtDlpOpts(format=self._settings.ytdlp_format)
        self._cache: dict[str, CacheEntry] = {}
        logger.info(LogTemplates.YTDLP_CONFIGURED, self._settings.ytdlp_format)

    def _get_opts(self, **overrides: Any) -> YtDlpOpts:
        if overrides:
            return self._base_opts.model_copy(update=overrides)
        return self._base_opts

    @staticmethod
    def _to_url(identifier: str) -> str:
        if VIDEO_ID_PATTERN.match(identifier):
            return f"https://www.youtube.com/watch?v={identifier}"
        return identifier

    @staticmethod
    def is_direct_stream(identifier: str) -> bool:
        return bool(URL_PATTERN.match(identifier)) and not YOUTUBE_HOST_PATTERN.match(identifier)

    def _extract_sync(self, url: str, country: str | None) -> str:
        now = time.time()
        cache_key = f"{country or ''}|{url}"
        cached = self._cache.get(cache_key)
        if cached is not None:
            if now - cached.cached_at < CACHE_TTL:
                logger.debug(LogTemplates.CACHE_HIT_URL, url[:LOG_URL_TRUNCATE])
                if cached.stream_url is None:
                    raise NoResultError(url)
                return cached.stream_url
            self._cache.pop(cache_key, None)

        opts = self._get_opts(geo_bypass_country=country) if country else self._get_opts()
        try:
            with YoutubeDL(params=cast(Any, opts.model_dump(exclude_none=True))) as ydl:
                data = ydl.extract_info(url, download=False)
        except DownloadError as e:
            logger.exception(LogTemplates.YTDLP_FAILED_EXTRACT_INFO, url)
            raise TrackTransportError(str(e)) from e

        info = YtDlpTrackInfo.model_validate(dict(data)) if isinstance(data, dict) else None
        stream_url = info.stream_url() if info is not None else None
        self._remember(cache_key, stream_url, now)
        if stream_url is None:
            raise NoResultError(url)
        return stream_url

    def _remember(self, key: str, stream_url: str | None, now: float) -> None:
        self._cache[key] = CacheEntry(stream_url=stream_url, cached_at=now)
        if len(self._cache) > CACHE_MAX_SIZE:
            expired = [k for k, entry in self._cache.items() if now - entry.cached_at >= CACHE_TTL]
            for k in expired:
                self._cache.pop(k, None)
            if expired:
                logger.debug(LogTemplates.CACHE_EXPIRED_CLEANED, len(expired))

    async def resolve_track(self, identifier: str, region_hint: str | None = None) -> str:
        if self.is_direct_stream(identifier):
            return identifier
        return await asyncio.to_thread(self._extract_sync, self._to_url(identifier), region_to_country(region_hint))
