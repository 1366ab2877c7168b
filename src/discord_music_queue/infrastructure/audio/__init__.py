"""Audio infrastructure - yt-dlp track resolution."""

from discord_music_queue.infrastructure.audio.models import (
    AudioFormatInfo,
    CacheEntry,
    YtDlpOpts,
    YtDlpTrackInfo,
)
from discord_music_queue.infrastructure.audio.ytdlp_resolver import YtDlpTrackResolver, region_to_country

__all__ = [
    "AudioFormatInfo",
    "CacheEntry",
    "YtDlpOpts",
    "YtDlpTrackInfo",
    "YtDlpTrackResolver",
    "region_to_country",
]
