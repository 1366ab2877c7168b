"""
Songs

The polymorphic Song contract and its variants:
- YouTubeSong: on-demand video with memoized resolution and related lookups
- FriskySong: live radio station kept current from the station feed
"""

from discord_music_queue.application.songs.base import Song
from discord_music_queue.application.songs.factory import SongFactory
from discord_music_queue.application.songs.frisky import FriskySong
from discord_music_queue.application.songs.youtube import YouTubeSong

__all__ = [
    "Song",
    "SongFactory",
    "YouTubeSong",
    "FriskySong",
]
