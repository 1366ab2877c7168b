"""Frisky Radio schedule feed."""

from discord_music_queue.infrastructure.frisky.station_feed import FriskyStationFeed, parse_schedule

__all__ = ["FriskyStationFeed", "parse_schedule"]
