"""
Application Interfaces (Ports)

Abstract interfaces that define contracts between the application
layer and infrastructure adapters. These are the "ports" in
hexagonal architecture.
"""

from discord_music_queue.application.interfaces.metadata_client import MetadataClient
from discord_music_queue.application.interfaces.presenter import QueuePresenter
from discord_music_queue.application.interfaces.snapshot_store import SnapshotStore
from discord_music_queue.application.interfaces.station_feed import StationFeed
from discord_music_queue.application.interfaces.track_resolver import TrackResolver
from discord_music_queue.application.interfaces.voice_adapter import VoiceAdapter

__all__ = [
    "MetadataClient",
    "QueuePresenter",
    "SnapshotStore",
    "StationFeed",
    "TrackResolver",
    "VoiceAdapter",
]
