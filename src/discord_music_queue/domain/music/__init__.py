"""
Music Bounded Context

Queue states, persisted snapshots, station table and progress rendering.
"""

from discord_music_queue.domain.music.snapshots import (
    FriskySongSnapshot,
    QueueSnapshot,
    QueueStoreSnapshot,
    QueueView,
    SongView,
    YouTubeSongSnapshot,
)
from discord_music_queue.domain.music.value_objects import (
    UNRESOLVED_TRACK,
    ActionOrigin,
    ActionOutcome,
    ActionResult,
    QueueAction,
    QueueState,
    Thumbnail,
    VoiceConnectionState,
)

__all__ = [
    # Value Objects
    "Thumbnail",
    "UNRESOLVED_TRACK",
    "QueueState",
    "VoiceConnectionState",
    "ActionOrigin",
    "QueueAction",
    "ActionResult",
    "ActionOutcome",
    # Snapshots
    "YouTubeSongSnapshot",
    "FriskySongSnapshot",
    "QueueSnapshot",
    "QueueStoreSnapshot",
    "SongView",
    "QueueView",
]
