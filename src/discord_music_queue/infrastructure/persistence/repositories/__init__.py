"""SQLite repository implementations."""

from discord_music_queue.infrastructure.persistence.repositories.snapshot_repository import (
    SQLiteSnapshotStore,
)

__all__ = [
    "SQLiteSnapshotStore",
]
