"""SQLite implementation of the queue snapshot store."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from discord_music_queue.application.interfaces.snapshot_store import SnapshotStore
from discord_music_queue.domain.shared.datetime_utils import UtcDateTime
from discord_music_queue.domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from ..database import Database

logger = logging.getLogger(__name__)


class SQLiteSnapshotStore(SnapshotStore):
    def __init__(self, database: Database) -> None:
        self._db = database

    async def get(self, key: str) -> dict[str, Any] | None:
        row = await self._db.fetch_one(
            "SELECT document FROM queue_store_snapshots WHERE id = ?",
            (key,),
        )
        if row is None:
            return None

        try:
            document = json.loads(row["document"])
        except json.JSONDecodeError as e:
            logger.warning("Failed to parse stored snapshot %s: %s", key, e)
            return None
        if not isinstance(document, dict):
            return None

        logger.debug(LogTemplates.SNAPSHOT_LOADED, key)
        return document

    async def upsert(self, key: str, document: dict[str, Any]) -> None:
        await self._db.execute(
            """
            INSERT INTO queue_store_snapshots (id, document, updated_at)
            VALUES (?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                document = excluded.document,
                updated_at = excluded.updated_at
            """,
            (key, json.dumps(document), UtcDateTime.now().iso),
        )
