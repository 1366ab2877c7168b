"""Port interface for the durable document store holding queue snapshots."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from discord_music_queue.domain.shared.types import NonEmptyStr


class SnapshotStore(ABC):
    """Key/document store. Documents are JSON-compatible dicts."""

    @abstractmethod
    async def get(self, key: NonEmptyStr) -> dict[str, Any] | None:
        ...

    @abstractmethod
    async def upsert(self, key: NonEmptyStr, document: dict[str, Any]) -> None:
        ...
