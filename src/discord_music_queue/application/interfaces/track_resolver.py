"""Port interface for turning a song identifier into a playable track."""

from __future__ import annotations

from abc import ABC, abstractmethod

from discord_music_queue.domain.shared.types import NonEmptyStr


class TrackResolutionError(Exception):
    """Base class for track resolution failures."""


class NoResultError(TrackResolutionError):
    """The resolver found nothing for the identifier."""


class TrackTransportError(TrackResolutionError):
    """The resolver could not be reached or returned garbage."""


class TrackResolver(ABC):
    """Interface for resolving identifiers (video ids or stream URLs) to track tokens."""

    @abstractmethod
    async def resolve_track(self, identifier: NonEmptyStr, region_hint: str | None = None) -> str:
        """Return an opaque, playable track for ``identifier``.

        Raises NoResultError or TrackTransportError.
        """
        ...
