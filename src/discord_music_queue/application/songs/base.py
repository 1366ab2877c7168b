"""The playback contract every queued song fulfils."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, ClassVar, Protocol

from discord_music_queue.domain.music.snapshots import SongView
from discord_music_queue.domain.music.value_objects import UNRESOLVED_TRACK, Thumbnail, Track
from discord_music_queue.domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from discord_music_queue.domain.music.snapshots import FriskySongSnapshot, YouTubeSongSnapshot

logger = logging.getLogger(__name__)


class SongOwner(Protocol):
    """What a song may ask of the queue holding it."""

    guild_id: int

    @property
    def region_hint(self) -> str | None: ...

    async def notify_song_updated(self, song: Song) -> None: ...


class Song(ABC):
    """A playable item in a guild queue.

    Variants set every display field in their constructor and then call
    ``validate()``. ``prepare()`` never raises: a failed resolution is
    recorded in ``error`` and the queue moves on.
    """

    kind: ClassVar[str]

    def __init__(self) -> None:
        self.id = ""
        self.title = ""
        self.queue_line = ""
        self.length_seconds = -1
        self.live: bool | None = None
        self.thumbnail = Thumbnail(url="")
        self.np_update_interval_ms = 0
        self.track: Track = UNRESOLVED_TRACK
        self.error: str | None = None
        self.no_pause_reason: str | None = None
        self.type_while_get_related = True
        self.queue: SongOwner | None = None
        self.validated = False

    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={self.id!r} title={self.title!r}>"

    # ── Contract ────────────────────────────────────────────────────

    @abstractmethod
    async def prepare(self) -> None:
        """Resolve ``track``. Failures land in ``error``."""

    @abstractmethod
    async def resume(self) -> None:
        """Re-validate state after the song was rebuilt from a snapshot."""

    @abstractmethod
    def get_progress(self, elapsed_ms: int, paused: bool) -> str:
        """Progress line for the now-playing card. Must not fail."""

    @abstractmethod
    async def get_related(self) -> list[Song]:
        """Candidate next songs. Empty on failure."""

    @abstractmethod
    async def show_related(self) -> str:
        ...

    @abstractmethod
    async def show_info(self) -> str:
        ...

    @abstractmethod
    def destroy(self) -> None:
        """Release subscriptions and caches. Safe to call more than once."""

    @abstractmethod
    def to_snapshot(self) -> YouTubeSongSnapshot | FriskySongSnapshot:
        ...

    # ── Shared behaviour ────────────────────────────────────────────

    @property
    def is_resolved(self) -> bool:
        return self.track is not UNRESOLVED_TRACK

    def bind(self, queue: SongOwner) -> None:
        self.queue = queue

    def delete_cache(self) -> None:
        """Drop prefetched data the song won't need until it plays."""

    def get_state(self) -> SongView:
        return SongView(
            kind=self.kind,
            id=self.id,
            title=self.title,
            queue_line=self.queue_line,
            length_seconds=max(self.length_seconds, 0),
            live=bool(self.live),
            thumbnail_url=self.thumbnail.url,
            track_resolved=self.is_resolved,
            error=self.error,
        )

    def validate(self) -> None:
        for key in ("id", "title", "queue_line", "np_update_interval_ms"):
            if not getattr(self, key):
                self._validation_error(f"unset {key}")
        if not isinstance(self.length_seconds, int) or self.length_seconds < 0:
            self._validation_error("unset length_seconds")
        if not self.thumbnail.url:
            self._validation_error("unset thumbnail url")
        if self.live is None:
            self._validation_error("unset live")
        self.validated = True

    def _validation_error(self, message: str) -> None:
        logger.error(LogTemplates.SONG_VALIDATION_ERROR, type(self).__name__, message)

    def _region_hint(self) -> str | None:
        return self.queue.region_hint if self.queue is not None else None
