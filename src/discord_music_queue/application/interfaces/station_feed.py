"""Port interface for the Frisky Radio now-playing feed."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable

from pydantic import BaseModel, ConfigDict, Field

from discord_music_queue.domain.shared.types import NonEmptyStr, NonNegativeInt

StationListener = Callable[[], Awaitable[None]]


class AlbumArt(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    url: NonEmptyStr
    image_width: NonNegativeInt = 0
    image_height: NonNegativeInt = 0


class EpisodeData(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    album_art: AlbumArt


class Episode(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    data: EpisodeData | None = None


class ShowRef(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str


class TrackListEntry(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    artist: str = ""
    title: str = ""


class MixData(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    title: NonEmptyStr
    show_id: ShowRef | None = None
    genre: list[str] = Field(default_factory=list)
    track_list: list[TrackListEntry] = Field(default_factory=list)


class Mix(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    data: MixData | None = None
    episode: Episode | None = None


class StationStream(BaseModel):
    """One slot of a station schedule."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    start_ms: NonNegativeInt
    duration_seconds: NonNegativeInt
    mix: Mix | None = None

    def time_until_ms(self, now_ms: int) -> int:
        """Milliseconds until the slot starts (negative once it has started)."""
        return self.start_ms - now_ms


class StationFeed(ABC):
    """Interface for a radio schedule feed with change notifications."""

    @abstractmethod
    def now_playing_index(self, station: str) -> int | None:
        """Index into ``schedule(station)`` of the slot on air now, if known."""
        ...

    @abstractmethod
    def schedule(self, station: str) -> list[StationStream]:
        ...

    @abstractmethod
    def stream_url(self, station: str) -> str:
        ...

    @abstractmethod
    def subscribe(self, station: str, listener: StationListener) -> None:
        ...

    @abstractmethod
    def unsubscribe(self, station: str, listener: StationListener) -> None:
        ...
