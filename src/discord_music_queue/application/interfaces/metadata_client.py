"""Port interface for video metadata lookups."""

from __future__ import annotations

from abc import ABC, abstractmethod

from pydantic import BaseModel, ConfigDict, Field

from discord_music_queue.domain.shared.types import NonEmptyStr, NonNegativeInt, PositiveInt


class VideoMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: NonEmptyStr
    title: NonEmptyStr
    length_seconds: NonNegativeInt
    author: str = ""
    thumbnail_urls: list[str] = Field(default_factory=list)


class RelatedVideo(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: NonEmptyStr
    title: NonEmptyStr
    length_seconds: NonNegativeInt
    author: str = ""


class MetadataError(Exception):
    """Base class for metadata lookup failures."""


class MetadataNotFoundError(MetadataError):
    def __init__(self, video_id: str) -> None:
        super().__init__(f"No video found for {video_id}")
        self.video_id = video_id


class MetadataTransportError(MetadataError):
    """The metadata service could not be reached or returned invalid data."""


class MetadataClient(ABC):
    """Interface for looking up videos, their related videos, and search results."""

    @property
    @abstractmethod
    def origin(self) -> str:
        """Base URL of the metadata service, used in user-facing fallback links."""
        ...

    @abstractmethod
    async def resolve_by_id(self, video_id: NonEmptyStr) -> VideoMetadata:
        ...

    @abstractmethod
    async def get_related(self, video_id: NonEmptyStr) -> list[RelatedVideo]:
        ...

    @abstractmethod
    async def search(self, query: NonEmptyStr, limit: PositiveInt = 5) -> list[VideoMetadata]:
        ...
