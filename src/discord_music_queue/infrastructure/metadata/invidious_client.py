"""MetadataClient implementation backed by an Invidious instance."""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from discord_music_queue.application.interfaces.metadata_client import (
    MetadataClient,
    MetadataNotFoundError,
    MetadataTransportError,
    RelatedVideo,
    VideoMetadata,
)
from discord_music_queue.config.settings import InvidiousSettings
from discord_music_queue.domain.shared.messages import LogTemplates

logger = logging.getLogger(__name__)


# ── Pydantic models for Invidious payloads ────────────────────────────


class _InvidiousThumbnail(BaseModel):
    model_config = ConfigDict(extra="ignore")

    url: str


class _InvidiousVideo(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    video_id: str = Field(alias="videoId")
    title: str
    length_seconds: int = Field(default=0, alias="lengthSeconds")
    author: str = ""
    video_thumbnails: list[_InvidiousThumbnail] = Field(default_factory=list, alias="videoThumbnails")
    recommended_videos: list[_InvidiousVideo] = Field(default_factory=list, alias="recommendedVideos")

    def to_metadata(self) -> VideoMetadata:
        return VideoMetadata(
            id=self.video_id,
            title=self.title,
            length_seconds=max(self.length_seconds, 0),
            author=self.author,
            thumbnail_urls=[t.url for t in self.video_thumbnails],
        )

    def to_related(self) -> RelatedVideo:
        return RelatedVideo(
            id=self.video_id,
            title=self.title,
            length_seconds=max(self.length_seconds, 0),
            author=self.author,
        )


class InvidiousMetadataClient(MetadataClient):
    def __init__(
        self,
        settings: InvidiousSettings | None = None,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings or InvidiousSettings()
        self._client = client or httpx.AsyncClient(
            base_url=self._settings.origin,
            timeout=self._settings.timeout_seconds,
            follow_redirects=True,
        )

    @property
    def origin(self) -> str:
        return self._settings.origin

    async def _get_json(self, path: str, params: dict[str, Any] | None = None) -> Any:
        logger.debug(LogTemplates.METADATA_FETCH, path, self.origin)
        try:
            response = await self._client.get(path, params=params)
        except httpx.HTTPError as e:
            raise MetadataTransportError(f"{type(e).__name__}: {e}") from e
        if response.status_code == httpx.codes.NOT_FOUND:
            return None
        try:
            response.raise_for_status()
            return response.json()
        except (httpx.HTTPStatusError, ValueError) as e:
            raise MetadataTransportError(str(e)) from e

    async def _get_video(self, video_id: str) -> _InvidiousVideo:
        payload = await self._get_json(f"/api/v1/videos/{video_id}")
        if payload is None:
            raise MetadataNotFoundError(video_id)
        try:
            return _InvidiousVideo.model_validate(payload)
        except ValidationError as e:
            raise MetadataTransportError(f"Invalid video payload for {video_id}") from e

    async def resolve_by_id(self, video_id: str) -> VideoMetadata:
        video = await self._get_video(video_id)
        try:
            return video.to_metadata()
        except ValidationError as e:
            raise MetadataTransportError(f"Invalid video payload for {video_id}") from e

    async def get_related(self, video_id: str) -> list[RelatedVideo]:
        video = await self._get_video(video_id)
        try:
            return [related.to_related() for related in video.recommended_videos]
        except ValidationError as e:
            raise MetadataTransportError(f"Invalid related videos for {video_id}") from e

    async def search(self, query: str, limit: int = 5) -> list[VideoMetadata]:
        payload = await self._get_json("/api/v1/search", {"q": query, "type": "video", "sort_by": "relevance"})
        if not isinstance(payload, list):
            return []

        results: list[VideoMetadata] = []
        for item in payload:
            if not isinstance(item, dict) or item.get("type", "video") != "video":
                continue
            try:
                results.append(_InvidiousVideo.model_validate(item).to_metadata())
            except ValidationError:
                continue
            if len(results) >= limit:
                break
        return results

    async def aclose(self) -> None:
        await self._client.aclose()
