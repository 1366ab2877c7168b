"""
Tests for InvidiousMetadataClient

HTTP is served by httpx.MockTransport, so no network access is needed.
"""

import httpx
import pytest

from discord_music_queue.application.interfaces.metadata_client import (
    MetadataNotFoundError,
    MetadataTransportError,
)
from discord_music_queue.config.settings import InvidiousSettings
from discord_music_queue.infrastructure.metadata import InvidiousMetadataClient

ORIGIN = "https://invidious.example"

VIDEO = {
    "videoId": "dQw4w9WgXcQ",
    "title": "Never Gonna Give You Up",
    "lengthSeconds": 213,
    "author": "Rick Astley",
    "videoThumbnails": [{"url": "https://img.example/1.jpg", "quality": "high"}],
    "recommendedVideos": [
        {"videoId": "r1", "title": "Together Forever", "lengthSeconds": 205, "author": "Rick Astley"},
        {"videoId": "r2", "title": "Live Now", "lengthSeconds": 0},
    ],
    "viewCount": 1,
}


def make_client(handler):
    http = httpx.AsyncClient(base_url=ORIGIN, transport=httpx.MockTransport(handler))
    return InvidiousMetadataClient(InvidiousSettings(origin=ORIGIN), client=http)


class TestInvidiousMetadataClient:
    """Tests for video lookups, related videos and search."""

    @pytest.mark.asyncio
    async def test_resolve_by_id(self):
        requested = []

        def handler(request):
            requested.append(request.url.path)
            return httpx.Response(200, json=VIDEO)

        client = make_client(handler)
        info = await client.resolve_by_id("dQw4w9WgXcQ")

        assert requested == ["/api/v1/videos/dQw4w9WgXcQ"]
        assert info.title == "Never Gonna Give You Up"
        assert info.length_seconds == 213
        assert info.thumbnail_urls == ["https://img.example/1.jpg"]
        await client.aclose()

    @pytest.mark.asyncio
    async def test_not_found(self):
        client = make_client(lambda request: httpx.Response(404, json={"error": "not found"}))

        with pytest.raises(MetadataNotFoundError):
            await client.resolve_by_id("missing")

    @pytest.mark.asyncio
    async def test_server_error(self):
        client = make_client(lambda request: httpx.Response(502, text="bad gateway"))

        with pytest.raises(MetadataTransportError):
            await client.resolve_by_id("dQw4w9WgXcQ")

    @pytest.mark.asyncio
    async def test_connection_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        client = make_client(handler)

        with pytest.raises(MetadataTransportError):
            await client.get_related("dQw4w9WgXcQ")

    @pytest.mark.asyncio
    async def test_invalid_payload(self):
        client = make_client(lambda request: httpx.Response(200, json={"unexpected": True}))

        with pytest.raises(MetadataTransportError):
            await client.resolve_by_id("dQw4w9WgXcQ")

    @pytest.mark.asyncio
    async def test_get_related(self):
        client = make_client(lambda request: httpx.Response(200, json=VIDEO))

        related = await client.get_related("dQw4w9WgXcQ")

        assert [(r.id, r.length_seconds) for r in related] == [("r1", 205), ("r2", 0)]

    @pytest.mark.asyncio
    async def test_related_with_blank_title_is_transport_error(self):
        """Should report a malformed recommendation as a transport error, not a validation error."""
        payload = {**VIDEO, "recommendedVideos": [{"videoId": "r1", "title": ""}]}
        client = make_client(lambda request: httpx.Response(200, json=payload))

        with pytest.raises(MetadataTransportError):
            await client.get_related("dQw4w9WgXcQ")

    @pytest.mark.asyncio
    async def test_search_filters_and_limits(self):
        """Should keep only video results, up to the limit."""
        seen_params = {}

        def handler(request):
            seen_params.update(request.url.params)
            return httpx.Response(
                200,
                json=[
                    {"type": "channel", "author": "Someone"},
                    {"type": "video", "videoId": "a", "title": "A", "lengthSeconds": 60},
                    {"type": "video", "videoId": "b", "title": "B", "lengthSeconds": 70},
                    {"type": "video", "videoId": "c", "title": "C", "lengthSeconds": 80},
                ],
            )

        client = make_client(handler)
        results = await client.search("never gonna", limit=2)

        assert [r.id for r in results] == ["a", "b"]
        assert seen_params["q"] == "never gonna"
        assert seen_params["type"] == "video"

    def test_origin(self):
        client = make_client(lambda request: httpx.Response(200))

        assert client.origin == ORIGIN
