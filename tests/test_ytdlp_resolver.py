"""
Tests for YtDlpTrackResolver

YoutubeDL is patched out; these tests cover URL handling, caching and
error mapping.
"""

from unittest.mock import MagicMock, patch

import pytest
from yt_dlp.utils import DownloadError

from discord_music_queue.application.interfaces.track_resolver import NoResultError, TrackTransportError
from discord_music_queue.infrastructure.audio import YtDlpTrackResolver, region_to_country

YDL_PATH = "discord_music_queue.infrastructure.audio.ytdlp_resolver.YoutubeDL"


def fake_ydl(info=None, error=None):
    ydl = MagicMock()
    ydl.__enter__.return_value = ydl
    ydl.__exit__.return_value = False
    if error is not None:
        ydl.extract_info.side_effect = error
    else:
        ydl.extract_info.return_value = info
    return ydl


class TestHelpers:
    def test_direct_stream_detection(self):
        assert YtDlpTrackResolver.is_direct_stream("https://stream.chill.friskyradio.com/mp3_high")
        assert not YtDlpTrackResolver.is_direct_stream("https://www.youtube.com/watch?v=dQw4w9WgXcQ")
        assert not YtDlpTrackResolver.is_direct_stream("https://youtu.be/dQw4w9WgXcQ")
        assert not YtDlpTrackResolver.is_direct_stream("dQw4w9WgXcQ")

    def test_region_to_country(self):
        assert region_to_country("europe") == "DE"
        assert region_to_country("US-West") == "US"
        assert region_to_country("atlantis") is None
        assert region_to_country(None) is None


class TestResolveTrack:
    """Tests for resolving identifiers to stream URLs."""

    @pytest.mark.asyncio
    async def test_direct_stream_returned_as_is(self):
        resolver = YtDlpTrackResolver()

        with patch(YDL_PATH) as ydl_cls:
            url = await resolver.resolve_track("http://stream.friskyradio.com/frisky_mp3_hi")

        assert url == "http://stream.friskyradio.com/frisky_mp3_hi"
        ydl_cls.assert_not_called()

    @pytest.mark.asyncio
    async def test_video_id_extracted_and_cached(self):
        """Should extract a video once and serve the second call from cache."""
        resolver = YtDlpTrackResolver()
        ydl = fake_ydl({"id": "dQw4w9WgXcQ", "url": "https://media.example/audio.webm", "title": "Song"})

        with patch(YDL_PATH, return_value=ydl) as ydl_cls:
            first = await resolver.resolve_track("dQw4w9WgXcQ")
            second = await resolver.resolve_track("dQw4w9WgXcQ")

        assert first == second == "https://media.example/audio.webm"
        ydl.extract_info.assert_called_once_with("https://www.youtube.com/watch?v=dQw4w9WgXcQ", download=False)
        assert ydl_cls.call_count == 1

    @pytest.mark.asyncio
    async def test_region_sets_geo_bypass(self):
        resolver = YtDlpTrackResolver()
        ydl = fake_ydl({"url": "https://media.example/a.webm"})

        with patch(YDL_PATH, return_value=ydl) as ydl_cls:
            await resolver.resolve_track("dQw4w9WgXcQ", region_hint="japan")

        assert ydl_cls.call_args.kwargs["params"]["geo_bypass_country"] == "JP"

    @pytest.mark.asyncio
    async def test_falls_back_to_audio_format(self):
        resolver = YtDlpTrackResolver()
        info = {
            "formats": [
                {"url": "https://media.example/video-only", "acodec": "none"},
                {"url": "https://media.example/audio-1", "acodec": "opus"},
                {"url": "https://media.example/audio-2", "acodec": "mp4a"},
            ]
        }

        with patch(YDL_PATH, return_value=fake_ydl(info)):
            url = await resolver.resolve_track("dQw4w9WgXcQ")

        assert url == "https://media.example/audio-2"

    @pytest.mark.asyncio
    async def test_no_stream_raises_no_result(self):
        resolver = YtDlpTrackResolver()

        with patch(YDL_PATH, return_value=fake_ydl({"title": "Nothing"})):
            with pytest.raises(NoResultError):
                await resolver.resolve_track("dQw4w9WgXcQ")

    @pytest.mark.asyncio
    async def test_download_error_maps_to_transport_error(self):
        resolver = YtDlpTrackResolver()

        with patch(YDL_PATH, return_value=fake_ydl(error=DownloadError("Video unavailable"))):
            with pytest.raises(TrackTransportError):
                await resolver.resolve_track("dQw4w9WgXcQ")
