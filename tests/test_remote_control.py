"""
Tests for RemoteControlService - Dashboard/RPC Bridge
"""

import pytest

from discord_music_queue.application.services.remote_control import RemoteControlService
from discord_music_queue.domain.shared.messages import DiscordUIMessages

GUILD_ID = 111


@pytest.fixture
def remote(queue_store):
    return RemoteControlService(queue_store)


async def playing_queue(guild_queue, song_factory, *video_ids):
    for video_id in video_ids:
        await guild_queue.add_song(song_factory.youtube(video_id, video_id.upper(), 200))
    await guild_queue.drain()
    return guild_queue


class TestRemoteControl:
    """Tests for remote action dispatch."""

    @pytest.mark.asyncio
    async def test_unknown_action(self, remote):
        response = await remote.handle("rewind", GUILD_ID)

        assert response.status_code == 400
        assert response.message == DiscordUIMessages.REMOTE_UNKNOWN_ACTION

    @pytest.mark.asyncio
    async def test_no_queue(self, remote):
        response = await remote.handle("skip", GUILD_ID)

        assert response.status_code == 400
        assert response.message == DiscordUIMessages.REMOTE_NO_QUEUE

    @pytest.mark.asyncio
    async def test_missing_guild_id(self, remote, guild_queue):
        response = await remote.handle("pause")

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_pause_success_has_no_body(self, remote, guild_queue, song_factory):
        await playing_queue(guild_queue, song_factory, "x1")

        response = await remote.handle("pause", GUILD_ID)

        assert response.status_code == 204
        assert response.message == ""
        assert guild_queue.playing is False

    @pytest.mark.asyncio
    async def test_rejection_carries_reason(self, remote, guild_queue, song_factory):
        await playing_queue(guild_queue, song_factory, "x1")

        response = await remote.handle("resume", GUILD_ID)

        assert response.status_code == 400
        assert response.message == DiscordUIMessages.NOT_PAUSED

    @pytest.mark.asyncio
    async def test_skip_and_stop(self, remote, guild_queue, song_factory, queue_store):
        await playing_queue(guild_queue, song_factory, "x1", "x2")

        assert (await remote.handle("skip", GUILD_ID)).status_code == 204
        await guild_queue.drain()
        assert guild_queue.songs[0].id == "x2"

        assert (await remote.handle("stop", GUILD_ID)).status_code == 204
        assert not queue_store.has(GUILD_ID)

    @pytest.mark.asyncio
    async def test_get_queue(self, remote, guild_queue, song_factory):
        """Should return the queue view as plain JSON data."""
        await playing_queue(guild_queue, song_factory, "x1", "x2")

        response = await remote.handle("getQueue", GUILD_ID)

        assert response.status_code == 200
        assert response.payload["guild_id"] == GUILD_ID
        assert response.payload["state"] == "playing"
        assert [song["id"] for song in response.payload["songs"]] == ["x1", "x2"]

    @pytest.mark.asyncio
    async def test_get_queues(self, remote, queue_store):
        await queue_store.create(GUILD_ID, 222, 333)
        await queue_store.create(GUILD_ID + 1, 222, 333)

        response = await remote.handle("getQueues")

        assert response.status_code == 200
        assert sorted(view["guild_id"] for view in response.payload) == [GUILD_ID, GUILD_ID + 1]
