"""
Tests for VoiceStateWaiter - Waiting for Users to Join Voice
"""

import asyncio

import pytest

from discord_music_queue.application.services.voice_state_waiter import VoiceStateWaiter


class TestVoiceStateWaiter:
    """Tests for per-user voice waits."""

    @pytest.mark.asyncio
    async def test_notify_resolves_wait(self):
        waiter = VoiceStateWaiter(default_timeout_seconds=1)
        task = asyncio.create_task(waiter.wait(1, 10))
        await asyncio.sleep(0)

        assert waiter.notify(1, 10, 555) is True
        assert await task == 555
        assert len(waiter) == 0

    @pytest.mark.asyncio
    async def test_timeout_returns_none(self):
        waiter = VoiceStateWaiter()

        assert await waiter.wait(1, 10, timeout=0.01) is None
        assert len(waiter) == 0

    @pytest.mark.asyncio
    async def test_notify_without_waiter(self):
        waiter = VoiceStateWaiter()

        assert waiter.notify(1, 10, 555) is False

    @pytest.mark.asyncio
    async def test_newer_wait_supersedes(self):
        """Should release the older wait with None when the same user waits again."""
        waiter = VoiceStateWaiter(default_timeout_seconds=1)
        first = asyncio.create_task(waiter.wait(1, 10))
        await asyncio.sleep(0)
        second = asyncio.create_task(waiter.wait(1, 10))
        await asyncio.sleep(0)

        assert await first is None
        waiter.notify(1, 10, 777)
        assert await second == 777

    @pytest.mark.asyncio
    async def test_waits_are_per_guild(self):
        waiter = VoiceStateWaiter(default_timeout_seconds=1)
        task = asyncio.create_task(waiter.wait(1, 10))
        await asyncio.sleep(0)

        assert waiter.notify(1, 20, 555) is False
        assert waiter.notify(1, 10, 556) is True
        assert await task == 556

    @pytest.mark.asyncio
    async def test_reset_releases_everyone(self):
        waiter = VoiceStateWaiter(default_timeout_seconds=1)
        tasks = [asyncio.create_task(waiter.wait(user, 10)) for user in (1, 2)]
        await asyncio.sleep(0)

        waiter.reset()

        assert await asyncio.gather(*tasks) == [None, None]
