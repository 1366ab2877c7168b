"""
Tests for AsyncValueCache - Shared In-Flight Results
"""

import asyncio

import pytest

from discord_music_queue.utils.async_cache import AsyncValueCache


def counting_factory(result="value", delay=0.01, fail_times=0):
    calls = {"n": 0}

    async def factory():
        calls["n"] += 1
        await asyncio.sleep(delay)
        if calls["n"] <= fail_times:
            raise RuntimeError("boom")
        return result

    return factory, calls


class TestAsyncValueCache:
    """Tests for memoized coroutine results."""

    @pytest.mark.asyncio
    async def test_concurrent_gets_share_one_call(self):
        factory, calls = counting_factory()
        cache = AsyncValueCache(factory)

        results = await asyncio.gather(*(cache.get() for _ in range(10)))

        assert results == ["value"] * 10
        assert calls["n"] == 1

    @pytest.mark.asyncio
    async def test_value_is_memoized(self):
        factory, calls = counting_factory()
        cache = AsyncValueCache(factory)

        await cache.get()
        await cache.get()

        assert calls["n"] == 1
        assert cache.has_value is True

    @pytest.mark.asyncio
    async def test_failure_is_not_kept(self):
        """Should retry on the next get() after a failure."""
        factory, calls = counting_factory(fail_times=1)
        cache = AsyncValueCache(factory)

        with pytest.raises(RuntimeError):
            await cache.get()
        assert cache.has_value is False

        assert await cache.get() == "value"
        assert calls["n"] == 2

    @pytest.mark.asyncio
    async def test_clear_forgets_value(self):
        factory, calls = counting_factory()
        cache = AsyncValueCache(factory)

        await cache.get()
        cache.clear()
        await cache.get()

        assert calls["n"] == 2

    @pytest.mark.asyncio
    async def test_without_memoize_only_flight_is_shared(self):
        factory, calls = counting_factory()
        cache = AsyncValueCache(factory, memoize=False)

        await asyncio.gather(cache.get(), cache.get())
        assert calls["n"] == 1
        assert cache.in_flight is False

        await cache.get()
        assert calls["n"] == 2

    @pytest.mark.asyncio
    async def test_cancelled_caller_does_not_cancel_flight(self):
        """Should keep the shared task running when one waiter is cancelled."""
        factory, calls = counting_factory(delay=0.05)
        cache = AsyncValueCache(factory)
        first = asyncio.create_task(cache.get())
        await asyncio.sleep(0)
        second = asyncio.create_task(cache.get())
        await asyncio.sleep(0)

        first.cancel()

        assert await second == "value"
        assert calls["n"] == 1
