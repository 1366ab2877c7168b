"""
Tests for the domain EventBus.
"""

import pytest

from discord_music_queue.domain.shared.events import EventBus, QueueCreated, QueueDeleted


class TestEventBus:
    """Tests for publish/subscribe."""

    @pytest.mark.asyncio
    async def test_publish_reaches_subscribers(self):
        bus = EventBus()
        seen = []

        async def handler(event):
            seen.append(event.guild_id)

        bus.subscribe(QueueCreated, handler)
        await bus.publish(QueueCreated(guild_id=1))
        await bus.publish(QueueDeleted(guild_id=2))

        assert seen == [1]

    @pytest.mark.asyncio
    async def test_failing_handler_does_not_block_others(self):
        """Should log a handler failure and still run the other handlers."""
        bus = EventBus()
        seen = []

        async def broken(event):
            raise RuntimeError("boom")

        async def handler(event):
            seen.append(event.guild_id)

        bus.subscribe(QueueCreated, broken)
        bus.subscribe(QueueCreated, handler)

        await bus.publish(QueueCreated(guild_id=1))

        assert seen == [1]

    @pytest.mark.asyncio
    async def test_unsubscribe_and_clear(self):
        bus = EventBus()

        async def handler(event):
            pass

        bus.subscribe(QueueCreated, handler)
        bus.subscribe(QueueDeleted, handler)
        assert bus.handler_count(QueueCreated) == 1

        bus.unsubscribe(QueueCreated, handler)
        assert bus.handler_count(QueueCreated) == 0

        bus.clear()
        assert bus.handler_count(QueueDeleted) == 0

    @pytest.mark.asyncio
    async def test_publish_without_handlers(self):
        await EventBus().publish(QueueCreated(guild_id=1))
