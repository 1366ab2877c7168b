"""Waits for a user to show up in a voice channel."""

from __future__ import annotations

import asyncio
import logging

from discord_music_queue.domain.shared.messages import LogTemplates

logger = logging.getLogger(__name__)


class VoiceStateWaiter:
    """One pending future per ``(user_id, guild_id)``.

    ``wait()`` resolves to the voice channel id the user joined, or ``None``
    on timeout or when a newer ``wait()`` for the same key supersedes it.
    """

    def __init__(self, default_timeout_seconds: float = 30) -> None:
        self._default_timeout = default_timeout_seconds
        self._pending: dict[tuple[int, int], asyncio.Future[int | None]] = {}

    def __len__(self) -> int:
        return len(self._pending)

    async def wait(self, user_id: int, guild_id: int, timeout: float | None = None) -> int | None:
        key = (user_id, guild_id)
        previous = self._pending.pop(key, None)
        if previous is not None and not previous.done():
            logger.debug(LogTemplates.VOICE_WAIT_SUPERSEDED, user_id, guild_id)
            previous.set_result(None)

        future: asyncio.Future[int | None] = asyncio.get_running_loop().create_future()
        self._pending[key] = future
        seconds = self._default_timeout if timeout is None else timeout
        logger.debug(LogTemplates.VOICE_WAIT_REGISTERED, seconds, user_id, guild_id)
        try:
            return await asyncio.wait_for(asyncio.shield(future), seconds)
        except TimeoutError:
            return None
        finally:
            if self._pending.get(key) is future:
                del self._pending[key]

    def notify(self, user_id: int, guild_id: int, channel_id: int) -> bool:
        """Hand ``channel_id`` to whoever waits on this user. Returns True if someone was waiting."""
        future = self._pending.pop((user_id, guild_id), None)
        if future is None or future.done():
            return False
        future.set_result(channel_id)
        return True

    def reset(self) -> None:
        """Release every waiter with ``None``."""
        pending, self._pending = self._pending, {}
        for future in pending.values():
            if not future.done():
                future.set_result(None)
