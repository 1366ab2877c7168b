"""Port interface for Discord voice operations."""

from __future__ import annotations

from abc import ABC, abstractmethod

from discord_music_queue.domain.shared.types import ChannelIdField, DiscordSnowflake, NonNegativeInt


class StreamListener(ABC):
    """Receives lifecycle events for one playback stream.

    Implementations must only schedule work: the transport may call these
    from inside another queue operation or from its own thread.
    """

    @abstractmethod
    def stream_started(self) -> None:
        ...

    @abstractmethod
    def stream_errored(self, reason: str) -> None:
        ...

    @abstractmethod
    def stream_ended(self) -> None:
        ...


class StreamHandle(ABC):
    """Control over one outstanding playback stream."""

    @abstractmethod
    def stop(self) -> None:
        """End the stream early. The listener still receives ``stream_ended``."""
        ...

    @abstractmethod
    def pause(self) -> None:
        ...

    @abstractmethod
    def resume(self) -> None:
        ...


class VoiceConnection(ABC):
    """An established voice connection in one guild."""

    guild_id: DiscordSnowflake
    channel_id: ChannelIdField

    @property
    @abstractmethod
    def is_connected(self) -> bool:
        ...

    @property
    def region_hint(self) -> str | None:
        """Voice region of the channel, handed to track resolution as a locality hint."""
        return None

    @abstractmethod
    async def play(
        self,
        track: str,
        listener: StreamListener,
        start_ms: NonNegativeInt = 0,
    ) -> StreamHandle:
        """Start streaming ``track``, optionally from ``start_ms`` into it."""
        ...

    @abstractmethod
    async def leave(self) -> None:
        ...

    @abstractmethod
    def non_bot_member_count(self) -> int:
        """Number of human members currently in the connected channel."""
        ...

    @abstractmethod
    def has_member(self, user_id: DiscordSnowflake) -> bool:
        ...


class VoiceAdapter(ABC):
    """Interface for Discord voice channel operations."""

    @abstractmethod
    async def join(self, guild_id: DiscordSnowflake, channel_id: ChannelIdField) -> VoiceConnection:
        """Connect to a voice channel. Raises VoiceJoinError when that is impossible."""
        ...

    @abstractmethod
    def has_voice_channel(self, channel_id: ChannelIdField) -> bool:
        """Whether ``channel_id`` still resolves to a voice channel we can see."""
        ...


class VoiceJoinError(Exception):
    """Raised when the bot cannot join a voice channel."""

    def __init__(self, channel_id: int, reason: str) -> None:
        super().__init__(reason)
        self.channel_id = channel_id
        self.reason = reason
