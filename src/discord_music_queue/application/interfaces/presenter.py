"""Port interface for the chat side of queue presentation."""

from __future__ import annotations

from abc import ABC, abstractmethod

from pydantic import BaseModel, ConfigDict

from discord_music_queue.domain.shared.types import ChannelIdField, MessageIdField


class NowPlayingCard(BaseModel):
    """Everything the now-playing message shows."""

    model_config = ConfigDict(frozen=True)

    title: str
    progress: str
    auto: bool = False
    controls_hint: bool = False
    thumbnail_url: str | None = None


class QueuePresenter(ABC):
    """Interface for posting queue notices and maintaining the now-playing message."""

    @abstractmethod
    def has_text_channel(self, channel_id: ChannelIdField) -> bool:
        ...

    @abstractmethod
    async def send_text(self, channel_id: ChannelIdField, text: str) -> None:
        ...

    @abstractmethod
    async def send_now_playing(self, channel_id: ChannelIdField, card: NowPlayingCard) -> MessageIdField | None:
        """Post a new now-playing message and return its id."""
        ...

    @abstractmethod
    async def edit_now_playing(
        self, channel_id: ChannelIdField, message_id: MessageIdField, card: NowPlayingCard
    ) -> bool:
        ...

    @abstractmethod
    async def message_exists(self, channel_id: ChannelIdField, message_id: MessageIdField) -> bool:
        ...

    @abstractmethod
    async def attach_controls(self, channel_id: ChannelIdField, message_id: MessageIdField) -> bool:
        """Add the reaction controls. Returns False when we lack permission."""
        ...

    @abstractmethod
    async def clear_controls(self, channel_id: ChannelIdField, message_id: MessageIdField) -> None:
        ...
