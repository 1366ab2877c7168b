"""Discord implementation of the queue presenter: notices, now-playing embeds, reaction controls."""

from __future__ import annotations

import logging

import discord

from discord_music_queue.application.interfaces.presenter import NowPlayingCard, QueuePresenter
from discord_music_queue.domain.shared.messages import DiscordUIMessages, EmojiConstants, LogTemplates

logger = logging.getLogger(__name__)

CONTROL_EMOJIS: tuple[str, ...] = (
    EmojiConstants.PLAY_PAUSE,
    EmojiConstants.SKIP,
    EmojiConstants.STOP,
)

Messageable = discord.TextChannel | discord.Thread | discord.VoiceChannel


def build_now_playing_embed(card: NowPlayingCard) -> discord.Embed:
    lines = [card.progress]
    if card.auto:
        lines.append(DiscordUIMessages.AUTO_MODE_MARKER)
    if card.controls_hint:
        lines.append(DiscordUIMessages.CONTROLS_PERMISSION_HINT)

    embed = discord.Embed(
        title=DiscordUIMessages.NOW_PLAYING.format(title=card.title),
        description="\n".join(lines),
        color=discord.Color.blurple(),
    )
    if card.thumbnail_url:
        embed.set_thumbnail(url=card.thumbnail_url)
    return embed


class DiscordQueuePresenter(QueuePresenter):
    def __init__(self, bot: discord.Client) -> None:
        self._bot = bot

    def _channel(self, channel_id: int) -> Messageable | None:
        channel = self._bot.get_channel(channel_id)
        if isinstance(channel, Messageable):
            return channel
        logger.debug(LogTemplates.PRESENTER_CHANNEL_MISSING, channel_id)
        return None

    def has_text_channel(self, channel_id: int) -> bool:
        return self._channel(channel_id) is not None

    async def send_text(self, channel_id: int, text: str) -> None:
        channel = self._channel(channel_id)
        if channel is None:
            return
        try:
            await channel.send(text)
        except discord.HTTPException as e:
            logger.warning(LogTemplates.PRESENTER_SEND_FAILED, channel_id, e)

    async def send_now_playing(self, channel_id: int, card: NowPlayingCard) -> int | None:
        channel = self._channel(channel_id)
        if channel is None:
            return None
        try:
            message = await channel.send(embed=build_now_playing_embed(card))
        except discord.HTTPException as e:
            logger.warning(LogTemplates.PRESENTER_SEND_FAILED, channel_id, e)
            return None
        return message.id

    async def edit_now_playing(self, channel_id: int, message_id: int, card: NowPlayingCard) -> bool:
        channel = self._channel(channel_id)
        if channel is None:
            return False
        try:
            await channel.get_partial_message(message_id).edit(embed=build_now_playing_embed(card))
        except discord.HTTPException as e:
            logger.warning(LogTemplates.PRESENTER_SEND_FAILED, channel_id, e)
            return False
        return True

    async def message_exists(self, channel_id: int, message_id: int) -> bool:
        channel = self._channel(channel_id)
        if channel is None:
            return False
        try:
            await channel.fetch_message(message_id)
        except discord.NotFound:
            return False
        except discord.HTTPException as e:
            logger.warning(LogTemplates.PRESENTER_SEND_FAILED, channel_id, e)
            return False
        return True

    async def attach_controls(self, channel_id: int, message_id: int) -> bool:
        channel = self._channel(channel_id)
        if channel is None:
            return False
        message = channel.get_partial_message(message_id)
        try:
            for emoji in CONTROL_EMOJIS:
                await message.add_reaction(emoji)
        except discord.Forbidden as e:
            logger.info(LogTemplates.PRESENTER_REACTIONS_FAILED, message_id, e)
            return False
        except discord.HTTPException as e:
            logger.warning(LogTemplates.PRESENTER_REACTIONS_FAILED, message_id, e)
            return False
        return True

    async def clear_controls(self, channel_id: int, message_id: int) -> None:
        channel = self._channel(channel_id)
        if channel is None:
            return
        message = channel.get_partial_message(message_id)
        try:
            await message.clear_reactions()
        except discord.Forbidden:
            # Without Manage Messages we can only take back our own reactions.
            for emoji in CONTROL_EMOJIS:
                try:
                    await message.remove_reaction(emoji, self._bot.user)  # type: ignore[arg-type]
                except discord.HTTPException:
                    break
        except discord.HTTPException as e:
            logger.warning(LogTemplates.PRESENTER_REACTIONS_FAILED, message_id, e)
