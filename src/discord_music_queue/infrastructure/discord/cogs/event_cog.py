"""Discord event listeners for lifecycle, voice-state, and reaction-control events."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord
from discord.ext import commands

if TYPE_CHECKING:
    from ....config.container import Container

logger = logging.getLogger(__name__)


class EventCog(commands.Cog):
    def __init__(self, bot: commands.Bot, container: Container) -> None:
        self.bot = bot
        self.container = container
        self._resumed_logged_once = False

    # ─────────────────────────────────────────────────────────────────
    # Lifecycle Events
    # ─────────────────────────────────────────────────────────────────

    @commands.Cog.listener()
    async def on_connect(self) -> None:
        logger.info("WebSocket connected")

    @commands.Cog.listener()
    async def on_disconnect(self) -> None:
        logger.warning("WebSocket disconnected")

    @commands.Cog.listener()
    async def on_resumed(self) -> None:
        if not self._resumed_logged_once:
            logger.info("WebSocket session resumed")
            self._resumed_logged_once = True

    @commands.Cog.listener()
    async def on_guild_remove(self, guild: discord.Guild) -> None:
        logger.info("Left guild: %s (%s)", guild.name, guild.id)
        queue = self.container.queue_store.get(guild.id)
        if queue is not None:
            await queue.handle_connection_lost()

    # ─────────────────────────────────────────────────────────────────
    # Voice Events
    # ─────────────────────────────────────────────────────────────────

    @commands.Cog.listener()
    async def on_voice_state_update(
        self, member: discord.Member, before: discord.VoiceState, after: discord.VoiceState
    ) -> None:
        guild_id = member.guild.id
        queue = self.container.queue_store.get(guild_id)

        if self.bot.user is not None and member.id == self.bot.user.id:
            if after.channel is None and queue is not None and not queue.destroyed:
                await queue.handle_connection_lost()
            elif after.channel is not None and queue is not None:
                queue.voice_channel_id = after.channel.id
                await queue.handle_membership_change()
            return

        if member.bot:
            return

        moved = (before.channel.id if before.channel else None) != (after.channel.id if after.channel else None)
        if not moved:
            return

        if after.channel is not None:
            self.container.voice_state_waiter.notify(member.id, guild_id, after.channel.id)

        if queue is None or queue.destroyed:
            return
        touched = {c.id for c in (before.channel, after.channel) if c is not None}
        if queue.voice_channel_id in touched:
            await queue.handle_membership_change()

    # ─────────────────────────────────────────────────────────────────
    # Reaction Controls
    # ─────────────────────────────────────────────────────────────────

    @commands.Cog.listener()
    async def on_raw_reaction_add(self, payload: discord.RawReactionActionEvent) -> None:
        if self.bot.user is not None and payload.user_id == self.bot.user.id:
            return
        if payload.member is not None and payload.member.bot:
            return

        queue = self.container.queue_store.find_by_message(payload.message_id)
        if queue is None:
            return

        outcome = await queue.handle_control(str(payload.emoji), payload.user_id)
        if outcome is None:
            return

        channel = self.bot.get_channel(payload.channel_id)
        if not isinstance(channel, discord.TextChannel | discord.Thread | discord.VoiceChannel):
            return
        try:
            message = channel.get_partial_message(payload.message_id)
            await message.remove_reaction(payload.emoji, discord.Object(id=payload.user_id))
        except discord.HTTPException:
            logger.debug("Could not remove control reaction from message %s", payload.message_id)


async def setup(bot: commands.Bot) -> None:
    container = getattr(bot, "container", None)
    if container is None:
        raise RuntimeError("Container not found on bot instance")

    await bot.add_cog(EventCog(bot, container))
