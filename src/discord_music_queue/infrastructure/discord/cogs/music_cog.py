"""Slash-command music cog driving the guild queues."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

import discord
from discord import app_commands
from discord.ext import commands

from discord_music_queue.application.interfaces.metadata_client import MetadataError
from discord_music_queue.domain.music.snapshots import QueueView
from discord_music_queue.domain.shared.enums import FriskyStation
from discord_music_queue.domain.shared.exceptions import DomainError, UnknownStationError
from discord_music_queue.domain.shared.messages import DiscordUIMessages

if TYPE_CHECKING:
    from ....application.services.guild_queue import GuildQueue
    from ....application.songs.base import Song
    from ....config.container import Container

logger = logging.getLogger(__name__)

QUEUE_PER_PAGE = 10

VIDEO_ID_PATTERN = re.compile(
    r"(?:youtube\.com/watch\?v=|youtu\.be/|youtube\.com/embed/|youtube\.com/shorts/)([a-zA-Z0-9_-]{11})"
)
BARE_ID_PATTERN = re.compile(r"^[a-zA-Z0-9_-]{11}$")


def extract_video_id(query: str) -> str | None:
    query = query.strip()
    match = VIDEO_ID_PATTERN.search(query)
    if match:
        return match.group(1)
    if BARE_ID_PATTERN.match(query):
        return query
    return None


def format_queue(view: QueueView) -> str:
    if not view.songs:
        return DiscordUIMessages.QUEUE_EMPTY
    lines = [f"{index}. {song.queue_line}" for index, song in enumerate(view.songs[:QUEUE_PER_PAGE], start=1)]
    hidden = len(view.songs) - QUEUE_PER_PAGE
    if hidden > 0:
        lines.append(f"_and {hidden} more..._")
    if view.auto:
        lines.append(DiscordUIMessages.AUTO_MODE_MARKER)
    return "\n".join(lines)


class MusicCog(commands.Cog):
    related = app_commands.Group(name="related", description="Songs related to the one playing.")

    def __init__(self, bot: commands.Bot, container: Container) -> None:
        self.bot = bot
        self.container = container

    async def _send(self, interaction: discord.Interaction, message: str, *, ephemeral: bool = False) -> None:
        if interaction.response.is_done():
            await interaction.followup.send(message, ephemeral=ephemeral)
        else:
            await interaction.response.send_message(message, ephemeral=ephemeral)

    async def _get_member(self, interaction: discord.Interaction) -> discord.Member | None:
        if interaction.guild is None or not isinstance(interaction.user, discord.Member):
            await self._send(interaction, DiscordUIMessages.VOICE_MUST_JOIN, ephemeral=True)
            return None
        return interaction.user

    async def _resolve_voice_channel(self, interaction: discord.Interaction, member: discord.Member) -> int | None:
        """The member's voice channel, waiting for them to join one if needed."""
        if member.voice is not None and member.voice.channel is not None:
            return member.voice.channel.id

        waiter = self.container.voice_state_waiter
        seconds = self.container.settings.queue.voice_wait_timeout_seconds
        await self._send(interaction, DiscordUIMessages.VOICE_WAITING.format(seconds=f"{seconds:g}"))
        channel_id = await waiter.wait(member.id, member.guild.id)
        if channel_id is None:
            await self._send(interaction, DiscordUIMessages.VOICE_MUST_JOIN)
        return channel_id

    def _queue(self, interaction: discord.Interaction) -> GuildQueue | None:
        if interaction.guild is None:
            return None
        return self.container.queue_store.get(interaction.guild.id)

    async def _enqueue(self, interaction: discord.Interaction, song: Song, *, insert: bool = False) -> None:
        member = await self._get_member(interaction)
        if member is None:
            return
        channel_id = await self._resolve_voice_channel(interaction, member)
        if channel_id is None:
            song.destroy()
            return

        store = self.container.queue_store
        queue = await store.get_or_create(member.guild.id, channel_id, interaction.channel_id or 0)
        try:
            await queue.add_song(song, insert=insert)
        except DomainError as e:
            song.destroy()
            await self._send(interaction, e.message)
            return
        await self._send(interaction, DiscordUIMessages.QUEUE_ADDED.format(line=song.queue_line))

    async def _find_song(self, query: str) -> Song | None:
        factory = self.container.song_factory
        video_id = extract_video_id(query)
        if video_id is not None:
            return await factory.youtube_from_metadata(video_id)
        results = await self.container.metadata_client.search(query, limit=1)
        if not results:
            return None
        info = results[0]
        return factory.youtube(info.id, info.title, info.length_seconds)

    # ── Adding songs ────────────────────────────────────────────────

    @app_commands.command(name="play", description="Play a YouTube video by link, id, or search.")
    @app_commands.describe(query="YouTube link, video id, or search terms", insert="Play it next")
    async def play(self, interaction: discord.Interaction, query: str, insert: bool = False) -> None:
        await interaction.response.defer(thinking=True)
        try:
            song = await self._find_song(query)
        except MetadataError as e:
            logger.warning("Lookup failed for %r: %s", query, e)
            song = None
        if song is None:
            await self._send(interaction, DiscordUIMessages.SONG_NOT_FOUND.format(query=query))
            return
        await self._enqueue(interaction, song, insert=insert)

    @app_commands.command(name="frisky", description="Play a Frisky Radio station.")
    @app_commands.describe(station="original, deep, chill, or classics")
    async def frisky(self, interaction: discord.Interaction, station: str = FriskyStation.ORIGINAL.value) -> None:
        try:
            song = self.container.song_factory.frisky(station)
        except UnknownStationError:
            await self._send(interaction, DiscordUIMessages.UNKNOWN_STATION.format(station=station), ephemeral=True)
            return
        await interaction.response.defer(thinking=True)
        await self._enqueue(interaction, song)

    # ── Controls ────────────────────────────────────────────────────

    async def _control(self, interaction: discord.Interaction, action: str) -> None:
        queue = self._queue(interaction)
        if queue is None:
            await self._send(interaction, DiscordUIMessages.QUEUE_EMPTY, ephemeral=True)
            return
        outcome = await getattr(queue, action)()
        await self._send(interaction, outcome.result.message or "\N{OK HAND SIGN}", ephemeral=not outcome.result.success)

    @app_commands.command(name="skip", description="Skip the current song.")
    async def skip(self, interaction: discord.Interaction) -> None:
        await self._control(interaction, "skip")

    @app_commands.command(name="pause", description="Pause playback.")
    async def pause(self, interaction: discord.Interaction) -> None:
        await self._control(interaction, "pause")

    @app_commands.command(name="resume", description="Resume playback.")
    async def resume(self, interaction: discord.Interaction) -> None:
        await self._control(interaction, "resume")

    @app_commands.command(name="stop", description="Stop playing and leave the voice channel.")
    async def stop(self, interaction: discord.Interaction) -> None:
        await self._control(interaction, "stop")

    @app_commands.command(name="shuffle", description="Shuffle the upcoming songs.")
    async def shuffle(self, interaction: discord.Interaction) -> None:
        await self._control(interaction, "shuffle")

    @app_commands.command(name="auto", description="Toggle auto mode: keep playing related songs.")
    async def auto(self, interaction: discord.Interaction) -> None:
        await self._control(interaction, "toggle_auto")

    # ── Information ─────────────────────────────────────────────────

    @app_commands.command(name="queue", description="Show the queue.")
    async def queue(self, interaction: discord.Interaction) -> None:
        queue = self._queue(interaction)
        if queue is None:
            await self._send(interaction, DiscordUIMessages.QUEUE_EMPTY, ephemeral=True)
            return
        await self._send(interaction, format_queue(queue.to_view()))

    @app_commands.command(name="now", description="Show details about the current song.")
    async def now(self, interaction: discord.Interaction) -> None:
        queue = self._queue(interaction)
        if queue is None or not queue.songs:
            await self._send(interaction, DiscordUIMessages.QUEUE_EMPTY, ephemeral=True)
            return
        await interaction.response.defer(thinking=True)
        await self._send(interaction, await queue.songs[0].show_info())

    @related.command(name="show", description="List songs related to the current one.")
    async def related_show(self, interaction: discord.Interaction) -> None:
        queue = self._queue(interaction)
        if queue is None or not queue.songs:
            await self._send(interaction, DiscordUIMessages.QUEUE_EMPTY, ephemeral=True)
            return
        await interaction.response.defer(thinking=queue.songs[0].type_while_get_related)
        await self._send(interaction, await queue.songs[0].show_related())

    @related.command(name="play", description="Queue one of the related songs.")
    @app_commands.describe(number="Position in /related show", insert="Play it next")
    async def related_play(
        self,
        interaction: discord.Interaction,
        number: app_commands.Range[int, 1, 50],
        insert: bool = False,
    ) -> None:
        queue = self._queue(interaction)
        if queue is None or not queue.songs:
            await self._send(interaction, DiscordUIMessages.QUEUE_EMPTY, ephemeral=True)
            return
        await interaction.response.defer(thinking=True)
        related = await queue.songs[0].get_related()
        if number > len(related):
            await self._send(interaction, DiscordUIMessages.RELATED_NONE)
            return
        await self._enqueue(interaction, related[number - 1], insert=insert)


async def setup(bot: commands.Bot) -> None:
    container = getattr(bot, "container", None)
    if container is None:
        raise RuntimeError("Container not found on bot instance")

    await bot.add_cog(MusicCog(bot, container))
