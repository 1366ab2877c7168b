"""Discord voice adapter implementing VoiceAdapter for connection and playback."""

from __future__ import annotations

import asyncio
import logging

import discord

from discord_music_queue.application.interfaces.voice_adapter import (
    StreamHandle,
    StreamListener,
    VoiceAdapter,
    VoiceConnection,
    VoiceJoinError,
)
from discord_music_queue.config.settings import AudioSettings
from discord_music_queue.domain.shared.messages import LogTemplates

logger = logging.getLogger(__name__)

CONNECT_TIMEOUT: float = 10.0

# Matches yt-dlp's Android client user-agent to avoid YouTube 403 responses
ANDROID_USER_AGENT = "com.google.android.youtube/19.44.38 (Linux; U; Android 14) gzip"


def ffmpeg_before_options(base: str, start_ms: int) -> str:
    """FFmpeg input options, seeking to ``start_ms`` when resuming mid-song."""
    opts = f'{base} -headers "User-Agent: {ANDROID_USER_AGENT}"'.strip()
    if start_ms > 0:
        opts = f"{opts} -ss {start_ms / 1000:.3f}"
    return opts


class DiscordStreamHandle(StreamHandle):
    def __init__(self, voice_client: discord.VoiceClient, source: discord.AudioSource) -> None:
        self._vc = voice_client
        self._source = source

    def _is_current(self) -> bool:
        return self._vc.source is self._source

    def stop(self) -> None:
        if self._is_current() and (self._vc.is_playing() or self._vc.is_paused()):
            self._vc.stop()

    def pause(self) -> None:
        if self._is_current() and self._vc.is_playing():
            self._vc.pause()

    def resume(self) -> None:
        if self._is_current() and self._vc.is_paused():
            self._vc.resume()


class DiscordVoiceConnection(VoiceConnection):
    def __init__(
        self,
        voice_client: discord.VoiceClient,
        settings: AudioSettings,
        loop: asyncio.AbstractEventLoop,
    ) -> None:
        self._vc = voice_client
        self._settings = settings
        self._loop = loop
        self.guild_id = voice_client.guild.id
        self.channel_id = voice_client.channel.id

    @property
    def is_connected(self) -> bool:
        return self._vc.is_connected()

    @property
    def region_hint(self) -> str | None:
        region = getattr(self._vc.channel, "rtc_region", None)
        return str(region) if region else None

    async def play(self, track: str, listener: StreamListener, start_ms: int = 0) -> StreamHandle:
        if not self._vc.is_connected():
            logger.warning(LogTemplates.VOICE_NOT_CONNECTED, self.guild_id)
            raise discord.ClientException("Not connected to voice.")

        if self._vc.is_playing() or self._vc.is_paused():
            self._vc.stop()

        source = discord.FFmpegPCMAudio(
            track,
            before_options=ffmpeg_before_options(self._settings.ffmpeg_options.get("before_options", ""), start_ms),
            options=self._settings.ffmpeg_options.get("options", ""),
        )
        volume_source = discord.PCMVolumeTransformer(source, volume=self._settings.default_volume)
        guild_id = self.guild_id
        loop = self._loop

        def after_callback(error: Exception | None = None) -> None:
            # Runs on the audio player thread.
            if error:
                logger.warning(LogTemplates.PLAYBACK_ERROR, guild_id, error)
                loop.call_soon_threadsafe(listener.stream_errored, str(error))
            loop.call_soon_threadsafe(listener.stream_ended)

        try:
            self._vc.play(volume_source, after=after_callback)
        except discord.ClientException as e:
            logger.error(LogTemplates.PLAYBACK_FAILED_START, e)
            raise
        listener.stream_started()
        return DiscordStreamHandle(self._vc, volume_source)

    async def leave(self) -> None:
        if not self._vc.is_connected():
            return
        await self._vc.disconnect(force=True)
        logger.info(LogTemplates.VOICE_DISCONNECTED, self.guild_id)

    def _humans(self) -> list[discord.Member]:
        channel = self._vc.channel
        if channel is None:
            return []
        return [member for member in channel.members if not member.bot]

    def non_bot_member_count(self) -> int:
        return len(self._humans())

    def has_member(self, user_id: int) -> bool:
        return any(member.id == user_id for member in self._humans())


class DiscordVoiceAdapter(VoiceAdapter):
    def __init__(self, bot: discord.Client, settings: AudioSettings | None = None) -> None:
        self._bot = bot
        self._settings = settings or AudioSettings()

    def has_voice_channel(self, channel_id: int) -> bool:
        channel = self._bot.get_channel(channel_id)
        return isinstance(channel, discord.VoiceChannel | discord.StageChannel)

    async def join(self, guild_id: int, channel_id: int) -> VoiceConnection:
        guild = self._bot.get_guild(guild_id)
        if not guild:
            logger.warning(LogTemplates.GUILD_NOT_FOUND, guild_id)
            raise VoiceJoinError(channel_id, "guild not found")

        channel = guild.get_channel(channel_id)
        if not isinstance(channel, discord.VoiceChannel | discord.StageChannel):
            logger.warning(LogTemplates.CHANNEL_NOT_VOICE, channel_id)
            raise VoiceJoinError(channel_id, "not a voice channel")

        existing = guild.voice_client
        try:
            async with asyncio.timeout(CONNECT_TIMEOUT):
                if isinstance(existing, discord.VoiceClient) and existing.is_connected():
                    if existing.channel is None or existing.channel.id != channel_id:
                        await existing.move_to(channel)
                    vc = existing
                else:
                    if existing is not None:
                        await existing.disconnect(force=True)
                    vc = await channel.connect(self_deaf=True)
        except TimeoutError as e:
            logger.error(LogTemplates.VOICE_CONNECTION_TIMEOUT, channel_id)
            raise VoiceJoinError(channel_id, "timed out") from e
        except discord.Forbidden as e:
            logger.error(LogTemplates.VOICE_NO_PERMISSION, channel_id)
            raise VoiceJoinError(channel_id, "missing permission") from e
        except discord.ClientException as e:
            logger.error(LogTemplates.VOICE_CLIENT_ERROR, e)
            raise VoiceJoinError(channel_id, str(e)) from e

        logger.info(LogTemplates.VOICE_CONNECTED, channel.name, guild.name)
        return DiscordVoiceConnection(vc, self._settings, asyncio.get_running_loop())
