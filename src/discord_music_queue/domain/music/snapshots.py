"""Pydantic models for persisted queue snapshots and dashboard views.

The snapshot models define the durable document layout written by the queue
store. Songs are a discriminated union on ``kind`` so a restore can rebuild
the right variant without guessing.
"""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from discord_music_queue.domain.shared.types import (
    ChannelIdField,
    EpochMillis,
    GuildIdField,
    MessageIdField,
    NonEmptyStr,
    NonNegativeInt,
)

# ── Persisted snapshots ─────────────────────────────────────────────


class YouTubeSongSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    kind: Literal["YouTubeSong"] = "YouTubeSong"
    id: NonEmptyStr
    title: NonEmptyStr
    length_seconds: NonNegativeInt
    track: str | None = None


class FriskySongSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    kind: Literal["FriskySong"] = "FriskySong"
    station: NonEmptyStr
    track: str | None = None


SongSnapshot = Annotated[
    YouTubeSongSnapshot | FriskySongSnapshot,
    Field(discriminator="kind"),
]


class QueueSnapshot(BaseModel):
    """One guild's queue as written to durable storage."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    guild_id: GuildIdField
    voice_channel_id: ChannelIdField
    text_channel_id: ChannelIdField
    songs: list[SongSnapshot] = Field(default_factory=list)
    song_started_at_ms: EpochMillis | None = None
    paused_at_ms: EpochMillis | None = None
    now_playing_message_id: MessageIdField | None = None
    auto: bool = False

    def elapsed_ms(self, now_ms: int) -> int:
        """Playback position the queue had reached, measured at ``now_ms``."""
        if self.song_started_at_ms is None:
            return 0
        end = self.paused_at_ms if self.paused_at_ms is not None else now_ms
        return max(0, end - self.song_started_at_ms)


class QueueStoreSnapshot(BaseModel):
    """The single durable record holding every queue of one shard."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: NonEmptyStr
    queues: list[QueueSnapshot] = Field(default_factory=list)


# ── Dashboard views ─────────────────────────────────────────────────


class SongView(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: NonEmptyStr
    id: NonEmptyStr
    title: NonEmptyStr
    queue_line: NonEmptyStr
    length_seconds: NonNegativeInt
    live: bool
    thumbnail_url: str
    track_resolved: bool
    error: str | None = None


class QueueView(BaseModel):
    """Consistent post-action picture of a queue for the dashboard and RPC bridge."""

    model_config = ConfigDict(frozen=True)

    guild_id: GuildIdField
    voice_channel_id: ChannelIdField
    text_channel_id: ChannelIdField
    state: NonEmptyStr
    playing: bool
    is_skippable: bool
    auto: bool
    elapsed_ms: NonNegativeInt = 0
    songs: list[SongView] = Field(default_factory=list)
