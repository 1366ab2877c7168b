"""Shared string enumerations for type-safe comparisons across cogs and the remote bridge."""

from __future__ import annotations

from enum import StrEnum


class RemoteAction(StrEnum):
    """Control actions accepted from the dashboard/RPC bridge."""

    SKIP = "skip"
    STOP = "stop"
    PAUSE = "pause"
    RESUME = "resume"
    GET_QUEUE = "getQueue"
    GET_QUEUES = "getQueues"


class FriskyStation(StrEnum):
    """Stations carried by the Frisky Radio song variant."""

    ORIGINAL = "original"
    DEEP = "deep"
    CHILL = "chill"
    CLASSICS = "classics"


class SongKind(StrEnum):
    """Variant tags written into persisted song snapshots."""

    YOUTUBE = "YouTubeSong"
    FRISKY = "FriskySong"
