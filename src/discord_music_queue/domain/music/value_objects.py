"""Immutable value objects for the music bounded context."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class Thumbnail:
    """Artwork shown next to a song."""

    url: str
    width: int = 0
    height: int = 0


class _UnresolvedTrack:
    """Sentinel type for a song whose playable track has not been resolved yet."""

    _instance: _UnresolvedTrack | None = None

    def __new__(cls) -> _UnresolvedTrack:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNRESOLVED_TRACK"

    def __bool__(self) -> bool:
        return False


UNRESOLVED_TRACK = _UnresolvedTrack()

Track = str | _UnresolvedTrack
"""Opaque playable handle, or the unresolved sentinel."""


class QueueState(Enum):
    """Queue lifecycle state with enforced transitions.

    State transitions:
    - IDLE -> CONNECTING (voice join for the first song)
    - IDLE -> PLAYING (first song added while already connected)
    - CONNECTING -> PLAYING (voice joined, first song streaming)
    - CONNECTING -> IDLE (join failed)
    - PLAYING -> PAUSED (pause)
    - PAUSED -> PLAYING (resume)
    - PLAYING/PAUSED -> IDLE (song list ran dry)
    - Any -> DESTROYED (stop, idle teardown, connection loss)
    """

    IDLE = "idle"
    CONNECTING = "connecting"
    PLAYING = "playing"
    PAUSED = "paused"
    DESTROYED = "destroyed"

    def can_transition_to(self, target: QueueState) -> bool:
        """Check if transition to target state is valid."""
        valid_transitions = {
            QueueState.IDLE: {QueueState.CONNECTING, QueueState.PLAYING, QueueState.DESTROYED},
            QueueState.CONNECTING: {QueueState.PLAYING, QueueState.IDLE, QueueState.DESTROYED},
            QueueState.PLAYING: {QueueState.PAUSED, QueueState.IDLE, QueueState.DESTROYED},
            QueueState.PAUSED: {QueueState.PLAYING, QueueState.IDLE, QueueState.DESTROYED},
            QueueState.DESTROYED: set(),
        }
        return target in valid_transitions[self]


class VoiceConnectionState(Enum):
    """Where a queue stands with its voice channel."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


class ActionOrigin(Enum):
    """Who asked for a queue action; decides how the result is reported."""

    CHAT = "chat"
    REMOTE = "remote"


class QueueAction(Enum):
    """Control actions funnelled through a queue's serialization point."""

    PAUSE = "pause"
    RESUME = "resume"
    SKIP = "skip"
    STOP = "stop"
    SHUFFLE = "shuffle"
    TOGGLE_AUTO = "toggle_auto"


@dataclass(frozen=True)
class ActionResult:
    """Outcome of a user-facing control action. Rejections are not errors."""

    success: bool
    message: str | None = None

    @classmethod
    def ok(cls, message: str | None = None) -> ActionResult:
        return cls(True, message)

    @classmethod
    def rejected(cls, reason: str) -> ActionResult:
        return cls(False, reason)


@dataclass(frozen=True)
class ActionOutcome:
    """An ActionResult translated for its caller."""

    result: ActionResult
    origin: ActionOrigin
    status_code: int | None = None

    @classmethod
    def for_origin(cls, result: ActionResult, origin: ActionOrigin) -> ActionOutcome:
        if origin is ActionOrigin.CHAT:
            return cls(result, origin)
        if not result.success:
            return cls(result, origin, 400)
        return cls(result, origin, 200 if result.message else 204)
