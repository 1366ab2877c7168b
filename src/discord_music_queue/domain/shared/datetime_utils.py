"""Clock helpers.

Playback bookkeeping (song start, pause point, restore offsets) is kept in
integer epoch milliseconds so it survives the JSON snapshot unchanged.
Storage timestamps use timezone-aware UTC datetimes.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import UTC, datetime


@dataclass(frozen=True, slots=True)
class UtcDateTime:
    """Timezone-aware UTC timestamp for row bookkeeping."""

    dt: datetime

    def __post_init__(self) -> None:
        if self.dt.tzinfo is None:
            raise ValueError("UtcDateTime requires a timezone-aware datetime")
        object.__setattr__(self, "dt", self.dt.astimezone(UTC))

    @classmethod
    def now(cls) -> UtcDateTime:
        return cls(datetime.now(UTC))

    @property
    def iso(self) -> str:
        return self.dt.isoformat()


def utcnow() -> datetime:
    return datetime.now(UTC)


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)
