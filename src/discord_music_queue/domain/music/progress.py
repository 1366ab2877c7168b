"""Plain-text progress rendering for the now-playing card."""

from __future__ import annotations

import math


def pretty_seconds(seconds: int) -> str:
    """Format a duration as ``m:ss``, or ``h:mm:ss`` once it reaches an hour."""
    seconds = max(0, int(seconds))
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def progress_bar(length: int, value: float, maximum: float, text: str = "") -> str:
    """Render a ``length``-cell bar filled with ``=`` in proportion to value/maximum.

    ``text`` is written over the middle of the bar.
    """
    if maximum <= 0:
        filled = 0
    else:
        ratio = min(max(value / maximum, 0.0), 1.0)
        filled = int(length * ratio)
    cells = list("=" * filled + " " * (length - filled))
    if text:
        start = max(0, math.floor(length / 2) - math.ceil(len(text) / 2) + 1)
        for offset, char in enumerate(text):
            position = start + offset
            if position < length:
                cells[position] = char
    return "".join(cells)


def short_duration(milliseconds: int) -> str:
    """Coarse ``1d 2h 3m`` rendering used in schedule lines. Seconds are dropped."""
    minutes_total = max(0, int(milliseconds)) // 60_000
    days, rest = divmod(minutes_total, 1440)
    hours, minutes = divmod(rest, 60)
    parts = []
    if days:
        parts.append(f"{days}d")
    if hours:
        parts.append(f"{hours}h")
    if minutes or not parts:
        parts.append(f"{minutes}m")
    return " ".join(parts)
