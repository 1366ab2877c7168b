"""The Frisky Radio stations a live song can be tuned to."""

from __future__ import annotations

from dataclasses import dataclass

from discord_music_queue.domain.shared.enums import FriskyStation
from discord_music_queue.domain.shared.exceptions import UnknownStationError


@dataclass(frozen=True)
class StationInfo:
    key: str
    title: str
    client_name: str
    stream_url: str

    @property
    def queue_line(self) -> str:
        return f"**{self.title}** (LIVE)"


STATIONS: dict[str, StationInfo] = {
    FriskyStation.ORIGINAL: StationInfo(
        key=FriskyStation.ORIGINAL,
        title="Frisky Radio: Original",
        client_name="frisky",
        stream_url="http://stream.friskyradio.com/frisky_mp3_hi",
    ),
    FriskyStation.DEEP: StationInfo(
        key=FriskyStation.DEEP,
        title="Frisky Radio: Deep",
        client_name="deep",
        stream_url="http://deep.friskyradio.com/friskydeep_aachi",
    ),
    FriskyStation.CHILL: StationInfo(
        key=FriskyStation.CHILL,
        title="Frisky Radio: Chill",
        client_name="chill",
        stream_url="https://stream.chill.friskyradio.com/mp3_high",
    ),
    FriskyStation.CLASSICS: StationInfo(
        key=FriskyStation.CLASSICS,
        title="Frisky Radio: Classics",
        client_name="classics",
        stream_url="https://stream.classics.friskyradio.com/mp3_high",
    ),
}


def get_station(key: str) -> StationInfo:
    """Look up a station by key, raising UnknownStationError for anything we don't carry."""
    try:
        return STATIONS[key.lower()]
    except KeyError:
        raise UnknownStationError(key) from None
