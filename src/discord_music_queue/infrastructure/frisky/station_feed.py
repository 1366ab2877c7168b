"""StationFeed implementation polling the Frisky Radio schedule API."""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from collections.abc import Callable
from datetime import datetime
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from discord_music_queue.application.interfaces.station_feed import (
    Mix,
    StationFeed,
    StationListener,
    StationStream,
)
from discord_music_queue.config.settings import FriskySettings
from discord_music_queue.domain.music.stations import STATIONS, get_station
from discord_music_queue.domain.shared.datetime_utils import now_ms
from discord_music_queue.domain.shared.messages import LogTemplates

logger = logging.getLogger(__name__)


class _ScheduleItem(BaseModel):
    """One entry of the ``/schedule/<station>`` payload."""

    model_config = ConfigDict(extra="ignore")

    start_time: datetime
    duration: int = Field(ge=0)
    mix: Mix | None = None

    def to_stream(self) -> StationStream:
        return StationStream(
            start_ms=int(self.start_time.timestamp() * 1000),
            duration_seconds=self.duration,
            mix=self.mix,
        )


def parse_schedule(payload: Any) -> list[StationStream]:
    """Turn a schedule payload into slots ordered by start time.

    Accepts either a bare list or ``{"items": [...]}``. Entries that fail
    validation are dropped.
    """
    items = payload.get("items", []) if isinstance(payload, dict) else payload
    if not isinstance(items, list):
        return []

    streams: list[StationStream] = []
    for item in items:
        try:
            streams.append(_ScheduleItem.model_validate(item).to_stream())
        except ValidationError:
            continue
    streams.sort(key=lambda s: s.start_ms)
    return streams


class FriskyStationFeed(StationFeed):
    """Keeps each station's schedule fresh and announces mix changes.

    Listeners are awaited one by one after every poll in which the on-air
    mix of their station differs from the previous poll.
    """

    def __init__(
        self,
        settings: FriskySettings | None = None,
        *,
        client: httpx.AsyncClient | None = None,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self._settings = settings or FriskySettings()
        self._client = client or httpx.AsyncClient(
            base_url=self._settings.api_url,
            timeout=self._settings.request_timeout_seconds,
            follow_redirects=True,
        )
        self._clock = clock
        self._schedules: dict[str, list[StationStream]] = {}
        self._current_mix: dict[str, str | None] = {}
        self._listeners: defaultdict[str, list[StationListener]] = defaultdict(list)
        self._task: asyncio.Task[None] | None = None
        self._running = False

    # ── StationFeed ─────────────────────────────────────────────────

    def now_playing_index(self, station: str) -> int | None:
        now = self._clock()
        for index, stream in enumerate(self._schedules.get(station, [])):
            if stream.start_ms <= now < stream.start_ms + stream.duration_seconds * 1000:
                return index
        return None

    def schedule(self, station: str) -> list[StationStream]:
        return list(self._schedules.get(station, []))

    def stream_url(self, station: str) -> str:
        return get_station(station).stream_url

    def subscribe(self, station: str, listener: StationListener) -> None:
        if listener not in self._listeners[station]:
            self._listeners[station].append(listener)

    def unsubscribe(self, station: str, listener: StationListener) -> None:
        listeners = self._listeners.get(station)
        if listeners and listener in listeners:
            listeners.remove(listener)

    def listener_count(self, station: str) -> int:
        return len(self._listeners.get(station, []))

    # ── Polling ─────────────────────────────────────────────────────

    async def refresh(self, station: str) -> None:
        """Fetch one station's schedule and notify listeners if its mix changed."""
        client_name = get_station(station).client_name
        try:
            response = await self._client.get(f"/schedule/{client_name}")
            response.raise_for_status()
            schedule = parse_schedule(response.json())
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(LogTemplates.FEED_FETCH_FAILED, station, e)
            return

        self._schedules[station] = schedule
        index = self.now_playing_index(station)
        current = schedule[index] if index is not None else None
        mix_id = current.mix.id if current is not None and current.mix is not None else None

        seen = station in self._current_mix
        previous = self._current_mix.get(station)
        self._current_mix[station] = mix_id
        if seen and previous != mix_id:
            logger.info(LogTemplates.FEED_STATION_CHANGED, station, mix_id)
            await self._notify(station)

    async def refresh_all(self) -> None:
        for station in STATIONS:
            await self.refresh(station)

    async def _notify(self, station: str) -> None:
        for listener in list(self._listeners.get(station, [])):
            try:
                await listener()
            except Exception:
                logger.exception(LogTemplates.FEED_LISTENER_FAILED, station)

    def start(self) -> None:
        if self._running:
            return
        self._running = True
        self._task = asyncio.create_task(self._run_loop())
        logger.info(LogTemplates.FEED_POLL_STARTED, self._settings.poll_interval_seconds)

    async def _run_loop(self) -> None:
        while self._running:
            await self.refresh_all()
            try:
                await asyncio.sleep(self._settings.poll_interval_seconds)
            except asyncio.CancelledError:
                break

    async def stop(self) -> None:
        self._running = False
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
            logger.info(LogTemplates.FEED_POLL_STOPPED)
        await self._client.aclose()
