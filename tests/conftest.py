import asyncio
from typing import Any

import pytest
import pytest_asyncio

from discord_music_queue.application.interfaces.metadata_client import (
    MetadataClient,
    MetadataNotFoundError,
    RelatedVideo,
    VideoMetadata,
)
from discord_music_queue.application.interfaces.presenter import NowPlayingCard, QueuePresenter
from discord_music_queue.application.interfaces.snapshot_store import SnapshotStore
from discord_music_queue.application.interfaces.station_feed import (
    AlbumArt,
    Episode,
    EpisodeData,
    Mix,
    MixData,
    ShowRef,
    StationFeed,
    StationListener,
    StationStream,
    TrackListEntry,
)
from discord_music_queue.application.interfaces.track_resolver import NoResultError, TrackResolver
from discord_music_queue.application.interfaces.voice_adapter import (
    StreamHandle,
    StreamListener,
    VoiceAdapter,
    VoiceConnection,
    VoiceJoinError,
)

GUILD_ID = 111
VOICE_CHANNEL_ID = 222
TEXT_CHANNEL_ID = 333
USER_ID = 444

# ============================================================================
# Fakes
# ============================================================================


class FakeClock:
    """Controllable millisecond clock."""

    def __init__(self, now: int = 1_700_000_000_000) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class FakeStreamHandle(StreamHandle):
    def __init__(self, listener: StreamListener, track: str, start_ms: int) -> None:
        self.listener = listener
        self.track = track
        self.start_ms = start_ms
        self.stopped = False
        self.paused = False

    def stop(self) -> None:
        if self.stopped:
            return
        self.stopped = True
        self.listener.stream_ended()

    def pause(self) -> None:
        self.paused = True

    def resume(self) -> None:
        self.paused = False

    def finish(self) -> None:
        """Simulate the track running out."""
        self.stop()


class FakeVoiceConnection(VoiceConnection):
    def __init__(self, guild_id: int, channel_id: int, members: set[int] | None = None) -> None:
        self.guild_id = guild_id
        self.channel_id = channel_id
        self.members = {USER_ID} if members is None else members
        self.connected = True
        self.auto_start = True
        self.streams: list[FakeStreamHandle] = []
        self.left = False

    @property
    def is_connected(self) -> bool:
        return self.connected

    @property
    def region_hint(self) -> str | None:
        return "europe"

    @property
    def current(self) -> FakeStreamHandle | None:
        return self.streams[-1] if self.streams else None

    async def play(self, track: str, listener: StreamListener, start_ms: int = 0) -> StreamHandle:
        handle = FakeStreamHandle(listener, track, start_ms)
        self.streams.append(handle)
        if self.auto_start:
            listener.stream_started()
        return handle

    async def leave(self) -> None:
        self.left = True
        self.connected = False

    def non_bot_member_count(self) -> int:
        return len(self.members)

    def has_member(self, user_id: int) -> bool:
        return user_id in self.members


class FakeVoiceAdapter(VoiceAdapter):
    def __init__(self) -> None:
        self.voice_channels: set[int] = {VOICE_CHANNEL_ID}
        self.fail_join = False
        self.auto_start = True
        self.joins: list[tuple[int, int]] = []
        self.connections: list[FakeVoiceConnection] = []

    @property
    def last_connection(self) -> FakeVoiceConnection:
        return self.connections[-1]

    async def join(self, guild_id: int, channel_id: int) -> VoiceConnection:
        self.joins.append((guild_id, channel_id))
        if self.fail_join:
            raise VoiceJoinError(channel_id, "missing permission")
        connection = FakeVoiceConnection(guild_id, channel_id)
        connection.auto_start = self.auto_start
        self.connections.append(connection)
        return connection

    def has_voice_channel(self, channel_id: int) -> bool:
        return channel_id in self.voice_channels


class FakePresenter(QueuePresenter):
    def __init__(self) -> None:
        self.text_channels: set[int] = {TEXT_CHANNEL_ID}
        self.texts: list[str] = []
        self.posted: list[NowPlayingCard] = []
        self.edits: list[tuple[int, NowPlayingCard]] = []
        self.existing_messages: set[int] = set()
        self.controls_allowed = True
        self.controls: list[int] = []
        self.cleared: list[int] = []
        self._next_id = 9000

    def has_text_channel(self, channel_id: int) -> bool:
        return channel_id in self.text_channels

    async def send_text(self, channel_id: int, text: str) -> None:
        self.texts.append(text)

    async def send_now_playing(self, channel_id: int, card: NowPlayingCard) -> int | None:
        self._next_id += 1
        self.posted.append(card)
        self.existing_messages.add(self._next_id)
        return self._next_id

    async def edit_now_playing(self, channel_id: int, message_id: int, card: NowPlayingCard) -> bool:
        self.edits.append((message_id, card))
        return message_id in self.existing_messages

    async def message_exists(self, channel_id: int, message_id: int) -> bool:
        return message_id in self.existing_messages

    async def attach_controls(self, channel_id: int, message_id: int) -> bool:
        if not self.controls_allowed:
            return False
        self.controls.append(message_id)
        return True

    async def clear_controls(self, channel_id: int, message_id: int) -> None:
        self.cleared.append(message_id)


class FakeResolver(TrackResolver):
    def __init__(self) -> None:
        self.tracks: dict[str, str] = {}
        self.calls: list[tuple[str, str | None]] = []
        self.delay = 0.0
        self.counter = 0

    async def resolve_track(self, identifier: str, region_hint: str | None = None) -> str:
        self.calls.append((identifier, region_hint))
        if self.delay:
            await asyncio.sleep(self.delay)
        if identifier.startswith("http"):
            self.counter += 1
            return f"live:{identifier}#{self.counter}"
        if identifier not in self.tracks:
            raise NoResultError(identifier)
        return self.tracks[identifier]


class FakeMetadata(MetadataClient):
    def __init__(self) -> None:
        self.videos: dict[str, VideoMetadata] = {}
        self.related: dict[str, list[RelatedVideo]] = {}
        self.related_calls: list[str] = []
        self.error: Exception | None = None

    @property
    def origin(self) -> str:
        return "https://invidious.example"

    async def resolve_by_id(self, video_id: str) -> VideoMetadata:
        if video_id not in self.videos:
            raise MetadataNotFoundError(video_id)
        return self.videos[video_id]

    async def get_related(self, video_id: str) -> list[RelatedVideo]:
        self.related_calls.append(video_id)
        if self.error is not None:
            raise self.error
        return self.related.get(video_id, [])

    async def search(self, query: str, limit: int = 5) -> list[VideoMetadata]:
        return [v for v in self.videos.values() if query.lower() in v.title.lower()][:limit]


class FakeStationFeed(StationFeed):
    def __init__(self) -> None:
        self.index: dict[str, int | None] = {}
        self.schedules: dict[str, list[StationStream]] = {}
        self.listeners: dict[str, list[StationListener]] = {}

    def now_playing_index(self, station: str) -> int | None:
        return self.index.get(station)

    def schedule(self, station: str) -> list[StationStream]:
        return self.schedules.get(station, [])

    def stream_url(self, station: str) -> str:
        return f"https://stream.{station}.example/mp3"

    def subscribe(self, station: str, listener: StationListener) -> None:
        self.listeners.setdefault(station, []).append(listener)

    def unsubscribe(self, station: str, listener: StationListener) -> None:
        listeners = self.listeners.get(station, [])
        if listener in listeners:
            listeners.remove(listener)

    def set_on_air(self, station: str, stream: StationStream) -> None:
        self.schedules[station] = [stream]
        self.index[station] = 0


class InMemorySnapshotStore(SnapshotStore):
    def __init__(self) -> None:
        self.documents: dict[str, dict[str, Any]] = {}
        self.upserts: list[tuple[str, dict[str, Any]]] = []

    async def get(self, key: str) -> dict[str, Any] | None:
        return self.documents.get(key)

    async def upsert(self, key: str, document: dict[str, Any]) -> None:
        self.upserts.append((key, document))
        self.documents[key] = document


def make_station_stream(
    title: str = "Deep Show - Episode 12",
    *,
    start_ms: int = 1_700_000_000_000 - 600_000,
    duration_seconds: int = 3600,
    tracks: int = 3,
) -> StationStream:
    return StationStream(
        start_ms=start_ms,
        duration_seconds=duration_seconds,
        mix=Mix(
            id="mix-42",
            data=MixData(
                title=title,
                show_id=ShowRef(id="show-7"),
                genre=["Deep House", "Progressive"],
                track_list=[TrackListEntry(artist=f"Artist {n}", title=f"Track {n}") for n in range(tracks)],
            ),
            episode=Episode(
                data=EpisodeData(album_art=AlbumArt(url="https://img.example/art.jpg", image_width=500, image_height=500))
            ),
        ),
    )


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def voice():
    return FakeVoiceAdapter()


@pytest.fixture
def presenter():
    return FakePresenter()


@pytest.fixture
def resolver():
    r = FakeResolver()
    r.tracks.update({"x1": "track-x1", "x2": "track-x2", "x3": "track-x3", "r1": "track-r1"})
    return r


@pytest.fixture
def metadata():
    m = FakeMetadata()
    for video_id, title, length in (("x1", "First", 200), ("x2", "Second", 180), ("x3", "Third", 240)):
        m.videos[video_id] = VideoMetadata(id=video_id, title=title, length_seconds=length, author="Uploader")
    return m


@pytest.fixture
def feed():
    f = FakeStationFeed()
    f.set_on_air("chill", make_station_stream("Chill Show - Sunday Session"))
    f.set_on_air("deep", make_station_stream())
    return f


@pytest.fixture
def snapshot_store():
    return InMemorySnapshotStore()


@pytest.fixture
def event_bus():
    from discord_music_queue.domain.shared.events import EventBus

    return EventBus()


@pytest.fixture
def song_factory(resolver, metadata, feed):
    from discord_music_queue.application.songs.factory import SongFactory

    return SongFactory(resolver=resolver, metadata=metadata, feed=feed, retry_delay_seconds=0)


@pytest_asyncio.fixture
async def queue_store(voice, presenter, event_bus, snapshot_store, song_factory, clock):
    from discord_music_queue.application.services.queue_store import QueueStore

    store = QueueStore(
        voice=voice,
        presenter=presenter,
        event_bus=event_bus,
        snapshot_store=snapshot_store,
        song_factory=song_factory,
        idle_disconnect_seconds=0.05,
        restore_grace_seconds=0.05,
        autosave_interval_seconds=0.05,
        clock=clock,
    )
    yield store
    for queue in list(store.queues.values()):
        await queue.drain()
        await queue.handle_connection_lost()
        await queue.drain()
    await store.reset()


@pytest_asyncio.fixture
async def guild_queue(queue_store):
    return await queue_store.create(GUILD_ID, VOICE_CHANNEL_ID, TEXT_CHANNEL_ID)


@pytest_asyncio.fixture
async def in_memory_database():
    """Create an in-memory SQLite database for testing."""
    from discord_music_queue.infrastructure.persistence.database import Database

    db = Database(":memory:")
    await db.initialize()
    yield db
    await db.close()


@pytest.fixture
def make_stream():
    return make_station_stream
