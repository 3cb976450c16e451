from collections.abc import Callable
from typing import Any

import pytest

from discord_queue_player.application.interfaces.audio_output import AudioOutput, StatusListener
from discord_queue_player.application.interfaces.media_lookup import MediaLookup
from discord_queue_player.application.interfaces.voice_transport import (
    VoiceConnection,
    VoiceTransport,
)
from discord_queue_player.application.services.playback_session import PlaybackSession
from discord_queue_player.config.settings import AudioSettings
from discord_queue_player.domain.playback.entities import (
    AudioResource,
    AudioStream,
    SearchResult,
    StreamOptions,
    Thumbnail,
    TrackMetadata,
)
from discord_queue_player.domain.playback.events import PlayerStatusChanged
from discord_queue_player.domain.playback.value_objects import (
    ChannelRef,
    ConnectionStatus,
    PlayerStatus,
)

# ============================================================================
# Port Fakes
# ============================================================================


class FakeConnection(VoiceConnection):
    def __init__(self, channel_id: int) -> None:
        self._channel_id = channel_id
        self._status = ConnectionStatus.READY
        self.subscribed: list[AudioOutput] = []
        self.destroy_calls = 0
        self.on_destroy: Callable[[], None] | None = None

    @property
    def status(self) -> ConnectionStatus:
        return self._status

    @status.setter
    def status(self, value: ConnectionStatus) -> None:
        self._status = value

    @property
    def channel_id(self) -> int:
        return self._channel_id

    def subscribe(self, output: AudioOutput) -> None:
        self.subscribed.append(output)

    async def destroy(self) -> None:
        self.destroy_calls += 1
        self._status = ConnectionStatus.DESTROYED
        if self.on_destroy is not None:
            self.on_destroy()


class FakeVoiceTransport(VoiceTransport):
    def __init__(self) -> None:
        self.connections: list[FakeConnection] = []
        self.calls: list[tuple[int, int, Any]] = []
        self.error: Exception | None = None

    async def connect(self, channel_id: int, guild_id: int, adapter: Any) -> FakeConnection:
        self.calls.append((channel_id, guild_id, adapter))
        if self.error is not None:
            raise self.error
        connection = FakeConnection(channel_id)
        self.connections.append(connection)
        return connection


class FakeAudioOutput(AudioOutput):
    """In-memory output actor that reports transitions like the FFmpeg output does.

    Replacing a playing resource reports a late IDLE for the old resource
    before the new one's PLAYING, the worst ordering the real player thread
    can produce.
    """

    def __init__(self) -> None:
        self._status = PlayerStatus.IDLE
        self._listener: StatusListener | None = None
        self.resource: AudioResource | None = None
        self.played: list[AudioResource] = []
        self.volume_levels: list[float] = []
        self.stop_calls = 0
        self.error: Exception | None = None
        # Raised after the previous resource has been stopped
        self.start_error: Exception | None = None

    @property
    def status(self) -> PlayerStatus:
        return self._status

    def set_status_listener(self, listener: StatusListener | None) -> None:
        self._listener = listener

    def _emit(self, new_status: PlayerStatus, resource: AudioResource | None) -> None:
        old_status, self._status = self._status, new_status
        if self._listener is not None:
            self._listener(PlayerStatusChanged(old_status, new_status, resource))

    def play(self, resource: AudioResource) -> None:
        if self.error is not None:
            raise self.error
        previous = self.resource
        if previous is not None and self._status.is_active:
            self.resource = None
            self._emit(PlayerStatus.IDLE, previous)
        if self.start_error is not None:
            raise self.start_error
        self.resource = resource
        self.played.append(resource)
        self._emit(PlayerStatus.PLAYING, resource)

    def pause(self) -> bool:
        if self._status != PlayerStatus.PLAYING:
            return False
        self._emit(PlayerStatus.PAUSED, self.resource)
        return True

    def resume(self) -> bool:
        if self._status != PlayerStatus.PAUSED:
            return False
        self._emit(PlayerStatus.PLAYING, self.resource)
        return True

    def stop(self) -> bool:
        self.stop_calls += 1
        if self._status == PlayerStatus.IDLE:
            return False
        resource, self.resource = self.resource, None
        self._emit(PlayerStatus.IDLE, resource)
        return True

    def set_volume(self, level: float) -> None:
        self.volume_levels.append(level)

    def finish(self) -> None:
        """Simulate the current stream running to its end."""
        resource, self.resource = self.resource, None
        self._emit(PlayerStatus.IDLE, resource)


class FakeMediaLookup(MediaLookup):
    def __init__(self) -> None:
        self.opened: list[tuple[str, StreamOptions]] = []
        self.search_results: dict[str, list[SearchResult]] = {}
        self.metadata: dict[str, TrackMetadata] = {}
        self.error: Exception | None = None

    async def open_stream(self, track_id: str, options: StreamOptions) -> AudioStream:
        if self.error is not None:
            raise self.error
        self.opened.append((track_id, options))
        return AudioStream(
            track_id=track_id,
            stream_url=f"https://cdn.example.com/{track_id}.webm",
            high_water_mark=options.high_water_mark,
        )

    async def search(self, query: str) -> list[SearchResult]:
        if self.error is not None:
            raise self.error
        return self.search_results.get(query, [])

    async def get_metadata(self, track_id: str) -> TrackMetadata:
        if self.error is not None:
            raise self.error
        return self.metadata[track_id]


class FakeClock:
    """Millisecond clock advanced by hand."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


# ============================================================================
# Session Fixtures
# ============================================================================


@pytest.fixture
def transport():
    return FakeVoiceTransport()


@pytest.fixture
def output():
    return FakeAudioOutput()


@pytest.fixture
def media():
    media = FakeMediaLookup()
    media.metadata["https://youtu.be/abc"] = TrackMetadata(
        title="Test Song",
        author="Test Artist",
        duration_seconds=213,
        thumbnails=(
            Thumbnail(url="https://i.ytimg.com/vi/abc/hq.jpg", width=480, height=360),
            Thumbnail(url="https://i.ytimg.com/vi/abc/sd.jpg", width=640, height=480),
        ),
    )
    media.metadata["https://youtu.be/bare"] = TrackMetadata(
        title="No Art", author="Someone", duration_seconds=0
    )
    return media


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def audio_settings():
    return AudioSettings(default_volume=50)


@pytest.fixture
def session(transport, output, media, clock, audio_settings):
    """A playback session for guild 1 wired to in-memory fakes."""
    return PlaybackSession(
        guild_id=1,
        voice_transport=transport,
        audio_output=output,
        media_lookup=media,
        settings=audio_settings,
        clock=clock,
    )


@pytest.fixture
def channel_ref():
    return ChannelRef(channel_id=111, guild_id=1, adapter=object())


@pytest.fixture
def other_channel_ref():
    return ChannelRef(channel_id=222, guild_id=1, adapter=object())


@pytest.fixture
def make_session(transport, media, audio_settings):
    """Factory building a session with its own output actor per guild."""

    def factory(guild_id: int) -> PlaybackSession:
        return PlaybackSession(
            guild_id=guild_id,
            voice_transport=transport,
            audio_output=FakeAudioOutput(),
            media_lookup=media,
            settings=audio_settings,
        )

    return factory
