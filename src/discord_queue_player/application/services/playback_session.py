"""Playback session - queue and transport state machine for one guild's voice session."""

from __future__ import annotations

import asyncio
import contextlib
import dataclasses
import logging
import time
from collections.abc import Callable, Iterator
from typing import TYPE_CHECKING

from ...config.settings import AudioSettings
from ...domain.playback.entities import AudioResource, StreamOptions, TrackMetadata
from ...domain.playback.events import PlayerStatusChanged
from ...domain.playback.value_objects import ChannelRef, PlayerStatus, format_duration
from ...domain.shared.exceptions import DomainError, NotConnectedError, UpstreamFailureError
from ...domain.shared.messages import LogTemplates
from ...domain.shared.validators import require_track_id, validate_volume

if TYPE_CHECKING:
    from ..interfaces.audio_output import AudioOutput
    from ..interfaces.media_lookup import MediaLookup
    from ..interfaces.voice_transport import VoiceConnection, VoiceTransport

logger = logging.getLogger(__name__)

VOICE_TRANSPORT = "voice transport"
AUDIO_OUTPUT = "audio output"
MEDIA_LOOKUP = "media lookup"


def _monotonic_ms() -> float:
    return time.monotonic() * 1000


@contextlib.contextmanager
def _upstream(collaborator: str) -> Iterator[None]:
    """Re-raise collaborator failures as UpstreamFailureError; domain errors pass through."""
    try:
        yield
    except DomainError:
        raise
    except Exception as e:
        raise UpstreamFailureError(collaborator, e) from e


class PlaybackSession:
    """Owns the play queue, voice connection and output actor of one guild.

    Output-actor notifications are posted to an inbox with :meth:`post_event`
    and applied one at a time by :meth:`run` (or :meth:`drain_events`), so the
    actor never mutates session fields from inside its own callback.
    """

    def __init__(
        self,
        *,
        guild_id: int,
        voice_transport: VoiceTransport,
        audio_output: AudioOutput,
        media_lookup: MediaLookup,
        settings: AudioSettings | None = None,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self._guild_id = guild_id
        self._transport = voice_transport
        self._output = audio_output
        self._media = media_lookup
        self._settings = settings or AudioSettings()
        self._clock = clock or _monotonic_ms

        self._queue: list[str] = []
        self._connection: VoiceConnection | None = None
        self._current_track: str | None = None
        self._resource: AudioResource | None = None
        self._volume: int = self._settings.default_volume
        self._loop = False

        # Milliseconds, from self._clock
        self._start_time: float = 0.0
        self._elapsed_time: float = 0.0
        self._clock_running = False
        # Time of the last transition applied to the two fields above
        self._timing_at: float = float("-inf")

        self._inbox: asyncio.Queue[PlayerStatusChanged] = asyncio.Queue()
        self._runner: asyncio.Task[None] | None = None

        self._output.set_status_listener(self.post_event)

    # ─────────────────────────────────────────────────────────────────
    # Read-only state
    # ─────────────────────────────────────────────────────────────────

    @property
    def guild_id(self) -> int:
        return self._guild_id

    @property
    def connection(self) -> VoiceConnection | None:
        return self._connection

    @property
    def is_connected(self) -> bool:
        return self._connection is not None and self._connection.status.is_live

    @property
    def status(self) -> PlayerStatus:
        return self._output.status

    @property
    def volume(self) -> int:
        return self._volume

    @property
    def loop(self) -> bool:
        return self._loop

    @property
    def elapsed_time(self) -> float:
        return self._elapsed_time

    def get_queue(self) -> tuple[str, ...]:
        return tuple(self._queue)

    def get_current_track(self) -> str | None:
        return self._current_track

    def now_playing(self) -> str | None:
        """Identifier of the track loaded into the output actor, if any."""
        return self._current_track

    # ─────────────────────────────────────────────────────────────────
    # Connection
    # ─────────────────────────────────────────────────────────────────

    async def join(self, channel_ref: ChannelRef | None) -> VoiceConnection | None:
        """Connect to the caller's voice channel.

        Does nothing when *channel_ref* is None (caller not in voice). A live
        connection to the same channel is reused; any other existing
        connection is destroyed and replaced. A track that was loaded on the
        replaced connection starts again from the beginning on the new one;
        if that fails the session settles stopped with its queue intact.
        """
        if channel_ref is None:
            logger.debug(LogTemplates.VOICE_JOIN_SKIPPED)
            return None

        existing = self._connection
        replay: str | None = None
        if existing is not None:
            if existing.status.is_live and existing.channel_id == channel_ref.channel_id:
                logger.debug(LogTemplates.VOICE_REUSED, channel_ref.channel_id)
                return existing

            logger.info(
                LogTemplates.VOICE_REPLACED,
                self._guild_id,
                existing.channel_id,
                existing.status.value,
            )
            if self._resource is not None:
                # Detached first: the teardown's idle notification is then stale
                replay = self._current_track
                self._resource = None
            self._connection = None

        try:
            if existing is not None:
                await self._release(existing)
            with _upstream(VOICE_TRANSPORT):
                connection = await self._transport.connect(
                    channel_ref.channel_id, channel_ref.guild_id, channel_ref.adapter
                )
        except DomainError:
            if replay is not None:
                self._settle_stopped()
            raise
        self._connection = connection
        logger.info(LogTemplates.VOICE_CONNECTED, channel_ref.channel_id, self._guild_id)

        if replay is not None:
            logger.info(LogTemplates.PLAYBACK_REPLAYING, replay, self._guild_id)
            try:
                await self.play(replay)
            except DomainError:
                self._settle_stopped()
                raise
        return connection

    async def leave(self) -> None:
        """Stop playback and release the voice connection, if any."""
        connection = self._connection
        if connection is None:
            return

        if self._current_track is not None or self._queue:
            self.stop()

        self._connection = None
        await self._release(connection)
        logger.info(LogTemplates.VOICE_DISCONNECTED, self._guild_id)

    async def _release(self, connection: VoiceConnection) -> None:
        if not connection.status.is_live:
            return
        with _upstream(VOICE_TRANSPORT):
            await connection.destroy()

    def _require_connection(self, operation: str) -> VoiceConnection:
        connection = self._connection
        if connection is None:
            raise NotConnectedError(operation)
        if not connection.status.is_live:
            raise NotConnectedError(operation, current_state=connection.status.value)
        return connection

    # ─────────────────────────────────────────────────────────────────
    # Transport controls
    # ─────────────────────────────────────────────────────────────────

    async def play(self, track_id: str) -> None:
        """Open *track_id* and start it on the output actor.

        Raises:
            NotConnectedError: No live voice connection. Nothing is mutated.
            MissingIdentifierError: *track_id* is empty.
            UpstreamFailureError: Stream open or output actor failed. If the
                output was left without a track, the session is stopped too.
        """
        require_track_id(track_id, "play")
        self._require_connection("play")

        options = StreamOptions(high_water_mark=self._settings.high_water_mark)
        with _upstream(MEDIA_LOOKUP):
            stream = await self._media.open_stream(track_id, options)

        # The connection may have been torn down while the stream was opening.
        connection = self._require_connection("play")

        resource = AudioResource(stream=stream, volume=self._volume / 100)
        try:
            with _upstream(AUDIO_OUTPUT):
                connection.subscribe(self._output)
                self._output.play(resource)
        except UpstreamFailureError:
            if not self._output.status.is_active:
                self._settle_stopped()
            raise

        self._resource = resource
        self._current_track = track_id
        # Replacing a playing track emits no Playing -> Playing notification
        self._reset_timing()
        self._mark_time(PlayerStatus.PLAYING, self._clock())
        logger.info(LogTemplates.PLAYBACK_STARTED, track_id, self._guild_id)

    def pause(self) -> bool:
        with _upstream(AUDIO_OUTPUT):
            paused = self._output.pause()
        if paused:
            self._mark_time(PlayerStatus.PAUSED, self._clock())
            logger.info(LogTemplates.PLAYBACK_PAUSED, self._guild_id)
        return paused

    def resume(self) -> bool:
        with _upstream(AUDIO_OUTPUT):
            resumed = self._output.resume()
        if resumed:
            self._mark_time(PlayerStatus.PLAYING, self._clock())
            logger.info(LogTemplates.PLAYBACK_RESUMED, self._guild_id)
        return resumed

    def stop(self) -> None:
        """Halt the output actor, clear the queue and the current track."""
        self._queue.clear()
        self._settle_stopped()

        with _upstream(AUDIO_OUTPUT):
            self._output.stop()
        logger.info(LogTemplates.PLAYBACK_STOPPED, self._guild_id)

    def set_volume(self, volume: int) -> None:
        """Set the session volume (0-100) and push it to the output if connected.

        Raises:
            InvalidVolumeError: *volume* is not an int in [0, 100]. Volume is unchanged.
        """
        self._volume = validate_volume(volume)
        if self.is_connected:
            with _upstream(AUDIO_OUTPUT):
                self._output.set_volume(volume / 100)
        logger.debug(LogTemplates.PLAYBACK_VOLUME_SET, volume, self._guild_id)

    def add_to_queue(self, track_id: str) -> int:
        """Append *track_id* to the queue and return its 1-based position."""
        self._queue.append(track_id)
        position = len(self._queue)
        logger.debug(LogTemplates.PLAYBACK_TRACK_QUEUED, track_id, self._guild_id, position)
        return position

    def toggle_loop(self) -> bool:
        self._loop = not self._loop
        logger.debug(
            LogTemplates.PLAYBACK_LOOP_TOGGLED, "on" if self._loop else "off", self._guild_id
        )
        return self._loop

    # ─────────────────────────────────────────────────────────────────
    # Lookups
    # ─────────────────────────────────────────────────────────────────

    async def search(self, query: str) -> str:
        """Return the URL of the best match for *query*, or "" when nothing matches."""
        with _upstream(MEDIA_LOOKUP):
            results = await self._media.search(query)
        if not results:
            logger.debug(LogTemplates.YTDLP_SEARCH_NO_RESULTS, query)
            return ""
        return results[0].url

    async def _metadata(self, track_id: str | None, field: str) -> TrackMetadata:
        track_id = require_track_id(track_id, field)
        with _upstream(MEDIA_LOOKUP):
            return await self._media.get_metadata(track_id)

    async def get_thumbnail(self, track_id: str | None) -> str | None:
        return (await self._metadata(track_id, "thumbnail")).thumbnail_url

    async def get_title(self, track_id: str | None) -> str:
        return (await self._metadata(track_id, "title")).title

    async def get_author(self, track_id: str | None) -> str:
        return (await self._metadata(track_id, "author")).author

    async def get_duration(self, track_id: str | None) -> int:
        return (await self._metadata(track_id, "duration")).duration_seconds

    def get_elapsed_time(self) -> float | None:
        """Milliseconds played of the current track, or None unless the output is playing."""
        if self._output.status != PlayerStatus.PLAYING:
            return None
        if not self._clock_running:
            return self._elapsed_time
        return self._elapsed_time + (self._clock() - self._start_time)

    format_duration = staticmethod(format_duration)

    # ─────────────────────────────────────────────────────────────────
    # Output-actor notifications
    # ─────────────────────────────────────────────────────────────────

    def post_event(self, event: PlayerStatusChanged) -> None:
        """Queue a notification from the output actor. Never blocks.

        Notifications without a timestamp are stamped with the current clock
        reading, so elapsed time does not depend on when they are applied.
        """
        if event.at is None:
            event = dataclasses.replace(event, at=self._clock())
        self._inbox.put_nowait(event)

    async def drain_events(self) -> int:
        """Apply every pending notification, including ones raised while applying."""
        handled = 0
        while not self._inbox.empty():
            event = self._inbox.get_nowait()
            try:
                await self._dispatch(event)
            finally:
                self._inbox.task_done()
            handled += 1
        return handled

    async def run(self) -> None:
        """Apply notifications as they arrive until cancelled."""
        while True:
            event = await self._inbox.get()
            try:
                await self._dispatch(event)
            except Exception:
                logger.exception(
                    LogTemplates.SESSION_EVENT_ERROR, event.new_status.value, self._guild_id
                )
            finally:
                self._inbox.task_done()

    def start(self) -> None:
        if self._runner is None or self._runner.done():
            self._runner = asyncio.create_task(
                self.run(), name=f"playback-session-{self._guild_id}"
            )

    async def close(self) -> None:
        """Stop the notification loop and leave voice."""
        runner, self._runner = self._runner, None
        if runner is not None:
            runner.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await runner
        self._output.set_status_listener(None)
        await self.leave()

    def _is_stale(self, event: PlayerStatusChanged) -> bool:
        return event.resource is not None and event.resource is not self._resource

    async def _dispatch(self, event: PlayerStatusChanged) -> None:
        if self._is_stale(event):
            if event.new_status == PlayerStatus.IDLE:
                logger.debug(
                    LogTemplates.PLAYBACK_STALE_IDLE,
                    event.resource.track_id if event.resource else None,
                    self._guild_id,
                )
            return

        logger.debug(
            LogTemplates.PLAYBACK_STATUS_CHANGED,
            event.old_status.value,
            event.new_status.value,
            self._guild_id,
        )

        if event.new_status == PlayerStatus.PLAYING or event.new_status.is_paused:
            self._mark_time(event.new_status, self._clock() if event.at is None else event.at)
        elif event.is_stream_end:
            await self._on_idle()

    async def _on_idle(self) -> None:
        """Advance the queue after a track ends, then reset elapsed time."""
        finished = self._current_track
        if finished is None:
            return
        self._reset_timing()

        from_queue = False
        if self._loop:
            logger.info(LogTemplates.PLAYBACK_LOOPING, finished, self._guild_id)
            next_track = finished
        elif self._queue:
            next_track = self._queue.pop(0)
            from_queue = True
            logger.info(
                LogTemplates.PLAYBACK_ADVANCING, next_track, self._guild_id, len(self._queue)
            )
        else:
            logger.info(LogTemplates.PLAYBACK_QUEUE_EXHAUSTED, self._guild_id)
            self._settle_stopped()
            return

        try:
            await self.play(next_track)
        except NotConnectedError:
            if from_queue:
                self._queue.insert(0, next_track)
            logger.warning(LogTemplates.PLAYBACK_ADVANCE_NOT_CONNECTED, next_track, self._guild_id)
            self._settle_stopped()
        except DomainError:
            logger.exception(LogTemplates.PLAYBACK_AUTO_ADVANCE_FAILED, next_track, self._guild_id)
            self._settle_stopped()

    # ─────────────────────────────────────────────────────────────────
    # Elapsed-time bookkeeping
    # ─────────────────────────────────────────────────────────────────

    def _mark_time(self, status: PlayerStatus, at: float) -> None:
        """Apply a Playing or Paused transition that happened at *at*.

        Transitions older than the last one applied are dropped, and
        repeated ones are no-ops, so a notification arriving after the
        session already recorded the same change counts once.
        """
        if at < self._timing_at:
            return
        self._timing_at = at
        if status == PlayerStatus.PLAYING:
            if not self._clock_running:
                self._start_time = at
                self._clock_running = True
        elif status.is_paused and self._clock_running:
            self._elapsed_time += at - self._start_time
            self._clock_running = False

    def _reset_timing(self) -> None:
        self._elapsed_time = 0.0
        self._clock_running = False

    def _settle_stopped(self) -> None:
        self._current_track = None
        self._resource = None
        self._reset_timing()
