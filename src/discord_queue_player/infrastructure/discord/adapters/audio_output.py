"""
Discord Audio Output

FFmpeg-backed output actor rendering audio resources into a discord.py voice client.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

import discord

from discord_queue_player.application.interfaces.audio_output import AudioOutput, StatusListener
from discord_queue_player.config.settings import AudioSettings
from discord_queue_player.domain.playback.events import PlayerStatusChanged
from discord_queue_player.domain.playback.value_objects import PlayerStatus
from discord_queue_player.domain.shared.messages import ErrorMessages, LogTemplates

if TYPE_CHECKING:
    from ....domain.playback.entities import AudioResource, AudioStream

logger = logging.getLogger(__name__)


def _header_args(stream: AudioStream) -> str:
    """Render the stream's HTTP headers as an FFmpeg ``-headers`` argument."""
    if not stream.http_headers:
        return ""
    lines = "".join(
        f"{key}: {value}\r\n" for key, value in stream.http_headers.items()
    ).replace('"', '\\"')
    return f'-headers "{lines}"'


class DiscordAudioOutput(AudioOutput):
    """Plays :class:`AudioResource` objects through a subscribed voice client.

    FFmpeg's ``after`` callback runs on the voice player thread; it is
    marshalled back onto the event loop with ``call_soon_threadsafe`` before
    any status notification is emitted.
    """

    def __init__(self, guild_id: int, settings: AudioSettings | None = None) -> None:
        self._guild_id = guild_id
        self._settings = settings or AudioSettings()
        self._voice_client: discord.VoiceClient | None = None
        self._status = PlayerStatus.IDLE
        self._resource: AudioResource | None = None
        self._listener: StatusListener | None = None

    @property
    def status(self) -> PlayerStatus:
        return self._status

    @property
    def voice_client(self) -> discord.VoiceClient | None:
        return self._voice_client

    def attach(self, voice_client: discord.VoiceClient) -> None:
        """Route output into *voice_client*."""
        self._voice_client = voice_client

    def set_status_listener(self, listener: StatusListener | None) -> None:
        self._listener = listener

    def create_source(self, resource: AudioResource) -> discord.PCMVolumeTransformer:
        """Create an FFmpeg PCM source wrapped in a volume transformer."""
        ffmpeg_options = self._settings.ffmpeg_options
        before_options = " ".join(
            part
            for part in (ffmpeg_options.get("before_options", ""), _header_args(resource.stream))
            if part
        )
        source = discord.FFmpegPCMAudio(
            resource.stream.stream_url,
            before_options=before_options,
            options=ffmpeg_options.get("options", "-vn"),
        )
        return discord.PCMVolumeTransformer(source, volume=resource.volume)

    def play(self, resource: AudioResource) -> None:
        vc = self._voice_client
        if vc is None:
            raise RuntimeError(ErrorMessages.OUTPUT_NOT_SUBSCRIBED)

        loop = asyncio.get_running_loop()

        # Built before touching the current track so a failure leaves it playing
        source = self.create_source(resource)

        previous = self._resource
        if vc.is_playing() or vc.is_paused():
            # The replaced resource's after-callback becomes stale
            self._resource = None
            vc.stop()

        def after_callback(error: Exception | None = None) -> None:
            if error:
                logger.warning(LogTemplates.PLAYBACK_ERROR, self._guild_id, error)
            loop.call_soon_threadsafe(self._on_finished, resource)

        try:
            vc.play(source, after=after_callback)
        except discord.ClientException as e:
            logger.error(LogTemplates.FFMPEG_DISCORD_CLIENT_ERROR, e)
            source.cleanup()
            self._resource = None
            self._set_status(PlayerStatus.IDLE, previous)
            raise

        self._resource = resource
        self._set_status(PlayerStatus.PLAYING, resource)

    def pause(self) -> bool:
        vc = self._voice_client
        if vc is None or not vc.is_playing():
            return False
        vc.pause()
        self._set_status(PlayerStatus.PAUSED, self._resource)
        return True

    def resume(self) -> bool:
        vc = self._voice_client
        if vc is None or not vc.is_paused():
            return False
        vc.resume()
        self._set_status(PlayerStatus.PLAYING, self._resource)
        return True

    def stop(self) -> bool:
        vc = self._voice_client
        resource, self._resource = self._resource, None
        if vc is None or not (vc.is_playing() or vc.is_paused()):
            self._set_status(PlayerStatus.IDLE, resource)
            return False
        vc.stop()
        self._set_status(PlayerStatus.IDLE, resource)
        return True

    def set_volume(self, level: float) -> None:
        vc = self._voice_client
        if vc is None:
            return
        source = vc.source
        if isinstance(source, discord.PCMVolumeTransformer):
            source.volume = max(0.0, min(1.0, level))

    def _on_finished(self, resource: AudioResource) -> None:
        if resource is not self._resource:
            logger.debug(LogTemplates.PLAYBACK_STALE_IDLE, resource.track_id, self._guild_id)
            return
        self._resource = None
        self._set_status(PlayerStatus.IDLE, resource)

    def _set_status(self, new_status: PlayerStatus, resource: AudioResource | None) -> None:
        old_status, self._status = self._status, new_status
        if old_status == new_status:
            return
        if self._listener is not None:
            self._listener(PlayerStatusChanged(old_status, new_status, resource))
