"""Discord voice transport implementing VoiceTransport over discord.py voice clients."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

import discord

from discord_queue_player.application.interfaces.voice_transport import (
    VoiceConnection,
    VoiceTransport,
)
from discord_queue_player.config.settings import AudioSettings
from discord_queue_player.domain.playback.value_objects import ConnectionStatus
from discord_queue_player.domain.shared.messages import LogTemplates
from discord_queue_player.infrastructure.discord.adapters.audio_output import DiscordAudioOutput

if TYPE_CHECKING:
    from ....application.interfaces.audio_output import AudioOutput

logger = logging.getLogger(__name__)


class DiscordVoiceConnection(VoiceConnection):
    def __init__(self, voice_client: discord.VoiceClient) -> None:
        self._voice_client = voice_client
        self._destroyed = False

    @property
    def voice_client(self) -> discord.VoiceClient:
        return self._voice_client

    @property
    def status(self) -> ConnectionStatus:
        if self._destroyed:
            return ConnectionStatus.DESTROYED
        if self._voice_client.is_connected():
            return ConnectionStatus.READY
        return ConnectionStatus.DISCONNECTED

    @property
    def channel_id(self) -> int:
        return self._voice_client.channel.id

    def subscribe(self, output: AudioOutput) -> None:
        if not isinstance(output, DiscordAudioOutput):
            raise TypeError(f"Cannot subscribe {type(output).__name__} to a Discord voice client")
        output.attach(self._voice_client)

    async def destroy(self) -> None:
        try:
            await self._voice_client.disconnect(force=True)
        finally:
            self._destroyed = True


class DiscordVoiceTransport(VoiceTransport):
    """Connects to voice channels through the bot client passed as ``adapter``."""

    def __init__(self, settings: AudioSettings | None = None) -> None:
        self._settings = settings or AudioSettings()

    async def connect(
        self, channel_id: int, guild_id: int, adapter: discord.Client
    ) -> DiscordVoiceConnection:
        guild = adapter.get_guild(guild_id)
        if guild is None:
            logger.warning(LogTemplates.VOICE_GUILD_NOT_FOUND, guild_id)
            raise LookupError(f"Guild {guild_id} not found")

        channel = guild.get_channel(channel_id)
        if not isinstance(channel, discord.VoiceChannel | discord.StageChannel):
            logger.warning(LogTemplates.VOICE_CHANNEL_NOT_VOICE, channel_id)
            raise LookupError(f"Channel {channel_id} is not a voice channel")

        stale = guild.voice_client
        if stale is not None:
            # discord.py allows one voice client per guild
            await stale.disconnect(force=True)

        try:
            async with asyncio.timeout(self._settings.connect_timeout):
                voice_client = await channel.connect(self_deaf=True)
        except TimeoutError:
            logger.error(LogTemplates.VOICE_CONNECTION_TIMEOUT, channel_id)
            raise
        except discord.Forbidden:
            logger.error(LogTemplates.VOICE_NO_PERMISSION, channel_id)
            raise
        except discord.ClientException as e:
            logger.error(LogTemplates.VOICE_CLIENT_ERROR, e)
            raise

        await self._ensure_self_deaf(guild, channel)
        logger.info(LogTemplates.VOICE_CONNECTED, channel.name, guild.name)
        return DiscordVoiceConnection(voice_client)

    async def _ensure_self_deaf(
        self,
        guild: discord.Guild,
        channel: discord.VoiceChannel | discord.StageChannel,
    ) -> None:
        try:
            await guild.change_voice_state(channel=channel, self_deaf=True)
        except Exception as exc:
            logger.debug(LogTemplates.VOICE_SELF_DEAFEN_FAILED, guild.id, exc)
