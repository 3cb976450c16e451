"""Dependency Injection Container

Builds the voice transport, media lookup and per-guild playback sessions
lazily, and tears the sessions down on shutdown.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..domain.shared.messages import ErrorMessages

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from discord.ext.commands import Bot

    from ..application.interfaces.media_lookup import MediaLookup
    from ..application.interfaces.voice_transport import VoiceTransport
    from ..application.services.playback_session import PlaybackSession
    from ..application.services.session_registry import SessionRegistry
    from .settings import Settings


@dataclass
class Container:
    """Dependency injection container.

    Components are lazily initialized when first accessed.
    """

    settings: Settings
    _bot: Bot | None = None

    _voice_transport: VoiceTransport | None = None
    _media_lookup: MediaLookup | None = None
    _session_registry: SessionRegistry | None = None

    def set_bot(self, bot: Bot) -> None:
        """Set the Discord bot instance."""
        self._bot = bot

    @property
    def bot(self) -> Bot:
        """Get the Discord bot instance."""
        if self._bot is None:
            raise RuntimeError(ErrorMessages.BOT_NOT_INITIALIZED)
        return self._bot

    # === Infrastructure Adapters ===

    @property
    def voice_transport(self) -> VoiceTransport:
        if self._voice_transport is None:
            from ..infrastructure.discord.adapters.voice_transport import DiscordVoiceTransport

            self._voice_transport = DiscordVoiceTransport(self.settings.audio)
        return self._voice_transport

    @property
    def media_lookup(self) -> MediaLookup:
        if self._media_lookup is None:
            from ..infrastructure.media.ytdlp_lookup import YtDlpMediaLookup

            self._media_lookup = YtDlpMediaLookup(self.settings.audio)
        return self._media_lookup

    # === Application Services ===

    @property
    def session_registry(self) -> SessionRegistry:
        """Get the per-guild playback session registry."""
        if self._session_registry is None:
            from ..application.services.session_registry import SessionRegistry

            self._session_registry = SessionRegistry(self.create_session)
        return self._session_registry

    def create_session(self, guild_id: int) -> PlaybackSession:
        """Build a playback session with its own Discord audio output."""
        from ..application.services.playback_session import PlaybackSession
        from ..infrastructure.discord.adapters.audio_output import DiscordAudioOutput

        return PlaybackSession(
            guild_id=guild_id,
            voice_transport=self.voice_transport,
            audio_output=DiscordAudioOutput(guild_id, self.settings.audio),
            media_lookup=self.media_lookup,
            settings=self.settings.audio,
        )

    # === Lifecycle ===

    async def shutdown(self) -> None:
        """Close every playback session."""
        if self._session_registry is not None:
            await self._session_registry.close_all()


def create_container(settings: Settings) -> Container:
    """Create a new dependency injection container."""
    return Container(settings)
