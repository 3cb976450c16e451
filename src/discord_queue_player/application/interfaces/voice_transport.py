"""Port interface for the voice transport."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ...domain.playback.value_objects import ConnectionStatus
    from .audio_output import AudioOutput


class VoiceConnection(ABC):
    """A live binding between a session and a voice endpoint."""

    @property
    @abstractmethod
    def status(self) -> ConnectionStatus:
        ...

    @property
    @abstractmethod
    def channel_id(self) -> int:
        ...

    @abstractmethod
    def subscribe(self, output: AudioOutput) -> None:
        """Route *output*'s audio into this connection."""
        ...

    @abstractmethod
    async def destroy(self) -> None:
        """Release the connection. Afterwards ``status`` is DESTROYED."""
        ...


class VoiceTransport(ABC):
    """Interface for establishing voice connections."""

    @abstractmethod
    async def connect(self, channel_id: int, guild_id: int, adapter: Any) -> VoiceConnection:
        """Join a voice channel and return the connection handle."""
        ...
