"""Application interfaces (ports) for infrastructure adapters."""

from discord_queue_player.application.interfaces.audio_output import AudioOutput, StatusListener
from discord_queue_player.application.interfaces.media_lookup import MediaLookup
from discord_queue_player.application.interfaces.voice_transport import (
    VoiceConnection,
    VoiceTransport,
)

__all__ = [
    "AudioOutput",
    "MediaLookup",
    "StatusListener",
    "VoiceConnection",
    "VoiceTransport",
]
