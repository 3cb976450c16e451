"""
Playback Bounded Context

Value objects, models and events for a single guild's playback session.
"""

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
    format_duration,
)

__all__ = [
    # Models
    "AudioResource",
    "AudioStream",
    "SearchResult",
    "StreamOptions",
    "Thumbnail",
    "TrackMetadata",
    # Value Objects
    "ChannelRef",
    "ConnectionStatus",
    "PlayerStatus",
    "format_duration",
    # Events
    "PlayerStatusChanged",
]
