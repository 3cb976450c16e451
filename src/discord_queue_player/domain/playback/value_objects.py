"""Immutable value objects for the playback bounded context."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from discord_queue_player.domain.shared.messages import ErrorMessages


class PlayerStatus(Enum):
    """Status of the audio output actor.

    Notifications the session reacts to:
    - IDLE -> PLAYING (resource started)
    - PLAYING -> PAUSED (pause)
    - PAUSED -> PLAYING (resume)
    - Any -> IDLE (stream end or stop)
    """

    IDLE = "idle"
    BUFFERING = "buffering"
    PLAYING = "playing"
    PAUSED = "paused"
    AUTO_PAUSED = "autopaused"

    @property
    def is_active(self) -> bool:
        return self in {
            PlayerStatus.BUFFERING,
            PlayerStatus.PLAYING,
            PlayerStatus.PAUSED,
            PlayerStatus.AUTO_PAUSED,
        }

    @property
    def is_paused(self) -> bool:
        return self in {PlayerStatus.PAUSED, PlayerStatus.AUTO_PAUSED}


class ConnectionStatus(Enum):
    """Lifecycle status of a voice transport connection."""

    SIGNALLING = "signalling"
    CONNECTING = "connecting"
    READY = "ready"
    DISCONNECTED = "disconnected"
    DESTROYED = "destroyed"

    @property
    def is_live(self) -> bool:
        return self != ConnectionStatus.DESTROYED


@dataclass(frozen=True, slots=True)
class ChannelRef:
    """Voice channel reference extracted from a caller's context.

    ``adapter`` is whatever the transport needs to reach the gateway
    (the bot client for discord.py); it takes no part in equality.
    """

    channel_id: int
    guild_id: int
    adapter: Any = field(default=None, compare=False, repr=False)


def format_duration(seconds: int) -> str:
    """Format a non-negative number of seconds as zero-padded ``HH:MM:SS``.

    Hours are not wrapped at 24.

    Raises:
        ValueError: If *seconds* is negative.
    """
    if seconds < 0:
        raise ValueError(ErrorMessages.NEGATIVE_DURATION.format(seconds=seconds))

    total = int(seconds)
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"
