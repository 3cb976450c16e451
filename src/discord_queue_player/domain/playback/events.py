"""Notifications emitted by the audio output actor."""

from __future__ import annotations

from dataclasses import dataclass

from discord_queue_player.domain.playback.entities import AudioResource
from discord_queue_player.domain.playback.value_objects import PlayerStatus


@dataclass(frozen=True, slots=True)
class PlayerStatusChanged:
    """The output actor moved from ``old_status`` to ``new_status``.

    ``resource`` is the resource the transition belongs to; for an IDLE
    notification it is the resource that just finished. ``at`` is when the
    transition happened, in the session clock's milliseconds; the session
    fills it in on receipt when the emitter leaves it unset.
    """

    old_status: PlayerStatus
    new_status: PlayerStatus
    resource: AudioResource | None = None
    at: float | None = None

    @property
    def is_stream_end(self) -> bool:
        return self.new_status == PlayerStatus.IDLE and self.old_status != PlayerStatus.IDLE
