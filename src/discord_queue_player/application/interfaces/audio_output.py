"""Port interface for the audio output actor."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ...domain.playback.entities import AudioResource
    from ...domain.playback.events import PlayerStatusChanged
    from ...domain.playback.value_objects import PlayerStatus

StatusListener = Callable[["PlayerStatusChanged"], None]


class AudioOutput(ABC):
    """Interface for the actor that renders audio resources into a voice connection.

    Status changes are reported through the listener registered with
    :meth:`set_status_listener`. The listener must be called on the event
    loop thread and must not block.
    """

    @property
    @abstractmethod
    def status(self) -> PlayerStatus:
        ...

    @abstractmethod
    def play(self, resource: AudioResource) -> None:
        """Start rendering *resource*, replacing whatever was playing."""
        ...

    @abstractmethod
    def pause(self) -> bool:
        ...

    @abstractmethod
    def resume(self) -> bool:
        ...

    @abstractmethod
    def stop(self) -> bool:
        ...

    @abstractmethod
    def set_volume(self, level: float) -> None:
        """Set the normalized output level in [0.0, 1.0]."""
        ...

    @abstractmethod
    def set_status_listener(self, listener: StatusListener | None) -> None:
        ...
