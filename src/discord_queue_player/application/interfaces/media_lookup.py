"""Port interface for media lookup: search, metadata and stream opening."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from discord_queue_player.domain.shared.types import NonEmptyStr

if TYPE_CHECKING:
    from ...domain.playback.entities import (
        AudioStream,
        SearchResult,
        StreamOptions,
        TrackMetadata,
    )


class MediaLookup(ABC):
    """Interface for resolving track identifiers and search queries."""

    @abstractmethod
    async def open_stream(self, track_id: NonEmptyStr, options: StreamOptions) -> AudioStream:
        """Open a streamable audio source for *track_id*."""
        ...

    @abstractmethod
    async def search(self, query: NonEmptyStr) -> list[SearchResult]:
        """Return search hits for *query*, best match first."""
        ...

    @abstractmethod
    async def get_metadata(self, track_id: NonEmptyStr) -> TrackMetadata:
        """Fetch title, author, duration and thumbnails for *track_id*."""
        ...
