"""Data models exchanged between the playback session and its collaborators."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from pydantic import BaseModel, ConfigDict, Field

from discord_queue_player.domain.shared.types import (
    DurationSeconds,
    HighWaterMark,
    HttpUrlStr,
    NonEmptyStr,
    NonNegativeInt,
)

DEFAULT_HIGH_WATER_MARK: Final[int] = 1 << 25  # 32 MiB


class Thumbnail(BaseModel):
    """One thumbnail variant of a track."""

    model_config = ConfigDict(frozen=True)

    url: HttpUrlStr
    width: NonNegativeInt | None = None
    height: NonNegativeInt | None = None


class TrackMetadata(BaseModel):
    """Metadata the media lookup reports for a track."""

    model_config = ConfigDict(frozen=True)

    title: NonEmptyStr
    author: NonEmptyStr
    duration_seconds: DurationSeconds
    thumbnails: tuple[Thumbnail, ...] = ()

    @property
    def thumbnail_url(self) -> str | None:
        """URL of the first thumbnail entry, if any."""
        return self.thumbnails[0].url if self.thumbnails else None


class SearchResult(BaseModel):
    """A single ranked search hit."""

    model_config = ConfigDict(frozen=True)

    url: HttpUrlStr
    title: NonEmptyStr | None = None
    duration_seconds: DurationSeconds | None = None


class StreamOptions(BaseModel):
    """Options for opening an audio stream."""

    model_config = ConfigDict(frozen=True)

    audio_only: bool = True
    quality: NonEmptyStr = "highestaudio"
    high_water_mark: HighWaterMark = DEFAULT_HIGH_WATER_MARK


class AudioStream(BaseModel):
    """An opened, streamable audio source for a track."""

    model_config = ConfigDict(frozen=True)

    track_id: NonEmptyStr
    stream_url: HttpUrlStr
    http_headers: dict[str, str] = Field(default_factory=dict)
    high_water_mark: HighWaterMark = DEFAULT_HIGH_WATER_MARK


@dataclass(eq=False, slots=True)
class AudioResource:
    """A playable wrapper around an :class:`AudioStream`.

    Compared by identity so the session can tell a status notification for
    the current resource from one for a resource it has already replaced.
    ``volume`` is the output gain; the session derives it from an already
    validated percentage.
    """

    stream: AudioStream
    volume: float = 0.5

    @property
    def track_id(self) -> str:
        return self.stream.track_id
