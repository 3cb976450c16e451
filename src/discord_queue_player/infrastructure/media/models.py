"""Pydantic models for yt-dlp extraction results and options.

These are infrastructure-specific models for parsing external yt-dlp data,
caching extraction results, and configuring yt-dlp options.
"""

from __future__ import annotations

from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field, field_validator

from discord_queue_player.domain.shared.types import (
    HttpUrlStr,
    NonEmptyStr,
    NonNegativeFloat,
    NonNegativeInt,
    PositiveInt,
)

DEFAULT_RETRIES: Final[int] = 3
DEFAULT_SOCKET_TIMEOUT: Final[int] = 10
DEFAULT_HTTP_CHUNK_SIZE: Final[int] = 1024 * 1024  # 1 MiB
UNKNOWN_TITLE: Final[str] = "Unknown Title"
UNKNOWN_AUTHOR: Final[str] = "Unknown Author"


def _coerce_non_negative_int(v: Any) -> int | None:
    if v is None:
        return None
    try:
        val = int(v)
    except (TypeError, ValueError):
        return None
    return val if val >= 0 else None


class AudioFormatInfo(BaseModel):
    """A single format entry from yt-dlp extraction."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    url: NonEmptyStr | None = None
    acodec: NonEmptyStr | None = None
    vcodec: NonEmptyStr | None = None
    abr: NonNegativeFloat | None = None

    @field_validator("abr", mode="before")
    @classmethod
    def _coerce_abr(cls, v: Any) -> float | None:
        try:
            val = float(v)
        except (TypeError, ValueError):
            return None
        return val if val >= 0 else None

    @property
    def has_audio(self) -> bool:
        return self.acodec != "none" and self.url is not None


class ThumbnailInfo(BaseModel):
    """A thumbnail entry from yt-dlp extraction."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    url: HttpUrlStr
    width: NonNegativeInt | None = None
    height: NonNegativeInt | None = None

    @field_validator("width", "height", mode="before")
    @classmethod
    def _coerce_dimension(cls, v: Any) -> int | None:
        return _coerce_non_negative_int(v)


class YtDlpTrackInfo(BaseModel):
    """Trimmed yt-dlp extraction result.

    Extra fields from yt-dlp are silently ignored, keeping memory usage low.
    Before-validators coerce garbage from external yt-dlp data gracefully.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    webpage_url: HttpUrlStr | None = None
    url: NonEmptyStr | None = None
    title: NonEmptyStr = UNKNOWN_TITLE
    duration: NonNegativeInt | None = None
    thumbnail: HttpUrlStr | None = None
    thumbnails: list[ThumbnailInfo] = Field(default_factory=list)
    uploader: NonEmptyStr | None = None
    channel: NonEmptyStr | None = None
    artist: NonEmptyStr | None = None
    creator: NonEmptyStr | None = None
    http_headers: dict[str, str] = Field(default_factory=dict)
    formats: list[AudioFormatInfo] = Field(default_factory=list)

    @field_validator(
        "webpage_url", "url", "thumbnail",
        "uploader", "channel", "artist", "creator",
        mode="before",
    )
    @classmethod
    def _coerce_empty_to_none(cls, v: Any) -> str | None:
        """Convert empty / whitespace-only / non-string values to None."""
        if not isinstance(v, str) or not v.strip():
            return None
        return v

    @field_validator("title", mode="before")
    @classmethod
    def _coerce_title(cls, v: Any) -> str:
        """Fall back to default when yt-dlp sends empty or non-string title."""
        if not isinstance(v, str) or not v.strip():
            return UNKNOWN_TITLE
        return v

    @field_validator("duration", mode="before")
    @classmethod
    def _coerce_duration(cls, v: Any) -> int | None:
        """Coerce to non-negative int; return None for garbage values."""
        return _coerce_non_negative_int(v)

    @field_validator("thumbnails", mode="before")
    @classmethod
    def _drop_bad_thumbnails(cls, v: Any) -> list[dict[str, Any]]:
        """Keep only entries carrying an http(s) URL."""
        if not isinstance(v, list):
            return []
        return [
            t for t in v
            if isinstance(t, dict)
            and isinstance(t.get("url"), str)
            and t["url"].startswith(("http://", "https://"))
        ]

    @field_validator("http_headers", mode="before")
    @classmethod
    def _coerce_headers(cls, v: Any) -> dict[str, str]:
        if not isinstance(v, dict):
            return {}
        return {str(k): str(val) for k, val in v.items() if val is not None}

    @property
    def author(self) -> str:
        return self.uploader or self.channel or self.artist or self.creator or UNKNOWN_AUTHOR

    @property
    def page_url(self) -> str | None:
        return self.webpage_url or (
            self.url if self.url and self.url.startswith(("http://", "https://")) else None
        )


class CacheEntry(BaseModel):
    """Cached yt-dlp extraction result with its fetch timestamp."""

    model_config = ConfigDict(frozen=True)

    info: YtDlpTrackInfo
    cached_at: NonNegativeFloat


class YtDlpOpts(BaseModel):
    """Typed yt-dlp configuration options passed to YoutubeDL."""

    model_config = ConfigDict(frozen=True)

    quiet: bool = True
    no_warnings: bool = True
    noprogress: bool = True
    noplaylist: bool = True
    default_search: NonEmptyStr = "ytsearch"
    forceipv4: bool = True
    retries: PositiveInt = DEFAULT_RETRIES
    socket_timeout: PositiveInt = DEFAULT_SOCKET_TIMEOUT
    http_chunk_size: PositiveInt = DEFAULT_HTTP_CHUNK_SIZE
    format: NonEmptyStr | None = None
    skip_download: bool = True
    extract_flat: NonEmptyStr | bool = False
