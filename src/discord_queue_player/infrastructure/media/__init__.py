"""Media infrastructure - yt-dlp lookup."""

from discord_queue_player.infrastructure.media.models import (
    AudioFormatInfo,
    CacheEntry,
    ThumbnailInfo,
    YtDlpOpts,
    YtDlpTrackInfo,
)
from discord_queue_player.infrastructure.media.ytdlp_lookup import YtDlpMediaLookup

__all__ = [
    "AudioFormatInfo",
    "CacheEntry",
    "ThumbnailInfo",
    "YtDlpMediaLookup",
    "YtDlpOpts",
    "YtDlpTrackInfo",
]
