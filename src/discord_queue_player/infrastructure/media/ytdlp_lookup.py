"""MediaLookup implementation using yt-dlp for search, metadata and stream URLs."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Final, cast

from yt_dlp import YoutubeDL

from discord_queue_player.application.interfaces.media_lookup import MediaLookup
from discord_queue_player.config.settings import AudioSettings
from discord_queue_player.domain.playback.entities import (
    AudioStream,
    SearchResult,
    StreamOptions,
    Thumbnail,
    TrackMetadata,
)
from discord_queue_player.domain.shared.messages import ErrorMessages, LogTemplates
from discord_queue_player.infrastructure.media.models import (
    AudioFormatInfo,
    CacheEntry,
    YtDlpOpts,
    YtDlpTrackInfo,
)

logger = logging.getLogger(__name__)

CACHE_MAX_SIZE: Final[int] = 500
LOG_URL_TRUNCATE: Final[int] = 60

QUALITY_FORMATS: Final[dict[str, str]] = {
    "highestaudio": "bestaudio",
    "lowestaudio": "worstaudio",
    "highest": "best",
    "lowest": "worst",
}

# Keyed by (url, format)
_info_cache: dict[tuple[str, str], CacheEntry] = {}


class YtDlpMediaLookup(MediaLookup):

    def __init__(self, settings: AudioSettings | None = None) -> None:
        self._settings = settings or AudioSettings()
        self._base_opts = YtDlpOpts(format=self._settings.ytdlp_format)

    def _get_opts(self, **overrides: Any) -> YtDlpOpts:
        if overrides:
            return self._base_opts.model_copy(update=overrides)
        return self._base_opts

    def _format_for(self, options: StreamOptions) -> str:
        """Translate stream options into a yt-dlp format selector."""
        if options.quality == "highestaudio" and options.audio_only:
            return self._settings.ytdlp_format

        selector = QUALITY_FORMATS.get(options.quality, options.quality)
        if options.audio_only and "audio" not in selector:
            selector = f"{selector}audio"
        fallback = "worst" if selector.startswith("worst") else "best"
        return selector if selector == fallback else f"{selector}/{fallback}"

    @staticmethod
    def _parse_info(data: dict[str, Any]) -> YtDlpTrackInfo:
        return YtDlpTrackInfo.model_validate(data)

    def _extract_info_sync(self, url: str, fmt: str) -> YtDlpTrackInfo:
        now = time.time()
        key = (url, fmt)
        cached = _info_cache.get(key)
        if cached is not None:
            if now - cached.cached_at < self._settings.metadata_cache_ttl:
                logger.debug(LogTemplates.CACHE_HIT_URL, url[:LOG_URL_TRUNCATE])
                return cached.info
            _info_cache.pop(key, None)

        try:
            with YoutubeDL(params=cast(Any, self._get_opts(format=fmt).model_dump())) as ydl:
                data = ydl.extract_info(url, download=False)
        except Exception:
            logger.exception(LogTemplates.YTDLP_FAILED_EXTRACT_INFO, url)
            raise

        if not isinstance(data, dict):
            raise LookupError(ErrorMessages.NO_METADATA.format(track_id=url))

        info = self._parse_info(dict(data))
        _info_cache[key] = CacheEntry(info=info, cached_at=now)
        self._prune_cache(now)
        return info

    def _prune_cache(self, now: float) -> None:
        if len(_info_cache) <= CACHE_MAX_SIZE:
            return
        ttl = self._settings.metadata_cache_ttl
        expired = [k for k, entry in _info_cache.items() if now - entry.cached_at >= ttl]
        for k in expired:
            _info_cache.pop(k, None)
        if expired:
            logger.debug(LogTemplates.CACHE_EXPIRED_CLEANED, len(expired))

    def _search_sync(self, query: str, limit: int) -> list[YtDlpTrackInfo]:
        search_query = f"ytsearch{limit}:{query}"
        opts = self._get_opts(extract_flat="in_playlist", noplaylist=False)
        try:
            with YoutubeDL(params=cast(Any, opts.model_dump())) as ydl:
                data = ydl.extract_info(search_query, download=False)
        except Exception:
            logger.exception(LogTemplates.YTDLP_FAILED_SEARCH, query)
            raise

        if not isinstance(data, dict):
            return []

        entries = data.get("entries", [])
        if not isinstance(entries, list):
            return []

        return [self._parse_info(dict(e)) for e in entries if isinstance(e, dict)]

    @staticmethod
    def _extract_stream_url(info: YtDlpTrackInfo) -> str | None:
        if info.url and info.url.startswith(("http://", "https://")):
            return info.url
        return YtDlpMediaLookup._extract_stream_from_formats(info.formats)

    @staticmethod
    def _extract_stream_from_formats(formats: list[AudioFormatInfo]) -> str | None:
        audio_formats = [f for f in formats if f.has_audio]
        if audio_formats:
            return audio_formats[-1].url
        return None

    @staticmethod
    def _to_metadata(info: YtDlpTrackInfo) -> TrackMetadata:
        thumbnails = [
            Thumbnail(url=t.url, width=t.width, height=t.height) for t in info.thumbnails
        ]
        if not thumbnails and info.thumbnail:
            thumbnails = [Thumbnail(url=info.thumbnail)]

        return TrackMetadata(
            title=info.title,
            author=info.author,
            duration_seconds=info.duration or 0,
            thumbnails=tuple(thumbnails),
        )

    async def open_stream(self, track_id: str, options: StreamOptions) -> AudioStream:
        info = await asyncio.to_thread(self._extract_info_sync, track_id, self._format_for(options))

        stream_url = self._extract_stream_url(info)
        if not stream_url:
            raise LookupError(ErrorMessages.NO_STREAM_URL.format(track_id=track_id))

        return AudioStream(
            track_id=track_id,
            stream_url=stream_url,
            http_headers=info.http_headers,
            high_water_mark=options.high_water_mark,
        )

    async def search(self, query: str) -> list[SearchResult]:
        entries = await asyncio.to_thread(self._search_sync, query, self._settings.search_limit)

        results: list[SearchResult] = []
        for entry in entries:
            url = entry.page_url
            if not url:
                continue
            results.append(
                SearchResult(url=url, title=entry.title, duration_seconds=entry.duration)
            )
        return results

    async def get_metadata(self, track_id: str) -> TrackMetadata:
        info = await asyncio.to_thread(
            self._extract_info_sync, track_id, self._settings.ytdlp_format
        )
        return self._to_metadata(info)
