"""Utility functions for formatting Discord messages."""

from __future__ import annotations

from functools import cache

from discord_queue_player.domain.playback.value_objects import format_duration


def format_progress(elapsed_ms: float | None, duration_seconds: int) -> str:
    """Render ``elapsed / total`` as ``HH:MM:SS / HH:MM:SS``; elapsed is None when not playing."""
    total = format_duration(duration_seconds)
    if elapsed_ms is None:
        return f"--:--:-- / {total}"
    elapsed = max(int(elapsed_ms // 1000), 0)
    if duration_seconds:
        elapsed = min(elapsed, duration_seconds)
    return f"{format_duration(elapsed)} / {total}"


def is_url(query: str) -> bool:
    return query.strip().lower().startswith(("http://", "https://"))


@cache
def truncate(text: str, max_length: int = 90) -> str:
    if len(text) <= max_length:
        return text
    return text[: max_length - 1] + "…"
