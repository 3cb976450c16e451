"""Reusable Pydantic Annotated types for domain-wide validation.

Every constrained type used across the package is defined here once,
so models can simply annotate their fields::

    from discord_queue_player.domain.shared.types import HttpUrlStr, NonEmptyStr

    class MyModel(BaseModel):
        url: HttpUrlStr
        title: NonEmptyStr
"""

from __future__ import annotations

from typing import Annotated

from pydantic import Field

# ── Numeric constraints ─────────────────────────────────────────────

NonNegativeInt = Annotated[int, Field(ge=0)]
"""Integer >= 0."""

PositiveInt = Annotated[int, Field(gt=0)]
"""Integer > 0."""

NonNegativeFloat = Annotated[float, Field(ge=0.0)]
"""Float >= 0.0."""

VolumePercent = Annotated[int, Field(ge=0, le=100)]
"""Session volume as a percentage: 0 … 100."""


# ── String constraints ──────────────────────────────────────────────

NonEmptyStr = Annotated[str, Field(min_length=1)]
"""String with at least one character."""

HttpUrlStr = Annotated[str, Field(pattern=r"^https?://")]
"""String that starts with http:// or https://."""

CommandPrefixStr = Annotated[str, Field(min_length=1, max_length=5)]
"""Bot command prefix: 1-5 characters."""


# ── Domain-specific numeric constraints ─────────────────────────────

DurationSeconds = Annotated[int, Field(ge=0)]
"""Track duration in seconds."""

HighWaterMark = Annotated[int, Field(gt=0, le=1 << 30)]
"""Stream read-ahead buffer size in bytes: 1 … 1 GiB."""
