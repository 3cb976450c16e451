"""Shared validators for domain models and session inputs."""

from __future__ import annotations

from discord_queue_player.domain.shared.exceptions import (
    InvalidVolumeError,
    MissingIdentifierError,
)
from discord_queue_player.domain.shared.messages import ErrorMessages

MIN_VOLUME = 0
MAX_VOLUME = 100


def validate_discord_snowflake(value: int) -> int:
    """Validate a Discord snowflake ID.

    Discord snowflake IDs are 64-bit unsigned integers representing unique
    identifiers for users, guilds, channels, messages, etc.

    Args:
        value: The snowflake ID to validate.

    Returns:
        The validated snowflake ID.

    Raises:
        ValueError: If the snowflake ID is invalid.
    """
    if value <= 0:
        raise ValueError(ErrorMessages.INVALID_SNOWFLAKE)
    if value >= 2**64:
        raise ValueError(ErrorMessages.SNOWFLAKE_TOO_LARGE)
    return value


def validate_volume(value: object) -> int:
    """Validate a session volume percentage.

    Only real integers in [0, 100] are accepted; ``bool`` is rejected even
    though it subclasses ``int``.

    Raises:
        InvalidVolumeError: If the value is not an int in range.
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidVolumeError(value)
    if not MIN_VOLUME <= value <= MAX_VOLUME:
        raise InvalidVolumeError(value)
    return value


def require_track_id(track_id: str | None, field: str) -> str:
    """Return *track_id* unchanged, or raise if it is empty or missing."""
    if not track_id or not track_id.strip():
        raise MissingIdentifierError(field)
    return track_id
