"""
Shared Domain Kernel

Contains constrained types, validators, messages and exceptions shared
across the package.
"""

from discord_queue_player.domain.shared.exceptions import (
    DomainError,
    InvalidOperationError,
    InvalidVolumeError,
    MissingIdentifierError,
    NotConnectedError,
    UpstreamFailureError,
    ValidationError,
)

__all__ = [
    "DomainError",
    "ValidationError",
    "InvalidVolumeError",
    "MissingIdentifierError",
    "InvalidOperationError",
    "NotConnectedError",
    "UpstreamFailureError",
]
