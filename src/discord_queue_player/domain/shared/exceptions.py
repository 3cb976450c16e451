"""Base exception classes for domain-level errors."""

from __future__ import annotations

from discord_queue_player.domain.shared.messages import ErrorMessages


class DomainError(Exception):
    """Base exception for all domain-level errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__


class ValidationError(DomainError):
    """Raised when domain validation fails."""

    def __init__(self, message: str, field: str | None = None, code: str | None = None) -> None:
        super().__init__(message, code=code or "VALIDATION_ERROR")
        self.field = field


class InvalidVolumeError(ValidationError):
    """Raised when a volume outside [0, 100] is requested."""

    def __init__(self, volume: object) -> None:
        super().__init__(ErrorMessages.INVALID_VOLUME, field="volume", code="INVALID_VOLUME")
        self.volume = volume


class MissingIdentifierError(ValidationError):
    """Raised when a metadata lookup is attempted without a track identifier."""

    def __init__(self, field: str) -> None:
        super().__init__(
            ErrorMessages.MISSING_IDENTIFIER.format(field=field),
            field=field,
            code="MISSING_IDENTIFIER",
        )


class InvalidOperationError(DomainError):
    """Raised when an operation is invalid in the current state."""

    def __init__(
        self,
        operation: str,
        current_state: str,
        message: str | None = None,
        code: str | None = None,
    ) -> None:
        msg = message or f"Cannot perform '{operation}' in state '{current_state}'"
        super().__init__(msg, code=code or "INVALID_OPERATION")
        self.operation = operation
        self.current_state = current_state


class NotConnectedError(InvalidOperationError):
    """Raised when playback needs a live voice connection and there is none."""

    def __init__(self, operation: str, current_state: str = "disconnected") -> None:
        super().__init__(
            operation,
            current_state,
            message=ErrorMessages.NOT_CONNECTED,
            code="NOT_CONNECTED",
        )


class UpstreamFailureError(DomainError):
    """Raised when a voice, output or media collaborator fails.

    The original exception is chained as ``__cause__``.
    """

    def __init__(self, collaborator: str, error: BaseException | str) -> None:
        super().__init__(
            ErrorMessages.UPSTREAM_FAILURE.format(collaborator=collaborator, error=error),
            code="UPSTREAM_FAILURE",
        )
        self.collaborator = collaborator
