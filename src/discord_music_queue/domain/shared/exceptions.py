"""Base exception classes for domain-level errors."""

from __future__ import annotations


class DomainError(Exception):
    """Base exception for all domain-level errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__


class ValidationError(DomainError):
    """Raised when domain validation fails."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message, code="VALIDATION_ERROR")
        self.field = field


class EntityNotFoundError(DomainError):
    """Raised when a requested entity does not exist."""

    def __init__(self, entity_type: str, identifier: str | int, message: str | None = None) -> None:
        msg = message or f"{entity_type} with id '{identifier}' not found"
        super().__init__(msg, code="ENTITY_NOT_FOUND")
        self.entity_type = entity_type
        self.identifier = identifier


class InvalidOperationError(DomainError):
    """Raised when an operation is invalid in the current state."""

    def __init__(self, operation: str, current_state: str, message: str | None = None) -> None:
        msg = message or f"Cannot perform '{operation}' in state '{current_state}'"
        super().__init__(msg, code="INVALID_OPERATION")
        self.operation = operation
        self.current_state = current_state


class UnknownStationError(ValidationError):
    """Raised when a live song is created for a station we do not carry."""

    def __init__(self, station: str) -> None:
        super().__init__(f"Unsupported station: {station}", field="station")
        self.station = station


class StationInfoUnavailableError(DomainError):
    """Raised when the station feed did not produce usable now-playing data in time."""

    def __init__(self, station: str, reason: str) -> None:
        super().__init__(reason, code="STATION_INFO_UNAVAILABLE")
        self.station = station
        self.reason = reason


class QueueRestoreError(DomainError):
    """Raised when a persisted queue cannot be rebuilt (e.g. its channels are gone)."""

    def __init__(self, guild_id: int, message: str) -> None:
        super().__init__(message, code="QUEUE_RESTORE_FAILED")
        self.guild_id = guild_id
