"""
Shared Domain Kernel

Contains types, messages and exceptions shared across the package.
"""

from discord_music_queue.domain.shared.exceptions import (
    DomainError,
    EntityNotFoundError,
    InvalidOperationError,
    QueueRestoreError,
    StationInfoUnavailableError,
    UnknownStationError,
    ValidationError,
)

__all__ = [
    "DomainError",
    "ValidationError",
    "EntityNotFoundError",
    "InvalidOperationError",
    "QueueRestoreError",
    "StationInfoUnavailableError",
    "UnknownStationError",
]
