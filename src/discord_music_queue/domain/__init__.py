# ruff: noqa: N999
"""
Domain Layer

Contains pure music-queue logic:
- shared/: Cross-cutting types, messages, events and exceptions
- music/: Queue states, song snapshots, stations and progress rendering
"""

from discord_music_queue.domain.shared.exceptions import DomainError

__all__ = [
    "DomainError",
]
