"""Video metadata lookups - Invidious API client."""

from discord_music_queue.infrastructure.metadata.invidious_client import InvidiousMetadataClient

__all__ = ["InvidiousMetadataClient"]
