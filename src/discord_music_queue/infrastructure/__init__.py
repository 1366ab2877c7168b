"""Infrastructure layer - external systems integration.

This layer contains implementations for:
- Persistence (SQLite snapshot store)
- Discord (bot, cogs, voice adapter, presenter)
- Audio (yt-dlp track resolution)
- Metadata (Invidious) and the Frisky Radio station feed
"""
