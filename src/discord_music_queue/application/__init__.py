"""
Application Layer

Orchestrates domain values and infrastructure ports into the music-queue engine.

Structure:
- interfaces/: Port interfaces for infrastructure adapters
- songs/: The Song contract and its YouTube and Frisky Radio variants
- services/: GuildQueue, QueueStore, RemoteControlService, VoiceStateWaiter
"""
