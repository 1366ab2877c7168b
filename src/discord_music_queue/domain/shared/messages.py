"""Centralized message constants for error messages, validation, and user feedback."""

from __future__ import annotations


class ErrorMessages:
    """Error messages for exceptions and validation failures."""

    # Song Errors
    NO_RESULTS_FOR_ID = "No results for ID {id}"
    NO_TRACKS_FOR_STATION = "No tracks available for station {station}"
    RESOLUTION_ERROR = "{name} - {message}"

    # Station feed retry reasons (order matters, first failing check wins)
    STATION_ITEM_UNKNOWN = "Current item is unknown"
    STATION_STREAM_UNAVAILABLE = "Current stream not available"
    STATION_MIX_UNAVAILABLE = "Current mix not available"
    STATION_MIX_DATA_UNAVAILABLE = "Current mix data not available"
    STATION_EPISODE_UNAVAILABLE = "Current episode not available"
    STATION_EPISODE_DATA_UNAVAILABLE = "Current episode data not available"

    # Restore Errors
    RESTORE_CHANNELS_MISSING = "The saved channel IDs for guild {guild_id} no longer resolve"
    RESTORE_NO_SONGS = "The saved queue for guild {guild_id} has no songs"

    # Database / Settings Validation Errors
    INVALID_DATABASE_URL = "Database URL must start with sqlite://"
    INVALID_LOG_LEVEL = "Invalid log level: {level}. Must be one of {valid_levels}"

    # Startup Errors
    DISCORD_TOKEN_REQUIRED = "DISCORD_TOKEN environment variable is required"
    BOT_NOT_INITIALIZED = "Bot not initialized. Call set_bot() first."


class LogTemplates:
    """Log message templates for structured logging.

    Use these with logger.info(), logger.error(), etc. and pass values as parameters
    for proper log formatting and structured logging support.
    """

    # Database Lifecycle
    DATABASE_INITIALIZED = "Database initialized at %s"
    DATABASE_CLOSED = "Database manager closed"

    # Snapshot Store
    SNAPSHOT_SAVED = "Saved queue snapshot %s (%d queues)"
    SNAPSHOT_LOADED = "Loaded queue snapshot %s"
    SNAPSHOT_MISSING = "No queue snapshot stored under %s"
    SNAPSHOT_CLEARED = "Cleared queue snapshot %s"

    # Song Lifecycle
    SONG_VALIDATION_ERROR = "Song validation error: %s %s"
    SONG_RESOLVED = "Resolved track for %s %s"
    SONG_RESOLUTION_FAILED = "Track resolution failed for %s: %s"
    SONG_RELATED_FAILED = "Related lookup failed for %s: %s"
    STATION_RETRY = "Station %s not ready (%s), attempt %d/%d"
    STATION_UPDATE_FAILED = "Station %s refresh failed: %s"
    STATION_INFO_FAILED = "Station %s info failed: %s"

    # Queue Lifecycle
    QUEUE_CREATED = "Created queue for guild %s"
    QUEUE_DELETED = "Deleted queue for guild %s"
    QUEUE_ALREADY_EXISTS = "Queue already in store for guild %s, skipping"
    QUEUE_CONNECTING = "Joining voice channel %s for guild %s"
    QUEUE_CONNECT_FAILED = "Could not join voice channel %s for guild %s"
    QUEUE_DISSOLVED = "Dissolved queue for guild %s"
    QUEUE_CONNECTION_LOST = "Voice connection lost for guild %s"
    QUEUE_ACTION = "Queue action %s for guild %s -> success=%s"

    # Playback
    PLAYBACK_STARTING = "Starting %s in guild %s (offset %d ms)"
    PLAYBACK_SONG_ERROR = "Skipping %s in guild %s: %s"
    STREAM_STARTED = "Stream started for %s in guild %s"
    STREAM_ERROR = "Stream error in guild %s: %s"
    STREAM_ENDED = "Stream ended for %s in guild %s"
    STREAM_STALE_EVENT = "Ignoring %s event from a stale stream in guild %s"
    AUTO_ADVANCE_ADDED = "Auto mode queued %s after %s in guild %s"
    AUTO_ADVANCE_EXHAUSTED = "Auto mode ran out of related songs in guild %s"
    NOW_PLAYING_UPDATE_FAILED = "Now playing refresh failed for guild %s"
    IDLE_TIMER_ARMED = "Voice channel empty in guild %s, leaving in %s s"
    IDLE_TIMER_CANCELLED = "Listener returned in guild %s, idle timer cancelled"
    IDLE_TIMER_FIRED = "Idle timer fired for guild %s"

    # Store Persistence
    STORE_SAVE_FAILED = "Saving queue store failed"
    STORE_RESTORE_STARTED = "Restoring %d saved queue(s)"
    STORE_RESTORE_QUEUE = "Restoring queue for voice channel %s in guild %s"
    STORE_RESTORE_SONG = "Restored %s %s"
    STORE_RESTORE_FAILED = "Could not restore queue for guild %s: %s"
    STORE_RESTORE_MESSAGE_MISSING = "Now playing message %s is gone in guild %s"
    STORE_AUTOSAVE_STARTED = "Queue autosave started (every %s s)"
    STORE_AUTOSAVE_STOPPED = "Queue autosave stopped"
    STORE_AUTOSAVE_ALREADY_RUNNING = "Queue autosave already running"

    # Remote Control
    REMOTE_ACTION = "Remote action %s for guild %s"
    REMOTE_UNKNOWN_ACTION = "Unknown remote action %s"

    # Voice State Waiter
    VOICE_WAIT_REGISTERED = "Waiting up to %s s for user %s to join voice in guild %s"
    VOICE_WAIT_SUPERSEDED = "Voice wait for user %s in guild %s superseded"

    # Station Feed
    FEED_POLL_STARTED = "Station feed polling started (every %s s)"
    FEED_POLL_STOPPED = "Station feed polling stopped"
    FEED_FETCH_FAILED = "Station feed fetch for %s failed: %s"
    FEED_STATION_CHANGED = "Station %s changed to mix %s"
    FEED_LISTENER_FAILED = "Station %s change listener failed"

    # Metadata / Resolver
    METADATA_FETCH = "Fetching metadata for %s from %s"
    YTDLP_CONFIGURED = "yt-dlp configured with format %s"
    YTDLP_FAILED_EXTRACT_INFO = "yt-dlp failed to extract info for %s"
    CACHE_HIT_URL = "Cache hit for %s"
    CACHE_EXPIRED_CLEANED = "Removed %d expired cache entries"

    # Voice Adapter
    GUILD_NOT_FOUND = "Guild %s not found"
    CHANNEL_NOT_VOICE = "Channel %s is not a voice channel"
    VOICE_CONNECTED = "Connected to voice channel %s in guild %s"
    VOICE_DISCONNECTED = "Disconnected from voice in guild %s"
    VOICE_CONNECTION_TIMEOUT = "Timed out connecting to voice channel %s"
    VOICE_CLIENT_ERROR = "Voice client error: %s"
    VOICE_NO_PERMISSION = "No permission to join voice channel %s"
    VOICE_NOT_CONNECTED = "Voice not connected in guild %s"
    PLAYBACK_ERROR = "Playback error in guild %s: %s"
    PLAYBACK_FAILED_START = "Failed to start playback: %s"

    # Presenter
    PRESENTER_CHANNEL_MISSING = "Text channel %s not found"
    PRESENTER_SEND_FAILED = "Could not send message to channel %s: %s"
    PRESENTER_REACTIONS_FAILED = "Could not add reaction controls to message %s: %s"

    # Bot Lifecycle
    BOT_STARTING = "Starting bot (environment=%s, shard=%s)"
    BOT_STARTING_RUN = "Running bot"
    BOT_STOPPED = "Bot stopped"
    BOT_KEYBOARD_INTERRUPT = "Received keyboard interrupt, shutting down"
    BOT_FATAL_ERROR = "Fatal error: %s"
    BOT_SETUP = "Running bot setup hook"
    BOT_CONTAINER_INITIALIZED = "Container initialized"
    BOT_CONTAINER_INIT_FAILED = "Container initialization failed: %s"
    BOT_COG_LOADED = "Loaded cog %s"
    BOT_SETUP_COMPLETE = "Bot setup complete"
    BOT_COG_LOAD_FAILED = "Failed to load cog %s: %s"
    BOT_READY = "Logged in as %s (%s)"
    BOT_CONNECTED_GUILDS = "Connected to %d guild(s)"
    BOT_QUEUES_RESTORED = "Restored %d queue(s)"
    BOT_RESTORE_FAILED = "Restoring queues failed"
    BOT_SLASH_COMMAND_ERROR = "Slash command /%s failed: %s"
    BOT_ERROR_MESSAGE_SEND_FAILED = "Could not send error message to user"
    BOT_SYNCED_GLOBAL = "Synced %d global command(s)"
    BOT_SYNC_GLOBAL_FAILED = "Global command sync failed: %s"
    BOT_SHUTTING_DOWN = "Shutting down"
    BOT_CONTAINER_SHUTDOWN = "Container shut down"
    BOT_CONTAINER_SHUTDOWN_ERROR = "Container shutdown error: %s"
    BOT_SHUTDOWN_COMPLETE = "Shutdown complete"
    BOT_SHUTDOWN_TIMEOUT = "Graceful shutdown timed out after %s s"


class DiscordUIMessages:
    """User-facing Discord messages and responses.

    These strings are shown directly to users in chat and through the
    remote control bridge.
    """

    # Queue action rejections
    ALREADY_PAUSED = "Music is already paused."
    NOT_PAUSED = "Music is not paused."
    LIVE_NO_PAUSE = "You can't pause live radio."
    SKIP_WHILE_PAUSED = "You cannot skip while music is paused. Resume, then skip."
    SKIP_NOT_READY = "The current song hasn't started yet. Try again in a moment."
    NOT_CONNECTED = "I'm not connected to a voice channel, so the music can't be {action}."
    ALREADY_STOPPED = "This queue has already been stopped."
    NOTHING_TO_SHUFFLE = "There aren't enough songs in the queue to shuffle."
    SHUFFLED = "Shuffled the queue."
    AUTO_ON = "Auto mode is now on."
    AUTO_OFF = "Auto mode is now off."

    # Queue notices
    IDLE_WARNING = (
        "No users left in my voice channel. "
        "I will stop playing in {seconds} seconds if nobody rejoins."
    )
    IDLE_LEFT = "Everyone left, so I have as well."
    AUTO_EXHAUSTED = "Auto mode was on, but I ran out of related songs to play."
    SONG_FAILED = "Couldn't play **{title}**: {error}"
    CONNECTION_LOST = "I lost my voice connection, so the queue has been stopped."
    VOICE_JOIN_FAILED = "I couldn't join the voice channel, so the queue has been stopped."

    # Now playing card
    NOW_PLAYING = "Now playing: **{title}**"
    AUTO_MODE_MARKER = "**Auto mode on.**"
    CONTROLS_PERMISSION_HINT = "Please give me permission to add reactions to use player controls!"

    # Song info
    RELATED_NONE = "No related content available for the current song."
    RELATED_HEADER = "Related content from YouTube"
    RELATED_FOOTER = "Play one of these? /related play <number>"
    RELATED_INVALID = "Invidious didn't return valid data."
    RELATED_FRISKY = "Try the other stations on Frisky Radio! `/frisky deep`, `/frisky chill`, `/frisky classics`"
    STATION_INFO_FAILED = "Unfortunately, we failed to retrieve information about the current song."

    # Remote control
    REMOTE_NO_QUEUE = "Server is not playing music"
    REMOTE_UNKNOWN_ACTION = "Action does not exist"

    # Commands
    QUEUE_ADDED = "Added {line} to the queue."
    QUEUE_EMPTY = "Nothing is playing right now."
    VOICE_MUST_JOIN = "You need to join a voice channel first."
    VOICE_WAITING = "Join a voice channel in the next {seconds} seconds and I'll follow you."
    SONG_NOT_FOUND = "Couldn't find a video for: {query}"
    UNKNOWN_STATION = "I don't know the station `{station}`."


class EmojiConstants:
    """Reaction emojis used for now-playing controls."""

    PLAY_PAUSE = "⏯"
    SKIP = "⏭"
    STOP = "⏹"
