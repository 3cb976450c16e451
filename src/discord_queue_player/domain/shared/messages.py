"""Centralized message constants for error messages, log templates, and user feedback."""

from __future__ import annotations


class ErrorMessages:
    """Error messages for exceptions and validation failures."""

    # Discord ID Validation Errors
    INVALID_SNOWFLAKE = "Discord snowflake ID must be positive"
    SNOWFLAKE_TOO_LARGE = "Discord snowflake ID exceeds maximum value (2^64)"

    # Session Errors
    NOT_CONNECTED = "Not connected to a voice channel."
    INVALID_VOLUME = "Volume must be a value between 0 and 100."
    MISSING_IDENTIFIER = "No track identifier provided ({field})"
    NEGATIVE_DURATION = "Duration cannot be negative: {seconds}"

    # Upstream Errors
    UPSTREAM_FAILURE = "{collaborator} failed: {error}"
    NO_STREAM_URL = "No stream URL found for {track_id}"
    NO_METADATA = "No metadata found for {track_id}"
    OUTPUT_NOT_SUBSCRIBED = "Audio output is not subscribed to a voice connection"

    # Settings Errors
    INVALID_LOG_LEVEL = "Invalid log level: {level}. Must be one of {valid_levels}"

    # Authentication/Security Errors
    DISCORD_TOKEN_REQUIRED = "DISCORD__TOKEN environment variable is required"
    BOT_NOT_INITIALIZED = "Bot not initialized. Call set_bot() first."
    CONTAINER_NOT_FOUND = "Container not found on bot instance"


class LogTemplates:
    """Log message templates for structured logging.

    Use these with logger.info(), logger.error(), etc. and pass values as parameters
    for proper log formatting and structured logging support.
    """

    # Voice Connection
    VOICE_CONNECTED = "Connected to voice channel %s in guild %s"
    VOICE_DISCONNECTED = "Disconnected from voice in guild %s"
    VOICE_REUSED = "Reusing live voice connection to channel %s"
    VOICE_REPLACED = "Replacing voice connection in guild %s (old channel %s, status %s)"
    VOICE_CONNECTION_TIMEOUT = "Timeout connecting to channel %s"
    VOICE_NO_PERMISSION = "No permission to connect to channel %s"
    VOICE_CLIENT_ERROR = "Client error connecting: %r"
    VOICE_CHANNEL_NOT_VOICE = "Channel %s is not a voice channel"
    VOICE_GUILD_NOT_FOUND = "Guild %s not found"
    VOICE_JOIN_SKIPPED = "Join skipped: caller is not in a voice channel"
    VOICE_SELF_DEAFEN_FAILED = "Failed to self-deafen in guild %s: %r"

    # Playback
    PLAYBACK_STARTED = "Started playing '%s' in guild %s"
    PLAYBACK_STOPPED = "Stopped playback in guild %s"
    PLAYBACK_PAUSED = "Paused playback in guild %s"
    PLAYBACK_RESUMED = "Resumed playback in guild %s"
    PLAYBACK_ERROR = "Playback error in guild %s: %s"
    PLAYBACK_LOOPING = "Looping '%s' in guild %s"
    PLAYBACK_ADVANCING = "Advancing to '%s' in guild %s (%s left in queue)"
    PLAYBACK_QUEUE_EXHAUSTED = "Queue exhausted in guild %s"
    PLAYBACK_AUTO_ADVANCE_FAILED = "Failed to auto-advance to '%s' in guild %s"
    PLAYBACK_ADVANCE_NOT_CONNECTED = "Not connected; '%s' stays first in queue in guild %s"
    PLAYBACK_REPLAYING = "Restarting '%s' on the new voice connection in guild %s"
    PLAYBACK_STALE_IDLE = "Ignoring idle event for stale resource '%s' in guild %s"
    PLAYBACK_VOLUME_SET = "Volume set to %s in guild %s"
    PLAYBACK_LOOP_TOGGLED = "Loop %s in guild %s"
    PLAYBACK_STATUS_CHANGED = "Player status %s -> %s in guild %s"
    PLAYBACK_TRACK_QUEUED = "Queued '%s' in guild %s at position %s"

    # FFmpeg / Output
    FFMPEG_DISCORD_CLIENT_ERROR = "Discord client error during playback: %s"

    # Session Lifecycle
    SESSION_CREATED = "Created playback session for guild %s"
    SESSION_CLOSED = "Closed playback session for guild %s"
    SESSION_EVENT_ERROR = "Error handling %s in guild %s"
    SESSIONS_CLOSED = "Closed %s playback session(s)"

    # yt-dlp
    YTDLP_FAILED_EXTRACT_INFO = "Failed to extract info for %s"
    YTDLP_FAILED_SEARCH = "Search failed for query: %s"
    YTDLP_SEARCH_NO_RESULTS = "No search results for query: %s"
    CACHE_HIT_URL = "Cache hit for %s"
    CACHE_EXPIRED_CLEANED = "Cleaned %s expired cache entries"

    # Bot Lifecycle
    BOT_STARTING = "Starting Discord queue player in {environment} mode"
    BOT_SETUP = "Setting up bot..."
    BOT_SETUP_COMPLETE = "Bot setup complete"
    BOT_STARTING_RUN = "Starting bot..."
    BOT_STOPPED = "Bot stopped successfully"
    BOT_KEYBOARD_INTERRUPT = "Received keyboard interrupt, shutting down..."
    BOT_FATAL_ERROR = "Fatal error: %s"
    BOT_SHUTTING_DOWN = "Shutting down bot..."
    BOT_CONTAINER_SHUTDOWN = "Container shutdown complete"
    BOT_CONTAINER_SHUTDOWN_ERROR = "Error during container shutdown: %s"
    BOT_SHUTDOWN_COMPLETE = "Bot shutdown complete"
    BOT_SHUTDOWN_TIMEOUT = "Graceful shutdown timed out after %s seconds"
    BOT_READY = "Bot ready as %s (%s)"
    BOT_CONNECTED_GUILDS = "Connected to %s guilds"
    BOT_COG_LOADED = "Loaded cog: %s"
    BOT_COG_LOAD_FAILED = "Failed to load cog %s: %s"
    BOT_SYNCED_GUILD = "Synced %s commands to guild %s"
    BOT_SYNC_GUILD_FAILED = "Failed to sync to guild %s: %s"
    BOT_SYNCED_GLOBAL = "Synced %s commands globally"
    BOT_SYNC_GLOBAL_FAILED = "Failed to sync commands globally: %s"
    BOT_SLASH_COMMAND_ERROR = "Slash command error in '%s': %s"
    BOT_ERROR_MESSAGE_SEND_FAILED = "Failed to send error message to user"

    # Logging setup
    LOGGING_CONFIG_FALLBACK = "Could not load %s, falling back to basic config"


class DiscordUIMessages:
    """User-facing reply text for slash commands."""

    ACTION_JOINED = "🔊 Joined **{channel}**."
    ACTION_DISCONNECTED = "👋 Disconnected from voice channel."
    ACTION_NOW_PLAYING = "🎶 Now playing: {track}"
    ACTION_QUEUED = "➕ Added to queue (#{position}): {track}"
    ACTION_STOPPED = "⏹️ Stopped playback and cleared the queue."
    ACTION_PAUSED = "⏸️ Paused playback."
    ACTION_RESUMED = "▶️ Resumed playback."
    ACTION_VOLUME_SET = "🔉 Volume set to **{volume}**."
    ACTION_LOOP_ON = "🔂 Loop enabled."
    ACTION_LOOP_OFF = "➡️ Loop disabled."

    STATE_NOTHING_PLAYING = "Nothing is playing."
    STATE_QUEUE_EMPTY = "Queue is empty."
    STATE_NOT_CONNECTED_TO_VOICE = "Not connected to a voice channel."
    STATE_NEED_TO_BE_IN_VOICE = "You need to be in a voice channel first."
    STATE_SERVER_ONLY = "This command can only be used in a server."
    STATE_VERIFY_VOICE_FAILED = "Could not verify your voice state."

    ERROR_TRACK_NOT_FOUND = "Couldn't find a track for: {query}"
    ERROR_OCCURRED = "❌ {error}"
    ERROR_UNEXPECTED = "❌ An error occurred: {error}"

    NOW_PLAYING_TITLE = "🎶 Now Playing"
    NOW_PLAYING_AUTHOR = "Author"
    NOW_PLAYING_PROGRESS = "Progress"
    NOW_PLAYING_PAUSED = "paused"
    QUEUE_TITLE = "📜 Queue ({count})"
    QUEUE_LINE = "`{position}.` {track}"
    QUEUE_MORE = "…and {count} more"
