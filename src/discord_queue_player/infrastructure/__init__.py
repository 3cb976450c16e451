"""Infrastructure layer - Discord and yt-dlp adapters."""
