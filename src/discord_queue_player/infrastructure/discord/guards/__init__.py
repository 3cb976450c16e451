"""Reusable interaction guards for slash commands."""

from discord_queue_player.infrastructure.discord.guards.voice_guards import (
    channel_ref_for,
    get_member,
    require_channel_ref,
    send_ephemeral,
)

__all__ = ["channel_ref_for", "get_member", "require_channel_ref", "send_ephemeral"]
