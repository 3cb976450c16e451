"""Reusable voice-channel guard functions for Discord slash commands.

These are free functions that accept explicit dependencies rather than relying
on a specific cog instance, making them usable from any cog.
"""

from __future__ import annotations

import discord

from discord_queue_player.domain.playback.value_objects import ChannelRef
from discord_queue_player.domain.shared.messages import DiscordUIMessages


async def send_ephemeral(interaction: discord.Interaction, message: str) -> None:
    """Send an ephemeral message, handling both fresh and already-responded interactions."""
    if interaction.response.is_done():
        await interaction.followup.send(message, ephemeral=True)
    else:
        await interaction.response.send_message(message, ephemeral=True)


async def get_member(interaction: discord.Interaction) -> discord.Member | None:
    """Validate that the interaction comes from a guild member. Returns None with error on failure."""
    if not interaction.guild:
        await send_ephemeral(interaction, DiscordUIMessages.STATE_SERVER_ONLY)
        return None

    user = interaction.user
    if not isinstance(user, discord.Member):
        await send_ephemeral(interaction, DiscordUIMessages.STATE_VERIFY_VOICE_FAILED)
        return None

    return user


def channel_ref_for(member: discord.Member, client: discord.Client) -> ChannelRef | None:
    """The member's current voice channel, or None when they are not in voice."""
    if not member.voice or not member.voice.channel:
        return None
    return ChannelRef(
        channel_id=member.voice.channel.id,
        guild_id=member.guild.id,
        adapter=client,
    )


async def require_channel_ref(
    interaction: discord.Interaction, client: discord.Client
) -> ChannelRef | None:
    """Resolve the caller's voice channel, replying ephemerally when there is none."""
    member = await get_member(interaction)
    if member is None:
        return None

    channel_ref = channel_ref_for(member, client)
    if channel_ref is None:
        await send_ephemeral(interaction, DiscordUIMessages.STATE_NEED_TO_BE_IN_VOICE)
    return channel_ref
