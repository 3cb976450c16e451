"""Slash-command cog for the guild playback session: join, play, transport controls, queue."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord
from discord import app_commands
from discord.ext import commands

from discord_queue_player.domain.shared.exceptions import DomainError
from discord_queue_player.domain.shared.messages import DiscordUIMessages, ErrorMessages
from discord_queue_player.infrastructure.discord.guards.voice_guards import (
    require_channel_ref,
    send_ephemeral,
)
from discord_queue_player.utils.reply import format_progress, is_url, truncate

if TYPE_CHECKING:
    from ....application.services.playback_session import PlaybackSession
    from ....config.container import Container

logger = logging.getLogger(__name__)

QUEUE_PAGE_SIZE = 10


async def _reply_error(interaction: discord.Interaction, error: DomainError) -> None:
    await send_ephemeral(interaction, DiscordUIMessages.ERROR_OCCURRED.format(error=error.message))


class PlaybackCog(commands.Cog):
    def __init__(self, bot: commands.Bot, container: Container) -> None:
        self.bot = bot
        self.container = container

    def _session(self, interaction: discord.Interaction) -> PlaybackSession | None:
        if interaction.guild is None:
            return None
        return self.container.session_registry.get(interaction.guild.id)

    def _connected_session(self, interaction: discord.Interaction) -> PlaybackSession | None:
        session = self._session(interaction)
        if session is None or not session.is_connected:
            return None
        return session

    # ─────────────────────────────────────────────────────────────────
    # Voice
    # ─────────────────────────────────────────────────────────────────

    @app_commands.command(name="join", description="Join your voice channel.")
    async def join(self, interaction: discord.Interaction) -> None:
        channel_ref = await require_channel_ref(interaction, self.bot)
        if channel_ref is None:
            return

        await interaction.response.defer(ephemeral=True)
        session = self.container.session_registry.get_or_create(channel_ref.guild_id)
        try:
            await session.join(channel_ref)
        except DomainError as e:
            await _reply_error(interaction, e)
            return

        channel = interaction.user.voice.channel  # type: ignore[union-attr]
        await interaction.followup.send(
            DiscordUIMessages.ACTION_JOINED.format(channel=channel.name), ephemeral=True
        )

    @app_commands.command(name="leave", description="Stop playback and disconnect from voice.")
    async def leave(self, interaction: discord.Interaction) -> None:
        session = self._connected_session(interaction)
        if session is None:
            await send_ephemeral(interaction, DiscordUIMessages.STATE_NOT_CONNECTED_TO_VOICE)
            return

        try:
            await session.leave()
        except DomainError as e:
            await _reply_error(interaction, e)
            return

        await interaction.response.send_message(DiscordUIMessages.ACTION_DISCONNECTED, ephemeral=True)

    # ─────────────────────────────────────────────────────────────────
    # Play
    # ─────────────────────────────────────────────────────────────────

    @app_commands.command(name="play", description="Play a track by URL or search query.")
    @app_commands.describe(query="Track URL or search query")
    async def play(self, interaction: discord.Interaction, query: str) -> None:
        channel_ref = await require_channel_ref(interaction, self.bot)
        if channel_ref is None:
            return

        await interaction.response.defer()
        session = self.container.session_registry.get_or_create(channel_ref.guild_id)

        try:
            if not session.is_connected:
                await session.join(channel_ref)

            track_id = query.strip() if is_url(query) else await session.search(query)
            if not track_id:
                await interaction.followup.send(
                    DiscordUIMessages.ERROR_TRACK_NOT_FOUND.format(query=query), ephemeral=True
                )
                return

            title = await session.get_title(track_id)
            if session.get_current_track() is not None:
                position = session.add_to_queue(track_id)
                await interaction.followup.send(
                    DiscordUIMessages.ACTION_QUEUED.format(position=position, track=truncate(title))
                )
                return

            await session.play(track_id)
        except DomainError as e:
            logger.debug("Play failed in guild %s: %s", channel_ref.guild_id, e.message)
            await _reply_error(interaction, e)
            return

        await interaction.followup.send(
            DiscordUIMessages.ACTION_NOW_PLAYING.format(track=f"[{truncate(title)}](<{track_id}>)")
        )

    # ─────────────────────────────────────────────────────────────────
    # Playback Controls
    # ─────────────────────────────────────────────────────────────────

    @app_commands.command(name="pause", description="Pause the current track.")
    async def pause(self, interaction: discord.Interaction) -> None:
        session = self._connected_session(interaction)
        try:
            paused = session is not None and session.pause()
        except DomainError as e:
            await _reply_error(interaction, e)
            return

        message = DiscordUIMessages.ACTION_PAUSED if paused else DiscordUIMessages.STATE_NOTHING_PLAYING
        await interaction.response.send_message(message, ephemeral=True)

    @app_commands.command(name="resume", description="Resume paused playback.")
    async def resume(self, interaction: discord.Interaction) -> None:
        session = self._connected_session(interaction)
        try:
            resumed = session is not None and session.resume()
        except DomainError as e:
            await _reply_error(interaction, e)
            return

        message = (
            DiscordUIMessages.ACTION_RESUMED if resumed else DiscordUIMessages.STATE_NOTHING_PLAYING
        )
        await interaction.response.send_message(message, ephemeral=True)

    @app_commands.command(name="stop", description="Stop playback and clear the queue.")
    async def stop(self, interaction: discord.Interaction) -> None:
        session = self._connected_session(interaction)
        if session is None:
            await send_ephemeral(interaction, DiscordUIMessages.STATE_NOT_CONNECTED_TO_VOICE)
            return

        try:
            session.stop()
        except DomainError as e:
            await _reply_error(interaction, e)
            return

        await interaction.response.send_message(DiscordUIMessages.ACTION_STOPPED, ephemeral=True)

    @app_commands.command(name="volume", description="Set the playback volume.")
    @app_commands.describe(level="Volume from 0 to 100")
    async def volume(self, interaction: discord.Interaction, level: int) -> None:
        if interaction.guild is None:
            await send_ephemeral(interaction, DiscordUIMessages.STATE_SERVER_ONLY)
            return

        session = self.container.session_registry.get_or_create(interaction.guild.id)
        try:
            session.set_volume(level)
        except DomainError as e:
            await _reply_error(interaction, e)
            return

        await interaction.response.send_message(
            DiscordUIMessages.ACTION_VOLUME_SET.format(volume=session.volume), ephemeral=True
        )

    @app_commands.command(name="loop", description="Toggle looping of the current track.")
    async def loop(self, interaction: discord.Interaction) -> None:
        if interaction.guild is None:
            await send_ephemeral(interaction, DiscordUIMessages.STATE_SERVER_ONLY)
            return

        session = self.container.session_registry.get_or_create(interaction.guild.id)
        enabled = session.toggle_loop()
        await interaction.response.send_message(
            DiscordUIMessages.ACTION_LOOP_ON if enabled else DiscordUIMessages.ACTION_LOOP_OFF
        )

    # ─────────────────────────────────────────────────────────────────
    # Info
    # ─────────────────────────────────────────────────────────────────

    @app_commands.command(name="queue", description="Show the upcoming tracks.")
    async def queue(self, interaction: discord.Interaction) -> None:
        session = self._session(interaction)
        tracks = session.get_queue() if session is not None else ()
        if not tracks:
            await interaction.response.send_message(
                DiscordUIMessages.STATE_QUEUE_EMPTY, ephemeral=True
            )
            return

        lines = [
            DiscordUIMessages.QUEUE_LINE.format(position=i, track=truncate(track_id))
            for i, track_id in enumerate(tracks[:QUEUE_PAGE_SIZE], start=1)
        ]
        if len(tracks) > QUEUE_PAGE_SIZE:
            lines.append(DiscordUIMessages.QUEUE_MORE.format(count=len(tracks) - QUEUE_PAGE_SIZE))

        embed = discord.Embed(
            title=DiscordUIMessages.QUEUE_TITLE.format(count=len(tracks)),
            description="\n".join(lines),
            color=discord.Color.blurple(),
        )
        await interaction.response.send_message(embed=embed, ephemeral=True)

    @app_commands.command(name="nowplaying", description="Show the current track.")
    async def nowplaying(self, interaction: discord.Interaction) -> None:
        session = self._session(interaction)
        track_id = session.now_playing() if session is not None else None
        if session is None or track_id is None:
            await interaction.response.send_message(
                DiscordUIMessages.STATE_NOTHING_PLAYING, ephemeral=True
            )
            return

        await interaction.response.defer(ephemeral=True)
        try:
            title = await session.get_title(track_id)
            author = await session.get_author(track_id)
            thumbnail = await session.get_thumbnail(track_id)
            duration = await session.get_duration(track_id)
        except DomainError as e:
            await _reply_error(interaction, e)
            return

        embed = discord.Embed(
            title=DiscordUIMessages.NOW_PLAYING_TITLE,
            description=f"[{truncate(title)}]({track_id})",
            color=discord.Color.green(),
        )
        if thumbnail:
            embed.set_thumbnail(url=thumbnail)
        embed.add_field(
            name=DiscordUIMessages.NOW_PLAYING_AUTHOR, value=truncate(author, 64), inline=True
        )

        progress = format_progress(session.get_elapsed_time(), duration)
        if session.status.is_paused:
            progress = f"{progress} ({DiscordUIMessages.NOW_PLAYING_PAUSED})"
        embed.add_field(name=DiscordUIMessages.NOW_PLAYING_PROGRESS, value=progress, inline=True)

        await interaction.followup.send(embed=embed, ephemeral=True)


async def setup(bot: commands.Bot) -> None:
    container = getattr(bot, "container", None)
    if container is None:
        raise RuntimeError(ErrorMessages.CONTAINER_NOT_FOUND)

    await bot.add_cog(PlaybackCog(bot, container))
