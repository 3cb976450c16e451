"""
Unit Tests for PlaybackCog

Tests for all slash commands:
- /join, /leave
- /play (URL, search, queueing, not found, upstream failure)
- /pause, /resume, /stop, /volume, /loop
- /queue, /nowplaying
- Voice guards and cog setup

Sessions are real PlaybackSession objects wired to in-memory fakes.
"""

from unittest.mock import AsyncMock, MagicMock

import discord
import pytest
import pytest_asyncio
from discord.ext import commands

from discord_queue_player.application.services.session_registry import SessionRegistry
from discord_queue_player.domain.playback.entities import SearchResult
from discord_queue_player.domain.playback.value_objects import ChannelRef
from discord_queue_player.infrastructure.discord.cogs.playback_cog import PlaybackCog, setup
from discord_queue_player.infrastructure.discord.guards.voice_guards import (
    channel_ref_for,
    get_member,
    send_ephemeral,
)

TRACK_URL = "https://youtu.be/abc"
BARE_URL = "https://youtu.be/bare"

# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def mock_bot():
    """Create a mock Discord bot."""
    return MagicMock()


@pytest_asyncio.fixture
async def registry(make_session):
    registry = SessionRegistry(make_session)
    yield registry
    await registry.close_all()


@pytest.fixture
def mock_container(registry):
    """Create a container exposing a real session registry."""
    container = MagicMock()
    container.session_registry = registry
    return container


@pytest.fixture
def cog(mock_bot, mock_container):
    return PlaybackCog(mock_bot, mock_container)


@pytest.fixture
def mock_member():
    """A guild member sitting in voice channel 111."""
    member = MagicMock(spec=discord.Member)
    member.guild = MagicMock(id=1)
    member.voice = MagicMock()
    member.voice.channel = MagicMock(id=111)
    member.voice.channel.name = "General"
    return member


@pytest.fixture
def interaction(mock_member):
    """Create a mock Discord interaction."""
    interaction = MagicMock()
    interaction.guild = MagicMock(id=1)
    interaction.user = mock_member
    interaction.response.is_done = MagicMock(return_value=False)
    interaction.response.send_message = AsyncMock()
    interaction.response.defer = AsyncMock()
    interaction.followup.send = AsyncMock()
    return interaction


def _sent_text(mock) -> str:
    args, kwargs = mock.call_args
    return args[0] if args else kwargs.get("content", "")


# =============================================================================
# Voice Guard Tests
# =============================================================================


class TestVoiceGuards:
    """Tests for the reusable voice guards."""

    @pytest.mark.asyncio
    async def test_send_ephemeral_fresh(self, interaction):
        """Should answer through the response when nothing was sent yet."""
        await send_ephemeral(interaction, "hi")

        interaction.response.send_message.assert_awaited_once_with("hi", ephemeral=True)

    @pytest.mark.asyncio
    async def test_send_ephemeral_after_defer(self, interaction):
        """Should use the followup once the response is done."""
        interaction.response.is_done.return_value = True

        await send_ephemeral(interaction, "hi")

        interaction.followup.send.assert_awaited_once_with("hi", ephemeral=True)

    @pytest.mark.asyncio
    async def test_get_member_outside_guild(self, interaction):
        """Should reject direct-message interactions."""
        interaction.guild = None

        assert await get_member(interaction) is None
        assert "only be used in a server" in _sent_text(interaction.response.send_message)

    @pytest.mark.asyncio
    async def test_get_member_not_member(self, interaction):
        """Should reject users that are not guild members."""
        interaction.user = MagicMock(spec=discord.User)

        assert await get_member(interaction) is None
        assert "Could not verify" in _sent_text(interaction.response.send_message)

    def test_channel_ref_for(self, mock_member, mock_bot):
        """Should describe the member's voice channel with the bot as adapter."""
        ref = channel_ref_for(mock_member, mock_bot)

        assert ref == ChannelRef(channel_id=111, guild_id=1)
        assert ref.adapter is mock_bot

    def test_channel_ref_for_not_in_voice(self, mock_member, mock_bot):
        """Should return None when the member is not in voice."""
        mock_member.voice = None

        assert channel_ref_for(mock_member, mock_bot) is None


# =============================================================================
# Join / Leave Tests
# =============================================================================


class TestJoinLeave:
    """Tests for /join and /leave."""

    @pytest.mark.asyncio
    async def test_join(self, cog, interaction, registry, transport):
        """Should connect the guild's session to the caller's channel."""
        await cog.join.callback(cog, interaction)

        interaction.response.defer.assert_awaited_once_with(ephemeral=True)
        assert registry.get(1).is_connected
        assert transport.calls[0][:2] == (111, 1)
        interaction.followup.send.assert_awaited_once_with(
            "🔊 Joined **General**.", ephemeral=True
        )

    @pytest.mark.asyncio
    async def test_join_not_in_voice(self, cog, interaction, mock_member, registry):
        """Should refuse when the caller is not in a voice channel."""
        mock_member.voice = None

        await cog.join.callback(cog, interaction)

        assert "need to be in a voice channel" in _sent_text(interaction.response.send_message)
        assert 1 not in registry

    @pytest.mark.asyncio
    async def test_join_transport_failure(self, cog, interaction, transport):
        """Should report connection failures to the caller."""
        transport.error = TimeoutError("voice handshake")
        interaction.response.is_done.return_value = True

        await cog.join.callback(cog, interaction)

        text = _sent_text(interaction.followup.send)
        assert text.startswith("❌ voice transport failed")

    @pytest.mark.asyncio
    async def test_leave(self, cog, interaction, registry, transport):
        """Should disconnect a connected session."""
        await cog.join.callback(cog, interaction)

        await cog.leave.callback(cog, interaction)

        assert not registry.get(1).is_connected
        assert transport.connections[0].destroy_calls == 1
        interaction.response.send_message.assert_awaited_with(
            "👋 Disconnected from voice channel.", ephemeral=True
        )

    @pytest.mark.asyncio
    async def test_leave_not_connected(self, cog, interaction):
        """Should tell the caller there is nothing to leave."""
        await cog.leave.callback(cog, interaction)

        assert _sent_text(interaction.response.send_message) == "Not connected to a voice channel."


# =============================================================================
# Play Tests
# =============================================================================


class TestPlay:
    """Tests for /play."""

    @pytest.mark.asyncio
    async def test_play_url(self, cog, interaction, registry):
        """Should join, start the track and announce it."""
        await cog.play.callback(cog, interaction, TRACK_URL)

        session = registry.get(1)
        assert session.is_connected
        assert session.get_current_track() == TRACK_URL
        interaction.followup.send.assert_awaited_once_with(
            f"🎶 Now playing: [Test Song](<{TRACK_URL}>)"
        )

    @pytest.mark.asyncio
    async def test_play_queues_when_busy(self, cog, interaction, registry):
        """Should queue behind the current track with its position."""
        await cog.play.callback(cog, interaction, TRACK_URL)

        await cog.play.callback(cog, interaction, BARE_URL)

        session = registry.get(1)
        assert session.get_current_track() == TRACK_URL
        assert session.get_queue() == (BARE_URL,)
        assert _sent_text(interaction.followup.send) == "➕ Added to queue (#1): No Art"

    @pytest.mark.asyncio
    async def test_play_search(self, cog, interaction, media, registry):
        """Should play the best search match for a free-text query."""
        media.search_results["test song"] = [SearchResult(url=TRACK_URL, title="Test Song")]

        await cog.play.callback(cog, interaction, "test song")

        assert registry.get(1).get_current_track() == TRACK_URL

    @pytest.mark.asyncio
    async def test_play_not_found(self, cog, interaction, registry):
        """Should report queries without results."""
        await cog.play.callback(cog, interaction, "nothing matches this")

        interaction.followup.send.assert_awaited_once_with(
            "Couldn't find a track for: nothing matches this", ephemeral=True
        )
        assert registry.get(1).get_current_track() is None

    @pytest.mark.asyncio
    async def test_play_upstream_failure(self, cog, interaction, media, registry):
        """Should report lookup failures and leave the session idle."""
        media.error = LookupError("gone")
        interaction.response.is_done.return_value = True

        await cog.play.callback(cog, interaction, TRACK_URL)

        assert _sent_text(interaction.followup.send) == "❌ media lookup failed: gone"
        assert registry.get(1).get_current_track() is None

    @pytest.mark.asyncio
    async def test_play_not_in_voice(self, cog, interaction, mock_member):
        """Should refuse when the caller is not in a voice channel."""
        mock_member.voice = None

        await cog.play.callback(cog, interaction, TRACK_URL)

        interaction.response.defer.assert_not_awaited()


# =============================================================================
# Playback Control Tests
# =============================================================================


class TestControls:
    """Tests for /pause, /resume, /stop, /volume and /loop."""

    @pytest.mark.asyncio
    async def test_pause_and_resume(self, cog, interaction):
        """Should pause and resume the playing track."""
        await cog.play.callback(cog, interaction, TRACK_URL)

        await cog.pause.callback(cog, interaction)
        assert _sent_text(interaction.response.send_message) == "⏸️ Paused playback."

        await cog.resume.callback(cog, interaction)
        assert _sent_text(interaction.response.send_message) == "▶️ Resumed playback."

    @pytest.mark.asyncio
    async def test_pause_without_session(self, cog, interaction):
        """Should report that nothing is playing."""
        await cog.pause.callback(cog, interaction)

        assert _sent_text(interaction.response.send_message) == "Nothing is playing."

    @pytest.mark.asyncio
    async def test_resume_when_not_paused(self, cog, interaction):
        """Should report that nothing is playing when there is nothing to resume."""
        await cog.play.callback(cog, interaction, TRACK_URL)

        await cog.resume.callback(cog, interaction)

        assert _sent_text(interaction.response.send_message) == "Nothing is playing."

    @pytest.mark.asyncio
    async def test_stop(self, cog, interaction, registry):
        """Should stop playback and clear the queue."""
        await cog.play.callback(cog, interaction, TRACK_URL)
        await cog.play.callback(cog, interaction, BARE_URL)

        await cog.stop.callback(cog, interaction)

        session = registry.get(1)
        assert session.get_current_track() is None
        assert session.get_queue() == ()
        assert _sent_text(interaction.response.send_message).startswith("⏹️ Stopped")

    @pytest.mark.asyncio
    async def test_stop_not_connected(self, cog, interaction):
        """Should tell the caller the bot is not in voice."""
        await cog.stop.callback(cog, interaction)

        assert _sent_text(interaction.response.send_message) == "Not connected to a voice channel."

    @pytest.mark.asyncio
    async def test_volume(self, cog, interaction, registry):
        """Should set and echo the session volume."""
        await cog.volume.callback(cog, interaction, 30)

        assert registry.get(1).volume == 30
        interaction.response.send_message.assert_awaited_once_with(
            "🔉 Volume set to **30**.", ephemeral=True
        )

    @pytest.mark.asyncio
    async def test_volume_out_of_range(self, cog, interaction, registry):
        """Should reject volumes outside 0-100 and keep the old one."""
        await cog.volume.callback(cog, interaction, 150)

        assert registry.get(1).volume == 50
        assert _sent_text(interaction.response.send_message) == (
            "❌ Volume must be a value between 0 and 100."
        )

    @pytest.mark.asyncio
    async def test_volume_outside_guild(self, cog, interaction):
        """Should only work inside a server."""
        interaction.guild = None

        await cog.volume.callback(cog, interaction, 30)

        assert "only be used in a server" in _sent_text(interaction.response.send_message)

    @pytest.mark.asyncio
    async def test_loop_toggles(self, cog, interaction, registry):
        """Should flip looping on and off."""
        await cog.loop.callback(cog, interaction)
        interaction.response.send_message.assert_awaited_with("🔂 Loop enabled.")
        assert registry.get(1).loop is True

        await cog.loop.callback(cog, interaction)
        interaction.response.send_message.assert_awaited_with("➡️ Loop disabled.")
        assert registry.get(1).loop is False


# =============================================================================
# Info Tests
# =============================================================================


class TestInfo:
    """Tests for /queue and /nowplaying."""

    @pytest.mark.asyncio
    async def test_queue_empty(self, cog, interaction):
        """Should report an empty queue."""
        await cog.queue.callback(cog, interaction)

        assert _sent_text(interaction.response.send_message) == "Queue is empty."

    @pytest.mark.asyncio
    async def test_queue_lists_first_page(self, cog, interaction, registry):
        """Should list ten tracks and count the rest."""
        session = registry.get_or_create(1)
        for i in range(12):
            session.add_to_queue(f"https://youtu.be/{i}")

        await cog.queue.callback(cog, interaction)

        embed = interaction.response.send_message.call_args.kwargs["embed"]
        lines = embed.description.splitlines()
        assert embed.title == "📜 Queue (12)"
        assert len(lines) == 11
        assert lines[0] == "`1.` https://youtu.be/0"
        assert lines[-1] == "…and 2 more"

    @pytest.mark.asyncio
    async def test_nowplaying_nothing(self, cog, interaction):
        """Should report that nothing is playing."""
        await cog.nowplaying.callback(cog, interaction)

        assert _sent_text(interaction.response.send_message) == "Nothing is playing."

    @pytest.mark.asyncio
    async def test_nowplaying_embed(self, cog, interaction):
        """Should show title, author, thumbnail and progress."""
        await cog.play.callback(cog, interaction, TRACK_URL)

        await cog.nowplaying.callback(cog, interaction)

        embed = interaction.followup.send.call_args.kwargs["embed"]
        assert embed.description == f"[Test Song]({TRACK_URL})"
        assert embed.thumbnail.url == "https://i.ytimg.com/vi/abc/hq.jpg"
        assert embed.fields[0].value == "Test Artist"
        assert embed.fields[1].value.endswith(" / 00:03:33")
        assert not embed.fields[1].value.startswith("--")

    @pytest.mark.asyncio
    async def test_nowplaying_paused(self, cog, interaction):
        """Should flag paused playback and hide the elapsed time."""
        await cog.play.callback(cog, interaction, TRACK_URL)
        await cog.pause.callback(cog, interaction)

        await cog.nowplaying.callback(cog, interaction)

        embed = interaction.followup.send.call_args.kwargs["embed"]
        assert embed.fields[1].value == "--:--:-- / 00:03:33 (paused)"

    @pytest.mark.asyncio
    async def test_nowplaying_without_thumbnail(self, cog, interaction):
        """Should omit the thumbnail when the track has none."""
        await cog.play.callback(cog, interaction, BARE_URL)

        await cog.nowplaying.callback(cog, interaction)

        embed = interaction.followup.send.call_args.kwargs["embed"]
        assert embed.thumbnail.url is None


# =============================================================================
# Setup Tests
# =============================================================================


class TestSetup:
    """Tests for the extension entry point."""

    @pytest.mark.asyncio
    async def test_setup_adds_cog(self, mock_container):
        """Should register the cog with the bot's container."""
        bot = MagicMock()
        bot.container = mock_container
        bot.add_cog = AsyncMock()

        await setup(bot)

        added = bot.add_cog.call_args.args[0]
        assert isinstance(added, PlaybackCog)
        assert added.container is mock_container

    @pytest.mark.asyncio
    async def test_setup_without_container(self):
        """Should fail loudly when the bot has no container."""
        bot = MagicMock(spec=commands.Bot)

        with pytest.raises(RuntimeError, match="Container not found"):
            await setup(bot)
