"""Registry owning one PlaybackSession per guild."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from ...domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from .playback_session import PlaybackSession

logger = logging.getLogger(__name__)

SessionFactory = Callable[[int], "PlaybackSession"]


class SessionRegistry:
    """Creates sessions lazily, keyed by guild ID, and tears them down on request."""

    def __init__(self, session_factory: SessionFactory) -> None:
        self._factory = session_factory
        self._sessions: dict[int, PlaybackSession] = {}

    def __contains__(self, guild_id: object) -> bool:
        return guild_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

    def get(self, guild_id: int) -> PlaybackSession | None:
        return self._sessions.get(guild_id)

    def get_or_create(self, guild_id: int) -> PlaybackSession:
        """Return the guild's session, creating and starting it on first use."""
        session = self._sessions.get(guild_id)
        if session is None:
            session = self._factory(guild_id)
            session.start()
            self._sessions[guild_id] = session
            logger.info(LogTemplates.SESSION_CREATED, guild_id)
        return session

    async def remove(self, guild_id: int) -> bool:
        """Close and forget the guild's session. Returns False if there was none."""
        session = self._sessions.pop(guild_id, None)
        if session is None:
            return False
        await session.close()
        logger.info(LogTemplates.SESSION_CLOSED, guild_id)
        return True

    async def close_all(self) -> int:
        guild_ids = list(self._sessions)
        for guild_id in guild_ids:
            try:
                await self.remove(guild_id)
            except Exception:
                logger.exception(LogTemplates.SESSION_EVENT_ERROR, "close", guild_id)
        logger.info(LogTemplates.SESSIONS_CLOSED, len(guild_ids))
        return len(guild_ids)
