"""
Session Manager - Creates and manages play sessions.

LIFECYCLE:
1. A client starts a session: a fresh World is built for the campaign
2. During play, intents are fed through the session's GameLoop
3. A full retry replaces the World inside the same session
4. Quitting or ending the session drops all of its state

PERSISTENCE RULES:
- Sessions live in memory only
- Nothing is saved or restored
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Sequence
import logging
import time
import uuid

from ..engine_core.world import World
from ..levels import CAMPAIGN, LevelDefinition

logger = logging.getLogger(__name__)


class SessionState(Enum):
    """State of a play session."""
    ACTIVE = "active"  # Run in progress
    COMPLETED = "completed"  # Escaped through the last exit
    ABANDONED = "abandoned"  # User quit


@dataclass
class Session:
    """
    An ephemeral play session.

    Contains:
    - The levels the run is built from
    - The current World (replaced on a full retry)
    """
    session_id: str
    levels: tuple[LevelDefinition, ...]
    created_at: float

    state: SessionState = SessionState.ACTIVE
    world: World | None = None
    turn_number: int = 0

    def is_active(self) -> bool:
        """Check if session can still take intents."""
        return self.state in {SessionState.ACTIVE, SessionState.COMPLETED}


class SessionManager:
    """
    Manages play sessions.

    Responsibilities:
    - Create sessions for a campaign
    - Track active sessions
    - Clean up finished sessions
    """

    def __init__(self):
        self._sessions: dict[str, Session] = {}

    def create_session(
        self,
        levels: Sequence[LevelDefinition] = CAMPAIGN,
    ) -> Session:
        """
        Create a new session.

        The World is built lazily by the session's GameLoop.

        Raises:
            ValueError: If levels is empty or repeats a level id
        """
        if not levels:
            raise ValueError("A session needs at least one level")
        ids = [level.level_id for level in levels]
        if len(set(ids)) != len(ids):
            raise ValueError("Each level may appear only once")

        session = Session(
            session_id=str(uuid.uuid4()),
            levels=tuple(levels),
            created_at=time.time(),
        )
        self._sessions[session.session_id] = session
        logger.info("Created session %s with %d level(s)", session.session_id, len(levels))
        return session

    def get_session(self, session_id: str) -> Session | None:
        """Get a session by ID."""
        return self._sessions.get(session_id)

    def end_session(self, session_id: str, reason: str = "completed") -> bool:
        """
        End a session and drop its state.

        Returns True if the session existed.
        """
        session = self._sessions.pop(session_id, None)
        if not session:
            return False

        if reason != "completed":
            session.state = SessionState.ABANDONED
        session.world = None
        logger.info("Ended session %s (%s)", session_id, reason)
        return True

    def list_active_sessions(self) -> list[str]:
        """List IDs of active sessions."""
        return [
            sid for sid, session in self._sessions.items()
            if session.is_active()
        ]

    def cleanup_stale_sessions(self, max_age_seconds: int = 3600) -> int:
        """
        End sessions older than max_age that are no longer active.

        Returns the number removed.
        """
        current_time = time.time()
        to_remove = [
            session_id for session_id, session in self._sessions.items()
            if current_time - session.created_at > max_age_seconds and not session.is_active()
        ]
        for session_id in to_remove:
            self.end_session(session_id, reason="stale")
        return len(to_remove)
