"""
Session Module - Manages ephemeral play sessions.

A session represents one player's run:
- Created when a client starts a game
- Holds the current World
- Feeds intents through its GameLoop
- Destroyed when the client ends it

Sessions are EPHEMERAL: nothing is persisted.
"""

from .manager import SessionManager, Session, SessionState
from .game_loop import GameLoop, LoopState, TurnResult

__all__ = [
    "SessionManager",
    "Session",
    "SessionState",
    "GameLoop",
    "LoopState",
    "TurnResult",
]
