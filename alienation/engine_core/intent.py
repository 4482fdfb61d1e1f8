"""
Intent System - Player intents and the results of applying them.

Intents represent:
1. Movement (walk or push, one cell in a direction)
2. Interaction with the current cell or an adjacent door
3. Retries (current room, or the whole run)
4. Quitting

Each intent is resolved completely before the next one is accepted.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum

from .cues import CueEvent


class IntentType(Enum):
    """Types of intents the engine understands."""
    MOVE_UP = "move_up"
    MOVE_DOWN = "move_down"
    MOVE_LEFT = "move_left"
    MOVE_RIGHT = "move_right"
    INTERACT = "interact"

    # Handled by the room transition manager
    RETRY_ROOM = "retry_room"

    # Handled by the game loop, which owns the World
    RETRY_RUN = "retry_run"
    QUIT = "quit"


MOVE_DELTAS: dict[IntentType, tuple[int, int]] = {
    IntentType.MOVE_UP: (0, -1),
    IntentType.MOVE_DOWN: (0, 1),
    IntentType.MOVE_LEFT: (-1, 0),
    IntentType.MOVE_RIGHT: (1, 0),
}

KEY_BINDINGS: dict[str, IntentType] = {
    "w": IntentType.MOVE_UP,
    "a": IntentType.MOVE_LEFT,
    "s": IntentType.MOVE_DOWN,
    "d": IntentType.MOVE_RIGHT,
    "e": IntentType.INTERACT,
    "r": IntentType.RETRY_ROOM,
    "t": IntentType.RETRY_RUN,
    "q": IntentType.QUIT,
}


@dataclass(frozen=True)
class Intent:
    """A single discrete input."""
    intent_type: IntentType

    @property
    def delta(self) -> tuple[int, int]:
        """(dx, dy) for move intents, (0, 0) otherwise."""
        return MOVE_DELTAS.get(self.intent_type, (0, 0))

    @classmethod
    def move(cls, dx: int, dy: int) -> Intent:
        """Factory for a move in a unit direction."""
        for intent_type, delta in MOVE_DELTAS.items():
            if delta == (dx, dy):
                return cls(intent_type)
        raise ValueError(f"Not a unit direction: ({dx}, {dy})")

    @classmethod
    def interact(cls) -> Intent:
        return cls(IntentType.INTERACT)

    @classmethod
    def retry_room(cls) -> Intent:
        return cls(IntentType.RETRY_ROOM)

    @classmethod
    def retry_run(cls) -> Intent:
        return cls(IntentType.RETRY_RUN)

    @classmethod
    def quit(cls) -> Intent:
        return cls(IntentType.QUIT)

    @classmethod
    def from_key(cls, key: str) -> Intent | None:
        """Map a key press to an intent; None for unbound keys."""
        key = key.strip().lower()
        if not key:
            return None
        intent_type = KEY_BINDINGS.get(key[0])
        return cls(intent_type) if intent_type else None


@dataclass
class IntentResult:
    """
    Result of applying an intent.

    Contains:
    - Whether the intent could be applied at all
    - Whether anything in the World changed
    - Cues emitted (also sent to the engine's sink)
    - Room progression flags
    """
    success: bool
    changed: bool = False
    error: str | None = None
    error_code: str | None = None

    cues: list[CueEvent] = field(default_factory=list)

    room_advanced: bool = False
    run_complete: bool = False

    @property
    def messages(self) -> list[str]:
        return [c.message for c in self.cues if c.message]

    @classmethod
    def failure(cls, error: str, error_code: str | None = None) -> IntentResult:
        """Create a failure result."""
        return cls(success=False, error=error, error_code=error_code)

    @classmethod
    def no_op(cls) -> IntentResult:
        """The intent was valid but blocked; nothing changed."""
        return cls(success=True, changed=False)
