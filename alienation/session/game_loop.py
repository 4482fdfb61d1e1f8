"""
Game Loop - Drives one run from intents.

The loop:
1. An input source yields an intent
2. Moves, interactions and room retries go to the RuleEngine
3. A full retry discards the World and builds a new one
4. Quit ends the loop
5. The resulting World is projected, read-only, for rendering

After the run completes only retry-run and quit are accepted.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING
import logging

from ..engine_core.cues import CueEvent, CueSink, FanoutCueSink, LoggingCueSink, RecordingCueSink
from ..engine_core.intent import Intent, IntentType
from ..engine_core.projection import WorldView, project
from ..engine_core.rules import RuleEngine

if TYPE_CHECKING:
    from .manager import Session

logger = logging.getLogger(__name__)


class LoopState(Enum):
    """State of the game loop."""
    PLAYING = "playing"
    RUN_COMPLETE = "run_complete"
    QUIT = "quit"


@dataclass
class TurnResult:
    """
    Result of handling one intent.

    Contains the cues raised while resolving it and the view to draw next.
    """
    success: bool
    loop_state: LoopState
    intent: Intent | None = None
    changed: bool = False

    cues: list[CueEvent] = field(default_factory=list)
    view: WorldView | None = None

    room_advanced: bool = False
    run_complete: bool = False

    error: str | None = None
    error_code: str | None = None

    @property
    def messages(self) -> list[str]:
        return [c.message for c in self.cues if c.message]


class GameLoop:
    """
    The main loop driver for a session.

    Usage:
        loop = GameLoop(session)

        result = loop.handle(Intent.from_key("d"))
        draw(result.view)
        for cue in result.cues:
            play(cue)
    """

    def __init__(self, session: Session, cues: CueSink | None = None):
        self.session = session
        self.recorder = RecordingCueSink()
        sinks: list[CueSink] = [self.recorder, LoggingCueSink(logger)]
        if cues is not None:
            sinks.append(cues)
        self.engine = RuleEngine(cues=FanoutCueSink(*sinks))

        if self.session.world is None:
            self.session.world = self.engine.transitions.new_run(self.session.levels)
        self.state = LoopState.RUN_COMPLETE if self.session.world.run_complete else LoopState.PLAYING

    @property
    def world(self):
        return self.session.world

    def view(self) -> WorldView:
        return project(self.session.world)

    def handle(self, intent: Intent) -> TurnResult:
        """Resolve one intent completely and report what happened."""
        from .manager import SessionState

        self.recorder.drain()

        if self.state == LoopState.QUIT:
            return TurnResult(
                success=False,
                loop_state=self.state,
                intent=intent,
                error="Game loop has quit",
                error_code="QUIT",
            )

        if intent.intent_type == IntentType.QUIT:
            self.state = LoopState.QUIT
            self.session.state = SessionState.ABANDONED
            logger.info("Session %s quit", self.session.session_id)
            return TurnResult(success=True, loop_state=self.state, intent=intent, view=self.view())

        if intent.intent_type == IntentType.RETRY_RUN:
            return self._retry_run(intent)

        result = self.engine.apply(self.session.world, intent)
        if result.run_complete:
            self.state = LoopState.RUN_COMPLETE
            self.session.state = SessionState.COMPLETED

        self.session.turn_number += 1
        return TurnResult(
            success=result.success,
            loop_state=self.state,
            intent=intent,
            changed=result.changed,
            cues=self.recorder.drain(),
            view=self.view(),
            room_advanced=result.room_advanced,
            run_complete=result.run_complete,
            error=result.error,
            error_code=result.error_code,
        )

    def _retry_run(self, intent: Intent) -> TurnResult:
        """Throw the World away and start the campaign over."""
        from .manager import SessionState

        self.session.world = self.engine.transitions.new_run(self.session.levels)
        self.session.state = SessionState.ACTIVE
        self.session.turn_number = 0
        self.state = LoopState.PLAYING
        logger.info("Session %s restarted the run", self.session.session_id)
        return TurnResult(
            success=True,
            loop_state=self.state,
            intent=intent,
            changed=True,
            cues=self.recorder.drain(),
            view=self.view(),
        )
