"""
API Service - Business logic layer between the HTTP app and the engine.

The service:
1. Translates API requests to engine calls
2. Manages sessions and their game loops
3. Formats responses

This layer is framework-agnostic; the FastAPI app is a thin wrapper.
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging

from .schemas import (
    CreateSessionRequest,
    IntentRequest,
    CueInfo,
    LegendEntry,
    LevelInfo,
    ViewResponse,
    SessionResponse,
    IntentResponse,
    LevelListResponse,
    ErrorResponse,
    ErrorCode,
    SessionStatus,
)
from ..engine_core.intent import Intent, IntentType
from ..engine_core.projection import WorldView
from ..levels import CAMPAIGN, LevelDefinition
from ..session import SessionManager, Session, GameLoop, TurnResult

logger = logging.getLogger(__name__)


def _default_catalog() -> dict[str, LevelDefinition]:
    return {level.level_id: level for level in CAMPAIGN}


@dataclass
class APIService:
    """
    Main API service.

    Usage:
        service = APIService()

        session = service.create_session(CreateSessionRequest())
        result = service.submit_intent(session.session_id, IntentRequest(intent="move_right"))
    """
    session_manager: SessionManager = field(default_factory=SessionManager)
    catalog: dict[str, LevelDefinition] = field(default_factory=_default_catalog)
    session_max_age: int = 3600

    # Game loops per session
    _game_loops: dict[str, GameLoop] = field(default_factory=dict)

    def list_levels(self) -> LevelListResponse:
        levels = [self._level_info(level) for level in self.catalog.values()]
        return LevelListResponse(levels=levels, count=len(levels))

    def create_session(self, request: CreateSessionRequest) -> SessionResponse:
        """
        Create a new session.

        Raises:
            ValueError: If a requested level id is unknown or repeated, or the list is empty
        """
        if request.level_ids is None:
            levels = list(CAMPAIGN)
        else:
            unknown = [lid for lid in request.level_ids if lid not in self.catalog]
            if unknown:
                raise ValueError(f"Unknown level id(s): {', '.join(unknown)}")
            levels = [self.catalog[lid] for lid in request.level_ids]

        self.cleanup_stale_sessions()
        session = self.session_manager.create_session(levels)
        self._game_loops[session.session_id] = GameLoop(session)
        return self._session_response(session)

    def get_session(self, session_id: str) -> SessionResponse | ErrorResponse:
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)
        return self._session_response(session)

    def end_session(self, session_id: str, reason: str = "user_ended") -> bool:
        self._game_loops.pop(session_id, None)
        return self.session_manager.end_session(session_id, reason)

    def list_sessions(self) -> list[str]:
        return self.session_manager.list_active_sessions()

    def cleanup_stale_sessions(self) -> int:
        """Drop quit sessions older than session_max_age, loops included."""
        removed = self.session_manager.cleanup_stale_sessions(self.session_max_age)
        for session_id in list(self._game_loops):
            if self.session_manager.get_session(session_id) is None:
                del self._game_loops[session_id]
        if removed:
            logger.info("Cleaned up %d stale session(s)", removed)
        return removed

    def get_view(self, session_id: str) -> ViewResponse | ErrorResponse:
        loop = self._game_loops.get(session_id)
        if not loop:
            return self._not_found(session_id)
        return self._view_response(session_id, loop.view())

    def submit_intent(self, session_id: str, request: IntentRequest) -> IntentResponse | ErrorResponse:
        """Apply one intent to a session's run."""
        loop = self._game_loops.get(session_id)
        if not loop:
            return self._not_found(session_id)

        intent = Intent(IntentType(request.intent.value))
        result = loop.handle(intent)
        logger.debug(
            "Session %s intent %s -> success=%s changed=%s",
            session_id, intent.intent_type.value, result.success, result.changed,
        )
        return self._intent_response(session_id, request, result)

    # =========================================================================
    # Conversion helpers
    # =========================================================================

    def _not_found(self, session_id: str) -> ErrorResponse:
        return ErrorResponse(
            error=f"Session {session_id} not found",
            error_code=ErrorCode.SESSION_NOT_FOUND,
        )

    def _session_response(self, session: Session) -> SessionResponse:
        loop = self._game_loops.get(session.session_id)
        world = loop.world if loop else session.world
        return SessionResponse(
            session_id=session.session_id,
            status=SessionStatus(session.state.value),
            room_index=world.current_index if world else 0,
            room_count=len(session.levels),
            room_name=world.current_room.name if world else session.levels[0].name,
            turn_number=session.turn_number,
            created_at=session.created_at,
        )

    def _view_response(self, session_id: str, view: WorldView) -> ViewResponse:
        return ViewResponse(
            session_id=session_id,
            title=view.title,
            grid=list(view.grid),
            legend=[LegendEntry(glyph=g, label=label) for g, label in view.legend],
            status=view.status,
            room_index=view.room_index,
            room_count=view.room_count,
            run_complete=view.run_complete,
        )

    def _intent_response(
        self, session_id: str, request: IntentRequest, result: TurnResult
    ) -> IntentResponse:
        return IntentResponse(
            session_id=session_id,
            intent=request.intent,
            success=result.success,
            loop_state=result.loop_state.value,
            changed=result.changed,
            room_advanced=result.room_advanced,
            run_complete=result.run_complete,
            cues=[
                CueInfo(cue=c.cue.value, message=c.message, glyph=c.glyph)
                for c in result.cues
            ],
            view=self._view_response(session_id, result.view) if result.view else None,
            error=result.error,
            error_code=result.error_code,
        )

    def _level_info(self, level: LevelDefinition) -> LevelInfo:
        room = level.to_room()
        mechanics = []
        if level.rules.has_plate_rule:
            mechanics.append("plate")
        if level.rules.key_search:
            mechanics.append("key")
        if level.rules.lever_doors:
            mechanics.append("levers")
        return LevelInfo(
            level_id=level.level_id,
            name=level.name,
            width=room.width,
            height=room.height,
            mechanics=mechanics,
        )
