"""
FastAPI Application - REST API for remote play.

Endpoints:
    GET    /api/v1/levels                   List available levels
    POST   /api/v1/sessions                 Create a session
    GET    /api/v1/sessions                 List active sessions
    GET    /api/v1/sessions/{id}            Get session status
    DELETE /api/v1/sessions/{id}            End session
    POST   /api/v1/sessions/{id}/intents    Apply one intent
    GET    /api/v1/sessions/{id}/view       Get the current room view
    WS     /api/v1/sessions/{id}/ws         Push views and cues after each intent

All responses are JSON with explicit Pydantic schemas.
"""

from typing import Annotated, Optional, Union
import json
import logging
import os

from fastapi import Body, FastAPI, Query, WebSocket, WebSocketDisconnect
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from .service import APIService
from .schemas import (
    CreateSessionRequest,
    IntentRequest,
    ErrorResponse,
    ErrorCode,
    SessionResponse,
    SessionListResponse,
    EndSessionResponse,
    IntentResponse,
    ViewResponse,
    LevelListResponse,
    HealthResponse,
)

# Environment configuration
ALIENATION_ENV = os.getenv("ALIENATION_ENV", "development")
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")

logger = logging.getLogger(__name__)


def create_app(service: Optional[APIService] = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        service: Optional APIService instance (creates new if not provided)

    Returns:
        FastAPI application instance
    """
    app = FastAPI(
        title="Alienation Engine API",
        description="""
Turn-based grid puzzle engine. Create a session, then submit intents one at a
time; every response carries the cues raised and the next room view.

## Error Codes

| Code | Description |
|------|-------------|
| `SESSION_NOT_FOUND` | Session does not exist |
| `INVALID_INTENT` | Intent cannot apply (run complete, loop quit) |
| `INVALID_LEVEL` | Unknown or repeated level id |
| `VALIDATION_ERROR` | Request body failed validation |
        """,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    api_service = service or APIService()
    app.state.service = api_service

    # WebSocket connections
    ws_connections: dict[str, list[WebSocket]] = {}

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Optional[dict] = None,
    ) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(
                error=message,
                error_code=error_code,
                details=details,
            ).model_dump(mode="json"),
        )

    def not_found(response: ErrorResponse) -> JSONResponse:
        return make_error_response(response.error_code, response.error, status_code=404)

    @app.exception_handler(RequestValidationError)
    async def validation_error(request, exc: RequestValidationError) -> JSONResponse:
        return make_error_response(
            ErrorCode.VALIDATION_ERROR,
            "Request validation failed",
            status_code=422,
            details={"errors": jsonable_encoder(exc.errors())},
        )

    async def broadcast_to_session(session_id: str, message: dict):
        """Send a message to all WebSocket connections for a session."""
        if session_id not in ws_connections:
            return
        dead_connections = []
        for ws in ws_connections[session_id]:
            try:
                await ws.send_json(message)
            except (RuntimeError, WebSocketDisconnect):
                dead_connections.append(ws)
        for ws in dead_connections:
            ws_connections[session_id].remove(ws)

    # =========================================================================
    # Levels
    # =========================================================================

    @app.get(
        "/api/v1/levels",
        response_model=LevelListResponse,
        tags=["Levels"],
        summary="List available levels",
    )
    async def list_levels() -> LevelListResponse:
        return api_service.list_levels()

    # =========================================================================
    # Session Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/sessions",
        response_model=SessionResponse,
        responses={400: {"model": ErrorResponse, "description": "Unknown level id"}},
        tags=["Sessions"],
        summary="Create a new session",
    )
    async def create_session(
        body: Annotated[Optional[CreateSessionRequest], Body()] = None,
    ) -> Union[SessionResponse, JSONResponse]:
        """
        Create a new session.

        Omit `level_ids` to play the full built-in campaign.
        """
        try:
            return api_service.create_session(body or CreateSessionRequest())
        except ValueError as e:
            return make_error_response(ErrorCode.INVALID_LEVEL, str(e))

    @app.get(
        "/api/v1/sessions",
        response_model=SessionListResponse,
        tags=["Sessions"],
        summary="List active sessions",
    )
    async def list_sessions() -> SessionListResponse:
        sessions = api_service.list_sessions()
        return SessionListResponse(sessions=sessions, count=len(sessions))

    @app.get(
        "/api/v1/sessions/{session_id}",
        response_model=SessionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Sessions"],
        summary="Get session status",
    )
    async def get_session(session_id: str) -> Union[SessionResponse, JSONResponse]:
        response = api_service.get_session(session_id)
        if isinstance(response, ErrorResponse):
            return not_found(response)
        return response

    @app.delete(
        "/api/v1/sessions/{session_id}",
        response_model=EndSessionResponse,
        tags=["Sessions"],
        summary="End a session",
    )
    async def end_session(
        session_id: str,
        reason: Annotated[str, Query(description="Reason for ending")] = "user_ended",
    ) -> EndSessionResponse:
        """End a session and release its state."""
        success = api_service.end_session(session_id, reason)
        return EndSessionResponse(success=success, session_id=session_id)

    # =========================================================================
    # Play Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/sessions/{session_id}/intents",
        response_model=IntentResponse,
        responses={
            404: {"model": ErrorResponse, "description": "Session not found"},
            409: {"model": ErrorResponse, "description": "Intent cannot apply now"},
        },
        tags=["Play"],
        summary="Apply one intent",
    )
    async def submit_intent(
        session_id: str,
        body: IntentRequest,
    ) -> Union[IntentResponse, JSONResponse]:
        """
        Apply one intent and return the cues and the next view.

        **Request Body:**
        ```json
        {"intent": "move_right"}
        ```
        """
        response = api_service.submit_intent(session_id, body)
        if isinstance(response, ErrorResponse):
            return not_found(response)
        if not response.success:
            return make_error_response(
                ErrorCode.INVALID_INTENT,
                response.error or "Intent rejected",
                status_code=409,
                details={"engine_code": response.error_code},
            )

        await broadcast_to_session(session_id, {
            "type": "intent_result",
            "payload": response.model_dump(mode="json"),
        })
        return response

    @app.get(
        "/api/v1/sessions/{session_id}/view",
        response_model=ViewResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Play"],
        summary="Get the current room view",
    )
    async def get_view(session_id: str) -> Union[ViewResponse, JSONResponse]:
        response = api_service.get_view(session_id)
        if isinstance(response, ErrorResponse):
            return not_found(response)
        return response

    # =========================================================================
    # WebSocket Endpoint
    # =========================================================================

    @app.websocket("/api/v1/sessions/{session_id}/ws")
    async def websocket_endpoint(websocket: WebSocket, session_id: str):
        """
        WebSocket for live updates.

        Messages from server:
        - view: Current room view, sent on connect
        - intent_result: Sent after every applied intent
        - error: Bad message from client

        Messages from client:
        - ping: Keep-alive
        """
        await websocket.accept()
        ws_connections.setdefault(session_id, []).append(websocket)

        try:
            response = api_service.get_view(session_id)
            if isinstance(response, ErrorResponse):
                await websocket.send_json({
                    "type": "error",
                    "payload": response.model_dump(mode="json"),
                })
                await websocket.close()
                return

            await websocket.send_json({"type": "view", "payload": response.model_dump(mode="json")})

            while True:
                data = await websocket.receive_text()
                try:
                    message = json.loads(data)
                except json.JSONDecodeError:
                    await websocket.send_json({
                        "type": "error",
                        "payload": {"message": "Invalid JSON"},
                    })
                    continue
                if isinstance(message, dict) and message.get("type") == "ping":
                    await websocket.send_json({"type": "pong"})

        except WebSocketDisconnect:
            logger.debug("WebSocket for session %s disconnected", session_id)
        finally:
            if websocket in ws_connections.get(session_id, []):
                ws_connections[session_id].remove(websocket)

    # =========================================================================
    # Health Check
    # =========================================================================

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        return HealthResponse(
            status="healthy",
            service="alienation-engine",
            version=__version__,
        )

    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Alienation Engine API",
            "version": __version__,
            "environment": ALIENATION_ENV,
            "docs": "/api/docs",
            "health": "/health",
        }

    return app


# For running directly: uvicorn alienation.api.app:app
app = create_app()
