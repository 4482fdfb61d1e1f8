"""
API Module - HTTP interface.

Exposes the engine via REST for remote clients. A client:
1. Lists levels
2. Creates a session
3. Submits intents one at a time
4. Draws the returned view and plays the returned cues

All state is session-scoped. No accounts, no persistence.
"""

from .schemas import (
    # Requests
    CreateSessionRequest,
    IntentRequest,
    # Responses
    SessionResponse,
    IntentResponse,
    ViewResponse,
    LevelListResponse,
    ErrorResponse,
    # Shared
    CueInfo,
    LegendEntry,
    LevelInfo,
    ErrorCode,
    IntentName,
    SessionStatus,
)
from .service import APIService
from .app import create_app

__all__ = [
    # Requests
    "CreateSessionRequest",
    "IntentRequest",
    # Responses
    "SessionResponse",
    "IntentResponse",
    "ViewResponse",
    "LevelListResponse",
    "ErrorResponse",
    # Shared
    "CueInfo",
    "LegendEntry",
    "LevelInfo",
    "ErrorCode",
    "IntentName",
    "SessionStatus",
    # Service
    "APIService",
    "create_app",
]
