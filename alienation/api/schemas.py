"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the contract between clients and the engine.

Error Codes:
- SESSION_NOT_FOUND: Session does not exist or has ended
- INVALID_INTENT: Intent cannot be applied in the current state
- INVALID_LEVEL: Unknown level id in a session request
- VALIDATION_ERROR: Request body failed validation
"""

from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, Field


# =============================================================================
# Enums
# =============================================================================

class SessionStatus(str, Enum):
    """Session status values."""
    ACTIVE = "active"
    COMPLETED = "completed"
    ABANDONED = "abandoned"


class IntentName(str, Enum):
    """Intents a client may submit."""
    MOVE_UP = "move_up"
    MOVE_DOWN = "move_down"
    MOVE_LEFT = "move_left"
    MOVE_RIGHT = "move_right"
    INTERACT = "interact"
    RETRY_ROOM = "retry_room"
    RETRY_RUN = "retry_run"
    QUIT = "quit"


class ErrorCode(str, Enum):
    """Structured error codes."""
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    INVALID_INTENT = "INVALID_INTENT"
    INVALID_LEVEL = "INVALID_LEVEL"
    VALIDATION_ERROR = "VALIDATION_ERROR"


# =============================================================================
# Shared Models
# =============================================================================

class CueInfo(BaseModel):
    """A cue raised while resolving an intent."""
    cue: str = Field(description="Cue name, e.g. door-open, key-found")
    message: str = ""
    glyph: Optional[str] = Field(None, description="Object glyph for flavor cues")

    model_config = {"from_attributes": True}


class LegendEntry(BaseModel):
    """One discovered legend entry."""
    glyph: str
    label: str


class LevelInfo(BaseModel):
    """A level available to sessions."""
    level_id: str
    name: str
    width: int
    height: int
    mechanics: list[str] = Field(
        default_factory=list, description="plate, key, levers"
    )


# =============================================================================
# Request Models
# =============================================================================

class CreateSessionRequest(BaseModel):
    """Request to create a new session."""
    level_ids: Optional[list[str]] = Field(
        None, description="Levels to play in order; defaults to the full campaign"
    )


class IntentRequest(BaseModel):
    """Request to apply one intent."""
    intent: IntentName = Field(..., description="The intent to apply")


# =============================================================================
# Response Models
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Human-readable error message")
    error_code: ErrorCode = Field(..., description="Machine-readable error code")
    details: Optional[dict[str, Any]] = Field(None, description="Additional error context")
    api_version: str = Field("v1", description="API version")


class ViewResponse(BaseModel):
    """Read-only projection of the current room."""
    session_id: str
    title: str
    grid: list[str] = Field(description="One string per map row")
    legend: list[LegendEntry] = Field(default_factory=list)
    status: str
    room_index: int
    room_count: int
    run_complete: bool = False


class SessionResponse(BaseModel):
    """Session status."""
    session_id: str
    status: SessionStatus
    room_index: int
    room_count: int
    room_name: str
    turn_number: int = 0
    created_at: float
    api_version: str = "v1"


class IntentResponse(BaseModel):
    """Outcome of one intent."""
    session_id: str
    intent: IntentName
    success: bool
    loop_state: str
    changed: bool = False
    room_advanced: bool = False
    run_complete: bool = False
    cues: list[CueInfo] = Field(default_factory=list)
    view: Optional[ViewResponse] = None
    error: Optional[str] = None
    error_code: Optional[str] = None


class LevelListResponse(BaseModel):
    """Levels available to sessions."""
    levels: list[LevelInfo]
    count: int


class SessionListResponse(BaseModel):
    """List of active sessions."""
    sessions: list[str]
    count: int


class EndSessionResponse(BaseModel):
    """Response from ending a session."""
    success: bool
    session_id: str


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    service: str
    version: str
