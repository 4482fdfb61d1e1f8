"""
Engine Core - Deterministic grid puzzle state and rule resolution.

The engine is the runtime that:
1. Parses level text into rooms
2. Manages World state across rooms
3. Applies movement and interaction intents via the rule engine
4. Evaluates puzzle predicates (plates, levers, keys)
5. Moves the player between rooms
"""

from .grid import Coord, Tile, ShapeId, GLYPH_TABLE, classify
from .parser import ParsedLevel, parse_level
from .room import Room, RoomRules
from .world import World
from .cues import (
    Cue,
    CueEvent,
    CueSink,
    NullCueSink,
    RecordingCueSink,
    LoggingCueSink,
    FanoutCueSink,
    SoundCueSink,
)
from .intent import Intent, IntentType, IntentResult
from .transitions import RoomTransitionManager
from .rules import RuleEngine, apply_intent
from .projection import WorldView, project, compose_frame

__all__ = [
    "Coord",
    "Tile",
    "ShapeId",
    "GLYPH_TABLE",
    "classify",
    "ParsedLevel",
    "parse_level",
    "Room",
    "RoomRules",
    "World",
    "Cue",
    "CueEvent",
    "CueSink",
    "NullCueSink",
    "RecordingCueSink",
    "LoggingCueSink",
    "FanoutCueSink",
    "SoundCueSink",
    "Intent",
    "IntentType",
    "IntentResult",
    "RoomTransitionManager",
    "RuleEngine",
    "apply_intent",
    "WorldView",
    "project",
    "compose_frame",
]
