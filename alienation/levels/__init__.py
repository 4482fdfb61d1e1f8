"""
Levels module - Built-in level data.

Each level is plain text in the fixed glyph table plus an explicit
RoomRules declaring which puzzle mechanics its doors follow.
"""

from .campaign import (
    LevelDefinition,
    CAMPAIGN,
    STORAGE_BAY,
    LAB_WARD,
    LEVER_GAUNTLET,
    build_world,
)

__all__ = [
    "LevelDefinition",
    "CAMPAIGN",
    "STORAGE_BAY",
    "LAB_WARD",
    "LEVER_GAUNTLET",
    "build_world",
]
