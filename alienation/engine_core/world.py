"""
World - Cross-room state for one run.

Design principles:
- One World per run; a full retry discards it and builds a new one
- The open-doors set is the only record of which doors are passable
- Puzzle flags are room-scoped and cleared on entry to their room
- The legend only grows, until the World itself is replaced
"""

from __future__ import annotations
from copy import deepcopy
from dataclasses import dataclass, field

from .grid import Coord
from .room import Room


@dataclass
class World:
    """
    Complete mutable state of a run.

    All mutation goes through RuleEngine and RoomTransitionManager.
    """
    rooms: list[Room]
    current_index: int = 0
    player: Coord = Coord(0, 0)

    # (room_id, door position) pairs for doors currently open
    open_doors: set[tuple[str, Coord]] = field(default_factory=set)

    # Key room
    key_found: bool = False

    # Lever room
    pulled_levers: set[Coord] = field(default_factory=set)
    next_lever_door: int = 0

    # Progressive legend: glyph -> label, insert-only
    legend: dict[str, str] = field(default_factory=dict)

    run_complete: bool = False

    @property
    def current_room(self) -> Room:
        return self.rooms[self.current_index]

    @property
    def is_last_room(self) -> bool:
        return self.current_index == len(self.rooms) - 1

    def is_door_open(self, room: Room, pos: Coord) -> bool:
        return (room.room_id, pos) in self.open_doors

    def open_door(self, room: Room, pos: Coord) -> None:
        self.open_doors.add((room.room_id, pos))

    def close_door(self, room: Room, pos: Coord) -> None:
        self.open_doors.discard((room.room_id, pos))

    def clear_room_doors(self, room: Room) -> None:
        """Forget every open door belonging to room."""
        self.open_doors = {entry for entry in self.open_doors if entry[0] != room.room_id}

    def all_doors_open(self, room: Room) -> bool:
        return all(self.is_door_open(room, door) for door in room.doors)

    def learn(self, glyph: str, label: str) -> bool:
        """Record a legend entry on first discovery. Returns True if new."""
        if glyph in self.legend:
            return False
        self.legend[glyph] = label
        return True

    def clone(self) -> World:
        """Deep copy, for handing a snapshot to outside readers."""
        return deepcopy(self)
