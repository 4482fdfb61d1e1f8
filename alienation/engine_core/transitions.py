"""
Room Transitions - Entering rooms and retrying them.

Entering a room (by progression or retry) always:
1. Sets the current room index
2. Optionally re-derives the room from its raw layout
3. Puts the player on the room's spawn
4. Drops the room's entries from the open-doors set
5. Resets the puzzle flags that belong to that room
"""

from __future__ import annotations
from typing import TYPE_CHECKING, Sequence
import logging

from .cues import Cue, CueEvent, CueSink, NullCueSink
from .world import World

if TYPE_CHECKING:
    from ..levels import LevelDefinition

logger = logging.getLogger(__name__)


class RoomTransitionManager:
    """Owns room entry and reset."""

    def __init__(self, cues: CueSink | None = None):
        self.cues = cues or NullCueSink()

    def enter_room(self, world: World, index: int, reset: bool = True) -> CueEvent:
        """
        Enter the room at index.

        Returns the room-enter cue (also emitted to the sink).
        """
        world.current_index = index
        room = world.current_room

        if reset:
            room.reset()
        world.player = room.spawn
        world.clear_room_doors(room)

        if room.rules.key_search:
            world.key_found = False
        if room.rules.lever_doors:
            world.pulled_levers.clear()
            world.next_lever_door = 0

        logger.info("Entered room %d (%s), reset=%s", index, room.room_id, reset)

        event = CueEvent(Cue.ROOM_ENTER, "\n".join((room.name, *room.intro)))
        self.cues.emit(event)
        return event

    def retry_room(self, world: World) -> CueEvent:
        """Restart the current room; other rooms and the legend are untouched."""
        return self.enter_room(world, world.current_index, reset=True)

    def new_run(self, levels: Sequence[LevelDefinition]) -> World:
        """Build a fresh World and enter its first room."""
        from ..levels import build_world

        world = build_world(levels)
        self.enter_room(world, 0, reset=True)
        return world
