"""
Rule Engine - Applies intents to the world.

The engine is the single point of gameplay mutation.
All movement and interaction goes through RuleEngine.apply().

Design principles:
- Stateless: all state lives in World and its Rooms
- Validates before applying; a rejected intent mutates nothing
- Puzzle predicates are recomputed in full, never patched
- Cues are emitted to an injected sink and never awaited
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging

from .cues import Cue, CueEvent, CueSink, NullCueSink
from .grid import Coord, ShapeId, DOOR_GLYPH, EXIT_GLYPH, INTERACT_GLYPH, DEFAULT_FLAVOR_GLYPH
from .intent import Intent, IntentType, IntentResult
from .room import Room
from .transitions import RoomTransitionManager
from .world import World

logger = logging.getLogger(__name__)


FLAVOR_LABELS: dict[str, str] = {
    "O": "Human artifact",
    "F": "Human artifact",
    "h": "Sleeper",
    "[": "Metal maw",
    "]": "Metal maw",
    "Y": "Green friend",
    "0": "Portal",
}

FLAVOR_TEXT: dict[str, str] = {
    "h": "A thin sleeping creature with a thousand tiny legs...",
    "[": "A cube like beast with a large metal maw...",
    "]": "A cube like beast with a large metal maw...",
    "Y": "A small hairy green friend...",
    "0": "A portal to another world...",
    "O": "A human artifact... symbols that match your species code...",
    "F": "A human artifact... symbols that match your species code...",
}
DEFAULT_FLAVOR_TEXT = "Something unfamiliar... it hums softly..."

RUN_COMPLETE_TEXT = (
    "You slip through the final blast door... "
    "The desert night greets you... you made it."
)


@dataclass
class RuleEngine:
    """
    Applies intents to a World.

    Holds no game state of its own; the cue sink and transition manager are
    services scoped to one run.
    """
    cues: CueSink = field(default_factory=NullCueSink)
    transitions: RoomTransitionManager | None = None

    def __post_init__(self):
        if self.transitions is None:
            self.transitions = RoomTransitionManager(cues=self.cues)

    def apply(self, world: World, intent: Intent) -> IntentResult:
        """
        Apply an intent to the world.

        Returns IntentResult describing what happened.
        """
        validation_error = self._validate_intent(world, intent)
        if validation_error:
            return IntentResult.failure(validation_error, error_code="RUN_COMPLETE")

        handler = self._get_handler(intent.intent_type)
        if not handler:
            return IntentResult.failure(
                f"No handler for intent type: {intent.intent_type.value}",
                error_code="NO_HANDLER",
            )
        return handler(world, intent)

    def _validate_intent(self, world: World, intent: Intent) -> str | None:
        """Returns an error message if the intent cannot apply, None if it can."""
        if world.run_complete and intent.intent_type not in {IntentType.RETRY_RUN, IntentType.QUIT}:
            return "Run is complete - only retry-run or quit allowed"
        return None

    def _get_handler(self, intent_type: IntentType):
        """Get the handler function for an intent type."""
        handlers = {
            IntentType.MOVE_UP: self._handle_move,
            IntentType.MOVE_DOWN: self._handle_move,
            IntentType.MOVE_LEFT: self._handle_move,
            IntentType.MOVE_RIGHT: self._handle_move,
            IntentType.INTERACT: self._handle_interact,
            IntentType.RETRY_ROOM: self._handle_retry_room,
        }
        return handlers.get(intent_type)

    def _handle_move(self, world: World, intent: Intent) -> IntentResult:
        dx, dy = intent.delta
        return self.move(world, dx, dy)

    def _handle_interact(self, world: World, intent: Intent) -> IntentResult:
        return self.interact(world)

    def _handle_retry_room(self, world: World, intent: Intent) -> IntentResult:
        event = self.transitions.retry_room(world)
        return IntentResult(success=True, changed=True, cues=[event])

    # =========================================================================
    # Movement
    # =========================================================================

    def move(self, world: World, dx: int, dy: int) -> IntentResult:
        """
        Walk one cell, or push the pushable standing there.

        A push whose destination is blocked changes nothing at all.
        """
        room = world.current_room
        target = world.player.offset(dx, dy)

        if target in room.pushables:
            dest = target.offset(dx, dy)
            if not room.is_push_destination_free(dest, world):
                return IntentResult.no_op()

            result = IntentResult(success=True, changed=True)
            shape = room.pushables.pop(target)
            room.pushables[dest] = shape
            if room.is_walkable(target, world):
                world.player = target

            if shape == ShapeId.BARREL:
                self._emit(result, Cue.PUSH_HEAVY, "The barrel scrapes across the floor...")
            else:
                self._emit(result, Cue.PUSH)
            if dest in room.plates:
                self._emit(result, Cue.PLATE_PRESS, "The plate sinks with a dull click...")

            if room.rules.has_plate_rule:
                self.evaluate_plate_rule(world, room, result)
            self.try_exit_advance(world, result)
            return result

        if room.is_walkable(target, world):
            world.player = target
            result = IntentResult(success=True, changed=True)
            self.try_exit_advance(world, result)
            return result

        return IntentResult.no_op()

    # =========================================================================
    # Puzzle predicates
    # =========================================================================

    def evaluate_plate_rule(self, world: World, room: Room, result: IntentResult) -> bool:
        """
        Recompute door state for a plate room from the current board.

        Every door is open iff some plate holds a pushable of the room's
        plate shape. Returns whether the doors are now open.
        """
        satisfied = any(
            room.pushables.get(plate) == room.rules.plate_shape for plate in room.plates
        )
        were_open = {door for door in room.doors if world.is_door_open(room, door)}

        for door in room.doors:
            if satisfied:
                world.open_door(room, door)
            else:
                world.close_door(room, door)

        if satisfied and were_open != room.doors:
            logger.debug("Plate rule satisfied in %s, doors open", room.room_id)
            self._emit(result, Cue.DOOR_OPEN, "Somewhere a heavy door grinds open...")
        elif not satisfied and were_open:
            logger.debug("Plate rule broken in %s, doors closed", room.room_id)
            self._emit(result, Cue.DOOR_CLOSE, "Somewhere a heavy door slams shut...")
        return satisfied

    def pull_lever(self, world: World, room: Room, pos: Coord, result: IntentResult) -> None:
        """
        Pull the lever at pos.

        Each lever works once per visit. A hinted lever opens the next
        still-closed door in (x, y) order and advances the cursor.
        """
        if pos in world.pulled_levers:
            self._emit(result, Cue.LEVER_ALREADY_PULLED, "The bone already remembered your touch...")
            return

        world.pulled_levers.add(pos)
        result.changed = True

        if pos not in room.hinted_levers:
            self._emit(result, Cue.LEVER_DEAD, "The bone stick yawns... nothing happens...")
            return

        ordered = room.ordered_doors()
        while world.next_lever_door < len(ordered) and world.is_door_open(room, ordered[world.next_lever_door]):
            world.next_lever_door += 1

        if world.next_lever_door >= len(ordered):
            self._emit(result, Cue.LEVER_EXHAUSTED, "A distant sigh... nothing left to open...")
            return

        door = ordered[world.next_lever_door]
        world.open_door(room, door)
        world.next_lever_door += 1
        logger.debug("Lever %s opened door %s in %s", pos, door, room.room_id)
        self._emit(result, Cue.LEVER_PULL, "The bone stick hums... metal breath unlocks ahead...")
        self.try_exit_advance(world, result)

    def try_exit_advance(self, world: World, result: IntentResult) -> bool:
        """
        Leave the room if the player is on its exit and every door is open.

        On the last room this completes the run instead.
        """
        room = world.current_room
        if room.exit is None or world.player != room.exit:
            return False
        if not world.all_doors_open(room):
            return False

        result.changed = True
        if world.is_last_room:
            world.run_complete = True
            result.run_complete = True
            logger.info("Run complete")
            self._emit(result, Cue.RUN_COMPLETE, RUN_COMPLETE_TEXT)
            return True

        event = self.transitions.enter_room(world, world.current_index + 1, reset=True)
        result.cues.append(event)
        result.room_advanced = True
        return True

    # =========================================================================
    # Interaction
    # =========================================================================

    def interact(self, world: World) -> IntentResult:
        """
        Interact with the player's cell, or a door next to it.

        First match wins: door, flavor, searchable, lever, plate, exit.
        """
        room = world.current_room
        pos = world.player
        result = IntentResult(success=True)

        for neighbor in pos.neighbors():
            if neighbor in room.doors:
                self._learn(world, result, DOOR_GLYPH, "Door")
                self._interact_door(world, room, neighbor, result)
                return result

        if pos in room.flavors:
            glyph = room.flavor_glyphs.get(pos, DEFAULT_FLAVOR_GLYPH)
            self._learn(world, result, glyph, FLAVOR_LABELS.get(glyph, "Flavor"))
            self._emit(result, Cue.FLAVOR, FLAVOR_TEXT.get(glyph, DEFAULT_FLAVOR_TEXT), glyph=glyph)
            return result

        if room.rules.key_search and pos in room.searchables:
            self._learn(world, result, INTERACT_GLYPH, "Interact")
            if not world.key_found and pos == room.key_searchable():
                world.key_found = True
                result.changed = True
                self._emit(result, Cue.KEY_FOUND, "Inside the locker... a brass key glints. You take it...")
            else:
                self._emit(result, Cue.NOTHING_USEFUL, "Dust... notes... old coats... nothing useful...")
            return result

        if room.rules.lever_doors and pos in room.levers:
            self._learn(world, result, INTERACT_GLYPH, "Interact")
            self.pull_lever(world, room, pos, result)
            return result

        if pos in room.plates:
            self._learn(world, result, room.plate_glyph, "Plate")
            self._emit(
                result,
                Cue.PLATE_HINT,
                "A heavy pressure plate... perhaps the right shape will trigger it...",
            )
            return result

        if room.exit is not None and pos == room.exit:
            self._learn(world, result, EXIT_GLYPH, "Exit")
            if not self.try_exit_advance(world, result):
                self._emit(result, Cue.DOOR_LOCKED, "The exit will not budge while a door stays shut...")
            return result

        self._emit(result, Cue.NOTHING_HERE, "There is nothing to interact with here...")
        return result

    def _interact_door(self, world: World, room: Room, door: Coord, result: IntentResult) -> None:
        if world.is_door_open(room, door):
            self._emit(result, Cue.DOOR_ALREADY_OPEN, "The door is already open.")
            return

        if room.rules.key_search and world.key_found:
            world.open_door(room, door)
            result.changed = True
            self._emit(result, Cue.DOOR_OPEN, "You unlock the door with the key...")
            self.try_exit_advance(world, result)
            return

        self._emit(result, Cue.DOOR_LOCKED, "The door is locked...")

    # =========================================================================
    # Helpers
    # =========================================================================

    def _emit(self, result: IntentResult, cue: Cue, message: str = "", glyph: str | None = None) -> None:
        event = CueEvent(cue=cue, message=message, glyph=glyph)
        result.cues.append(event)
        self.cues.emit(event)

    def _learn(self, world: World, result: IntentResult, glyph: str, label: str) -> None:
        if world.learn(glyph, label):
            result.changed = True


def apply_intent(world: World, intent: Intent, cues: CueSink | None = None) -> IntentResult:
    """
    Convenience function to apply an intent.

    Creates a RuleEngine and applies the intent.
    """
    engine = RuleEngine(cues=cues or NullCueSink())
    return engine.apply(world, intent)
