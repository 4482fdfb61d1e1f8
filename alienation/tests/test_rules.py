"""
Tests for the rule engine.

Tests:
- Walking and pushing
- Rejected pushes change nothing
- Plate rule recomputation
- Key search and door unlocking
- Lever ordering and one-shot pulls
- Exit gating and room advance
- Interaction priority and the progressive legend
"""

from copy import deepcopy

import pytest

from ..engine_core.cues import Cue
from ..engine_core.grid import Coord, ShapeId
from ..engine_core.intent import Intent
from ..engine_core.room import RoomRules
from ..engine_core.rules import RuleEngine, apply_intent
from ..levels import LevelDefinition
from .conftest import CORRIDOR_LEVEL, start_world


def cues_of(results):
    """Flatten the cue kinds of a list of results."""
    return [event.cue for result in results for event in result.cues]


def single_room(engine, *rows, rules=None, plate_glyph="*"):
    level = LevelDefinition(
        level_id="scratch",
        name="Scratch",
        rows=tuple(rows),
        rules=rules or RoomRules(),
        plate_glyph=plate_glyph,
    )
    return start_world(engine, level)


class TestWalking:
    """Tests for plain movement."""

    def test_walk_onto_floor(self, engine):
        """Walking into floor moves the player."""
        world = single_room(engine, "P..")
        result = engine.apply(world, Intent.move(1, 0))

        assert result.success
        assert result.changed
        assert world.player == Coord(1, 0)

    def test_walk_into_wall(self, engine):
        """Walls block without failing the intent."""
        world = single_room(engine, "P#")
        result = engine.apply(world, Intent.move(1, 0))

        assert result.success
        assert not result.changed
        assert world.player == Coord(0, 0)

    def test_walk_off_grid(self, engine):
        """The grid edge blocks like a wall."""
        world = single_room(engine, "P.")
        result = engine.apply(world, Intent.move(-1, 0))

        assert not result.changed
        assert world.player == Coord(0, 0)

    def test_closed_door_blocks(self, engine):
        world = single_room(engine, "PD.")
        engine.apply(world, Intent.move(1, 0))
        assert world.player == Coord(0, 0)

    def test_open_door_passes(self, engine):
        world = single_room(engine, "PD.")
        world.open_door(world.current_room, Coord(1, 0))
        engine.apply(world, Intent.move(1, 0))
        assert world.player == Coord(1, 0)


class TestPushing:
    """Tests for pushing blocks."""

    def test_push_moves_block_and_player(self, engine):
        """The block slides one cell and the player follows."""
        world = single_room(engine, "P1.")
        result = engine.apply(world, Intent.move(1, 0))

        room = world.current_room
        assert result.changed
        assert room.pushables == {Coord(2, 0): ShapeId.ONE}
        assert world.player == Coord(1, 0)
        assert [e.cue for e in result.cues] == [Cue.PUSH]

    def test_barrel_push_is_heavy(self, engine):
        world = single_room(engine, "P&.")
        result = engine.apply(world, Intent.move(1, 0))
        assert [e.cue for e in result.cues] == [Cue.PUSH_HEAVY]

    def test_push_onto_plate_presses_it(self, engine):
        world = single_room(engine, "P3*")
        result = engine.apply(world, Intent.move(1, 0))
        assert [e.cue for e in result.cues] == [Cue.PUSH, Cue.PLATE_PRESS]

    def test_push_through_open_door(self, engine):
        """An open door is a valid push destination."""
        world = single_room(engine, "P1D")
        world.open_door(world.current_room, Coord(2, 0))
        engine.apply(world, Intent.move(1, 0))
        assert Coord(2, 0) in world.current_room.pushables

    @pytest.mark.parametrize("rows", [
        ("P1#",),      # wall
        ("P1",),       # grid edge
        ("P12",),      # another block
        ("P1D",),      # closed door
        ("P1=",),      # alternate wall
    ])
    def test_blocked_push_changes_nothing(self, engine, recorder, rows):
        """A push with a blocked destination leaves the whole World as it was."""
        world = single_room(engine, *rows)
        recorder.drain()
        before = deepcopy(world.current_room.derived)
        open_before = set(world.open_doors)
        legend_before = dict(world.legend)

        result = engine.apply(world, Intent.move(1, 0))

        assert result.success
        assert not result.changed
        assert result.cues == []
        assert recorder.events == []
        assert world.player == Coord(0, 0)
        assert world.current_room.derived == before
        assert world.open_doors == open_before
        assert world.legend == legend_before


class TestPlateRule:
    """Tests for plate rooms."""

    def test_correct_shape_opens_doors(self, engine, plate_world, play):
        """Shape 2 on a plate opens every door."""
        results = play(plate_world, "sddd")

        assert plate_world.current_room.pushables[Coord(5, 2)] == ShapeId.TWO
        assert plate_world.all_doors_open(plate_world.current_room)
        assert Cue.DOOR_OPEN in cues_of(results)

    def test_wrong_shape_does_not_open(self, engine, plate_world, play):
        """Shape 1 on a plate leaves doors shut."""
        results = play(plate_world, "sssddd")

        room = plate_world.current_room
        assert room.pushables[Coord(5, 4)] == ShapeId.ONE
        assert not plate_world.all_doors_open(room)
        assert Cue.PLATE_PRESS in cues_of(results)
        assert Cue.DOOR_OPEN not in cues_of(results)

    def test_rule_recomputed_after_every_push(self, engine, plate_world, play):
        """Door state tracks the board, whatever order blocks arrive and leave in."""
        room = plate_world.current_room

        # 1 onto its plate first: still shut
        play(plate_world, "sssddd")
        assert plate_world.player == Coord(4, 4)
        assert not plate_world.all_doors_open(room)

        # 2 onto the other plate: open
        play(plate_world, "waaw")
        assert plate_world.player == Coord(2, 2)
        play(plate_world, "dd")
        assert room.pushables[Coord(5, 2)] == ShapeId.TWO
        assert plate_world.all_doors_open(room)

        # 1 off its plate: still open, 2 is still down
        play(plate_world, "ssd")
        assert room.pushables[Coord(6, 4)] == ShapeId.ONE
        assert plate_world.all_doors_open(room)

        # 2 off its plate: shut again
        results = play(plate_world, "ww")
        assert room.pushables[Coord(5, 1)] == ShapeId.TWO
        assert not plate_world.all_doors_open(room)
        assert Cue.DOOR_CLOSE in cues_of(results)

    def test_pushing_off_and_back_on(self, engine, plate_world, play):
        """The same plate can close and reopen the doors."""
        room = plate_world.current_room
        play(plate_world, "sddd")
        assert plate_world.all_doors_open(room)

        play(plate_world, "d")
        assert room.pushables[Coord(6, 2)] == ShapeId.TWO
        assert not plate_world.all_doors_open(room)

        # walk round to the right of the block and push it back
        play(plate_world, "wddsa")
        assert room.pushables[Coord(5, 2)] == ShapeId.TWO
        assert plate_world.all_doors_open(room)

    def test_plate_room_advances_through_open_door(self, engine, plate_world, play):
        """With the door open, walking onto the exit enters the next room."""
        play(plate_world, "sddd")
        results = play(plate_world, "sdddsss")

        assert results[-1].room_advanced
        assert plate_world.current_index == 1
        assert plate_world.player == CORRIDOR_LEVEL.to_room().spawn


class TestKeyRoom:
    """Tests for key search rooms."""

    def test_decoy_locker_is_empty(self, engine, key_world, play):
        results = play(key_world, "se")

        assert results[-1].cues[0].cue == Cue.NOTHING_USEFUL
        assert not key_world.key_found

    def test_key_locker(self, engine, key_world, play):
        """The locker nearest the centre holds the key, once."""
        results = play(key_world, "ddee")

        assert results[2].cues[0].cue == Cue.KEY_FOUND
        assert results[3].cues[0].cue == Cue.NOTHING_USEFUL
        assert key_world.key_found

    def test_decoy_locker_after_key(self, engine, key_world, play):
        """Once the key is found the other lockers stay empty."""
        play(key_world, "ddee")
        results = play(key_world, "aase")

        assert key_world.player == Coord(1, 2)
        assert results[-1].cues[0].cue == Cue.NOTHING_USEFUL
        assert key_world.key_found
        assert key_world.open_doors == set()

    def test_door_locked_without_key(self, engine, key_world, play):
        """Without the key the door refuses and nothing opens."""
        results = play(key_world, "ddddde")

        assert key_world.player == Coord(6, 1)
        assert key_world.current_index == 0
        assert results[-1].cues[0].cue == Cue.DOOR_LOCKED
        assert key_world.open_doors == set()

    def test_unlock_from_exit_advances_instantly(self, engine, key_world, play):
        """Unlocking the last door while standing on the exit leaves the room."""
        play(key_world, "ddeddd")
        assert key_world.player == Coord(6, 1)
        assert key_world.current_index == 0

        result = engine.apply(key_world, Intent.interact())

        assert [e.cue for e in result.cues] == [Cue.DOOR_OPEN, Cue.ROOM_ENTER]
        assert result.room_advanced
        assert key_world.current_index == 1

    def test_searchables_inert_outside_key_rooms(self, engine):
        world = single_room(engine, "PT")
        engine.apply(world, Intent.move(1, 0))
        result = engine.apply(world, Intent.interact())
        assert result.cues[0].cue == Cue.NOTHING_HERE
        assert not world.key_found

    def test_retry_room_forgets_key(self, engine, key_world, play):
        play(key_world, "dde")
        assert key_world.key_found

        engine.apply(key_world, Intent.retry_room())
        assert not key_world.key_found
        assert key_world.player == Coord(1, 1)


class TestLevers:
    """Tests for lever rooms."""

    def test_hinted_lever_opens_first_door(self, engine, lever_world, play):
        results = play(lever_world, "dse")

        room = lever_world.current_room
        assert results[-1].cues[0].cue == Cue.LEVER_PULL
        assert lever_world.is_door_open(room, Coord(2, 5))
        assert not lever_world.is_door_open(room, Coord(6, 4))
        assert lever_world.next_lever_door == 1

    def test_lever_is_one_shot(self, engine, lever_world, play):
        """A second pull changes nothing."""
        play(lever_world, "dse")
        open_before = set(lever_world.open_doors)

        result = engine.apply(lever_world, Intent.interact())

        assert result.cues[0].cue == Cue.LEVER_ALREADY_PULLED
        assert not result.changed
        assert lever_world.open_doors == open_before
        assert lever_world.next_lever_door == 1

    def test_unhinted_lever_is_dead(self, engine, lever_world, play):
        results = play(lever_world, "dsdde")

        assert results[-1].cues[0].cue == Cue.LEVER_DEAD
        assert lever_world.open_doors == set()
        assert Coord(4, 2) in lever_world.pulled_levers

    def test_levers_open_doors_in_order(self, engine, lever_world, play):
        """Pulling the right-hand lever first still opens the left door first."""
        play(lever_world, "dsdddde")
        room = lever_world.current_room
        assert lever_world.player == Coord(6, 2)
        assert lever_world.is_door_open(room, Coord(2, 5))
        assert not lever_world.is_door_open(room, Coord(6, 4))

    def test_cursor_skips_open_doors(self, engine, lever_world, play):
        """Doors already open are passed over."""
        room = lever_world.current_room
        lever_world.open_door(room, Coord(2, 5))

        play(lever_world, "dse")

        assert lever_world.is_door_open(room, Coord(6, 4))
        assert lever_world.next_lever_door == 2

    def test_exhausted(self, engine, lever_world, play):
        room = lever_world.current_room
        for door in room.doors:
            lever_world.open_door(room, door)

        results = play(lever_world, "dse")
        assert results[-1].cues[0].cue == Cue.LEVER_EXHAUSTED

    def test_full_lever_room(self, engine, lever_world, play):
        """Both wired levers, then the exit, complete a one-room run."""
        play(lever_world, "dse")
        play(lever_world, "dddde")
        assert lever_world.all_doors_open(lever_world.current_room)

        results = play(lever_world, "ddss")
        assert results[-1].run_complete
        assert lever_world.run_complete
        assert results[-1].cues[-1].cue == Cue.RUN_COMPLETE

    def test_levers_inert_outside_lever_rooms(self, engine):
        world = single_room(engine, "PLC", "..D")
        engine.apply(world, Intent.move(1, 0))
        result = engine.apply(world, Intent.interact())
        assert result.cues[0].cue == Cue.NOTHING_HERE
        assert world.open_doors == set()

    def test_entering_resets_levers(self, engine, lever_world, play):
        play(lever_world, "dse")
        engine.apply(lever_world, Intent.retry_room())

        assert lever_world.pulled_levers == set()
        assert lever_world.next_lever_door == 0
        assert lever_world.open_doors == set()


class TestExit:
    """Tests for exit gating and progression."""

    def test_exit_inert_while_door_closed(self, engine, tiny_world, play):
        """Standing on the exit with a closed door does nothing."""
        play(tiny_world, "asssdd")
        assert tiny_world.player == Coord(3, 3)
        assert tiny_world.current_index == 0

    def test_tiny_room_end_to_end(self, engine, tiny_world, play):
        """Visit the exit early, solve the plate, then leave."""
        play(tiny_world, "asssdd")
        assert tiny_world.current_index == 0

        play(tiny_world, "aawwwd")
        assert tiny_world.player == Coord(2, 0)

        results = play(tiny_world, "s")
        room = tiny_world.current_room
        assert room.pushables == {Coord(2, 2): ShapeId.ONE}
        assert tiny_world.is_door_open(room, Coord(3, 2))
        assert [e.cue for e in results[0].cues] == [Cue.PUSH, Cue.PLATE_PRESS, Cue.DOOR_OPEN]

        results = play(tiny_world, "dss")
        assert results[-1].room_advanced
        assert tiny_world.current_index == 1
        assert tiny_world.player == Coord(0, 0)

        results = play(tiny_world, "dd")
        assert results[-1].run_complete
        assert tiny_world.run_complete

    def test_room_without_doors_advances_on_arrival(self, engine):
        world = single_room(engine, "P.E")
        results = [engine.apply(world, Intent.move(1, 0)) for _ in range(2)]
        assert results[-1].run_complete

    def test_interact_on_exit_advances_when_open(self, engine):
        """Interacting on the exit leaves once every door is open."""
        level = LevelDefinition(level_id="gate", name="Gate", rows=("PE.D",))
        world = start_world(engine, level, CORRIDOR_LEVEL)
        world.player = Coord(1, 0)

        locked = engine.apply(world, Intent.interact())
        assert locked.cues[-1].cue == Cue.DOOR_LOCKED
        assert world.current_index == 0

        world.open_door(world.current_room, Coord(3, 0))
        result = engine.apply(world, Intent.interact())
        assert result.room_advanced
        assert world.legend["E"] == "Exit"

    def test_run_complete_rejects_play(self, engine):
        """After the last exit only retry-run and quit are meaningful."""
        world = single_room(engine, "PE")
        engine.apply(world, Intent.move(1, 0))
        assert world.run_complete

        result = engine.apply(world, Intent.move(-1, 0))
        assert not result.success
        assert result.error_code == "RUN_COMPLETE"
        assert world.player == Coord(1, 0)

        result = engine.apply(world, Intent.retry_run())
        assert result.error_code == "NO_HANDLER"


class TestInteraction:
    """Tests for interaction priority and the legend."""

    def test_adjacent_door_wins(self, engine):
        """A neighbouring door is handled before the object underfoot."""
        world = single_room(engine, "DhP")
        world.player = Coord(1, 0)

        result = engine.apply(world, Intent.interact())

        assert result.cues[0].cue == Cue.DOOR_LOCKED
        assert world.legend == {"D": "Door"}

    def test_open_door_reports_already_open(self, engine):
        world = single_room(engine, "PD")
        world.open_door(world.current_room, Coord(1, 0))
        result = engine.apply(world, Intent.interact())
        assert result.cues[0].cue == Cue.DOOR_ALREADY_OPEN

    def test_flavor(self, engine, recorder):
        """Flavor objects speak and join the legend under their own glyph."""
        world = single_room(engine, "Ph")
        engine.apply(world, Intent.move(1, 0))
        recorder.drain()

        result = engine.apply(world, Intent.interact())

        event = result.cues[0]
        assert event.cue == Cue.FLAVOR
        assert event.glyph == "h"
        assert "sleeping" in event.message
        assert world.legend == {"h": "Sleeper"}
        assert recorder.events == [event]

    def test_plate_hint(self, engine, plate_world, play):
        results = play(plate_world, "dddds")
        assert plate_world.player == Coord(5, 2)

        result = engine.apply(plate_world, Intent.interact())
        assert result.cues[0].cue == Cue.PLATE_HINT
        assert plate_world.legend == {"*": "Plate"}

    def test_nothing_here(self, engine):
        world = single_room(engine, "P.")
        result = engine.apply(world, Intent.interact())
        assert result.cues[0].cue == Cue.NOTHING_HERE
        assert not result.changed

    def test_legend_is_insert_only(self, engine):
        """A second discovery of the same glyph changes nothing."""
        world = single_room(engine, "PO")
        engine.apply(world, Intent.move(1, 0))

        first = engine.apply(world, Intent.interact())
        second = engine.apply(world, Intent.interact())

        assert first.changed
        assert not second.changed
        assert world.legend == {"O": "Human artifact"}

    def test_legend_survives_room_retry(self, engine):
        world = single_room(engine, "PO")
        engine.apply(world, Intent.move(1, 0))
        engine.apply(world, Intent.interact())

        result = engine.apply(world, Intent.retry_room())

        assert result.changed
        assert result.cues[0].cue == Cue.ROOM_ENTER
        assert world.legend == {"O": "Human artifact"}
        assert world.player == Coord(0, 0)


class TestApplyIntent:
    """Tests for the apply_intent helper."""

    def test_uses_fresh_engine(self):
        engine = RuleEngine()
        world = single_room(engine, "P.")
        result = apply_intent(world, Intent.from_key("d"))
        assert result.changed
        assert world.player == Coord(1, 0)
