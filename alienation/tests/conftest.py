"""
Pytest fixtures for Alienation tests.

The small levels here are laid out so each mechanic can be driven with a
short key script; coordinates in test comments are (x, y).
"""

import pytest

from ..engine_core.cues import RecordingCueSink
from ..engine_core.grid import ShapeId
from ..engine_core.intent import Intent
from ..engine_core.room import RoomRules
from ..engine_core.rules import RuleEngine
from ..engine_core.world import World
from ..levels import LevelDefinition, build_world


# Plates at (5,2) and (5,4); shape 2 at (3,2), shape 1 at (3,4).
# The only door (7,5) sits between the floor and the exit (7,6).
PLATE_LEVEL = LevelDefinition(
    level_id="plate_test",
    name="Plate Test",
    rows=(
        "#########",
        "#P......#",
        "#..2.*..#",
        "#.......#",
        "#..1.*..#",
        "#......D#",
        "#######E#",
    ),
    rules=RoomRules(plate_shape=ShapeId.TWO),
)

# Key locker T at (3,1) is nearest the centre (4,2); I at (1,2) is a decoy.
# The exit (6,1) is reachable, with the door (6,2) right below it.
KEY_LEVEL = LevelDefinition(
    level_id="key_test",
    name="Key Test",
    rows=(
        "########",
        "#P.T..E#",
        "#I...#D#",
        "########",
    ),
    rules=RoomRules(key_search=True),
)

# Hinted levers at (2,2) and (6,2); (4,2) is dead.
# Doors in lever order: (2,5) then (6,4). Exit at (8,4).
LEVER_LEVEL = LevelDefinition(
    level_id="lever_test",
    name="Lever Test",
    rows=(
        "##########",
        "#P.......#",
        "#CL.L.LC.#",
        "#........#",
        "######D#E#",
        "##D#######",
    ),
    rules=RoomRules(lever_doors=True),
)

# Push the 1 down onto '@' to open the door beside the exit.
TINY_LEVEL = LevelDefinition(
    level_id="tiny",
    name="Tiny",
    rows=(
        "..P.",
        "..1.",
        "..@D",
        "...E",
    ),
    rules=RoomRules(plate_shape=ShapeId.ONE),
    plate_glyph="@",
    intro=("A very small room...",),
)

CORRIDOR_LEVEL = LevelDefinition(
    level_id="corridor",
    name="Corridor",
    rows=("P.E",),
)


def start_world(engine: RuleEngine, *levels: LevelDefinition) -> World:
    """Build a World for levels and enter the first room."""
    world = build_world(levels)
    engine.transitions.enter_room(world, 0)
    return world


@pytest.fixture
def recorder() -> RecordingCueSink:
    """Cue sink that keeps everything it is sent."""
    return RecordingCueSink()


@pytest.fixture
def engine(recorder: RecordingCueSink) -> RuleEngine:
    """Rule engine wired to the recorder."""
    return RuleEngine(cues=recorder)


@pytest.fixture
def plate_world(engine: RuleEngine) -> World:
    return start_world(engine, PLATE_LEVEL, CORRIDOR_LEVEL)


@pytest.fixture
def key_world(engine: RuleEngine) -> World:
    return start_world(engine, KEY_LEVEL, CORRIDOR_LEVEL)


@pytest.fixture
def lever_world(engine: RuleEngine) -> World:
    return start_world(engine, LEVER_LEVEL)


@pytest.fixture
def tiny_world(engine: RuleEngine) -> World:
    return start_world(engine, TINY_LEVEL, CORRIDOR_LEVEL)


@pytest.fixture
def play(engine: RuleEngine):
    """
    Drive the engine with a key script, e.g. play(world, "ddse").

    Returns the IntentResult of every key, in order.
    """
    def _play(world: World, keys: str):
        return [engine.apply(world, Intent.from_key(key)) for key in keys]
    return _play
