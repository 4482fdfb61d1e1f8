"""
Campaign - The built-in three-room escape.

Room 1 (Storage Bay): push shape 2 onto the plate to open the door.
Room 2 (Lab Ward): search the lockers for the key, then unlock the door.
Room 3 (Lever Gauntlet): pull the levers marked by a 'C' beside them;
each opens the next door left-to-right.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Sequence

from ..engine_core.grid import ShapeId, DEFAULT_PLATE_GLYPH
from ..engine_core.room import Room, RoomRules
from ..engine_core.world import World


@dataclass(frozen=True)
class LevelDefinition:
    """A named level: raw rows plus the rules its room plays by."""
    level_id: str
    name: str
    rows: tuple[str, ...]
    rules: RoomRules = field(default_factory=RoomRules)
    plate_glyph: str = DEFAULT_PLATE_GLYPH
    intro: tuple[str, ...] = ()

    def to_room(self) -> Room:
        return Room(
            room_id=self.level_id,
            name=self.name,
            rows=self.rows,
            rules=self.rules,
            plate_glyph=self.plate_glyph,
            intro=self.intro,
        )


STORAGE_BAY = LevelDefinition(
    level_id="storage_bay",
    name="Room 1... Storage Bay",
    rows=(
        "######################################################################################",
        "#P...............O..................1.......................................#....E..#",
        "#.......................##############......................................#.......#",
        "#.......................#..........#..............*.........................D.......#",
        "#.....O.................#..........#........................................#########",
        "#.......................#..........#................................................#",
        "#.......................##############..............................................#",
        "#.........2...........................................3.............................#",
        "#.................................................................O.................#",
        "######################################################################################",
    ),
    rules=RoomRules(plate_shape=ShapeId.TWO),
    intro=(
        "You are an escaped alien deep inside Area 51...",
        "Move with WASD... interact with E... retry with R... quit with Q...",
        "Push the right shape onto the plate to open the door...",
    ),
)

LAB_WARD = LevelDefinition(
    level_id="lab_ward",
    name="Room 2... Lab Ward",
    rows=(
        "######################################################################################",
        "#P....T..........T.............T...........T..............T...................D...E#",
        "#........##############..................##############.......................######",
        "#........#............#..................#............#............................#",
        "#....T...#............#..................#............#..........T.................#",
        "#........#............#..................#............#............................#",
        "#........##############..................##############............................#",
        "#......................T..........................................................#",
        "######################################################################################",
    ),
    rules=RoomRules(key_search=True),
    intro=("Lockers line the ward... one of them must hold a key...",),
)

LEVER_GAUNTLET = LevelDefinition(
    level_id="lever_gauntlet",
    name="Room 3... Lever Gauntlet",
    rows=(
        "#====================================================================================#",
        "#h......L..0....L......D...==..h...==......==[][]==[][]...............D............E#",
        "#....................CL==..==........==....CL==...............======...L==...........#",
        "#.........=====........==..==........==......==========h......==........==...........#",
        "#L........=====........==..============......D.......==.......==......CL==...........#",
        "#.........=====........==....................======..==[]...[]==........==...........#",
        "#......................================....CL==..==..===========..==...L==Y..........#",
        "#P............L........G==============Y.......==..==...............==....==...........#",
        "#====================================================================================#",
    ),
    rules=RoomRules(lever_doors=True),
    intro=("Bone-white levers jut from the walls... only some of them are wired...",),
)

CAMPAIGN: tuple[LevelDefinition, ...] = (STORAGE_BAY, LAB_WARD, LEVER_GAUNTLET)


def build_world(levels: Sequence[LevelDefinition] = CAMPAIGN) -> World:
    """
    Build a fresh World with one Room per level.

    The World is not yet inside a room; call
    RoomTransitionManager.enter_room(world, 0) before playing.
    """
    if not levels:
        raise ValueError("A campaign needs at least one level")
    # open doors are keyed by room id
    ids = [level.level_id for level in levels]
    if len(set(ids)) != len(ids):
        raise ValueError("Each level may appear only once")
    return World(rooms=[level.to_room() for level in levels])
