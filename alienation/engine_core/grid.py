"""
Grid Primitives - Coordinates, tile kinds, shape kinds and the glyph table.

The glyph table is the single mapping from level text to tiles and entities.
Both the parser and the renderer read it, so the two never disagree about
what a character means.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum


class Tile(Enum):
    """Static terrain kinds, derived once per parse."""
    EMPTY = "empty"
    WALL = "wall"
    EXIT = "exit"
    DOOR = "door"
    PLATE = "plate"
    FLAVOR = "flavor"
    INTERACTABLE = "interactable"


class ShapeId(Enum):
    """Pushable block kinds. The value is the glyph used in level text."""
    ONE = "1"
    TWO = "2"
    THREE = "3"
    BARREL = "&"

    @property
    def glyph(self) -> str:
        return self.value


class EntityKind(Enum):
    """What a glyph places into a room's per-run collections."""
    SPAWN = "spawn"
    EXIT = "exit"
    DOOR = "door"
    PLATE = "plate"
    PUSHABLE = "pushable"
    SEARCHABLE = "searchable"
    LEVER = "lever"
    FLAVOR = "flavor"
    HINT = "hint"


@dataclass(frozen=True, order=True)
class Coord:
    """
    A grid position.

    Frozen so it can key dicts and sets; ordered by (x, y).
    """
    x: int
    y: int

    def offset(self, dx: int, dy: int) -> Coord:
        return Coord(self.x + dx, self.y + dy)

    def neighbors(self) -> tuple[Coord, Coord, Coord, Coord]:
        """Orthogonal neighbours in up, down, left, right order."""
        return (
            self.offset(0, -1),
            self.offset(0, 1),
            self.offset(-1, 0),
            self.offset(1, 0),
        )

    def manhattan(self, other: Coord) -> int:
        return abs(self.x - other.x) + abs(self.y - other.y)


@dataclass(frozen=True)
class GlyphSpec:
    """How one level-text character is interpreted."""
    tile: Tile
    entity: EntityKind | None = None
    shape: ShapeId | None = None


# Glyph constants shared by parser, rules and renderer
PLAYER_GLYPH = "P"
EXIT_GLYPH = "E"
DOOR_GLYPH = "D"
OPEN_DOOR_GLYPH = "/"
HINT_GLYPH = "C"
INTERACT_GLYPH = "T"
DEFAULT_FLAVOR_GLYPH = "O"
DEFAULT_PLATE_GLYPH = "*"
PLATE_GLYPHS = ("*", "@")

FLAVOR_GLYPHS = ("O", "F", "h", "Y", "0", "[", "]")

WALL = GlyphSpec(Tile.WALL)
EMPTY = GlyphSpec(Tile.EMPTY)
PLATE = GlyphSpec(Tile.PLATE, EntityKind.PLATE)

GLYPH_TABLE: dict[str, GlyphSpec] = {
    "#": WALL,
    "=": WALL,
    ".": EMPTY,
    PLAYER_GLYPH: GlyphSpec(Tile.EMPTY, EntityKind.SPAWN),
    EXIT_GLYPH: GlyphSpec(Tile.EXIT, EntityKind.EXIT),
    DOOR_GLYPH: GlyphSpec(Tile.DOOR, EntityKind.DOOR),
    "I": GlyphSpec(Tile.INTERACTABLE, EntityKind.SEARCHABLE),
    "T": GlyphSpec(Tile.INTERACTABLE, EntityKind.SEARCHABLE),
    "L": GlyphSpec(Tile.INTERACTABLE, EntityKind.LEVER),
    HINT_GLYPH: GlyphSpec(Tile.EMPTY, EntityKind.HINT),
    **{shape.glyph: GlyphSpec(Tile.EMPTY, EntityKind.PUSHABLE, shape) for shape in ShapeId},
    **{glyph: GlyphSpec(Tile.FLAVOR, EntityKind.FLAVOR) for glyph in FLAVOR_GLYPHS},
}

# Static tile glyphs for rendering. Plate and flavor glyphs depend on the room.
TILE_GLYPHS: dict[Tile, str] = {
    Tile.EMPTY: ".",
    Tile.WALL: "#",
    Tile.EXIT: EXIT_GLYPH,
    Tile.DOOR: DOOR_GLYPH,
    Tile.PLATE: DEFAULT_PLATE_GLYPH,
    Tile.FLAVOR: DEFAULT_FLAVOR_GLYPH,
    Tile.INTERACTABLE: INTERACT_GLYPH,
}


def classify(glyph: str, plate_glyph: str = DEFAULT_PLATE_GLYPH) -> GlyphSpec:
    """
    Look up a level-text character.

    The plate glyph is chosen per level; the other plate glyph is then plain
    floor. Unknown characters are floor too.
    """
    if glyph == plate_glyph:
        return PLATE
    return GLYPH_TABLE.get(glyph, EMPTY)
