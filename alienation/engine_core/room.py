"""
Room - One level's raw layout, its derived entity state, and its queries.

A room never stores whether a door is open. That lives in World.open_doors,
keyed by (room_id, position), so every query that cares about doors takes
the world as an argument.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import TYPE_CHECKING, Sequence

from .grid import (
    Coord,
    ShapeId,
    Tile,
    TILE_GLYPHS,
    PLAYER_GLYPH,
    DOOR_GLYPH,
    OPEN_DOOR_GLYPH,
    DEFAULT_FLAVOR_GLYPH,
    DEFAULT_PLATE_GLYPH,
)
from .parser import ParsedLevel, parse_level

if TYPE_CHECKING:
    from .world import World


@dataclass(frozen=True)
class RoomRules:
    """
    Which puzzle mechanics a room uses.

    Door policy is declared per room rather than inferred:
    - plate_shape: doors follow the plate rule for this shape kind
    - key_search: one searchable hides a key; doors unlock by interaction
    - lever_doors: hinted levers open doors left-to-right, top-to-bottom
    A room with none of these keeps its doors shut.
    """
    plate_shape: ShapeId | None = None
    key_search: bool = False
    key_position: Coord | None = None
    lever_doors: bool = False

    @property
    def has_plate_rule(self) -> bool:
        return self.plate_shape is not None


class Room:
    """
    A single room of the run.

    The raw rows are the source of truth; reset() re-derives everything else.
    """

    def __init__(
        self,
        room_id: str,
        name: str,
        rows: Sequence[str],
        rules: RoomRules | None = None,
        plate_glyph: str = DEFAULT_PLATE_GLYPH,
        intro: Sequence[str] = (),
    ):
        self.room_id = room_id
        self.name = name
        self.raw_rows: tuple[str, ...] = tuple(rows)
        self.rules = rules or RoomRules()
        self.plate_glyph = plate_glyph
        self.intro: tuple[str, ...] = tuple(intro)
        self._level: ParsedLevel = parse_level(self.raw_rows, plate_glyph)

    def __repr__(self) -> str:
        return f"Room({self.room_id!r}, {self.width}x{self.height})"

    def reset(self) -> None:
        """Rebuild all derived state from the raw rows."""
        self._level = parse_level(self.raw_rows, self.plate_glyph)

    @property
    def derived(self) -> ParsedLevel:
        """The current derived state (tiles plus per-run collections)."""
        return self._level

    # Derived state accessors

    @property
    def width(self) -> int:
        return self._level.width

    @property
    def height(self) -> int:
        return self._level.height

    @property
    def spawn(self) -> Coord:
        return self._level.spawn

    @property
    def exit(self) -> Coord | None:
        return self._level.exit

    @property
    def pushables(self) -> dict[Coord, ShapeId]:
        return self._level.pushables

    @property
    def plates(self) -> set[Coord]:
        return self._level.plates

    @property
    def doors(self) -> set[Coord]:
        return self._level.doors

    @property
    def searchables(self) -> set[Coord]:
        return self._level.searchables

    @property
    def levers(self) -> set[Coord]:
        return self._level.levers

    @property
    def flavors(self) -> set[Coord]:
        return self._level.flavors

    @property
    def flavor_glyphs(self) -> dict[Coord, str]:
        return self._level.flavor_glyphs

    @property
    def hinted_levers(self) -> set[Coord]:
        return self._level.hinted_levers

    def tile_at(self, pos: Coord) -> Tile:
        return self._level.tile_at(pos)

    def in_bounds(self, pos: Coord) -> bool:
        return self._level.in_bounds(pos)

    @property
    def center(self) -> Coord:
        return Coord(self.width // 2, self.height // 2)

    def ordered_doors(self) -> list[Coord]:
        """Doors sorted left-to-right, then top-to-bottom."""
        return sorted(self.doors)

    # Queries

    def is_walkable(self, pos: Coord, world: World) -> bool:
        """Can the player step into pos?"""
        if not self.in_bounds(pos):
            return False
        if self.tile_at(pos) == Tile.WALL:
            return False
        if pos in self.doors and not world.is_door_open(self, pos):
            return False
        if pos in self.pushables:
            return False
        return True

    def is_push_destination_free(self, pos: Coord, world: World) -> bool:
        """Can a pushable be moved into pos?"""
        if not self.in_bounds(pos):
            return False
        if self.tile_at(pos) == Tile.WALL:
            return False
        if pos in self.doors and not world.is_door_open(self, pos):
            return False
        if pos in self.pushables:
            return False
        return True

    def glyph_at(self, pos: Coord, world: World, player: Coord) -> str:
        """
        Display glyph for one cell.

        Precedence: player, pushable, door, static tile.
        """
        if pos == player:
            return PLAYER_GLYPH

        shape = self.pushables.get(pos)
        if shape is not None:
            return shape.glyph

        if pos in self.doors:
            return OPEN_DOOR_GLYPH if world.is_door_open(self, pos) else DOOR_GLYPH

        tile = self.tile_at(pos)
        if tile == Tile.FLAVOR:
            return self.flavor_glyphs.get(pos, DEFAULT_FLAVOR_GLYPH)
        if tile == Tile.PLATE:
            return self.plate_glyph
        return TILE_GLYPHS.get(tile, ".")

    def key_searchable(self) -> Coord | None:
        """
        The searchable that hides the key.

        A fixed key position wins; otherwise the searchable nearest the room
        centre, ties going to the earlier one in row-major order.
        """
        if self.rules.key_position is not None:
            return self.rules.key_position
        if not self.searchables:
            return None
        center = self.center
        return min(self.searchables, key=lambda p: (p.manhattan(center), p.y, p.x))
