"""
Level Parser - Turns level text into a tile grid and entity placements.

Parsing is a pure function of the raw rows. Rooms call it at construction
and again on every reset, so derived state is always rebuilt, never patched.

Tolerance rules:
- Width is the longest row; cells past the end of a short row are walls
- Unknown glyphs are floor
- A level with no spawn starts the player at (0, 0)
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Sequence

from .grid import (
    Coord,
    EntityKind,
    ShapeId,
    Tile,
    HINT_GLYPH,
    DEFAULT_PLATE_GLYPH,
    classify,
)


@dataclass
class ParsedLevel:
    """
    Everything derived from one pass over a level's raw rows.

    Equality is structural, so two parses of the same rows compare equal.
    """
    width: int
    height: int
    tiles: tuple[tuple[Tile, ...], ...]
    spawn: Coord = Coord(0, 0)
    exit: Coord | None = None

    pushables: dict[Coord, ShapeId] = field(default_factory=dict)
    plates: set[Coord] = field(default_factory=set)
    doors: set[Coord] = field(default_factory=set)
    searchables: set[Coord] = field(default_factory=set)
    levers: set[Coord] = field(default_factory=set)
    flavors: set[Coord] = field(default_factory=set)
    flavor_glyphs: dict[Coord, str] = field(default_factory=dict)

    # Levers with a hint glyph orthogonally adjacent in the raw text
    hinted_levers: set[Coord] = field(default_factory=set)

    def tile_at(self, pos: Coord) -> Tile:
        """Tile at pos; anything outside the grid reads as wall."""
        if not self.in_bounds(pos):
            return Tile.WALL
        return self.tiles[pos.y][pos.x]

    def in_bounds(self, pos: Coord) -> bool:
        return 0 <= pos.x < self.width and 0 <= pos.y < self.height


def parse_level(rows: Sequence[str], plate_glyph: str = DEFAULT_PLATE_GLYPH) -> ParsedLevel:
    """
    Parse level rows into a ParsedLevel.

    Args:
        rows: Level text, top row first
        plate_glyph: Which character marks pressure plates in this level

    Returns:
        A freshly built ParsedLevel
    """
    height = len(rows)
    width = max((len(row) for row in rows), default=0)

    spawn = Coord(0, 0)
    exit_pos: Coord | None = None
    pushables: dict[Coord, ShapeId] = {}
    plates: set[Coord] = set()
    doors: set[Coord] = set()
    searchables: set[Coord] = set()
    levers: set[Coord] = set()
    flavors: set[Coord] = set()
    flavor_glyphs: dict[Coord, str] = {}

    grid: list[tuple[Tile, ...]] = []
    for y, row in enumerate(rows):
        tile_row: list[Tile] = []
        for x in range(width):
            if x >= len(row):
                tile_row.append(Tile.WALL)
                continue

            glyph = row[x]
            spec = classify(glyph, plate_glyph)
            pos = Coord(x, y)
            tile_row.append(spec.tile)

            if spec.entity is EntityKind.SPAWN:
                spawn = pos
            elif spec.entity is EntityKind.EXIT:
                exit_pos = pos
            elif spec.entity is EntityKind.DOOR:
                doors.add(pos)
            elif spec.entity is EntityKind.PLATE:
                plates.add(pos)
            elif spec.entity is EntityKind.PUSHABLE:
                pushables[pos] = spec.shape
            elif spec.entity is EntityKind.SEARCHABLE:
                searchables.add(pos)
            elif spec.entity is EntityKind.LEVER:
                levers.add(pos)
            elif spec.entity is EntityKind.FLAVOR:
                flavors.add(pos)
                flavor_glyphs[pos] = glyph
        grid.append(tuple(tile_row))

    # Second pass reads the raw text, not the derived tiles
    hinted_levers = {lever for lever in levers if _has_adjacent_hint(rows, lever)}

    return ParsedLevel(
        width=width,
        height=height,
        tiles=tuple(grid),
        spawn=spawn,
        exit=exit_pos,
        pushables=pushables,
        plates=plates,
        doors=doors,
        searchables=searchables,
        levers=levers,
        flavors=flavors,
        flavor_glyphs=flavor_glyphs,
        hinted_levers=hinted_levers,
    )


def _raw_glyph(rows: Sequence[str], pos: Coord) -> str | None:
    if pos.y < 0 or pos.y >= len(rows):
        return None
    row = rows[pos.y]
    if pos.x < 0 or pos.x >= len(row):
        return None
    return row[pos.x]


def _has_adjacent_hint(rows: Sequence[str], lever: Coord) -> bool:
    return any(_raw_glyph(rows, n) == HINT_GLYPH for n in lever.neighbors())
