"""
Projection - Read-only view of a World for renderers.

project() is pure: two calls with no mutation in between return equal views.
compose_frame() lays a view out as plain text (map, legend column, status).
"""

from __future__ import annotations
from dataclasses import dataclass

from .grid import Coord
from .world import World


CONTROLS: tuple[str, ...] = (
    "Controls",
    "WASD Move",
    "E    Interact",
    "R    Retry room",
    "T    Retry run",
    "Q    Quit",
)

LEGEND_PADDING = 3


@dataclass(frozen=True)
class WorldView:
    """What a renderer needs to draw one frame."""
    title: str
    grid: tuple[str, ...]
    legend: tuple[tuple[str, str], ...]
    status: str
    room_index: int
    room_count: int
    run_complete: bool = False


def project(world: World) -> WorldView:
    """Project the current room of a World into a WorldView."""
    room = world.current_room
    grid = tuple(
        "".join(room.glyph_at(Coord(x, y), world, world.player) for x in range(room.width))
        for y in range(room.height)
    )
    legend = tuple(sorted(world.legend.items()))
    return WorldView(
        title=room.name,
        grid=grid,
        legend=legend,
        status=status_line(world),
        room_index=world.current_index,
        room_count=len(world.rooms),
        run_complete=world.run_complete,
    )


def status_line(world: World) -> str:
    room = world.current_room
    status = f"Room {world.current_index + 1}/{len(world.rooms)}: {room.name}"
    if room.rules.key_search:
        status += f"    Key: {'yes' if world.key_found else 'no'}"
    if world.run_complete:
        status += "    ESCAPED"
    return status


def compose_frame(view: WorldView) -> str:
    """
    Lay out a view as text.

    The legend (discovered entries, then controls) runs down the right of
    the map; lines are padded to a fixed width.
    """
    legend_lines = ["LEGEND"]
    legend_lines.extend(f"{glyph}  {label}" for glyph, label in view.legend)
    legend_lines.append("")
    legend_lines.extend(CONTROLS)

    map_width = max((len(row) for row in view.grid), default=0)
    legend_width = max(len(line) for line in legend_lines)
    total_width = map_width + LEGEND_PADDING + legend_width

    lines = [view.title.ljust(total_width)]
    for y in range(max(len(view.grid), len(legend_lines))):
        map_row = view.grid[y] if y < len(view.grid) else ""
        legend_row = legend_lines[y] if y < len(legend_lines) else ""
        line = map_row.ljust(map_width) + " " * LEGEND_PADDING + legend_row
        lines.append(line.ljust(total_width))
    lines.append(view.status.ljust(total_width))
    return "\n".join(lines)
