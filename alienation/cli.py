"""
Alienation CLI - Command-line interface for the engine.

Usage:
    alienation play [--levels ID ...] [--sound-dir DIR]   Play in the terminal
    alienation levels                   List built-in levels
    alienation show <level_id>          Print a level's starting view
    alienation serve [--host H --port P]  Run the HTTP API
"""

import argparse
import logging
import sys
from typing import Callable, Sequence

from .engine_core.cues import ALIENATION_SOUND_DIR, CueSink, SoundCueSink
from .engine_core.intent import Intent
from .engine_core.projection import compose_frame, project
from .levels import CAMPAIGN, LevelDefinition
from .logging_config import setup_logging
from .session import GameLoop, LoopState, SessionManager

logger = logging.getLogger(__name__)


def main(argv: Sequence[str] | None = None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Alienation - Turn-Based Grid Puzzle Engine",
        prog="alienation",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    play_parser = subparsers.add_parser("play", help="Play in the terminal")
    play_parser.add_argument("--levels", nargs="+", metavar="ID", help="Level ids to play, in order")
    play_parser.add_argument(
        "--sound-dir",
        metavar="DIR",
        default=ALIENATION_SOUND_DIR,
        help="Folder of WAV files; enables sound (needs pygame)",
    )

    subparsers.add_parser("levels", help="List built-in levels")

    show_parser = subparsers.add_parser("show", help="Print a level's starting view")
    show_parser.add_argument("level_id", help="Level id (see 'levels')")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    args = parser.parse_args(argv)

    # Logs go to stderr so they never interleave with the drawn frame
    setup_logging(verbose=args.verbose, stream=sys.stderr)

    if args.command == "play":
        cmd_play(args)
    elif args.command == "levels":
        cmd_levels(args)
    elif args.command == "show":
        cmd_show(args)
    elif args.command == "serve":
        cmd_serve(args)
    else:
        parser.print_help()
        sys.exit(1)


def _resolve_levels(level_ids: Sequence[str] | None) -> list[LevelDefinition]:
    if not level_ids:
        return list(CAMPAIGN)
    catalog = {level.level_id: level for level in CAMPAIGN}
    unknown = [lid for lid in level_ids if lid not in catalog]
    if unknown:
        print(f"Error: Unknown level id(s): {', '.join(unknown)}")
        sys.exit(1)
    if len(set(level_ids)) != len(level_ids):
        print("Error: Each level may appear only once")
        sys.exit(1)
    return [catalog[lid] for lid in level_ids]


def cmd_play(args):
    """Play in the terminal."""
    levels = _resolve_levels(args.levels)
    if not args.sound_dir:
        run_interactive(levels)
        return

    from .audio import PygameSoundPlayer

    player = PygameSoundPlayer()
    try:
        run_interactive(levels, cues=SoundCueSink(player, base_folder=args.sound_dir))
    finally:
        player.close()


def run_interactive(
    levels: Sequence[LevelDefinition],
    read_line: Callable[[str], str] = input,
    write: Callable[[str], None] = print,
    cues: CueSink | None = None,
) -> LoopState:
    """
    Line-oriented play loop.

    Every character of an input line is one key press, so "ddde" walks right
    three times and interacts. Cues are also sent to the optional sink.
    Returns the final loop state.
    """
    session = SessionManager().create_session(levels)
    loop = GameLoop(session, cues=cues)
    write(compose_frame(loop.view()))

    while loop.state != LoopState.QUIT:
        try:
            line = read_line("> ")
        except EOFError:
            break

        for key in line:
            intent = Intent.from_key(key)
            if intent is None:
                continue
            result = loop.handle(intent)
            for message in result.messages:
                write(message)
            if result.error:
                write(result.error)
            if loop.state == LoopState.QUIT:
                break

        if loop.state == LoopState.QUIT:
            break
        write(compose_frame(loop.view()))
        if loop.state == LoopState.RUN_COMPLETE:
            write("Press T to retry the run or Q to quit...")

    return loop.state


def cmd_levels(args):
    """List built-in levels."""
    for index, level in enumerate(CAMPAIGN):
        room = level.to_room()
        print(f"{index}  {level.level_id:<16} {room.width}x{room.height}  {level.name}")


def cmd_show(args):
    """Print a level's starting view."""
    from .engine_core.transitions import RoomTransitionManager

    levels = _resolve_levels([args.level_id])
    world = RoomTransitionManager().new_run(levels)
    print(compose_frame(project(world)))


def cmd_serve(args):
    """Run the HTTP API under uvicorn."""
    import uvicorn

    logger.info("Serving API on %s:%d", args.host, args.port)
    uvicorn.run("alienation.api.app:app", host=args.host, port=args.port)


if __name__ == "__main__":
    main()
