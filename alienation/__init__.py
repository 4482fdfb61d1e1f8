"""
Alienation - Turn-Based Grid Puzzle Engine

A deterministic, rules-driven engine for room-by-room escape puzzles.
The engine parses level text into rooms and provides:
- Movement with pushable blocks
- Prioritised interactions (doors, objects, lockers, levers, plates, exits)
- Puzzle predicates and room progression
- A read-only projection for renderers and a cue stream for audio
"""

__version__ = "0.1.0"
