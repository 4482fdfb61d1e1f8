"""
Cues - Fire-and-forget notifications emitted while resolving intents.

The engine emits a CueEvent for every narrative or audible outcome (door
unlocked, key found, lever pulled, ...). It never waits on a sink and never
reads anything back; sinks decide what to do (record, log, play a sound).

Sinks are injected into the RuleEngine, scoped to one run or session.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable
import logging
import os

logger = logging.getLogger(__name__)

ALIENATION_SOUND_DIR = os.getenv("ALIENATION_SOUND_DIR", None)


class Cue(Enum):
    """Named cue kinds."""
    ROOM_ENTER = "room-enter"
    RUN_COMPLETE = "run-complete"

    # Movement
    PUSH = "push"
    PUSH_HEAVY = "push-heavy"
    PLATE_PRESS = "plate-press"

    # Doors
    DOOR_OPEN = "door-open"
    DOOR_CLOSE = "door-close"
    DOOR_LOCKED = "door-locked"
    DOOR_ALREADY_OPEN = "door-already-open"

    # Interactions
    FLAVOR = "flavor"
    KEY_FOUND = "key-found"
    NOTHING_USEFUL = "nothing-useful"
    LEVER_PULL = "lever-pull"
    LEVER_DEAD = "lever-dead"
    LEVER_ALREADY_PULLED = "lever-already-pulled"
    LEVER_EXHAUSTED = "lever-exhausted"
    PLATE_HINT = "plate-hint"
    NOTHING_HERE = "nothing-here"


@dataclass(frozen=True)
class CueEvent:
    """One emitted cue, with the text shown to the player."""
    cue: Cue
    message: str = ""
    glyph: str | None = None  # For flavor cues: which object


class CueSink(ABC):
    """Receives cues. Implementations must not touch World or Room."""

    @abstractmethod
    def emit(self, event: CueEvent) -> None:
        """Accept one cue. Must return promptly."""
        ...


class NullCueSink(CueSink):
    """Drops every cue."""

    def emit(self, event: CueEvent) -> None:
        pass


class RecordingCueSink(CueSink):
    """Keeps cues in memory until drained."""

    def __init__(self):
        self.events: list[CueEvent] = []

    def emit(self, event: CueEvent) -> None:
        self.events.append(event)

    def drain(self) -> list[CueEvent]:
        events = self.events.copy()
        self.events.clear()
        return events

    @property
    def cues(self) -> list[Cue]:
        return [e.cue for e in self.events]


class LoggingCueSink(CueSink):
    """Writes cues to a logger at DEBUG level."""

    def __init__(self, log: logging.Logger | None = None):
        self.log = log or logger

    def emit(self, event: CueEvent) -> None:
        self.log.debug("cue %s glyph=%s %s", event.cue.value, event.glyph, event.message)


class FanoutCueSink(CueSink):
    """Forwards every cue to several sinks, in order."""

    def __init__(self, *sinks: CueSink):
        self.sinks = list(sinks)

    def emit(self, event: CueEvent) -> None:
        for sink in self.sinks:
            sink.emit(event)


# Sound keys to file names
SOUND_FILES: dict[str, str] = {
    "button": "Button.wav",
    "key": "Key.wav",
    "scrape": "Knife Scrape.wav",
    "door": "Metal Door.wav",
    "portal": "Portal.wav",
    "locker": "Locker.wav",
    "plate": "Plate.wav",
    "sleepy": "Sleepy.wav",
    "window": "Window.wav",
    "green": "Green.wav",
    "doughnaut": "Doughnaut.wav",
    "lever": "Lever.wav",
}

CUE_SOUNDS: dict[Cue, str] = {
    Cue.PLATE_PRESS: "plate",
    Cue.PUSH_HEAVY: "scrape",
    Cue.DOOR_OPEN: "door",
    Cue.DOOR_CLOSE: "door",
    Cue.DOOR_LOCKED: "door",
    Cue.KEY_FOUND: "key",
    Cue.NOTHING_USEFUL: "locker",
    Cue.LEVER_PULL: "lever",
    Cue.LEVER_DEAD: "lever",
    Cue.RUN_COMPLETE: "portal",
}

FLAVOR_SOUNDS: dict[str, str] = {
    "h": "sleepy",
    "[": "window",
    "]": "window",
    "Y": "green",
    "0": "portal",
    "O": "doughnaut",
    "F": "doughnaut",
}

DEFAULT_SOUND = "button"


def sound_for(event: CueEvent) -> str | None:
    """Sound key for a cue, or None if the cue is silent."""
    if event.cue == Cue.FLAVOR:
        return FLAVOR_SOUNDS.get(event.glyph or "", DEFAULT_SOUND)
    return CUE_SOUNDS.get(event.cue)


class SoundCueSink(CueSink):
    """
    Maps cues to sound files and hands them to a player callable.

    The player does the actual (non-blocking) playback; missing files are
    skipped quietly, as is any cue with no sound.
    """

    def __init__(
        self,
        player: Callable[[Path], None],
        base_folder: str | Path | None = None,
    ):
        self.player = player
        self.base_folder = Path(base_folder or ALIENATION_SOUND_DIR or ".")

    def resolve(self, event: CueEvent) -> Path | None:
        key = sound_for(event)
        if key is None:
            return None
        file_name = SOUND_FILES.get(key)
        if file_name is None:
            return None
        path = self.base_folder / file_name
        if not path.exists():
            logger.debug("sound file missing for %s: %s", key, path)
            return None
        return path

    def emit(self, event: CueEvent) -> None:
        path = self.resolve(event)
        if path is not None:
            self.player(path)
