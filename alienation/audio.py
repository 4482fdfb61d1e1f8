"""
Audio - Plays cue sounds through pygame's mixer.

SoundCueSink resolves a cue to a WAV file; PygameSoundPlayer is the player
callable it hands that file to. Sound.play() returns immediately and mixes
on pygame's own audio thread, so a turn never waits on playback.
"""

from __future__ import annotations
from pathlib import Path
import logging

import pygame

logger = logging.getLogger(__name__)


class PygameSoundPlayer:
    """
    Plays WAV files as one-shots, loading each file once.

    Usage:
        player = PygameSoundPlayer()
        sink = SoundCueSink(player, base_folder="sounds")
        ...
        player.close()
    """

    def __init__(self, frequency: int = 44100, buffer: int = 512):
        pygame.mixer.pre_init(frequency, -16, 1, buffer)
        pygame.mixer.init()
        self._sounds: dict[Path, pygame.mixer.Sound] = {}
        logger.debug("Mixer ready at %d Hz", frequency)

    def __call__(self, path: Path) -> None:
        sound = self._sounds.get(path)
        if sound is None:
            sound = pygame.mixer.Sound(str(path))
            self._sounds[path] = sound
        sound.play()

    def close(self) -> None:
        self._sounds.clear()
        pygame.mixer.quit()
