"""Summary: Audio playback for the new-message chime.

Importance: Alerts the operator when inquiries arrive while the console is open.
Alternatives: Use desktop notifications or email alerts instead of sound.
"""

from __future__ import annotations

import logging
import sys
from abc import ABC, abstractmethod
from typing import TextIO


logger = logging.getLogger(__name__)


class AudioPlayer(ABC):
    """Summary: Fire-and-forget sound playback.

    Importance: Playback failures must never interrupt message handling.
    Alternatives: Let callers handle playback errors individually.
    """

    def play(self, resource: str) -> None:
        try:
            self._play(resource)
        except Exception as exc:
            logger.warning("Could not play %s: %s", resource, exc)

    @abstractmethod
    def _play(self, resource: str) -> None:
        """Play a sound resource."""


class TerminalBellPlayer(AudioPlayer):
    """Rings the terminal bell in place of the sound file."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream

    def _play(self, resource: str) -> None:
        stream = self._stream or sys.stdout
        stream.write("\a")
        stream.flush()


class RecordingAudioPlayer(AudioPlayer):
    """Summary: Records chimes for a browser front end to play.

    Importance: Lets the HTTP layer hand chimes to the page that owns the speakers.
    Alternatives: Push chimes over a websocket as they happen.
    """

    def __init__(self) -> None:
        self.played: list[str] = []

    def _play(self, resource: str) -> None:
        self.played.append(resource)

    def drain(self) -> list[str]:
        played, self.played = self.played, []
        return played
