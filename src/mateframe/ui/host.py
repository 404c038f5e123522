"""Notifications to the embedding host: content height and solved puzzles.

Messages are plain dicts shaped like the ``postMessage`` payloads a web
host expects::

    {"type": "CHESS_PUZZLE_HEIGHT", "height": 1480}
    {"type": "CHESS_PUZZLE_SOLVED", "puzzleIndex": 0, "fen": "...", "solved": True}
"""

from __future__ import annotations

import json
import logging
from typing import Any, TextIO

from PyQt6.QtCore import QObject, pyqtSignal

from mateframe.puzzle.interfaces import PuzzleSolved

_LOGGER = logging.getLogger(__name__)

HEIGHT_MESSAGE = "CHESS_PUZZLE_HEIGHT"
SOLVED_MESSAGE = "CHESS_PUZZLE_SOLVED"


def height_message(height: int) -> dict[str, Any]:
    return {"type": HEIGHT_MESSAGE, "height": int(height)}


def solved_message(solved: PuzzleSolved) -> dict[str, Any]:
    return {
        "type": SOLVED_MESSAGE,
        "puzzleIndex": solved.index,
        "fen": solved.fen,
        "solved": True,
    }


class HostChannel(QObject):
    """Emits host messages as a Qt signal.

    Signals:
        message_posted(dict): One message, see the module docstring.
    """

    message_posted = pyqtSignal(dict)

    def notify_height(self, height: int) -> None:
        self._post(height_message(height))

    def notify_solved(self, solved: PuzzleSolved) -> None:
        self._post(solved_message(solved))

    def _post(self, message: dict[str, Any]) -> None:
        _LOGGER.debug("Host message: %s", message)
        self.message_posted.emit(message)


class JsonLinesSink:
    """Writes every host message to *stream* as one JSON object per line."""

    __slots__ = ("_stream",)

    def __init__(self, stream: TextIO) -> None:
        self._stream = stream

    def __call__(self, message: dict[str, Any]) -> None:
        self._stream.write(json.dumps(message, ensure_ascii=False) + "\n")
        self._stream.flush()
