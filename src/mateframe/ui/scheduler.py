"""Qt-backed one-shot timers for the puzzle state machine."""

from __future__ import annotations

from collections.abc import Callable

from PyQt6.QtCore import QTimer

from mateframe.puzzle.interfaces import IScheduler


class QtScheduler(IScheduler):
    """Runs callbacks on the Qt event loop via ``QTimer.singleShot``."""

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> None:
        QTimer.singleShot(max(0, int(delay_ms)), callback)
