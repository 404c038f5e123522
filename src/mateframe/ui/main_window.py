"""PuzzleWindow: the page holding every puzzle widget."""

from __future__ import annotations

import logging

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import QMainWindow, QScrollArea, QVBoxLayout, QWidget

from mateframe.puzzle.collection import PuzzleSet, PuzzleSlot
from mateframe.puzzle.definition import PuzzleDefinition
from mateframe.puzzle.interfaces import IBoardView, IScheduler
from mateframe.puzzle.loader import WidgetConfig
from mateframe.ui.host import HostChannel
from mateframe.ui.i18n import set_language, t
from mateframe.ui.puzzle_widget import PuzzleWidget
from mateframe.ui.scheduler import QtScheduler

_LOGGER = logging.getLogger(__name__)

HEIGHT_NOTIFY_MS = 1000


class PuzzleWindow(QMainWindow):
    """Top-level window: a scrollable column of puzzles plus the host channel."""

    def __init__(
        self,
        config: WidgetConfig | None = None,
        scheduler: IScheduler | None = None,
    ) -> None:
        super().__init__()
        self._config = config or WidgetConfig()
        self._scheduler = scheduler or QtScheduler()
        self._widgets: list[PuzzleWidget] = []
        self.host = HostChannel(self)

        set_language(self._config.settings.language)
        self.setWindowTitle(t().window_title)
        self.setMinimumSize(360, 480)
        self.resize(560, 820)

        self._container = QWidget()
        self._container.setObjectName("puzzleContainer")
        self._layout = QVBoxLayout(self._container)
        self._layout.setContentsMargins(12, 12, 12, 12)
        self._layout.setSpacing(12)
        self._layout.setAlignment(Qt.AlignmentFlag.AlignTop)

        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        scroll.setHorizontalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAlwaysOff)
        scroll.setWidget(self._container)
        self.setCentralWidget(scroll)

        self._puzzles = PuzzleSet(
            self._config.puzzles,
            self._scheduler,
            self._config.settings.timings,
        )
        self._puzzles.events.on_slot_ready.append(self._on_slot_ready)
        self._puzzles.events.on_solved.append(self.host.notify_solved)

    # ── Properties ───────────────────────────────────────────────────────

    @property
    def puzzles(self) -> PuzzleSet:
        return self._puzzles

    @property
    def widgets(self) -> list[PuzzleWidget]:
        return list(self._widgets)

    # ── Public API ───────────────────────────────────────────────────────

    def initialize(self) -> bool:
        """Build every puzzle once; later calls are ignored."""
        if not self._puzzles.initialize(self._create_board):
            _LOGGER.debug("Puzzle page already initialised")
            return False
        self._scheduler.call_later(HEIGHT_NOTIFY_MS, self.notify_height)
        return True

    def content_height(self) -> int:
        return self._container.sizeHint().height()

    def notify_height(self) -> None:
        self.host.notify_height(self.content_height())

    # ── Internal helpers ─────────────────────────────────────────────────

    def _create_board(self, index: int, definition: PuzzleDefinition) -> IBoardView:
        widget = PuzzleWidget(index, definition, self._config.settings)
        self._layout.addWidget(widget)
        self._widgets.append(widget)
        return widget.board_scene

    def _on_slot_ready(self, slot: PuzzleSlot) -> None:
        widget = self._widgets[slot.index]
        if slot.controller is not None:
            widget.bind(slot.controller)
        else:
            widget.show_load_error(slot.error or "")
