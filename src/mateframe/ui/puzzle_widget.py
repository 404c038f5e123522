"""PuzzleWidget: one embeddable puzzle (instruction, progress, status, board)."""

from __future__ import annotations

import logging

import chess
from PyQt6.QtWidgets import QFrame, QLabel, QVBoxLayout, QWidget

from mateframe.puzzle.controller import PuzzleController
from mateframe.puzzle.definition import PuzzleDefinition
from mateframe.puzzle.interfaces import StatusTone, StatusUpdate
from mateframe.puzzle.loader import WidgetSettings
from mateframe.ui.board.board_scene import BoardScene
from mateframe.ui.board.board_view import BoardView
from mateframe.ui.i18n import branch_progress, status_text, t
from mateframe.ui.styles.theme import TONE_NAMES, BoardTheme

_LOGGER = logging.getLogger(__name__)

_EMPTY_FEN = chess.Board.empty().fen()


def _initial_orientation(definition: PuzzleDefinition) -> chess.Color:
    if definition.player_color is not None:
        return definition.player_color
    try:
        return chess.Board(definition.fen).turn
    except ValueError:
        return chess.WHITE


class PuzzleWidget(QFrame):
    """Shows one puzzle and mirrors its controller's events.

    The board scene is created here so that it exists before the controller
    that drives it; :meth:`bind` connects the two.
    """

    def __init__(
        self,
        index: int,
        definition: PuzzleDefinition,
        settings: WidgetSettings | None = None,
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        settings = settings or WidgetSettings()
        self.setObjectName("puzzleWidget")
        self._index = index
        self._controller: PuzzleController | None = None

        try:
            fen = chess.Board(definition.fen).fen()
        except ValueError:
            _LOGGER.warning("Puzzle %d: invalid position %r", index, definition.fen)
            fen = _EMPTY_FEN

        animation_ms = settings.animation_duration_ms if settings.animate_moves else 0
        self._scene = BoardScene(
            fen,
            _initial_orientation(definition),
            theme=BoardTheme.by_name(settings.board_theme),
            show_coordinates=settings.show_coordinates,
            animation_ms=animation_ms,
            parent=self,
        )

        layout = QVBoxLayout(self)
        layout.setContentsMargins(8, 8, 8, 16)
        layout.setSpacing(6)

        self._instruction = QLabel(definition.message)
        self._instruction.setObjectName("instruction")
        self._instruction.setWordWrap(True)
        self._instruction.setVisible(bool(definition.message))
        layout.addWidget(self._instruction)

        self._branch_info = QLabel()
        self._branch_info.setObjectName("branchInfo")
        self._branch_info.setVisible(False)
        layout.addWidget(self._branch_info)

        self._status = QLabel(t().loading)
        self._status.setObjectName("status")
        self._status.setWordWrap(True)
        layout.addWidget(self._status)
        self._apply_tone(StatusTone.NEUTRAL)

        self._board_view = BoardView(self._scene)
        layout.addWidget(self._board_view)

    # ── Properties ───────────────────────────────────────────────────────

    @property
    def index(self) -> int:
        return self._index

    @property
    def board_scene(self) -> BoardScene:
        return self._scene

    @property
    def controller(self) -> PuzzleController | None:
        return self._controller

    def status_text(self) -> str:
        return self._status.text()

    def status_tone(self) -> str:
        return str(self._status.property("tone"))

    def branch_text(self) -> str:
        return self._branch_info.text() if self._branch_info.isVisibleTo(self) else ""

    # ── Wiring ───────────────────────────────────────────────────────────

    def bind(self, controller: PuzzleController) -> None:
        """Follow *controller*'s status and branch events."""
        self._controller = controller
        controller.events.on_status.append(self.show_status)
        controller.events.on_branch_changed.append(self.show_branch)

    def show_status(self, update: StatusUpdate) -> None:
        self._status.setText(status_text(update))
        self._apply_tone(update.tone)

    def show_branch(self, current: int, total: int) -> None:
        if total <= 1:
            self._branch_info.setVisible(False)
            return
        self._branch_info.setText(branch_progress(current, total))
        self._branch_info.setVisible(True)

    def show_load_error(self, error: str) -> None:
        """Keep the loading status; the reason goes to the tooltip."""
        self._status.setText(t().loading)
        self._status.setToolTip(t().load_error.format(error=error))
        self._apply_tone(StatusTone.NEUTRAL)

    def _apply_tone(self, tone: StatusTone) -> None:
        self._status.setProperty("tone", TONE_NAMES[tone])
        style = self._status.style()
        if style is not None:
            style.unpolish(self._status)
            style.polish(self._status)
