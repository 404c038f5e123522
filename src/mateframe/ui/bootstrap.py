"""Qt application bootstrap helpers."""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from mateframe.puzzle.loader import WidgetConfig

if TYPE_CHECKING:
    from PyQt6.QtWidgets import QApplication

_LOGGER = logging.getLogger(__name__)


def _configure_application(app: QApplication) -> None:
    """Apply app-wide settings and theme."""
    from mateframe.ui.styles.theme import APP_STYLE

    app.setApplicationName("mateframe")
    app.setStyle("Fusion")
    app.setStyleSheet(APP_STYLE)


def run_application(
    config: WidgetConfig | None = None,
    argv: list[str] | None = None,
    message_sink: Callable[[dict[str, Any]], None] | None = None,
) -> int:
    """Create and run the puzzle window."""
    from PyQt6.QtWidgets import QApplication

    from mateframe.ui.main_window import PuzzleWindow

    app = QApplication(sys.argv if argv is None else argv)
    _configure_application(app)

    config = config or WidgetConfig()
    _LOGGER.info("Starting with %d puzzle(s)", len(config.puzzles))
    window = PuzzleWindow(config)
    if message_sink is not None:
        window.host.message_posted.connect(message_sink)
    window.initialize()
    window.show()

    return app.exec()
