"""Visual theme constants and QSS styles for the puzzle widget."""

from __future__ import annotations

from dataclasses import dataclass

from PyQt6.QtGui import QColor

from mateframe.puzzle.interfaces import MarkerKind, StatusTone


@dataclass(frozen=True)
class BoardTheme:
    """Colour scheme for the chessboard and its square markers."""

    light_square: QColor
    dark_square: QColor
    marker_move: QColor  # from/to of the last accepted move
    marker_source: QColor  # square a piece was picked up from
    marker_check: QColor  # king in check
    coord_light: QColor  # coordinate text on light squares
    coord_dark: QColor  # coordinate text on dark squares

    @classmethod
    def classic(cls) -> BoardTheme:
        return cls(
            light_square=QColor(240, 217, 181),  # tan
            dark_square=QColor(181, 136, 99),  # brown
            marker_move=QColor(155, 199, 0, 105),  # green
            marker_source=QColor(255, 255, 0, 102),  # yellow
            marker_check=QColor(255, 0, 0, 128),  # red
            coord_light=QColor(181, 136, 99),
            coord_dark=QColor(240, 217, 181),
        )

    @classmethod
    def blue(cls) -> BoardTheme:
        return cls(
            light_square=QColor(222, 227, 230),
            dark_square=QColor(140, 162, 173),
            marker_move=QColor(155, 199, 0, 105),
            marker_source=QColor(255, 255, 0, 102),
            marker_check=QColor(255, 0, 0, 128),
            coord_light=QColor(140, 162, 173),
            coord_dark=QColor(222, 227, 230),
        )

    @classmethod
    def green(cls) -> BoardTheme:
        return cls(
            light_square=QColor(236, 238, 220),
            dark_square=QColor(112, 149, 120),
            marker_move=QColor(155, 199, 0, 105),
            marker_source=QColor(255, 255, 0, 102),
            marker_check=QColor(255, 0, 0, 128),
            coord_light=QColor(112, 149, 120),
            coord_dark=QColor(236, 238, 220),
        )

    @classmethod
    def by_name(cls, name: str) -> BoardTheme:
        """Theme called *name*; unknown names fall back to ``classic``."""
        factory = _THEMES.get(name.strip().lower(), cls.classic)
        return factory()

    def marker_color(self, kind: MarkerKind) -> QColor:
        if kind == MarkerKind.SOURCE:
            return self.marker_source
        if kind == MarkerKind.CHECK:
            return self.marker_check
        return self.marker_move


_THEMES = {
    "classic": BoardTheme.classic,
    "blue": BoardTheme.blue,
    "green": BoardTheme.green,
}

THEME_NAMES: list[str] = list(_THEMES)

# Value of the ``tone`` dynamic property on the status label.
TONE_NAMES: dict[StatusTone, str] = {
    StatusTone.NEUTRAL: "neutral",
    StatusTone.CORRECT: "correct",
    StatusTone.ERROR: "error",
    StatusTone.CHECKMATE: "checkmate",
}


# ── Application-wide QSS ────────────────────────────────────────────────────

APP_STYLE = """
QMainWindow, QScrollArea, QWidget#puzzleContainer {
    background: #ffffff;
}

QFrame#puzzleWidget {
    background: #ffffff;
    border: none;
}

QLabel {
    color: #2c3e50;
    font-family: "Helvetica Neue", "Segoe UI", sans-serif;
}

QLabel#instruction {
    font-size: 15px;
    font-weight: bold;
}

QLabel#branchInfo {
    font-size: 12px;
    color: #7f8c8d;
    background: #f0f0f0;
    border-radius: 4px;
    padding: 4px 8px;
}

QLabel#status {
    font-size: 14px;
    border-radius: 4px;
    padding: 6px 10px;
}
QLabel#status[tone="neutral"] {
    color: #2c3e50;
    background: #ecf0f1;
}
QLabel#status[tone="correct"] {
    color: #1e8449;
    background: #d5f5e3;
}
QLabel#status[tone="error"] {
    color: #922b21;
    background: #fadbd8;
}
QLabel#status[tone="checkmate"] {
    color: #ffffff;
    background: #8e44ad;
    font-weight: bold;
}

QGraphicsView {
    border: none;
}
"""
