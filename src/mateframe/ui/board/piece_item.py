"""PieceItem: one SVG chess piece that can be picked up and dropped."""

from __future__ import annotations

import chess
from PyQt6.QtCore import QPointF, Qt
from PyQt6.QtGui import QCursor
from PyQt6.QtSvgWidgets import QGraphicsSvgItem
from PyQt6.QtWidgets import QGraphicsItem

from mateframe.ui.resources import piece_renderer

_REST_Z = 1.0
_LIFTED_Z = 10.0
_LIFTED_OPACITY = 0.85


class PieceItem(QGraphicsSvgItem):
    """A piece standing on *square*, scaled to fit one tile.

    ``home`` is the top-left corner the piece rests on; a lifted piece
    follows the mouse and returns there on :meth:`settle` unless it was
    placed somewhere else in the meantime.
    """

    _MARGIN_RATIO = 0.03

    def __init__(
        self, piece: chess.Piece, square: chess.Square, tile_size: int
    ) -> None:
        super().__init__()
        self.piece = piece
        self.square = square
        self.margin = tile_size * self._MARGIN_RATIO
        self._home = QPointF()
        self._lifted = False

        self.setSharedRenderer(piece_renderer(piece))
        self.setCacheMode(QGraphicsItem.CacheMode.NoCache)
        self._fit(tile_size - 2 * self.margin)
        self.setZValue(_REST_Z)
        self.setCursor(QCursor(Qt.CursorShape.PointingHandCursor))

    @property
    def home(self) -> QPointF:
        return QPointF(self._home)

    @property
    def lifted(self) -> bool:
        return self._lifted

    def place(self, x: float, y: float) -> None:
        """Rest the piece with its tile corner at (*x*, *y*)."""
        self._home = QPointF(x + self.margin, y + self.margin)
        self.setPos(self._home)

    def lift(self) -> None:
        self._lifted = True
        self.setFlag(QGraphicsItem.GraphicsItemFlag.ItemIsMovable, True)
        self.setZValue(_LIFTED_Z)
        self.setOpacity(_LIFTED_OPACITY)
        self.setCursor(QCursor(Qt.CursorShape.ClosedHandCursor))

    def settle(self) -> None:
        """Put a lifted piece back on its home square."""
        if self._lifted:
            self.setPos(self._home)
        self._lifted = False
        self.setFlag(QGraphicsItem.GraphicsItemFlag.ItemIsMovable, False)
        self.setZValue(_REST_Z)
        self.setOpacity(1.0)
        self.setCursor(QCursor(Qt.CursorShape.PointingHandCursor))

    def _fit(self, size: float) -> None:
        bounds = self.boundingRect()
        side = max(bounds.width(), bounds.height())
        if side > 0:
            self.setScale(max(size, 1.0) / side)
