"""BoardScene: the QGraphicsScene that draws a puzzle board and its pieces.

It is the Qt implementation of :class:`~mateframe.puzzle.interfaces.IBoardView`.
The scene keeps its own display :class:`chess.Board`; it never decides
whether a move is correct, it only reports input to the registered callback.
"""

from __future__ import annotations

from collections.abc import Callable

import chess
from PyQt6.QtCore import (
    QAbstractAnimation,
    QEasingCurve,
    QObject,
    QParallelAnimationGroup,
    QPointF,
    QPropertyAnimation,
    Qt,
)
from PyQt6.QtGui import QBrush, QColor, QFont, QPen
from PyQt6.QtWidgets import (
    QGraphicsRectItem,
    QGraphicsScene,
    QGraphicsSceneMouseEvent,
    QGraphicsSimpleTextItem,
)

from mateframe.puzzle.interfaces import (
    IBoardView,
    MarkerKind,
    MoveInputCallback,
    MoveInputEvent,
    MoveInputType,
)
from mateframe.ui.board.piece_item import PieceItem
from mateframe.ui.styles.theme import BoardTheme

_MARKER_Z: dict[MarkerKind, float] = {
    MarkerKind.MOVE: 0.5,
    MarkerKind.SOURCE: 0.6,
    MarkerKind.CHECK: 0.7,
}


class BoardScene(QGraphicsScene):
    """Renders the board, coordinates, square markers and piece items."""

    TILE = 80  # px per square

    def __init__(
        self,
        fen: str = chess.STARTING_FEN,
        orientation: chess.Color = chess.WHITE,
        *,
        theme: BoardTheme | None = None,
        show_coordinates: bool = False,
        animation_ms: int = 300,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._theme = theme or BoardTheme.classic()
        self._board = chess.Board(fen)
        self._flipped = orientation == chess.BLACK
        self._show_coordinates = show_coordinates
        self._animation_ms = animation_ms

        # Interaction state
        self._input_callback: MoveInputCallback | None = None
        self._selected_sq: chess.Square | None = None
        self._dragging_item: PieceItem | None = None

        # Animation state
        self._active_anim: QParallelAnimationGroup | None = None
        self._pending_done: Callable[[], None] | None = None

        # Visual layers
        self._square_items: dict[chess.Square, QGraphicsRectItem] = {}
        self._coord_items: list[QGraphicsSimpleTextItem] = []
        self._piece_items: dict[chess.Square, PieceItem] = {}
        self._markers: dict[MarkerKind, dict[chess.Square, QGraphicsRectItem]] = {
            kind: {} for kind in MarkerKind
        }

        self._draw_board()
        self._sync_pieces()

    # ── IBoardView ───────────────────────────────────────────────────────

    def when_initialized(self, callback: Callable[[], None]) -> None:
        callback()

    def set_position(
        self,
        fen: str,
        animate: bool = True,
        on_done: Callable[[], None] | None = None,
    ) -> None:
        """Show *fen*, sliding the pieces that moved when *animate* is set."""
        new_board = chess.Board(fen)
        self._finish_animation()
        self._abort_drag()

        pairs = self._moved_pieces(new_board) if animate else []
        if not pairs or self._animation_ms <= 0:
            self._board = new_board
            self._sync_pieces()
            if on_done:
                on_done()
            return

        t = self.TILE
        group = QParallelAnimationGroup(self)
        for from_sq, to_sq in pairs:
            item = self._piece_items.pop(from_sq)
            captured = self._piece_items.pop(to_sq, None)
            if captured is not None:
                self.removeItem(captured)
            self._piece_items[to_sq] = item
            item.square = to_sq
            item.setZValue(2)

            vf, vr = self._visual_coords(to_sq)
            anim = QPropertyAnimation(item, b"pos", group)
            anim.setDuration(self._animation_ms)
            anim.setStartValue(item.pos())
            anim.setEndValue(QPointF(vf * t + item.margin, vr * t + item.margin))
            anim.setEasingCurve(QEasingCurve.Type.OutCubic)
            group.addAnimation(anim)

        self._board = new_board
        self._pending_done = on_done
        group.finished.connect(self._on_animation_finished)
        self._active_anim = group
        group.start(QAbstractAnimation.DeletionPolicy.DeleteWhenStopped)

    def set_orientation(self, color: chess.Color) -> None:
        """Put *color* at the bottom and redraw."""
        flipped = color == chess.BLACK
        if flipped == self._flipped:
            return
        self._flipped = flipped
        self._finish_animation()
        self._abort_drag()
        self._draw_board()
        self._sync_pieces()
        self._redraw_markers()

    def enable_move_input(self, callback: MoveInputCallback) -> None:
        self._input_callback = callback

    def disable_move_input(self) -> None:
        self._input_callback = None
        self._abort_drag()

    def add_marker(self, kind: MarkerKind, square: str) -> None:
        sq = chess.parse_square(square)
        layer = self._markers[kind]
        if sq in layer:
            return
        color = self._theme.marker_color(kind)
        layer[sq] = self._make_highlight(sq, color, _MARKER_Z[kind])

    def remove_markers(self, kind: MarkerKind | None = None) -> None:
        kinds = list(MarkerKind) if kind is None else [kind]
        for k in kinds:
            for item in self._markers[k].values():
                self.removeItem(item)
            self._markers[k].clear()

    # ── Other public API ─────────────────────────────────────────────────

    def fen(self) -> str:
        """Position currently on display."""
        return self._board.fen()

    def is_flipped(self) -> bool:
        return self._flipped

    def is_animating(self) -> bool:
        return self._active_anim is not None

    def accepts_input(self) -> bool:
        return self._input_callback is not None

    def markers(self, kind: MarkerKind) -> set[str]:
        """Square names currently marked with *kind*."""
        return {chess.square_name(sq) for sq in self._markers[kind]}

    def piece_item_at(self, square: str) -> PieceItem | None:
        return self._piece_items.get(chess.parse_square(square))

    def square_center(self, square: str) -> QPointF:
        """Scene coordinates of the centre of *square*."""
        vf, vr = self._visual_coords(chess.parse_square(square))
        t = self.TILE
        return QPointF(vf * t + t / 2, vr * t + t / 2)

    def set_theme(self, theme: BoardTheme) -> None:
        self._theme = theme
        self._draw_board()
        self._redraw_markers()

    def set_show_coordinates(self, visible: bool) -> None:
        """Show or hide rank/file coordinate labels."""
        self._show_coordinates = visible
        for item in self._coord_items:
            item.setVisible(visible)

    def set_animation_ms(self, duration: int) -> None:
        """Piece slide duration; ``0`` disables animation."""
        self._animation_ms = max(0, duration)

    # ── Board drawing ────────────────────────────────────────────────────

    def _draw_board(self) -> None:
        """Draw or redraw the 64 squares and coordinates."""
        for sq_item in self._square_items.values():
            self.removeItem(sq_item)
        self._square_items.clear()
        for coord_item in self._coord_items:
            self.removeItem(coord_item)
        self._coord_items.clear()

        t = self.TILE
        font = QFont()
        font.setPointSize(max(9, t // 8))

        for sq in chess.SQUARES:
            f, r = chess.square_file(sq), chess.square_rank(sq)
            vf, vr = self._visual_coords(sq)
            is_light = (f + r) % 2 == 1
            color = self._theme.light_square if is_light else self._theme.dark_square
            text_color = self._theme.coord_light if is_light else self._theme.coord_dark
            rect = QGraphicsRectItem(vf * t, vr * t, t, t)
            rect.setBrush(QBrush(color))
            rect.setPen(QPen(Qt.PenStyle.NoPen))
            rect.setZValue(0)
            self.addItem(rect)
            self._square_items[sq] = rect

            # Rank numbers (left edge)
            if vf == 0:
                self._add_coord(str(r + 1), text_color, font, vf * t + 2, vr * t + 1)

            # File letters (bottom edge)
            if vr == 7:
                x, y = vf * t + t - 12, vr * t + t - 16
                self._add_coord(chess.FILE_NAMES[f], text_color, font, x, y)

        self.setSceneRect(0, 0, 8 * t, 8 * t)

    def _add_coord(
        self, label: str, color: QColor, font: QFont, x: float, y: float
    ) -> None:
        txt = QGraphicsSimpleTextItem(label)
        txt.setFont(font)
        txt.setBrush(QBrush(color))
        txt.setPos(x, y)
        txt.setZValue(0.3)
        txt.setVisible(self._show_coordinates)
        self.addItem(txt)
        self._coord_items.append(txt)

    def _redraw_markers(self) -> None:
        marked = {kind: list(layer) for kind, layer in self._markers.items()}
        self.remove_markers()
        for kind, squares in marked.items():
            for sq in squares:
                self.add_marker(kind, chess.square_name(sq))

    # ── Piece synchronisation ────────────────────────────────────────────

    def _sync_pieces(self) -> None:
        """Re-create all piece items from the display board."""
        for item in self._piece_items.values():
            self.removeItem(item)
        self._piece_items.clear()

        t = self.TILE
        for sq, piece in self._board.piece_map().items():
            item = PieceItem(piece, sq, t)
            vf, vr = self._visual_coords(sq)
            item.place(vf * t, vr * t)
            self.addItem(item)
            self._piece_items[sq] = item

    def _moved_pieces(
        self, new_board: chess.Board
    ) -> list[tuple[chess.Square, chess.Square]]:
        """Pair vacated squares with newly occupied ones holding the same piece."""
        old_map = self._board.piece_map()
        new_map = new_board.piece_map()
        vacated = [sq for sq, piece in old_map.items() if new_map.get(sq) != piece]
        arrived = [sq for sq, piece in new_map.items() if old_map.get(sq) != piece]

        pairs: list[tuple[chess.Square, chess.Square]] = []
        for to_sq in arrived:
            for from_sq in vacated:
                if old_map[from_sq] == new_map[to_sq] and from_sq in self._piece_items:
                    pairs.append((from_sq, to_sq))
                    vacated.remove(from_sq)
                    break
        return pairs

    def _on_animation_finished(self) -> None:
        self._active_anim = None
        self._sync_pieces()
        done, self._pending_done = self._pending_done, None
        if done:
            done()

    def _finish_animation(self) -> None:
        """Jump a running animation to its end, running its continuation."""
        anim = self._active_anim
        if anim is None:
            return
        anim.finished.disconnect(self._on_animation_finished)
        anim.stop()
        self._on_animation_finished()

    # ── Mouse interaction ────────────────────────────────────────────────

    def mousePressEvent(self, event: QGraphicsSceneMouseEvent | None) -> None:
        if self._input_callback is None or event is None or self.is_animating():
            return super().mousePressEvent(event)

        sq = self._pos_to_square(event.scenePos())
        if sq is None:
            self._cancel_selection()
            return super().mousePressEvent(event)

        # Clicking a target with a piece selected → try the move
        if self._selected_sq is not None:
            if sq == self._selected_sq:
                self._cancel_selection()
                return
            if not self._same_side(self._selected_sq, sq):
                self._attempt_move(self._selected_sq, sq)
                return
            self._cancel_selection()

        item = self._piece_items.get(sq)
        if item is None:
            return super().mousePressEvent(event)
        started = self._input_callback(
            MoveInputEvent(MoveInputType.STARTED, chess.square_name(sq))
        )
        if not started:
            return super().mousePressEvent(event)

        self._selected_sq = sq
        item.lift()
        self._dragging_item = item
        super().mousePressEvent(event)

    def mouseReleaseEvent(self, event: QGraphicsSceneMouseEvent | None) -> None:
        item = self._dragging_item
        if item is not None and event is not None:
            self._dragging_item = None
            drop_sq = self._pos_to_square(event.scenePos())
            if drop_sq is not None and drop_sq != item.square:
                self._attempt_move(item.square, drop_sq)
                return
            # Dropped on its own square: keep it selected for click-to-move
            item.settle()

        super().mouseReleaseEvent(event)

    def _attempt_move(self, from_sq: chess.Square, to_sq: chess.Square) -> None:
        callback = self._input_callback
        self._selected_sq = None
        self._dragging_item = None
        item = self._piece_items.get(from_sq)
        if callback is None:
            if item is not None:
                item.settle()
            return

        from_name, to_name = chess.square_name(from_sq), chess.square_name(to_sq)
        accepted = callback(MoveInputEvent(MoveInputType.VALIDATE, from_name, to_name))
        if item is not None:
            item.settle()
        if accepted:
            self._push_display_move(from_sq, to_sq)
            callback(MoveInputEvent(MoveInputType.FINISHED, from_name, to_name))
        else:
            callback(MoveInputEvent(MoveInputType.CANCELED, from_name, to_name))

    def _push_display_move(self, from_sq: chess.Square, to_sq: chess.Square) -> None:
        move = chess.Move(from_sq, to_sq)
        piece = self._board.piece_at(from_sq)
        if (
            piece is not None
            and piece.piece_type == chess.PAWN
            and chess.square_rank(to_sq) in (0, 7)
        ):
            move = chess.Move(from_sq, to_sq, promotion=chess.QUEEN)
        if self._board.is_legal(move):
            self._board.push(move)
        self._sync_pieces()

    def _same_side(self, a: chess.Square, b: chess.Square) -> bool:
        piece_a, piece_b = self._board.piece_at(a), self._board.piece_at(b)
        if piece_a is None or piece_b is None:
            return False
        return piece_a.color == piece_b.color

    def _cancel_selection(self) -> None:
        sq = self._selected_sq
        self._abort_drag()
        if sq is not None and self._input_callback is not None:
            self._input_callback(
                MoveInputEvent(MoveInputType.CANCELED, chess.square_name(sq))
            )

    def _abort_drag(self) -> None:
        if self._dragging_item is not None:
            self._dragging_item.settle()
            self._dragging_item = None
        self._selected_sq = None

    # ── Coordinate helpers ───────────────────────────────────────────────

    def _visual_coords(self, sq: chess.Square) -> tuple[int, int]:
        """Convert a board square to visual column/row."""
        file, rank = chess.square_file(sq), chess.square_rank(sq)
        if self._flipped:
            return 7 - file, rank
        return file, 7 - rank

    def _pos_to_square(self, pos: QPointF) -> chess.Square | None:
        """Scene position → board square."""
        t = self.TILE
        col = int(pos.x() // t)
        row = int(pos.y() // t)
        if not (0 <= col < 8 and 0 <= row < 8):
            return None
        if self._flipped:
            return chess.square(7 - col, row)
        return chess.square(col, 7 - row)

    def _make_highlight(
        self, sq: chess.Square, color: QColor, z: float
    ) -> QGraphicsRectItem:
        """Create a coloured overlay rectangle on a square."""
        t = self.TILE
        vf, vr = self._visual_coords(sq)
        rect = QGraphicsRectItem(vf * t, vr * t, t, t)
        rect.setBrush(QBrush(color))
        rect.setPen(QPen(Qt.PenStyle.NoPen))
        rect.setZValue(z)
        self.addItem(rect)
        return rect


IBoardView.register(BoardScene)
