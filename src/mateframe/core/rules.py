"""RulesEngine: a thin adapter over :mod:`chess` (python-chess).

The puzzle layer talks to the rules only through this class, so the
contract stays small: load a position, inspect it, apply / undo a move and
serialise it back to FEN.
"""

from __future__ import annotations

from dataclasses import dataclass

import chess

DEFAULT_PROMOTION = "q"

_PROMOTION_LETTERS = "qrbn"


@dataclass(frozen=True, slots=True)
class MoveSpec:
    """A move given by squares, e.g. ``MoveSpec("e7", "e8", "q")``."""

    from_square: str
    to_square: str
    promotion: str | None = None


@dataclass(frozen=True, slots=True)
class MoveRecord:
    """A move that the engine accepted."""

    from_square: str
    to_square: str
    promotion: str | None
    san: str

    @property
    def lan(self) -> str:
        """Long-form token: from + to + optional promotion letter."""
        return f"{self.from_square}{self.to_square}{self.promotion or ''}"


class RulesEngine:
    """Mutable chess position with legality checks and undo.

    Args:
        fen: Starting position.  Raises :class:`ValueError` when invalid.
    """

    __slots__ = ("_board",)

    def __init__(self, fen: str = chess.STARTING_FEN) -> None:
        self._board = chess.Board(fen)

    # ── Inspection ───────────────────────────────────────────────────────

    def turn(self) -> chess.Color:
        return self._board.turn

    def get(self, square: str) -> chess.Piece | None:
        try:
            return self._board.piece_at(chess.parse_square(square))
        except ValueError:
            return None

    def in_check(self) -> bool:
        return self._board.is_check()

    def in_checkmate(self) -> bool:
        return self._board.is_checkmate()

    def game_over(self) -> bool:
        return self._board.is_game_over()

    def board(self) -> list[list[chess.Piece | None]]:
        """8x8 grid, rank 8 first, file a first."""
        return [
            [
                self._board.piece_at(chess.square(file, rank))
                for file in range(8)
            ]
            for rank in range(7, -1, -1)
        ]

    def king_square(self, color: chess.Color) -> str | None:
        sq = self._board.king(color)
        return None if sq is None else chess.square_name(sq)

    def fen(self) -> str:
        return self._board.fen()

    # ── Mutation ─────────────────────────────────────────────────────────

    def load(self, fen: str) -> None:
        """Reset to *fen*, dropping the move history."""
        self._board = chess.Board(fen)

    def move(self, spec: str | MoveSpec) -> MoveRecord | None:
        """Apply a move given in short notation or as a :class:`MoveSpec`.

        Returns ``None`` (and leaves the position untouched) when the move
        cannot be parsed or is illegal.
        """
        move = self._resolve(spec)
        if move is None:
            return None
        record = self._record(move)
        self._board.push(move)
        return record

    def undo(self) -> MoveRecord | None:
        if not self._board.move_stack:
            return None
        move = self._board.pop()
        return self._record(move)

    def copy(self) -> RulesEngine:
        clone = RulesEngine.__new__(RulesEngine)
        clone._board = self._board.copy()
        return clone

    # ── Internal helpers ─────────────────────────────────────────────────

    def _resolve(self, spec: str | MoveSpec) -> chess.Move | None:
        if isinstance(spec, str):
            try:
                return self._board.parse_san(spec.strip())
            except ValueError:
                return None

        try:
            from_sq = chess.parse_square(spec.from_square)
            to_sq = chess.parse_square(spec.to_square)
        except ValueError:
            return None

        move = chess.Move(from_sq, to_sq)
        if self._is_promotion(move):
            letter = (spec.promotion or DEFAULT_PROMOTION).lower()
            if letter not in _PROMOTION_LETTERS:
                return None
            move = chess.Move(
                from_sq, to_sq, promotion=chess.PIECE_SYMBOLS.index(letter)
            )
        if not self._board.is_legal(move):
            return None
        return move

    def _is_promotion(self, move: chess.Move) -> bool:
        piece = self._board.piece_at(move.from_square)
        if piece is None or piece.piece_type != chess.PAWN:
            return False
        return chess.square_rank(move.to_square) in (0, 7)

    def _record(self, move: chess.Move) -> MoveRecord:
        """Describe *move*; it must be legal in the current position."""
        return MoveRecord(
            from_square=chess.square_name(move.from_square),
            to_square=chess.square_name(move.to_square),
            promotion=(
                chess.piece_symbol(move.promotion) if move.promotion else None
            ),
            san=self._board.san(move),
        )
