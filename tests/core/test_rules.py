"""Tests for the RulesEngine adapter."""

from __future__ import annotations

import chess
import pytest

from mateframe.core.rules import MoveSpec, RulesEngine

FOOLS_MATE = "rnb1kbnr/pppp1ppp/8/4p3/6Pq/5P2/PPPPP2P/RNBQKBNR w KQkq - 1 3"
PROMOTION = "8/P6k/8/8/8/8/8/K7 w - - 0 1"


class TestConstruction:
    def test_default_is_starting_position(self) -> None:
        engine = RulesEngine()
        assert engine.fen() == chess.STARTING_FEN
        assert engine.turn() == chess.WHITE

    def test_invalid_fen_raises(self) -> None:
        with pytest.raises(ValueError):
            RulesEngine("not a position")

    def test_load_resets_history(self) -> None:
        engine = RulesEngine()
        engine.move("e4")
        engine.load(PROMOTION)
        assert engine.fen() == PROMOTION
        assert engine.undo() is None


class TestInspection:
    def test_get_piece(self) -> None:
        engine = RulesEngine()
        assert engine.get("e1") == chess.Piece(chess.KING, chess.WHITE)
        assert engine.get("e4") is None

    def test_get_invalid_square(self) -> None:
        assert RulesEngine().get("z9") is None

    def test_board_grid_rank_eight_first(self) -> None:
        grid = RulesEngine().board()
        assert len(grid) == 8 and all(len(row) == 8 for row in grid)
        assert grid[0][0] == chess.Piece(chess.ROOK, chess.BLACK)  # a8
        assert grid[7][4] == chess.Piece(chess.KING, chess.WHITE)  # e1
        assert grid[4][4] is None  # e4

    def test_king_square(self) -> None:
        engine = RulesEngine()
        assert engine.king_square(chess.WHITE) == "e1"
        assert engine.king_square(chess.BLACK) == "e8"

    def test_checkmate_flags(self) -> None:
        engine = RulesEngine(FOOLS_MATE)
        assert engine.in_check()
        assert engine.in_checkmate()
        assert engine.game_over()

    def test_start_is_quiet(self) -> None:
        engine = RulesEngine()
        assert not engine.in_check()
        assert not engine.in_checkmate()
        assert not engine.game_over()


class TestMove:
    def test_short_notation(self) -> None:
        engine = RulesEngine()
        record = engine.move("Nf3")
        assert record is not None
        assert record.lan == "g1f3"
        assert record.san == "Nf3"
        assert engine.turn() == chess.BLACK

    def test_move_spec(self) -> None:
        engine = RulesEngine()
        record = engine.move(MoveSpec("e2", "e4"))
        assert record is not None
        assert record.san == "e4"

    def test_illegal_returns_none_and_keeps_position(self) -> None:
        engine = RulesEngine()
        assert engine.move(MoveSpec("e2", "e5")) is None
        assert engine.move("Ke2") is None
        assert engine.move("garbage") is None
        assert engine.fen() == chess.STARTING_FEN

    def test_bad_square_names(self) -> None:
        assert RulesEngine().move(MoveSpec("x2", "e4")) is None

    def test_promotion_defaults_to_queen(self) -> None:
        engine = RulesEngine(PROMOTION)
        record = engine.move(MoveSpec("a7", "a8"))
        assert record is not None
        assert record.promotion == "q"
        assert record.lan == "a7a8q"
        assert record.san == "a8=Q"

    def test_under_promotion(self) -> None:
        record = RulesEngine(PROMOTION).move(MoveSpec("a7", "a8", "N"))
        assert record is not None
        assert record.lan == "a7a8n"

    def test_invalid_promotion_letter(self) -> None:
        assert RulesEngine(PROMOTION).move(MoveSpec("a7", "a8", "k")) is None

    def test_promotion_letter_ignored_on_plain_move(self) -> None:
        record = RulesEngine().move(MoveSpec("e2", "e4", "q"))
        assert record is not None
        assert record.lan == "e2e4"


class TestUndoAndCopy:
    def test_undo_restores_position(self) -> None:
        engine = RulesEngine()
        engine.move("e4")
        record = engine.undo()
        assert record is not None
        assert record.lan == "e2e4"
        assert engine.fen() == chess.STARTING_FEN

    def test_undo_on_empty_history(self) -> None:
        assert RulesEngine().undo() is None

    def test_copy_is_independent(self) -> None:
        engine = RulesEngine()
        clone = engine.copy()
        clone.move("e4")
        assert engine.fen() == chess.STARTING_FEN
        assert clone.fen() != engine.fen()
