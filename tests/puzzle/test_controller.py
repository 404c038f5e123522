"""Tests for the puzzle state machine, driven through a fake board."""

from __future__ import annotations

import logging

import chess
import pytest
from fakes import FakeBoard, ManualScheduler

from mateframe.core.branches import position_after
from mateframe.core.grammar import GrammarError
from mateframe.puzzle.controller import PuzzleController, PuzzleTimings
from mateframe.puzzle.definition import DEFAULT_PUZZLES, PuzzleDefinition
from mateframe.puzzle.interfaces import (
    MarkerKind,
    MoveInputEvent,
    MoveInputType,
    PuzzlePhase,
    PuzzleSolved,
    StatusKey,
    StatusTone,
    StatusUpdate,
)

PUZZLE_ONE = DEFAULT_PUZZLES[0].fen
PUZZLE_TWO = DEFAULT_PUZZLES[1].fen
PUZZLE_THREE = DEFAULT_PUZZLES[2].fen
PROMOTION = "8/P6k/8/8/8/8/8/K7 w - - 0 1"
BEFORE_FOOLS_MATE = "rnbqkbnr/pppp1ppp/8/4p3/6P1/5P2/PPPPP2P/RNBQKBNR b KQkq - 0 2"


class Recorder:
    """Collects every event a controller emits."""

    def __init__(self, controller: PuzzleController) -> None:
        self.statuses: list[StatusUpdate] = []
        self.branches: list[tuple[int, int]] = []
        self.phases: list[PuzzlePhase] = []
        self.solved: list[PuzzleSolved] = []
        controller.events.on_status.append(self.statuses.append)
        controller.events.on_branch_changed.append(
            lambda current, total: self.branches.append((current, total))
        )
        controller.events.on_phase_changed.append(self.phases.append)
        controller.events.on_solved.append(self.solved.append)

    @property
    def last_keys(self) -> tuple[StatusKey, ...]:
        return self.statuses[-1].keys


def make(
    board: FakeBoard,
    scheduler: ManualScheduler,
    fen: str,
    moves: str,
    *,
    index: int = 0,
    timings: PuzzleTimings | None = None,
    player_color: chess.Color | None = None,
) -> tuple[PuzzleController, Recorder]:
    controller = PuzzleController(
        PuzzleDefinition(fen, moves, player_color=player_color),
        board,
        scheduler,
        index=index,
        timings=timings,
    )
    return controller, Recorder(controller)


def play(board: FakeBoard, move: str) -> bool:
    """Drive the board's input callback like a drag from *move*[:2] to [2:4]."""
    source, target = move[:2], move[2:4]
    callback = board.callback
    if callback is None:
        return False
    if not callback(MoveInputEvent(MoveInputType.STARTED, source)):
        return False
    accepted = callback(MoveInputEvent(MoveInputType.VALIDATE, source, target))
    kind = MoveInputType.FINISHED if accepted else MoveInputType.CANCELED
    callback(MoveInputEvent(kind, source, target))
    return accepted


class TestConstruction:
    def test_short_form_solution_is_normalised(
        self, board: FakeBoard, scheduler: ManualScheduler
    ) -> None:
        controller, _ = make(board, scheduler, PUZZLE_ONE, "Qxd5,Bxd5,Bxd5,Rad1,Rh1+")
        assert controller.definition.moves == "d6d5,g2d5,b7d5,a1d1,h8h1"
        assert controller.phase == PuzzlePhase.LOADING

    def test_malformed_solution(
        self, board: FakeBoard, scheduler: ManualScheduler
    ) -> None:
        with pytest.raises(GrammarError):
            make(board, scheduler, PUZZLE_ONE, "d6d5,[g2d5")

    def test_empty_solution(self, board: FakeBoard, scheduler: ManualScheduler) -> None:
        with pytest.raises(ValueError):
            make(board, scheduler, PUZZLE_ONE, " , ")

    def test_invalid_position(
        self, board: FakeBoard, scheduler: ManualScheduler
    ) -> None:
        with pytest.raises(ValueError):
            make(board, scheduler, "not a fen", "e2e4")

    def test_branch_count(self, board: FakeBoard, scheduler: ManualScheduler) -> None:
        controller, _ = make(
            board, scheduler, PUZZLE_THREE, "d8h4,[g4h4,g8g1|h2h3,h4h3]"
        )
        assert controller.branch_count == 2


class TestStart:
    def test_player_moves_first(
        self, board: FakeBoard, scheduler: ManualScheduler
    ) -> None:
        controller, events = make(board, scheduler, PUZZLE_ONE, "d6d5,g2d5", index=2)
        controller.start()
        assert controller.phase == PuzzlePhase.AWAITING_PLAYER_MOVE
        assert board.orientation == chess.BLACK
        assert board.callback is not None
        assert scheduler.delays == [300 + 2 * 100]

        scheduler.run_all()
        assert events.statuses == [StatusUpdate((StatusKey.YOUR_TURN,))]
        assert events.branches == [(1, 1)]

    def test_start_is_idempotent(
        self, board: FakeBoard, scheduler: ManualScheduler
    ) -> None:
        controller, _ = make(board, scheduler, PUZZLE_ONE, "d6d5,g2d5")
        controller.start()
        controller.start()
        assert len(scheduler.queue) == 1

    def test_opponent_moves_first(
        self, board: FakeBoard, scheduler: ManualScheduler
    ) -> None:
        controller, events = make(
            board, scheduler, chess.STARTING_FEN, "e2e4,e7e5", player_color=chess.BLACK
        )
        controller.start()
        assert controller.phase == PuzzlePhase.AWAITING_OPPONENT_REPLY
        assert board.orientation == chess.BLACK
        assert board.callback is None
        assert scheduler.delays == [500]

        scheduler.run_all()
        assert controller.phase == PuzzlePhase.AWAITING_PLAYER_MOVE
        assert board.markers[MarkerKind.MOVE] == {"e2", "e4"}
        assert events.last_keys == (StatusKey.YOUR_TURN,)

        assert play(board, "e7e5")
        assert controller.phase == PuzzlePhase.PUZZLE_COMPLETE


class TestLinearPuzzle:
    def test_solving_to_checkmate(
        self, board: FakeBoard, scheduler: ManualScheduler
    ) -> None:
        moves = "d6d5,g2d5,b7d5,a1d1,h8h1"
        controller, events = make(board, scheduler, PUZZLE_ONE, moves)
        controller.start()
        scheduler.run_all()

        assert play(board, "d6d5")
        assert events.statuses[-1] == StatusUpdate(
            (StatusKey.CORRECT,), StatusTone.CORRECT
        )
        assert controller.phase == PuzzlePhase.AWAITING_OPPONENT_REPLY
        assert board.callback is None
        assert scheduler.delays == [500]

        scheduler.run_all()
        assert controller.phase == PuzzlePhase.AWAITING_PLAYER_MOVE
        assert board.positions[-1] == (controller.state.engine.fen(), True)
        assert board.markers[MarkerKind.MOVE] == {"g2", "d5"}

        assert play(board, "b7d5")
        scheduler.run_all()
        assert play(board, "h8h1")

        assert controller.phase == PuzzlePhase.PUZZLE_COMPLETE
        assert events.statuses[-1] == StatusUpdate(
            (StatusKey.CHECKMATE, StatusKey.VICTORY), StatusTone.CHECKMATE
        )
        assert board.markers[MarkerKind.CHECK] == {"g1"}
        assert board.callback is None
        final = position_after(PUZZLE_ONE, moves.split(","))
        assert events.solved == [PuzzleSolved(0, final)]

    def test_check_status(self, board: FakeBoard, scheduler: ManualScheduler) -> None:
        controller, events = make(
            board, scheduler, PUZZLE_TWO, DEFAULT_PUZZLES[1].moves
        )
        controller.start()
        scheduler.run_all()
        assert play(board, "e3g5")
        scheduler.run_all()

        assert play(board, "f6g6")
        assert events.statuses[-1] == StatusUpdate(
            (StatusKey.CHECK, StatusKey.CORRECT), StatusTone.CORRECT
        )
        assert board.markers[MarkerKind.CHECK] == {"g7"}

        scheduler.run_all()
        assert events.last_keys == (StatusKey.YOUR_TURN,)
        assert board.markers[MarkerKind.CHECK] == set()

    def test_completion_after_reply(
        self, board: FakeBoard, scheduler: ManualScheduler
    ) -> None:
        controller, events = make(board, scheduler, chess.STARTING_FEN, "e2e4,e7e5")
        controller.start()
        assert play(board, "e2e4")
        scheduler.run_all()
        assert controller.phase == PuzzlePhase.PUZZLE_COMPLETE
        assert events.statuses[-1] == StatusUpdate(
            (StatusKey.VICTORY,), StatusTone.CORRECT
        )
        assert len(events.solved) == 1


class TestRejectedInput:
    def test_wrong_move(self, board: FakeBoard, scheduler: ManualScheduler) -> None:
        controller, events = make(board, scheduler, PUZZLE_ONE, "d6d5,g2d5")
        controller.start()
        scheduler.run_all()

        assert not play(board, "d6c6")
        assert events.statuses[-1] == StatusUpdate(
            (StatusKey.WRONG_MOVE,), StatusTone.ERROR
        )
        assert controller.state.cursor == 0
        assert controller.state.engine.fen() == chess.Board(PUZZLE_ONE).fen()
        assert controller.phase == PuzzlePhase.AWAITING_PLAYER_MOVE

        assert scheduler.delays == [200]
        scheduler.run_all()
        assert board.positions[-1] == (chess.Board(PUZZLE_ONE).fen(), False)

        assert play(board, "d6d5")

    def test_illegal_move_is_silent(
        self, board: FakeBoard, scheduler: ManualScheduler
    ) -> None:
        controller, events = make(board, scheduler, PUZZLE_ONE, "d6d5,g2d5")
        controller.start()
        scheduler.run_all()
        before = list(events.statuses)

        assert not play(board, "d6d1")
        assert events.statuses == before
        assert controller.state.cursor == 0

    @pytest.mark.parametrize("square", ["e2", "e4", "zz"])
    def test_pickup_rejected(
        self, board: FakeBoard, scheduler: ManualScheduler, square: str
    ) -> None:
        controller, _ = make(board, scheduler, PUZZLE_ONE, "d6d5,g2d5")
        controller.start()
        assert not controller.handle_move_input(
            MoveInputEvent(MoveInputType.STARTED, square)
        )
        assert board.markers[MarkerKind.SOURCE] == set()

    def test_pickup_marks_source(
        self, board: FakeBoard, scheduler: ManualScheduler
    ) -> None:
        controller, _ = make(board, scheduler, PUZZLE_ONE, "d6d5,g2d5")
        controller.start()
        assert controller.handle_move_input(
            MoveInputEvent(MoveInputType.STARTED, "d6")
        )
        assert board.markers[MarkerKind.SOURCE] == {"d6"}
        controller.handle_move_input(MoveInputEvent(MoveInputType.CANCELED, "d6"))
        assert board.markers[MarkerKind.SOURCE] == set()

    def test_cancel_after_accepted_move_takes_it_back(
        self, board: FakeBoard, scheduler: ManualScheduler
    ) -> None:
        controller, _ = make(board, scheduler, PUZZLE_ONE, "d6d5,g2d5,b7d5")
        controller.start()
        scheduler.run_all()
        callback = board.callback
        assert callback is not None
        assert callback(MoveInputEvent(MoveInputType.STARTED, "d6"))
        assert callback(MoveInputEvent(MoveInputType.VALIDATE, "d6", "d5"))
        assert controller.phase == PuzzlePhase.AWAITING_OPPONENT_REPLY

        callback(MoveInputEvent(MoveInputType.CANCELED, "d6", "d5"))
        assert controller.phase == PuzzlePhase.AWAITING_PLAYER_MOVE
        assert controller.state.cursor == 0
        assert controller.state.engine.fen() == PUZZLE_ONE
        assert board.positions[-1] == (PUZZLE_ONE, False)
        assert scheduler.queue == []

        assert play(board, "d6d5")
        scheduler.run_all()
        assert controller.state.cursor == 2
        assert controller.phase == PuzzlePhase.AWAITING_PLAYER_MOVE

    def test_input_ignored_while_opponent_replies(
        self, board: FakeBoard, scheduler: ManualScheduler
    ) -> None:
        controller, _ = make(board, scheduler, PUZZLE_ONE, "d6d5,g2d5,b7d5")
        controller.start()
        scheduler.run_all()
        assert play(board, "d6d5")
        assert not controller.handle_move_input(
            MoveInputEvent(MoveInputType.VALIDATE, "b7", "d5")
        )
        assert controller.state.cursor == 1


class TestMoveIdentity:
    def test_alternative_set(
        self, board: FakeBoard, scheduler: ManualScheduler
    ) -> None:
        controller, _ = make(
            board, scheduler, chess.STARTING_FEN, "e2e4,e7e5,{g1f3|f1c4},b8c6"
        )
        controller.start()
        assert play(board, "e2e4")
        scheduler.run_all()
        assert not play(board, "d2d4")
        scheduler.run_all()
        assert play(board, "f1c4")
        scheduler.run_all()
        assert controller.phase == PuzzlePhase.PUZZLE_COMPLETE
        assert controller.state.played == ["e2e4", "e7e5", "f1c4", "b8c6"]

    @pytest.mark.parametrize("solution", ["a7a8", "a7a8q", "a8=Q"])
    def test_promotion_defaults_to_queen(
        self, board: FakeBoard, scheduler: ManualScheduler, solution: str
    ) -> None:
        controller, events = make(board, scheduler, PROMOTION, solution)
        controller.start()
        assert play(board, "a7a8")
        assert controller.phase == PuzzlePhase.PUZZLE_COMPLETE
        assert events.solved[0].fen.startswith("Q7/7k/")


class TestBranches:
    def test_second_branch_resumes_from_shared_prefix(
        self, board: FakeBoard, scheduler: ManualScheduler
    ) -> None:
        controller, events = make(
            board, scheduler, PUZZLE_THREE, "d8h4,[g4h4,g8g1|h2h3,h4h3]"
        )
        controller.start()
        scheduler.run_all()

        assert play(board, "d8h4")
        scheduler.run_all()
        assert board.markers[MarkerKind.MOVE] == {"g4", "h4"}
        assert play(board, "g8g1")

        assert controller.phase == PuzzlePhase.BRANCH_COMPLETE
        assert events.statuses[-1] == StatusUpdate(
            (StatusKey.CHECKMATE, StatusKey.BRANCH_COMPLETE), StatusTone.CHECKMATE
        )
        assert events.solved == []
        assert scheduler.delays == [1500]

        scheduler.run_next()
        after_first_move = position_after(PUZZLE_THREE, ["d8h4"])
        assert board.positions[-1] == (after_first_move, True)
        assert controller.state.branch_index == 1
        assert controller.state.cursor == 1
        assert events.branches[-1] == (2, 2)
        assert events.last_keys == (StatusKey.NEXT_BRANCH,)
        assert controller.phase == PuzzlePhase.AWAITING_OPPONENT_REPLY
        assert scheduler.delays == [800]

        scheduler.run_next()
        assert controller.state.played == ["d8h4", "h2h3"]
        assert controller.phase == PuzzlePhase.AWAITING_PLAYER_MOVE

        assert play(board, "h4h3")
        assert controller.phase == PuzzlePhase.PUZZLE_COMPLETE
        assert len(events.solved) == 1
        assert events.last_keys == (StatusKey.CHECKMATE, StatusKey.VICTORY)

    def test_immediate_timings(
        self, board: FakeBoard, scheduler: ManualScheduler
    ) -> None:
        controller, _ = make(
            board,
            scheduler,
            PUZZLE_THREE,
            "d8h4,[g4h4,g8g1|h2h3,h4h3]",
            timings=PuzzleTimings.immediate(),
        )
        controller.start()
        assert play(board, "d8h4")
        scheduler.run_all()
        assert play(board, "g8g1")
        assert scheduler.delays == [0]


class TestPermissiveReplies:
    def test_checkmate_before_branch_end(
        self,
        board: FakeBoard,
        scheduler: ManualScheduler,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        controller, events = make(board, scheduler, BEFORE_FOOLS_MATE, "d8h4,a2a3")
        controller.start()
        scheduler.run_all()
        assert play(board, "d8h4")
        assert controller.phase == PuzzlePhase.AWAITING_OPPONENT_REPLY

        with caplog.at_level(logging.WARNING, logger="mateframe.puzzle.controller"):
            scheduler.run_all()
        assert "rejected" in caplog.text
        assert controller.phase == PuzzlePhase.PUZZLE_COMPLETE
        assert events.statuses[-1].tone == StatusTone.CHECKMATE


class TestBoardFailures:
    def test_marker_errors_are_logged(
        self,
        board: FakeBoard,
        scheduler: ManualScheduler,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        board.fail_markers = True
        controller, _ = make(board, scheduler, PUZZLE_ONE, "d6d5,g2d5,b7d5")
        controller.start()
        scheduler.run_all()
        with caplog.at_level(logging.ERROR, logger="mateframe.puzzle.controller"):
            assert play(board, "d6d5")
            scheduler.run_all()
        assert "add_marker failed" in caplog.text
        assert controller.phase == PuzzlePhase.AWAITING_PLAYER_MOVE
        assert controller.state.cursor == 2

    def test_failed_animation_falls_back(
        self, board: FakeBoard, scheduler: ManualScheduler
    ) -> None:
        board.fail_animation = True
        controller, _ = make(board, scheduler, PUZZLE_ONE, "d6d5,g2d5,b7d5")
        controller.start()
        scheduler.run_all()
        assert play(board, "d6d5")
        scheduler.run_all()
        assert board.positions[-1] == (controller.state.engine.fen(), False)
        assert controller.phase == PuzzlePhase.AWAITING_PLAYER_MOVE

    def test_raising_subscriber_does_not_resume_twice(
        self,
        board: FakeBoard,
        scheduler: ManualScheduler,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        controller, recorder = make(
            board, scheduler, chess.STARTING_FEN, "f2f3,e7e5,g2g4,d8h4"
        )

        def explode(_: PuzzleSolved) -> None:
            raise RuntimeError("subscriber failed")

        controller.events.on_solved.append(explode)
        controller.start()
        scheduler.run_all()
        assert play(board, "f2f3")
        scheduler.run_all()
        assert play(board, "g2g4")
        with caplog.at_level(logging.ERROR, logger="mateframe.puzzle.controller"):
            with pytest.raises(RuntimeError, match="subscriber failed"):
                scheduler.run_all()

        final = controller.state.engine.fen()
        assert len(recorder.solved) == 1
        assert controller.state.cursor == 4
        assert controller.phase == PuzzlePhase.PUZZLE_COMPLETE
        assert [pos for pos in board.positions if pos[0] == final] == [(final, True)]
        assert "animated update failed" not in caplog.text
