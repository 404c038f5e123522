"""PuzzleController: the solving state machine for one puzzle.

Validates player input against the current branch, plays the scripted
opponent replies and walks through every branch of the solution.  Emits
events via simple callbacks so the UI / tests can subscribe.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from mateframe.core.branches import split_long_form, step_matches, step_token
from mateframe.core.grammar import expand
from mateframe.core.notation import is_long_form
from mateframe.core.rules import DEFAULT_PROMOTION, MoveRecord, MoveSpec
from mateframe.puzzle.definition import PuzzleDefinition
from mateframe.puzzle.interfaces import (
    IBoardView,
    IScheduler,
    MarkerKind,
    MoveInputEvent,
    MoveInputType,
    PuzzlePhase,
    PuzzleSolved,
    StatusKey,
    StatusTone,
    StatusUpdate,
)
from mateframe.puzzle.state import PuzzleState

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PuzzleTimings:
    """Pacing delays in milliseconds."""

    opponent_reply_ms: int = 500
    next_branch_ms: int = 1500
    branch_reply_ms: int = 800
    resync_ms: int = 200
    first_status_ms: int = 300
    first_status_stagger_ms: int = 100

    @classmethod
    def immediate(cls) -> PuzzleTimings:
        """No pauses at all."""
        return cls(0, 0, 0, 0, 0, 0)


# ── Event definitions ────────────────────────────────────────────────────────

StatusCallback = Callable[[StatusUpdate], None]
BranchCallback = Callable[[int, int], None]  # current (1-based), total
PhaseCallback = Callable[[PuzzlePhase], None]
SolvedCallback = Callable[[PuzzleSolved], None]


@dataclass
class PuzzleEvents:
    """Observable callbacks. Multiple handlers per event."""

    on_status: list[StatusCallback] = field(default_factory=list)
    on_branch_changed: list[BranchCallback] = field(default_factory=list)
    on_phase_changed: list[PhaseCallback] = field(default_factory=list)
    on_solved: list[SolvedCallback] = field(default_factory=list)


# ── Controller ───────────────────────────────────────────────────────────────


class PuzzleController:
    """Drives one puzzle through player moves, replies and branch changes.

    Everything runs on the caller's event loop; the only suspension points
    are *scheduler* timers and the board's ``set_position`` completion.
    Board View failures are logged and never interrupt the game state.

    Raises:
        GrammarError: the solution string is malformed.
        ValueError: the starting position is invalid or the solution empty.
    """

    __slots__ = (
        "_definition",
        "_board",
        "_scheduler",
        "_timings",
        "_index",
        "_state",
        "events",
    )

    def __init__(
        self,
        definition: PuzzleDefinition,
        board: IBoardView,
        scheduler: IScheduler,
        *,
        index: int = 0,
        timings: PuzzleTimings | None = None,
    ) -> None:
        definition = definition.normalized()
        branches = expand(definition.moves)
        if not any(branches):
            raise ValueError(f"Puzzle {index} has no moves: {definition.moves!r}")

        self._definition = definition
        self._board = board
        self._scheduler = scheduler
        self._timings = timings or PuzzleTimings()
        self._index = index
        self._state = PuzzleState(definition.fen, branches, definition.player_color)
        self.events = PuzzleEvents()

    # ── Properties ───────────────────────────────────────────────────────

    @property
    def definition(self) -> PuzzleDefinition:
        return self._definition

    @property
    def state(self) -> PuzzleState:
        return self._state

    @property
    def phase(self) -> PuzzlePhase:
        return self._state.phase

    @property
    def index(self) -> int:
        return self._index

    @property
    def branch_count(self) -> int:
        return len(self._state.branches)

    # ── Public API ───────────────────────────────────────────────────────

    def start(self) -> None:
        """Orient the board and hand the first move to whoever has it."""
        if self._state.phase != PuzzlePhase.LOADING:
            return
        state = self._state
        self._board_call(self._board.set_orientation, state.player_color)

        if state.player_turn:
            self._set_phase(PuzzlePhase.AWAITING_PLAYER_MOVE)
            self._enable_input()
            delay = (
                self._timings.first_status_ms
                + self._index * self._timings.first_status_stagger_ms
            )
            self._scheduler.call_later(delay, self._announce_first_turn)
        else:
            self._set_phase(PuzzlePhase.AWAITING_OPPONENT_REPLY)
            self._emit_branch()
            self._scheduler.call_later(
                self._timings.opponent_reply_ms, self._play_opponent_reply
            )

    def handle_move_input(self, event: MoveInputEvent) -> bool:
        """Board View input callback; the return value allows or rejects."""
        if event.type == MoveInputType.STARTED:
            return self._on_started(event)
        if event.type == MoveInputType.VALIDATE:
            return self._on_validate(event)
        if event.type == MoveInputType.FINISHED:
            return self._on_finished()
        if event.type == MoveInputType.CANCELED:
            return self._on_canceled()
        return True

    # ── Player input ─────────────────────────────────────────────────────

    def _on_started(self, event: MoveInputEvent) -> bool:
        state = self._state
        if state.engine.game_over() or not state.player_turn:
            return False
        if state.phase != PuzzlePhase.AWAITING_PLAYER_MOVE:
            return False
        if event.square_from is None:
            return False
        piece = state.engine.get(event.square_from)
        if piece is None or piece.color != state.engine.turn():
            return False
        self._board_call(self._board.add_marker, MarkerKind.SOURCE, event.square_from)
        return True

    def _on_validate(self, event: MoveInputEvent) -> bool:
        if event.square_from is None or event.square_to is None:
            self._board_call(self._board.remove_markers, MarkerKind.SOURCE)
            return False
        if self._state.phase != PuzzlePhase.AWAITING_PLAYER_MOVE:
            return False
        return self._process_move(event.square_from, event.square_to)

    def _on_finished(self) -> bool:
        state = self._state
        if state.waiting_for_opponent:
            state.waiting_for_opponent = False
            self._board_call(self._board.disable_move_input)
            self._scheduler.call_later(
                self._timings.opponent_reply_ms, self._play_opponent_reply
            )
        elif state.phase in (PuzzlePhase.BRANCH_COMPLETE, PuzzlePhase.PUZZLE_COMPLETE):
            self._board_call(self._board.disable_move_input)
        return True

    def _on_canceled(self) -> bool:
        self._board_call(self._board.remove_markers, MarkerKind.SOURCE)
        state = self._state
        if state.waiting_for_opponent:
            # The board dropped a move that was already accepted; take it back.
            state.waiting_for_opponent = False
            state.retract()
            state.player_turn = True
            self._clear_markers()
            self._board_call(self._board.set_position, state.engine.fen(), False)
            self._set_phase(PuzzlePhase.AWAITING_PLAYER_MOVE)
        return True

    def _process_move(self, source: str, target: str) -> bool:
        state = self._state
        self._clear_markers()

        record = state.engine.move(MoveSpec(source, target, DEFAULT_PROMOTION))
        if record is None:
            return False

        expected = state.expected
        if expected is None or not step_matches(expected, record.lan):
            _LOGGER.debug("Puzzle %d: %s is not the solution", self._index, record.lan)
            self._emit_status(StatusTone.ERROR, StatusKey.WRONG_MOVE)
            state.engine.undo()
            self._clear_markers()
            fen = state.engine.fen()
            self._scheduler.call_later(
                self._timings.resync_ms,
                lambda: self._board_call(self._board.set_position, fen, False),
            )
            return False

        state.record(record.lan)
        self._mark_move(record)

        if state.engine.in_checkmate():
            self._mark_check()
            if state.branch_exhausted:
                self._complete_branch(checkmate=True)
            else:
                self._await_opponent()
            return True

        in_check = state.engine.in_check()
        if in_check:
            self._mark_check()

        if state.branch_exhausted:
            self._complete_branch(checkmate=False)
            return True

        if in_check:
            self._emit_status(StatusTone.CORRECT, StatusKey.CHECK, StatusKey.CORRECT)
        else:
            self._emit_status(StatusTone.CORRECT, StatusKey.CORRECT)
        self._await_opponent()
        return True

    def _await_opponent(self) -> None:
        self._state.player_turn = False
        self._state.waiting_for_opponent = True
        self._set_phase(PuzzlePhase.AWAITING_OPPONENT_REPLY)

    # ── Opponent replies ─────────────────────────────────────────────────

    def _play_opponent_reply(self) -> None:
        state = self._state
        if state.phase != PuzzlePhase.AWAITING_OPPONENT_REPLY:
            return
        step = state.expected
        if step is None:
            self._complete_branch(checkmate=state.engine.in_checkmate())
            return

        token = step_token(step)
        if is_long_form(token):
            record = state.engine.move(split_long_form(token))
        else:
            record = state.engine.move(token)
        if record is None:
            _LOGGER.warning(
                "Puzzle %d: scripted reply %r rejected in %s",
                self._index,
                token,
                state.engine.fen(),
            )

        self._show_position(
            state.engine.fen(), lambda: self._after_opponent_reply(token, record)
        )

    def _after_opponent_reply(self, token: str, record: MoveRecord | None) -> None:
        state = self._state
        self._clear_markers()
        if record is not None:
            self._mark_move(record)
        state.record(token if record is None else record.lan)

        if state.engine.in_checkmate():
            self._mark_check()
            self._complete_branch(checkmate=True)
            return

        in_check = state.engine.in_check()
        if in_check:
            self._mark_check()

        if state.branch_exhausted:
            self._complete_branch(checkmate=False)
            return

        state.player_turn = True
        self._set_phase(PuzzlePhase.AWAITING_PLAYER_MOVE)
        if in_check:
            self._emit_status(StatusTone.NEUTRAL, StatusKey.CHECK, StatusKey.YOUR_TURN)
        else:
            self._emit_status(StatusTone.NEUTRAL, StatusKey.YOUR_TURN)
        self._enable_input()

    # ── Branches ─────────────────────────────────────────────────────────

    def _complete_branch(self, *, checkmate: bool) -> None:
        state = self._state
        state.waiting_for_opponent = False
        state.player_turn = False
        tone = StatusTone.CHECKMATE if checkmate else StatusTone.CORRECT
        lead = (StatusKey.CHECKMATE,) if checkmate else ()

        if state.has_more_branches:
            self._set_phase(PuzzlePhase.BRANCH_COMPLETE)
            self._emit_status(tone, *lead, StatusKey.BRANCH_COMPLETE)
            self._scheduler.call_later(
                self._timings.next_branch_ms, self._start_next_branch
            )
            return
        self._finish_puzzle(tone, lead)

    def _finish_puzzle(self, tone: StatusTone, lead: tuple[StatusKey, ...]) -> None:
        self._set_phase(PuzzlePhase.PUZZLE_COMPLETE)
        self._board_call(self._board.disable_move_input)
        self._emit_status(tone, *lead, StatusKey.VICTORY)
        solved = PuzzleSolved(self._index, self._state.engine.fen())
        _LOGGER.info("Puzzle %d solved", self._index)
        for cb in self.events.on_solved:
            cb(solved)

    def _start_next_branch(self) -> None:
        state = self._state
        if state.phase != PuzzlePhase.BRANCH_COMPLETE:
            return
        if not state.advance_branch():
            self._finish_puzzle(StatusTone.CORRECT, ())
            return

        self._set_phase(PuzzlePhase.AWAITING_OPPONENT_REPLY)
        self._emit_branch()
        self._show_position(state.engine.fen(), self._after_branch_reset)

    def _after_branch_reset(self) -> None:
        self._clear_markers()
        self._emit_status(StatusTone.NEUTRAL, StatusKey.NEXT_BRANCH)
        self._scheduler.call_later(
            self._timings.branch_reply_ms, self._play_opponent_reply
        )

    def _announce_first_turn(self) -> None:
        state = self._state
        if state.phase != PuzzlePhase.AWAITING_PLAYER_MOVE or state.cursor:
            return
        self._emit_status(StatusTone.NEUTRAL, StatusKey.YOUR_TURN)
        self._emit_branch()

    # ── Board View calls ─────────────────────────────────────────────────

    def _board_call(self, fn: Callable[..., object], *args: object) -> None:
        try:
            fn(*args)
        except Exception:
            _LOGGER.exception(
                "Puzzle %d: board call %s failed",
                self._index,
                getattr(fn, "__name__", fn),
            )

    def _show_position(self, fen: str, then: Callable[[], None]) -> None:
        """Animate to *fen*, falling back to an instant update, then continue.

        *then* runs exactly once, either from the board or after the fallback.
        """
        resumed = False

        def resume() -> None:
            nonlocal resumed
            if resumed:
                return
            resumed = True
            then()

        try:
            self._board.set_position(fen, True, resume)
        except Exception:
            if resumed:
                raise
            _LOGGER.exception(
                "Puzzle %d: animated update failed, setting position directly",
                self._index,
            )
        else:
            return
        self._board_call(self._board.set_position, fen, False)
        resume()

    def _enable_input(self) -> None:
        self._board_call(self._board.disable_move_input)
        self._board_call(self._board.enable_move_input, self.handle_move_input)

    def _clear_markers(self) -> None:
        self._board_call(self._board.remove_markers, None)

    def _mark_move(self, record: MoveRecord) -> None:
        self._board_call(self._board.add_marker, MarkerKind.MOVE, record.from_square)
        self._board_call(self._board.add_marker, MarkerKind.MOVE, record.to_square)

    def _mark_check(self) -> None:
        engine = self._state.engine
        square = engine.king_square(engine.turn())
        if square is not None:
            self._board_call(self._board.add_marker, MarkerKind.CHECK, square)

    # ── Event emission ───────────────────────────────────────────────────

    def _set_phase(self, phase: PuzzlePhase) -> None:
        if self._state.phase == phase:
            return
        _LOGGER.debug(
            "Puzzle %d: %s -> %s", self._index, self._state.phase.name, phase.name
        )
        self._state.phase = phase
        for cb in self.events.on_phase_changed:
            cb(phase)

    def _emit_status(self, tone: StatusTone, *keys: StatusKey) -> None:
        update = StatusUpdate(keys, tone)
        for cb in self.events.on_status:
            cb(update)

    def _emit_branch(self) -> None:
        current = self._state.branch_index + 1
        total = len(self._state.branches)
        for cb in self.events.on_branch_changed:
            cb(current, total)
