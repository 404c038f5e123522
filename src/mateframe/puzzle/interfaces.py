"""Abstract interfaces and shared value types for the puzzle layer.

The state machine in :mod:`mateframe.puzzle.controller` depends only on
these ABCs, so tests can drive it with a fake board and a manual clock.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum, IntEnum, auto

import chess

# ── Puzzle phase FSM states ──────────────────────────────────────────────────


class PuzzlePhase(IntEnum):
    """Finite-state-machine states for one puzzle instance."""

    LOADING = auto()
    AWAITING_PLAYER_MOVE = auto()
    AWAITING_OPPONENT_REPLY = auto()
    BRANCH_COMPLETE = auto()
    PUZZLE_COMPLETE = auto()


# ── Status vocabulary ────────────────────────────────────────────────────────


class StatusKey(Enum):
    """Outcome categories shown in the status line.

    Values are the field names of :class:`mateframe.ui.i18n.Strings`.
    """

    LOADING = "loading"
    YOUR_TURN = "your_turn"
    CORRECT = "correct"
    VICTORY = "victory"
    WRONG_MOVE = "wrong_move"
    CHECKMATE = "checkmate"
    CHECK = "check"
    BRANCH_COMPLETE = "branch_complete"
    NEXT_BRANCH = "next_branch"


class StatusTone(IntEnum):
    NEUTRAL = 0
    CORRECT = auto()
    ERROR = auto()
    CHECKMATE = auto()


@dataclass(frozen=True, slots=True)
class StatusUpdate:
    """One status message: translated parts joined in order."""

    keys: tuple[StatusKey, ...]
    tone: StatusTone = StatusTone.NEUTRAL


@dataclass(frozen=True, slots=True)
class PuzzleSolved:
    """Emitted once, when every branch of a puzzle has been solved."""

    index: int
    fen: str


# ── Board input ──────────────────────────────────────────────────────────────


class MarkerKind(IntEnum):
    SOURCE = auto()  # square a piece was picked up from
    MOVE = auto()  # from/to squares of the last accepted move
    CHECK = auto()  # king in check


class MoveInputType(IntEnum):
    STARTED = auto()
    VALIDATE = auto()
    FINISHED = auto()
    CANCELED = auto()


@dataclass(frozen=True, slots=True)
class MoveInputEvent:
    type: MoveInputType
    square_from: str | None = None
    square_to: str | None = None


MoveInputCallback = Callable[[MoveInputEvent], bool]


# ── Abstract interfaces ──────────────────────────────────────────────────────


class IBoardView(ABC):
    """Interface for the graphical board a puzzle is played on."""

    @abstractmethod
    def when_initialized(self, callback: Callable[[], None]) -> None:
        """Run *callback* once the board is ready (immediately if it is)."""

    @abstractmethod
    def set_position(
        self,
        fen: str,
        animate: bool = True,
        on_done: Callable[[], None] | None = None,
    ) -> None:
        """Show *fen*; *on_done* runs exactly once when the update is visible.

        Implementations that raise must not have called *on_done*.
        """

    @abstractmethod
    def set_orientation(self, color: chess.Color) -> None:
        """Put *color* at the bottom of the board."""

    @abstractmethod
    def enable_move_input(self, callback: MoveInputCallback) -> None:
        """Start reporting drag/click input to *callback*.

        ``STARTED`` and ``VALIDATE`` events are allowed or rejected by the
        callback's return value; a rejected move snaps back.
        """

    @abstractmethod
    def disable_move_input(self) -> None: ...

    @abstractmethod
    def add_marker(self, kind: MarkerKind, square: str) -> None: ...

    @abstractmethod
    def remove_markers(self, kind: MarkerKind | None = None) -> None:
        """Remove every marker of *kind* (all markers when ``None``)."""


class IScheduler(ABC):
    """Interface for the single-threaded event loop's one-shot timers."""

    @abstractmethod
    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> None:
        """Run *callback* once on the event loop after *delay_ms*."""
