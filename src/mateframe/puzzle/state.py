"""PuzzleState: mutable progress of one puzzle instance."""

from __future__ import annotations

import logging

import chess

from mateframe.core.branches import (
    Branch,
    BranchSet,
    Step,
    common_prefix_length,
    format_branch,
    position_after,
)
from mateframe.core.rules import RulesEngine
from mateframe.puzzle.interfaces import PuzzlePhase

_LOGGER = logging.getLogger(__name__)


class PuzzleState:
    """Engine position, branch cursor and turn bookkeeping.

    ``played`` holds the long-form moves actually played on the current
    branch, so ``len(played) == cursor`` at all times.
    """

    __slots__ = (
        "start_fen",
        "engine",
        "branches",
        "branch_index",
        "cursor",
        "played",
        "player_color",
        "player_turn",
        "waiting_for_opponent",
        "phase",
    )

    def __init__(
        self,
        start_fen: str,
        branches: BranchSet,
        player_color: chess.Color | None = None,
    ) -> None:
        if not branches:
            raise ValueError("A puzzle needs at least one branch")
        self.start_fen = start_fen
        self.engine = RulesEngine(start_fen)
        self.branches = branches
        self.branch_index = 0
        self.cursor = 0
        self.played: list[str] = []
        self.player_color: chess.Color = (
            self.engine.turn() if player_color is None else player_color
        )
        self.player_turn = self.engine.turn() == self.player_color
        self.waiting_for_opponent = False
        self.phase = PuzzlePhase.LOADING

    # ── Queries ──────────────────────────────────────────────────────────

    @property
    def branch(self) -> Branch:
        return self.branches[self.branch_index]

    @property
    def expected(self) -> Step | None:
        """Entry at the cursor, ``None`` once the branch is exhausted."""
        if self.cursor < len(self.branch):
            return self.branch[self.cursor]
        return None

    @property
    def branch_exhausted(self) -> bool:
        return self.cursor >= len(self.branch)

    @property
    def has_more_branches(self) -> bool:
        return self.branch_index < len(self.branches) - 1

    @property
    def is_finished(self) -> bool:
        return self.phase == PuzzlePhase.PUZZLE_COMPLETE

    # ── Mutation ─────────────────────────────────────────────────────────

    def record(self, lan: str) -> None:
        """Advance the cursor past a move that was just played."""
        self.played.append(lan)
        self.cursor += 1

    def retract(self) -> None:
        """Take back the last recorded move, in the engine and the cursor."""
        if not self.played:
            return
        self.played.pop()
        self.cursor -= 1
        self.engine.undo()

    def advance_branch(self) -> bool:
        """Move to the next branch, resetting to the nearest common ancestor.

        The position is rebuilt from the starting position by replaying the
        shared prefix, not by unwinding the finished branch.  Returns
        ``False`` when no branch is left.
        """
        previous = self.branch
        if not self.has_more_branches:
            return False
        self.branch_index += 1

        shared = common_prefix_length(previous, self.branch)
        replay = self.played[:shared]
        fen = position_after(self.start_fen, replay)
        _LOGGER.debug(
            "Branch %d/%d: %s (resume after %d moves)",
            self.branch_index + 1,
            len(self.branches),
            format_branch(self.branch),
            shared,
        )

        self.engine.load(fen)
        self.played = replay
        self.cursor = len(replay)
        self.waiting_for_opponent = False
        self.player_turn = self.engine.turn() == self.player_color
        return True
