"""Puzzle layer: definitions, solving state machine, page-level container.

Quick start::

    from mateframe.puzzle import PuzzleController, PuzzleDefinition

    ctrl = PuzzleController(
        PuzzleDefinition(fen, "d8h4,[g4h4,g8g1|h2h3,h4h3]"),
        board=my_board_view,
        scheduler=my_scheduler,
    )
    ctrl.events.on_solved.append(print)
    ctrl.start()
"""

from mateframe.puzzle.collection import PuzzleSet, PuzzleSetEvents, PuzzleSlot
from mateframe.puzzle.controller import PuzzleController, PuzzleEvents, PuzzleTimings
from mateframe.puzzle.definition import (
    DEFAULT_PUZZLES,
    DEFAULT_PUZZLES_SAN,
    PuzzleDefinition,
)
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
from mateframe.puzzle.loader import (
    WidgetConfig,
    WidgetSettings,
    parse_query,
    query_from_argument,
)
from mateframe.puzzle.state import PuzzleState

__all__ = [
    # Interfaces
    "IBoardView",
    "IScheduler",
    "MarkerKind",
    "MoveInputEvent",
    "MoveInputType",
    "PuzzlePhase",
    "PuzzleSolved",
    "StatusKey",
    "StatusTone",
    "StatusUpdate",
    # Definitions / configuration
    "DEFAULT_PUZZLES",
    "DEFAULT_PUZZLES_SAN",
    "PuzzleDefinition",
    "WidgetConfig",
    "WidgetSettings",
    "parse_query",
    "query_from_argument",
    # Concrete
    "PuzzleController",
    "PuzzleEvents",
    "PuzzleSet",
    "PuzzleSetEvents",
    "PuzzleSlot",
    "PuzzleState",
    "PuzzleTimings",
]
