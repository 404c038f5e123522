"""PuzzleSet: the owning container of every puzzle on a page."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass, field

from mateframe.puzzle.controller import PuzzleController, PuzzleTimings, SolvedCallback
from mateframe.puzzle.definition import PuzzleDefinition
from mateframe.puzzle.interfaces import IBoardView, IScheduler, PuzzleSolved

_LOGGER = logging.getLogger(__name__)

BoardFactory = Callable[[int, PuzzleDefinition], IBoardView]


@dataclass(slots=True)
class PuzzleSlot:
    """One puzzle on the page.

    ``controller`` is ``None`` when the definition could not be loaded; the
    reason is kept in ``error`` and the board stays non-interactive.
    """

    index: int
    definition: PuzzleDefinition
    board: IBoardView
    controller: PuzzleController | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.controller is not None


SlotCallback = Callable[[PuzzleSlot], None]


@dataclass
class PuzzleSetEvents:
    """Observable callbacks. Multiple handlers per event."""

    on_slot_ready: list[SlotCallback] = field(default_factory=list)
    on_solved: list[SolvedCallback] = field(default_factory=list)


class PuzzleSet:
    """Builds and owns one controller per puzzle definition.

    Each puzzle has its own engine and state; nothing is shared between
    slots.  :meth:`initialize` runs at most once per instance.
    """

    __slots__ = (
        "_definitions",
        "_scheduler",
        "_timings",
        "_slots",
        "_initialized",
        "events",
    )

    def __init__(
        self,
        definitions: Sequence[PuzzleDefinition],
        scheduler: IScheduler,
        timings: PuzzleTimings | None = None,
    ) -> None:
        self._definitions = tuple(definitions)
        self._scheduler = scheduler
        self._timings = timings
        self._slots: list[PuzzleSlot] = []
        self._initialized = False
        self.events = PuzzleSetEvents()

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def definitions(self) -> tuple[PuzzleDefinition, ...]:
        return self._definitions

    def __len__(self) -> int:
        return len(self._slots)

    def __iter__(self) -> Iterator[PuzzleSlot]:
        return iter(self._slots)

    def __getitem__(self, index: int) -> PuzzleSlot:
        return self._slots[index]

    def initialize(self, board_factory: BoardFactory) -> bool:
        """Create a board and a controller for every definition.

        Malformed puzzles get a slot with an error instead of a controller.
        Returns ``False`` if the set was already initialised.
        """
        if self._initialized:
            return False
        self._initialized = True

        for index, definition in enumerate(self._definitions):
            board = board_factory(index, definition)
            slot = PuzzleSlot(index, definition, board)
            try:
                slot.controller = PuzzleController(
                    definition,
                    board,
                    self._scheduler,
                    index=index,
                    timings=self._timings,
                )
            except ValueError as exc:
                _LOGGER.warning("Puzzle %d could not be loaded: %s", index, exc)
                slot.error = str(exc)
            self._slots.append(slot)

            if slot.controller is not None:
                slot.controller.events.on_solved.append(self._emit_solved)
            for cb in self.events.on_slot_ready:
                cb(slot)
            if slot.controller is not None:
                try:
                    board.when_initialized(slot.controller.start)
                except Exception:
                    _LOGGER.exception("Board for puzzle %d failed to initialise", index)
        return True

    def controller(self, index: int) -> PuzzleController | None:
        return self._slots[index].controller

    def _emit_solved(self, solved: PuzzleSolved) -> None:
        for cb in self.events.on_solved:
            cb(solved)
