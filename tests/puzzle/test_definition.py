"""Tests for puzzle definitions and the built-in lists."""

from __future__ import annotations

import pytest

from mateframe.core.grammar import expand
from mateframe.puzzle.definition import (
    DEFAULT_PUZZLES,
    DEFAULT_PUZZLES_SAN,
    PuzzleDefinition,
)


class TestNormalized:
    def test_long_form_is_returned_as_is(self) -> None:
        puzzle = DEFAULT_PUZZLES[0]
        assert puzzle.normalized() is puzzle

    def test_short_form_is_rewritten(self) -> None:
        puzzle = DEFAULT_PUZZLES_SAN[0].normalized()
        assert puzzle.moves == DEFAULT_PUZZLES[0].moves
        assert puzzle.message == DEFAULT_PUZZLES[0].message

    def test_unplayable_solution_kept(self) -> None:
        puzzle = PuzzleDefinition(DEFAULT_PUZZLES[0].fen, "Nf3")
        assert puzzle.normalized() == puzzle


class TestBuiltIns:
    @pytest.mark.parametrize("index", range(3))
    def test_short_form_lists_match_long_form(self, index: int) -> None:
        assert DEFAULT_PUZZLES_SAN[index].normalized() == DEFAULT_PUZZLES[index]

    def test_branch_counts(self) -> None:
        counts = [len(expand(p.normalized().moves)) for p in DEFAULT_PUZZLES_SAN]
        assert counts == [1, 1, 2, 5]
