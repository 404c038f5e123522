"""Branch model: steps, alternative sets and the helpers that compare them."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass
from typing import TypeAlias

from mateframe.core.rules import DEFAULT_PROMOTION, MoveSpec, RulesEngine


@dataclass(frozen=True, slots=True)
class AltSet:
    """Interchangeable player moves; any one of them satisfies the step."""

    moves: tuple[str, ...]

    def __post_init__(self) -> None:
        if not self.moves:
            raise ValueError("An alternative set needs at least one move")

    def __iter__(self) -> Iterator[str]:
        return iter(self.moves)

    def __len__(self) -> int:
        return len(self.moves)

    def __contains__(self, token: object) -> bool:
        if not isinstance(token, str):
            return False
        key = move_key(token)
        return any(move_key(m) == key for m in self.moves)

    @property
    def representative(self) -> str:
        """The member used whenever a single timeline is needed."""
        return self.moves[0]

    def __str__(self) -> str:
        return "{" + "|".join(self.moves) + "}"


Step: TypeAlias = str | AltSet
Branch: TypeAlias = tuple[Step, ...]
BranchSet: TypeAlias = list[Branch]


def move_key(token: str) -> str:
    """Identity of a move token for comparisons.

    Case-insensitive; a trailing default promotion is dropped, so
    ``e7e8q`` and ``e7e8`` are the same move.
    """
    key = token.strip().lower()
    if len(key) == 5 and key[4] == DEFAULT_PROMOTION:
        return key[:4]
    return key


def step_matches(step: Step, token: str) -> bool:
    """Whether a played long-form *token* satisfies *step*."""
    if isinstance(step, AltSet):
        return token in step
    return move_key(step) == move_key(token)


def steps_equal(a: Step, b: Step) -> bool:
    if isinstance(a, AltSet) or isinstance(b, AltSet):
        if not (isinstance(a, AltSet) and isinstance(b, AltSet)):
            return False
        return [move_key(m) for m in a] == [move_key(m) for m in b]
    return move_key(a) == move_key(b)


def common_prefix_length(a: Sequence[Step], b: Sequence[Step]) -> int:
    """Length of the longest shared prefix of two branches."""
    length = 0
    for left, right in zip(a, b):
        if not steps_equal(left, right):
            break
        length += 1
    return length


def step_token(step: Step) -> str:
    """A single concrete move for *step*."""
    if isinstance(step, AltSet):
        return step.representative
    return step


def split_long_form(token: str) -> MoveSpec:
    """Decompose a long-form token; queen is the default promotion."""
    token = token.strip()
    promotion = token[4].lower() if len(token) > 4 else DEFAULT_PROMOTION
    return MoveSpec(token[:2], token[2:4], promotion)


def position_after(fen: str, moves: Iterable[Step]) -> str:
    """FEN reached by replaying long-form *moves* from *fen*.

    Replay stops at the first move the engine rejects.
    """
    engine = RulesEngine(fen)
    for step in moves:
        if engine.move(split_long_form(step_token(step))) is None:
            break
    return engine.fen()


def format_branch(branch: Iterable[Step]) -> str:
    return ",".join(str(step) for step in branch)
