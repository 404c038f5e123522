"""Puzzle move grammar: parsing, flattening and rendering.

A puzzle solution is written as a compact string::

    sequence    := step (',' step)*
    step        := move | branch_group | alt_group
    branch_group:= '[' sequence ('|' sequence)* ']'
    alt_group   := '{' move ('|' move)* '}'

``[...]`` forks the solution (one branch per opponent answer, each followed by
whatever comes after the group); ``{...}`` marks interchangeable player moves
for a single step and never forks.

Example::

    >>> expand("d8h4,[g4h4,g8g1|h2h3,h4h3]")
    [('d8h4', 'g4h4', 'g8g1'), ('d8h4', 'h2h3', 'h4h3')]
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import TypeAlias

from mateframe.core.branches import AltSet, BranchSet, Step

_SPECIAL = "[]{}|,"


class GrammarError(ValueError):
    """Structural error in a puzzle move string."""

    def __init__(self, message: str, offset: int) -> None:
        super().__init__(f"{message} (at offset {offset})")
        self.offset = offset


# ── Tree ─────────────────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class MoveNode:
    token: str


@dataclass(frozen=True, slots=True)
class AltGroupNode:
    moves: tuple[MoveNode, ...]


@dataclass(frozen=True, slots=True)
class BranchGroupNode:
    alternatives: tuple[SequenceNode, ...]


@dataclass(frozen=True, slots=True)
class SequenceNode:
    steps: tuple[StepNode, ...] = ()


StepNode: TypeAlias = "MoveNode | AltGroupNode | BranchGroupNode"
Node: TypeAlias = "StepNode | SequenceNode"


# ── Tokenizer ────────────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class _Token:
    kind: str  # one of _SPECIAL, or "move"
    text: str
    offset: int


def _tokenize(text: str) -> list[_Token]:
    tokens: list[_Token] = []
    start = 0
    for idx, ch in enumerate(text):
        if ch in _SPECIAL:
            _push_move(text, start, idx, tokens)
            tokens.append(_Token(ch, ch, idx))
            start = idx + 1
    _push_move(text, start, len(text), tokens)
    return tokens


def _push_move(text: str, start: int, end: int, tokens: list[_Token]) -> None:
    chunk = text[start:end]
    move = chunk.strip()
    if move:
        lead = len(chunk) - len(chunk.lstrip())
        tokens.append(_Token("move", move, start + lead))


# ── Parser ───────────────────────────────────────────────────────────────────


class _Parser:
    """Recursive-descent parser over the token list."""

    __slots__ = ("_tokens", "_pos")

    def __init__(self, tokens: list[_Token]) -> None:
        self._tokens = tokens
        self._pos = 0

    def parse(self) -> SequenceNode:
        sequence = self._sequence()
        tok = self._peek()
        if tok is not None:
            if tok.kind == "|":
                raise GrammarError("'|' outside of a group", tok.offset)
            raise GrammarError(f"unmatched {tok.kind!r}", tok.offset)
        return sequence

    def _peek(self) -> _Token | None:
        if self._pos < len(self._tokens):
            return self._tokens[self._pos]
        return None

    def _next(self) -> _Token | None:
        tok = self._peek()
        if tok is not None:
            self._pos += 1
        return tok

    def _sequence(self) -> SequenceNode:
        steps: list[StepNode] = []
        while (tok := self._peek()) is not None and tok.kind not in ("]", "|", "}"):
            self._pos += 1
            if tok.kind == ",":
                continue
            if tok.kind == "move":
                steps.append(MoveNode(tok.text))
            elif tok.kind == "[":
                steps.append(self._branch_group(tok))
            else:
                step = self._alt_group(tok)
                if step is not None:
                    steps.append(step)
        return SequenceNode(tuple(steps))

    def _branch_group(self, opening: _Token) -> BranchGroupNode:
        alternatives = [self._sequence()]
        while True:
            tok = self._next()
            if tok is None:
                raise GrammarError("unclosed '['", opening.offset)
            if tok.kind == "]":
                return BranchGroupNode(tuple(alternatives))
            if tok.kind == "|":
                alternatives.append(self._sequence())
                continue
            raise GrammarError(f"unexpected {tok.kind!r} inside '[...]'", tok.offset)

    def _alt_group(self, opening: _Token) -> MoveNode | AltGroupNode | None:
        moves: list[MoveNode] = []
        while True:
            tok = self._next()
            if tok is None:
                raise GrammarError("unclosed '{'", opening.offset)
            if tok.kind == "}":
                break
            if tok.kind == "|":
                continue
            if tok.kind != "move":
                raise GrammarError(
                    f"unexpected {tok.kind!r} inside '{{...}}'", tok.offset
                )
            moves.append(MoveNode(tok.text))

        if not moves:
            return None
        if len(moves) == 1:
            return moves[0]
        return AltGroupNode(tuple(moves))


def parse_grammar(text: str) -> SequenceNode:
    """Parse a puzzle move string into a tree.

    Raises:
        GrammarError: on unbalanced brackets/braces, a ``|`` outside any
            group, or a nested group / comma inside ``{...}``.
    """
    return _Parser(_tokenize(text)).parse()


# ── Flattening ───────────────────────────────────────────────────────────────


def flatten(sequence: SequenceNode) -> BranchSet:
    """Expand the tree into every complete linear solution path.

    Order is depth-first, left to right as written.
    """
    paths: list[list[Step]] = [[]]
    for step in sequence.steps:
        if isinstance(step, MoveNode):
            for path in paths:
                path.append(step.token)
        elif isinstance(step, AltGroupNode):
            alt = AltSet(tuple(m.token for m in step.moves))
            for path in paths:
                path.append(alt)
        else:
            continuations = [
                branch
                for alternative in step.alternatives
                for branch in flatten(alternative)
            ]
            paths = [path + list(cont) for path in paths for cont in continuations]
    return [tuple(path) for path in paths]


def expand(text: str) -> BranchSet:
    """Parse *text* and flatten it into its branch set."""
    return flatten(parse_grammar(text))


# ── Rendering / traversal ────────────────────────────────────────────────────


def render(node: Node) -> str:
    """Canonical text for *node* (inverse of :func:`parse_grammar`)."""
    if isinstance(node, MoveNode):
        return node.token
    if isinstance(node, AltGroupNode):
        return "{" + "|".join(m.token for m in node.moves) + "}"
    if isinstance(node, BranchGroupNode):
        return "[" + "|".join(render(alt) for alt in node.alternatives) + "]"
    return ",".join(render(step) for step in node.steps)


def iter_moves(node: Node) -> Iterator[MoveNode]:
    """Every move leaf in reading order."""
    if isinstance(node, MoveNode):
        yield node
    elif isinstance(node, AltGroupNode):
        yield from node.moves
    elif isinstance(node, BranchGroupNode):
        for alternative in node.alternatives:
            yield from iter_moves(alternative)
    else:
        for step in node.steps:
            yield from iter_moves(step)


def first_move(node: Node) -> str | None:
    return next((m.token for m in iter_moves(node)), None)


