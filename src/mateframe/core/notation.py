"""Move notation: long form (``e2e4``) and short algebraic form (``Nf3``).

Conversions use :class:`~mateframe.core.rules.RulesEngine` as the oracle, so
a token converts only if it is legal in the position it is played from.
Grammar-level normalisation never raises: on any failure the original string
is returned unchanged and a warning is logged.
"""

from __future__ import annotations

import logging
import re

from mateframe.core.branches import split_long_form
from mateframe.core.grammar import (
    AltGroupNode,
    BranchGroupNode,
    GrammarError,
    MoveNode,
    SequenceNode,
    StepNode,
    first_move,
    parse_grammar,
    render,
)
from mateframe.core.rules import MoveRecord, RulesEngine

__all__ = [
    "LONG_FORM_RE",
    "SHORT_FORM_RE",
    "is_long_form",
    "is_short_form",
    "long_to_short",
    "normalize_grammar_to_long_form",
    "normalize_grammar_to_short_form",
    "short_to_long",
    "split_long_form",
]

_LOGGER = logging.getLogger(__name__)

LONG_FORM_RE = re.compile(r"^[a-h][1-8][a-h][1-8][qrbnQRBN]?$")
SHORT_FORM_RE = re.compile(
    r"^([KQRBN]?[a-h]?[1-8]?x?[a-h][1-8](=[QRBNqrbn])?|O-O(-O)?|0-0(-0)?)[+#]?$"
)


def is_long_form(token: str) -> bool:
    return LONG_FORM_RE.match(token.strip()) is not None


def is_short_form(token: str) -> bool:
    """True for short notation; a bare ``e2e4`` counts as long form only."""
    token = token.strip()
    return SHORT_FORM_RE.match(token) is not None and not is_long_form(token)


# ── Single tokens ────────────────────────────────────────────────────────────


def _play(engine: RulesEngine, token: str) -> MoveRecord | None:
    """Apply *token* in whichever notation it is written."""
    if is_long_form(token):
        return engine.move(split_long_form(token))
    return engine.move(token)


def _try_then_undo(engine: RulesEngine, token: str) -> MoveRecord | None:
    before = engine.fen()
    record = _play(engine, token)
    if record is None:
        return None
    engine.undo()
    if engine.fen() != before:
        engine.load(before)
    return record


def short_to_long(engine: RulesEngine, token: str) -> str | None:
    """Long-form token for the short-notation *token*, or ``None``.

    The engine's position is the same before and after the call.
    """
    token = token.strip()
    if not is_short_form(token):
        return None
    record = _try_then_undo(engine, token)
    return None if record is None else record.lan


def long_to_short(engine: RulesEngine, token: str) -> str | None:
    """Short-notation rendering of the long-form *token*, or ``None``.

    A missing promotion letter on a promoting move means a queen.
    """
    token = token.strip()
    if not is_long_form(token):
        return None
    record = _try_then_undo(engine, token)
    return None if record is None else record.san


# ── Whole grammars ───────────────────────────────────────────────────────────


class _ConversionError(ValueError):
    pass


class _TreeConverter:
    """Rewrites every leaf of a grammar tree while replaying it.

    Alternative-group members and branch-group alternatives are each
    converted from the same position; afterwards the timeline follows the
    first of them.
    """

    __slots__ = ("_short",)

    def __init__(self, short: bool) -> None:
        self._short = short

    def sequence(
        self, node: SequenceNode, engine: RulesEngine
    ) -> tuple[SequenceNode, RulesEngine]:
        steps: list[StepNode] = []
        for step in node.steps:
            if isinstance(step, MoveNode):
                steps.append(MoveNode(self._advance(engine, step.token)))
            elif isinstance(step, AltGroupNode):
                steps.append(self._alt_group(step, engine))
            else:
                group, engine = self._branch_group(step, engine)
                steps.append(group)
        return SequenceNode(tuple(steps)), engine

    def _advance(self, engine: RulesEngine, token: str) -> str:
        record = _play(engine, token)
        if record is None:
            raise _ConversionError(
                f"{token!r} is not playable in {engine.fen()!r}"
            )
        return record.san if self._short else record.lan

    def _alt_group(self, node: AltGroupNode, engine: RulesEngine) -> AltGroupNode:
        moves: list[MoveNode] = []
        for member in node.moves:
            moves.append(MoveNode(self._advance(engine, member.token)))
            engine.undo()
        self._advance(engine, node.moves[0].token)
        return AltGroupNode(tuple(moves))

    def _branch_group(
        self, node: BranchGroupNode, engine: RulesEngine
    ) -> tuple[BranchGroupNode, RulesEngine]:
        alternatives: list[SequenceNode] = []
        timeline: RulesEngine | None = None
        for alternative in node.alternatives:
            converted, end = self.sequence(alternative, engine.copy())
            alternatives.append(converted)
            if timeline is None:
                timeline = end
        return BranchGroupNode(tuple(alternatives)), timeline or engine


def _normalize(fen: str, grammar: str, short: bool) -> str:
    try:
        tree = parse_grammar(grammar)
    except GrammarError as exc:
        _LOGGER.warning("Cannot normalise malformed moves %r: %s", grammar, exc)
        return grammar

    first = first_move(tree)
    if first is None:
        return grammar
    if short and is_short_form(first):
        return grammar
    if not short and is_long_form(first):
        return grammar

    try:
        engine = RulesEngine(fen)
        converted, _ = _TreeConverter(short).sequence(tree, engine)
    except ValueError as exc:
        _LOGGER.warning("Cannot normalise moves %r from %r: %s", grammar, fen, exc)
        return grammar
    return render(converted)


def normalize_grammar_to_long_form(fen: str, grammar: str) -> str:
    """Rewrite every move of *grammar* in long form, replaying from *fen*.

    Only attempted when the first move is not already long-form; a grammar
    that starts in long form is returned as is.
    """
    return _normalize(fen, grammar, short=False)


def normalize_grammar_to_short_form(fen: str, grammar: str) -> str:
    """Mirror of :func:`normalize_grammar_to_long_form`."""
    return _normalize(fen, grammar, short=True)
