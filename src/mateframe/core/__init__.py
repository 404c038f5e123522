"""Core layer: rules adapter, move grammar and notation.

Quick start::

    from mateframe.core import expand, format_branch, normalize_grammar_to_long_form

    moves = normalize_grammar_to_long_form(fen, "Qh4,[Rxh4,Rg1#|h3,Qxh3#]")
    for branch in expand(moves):
        print(format_branch(branch))
"""

from mateframe.core.branches import (
    AltSet,
    Branch,
    BranchSet,
    Step,
    common_prefix_length,
    format_branch,
    move_key,
    position_after,
    split_long_form,
    step_matches,
    step_token,
)
from mateframe.core.grammar import (
    AltGroupNode,
    BranchGroupNode,
    GrammarError,
    MoveNode,
    SequenceNode,
    expand,
    flatten,
    parse_grammar,
    render,
)
from mateframe.core.notation import (
    is_long_form,
    is_short_form,
    long_to_short,
    normalize_grammar_to_long_form,
    normalize_grammar_to_short_form,
    short_to_long,
)
from mateframe.core.rules import DEFAULT_PROMOTION, MoveRecord, MoveSpec, RulesEngine

__all__ = [
    # Rules
    "DEFAULT_PROMOTION",
    "MoveRecord",
    "MoveSpec",
    "RulesEngine",
    # Branch model
    "AltSet",
    "Branch",
    "BranchSet",
    "Step",
    "common_prefix_length",
    "format_branch",
    "move_key",
    "position_after",
    "split_long_form",
    "step_matches",
    "step_token",
    # Grammar
    "AltGroupNode",
    "BranchGroupNode",
    "GrammarError",
    "MoveNode",
    "SequenceNode",
    "expand",
    "flatten",
    "parse_grammar",
    "render",
    # Notation
    "is_long_form",
    "is_short_form",
    "long_to_short",
    "normalize_grammar_to_long_form",
    "normalize_grammar_to_short_form",
    "short_to_long",
]
