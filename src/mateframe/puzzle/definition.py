"""Puzzle definitions and the built-in puzzle lists."""

from __future__ import annotations

from dataclasses import dataclass, replace

import chess

from mateframe.core.notation import normalize_grammar_to_long_form


@dataclass(frozen=True, slots=True)
class PuzzleDefinition:
    """Starting position, solution grammar and instruction text.

    Args:
        fen: Starting position.
        moves: Solution in the move grammar, long or short form.
        message: Instruction shown above the board.
        player_color: Side the user plays.  ``None`` means the side to move
            in *fen*; otherwise the opponent's first move is played on start.
    """

    fen: str
    moves: str
    message: str = ""
    player_color: chess.Color | None = None

    def normalized(self) -> PuzzleDefinition:
        """Same puzzle with the solution rewritten in long form."""
        moves = normalize_grammar_to_long_form(self.fen, self.moves)
        if moves == self.moves:
            return self
        return replace(self, moves=moves)


_WINNING_COMBINATION = "Найдите выигрывающую комбинацию"

DEFAULT_PUZZLES: tuple[PuzzleDefinition, ...] = (
    PuzzleDefinition(
        fen="r3k2r/1b1p1pp1/3qp3/p1bP4/Pp3B2/6P1/1PP1QPB1/R4RK1 b kq - 0 1",
        moves="d6d5,g2d5,b7d5,a1d1,h8h1",
        message=_WINNING_COMBINATION,
    ),
    PuzzleDefinition(
        fen="3n3r/2p3k1/1pbbpRpp/6r1/3P4/2PBQ2P/q5P1/5RK1 w - - 0 1",
        moves=(
            "e3g5,h6g5,f6g6,g7h7,g6e6,h7g7,e6g6,g7h7,g6d6,h7g7,d6g6,g7h7,"
            "g6c6,h7g7,c6g6,g7h7,g6b6,h7g7,b6g6,g7h7,g6a6,h7g7,a6a2"
        ),
        message=_WINNING_COMBINATION,
    ),
    PuzzleDefinition(
        fen="r2q2rk/ppp4p/3p4/2b2Q2/3pPPR1/2P2n2/PP3P1P/RNB4K b - - 0 1",
        moves="d8h4,[g4h4,g8g1|h2h3,h4h3]",
        message="Найдите выигрывающий ход (2 варианта)",
    ),
)
"""Built-in puzzles written in long form."""

DEFAULT_PUZZLES_SAN: tuple[PuzzleDefinition, ...] = (
    replace(DEFAULT_PUZZLES[0], moves="Qxd5,Bxd5,Bxd5,Rad1,Rh1+"),
    replace(
        DEFAULT_PUZZLES[1],
        moves=(
            "Qxg5+,hxg5,Rxg6+,Kh7,Rxe6,Kg7,Rg6+,Kh7,Rxd6,Kg7,Rg6+,Kh7,"
            "Rxc6,Kg7,Rg6+,Kh7,Rxb6,Kg7,Rg6+,Kh7,Ra6,Kg7,Rxa2"
        ),
    ),
    replace(DEFAULT_PUZZLES[2], moves="Qh4,[Rxh4,Rg1#|h3,Qxh3#]"),
    PuzzleDefinition(
        fen="6k1/5pb1/1p1N3p/p5p1/5q2/Q6P/PPr5/3RR2K w - - 0 1",
        moves=(
            "Re8, [Kh7, Qd3, f5, Qxc2|Bf8, Rxf8, [Kg7, Rxf7, Qxf7, Nxf7| "
            "Kxf8, Nf5, [Kg8, Qf8, [Kxf8, Rd8#|Kh7, Qg7#] | Ke8, "
            "{Ng7# | Qe7#}]]]"
        ),
        message=_WINNING_COMBINATION,
    ),
)
"""Built-in puzzles written in short algebraic form (used by default)."""
