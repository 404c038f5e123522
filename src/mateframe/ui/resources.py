"""Piece rendering helpers built on :mod:`chess.svg` artwork."""

from __future__ import annotations

import chess
import chess.svg
from PyQt6.QtCore import QByteArray
from PyQt6.QtSvg import QSvgRenderer

# Cache SVG renderers (one per piece/color)
_renderers: dict[str, QSvgRenderer] = {}


def _get_renderer(symbol: str) -> QSvgRenderer:
    """Build and cache the QSvgRenderer for a piece symbol (``"K"``, ``"p"``...)."""
    if symbol not in _renderers:
        svg = chess.svg.piece(chess.Piece.from_symbol(symbol))
        renderer = QSvgRenderer(QByteArray(svg.encode("utf-8")))
        if not renderer.isValid():
            raise ValueError(f"Cannot render SVG for piece {symbol!r}")
        _renderers[symbol] = renderer
    return _renderers[symbol]


def piece_renderer(piece: chess.Piece) -> QSvgRenderer:
    """Return a cached SVG renderer for *piece*."""
    return _get_renderer(piece.symbol())
