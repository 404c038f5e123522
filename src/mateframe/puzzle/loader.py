"""Widget configuration and query-string ingestion.

Recognised parameters::

    puzzles   fen|moves|message;fen|moves|message;...  (fields percent-encoded)
    fen, moves, message, side                          legacy single puzzle
    lang      status language (en, ru)
    theme     board colours (classic, blue, green)
    coords    show rank/file labels (1/0, true/false, yes/no, on/off)
    animate   animate moves

Without ``puzzles``, ``fen`` or ``moves`` the built-in short-form puzzles are
used.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from urllib.parse import parse_qs, unquote, urlsplit

import chess

from mateframe.puzzle.controller import PuzzleTimings
from mateframe.puzzle.definition import (
    DEFAULT_PUZZLES,
    DEFAULT_PUZZLES_SAN,
    PuzzleDefinition,
)

_LOGGER = logging.getLogger(__name__)

DEFAULT_LANGUAGE = "ru"
DEFAULT_THEME = "classic"

_TRUE = frozenset({"1", "true", "yes", "on"})
_FALSE = frozenset({"0", "false", "no", "off"})
_SIDES: dict[str, chess.Color] = {
    "w": chess.WHITE,
    "white": chess.WHITE,
    "b": chess.BLACK,
    "black": chess.BLACK,
}


@dataclass(slots=True)
class WidgetSettings:
    """Presentation settings shared by every puzzle on the page."""

    language: str = DEFAULT_LANGUAGE
    board_theme: str = DEFAULT_THEME
    show_coordinates: bool = False
    animate_moves: bool = True
    animation_duration_ms: int = 300
    timings: PuzzleTimings = field(default_factory=PuzzleTimings)


@dataclass(slots=True)
class WidgetConfig:
    puzzles: tuple[PuzzleDefinition, ...] = DEFAULT_PUZZLES_SAN
    settings: WidgetSettings = field(default_factory=WidgetSettings)


# ── Parsing ──────────────────────────────────────────────────────────────────


def query_from_argument(argument: str | None) -> str:
    """Query part of *argument*, which may be a full URL or a bare query."""
    if not argument:
        return ""
    argument = argument.strip()
    if "://" in argument or argument.startswith("/"):
        return urlsplit(argument).query
    return argument.removeprefix("?")


def parse_query(query: str) -> WidgetConfig:
    """Build a :class:`WidgetConfig` from a URL query string."""
    params = parse_qs(query, keep_blank_values=True)

    def get(name: str) -> str | None:
        values = params.get(name)
        return values[0] if values else None

    settings = WidgetSettings(
        language=(get("lang") or DEFAULT_LANGUAGE).strip().lower(),
        board_theme=(get("theme") or DEFAULT_THEME).strip().lower(),
        show_coordinates=_flag(get("coords"), default=False),
        animate_moves=_flag(get("animate"), default=True),
    )
    return WidgetConfig(puzzles=_puzzles(get), settings=settings)


def _puzzles(get: Callable[[str], str | None]) -> tuple[PuzzleDefinition, ...]:
    multi = get("puzzles")
    if multi:
        puzzles = tuple(
            _decode_entry(entry) for entry in multi.split(";") if entry.strip()
        )
        if puzzles:
            return puzzles

    fen, moves = get("fen"), get("moves")
    if fen or moves:
        fallback = DEFAULT_PUZZLES[0]
        return (
            PuzzleDefinition(
                fen=fen or fallback.fen,
                moves=moves or fallback.moves,
                message=get("message") or fallback.message,
                player_color=_side(get("side")),
            ),
        )
    return DEFAULT_PUZZLES_SAN


def _decode_entry(entry: str) -> PuzzleDefinition:
    fallback = DEFAULT_PUZZLES[0]
    parts = entry.split("|")

    def field_at(i: int, default: str) -> str:
        raw = parts[i] if i < len(parts) else ""
        return unquote(raw) if raw else default

    return PuzzleDefinition(
        fen=field_at(0, fallback.fen),
        moves=field_at(1, fallback.moves),
        message=field_at(2, ""),
    )


def _flag(value: str | None, *, default: bool) -> bool:
    value = (value or "").strip().lower()
    if not value:
        return default
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    _LOGGER.warning("Ignoring unrecognised flag value %r", value)
    return default


def _side(value: str | None) -> chess.Color | None:
    if not value:
        return None
    color = _SIDES.get(value.strip().lower())
    if color is None:
        _LOGGER.warning("Ignoring unknown side %r", value)
    return color
