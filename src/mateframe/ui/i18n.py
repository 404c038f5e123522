"""Internationalisation strings for the puzzle widget.

Usage::

    from mateframe.ui.i18n import t, set_language

    set_language("en")
    print(t().victory)                       # "Victory! Puzzle solved."
    print(t().branch_progress.format(current=1, total=2))
"""

from __future__ import annotations

from dataclasses import dataclass

from mateframe.puzzle.interfaces import StatusUpdate


@dataclass(frozen=True)
class Strings:
    # ── Status line ──────────────────────────────────────────────────────
    loading: str
    your_turn: str
    correct: str  # correct move, opponent reply pending
    victory: str
    wrong_move: str
    checkmate: str
    check: str
    branch_complete: str
    next_branch: str

    # ── Branch indicator ─────────────────────────────────────────────────
    branch_progress: str  # "Variation {current} of {total}"

    # ── Window ───────────────────────────────────────────────────────────
    window_title: str
    load_error: str  # "Puzzle could not be loaded: {error}"


_EN = Strings(
    loading="Loading puzzle...",
    your_turn="Your turn!",
    correct="Excellent! Wait for response...",
    victory="Victory! Puzzle solved.",
    wrong_move="Wrong move. Try again.",
    checkmate="Checkmate!",
    check="Check!",
    branch_complete="Branch complete!",
    next_branch="Next variation...",
    branch_progress="Variation {current} of {total}",
    window_title="Chess puzzles",
    load_error="Puzzle could not be loaded: {error}",
)

_RU = Strings(
    loading="Загрузка задачи...",
    your_turn="Ваш ход!",
    correct="Отлично! Ждите ответ...",
    victory="Победа! Задача решена.",
    wrong_move="Неверный ход. Попробуйте еще раз.",
    checkmate="Мат!",
    check="Шах!",
    branch_complete="Вариант завершён!",
    next_branch="Следующий вариант...",
    branch_progress="Вариант {current} из {total}",
    window_title="Шахматные задачи",
    load_error="Не удалось загрузить задачу: {error}",
)

_LOCALES: dict[str, Strings] = {
    "en": _EN,
    "ru": _RU,
}

DEFAULT_LANGUAGE = "ru"

LANGUAGES: list[str] = list(_LOCALES.keys())

_current: Strings = _LOCALES[DEFAULT_LANGUAGE]


def t() -> Strings:
    """Return the active locale strings."""
    return _current


def set_language(language: str) -> None:
    """Switch the global locale. Unknown codes fall back to Russian."""
    global _current
    _current = _LOCALES.get(language.strip().lower(), _LOCALES[DEFAULT_LANGUAGE])


def status_text(update: StatusUpdate) -> str:
    """Render a status update in the active locale."""
    strings = t()
    return " ".join(getattr(strings, key.value) for key in update.keys)


def branch_progress(current: int, total: int) -> str:
    return t().branch_progress.format(current=current, total=total)
