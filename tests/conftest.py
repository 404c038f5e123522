"""Fixtures shared by the core, puzzle and ui test packages."""

from __future__ import annotations

import os
from collections.abc import Iterator

import pytest

# Widgets are never shown; render offscreen unless QT_QPA_PLATFORM is set.
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")


def _needs_qt(request: pytest.FixtureRequest) -> bool:
    return request.node.path.parent.name == "ui"


@pytest.fixture(scope="session")
def qapp() -> Iterator[object]:
    """One styled QApplication for the whole session."""
    from PyQt6.QtWidgets import QApplication

    from mateframe.ui.bootstrap import _configure_application

    app = QApplication.instance() or QApplication(["mateframe-tests"])
    _configure_application(app)
    yield app


@pytest.fixture(autouse=True)
def _english_strings() -> Iterator[None]:
    """Status text assertions are written against the English locale."""
    from mateframe.ui.i18n import set_language

    set_language("en")
    yield
    set_language("en")


@pytest.fixture(autouse=True)
def _qt_for_ui_tests(request: pytest.FixtureRequest) -> Iterator[None]:
    if not _needs_qt(request):
        yield
        return

    app = request.getfixturevalue("qapp")
    yield
    for widget in app.topLevelWidgets():
        widget.close()
        widget.deleteLater()
    app.processEvents()
