from __future__ import annotations

import pytest
from fakes import FakeBoard, ManualScheduler


@pytest.fixture
def board() -> FakeBoard:
    return FakeBoard()


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()
