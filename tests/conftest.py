# tests/conftest.py

from __future__ import annotations

import datetime as dt

import pytest

from controller.app_controller import AppController
from core.models import Task

from .fakes import FakeTaskStore

NOW = dt.datetime(2026, 10, 19, 12, 0, 0)


@pytest.fixture()
def now() -> dt.datetime:
    return NOW


@pytest.fixture()
def store() -> FakeTaskStore:
    return FakeTaskStore(
        [
            Task(id="a", text="Submit report", deadline="2026-10-19T15:00", completed=False),
            Task(id="b", text="Pay rent", deadline="2026-10-18T09:00", completed=False),
            Task(id="c", text="Buy milk", deadline="2026-10-20T08:30", completed=True),
        ]
    )


@pytest.fixture()
def controller(store: FakeTaskStore, now: dt.datetime) -> AppController:
    """Controller with a frozen clock and the store already loaded."""
    c = AppController(store, clock=lambda: now)
    c.load_tasks()
    return c
