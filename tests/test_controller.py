# tests/test_controller.py

from __future__ import annotations

import datetime as dt
import logging
import re

import pytest

from controller.app_controller import AppController
from core.exceptions import StoreError, ValidationError
from core.models import DeadlineStatus, Task
from gui.scheduling import BackgroundRunner
from pb_bootstrap import spec_tasks

from .fakes import FakeScheduler, FakeTaskStore

DEADLINE_PATTERN = next(f for f in spec_tasks()["schema"] if f["name"] == "deadline")["options"]["pattern"]


def test_load_orders_by_deadline(controller: AppController) -> None:
    assert [t.id for t in controller.tasks] == ["b", "a", "c"]


def test_load_puts_unparseable_deadlines_last(now: dt.datetime) -> None:
    store = FakeTaskStore(
        [
            Task(id="x", text="broken", deadline="??"),
            Task(id="y", text="later", deadline="2026-10-20T10:00"),
            Task(id="z", text="sooner", deadline="2026-10-19 13:00"),
        ]
    )
    c = AppController(store, clock=lambda: now)
    c.load_tasks()
    assert [t.id for t in c.tasks] == ["z", "y", "x"]


def test_add_task_inserts_after_store_confirms(controller: AppController, store: FakeTaskStore) -> None:
    task = controller.add_task("  Call mom ", "2026-10-19 18:00")

    assert task.id == "rec1"
    assert task.text == "Call mom"
    assert task.deadline == "2026-10-19T18:00"
    assert task.completed is False
    assert store.calls[-1] == ("create", "Call mom", "2026-10-19T18:00")
    assert [t.id for t in controller.tasks] == ["b", "a", "rec1", "c"]


@pytest.mark.parametrize(
    "text, deadline",
    [("", "2026-10-20T10:00"), ("   ", "2026-10-20T10:00"), ("Task", ""), ("Task", "tomorrow")],
)
def test_add_task_rejects_bad_input(controller: AppController, store: FakeTaskStore, text, deadline) -> None:
    with pytest.raises(ValidationError):
        controller.add_task(text, deadline)
    assert not any(c[0] == "create" for c in store.calls)


def test_add_task_rejects_past_deadline(controller: AppController) -> None:
    with pytest.raises(ValidationError, match="past"):
        controller.add_task("Too late", "2026-10-19T11:59")


def test_add_task_accepts_deadline_equal_to_now(controller: AppController, now: dt.datetime) -> None:
    task = controller.add_task("Right now", now.isoformat())
    assert task.deadline == "2026-10-19T12:00"


def test_add_task_failure_leaves_list_untouched(controller: AppController, store: FakeTaskStore) -> None:
    before = list(controller.tasks)
    store.fail_next = True
    with pytest.raises(StoreError):
        controller.add_task("Call mom", "2026-10-19 18:00")
    assert controller.tasks == before


def test_edit_task_allows_past_deadline(controller: AppController, store: FakeTaskStore) -> None:
    task = controller.edit_task("a", "Submit final report", "2026-10-01 09:00")

    assert task.text == "Submit final report"
    assert task.deadline == "2026-10-01T09:00"
    assert store.calls[-1] == (
        "update",
        "a",
        {"text": "Submit final report", "deadline": "2026-10-01T09:00"},
    )
    # re-sorted: now the earliest
    assert controller.tasks[0].id == "a"


def test_edit_task_still_rejects_empty_fields(controller: AppController) -> None:
    with pytest.raises(ValidationError):
        controller.edit_task("a", "", "2026-10-20 10:00")


def test_edit_unknown_task(controller: AppController) -> None:
    with pytest.raises(KeyError):
        controller.edit_task("nope", "x", "2026-10-20 10:00")


def test_toggle_complete_round_trip(controller: AppController, store: FakeTaskStore) -> None:
    assert controller.toggle_complete("a").completed is True
    assert store.calls[-1] == ("update", "a", {"completed": True})
    assert controller.toggle_complete("a").completed is False
    assert controller.get_task("a").completed is False


def test_toggle_failure_keeps_old_state(controller: AppController, store: FakeTaskStore) -> None:
    store.fail_next = True
    with pytest.raises(StoreError):
        controller.toggle_complete("a")
    assert controller.get_task("a").completed is False


def test_delete_task(controller: AppController, store: FakeTaskStore) -> None:
    controller.delete_task("b")
    assert "b" not in store.records
    assert [t.id for t in controller.tasks] == ["a", "c"]


def test_delete_failure_keeps_task(controller: AppController, store: FakeTaskStore) -> None:
    store.fail_next = True
    with pytest.raises(StoreError):
        controller.delete_task("b")
    assert controller.get_task("b").text == "Pay rent"


def test_deadline_statuses_and_summary(controller: AppController, now: dt.datetime) -> None:
    statuses = controller.deadline_statuses()
    assert statuses["a"].status is DeadlineStatus.UPCOMING
    assert statuses["a"].remaining == "3h 0m 0s"
    assert statuses["b"].status is DeadlineStatus.OVERDUE
    assert statuses["c"].status is DeadlineStatus.COMPLETED

    later = now + dt.timedelta(hours=4)
    assert controller.summary(later) == {
        DeadlineStatus.UPCOMING: 0,
        DeadlineStatus.OVERDUE: 2,
        DeadlineStatus.COMPLETED: 1,
    }


def test_stale_reload_does_not_drop_confirmed_add(controller: AppController, store: FakeTaskStore) -> None:
    generation = controller.begin_reload()
    listed_before_add = controller.fetch_tasks()  # worker read the list first

    added = controller.apply_created(controller.push_new("Call mom", "2026-10-19 18:00"))

    assert controller.apply_loaded(generation, listed_before_add) is True
    assert added in controller.tasks
    assert [t.id for t in controller.tasks] == ["b", "a", "rec1", "c"]


def test_reload_replays_updates_and_deletes(controller: AppController) -> None:
    generation = controller.begin_reload()
    listed = controller.fetch_tasks()

    controller.apply_updated(controller.push_completed("a", True))
    controller.apply_deleted(controller.push_delete("b"))
    controller.apply_loaded(generation, listed)

    assert controller.get_task("a").completed is True
    assert controller.find_task("b") is None


def test_older_reload_result_is_dropped(controller: AppController, store: FakeTaskStore) -> None:
    first = controller.begin_reload()
    old_list = controller.fetch_tasks()
    store.records.pop("c")
    second = controller.begin_reload()

    assert controller.apply_loaded(second, controller.fetch_tasks()) is True
    assert controller.apply_loaded(first, old_list) is False
    assert [t.id for t in controller.tasks] == ["b", "a"]


def test_push_calls_leave_the_list_alone(controller: AppController) -> None:
    before = list(controller.tasks)

    controller.push_new("Call mom", "2026-10-19 18:00")
    controller.push_completed("a", True)
    controller.push_delete("b")

    assert controller.tasks == before


def test_second_write_on_same_task_is_refused_until_released(controller: AppController) -> None:
    assert controller.claim("a") is True
    assert controller.claim("a") is False
    assert controller.claim("b") is True
    controller.release("a")
    assert controller.claim("a") is True


def test_concurrent_store_calls_applied_on_one_thread(store: FakeTaskStore, now: dt.datetime) -> None:
    store.records = {
        f"t{i:02d}": Task(id=f"t{i:02d}", text=str(i), deadline="2026-10-20T10:00") for i in range(40)
    }
    c = AppController(store, clock=lambda: now)
    c.load_tasks()
    runner = BackgroundRunner(FakeScheduler())

    threads = [runner.submit(lambda tid=t.id: c.push_completed(tid, True), c.apply_updated) for t in c.tasks]
    for th in threads:
        th.join(timeout=5)
    runner.drain()

    assert len(c.tasks) == 40
    assert all(t.completed for t in c.tasks)


def test_find_task_for_vanished_row(controller: AppController) -> None:
    controller.delete_task("b")
    assert controller.find_task("b") is None
    assert controller.find_task("a").id == "a"


def test_validate_converts_offset_to_local_naive(controller: AppController) -> None:
    text, deadline = controller.validate("x", "2026-10-21 14:30+02:00")

    expected = dt.datetime(2026, 10, 21, 12, 30, tzinfo=dt.timezone.utc).astimezone().replace(tzinfo=None)
    assert text == "x"
    assert deadline == expected.isoformat(timespec="minutes")
    assert re.match(DEADLINE_PATTERN, deadline)


def test_unreadable_deadline_warns_once(store: FakeTaskStore, now: dt.datetime, caplog) -> None:
    store.records["x"] = Task(id="x", text="broken", deadline="??")
    c = AppController(store, clock=lambda: now)
    c.load_tasks()

    with caplog.at_level(logging.WARNING, logger="controller.app_controller"):
        for _ in range(3):
            assert "x" not in c.deadline_statuses()

    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert len(warnings) == 1
    assert "x" in warnings[0].getMessage()
