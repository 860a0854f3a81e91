from __future__ import annotations
import datetime as dt
import logging
from collections import Counter
from typing import Callable, Dict, List, Optional, Protocol, Set, Tuple

from core.exceptions import InvalidTimestamp, ValidationError
from core.models import DeadlineInfo, DeadlineStatus, Task
from services import deadline as deadlines

logger = logging.getLogger(__name__)


class TaskStore(Protocol):
    def list_tasks(self) -> List[Task]: ...
    def create_task(self, text: str, deadline: str) -> Task: ...
    def update_task(self, task_id: str, **fields) -> Task: ...
    def delete_task(self, task_id: str) -> None: ...


def _sort_key(task: Task):
    try:
        d = deadlines.parse_deadline(task.deadline)
        if d.tzinfo is not None:
            d = d.astimezone().replace(tzinfo=None)
        return (0, d, task.id)
    except InvalidTimestamp:
        # unparseable deadlines sink to the bottom
        return (1, dt.datetime.max, task.id)


class AppController:
    """Coordinates the UI with the task store and the deadline engine.

    Owns the in-memory task list. The list only changes after the store has
    confirmed the write, using the record the store sent back.

    Store calls are split in two so the UI can run the slow half on a worker
    thread: ``push_*``/``fetch_tasks`` only talk to the store and never touch
    ``tasks``; ``apply_*`` update ``tasks`` and must run on the UI thread.
    ``add_task``/``edit_task``/``toggle_complete``/``delete_task``/``load_tasks``
    chain both halves for single-threaded callers.
    """
    def __init__(self, store: TaskStore, clock: Callable[[], dt.datetime] = dt.datetime.now):
        self.store = store
        self.clock = clock
        self.tasks: List[Task] = []
        self._generation = 0
        self._reloading = False
        self._since_reload: List[Tuple[str, object]] = []
        self._in_flight: Set[str] = set()
        self._bad_deadlines: Set[str] = set()

    # ---- queries ----
    def get_task(self, task_id: str) -> Task:
        for t in self.tasks:
            if t.id == task_id:
                return t
        raise KeyError(task_id)

    def find_task(self, task_id: str) -> Optional[Task]:
        try:
            return self.get_task(task_id)
        except KeyError:
            return None

    def deadline_statuses(self, now: Optional[dt.datetime] = None) -> Dict[str, DeadlineInfo]:
        statuses = deadlines.evaluate_all(self.tasks, now or self.clock())
        for t in self.tasks:
            if t.id not in statuses and t.id not in self._bad_deadlines:
                self._bad_deadlines.add(t.id)
                logger.warning("task %s has an unreadable deadline: %r", t.id, t.deadline)
        return statuses

    def summary(self, now: Optional[dt.datetime] = None) -> Dict[DeadlineStatus, int]:
        counts = Counter(info.status for info in self.deadline_statuses(now).values())
        return {s: counts.get(s, 0) for s in DeadlineStatus}

    # ---- validation ----
    def validate(self, text: str, deadline: str, *, now: Optional[dt.datetime] = None,
                 allow_past: bool = False) -> Tuple[str, str]:
        text = (text or "").strip()
        raw_deadline = (deadline or "").strip()
        if not text or not raw_deadline:
            raise ValidationError("Task and deadline cannot be empty")
        try:
            normalized = deadlines.normalize_deadline(raw_deadline)
        except InvalidTimestamp as e:
            raise ValidationError("Deadline must look like YYYY-MM-DD HH:MM") from e
        if not allow_past and deadlines.remaining_ms(normalized, now or self.clock()) < 0:
            raise ValidationError("Deadline cannot be in the past")
        return text, normalized

    # ---- one write per task at a time (UI thread) ----
    def claim(self, task_id: str) -> bool:
        """False while another write on the same task is still in flight."""
        if task_id in self._in_flight:
            return False
        self._in_flight.add(task_id)
        return True

    def release(self, task_id: str) -> None:
        self._in_flight.discard(task_id)

    # ---- reload ----
    def begin_reload(self) -> int:
        self._generation += 1
        self._reloading = True
        self._since_reload = []
        return self._generation

    def fetch_tasks(self) -> List[Task]:
        return self.store.list_tasks()

    def apply_loaded(self, generation: int, tasks: List[Task]) -> bool:
        """Install a fetched list. Results of an older reload are dropped."""
        if generation != self._generation:
            logger.debug("dropping stale reload %d (current %d)", generation, self._generation)
            return False
        replay, self._since_reload = self._since_reload, []
        self._reloading = False
        self.tasks = sorted(tasks, key=_sort_key)
        # writes confirmed while the list was in flight may be missing from it
        for kind, value in replay:
            if kind == "delete":
                self._drop(value)
            else:
                self._replace(value)
        logger.info("loaded %d tasks", len(self.tasks))
        return True

    def load_tasks(self) -> List[Task]:
        generation = self.begin_reload()
        self.apply_loaded(generation, self.fetch_tasks())
        return self.tasks

    # ---- store half (any thread) ----
    def push_new(self, text: str, deadline: str, now: Optional[dt.datetime] = None) -> Task:
        text, deadline = self.validate(text, deadline, now=now)
        return self.store.create_task(text, deadline)

    def push_edit(self, task_id: str, text: str, deadline: str, now: Optional[dt.datetime] = None) -> Task:
        # past deadlines are accepted when editing
        text, deadline = self.validate(text, deadline, now=now, allow_past=True)
        return self.store.update_task(task_id, text=text, deadline=deadline)

    def push_completed(self, task_id: str, completed: bool) -> Task:
        return self.store.update_task(task_id, completed=completed)

    def push_delete(self, task_id: str) -> str:
        self.store.delete_task(task_id)
        return task_id

    # ---- local half (UI thread) ----
    def apply_created(self, task: Task) -> Task:
        return self.apply_updated(task)

    def apply_updated(self, task: Task) -> Task:
        self._replace(task)
        self._remember("upsert", task)
        return task

    def apply_deleted(self, task_id: str) -> None:
        self._drop(task_id)
        self._remember("delete", task_id)

    # ---- both halves ----
    def add_task(self, text: str, deadline: str, now: Optional[dt.datetime] = None) -> Task:
        return self.apply_created(self.push_new(text, deadline, now))

    def edit_task(self, task_id: str, text: str, deadline: str, now: Optional[dt.datetime] = None) -> Task:
        self.get_task(task_id)
        return self.apply_updated(self.push_edit(task_id, text, deadline, now))

    def toggle_complete(self, task_id: str) -> Task:
        current = self.get_task(task_id)
        return self.apply_updated(self.push_completed(task_id, not current.completed))

    def delete_task(self, task_id: str) -> None:
        self.get_task(task_id)
        self.apply_deleted(self.push_delete(task_id))

    def _remember(self, kind: str, value: object) -> None:
        if self._reloading:
            self._since_reload.append((kind, value))

    def _replace(self, task: Task) -> None:
        others = [t for t in self.tasks if t.id != task.id]
        self.tasks = sorted(others + [task], key=_sort_key)

    def _drop(self, task_id: str) -> None:
        self.tasks = [t for t in self.tasks if t.id != task_id]
