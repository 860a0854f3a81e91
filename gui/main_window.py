import datetime as dt
import logging
import tkinter as tk

from core import config
from core.exceptions import StoreError
from core.models import DeadlineStatus
from controller.app_controller import AppController
from gui import theme
from gui.dialogs import ask_task, confirm_delete
from gui.scheduling import BackgroundRunner, CountdownTicker
from gui.task_list import ScrollableTaskList
from gui.toast import Notifier
from services import deadline as deadlines

logger = logging.getLogger(__name__)


class MainWindow(tk.Tk):
    def __init__(self, controller: AppController):
        super().__init__()
        self.controller = controller
        self.title("🧾 To-Do List")
        self.geometry(config.WINDOW_GEOMETRY)
        self.configure(bg=theme.DESKTOP_BLUE, padx=16, pady=16)
        if config.TOPMOST:
            self.attributes("-topmost", True)

        # Window chrome: navy frame + title bar
        frame = tk.Frame(self, bg=theme.WINDOW_GRAY, highlightthickness=4,
                         highlightbackground=theme.FRAME_NAVY)
        frame.pack(fill="both", expand=True)
        title_bar = tk.Frame(frame, bg=theme.TITLE_BLUE)
        title_bar.pack(fill="x")
        tk.Label(title_bar, text="🧾 To-Do List", bg=theme.TITLE_BLUE, fg=theme.TITLE_FG,
                 font=theme.FONT_TITLE, padx=10, pady=4).pack(side="left")
        close = tk.Label(title_bar, text="🗙", bg=theme.TITLE_BLUE, fg=theme.TITLE_FG, padx=10, cursor="hand2")
        close.pack(side="right")
        close.bind("<Button-1>", lambda e: self.close())

        # Top bar
        body = tk.Frame(frame, bg=theme.WINDOW_GRAY, padx=12, pady=10)
        body.pack(fill="both", expand=True)
        top = tk.Frame(body, bg=theme.WINDOW_GRAY)
        top.pack(fill="x", pady=(0, 8))
        self.add_btn = tk.Button(top, text="➕ Add Task", command=self._on_add, bg=theme.LIGHT_GRAY,
                                 relief="raised", bd=2, font=theme.FONT, state="disabled")
        self.add_btn.pack(side="left")

        self.task_list = ScrollableTaskList(
            body,
            on_toggle=self._on_toggle,
            on_edit=self._on_edit,
            on_delete=self._on_delete,
        )
        self.task_list.pack(fill="both", expand=True)

        # Status bar: counts + clock
        status = tk.Frame(frame, bg=theme.WINDOW_GRAY, relief="sunken", bd=2)
        status.pack(fill="x", side="bottom")
        self.status_var = tk.StringVar(value="Ready")
        tk.Label(status, textvariable=self.status_var, bg=theme.WINDOW_GRAY, font=theme.FONT_SMALL).pack(
            side="left", padx=6)
        self.clock_var = tk.StringVar()
        tk.Label(status, textvariable=self.clock_var, bg=theme.WINDOW_GRAY, font=theme.FONT_SMALL).pack(
            side="right", padx=6)

        self.notifier = Notifier(self, duration_ms=config.TOAST_DURATION_MS)
        self.runner = BackgroundRunner(self, poll_ms=config.WORKER_POLL_MS)
        self.ticker = CountdownTicker(self, self._tick, interval_ms=config.TICK_INTERVAL_MS)

        # timers / binds
        self.bind("<F5>", lambda e: self.reload())
        self.protocol("WM_DELETE_WINDOW", self.close)
        self.runner.start()
        self.ticker.start()
        self._tick()
        self.reload()

    # ---------- lifecycle ----------
    def close(self):
        self.ticker.stop()
        self.runner.stop()
        logger.info("window closed")
        self.destroy()

    # ---------- data ----------
    def reload(self):
        self.status_var.set("⏳ Loading tasks...")
        generation = self.controller.begin_reload()
        self.runner.submit(self.controller.fetch_tasks,
                           lambda tasks: self._on_loaded(generation, tasks),
                           self._failed("Could not load tasks"))

    def _on_loaded(self, generation: int, tasks):
        if not self.controller.apply_loaded(generation, tasks):
            return
        self.add_btn.configure(state="normal")
        self._render()

    def _render(self):
        rows = []
        for t in self.controller.tasks:
            try:
                label = deadlines.format_deadline(t.deadline)
            except ValueError:
                label = t.deadline or "?"
            rows.append({"id": t.id, "text": t.text, "deadline_label": label, "completed": t.completed})
        self.task_list.set_tasks(rows)
        self._tick()

    def _tick(self):
        now = dt.datetime.now()
        self.clock_var.set(f"🕒 {now.strftime('%H:%M:%S')}")
        statuses = self.controller.deadline_statuses(now)
        for task_id in self.task_list.task_ids():
            info = statuses.get(task_id)
            if info is None:
                self.task_list.update_countdown(task_id, deadlines.UNKNOWN_MARKER, None)
            else:
                self.task_list.update_countdown(task_id, info.remaining, info.status)
        if self.add_btn.cget("state") == "normal":
            counts = self.controller.summary(now)
            self.status_var.set(
                f"{len(self.controller.tasks)} tasks · {counts[DeadlineStatus.UPCOMING]} upcoming · "
                f"{counts[DeadlineStatus.OVERDUE]} overdue · {counts[DeadlineStatus.COMPLETED]} done"
            )

    def _failed(self, what: str):
        def handler(e: Exception):
            if not isinstance(e, StoreError):
                logger.error("%s", what, exc_info=e)
            self.notifier.error(f"⚠️ {what}: {e}")
            if not self.controller.tasks:
                self.status_var.set("Offline")
        return handler

    def _write(self, task_id, call, apply, message: str, what: str):
        """Run ``call`` on the worker; ``apply`` its result here on the Tk thread."""
        if not self.controller.claim(task_id):
            logger.debug("task %s busy, ignoring", task_id)
            return

        def ok(result):
            self.controller.release(task_id)
            apply(result)
            self._done(message)

        def failed(e: Exception):
            self.controller.release(task_id)
            self._failed(what)(e)

        self.runner.submit(call, ok, failed)

    def _lookup(self, task_id: str):
        task = self.controller.find_task(task_id)
        if task is None:
            # row outlived its task (reload or delete landed meanwhile)
            logger.info("task %s no longer listed", task_id)
            self._render()
        return task

    # ---------- actions ----------
    def _on_add(self):
        result = ask_task(self, "📝 Add New Task",
                          lambda text, deadline: self.controller.validate(text, deadline))
        if not result:
            return
        text, deadline = result

        def added(task):
            self.controller.apply_created(task)
            self._done("📌 Task added")

        self.runner.submit(lambda: self.controller.push_new(text, deadline), added,
                           self._failed("Could not add task"))

    def _on_edit(self, task_id: str):
        task = self._lookup(task_id)
        if task is None:
            return
        try:
            prefill = deadlines.to_input_value(task.deadline)
        except ValueError:
            prefill = task.deadline
        result = ask_task(
            self, "✏️ Edit Task",
            lambda text, deadline: self.controller.validate(text, deadline, allow_past=True),
            text=task.text, deadline=prefill, confirm_label="💾 Save",
        )
        if not result:
            return
        text, deadline = result
        self._write(task_id, lambda: self.controller.push_edit(task_id, text, deadline),
                    self.controller.apply_updated, "📝 Task updated", "Could not update task")

    def _on_toggle(self, task_id: str):
        task = self._lookup(task_id)
        if task is None:
            return
        target = not task.completed
        self._write(task_id, lambda: self.controller.push_completed(task_id, target),
                    self.controller.apply_updated,
                    "Task completed" if target else "Task reopened", "Could not update task")

    def _on_delete(self, task_id: str):
        task = self._lookup(task_id)
        if task is None or not confirm_delete(self, task.text):
            return
        self._write(task_id, lambda: self.controller.push_delete(task_id),
                    self.controller.apply_deleted, "🗑️ Task deleted", "Could not delete task")

    def _done(self, message: str):
        self._render()
        self.notifier.success(message)
