"""
Scrollable task list for the countdown window.

Each task is a row (a Frame) inside a scrollable Canvas with:
- the task text (bold while open, struck through once completed; click toggles)
- the deadline date
- the live countdown, refreshed every tick through ``update_countdown()``
- Edit / Delete buttons

The widget holds view state only. Changes go through the callbacks passed in
the constructor; the controller decides what the new state is.
"""
from __future__ import annotations
from typing import Callable, Dict, List, Optional, Tuple
import tkinter as tk
from tkinter import ttk

from core.models import DeadlineStatus
from gui import theme


class TaskRow(tk.Frame):
    """A single task row coloured by its deadline status."""
    def __init__(
        self,
        master,
        task_id: str,
        text: str,
        deadline_label: str,
        completed: bool = False,
        on_toggle: Optional[Callable[[str], None]] = None,
        on_edit: Optional[Callable[[str], None]] = None,
        on_delete: Optional[Callable[[str], None]] = None,
        wrap: int = 420,
    ):
        super().__init__(master, relief="sunken", bd=2, padx=8, pady=6)
        self.task_id = task_id
        self._on_toggle = on_toggle
        self._on_edit = on_edit
        self._on_delete = on_delete
        self.status: Optional[DeadlineStatus] = None
        self._color: Optional[str] = None

        self.columnconfigure(0, weight=1)

        self.lbl = tk.Label(self, text=text, wraplength=wrap, anchor="w", justify="left", cursor="hand2")
        self.lbl.grid(row=0, column=0, sticky="we")
        self.lbl.bind("<Button-1>", lambda e: self._toggle())

        self.deadline_lbl = tk.Label(self, text=f"📅 {deadline_label}", anchor="w", font=theme.FONT_SMALL)
        self.deadline_lbl.grid(row=1, column=0, sticky="we", pady=(4, 0))

        self.countdown_lbl = tk.Label(self, text="Calculating...", anchor="w", font=theme.FONT_SMALL)
        self.countdown_lbl.grid(row=2, column=0, sticky="we", pady=(2, 0))

        actions = tk.Frame(self)
        actions.grid(row=3, column=0, sticky="w", pady=(4, 0))
        self._actions = actions
        tk.Button(actions, text="✏️ Edit", command=self._edit, bg=theme.EDIT_COLOR, fg="white",
                  relief="raised", bd=2, font=theme.FONT).pack(side="left", padx=(0, 5))
        tk.Button(actions, text="🗑️ Delete", command=self._delete, bg=theme.DELETE_COLOR, fg="white",
                  relief="raised", bd=2, font=theme.FONT).pack(side="left")

        self.set_completed(completed)

    # --- Public API ---
    def set_completed(self, completed: bool):
        self.lbl.configure(font=theme.FONT_STRIKE if completed else theme.FONT_BOLD)

    def set_countdown(self, remaining: str, status: Optional[DeadlineStatus]):
        self.countdown_lbl.configure(text=remaining)
        self.status = status
        color = theme.status_color(status)
        if color != self._color:
            self._paint(color)

    # --- Internals ---
    def _paint(self, color: str):
        self._color = color
        for w in (self, self.lbl, self.deadline_lbl, self.countdown_lbl, self._actions):
            w.configure(bg=color)

    def _toggle(self):
        if self._on_toggle:
            self._on_toggle(self.task_id)

    def _edit(self):
        if self._on_edit:
            self._on_edit(self.task_id)

    def _delete(self):
        if self._on_delete:
            self._on_delete(self.task_id)


class ScrollableTaskList(ttk.Frame):
    """Canvas + interior Frame pattern with mousewheel support."""
    def __init__(
        self,
        master,
        on_toggle: Optional[Callable[[str], None]] = None,
        on_edit: Optional[Callable[[str], None]] = None,
        on_delete: Optional[Callable[[str], None]] = None,
        row_wrap: int = 420,
        row_padding: Tuple[int, int] = (0, 8),
        **kwargs,
    ):
        super().__init__(master, **kwargs)
        self._on_toggle = on_toggle
        self._on_edit = on_edit
        self._on_delete = on_delete
        self._row_wrap = row_wrap
        self._row_padding = row_padding
        self._rows: Dict[str, TaskRow] = {}

        # --- layout ---
        self.canvas = tk.Canvas(self, highlightthickness=0, bg=theme.WINDOW_GRAY)
        self.vbar = ttk.Scrollbar(self, orient="vertical", command=self.canvas.yview)
        self.canvas.configure(yscrollcommand=self.vbar.set)

        self.canvas.grid(row=0, column=0, sticky="nsew")
        self.vbar.grid(row=0, column=1, sticky="ns")
        self.rowconfigure(0, weight=1)
        self.columnconfigure(0, weight=1)

        self.interior = tk.Frame(self.canvas, bg=theme.WINDOW_GRAY)
        self._win_id = self.canvas.create_window(0, 0, window=self.interior, anchor="nw")

        self.placeholder = tk.Label(self.interior, text="⏳ Loading tasks...", bg=theme.WINDOW_GRAY,
                                    font=theme.FONT)
        self.placeholder.grid(row=0, column=0, sticky="w", padx=8, pady=8)

        self.interior.bind("<Configure>", self._on_interior_configure)
        self.canvas.bind("<Configure>", self._on_canvas_configure)

        self._bind_mousewheel(self.canvas)

    # --- Public API ---
    def set_tasks(self, tasks: List[Dict]):
        """Replace all rows. Each dict: {'id', 'text', 'deadline_label', 'completed'}."""
        for row in list(self._rows.values()):
            row.destroy()
        self._rows.clear()

        for task in tasks:
            row = TaskRow(
                self.interior,
                task_id=task["id"],
                text=task.get("text", ""),
                deadline_label=task.get("deadline_label", ""),
                completed=task.get("completed", False),
                on_toggle=self._on_toggle,
                on_edit=self._on_edit,
                on_delete=self._on_delete,
                wrap=self._row_wrap,
            )
            self._rows[task["id"]] = row

        if tasks:
            self.placeholder.grid_remove()
        else:
            self.placeholder.configure(text="No tasks yet. Add one with ➕ Add Task.")
            self.placeholder.grid()
        self._repack_rows()

    def update_countdown(self, task_id: str, remaining: str, status: Optional[DeadlineStatus]):
        row = self._rows.get(task_id)
        if row:
            row.set_countdown(remaining, status)

    def task_ids(self) -> List[str]:
        return list(self._rows)

    # --- Internals ---
    def _repack_rows(self):
        self.interior.columnconfigure(0, weight=1)
        for i, row in enumerate(self._rows.values(), start=1):
            row.grid(row=i, column=0, sticky="we", padx=(8, 8), pady=self._row_padding)
        self._update_scrollregion()

    def _update_scrollregion(self):
        self.update_idletasks()
        self.canvas.configure(scrollregion=self.canvas.bbox("all"))

    def _on_interior_configure(self, _):
        self._update_scrollregion()

    def _on_canvas_configure(self, event):
        # keep interior width synced to canvas for wrapping
        self.canvas.itemconfigure(self._win_id, width=event.width)
        for row in self._rows.values():
            row.lbl.configure(wraplength=max(event.width - 60, 100))

    # Mousewheel helpers
    def _bind_mousewheel(self, widget):
        widget.bind_all("<MouseWheel>", self._on_mousewheel_windows_mac, add="+")
        widget.bind_all("<Button-4>", self._on_mousewheel_linux, add="+")
        widget.bind_all("<Button-5>", self._on_mousewheel_linux, add="+")

    def _on_mousewheel_windows_mac(self, event):
        # Windows: +/-120 per notch
        delta = int(-1 * (event.delta / 120))
        self.canvas.yview_scroll(delta, "units")

    def _on_mousewheel_linux(self, event):
        if event.num == 4:
            self.canvas.yview_scroll(-1, "units")
        elif event.num == 5:
            self.canvas.yview_scroll(1, "units")
