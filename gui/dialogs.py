from __future__ import annotations
import tkinter as tk
from tkinter import messagebox as mb
from typing import Callable, Optional, Tuple

from core.exceptions import ValidationError
from gui import theme

Validator = Callable[[str, str], Tuple[str, str]]


class TaskDialog(tk.Toplevel):
    """Modal form with task text + deadline.

    ``validator`` receives the raw field values and returns the cleaned pair or
    raises ValidationError; the message is shown inline and the dialog stays
    open. After ``wait()`` the ``result`` is ``(text, deadline)`` or None.
    """
    def __init__(self, master: tk.Misc, title: str, validator: Validator, *,
                 text: str = "", deadline: str = "", confirm_label: str = "✔️ Add"):
        super().__init__(master)
        self.title(title)
        self.configure(bg=theme.WINDOW_GRAY, padx=12, pady=12,
                       highlightthickness=2, highlightbackground=theme.FRAME_NAVY)
        self.resizable(False, False)
        self.transient(master)
        self.validator = validator
        self.result: Optional[Tuple[str, str]] = None

        tk.Label(self, text=title, bg=theme.WINDOW_GRAY, font=theme.FONT_TITLE).grid(
            row=0, column=0, columnspan=2, sticky="w", pady=(0, 8))

        tk.Label(self, text="Task", bg=theme.WINDOW_GRAY, font=theme.FONT).grid(row=1, column=0, sticky="w")
        self.text_var = tk.StringVar(value=text)
        self.text_entry = tk.Entry(self, textvariable=self.text_var, width=36, font=theme.FONT,
                                   relief="sunken", bd=2)
        self.text_entry.grid(row=1, column=1, sticky="we", pady=2)

        tk.Label(self, text="Deadline", bg=theme.WINDOW_GRAY, font=theme.FONT).grid(row=2, column=0, sticky="w")
        self.deadline_var = tk.StringVar(value=deadline)
        tk.Entry(self, textvariable=self.deadline_var, width=36, font=theme.FONT,
                 relief="sunken", bd=2).grid(row=2, column=1, sticky="we", pady=2)
        tk.Label(self, text="YYYY-MM-DD HH:MM", bg=theme.WINDOW_GRAY, font=theme.FONT_SMALL).grid(
            row=3, column=1, sticky="w")

        self.error_var = tk.StringVar()
        tk.Label(self, textvariable=self.error_var, bg=theme.WINDOW_GRAY, fg="#B00020",
                 font=theme.FONT_SMALL).grid(row=4, column=0, columnspan=2, sticky="w", pady=(4, 0))

        buttons = tk.Frame(self, bg=theme.WINDOW_GRAY)
        buttons.grid(row=5, column=0, columnspan=2, sticky="e", pady=(8, 0))
        tk.Button(buttons, text=confirm_label, command=self._on_ok, bg=theme.LIGHT_GRAY,
                  relief="raised", bd=2, font=theme.FONT).pack(side="left", padx=(0, 6))
        tk.Button(buttons, text="❌ Cancel", command=self._on_cancel, bg=theme.LIGHT_GRAY,
                  relief="raised", bd=2, font=theme.FONT).pack(side="left")

        self.bind("<Return>", lambda e: self._on_ok())
        self.bind("<Escape>", lambda e: self._on_cancel())
        self.protocol("WM_DELETE_WINDOW", self._on_cancel)

    def wait(self) -> Optional[Tuple[str, str]]:
        self.grab_set()
        self.text_entry.focus_set()
        self.wait_window(self)
        return self.result

    def _on_ok(self):
        try:
            self.result = self.validator(self.text_var.get(), self.deadline_var.get())
        except ValidationError as e:
            self.error_var.set(f"⚠️ {e}")
            return
        self.destroy()

    def _on_cancel(self):
        self.result = None
        self.destroy()


def ask_task(master: tk.Misc, title: str, validator: Validator, **kwargs) -> Optional[Tuple[str, str]]:
    return TaskDialog(master, title, validator, **kwargs).wait()


def confirm_delete(master: tk.Misc, text: str) -> bool:
    return mb.askyesno("❓ Delete Task", f"Are you sure you want to delete this task?\n\n{text}",
                       icon="warning", parent=master)
