"""Transient notifications drawn in the top-right corner of the main window."""
from __future__ import annotations
import logging
import tkinter as tk

from gui import theme

logger = logging.getLogger(__name__)


class Toast(tk.Toplevel):
    """Borderless popup that destroys itself after ``duration_ms``."""
    def __init__(self, master: tk.Misc, message: str, *, error: bool = False,
                 duration_ms: int = 2500, offset: int = 0):
        super().__init__(master)
        self.overrideredirect(True)
        self.attributes("-topmost", True)
        self.configure(bg=theme.FRAME_NAVY, padx=2, pady=2)
        tk.Label(
            self,
            text=message,
            bg=theme.ERROR_COLOR if error else theme.WINDOW_GRAY,
            fg="black",
            font=theme.FONT,
            padx=10,
            pady=6,
        ).pack()
        self._place(master, offset)
        self.after(duration_ms, self._close)

    def _place(self, master: tk.Misc, offset: int) -> None:
        self.update_idletasks()
        x = master.winfo_rootx() + master.winfo_width() - self.winfo_reqwidth() - 12
        y = master.winfo_rooty() + 12 + offset
        self.geometry(f"+{max(x, 0)}+{max(y, 0)}")

    def _close(self) -> None:
        if self.winfo_exists():
            self.destroy()


class Notifier:
    """Fire-and-forget toasts, stacked while several are visible."""
    def __init__(self, master: tk.Misc, duration_ms: int = 2500):
        self.master = master
        self.duration_ms = duration_ms
        self._live: list[Toast] = []

    def success(self, message: str) -> None:
        logger.info(message)
        self._show(message, error=False)

    def error(self, message: str) -> None:
        logger.error(message)
        self._show(message, error=True)

    def _show(self, message: str, *, error: bool) -> None:
        self._live = [t for t in self._live if t.winfo_exists()]
        offset = sum(t.winfo_reqheight() + 6 for t in self._live)
        self._live.append(
            Toast(self.master, message, error=error, duration_ms=self.duration_ms, offset=offset)
        )
