"""
Timers and background work for the Tk main loop.

Both helpers only need an object with ``after(ms, fn)`` and
``after_cancel(id)`` (any Tk widget), and both have an explicit
``start()`` / ``stop()`` so closing the window never leaves a loop behind.
"""
from __future__ import annotations
import logging
import queue
import threading
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


class CountdownTicker:
    """Calls ``on_tick`` every ``interval_ms`` until stopped."""
    def __init__(self, widget, on_tick: Callable[[], None], interval_ms: int = 1000):
        self.widget = widget
        self.on_tick = on_tick
        self.interval_ms = interval_ms
        self._job: Optional[str] = None

    @property
    def running(self) -> bool:
        return self._job is not None

    def start(self) -> None:
        if self.running:
            return
        self._job = self.widget.after(self.interval_ms, self._tick)

    def stop(self) -> None:
        if self._job is not None:
            self.widget.after_cancel(self._job)
            self._job = None

    def _tick(self) -> None:
        try:
            self.on_tick()
        except Exception:
            logger.exception("tick failed")
        finally:
            # stop() may have been called from inside on_tick
            if self._job is not None:
                self._job = self.widget.after(self.interval_ms, self._tick)


class BackgroundRunner:
    """Runs blocking calls on worker threads, delivers results on the Tk thread."""
    def __init__(self, widget, poll_ms: int = 50):
        self.widget = widget
        self.poll_ms = poll_ms
        self._results: "queue.Queue[tuple[Callable, Any]]" = queue.Queue()
        self._job: Optional[str] = None

    @property
    def running(self) -> bool:
        return self._job is not None

    def start(self) -> None:
        if self.running:
            return
        self._job = self.widget.after(self.poll_ms, self._poll)

    def stop(self) -> None:
        if self._job is not None:
            self.widget.after_cancel(self._job)
            self._job = None

    def submit(
        self,
        fn: Callable[[], Any],
        on_success: Optional[Callable[[Any], None]] = None,
        on_error: Optional[Callable[[Exception], None]] = None,
    ) -> threading.Thread:
        def work():
            try:
                result = fn()
            except Exception as e:
                logger.debug("background call failed: %s", e)
                if on_error:
                    self._results.put((on_error, e))
                else:
                    logger.error("unhandled background error: %s", e)
                return
            if on_success:
                self._results.put((on_success, result))

        t = threading.Thread(target=work, daemon=True)
        t.start()
        return t

    def drain(self) -> int:
        """Deliver every finished result now. Returns how many callbacks ran."""
        n = 0
        while True:
            try:
                callback, value = self._results.get_nowait()
            except queue.Empty:
                return n
            try:
                callback(value)
            except Exception:
                logger.exception("background callback failed")
            n += 1

    def _poll(self) -> None:
        try:
            self.drain()
        finally:
            if self._job is not None:
                self._job = self.widget.after(self.poll_ms, self._poll)
