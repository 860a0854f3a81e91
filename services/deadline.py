"""
Deadline countdown and task status derivation.

Everything here is pure: the caller passes ``now`` in, nothing reads the clock
and nothing is cached, so the same inputs always give the same answer. A tick
of the UI is simply ``evaluate_all(tasks, now)`` with a fresh ``now``.

Deadlines are stored as local date-time strings (``2026-10-21T14:30``). A
naive value is local time; when only one side of a comparison carries a
timezone the naive side is read as local time.
"""
from __future__ import annotations
import datetime as dt
import logging
from typing import Dict, Iterable, Union

from core.exceptions import InvalidTimestamp
from core.models import DeadlineInfo, DeadlineStatus, Task

logger = logging.getLogger(__name__)

Timestamp = Union[str, dt.datetime]

DONE_MARKER = "✅ Done"
TIMES_UP_MARKER = "⛔ Time's up!"
UNKNOWN_MARKER = "❔ Unknown deadline"

MS_PER_HOUR = 3_600_000
MS_PER_MINUTE = 60_000
MS_PER_SECOND = 1_000


def parse_deadline(value: Timestamp) -> dt.datetime:
    """Parse a stored deadline. Raises InvalidTimestamp for anything unusable."""
    if isinstance(value, dt.datetime):
        return value
    if not isinstance(value, str) or not value.strip():
        raise InvalidTimestamp(f"Invalid deadline: {value!r}")
    raw = value.strip()
    if raw.endswith(("Z", "z")):
        raw = raw[:-1] + "+00:00"
    try:
        return dt.datetime.fromisoformat(raw)
    except ValueError as e:
        raise InvalidTimestamp(f"Invalid deadline: {value!r}") from e


def normalize_deadline(value: Timestamp) -> str:
    """Canonical storage form: naive local ``YYYY-MM-DDTHH:MM`` (seconds kept only when set).

    An offset in the input is converted to local time and dropped.
    """
    d = parse_deadline(value)
    if d.tzinfo is not None:
        d = d.astimezone().replace(tzinfo=None)
    spec = "minutes" if d.second == 0 and d.microsecond == 0 else "seconds"
    return d.replace(microsecond=0).isoformat(timespec=spec)


def format_deadline(value: Timestamp) -> str:
    """Human display, e.g. ``Wed 21 Oct 2026, 14:30``."""
    return parse_deadline(value).strftime("%a %d %b %Y, %H:%M")


def to_input_value(value: Timestamp) -> str:
    """Prefill for the deadline field of the edit dialog."""
    return parse_deadline(value).strftime("%Y-%m-%d %H:%M")


def _align(deadline: dt.datetime, now: dt.datetime) -> tuple[dt.datetime, dt.datetime]:
    deadline_aware = deadline.tzinfo is not None
    now_aware = now.tzinfo is not None
    if deadline_aware and not now_aware:
        now = now.astimezone()
    elif now_aware and not deadline_aware:
        deadline = deadline.astimezone()
    return deadline, now


def remaining_ms(deadline: Timestamp, now: dt.datetime) -> int:
    """Signed whole milliseconds from ``now`` until ``deadline``."""
    d, n = _align(parse_deadline(deadline), now)
    return (d - n) // dt.timedelta(milliseconds=1)


def format_remaining(diff_ms: int) -> str:
    # no day roll-over: 50 hours stay "50h"
    hours = diff_ms // MS_PER_HOUR
    minutes = (diff_ms % MS_PER_HOUR) // MS_PER_MINUTE
    seconds = (diff_ms % MS_PER_MINUTE) // MS_PER_SECOND
    return f"{hours}h {minutes}m {seconds}s"


def evaluate(deadline: Timestamp, completed: bool, now: dt.datetime) -> DeadlineInfo:
    """
    Derive the countdown string and status of one task.

    - completed           -> COMPLETED, fixed done marker
    - deadline - now <= 0 -> OVERDUE, fixed time's-up marker
    - otherwise           -> UPCOMING, "{h}h {m}m {s}s"

    The deadline is parsed even for completed tasks, so a malformed value
    always raises InvalidTimestamp.
    """
    diff = remaining_ms(deadline, now)
    if completed:
        return DeadlineInfo(DeadlineStatus.COMPLETED, DONE_MARKER, overdue=False)
    if diff <= 0:
        return DeadlineInfo(DeadlineStatus.OVERDUE, TIMES_UP_MARKER, overdue=True)
    return DeadlineInfo(DeadlineStatus.UPCOMING, format_remaining(diff), overdue=False)


def evaluate_all(tasks: Iterable[Task], now: dt.datetime) -> Dict[str, DeadlineInfo]:
    """One tick: status per task id. Tasks with an unparseable deadline are left out."""
    out: Dict[str, DeadlineInfo] = {}
    for t in tasks:
        try:
            out[t.id] = evaluate(t.deadline, t.completed, now)
        except InvalidTimestamp as e:
            logger.debug("task %s: %s", t.id, e)
    return out
