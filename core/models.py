from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict


class DeadlineStatus(Enum):
    UPCOMING = "upcoming"
    OVERDUE = "overdue"
    COMPLETED = "completed"


@dataclass(frozen=True)
class DeadlineInfo:
    status: DeadlineStatus
    remaining: str
    overdue: bool = False


@dataclass
class Task:
    id: str
    text: str
    deadline: str  # local date-time, e.g. 2026-10-21T14:30
    completed: bool = False

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Task":
        """Build a Task from a PocketBase record (extra keys are ignored)."""
        return cls(
            id=str(record["id"]),
            text=record.get("text") or "",
            deadline=record.get("deadline") or "",
            completed=bool(record.get("completed", False)),
        )

    def to_payload(self) -> Dict[str, Any]:
        return {"text": self.text, "deadline": self.deadline, "completed": self.completed}
