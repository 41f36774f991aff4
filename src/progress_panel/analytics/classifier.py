"""
Task-completion classifier.

Counts completed and total tasks for a task map and turns counts into
whole-number percentages.
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Mapping

from ..records import MonthlyTaskRecord, TaskCompletion


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (12.5 -> 13)."""
    return int(math.floor(value + 0.5))


def percentage(part: int, whole: int) -> int:
    """Rounded share of part in whole, 0 when whole is 0."""
    if whole <= 0:
        return 0
    return round_half_up(part / whole * 100)


@dataclass(frozen=True)
class TaskCounts:
    """Completed/total tally for one or more task maps."""
    completed: int = 0
    total: int = 0

    @property
    def rate(self) -> int:
        return percentage(self.completed, self.total)

    @property
    def is_fully_completed(self) -> bool:
        return self.total > 0 and self.completed == self.total

    @property
    def is_unstarted(self) -> bool:
        return self.total > 0 and self.completed == 0

    def __add__(self, other: "TaskCounts") -> "TaskCounts":
        return TaskCounts(self.completed + other.completed, self.total + other.total)

    def to_dict(self) -> Dict[str, int]:
        return {"completed": self.completed, "total": self.total, "rate": self.rate}


def classify(tasks: Any) -> TaskCounts:
    """
    Count completed and total entries of a task map.

    Accepts a raw mapping (values are booleans or legacy strings) or a
    resolved mapping of TaskCompletion. Anything that is not a mapping
    counts as 0/0.
    """
    if not isinstance(tasks, Mapping):
        return TaskCounts()
    completed = 0
    for value in tasks.values():
        state = value if isinstance(value, TaskCompletion) else TaskCompletion.from_value(value)
        if state.is_done:
            completed += 1
    return TaskCounts(completed=completed, total=len(tasks))


def classify_record(record: MonthlyTaskRecord) -> TaskCounts:
    """Count a record's resolved tasks."""
    completed = sum(1 for _, state in record.tasks if state.is_done)
    return TaskCounts(completed=completed, total=len(record.tasks))


def classify_records(records: Iterable[MonthlyTaskRecord]) -> TaskCounts:
    """Sum the counts of several records."""
    counts = TaskCounts()
    for record in records:
        counts = counts + classify_record(record)
    return counts
