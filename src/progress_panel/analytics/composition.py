"""
Status Composition Classifier

Buckets every individual task into completed, in-progress or delayed.

The month a task belongs to decides first, the task's own value last:

1. month status is 遅延 or 停滞            -> delayed
2. month has 0 of N tasks done (N > 0)   -> delayed
3. month has N of N tasks done (N > 0)   -> completed
4. task itself done                      -> completed, else in-progress

Rule 2 reports a month that has not been started as delayed even when
nobody marked it so. Reported figures depend on this, so it is kept
as is.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable

from ..records import MonthlyTaskRecord
from .classifier import classify_record, percentage


@dataclass(frozen=True)
class StatusComposition:
    completed: int = 0
    in_progress: int = 0
    delayed: int = 0

    @property
    def total(self) -> int:
        return self.completed + self.in_progress + self.delayed

    @property
    def completed_percentage(self) -> int:
        return percentage(self.completed, self.total)

    @property
    def in_progress_percentage(self) -> int:
        return percentage(self.in_progress, self.total)

    @property
    def delayed_percentage(self) -> int:
        return percentage(self.delayed, self.total)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "completed": self.completed,
            "inProgress": self.in_progress,
            "delayed": self.delayed,
            "total": self.total,
            "completedPercentage": self.completed_percentage,
            "inProgressPercentage": self.in_progress_percentage,
            "delayedPercentage": self.delayed_percentage,
        }


def compose_status(records: Iterable[MonthlyTaskRecord]) -> StatusComposition:
    """Tally every task of the given records into the three buckets."""
    completed = in_progress = delayed = 0

    for record in records:
        counts = classify_record(record)
        month_delayed = record.is_delayed or counts.is_unstarted

        for _, state in record.tasks:
            if month_delayed:
                delayed += 1
            elif counts.is_fully_completed or state.is_done:
                completed += 1
            else:
                in_progress += 1

    return StatusComposition(completed=completed, in_progress=in_progress, delayed=delayed)
