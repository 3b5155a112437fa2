# src/taskmate/tasks/task_stats.py

from __future__ import annotations

"""
Derived statistics over a task snapshot.

Every function recomputes from the given sequence; nothing is cached.
Pass an explicit `now` to get reproducible numbers.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime

from .task_models import Priority, Task, now_local


@dataclass(slots=True, frozen=True)
class TaskStats:
    total: int
    completed: int
    high_priority: int
    overdue: int
    on_time: int
    completed_on_time: int
    completion_rate: float
    by_priority: dict[Priority, int]


def completed_count(tasks: Sequence[Task]) -> int:
    return sum(1 for t in tasks if t.is_completed)


def high_priority_count(tasks: Sequence[Task]) -> int:
    return sum(1 for t in tasks if t.priority == Priority.HIGH)


def overdue_count(tasks: Sequence[Task], now: datetime | None = None) -> int:
    now = now or now_local()
    return sum(1 for t in tasks if not t.is_completed and t.due_date < now)


def on_time_count(tasks: Sequence[Task], now: datetime | None = None) -> int:
    """Completed tasks whose due date is not in the future."""
    now = now or now_local()
    return sum(1 for t in tasks if t.is_completed and t.due_date <= now)


def completion_rate(tasks: Sequence[Task]) -> float:
    """Percentage of completed tasks; 0.0 for an empty list."""
    total = len(tasks)
    if total == 0:
        return 0.0
    return completed_count(tasks) / total * 100


def completed_on_time_count(tasks: Sequence[Task]) -> int:
    """
    Completed tasks with due_date >= reminder.

    A task without a reminder compares its due date with itself and is always
    counted. This mirrors long-standing behaviour and is most likely not what
    "on time" should mean; keep it until the metric is redefined.
    """
    return sum(
        1
        for t in tasks
        if t.is_completed and t.due_date >= (t.reminder or t.due_date)
    )


def priority_breakdown(tasks: Sequence[Task]) -> dict[Priority, int]:
    out = {p: 0 for p in Priority}
    for t in tasks:
        out[t.priority] += 1
    return out


def compute_stats(tasks: Sequence[Task], now: datetime | None = None) -> TaskStats:
    now = now or now_local()
    return TaskStats(
        total=len(tasks),
        completed=completed_count(tasks),
        high_priority=high_priority_count(tasks),
        overdue=overdue_count(tasks, now),
        on_time=on_time_count(tasks, now),
        completed_on_time=completed_on_time_count(tasks),
        completion_rate=completion_rate(tasks),
        by_priority=priority_breakdown(tasks),
    )
