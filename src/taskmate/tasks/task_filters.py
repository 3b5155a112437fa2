# src/taskmate/tasks/task_filters.py

from __future__ import annotations

from collections.abc import Iterable
from enum import StrEnum

from .task_models import Priority, Task


class TaskFilter(StrEnum):
    ALL = "all"
    ACTIVE = "active"
    COMPLETED = "done"
    HIGH_PRIORITY = "high"

    @classmethod
    def from_arg(cls, raw: str | None) -> TaskFilter:
        if not raw:
            return cls.ALL
        try:
            return cls(raw.strip().lower())
        except ValueError:
            return cls.ALL


def _matches_mode(task: Task, mode: TaskFilter) -> bool:
    if mode == TaskFilter.ACTIVE:
        return not task.is_completed
    if mode == TaskFilter.COMPLETED:
        return task.is_completed
    if mode == TaskFilter.HIGH_PRIORITY:
        return task.priority == Priority.HIGH
    return True


def has_tag_matching(task: Task, search: str) -> bool:
    needle = search.lower()
    return any(needle in tag.name.lower() for tag in task.tags)


def filter_tasks(tasks: Iterable[Task], mode: TaskFilter = TaskFilter.ALL, search: str = "") -> list[Task]:
    """
    Apply the list filter, then the tag search (substring, case-insensitive).
    Input order is kept.
    """
    out = [t for t in tasks if _matches_mode(t, mode)]
    search = (search or "").strip()
    if search:
        out = [t for t in out if has_tag_matching(t, search)]
    return out
