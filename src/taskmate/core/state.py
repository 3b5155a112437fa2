# src/taskmate/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..reminders.reminder_center import ReminderCenter
from ..tasks.task_filters import TaskFilter
from ..tasks.task_store import TaskStore


@dataclass
class AppState:
    """
    Everything a front-end needs, wired once by the composition root.

    There is exactly one TaskStore per session; pass the state (or the store)
    explicitly instead of reaching for a module-level instance.
    """

    settings: Any
    store: TaskStore
    reminders: ReminderCenter

    # Last list the console printed; positions in commands refer to it.
    visible: list[Any] | None = None
    list_filter: TaskFilter = TaskFilter.ALL
    search: str = ""
