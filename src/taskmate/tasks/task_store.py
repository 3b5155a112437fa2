# src/taskmate/tasks/task_store.py

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import StrEnum
from uuid import UUID

from ..core.errors import ReminderError, ReminderOperation
from ..core.ports import ReminderErrorHandler, ReminderScheduler
from . import task_stats
from .task_models import DEFAULT_CATEGORIES, Category, Tag, Task, copy_task, dedupe_tags, default_tags

logger = logging.getLogger(__name__)


class TaskStoreEventKind(StrEnum):
    ADDED = "added"
    EDITED = "edited"
    DELETED = "deleted"
    TAGS_CHANGED = "tags_changed"


@dataclass(slots=True, frozen=True)
class TaskStoreEvent:
    kind: TaskStoreEventKind
    task_ids: tuple[UUID, ...] = ()


Subscriber = Callable[[TaskStoreEvent], None]


def _log_reminder_error(error: ReminderError) -> None:
    logger.warning("Reminder %s", error)


class TaskStore:
    """
    In-memory, ordered task list plus the shared tag catalog.

    The store is the only component that talks to the ReminderScheduler:
    - add_task schedules an alert when the task has a reminder
    - edit_task cancels/reschedules when the reminder changed
    - delete_tasks cancels alerts of removed tasks

    Reminder calls are best-effort. A failing scheduler is logged and reported
    to on_error; the task list itself is always updated.

    Thread-safety:
    - every mutation runs under one re-entrant lock
    - readers get snapshots (copies), never the live records
    """

    def __init__(
        self,
        reminders: ReminderScheduler,
        *,
        reminder_title: str = "Reminder",
        tags: Iterable[Tag] | None = None,
        categories: Iterable[Category] | None = None,
        on_error: ReminderErrorHandler | None = None,
    ) -> None:
        self._reminders = reminders
        self._reminder_title = reminder_title
        self._on_error = on_error or _log_reminder_error
        self._tasks: list[Task] = []
        self._tags: list[Tag] = list(default_tags() if tags is None else tags)
        self._categories: tuple[Category, ...] = tuple(
            DEFAULT_CATEGORIES if categories is None else categories
        )
        self._subscribers: list[Subscriber] = []
        self._lock = threading.RLock()
        logger.info(
            "TaskStore ready tags=%d categories=%d", len(self._tags), len(self._categories)
        )

    # ---- reminder side effects ----

    def _report(self, error: ReminderError) -> None:
        try:
            self._on_error(error)
        except Exception:
            logger.exception("Reminder error handler failed for %s", error.identity)

    def _schedule_reminder(self, task: Task) -> None:
        if task.reminder is None:
            return
        try:
            self._reminders.schedule(task.identity, task.reminder, self._reminder_title, task.name)
            logger.debug("Reminder requested task=%s at=%s", task.identity, task.reminder)
        except Exception as e:
            logger.exception("Reminder schedule failed task=%s", task.identity)
            self._report(ReminderError(ReminderOperation.SCHEDULE, task.identity, str(e), e))

    def _cancel_reminder(self, task: Task) -> None:
        try:
            self._reminders.cancel(task.identity)
            logger.debug("Reminder cancel requested task=%s", task.identity)
        except Exception as e:
            logger.exception("Reminder cancel failed task=%s", task.identity)
            self._report(ReminderError(ReminderOperation.CANCEL, task.identity, str(e), e))

    # ---- change notification ----

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a change listener; returns a function that unregisters it."""
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def _publish(self, event: TaskStoreEvent) -> None:
        for callback in list(self._subscribers):
            try:
                callback(event)
            except Exception:
                logger.exception("TaskStore subscriber failed on %s", event.kind.value)

    # ---- reads ----

    @property
    def tasks(self) -> tuple[Task, ...]:
        """Snapshot of the task list in insertion order."""
        with self._lock:
            return tuple(copy_task(t) for t in self._tasks)

    def __len__(self) -> int:
        return len(self._tasks)

    def index_of(self, task_id: UUID) -> int | None:
        with self._lock:
            for i, t in enumerate(self._tasks):
                if t.id == task_id:
                    return i
            return None

    def get_task(self, task_id: UUID) -> Task | None:
        with self._lock:
            i = self.index_of(task_id)
            return None if i is None else copy_task(self._tasks[i])

    @property
    def tags(self) -> tuple[Tag, ...]:
        with self._lock:
            return tuple(self._tags)

    @property
    def categories(self) -> tuple[Category, ...]:
        return self._categories

    @property
    def completion_rate(self) -> float:
        return task_stats.completion_rate(self.tasks)

    @property
    def completed_on_time_count(self) -> int:
        return task_stats.completed_on_time_count(self.tasks)

    # ---- mutations ----

    def add_task(self, task: Task) -> None:
        """Append task to the end of the list and request its reminder, if any."""
        with self._lock:
            if self.index_of(task.id) is not None:
                logger.warning("Task %s is already in the list; ignoring add.", task.identity)
                return

            stored = copy_task(task)
            stored.tags = dedupe_tags(stored.tags)
            self._tasks.append(stored)
            logger.debug("Task added id=%s name=%r reminder=%s", stored.identity, stored.name, stored.reminder)

            self._schedule_reminder(stored)
            self._publish(TaskStoreEvent(TaskStoreEventKind.ADDED, (stored.id,)))

    def edit_task(self, updated: Task) -> None:
        """
        Replace the stored task that has updated.id with updated (full replace).

        If the reminder changed, the old alert is cancelled before the new one
        is requested. Editing a task that is no longer in the list does nothing.
        """
        with self._lock:
            i = self.index_of(updated.id)
            if i is None:
                logger.debug("edit_task: task %s not found; ignoring.", updated.identity)
                return

            current = self._tasks[i]
            stored = copy_task(updated)
            stored.tags = dedupe_tags(stored.tags)

            if current.reminder != stored.reminder:
                if current.reminder is not None:
                    self._cancel_reminder(current)
                self._schedule_reminder(stored)

            self._tasks[i] = stored
            logger.debug("Task edited id=%s", stored.identity)
            self._publish(TaskStoreEvent(TaskStoreEventKind.EDITED, (stored.id,)))

    def delete_tasks(self, selection: Iterable[int | UUID]) -> int:
        """
        Remove the selected tasks; selection items are list positions (int)
        or task ids (UUID). Unknown entries are skipped.

        Returns the number of removed tasks.
        """
        with self._lock:
            positions: set[int] = set()
            for item in selection:
                if isinstance(item, UUID):
                    i = self.index_of(item)
                elif isinstance(item, int) and not isinstance(item, bool) and 0 <= item < len(self._tasks):
                    i = item
                else:
                    i = None

                if i is None:
                    logger.debug("delete_tasks: skipping unknown selection %r", item)
                    continue
                positions.add(i)

            if not positions:
                return 0

            removed = [self._tasks[i] for i in sorted(positions)]
            for task in removed:
                if task.reminder is not None:
                    self._cancel_reminder(task)

            self._tasks = [t for i, t in enumerate(self._tasks) if i not in positions]
            logger.debug("Tasks deleted count=%d", len(removed))
            self._publish(TaskStoreEvent(TaskStoreEventKind.DELETED, tuple(t.id for t in removed)))
            return len(removed)

    # ---- tag catalog ----

    def add_tag(self, name: str, color: str = "red") -> Tag:
        if not name or not name.strip():
            raise ValueError("tag name is required")
        with self._lock:
            tag = Tag(name=name.strip(), color=color)
            self._tags.append(tag)
            logger.debug("Tag added id=%s name=%r", tag.id, tag.name)
            self._publish(TaskStoreEvent(TaskStoreEventKind.TAGS_CHANGED))
            return tag

    def find_tag(self, name: str) -> Tag | None:
        needle = (name or "").strip().lower()
        with self._lock:
            return next((t for t in self._tags if t.name.lower() == needle), None)

    def rename_tag(self, tag_id: UUID, name: str) -> Tag | None:
        """Rename a catalog tag. Tasks keep the copy they were given."""
        if not name or not name.strip():
            raise ValueError("tag name is required")
        with self._lock:
            for i, tag in enumerate(self._tags):
                if tag.id == tag_id:
                    renamed = Tag(name=name.strip(), color=tag.color, id=tag.id)
                    self._tags[i] = renamed
                    self._publish(TaskStoreEvent(TaskStoreEventKind.TAGS_CHANGED))
                    return renamed
            return None

    def remove_tag(self, tag_id: UUID) -> bool:
        """Drop a tag from the catalog. Tasks already carrying it keep it."""
        with self._lock:
            before = len(self._tags)
            self._tags = [t for t in self._tags if t.id != tag_id]
            if len(self._tags) == before:
                return False
            self._publish(TaskStoreEvent(TaskStoreEventKind.TAGS_CHANGED))
            return True

    def find_category(self, name: str) -> Category | None:
        needle = (name or "").strip().lower()
        return next((c for c in self._categories if c.name.lower() == needle), None)
