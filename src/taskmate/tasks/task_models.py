# src/taskmate/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import IntEnum
from uuid import UUID, uuid4


def now_local() -> datetime:
    """Current wall-clock time as a tz-aware datetime in the local zone."""
    return datetime.now().astimezone()


class Priority(IntEnum):
    LOW = 1
    MEDIUM = 2
    HIGH = 3

    @property
    def label(self) -> str:
        return self.name.capitalize()

    @classmethod
    def parse(cls, raw: str) -> Priority:
        """Accept a display label or member name, case-insensitively."""
        key = (raw or "").strip().upper()
        try:
            return cls[key]
        except KeyError:
            raise ValueError(f"unknown priority: {raw!r}") from None


@dataclass(slots=True, frozen=True)
class Tag:
    name: str
    color: str
    id: UUID = field(default_factory=uuid4)


@dataclass(slots=True, frozen=True)
class Category:
    name: str
    icon: str | None = None
    color: str | None = None
    id: UUID = field(default_factory=uuid4)


@dataclass(slots=True)
class Task:
    """
    A tracked to-do item.

    Every field except id is mutable; callers edit a copy and hand it back
    to TaskStore.edit_task (full replace).
    """

    name: str
    due_date: datetime
    is_completed: bool = False
    reminder: datetime | None = None
    category: Category | None = None
    priority: Priority = Priority.MEDIUM
    tags: list[Tag] = field(default_factory=list)
    id: UUID = field(default_factory=uuid4)

    def __setattr__(self, name: str, value: object) -> None:
        if name == "id" and hasattr(self, "id"):
            raise AttributeError("task id is immutable")
        object.__setattr__(self, name, value)

    @property
    def identity(self) -> str:
        """Key used for the task's reminder alert."""
        return str(self.id)


def new_task(name: str, *, due_date: datetime | None = None) -> Task:
    """A task with the defaults used by the quick-add field."""
    return Task(name=name, due_date=due_date or now_local())


def copy_task(task: Task) -> Task:
    """Independent copy (own tags list, same id)."""
    return replace(task, tags=list(task.tags))


def dedupe_tags(tags: list[Tag]) -> list[Tag]:
    seen: set[UUID] = set()
    out: list[Tag] = []
    for tag in tags:
        if tag.id in seen:
            continue
        seen.add(tag.id)
        out.append(tag)
    return out


def with_tag_toggled(task: Task, tag: Tag) -> Task:
    """Copy of task with tag removed if present, otherwise appended."""
    updated = copy_task(task)
    if tag in updated.tags:
        updated.tags.remove(tag)
    else:
        updated.tags.append(tag)
    return updated


def default_tags() -> list[Tag]:
    return [
        Tag(name="Urgent", color="red"),
        Tag(name="Important", color="orange"),
        Tag(name="Home", color="blue"),
        Tag(name="Work", color="green"),
    ]


DEFAULT_CATEGORIES: tuple[Category, ...] = (
    Category(name="Personal", icon="person.fill", color="blue"),
    Category(name="Work", icon="briefcase.fill", color="green"),
    Category(name="Family", icon="house.fill", color="purple"),
    Category(name="Shopping", icon="cart.fill", color="orange"),
)
