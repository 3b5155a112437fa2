# src/taskmate/cli/commands.py

from __future__ import annotations

import contextlib
import inspect
import logging
import re
import shlex
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime, timedelta
from typing import cast

from ..core.state import AppState
from ..tasks.task_filters import TaskFilter, filter_tasks
from ..tasks.task_models import Priority, Task, new_task, now_local, with_tag_toggled
from ..tasks.task_stats import compute_stats

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)

_RELATIVE_RE = re.compile(r"^\+(\d+)([mhd])$")
_UNITS = {"m": "minutes", "h": "hours", "d": "days"}


class CommandRegistry:
    """Simple slash-command registry used by the console front-end (/add, /list, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        try:
            parts = shlex.split(line[1:])
        except ValueError as e:
            return f"Could not parse command: {e}."
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        logger.debug("Command /%s args=%s", name, args)
        try:
            nparams = len(inspect.signature(handler).parameters)
        except Exception:
            nparams = 3

        if nparams >= 3:
            h3 = cast(CommandHandler3, handler)
            return h3(state, args, emit)

        h2 = cast(CommandHandler2, handler)
        return h2(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- parsing / formatting helpers ----


def parse_when(raw: str, *, now: datetime | None = None) -> datetime:
    """
    Parse a point in time typed by the user:
    - relative: +30m, +2h, +1d
    - ISO 8601: 2026-10-20T09:30 (naive values are taken as local time)
    """
    text = (raw or "").strip()
    m = _RELATIVE_RE.match(text)
    if m:
        base = now or now_local()
        return base + timedelta(**{_UNITS[m.group(2)]: int(m.group(1))})

    try:
        value = datetime.fromisoformat(text)
    except ValueError:
        raise ValueError(f"not a date/time: {raw!r} (use ISO like 2026-10-20T09:30 or +2h)") from None
    if value.tzinfo is None:
        value = value.astimezone()
    return value


def _fmt_dt(value: datetime) -> str:
    return value.astimezone().strftime("%Y-%m-%d %H:%M")


def format_task(position: int, task: Task) -> str:
    mark = "x" if task.is_completed else " "
    details = [f"due {_fmt_dt(task.due_date)}", task.priority.label]
    if task.category is not None:
        details.append(task.category.name)
    if task.reminder is not None:
        details.append(f"remind {_fmt_dt(task.reminder)}")
    line = f"{position}. [{mark}] {task.name} ({', '.join(details)})"
    if task.tags:
        line += " " + " ".join(f"#{t.name}" for t in task.tags)
    return line


def _resolve(state: AppState, raw: str) -> Task | None:
    """Map a 1-based position from the last printed list to the stored task."""
    try:
        n = int(raw)
    except ValueError:
        return None
    # nothing listed yet: positions refer to the full list
    visible = state.visible if state.visible is not None else list(state.store.tasks)
    if n < 1 or n > len(visible):
        return None
    return state.store.get_task(visible[n - 1].id)


def _refresh_visible(state: AppState) -> list[Task]:
    state.visible = filter_tasks(state.store.tasks, state.list_filter, state.search)
    return state.visible


# ---- commands ----


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_add(state: AppState, args: list[str]) -> str:
    """
    /add <name> [--due WHEN] [--remind WHEN] [--priority P] [--category C] [--tag T]...
    """
    usage = "Usage: /add <name> [--due WHEN] [--remind WHEN] [--priority low|medium|high] [--category C] [--tag T]"
    name_parts: list[str] = []
    task = new_task("")
    it = iter(args)

    try:
        for arg in it:
            if not arg.startswith("--"):
                name_parts.append(arg)
                continue
            value = next(it, None)
            if value is None:
                return f"Missing value for {arg}.\n{usage}"
            if arg == "--due":
                task.due_date = parse_when(value)
            elif arg == "--remind":
                task.reminder = parse_when(value)
            elif arg == "--priority":
                task.priority = Priority.parse(value)
            elif arg == "--category":
                category = state.store.find_category(value)
                if category is None:
                    names = ", ".join(c.name for c in state.store.categories)
                    return f"Unknown category {value!r}. Available: {names}."
                task.category = category
            elif arg == "--tag":
                tag = state.store.find_tag(value)
                if tag is None:
                    return f"Unknown tag {value!r}. Create it with /tags add {value}."
                if tag not in task.tags:
                    task = with_tag_toggled(task, tag)
            else:
                return f"Unknown option {arg}.\n{usage}"
    except ValueError as e:
        return str(e)

    task.name = " ".join(name_parts).strip()
    if not task.name:
        return usage

    state.store.add_task(task)
    _refresh_visible(state)
    return f"Added: {task.name}"


def quick_add(state: AppState, text: str) -> str | None:
    """Add a task named by raw text, taken verbatim (no quoting rules)."""
    name = text.strip()
    if not name:
        return None
    task = new_task(name)
    state.store.add_task(task)
    _refresh_visible(state)
    return f"Added: {task.name}"


def cmd_list(state: AppState, args: list[str]) -> str:
    """
    /list                  -> all tasks
    /list active|done|high -> filtered
    /list all work         -> tasks tagged with something containing "work"
    """
    if args:
        state.list_filter = TaskFilter.from_arg(args[0])
        state.search = " ".join(args[1:]) if args[0].lower() in {f.value for f in TaskFilter} else " ".join(args)
    else:
        state.list_filter = TaskFilter.ALL
        state.search = ""

    visible = _refresh_visible(state)
    if not visible:
        return "No tasks."
    return "\n".join(format_task(i, t) for i, t in enumerate(visible, start=1))


def _set_completed(state: AppState, args: list[str], value: bool) -> str:
    if not args:
        return "Usage: /done <n> (or /undone <n>)."
    task = _resolve(state, args[0])
    if task is None:
        return f"No task at position {args[0]}."
    state.store.edit_task(replace(task, is_completed=value))
    return f"{'Completed' if value else 'Reopened'}: {task.name}"


def cmd_done(state: AppState, args: list[str]) -> str:
    return _set_completed(state, args, True)


def cmd_undone(state: AppState, args: list[str]) -> str:
    return _set_completed(state, args, False)


def cmd_remind(state: AppState, args: list[str]) -> str:
    """
    /remind <n> <WHEN> -> set or move the reminder
    /remind <n> off    -> remove the reminder
    """
    if len(args) < 2:
        return "Usage: /remind <n> <WHEN|off>."
    task = _resolve(state, args[0])
    if task is None:
        return f"No task at position {args[0]}."

    if args[1].lower() in ("off", "none", "-"):
        state.store.edit_task(replace(task, reminder=None))
        return f"Reminder removed: {task.name}"

    try:
        when = parse_when(args[1])
    except ValueError as e:
        return str(e)
    state.store.edit_task(replace(task, reminder=when))
    return f"Reminder set for {_fmt_dt(when)}: {task.name}"


def cmd_rename(state: AppState, args: list[str]) -> str:
    if len(args) < 2:
        return "Usage: /rename <n> <new name>."
    task = _resolve(state, args[0])
    if task is None:
        return f"No task at position {args[0]}."
    name = " ".join(args[1:]).strip()
    if not name:
        return "Task name cannot be empty."
    state.store.edit_task(replace(task, name=name))
    return f"Renamed: {task.name} -> {name}"


def cmd_priority(state: AppState, args: list[str]) -> str:
    if len(args) < 2:
        return "Usage: /priority <n> low|medium|high."
    task = _resolve(state, args[0])
    if task is None:
        return f"No task at position {args[0]}."
    try:
        priority = Priority.parse(args[1])
    except ValueError as e:
        return str(e)
    state.store.edit_task(replace(task, priority=priority))
    return f"Priority {priority.label}: {task.name}"


def cmd_category(state: AppState, args: list[str]) -> str:
    if len(args) < 2:
        names = ", ".join(c.name for c in state.store.categories)
        return f"Usage: /category <n> <name|none>. Categories: {names}."
    task = _resolve(state, args[0])
    if task is None:
        return f"No task at position {args[0]}."
    if args[1].lower() == "none":
        state.store.edit_task(replace(task, category=None))
        return f"Category cleared: {task.name}"
    category = state.store.find_category(args[1])
    if category is None:
        return f"Unknown category {args[1]!r}."
    state.store.edit_task(replace(task, category=category))
    return f"Category {category.name}: {task.name}"


def cmd_tag(state: AppState, args: list[str]) -> str:
    """/tag <n> <tag> -> add the tag to the task, or remove it if already there."""
    if len(args) < 2:
        return "Usage: /tag <n> <tag name>."
    task = _resolve(state, args[0])
    if task is None:
        return f"No task at position {args[0]}."

    name = " ".join(args[1:])
    # Tags already on the task win over the catalog (the catalog entry may be gone).
    tag = next((t for t in task.tags if t.name.lower() == name.lower()), None)
    tag = tag or state.store.find_tag(name)
    if tag is None:
        return f"Unknown tag {name!r}. Create it with /tags add {name}."

    updated = with_tag_toggled(task, tag)
    state.store.edit_task(updated)
    verb = "Tagged" if tag in updated.tags else "Untagged"
    return f"{verb} #{tag.name}: {task.name}"


def cmd_delete(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /delete <n> [n ...]."
    ids = []
    for raw in args:
        task = _resolve(state, raw)
        if task is None:
            return f"No task at position {raw}."
        ids.append(task.id)
    removed = state.store.delete_tasks(ids)
    _refresh_visible(state)
    return f"Deleted {removed} task(s)."


def cmd_tags(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /tags                       -> list the catalog
    /tags add <name> [color]    -> new catalog tag
    /tags rm <name>             -> drop from catalog (tasks keep their copy)
    /tags rename <old> <new>    -> rename in catalog (tasks keep their copy)
    """
    if not args:
        tags = state.store.tags
        if not tags:
            return "Tag catalog is empty."
        return "Tags:\n" + "\n".join(f"  #{t.name} ({t.color})" for t in tags)

    sub = args[0].lower()

    if sub == "add" and len(args) >= 2:
        if state.store.find_tag(args[1]) is not None:
            return f"Tag #{args[1]} already exists."
        color = args[2] if len(args) >= 3 else "red"
        try:
            tag = state.store.add_tag(args[1], color)
        except ValueError as e:
            return str(e)
        return f"Tag #{tag.name} added."

    if sub in ("rm", "remove", "del") and len(args) >= 2:
        tag = state.store.find_tag(args[1])
        if tag is None:
            return f"Unknown tag {args[1]!r}."
        if emit:
            with contextlib.suppress(Exception):
                emit("Tasks that already carry this tag keep it.")
        state.store.remove_tag(tag.id)
        return f"Tag #{tag.name} removed from catalog."

    if sub == "rename" and len(args) >= 3:
        tag = state.store.find_tag(args[1])
        if tag is None:
            return f"Unknown tag {args[1]!r}."
        try:
            renamed = state.store.rename_tag(tag.id, args[2])
        except ValueError as e:
            return str(e)
        return f"Tag #{tag.name} renamed to #{renamed.name if renamed else args[2]}."

    return "Usage: /tags | /tags add <name> [color] | /tags rm <name> | /tags rename <old> <new>."


def cmd_stats(state: AppState, args: list[str]) -> str:
    tasks = state.store.tasks
    stats = compute_stats(tasks)
    by_priority = ", ".join(f"{p.label}: {n}" for p, n in stats.by_priority.items())
    return (
        "Statistics:\n"
        f"  Total: {stats.total}\n"
        f"  Completed: {stats.completed} ({stats.completion_rate:.1f}%)\n"
        f"  High priority: {stats.high_priority}\n"
        f"  On time: {stats.on_time}\n"
        f"  Overdue: {stats.overdue}\n"
        f"  Completed on time (vs reminder): {stats.completed_on_time}\n"
        f"  By priority: {by_priority}"
    )


def cmd_reminders(state: AppState, args: list[str]) -> str:
    pending = state.reminders.pending()
    queued = state.reminders.queued_count()
    if not pending:
        return "No pending reminders." + (f" ({queued} request(s) queued)" if queued else "")
    lines = ["Pending reminders:"]
    for alert in pending:
        lines.append(f"  {_fmt_dt(alert.when)} {alert.body}")
    if queued:
        lines.append(f"  ({queued} request(s) queued)")
    return "\n".join(lines)


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("add", cmd_add, help_text="Add a task: /add <name> [--due WHEN] [--remind WHEN] [--priority P] [--category C] [--tag T].")
registry.register("list", cmd_list, help_text="List tasks: /list [all|active|done|high] [tag search].", aliases=["ls"])
registry.register("done", cmd_done, help_text="Mark task done: /done <n>.")
registry.register("undone", cmd_undone, help_text="Reopen task: /undone <n>.")
registry.register("remind", cmd_remind, help_text="Set/clear reminder: /remind <n> <WHEN|off>.")
registry.register("rename", cmd_rename, help_text="Rename task: /rename <n> <name>.")
registry.register("priority", cmd_priority, help_text="Set priority: /priority <n> low|medium|high.")
registry.register("category", cmd_category, help_text="Set category: /category <n> <name|none>.")
registry.register("tag", cmd_tag, help_text="Toggle a tag on a task: /tag <n> <tag>.")
registry.register("delete", cmd_delete, help_text="Delete tasks: /delete <n> [n ...].", aliases=["rm"])
registry.register("tags", cmd_tags, help_text="Tag catalog: /tags | add <name> [color] | rm <name> | rename <old> <new>.")
registry.register("stats", cmd_stats, help_text="Show statistics.")
registry.register("reminders", cmd_reminders, help_text="Show pending reminders.")
