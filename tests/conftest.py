# tests/conftest.py

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path
from types import SimpleNamespace

import pytest

from taskmate.core.state import AppState
from taskmate.reminders.reminder_center import ReminderCenter
from taskmate.tasks.task_store import TaskStore

from .fakes import ErrorSink, RecordingReminderScheduler


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the bootstrap code.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated from the environment.
    """
    return SimpleNamespace(
        app_name="taskmate-test",
        log_level="DEBUG",
        data_dir=tmp_path / "data",
        console_enabled=False,
        reminders_enabled=False,
        reminder_title="Reminder",
        reminder_poll_seconds=0.01,
        reminder_join_timeout=1,
    )


@pytest.fixture()
def now() -> datetime:
    return datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


@pytest.fixture()
def hour() -> timedelta:
    return timedelta(hours=1)


@pytest.fixture()
def scheduler() -> RecordingReminderScheduler:
    return RecordingReminderScheduler()


@pytest.fixture()
def errors() -> ErrorSink:
    return ErrorSink()


@pytest.fixture()
def store(scheduler: RecordingReminderScheduler, errors: ErrorSink) -> TaskStore:
    return TaskStore(scheduler, on_error=errors)


@pytest.fixture()
def state(settings: SimpleNamespace) -> AppState:
    """
    AppState wired with the real reminder center.

    The center only queues requests until the delivery loop runs,
    so nothing fires during command tests.
    """
    reminders = ReminderCenter()
    return AppState(
        settings=settings,
        store=TaskStore(reminders, reminder_title=settings.reminder_title),
        reminders=reminders,
    )
