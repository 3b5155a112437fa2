# src/taskmate/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures the local (gitignored) data directory exists,
- wires the reminder center into the task store and both into AppState.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.errors import ReminderError
from ..core.state import AppState
from ..reminders.reminder_center import ReminderCenter
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)


def _report_reminder_error(error: ReminderError) -> None:
    logger.warning("Reminder could not be set: %s", error)


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    reminders = ReminderCenter(on_error=_report_reminder_error)
    store = TaskStore(
        reminders,
        reminder_title=getattr(settings, "reminder_title", "Reminder"),
        on_error=_report_reminder_error,
    )
    return AppState(settings=settings, store=store, reminders=reminders)
