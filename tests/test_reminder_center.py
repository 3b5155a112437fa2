# tests/test_reminder_center.py

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta

from taskmate.core.errors import ReminderOperation
from taskmate.reminders.reminder_center import ReminderCenter
from taskmate.tasks.task_models import Task
from taskmate.tasks.task_store import TaskStore

from .fakes import ErrorSink


def test_requests_are_queued_until_processed(now, hour) -> None:
    center = ReminderCenter()
    center.schedule("t1", now + hour, "Reminder", "Buy milk")

    assert center.queued_count() == 1
    assert center.pending() == []

    assert center.process_requests(now=now) == 1
    assert center.queued_count() == 0
    [alert] = center.pending()
    assert (alert.identity, alert.when, alert.title, alert.body) == ("t1", now + hour, "Reminder", "Buy milk")


def test_cancel_then_schedule_keeps_new_alert(now, hour) -> None:
    center = ReminderCenter()
    center.schedule("t1", now + hour, "Reminder", "old")
    center.process_requests(now=now)

    center.cancel("t1")
    center.schedule("t1", now + 2 * hour, "Reminder", "new")
    center.process_requests(now=now)

    [alert] = center.pending()
    assert alert.body == "new"
    assert alert.when == now + 2 * hour


def test_schedule_then_cancel_leaves_nothing(now, hour) -> None:
    center = ReminderCenter()
    center.schedule("t1", now + hour, "Reminder", "gone")
    center.cancel("t1")
    center.process_requests(now=now)
    assert center.pending() == []


def test_cancel_unknown_identity_is_noop(now) -> None:
    center = ReminderCenter()
    center.cancel("nobody")
    assert center.process_requests(now=now) == 1
    assert center.pending() == []


def test_past_trigger_is_rejected_and_reported(now, hour) -> None:
    sink = ErrorSink()
    center = ReminderCenter(on_error=sink)
    center.schedule("late", now - hour, "Reminder", "too late")

    center.process_requests(now=now)

    assert center.pending() == []
    [error] = sink.errors
    assert error.operation == ReminderOperation.SCHEDULE
    assert error.identity == "late"


def test_pop_due_returns_earliest_first_and_removes(now, hour) -> None:
    center = ReminderCenter()
    center.schedule("b", now + 2 * hour, "Reminder", "second")
    center.schedule("a", now + hour, "Reminder", "first")
    center.schedule("c", now + 5 * hour, "Reminder", "later")
    center.process_requests(now=now)

    due = center.pop_due(now=now + 3 * hour)

    assert [a.identity for a in due] == ["a", "b"]
    assert [a.identity for a in center.pending()] == ["c"]
    assert center.pop_due(now=now + 3 * hour) == []


def test_store_drives_center_end_to_end(now, hour) -> None:
    center = ReminderCenter()
    store = TaskStore(center)
    task = Task(name="Water plants", due_date=now, reminder=now + hour)

    store.add_task(task)
    store.edit_task(replace(task, reminder=now + 2 * hour))
    center.process_requests(now=now)

    [alert] = center.pending()
    assert alert.identity == str(task.id)
    assert alert.when == now + 2 * hour

    store.delete_tasks([task.id])
    center.process_requests(now=now)
    assert center.pending() == []


def test_naive_trigger_time_is_read_as_local(now) -> None:
    center = ReminderCenter()
    center.schedule("t1", datetime(2030, 1, 1, 9, 0), "Reminder", "New year")
    center.process_requests(now=now)

    [alert] = center.pending()
    assert alert.when.tzinfo is not None
    assert alert.when == datetime(2030, 1, 1, 9, 0).astimezone()


def test_failing_request_does_not_drop_later_cancel(now, hour) -> None:
    sink = ErrorSink()
    center = ReminderCenter(on_error=sink)
    center.schedule("dentist", now + hour, "Reminder", "Dentist")
    center.process_requests(now=now)

    center.schedule("gym", now + 2 * hour, "Reminder", "Gym")
    center.cancel("dentist")
    # aware trigger vs naive clock cannot be compared
    assert center.process_requests(now=now.replace(tzinfo=None)) == 2

    assert center.pending() == []
    assert center.queued_count() == 0
    [error] = sink.errors
    assert error.operation == ReminderOperation.SCHEDULE
    assert error.identity == "gym"
    assert isinstance(error.cause, TypeError)


def test_deleted_task_alert_is_cancelled_after_naive_reminder(now, hour) -> None:
    center = ReminderCenter()
    store = TaskStore(center)
    dentist = Task(name="Dentist", due_date=now, reminder=now + hour)
    store.add_task(dentist)
    center.process_requests(now=now)

    party = Task(name="Party", due_date=now, reminder=datetime(2030, 1, 1))
    store.add_task(party)
    store.delete_tasks([dentist.id])
    center.process_requests(now=now)

    assert [a.identity for a in center.pending()] == [str(party.id)]


def test_alert_fires_at_exact_time_not_start_of_minute(now) -> None:
    center = ReminderCenter()
    when = now + timedelta(minutes=1, seconds=45)
    center.schedule("t1", when, "Reminder", "Stand up")
    center.process_requests(now=now)

    assert center.pop_due(now=when.replace(second=0)) == []
    assert [a.identity for a in center.pop_due(now=when)] == ["t1"]
