# tests/test_commands.py

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from taskmate.cli.bootstrap import create_initial_state
from taskmate.cli.commands import CommandRegistry, parse_when, quick_add, registry
from taskmate.connectors.console_connector import run_console_loop
from taskmate.tasks.task_models import Priority, new_task


def test_command_registry_routes_2_and_3_params(state) -> None:
    reg = CommandRegistry()
    called = {"h2": 0, "h3": 0}

    def h2(state, args):
        called["h2"] += 1
        return "h2"

    def h3(state, args, emit):
        called["h3"] += 1
        if emit is not None:
            emit("note")
        return "h3"

    reg.register("a", h2, "a")
    reg.register("b", h3, "b")

    assert reg.handle(state, "/a x") == "h2"
    assert reg.handle(state, "/b y", emit=lambda _: None) == "h3"
    assert called["h2"] == 1
    assert called["h3"] == 1


def test_command_registry_unknown_and_non_command(state) -> None:
    reg = CommandRegistry()
    assert reg.handle(state, "hello") is None
    assert "Unknown command" in (reg.handle(state, "/nope") or "")
    assert "Could not parse" in (reg.handle(state, '/nope "unterminated') or "")


def test_parse_when_relative_and_iso() -> None:
    base = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)
    assert parse_when("+30m", now=base) == base + timedelta(minutes=30)
    assert parse_when("+2h", now=base) == base + timedelta(hours=2)
    assert parse_when("+1d", now=base) == base + timedelta(days=1)
    assert parse_when("2026-10-20T09:30+00:00") == datetime(2026, 10, 20, 9, 30, tzinfo=timezone.utc)
    assert parse_when("2026-10-20T09:30").tzinfo is not None
    with pytest.raises(ValueError):
        parse_when("tomorrow-ish")


def test_add_with_options_and_reminder_is_queued(state) -> None:
    reply = registry.handle(
        state, '/add "Buy milk" --remind +1h --priority high --category shopping --tag home'
    )

    assert reply == "Added: Buy milk"
    [task] = state.store.tasks
    assert task.priority == Priority.HIGH
    assert task.category is not None and task.category.name == "Shopping"
    assert [t.name for t in task.tags] == ["Home"]
    assert task.reminder is not None
    assert state.reminders.queued_count() == 1


def test_add_rejects_bad_input(state) -> None:
    assert (registry.handle(state, "/add") or "").startswith("Usage")
    assert "not a date/time" in (registry.handle(state, "/add Pay --due soonish") or "")
    assert "unknown priority" in (registry.handle(state, "/add Pay --priority urgent") or "")
    assert "Unknown tag" in (registry.handle(state, "/add Pay --tag nope") or "")
    assert len(state.store) == 0


def test_list_done_and_stats_flow(state) -> None:
    registry.handle(state, "/add Laundry --due +1d --tag home")
    registry.handle(state, "/add Deploy --priority high --due 2020-01-01T09:00 --tag work")
    registry.handle(state, "/add Invoice --due +1d")

    listing = registry.handle(state, "/list") or ""
    assert listing.splitlines()[0].startswith("1. [ ] Laundry")

    assert registry.handle(state, "/done 3") == "Completed: Invoice"

    high = registry.handle(state, "/list high") or ""
    assert "Deploy" in high and "Laundry" not in high

    tagged = registry.handle(state, "/list all HOM") or ""
    assert "Laundry" in tagged and "Deploy" not in tagged

    stats = registry.handle(state, "/stats") or ""
    assert "Completed: 1 (33.3%)" in stats
    assert "High priority: 1" in stats
    assert "Overdue: 1" in stats


def test_positions_follow_last_printed_list(state) -> None:
    registry.handle(state, "/add One")
    registry.handle(state, "/add Two --priority high")
    registry.handle(state, "/list high")

    assert registry.handle(state, "/rename 1 Second") == "Renamed: Two -> Second"
    assert [t.name for t in state.store.tasks] == ["One", "Second"]


def test_remind_set_and_clear(state) -> None:
    registry.handle(state, "/add Call")
    registry.handle(state, "/list")

    assert (registry.handle(state, "/remind 1 +2h") or "").startswith("Reminder set")
    assert state.store.tasks[0].reminder is not None

    assert registry.handle(state, "/remind 1 off") == "Reminder removed: Call"
    assert state.store.tasks[0].reminder is None
    # schedule, then cancel
    assert state.reminders.queued_count() == 2


def test_tag_toggle_priority_category_and_delete(state) -> None:
    registry.handle(state, "/add Tidy")
    registry.handle(state, "/list")

    assert registry.handle(state, "/tag 1 urgent") == "Tagged #Urgent: Tidy"
    assert registry.handle(state, "/tag 1 urgent") == "Untagged #Urgent: Tidy"
    assert registry.handle(state, "/priority 1 low") == "Priority Low: Tidy"
    assert registry.handle(state, "/category 1 family") == "Category Family: Tidy"
    assert registry.handle(state, "/category 1 none") == "Category cleared: Tidy"
    assert registry.handle(state, "/delete 1") == "Deleted 1 task(s)."
    assert len(state.store) == 0
    assert registry.handle(state, "/done 1") == "No task at position 1."


def test_tags_catalog_commands_keep_task_copies(state) -> None:
    notes: list[str] = []
    assert registry.handle(state, "/tags add Errands teal") == "Tag #Errands added."
    registry.handle(state, "/add Post --tag errands")

    reply = registry.handle(state, "/tags rm errands", emit=notes.append)

    assert reply == "Tag #Errands removed from catalog."
    assert notes
    assert state.store.find_tag("errands") is None
    assert [t.name for t in state.store.tasks[0].tags] == ["Errands"]
    # The task's own copy can still be toggled off.
    registry.handle(state, "/list")
    assert registry.handle(state, "/tag 1 errands") == "Untagged #Errands: Post"


def test_reminders_command_shows_pending(state) -> None:
    registry.handle(state, '/add "Stand up" --remind +1h')
    assert "1 request(s) queued" in (registry.handle(state, "/reminders") or "")

    state.reminders.process_requests()
    assert "Stand up" in (registry.handle(state, "/reminders") or "")


def test_bootstrap_wires_single_store(settings) -> None:
    state = create_initial_state(settings=settings)

    assert settings.data_dir.exists()
    assert len(state.store) == 0
    assert [t.name for t in state.store.tags] == ["Urgent", "Important", "Home", "Work"]


def test_quick_add_keeps_apostrophes(state) -> None:
    assert quick_add(state, "  Call Mom's dentist ") == "Added: Call Mom's dentist"
    assert quick_add(state, "   ") is None
    assert [t.name for t in state.store.tasks] == ["Call Mom's dentist"]


def test_console_plain_text_adds_task_verbatim(state, monkeypatch, capsys) -> None:
    lines = iter(["Call Mom's dentist", '"quoted" text', "/exit"])
    monkeypatch.setattr("builtins.input", lambda _prompt="": next(lines))

    run_console_loop(state)

    assert [t.name for t in state.store.tasks] == ["Call Mom's dentist", '"quoted" text']
    assert "Could not parse" not in capsys.readouterr().out


def test_empty_listing_does_not_fall_back_to_all_tasks(state) -> None:
    registry.handle(state, "/add Laundry")

    assert registry.handle(state, "/list high") == "No tasks."
    assert registry.handle(state, "/done 1") == "No task at position 1."
    assert not state.store.tasks[0].is_completed


def test_positions_use_full_list_before_any_listing(state) -> None:
    state.store.add_task(new_task("Laundry"))

    assert state.visible is None
    assert registry.handle(state, "/done 1") == "Completed: Laundry"
