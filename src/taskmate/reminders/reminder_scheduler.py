# src/taskmate/reminders/reminder_scheduler.py

from __future__ import annotations

"""
Reminder delivery loop.

A small polling loop that:
- applies queued schedule/cancel requests to the reminder center,
- pops alerts whose time has come,
- hands them to an injected notifier port.

Alerts are one-shot: a failed delivery is logged and dropped.
How an alert is shown (console line, desktop popup, ...) belongs to the notifier.
"""

import asyncio
import contextlib
import logging
import threading
from dataclasses import dataclass

from ..core.ports import ReminderNotifier
from .reminder_center import ReminderCenter

logger = logging.getLogger(__name__)


async def deliver_due(center: ReminderCenter, notifier: ReminderNotifier) -> int:
    """One tick of the loop. Returns the number of alerts delivered."""
    try:
        center.process_requests()
    except Exception:
        logger.exception("process_requests failed")

    try:
        due = center.pop_due()
    except Exception:
        logger.exception("pop_due failed")
        due = []

    delivered = 0
    for alert in due:
        try:
            await notifier.notify(alert)
            delivered += 1
            logger.info("Reminder delivered identity=%s", alert.identity)
        except Exception:
            logger.exception("Reminder delivery failed identity=%s", alert.identity)
    return delivered


async def run_reminder_scheduler(
        center: ReminderCenter,
        notifier: ReminderNotifier,
        *,
        interval_seconds: float = 1.0,
        stop_event: asyncio.Event | None = None,
) -> None:
    """
    Poll the reminder center every interval_seconds and deliver due alerts.

    To stop the loop, set stop_event or cancel the coroutine/task.
    """
    sleep_s = max(0.01, float(interval_seconds))

    while stop_event is None or not stop_event.is_set():
        await deliver_due(center, notifier)

        if stop_event is None:
            await asyncio.sleep(sleep_s)
            continue
        with contextlib.suppress(asyncio.TimeoutError):
            await asyncio.wait_for(stop_event.wait(), timeout=sleep_s)


@dataclass
class ReminderBackgroundRunner:
    thread: threading.Thread
    loop: asyncio.AbstractEventLoop
    stop_event: asyncio.Event

    def stop(self) -> None:
        try:
            self.loop.call_soon_threadsafe(self.stop_event.set)
        except Exception:
            logger.debug("Failed to signal reminder loop stop.", exc_info=True)

    def join(self, timeout: float | None = None) -> None:
        self.thread.join(timeout=timeout)


def start_reminders_in_background(
        center: ReminderCenter,
        notifier: ReminderNotifier,
        *,
        interval_seconds: float = 1.0,
) -> ReminderBackgroundRunner | None:
    """
    Start the delivery loop in a daemon thread with its own event loop,
    so a blocking console (input()) can run in the main thread.
    """
    ready = threading.Event()
    holder: dict[str, object] = {}

    def runner() -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        stop_event = asyncio.Event()

        holder["loop"] = loop
        holder["stop_event"] = stop_event
        ready.set()

        try:
            loop.run_until_complete(
                run_reminder_scheduler(
                    center, notifier, interval_seconds=interval_seconds, stop_event=stop_event
                )
            )
        finally:
            with contextlib.suppress(Exception):
                loop.stop()
            with contextlib.suppress(Exception):
                loop.close()

    t = threading.Thread(target=runner, name="taskmate-reminders", daemon=True)
    t.start()

    ready.wait(timeout=5.0)
    loop = holder.get("loop")
    stop_event = holder.get("stop_event")

    if not isinstance(loop, asyncio.AbstractEventLoop) or not isinstance(stop_event, asyncio.Event):
        logger.error("Reminder thread did not initialize properly.")
        return None

    logger.info("Reminder background thread started.")
    return ReminderBackgroundRunner(thread=t, loop=loop, stop_event=stop_event)
