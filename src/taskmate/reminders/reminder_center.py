# src/taskmate/reminders/reminder_center.py

from __future__ import annotations

import logging
import threading
from collections import deque
from dataclasses import dataclass
from datetime import datetime

from ..core.errors import ReminderError, ReminderOperation
from ..core.ports import ReminderErrorHandler
from ..tasks.task_models import now_local

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class ReminderAlert:
    """A one-shot alert registered for a task identity."""

    identity: str
    when: datetime
    title: str
    body: str


@dataclass(slots=True, frozen=True)
class _Request:
    operation: ReminderOperation
    identity: str
    alert: ReminderAlert | None = None


class ReminderCenter:
    """
    In-process notification center (ReminderScheduler implementation).

    schedule()/cancel() only enqueue a request and return. Requests are applied
    in FIFO order by process_requests(), which the delivery loop calls on every
    tick, so a cancel issued before a schedule is always applied first.

    Rejected requests (trigger time already passed) are reported to on_error,
    the way a notification backend reports through a completion handler.

    Thread-safety:
    - the store calls schedule/cancel from the console thread
    - the delivery loop drains requests from its own thread
    """

    def __init__(self, *, on_error: ReminderErrorHandler | None = None) -> None:
        self._requests: deque[_Request] = deque()
        self._pending: dict[str, ReminderAlert] = {}
        self._on_error = on_error
        self._lock = threading.Lock()

    # ---- ReminderScheduler port ----

    def schedule(self, identity: str, when: datetime, title: str, body: str) -> None:
        # naive times are local wall-clock
        if when.tzinfo is None:
            when = when.astimezone()
        alert = ReminderAlert(identity=identity, when=when, title=title, body=body)
        with self._lock:
            self._requests.append(_Request(ReminderOperation.SCHEDULE, identity, alert))

    def cancel(self, identity: str) -> None:
        with self._lock:
            self._requests.append(_Request(ReminderOperation.CANCEL, identity))

    # ---- delivery side ----

    def process_requests(self, *, now: datetime | None = None) -> int:
        """
        Apply queued requests in order. Returns how many were drained.

        A request that fails is reported and skipped; later requests in the
        same batch are still applied.
        """
        now = now or now_local()
        with self._lock:
            requests = list(self._requests)
            self._requests.clear()

            rejected: list[ReminderError] = []
            for req in requests:
                try:
                    error = self._apply(req, now)
                except Exception as e:
                    logger.exception(
                        "Failed to apply reminder %s identity=%s", req.operation, req.identity
                    )
                    error = ReminderError(req.operation, req.identity, str(e), e)
                if error is not None:
                    rejected.append(error)

        for error in rejected:
            logger.warning("Reminder rejected: %s", error)
            if self._on_error is not None:
                try:
                    self._on_error(error)
                except Exception:
                    logger.exception("Reminder error handler failed for %s", error.identity)

        return len(requests)

    def _apply(self, req: _Request, now: datetime) -> ReminderError | None:
        if req.operation == ReminderOperation.CANCEL:
            if self._pending.pop(req.identity, None) is not None:
                logger.debug("Reminder cancelled identity=%s", req.identity)
            return None

        alert = req.alert
        if alert is None:
            return None
        if alert.when <= now:
            return ReminderError(
                ReminderOperation.SCHEDULE,
                alert.identity,
                f"trigger time {alert.when.isoformat()} is not in the future",
            )
        self._pending[alert.identity] = alert
        logger.debug("Reminder registered identity=%s when=%s", alert.identity, alert.when)
        return None

    def pop_due(self, *, now: datetime | None = None) -> list[ReminderAlert]:
        """Remove and return alerts whose time has come, earliest first."""
        now = now or now_local()
        with self._lock:
            due = [a for a in self._pending.values() if a.when <= now]
            for a in due:
                del self._pending[a.identity]
        due.sort(key=lambda a: a.when)
        return due

    def pending(self) -> list[ReminderAlert]:
        """Registered (not yet delivered) alerts, earliest first."""
        with self._lock:
            out = list(self._pending.values())
        out.sort(key=lambda a: a.when)
        return out

    def queued_count(self) -> int:
        with self._lock:
            return len(self._requests)
