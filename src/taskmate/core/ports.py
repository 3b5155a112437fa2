# src/taskmate/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The task store depends on Protocols instead of concrete implementations.
This keeps the notification backend swappable and makes testing easier.
"""

from collections.abc import Callable
from datetime import datetime
from typing import Any, Awaitable, Protocol

from .errors import ReminderError

ReminderErrorHandler = Callable[[ReminderError], None]


class ReminderScheduler(Protocol):
    """
    Notification-side port: how the task store asks for point-in-time alerts.

    Both calls are fire-and-forget:
    - they must return quickly and must not wait for delivery,
    - the identity is the task id as a string; one pending alert per identity,
    - cancel() of an identity with nothing pending is a no-op.
    """

    def schedule(self, identity: str, when: datetime, title: str, body: str) -> None: ...

    def cancel(self, identity: str) -> None: ...


class ReminderNotifier(Protocol):
    """
    Delivery-side port: how a due alert reaches the user.

    The alert argument is a reminders.reminder_center.ReminderAlert
    (kept as Any to avoid import coupling).
    """

    def notify(self, alert: Any) -> Awaitable[None]: ...
