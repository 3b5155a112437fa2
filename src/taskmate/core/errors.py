# src/taskmate/core/errors.py

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class ReminderOperation(StrEnum):
    SCHEDULE = "schedule"
    CANCEL = "cancel"


@dataclass(slots=True, frozen=True)
class ReminderError:
    """
    Report of a reminder request that could not be carried out.

    This is a value passed to error handlers, not an exception:
    reminder delivery is best-effort and task mutations never fail because of it.
    """

    operation: ReminderOperation
    identity: str
    reason: str
    cause: BaseException | None = None

    def __str__(self) -> str:
        return f"{self.operation.value} failed for {self.identity}: {self.reason}"
