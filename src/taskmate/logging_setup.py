# src/taskmate/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FILE_NAME = "taskmate.log"

# Minimum level a logger (and its children) needs to reach the console.
# The console already echoes every command result and prints due alerts,
# so store and delivery-loop chatter only goes to the file log.
CONSOLE_MIN_LEVELS: dict[str, int] = {
    "taskmate": logging.NOTSET,
    "taskmate.tasks": logging.WARNING,
    "taskmate.reminders": logging.WARNING,
    "asyncio": logging.WARNING,
    "py.warnings": logging.ERROR,
}


class _ConsoleNoiseFilter(logging.Filter):
    """
    Console filter keyed by logger name.

    The most specific prefix in `levels` wins; loggers that match nothing
    (third-party libraries) need ERROR.
    """

    def __init__(self, levels: dict[str, int] | None = None) -> None:
        super().__init__()
        self._levels = dict(CONSOLE_MIN_LEVELS if levels is None else levels)

    def threshold(self, name: str) -> int:
        while name:
            if name in self._levels:
                return self._levels[name]
            name = name.rpartition(".")[0]
        return logging.ERROR

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno >= self.threshold(record.name)


def parse_level(value: str | int | None, default: int = logging.INFO) -> int:
    """'debug' / 'INFO' / 20 -> logging level; unknown names give `default`."""
    if isinstance(value, int):
        return value
    level = logging.getLevelName(str(value or "").strip().upper())
    return level if isinstance(level, int) else default


def setup_logging(
    *,
    log_dir: str | Path = ".local/taskmate",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Route logs to a filtered stderr handler and a full UTF-8 file log.

    Replaces any handlers already on the root logger. Returns the log file path.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    root = logging.getLogger()
    root.setLevel(min(console_level, file_level))

    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(fmt)
    console.addFilter(_ConsoleNoiseFilter())
    root.addHandler(console)

    file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
    file_handler.setLevel(file_level)
    file_handler.setFormatter(fmt)
    root.addHandler(file_handler)

    logging.captureWarnings(True)
    return log_file
