# src/taskmate/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then starts:
- the reminder delivery loop in a background thread (optional),
- the console REPL in the main thread (optional).
"""

from __future__ import annotations

import logging
import signal
import threading

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import ConsoleNotifier, run_console_loop
from ..logging_setup import parse_level, setup_logging
from ..reminders.reminder_scheduler import ReminderBackgroundRunner, start_reminders_in_background

logger = logging.getLogger(__name__)


def main() -> None:
    settings = get_settings()

    log_file = setup_logging(
        log_dir=settings.data_dir,
        console_level=parse_level(getattr(settings, "log_level", "INFO")),
    )

    logger.info("Starting %s... (log file: %s)", settings.app_name, log_file)

    state = create_initial_state(settings=settings)

    runner: ReminderBackgroundRunner | None = None
    if settings.reminders_enabled:
        runner = start_reminders_in_background(
            state.reminders,
            ConsoleNotifier(),
            interval_seconds=settings.reminder_poll_seconds,
        )
    else:
        logger.info("Reminder delivery disabled, alerts will only be queued.")

    stop_main = threading.Event()

    def _handle_signal(signum, _frame) -> None:
        logger.info("Signal %s received, shutting down...", signum)
        stop_main.set()

    try:
        if settings.console_enabled:
            run_console_loop(state)
            stop_main.set()
        else:
            try:
                signal.signal(signal.SIGINT, _handle_signal)
                signal.signal(signal.SIGTERM, _handle_signal)
            except (ValueError, OSError):
                logger.debug("Signal handlers not installed.", exc_info=True)
            logger.info("Console disabled. Delivering reminders only. Press Ctrl+C to stop.")
            stop_main.wait()

    finally:
        if runner is not None:
            runner.stop()
            runner.join(timeout=float(settings.reminder_join_timeout))

        logger.info("Bye.")


if __name__ == "__main__":
    main()
