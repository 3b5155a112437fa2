# src/taskmate/connectors/console_connector.py

from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Any

from ..cli.commands import quick_add, registry as command_registry
from ..core.state import AppState

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}", flush=True)


class ConsoleNotifier:
    """ReminderNotifier that prints due alerts into the console."""

    def __init__(self) -> None:
        self._lock = threading.Lock()

    async def notify(self, alert: Any) -> None:
        with self._lock:
            _print_ts(f"[{alert.title}] {alert.body}")


def run_console_loop(state: AppState) -> None:
    logger.info("Console connector started.")
    _print_ts("Type /help for commands, /exit to quit. Plain text adds a task.\n")

    def emit(text: str) -> None:
        _print_ts(text)

    while True:
        try:
            user_input = input("> ").strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        try:
            if user_input.startswith("/"):
                response = command_registry.handle(state, user_input, emit=emit)
            else:
                # plain text is the quick-add field
                response = quick_add(state, user_input)
        except Exception:
            logger.exception("Command handler crashed.")
            response = "Internal error while handling a command."

        if response is not None:
            _print_ts(response)

    logger.info("Console connector finished.")
