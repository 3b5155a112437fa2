# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
This file exists to make the repo self-documenting even without opening .env.
"""

ENV_VARS = {
    # App / logging
    "TASKMATE_APP_NAME": "App display name (default: taskmate).",
    "TASKMATE_LOG_LEVEL": "Console logging level (default: INFO).",
    "TASKMATE_DATA_DIR": "Local data directory for the log file (default: .local/taskmate).",
    # Front-end
    "TASKMATE_CONSOLE_ENABLED": "Run the console REPL (true/false, default: true).",
    # Reminders
    "TASKMATE_REMINDERS_ENABLED": "Run the reminder delivery loop (true/false, default: true).",
    "TASKMATE_REMINDER_TITLE": "Title shown on every reminder alert (default: Reminder).",
    "TASKMATE_REMINDER_POLL_SECONDS": "Delivery loop interval in seconds (default: 1.0).",
    "TASKMATE_REMINDER_JOIN_TIMEOUT": "Seconds to wait for the delivery thread on exit (default: 5).",
}
