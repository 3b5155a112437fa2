"""taskmate: personal task list with reminders and statistics."""

__version__ = "0.1.0"
