"""
Reminder subsystem.

Components:
- reminder_center.py: in-process notification center (request queue + pending alerts)
- reminder_scheduler.py: polling loop that delivers due alerts through a notifier port
"""
