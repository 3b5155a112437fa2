"""
Task subsystem.

Components:
- task_models.py: data structures (Task, Tag, Category, Priority) and default catalogs
- task_store.py: the in-memory task list; owns mutations and reminder side effects
- task_stats.py: derived statistics over a task snapshot
- task_filters.py: list filters and tag search used by front-ends
"""
