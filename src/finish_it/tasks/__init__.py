"""
Task subsystem.

Components:
- task_models.py: data structures (Task, TaskStatus, TaskPriority, ViewParameters, ...)
- view_model.py: pure stats/filter/sort helpers shared by every task view
- task_cache.py: the current task collection, fully re-fetched after each mutation
"""
