"""Background task package.

A single process-wide DetachedTasks instance carries all fire-and-forget
work (customer notifications); the application drains it on shutdown.
"""

from laundry.tasks.detached import DetachedTasks

detached_tasks = DetachedTasks()

__all__ = ["DetachedTasks", "detached_tasks"]
