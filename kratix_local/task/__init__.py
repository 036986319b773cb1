"""Task tracking for kratix-local controllers.

Controllers run each reconcile pass as an asyncio task. The task service
keeps a reference to every task so they are not garbage collected mid-pass,
logs failures of tasks nobody awaits, and lets callers wait for the
outstanding passes to drain.
"""

from .context import task_service_context, get_task_service
from .service import TaskService

__all__ = ["get_task_service", "task_service_context", "TaskService"]
