"""
Priority Scheduler Package

Greedy priority and deadline aware task scheduling with bumping.
"""

from .api import schedule_tasks_api
from .core import SchedulerConfig, schedule_tasks
from .models import (
    ScheduledTask,
    ScheduleRequest,
    ScheduleResult,
    Task,
    TaskPriority,
    TaskStatus,
)
from .repository import InMemoryTaskRepository, TaskRepository
from .services import SchedulingService, TaskService

__version__ = "0.1.0"
__all__ = [
    "schedule_tasks",
    "schedule_tasks_api",
    "SchedulerConfig",
    "Task",
    "TaskPriority",
    "TaskStatus",
    "ScheduleRequest",
    "ScheduledTask",
    "ScheduleResult",
    "TaskRepository",
    "InMemoryTaskRepository",
    "TaskService",
    "SchedulingService",
]
