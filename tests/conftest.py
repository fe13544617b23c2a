import os
from datetime import UTC, datetime

import pytest

# Set test environment variables before importing any application code
os.environ.update({
    "SCHEDULER_ENVIRONMENT": "test",
    "SCHEDULER_LOG_LEVEL": "DEBUG",
})

from priority_scheduler.models import ScheduleRequest, Task, TaskPriority  # noqa: E402

NOW = datetime(2024, 1, 15, 9, 0, tzinfo=UTC)
TODAY = "2024-01-15"


def at(hour: int, minute: int = 0, day: int = 15) -> datetime:
    """UTC datetime in January 2024"""
    return datetime(2024, 1, day, hour, minute, tzinfo=UTC)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def make_task():
    """Factory for tasks with sensible defaults"""

    def _make(task_id: str, **overrides) -> Task:
        data = {
            "id": task_id,
            "title": f"Task {task_id}",
            "priority": TaskPriority.MEDIUM,
            "estimated_duration": 60,
            "created_at": NOW,
            "updated_at": NOW,
        }
        data.update(overrides)
        return Task(**data)

    return _make


@pytest.fixture
def make_request():
    """Factory for a single-day 9-17 schedule request"""

    def _make(task_ids: list[str], **overrides) -> ScheduleRequest:
        data = {
            "task_ids": task_ids,
            "start_date": f"{TODAY}T00:00:00Z",
            "end_date": f"{TODAY}T23:59:59Z",
            "working_hours_start": 9,
            "working_hours_end": 17,
        }
        data.update(overrides)
        return ScheduleRequest(**data)

    return _make
