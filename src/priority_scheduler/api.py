"""
Dictionary-level wrappers around the scheduling services.
"""

import logging
from datetime import datetime
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from .core import SchedulerConfig
from .exceptions import ServiceError, ValidationError
from .models import ScheduledTask, ScheduleRequest, Task, TaskPriority, TaskStatus
from .repository import TaskRepository
from .services import SchedulingService

logger = logging.getLogger(__name__)


def _error_envelope(code: str, message: str, **extra: Any) -> dict[str, Any]:
    return {"success": False, "error_code": code, "message": message, **extra}


def schedule_tasks_api(
    request_data: dict[str, Any],
    repository: TaskRepository,
    *,
    now: datetime | None = None,
    config: SchedulerConfig | None = None,
) -> dict[str, Any]:
    """
    API wrapper for scheduling.

    Args:
        request_data: Dictionary containing schedule request data
        repository: Task store the request's ids are resolved against
        now: Reference instant for urgency scoring
        config: Scheduler tuning knobs (duration default, search step)

    Returns:
        ``{"success": True, "data": [...], "unscheduledTaskIds": [...],
        "scheduledMinutes": n}`` or an error envelope with ``success`` False
    """
    error = validate_schedule_request(request_data)
    if error:
        return _error_envelope("VALIDATION_ERROR", error)

    try:
        request = ScheduleRequest.model_validate(request_data)
        result = SchedulingService(repository, config).schedule(request, now=now)
    except PydanticValidationError as e:
        return _error_envelope(
            "VALIDATION_ERROR",
            "Invalid schedule request",
            errors=[
                {
                    "field": " -> ".join(str(loc) for loc in err["loc"]),
                    "message": err["msg"],
                }
                for err in e.errors()
            ],
        )
    except ValidationError as e:
        extra = {"field": e.field} if e.field else {}
        return _error_envelope(e.error_code or "VALIDATION_ERROR", e.message, **extra)
    except ServiceError as e:
        return _error_envelope(e.error_code or "SERVICE_ERROR", e.message)
    except Exception as e:
        logger.error(f"Unhandled scheduling error: {e}")
        return _error_envelope(
            "INTERNAL_SERVER_ERROR",
            "Internal server error",
            details={"error_type": type(e).__name__},
        )

    return {
        "success": True,
        "data": [format_scheduled_task(t) for t in result.scheduled],
        "unscheduledTaskIds": result.unscheduled_task_ids,
        "scheduledMinutes": result.scheduled_minutes,
    }


def create_task_from_dict(task_data: dict[str, Any]) -> Task:
    """
    Create Task instance from dictionary data.

    Unknown priority or status strings fall back to the defaults; unparseable
    datetimes are dropped.

    Args:
        task_data: Dictionary containing task data (camelCase or snake_case keys)

    Returns:
        Task instance
    """

    def pick(*keys: str) -> Any:
        for key in keys:
            if task_data.get(key) is not None:
                return task_data[key]
        return None

    def parse_datetime(value: Any) -> datetime | None:
        if isinstance(value, datetime):
            return value
        if isinstance(value, str):
            try:
                return datetime.fromisoformat(value.replace("Z", "+00:00"))
            except ValueError:
                return None
        return None

    priority_str = pick("priority") or TaskPriority.MEDIUM.value
    try:
        priority = TaskPriority(str(priority_str).lower())
    except ValueError:
        priority = TaskPriority.MEDIUM

    status_str = pick("status") or TaskStatus.TODO.value
    try:
        status = TaskStatus(str(status_str).lower())
    except ValueError:
        status = TaskStatus.TODO

    fields: dict[str, Any] = {
        "id": str(task_data["id"]),
        "title": task_data.get("title") or str(task_data["id"]),
        "description": task_data.get("description") or "",
        "priority": priority,
        "status": status,
        "due_date": parse_datetime(pick("due_date", "dueDate")),
        "estimated_duration": pick("estimated_duration", "estimatedDuration"),
        "scheduled_start_time": parse_datetime(
            pick("scheduled_start_time", "scheduledStartTime")
        ),
        "scheduled_end_time": parse_datetime(
            pick("scheduled_end_time", "scheduledEndTime")
        ),
    }
    for key, aliases in (
        ("created_at", ("created_at", "createdAt")),
        ("updated_at", ("updated_at", "updatedAt")),
    ):
        value = parse_datetime(pick(*aliases))
        if value is not None:
            fields[key] = value

    return Task(**fields)


def format_scheduled_task(task: ScheduledTask) -> dict[str, Any]:
    """
    Format ScheduledTask for API response.

    Args:
        task: ScheduledTask instance

    Returns:
        camelCase dictionary with ISO 8601 datetimes
    """
    return task.model_dump(mode="json", by_alias=True)


def validate_schedule_request(request_data: dict[str, Any]) -> str | None:
    """
    Validate schedule request data.

    Args:
        request_data: Dictionary containing request data

    Returns:
        Error message if validation fails, None if valid
    """
    required_fields = ["taskIds", "startDate", "endDate", "workingHoursStart", "workingHoursEnd"]
    for field in required_fields:
        if field not in request_data:
            return f"Missing required field: {field}"

    task_ids = request_data["taskIds"]
    if not isinstance(task_ids, list) or len(task_ids) == 0:
        return "Task IDs must be a non-empty array"

    for field in ("startDate", "endDate"):
        value = request_data[field]
        if isinstance(value, datetime):
            continue
        try:
            datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError:
            label = "start" if field == "startDate" else "end"
            return f"Invalid {label} date format"

    start_hour = request_data["workingHoursStart"]
    end_hour = request_data["workingHoursEnd"]
    if not isinstance(start_hour, int) or isinstance(start_hour, bool) or not 0 <= start_hour <= 23:
        return "Working hours start must be between 0 and 23"
    if not isinstance(end_hour, int) or isinstance(end_hour, bool) or not 1 <= end_hour <= 24:
        return "Working hours end must be between 1 and 24"
    if start_hour >= end_hour:
        return "Working hours start must be before working hours end"

    return None
