"""
Data models for priority scheduling using Pydantic.
"""

from datetime import UTC, datetime, time
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

MAX_DURATION_MINUTES = 24 * 60


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class TaskPriority(str, Enum):
    """Task priority levels"""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class TaskStatus(str, Enum):
    """Task status enum"""

    TODO = "todo"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class CamelModel(BaseModel):
    """Base model accepting both snake_case and camelCase field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Task(CamelModel):
    """Task record as held by the task store."""

    id: str = Field(..., min_length=1, description="Opaque task identifier")
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field("", max_length=1000)
    priority: TaskPriority = Field(TaskPriority.MEDIUM)
    status: TaskStatus = Field(TaskStatus.TODO)
    due_date: datetime | None = Field(None, description="Deadline for the task")
    estimated_duration: int | None = Field(
        None, ge=1, le=MAX_DURATION_MINUTES, description="Estimated minutes"
    )
    scheduled_start_time: datetime | None = None
    scheduled_end_time: datetime | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @field_validator(
        "due_date",
        "scheduled_start_time",
        "scheduled_end_time",
        "created_at",
        "updated_at",
    )
    @classmethod
    def normalize_timezone(cls, v: datetime | None) -> datetime | None:
        return ensure_utc(v) if v is not None else None

    @property
    def is_scheduled(self) -> bool:
        return (
            self.scheduled_start_time is not None
            and self.scheduled_end_time is not None
        )


class ScheduledTask(Task):
    """Task with a concrete placement produced by the scheduler."""

    scheduled_start_time: datetime
    scheduled_end_time: datetime


class TaskCreate(CamelModel):
    """Task creation request"""

    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field("", max_length=1000)
    priority: TaskPriority
    due_date: datetime | None = None
    estimated_duration: int | None = Field(None, ge=1, le=MAX_DURATION_MINUTES)

    @field_validator("title", "description")
    @classmethod
    def strip_text(cls, v: str) -> str:
        return v.strip()


class TaskUpdate(CamelModel):
    """Task update request"""

    title: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = Field(None, max_length=1000)
    priority: TaskPriority | None = None
    status: TaskStatus | None = None
    due_date: datetime | None = None
    estimated_duration: int | None = Field(None, ge=1, le=MAX_DURATION_MINUTES)
    scheduled_start_time: datetime | None = None
    scheduled_end_time: datetime | None = None


class ScheduleRequest(CamelModel):
    """Request to (re)schedule a set of tasks inside a date window."""

    task_ids: list[str] = Field(..., min_length=1, description="Tasks to schedule")
    start_date: datetime = Field(..., description="First day of the window")
    end_date: datetime = Field(..., description="Last day of the window")
    working_hours_start: int = Field(9, ge=0, le=23)
    working_hours_end: int = Field(17, ge=1, le=24)

    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_timezone(cls, v: datetime) -> datetime:
        return ensure_utc(v)

    @model_validator(mode="after")
    def validate_window(self) -> "ScheduleRequest":
        if self.working_hours_start >= self.working_hours_end:
            raise ValueError("working_hours_start must be before working_hours_end")
        if self.start_date.date() > self.end_date.date():
            raise ValueError("start_date must not be after end_date")
        return self

    @property
    def window_start(self) -> datetime:
        """Start of the start day."""
        return datetime.combine(self.start_date.date(), time.min, tzinfo=UTC)

    @property
    def window_end(self) -> datetime:
        """End of the end day."""
        return datetime.combine(self.end_date.date(), time.max, tzinfo=UTC)


class ScheduleResult(BaseModel):
    """Outcome of a scheduling run as reported to the caller."""

    success: bool = Field(..., description="Whether every requested task was placed")
    scheduled: list[ScheduledTask] = Field(default_factory=list)
    unscheduled_task_ids: list[str] = Field(
        default_factory=list, description="Requested tasks that found no slot"
    )

    @property
    def scheduled_minutes(self) -> int:
        return sum(
            int((t.scheduled_end_time - t.scheduled_start_time).total_seconds() // 60)
            for t in self.scheduled
        )
