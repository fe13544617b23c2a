"""
Task scoring and deadline feasibility helpers.

A task's score combines its priority weight with how close its due date is.
The feasibility helpers answer the questions the conflict resolver asks
when deciding whether one task may displace another.
"""

from datetime import datetime, timedelta

from .models import Task, TaskPriority

PRIORITY_WEIGHTS: dict[TaskPriority, int] = {
    TaskPriority.URGENT: 4,
    TaskPriority.HIGH: 3,
    TaskPriority.MEDIUM: 2,
    TaskPriority.LOW: 1,
}

# Priorities that get deadline protection. Urgent relies on plain score ordering.
DEADLINE_PROTECTED = frozenset({TaskPriority.MEDIUM, TaskPriority.HIGH})

SECONDS_PER_DAY = 24 * 60 * 60


def days_until_due(task: Task, now: datetime) -> float | None:
    """Fractional days from ``now`` to the task's due date, or None."""
    if task.due_date is None:
        return None
    return (task.due_date - now).total_seconds() / SECONDS_PER_DAY


def calculate_urgency_score(task: Task, now: datetime) -> int:
    """Step function of due date proximity."""
    days = days_until_due(task, now)
    if days is None:
        return 0
    if days < 0:
        return 10  # overdue
    if days < 1:
        return 8
    if days < 3:
        return 6
    if days < 7:
        return 4
    if days < 14:
        return 2
    return 1


def calculate_task_score(task: Task, now: datetime) -> int:
    """Combined score: priority weight * 10 + urgency score."""
    return PRIORITY_WEIGHTS[task.priority] * 10 + calculate_urgency_score(task, now)


def is_due_within_day(task: Task, now: datetime) -> bool:
    days = days_until_due(task, now)
    return days is not None and days < 1


def is_deadline_critical(task: Task, candidate_end: datetime) -> bool:
    """
    Whether ending at ``candidate_end`` would make a protected task miss its due date.

    Only Medium and High tasks are ever deadline-critical.
    """
    if task.priority not in DEADLINE_PROTECTED or task.due_date is None:
        return False
    return candidate_end > task.due_date


def can_complete_by_due(task: Task, start: datetime, duration_minutes: int) -> bool:
    """Whether starting at ``start`` finishes no later than the due date."""
    if task.due_date is None:
        return True
    return start + timedelta(minutes=duration_minutes) <= task.due_date


def working_minutes_between(
    start: datetime,
    end: datetime,
    working_hours_start: int,
    working_hours_end: int,
) -> int:
    """
    Count the minutes of ``[start, end)`` that fall inside daily working hours.

    Args:
        start: Beginning of the range (UTC)
        end: End of the range (UTC)
        working_hours_start: First working hour of each day (0-23)
        working_hours_end: Hour at which the working day ends (1-24)

    Returns:
        Whole working minutes available in the range
    """
    if end <= start:
        return 0

    total = timedelta(0)
    day = start.replace(hour=0, minute=0, second=0, microsecond=0)
    while day < end:
        day_open = day + timedelta(hours=working_hours_start)
        day_close = day + timedelta(hours=working_hours_end)
        overlap_start = max(start, day_open)
        overlap_end = min(end, day_close)
        if overlap_end > overlap_start:
            total += overlap_end - overlap_start
        day += timedelta(days=1)

    return int(total.total_seconds() // 60)


def can_be_safely_pushed(
    task: Task,
    earliest_restart: datetime,
    duration_minutes: int,
    working_hours_start: int,
    working_hours_end: int,
) -> bool:
    """
    Whether a displaced task still has room to run before its due date.

    A task without a due date can always be pushed.
    """
    if task.due_date is None:
        return True
    available = working_minutes_between(
        earliest_restart, task.due_date, working_hours_start, working_hours_end
    )
    return available >= duration_minutes
