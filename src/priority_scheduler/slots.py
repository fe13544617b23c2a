"""
Occupied time slots and the forward search for a free interval.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta

from .models import Task

DEFAULT_SEARCH_STEP_MINUTES = 15


@dataclass(eq=False)
class TimeSlot:
    """Occupied interval ``[start_time, end_time)`` held by one task."""

    start_time: datetime
    end_time: datetime
    task: Task
    score: int
    fixed: bool = False  # seeded from another schedule; never moved

    def overlaps(self, start: datetime, end: datetime) -> bool:
        return intervals_overlap(start, end, self.start_time, self.end_time)


def intervals_overlap(
    start1: datetime, end1: datetime, start2: datetime, end2: datetime
) -> bool:
    """Half-open overlap test; touching endpoints do not overlap."""
    return start1 < end2 and start2 < end1


def conflicting_slots(
    start: datetime, end: datetime, occupied: Sequence[TimeSlot]
) -> list[TimeSlot]:
    return [slot for slot in occupied if slot.overlaps(start, end)]


def _day_start(value: datetime) -> datetime:
    return value.replace(hour=0, minute=0, second=0, microsecond=0)


def find_next_available_slot(
    start_time: datetime,
    duration_minutes: int,
    occupied: Sequence[TimeSlot],
    working_hours_start: int,
    working_hours_end: int,
    end_date: datetime,
    *,
    step_minutes: int = DEFAULT_SEARCH_STEP_MINUTES,
) -> datetime | None:
    """
    Find the earliest start at or after ``start_time`` for a free interval.

    Scans forward: snaps into working hours, jumps to the next day when the
    interval would run past the end of the working day, and jumps past the
    latest-ending conflicting slot otherwise.

    Returns:
        Start of the free interval, or None once the cursor passes ``end_date``
    """
    duration = timedelta(minutes=duration_minutes)
    current = start_time

    while current <= end_date:
        day = _day_start(current)
        day_open = day + timedelta(hours=working_hours_start)
        if current < day_open:
            current = day_open

        proposed_end = current + duration
        if proposed_end > day + timedelta(hours=working_hours_end):
            current = day + timedelta(days=1, hours=working_hours_start)
            continue

        conflicts = conflicting_slots(current, proposed_end, occupied)
        if not conflicts:
            return current

        latest_end = max(slot.end_time for slot in conflicts)
        if latest_end > current:
            current = latest_end
        else:
            current += timedelta(minutes=step_minutes)

    return None
