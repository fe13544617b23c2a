"""
Core scheduling pass: score ordering, slot placement and bumping.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from enum import Enum

from .models import ScheduledTask, ScheduleRequest, Task, ensure_utc
from .scoring import (
    DEADLINE_PROTECTED,
    calculate_task_score,
    can_be_safely_pushed,
    can_complete_by_due,
    is_deadline_critical,
    is_due_within_day,
)
from .slots import (
    DEFAULT_SEARCH_STEP_MINUTES,
    TimeSlot,
    conflicting_slots,
    find_next_available_slot,
)

logger = logging.getLogger(__name__)

_FAR_FUTURE = datetime.max.replace(tzinfo=UTC)


@dataclass(frozen=True)
class SchedulerConfig:
    default_duration_minutes: int = 60
    search_step_minutes: int = DEFAULT_SEARCH_STEP_MINUTES


class PlacementStrategy(str, Enum):
    """How a candidate interval was chosen."""

    EARLY_SLOT = "early_slot"  # claim working-hours start of the first day
    STANDARD = "standard"  # next free interval from the window start


@dataclass
class Placement:
    start: datetime
    end: datetime
    strategy: PlacementStrategy
    conflicts: list[TimeSlot] = field(default_factory=list)


class _SchedulingRun:
    """State for a single invocation of :func:`schedule_tasks`."""

    def __init__(
        self,
        tasks: Sequence[Task],
        request: ScheduleRequest,
        *,
        now: datetime,
        config: SchedulerConfig,
    ):
        self.tasks = tasks
        self.request = request
        self.now = now
        self.config = config

        self.window_start = request.window_start
        self.window_end = request.window_end
        self.hours_start = request.working_hours_start
        self.hours_end = request.working_hours_end
        self.earliest_start = self.window_start + timedelta(hours=self.hours_start)
        self.first_day_close = self.window_start + timedelta(hours=self.hours_end)

        self.occupied: list[TimeSlot] = []
        self.scheduled: list[ScheduledTask] = []
        self.bumped: list[Task] = []

    def run(self) -> list[ScheduledTask]:
        requested = set(self.request.task_ids)
        to_schedule = [t for t in self.tasks if t.id in requested]
        existing = [
            t for t in self.tasks if t.id not in requested and t.is_scheduled
        ]

        for task in existing:
            self.occupied.append(
                TimeSlot(
                    start_time=task.scheduled_start_time,
                    end_time=task.scheduled_end_time,
                    task=task,
                    score=calculate_task_score(task, self.now),
                    fixed=True,
                )
            )

        scored = [(task, calculate_task_score(task, self.now)) for task in to_schedule]
        scored.sort(key=self._ordering_key)

        for task, score in scored:
            self._schedule_one(task, score)

        rescheduled = self._reschedule_bumped()
        dropped = len(to_schedule) - len(self.scheduled) - len(rescheduled)
        logger.info(
            f"Scheduling run placed {len(self.scheduled)} task(s), "
            f"rescheduled {len(rescheduled)}, dropped {dropped} "
            f"({len(existing)} fixed obligation(s))"
        )
        return self.scheduled + rescheduled

    @staticmethod
    def _ordering_key(item: tuple[Task, int]) -> tuple:
        # Equal scores: earlier due date first, undated last, then by id.
        task, score = item
        return (-score, task.due_date or _FAR_FUTURE, task.id)

    def _duration(self, task: Task) -> int:
        return task.estimated_duration or self.config.default_duration_minutes

    def _find_slot(self, duration: int) -> datetime | None:
        return find_next_available_slot(
            self.window_start,
            duration,
            self.occupied,
            self.hours_start,
            self.hours_end,
            self.window_end,
            step_minutes=self.config.search_step_minutes,
        )

    # Strategy selection

    def _should_force_early_slot(self, task: Task, duration: int) -> bool:
        """Gate between the early-slot and standard strategies."""
        if task.priority not in DEADLINE_PROTECTED or task.due_date is None:
            return False

        end = self.earliest_start + timedelta(minutes=duration)
        if end > self.first_day_close:
            return False
        if not conflicting_slots(self.earliest_start, end, self.occupied):
            return False

        if is_due_within_day(task, self.now):
            return True
        return self._would_miss_deadline_later(task, duration)

    def _would_miss_deadline_later(self, task: Task, duration: int) -> bool:
        """Whether the next free slot (if any) would end after the due date."""
        next_start = self._find_slot(duration)
        if next_start is None:
            return True
        return is_deadline_critical(task, next_start + timedelta(minutes=duration))

    def _early_slot_strategy(self, task: Task, duration: int) -> Placement:
        end = self.earliest_start + timedelta(minutes=duration)
        return Placement(
            start=self.earliest_start,
            end=end,
            strategy=PlacementStrategy.EARLY_SLOT,
            conflicts=conflicting_slots(self.earliest_start, end, self.occupied),
        )

    def _standard_strategy(self, task: Task, duration: int) -> Placement | None:
        start = self._find_slot(duration)
        if start is None:
            return None
        end = start + timedelta(minutes=duration)
        return Placement(
            start=start,
            end=end,
            strategy=PlacementStrategy.STANDARD,
            conflicts=conflicting_slots(start, end, self.occupied),
        )

    # Main loop

    def _schedule_one(self, task: Task, score: int) -> None:
        duration = self._duration(task)

        if self._should_force_early_slot(task, duration):
            logger.debug(f"Task {task.id} contends for the early slot")
            placement = self._early_slot_strategy(task, duration)
        else:
            placement = self._standard_strategy(task, duration)

        if placement is None:
            logger.debug(f"No slot for task {task.id} within window, skipping")
            return

        to_bump = self._resolve_conflicts(task, score, duration, placement)
        blocked = [slot for slot in placement.conflicts if slot not in to_bump]

        if blocked:
            # Only a forced placement can reach here.
            logger.debug(
                f"Task {task.id} could not clear the early slot "
                f"({len(blocked)} blocking), using next free slot"
            )
            placement = self._standard_strategy(task, duration)
            if placement is None:
                logger.debug(f"No slot for task {task.id} within window, skipping")
                return
            to_bump = []

        self._evict(to_bump, by=task)
        self.scheduled.append(self._place(task, score, placement.start, placement.end))

    def _place(
        self, task: Task, score: int, start: datetime, end: datetime
    ) -> ScheduledTask:
        self.occupied.append(
            TimeSlot(start_time=start, end_time=end, task=task, score=score)
        )
        data = task.model_dump()
        data.update(scheduled_start_time=start, scheduled_end_time=end)
        return ScheduledTask.model_validate(data)

    def _evict(self, slots: list[TimeSlot], *, by: Task) -> None:
        for slot in slots:
            self.occupied.remove(slot)
            self.scheduled = [t for t in self.scheduled if t.id != slot.task.id]
            self.bumped.append(slot.task)
            logger.debug(f"Task {slot.task.id} bumped by task {by.id}")

    def _reschedule_bumped(self) -> list[ScheduledTask]:
        rescheduled = []
        for task in self.bumped:
            duration = self._duration(task)
            start = self._find_slot(duration)
            if start is None:
                logger.debug(f"Bumped task {task.id} found no new slot, dropping")
                continue
            score = calculate_task_score(task, self.now)
            end = start + timedelta(minutes=duration)
            rescheduled.append(self._place(task, score, start, end))
        return rescheduled

    # Conflict resolution

    def _resolve_conflicts(
        self, task: Task, score: int, duration: int, placement: Placement
    ) -> list[TimeSlot]:
        """Pick the conflicting slots this task is allowed to bump."""
        if not placement.conflicts:
            return []

        forced = placement.strategy is PlacementStrategy.EARLY_SLOT
        critical = is_deadline_critical(task, placement.end)
        if forced and not critical:
            critical = self._would_miss_deadline_later(task, duration)

        movable = [slot for slot in placement.conflicts if not slot.fixed]

        if critical:
            return [
                slot
                for slot in movable
                if self._critical_may_bump(task, duration, placement, slot)
            ]

        to_bump = [
            slot for slot in movable if self._standard_may_bump(score, placement, slot)
        ]
        if forced and is_due_within_day(task, self.now):
            to_bump += [
                slot
                for slot in movable
                if slot not in to_bump and self._earlier_due_may_bump(task, placement, slot)
            ]
        return to_bump

    def _pushed_is_critical(self, slot: TimeSlot, placement: Placement) -> bool:
        """Whether the slot's task would miss its deadline if pushed past the placement."""
        pushed_end = placement.end + timedelta(minutes=self._duration(slot.task))
        return is_deadline_critical(slot.task, pushed_end)

    def _safely_pushed(self, slot: TimeSlot) -> bool:
        """Whether the slot's task could refit after its current end before its due date."""
        return can_be_safely_pushed(
            slot.task,
            slot.end_time,
            self._duration(slot.task),
            self.hours_start,
            self.hours_end,
        )

    def _critical_may_bump(
        self, task: Task, duration: int, placement: Placement, slot: TimeSlot
    ) -> bool:
        if self._pushed_is_critical(slot, placement):
            return self._arbitrate_due_times(task, duration, placement, slot)
        return self._safely_pushed(slot)

    def _standard_may_bump(self, score: int, placement: Placement, slot: TimeSlot) -> bool:
        return slot.score < score and not self._pushed_is_critical(slot, placement)

    def _earlier_due_may_bump(
        self, task: Task, placement: Placement, slot: TimeSlot
    ) -> bool:
        other = slot.task
        if other.due_date is not None and task.due_date >= other.due_date:
            return False
        return can_complete_by_due(
            other, placement.end, self._duration(other)
        ) and self._safely_pushed(slot)

    def _arbitrate_due_times(
        self, task: Task, duration: int, placement: Placement, slot: TimeSlot
    ) -> bool:
        """
        Decide between two deadline-critical tasks, one step of look-ahead.

        Returns True when ``task`` should take the slot held by ``slot.task``.
        """
        other = slot.task
        other_duration = self._duration(other)

        if task.due_date < other.due_date:
            if not can_complete_by_due(task, placement.start, duration):
                return True
            return can_complete_by_due(other, placement.end, other_duration)

        other_fits_here = can_complete_by_due(other, slot.start_time, other_duration)
        if other_fits_here and can_complete_by_due(task, slot.end_time, duration):
            return False
        if not other_fits_here:
            return can_complete_by_due(task, placement.start, duration)
        return False


def schedule_tasks(
    tasks: Sequence[Task],
    request: ScheduleRequest,
    *,
    now: datetime | None = None,
    config: SchedulerConfig | None = None,
) -> list[ScheduledTask]:
    """
    Assign concrete start/end times to the requested tasks.

    Tasks outside the request that already carry a schedule are treated as
    fixed obligations. Tasks that fit nowhere in the window are left out of
    the result rather than raising.

    Args:
        tasks: Every known task, requested or not
        request: Task ids, date window and working hours
        now: Reference instant for urgency scoring (defaults to current UTC time)
        config: Scheduler tuning knobs

    Returns:
        Placed tasks followed by tasks re-placed after being bumped
    """
    if config is None:
        config = SchedulerConfig()
    now = ensure_utc(now) if now is not None else datetime.now(UTC)
    return _SchedulingRun(tasks, request, now=now, config=config).run()
