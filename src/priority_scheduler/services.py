"""
Task and scheduling services on top of a task repository.
"""

import logging
from datetime import UTC, datetime
from uuid import uuid4

from .core import SchedulerConfig, schedule_tasks
from .exceptions import ResourceNotFoundError, ValidationError
from .models import ScheduleRequest, ScheduleResult, Task, TaskCreate, TaskUpdate
from .repository import TaskRepository

logger = logging.getLogger(__name__)


class TaskService:
    """CRUD operations for tasks"""

    def __init__(self, repository: TaskRepository):
        self.repository = repository

    def get_task(self, task_id: str) -> Task:
        task = self.repository.get(task_id)
        if task is None:
            raise ResourceNotFoundError("Task", task_id)
        return task

    def list_tasks(self) -> list[Task]:
        return self.repository.list()

    def create_task(self, task_data: TaskCreate) -> Task:
        now = datetime.now(UTC)
        task = Task(
            id=str(uuid4()),
            created_at=now,
            updated_at=now,
            **task_data.model_dump(),
        )
        self.repository.upsert(task)
        logger.info(f"Created task {task.id}")
        return task

    def update_task(self, task_id: str, task_data: TaskUpdate) -> Task:
        task = self.get_task(task_id)
        changes = task_data.model_dump(exclude_unset=True)
        # None for optional fields means "leave as is"
        changes = {k: v for k, v in changes.items() if v is not None}
        changes["updated_at"] = datetime.now(UTC)
        updated = Task.model_validate({**task.model_dump(), **changes})
        self.repository.upsert(updated)
        logger.info(f"Updated task {task_id}: {sorted(changes)}")
        return updated

    def delete_task(self, task_id: str) -> None:
        if not self.repository.delete(task_id):
            raise ResourceNotFoundError("Task", task_id)
        logger.info(f"Deleted task {task_id}")


class SchedulingService:
    """Runs the scheduler against a repository and stores the outcome"""

    def __init__(
        self, repository: TaskRepository, config: SchedulerConfig | None = None
    ):
        self.repository = repository
        self.config = config

    def schedule(
        self, request: ScheduleRequest, *, now: datetime | None = None
    ) -> ScheduleResult:
        """
        Schedule the requested tasks and write the placements back.

        Args:
            request: Validated schedule request
            now: Reference instant for urgency scoring

        Returns:
            ScheduleResult listing placed tasks and requested ids left unplaced

        Raises:
            ValidationError: If any requested task id does not exist
        """
        tasks = self.repository.list()
        known_ids = {task.id for task in tasks}
        missing = [task_id for task_id in request.task_ids if task_id not in known_ids]
        if missing:
            logger.warning(f"Schedule request references unknown tasks: {missing}")
            raise ValidationError("Some task IDs do not exist", field="taskIds")

        scheduled = schedule_tasks(tasks, request, now=now, config=self.config)

        written_at = datetime.now(UTC)
        for scheduled_task in scheduled:
            stored = self.repository.get(scheduled_task.id)
            if stored is None:
                continue
            stored.scheduled_start_time = scheduled_task.scheduled_start_time
            stored.scheduled_end_time = scheduled_task.scheduled_end_time
            stored.updated_at = written_at
            self.repository.upsert(stored)

        placed_ids = {t.id for t in scheduled}
        unscheduled = []
        for task_id in request.task_ids:
            if task_id not in placed_ids and task_id not in unscheduled:
                unscheduled.append(task_id)

        logger.info(
            f"Stored {len(scheduled)} placement(s); "
            f"{len(unscheduled)} requested task(s) unscheduled"
        )
        return ScheduleResult(
            success=not unscheduled,
            scheduled=scheduled,
            unscheduled_task_ids=unscheduled,
        )
