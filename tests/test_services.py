"""
Tests for the repository and the task/scheduling services.
"""

import pytest

from priority_scheduler.exceptions import ResourceNotFoundError, ValidationError
from priority_scheduler.models import TaskCreate, TaskPriority, TaskStatus, TaskUpdate
from priority_scheduler.repository import InMemoryTaskRepository
from priority_scheduler.services import SchedulingService, TaskService

from .conftest import NOW, at


class TestInMemoryTaskRepository:
    """Test cases for the in-memory store."""

    def test_upsert_and_get(self, make_task):
        repository = InMemoryTaskRepository()
        repository.upsert(make_task("t1"))

        assert repository.get("t1").id == "t1"
        assert repository.get("missing") is None
        assert len(repository) == 1

    def test_returns_copies(self, make_task):
        repository = InMemoryTaskRepository([make_task("t1")])

        fetched = repository.get("t1")
        fetched.title = "changed"

        assert repository.get("t1").title == "Task t1"

    def test_list_preserves_insertion_order(self, make_task):
        repository = InMemoryTaskRepository([make_task("b"), make_task("a")])
        assert [t.id for t in repository.list()] == ["b", "a"]

    def test_delete(self, make_task):
        repository = InMemoryTaskRepository([make_task("t1")])
        assert repository.delete("t1") is True
        assert repository.delete("t1") is False


class TestTaskService:
    """Test cases for task CRUD."""

    def test_create_task(self):
        service = TaskService(InMemoryTaskRepository())
        task = service.create_task(
            TaskCreate(title="  Write report  ", priority=TaskPriority.HIGH, estimated_duration=90)
        )

        assert task.id
        assert task.title == "Write report"
        assert task.status == TaskStatus.TODO
        assert service.get_task(task.id).estimated_duration == 90

    def test_update_task_merges_fields(self, make_task):
        repository = InMemoryTaskRepository([make_task("t1", description="keep")])
        service = TaskService(repository)

        updated = service.update_task(
            "t1", TaskUpdate(status=TaskStatus.IN_PROGRESS, due_date=at(16))
        )

        assert updated.status == TaskStatus.IN_PROGRESS
        assert updated.due_date == at(16)
        assert updated.description == "keep"
        assert updated.updated_at > NOW
        assert repository.get("t1").status == TaskStatus.IN_PROGRESS

    def test_update_missing_task(self):
        service = TaskService(InMemoryTaskRepository())
        with pytest.raises(ResourceNotFoundError):
            service.update_task("missing", TaskUpdate(title="x"))

    def test_delete_task(self, make_task):
        service = TaskService(InMemoryTaskRepository([make_task("t1")]))
        service.delete_task("t1")

        assert service.list_tasks() == []
        with pytest.raises(ResourceNotFoundError) as exc_info:
            service.delete_task("t1")
        assert exc_info.value.error_code == "RESOURCE_NOT_FOUND"


class TestSchedulingService:
    """Test cases for running the scheduler against a repository."""

    def test_writes_placements_back(self, make_task, make_request):
        repository = InMemoryTaskRepository([make_task("t1"), make_task("t2")])
        result = SchedulingService(repository).schedule(make_request(["t1"]), now=NOW)

        assert result.success is True
        assert result.unscheduled_task_ids == []
        stored = repository.get("t1")
        assert stored.scheduled_start_time == at(9)
        assert stored.scheduled_end_time == at(10)
        assert repository.get("t2").scheduled_start_time is None

    def test_unknown_task_id_rejects_request(self, make_task, make_request):
        repository = InMemoryTaskRepository([make_task("t1")])

        with pytest.raises(ValidationError) as exc_info:
            SchedulingService(repository).schedule(make_request(["t1", "ghost"]), now=NOW)

        assert exc_info.value.message == "Some task IDs do not exist"
        assert repository.get("t1").scheduled_start_time is None

    def test_reports_unscheduled_tasks(self, make_task, make_request):
        repository = InMemoryTaskRepository(
            [make_task("big", estimated_duration=480), make_task("small")]
        )
        result = SchedulingService(repository).schedule(
            make_request(["big", "small"]), now=NOW
        )

        assert result.success is False
        assert result.unscheduled_task_ids == ["small"]
        assert [t.id for t in result.scheduled] == ["big"]

    def test_second_run_respects_first(self, make_task, make_request):
        """Tasks placed by an earlier run become fixed obligations for the next."""
        repository = InMemoryTaskRepository([make_task("t1"), make_task("t2")])
        service = SchedulingService(repository)

        service.schedule(make_request(["t1"]), now=NOW)
        service.schedule(make_request(["t2"]), now=NOW)

        assert repository.get("t1").scheduled_start_time == at(9)
        assert repository.get("t2").scheduled_start_time == at(10)
