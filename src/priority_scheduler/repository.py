"""
Task storage interface and an in-memory implementation.
"""

from typing import Protocol

from .models import Task


class TaskRepository(Protocol):
    """Read/write access to task records by ID."""

    def get(self, task_id: str) -> Task | None: ...

    def list(self) -> list[Task]: ...

    def upsert(self, task: Task) -> Task: ...

    def delete(self, task_id: str) -> bool: ...


class InMemoryTaskRepository:
    """Insertion-ordered task store. Hands out copies, never stored records."""

    def __init__(self, tasks: list[Task] | None = None):
        self._tasks: dict[str, Task] = {}
        for task in tasks or []:
            self.upsert(task)

    def get(self, task_id: str) -> Task | None:
        task = self._tasks.get(task_id)
        return task.model_copy(deep=True) if task is not None else None

    def list(self) -> list[Task]:
        return [task.model_copy(deep=True) for task in self._tasks.values()]

    def upsert(self, task: Task) -> Task:
        self._tasks[task.id] = task.model_copy(deep=True)
        return task

    def delete(self, task_id: str) -> bool:
        return self._tasks.pop(task_id, None) is not None

    def __len__(self) -> int:
        return len(self._tasks)
