"""Task repository interface."""

from typing import Protocol

from tasknotes.core.tasks import Task


class TaskRepository(Protocol):
    """Interface for the authoritative task collection, keyed by id."""

    def list_tasks(self) -> list[Task]:
        """Fetch all tasks in insertion order."""
        ...

    def create_task(self, task: Task) -> Task:
        """Store a new task. Returns the stored record."""
        ...

    def update_task(self, task_id: str, **changes) -> Task:
        """Apply a partial update. Raises NotFoundError for an unknown id."""
        ...

    def delete_task(self, task_id: str) -> None:
        """Remove a task. Raises NotFoundError for an unknown id."""
        ...
