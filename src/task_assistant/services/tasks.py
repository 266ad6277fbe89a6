"""Read-only task queries used by the AI features."""

from typing import Protocol

from task_assistant.domain.tasks import TaskRecord


class TaskRepository(Protocol):
    """Persistence interface for task records, newest first."""

    def list_created_by(self, user_id: str, limit: int) -> list[TaskRecord]:
        """Return tasks created by the user."""

    def list_for_user(
        self, user_id: str, limit: int | None = None, *, active_only: bool = False
    ) -> list[TaskRecord]:
        """Return tasks created by or assigned to the user."""

    def list_critical_or_overdue(self) -> list[TaskRecord]:
        """Return open tasks that are high priority or past their due date."""
