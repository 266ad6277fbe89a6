"""Task domain models."""

from dataclasses import dataclass
from datetime import datetime

OPEN_STATUSES = ("PENDING", "IN_PROGRESS")
CLOSED_STATUSES = frozenset({"COMPLETED", "CANCELLED"})
CRITICAL_PRIORITIES = frozenset({"HIGH", "URGENT"})
PRIORITY_RANK = {"URGENT": 0, "HIGH": 1, "MEDIUM": 2, "LOW": 3}


@dataclass(frozen=True)
class UserRef:
    """Minimal view of a user attached to a task."""

    id: str
    first_name: str
    last_name: str
    email: str | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass(frozen=True)
class TaskRecord:
    """A task as read from the database."""

    id: str
    title: str
    status: str = "PENDING"
    priority: str = "MEDIUM"
    description: str | None = None
    category: str | None = None
    due_date: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    created_by: UserRef | None = None
    assigned_to: UserRef | None = None

    @property
    def is_open(self) -> bool:
        """Return True unless the task is completed or cancelled."""
        return self.status not in CLOSED_STATUSES

    def is_overdue(self, now: datetime) -> bool:
        """Return True when an open task is past its due date."""
        return self.is_open and self.due_date is not None and self.due_date < now

    def is_critical(self) -> bool:
        """Return True for open HIGH or URGENT tasks."""
        return self.is_open and self.priority in CRITICAL_PRIORITIES


def assignee_name(task: TaskRecord) -> str:
    """Return the assignee display name."""
    return task.assigned_to.full_name if task.assigned_to else "Unassigned"


def creator_name(task: TaskRecord) -> str:
    """Return the creator display name."""
    return task.created_by.full_name if task.created_by else "Unknown"
