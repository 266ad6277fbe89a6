"""Supabase repository for task records."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from task_assistant.domain.tasks import OPEN_STATUSES, TaskRecord, UserRef
from task_assistant.services.tasks import TaskRepository

_USER_COLUMNS = "id, first_name, last_name, email"
_TASK_COLUMNS = (
    "id, title, description, status, priority, category, due_date, "
    "created_at, updated_at, "
    f"created_by:users!created_by_id({_USER_COLUMNS}), "
    f"assigned_to:users!assigned_to_id({_USER_COLUMNS})"
)


@dataclass
class SupabaseTaskRepository(TaskRepository):
    """Supabase implementation for task queries."""

    client: Client

    def list_created_by(self, user_id: str, limit: int) -> list[TaskRecord]:
        """Return the user's most recently created tasks."""
        response = (
            self.client.table("tasks")
            .select(_TASK_COLUMNS)
            .eq("created_by_id", user_id)
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        return [_parse_task(row) for row in response.data or []]

    def list_for_user(
        self, user_id: str, limit: int | None = None, *, active_only: bool = False
    ) -> list[TaskRecord]:
        """Return tasks the user created or is assigned to."""
        query = (
            self.client.table("tasks")
            .select(_TASK_COLUMNS)
            .or_(f"created_by_id.eq.{user_id},assigned_to_id.eq.{user_id}")
        )
        if active_only:
            query = query.in_("status", list(OPEN_STATUSES))
        query = query.order("created_at", desc=True)
        if limit is not None:
            query = query.limit(limit)
        response = query.execute()
        return [_parse_task(row) for row in response.data or []]

    def list_critical_or_overdue(self) -> list[TaskRecord]:
        """Return open tasks that are high priority or past due."""
        response = (
            self.client.table("tasks")
            .select(_TASK_COLUMNS)
            .in_("status", list(OPEN_STATUSES))
            .order("due_date", desc=False)
            .execute()
        )
        now = datetime.now(tz=UTC)
        tasks = [_parse_task(row) for row in response.data or []]
        return [task for task in tasks if task.is_critical() or task.is_overdue(now)]


def _parse_task(row: dict[str, object]) -> TaskRecord:
    return TaskRecord(
        id=str(row["id"]),
        title=str(row.get("title") or ""),
        description=row.get("description"),
        status=str(row.get("status") or "PENDING"),
        priority=str(row.get("priority") or "MEDIUM"),
        category=row.get("category") or None,
        due_date=_parse_datetime(row.get("due_date")),
        created_at=_parse_datetime(row.get("created_at")),
        updated_at=_parse_datetime(row.get("updated_at")),
        created_by=_parse_user(row.get("created_by")),
        assigned_to=_parse_user(row.get("assigned_to")),
    )


def _parse_user(raw: object) -> UserRef | None:
    if not isinstance(raw, dict) or not raw.get("id"):
        return None
    return UserRef(
        id=str(raw["id"]),
        first_name=str(raw.get("first_name") or ""),
        last_name=str(raw.get("last_name") or ""),
        email=raw.get("email"),
    )


def _parse_datetime(raw: object) -> datetime | None:
    if not isinstance(raw, str) or not raw:
        return None
    value = datetime.fromisoformat(raw)
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value
