"""Executive reports on critical and overdue tasks."""

import json
import logging
from collections import Counter
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime

from task_assistant.domain.tasks import TaskRecord, assignee_name, creator_name
from task_assistant.services.cache import MEDIUM_TTL_SECONDS, Cache, hash_key
from task_assistant.services.generation import GenerationService

_logger = logging.getLogger(__name__)

NO_TASKS_REPORT = "No tasks found for analysis."
ERROR_REPORT = "Error generating report. Please try again later."
TOP_USERS = 5


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class ReportService:
    """Summarizes critical and overdue tasks for administrators."""

    generation: GenerationService
    cache: Cache
    ttl_seconds: int = MEDIUM_TTL_SECONDS
    clock: Callable[[], datetime] = _utcnow

    async def critical_tasks_report(self, tasks: list[TaskRecord]) -> str:
        """Return a prose report on the critical and overdue tasks."""
        if not tasks:
            return NO_TASKS_REPORT
        try:
            return await self._report(tasks)
        except Exception:
            _logger.exception("Critical tasks report failed")
            return ERROR_REPORT

    async def critical_tasks_overview(
        self, tasks: list[TaskRecord]
    ) -> dict[str, object]:
        """Return the report together with counts, top assignees and tasks."""
        now = self.clock()
        report = await self.critical_tasks_report(tasks)
        return {
            "report": report,
            "summary": {
                "critical_tasks_count": sum(1 for task in tasks if task.is_critical()),
                "overdue_tasks_count": sum(1 for task in tasks if task.is_overdue(now)),
                "total_tasks_count": len(tasks),
            },
            "top_users": _top_assignees(tasks),
            "tasks": [_serialize_task(task, now) for task in tasks],
        }

    async def _report(self, tasks: list[TaskRecord]) -> str:
        now = self.clock()
        critical = [_critical_row(task) for task in tasks if task.is_critical()]
        overdue_tasks = sorted(
            (task for task in tasks if task.is_overdue(now)),
            key=lambda task: task.due_date,
        )
        overdue = [_overdue_row(task, now) for task in overdue_tasks]

        snapshot = json.dumps(
            {"critical": critical, "overdue": overdue}, sort_keys=True
        )
        cache_key = f"critical_report:{hash_key(snapshot)}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, str):
            _logger.debug("Using cached critical tasks report")
            return cached

        raw = await self.generation.generate(
            build_report_prompt(critical, overdue),
            ttl_seconds=self.ttl_seconds,
            fallback=lambda _prompt: fallback_report(critical, overdue),
        )
        report = raw.strip() or fallback_report(critical, overdue).strip()
        self.cache.set(cache_key, report, ttl_seconds=self.ttl_seconds)
        return report


def build_report_prompt(
    critical: list[dict[str, object]], overdue: list[dict[str, object]]
) -> str:
    """Build the executive summary prompt."""
    return "\n".join(
        [
            "Generate a professional executive summary report for an admin "
            "dashboard based on the following task data:",
            "",
            f"CRITICAL TASKS ({len(critical)}):",
            json.dumps(critical, indent=2),
            "",
            f"OVERDUE TASKS ({len(overdue)}):",
            json.dumps(overdue, indent=2),
            "",
            "Please create a concise report that:",
            "1. Summarizes the overall status of critical and overdue tasks",
            "2. Highlights the most urgent issues that need attention",
            "3. Identifies any patterns or trends (e.g., specific users with many "
            "overdue tasks)",
            "4. Provides actionable recommendations for the admin",
            "5. Uses professional, clear language suitable for an executive summary",
            "6. Formats the report with appropriate sections and bullet points for "
            "readability",
            "",
            "Executive Summary Report:",
        ]
    )


def fallback_report(
    critical: list[dict[str, object]], overdue: list[dict[str, object]]
) -> str:
    """Render a templated markdown report without the model."""
    critical_lines = [
        f"- {row['title']} ({row['priority']} priority, "
        f"assigned to {row['assignedTo']})"
        for row in critical
    ] or ["- None"]
    overdue_lines = [
        f"- {row['title']} ({row['daysOverdue']} days overdue, "
        f"assigned to {row['assignedTo']})"
        for row in overdue
    ] or ["- None"]
    return "\n".join(
        [
            "## Executive Summary: Critical and Overdue Tasks",
            "",
            "### Overview",
            f"The system currently has {len(critical)} critical tasks and "
            f"{len(overdue)} overdue tasks that require immediate attention.",
            "",
            "### Critical Tasks",
            *critical_lines,
            "",
            "### Overdue Tasks",
            *overdue_lines,
            "",
            "### Recommendations",
            "1. Address the overdue tasks immediately, especially those with high "
            "or urgent priority",
            "2. Review resource allocation for team members with multiple critical "
            "or overdue tasks",
            "3. Consider implementing stricter deadline monitoring to prevent "
            "future overdue tasks",
            "",
            "This report was generated automatically based on current task data.",
        ]
    )


def _critical_row(task: TaskRecord) -> dict[str, object]:
    due_date = task.due_date.date().isoformat() if task.due_date else "No due date"
    return {
        "title": task.title,
        "priority": task.priority,
        "status": task.status,
        "dueDate": due_date,
        "assignedTo": assignee_name(task),
        "createdBy": creator_name(task),
    }


def _overdue_row(task: TaskRecord, now: datetime) -> dict[str, object]:
    row = _critical_row(task)
    row["daysOverdue"] = _days_overdue(task, now)
    return row


def _days_overdue(task: TaskRecord, now: datetime) -> int:
    if task.due_date is None:
        return 0
    return (now - task.due_date).days


def _top_assignees(tasks: list[TaskRecord]) -> list[dict[str, object]]:
    counts = Counter(
        task.assigned_to.id if task.assigned_to else "unassigned" for task in tasks
    )
    users = {
        task.assigned_to.id: task.assigned_to for task in tasks if task.assigned_to
    }
    top = []
    for user_id, count in counts.most_common(TOP_USERS):
        user = users.get(user_id)
        if user is None:
            top.append(
                {"id": "unassigned", "name": "Unassigned", "task_count": count}
            )
            continue
        top.append(
            {
                "id": user.id,
                "name": user.full_name,
                "email": user.email,
                "task_count": count,
            }
        )
    return top


def _serialize_task(task: TaskRecord, now: datetime) -> dict[str, object]:
    return {
        "id": task.id,
        "title": task.title,
        "priority": task.priority,
        "status": task.status,
        "due_date": task.due_date.isoformat() if task.due_date else None,
        "is_overdue": task.due_date is not None and task.due_date < now,
        "assigned_to": assignee_name(task),
        "created_by": creator_name(task),
    }
