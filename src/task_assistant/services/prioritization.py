"""Task prioritization recommendations."""

import json
import logging
import math
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime

from pydantic import ValidationError

from task_assistant.domain.prioritization import PrioritizationResult, PrioritizedTask
from task_assistant.domain.tasks import PRIORITY_RANK, TaskRecord
from task_assistant.services.cache import Cache, hash_key
from task_assistant.services.generation import GenerationService
from task_assistant.services.parsing import (
    ParseFailure,
    ParseOk,
    ParseResult,
    parse_json_object,
)

_logger = logging.getLogger(__name__)

PRIORITIZATION_TTL_SECONDS = 1800
TOP_TASKS = 5
DESCRIPTION_PREVIEW = 100

NO_TASKS_MESSAGE = "No tasks found to prioritize."
NO_ACTIVE_TASKS_MESSAGE = "No active tasks found to prioritize."
PRIORITIZED_MESSAGE = (
    "Here are your prioritized tasks based on urgency, importance, and deadlines."
)
ERROR_MESSAGE = (
    "Error generating task prioritization. "
    "Using default sorting by priority and due date."
)
FALLBACK_LOGIC = "Tasks are prioritized based on urgency, priority level, and due date."

_RESPONSE_FORMAT = """{
  "prioritizedTasks": [
    {"id": "task-id", "title": "Task title", "reason": "Reason for prioritization"}
  ],
  "logic": "Explanation of prioritization logic",
  "atRiskTasks": [
    {"id": "task-id", "title": "Task title", "risk": "Description of the risk"}
  ],
  "suggestions": [
    {"id": "task-id", "title": "Task title", "suggestion": "Suggestion for this task"}
  ]
}"""


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class PrioritizationService:
    """Recommends which active tasks a user should focus on first."""

    generation: GenerationService
    cache: Cache
    ttl_seconds: int = PRIORITIZATION_TTL_SECONDS
    clock: Callable[[], datetime] = _utcnow

    async def prioritize(
        self, user_id: str, tasks: list[TaskRecord]
    ) -> PrioritizationResult:
        """Return prioritized tasks with reasons, risks and suggestions."""
        if not tasks:
            return PrioritizationResult(message=NO_TASKS_MESSAGE)
        try:
            return await self._prioritize(user_id, tasks)
        except Exception:
            _logger.exception("Task prioritization failed for user=%s", user_id)
            return PrioritizationResult(
                message=ERROR_MESSAGE,
                logic="Default sorting by priority and due date.",
            )

    async def _prioritize(
        self, user_id: str, tasks: list[TaskRecord]
    ) -> PrioritizationResult:
        active = [task for task in tasks if task.is_open]
        if not active:
            return PrioritizationResult(message=NO_ACTIVE_TASKS_MESSAGE)

        fingerprint = "|".join(
            f"{task.id}-{task.status}-{task.priority}-{_iso(task.due_date)}"
            for task in active
        )
        cache_key = f"task_prioritization:{user_id}:{hash_key(fingerprint)}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, PrioritizationResult):
            _logger.debug("Using cached task prioritization for user=%s", user_id)
            return cached.model_copy(deep=True)

        now = self.clock()
        fallback = fallback_prioritization(active, now)
        raw = await self.generation.generate(
            build_prioritization_prompt(active, now),
            ttl_seconds=self.ttl_seconds,  # prompt cache expires with the result
            fallback=lambda _prompt: fallback.model_dump_json(by_alias=True),
        )
        parsed = parse_prioritization(raw)
        if isinstance(parsed, ParseOk):
            result = parsed.value
        else:
            _logger.info("Unparseable prioritization response: %s", parsed.reason)
            result = fallback
        if not result.message:
            result.message = PRIORITIZED_MESSAGE

        self.cache.set(cache_key, result, ttl_seconds=self.ttl_seconds)
        return result.model_copy(deep=True)


def build_prioritization_prompt(tasks: list[TaskRecord], now: datetime) -> str:
    """Build the prioritization prompt with the tasks embedded as JSON."""
    payload = [_task_for_prompt(task, now) for task in tasks]
    return "\n".join(
        [
            "As an AI task prioritization assistant, analyze the following tasks "
            "and provide recommendations for which tasks the user should focus "
            "on first.",
            "",
            "USER TASKS:",
            json.dumps(payload, indent=2),
            "",
            "Please provide:",
            "1. A prioritized list of the top 5 tasks the user should focus on, "
            "with a brief explanation for each",
            "2. A short explanation of your prioritization logic",
            "3. Any tasks that might be at risk of becoming overdue soon",
            "4. Suggestions for any tasks that could potentially be delegated or "
            "rescheduled",
            "",
            "Format your response as a JSON object with the following structure:",
            _RESPONSE_FORMAT,
            "",
            "Ensure your response is valid JSON that can be parsed.",
        ]
    )


def parse_prioritization(text: str) -> ParseResult[PrioritizationResult]:
    """Validate the first JSON object in the text as a prioritization."""
    parsed = parse_json_object(text)
    if isinstance(parsed, ParseFailure):
        return parsed
    if "prioritizedTasks" not in parsed.value:
        return ParseFailure(raw=text, reason="missing prioritizedTasks")
    try:
        return ParseOk(PrioritizationResult.model_validate(parsed.value))
    except ValidationError as exc:
        return ParseFailure(raw=text, reason=str(exc))


def fallback_prioritization(
    tasks: list[TaskRecord], now: datetime
) -> PrioritizationResult:
    """Order tasks by overdue, priority rank, then due date without the model."""
    ordered = sorted(tasks, key=lambda task: _sort_key(task, now))
    return PrioritizationResult(
        prioritized_tasks=[
            PrioritizedTask(id=task.id, title=task.title, reason=_reason(task))
            for task in ordered[:TOP_TASKS]
        ],
        logic=FALLBACK_LOGIC,
    )


def _sort_key(task: TaskRecord, now: datetime) -> tuple[bool, int, bool, datetime]:
    return (
        not task.is_overdue(now),
        PRIORITY_RANK.get(task.priority, len(PRIORITY_RANK)),
        task.due_date is None,
        task.due_date or now,
    )


def _reason(task: TaskRecord) -> str:
    if task.due_date is None:
        return f"{task.priority} priority"
    return f"{task.priority} priority, due {task.due_date.date().isoformat()}"


def _task_for_prompt(task: TaskRecord, now: datetime) -> dict[str, object]:
    description = "No description"
    if task.description:
        description = task.description[:DESCRIPTION_PREVIEW]
        if len(task.description) > DESCRIPTION_PREVIEW:
            description += "..."
    due_date = "No due date"
    days_until_due = None
    if task.due_date is not None:
        due_date = task.due_date.date().isoformat()
        days_until_due = math.ceil((task.due_date - now).total_seconds() / 86400)
    return {
        "id": task.id,
        "title": task.title,
        "description": description,
        "status": task.status,
        "priority": task.priority,
        "category": task.category or "Uncategorized",
        "dueDate": due_date,
        "daysUntilDue": days_until_due,
        "isOverdue": task.due_date is not None and task.due_date < now,
    }


def _iso(value: datetime | None) -> str:
    return value.isoformat() if value else ""
