"""Next-category prediction from a user's task history."""

import logging
import re
from collections import Counter
from dataclasses import dataclass

from task_assistant.domain.tasks import TaskRecord
from task_assistant.services.cache import SHORT_TTL_SECONDS, Cache, hash_key
from task_assistant.services.generation import GenerationService
from task_assistant.services.parsing import strip_answer
from task_assistant.services.tasks import TaskRepository

_logger = logging.getLogger(__name__)

HISTORY_LIMIT = 50
MIN_TASKS_FOR_AI = 5
RECENT_TASKS_IN_PROMPT = 10

_CATEGORIES_PATTERN = re.compile(r"Available Categories:\s*((?:- [^\n]+\s*)+)")
_TITLE_PATTERN = re.compile(r'New Task Title: "([^"]+)"')
_USAGE_SECTION_PATTERN = re.compile(
    r"Category Usage Frequency:\s*(.*?)(?:\n\s*Recent Tasks:|\Z)", re.DOTALL
)
_USAGE_LINE_PATTERN = re.compile(r"^([^:]+): (\d+) tasks$")


@dataclass
class CategoryService:
    """Predicts the category a user will most likely pick next."""

    generation: GenerationService
    cache: Cache
    repository: TaskRepository
    ttl_seconds: int = SHORT_TTL_SECONDS

    async def predict_next_category(
        self,
        user_id: str,
        tasks: list[TaskRecord] | None = None,
        title_hint: str | None = None,
    ) -> str | None:
        """Return a predicted category, or None when there is no history."""
        try:
            return await self._predict(user_id, tasks, title_hint)
        except Exception:
            _logger.exception("Category prediction failed for user=%s", user_id)
            return None

    async def _predict(
        self,
        user_id: str,
        tasks: list[TaskRecord] | None,
        title_hint: str | None,
    ) -> str | None:
        if tasks is None:
            tasks = self.repository.list_created_by(user_id, HISTORY_LIMIT)
        history = _newest_first(tasks)
        categorized = [task for task in history if task.category]
        if not categorized:
            return None

        task_ids = ",".join(task.id for task in history[:RECENT_TASKS_IN_PROMPT])
        digest = hash_key(task_ids, title_hint or "")
        cache_key = f"predict_category:{user_id}:{digest}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, str):
            _logger.debug("Using cached category prediction for user=%s", user_id)
            return cached

        prediction = None
        if title_hint and len(categorized) >= MIN_TASKS_FOR_AI:
            prediction = await self._predict_with_model(title_hint, history)
        if prediction is None:
            prediction = statistical_category(history)
        if prediction is not None:
            self.cache.set(cache_key, prediction, ttl_seconds=self.ttl_seconds)
        return prediction

    async def _predict_with_model(
        self, title: str, history: list[TaskRecord]
    ) -> str | None:
        categories = list(dict.fromkeys(t.category for t in history if t.category))
        prompt = build_category_prompt(title, history)
        try:
            raw = await self.generation.generate(
                prompt,
                ttl_seconds=self.ttl_seconds,
                fallback=category_fallback,
            )
        except Exception:
            _logger.exception("Model category prediction failed")
            return None
        match = match_category(strip_answer(raw), categories)
        if match is None:
            _logger.info("Discarding category outside known set: %r", raw[:80])
        return match


def build_category_prompt(title: str, history: list[TaskRecord]) -> str:
    """Build the category prediction prompt from a newest-first history."""
    usage = Counter(task.category for task in history if task.category)
    recent = [
        task
        for task in history[:RECENT_TASKS_IN_PROMPT]
        if task.title and task.category
    ]
    lines = [
        "As an AI assistant for a task management application, "
        "predict the most appropriate category for a new task.",
        "",
        f'New Task Title: "{title}"',
        "",
        "Available Categories:",
        *(f"- {category}" for category in usage),
        "",
        "Category Usage Frequency:",
        *(f"{category}: {count} tasks" for category, count in usage.items()),
        "",
        "Recent Tasks:",
        *(f'Title: "{task.title}" - Category: "{task.category}"' for task in recent),
        "",
        "Based on the user's task history and the new task title, predict the "
        "most appropriate category from the available categories.",
        "Return ONLY the category name without any additional text, quotes, "
        "or explanation.",
    ]
    return "\n".join(lines)


def category_fallback(prompt: str) -> str:
    """Pick a category by reading the categories and counts back out of the prompt."""
    categories_match = _CATEGORIES_PATTERN.search(prompt)
    if categories_match is None:
        return ""
    categories = [
        line.strip()[2:].strip()
        for line in categories_match.group(1).splitlines()
        if line.strip().startswith("- ")
    ]
    if not categories:
        return ""

    title_match = _TITLE_PATTERN.search(prompt)
    title = title_match.group(1).lower() if title_match else ""
    if title:
        for category in categories:
            lowered = category.lower()
            if lowered in title or title in lowered:
                return category

    usage_match = _USAGE_SECTION_PATTERN.search(prompt)
    if usage_match:
        best: str | None = None
        best_count = 0
        for line in usage_match.group(1).splitlines():
            line_match = _USAGE_LINE_PATTERN.match(line.strip())
            if line_match and int(line_match.group(2)) > best_count:
                best = line_match.group(1).strip()
                best_count = int(line_match.group(2))
        if best:
            return best

    return categories[0]


def match_category(answer: str, categories: list[str]) -> str | None:
    """Map a model answer onto a known category, or None if it matches nothing."""
    if not answer:
        return None
    if answer in categories:
        return answer
    lowered = answer.lower()
    for category in categories:
        candidate = category.lower()
        if lowered in candidate or candidate in lowered:
            return category
    return None


def statistical_category(history: list[TaskRecord]) -> str | None:
    """Predict from recency first, then overall frequency.

    A category used by at least two of the three most recent categorized
    tasks wins; otherwise the most used category does.
    """
    frequency = Counter(task.category for task in history if task.category)
    if not frequency:
        return None
    recent = [task.category for task in history[:5] if task.category][:3]
    if len(recent) >= 2:
        category, count = Counter(recent).most_common(1)[0]
        if count >= 2:
            return category
    return frequency.most_common(1)[0][0]


def _newest_first(tasks: list[TaskRecord]) -> list[TaskRecord]:
    return sorted(
        tasks,
        key=lambda task: (task.created_at is not None, task.created_at),
        reverse=True,
    )
