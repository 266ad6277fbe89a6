"""Title suggestions for a partially typed task title."""

import json
import logging
from dataclasses import dataclass

from task_assistant.services.cache import SHORT_TTL_SECONDS, Cache
from task_assistant.services.generation import GenerationService
from task_assistant.services.parsing import (
    ParseOk,
    parse_json_array,
    parse_quoted_lines,
)
from task_assistant.services.tasks import TaskRepository

_logger = logging.getLogger(__name__)

MIN_PREFIX_LENGTH = 3
MAX_SUGGESTIONS = 5
CONTEXT_TASKS = 20

_FALLBACK_SUFFIXES = ("task", "project", "review", "update", "meeting")


@dataclass
class TitleService:
    """Suggests complete task titles from a prefix and the user's history."""

    generation: GenerationService
    cache: Cache
    repository: TaskRepository
    ttl_seconds: int = SHORT_TTL_SECONDS

    async def suggest_titles(self, prefix: str, user_id: str) -> list[str]:
        """Return up to five title suggestions, or [] for a short prefix."""
        prefix = (prefix or "").strip()
        if len(prefix) < MIN_PREFIX_LENGTH:
            return []
        try:
            return await self._suggest(prefix, user_id)
        except Exception:
            _logger.exception("Title suggestions failed for user=%s", user_id)
            return fallback_titles(prefix)

    async def _suggest(self, prefix: str, user_id: str) -> list[str]:
        cache_key = f"title_suggestions:{user_id}:{prefix}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, list):
            _logger.debug("Using cached title suggestions for user=%s", user_id)
            return list(cached)

        tasks = self.repository.list_for_user(user_id, CONTEXT_TASKS)
        titles = [task.title for task in tasks if task.title]
        categories = list(
            dict.fromkeys(task.category for task in tasks if task.category)
        )
        prompt = build_title_prompt(prefix, titles, categories)
        raw = await self.generation.generate(
            prompt,
            ttl_seconds=self.ttl_seconds,
            fallback=lambda _prompt: json.dumps(fallback_titles(prefix)),
        )
        suggestions = _pad_suggestions(parse_titles(raw), prefix)
        self.cache.set(cache_key, suggestions, ttl_seconds=self.ttl_seconds)
        return list(suggestions)


def build_title_prompt(prefix: str, titles: list[str], categories: list[str]) -> str:
    """Build the title suggestion prompt."""
    lines = [
        "As an AI assistant for a task management application, suggest 5 "
        f'possible task titles that start with "{prefix}".',
        "",
        "Here are some examples of the user's previous task titles for context:",
        *titles,
        "",
        "The user typically works with these categories:",
        ", ".join(categories),
        "",
        "Please provide 5 professional, clear, and specific task title "
        "suggestions that:",
        f'1. Start with or contain "{prefix}"',
        "2. Are relevant to the user's previous tasks and categories",
        "3. Are between 3-8 words in length",
        "4. Are formatted as a JSON array of strings only (no explanations or "
        "other text)",
        "",
        "Example response format:",
        '["Complete quarterly report", "Create marketing presentation", '
        '"Review team performance", "Update client database", '
        '"Schedule team meeting"]',
    ]
    return "\n".join(lines)


def parse_titles(text: str) -> list[str]:
    """Extract suggestions from a JSON array, then from quoted lines."""
    array = parse_json_array(text)
    if isinstance(array, ParseOk):
        values = [item.strip() for item in array.value if isinstance(item, str)]
        values = [value for value in values if value]
        if values:
            return values[:MAX_SUGGESTIONS]
    quoted = parse_quoted_lines(text)
    if isinstance(quoted, ParseOk):
        return quoted.value[:MAX_SUGGESTIONS]
    return []


def fallback_titles(prefix: str) -> list[str]:
    """Return the fixed suggestions used when the model gives nothing usable."""
    return [f"{prefix} {suffix}" for suffix in _FALLBACK_SUFFIXES]


def _pad_suggestions(suggestions: list[str], prefix: str) -> list[str]:
    padded = list(dict.fromkeys(suggestions))[:MAX_SUGGESTIONS]
    for title in fallback_titles(prefix):
        if len(padded) >= MAX_SUGGESTIONS:
            break
        if title not in padded:
            padded.append(title)
    return padded
