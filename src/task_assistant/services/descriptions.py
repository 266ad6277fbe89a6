"""Task description generation from a short summary."""

import logging
import re
from dataclasses import dataclass

from task_assistant.domain.tasks import TaskRecord
from task_assistant.services.cache import MEDIUM_TTL_SECONDS, Cache, hash_key
from task_assistant.services.generation import GenerationService
from task_assistant.services.tasks import TaskRepository

_logger = logging.getLogger(__name__)

CONTEXT_TASKS = 3
MIN_KEY_POINT_LENGTH = 10

_ANSWER_PREFIXES = ("Generated Description:", "Description:", "Task Description:")
_SENTENCE_SPLIT = re.compile(r"[.!?]+")


@dataclass
class DescriptionService:
    """Expands a user's summary into a structured task description."""

    generation: GenerationService
    cache: Cache
    repository: TaskRepository
    ttl_seconds: int = MEDIUM_TTL_SECONDS

    async def generate_description(
        self, title: str, summary: str, user_id: str | None = None
    ) -> str | None:
        """Return a generated description, or None for an empty summary."""
        if not summary or not summary.strip():
            return None
        try:
            return await self._generate(title or "", summary, user_id)
        except Exception:
            _logger.exception("Description generation failed")
            return None

    async def _generate(self, title: str, summary: str, user_id: str | None) -> str:
        cache_key = f"description:{hash_key(title, summary)}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, str):
            _logger.debug("Using cached task description")
            return cached

        examples = self._load_examples(user_id) if user_id else []
        prompt = build_description_prompt(title, summary, examples)
        raw = await self.generation.generate(
            prompt,
            ttl_seconds=self.ttl_seconds,
            fallback=lambda _prompt: fallback_description(title, summary),
        )
        description = clean_description(raw) or fallback_description(title, summary)
        self.cache.set(cache_key, description, ttl_seconds=self.ttl_seconds)
        return description

    def _load_examples(self, user_id: str) -> list[TaskRecord]:
        try:
            return self.repository.list_created_by(user_id, CONTEXT_TASKS)
        except Exception:
            _logger.exception("Failed to load description context for user=%s", user_id)
            return []


def build_description_prompt(
    title: str, summary: str, examples: list[TaskRecord]
) -> str:
    """Build the description prompt, optionally with style examples."""
    lines = [f'Task Title: "{title}"', f'User Summary: "{summary}"', ""]
    if examples:
        lines.append(
            "Here are some examples of the user's previous tasks for context:"
        )
        for task in examples:
            lines.extend(
                [
                    f'Title: "{task.title}"',
                    f'Description: "{task.description or "N/A"}"',
                    f"Category: {task.category or 'N/A'}",
                    "",
                ]
            )
        lines.extend(
            [
                "Please use a similar style and level of detail as the examples "
                "above.",
                "",
            ]
        )
    lines.extend(
        [
            "Based on the task title and user summary above, please generate a "
            "detailed, professional task description that:",
            "1. Expands on the key points mentioned in the summary",
            "2. Organizes the information in a clear, structured way",
            "3. Uses professional language appropriate for a task management system",
            "4. Keeps the description concise (maximum 3-4 paragraphs)",
            "5. Does not add speculative information not implied by the title or "
            "summary",
            "6. Includes specific actionable items or steps when appropriate",
            "7. Highlights any deadlines, dependencies, or important considerations",
            "",
            "Return ONLY the description text without any additional commentary, "
            "prefixes, or formatting.",
        ]
    )
    return "\n".join(lines)


def clean_description(text: str) -> str:
    """Strip labels the model sometimes puts in front of the description."""
    cleaned = text.strip()
    for prefix in _ANSWER_PREFIXES:
        cleaned = cleaned.removeprefix(prefix).strip()
    return cleaned


def fallback_description(title: str, summary: str) -> str:
    """Build a structured markdown description without the model."""
    key_points = [
        sentence.strip()
        for sentence in _SENTENCE_SPLIT.split(summary)
        if len(sentence.strip()) > MIN_KEY_POINT_LENGTH
    ]
    parts = [f"# {title}", "", "## Overview", summary.strip(), ""]
    if len(key_points) > 1:
        parts.append("## Key Points")
        parts.extend(f"- {point}." for point in key_points)
        parts.append("")
    parts.extend(
        [
            "## Implementation Details",
            "This task involves implementing changes related to "
            f"{title.lower()}. Please ensure all requirements are met and tested "
            "thoroughly before completion.",
            "",
            "## Acceptance Criteria",
            "- All functionality works as described in the overview",
            "- Code is well-documented and follows project standards",
            "- Tests are included where appropriate",
        ]
    )
    return "\n".join(parts)
