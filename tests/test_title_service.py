"""Tests for title suggestions."""

import asyncio

from task_assistant.services.cache import CacheTiers
from task_assistant.services.generation import GenerationService, TextGenerationClient
from task_assistant.services.titles import TitleService, fallback_titles, parse_titles
from tests.fakes import (
    BOB,
    FailingTextClient,
    InMemoryTaskRepository,
    ScriptedTextClient,
    make_task,
)


def _service(
    client: TextGenerationClient,
    cache_tiers: CacheTiers,
    repository: InMemoryTaskRepository | None = None,
) -> TitleService:
    return TitleService(
        generation=GenerationService(client=client, cache=cache_tiers.medium),
        cache=cache_tiers.short,
        repository=repository or InMemoryTaskRepository(),
    )


def test_short_prefix_returns_empty_without_calls(cache_tiers: CacheTiers) -> None:
    client = ScriptedTextClient()
    repository = InMemoryTaskRepository()
    service = _service(client, cache_tiers, repository)

    assert asyncio.run(service.suggest_titles("ab", "user-1")) == []
    assert asyncio.run(service.suggest_titles("", "user-1")) == []
    assert client.calls == 0
    assert repository.queries == 0


def test_json_array_response(cache_tiers: CacheTiers) -> None:
    client = ScriptedTextClient(
        responses=[
            'Here are ideas: ["Write blog post", "Write release notes", 42, '
            '"Write tests", "Write changelog", "Write docs", "Write more"]'
        ]
    )
    service = _service(client, cache_tiers)

    result = asyncio.run(service.suggest_titles("Write", "user-1"))

    assert result == [
        "Write blog post",
        "Write release notes",
        "Write tests",
        "Write changelog",
        "Write docs",
    ]


def test_prose_response_still_yields_five_titles(cache_tiers: CacheTiers) -> None:
    client = ScriptedTextClient(
        responses=["I think you should plan something nice this week."]
    )
    service = _service(client, cache_tiers)

    result = asyncio.run(service.suggest_titles("Plan", "user-1"))

    assert result == fallback_titles("Plan")
    assert len(result) == 5
    assert all(isinstance(title, str) and title for title in result)


def test_quoted_lines_are_padded_to_five(cache_tiers: CacheTiers) -> None:
    client = ScriptedTextClient(
        responses=['Suggestions:\n"Review budget"\n"Review hiring plan"']
    )
    service = _service(client, cache_tiers)

    result = asyncio.run(service.suggest_titles("Review", "user-1"))

    assert result[:2] == ["Review budget", "Review hiring plan"]
    assert len(result) == 5
    assert result[2:] == ["Review task", "Review project", "Review review"]


def test_unreachable_model_uses_fixed_suggestions(cache_tiers: CacheTiers) -> None:
    repository = InMemoryTaskRepository(
        tasks=[
            make_task("t1", "Update report", category="Work"),
            make_task("t2", "Update slides", category="Work"),
        ]
    )
    client = FailingTextClient()
    service = _service(client, cache_tiers, repository)

    result = asyncio.run(service.suggest_titles("upd", "user-1"))

    assert len(result) <= 5
    assert all(isinstance(title, str) for title in result)
    assert all(title.startswith("upd") for title in result)
    assert "Update report" in client.prompts[0]
    assert "Update slides" in client.prompts[0]


def test_suggestions_are_cached_per_user_and_prefix(cache_tiers: CacheTiers) -> None:
    client = ScriptedTextClient(default='["Plan sprint"]')
    service = _service(client, cache_tiers)

    first = asyncio.run(service.suggest_titles("Plan", "user-1"))
    second = asyncio.run(service.suggest_titles("Plan", "user-1"))

    assert first == second
    assert client.calls == 1


def test_context_includes_assigned_tasks(cache_tiers: CacheTiers) -> None:
    repository = InMemoryTaskRepository(
        tasks=[make_task("t1", "Audit invoices", created_by=BOB, assigned_to=BOB)]
    )
    client = ScriptedTextClient()
    service = _service(client, cache_tiers, repository)

    asyncio.run(service.suggest_titles("Audit", "user-2"))

    assert "Audit invoices" in client.prompts[0]


def test_parse_titles_ignores_non_strings() -> None:
    assert parse_titles('[1, null, "  Ship it  "]') == ["Ship it"]
    assert parse_titles("[]") == []
    assert parse_titles("nothing useful") == []


def test_model_titles_survive_trailing_notes(cache_tiers: CacheTiers) -> None:
    client = ScriptedTextClient(
        responses=[
            '["Plan A", "Plan B", "Plan C", "Plan D", "Plan E"]\n'
            "Note [1] see docs"
        ]
    )
    service = _service(client, cache_tiers)

    result = asyncio.run(service.suggest_titles("Plan", "user-1"))

    assert result == ["Plan A", "Plan B", "Plan C", "Plan D", "Plan E"]


def test_prefix_is_trimmed_before_use(cache_tiers: CacheTiers) -> None:
    client = FailingTextClient()
    service = _service(client, cache_tiers)

    padded = asyncio.run(service.suggest_titles("  upd  ", "user-1"))
    plain = asyncio.run(service.suggest_titles("upd", "user-1"))

    assert padded == fallback_titles("upd")
    assert padded[0] == "upd task"
    assert plain == padded
    assert client.calls == 1
    assert '"upd"' in client.prompts[0]
