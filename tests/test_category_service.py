"""Tests for next-category prediction."""

import asyncio

from task_assistant.services.cache import CacheTiers
from task_assistant.services.categories import (
    CategoryService,
    build_category_prompt,
    category_fallback,
    match_category,
    statistical_category,
)
from task_assistant.services.generation import GenerationService, TextGenerationClient
from tests.fakes import (
    FailingTextClient,
    InMemoryTaskRepository,
    ScriptedTextClient,
    history,
)


def _service(
    client: TextGenerationClient,
    cache_tiers: CacheTiers,
    repository: InMemoryTaskRepository | None = None,
) -> CategoryService:
    return CategoryService(
        generation=GenerationService(client=client, cache=cache_tiers.medium),
        cache=cache_tiers.short,
        repository=repository or InMemoryTaskRepository(),
    )


def test_no_history_returns_none_without_calls(cache_tiers: CacheTiers) -> None:
    client = ScriptedTextClient()
    repository = InMemoryTaskRepository()
    service = _service(client, cache_tiers, repository)

    assert asyncio.run(service.predict_next_category("user-1", [])) is None
    assert asyncio.run(service.predict_next_category("user-1")) is None
    assert client.calls == 0
    assert repository.queries == 1


def test_uncategorized_history_returns_none(cache_tiers: CacheTiers) -> None:
    client = ScriptedTextClient()
    service = _service(client, cache_tiers)
    tasks = history([None] * 6)

    result = asyncio.run(service.predict_next_category("user-1", tasks, "Plan trip"))

    assert result is None
    assert client.calls == 0


def test_recent_repeat_wins(cache_tiers: CacheTiers) -> None:
    service = _service(ScriptedTextClient(), cache_tiers)
    tasks = history(["A", "A", "B", "B", "B", "B"])

    assert asyncio.run(service.predict_next_category("user-1", tasks)) == "A"


def test_statistical_category_rules() -> None:
    assert statistical_category(history(["A", "A", "B"])) == "A"
    assert statistical_category(history(["A", "B", "B", "A", "A"])) == "B"
    assert statistical_category(history(["A", "B", "C", "C", "C"])) == "C"
    assert statistical_category(history([None, "D"])) == "D"
    assert statistical_category(history([None])) is None


def test_fetches_history_when_not_given(cache_tiers: CacheTiers) -> None:
    repository = InMemoryTaskRepository(tasks=history(["Work", "Home", "Work"]))
    service = _service(ScriptedTextClient(), cache_tiers, repository)

    assert asyncio.run(service.predict_next_category("user-1")) == "Work"
    assert repository.queries == 1


def test_model_answer_is_matched_to_known_category(cache_tiers: CacheTiers) -> None:
    client = ScriptedTextClient(responses=['"finance".'])
    service = _service(client, cache_tiers)
    tasks = history(["Work", "Work", "Finance", "Home", "Work"])

    result = asyncio.run(service.predict_next_category("user-1", tasks, "Pay taxes"))

    assert result == "Finance"
    assert client.calls == 1
    assert 'New Task Title: "Pay taxes"' in client.prompts[0]


def test_unknown_model_answer_uses_statistics(cache_tiers: CacheTiers) -> None:
    client = ScriptedTextClient(responses=["Gardening"])
    service = _service(client, cache_tiers)
    tasks = history(["Work", "Work", "Finance", "Home", "Work"])

    result = asyncio.run(service.predict_next_category("user-1", tasks, "Pay taxes"))

    assert result == "Work"


def test_unreachable_model_uses_prompt_fallback(cache_tiers: CacheTiers) -> None:
    client = FailingTextClient()
    service = _service(client, cache_tiers)
    tasks = history(["Work", "Work", "Finance", "Home", "Work"])

    result = asyncio.run(
        service.predict_next_category("user-1", tasks, "Finance review")
    )

    assert result == "Finance"
    assert client.calls == 1


def test_prediction_is_cached(cache_tiers: CacheTiers) -> None:
    client = ScriptedTextClient(responses=["Home", "Work"])
    service = _service(client, cache_tiers)
    tasks = history(["Work", "Work", "Finance", "Home", "Work"])

    first = asyncio.run(service.predict_next_category("user-1", tasks, "Clean up"))
    second = asyncio.run(service.predict_next_category("user-1", tasks, "Clean up"))

    assert first == second == "Home"
    assert client.calls == 1


def test_category_fallback_prefers_highest_usage() -> None:
    prompt = build_category_prompt(
        "Plan the week", history(["Home", "Work", "Work", "Errands", "Work"])
    )

    assert category_fallback(prompt) == "Work"


def test_category_fallback_matches_title() -> None:
    prompt = build_category_prompt(
        "Buy groceries for errands", history(["Home", "Work", "Errands"])
    )

    assert category_fallback(prompt) == "Errands"


def test_category_fallback_without_categories() -> None:
    assert category_fallback("unrelated text") == ""


def test_match_category() -> None:
    categories = ["Work", "Personal Finance"]

    assert match_category("Work", categories) == "Work"
    assert match_category("finance", categories) == "Personal Finance"
    assert match_category("Work stuff", categories) == "Work"
    assert match_category("Travel", categories) is None
    assert match_category("", categories) is None
