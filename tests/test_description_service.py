"""Tests for description generation."""

import asyncio

from task_assistant.services.cache import CacheTiers
from task_assistant.services.descriptions import (
    DescriptionService,
    build_description_prompt,
    clean_description,
    fallback_description,
)
from task_assistant.services.generation import GenerationService, TextGenerationClient
from tests.fakes import (
    FailingTextClient,
    InMemoryTaskRepository,
    ScriptedTextClient,
    make_task,
)

SUMMARY = (
    "Migrate the billing service to the new queue. "
    "Keep the old consumer running until traffic is drained."
)


def _service(
    client: TextGenerationClient,
    cache_tiers: CacheTiers,
    repository: InMemoryTaskRepository | None = None,
) -> DescriptionService:
    return DescriptionService(
        generation=GenerationService(client=client, cache=cache_tiers.medium),
        cache=cache_tiers.medium,
        repository=repository or InMemoryTaskRepository(),
    )


def test_empty_summary_returns_none(cache_tiers: CacheTiers) -> None:
    client = ScriptedTextClient()
    service = _service(client, cache_tiers)

    assert asyncio.run(service.generate_description("Title", "")) is None
    assert asyncio.run(service.generate_description("Title", "   ")) is None
    assert client.calls == 0


def test_generated_description_is_cleaned(cache_tiers: CacheTiers) -> None:
    client = ScriptedTextClient(
        responses=["Description: Move billing to the new queue.\n\nSteps follow."]
    )
    service = _service(client, cache_tiers)

    result = asyncio.run(service.generate_description("Billing migration", SUMMARY))

    assert result == "Move billing to the new queue.\n\nSteps follow."


def test_description_is_cached_by_title_and_summary(
    cache_tiers: CacheTiers,
) -> None:
    client = ScriptedTextClient(responses=["First text", "Second text"])
    service = _service(client, cache_tiers)

    first = asyncio.run(service.generate_description("Billing", SUMMARY, "user-1"))
    second = asyncio.run(service.generate_description("Billing", SUMMARY, "user-1"))
    other = asyncio.run(service.generate_description("Payroll", SUMMARY, "user-1"))

    assert first == second == "First text"
    assert other == "Second text"
    assert client.calls == 2


def test_user_context_is_included(cache_tiers: CacheTiers) -> None:
    repository = InMemoryTaskRepository(
        tasks=[
            make_task(
                "t1",
                "Rotate keys",
                description="Rotate all API keys.",
                category="Security",
            )
        ]
    )
    client = ScriptedTextClient()
    service = _service(client, cache_tiers, repository)

    asyncio.run(service.generate_description("Billing", SUMMARY, "user-1"))

    assert 'Title: "Rotate keys"' in client.prompts[0]
    assert "Category: Security" in client.prompts[0]


def test_unreachable_model_builds_structured_fallback(
    cache_tiers: CacheTiers,
) -> None:
    service = _service(FailingTextClient(), cache_tiers)

    result = asyncio.run(service.generate_description("Billing migration", SUMMARY))

    assert result == fallback_description("Billing migration", SUMMARY)
    assert result is not None
    assert result.startswith("# Billing migration")
    assert "## Key Points" in result
    assert "- Keep the old consumer running until traffic is drained." in result


def test_fallback_skips_key_points_for_single_sentence() -> None:
    result = fallback_description("Fix login", "Users cannot log in on Safari")

    assert "## Overview\nUsers cannot log in on Safari" in result
    assert "## Key Points" not in result
    assert "related to fix login" in result
    assert result.endswith("- Tests are included where appropriate")


def test_clean_description_strips_labels() -> None:
    assert clean_description("Task Description:  Do it") == "Do it"
    assert clean_description("Generated Description: Do it") == "Do it"
    assert clean_description("  Plain text ") == "Plain text"


def test_prompt_without_examples() -> None:
    prompt = build_description_prompt("Title", "Summary", [])

    assert prompt.startswith('Task Title: "Title"\nUser Summary: "Summary"')
    assert "previous tasks" not in prompt
