"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from task_assistant.adapters.gemini_client import HttpxGeminiClient
from task_assistant.adapters.openai_text_client import OpenAITextClient
from task_assistant.adapters.supabase_task_repository import SupabaseTaskRepository
from task_assistant.config import Settings
from task_assistant.services.cache import CacheTiers
from task_assistant.services.categories import CategoryService
from task_assistant.services.descriptions import DescriptionService
from task_assistant.services.generation import GenerationService
from task_assistant.services.prioritization import PrioritizationService
from task_assistant.services.reports import ReportService
from task_assistant.services.tasks import TaskRepository
from task_assistant.services.titles import TitleService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    cache_tiers: CacheTiers
    task_repository: TaskRepository
    generation_service: GenerationService
    category_service: CategoryService
    description_service: DescriptionService
    title_service: TitleService
    prioritization_service: PrioritizationService
    report_service: ReportService
    close_resources: Callable[[], Awaitable[None]]


def build_services(
    settings: Settings,
    generation_service: GenerationService,
    task_repository: TaskRepository,
    cache_tiers: CacheTiers,
    close_resources: Callable[[], Awaitable[None]],
) -> AppContainer:
    """Wire the feature services around a generation service and repository."""
    return AppContainer(
        settings=settings,
        cache_tiers=cache_tiers,
        task_repository=task_repository,
        generation_service=generation_service,
        category_service=CategoryService(
            generation=generation_service,
            cache=cache_tiers.short,
            repository=task_repository,
        ),
        description_service=DescriptionService(
            generation=generation_service,
            cache=cache_tiers.medium,
            repository=task_repository,
        ),
        title_service=TitleService(
            generation=generation_service,
            cache=cache_tiers.short,
            repository=task_repository,
        ),
        prioritization_service=PrioritizationService(
            generation=generation_service,
            cache=cache_tiers.medium,
        ),
        report_service=ReportService(
            generation=generation_service,
            cache=cache_tiers.medium,
        ),
        close_resources=close_resources,
    )


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    task_repository = SupabaseTaskRepository(supabase_client)
    text_client: HttpxGeminiClient | OpenAITextClient
    if resolved_settings.ai_provider == "openai":
        text_client = OpenAITextClient.create(
            api_key=resolved_settings.openai_api_key,
            model=resolved_settings.openai_model,
            timeout_seconds=resolved_settings.ai_timeout_seconds,
        )
    else:
        text_client = HttpxGeminiClient.create(
            api_key=resolved_settings.gemini_api_key,
            model=resolved_settings.gemini_model,
            base_url=resolved_settings.gemini_base_url,
            timeout_seconds=resolved_settings.ai_timeout_seconds,
        )
    cache_tiers = CacheTiers.create()
    generation_service = GenerationService(
        client=text_client,
        cache=cache_tiers.medium,
        temperature=resolved_settings.ai_temperature,
        max_output_tokens=resolved_settings.ai_max_output_tokens,
    )

    async def close_resources() -> None:
        await text_client.close()

    return build_services(
        settings=resolved_settings,
        generation_service=generation_service,
        task_repository=task_repository,
        cache_tiers=cache_tiers,
        close_resources=close_resources,
    )
