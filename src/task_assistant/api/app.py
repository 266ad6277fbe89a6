"""FastAPI application factory."""

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from task_assistant.api.admin import router as admin_router
from task_assistant.api.tasks import router as tasks_router
from task_assistant.app_logging import configure_logging
from task_assistant.containers import AppContainer

_logger = logging.getLogger(__name__)


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        state_container: AppContainer = app.state.container
        sweeper = asyncio.create_task(
            _sweep_caches(
                state_container, state_container.settings.cache_cleanup_interval_seconds
            )
        )
        try:
            yield
        finally:
            sweeper.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await sweeper
            await state_container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(tasks_router)
    app.include_router(admin_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    return app


async def _sweep_caches(container: AppContainer, interval_seconds: int) -> None:
    """Periodically drop expired cache entries to bound memory use."""
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            removed = container.cache_tiers.cleanup()
        except Exception:
            _logger.exception("Cache cleanup failed")
            continue
        if removed:
            _logger.debug("Removed %s expired cache entries", removed)
