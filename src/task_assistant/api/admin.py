"""Admin API endpoints with simple token auth."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

if TYPE_CHECKING:
    from task_assistant.containers import AppContainer

router = APIRouter(prefix="/admin", tags=["admin"])


def _get_admin_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.admin_token


async def require_admin(
    x_admin_token: str | None = Header(default=None),
    admin_token: str = Depends(_get_admin_token),
) -> None:
    """Ensure requests include a valid admin token."""
    if not x_admin_token or x_admin_token != admin_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


@router.get("/health", dependencies=[Depends(require_admin)])
async def admin_health() -> dict[str, str]:
    """Admin health check endpoint."""
    return {"status": "ok"}


@router.get("/reports/critical-tasks", dependencies=[Depends(require_admin)])
async def critical_tasks_report(request: Request) -> dict[str, object]:
    """Return the critical and overdue tasks report with summary counts."""
    container: AppContainer = request.app.state.container
    tasks = container.task_repository.list_critical_or_overdue()
    return await container.report_service.critical_tasks_overview(tasks)


@router.post("/cache/cleanup", dependencies=[Depends(require_admin)])
async def cleanup_cache(request: Request) -> dict[str, int]:
    """Drop expired entries from every cache tier."""
    container: AppContainer = request.app.state.container
    return {"removed": container.cache_tiers.cleanup()}
