"""AI-assisted task endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

from task_assistant.api.models import (
    CategoryPredictionResponse,
    DescriptionRequest,
    DescriptionResponse,
    TitleSuggestionsResponse,
)
from task_assistant.services.titles import MIN_PREFIX_LENGTH

if TYPE_CHECKING:
    from task_assistant.containers import AppContainer

router = APIRouter(prefix="/tasks", tags=["tasks"])


async def require_user(x_user_id: str | None = Header(default=None)) -> str:
    """Return the caller's user id as asserted by the upstream gateway."""
    if not x_user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    return x_user_id


def _container(request: Request) -> AppContainer:
    return request.app.state.container


@router.get("/suggest/title")
async def suggest_title(
    request: Request,
    prefix: str = "",
    user_id: str = Depends(require_user),
) -> TitleSuggestionsResponse:
    """Suggest complete titles for a partially typed title."""
    if len(prefix.strip()) < MIN_PREFIX_LENGTH:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Prefix must be at least 3 characters long",
        )
    suggestions = await _container(request).title_service.suggest_titles(
        prefix, user_id
    )
    return TitleSuggestionsResponse(suggestions=suggestions)


@router.get("/predict/next-category")
async def predict_next_category(
    request: Request,
    task_title: str | None = None,
    user_id: str = Depends(require_user),
) -> CategoryPredictionResponse:
    """Predict the category of the user's next task."""
    category = await _container(request).category_service.predict_next_category(
        user_id, title_hint=task_title
    )
    return CategoryPredictionResponse(predicted_category=category)


@router.post("/generate-description")
async def generate_description(
    body: DescriptionRequest,
    request: Request,
    user_id: str = Depends(require_user),
) -> DescriptionResponse:
    """Expand a short summary into a full task description."""
    description = await _container(request).description_service.generate_description(
        body.title.strip(), body.summary.strip(), user_id
    )
    if not description:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=(
                "Failed to generate description. Please try again or provide "
                "more details in your summary."
            ),
        )
    return DescriptionResponse(description=description)


@router.get("/prioritize")
async def prioritize(
    request: Request, user_id: str = Depends(require_user)
) -> dict[str, object]:
    """Recommend which of the user's active tasks to work on first."""
    container = _container(request)
    tasks = container.task_repository.list_for_user(user_id, active_only=True)
    result = await container.prioritization_service.prioritize(user_id, tasks)
    return result.model_dump(by_alias=True)
