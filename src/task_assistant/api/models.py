"""Request and response models for the task assistant API."""

from pydantic import BaseModel, Field


class DescriptionRequest(BaseModel):
    """Body for generating a description from a summary."""

    title: str = Field(min_length=1)
    summary: str = Field(min_length=1)


class DescriptionResponse(BaseModel):
    description: str


class TitleSuggestionsResponse(BaseModel):
    suggestions: list[str]


class CategoryPredictionResponse(BaseModel):
    predicted_category: str | None
