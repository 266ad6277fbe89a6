"""Models for task prioritization results."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
    )


class PrioritizedTask(_CamelModel):
    """A task the user should focus on, with the reason why."""

    id: str
    title: str = ""
    reason: str = ""


class AtRiskTask(_CamelModel):
    """A task that may soon become overdue."""

    id: str
    title: str = ""
    risk: str = ""


class TaskSuggestion(_CamelModel):
    """A delegation or rescheduling suggestion for a task."""

    id: str
    title: str = ""
    suggestion: str = ""


class PrioritizationResult(_CamelModel):
    """Structured prioritization returned to the client."""

    message: str = ""
    prioritized_tasks: list[PrioritizedTask] = Field(default_factory=list)
    logic: str = ""
    at_risk_tasks: list[AtRiskTask] = Field(default_factory=list)
    suggestions: list[TaskSuggestion] = Field(default_factory=list)
