"""Update models for task mutations."""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.domain.create_models import clean_title
from src.domain.sprint import WipConfig
from src.domain.task import TaskPriority, TaskStatus


class TaskUpdate(BaseModel):
    """Request body for editing descriptive task fields."""

    model_config = ConfigDict(allow_inf_nan=False)

    title: str | None = None
    description: str | None = None
    epic: str | None = None
    user_story: str | None = None
    developer: str | None = None
    priority: TaskPriority | None = None
    sprint: str | None = None
    baseline_estimate: float | None = Field(default=None, description="New day 1 commitment in hours")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str | None) -> str | None:
        """Validate a supplied title is not blank."""
        return None if v is None else clean_title(v)

    def field_updates(self) -> dict[str, object]:
        """Return the set descriptive fields, excluding the baseline."""
        return self.model_dump(exclude_none=True, exclude={"baseline_estimate"})


class DailyValueUpdate(BaseModel):
    """Request body for writing one day of the ledger."""

    # Forgiving input: non-numeric values are recorded as 0
    value: float | str | None = Field(..., description="Remaining hours for the day")


class StepMove(BaseModel):
    """Request body for moving a task one status left or right."""

    actor: str | None = Field(default=None, description="Who performs the move")
    wip_config: WipConfig | None = Field(default=None, description="Overrides the configured WIP limits")


class StatusMove(StepMove):
    """Request body for moving a task to another status."""

    target_status: TaskStatus


class TimeSpentSubmission(BaseModel):
    """Request body for completing a task with its validated time spent."""

    model_config = ConfigDict(allow_inf_nan=False)

    time_spent: float = Field(..., description="Hours actually spent")
    error_reason: str | None = Field(default=None, description="Required above the error-rate threshold")
    actor: str | None = Field(default=None, description="Who completes the task")
