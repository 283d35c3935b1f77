"""Pydantic models for creating task records."""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.domain.task import TaskPriority


def clean_title(v: str) -> str:
    """Strip a title, rejecting blank ones."""
    if not v.strip():
        msg = "Title must not be blank"
        raise ValueError(msg)
    return v.strip()


class TaskCreate(BaseModel):
    """Request body for creating a task."""

    model_config = ConfigDict(allow_inf_nan=False)

    title: str = Field(..., description="Short activity title")
    description: str = Field(default="", description="Detailed description")
    epic: str = Field(default="", description="Epic the task belongs to")
    user_story: str = Field(default="", description="User story the task belongs to")
    developer: str = Field(default="", description="Assigned developer name")
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM, description="Business priority")
    sprint: str = Field(default="", description="Sprint the task is grouped under")
    baseline_estimate: float = Field(default=0.0, description="Day 1 commitment in hours")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        """Validate the title is not blank."""
        return clean_title(v)

    @field_validator("baseline_estimate")
    @classmethod
    def clamp_baseline(cls, v: float) -> float:
        """Clamp negative estimates to zero, matching ledger input handling."""
        return max(0.0, v)
