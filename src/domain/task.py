"""Task domain models and enums."""

import uuid
from datetime import UTC, datetime
from enum import StrEnum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from src.core.config import constants


class TaskStatus(StrEnum):
    """Workflow column a task sits in."""

    BACKLOG = "Backlog"
    PRIORITIZED = "Prioritized"
    DOING = "Doing"
    DONE = "Done"


class TaskPriority(StrEnum):
    """Business priority of a task."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"


# Total order of the workflow, left to right
STATUS_ORDER: tuple[TaskStatus, ...] = (
    TaskStatus.BACKLOG,
    TaskStatus.PRIORITIZED,
    TaskStatus.DOING,
    TaskStatus.DONE,
)


def next_status(status: TaskStatus) -> TaskStatus | None:
    """Return the status one step forward, or None from Done."""
    position = STATUS_ORDER.index(status)
    if position + 1 >= len(STATUS_ORDER):
        return None
    return STATUS_ORDER[position + 1]


def previous_status(status: TaskStatus) -> TaskStatus | None:
    """Return the status one step backward, or None from Backlog."""
    position = STATUS_ORDER.index(status)
    if position == 0:
        return None
    return STATUS_ORDER[position - 1]


def utc_now() -> datetime:
    return datetime.now(UTC)


class Movement(BaseModel):
    """One entry of a task's append-only status log."""

    timestamp: datetime = Field(..., description="When the move happened")
    from_status: TaskStatus = Field(..., description="Status before the move")
    to_status: TaskStatus = Field(..., description="Status after the move")
    actor: str = Field(..., description="Who performed the move")


class Task(BaseModel):
    """Task data transfer object."""

    model_config = ConfigDict(allow_inf_nan=False)

    id: str = Field(..., description="Stable task identifier")
    title: str = Field(default="", description="Short activity title")
    description: str = Field(default="", description="Detailed description")
    epic: str = Field(default="", description="Epic the task belongs to")
    user_story: str = Field(default="", description="User story the task belongs to")
    developer: str = Field(default="", description="Assigned developer name")
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM, description="Business priority")
    sprint: str = Field(default="", description="Sprint the task is grouped under")

    status: TaskStatus = Field(default=TaskStatus.BACKLOG, description="Current workflow status")
    baseline_estimate: float = Field(default=0.0, ge=0, description="Day 1 commitment in hours")
    daily_reestimates: list[Annotated[float, Field(ge=0)]] = Field(
        ...,
        min_length=constants.LEDGER_DAYS,
        max_length=constants.LEDGER_DAYS,
        description="Remaining hours per sprint day; slot 0 mirrors the baseline",
    )

    time_spent: float | None = Field(default=None, ge=0, description="Validated hours actually spent")
    time_spent_validated: bool = Field(default=False, description="True once the time gate was satisfied")
    error_rate: float | None = Field(default=None, ge=0, description="Overrun percentage against the baseline")
    error_reason: str | None = Field(default=None, description="Explanation required above the error threshold")

    created_at: datetime = Field(default_factory=utc_now, description="Creation timestamp")
    updated_at: datetime = Field(default_factory=utc_now, description="Last update timestamp")
    status_changed_at: datetime = Field(default_factory=utc_now, description="Last status change timestamp")
    movements: list[Movement] = Field(default_factory=list, description="Append-only status log")

    @field_validator("daily_reestimates", mode="before")
    @classmethod
    def _copy_ledger(cls, value: object) -> object:
        # Never share the caller's list
        if isinstance(value, list | tuple):
            return list(value)
        return value

    @model_validator(mode="after")
    def _check_invariants(self) -> "Task":
        self.daily_reestimates[0] = self.baseline_estimate
        if self.status == TaskStatus.DONE and not (self.time_spent_validated and self.time_spent is not None):
            msg = f"Task {self.id} cannot be Done without a validated time spent"
            raise ValueError(msg)
        return self


def new_task(
    *,
    baseline_estimate: float = 0.0,
    task_id: str | None = None,
    now: datetime | None = None,
    **fields: object,
) -> Task:
    """Create a Backlog task whose ledger is padded with the baseline.

    Args:
        baseline_estimate: Day 1 commitment in hours (negative values clamp to 0)
        task_id: Identifier to use, generated when omitted
        now: Creation timestamp, defaults to the current UTC time
        **fields: Descriptive fields (title, sprint, developer, ...)

    Returns:
        The new task
    """
    baseline = max(0.0, float(baseline_estimate))
    created = now or utc_now()
    return Task(
        id=task_id or f"task-{uuid.uuid4().hex[:12]}",
        status=TaskStatus.BACKLOG,
        baseline_estimate=baseline,
        daily_reestimates=[baseline] * constants.LEDGER_DAYS,
        created_at=created,
        updated_at=created,
        status_changed_at=created,
        movements=[],
        **fields,
    )
