"""Pydantic models for service layer return types.

These models provide type safety at service boundaries, so the interface
layer can serialise projections and statistics without reshaping them.
"""

from pydantic import BaseModel, Field

from src.core.errors import Rejection
from src.domain.task import Task, TaskStatus


class LedgerWriteResult(BaseModel):
    """Outcome of a daily re-estimate write."""

    task: Task
    time_validation_required: bool = False


class BurndownProjection(BaseModel):
    """Aligned ideal, actual and velocity series for one sprint."""

    days: list[int] = Field(default_factory=list)
    ideal: list[float] = Field(default_factory=list)
    actual: list[float] = Field(default_factory=list)
    velocity: list[float] = Field(default_factory=list)
    total_baseline_hours: float = 0.0
    team_capacity_per_day: int = 0
    observed_velocity: float = 0.0
    days_needed: int = 0
    will_overflow: bool = False
    projected_completion_day: int | None = None


class WipCheckResult(BaseModel):
    """Result of checking a proposed move against WIP limits."""

    allowed: bool
    enforced: bool
    rejection: Rejection | None = None


class WipViolation(BaseModel):
    """A status whose task count is above its configured limit."""

    status: TaskStatus
    current: int
    limit: int
    excess: int


class ColumnStats(BaseModel):
    """Occupancy of one workflow column."""

    status: TaskStatus
    total_tasks: int
    wip_limit: int | None
    utilization_percentage: int
    is_over_limit: bool
    total_effort_hours: float


class CompletionCheck(BaseModel):
    """Result of asking whether a task may move to Done right now."""

    allowed: bool
    rejection: Rejection | None = None


class SprintStatistics(BaseModel):
    """Overall counts and hours for a set of tasks."""

    total: int
    completed: int
    in_progress: int
    pending: int
    total_hours: float
    completed_hours: float
    remaining_hours: float
    completion_rate: float
    hours_completion_rate: float


class DeveloperStatistics(BaseModel):
    """Per-developer workload and estimation accuracy."""

    developer: str
    total: int = 0
    completed: int = 0
    in_progress: int = 0
    pending: int = 0
    total_hours: float = 0.0
    completed_hours: float = 0.0
    tasks_with_time: int = 0
    average_accuracy: float | None = None


class EpicProgress(BaseModel):
    """Completion progress of one epic."""

    epic: str
    total: int = 0
    done: int = 0
    in_progress: int = 0
    total_hours: float = 0.0
    completed_hours: float = 0.0


class EstimationAccuracy(BaseModel):
    """Summary of validated time-spent figures."""

    validated_tasks: int
    average_error_rate: float | None
    above_threshold: int
    total_time_spent: float


class StatisticsReport(BaseModel):
    """Everything the statistics view shows for one scope."""

    sprint: str | None = None
    sprints: list[str] = Field(default_factory=list)
    summary: SprintStatistics
    status_distribution: dict[TaskStatus, int]
    developers: list[DeveloperStatistics]
    epics: list[EpicProgress]
    accuracy: EstimationAccuracy
    wip_violations: list[WipViolation]
