"""Burndown projection for a sprint.

Produces three aligned remaining-work series indexed by sprint day:

- Ideal: the baseline total burned at the configured team capacity.
- Actual: a direct readout of the estimation ledger (chart day d reads
  ledger slot d-1, so day 1 is the baseline).
- Velocity: the baseline total burned at the team's observed completion rate.

Every view that needs a burndown calls ``calculate_burndown``; nothing else
re-derives these numbers.
"""

import logging
import math
from collections.abc import Iterable, Sequence

from src.core.config import constants
from src.core.logging import span
from src.domain.sprint import TeamCapacity
from src.domain.task import Task
from src.models.service_models import BurndownProjection
from src.services import ledger_service


logger = logging.getLogger(__name__)


def tasks_for_sprint(tasks: Iterable[Task], sprint: str | None) -> list[Task]:
    """Restrict a task set to one sprint (None keeps every task)."""
    if sprint is None:
        return list(tasks)
    return [task for task in tasks if task.sprint == sprint]


def total_baseline_hours(tasks: Sequence[Task]) -> float:
    return sum(task.baseline_estimate for task in tasks)


def days_needed(total_hours: float, capacity: TeamCapacity) -> int:
    """Return the whole days needed to burn total_hours at full capacity (0 without capacity)."""
    per_day = capacity.hours_per_sprint_day
    if per_day <= 0:
        return 0
    return math.ceil(total_hours / per_day)


def ideal_remaining(total_hours: float, capacity: TeamCapacity, day: int) -> float:
    per_day = capacity.hours_per_sprint_day
    if per_day <= 0:
        return total_hours
    return max(0.0, total_hours - per_day * day)


def actual_remaining(tasks: Sequence[Task], day: int) -> float:
    """Sum the ledger for a chart day; day 0 is the baseline total."""
    if day == 0:
        return total_baseline_hours(tasks)
    # Past the ledger window the last recorded value holds
    index = min(day, constants.LEDGER_DAYS) - 1
    return sum(ledger_service.daily_value(task, index) for task in tasks)


def observed_velocity(tasks: Sequence[Task], current_day: int) -> float:
    """Return baseline hours completed per elapsed day as of current_day.

    A task is completed by chart day ``current_day`` when its ledger reaches
    zero at slot ``current_day - 1`` or earlier.
    """
    if current_day <= 0:
        return 0.0
    completed_hours = 0.0
    for task in tasks:
        done_at = ledger_service.completion_day(task)
        if done_at is not None and done_at + 1 <= current_day:
            completed_hours += task.baseline_estimate
    return completed_hours / current_day


def calculate_burndown(
    tasks: Sequence[Task],
    capacity: TeamCapacity,
    *,
    current_day: int | None = None,
) -> BurndownProjection:
    """Project ideal, actual and velocity remaining-work lines.

    Args:
        tasks: Tasks already restricted to one sprint
        capacity: Team capacity configuration for this call
        current_day: Elapsed sprint days used for the observed rate;
            defaults to the last day of the sprint inside the ledger window

    Returns:
        BurndownProjection with series for days 0..max(sprint_days, days_needed)
    """
    with span("burndown_service.calculate_burndown"):
        if not tasks:
            return BurndownProjection(team_capacity_per_day=capacity.hours_per_sprint_day)

        total = total_baseline_hours(tasks)
        needed = days_needed(total, capacity)
        horizon = max(capacity.sprint_days, needed)

        if current_day is None:
            current_day = min(capacity.sprint_days, constants.LEDGER_DAYS)
        rate = observed_velocity(tasks, current_day)

        days = list(range(horizon + 1))
        projection = BurndownProjection(
            days=days,
            ideal=[ideal_remaining(total, capacity, day) for day in days],
            actual=[actual_remaining(tasks, day) for day in days],
            velocity=[max(0.0, total - rate * day) for day in days],
            total_baseline_hours=total,
            team_capacity_per_day=capacity.hours_per_sprint_day,
            observed_velocity=rate,
            days_needed=needed,
            will_overflow=needed > capacity.sprint_days,
            projected_completion_day=math.ceil(total / rate) if rate > 0 else None,
        )

        logger.info(
            "Burndown calculated",
            extra={
                "task_count": len(tasks),
                "total_hours": total,
                "days_needed": needed,
                "will_overflow": projection.will_overflow,
            },
        )
        return projection
