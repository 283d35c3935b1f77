"""Analytics service for sprint and team statistics.

This module provides read-only aggregations over a set of tasks:
- Sprint summary (counts per workflow stage, hours, completion rates)
- Per-developer workload and estimation accuracy
- Per-epic progress
- Accuracy of validated time-spent figures

Key Concepts:
- Completed: tasks in Done. Hours are counted from the baseline estimate.
- Pending: tasks still in Backlog or Prioritized.
- Accuracy: 100 minus the absolute estimation error, floored at 0. Unlike
  the error rate stored on the task, it penalises finishing early too.
"""

import logging
from collections.abc import Iterable, Sequence

from src.core.config import constants
from src.core.logging import span
from src.domain.sprint import WipConfig
from src.domain.task import STATUS_ORDER, Task, TaskStatus
from src.models.service_models import (
    DeveloperStatistics,
    EpicProgress,
    EstimationAccuracy,
    SprintStatistics,
    StatisticsReport,
)
from src.services import wip_service


logger = logging.getLogger(__name__)

UNASSIGNED_DEVELOPER = "Unassigned"
_PENDING_STATUSES = {TaskStatus.BACKLOG, TaskStatus.PRIORITIZED}


def _percentage(part: float, whole: float) -> float:
    return part / whole * 100 if whole > 0 else 0.0


def list_sprints(tasks: Iterable[Task]) -> list[str]:
    """Return the distinct non-empty sprint names, sorted."""
    return sorted({task.sprint for task in tasks if task.sprint})


def sprint_statistics(tasks: Sequence[Task]) -> SprintStatistics:
    """Summarise counts and hours for a set of tasks."""
    total = len(tasks)
    completed = [task for task in tasks if task.status == TaskStatus.DONE]
    in_progress = sum(1 for task in tasks if task.status == TaskStatus.DOING)
    pending = sum(1 for task in tasks if task.status in _PENDING_STATUSES)

    total_hours = sum(task.baseline_estimate for task in tasks)
    completed_hours = sum(task.baseline_estimate for task in completed)

    return SprintStatistics(
        total=total,
        completed=len(completed),
        in_progress=in_progress,
        pending=pending,
        total_hours=total_hours,
        completed_hours=completed_hours,
        remaining_hours=total_hours - completed_hours,
        completion_rate=_percentage(len(completed), total),
        hours_completion_rate=_percentage(completed_hours, total_hours),
    )


def status_distribution(tasks: Iterable[Task]) -> dict[TaskStatus, int]:
    """Count tasks per status, listing every status."""
    distribution = dict.fromkeys(STATUS_ORDER, 0)
    for task in tasks:
        distribution[task.status] += 1
    return distribution


def _accuracy(task: Task) -> float | None:
    if not task.time_spent or not task.baseline_estimate:
        return None
    error = abs((task.time_spent / task.baseline_estimate - 1) * 100)
    return max(0.0, 100 - error)


def developer_statistics(tasks: Iterable[Task]) -> list[DeveloperStatistics]:
    """Aggregate workload and accuracy per developer, sorted by name."""
    stats: dict[str, DeveloperStatistics] = {}
    accuracy_sums: dict[str, float] = {}

    for task in tasks:
        name = task.developer.strip() or UNASSIGNED_DEVELOPER
        entry = stats.setdefault(name, DeveloperStatistics(developer=name))
        entry.total += 1
        entry.total_hours += task.baseline_estimate

        if task.status == TaskStatus.DONE:
            entry.completed += 1
            entry.completed_hours += task.baseline_estimate
            accuracy = _accuracy(task)
            if accuracy is not None:
                entry.tasks_with_time += 1
                accuracy_sums[name] = accuracy_sums.get(name, 0.0) + accuracy
        elif task.status == TaskStatus.DOING:
            entry.in_progress += 1
        else:
            entry.pending += 1

    for name, entry in stats.items():
        if entry.tasks_with_time:
            entry.average_accuracy = accuracy_sums[name] / entry.tasks_with_time

    return [stats[name] for name in sorted(stats)]


def epic_progress(tasks: Iterable[Task]) -> list[EpicProgress]:
    """Aggregate progress per epic; tasks without an epic are skipped."""
    epics: dict[str, EpicProgress] = {}
    for task in tasks:
        if not task.epic:
            continue
        entry = epics.setdefault(task.epic, EpicProgress(epic=task.epic))
        entry.total += 1
        entry.total_hours += task.baseline_estimate
        if task.status == TaskStatus.DONE:
            entry.done += 1
            entry.completed_hours += task.baseline_estimate
        elif task.status == TaskStatus.DOING:
            entry.in_progress += 1
    return [epics[name] for name in sorted(epics)]


def estimation_accuracy(tasks: Iterable[Task]) -> EstimationAccuracy:
    """Summarise the error rates of tasks whose time spent was validated."""
    validated = [task for task in tasks if task.time_spent_validated and task.time_spent is not None]
    rates = [task.error_rate for task in validated if task.error_rate is not None]

    return EstimationAccuracy(
        validated_tasks=len(validated),
        average_error_rate=sum(rates) / len(rates) if rates else None,
        above_threshold=sum(1 for rate in rates if rate > constants.ERROR_RATE_REASON_THRESHOLD),
        total_time_spent=sum(task.time_spent or 0.0 for task in validated),
    )


def build_report(tasks: Sequence[Task], wip_config: WipConfig, *, sprint: str | None = None) -> StatisticsReport:
    """Assemble every statistic for a scope, restricted to one sprint when given.

    The sprint list always covers the whole scope so callers can offer the
    other sprints.
    """
    with span("analytics_service.build_report"):
        scoped = [task for task in tasks if sprint is None or task.sprint == sprint]
        report = StatisticsReport(
            sprint=sprint,
            sprints=list_sprints(tasks),
            summary=sprint_statistics(scoped),
            status_distribution=status_distribution(scoped),
            developers=developer_statistics(scoped),
            epics=epic_progress(scoped),
            accuracy=estimation_accuracy(scoped),
            wip_violations=wip_service.find_violations(scoped, wip_config),
        )
        logger.debug("Statistics report built", extra={"sprint": sprint, "task_count": len(scoped)})
        return report
