"""Work-in-progress limits for the workflow columns.

Limits are advisory unless the configuration enforces them. Only moves into
Prioritized or Doing are gated here; Backlog is never limited and Done is
gated by the time validation service instead.
"""

import logging
from collections.abc import Iterable, Mapping, Sequence

from src.core.errors import ErrorCode, Rejection
from src.domain.sprint import WipConfig
from src.domain.task import STATUS_ORDER, Task, TaskStatus
from src.models.service_models import ColumnStats, WipCheckResult, WipViolation


logger = logging.getLogger(__name__)

LIMITED_STATUSES: frozenset[TaskStatus] = frozenset({TaskStatus.PRIORITIZED, TaskStatus.DOING})


def group_by_status(tasks: Iterable[Task]) -> dict[TaskStatus, list[Task]]:
    """Group tasks into one list per workflow status."""
    grouped: dict[TaskStatus, list[Task]] = {status: [] for status in STATUS_ORDER}
    for task in tasks:
        grouped[task.status].append(task)
    return grouped


def can_transition(
    active_tasks_by_status: Mapping[TaskStatus, Sequence[Task]],
    target_status: TaskStatus,
    wip_config: WipConfig,
    *,
    moving_task_id: str | None = None,
) -> WipCheckResult:
    """Check whether one more task may enter target_status.

    Args:
        active_tasks_by_status: Current tasks grouped by status
        target_status: Status the task is moving into
        wip_config: Limits and enforcement flag, supplied fresh per call
        moving_task_id: Task being moved; never counted against its own move

    Returns:
        WipCheckResult; when disallowed, the rejection details carry the
        current count and the limit
    """
    if not wip_config.enforced:
        return WipCheckResult(allowed=True, enforced=False)

    if target_status not in LIMITED_STATUSES:
        return WipCheckResult(allowed=True, enforced=True)

    limit = wip_config.limit_for(target_status)
    # A limit of 0 means unset
    if not limit:
        return WipCheckResult(allowed=True, enforced=True)

    occupants = active_tasks_by_status.get(target_status, [])
    current = sum(1 for task in occupants if task.id != moving_task_id)

    if current >= limit:
        logger.info(
            "WIP limit reached",
            extra={"status": str(target_status), "current": current, "limit": limit},
        )
        return WipCheckResult(
            allowed=False,
            enforced=True,
            rejection=Rejection(
                code=ErrorCode.WIP_LIMIT_EXCEEDED,
                message=f"WIP limit reached for {target_status} ({current}/{limit})",
                details={"status": str(target_status), "current": current, "limit": limit},
                suggestion=f"Finish some tasks in {target_status} before adding new ones.",
            ),
        )

    return WipCheckResult(allowed=True, enforced=True)


def find_violations(tasks: Iterable[Task], wip_config: WipConfig) -> list[WipViolation]:
    """List statuses holding more tasks than their limit, enforced or not."""
    grouped = group_by_status(tasks)
    violations = []
    for status in STATUS_ORDER:
        limit = wip_config.limit_for(status)
        current = len(grouped[status])
        if limit and current > limit:
            violations.append(WipViolation(status=status, current=current, limit=limit, excess=current - limit))
    return violations


def column_stats(tasks: Iterable[Task], wip_config: WipConfig) -> list[ColumnStats]:
    """Summarise occupancy and effort per workflow column."""
    grouped = group_by_status(tasks)
    stats = []
    for status in STATUS_ORDER:
        column = grouped[status]
        limit = wip_config.limit_for(status)
        total = len(column)
        stats.append(
            ColumnStats(
                status=status,
                total_tasks=total,
                wip_limit=limit,
                utilization_percentage=round(total / limit * 100) if limit else 0,
                is_over_limit=bool(limit) and total > limit,
                total_effort_hours=sum(task.baseline_estimate for task in column),
            )
        )
    return stats
