"""Task service: host-side orchestration around the core components.

Each operation loads the scope's tasks through ``db_client``, runs one core
operation on them, and writes the whole set back. The core never touches
storage, and a rejected operation writes nothing.
"""

import logging
from collections.abc import Callable
from typing import Any

from src.core import db_client
from src.core.config import settings
from src.core.errors import ErrorCode, reject
from src.core.logging import span
from src.domain.sprint import TeamCapacity, WipConfig
from src.domain.task import Task, TaskStatus, new_task
from src.models.service_models import BurndownProjection, ColumnStats, LedgerWriteResult, StatisticsReport
from src.services import analytics_service, burndown_service, ledger_service, task_state_machine, wip_service


logger = logging.getLogger(__name__)

# Fields a plain edit may change; status, ledger and time fields have their own gates
EDITABLE_FIELDS = frozenset({"title", "description", "epic", "user_story", "developer", "priority", "sprint"})


def _find(tasks: list[Task], task_id: str) -> int:
    for index, task in enumerate(tasks):
        if task.id == task_id:
            return index
    msg = f"Task not found: {task_id}"
    raise KeyError(msg)


async def list_tasks(*, scope_key: str, sprint: str | None = None) -> list[Task]:
    """List the tasks of a scope, optionally restricted to one sprint."""
    tasks = await db_client.load_tasks(scope_key)
    return burndown_service.tasks_for_sprint(tasks, sprint)


async def get_task(*, scope_key: str, task_id: str) -> Task:
    """Fetch one task.

    Raises:
        KeyError: If the task does not exist in the scope
    """
    tasks = await db_client.load_tasks(scope_key)
    return tasks[_find(tasks, task_id)]


async def create_task(*, scope_key: str, baseline_estimate: float = 0.0, **fields: Any) -> Task:
    """Create a Backlog task and append it to the scope.

    Args:
        scope_key: Board the task belongs to
        baseline_estimate: Day 1 commitment in hours
        **fields: Descriptive fields (title, sprint, developer, ...)

    Returns:
        The created task

    Raises:
        TaskRejectedError: INVALID_INPUT if a field is not editable
    """
    with span("task_service.create_task"):
        unknown = set(fields) - EDITABLE_FIELDS
        if unknown:
            raise reject(ErrorCode.INVALID_INPUT, "Unknown task fields", fields=sorted(unknown))

        tasks = await db_client.load_tasks(scope_key)
        task = new_task(baseline_estimate=baseline_estimate, **fields)
        tasks.append(task)
        await db_client.save_tasks(scope_key, tasks)

        logger.info("Created task %s in scope %s (baseline %sh)", task.id, scope_key, task.baseline_estimate)
        return task


async def update_task_details(
    *,
    scope_key: str,
    task_id: str,
    updates: dict[str, Any],
    baseline_estimate: float | None = None,
) -> Task:
    """Edit descriptive fields and, optionally, the baseline estimate.

    A baseline change is a day 1 ledger write, so it replicates forward like
    any other write.

    Raises:
        KeyError: If the task does not exist
        TaskRejectedError: INVALID_INPUT if a field is not editable
    """
    with span("task_service.update_task_details"):
        unknown = set(updates) - EDITABLE_FIELDS
        if unknown:
            raise reject(ErrorCode.INVALID_INPUT, "Fields cannot be edited directly", fields=sorted(unknown))

        tasks = await db_client.load_tasks(scope_key)
        index = _find(tasks, task_id)
        # Revalidate so enum fields coming from plain strings are coerced
        task = Task.model_validate({**tasks[index].model_dump(), **updates})
        if baseline_estimate is not None:
            task = ledger_service.set_daily_value(task, 0, baseline_estimate)

        tasks[index] = task
        await db_client.save_tasks(scope_key, tasks)
        logger.info("Updated task %s in scope %s", task_id, scope_key)
        return task


async def delete_task(*, scope_key: str, task_id: str) -> None:
    """Remove a task from the scope's active set.

    Raises:
        KeyError: If the task does not exist
    """
    tasks = await db_client.load_tasks(scope_key)
    del tasks[_find(tasks, task_id)]
    await db_client.save_tasks(scope_key, tasks)
    logger.info("Deleted task %s from scope %s", task_id, scope_key)


async def set_daily_value(
    *,
    scope_key: str,
    task_id: str,
    day_index: int,
    value: float | int | str | None,
) -> LedgerWriteResult:
    """Write one day of a task's ledger.

    Returns:
        The updated task, plus whether the caller should now collect the time
        actually spent (a zero was written on a task not yet validated)
    """
    with span("task_service.set_daily_value"):
        tasks = await db_client.load_tasks(scope_key)
        index = _find(tasks, task_id)
        task = tasks[index]

        updated = ledger_service.set_daily_value(task, day_index, value)
        tasks[index] = updated
        await db_client.save_tasks(scope_key, tasks)

        return LedgerWriteResult(
            task=updated,
            time_validation_required=ledger_service.requires_time_validation(updated, value),
        )


async def move_task(
    *,
    scope_key: str,
    task_id: str,
    target: TaskStatus,
    actor: str | None = None,
    wip_config: WipConfig | None = None,
) -> Task:
    """Move a task to another status through the WIP and time gates.

    Raises:
        KeyError: If the task does not exist
        TaskRejectedError: If a gate rejects the move
    """
    with span("task_service.move_task"):
        tasks = await db_client.load_tasks(scope_key)
        index = _find(tasks, task_id)

        moved = task_state_machine.move_task(
            tasks[index],
            target,
            active_tasks=wip_service.group_by_status(tasks),
            wip_config=wip_config or WipConfig.from_settings(settings),
            actor=actor or settings.default_actor,
        )
        tasks[index] = moved
        await db_client.save_tasks(scope_key, tasks)
        return moved


async def _step(
    step: Callable[..., Task],
    *,
    scope_key: str,
    task_id: str,
    actor: str | None,
    wip_config: WipConfig | None,
) -> Task:
    tasks = await db_client.load_tasks(scope_key)
    index = _find(tasks, task_id)

    moved = step(
        tasks[index],
        active_tasks=wip_service.group_by_status(tasks),
        wip_config=wip_config or WipConfig.from_settings(settings),
        actor=actor or settings.default_actor,
    )
    tasks[index] = moved
    await db_client.save_tasks(scope_key, tasks)
    return moved


async def move_forward(
    *,
    scope_key: str,
    task_id: str,
    actor: str | None = None,
    wip_config: WipConfig | None = None,
) -> Task:
    """Move a task one status to the right.

    Raises:
        KeyError: If the task does not exist
        TaskRejectedError: INVALID_INPUT from Done, or a gate rejection
    """
    with span("task_service.move_forward"):
        return await _step(
            task_state_machine.move_forward,
            scope_key=scope_key,
            task_id=task_id,
            actor=actor,
            wip_config=wip_config,
        )


async def move_backward(
    *,
    scope_key: str,
    task_id: str,
    actor: str | None = None,
    wip_config: WipConfig | None = None,
) -> Task:
    """Move a task one status to the left.

    Raises:
        KeyError: If the task does not exist
        TaskRejectedError: INVALID_INPUT from Backlog, or a gate rejection
    """
    with span("task_service.move_backward"):
        return await _step(
            task_state_machine.move_backward,
            scope_key=scope_key,
            task_id=task_id,
            actor=actor,
            wip_config=wip_config,
        )


async def complete_task(
    *,
    scope_key: str,
    task_id: str,
    time_spent: float,
    error_reason: str | None = None,
    actor: str | None = None,
) -> Task:
    """Validate the time spent on a task and move it to Done.

    Raises:
        KeyError: If the task does not exist
        TaskRejectedError: TIME_VALIDATION_INVALID for bad input
    """
    with span("task_service.complete_task"):
        tasks = await db_client.load_tasks(scope_key)
        index = _find(tasks, task_id)

        completed = task_state_machine.complete_task(
            tasks[index],
            time_spent,
            error_reason,
            actor=actor or settings.default_actor,
        )
        tasks[index] = completed
        await db_client.save_tasks(scope_key, tasks)
        return completed


async def get_burndown(
    *,
    scope_key: str,
    sprint: str | None,
    capacity: TeamCapacity | None = None,
    current_day: int | None = None,
) -> BurndownProjection:
    """Project the burndown for one sprint of a scope."""
    tasks = await list_tasks(scope_key=scope_key, sprint=sprint)
    return burndown_service.calculate_burndown(
        tasks,
        capacity or TeamCapacity.from_settings(settings),
        current_day=current_day,
    )


async def get_statistics(
    *,
    scope_key: str,
    sprint: str | None = None,
    wip_config: WipConfig | None = None,
) -> StatisticsReport:
    """Build the statistics report for a scope or one of its sprints."""
    tasks = await db_client.load_tasks(scope_key)
    return analytics_service.build_report(tasks, wip_config or WipConfig.from_settings(settings), sprint=sprint)


async def get_wip_columns(
    *,
    scope_key: str,
    wip_config: WipConfig | None = None,
) -> list[ColumnStats]:
    """Summarise occupancy against the WIP limits for every column of a scope."""
    tasks = await db_client.load_tasks(scope_key)
    return wip_service.column_stats(tasks, wip_config or WipConfig.from_settings(settings))
