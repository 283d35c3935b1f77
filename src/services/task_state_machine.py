"""Pure state transition functions for the task workflow.

Every status write goes through ``move_task`` or ``complete_task``:
moves into Prioritized or Doing pass the WIP gate, and nothing reaches Done
without passing the time validation gate.
"""

import logging
from collections.abc import Mapping, Sequence
from datetime import datetime

from src.core.errors import ErrorCode, TaskRejectedError, reject
from src.core.logging import log_with_task_context, span
from src.domain.sprint import WipConfig
from src.domain.task import Movement, Task, TaskStatus, next_status, previous_status, utc_now
from src.services import time_validation_service, wip_service


logger = logging.getLogger(__name__)


def _apply_move(task: Task, target: TaskStatus, *, actor: str, now: datetime | None) -> Task:
    timestamp = now or utc_now()
    movements = list(task.movements)
    movements.append(Movement(timestamp=timestamp, from_status=task.status, to_status=target, actor=actor))
    return task.model_copy(
        update={
            "status": target,
            "status_changed_at": timestamp,
            "updated_at": timestamp,
            "movements": movements,
        }
    )


def move_task(
    task: Task,
    target: TaskStatus,
    *,
    active_tasks: Mapping[TaskStatus, Sequence[Task]],
    wip_config: WipConfig,
    actor: str,
    now: datetime | None = None,
) -> Task:
    """Move a task to another workflow status.

    Args:
        task: Task to move
        target: Destination status
        active_tasks: Current tasks of the scope grouped by status
        wip_config: WIP limits for this call
        actor: Who performed the move
        now: Timestamp of the move, defaults to the current UTC time

    Returns:
        A new Task in the target status with the movement appended

    Raises:
        TaskRejectedError: INVALID_INPUT for a same-status move,
            TIME_VALIDATION_REQUIRED for Done without validated time,
            WIP_LIMIT_EXCEEDED when the target column is full
    """
    with span("task_state_machine.move_task"):
        if task.status == target:
            raise reject(
                ErrorCode.INVALID_INPUT,
                f"Task is already in {target}",
                task_id=task.id,
                status=str(target),
            )

        if target == TaskStatus.DONE:
            check = time_validation_service.attempt_complete(task)
            if not check.allowed and check.rejection is not None:
                raise TaskRejectedError(check.rejection)
        else:
            wip_check = wip_service.can_transition(active_tasks, target, wip_config, moving_task_id=task.id)
            if not wip_check.allowed and wip_check.rejection is not None:
                raise TaskRejectedError(wip_check.rejection)

        moved = _apply_move(task, target, actor=actor, now=now)
        log_with_task_context(
            logger,
            "info",
            "Task moved",
            task_id=task.id,
            from_status=str(task.status),
            to_status=str(target),
            actor=actor,
        )
        return moved


def move_forward(
    task: Task,
    *,
    active_tasks: Mapping[TaskStatus, Sequence[Task]],
    wip_config: WipConfig,
    actor: str,
    now: datetime | None = None,
) -> Task:
    """Move a task one step right in the workflow."""
    target = next_status(task.status)
    if target is None:
        raise reject(ErrorCode.INVALID_INPUT, "Task is already in the last status", task_id=task.id)
    return move_task(task, target, active_tasks=active_tasks, wip_config=wip_config, actor=actor, now=now)


def move_backward(
    task: Task,
    *,
    active_tasks: Mapping[TaskStatus, Sequence[Task]],
    wip_config: WipConfig,
    actor: str,
    now: datetime | None = None,
) -> Task:
    """Move a task one step left in the workflow."""
    target = previous_status(task.status)
    if target is None:
        raise reject(ErrorCode.INVALID_INPUT, "Task is already in the first status", task_id=task.id)
    return move_task(task, target, active_tasks=active_tasks, wip_config=wip_config, actor=actor, now=now)


def complete_task(
    task: Task,
    time_spent: float,
    error_reason: str | None = None,
    *,
    actor: str,
    now: datetime | None = None,
) -> Task:
    """Validate the time spent and move the task to Done in one step."""
    if task.status == TaskStatus.DONE:
        raise reject(ErrorCode.INVALID_INPUT, "Task is already Done", task_id=task.id)
    return time_validation_service.validate_and_complete(task, time_spent, error_reason, actor=actor, now=now)
