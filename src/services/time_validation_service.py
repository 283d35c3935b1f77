"""Time validation gate for completing tasks.

A task only reaches Done carrying a validated time-spent figure. The gate
also derives the estimation error rate, counting overruns only.
"""

import logging
import math
from datetime import datetime

from src.core.config import constants
from src.core.errors import ErrorCode, Rejection, reject
from src.core.logging import log_with_task_context, span
from src.domain.task import Movement, Task, TaskStatus, utc_now
from src.models.service_models import CompletionCheck


logger = logging.getLogger(__name__)


def calculate_error_rate(*, baseline_estimate: float, time_spent: float) -> float:
    """Return the overrun percentage of time_spent against the baseline.

    Finishing early yields 0, never a negative rate. A zero baseline has no
    meaningful ratio and also yields 0.
    """
    if baseline_estimate <= 0:
        return 0.0
    return max(0.0, (time_spent / baseline_estimate - 1) * 100)


def requires_error_reason(error_rate: float) -> bool:
    return error_rate > constants.ERROR_RATE_REASON_THRESHOLD


def attempt_complete(task: Task) -> CompletionCheck:
    """Check whether the task may move to Done without collecting time spent."""
    if task.time_spent_validated and task.time_spent is not None:
        return CompletionCheck(allowed=True)

    return CompletionCheck(
        allowed=False,
        rejection=Rejection(
            code=ErrorCode.TIME_VALIDATION_REQUIRED,
            message="Time spent must be validated before completing this task",
            details={"task_id": task.id, "baseline_estimate": task.baseline_estimate},
            suggestion="Enter the hours actually spent on the task.",
        ),
    )


def validate_and_complete(
    task: Task,
    time_spent: float,
    error_reason: str | None = None,
    *,
    actor: str,
    now: datetime | None = None,
) -> Task:
    """Record the time actually spent and move the task to Done.

    Args:
        task: Task being completed
        time_spent: Hours actually spent, must be positive
        error_reason: Explanation, mandatory when the error rate is above the threshold
        actor: Who completed the task, recorded on the movement log
        now: Timestamp of the transition, defaults to the current UTC time

    Returns:
        A new Task in Done with time_spent, error_rate and error_reason set

    Raises:
        TaskRejectedError: TIME_VALIDATION_INVALID if time_spent is not positive
            or a mandatory reason is missing
    """
    with span("time_validation_service.validate_and_complete"):
        if time_spent is None or not math.isfinite(time_spent) or time_spent <= 0:
            raise reject(
                ErrorCode.TIME_VALIDATION_INVALID,
                "Time spent must be a finite number greater than zero",
                suggestion="Enter the hours actually spent on the task.",
                task_id=task.id,
                time_spent=time_spent,
            )

        error_rate = calculate_error_rate(baseline_estimate=task.baseline_estimate, time_spent=time_spent)
        reason = (error_reason or "").strip()

        if requires_error_reason(error_rate) and not reason:
            raise reject(
                ErrorCode.TIME_VALIDATION_INVALID,
                f"An error reason is required when the error rate is above "
                f"{constants.ERROR_RATE_REASON_THRESHOLD:g}%",
                suggestion="Explain what caused the difference between the estimate and the real time.",
                task_id=task.id,
                error_rate=error_rate,
                threshold=constants.ERROR_RATE_REASON_THRESHOLD,
            )

        timestamp = now or utc_now()
        movements = list(task.movements)
        movements.append(
            Movement(timestamp=timestamp, from_status=task.status, to_status=TaskStatus.DONE, actor=actor)
        )

        completed = task.model_copy(
            update={
                "time_spent": float(time_spent),
                "error_rate": error_rate,
                "error_reason": reason if requires_error_reason(error_rate) else None,
                "time_spent_validated": True,
                "status": TaskStatus.DONE,
                "status_changed_at": timestamp,
                "updated_at": timestamp,
                "movements": movements,
            }
        )

        log_with_task_context(
            logger,
            "info",
            "Task completed with validated time",
            task_id=task.id,
            time_spent=time_spent,
            error_rate=error_rate,
            from_status=str(task.status),
        )
        return completed
