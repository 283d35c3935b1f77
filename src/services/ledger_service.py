"""Estimation ledger: the per-task daily re-estimate values.

Each task carries ten slots, one per sprint day. Day 1 (index 0) has no
storage of its own and always mirrors the baseline estimate. A single write
operation, ``set_daily_value``, updates one day and rewrites every later day:

- a positive value is replicated forward (no further re-estimate means the
  remaining work is unchanged);
- a zero is the completion sentinel, forcing every later day to zero.
"""

import logging
import math
from datetime import datetime

from src.core.config import constants
from src.core.errors import ErrorCode, reject
from src.core.logging import log_with_task_context, span
from src.domain.task import Task, utc_now


logger = logging.getLogger(__name__)


def _coerce_value(value: float | int | str | None) -> float:
    """Turn forgiving numeric input into a non-negative float."""
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number):
        return 0.0
    return max(0.0, number)


def _check_day_index(day_index: int) -> None:
    if not 0 <= day_index < constants.LEDGER_DAYS:
        raise reject(
            ErrorCode.INVALID_INPUT,
            f"Day index must be between 0 and {constants.LEDGER_DAYS - 1}",
            day_index=day_index,
        )


def read_daily_reestimates(task: Task) -> list[float]:
    """Return the ten ledger values with day 1 read from the baseline."""
    values = list(task.daily_reestimates)
    values[0] = task.baseline_estimate
    return values


def daily_value(task: Task, day_index: int) -> float:
    """Return the remaining hours recorded for one day."""
    _check_day_index(day_index)
    if day_index == 0:
        return task.baseline_estimate
    return task.daily_reestimates[day_index]


def set_daily_value(
    task: Task,
    day_index: int,
    value: float | int | str | None,
    *,
    now: datetime | None = None,
) -> Task:
    """Record the remaining work for one sprint day.

    Args:
        task: Task whose ledger is written
        day_index: Ledger slot, 0 (day 1) to 9 (day 10)
        value: Remaining hours; negative or unparsable input is stored as 0
        now: Timestamp for updated_at, defaults to the current UTC time

    Returns:
        A new Task with the rewritten ledger; the input task is untouched

    Raises:
        TaskRejectedError: INVALID_INPUT if day_index is outside the ledger
    """
    with span("ledger_service.set_daily_value"):
        _check_day_index(day_index)
        new_value = _coerce_value(value)

        ledger = read_daily_reestimates(task)
        baseline = task.baseline_estimate
        if day_index == 0:
            baseline = new_value
        ledger[day_index] = new_value

        # Zero propagates as zero, anything else replicates as itself
        for later in range(day_index + 1, constants.LEDGER_DAYS):
            ledger[later] = new_value
        ledger[0] = baseline

        updated = task.model_copy(
            update={
                "baseline_estimate": baseline,
                "daily_reestimates": ledger,
                "updated_at": now or utc_now(),
            }
        )

        log_with_task_context(
            logger,
            "info",
            "Ledger value recorded",
            task_id=task.id,
            day_index=day_index,
            value=new_value,
        )
        return updated


def is_burned_down_by_day(task: Task, day_index: int) -> bool:
    """Return True if the task has no remaining work on the given day."""
    return daily_value(task, day_index) == 0


def completion_day(task: Task) -> int | None:
    """Return the first ledger index holding zero, or None if never burned down."""
    for index, value in enumerate(read_daily_reestimates(task)):
        if value == 0:
            return index
    return None


def requires_time_validation(task: Task, value: float | int | str | None) -> bool:
    """Return True if writing this value should prompt for the time actually spent.

    A zero re-estimate means the work is finished, so an unvalidated task
    needs its real time spent before it can be completed.
    """
    return _coerce_value(value) == 0 and not task.time_spent_validated