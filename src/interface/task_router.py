"""Task board HTTP interface."""

import logging

from fastapi import APIRouter, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse

from src.core.config import settings
from src.core.errors import ErrorSeverity, TaskRejectedError, http_status_for
from src.core.logging import log_with_context
from src.domain.create_models import TaskCreate
from src.domain.sprint import TeamCapacity
from src.domain.task import Task
from src.domain.update_models import DailyValueUpdate, StatusMove, StepMove, TaskUpdate, TimeSpentSubmission
from src.models.service_models import BurndownProjection, ColumnStats, LedgerWriteResult, StatisticsReport
from src.services import task_service


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/scopes/{scope_key}", tags=["tasks"])


async def handle_task_rejected(request: Request, exc: Exception) -> JSONResponse:
    """Render a rejected mutation as its structured rejection."""
    if not isinstance(exc, TaskRejectedError):
        raise exc
    level = "warning" if exc.rejection.severity == ErrorSeverity.MEDIUM else "info"
    log_with_context(
        logger,
        level,
        "task_rejected",
        path=request.url.path,
        code=exc.code,
        details=exc.rejection.details,
    )
    return JSONResponse(
        status_code=http_status_for(exc.code),
        content=exc.rejection.model_dump(mode="json"),
    )


def _not_found(task_id: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Task not found: {task_id}")


@router.get("/tasks")
async def list_tasks(scope_key: str, sprint: str | None = None) -> list[Task]:
    """List the tasks of a scope."""
    return await task_service.list_tasks(scope_key=scope_key, sprint=sprint)


@router.post("/tasks", status_code=status.HTTP_201_CREATED)
async def create_task(scope_key: str, body: TaskCreate) -> Task:
    """Create a Backlog task."""
    fields = body.model_dump(exclude={"baseline_estimate"})
    return await task_service.create_task(scope_key=scope_key, baseline_estimate=body.baseline_estimate, **fields)


@router.get("/tasks/{task_id}")
async def get_task(scope_key: str, task_id: str) -> Task:
    """Fetch one task."""
    try:
        return await task_service.get_task(scope_key=scope_key, task_id=task_id)
    except KeyError as err:
        raise _not_found(task_id) from err


@router.patch("/tasks/{task_id}")
async def update_task(scope_key: str, task_id: str, body: TaskUpdate) -> Task:
    """Edit descriptive fields or the baseline estimate."""
    try:
        return await task_service.update_task_details(
            scope_key=scope_key,
            task_id=task_id,
            updates=body.field_updates(),
            baseline_estimate=body.baseline_estimate,
        )
    except KeyError as err:
        raise _not_found(task_id) from err


@router.delete("/tasks/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(scope_key: str, task_id: str) -> None:
    """Remove a task from the board."""
    try:
        await task_service.delete_task(scope_key=scope_key, task_id=task_id)
    except KeyError as err:
        raise _not_found(task_id) from err


@router.put("/tasks/{task_id}/days/{day_index}")
async def set_daily_value(scope_key: str, task_id: str, day_index: int, body: DailyValueUpdate) -> LedgerWriteResult:
    """Record the remaining hours of one sprint day."""
    try:
        return await task_service.set_daily_value(
            scope_key=scope_key,
            task_id=task_id,
            day_index=day_index,
            value=body.value,
        )
    except KeyError as err:
        raise _not_found(task_id) from err


@router.post("/tasks/{task_id}/move")
async def move_task(scope_key: str, task_id: str, body: StatusMove) -> Task:
    """Move a task to another workflow status."""
    try:
        return await task_service.move_task(
            scope_key=scope_key,
            task_id=task_id,
            target=body.target_status,
            actor=body.actor,
            wip_config=body.wip_config,
        )
    except KeyError as err:
        raise _not_found(task_id) from err


@router.post("/tasks/{task_id}/move/forward")
async def move_forward(scope_key: str, task_id: str, body: StepMove) -> Task:
    """Move a task one status to the right."""
    try:
        return await task_service.move_forward(
            scope_key=scope_key, task_id=task_id, actor=body.actor, wip_config=body.wip_config
        )
    except KeyError as err:
        raise _not_found(task_id) from err


@router.post("/tasks/{task_id}/move/backward")
async def move_backward(scope_key: str, task_id: str, body: StepMove) -> Task:
    """Move a task one status to the left."""
    try:
        return await task_service.move_backward(
            scope_key=scope_key, task_id=task_id, actor=body.actor, wip_config=body.wip_config
        )
    except KeyError as err:
        raise _not_found(task_id) from err


@router.post("/tasks/{task_id}/complete")
async def complete_task(scope_key: str, task_id: str, body: TimeSpentSubmission) -> Task:
    """Validate the time spent and move the task to Done."""
    try:
        return await task_service.complete_task(
            scope_key=scope_key,
            task_id=task_id,
            time_spent=body.time_spent,
            error_reason=body.error_reason,
            actor=body.actor,
        )
    except KeyError as err:
        raise _not_found(task_id) from err


@router.get("/burndown")
async def get_burndown(
    scope_key: str,
    sprint: str | None = None,
    developers: int | None = Query(default=None, ge=0),
    hours_per_day: int | None = Query(default=None, ge=0),
    sprint_days: int | None = Query(default=None, ge=1),
    current_day: int | None = Query(default=None, ge=0),
) -> BurndownProjection:
    """Project ideal, actual and velocity lines for a sprint."""
    capacity = None
    if developers is not None or hours_per_day is not None or sprint_days is not None:
        defaults = TeamCapacity.from_settings(settings)
        capacity = TeamCapacity(
            developers=defaults.developers if developers is None else developers,
            hours_per_day=defaults.hours_per_day if hours_per_day is None else hours_per_day,
            sprint_days=defaults.sprint_days if sprint_days is None else sprint_days,
        )
    return await task_service.get_burndown(
        scope_key=scope_key,
        sprint=sprint,
        capacity=capacity,
        current_day=current_day,
    )


@router.get("/statistics")
async def get_statistics(scope_key: str, sprint: str | None = None) -> StatisticsReport:
    """Summarise the board or one sprint."""
    return await task_service.get_statistics(scope_key=scope_key, sprint=sprint)


@router.get("/wip")
async def get_wip_columns(scope_key: str) -> list[ColumnStats]:
    """Show column occupancy against the configured WIP limits."""
    return await task_service.get_wip_columns(scope_key=scope_key)
