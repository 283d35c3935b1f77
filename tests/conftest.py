"""Pytest configuration and shared fixtures."""

from collections.abc import Callable
from datetime import UTC, datetime

import pytest

from src.domain.sprint import TeamCapacity, WipConfig
from src.domain.task import Task, TaskStatus, new_task


FIXED_NOW = datetime(2026, 3, 2, 9, 0, 0, tzinfo=UTC)


@pytest.fixture
def fixed_now() -> datetime:
    """A stable timestamp for deterministic movement logs."""
    return FIXED_NOW


@pytest.fixture
def make_task() -> Callable[..., Task]:
    """Factory for tasks in any status.

    Tasks requested in Done are created with a validated time spent equal to
    their baseline, since Done is unreachable otherwise.
    """
    counter = {"next": 1}

    def _make(
        *,
        baseline: float = 8.0,
        status: TaskStatus = TaskStatus.BACKLOG,
        sprint: str = "Sprint 1",
        **fields: object,
    ) -> Task:
        task_id = fields.pop("task_id", None) or f"task-{counter['next']}"
        counter["next"] += 1
        task = new_task(baseline_estimate=baseline, task_id=str(task_id), sprint=sprint, now=FIXED_NOW, **fields)
        if status == TaskStatus.DONE:
            return task.model_copy(
                update={
                    "status": status,
                    "time_spent": baseline or 1.0,
                    "time_spent_validated": True,
                    "error_rate": 0.0,
                }
            )
        return task.model_copy(update={"status": status})

    return _make


@pytest.fixture
def enforced_wip() -> WipConfig:
    """Enforced limits: two in Prioritized, two in Doing."""
    return WipConfig(
        enforced=True,
        limits={TaskStatus.PRIORITIZED: 2, TaskStatus.DOING: 2, TaskStatus.DONE: None},
    )


@pytest.fixture
def advisory_wip() -> WipConfig:
    """Same limits as enforced_wip, but advisory only."""
    return WipConfig(
        enforced=False,
        limits={TaskStatus.PRIORITIZED: 2, TaskStatus.DOING: 2, TaskStatus.DONE: None},
    )


@pytest.fixture
def two_dev_capacity() -> TeamCapacity:
    """Two developers, four hours a day, ten-day sprint."""
    return TeamCapacity(developers=2, hours_per_day=4, sprint_days=10)
