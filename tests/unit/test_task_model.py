"""Unit tests for task domain models."""

import pytest
from pydantic import ValidationError

from src.domain.create_models import TaskCreate
from src.domain.sprint import WipConfig
from src.domain.task import Task, TaskStatus, new_task, next_status, previous_status
from src.domain.update_models import StatusMove, TaskUpdate, TimeSpentSubmission


@pytest.mark.unit
class TestTaskModel:
    """Tests for Task invariants."""

    def test_new_task_pads_ledger(self, fixed_now):
        """New tasks start in Backlog with every day at the baseline."""
        task = new_task(baseline_estimate=5, title="API", now=fixed_now)

        assert task.status == TaskStatus.BACKLOG
        assert task.daily_reestimates == [5] * 10
        assert task.created_at == fixed_now
        assert task.movements == []

    def test_new_task_clamps_negative_baseline(self):
        """Negative baselines become zero."""
        assert new_task(baseline_estimate=-3).baseline_estimate == 0

    def test_ledger_must_have_ten_days(self):
        """Ledgers of any other length are rejected."""
        with pytest.raises(ValidationError):
            Task(id="task-x", baseline_estimate=4, daily_reestimates=[4] * 9)

    def test_negative_ledger_value_rejected(self):
        """Ledger values are never negative."""
        with pytest.raises(ValidationError):
            Task(id="task-x", baseline_estimate=4, daily_reestimates=[4, -1] + [4] * 8)

    def test_slot_zero_mirrors_baseline(self):
        """Validation aligns day 1 with the baseline."""
        task = Task(id="task-x", baseline_estimate=7, daily_reestimates=[3] * 10)

        assert task.daily_reestimates[0] == 7

    def test_done_requires_validated_time(self):
        """A Done task without validated time cannot be built."""
        with pytest.raises(ValidationError, match="validated time spent"):
            Task(id="task-x", status=TaskStatus.DONE, daily_reestimates=[0] * 10)

    def test_done_with_validated_time(self):
        """A Done task with validated time is valid."""
        task = Task(
            id="task-x",
            status=TaskStatus.DONE,
            daily_reestimates=[0] * 10,
            time_spent=2,
            time_spent_validated=True,
        )

        assert task.status == TaskStatus.DONE

    def test_status_order(self):
        """Workflow neighbours follow Backlog, Prioritized, Doing, Done."""
        assert next_status(TaskStatus.BACKLOG) == TaskStatus.PRIORITIZED
        assert next_status(TaskStatus.DONE) is None
        assert previous_status(TaskStatus.DOING) == TaskStatus.PRIORITIZED
        assert previous_status(TaskStatus.BACKLOG) is None


@pytest.mark.unit
class TestTaskCreate:
    """Tests for the TaskCreate request model."""

    def test_blank_title_rejected(self):
        """Whitespace-only titles are rejected."""
        with pytest.raises(ValidationError, match="Title must not be blank"):
            TaskCreate(title="   ")

    def test_title_stripped_and_baseline_clamped(self):
        """Titles are stripped and negative baselines clamp to zero."""
        body = TaskCreate(title="  Login  ", baseline_estimate=-2)

        assert body.title == "Login"
        assert body.baseline_estimate == 0

    def test_non_finite_baseline_rejected(self):
        """Infinite baselines are rejected."""
        with pytest.raises(ValidationError):
            TaskCreate(title="Login", baseline_estimate=float("inf"))


@pytest.mark.unit
class TestNonFiniteFields:
    """Tests that task floats never hold NaN or infinity."""

    @pytest.mark.parametrize("bad", [float("nan"), float("inf")])
    def test_task_ledger_rejects_non_finite(self, bad):
        """Ledger values must be finite."""
        with pytest.raises(ValidationError):
            Task(id="task-x", baseline_estimate=4, daily_reestimates=[4, bad] + [4] * 8)

    def test_task_baseline_rejects_infinity(self):
        """The baseline must be finite."""
        with pytest.raises(ValidationError):
            new_task(baseline_estimate=float("inf"))

    @pytest.mark.parametrize("bad", ["NaN", "Infinity", float("nan")])
    def test_time_spent_submission_rejects_non_finite(self, bad):
        """Submitted time spent must be finite."""
        with pytest.raises(ValidationError):
            TimeSpentSubmission(time_spent=bad)

    def test_task_update_rejects_infinite_baseline(self):
        """Baseline edits must be finite."""
        with pytest.raises(ValidationError):
            TaskUpdate(baseline_estimate=float("inf"))


@pytest.mark.unit
class TestTaskUpdate:
    """Tests for the TaskUpdate request model."""

    def test_blank_title_rejected(self):
        """Whitespace-only titles are rejected on edit too."""
        with pytest.raises(ValidationError, match="Title must not be blank"):
            TaskUpdate(title="  ")

    def test_title_stripped(self):
        """Edited titles are stripped; omitted titles stay unset."""
        assert TaskUpdate(title=" Login ").field_updates() == {"title": "Login"}
        assert TaskUpdate(developer="Ana").field_updates() == {"developer": "Ana"}


@pytest.mark.unit
class TestWipConfigModel:
    """Tests for WipConfig validation."""

    def test_negative_limit_rejected(self):
        """Limits below zero are invalid."""
        with pytest.raises(ValidationError):
            WipConfig(enforced=True, limits={TaskStatus.DOING: -1})

    def test_negative_limit_rejected_in_move_body(self):
        """A move request carrying a negative limit fails validation."""
        with pytest.raises(ValidationError):
            StatusMove.model_validate(
                {"target_status": "Doing", "wip_config": {"enforced": True, "limits": {"Doing": -1}}}
            )

    def test_zero_and_none_limits_accepted(self):
        """Zero and None both mean no limit."""
        config = WipConfig(enforced=True, limits={TaskStatus.DOING: 0, TaskStatus.PRIORITIZED: None})

        assert config.limit_for(TaskStatus.DOING) == 0
        assert config.limit_for(TaskStatus.PRIORITIZED) is None
