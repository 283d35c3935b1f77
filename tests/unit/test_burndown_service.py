"""Unit tests for burndown_service module."""

import pytest

from src.domain.sprint import TeamCapacity
from src.services import burndown_service, ledger_service


@pytest.mark.unit
class TestCalculateBurndown:
    """Tests for calculate_burndown."""

    def test_ideal_line_floored_at_zero(self, make_task, two_dev_capacity):
        """Capacity above the total floors the ideal line at zero."""
        tasks = [make_task(baseline=5), make_task(baseline=10)]

        projection = burndown_service.calculate_burndown(tasks, two_dev_capacity)

        assert projection.total_baseline_hours == 15
        assert projection.ideal[0] == 15
        assert projection.ideal[1] == 7
        assert projection.ideal[2] == 0
        assert projection.days_needed == 2
        assert projection.will_overflow is False

    def test_series_are_aligned(self, make_task, two_dev_capacity):
        """Every series covers the same days."""
        tasks = [make_task(baseline=5), make_task(baseline=10)]

        projection = burndown_service.calculate_burndown(tasks, two_dev_capacity)

        assert projection.days == list(range(11))
        assert len(projection.ideal) == len(projection.actual) == len(projection.velocity) == 11

    def test_actual_reads_ledger(self, make_task, two_dev_capacity):
        """Chart day d reads ledger slot d-1, and day 0 is the baseline total."""
        first = ledger_service.set_daily_value(make_task(baseline=5), 2, 3)
        second = ledger_service.set_daily_value(make_task(baseline=10), 4, 0)

        projection = burndown_service.calculate_burndown([first, second], two_dev_capacity)

        assert projection.actual[0] == 15
        assert projection.actual[1] == 15
        assert projection.actual[3] == 13
        assert projection.actual[5] == 3
        assert projection.actual[10] == 3

    def test_actual_holds_last_value_past_ledger(self, make_task):
        """Beyond day 10 the last ledger value is repeated."""
        capacity = TeamCapacity(developers=1, hours_per_day=1, sprint_days=10)
        task = ledger_service.set_daily_value(make_task(baseline=20), 9, 4)

        projection = burndown_service.calculate_burndown([task], capacity)

        assert projection.days_needed == 20
        assert projection.days[-1] == 20
        assert projection.actual[10] == 4
        assert projection.actual[20] == 4

    def test_overflow_extends_horizon(self, make_task):
        """More work than capacity allows flags overflow and extends the axis."""
        capacity = TeamCapacity(developers=1, hours_per_day=4, sprint_days=5)
        tasks = [make_task(baseline=30)]

        projection = burndown_service.calculate_burndown(tasks, capacity)

        assert projection.days_needed == 8
        assert projection.will_overflow is True
        assert projection.days == list(range(9))
        assert projection.ideal[-1] == 0

    def test_empty_task_set(self, two_dev_capacity):
        """No tasks gives empty series and no overflow."""
        projection = burndown_service.calculate_burndown([], two_dev_capacity)

        assert projection.days == []
        assert projection.ideal == []
        assert projection.days_needed == 0
        assert projection.will_overflow is False
        assert projection.team_capacity_per_day == 8

    def test_zero_capacity(self, make_task):
        """Without capacity the ideal line stays at the total."""
        capacity = TeamCapacity(developers=0, hours_per_day=8, sprint_days=10)
        tasks = [make_task(baseline=12)]

        projection = burndown_service.calculate_burndown(tasks, capacity)

        assert projection.days_needed == 0
        assert projection.will_overflow is False
        assert projection.ideal == [12] * 11

    def test_velocity_uses_observed_rate(self, make_task, two_dev_capacity):
        """The velocity line burns the total at the observed completion rate."""
        done_early = ledger_service.set_daily_value(make_task(baseline=10), 1, 0)
        open_task = make_task(baseline=10)

        projection = burndown_service.calculate_burndown(
            [done_early, open_task], two_dev_capacity, current_day=5
        )

        assert projection.observed_velocity == 2
        assert projection.velocity[0] == 20
        assert projection.velocity[5] == 10
        assert projection.velocity[10] == 0
        assert projection.projected_completion_day == 10

    def test_no_completions_keeps_velocity_flat(self, make_task, two_dev_capacity):
        """Nothing completed yields a flat velocity line and no projection."""
        projection = burndown_service.calculate_burndown([make_task(baseline=6)], two_dev_capacity)

        assert projection.observed_velocity == 0
        assert projection.velocity == [6] * 11
        assert projection.projected_completion_day is None


@pytest.mark.unit
class TestObservedVelocity:
    """Tests for observed_velocity."""

    def test_completion_counts_from_next_chart_day(self, make_task):
        """A zero in slot k counts as completed from chart day k + 1."""
        task = ledger_service.set_daily_value(make_task(baseline=9), 3, 0)

        assert burndown_service.observed_velocity([task], 3) == 0
        assert burndown_service.observed_velocity([task], 4) == 9 / 4

    def test_non_positive_current_day(self, make_task):
        """No elapsed days means no rate."""
        assert burndown_service.observed_velocity([make_task(baseline=0)], 0) == 0


@pytest.mark.unit
class TestHelpers:
    """Tests for the small burndown helpers."""

    def test_tasks_for_sprint(self, make_task):
        """Sprint filtering keeps only the named sprint, None keeps all."""
        tasks = [make_task(sprint="Sprint 1"), make_task(sprint="Sprint 2")]

        assert [t.sprint for t in burndown_service.tasks_for_sprint(tasks, "Sprint 2")] == ["Sprint 2"]
        assert len(burndown_service.tasks_for_sprint(tasks, None)) == 2

    def test_days_needed_rounds_up(self, two_dev_capacity):
        """Partial days count as whole days."""
        assert burndown_service.days_needed(17, two_dev_capacity) == 3
        assert burndown_service.days_needed(16, two_dev_capacity) == 2
