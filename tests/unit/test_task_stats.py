"""Tests for completion statistics."""

from datetime import UTC, date, datetime, timedelta

import pytest

from bayit.domain.task import Category, Completion, InstanceStatus
from bayit.services import task_stats
from tests.unit.factories import make_task


TODAY = date(2026, 10, 19)  # Monday


def _completion(user_id: str, day: date, hour: int = 12) -> Completion:
    return Completion(
        instance_id=f"{user_id}-{day.isoformat()}-{hour}",
        user_id=user_id,
        completed_at=datetime(day.year, day.month, day.day, hour, tzinfo=UTC),
    )


def _done(task_id: str, due: date, user_id: str = "dana", **kwargs):
    return make_task(task_id, due_date=due, status=InstanceStatus.COMPLETED, completed_by=user_id, **kwargs)


@pytest.mark.unit
class TestCompletionCounts:
    def test_completions_from_instances_only_keeps_attributed_completions(self):
        tasks = [
            _done("1", TODAY, template_id="t1"),
            make_task("2", due_date=TODAY, status=InstanceStatus.COMPLETED),
            make_task("3", due_date=TODAY),
        ]

        completions = task_stats.completions_from_instances(tasks)

        assert [c.instance_id for c in completions] == ["1"]
        assert completions[0].template_id == "t1"
        assert completions[0].category == Category.KITCHEN

    def test_this_week_is_last_seven_days_inclusive(self):
        completions = [
            _completion("dana", TODAY),
            _completion("dana", TODAY - timedelta(days=6)),
            _completion("dana", TODAY - timedelta(days=7)),
            _completion("dana", TODAY + timedelta(days=1)),
        ]
        assert task_stats.count_completed_this_week(completions, TODAY) == 2

    def test_this_month_starts_on_the_first(self):
        completions = [
            _completion("dana", date(2026, 10, 1)),
            _completion("dana", TODAY),
            _completion("dana", date(2026, 9, 30)),
        ]
        assert task_stats.count_completed_this_month(completions, TODAY) == 2

    def test_upcoming_excludes_completed_and_out_of_window(self):
        tasks = [
            make_task("1", due_date=TODAY),
            make_task("2", due_date=TODAY + timedelta(days=7)),
            make_task("3", due_date=TODAY + timedelta(days=8)),
            make_task("4", due_date=TODAY - timedelta(days=1)),
            _done("5", TODAY + timedelta(days=2)),
            make_task("6", due_date=TODAY + timedelta(days=3), status=InstanceStatus.SKIPPED),
        ]
        assert task_stats.count_upcoming_tasks(tasks, TODAY) == 3


@pytest.mark.unit
class TestCompletionRate:
    def test_empty_is_zero(self):
        assert task_stats.compute_completion_rate([]) == 0

    def test_rounds_half_up(self):
        tasks = [_done("1", TODAY), make_task("2", due_date=TODAY)]
        assert task_stats.compute_completion_rate(tasks) == 50

        tasks = [_done(str(i), TODAY) for i in range(5)] + [make_task(str(i), due_date=TODAY) for i in range(5, 8)]
        # 5 of 8 = 62.5
        assert task_stats.compute_completion_rate(tasks) == 63

    def test_category_stats_sorted_by_total(self):
        tasks = [
            make_task("1", category=Category.BATHROOM),
            _done("2", TODAY, category=Category.KITCHEN),
            make_task("3", category=Category.KITCHEN),
            make_task("4", category=Category.KITCHEN),
            _done("5", TODAY, category=Category.BATHROOM),
            make_task("6", category=Category.PETS),
        ]

        stats = task_stats.compute_category_stats(tasks)

        assert [(s.key, s.total, s.completed) for s in stats] == [
            (Category.KITCHEN, 3, 1),
            (Category.BATHROOM, 2, 1),
            (Category.PETS, 1, 0),
        ]


@pytest.mark.unit
class TestSeries:
    def test_monthly_data_has_thirty_points_ending_today(self):
        points = task_stats.compute_monthly_data([_completion("dana", TODAY), _completion("yossi", TODAY)], TODAY)

        assert len(points) == 30
        assert points[0].date == TODAY - timedelta(days=29)
        assert points[-1].date == TODAY
        assert points[-1].count == 2
        assert points[-1].day == "19"

    def test_weekly_trend_is_sunday_first_oldest_first(self):
        completions = [
            _completion("dana", date(2026, 10, 18)),
            _completion("dana", date(2026, 10, 17)),
            _completion("dana", date(2026, 10, 11)),
            _completion("dana", date(2026, 9, 27)),
        ]

        trend = task_stats.compute_weekly_trend(completions, TODAY)

        assert [p.week_start for p in trend] == [
            date(2026, 9, 27),
            date(2026, 10, 4),
            date(2026, 10, 11),
            date(2026, 10, 18),
        ]
        assert [p.count for p in trend] == [1, 0, 2, 1]


@pytest.mark.unit
class TestPartnerSplit:
    def test_shares_and_golden_rule(self):
        tasks = [
            _done("1", TODAY, "dana"),
            _done("2", TODAY, "dana"),
            _done("3", TODAY, "yossi"),
            make_task("4", due_date=TODAY),
        ]
        completions = task_stats.completions_from_instances(tasks)

        split = task_stats.compute_partner_split(tasks, completions, ["dana", "yossi"], golden_rule_target=80)

        assert [(s.user_id, s.completed, s.percentage) for s in split.shares] == [("dana", 2, 67), ("yossi", 1, 33)]
        assert split.total_completed == 3
        assert split.household_rate == 75
        assert split.golden_rule_met is False

    def test_members_without_completions_still_listed(self):
        split = task_stats.compute_partner_split([], [], ["dana", "yossi"], golden_rule_target=0)

        assert [(s.user_id, s.completed, s.percentage) for s in split.shares] == [("dana", 0, 0), ("yossi", 0, 0)]
        assert split.golden_rule_met is False

    def test_golden_rule_hits_count_days_at_target(self):
        yesterday = TODAY - timedelta(days=1)
        tasks = [
            _done("1", TODAY),
            _done("2", TODAY),
            make_task("3", due_date=TODAY),
            _done("4", yesterday),
            _done("5", yesterday),
            _done("6", yesterday),
            _done("7", yesterday),
            make_task("8", due_date=yesterday),
        ]

        assert task_stats.count_golden_rule_hits(tasks, 80, yesterday - timedelta(days=2), TODAY) == 1
        assert task_stats.count_golden_rule_hits(tasks, 60, yesterday, TODAY) == 2


@pytest.mark.unit
class TestStreak:
    def test_counts_back_from_today(self):
        completions = [_completion("dana", TODAY - timedelta(days=offset)) for offset in range(4)]
        assert task_stats.compute_streak(completions, "dana", TODAY) == 4

    def test_streak_survives_until_today_is_over(self):
        completions = [_completion("dana", TODAY - timedelta(days=offset)) for offset in range(1, 3)]
        assert task_stats.compute_streak(completions, "dana", TODAY) == 2

    def test_gap_breaks_streak_and_other_users_ignored(self):
        completions = [
            _completion("dana", TODAY),
            _completion("dana", TODAY - timedelta(days=2)),
            _completion("yossi", TODAY - timedelta(days=1)),
        ]
        assert task_stats.compute_streak(completions, "dana", TODAY) == 1
        assert task_stats.compute_streak(completions, "noa", TODAY) == 0


@pytest.mark.unit
class TestCalendarMonth:
    def test_grid_is_sunday_first_and_padded(self):
        tasks = [
            _done("1", date(2026, 10, 5)),
            make_task("2", due_date=date(2026, 10, 5)),
            make_task("3", due_date=date(2026, 9, 30)),
        ]

        month = task_stats.build_calendar_month(tasks, 2026, 10, today=TODAY)

        # October 2026 starts on Thursday and ends on Saturday
        assert len(month.weeks) == 5
        assert all(len(week) == 7 for week in month.weeks)
        assert month.weeks[0][0].date == date(2026, 9, 27)
        assert month.weeks[-1][-1].date == date(2026, 10, 31)

        days = {day.date: day for week in month.weeks for day in week}
        assert days[date(2026, 9, 30)].in_month is False
        assert days[date(2026, 9, 30)].due_count == 1
        assert days[date(2026, 10, 5)].due_count == 2
        assert days[date(2026, 10, 5)].completed_count == 1
        assert days[TODAY].is_today is True
        assert sum(day.is_today for day in days.values()) == 1

    def test_month_starting_on_sunday_has_no_leading_padding(self):
        # February 2026 starts on Sunday and has exactly four weeks
        month = task_stats.build_calendar_month([], 2026, 2)
        assert len(month.weeks) == 4
        assert month.weeks[0][0].date == date(2026, 2, 1)
        assert all(day.in_month for week in month.weeks for day in week)


@pytest.mark.unit
def test_stats_summary_combines_rollups():
    tasks = [
        _done("1", TODAY, "dana"),
        _done("2", TODAY - timedelta(days=1), "yossi", category=Category.BATHROOM),
        make_task("3", due_date=TODAY + timedelta(days=1)),
    ]

    summary = task_stats.build_stats_summary(tasks, TODAY, ["dana", "yossi"], golden_rule_target=60)

    assert summary.completed_this_week == 2
    assert summary.completed_this_month == 2
    assert summary.upcoming_tasks == 1
    assert summary.completion_rate == 67
    assert [c.key for c in summary.categories] == [Category.KITCHEN, Category.BATHROOM]
    assert len(summary.weekly_trend) == 4
    assert summary.partner_split.golden_rule_met is True
