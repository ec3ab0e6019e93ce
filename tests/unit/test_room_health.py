"""Tests for room health scoring."""

from datetime import UTC, datetime, timedelta

import pytest

from bayit.domain.task import Category, InstanceStatus
from bayit.services.room_health import (
    compute_category_health,
    compute_room_conditions,
    compute_room_health,
    get_health_color,
    get_health_label,
    health_band,
    latest_per_template,
)
from tests.unit.factories import make_task


NOW = datetime(2026, 10, 19, 12, 0, tzinfo=UTC)


@pytest.mark.unit
class TestComputeRoomHealth:
    def test_daily_after_24_hours_is_half(self):
        assert compute_room_health(NOW - timedelta(hours=24), "daily", NOW) == 50

    def test_weekly_after_7_days_is_half(self):
        assert compute_room_health(NOW - timedelta(days=7), "weekly", NOW) == 50

    def test_biweekly_after_7_days_is_75(self):
        assert compute_room_health(NOW - timedelta(days=7), "biweekly", NOW) == 75

    def test_just_completed_is_full(self):
        assert compute_room_health(NOW, "monthly", NOW) == 100

    def test_never_completed_is_zero(self):
        assert compute_room_health(None, "daily", NOW) == 0

    def test_past_max_age_clamps_to_zero(self):
        assert compute_room_health(NOW - timedelta(hours=48), "daily", NOW) == 0
        assert compute_room_health(NOW - timedelta(days=30), "daily", NOW) == 0

    def test_future_completion_clamps_to_100(self):
        assert compute_room_health(NOW + timedelta(hours=5), "daily", NOW) == 100

    def test_naive_timestamps_are_treated_as_utc(self):
        naive_now = NOW.replace(tzinfo=None)
        assert compute_room_health(naive_now - timedelta(hours=24), "daily", naive_now) == 50

    def test_rounds_to_nearest_integer(self):
        # 1 hour of 48 -> 97.9
        assert compute_room_health(NOW - timedelta(hours=1), "daily", NOW) == 98
        # 6 hours of 336 -> 98.2
        assert compute_room_health(NOW - timedelta(hours=6), "weekly", NOW) == 98

    def test_unknown_cadence_raises(self):
        with pytest.raises(ValueError):
            compute_room_health(NOW, "hourly", NOW)

    @pytest.mark.parametrize("recurrence_type", ["daily", "weekly", "biweekly", "monthly", "quarterly", "yearly"])
    def test_health_never_increases_with_age(self, recurrence_type):
        scores = [
            compute_room_health(NOW - timedelta(hours=hours), recurrence_type, NOW) for hours in range(0, 20000, 97)
        ]
        assert scores == sorted(scores, reverse=True)
        assert all(0 <= score <= 100 for score in scores)


@pytest.mark.unit
class TestCategoryHealth:
    def test_averages_matching_items(self):
        items = [
            make_task("1", category=Category.KITCHEN, recurrence_type="daily", completed_at=NOW - timedelta(hours=24)),
            make_task("2", category=Category.KITCHEN, recurrence_type="daily", completed_at=NOW),
            make_task("3", category=Category.BATHROOM, recurrence_type="daily", completed_at=None),
        ]
        assert compute_category_health(items, Category.KITCHEN, NOW) == 75
        assert compute_category_health(items, "bathroom", NOW) == 0

    def test_no_matching_items_is_zero(self):
        assert compute_category_health([], Category.PETS, NOW) == 0

    def test_room_conditions_cover_present_categories(self):
        items = [
            make_task("1", category=Category.BATHROOM, recurrence_type="weekly", completed_at=NOW),
            make_task(
                "2",
                category=Category.KITCHEN,
                recurrence_type="daily",
                status=InstanceStatus.COMPLETED,
                completed_at=NOW - timedelta(hours=36),
            ),
        ]
        conditions = compute_room_conditions(items, NOW)

        assert [c.category for c in conditions] == [Category.KITCHEN, Category.BATHROOM]
        assert conditions[0].score == 25
        assert conditions[0].band.label == "needs attention"
        assert conditions[1].band.label == "excellent"

    def test_room_conditions_score_each_template_by_latest_completion(self):
        items = [
            make_task(
                "1",
                template_id="t1",
                category=Category.KITCHEN,
                recurrence_type="daily",
                status=InstanceStatus.COMPLETED,
                completed_at=NOW - timedelta(hours=24),
            ),
            *(
                make_task(str(i), template_id="t1", category=Category.KITCHEN, recurrence_type="daily")
                for i in range(2, 8)
            ),
        ]

        conditions = compute_room_conditions(items, NOW)

        assert [(c.category, c.score) for c in conditions] == [(Category.KITCHEN, 50)]

    def test_room_conditions_never_completed_template_scores_zero(self):
        items = [
            make_task("1", template_id="t1", category=Category.KITCHEN, recurrence_type="daily", completed_at=NOW),
            make_task("2", template_id="t2", category=Category.LAUNDRY, recurrence_type="weekly"),
            make_task("3", template_id="t2", category=Category.LAUNDRY, recurrence_type="weekly"),
        ]

        conditions = compute_room_conditions(items, NOW)

        assert [(c.category, c.score) for c in conditions] == [(Category.LAUNDRY, 0), (Category.KITCHEN, 100)]

    def test_latest_per_template_keeps_most_recent_completion(self):
        items = [
            make_task("1", template_id="t1", completed_at=NOW - timedelta(days=3)),
            make_task("2", template_id="t1", completed_at=NOW - timedelta(days=1)),
            make_task("3", template_id="t1"),
            make_task("4"),
            make_task("5"),
        ]

        assert sorted(item.id for item in latest_per_template(items)) == ["2", "4", "5"]


@pytest.mark.unit
class TestHealthBands:
    @pytest.mark.parametrize(
        ("score", "label", "color"),
        [
            (100, "excellent", "#22C55E"),
            (80, "excellent", "#22C55E"),
            (79, "good", "#EAB308"),
            (50, "good", "#EAB308"),
            (49, "needs attention", "#F97316"),
            (25, "needs attention", "#F97316"),
            (24, "neglected", "#EF4444"),
            (0, "neglected", "#EF4444"),
        ],
    )
    def test_band_boundaries(self, score, label, color):
        assert health_band(score).label == label
        assert get_health_label(score) == label
        assert get_health_color(score) == color
