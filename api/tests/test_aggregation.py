"""Tests for calendar bucketing and derived metrics.

Tests cover:
- Daily and monthly bucketing (completeness, ordering, permutation invariance)
- Chronological month ordering across year boundaries
- Year-over-year growth, including the zero-base convention
- Tolerance for malformed rows and mixed timestamp formats
- Activity progress windows and goal breakdowns
"""

import itertools
import json
import random
from datetime import date, datetime, timedelta, timezone

import pytest

from printdesk.analytics.aggregation import (
    bucket_daily,
    bucket_monthly,
    daily_progress,
    goal_breakdown,
    growth_percentage,
    mood_overview,
    parse_timestamp,
    round1,
    sort_monthly,
    year_over_year_growth,
)


def rows(*timestamps):
    return [{"timestamp": ts} for ts in timestamps]


# ======================================================================
# Daily bucketing
# ======================================================================


class TestBucketDaily:
    def test_counts_per_day(self):
        result = bucket_daily(rows("2024-03-01T08:00:00Z", "2024-03-01T21:30:00Z", "2024-03-02T00:00:01Z"))
        assert result == [
            {"date": "2024-03-01", "count": 2},
            {"date": "2024-03-02", "count": 1},
        ]

    def test_empty_input(self):
        assert bucket_daily([]) == []

    def test_no_zero_fill_for_missing_days(self):
        result = bucket_daily(rows("2024-03-01T10:00:00Z", "2024-03-05T10:00:00Z"))
        assert [b["date"] for b in result] == ["2024-03-01", "2024-03-05"]

    def test_uses_utc_day_boundaries(self):
        """23:30 at UTC-05:00 is already the next day in UTC."""
        result = bucket_daily(rows("2024-03-01T23:30:00-05:00"))
        assert result == [{"date": "2024-03-02", "count": 1}]

    def test_accepts_datetime_objects(self):
        result = bucket_daily(
            [
                {"timestamp": datetime(2024, 1, 2, 12, tzinfo=timezone.utc)},
                {"timestamp": datetime(2024, 1, 2, 13)},  # naive: read as UTC
            ]
        )
        assert result == [{"date": "2024-01-02", "count": 2}]

    def test_skips_malformed_rows(self):
        data = [
            {"timestamp": "2024-03-01T10:00:00Z"},
            {"timestamp": None},
            {"timestamp": ""},
            {"timestamp": "not a date"},
            {},
            {"timestamp": 12345},
            {"timestamp": "0001-01-01T00:00:00+01:00"},
            {"timestamp": "9999-12-31T23:59:59-01:00"},
        ]
        assert bucket_daily(data) == [{"date": "2024-03-01", "count": 1}]
        assert bucket_monthly(data) == [{"month": "Mar", "year": 2024, "count": 1}]

    def test_permutation_invariant(self):
        data = rows(
            "2024-03-03T01:00:00Z",
            "2024-03-01T10:00:00Z",
            "2024-03-02T10:00:00Z",
            "2024-03-01T11:00:00Z",
        )
        expected = bucket_daily(data)
        for perm in itertools.permutations(data):
            assert bucket_daily(list(perm)) == expected

    def test_every_event_lands_in_exactly_one_bucket(self):
        rng = random.Random(7)
        data = rows(
            *(
                f"2024-{rng.randint(1, 12):02d}-{rng.randint(1, 28):02d}T{rng.randint(0, 23):02d}:00:00Z"
                for _ in range(300)
            )
        )
        result = bucket_daily(data)
        assert sum(b["count"] for b in result) == 300
        assert len({b["date"] for b in result}) == len(result)
        assert [b["date"] for b in result] == sorted(b["date"] for b in result)


# ======================================================================
# Monthly bucketing
# ======================================================================


class TestBucketMonthly:
    def test_counts_per_month(self):
        result = bucket_monthly(
            rows("2024-01-05T00:00:00Z", "2024-01-20T00:00:00Z", "2024-02-01T00:00:00Z")
        )
        assert result == [
            {"month": "Jan", "year": 2024, "count": 2},
            {"month": "Feb", "year": 2024, "count": 1},
        ]

    def test_december_sorts_before_next_january(self):
        result = bucket_monthly(rows("2024-01-10T00:00:00Z", "2023-12-10T00:00:00Z"))
        assert [(b["month"], b["year"]) for b in result] == [("Dec", 2023), ("Jan", 2024)]

    def test_calendar_order_not_alphabetical(self):
        data = rows(*(f"2024-{m:02d}-15T12:00:00Z" for m in range(1, 13)))
        random.Random(3).shuffle(data)
        months = [b["month"] for b in bucket_monthly(data)]
        assert months == ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

    def test_permutation_invariant(self):
        data = rows(
            "2023-11-02T00:00:00Z",
            "2024-04-02T00:00:00Z",
            "2023-12-31T23:59:59Z",
            "2024-04-30T00:00:00Z",
        )
        expected = bucket_monthly(data)
        for perm in itertools.permutations(data):
            assert bucket_monthly(list(perm)) == expected

    def test_sort_monthly_on_external_buckets(self):
        buckets = [
            {"month": "Jan", "year": 2024, "count": 1},
            {"month": "Dec", "year": 2023, "count": 4},
            {"month": "Apr", "year": 2024, "count": 2},
            {"month": "???", "year": 2024, "count": 9},
        ]
        assert [(b["month"], b["year"]) for b in sort_monthly(buckets)] == [
            ("Dec", 2023),
            ("Jan", 2024),
            ("Apr", 2024),
        ]


# ======================================================================
# Year-over-year growth
# ======================================================================


class TestYearOverYearGrowth:
    def test_zero_base_nonzero_current_is_exactly_100(self):
        assert growth_percentage(0, 5) == 100

    def test_zero_base_zero_current_is_zero(self):
        assert growth_percentage(0, 0) == 0

    def test_normal_growth(self):
        assert growth_percentage(200, 250) == 25.0

    def test_decline(self):
        assert growth_percentage(200, 50) == -75.0

    def test_rounds_to_one_decimal(self):
        assert growth_percentage(3, 4) == 33.3
        assert growth_percentage(3, 5) == 66.7

    def test_single_year_has_no_growth(self):
        monthly = [{"month": "Jan", "year": 2024, "count": 10}]
        assert year_over_year_growth(monthly) == []

    def test_all_twelve_months_for_each_later_year(self):
        monthly = [
            {"month": "Mar", "year": 2023, "count": 200},
            {"month": "Mar", "year": 2024, "count": 250},
            {"month": "Apr", "year": 2024, "count": 5},
        ]
        growth = year_over_year_growth(monthly)
        assert len(growth) == 12
        assert all(g["year"] == 2024 for g in growth)
        by_month = {g["month"]: g["growth"] for g in growth}
        assert by_month["Mar"] == 25.0
        assert by_month["Apr"] == 100
        assert by_month["Jan"] == 0
        assert [g["month"] for g in growth][:3] == ["Jan", "Feb", "Mar"]

    def test_compares_against_previous_observed_year(self):
        """A gap year is skipped: 2024 compares against 2021."""
        monthly = [
            {"month": "Jan", "year": 2021, "count": 10},
            {"month": "Jan", "year": 2024, "count": 15},
        ]
        growth = year_over_year_growth(monthly)
        assert {g["year"] for g in growth} == {2024}
        assert growth[0] == {"year": 2024, "month": "Jan", "growth": 50.0}

    def test_three_years(self):
        monthly = [
            {"month": "Jun", "year": 2022, "count": 100},
            {"month": "Jun", "year": 2023, "count": 50},
            {"month": "Jun", "year": 2024, "count": 75},
        ]
        growth = year_over_year_growth(monthly)
        assert len(growth) == 24
        june = [(g["year"], g["growth"]) for g in growth if g["month"] == "Jun"]
        assert june == [(2023, -50.0), (2024, 50.0)]

    def test_skips_malformed_buckets(self):
        monthly = [
            {"month": "Jan", "year": 2023, "count": 1},
            {"month": "Jan", "year": "n/a", "count": 2},
            {"month": "Jan", "year": 2024, "count": "lots"},
            {"month": ["Jan"], "year": 2024, "count": 3},
            ("Jan", 2024, 4),
            None,
            {"month": "Jan", "year": "2024", "count": "2"},
        ]
        growth = year_over_year_growth(monthly)
        assert len(growth) == 12
        assert growth[0] == {"year": 2024, "month": "Jan", "growth": 100.0}

    def test_sort_monthly_skips_malformed_buckets(self):
        buckets = [
            {"month": "Feb", "year": 2024, "count": 1},
            {"month": "Jan", "year": "n/a", "count": 1},
            {"month": "Jan", "year": 2024, "count": float("inf")},
            "Mar 2024",
            {"month": "Jan", "year": 2024, "count": 3},
        ]
        assert sort_monthly(buckets) == [
            {"month": "Jan", "year": 2024, "count": 3},
            {"month": "Feb", "year": 2024, "count": 1},
        ]

    def test_end_to_end_from_rows(self):
        data = rows(*(["2023-05-10T00:00:00Z"] * 4 + ["2024-05-10T00:00:00Z"] * 5))
        growth = year_over_year_growth(bucket_monthly(data))
        may = next(g for g in growth if g["month"] == "May")
        assert may == {"year": 2024, "month": "May", "growth": 25.0}

    def test_idempotent_output(self):
        data = rows(
            "2022-01-01T00:00:00Z",
            "2023-01-01T00:00:00Z",
            "2023-01-02T00:00:00Z",
            "2024-07-04T00:00:00Z",
        )
        first = json.dumps([bucket_daily(data), bucket_monthly(data), year_over_year_growth(bucket_monthly(data))])
        second = json.dumps([bucket_daily(data), bucket_monthly(data), year_over_year_growth(bucket_monthly(data))])
        assert first == second


# ======================================================================
# Helpers
# ======================================================================


class TestHelpers:
    def test_round_half_away_from_zero(self):
        assert round1(0.25) == 0.3
        assert round1(-0.25) == -0.3
        assert round1(12.34) == 12.3

    def test_parse_timestamp_normalizes_to_utc(self):
        ts = parse_timestamp("2024-03-01T02:00:00+02:00")
        assert ts == datetime(2024, 3, 1, 0, 0, tzinfo=timezone.utc)

    @pytest.mark.parametrize("value", [None, "", "garbage", 42, [], {}])
    def test_parse_timestamp_rejects_garbage(self, value):
        assert parse_timestamp(value) is None

    @pytest.mark.parametrize(
        "value",
        [
            "0001-01-01T00:00:00+01:00",
            "9999-12-31T23:59:59-01:00",
            datetime(1, 1, 1, tzinfo=timezone(timedelta(hours=1))),
        ],
    )
    def test_parse_timestamp_out_of_utc_range(self, value):
        assert parse_timestamp(value) is None


# ======================================================================
# Activity progress and goals
# ======================================================================


class TestDailyProgress:
    def test_zero_filled_window_ending_today(self):
        points = daily_progress([], 7, date(2024, 3, 10))
        assert [p["date"] for p in points] == [
            "2024-03-04",
            "2024-03-05",
            "2024-03-06",
            "2024-03-07",
            "2024-03-08",
            "2024-03-09",
            "2024-03-10",
        ]
        assert all(p["activities"] == 0 and p["mood_avg"] == 0 for p in points)

    def test_counts_and_mood_average(self):
        activities = [
            {"created_at": "2024-03-10T08:00:00Z", "mood_score": 4},
            {"created_at": "2024-03-10T09:00:00Z", "mood_score": 5},
            {"created_at": "2024-03-10T10:00:00Z", "mood_score": None},
            {"created_at": "2024-03-09T10:00:00Z", "mood_score": 2},
        ]
        points = {p["date"]: p for p in daily_progress(activities, 7, date(2024, 3, 10))}
        assert points["2024-03-10"] == {"date": "2024-03-10", "activities": 3, "mood_avg": 4.5}
        assert points["2024-03-09"] == {"date": "2024-03-09", "activities": 1, "mood_avg": 2.0}

    def test_out_of_window_rows_get_their_own_day(self):
        activities = [{"created_at": "2024-01-01T00:00:00Z", "mood_score": 3}]
        points = daily_progress(activities, 7, date(2024, 3, 10))
        assert len(points) == 8
        assert points[0] == {"date": "2024-01-01", "activities": 1, "mood_avg": 3.0}

    def test_unconvertible_timestamps_are_skipped(self):
        activities = [
            {"created_at": "0001-01-01T00:00:00+01:00", "mood_score": 3},
            {"created_at": "2024-03-10T08:00:00Z", "mood_score": 4},
        ]
        points = daily_progress(activities, 1, date(2024, 3, 10))
        assert points == [{"date": "2024-03-10", "activities": 1, "mood_avg": 4.0}]

    def test_mood_overview(self):
        points = [
            {"date": "2024-03-08", "activities": 1, "mood_avg": 2.0},
            {"date": "2024-03-09", "activities": 0, "mood_avg": 0},
            {"date": "2024-03-10", "activities": 2, "mood_avg": 5.0},
        ]
        assert mood_overview(points) == {"average_mood": 2.3, "mood_trend": 3.0}

    def test_mood_overview_empty(self):
        assert mood_overview([]) == {"average_mood": 0.0, "mood_trend": 0.0}


class TestGoalBreakdown:
    def test_counts_and_rate(self):
        goals = [
            {"status": "completed"},
            {"status": "completed"},
            {"status": "in_progress"},
            {"status": "pending"},
            {"status": "cancelled"},
            {"status": "pending"},
        ]
        result = goal_breakdown(goals)
        assert result["counts"] == {"pending": 2, "in_progress": 1, "completed": 2, "cancelled": 1}
        assert result["total"] == 6
        assert result["completed"] == 2
        assert result["active"] == 3
        assert result["completion_rate"] == 33.3

    def test_no_goals(self):
        result = goal_breakdown([])
        assert result["total"] == 0
        assert result["completion_rate"] == 0.0

    def test_accepts_enum_statuses(self):
        from printdesk.models.goal import GoalStatus

        result = goal_breakdown([{"status": GoalStatus.completed}, {"status": GoalStatus.pending}])
        assert result["completion_rate"] == 50.0
