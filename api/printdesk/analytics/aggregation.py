"""Calendar bucketing and derived metrics over already-fetched rows.

Everything in this module is a pure function of its input: no I/O, no
module state, and the output order never depends on the input order.
Rows whose timestamp is missing or unparsable are skipped rather than
failing the whole pass, since client clocks and payloads are not trusted.
"""

from __future__ import annotations

from collections import Counter, defaultdict
from collections.abc import Iterable, Mapping
from datetime import date, datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

MONTH_ORDER = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]
MONTH_INDEX = {name: i for i, name in enumerate(MONTH_ORDER)}

GOAL_STATUSES = ("pending", "in_progress", "completed", "cancelled")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 string or datetime into an aware UTC datetime.

    Naive values are taken as UTC. Returns None for anything unusable.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        ts = value
    elif isinstance(value, date):
        ts = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        try:
            ts = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    try:
        return ts.astimezone(timezone.utc)
    except OverflowError:
        # Offsets at the edge of the datetime range have no UTC equivalent.
        return None


def round1(value: float) -> float:
    """Round half away from zero to one decimal, on the exact binary value."""
    return float(Decimal(value).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def _field(row: Any, name: str) -> Any:
    if isinstance(row, Mapping):
        return row.get(name)
    return getattr(row, name, None)


def _timestamps(rows: Iterable[Any], field: str = "timestamp") -> Iterable[datetime]:
    for row in rows:
        ts = parse_timestamp(_field(row, field))
        if ts is not None:
            yield ts


# ---------------------------------------------------------------------------
# Bucketing
# ---------------------------------------------------------------------------

def bucket_daily(rows: Iterable[Any]) -> list[dict[str, Any]]:
    """Count rows per UTC calendar day.

    One entry per day present in the input, no zero-filling, ascending.
    """
    counts = Counter(ts.date().isoformat() for ts in _timestamps(rows))
    return [{"date": day, "count": counts[day]} for day in sorted(counts)]


def bucket_monthly(rows: Iterable[Any]) -> list[dict[str, Any]]:
    """Count rows per (year, month), ordered chronologically.

    Months are three-letter English abbreviations, so ordering goes through
    the month index and never through the abbreviation string.
    """
    counts = Counter((ts.year, ts.month - 1) for ts in _timestamps(rows))
    return [
        {"month": MONTH_ORDER[month], "year": year, "count": counts[(year, month)]}
        for year, month in sorted(counts)
    ]


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return None


def _valid_buckets(buckets: Iterable[Any]) -> Iterable[tuple[int, str, int, Mapping[str, Any]]]:
    """Yield ``(year, month, count, bucket)`` for well-formed monthly buckets only."""
    for bucket in buckets:
        if not isinstance(bucket, Mapping):
            continue
        month = bucket.get("month")
        if not isinstance(month, str) or month not in MONTH_INDEX:
            continue
        year = _as_int(bucket.get("year"))
        count = _as_int(bucket.get("count") or 0)
        if year is None or count is None:
            continue
        yield year, month, count, bucket


def sort_monthly(buckets: Iterable[Mapping[str, Any]]) -> list[dict[str, Any]]:
    """Chronological order for externally produced monthly buckets."""
    valid = sorted(_valid_buckets(buckets), key=lambda v: (v[0], MONTH_INDEX[v[1]]))
    return [dict(bucket) for _, _, _, bucket in valid]


# ---------------------------------------------------------------------------
# Year-over-year growth
# ---------------------------------------------------------------------------

def growth_percentage(previous: int, current: int) -> float:
    """Percentage change from ``previous`` to ``current``.

    A zero base with a nonzero current count is reported as exactly 100,
    and zero to zero as 0.
    """
    if previous > 0:
        return round1((current - previous) / previous * 100)
    if current > 0:
        return 100.0
    return 0.0


def year_over_year_growth(monthly: Iterable[Mapping[str, Any]]) -> list[dict[str, Any]]:
    """Growth of every calendar month against the previous observed year.

    Observed years are the distinct years present in ``monthly``; each one
    after the first is compared with the observed year before it, for all
    twelve months. Months missing from a year count as zero.
    """
    by_year: dict[int, dict[str, int]] = defaultdict(dict)
    for year, month, count, _ in _valid_buckets(monthly):
        by_year[year][month] = count

    years = sorted(by_year)
    growth: list[dict[str, Any]] = []
    for previous_year, current_year in zip(years, years[1:]):
        for month in MONTH_ORDER:
            growth.append(
                {
                    "year": current_year,
                    "month": month,
                    "growth": growth_percentage(
                        by_year[previous_year].get(month, 0),
                        by_year[current_year].get(month, 0),
                    ),
                }
            )
    return growth


# ---------------------------------------------------------------------------
# Activity progress
# ---------------------------------------------------------------------------

def daily_progress(
    activities: Iterable[Any],
    days: int,
    today: date,
) -> list[dict[str, Any]]:
    """Per-day activity counts and mean mood over a trailing window.

    Every day of the ``days``-long window ending at ``today`` is present,
    zero-filled. Activities outside the window still get their own entry.
    ``mood_avg`` is the one-decimal mean of non-empty mood scores, 0 if none.
    """
    start = today - timedelta(days=max(days, 1) - 1)
    grouped: dict[str, dict[str, Any]] = {
        (start + timedelta(days=i)).isoformat(): {"activities": 0, "moods": []}
        for i in range(max(days, 1))
    }

    for activity in activities:
        ts = parse_timestamp(_field(activity, "created_at"))
        if ts is None:
            continue
        day = grouped.setdefault(ts.date().isoformat(), {"activities": 0, "moods": []})
        day["activities"] += 1
        mood = _field(activity, "mood_score")
        if mood:
            day["moods"].append(mood)

    return [
        {
            "date": day,
            "activities": data["activities"],
            "mood_avg": round1(sum(data["moods"]) / len(data["moods"])) if data["moods"] else 0,
        }
        for day, data in sorted(grouped.items())
    ]


def mood_overview(points: list[Mapping[str, Any]]) -> dict[str, float]:
    """Average of the daily mood means and the first-to-last trend."""
    if not points:
        return {"average_mood": 0.0, "mood_trend": 0.0}
    average = sum(p["mood_avg"] for p in points) / len(points)
    trend = points[-1]["mood_avg"] - points[0]["mood_avg"] if len(points) >= 2 else 0
    return {"average_mood": round1(average), "mood_trend": round1(trend)}


# ---------------------------------------------------------------------------
# Goals
# ---------------------------------------------------------------------------

def goal_breakdown(goals: Iterable[Any]) -> dict[str, Any]:
    """Status counts and completion rate (percent, one decimal)."""
    counts = {status: 0 for status in GOAL_STATUSES}
    total = 0
    for goal in goals:
        status = _field(goal, "status")
        status = getattr(status, "value", status)
        total += 1
        if status in counts:
            counts[status] += 1

    completed = counts["completed"]
    return {
        "counts": counts,
        "total": total,
        "completed": completed,
        "active": counts["pending"] + counts["in_progress"],
        "completion_rate": round1(completed / total * 100) if total else 0.0,
    }
