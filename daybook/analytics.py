"""Aggregation engine for Daybook.

Pure functions over a record collection: distributions, streaks,
completion percentages and weekday patterns. Nothing here touches
storage or the clock; callers pass ``today`` explicitly.
"""

from __future__ import annotations

import calendar
from collections import Counter
from datetime import date, datetime, timedelta
from typing import Any, Iterable

from daybook.kinds import RecordKind
from daybook.models import Record, StatisticsSnapshot, StreakRun

DAY_NAMES = ["mon", "tue", "wed", "thu", "fri", "sat", "sun"]


def distinct_days(records: Iterable[Record]) -> list[date]:
    """Sorted calendar days that have at least one record."""
    return sorted({r.day for r in records if r.day is not None})


# ── Distributions ─────────────────────────────────────────────


def category_distribution(records: Iterable[Record], kind: RecordKind) -> dict[str, int]:
    """Category -> count, zero-filled over the kind's whole enumeration."""
    counts = Counter(r.category for r in records)
    dist = {cat: counts.pop(cat, 0) for cat in kind.category_ids}
    # Categories outside the enumeration (legacy data) still count toward the total.
    dist.update(counts)
    return dist


def most_popular_category(records: Iterable[Record], kind: RecordKind) -> str | None:
    dist = category_distribution(records, kind)
    if not any(dist.values()):
        return None
    return max(dist.items(), key=lambda item: item[1])[0]


def weekly_pattern(records: Iterable[Record], today: date, weeks: int = 8) -> dict[str, int]:
    """Weekday -> number of records on that weekday within the last *weeks* weeks."""
    start = today - timedelta(days=weeks * 7 - 1)
    pattern = {name: 0 for name in DAY_NAMES}
    for rec in records:
        if rec.day is not None and start <= rec.day <= today:
            pattern[DAY_NAMES[rec.day.weekday()]] += 1
    return pattern


def monthly_counts(records: Iterable[Record]) -> list[tuple[str, int]]:
    """('Jan 2024', n) pairs in chronological order."""
    counts = Counter((r.day.year, r.day.month) for r in records if r.day is not None)
    return [
        (f"{calendar.month_abbr[month]} {year}", counts[(year, month)])
        for year, month in sorted(counts)
    ]


# ── Streaks ───────────────────────────────────────────────────


def current_streak(records: Iterable[Record], today: date) -> int:
    """Consecutive recorded days ending at *today*; 0 if today has no record."""
    days = set(distinct_days(records))
    streak = 0
    day = today
    while day in days:
        streak += 1
        day -= timedelta(days=1)
    return streak


def streak_runs(records: Iterable[Record]) -> list[StreakRun]:
    """Every maximal run of consecutive recorded days, oldest first."""
    runs: list[StreakRun] = []
    for day in distinct_days(records):
        if runs and day - runs[-1].end == timedelta(days=1):
            runs[-1].end = day
            runs[-1].length += 1
        else:
            runs.append(StreakRun(start=day, end=day, length=1))
    return runs


def best_streak(records: Iterable[Record]) -> int:
    return max((run.length for run in streak_runs(records)), default=0)


# ── Completion ────────────────────────────────────────────────


def monthly_completion(records: Iterable[Record], year: int, month: int) -> int:
    """Recorded days / days in the calendar month * 100, rounded.

    The full month length is the denominator, also for the month in progress.
    """
    days_in_month = calendar.monthrange(year, month)[1]
    recorded = sum(1 for d in distinct_days(records) if d.year == year and d.month == month)
    return round(recorded / days_in_month * 100)


def weekly_completion(records: Iterable[Record], today: date, days: int = 7) -> int:
    """Recorded days among the last *days* days (today included), as a percentage."""
    start = today - timedelta(days=days - 1)
    recorded = sum(1 for d in distinct_days(records) if start <= d <= today)
    return round(recorded / days * 100)


def average_per_day(records: Iterable[Record], today: date) -> float:
    """Records per day since the first recorded day."""
    records = list(records)
    days = distinct_days(records)
    if not days:
        return 0.0
    span = max((today - days[0]).days, 1)
    return round(len(records) / span, 3)


def history_span(records: Iterable[Record], today: date) -> dict[str, Any]:
    """Oldest and newest recorded day, and days elapsed since the oldest."""
    days = distinct_days(records)
    if not days:
        return {"oldest": None, "newest": None, "daysSinceFirst": 0}
    return {
        "oldest": days[0].isoformat(),
        "newest": days[-1].isoformat(),
        "daysSinceFirst": (today - days[0]).days,
    }


def last_activity(records: Iterable[Record]) -> datetime | None:
    stamps = [r.updated_at or r.created_at for r in records]
    stamps = [s for s in stamps if s is not None]
    return max(stamps, key=lambda s: s.timestamp(), default=None)


# ── Snapshot ──────────────────────────────────────────────────


def compute_snapshot(records: Iterable[Record], kind: RecordKind, today: date) -> StatisticsSnapshot:
    """Recompute the full statistics snapshot from scratch."""
    records = list(records)
    summary = StatisticsSnapshot()
    summary.total = len(records)
    summary.archived = sum(1 for r in records if r.is_archived)
    summary.active = summary.total - summary.archived
    summary.favorites = sum(1 for r in records if r.is_favorite)
    summary.distribution = category_distribution(records, kind)
    summary.most_popular_category = most_popular_category(records, kind)
    summary.current_streak = current_streak(records, today)
    summary.best_streak = best_streak(records)
    summary.weekly_completion = weekly_completion(records, today)
    summary.monthly_completion = monthly_completion(records, today.year, today.month)
    summary.weekday_pattern = weekly_pattern(records, today)
    summary.last_activity = last_activity(records)
    return summary
