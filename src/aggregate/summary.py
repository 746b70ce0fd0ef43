"""Headline summary statistics.

Totals, casualty breakdowns, date span, and the most and least
dangerous hour and weekday for a record collection.
"""

from __future__ import annotations

from datetime import date
from typing import Sequence

from core.types import DateRange, EnrichedRecord, SummaryStats


def summary_stats(records: Sequence[EnrichedRecord]) -> SummaryStats:
    """Compute headline statistics in a single pass.

    Args:
        records: Records to summarize.

    Returns:
        Summary statistics with hour/day histograms and extremes.
    """
    totals = {
        "injured": 0,
        "killed": 0,
        "pedestrians_injured": 0,
        "pedestrians_killed": 0,
        "cyclists_injured": 0,
        "cyclists_killed": 0,
        "motorists_injured": 0,
        "motorists_killed": 0,
    }
    hour_counts = [0] * 24
    day_counts = [0] * 7
    min_date: date | None = None
    max_date: date | None = None
    for record in records:
        for name in totals:
            totals[name] += getattr(record, name)
        if min_date is None or record.crash_date < min_date:
            min_date = record.crash_date
        if max_date is None or record.crash_date > max_date:
            max_date = record.crash_date
        if record.hour is not None:
            hour_counts[record.hour] += 1
        if record.day_of_week is not None:
            day_counts[record.day_of_week] += 1
    return SummaryStats(
        total_crashes=len(records),
        total_injured=totals["injured"],
        total_killed=totals["killed"],
        pedestrians_injured=totals["pedestrians_injured"],
        pedestrians_killed=totals["pedestrians_killed"],
        cyclists_injured=totals["cyclists_injured"],
        cyclists_killed=totals["cyclists_killed"],
        motorists_injured=totals["motorists_injured"],
        motorists_killed=totals["motorists_killed"],
        with_coordinates=len(records),
        date_range=DateRange(min=min_date, max=max_date),
        hour_counts=tuple(hour_counts),
        day_counts=tuple(day_counts),
        most_dangerous_hour=argmax(hour_counts),
        safest_hour=argmin(hour_counts),
        most_dangerous_day=argmax(day_counts),
        safest_day=argmin(day_counts),
    )


def argmax(values: Sequence[int]) -> int:
    """Index of the largest value; the first index wins ties."""
    return values.index(max(values))


def argmin(values: Sequence[int]) -> int:
    """Index of the smallest value; the first index wins ties."""
    return values.index(min(values))
