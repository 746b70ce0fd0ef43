"""Temporal aggregate views.

Hour-by-day heatmap counts and month-of-year trend lines.
"""

from __future__ import annotations

from typing import Iterable

from core.types import EnrichedRecord, MonthlyTrend


def hour_day_matrix(records: Iterable[EnrichedRecord]) -> tuple[tuple[int, ...], ...]:
    """Count records per (day of week, hour) cell.

    Args:
        records: Records to count.

    Returns:
        Seven rows (Sunday first) of 24 hourly counts.
    """
    matrix = [[0] * 24 for _ in range(7)]
    for record in records:
        if record.day_of_week is None or record.hour is None:
            continue
        matrix[record.day_of_week][record.hour] += 1
    return tuple(tuple(row) for row in matrix)


def monthly_trends(records: Iterable[EnrichedRecord]) -> tuple[MonthlyTrend, ...]:
    """Count records per month across all years.

    Injury and fatality slots count records with any casualty of that
    kind, not the number of people affected.

    Args:
        records: Records to count.

    Returns:
        Twelve monthly trend rows, January first.
    """
    totals = [0] * 12
    injuries = [0] * 12
    fatalities = [0] * 12
    for record in records:
        if record.month is None:
            continue
        totals[record.month] += 1
        if record.injured > 0:
            injuries[record.month] += 1
        if record.killed > 0:
            fatalities[record.month] += 1
    return tuple(
        MonthlyTrend(total=totals[index], injuries=injuries[index], fatalities=fatalities[index])
        for index in range(12)
    )
