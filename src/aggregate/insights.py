"""Key findings derived from an aggregate snapshot.

This module turns snapshot figures into short typed findings for the
summary panel. Rates with a zero denominator are reported as 0.
"""

from __future__ import annotations

from core.constants import DAY_NAMES, RUSH_HOURS, UNKNOWN_BOROUGH, UNSPECIFIED_FACTOR
from core.types import AggregateSnapshot, KeyFinding


def build_key_findings(snapshot: AggregateSnapshot) -> list[KeyFinding]:
    """Build the ordered key-findings list for one snapshot.

    Args:
        snapshot: Full-dataset aggregate snapshot.

    Returns:
        Findings in display order.
    """
    stats = snapshot.stats
    findings: list[KeyFinding] = []

    leading = snapshot.contributing_factors[0] if snapshot.contributing_factors else None
    if leading is not None and leading.name != UNSPECIFIED_FACTOR:
        findings.append(
            KeyFinding(
                kind="danger",
                title=f"{leading.name} Is the Leading Cause",
                description=(
                    f'"{leading.name}" accounts for '
                    f"{_percent(leading.count, stats.total_crashes)}% of all crashes "
                    f"({leading.count:,} incidents)."
                ),
            )
        )

    findings.append(
        KeyFinding(
            kind="warning",
            title="Pedestrian Vulnerability",
            description=(
                f"{stats.pedestrians_killed:,} pedestrians killed "
                f"({_percent(stats.pedestrians_killed, stats.total_killed)}% of all "
                f"fatalities). {stats.pedestrians_injured:,} pedestrians injured."
            ),
        )
    )
    findings.append(
        KeyFinding(
            kind="warning",
            title="Cyclist Casualties",
            description=(
                f"{stats.cyclists_killed:,} cyclists killed and "
                f"{stats.cyclists_injured:,} injured over the data period."
            ),
        )
    )

    fatal_rate = _ratio(stats.total_killed, stats.total_crashes) * 1000
    findings.append(
        KeyFinding(
            kind="success",
            title="Low Fatality Rate",
            description=(
                f"While {_percent(stats.total_injured, stats.total_crashes)}% of crashes "
                f"involve injuries, the fatality rate is {fatal_rate:.2f} deaths per "
                "1,000 crashes."
            ),
        )
    )

    findings.append(
        KeyFinding(
            kind="danger",
            title="Afternoon Rush Hour Peak",
            description=(
                f"{_percent(rush_hour_count(snapshot), stats.total_crashes)}% of crashes "
                "occur between 4-6 PM, making it the most dangerous time to drive."
            ),
        )
    )

    ranked_boroughs = sorted(
        (item for item in snapshot.boroughs.values() if item.name != UNKNOWN_BOROUGH),
        key=lambda item: item.count,
        reverse=True,
    )
    if ranked_boroughs:
        top_borough = ranked_boroughs[0]
        findings.append(
            KeyFinding(
                kind="warning",
                title=f"{top_borough.name} Has Most Crashes",
                description=(
                    f"{top_borough.count:,} crashes "
                    f"({_percent(top_borough.count, stats.total_crashes)}% of total) "
                    f"with {top_borough.injuries:,} injuries."
                ),
            )
        )
    return findings


def rush_hour_count(snapshot: AggregateSnapshot) -> int:
    """Count collisions in the afternoon rush hours across all weekdays."""
    return sum(day_row[hour] for day_row in snapshot.hour_day_matrix for hour in RUSH_HOURS)


def describe_peak_time(day_index: int, hour: int) -> str:
    """Render a weekday/hour pair such as ``Fridays 17:00``."""
    return f"{DAY_NAMES[day_index]}s {hour}:00"


def time_period_label(hour: int) -> str:
    """Name the part of day containing ``hour``."""
    if hour < 6:
        return "Late Night (12am-6am)"
    if hour < 12:
        return "Morning (6am-12pm)"
    if hour < 17:
        return "Afternoon (12pm-5pm)"
    if hour < 21:
        return "Evening (5pm-9pm)"
    return "Night (9pm-12am)"


def _ratio(numerator: int, denominator: int) -> float:
    if denominator <= 0:
        return 0.0
    return numerator / denominator


def _percent(numerator: int, denominator: int) -> str:
    return f"{_ratio(numerator, denominator) * 100:.1f}"
