"""Categorical roll-up views.

This module groups records by contributing factor, vehicle type,
borough, severity bucket, and street intersection.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable

from core.constants import TOP_INTERSECTION_LIMIT, UNKNOWN_BOROUGH
from core.types import CategoryStats, EnrichedRecord, IntersectionStats, SeverityDistribution


@dataclass
class _GroupTotals:
    count: int = 0
    injuries: int = 0
    fatalities: int = 0
    severity_score: int = 0

    def add(self, record: EnrichedRecord) -> None:
        self.count += 1
        self.injuries += record.injured
        self.fatalities += record.killed
        self.severity_score += record.severity_score


def contributing_factors(records: Iterable[EnrichedRecord]) -> tuple[CategoryStats, ...]:
    """Roll up records by primary factor, most frequent first."""
    return _sorted_by_count(_group_by(records, lambda record: record.primary_factor))


def vehicle_types(records: Iterable[EnrichedRecord]) -> tuple[CategoryStats, ...]:
    """Roll up records by primary vehicle, most frequent first."""
    return _sorted_by_count(_group_by(records, lambda record: record.primary_vehicle))


def boroughs(records: Iterable[EnrichedRecord]) -> dict[str, CategoryStats]:
    """Roll up records by borough name."""
    groups = _group_by(records, lambda record: record.borough or UNKNOWN_BOROUGH)
    return {name: _category_stats(name, totals) for name, totals in groups.items()}


def severity_distribution(records: Iterable[EnrichedRecord]) -> SeverityDistribution:
    """Count records per severity bucket."""
    counts = {"property": 0, "injury": 0, "fatal": 0}
    for record in records:
        counts[record.severity_type] += 1
    return SeverityDistribution(**counts)


def top_intersections(
    records: Iterable[EnrichedRecord],
    limit: int = TOP_INTERSECTION_LIMIT,
) -> tuple[IntersectionStats, ...]:
    """Rank street intersections by collision count.

    The key sorts both street names so "A & B" and "B & A" collapse.
    Records missing either street name are skipped.

    Args:
        records: Records to rank.
        limit: Maximum number of intersections returned.

    Returns:
        Busiest intersections, most frequent first.
    """
    groups: dict[str, _GroupTotals] = {}
    for record in records:
        if not record.on_street or not record.cross_street:
            continue
        first, second = sorted((record.on_street, record.cross_street))
        key = f"{first} & {second}"
        totals = groups.get(key)
        if totals is None:
            totals = _GroupTotals()
            groups[key] = totals
        totals.add(record)
    ranked = sorted(groups.items(), key=lambda item: item[1].count, reverse=True)
    return tuple(
        IntersectionStats(
            name=name,
            count=totals.count,
            injuries=totals.injuries,
            fatalities=totals.fatalities,
        )
        for name, totals in ranked[:limit]
    )


def _group_by(
    records: Iterable[EnrichedRecord],
    key_fn: Callable[[EnrichedRecord], str],
) -> dict[str, _GroupTotals]:
    groups: dict[str, _GroupTotals] = {}
    for record in records:
        key = key_fn(record)
        totals = groups.get(key)
        if totals is None:
            totals = _GroupTotals()
            groups[key] = totals
        totals.add(record)
    return groups


def _sorted_by_count(groups: dict[str, _GroupTotals]) -> tuple[CategoryStats, ...]:
    # sorted() is stable, so equal counts keep first-seen order.
    ranked = sorted(groups.items(), key=lambda item: item[1].count, reverse=True)
    return tuple(_category_stats(name, totals) for name, totals in ranked)


def _category_stats(name: str, totals: _GroupTotals) -> CategoryStats:
    return CategoryStats(
        name=name,
        count=totals.count,
        injuries=totals.injuries,
        fatalities=totals.fatalities,
        severity_score=totals.severity_score,
    )
