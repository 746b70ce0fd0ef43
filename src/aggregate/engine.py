"""Aggregation engine.

This module builds the full AggregateSnapshot from an enriched record
collection. Every view is an independent single-pass reduction, and a
fault in any one of them fails the whole build.
"""

from __future__ import annotations

from typing import Callable, Sequence, TypeVar

from aggregate.categorical import (
    boroughs,
    contributing_factors,
    severity_distribution,
    top_intersections,
    vehicle_types,
)
from aggregate.hexbin import bin_records
from aggregate.summary import summary_stats
from aggregate.temporal import hour_day_matrix, monthly_trends
from core.constants import HEXBIN_RADIUS
from core.errors import AtlasAggregationError
from core.logging_config import get_logger
from core.types import AggregateSnapshot, EnrichedRecord

_LOGGER = get_logger(__name__)

_ViewT = TypeVar("_ViewT")


def build_snapshot(
    records: Sequence[EnrichedRecord],
    hexbin_radius: float = HEXBIN_RADIUS,
) -> AggregateSnapshot:
    """Compute every aggregate view for a record collection.

    Args:
        records: Immutable enriched records.
        hexbin_radius: Hexagon radius in coordinate degrees.

    Returns:
        Complete aggregate snapshot.

    Raises:
        AtlasAggregationError: If any view fails to compute.
    """
    snapshot = AggregateSnapshot(
        hexbins=tuple(_compute("hexbins", lambda: bin_records(records, hexbin_radius))),
        hour_day_matrix=_compute("hour_day_matrix", lambda: hour_day_matrix(records)),
        monthly_trends=_compute("monthly_trends", lambda: monthly_trends(records)),
        contributing_factors=_compute(
            "contributing_factors", lambda: contributing_factors(records)
        ),
        vehicle_types=_compute("vehicle_types", lambda: vehicle_types(records)),
        boroughs=_compute("boroughs", lambda: boroughs(records)),
        severity=_compute("severity", lambda: severity_distribution(records)),
        top_intersections=_compute("top_intersections", lambda: top_intersections(records)),
        stats=_compute("stats", lambda: summary_stats(records)),
    )
    _LOGGER.info(
        "snapshot_built",
        record_count=len(records),
        hexbin_count=len(snapshot.hexbins),
        factor_count=len(snapshot.contributing_factors),
        vehicle_type_count=len(snapshot.vehicle_types),
        borough_count=len(snapshot.boroughs),
        intersection_count=len(snapshot.top_intersections),
    )
    return snapshot


def _compute(view_name: str, compute_view: Callable[[], _ViewT]) -> _ViewT:
    """Run one view reduction, converting faults into aggregation errors."""
    try:
        return compute_view()
    except Exception as error:
        raise AtlasAggregationError(
            f"Failed to compute aggregate view '{view_name}': {error}. "
            "Reload the dataset; if the fault persists, clear the snapshot cache."
        ) from error
