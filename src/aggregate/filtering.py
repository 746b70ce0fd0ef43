"""Record filtering for interactive map views.

This module applies a FilterState to an enriched record collection.
It never aggregates; callers re-run hex binning on the result.
"""

from __future__ import annotations

from typing import Iterable

from core.constants import SEVERITY_FILTER_ALL, SEVERITY_TYPES
from core.errors import AtlasFilterError
from core.types import EnrichedRecord, FilterState


def apply_filters(
    records: Iterable[EnrichedRecord],
    filter_state: FilterState,
) -> list[EnrichedRecord]:
    """Filter records using the interactive filter selection.

    Args:
        records: Input records to filter.
        filter_state: Filter constraints.

    Returns:
        Records passing every active criterion, in input order.
    """
    return [record for record in records if matches_filters(record, filter_state)]


def matches_filters(record: EnrichedRecord, filter_state: FilterState) -> bool:
    """Return whether one record passes every active criterion."""
    if filter_state.hour is not None and record.hour != filter_state.hour:
        return False
    if record.year < filter_state.year_min or record.year > filter_state.year_max:
        return False
    if filter_state.severity != SEVERITY_FILTER_ALL:
        if record.severity_type != filter_state.severity:
            return False
    if not filter_state.pedestrian and record.has_pedestrian:
        return False
    if not filter_state.cyclist and record.has_cyclist:
        return False
    if not filter_state.motorist and record.has_motorist:
        return False
    return True


def validate_filter_state(filter_state: FilterState) -> FilterState:
    """Check filter values before they reach the filter engine.

    Args:
        filter_state: Candidate filter selection.

    Returns:
        The same filter state when valid.

    Raises:
        AtlasFilterError: If any field is out of range.
    """
    if filter_state.hour is not None and not 0 <= filter_state.hour <= 23:
        raise AtlasFilterError(
            f"Invalid hour filter {filter_state.hour}: expected 0-23 or no hour selection."
        )
    if filter_state.year_min > filter_state.year_max:
        raise AtlasFilterError(
            f"Invalid year range {filter_state.year_min}-{filter_state.year_max}: "
            "year_min must not exceed year_max."
        )
    allowed = (SEVERITY_FILTER_ALL, *SEVERITY_TYPES)
    if filter_state.severity not in allowed:
        raise AtlasFilterError(
            f"Invalid severity filter '{filter_state.severity}'. "
            f"Use one of: {', '.join(allowed)}."
        )
    return filter_state
