"""Explicitly owned dashboard state."""

from __future__ import annotations

from dataclasses import dataclass, field

from core.types import AggregateSnapshot, EnrichedRecord, FilterState, HexBin


@dataclass
class DashboardState:
    """Mutable state for one dashboard session.

    Attributes:
        raw_records: Full enriched record collection, immutable once loaded.
        snapshot: Full-dataset aggregate snapshot.
        filtered_records: Records passing the current filters.
        hexbins: Hex bins over the filtered records.
        filters: Current filter selection.
    """

    raw_records: tuple[EnrichedRecord, ...] = ()
    snapshot: AggregateSnapshot | None = None
    filtered_records: tuple[EnrichedRecord, ...] = ()
    hexbins: tuple[HexBin, ...] = ()
    filters: FilterState = field(default_factory=FilterState)

    @property
    def loaded(self) -> bool:
        """Whether a snapshot has been published."""
        return self.snapshot is not None
