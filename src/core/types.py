"""Shared typed models.

This module defines immutable data models used by ingest, aggregate,
store, and session layers to keep interfaces explicit and stable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Literal, Mapping

from core.constants import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_SAMPLING_RATIO,
    DEFAULT_YEAR_MAX,
    DEFAULT_YEAR_MIN,
    ESTIMATED_TOTAL_ROWS,
    SEVERITY_FILTER_ALL,
)

SeverityType = Literal["property", "injury", "fatal"]
RejectionReason = Literal[
    "missing_coordinates",
    "out_of_bounds",
    "missing_datetime",
    "invalid_date",
    "invalid_time",
    "enrichment_failed",
    "malformed_row",
]


@dataclass(frozen=True)
class EnrichedRecord:
    """Canonical validated collision record.

    Attributes:
        record_id: Source collision identifier.
        latitude: WGS84 latitude inside the service bounding box.
        longitude: WGS84 longitude inside the service bounding box.
        borough: Borough name, ``Unknown`` when absent.
        zip_code: Raw zip code, empty when absent.
        on_street: Street the collision occurred on.
        cross_street: Nearest cross street.
        crash_date: Calendar date of the collision.
        hour: Hour of day in [0, 23].
        day_of_week: Day index in [0, 6] where 0 is Sunday.
        month: Month index in [0, 11].
        year: Four digit year.
        killed: Persons killed.
        injured: Persons injured.
        pedestrians_killed: Pedestrians killed.
        pedestrians_injured: Pedestrians injured.
        cyclists_killed: Cyclists killed.
        cyclists_injured: Cyclists injured.
        motorists_killed: Motorists killed.
        motorists_injured: Motorists injured.
        severity_score: Weighted casualty score.
        severity_type: Severity bucket derived from casualty counts.
        has_pedestrian: Whether any pedestrian was killed or injured.
        has_cyclist: Whether any cyclist was killed or injured.
        has_motorist: Whether any motorist was killed or injured.
        primary_factor: First meaningful contributing factor.
        primary_vehicle: First vehicle type code.
    """

    record_id: str
    latitude: float
    longitude: float
    borough: str
    zip_code: str
    on_street: str
    cross_street: str
    crash_date: date
    hour: int
    day_of_week: int
    month: int
    year: int
    killed: int
    injured: int
    pedestrians_killed: int
    pedestrians_injured: int
    cyclists_killed: int
    cyclists_injured: int
    motorists_killed: int
    motorists_injured: int
    severity_score: int
    severity_type: SeverityType
    has_pedestrian: bool
    has_cyclist: bool
    has_motorist: bool
    primary_factor: str
    primary_vehicle: str


@dataclass(frozen=True)
class RecordRejection:
    """Explicit rejection of one raw row.

    Attributes:
        reason: Machine-readable rejection category.
        detail: Human-readable diagnostic detail.
    """

    reason: RejectionReason
    detail: str = ""


@dataclass(frozen=True)
class HexBin:
    """Statistics for one populated hexagonal cell.

    Attributes:
        cell: Lattice key as (column, row).
        x: Cell centroid longitude.
        y: Cell centroid latitude.
        count: Member record count.
        killed: Summed persons killed.
        injured: Summed persons injured.
        severity_score: Summed severity score.
        avg_severity: Severity score divided by count.
        top_factor: Most frequent primary factor among members.
    """

    cell: tuple[int, int]
    x: float
    y: float
    count: int
    killed: int
    injured: int
    severity_score: int
    avg_severity: float
    top_factor: str


@dataclass(frozen=True)
class CategoryStats:
    """Roll-up row for a categorical dimension."""

    name: str
    count: int
    injuries: int
    fatalities: int
    severity_score: int


@dataclass(frozen=True)
class IntersectionStats:
    """Roll-up row for one street intersection."""

    name: str
    count: int
    injuries: int
    fatalities: int


@dataclass(frozen=True)
class MonthlyTrend:
    """Per-month totals across all years.

    Attributes:
        total: Records in the month.
        injuries: Records with at least one injury.
        fatalities: Records with at least one fatality.
    """

    total: int
    injuries: int
    fatalities: int


@dataclass(frozen=True)
class SeverityDistribution:
    """Record counts per severity bucket."""

    property: int
    injury: int
    fatal: int


@dataclass(frozen=True)
class DateRange:
    """Inclusive date span covered by a record collection."""

    min: date | None
    max: date | None


@dataclass(frozen=True)
class SummaryStats:
    """Headline statistics for a record collection.

    Attributes:
        total_crashes: Number of records.
        total_injured: Summed persons injured.
        total_killed: Summed persons killed.
        pedestrians_injured: Summed pedestrians injured.
        pedestrians_killed: Summed pedestrians killed.
        cyclists_injured: Summed cyclists injured.
        cyclists_killed: Summed cyclists killed.
        motorists_injured: Summed motorists injured.
        motorists_killed: Summed motorists killed.
        with_coordinates: Records carrying coordinates.
        date_range: Earliest and latest crash dates.
        hour_counts: Records per hour of day.
        day_counts: Records per day of week.
        most_dangerous_hour: Hour with the most records.
        safest_hour: Hour with the fewest records.
        most_dangerous_day: Day with the most records.
        safest_day: Day with the fewest records.
    """

    total_crashes: int
    total_injured: int
    total_killed: int
    pedestrians_injured: int
    pedestrians_killed: int
    cyclists_injured: int
    cyclists_killed: int
    motorists_injured: int
    motorists_killed: int
    with_coordinates: int
    date_range: DateRange
    hour_counts: tuple[int, ...]
    day_counts: tuple[int, ...]
    most_dangerous_hour: int
    safest_hour: int
    most_dangerous_day: int
    safest_day: int


@dataclass(frozen=True)
class AggregateSnapshot:
    """Complete result of one full-dataset aggregation pass."""

    hexbins: tuple[HexBin, ...]
    hour_day_matrix: tuple[tuple[int, ...], ...]
    monthly_trends: tuple[MonthlyTrend, ...]
    contributing_factors: tuple[CategoryStats, ...]
    vehicle_types: tuple[CategoryStats, ...]
    boroughs: Mapping[str, CategoryStats]
    severity: SeverityDistribution
    top_intersections: tuple[IntersectionStats, ...]
    stats: SummaryStats


@dataclass(frozen=True)
class FilterState:
    """Interactive filter selection.

    Attributes:
        hour: Optional exact hour match.
        year_min: Inclusive lower year bound.
        year_max: Inclusive upper year bound.
        severity: ``all`` or one severity type.
        pedestrian: Include records involving pedestrians.
        cyclist: Include records involving cyclists.
        motorist: Include records involving motorists.
    """

    hour: int | None = None
    year_min: int = DEFAULT_YEAR_MIN
    year_max: int = DEFAULT_YEAR_MAX
    severity: str = SEVERITY_FILTER_ALL
    pedestrian: bool = True
    cyclist: bool = True
    motorist: bool = True


@dataclass(frozen=True)
class IngestOptions:
    """Streaming ingest options.

    Attributes:
        source_uri: Collision CSV path or ``s3://`` URI.
        sampling_ratio: Keep one row out of this many.
        estimated_total_rows: Row estimate used for progress fractions.
        batch_size: Rows per streamed batch.
    """

    source_uri: str
    sampling_ratio: int = DEFAULT_SAMPLING_RATIO
    estimated_total_rows: int = ESTIMATED_TOTAL_ROWS
    batch_size: int = DEFAULT_BATCH_SIZE


@dataclass(frozen=True)
class IngestProgress:
    """One progress update for the loading indicator."""

    percent: float
    message: str


@dataclass(frozen=True)
class IngestResult:
    """Output of one streaming ingest run.

    Attributes:
        records: Kept enriched records in source order.
        rows_read: Rows delivered by the row source.
        rows_sampled: Rows that passed sampling and reached validation.
        rejection_counts: Rejected sampled rows keyed by reason, plus rows
            skipped by the parser under ``malformed_row``.
    """

    records: tuple[EnrichedRecord, ...]
    rows_read: int
    rows_sampled: int
    rejection_counts: Mapping[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class CachePayload:
    """Cached session payload restored verbatim on a cache hit."""

    raw_records: tuple[EnrichedRecord, ...]
    snapshot: AggregateSnapshot


@dataclass(frozen=True)
class KeyFinding:
    """One derived insight for the summary panel.

    Attributes:
        kind: Display tone, one of ``danger``, ``warning``, ``success``.
        title: Short headline.
        description: One-sentence explanation with figures.
    """

    kind: str
    title: str
    description: str
