"""Shared JSON serialization for records and snapshots.

This module centralizes EnrichedRecord and AggregateSnapshot payload
conversion. It is used by the snapshot cache and the CLI output.
"""

from __future__ import annotations

from dataclasses import asdict
from datetime import date
from typing import Any, Mapping

from core.errors import AtlasCacheError
from core.types import (
    AggregateSnapshot,
    CachePayload,
    CategoryStats,
    DateRange,
    EnrichedRecord,
    HexBin,
    IntersectionStats,
    MonthlyTrend,
    SeverityDistribution,
    SummaryStats,
)

_RECORD_STRING_FIELDS = (
    "record_id",
    "borough",
    "zip_code",
    "on_street",
    "cross_street",
    "severity_type",
    "primary_factor",
    "primary_vehicle",
)
_RECORD_INT_FIELDS = (
    "hour",
    "day_of_week",
    "month",
    "year",
    "killed",
    "injured",
    "pedestrians_killed",
    "pedestrians_injured",
    "cyclists_killed",
    "cyclists_injured",
    "motorists_killed",
    "motorists_injured",
    "severity_score",
)
_RECORD_BOOL_FIELDS = ("has_pedestrian", "has_cyclist", "has_motorist")


def record_to_payload(record: EnrichedRecord) -> dict[str, object]:
    """Serialize an EnrichedRecord into a JSON-safe payload."""
    payload = asdict(record)
    payload["crash_date"] = record.crash_date.isoformat()
    return payload


def record_from_payload(payload: Mapping[str, Any]) -> EnrichedRecord:
    """Deserialize a JSON payload into an EnrichedRecord.

    Raises:
        KeyError: If a field is missing.
        ValueError: If a field cannot be converted.
    """
    values: dict[str, Any] = {name: str(payload[name]) for name in _RECORD_STRING_FIELDS}
    values.update({name: int(payload[name]) for name in _RECORD_INT_FIELDS})
    values.update({name: bool(payload[name]) for name in _RECORD_BOOL_FIELDS})
    values["latitude"] = float(payload["latitude"])
    values["longitude"] = float(payload["longitude"])
    values["crash_date"] = date.fromisoformat(str(payload["crash_date"]))
    if values["severity_type"] not in ("property", "injury", "fatal"):
        raise ValueError(f"unknown severity_type '{values['severity_type']}'")
    return EnrichedRecord(**values)


def hexbin_to_payload(hexbin: HexBin) -> dict[str, object]:
    """Serialize a HexBin into a JSON-safe payload."""
    payload = asdict(hexbin)
    payload["cell"] = list(hexbin.cell)
    return payload


def snapshot_to_payload(snapshot: AggregateSnapshot) -> dict[str, object]:
    """Serialize an AggregateSnapshot into a JSON-safe payload."""
    payload = asdict(snapshot)
    payload["hexbins"] = [hexbin_to_payload(hexbin) for hexbin in snapshot.hexbins]
    payload["hour_day_matrix"] = [list(row) for row in snapshot.hour_day_matrix]
    payload["boroughs"] = {name: asdict(stats) for name, stats in snapshot.boroughs.items()}
    stats_payload = payload["stats"]
    stats_payload["date_range"] = {
        "min": _date_or_none(snapshot.stats.date_range.min),
        "max": _date_or_none(snapshot.stats.date_range.max),
    }
    stats_payload["hour_counts"] = list(snapshot.stats.hour_counts)
    stats_payload["day_counts"] = list(snapshot.stats.day_counts)
    return payload


def snapshot_from_payload(payload: Mapping[str, Any]) -> AggregateSnapshot:
    """Deserialize a JSON payload into an AggregateSnapshot.

    Raises:
        KeyError: If a field is missing.
        TypeError: If a field has the wrong shape.
        ValueError: If a field cannot be converted.
    """
    matrix = tuple(tuple(int(value) for value in row) for row in payload["hour_day_matrix"])
    if len(matrix) != 7 or any(len(row) != 24 for row in matrix):
        raise ValueError("hour_day_matrix must be 7x24")
    return AggregateSnapshot(
        hexbins=tuple(_hexbin_from_payload(item) for item in payload["hexbins"]),
        hour_day_matrix=matrix,
        monthly_trends=tuple(MonthlyTrend(**item) for item in payload["monthly_trends"]),
        contributing_factors=tuple(
            CategoryStats(**item) for item in payload["contributing_factors"]
        ),
        vehicle_types=tuple(CategoryStats(**item) for item in payload["vehicle_types"]),
        boroughs={
            str(name): CategoryStats(**item) for name, item in payload["boroughs"].items()
        },
        severity=SeverityDistribution(**payload["severity"]),
        top_intersections=tuple(
            IntersectionStats(**item) for item in payload["top_intersections"]
        ),
        stats=_stats_from_payload(payload["stats"]),
    )


def cache_payload_to_dict(payload: CachePayload) -> dict[str, object]:
    """Serialize raw records and their snapshot for the cache."""
    return {
        "raw_records": [record_to_payload(record) for record in payload.raw_records],
        "aggregate_snapshot": snapshot_to_payload(payload.snapshot),
    }


def cache_payload_from_dict(payload: Mapping[str, Any]) -> CachePayload:
    """Deserialize a cached payload.

    Raises:
        AtlasCacheError: If the payload is structurally invalid.
    """
    try:
        raw_records = tuple(record_from_payload(item) for item in payload["raw_records"])
        snapshot = snapshot_from_payload(payload["aggregate_snapshot"])
    except (KeyError, TypeError, ValueError, AttributeError) as error:
        raise AtlasCacheError(f"Invalid cached snapshot payload: {error!r}") from error
    return CachePayload(raw_records=raw_records, snapshot=snapshot)


def _hexbin_from_payload(payload: Mapping[str, Any]) -> HexBin:
    column, row = payload["cell"]
    return HexBin(
        cell=(int(column), int(row)),
        x=float(payload["x"]),
        y=float(payload["y"]),
        count=int(payload["count"]),
        killed=int(payload["killed"]),
        injured=int(payload["injured"]),
        severity_score=int(payload["severity_score"]),
        avg_severity=float(payload["avg_severity"]),
        top_factor=str(payload["top_factor"]),
    )


def _stats_from_payload(payload: Mapping[str, Any]) -> SummaryStats:
    values = dict(payload)
    date_range = values.pop("date_range")
    values["date_range"] = DateRange(
        min=_date_from_payload(date_range["min"]),
        max=_date_from_payload(date_range["max"]),
    )
    values["hour_counts"] = tuple(int(value) for value in values["hour_counts"])
    values["day_counts"] = tuple(int(value) for value in values["day_counts"])
    return SummaryStats(**values)


def _date_or_none(value: date | None) -> str | None:
    return value.isoformat() if value is not None else None


def _date_from_payload(value: object) -> date | None:
    if value is None:
        return None
    return date.fromisoformat(str(value))
