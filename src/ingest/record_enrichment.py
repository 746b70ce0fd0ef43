"""Collision row validation and enrichment.

This module turns one raw CSV row into a typed EnrichedRecord or an
explicit RecordRejection. Failures are isolated per row and never raise.
"""

from __future__ import annotations

from datetime import date
import math
from typing import Mapping

from core.constants import (
    COLUMN_BOROUGH,
    COLUMN_COLLISION_ID,
    COLUMN_CRASH_DATE,
    COLUMN_CRASH_TIME,
    COLUMN_CROSS_STREET,
    COLUMN_CYCLISTS_INJURED,
    COLUMN_CYCLISTS_KILLED,
    COLUMN_LATITUDE,
    COLUMN_LONGITUDE,
    COLUMN_MOTORISTS_INJURED,
    COLUMN_MOTORISTS_KILLED,
    COLUMN_ON_STREET,
    COLUMN_PEDESTRIANS_INJURED,
    COLUMN_PEDESTRIANS_KILLED,
    COLUMN_PERSONS_INJURED,
    COLUMN_PERSONS_KILLED,
    COLUMN_VEHICLE_TYPE,
    COLUMN_ZIP_CODE,
    FACTOR_COLUMNS,
    NYC_MAX_LATITUDE,
    NYC_MAX_LONGITUDE,
    NYC_MIN_LATITUDE,
    NYC_MIN_LONGITUDE,
    SEVERITY_WEIGHT_FATALITY,
    SEVERITY_WEIGHT_INJURY,
    UNKNOWN_BOROUGH,
    UNKNOWN_VEHICLE,
    UNSPECIFIED_FACTOR,
)
from core.logging_config import get_logger
from core.types import EnrichedRecord, RecordRejection, SeverityType

_LOGGER = get_logger(__name__)

RawRow = Mapping[str, str | None]


def process_row(row: RawRow) -> EnrichedRecord | RecordRejection:
    """Validate and enrich one raw row without ever raising.

    Args:
        row: Field name to raw string mapping.

    Returns:
        Enriched record, or a rejection describing why the row was dropped.
    """
    rejection = validate_row(row)
    if rejection is not None:
        return rejection
    try:
        return enrich_row(row)
    except Exception as error:
        _LOGGER.debug(
            "record_enrichment_failed",
            record_id=_text(row, COLUMN_COLLISION_ID),
            error=str(error),
        )
        return RecordRejection(reason="enrichment_failed", detail=str(error))


def validate_row(row: RawRow) -> RecordRejection | None:
    """Check coordinates and date/time presence for one raw row.

    Args:
        row: Field name to raw string mapping.

    Returns:
        Rejection when the row is unusable, else ``None``.
    """
    latitude = _parse_coordinate(row.get(COLUMN_LATITUDE))
    longitude = _parse_coordinate(row.get(COLUMN_LONGITUDE))
    if latitude is None or longitude is None:
        return RecordRejection(reason="missing_coordinates")
    if not _within_bounds(latitude, longitude):
        return RecordRejection(
            reason="out_of_bounds",
            detail=f"({latitude}, {longitude}) outside service area",
        )
    if not _text(row, COLUMN_CRASH_DATE) or not _text(row, COLUMN_CRASH_TIME):
        return RecordRejection(reason="missing_datetime")
    return None


def enrich_row(row: RawRow) -> EnrichedRecord | RecordRejection:
    """Build a typed record from a validated raw row.

    Args:
        row: Field name to raw string mapping that passed validation.

    Returns:
        Enriched record, or a rejection for unparseable date/time values.
    """
    crash_date = parse_crash_date(_text(row, COLUMN_CRASH_DATE))
    if crash_date is None:
        return RecordRejection(reason="invalid_date", detail=_text(row, COLUMN_CRASH_DATE))
    hour = parse_crash_hour(_text(row, COLUMN_CRASH_TIME))
    if hour is None:
        return RecordRejection(reason="invalid_time", detail=_text(row, COLUMN_CRASH_TIME))

    killed = _parse_count(row.get(COLUMN_PERSONS_KILLED))
    injured = _parse_count(row.get(COLUMN_PERSONS_INJURED))
    pedestrians_killed = _parse_count(row.get(COLUMN_PEDESTRIANS_KILLED))
    pedestrians_injured = _parse_count(row.get(COLUMN_PEDESTRIANS_INJURED))
    cyclists_killed = _parse_count(row.get(COLUMN_CYCLISTS_KILLED))
    cyclists_injured = _parse_count(row.get(COLUMN_CYCLISTS_INJURED))
    motorists_killed = _parse_count(row.get(COLUMN_MOTORISTS_KILLED))
    motorists_injured = _parse_count(row.get(COLUMN_MOTORISTS_INJURED))
    return EnrichedRecord(
        record_id=_text(row, COLUMN_COLLISION_ID),
        latitude=float(_text(row, COLUMN_LATITUDE)),
        longitude=float(_text(row, COLUMN_LONGITUDE)),
        borough=_text(row, COLUMN_BOROUGH) or UNKNOWN_BOROUGH,
        zip_code=_text(row, COLUMN_ZIP_CODE),
        on_street=_text(row, COLUMN_ON_STREET),
        cross_street=_text(row, COLUMN_CROSS_STREET),
        crash_date=crash_date,
        hour=hour,
        day_of_week=day_of_week(crash_date),
        month=crash_date.month - 1,
        year=crash_date.year,
        killed=killed,
        injured=injured,
        pedestrians_killed=pedestrians_killed,
        pedestrians_injured=pedestrians_injured,
        cyclists_killed=cyclists_killed,
        cyclists_injured=cyclists_injured,
        motorists_killed=motorists_killed,
        motorists_injured=motorists_injured,
        severity_score=severity_score(killed, injured),
        severity_type=severity_type(killed, injured),
        has_pedestrian=pedestrians_killed > 0 or pedestrians_injured > 0,
        has_cyclist=cyclists_killed > 0 or cyclists_injured > 0,
        has_motorist=motorists_killed > 0 or motorists_injured > 0,
        primary_factor=primary_factor(row),
        primary_vehicle=primary_vehicle(row),
    )


def parse_crash_date(raw_value: str) -> date | None:
    """Parse an ``MM/DD/YYYY`` date, returning ``None`` when malformed."""
    parts = raw_value.split("/")
    if len(parts) != 3:
        return None
    try:
        month, day, year = (int(part.strip()) for part in parts)
        return date(year, month, day)
    except ValueError:
        return None


def parse_crash_hour(raw_value: str) -> int | None:
    """Extract the hour from an ``HH:MM`` time, returning ``None`` when malformed."""
    parts = raw_value.split(":")
    if len(parts) != 2:
        return None
    try:
        hour = int(parts[0].strip())
    except ValueError:
        return None
    if not 0 <= hour <= 23:
        return None
    return hour


def day_of_week(value: date) -> int:
    """Return the day index with Sunday as 0."""
    return (value.weekday() + 1) % 7


def severity_score(killed: int, injured: int) -> int:
    """Weight fatalities and injuries into one score."""
    return killed * SEVERITY_WEIGHT_FATALITY + injured * SEVERITY_WEIGHT_INJURY


def severity_type(killed: int, injured: int) -> SeverityType:
    """Classify a collision as fatal, injury, or property damage only."""
    if killed > 0:
        return "fatal"
    if injured > 0:
        return "injury"
    return "property"


def primary_factor(row: RawRow) -> str:
    """Return the first contributing factor that is not unspecified."""
    for column in FACTOR_COLUMNS:
        factor = _text(row, column)
        if factor and factor.lower() != "unspecified":
            return factor
    return UNSPECIFIED_FACTOR


def primary_vehicle(row: RawRow) -> str:
    """Return the first vehicle type code, or ``Unknown``."""
    vehicle = _text(row, COLUMN_VEHICLE_TYPE)
    if not vehicle or vehicle.lower() == "unknown":
        return UNKNOWN_VEHICLE
    return vehicle


def _text(row: RawRow, column: str) -> str:
    value = row.get(column)
    if value is None:
        return ""
    return str(value).strip()


def _parse_coordinate(raw_value: str | None) -> float | None:
    """Parse a coordinate, treating blank, zero, and non-finite values as missing."""
    if raw_value is None:
        return None
    try:
        value = float(str(raw_value).strip())
    except ValueError:
        return None
    if not math.isfinite(value) or value == 0.0:
        return None
    return value


def _within_bounds(latitude: float, longitude: float) -> bool:
    return (
        NYC_MIN_LATITUDE <= latitude <= NYC_MAX_LATITUDE
        and NYC_MIN_LONGITUDE <= longitude <= NYC_MAX_LONGITUDE
    )


def _parse_count(raw_value: str | None) -> int:
    """Parse a casualty count as given, defaulting to zero when absent or invalid."""
    if raw_value is None:
        return 0
    text = str(raw_value).strip()
    if not text:
        return 0
    try:
        return int(text)
    except ValueError:
        pass
    try:
        value = float(text)
    except ValueError:
        return 0
    if not math.isfinite(value):
        return 0
    return int(value)
