"""Shared collision row and record builders for tests."""

from __future__ import annotations

import csv
from dataclasses import replace
from datetime import date
from pathlib import Path
from typing import Iterable, Mapping

from core.constants import FACTOR_COLUMNS
from core.types import EnrichedRecord

COLLISION_HEADER = [
    "CRASH DATE",
    "CRASH TIME",
    "BOROUGH",
    "ZIP CODE",
    "LATITUDE",
    "LONGITUDE",
    "ON STREET NAME",
    "CROSS STREET NAME",
    "NUMBER OF PERSONS INJURED",
    "NUMBER OF PERSONS KILLED",
    "NUMBER OF PEDESTRIANS INJURED",
    "NUMBER OF PEDESTRIANS KILLED",
    "NUMBER OF CYCLIST INJURED",
    "NUMBER OF CYCLIST KILLED",
    "NUMBER OF MOTORIST INJURED",
    "NUMBER OF MOTORIST KILLED",
    *FACTOR_COLUMNS,
    "COLLISION_ID",
    "VEHICLE TYPE CODE 1",
]


def collision_row(overrides: Mapping[str, str] | None = None) -> dict[str, str]:
    """Build one valid raw CSV row keyed by header name.

    Args:
        overrides: Header name to raw value replacements.

    Returns:
        Row mapping with every header present.
    """
    row = {name: "" for name in COLLISION_HEADER}
    row.update(
        {
            "CRASH DATE": "01/01/2020",
            "CRASH TIME": "8:15",
            "BOROUGH": "BROOKLYN",
            "LATITUDE": "40.7",
            "LONGITUDE": "-73.9",
            "NUMBER OF PERSONS INJURED": "0",
            "NUMBER OF PERSONS KILLED": "0",
            "CONTRIBUTING FACTOR VEHICLE 1": "Unspecified",
            "COLLISION_ID": "1",
            "VEHICLE TYPE CODE 1": "Sedan",
        }
    )
    row.update(overrides or {})
    return row


def write_collision_csv(path: Path, rows: Iterable[Mapping[str, str]]) -> Path:
    """Write rows under the full collision header."""
    with path.open("w", encoding="utf-8", newline="") as handle:
        writer = csv.DictWriter(handle, fieldnames=COLLISION_HEADER)
        writer.writeheader()
        for row in rows:
            writer.writerow(row)
    return path


_BASE_RECORD = EnrichedRecord(
    record_id="1",
    latitude=40.7,
    longitude=-73.9,
    borough="BROOKLYN",
    zip_code="11201",
    on_street="ATLANTIC AVENUE",
    cross_street="FLATBUSH AVENUE",
    crash_date=date(2020, 1, 1),
    hour=8,
    day_of_week=3,
    month=0,
    year=2020,
    killed=0,
    injured=0,
    pedestrians_killed=0,
    pedestrians_injured=0,
    cyclists_killed=0,
    cyclists_injured=0,
    motorists_killed=0,
    motorists_injured=0,
    severity_score=0,
    severity_type="property",
    has_pedestrian=False,
    has_cyclist=False,
    has_motorist=False,
    primary_factor="Unspecified",
    primary_vehicle="Sedan",
)


def make_record(**overrides: object) -> EnrichedRecord:
    """Build an enriched record, deriving severity fields from casualty counts."""
    record = replace(_BASE_RECORD, **overrides)
    if "severity_score" not in overrides:
        record = replace(record, severity_score=record.killed * 10 + record.injured)
    if "severity_type" not in overrides:
        if record.killed > 0:
            severity = "fatal"
        elif record.injured > 0:
            severity = "injury"
        else:
            severity = "property"
        record = replace(record, severity_type=severity)
    return record


def append_extra_field(path: Path, data_row: int) -> Path:
    """Append one surplus field to the 1-based ``data_row`` of a written CSV."""
    lines = path.read_text(encoding="utf-8").splitlines()
    lines[data_row] += ",EXTRA"
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path
