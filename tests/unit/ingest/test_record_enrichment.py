"""Unit tests for collision row validation and enrichment."""

from __future__ import annotations

from datetime import date

import pytest

from core.types import EnrichedRecord, RecordRejection
from ingest import record_enrichment
from ingest.record_enrichment import (
    day_of_week,
    parse_crash_date,
    parse_crash_hour,
    primary_factor,
    process_row,
    severity_type,
)
from tests.collision_fixtures import collision_row


def test_process_row_enriches_valid_row() -> None:
    """Valid rows should become typed records with derived fields."""
    row = collision_row(
        {
            "CRASH TIME": "17:45",
            "NUMBER OF PERSONS INJURED": "2",
            "NUMBER OF PEDESTRIANS INJURED": "1",
            "CONTRIBUTING FACTOR VEHICLE 1": "Driver Inattention/Distraction",
        }
    )

    record = process_row(row)

    assert isinstance(record, EnrichedRecord)
    assert (record.hour, record.day_of_week, record.month, record.year) == (17, 3, 0, 2020)
    assert (record.severity_score, record.severity_type) == (2, "injury")
    assert record.has_pedestrian and not record.has_cyclist
    assert record.primary_factor == "Driver Inattention/Distraction"


def test_process_row_is_deterministic() -> None:
    """Enriching the same row twice should yield equal records."""
    row = collision_row({"NUMBER OF PERSONS KILLED": "1"})

    assert process_row(row) == process_row(row)


@pytest.mark.parametrize(
    ("overrides", "reason"),
    [
        ({"LATITUDE": ""}, "missing_coordinates"),
        ({"LONGITUDE": "0"}, "missing_coordinates"),
        ({"LATITUDE": "nan"}, "missing_coordinates"),
        ({"LATITUDE": "42.1"}, "out_of_bounds"),
        ({"CRASH TIME": ""}, "missing_datetime"),
        ({"CRASH DATE": "2020-01-01"}, "invalid_date"),
        ({"CRASH DATE": "02/30/2020"}, "invalid_date"),
        ({"CRASH TIME": "815"}, "invalid_time"),
        ({"CRASH TIME": "24:00"}, "invalid_time"),
    ],
)
def test_process_row_rejects_unusable_rows(overrides: dict[str, str], reason: str) -> None:
    """Unusable rows should map to an explicit rejection reason."""
    outcome = process_row(collision_row(overrides))

    assert isinstance(outcome, RecordRejection)
    assert outcome.reason == reason


def test_process_row_accepts_bounding_box_edges() -> None:
    """Coordinates on the bounding box edge should be accepted."""
    outcome = process_row(collision_row({"LATITUDE": "40.4", "LONGITUDE": "-73.6"}))

    assert isinstance(outcome, EnrichedRecord)


def test_process_row_isolates_enrichment_faults(monkeypatch: pytest.MonkeyPatch) -> None:
    """Unexpected enrichment faults should become enrichment_failed rejections."""

    def _boom(row: object) -> EnrichedRecord:
        raise RuntimeError("boom")

    monkeypatch.setattr(record_enrichment, "enrich_row", _boom)

    outcome = process_row(collision_row())

    assert outcome == RecordRejection(reason="enrichment_failed", detail="boom")


def test_process_row_defaults_missing_counts_and_borough() -> None:
    """Blank counts should read as zero and blank borough as Unknown."""
    row = collision_row(
        {"BOROUGH": "", "NUMBER OF PERSONS INJURED": "", "NUMBER OF PERSONS KILLED": "x"}
    )

    record = process_row(row)

    assert isinstance(record, EnrichedRecord)
    assert (record.borough, record.killed, record.injured) == ("Unknown", 0, 0)
    assert record.severity_type == "property"


def test_primary_factor_skips_unspecified_case_insensitively() -> None:
    """Primary factor should be the first non-empty, non-unspecified factor."""
    row = collision_row(
        {
            "CONTRIBUTING FACTOR VEHICLE 1": "UNSPECIFIED",
            "CONTRIBUTING FACTOR VEHICLE 2": " ",
            "CONTRIBUTING FACTOR VEHICLE 3": "Unsafe Speed",
        }
    )

    assert primary_factor(row) == "Unsafe Speed"


def test_primary_factor_falls_back_to_unspecified() -> None:
    """Rows without a meaningful factor should report Unspecified."""
    assert primary_factor(collision_row({"CONTRIBUTING FACTOR VEHICLE 1": ""})) == "Unspecified"


def test_severity_type_prefers_fatal() -> None:
    """Any fatality should classify the record as fatal."""
    assert [severity_type(1, 3), severity_type(0, 3), severity_type(0, 0)] == [
        "fatal",
        "injury",
        "property",
    ]


def test_day_of_week_uses_sunday_zero() -> None:
    """Day index should start at Sunday."""
    assert day_of_week(date(2023, 1, 1)) == 0
    assert day_of_week(date(2023, 1, 7)) == 6


def test_parsers_handle_malformed_values() -> None:
    """Date and hour parsers should return None rather than raise."""
    assert parse_crash_date("13/01/2020") is None
    assert parse_crash_date("1/5/2021") == date(2021, 1, 5)
    assert parse_crash_hour("ab:10") is None
    assert parse_crash_hour("0:05") == 0


def test_process_row_keeps_counts_as_parsed() -> None:
    """Signed and fractional counts should keep their parsed integer value."""
    row = collision_row({"NUMBER OF PERSONS INJURED": "-1", "NUMBER OF PERSONS KILLED": "2.9"})

    record = process_row(row)

    assert isinstance(record, EnrichedRecord)
    assert (record.killed, record.injured) == (2, -1)
    assert record.severity_type == "fatal"
