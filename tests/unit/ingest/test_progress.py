"""Unit tests for ingest progress reporting."""

from __future__ import annotations

from core.types import IngestProgress
from ingest.progress import IngestProgressReporter, parse_progress_percent


class _FakeLogger:
    def __init__(self) -> None:
        self.events: list[tuple[str, dict[str, object]]] = []

    def info(self, event: str, **fields: object) -> None:
        self.events.append((event, fields))


def test_report_rows_emits_on_interval_only(monkeypatch) -> None:
    """Row updates should fire only on interval boundaries."""
    fake_logger = _FakeLogger()
    monkeypatch.setattr("ingest.progress._LOGGER", fake_logger)
    updates: list[IngestProgress] = []
    reporter = IngestProgressReporter(
        callback=updates.append,
        estimated_total_rows=1000,
        interval_rows=100,
    )

    for rows_read in range(1, 251):
        reporter.report_rows(rows_read)

    assert [update.message for update in updates] == [
        "Loaded 100 records...",
        "Loaded 200 records...",
    ]
    assert [event for event, _ in fake_logger.events] == ["ingest_progress", "ingest_progress"]


def test_parse_progress_percent_is_capped() -> None:
    """Parse progress should climb from 5 and never exceed 75."""
    assert parse_progress_percent(0, 1000) == 5.0
    assert parse_progress_percent(500, 1000) == 40.0
    assert parse_progress_percent(5000, 1000) == 75.0


def test_report_without_callback_still_logs(monkeypatch) -> None:
    """Reporter should log even when no callback is attached."""
    fake_logger = _FakeLogger()
    monkeypatch.setattr("ingest.progress._LOGGER", fake_logger)

    IngestProgressReporter().report(5.0, "Parsing CSV file...")

    assert fake_logger.events == [
        ("ingest_progress", {"percent": 5.0, "message": "Parsing CSV file..."})
    ]
