"""Structured ingest progress reporting.

This module emits loading-indicator updates for long-running loads,
including periodic row-count updates during CSV parsing.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from core.constants import (
    PROGRESS_INTERVAL_ROWS,
    PROGRESS_PARSE_CEILING,
    PROGRESS_PARSE_SPAN,
    PROGRESS_PARSE_START,
)
from core.logging_config import get_logger
from core.types import IngestProgress

_LOGGER = get_logger(__name__)

ProgressCallback = Callable[[IngestProgress], None]

MESSAGE_CHECKING_CACHE = "Checking cache..."
MESSAGE_LOADING_CACHE = "Loading from cache..."
MESSAGE_PARSING = "Parsing CSV file..."
MESSAGE_PROCESSING = "Processing data..."
MESSAGE_AGGREGATING = "Aggregating data..."
MESSAGE_CACHING = "Caching data..."
MESSAGE_COMPLETE = "Complete!"
MESSAGE_LOAD_ERROR = "Error loading data. Please refresh."


@dataclass
class IngestProgressReporter:
    """Fan progress updates out to a callback and the structured log."""

    callback: ProgressCallback | None = None
    estimated_total_rows: int = 0
    interval_rows: int = PROGRESS_INTERVAL_ROWS

    def report(self, percent: float, message: str) -> None:
        """Emit one progress update."""
        progress = IngestProgress(percent=percent, message=message)
        _LOGGER.info("ingest_progress", percent=round(percent, 1), message=message)
        if self.callback is not None:
            self.callback(progress)

    def report_rows(self, rows_read: int) -> None:
        """Emit a parse update when ``rows_read`` lands on the reporting interval."""
        if rows_read <= 0 or rows_read % self.interval_rows != 0:
            return
        percent = parse_progress_percent(rows_read, self.estimated_total_rows)
        self.report(percent, f"Loaded {rows_read:,} records...")


def parse_progress_percent(rows_read: int, estimated_total_rows: int) -> float:
    """Map rows read onto the parsing band of the loading indicator."""
    if estimated_total_rows <= 0:
        return PROGRESS_PARSE_START
    fraction = rows_read / estimated_total_rows
    return min(PROGRESS_PARSE_START + fraction * PROGRESS_PARSE_SPAN, PROGRESS_PARSE_CEILING)
