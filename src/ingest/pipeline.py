"""Streaming ingest orchestration.

This module coordinates row streaming, sampling, validation, enrichment,
and progress reporting for one collision CSV load. It yields to the
event loop between row batches so interactive callers stay responsive.
"""

from __future__ import annotations

import asyncio
from collections import Counter
from typing import Iterable, Mapping, Sequence

from core.config import AtlasConfig
from core.constants import PROGRESS_PARSE_START
from core.logging_config import get_logger
from core.types import EnrichedRecord, IngestOptions, IngestResult, RecordRejection
from ingest.progress import MESSAGE_PARSING, IngestProgressReporter, ProgressCallback
from ingest.record_enrichment import process_row
from ingest.row_source import iter_row_batches
from ingest.sampling import RowSampler

_LOGGER = get_logger(__name__)

RowBatches = Iterable[Sequence[Mapping[str, str | None]]]


class StreamingIngestor:
    """Stateful runner for one skip-then-validate streaming ingest."""

    def __init__(
        self,
        options: IngestOptions,
        progress: ProgressCallback | None = None,
    ) -> None:
        self._options = options
        self._sampler = RowSampler(options.sampling_ratio)
        self._reporter = IngestProgressReporter(
            callback=progress,
            estimated_total_rows=options.estimated_total_rows,
        )
        self._records: list[EnrichedRecord] = []
        self._rejections: Counter[str] = Counter()
        self._rows_read = 0
        self._rows_sampled = 0

    async def run(self, row_batches: RowBatches) -> IngestResult:
        """Consume every row batch and return the kept records.

        Args:
            row_batches: Row mappings in file order, in bounded batches.

        Returns:
            Kept records with row and rejection counters.

        Raises:
            AtlasIngestError: If the row source faults mid-stream.
        """
        self._reporter.report(PROGRESS_PARSE_START, MESSAGE_PARSING)
        for batch in row_batches:
            for row in batch:
                self._consume_row(row)
            await asyncio.sleep(0)
        result = IngestResult(
            records=tuple(self._records),
            rows_read=self._rows_read,
            rows_sampled=self._rows_sampled,
            rejection_counts=dict(self._rejections),
        )
        _log_ingest_completion(self._options, result)
        return result

    def record_malformed_row(self) -> None:
        """Count a row the source skipped for a field-count mismatch."""
        self._rejections["malformed_row"] += 1

    def _consume_row(self, row: Mapping[str, str | None]) -> None:
        self._rows_read += 1
        if self._sampler.keep():
            self._rows_sampled += 1
            outcome = process_row(row)
            if isinstance(outcome, RecordRejection):
                self._rejections[outcome.reason] += 1
            else:
                self._records.append(outcome)
        self._reporter.report_rows(self._rows_read)


async def ingest_records(
    options: IngestOptions,
    config: AtlasConfig,
    progress: ProgressCallback | None = None,
) -> IngestResult:
    """Stream, sample, and enrich a collision CSV.

    Args:
        options: Ingest request options.
        config: Runtime configuration.
        progress: Optional loading-indicator callback.

    Returns:
        Kept records with row and rejection counters.

    Raises:
        AtlasIngestError: If the source is unreachable or cannot be parsed.
    """
    ingestor = StreamingIngestor(options, progress)
    row_batches = iter_row_batches(
        options.source_uri,
        config,
        options.batch_size,
        on_malformed_row=ingestor.record_malformed_row,
    )
    return await ingestor.run(row_batches)


def _log_ingest_completion(options: IngestOptions, result: IngestResult) -> None:
    """Log ingest completion with contextual metadata."""
    _LOGGER.info(
        "ingest_completed",
        source_uri=options.source_uri,
        sampling_ratio=options.sampling_ratio,
        rows_read=result.rows_read,
        rows_sampled=result.rows_sampled,
        records_kept=len(result.records),
        rejection_counts=dict(result.rejection_counts),
    )
