"""Dashboard session controller.

This module sequences one data load (cache check, streaming ingest,
aggregation, cache write) and the interactive filter loop over the
loaded records. State is published only after a load fully succeeds.
"""

from __future__ import annotations

import asyncio
from dataclasses import replace
from typing import Any, Protocol

from aggregate.engine import build_snapshot
from aggregate.filtering import apply_filters, validate_filter_state
from aggregate.hexbin import bin_members, bin_records
from core.config import AtlasConfig
from core.constants import (
    CACHE_KEY,
    HEXBIN_RADIUS,
    PROGRESS_AGGREGATING,
    PROGRESS_CACHE_HIT,
    PROGRESS_CACHING,
    PROGRESS_COMPLETE,
    PROGRESS_PROCESSING,
)
from core.errors import AtlasError, AtlasIngestError
from core.logging_config import get_logger
from core.types import (
    AggregateSnapshot,
    CachePayload,
    EnrichedRecord,
    FilterState,
    HexBin,
    IngestOptions,
    IngestProgress,
)
from ingest.pipeline import ingest_records
from ingest.progress import (
    MESSAGE_AGGREGATING,
    MESSAGE_CACHING,
    MESSAGE_CHECKING_CACHE,
    MESSAGE_COMPLETE,
    MESSAGE_LOAD_ERROR,
    MESSAGE_LOADING_CACHE,
    MESSAGE_PROCESSING,
)
from session.debounce import Debouncer
from session.state import DashboardState
from store.cache_store import SnapshotCache

_LOGGER = get_logger(__name__)


class LoadingIndicator(Protocol):
    """Consumer of load progress updates."""

    def update(self, percent: float, message: str) -> None:
        ...

    def hide(self) -> None:
        ...


class NullIndicator:
    """Loading indicator that discards every update."""

    def update(self, percent: float, message: str) -> None:
        return None

    def hide(self) -> None:
        return None


class DashboardSession:
    """Owner of dashboard state across one load and many filter changes."""

    def __init__(
        self,
        config: AtlasConfig,
        state: DashboardState | None = None,
        cache: SnapshotCache | None = None,
        indicator: LoadingIndicator | None = None,
        *,
        ingest_options: IngestOptions | None = None,
        debouncer: Debouncer | None = None,
        hexbin_radius: float = HEXBIN_RADIUS,
    ) -> None:
        """Initialize the session.

        Args:
            config: Runtime configuration.
            state: Dashboard state to own, a fresh one when omitted.
            cache: Snapshot cache, rooted at ``config.cache_dir`` when omitted.
            indicator: Loading indicator receiving progress updates.
            ingest_options: Ingest options, built from ``config`` when omitted.
            debouncer: Deferral primitive for filter recomputation.
            hexbin_radius: Hexagon radius in coordinate degrees.
        """
        self._config = config
        self._state = state if state is not None else DashboardState()
        self._cache = cache if cache is not None else SnapshotCache(config.cache_dir)
        self._indicator: LoadingIndicator = indicator if indicator is not None else NullIndicator()
        self._ingest_options = ingest_options or IngestOptions(source_uri=config.source_uri)
        self._debouncer = debouncer if debouncer is not None else Debouncer()
        self._hexbin_radius = hexbin_radius

    @property
    def state(self) -> DashboardState:
        return self._state

    @property
    def snapshot(self) -> AggregateSnapshot | None:
        """Full-dataset snapshot, ``None`` before a successful load."""
        return self._state.snapshot

    @property
    def hexbins(self) -> tuple[HexBin, ...]:
        """Hex bins over the currently filtered records."""
        return self._state.hexbins

    @property
    def filters(self) -> FilterState:
        return self._state.filters

    @property
    def filtered_records(self) -> tuple[EnrichedRecord, ...]:
        return self._state.filtered_records

    async def load(self, use_cache: bool = True) -> AggregateSnapshot:
        """Load records and publish the full-dataset view.

        Args:
            use_cache: Read and write the snapshot cache.

        Returns:
            Published aggregate snapshot.

        Raises:
            AtlasError: If ingestion or aggregation fails.
        """
        try:
            payload = await self._load_payload(use_cache)
            self._publish(payload)
            self._indicator.update(PROGRESS_COMPLETE, MESSAGE_COMPLETE)
            return payload.snapshot
        except Exception as error:
            _LOGGER.error(
                "load_failed",
                source_uri=self._ingest_options.source_uri,
                error=str(error),
                error_type=type(error).__name__,
            )
            self._indicator.update(0, MESSAGE_LOAD_ERROR)
            if isinstance(error, AtlasError):
                raise
            raise AtlasIngestError(
                f"Failed to load collision data from {self._ingest_options.source_uri}: "
                f"{error}. Check the source file and reload."
            ) from error
        finally:
            self._indicator.hide()

    def update_filters(self, **changes: Any) -> asyncio.TimerHandle:
        """Replace filter fields and schedule a deferred recomputation.

        Args:
            **changes: FilterState field overrides.

        Returns:
            Handle of the scheduled recomputation.

        Raises:
            AtlasFilterError: If the resulting filter state is invalid.
            TypeError: If a change names an unknown filter field.
            RuntimeError: If no event loop is running; filters stay unchanged.
        """
        filter_state = validate_filter_state(replace(self._state.filters, **changes))
        handle = self._debouncer.schedule(self.recompute)
        self._state.filters = filter_state
        return handle

    def set_filters(self, filter_state: FilterState) -> tuple[HexBin, ...]:
        """Replace the whole filter selection and recompute immediately.

        Raises:
            AtlasFilterError: If the filter state is invalid.
        """
        self._debouncer.cancel()
        self._state.filters = validate_filter_state(filter_state)
        return self.recompute()

    def reset_filters(self) -> tuple[HexBin, ...]:
        """Restore default filters and recompute immediately."""
        self._debouncer.cancel()
        self._state.filters = FilterState()
        return self.recompute()

    def recompute(self) -> tuple[HexBin, ...]:
        """Filter raw records and re-bin them under the current filters.

        Returns:
            Hex bins over the filtered records.
        """
        filters = self._state.filters
        filtered = tuple(apply_filters(self._state.raw_records, filters))
        hexbins = tuple(bin_records(filtered, self._hexbin_radius))
        self._state.filtered_records = filtered
        self._state.hexbins = hexbins
        _LOGGER.info(
            "filters_applied",
            hour=filters.hour,
            year_min=filters.year_min,
            year_max=filters.year_max,
            severity=filters.severity,
            pedestrian=filters.pedestrian,
            cyclist=filters.cyclist,
            motorist=filters.motorist,
            record_count=len(filtered),
            hexbin_count=len(hexbins),
        )
        return hexbins

    def records_in_cell(self, cell: tuple[int, int]) -> list[EnrichedRecord]:
        """Return filtered records inside one hex cell for detail views."""
        return bin_members(self._state.filtered_records, cell, self._hexbin_radius)

    async def _load_payload(self, use_cache: bool) -> CachePayload:
        if use_cache:
            self._indicator.update(0, MESSAGE_CHECKING_CACHE)
            cached = self._cache.get(CACHE_KEY)
            if cached is not None:
                self._indicator.update(PROGRESS_CACHE_HIT, MESSAGE_LOADING_CACHE)
                return cached
        result = await ingest_records(self._ingest_options, self._config, self._on_progress)
        self._indicator.update(PROGRESS_PROCESSING, MESSAGE_PROCESSING)
        self._indicator.update(PROGRESS_AGGREGATING, MESSAGE_AGGREGATING)
        snapshot = build_snapshot(result.records, self._hexbin_radius)
        payload = CachePayload(raw_records=result.records, snapshot=snapshot)
        if use_cache:
            self._indicator.update(PROGRESS_CACHING, MESSAGE_CACHING)
            self._cache.put(CACHE_KEY, payload)
        return payload

    def _publish(self, payload: CachePayload) -> None:
        self._debouncer.cancel()
        self._state.raw_records = payload.raw_records
        self._state.snapshot = payload.snapshot
        self._state.filters = FilterState()
        self._state.filtered_records = payload.raw_records
        self._state.hexbins = payload.snapshot.hexbins

    def _on_progress(self, progress: IngestProgress) -> None:
        self._indicator.update(progress.percent, progress.message)
