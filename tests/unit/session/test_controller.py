"""Unit tests for the dashboard session controller."""

from __future__ import annotations

import asyncio
from dataclasses import replace
from pathlib import Path
from typing import Iterator

import pytest

from aggregate.hexbin import bin_records
from core.config import AtlasConfig
from core.constants import CACHE_KEY, HEXBIN_RADIUS
from core.errors import AtlasAggregationError, AtlasError, AtlasFilterError, AtlasIngestError
from core.types import FilterState, IngestOptions
from ingest import pipeline
from session import controller
from session.controller import DashboardSession
from session.debounce import Debouncer
from store.cache_store import SnapshotCache
from tests.collision_fixtures import collision_row, write_collision_csv


class _RecordingIndicator:
    def __init__(self) -> None:
        self.updates: list[tuple[float, str]] = []
        self.hidden = 0

    def update(self, percent: float, message: str) -> None:
        self.updates.append((percent, message))

    def hide(self) -> None:
        self.hidden += 1


def _rows() -> list[dict[str, str]]:
    return [
        collision_row(
            {"COLLISION_ID": "1", "CRASH TIME": "17:05", "NUMBER OF PERSONS INJURED": "1"}
        ),
        collision_row(
            {
                "COLLISION_ID": "2",
                "CRASH TIME": "08:30",
                "LATITUDE": "40.75",
                "LONGITUDE": "-73.98",
                "NUMBER OF PERSONS KILLED": "1",
                "NUMBER OF PEDESTRIANS KILLED": "1",
            }
        ),
        collision_row({"COLLISION_ID": "3", "CRASH DATE": "06/15/2011"}),
    ]


def _session(
    tmp_path: Path,
    indicator: _RecordingIndicator | None = None,
    source_name: str = "collisions.csv",
) -> DashboardSession:
    source_path = tmp_path / source_name
    if not source_path.exists():
        write_collision_csv(source_path, _rows())
    config = replace(AtlasConfig.from_env(), data_root=tmp_path, source_uri=str(source_path))
    return DashboardSession(
        config,
        indicator=indicator,
        ingest_options=IngestOptions(source_uri=str(source_path), sampling_ratio=1),
        debouncer=Debouncer(delay=0.01),
    )


def test_load_publishes_full_dataset_view(tmp_path: Path) -> None:
    """A successful load should publish records, snapshot, and full hexbins."""
    indicator = _RecordingIndicator()
    session = _session(tmp_path, indicator)

    snapshot = asyncio.run(session.load())

    assert session.snapshot == snapshot
    assert len(session.state.raw_records) == 3
    assert session.filtered_records == session.state.raw_records
    assert session.hexbins == snapshot.hexbins
    assert indicator.updates[-1] == (100.0, "Complete!")
    assert indicator.hidden == 1


def test_load_writes_cache_and_second_load_hits_it(tmp_path: Path) -> None:
    """A second session should restore the cached payload instead of parsing."""
    first = _session(tmp_path)
    asyncio.run(first.load())
    indicator = _RecordingIndicator()
    second = _session(tmp_path, indicator)

    snapshot = asyncio.run(second.load())

    assert (50.0, "Loading from cache...") in indicator.updates
    assert "Parsing CSV file..." not in [message for _, message in indicator.updates]
    assert snapshot == first.snapshot
    assert SnapshotCache(tmp_path / "cache").get(CACHE_KEY) is not None


def test_load_without_cache_skips_cache_file(tmp_path: Path) -> None:
    """Disabling the cache should neither read nor write an entry."""
    session = _session(tmp_path)

    asyncio.run(session.load(use_cache=False))

    assert not (tmp_path / "cache" / f"{CACHE_KEY}.json").exists()


def test_load_failure_hides_indicator_and_publishes_nothing(tmp_path: Path) -> None:
    """A missing source should raise, report the error, and leave state empty."""
    indicator = _RecordingIndicator()
    config = replace(AtlasConfig.from_env(), data_root=tmp_path)
    session = DashboardSession(
        config,
        indicator=indicator,
        ingest_options=IngestOptions(source_uri=str(tmp_path / "missing.csv")),
    )

    with pytest.raises(AtlasIngestError):
        asyncio.run(session.load())

    assert session.snapshot is None
    assert indicator.updates[-1] == (0, "Error loading data. Please refresh.")
    assert indicator.hidden == 1


def test_load_surfaces_aggregation_failure(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Aggregation faults should abort the load without publishing state."""
    indicator = _RecordingIndicator()
    session = _session(tmp_path, indicator)

    def _broken(records: object, radius: float) -> object:
        raise AtlasAggregationError("broken")

    monkeypatch.setattr(controller, "build_snapshot", _broken)

    with pytest.raises(AtlasError):
        asyncio.run(session.load(use_cache=False))

    assert session.state.raw_records == ()
    assert indicator.hidden == 1


def test_update_filters_recomputes_after_delay(tmp_path: Path) -> None:
    """Filter updates should re-bin filtered records once the delay elapses."""
    session = _session(tmp_path)

    async def _run() -> None:
        await session.load(use_cache=False)
        session.update_filters(hour=17)
        session.update_filters(hour=8)
        await asyncio.sleep(0.05)

    asyncio.run(_run())

    assert session.filters.hour == 8
    assert [record.record_id for record in session.filtered_records] == ["2"]
    assert session.hexbins == tuple(bin_records(session.filtered_records, HEXBIN_RADIUS))


def test_update_filters_rejects_invalid_values(tmp_path: Path) -> None:
    """Invalid filter changes should fail before anything is scheduled."""
    session = _session(tmp_path)

    async def _run() -> None:
        await session.load(use_cache=False)
        session.update_filters(year_min=2030, year_max=2020)

    with pytest.raises(AtlasFilterError):
        asyncio.run(_run())

    assert session.filters == FilterState()


def test_set_and_reset_filters_recompute_immediately(tmp_path: Path) -> None:
    """Whole-state replacement and reset should recompute synchronously."""
    session = _session(tmp_path)
    asyncio.run(session.load(use_cache=False))

    session.set_filters(FilterState(pedestrian=False))
    excluded = [record.record_id for record in session.filtered_records]
    session.reset_filters()

    assert excluded == ["1"]
    assert [record.record_id for record in session.filtered_records] == ["1", "2"]


def test_records_in_cell_returns_filtered_members(tmp_path: Path) -> None:
    """Detail lookup should return the filtered records inside a cell."""
    session = _session(tmp_path)
    asyncio.run(session.load(use_cache=False))
    target = session.hexbins[0]

    members = session.records_in_cell(target.cell)

    assert len(members) == target.count


def test_update_filters_without_running_loop_leaves_filters_unchanged(tmp_path: Path) -> None:
    """A scheduling failure should not leave new filters without a recompute."""
    session = _session(tmp_path)
    asyncio.run(session.load(use_cache=False))

    with pytest.raises(RuntimeError):
        session.update_filters(hour=5)

    assert session.filters == FilterState()
    assert len(session.filtered_records) == 3


def _faulting_row_batches(
    source_uri: str,
    config: AtlasConfig,
    batch_size: int,
    on_malformed_row: object = None,
) -> Iterator[list[dict[str, str]]]:
    yield [collision_row({"COLLISION_ID": "99"})]
    raise AtlasIngestError("stream interrupted")


def test_load_fault_after_first_batch_publishes_nothing(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """A mid-stream source fault should not publish the partial records."""
    indicator = _RecordingIndicator()
    session = _session(tmp_path, indicator)
    monkeypatch.setattr(pipeline, "iter_row_batches", _faulting_row_batches)

    with pytest.raises(AtlasIngestError):
        asyncio.run(session.load(use_cache=False))

    assert session.snapshot is None
    assert session.state.raw_records == ()
    assert indicator.hidden == 1


def test_failed_reload_keeps_previous_view(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """A failed reload should leave the last published records and snapshot intact."""
    indicator = _RecordingIndicator()
    session = _session(tmp_path, indicator)
    snapshot = asyncio.run(session.load(use_cache=False))
    raw_records = session.state.raw_records
    monkeypatch.setattr(pipeline, "iter_row_batches", _faulting_row_batches)

    with pytest.raises(AtlasIngestError):
        asyncio.run(session.load(use_cache=False))

    assert session.snapshot == snapshot
    assert session.state.raw_records == raw_records
    assert session.hexbins == snapshot.hexbins
    assert indicator.updates[-1] == (0, "Error loading data. Please refresh.")
    assert indicator.hidden == 2
