"""Unit tests for the TTL snapshot cache."""

from __future__ import annotations

import json
from pathlib import Path

from aggregate.engine import build_snapshot
from core.constants import CACHE_TTL_MS
from core.types import CachePayload
from store.cache_store import SnapshotCache
from tests.collision_fixtures import make_record


class _FakeClock:
    def __init__(self, now: float) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def _payload() -> CachePayload:
    records = (make_record(injured=1), make_record(record_id="2", killed=1))
    return CachePayload(raw_records=records, snapshot=build_snapshot(records))


def test_cache_round_trip_before_ttl(tmp_path: Path) -> None:
    """A fresh entry should restore records and snapshot verbatim."""
    clock = _FakeClock(1_700_000_000.0)
    cache = SnapshotCache(tmp_path, clock=clock)
    payload = _payload()

    stored = cache.put("snapshot", payload)
    clock.now += 60
    restored = cache.get("snapshot")

    assert stored is True
    assert restored == payload


def test_cache_returns_none_and_purges_after_ttl(tmp_path: Path) -> None:
    """Entries older than the TTL should be purged on read."""
    clock = _FakeClock(1_700_000_000.0)
    cache = SnapshotCache(tmp_path, clock=clock)
    cache.put("snapshot", _payload())

    clock.now += CACHE_TTL_MS / 1000 + 1
    restored = cache.get("snapshot")

    assert restored is None
    assert not (tmp_path / "snapshot.json").exists()


def test_cache_returns_none_for_missing_entry(tmp_path: Path) -> None:
    """Reading an absent key should miss quietly."""
    assert SnapshotCache(tmp_path).get("snapshot") is None


def test_cache_purges_corrupt_entry(tmp_path: Path) -> None:
    """Unparseable cache files should be purged and treated as a miss."""
    entry_path = tmp_path / "snapshot.json"
    entry_path.write_text("{not json", encoding="utf-8")

    restored = SnapshotCache(tmp_path).get("snapshot")

    assert restored is None
    assert not entry_path.exists()


def test_cache_purges_structurally_invalid_entry(tmp_path: Path) -> None:
    """Entries missing payload sections should be purged and treated as a miss."""
    clock = _FakeClock(1_700_000_000.0)
    entry_path = tmp_path / "snapshot.json"
    entry_path.write_text(
        json.dumps({"timestamp": clock() * 1000, "data": {"raw_records": []}}),
        encoding="utf-8",
    )

    restored = SnapshotCache(tmp_path, clock=clock).get("snapshot")

    assert restored is None
    assert not entry_path.exists()


def test_cache_put_returns_false_over_quota(tmp_path: Path) -> None:
    """Entries larger than the quota should be refused without raising."""
    cache = SnapshotCache(tmp_path, quota_bytes=64)

    stored = cache.put("snapshot", _payload())

    assert stored is False
    assert not (tmp_path / "snapshot.json").exists()


def test_cache_put_returns_false_when_directory_is_unwritable(tmp_path: Path) -> None:
    """Storage failures should be reported as a False result."""
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    cache = SnapshotCache(blocker / "cache")

    assert cache.put("snapshot", _payload()) is False


def test_cache_delete_reports_removal(tmp_path: Path) -> None:
    """Delete should report whether an entry existed."""
    cache = SnapshotCache(tmp_path)
    cache.put("snapshot", _payload())

    assert cache.delete("snapshot") is True
    assert cache.delete("snapshot") is False


def test_cache_purges_entry_with_non_finite_timestamp(tmp_path: Path) -> None:
    """A NaN timestamp should be purged instead of never expiring."""
    clock = _FakeClock(1_700_000_000.0)
    cache = SnapshotCache(tmp_path, clock=clock)
    cache.put("snapshot", _payload())
    entry_path = tmp_path / "snapshot.json"
    entry = json.loads(entry_path.read_text(encoding="utf-8"))
    entry["timestamp"] = float("nan")
    entry_path.write_text(json.dumps(entry), encoding="utf-8")

    clock.now = 1e12
    restored = cache.get("snapshot")

    assert restored is None
    assert not entry_path.exists()
