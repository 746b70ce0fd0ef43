"""Snapshot cache with time-to-live expiry.

This module persists one session payload (raw records plus aggregate
snapshot) per fixed key as a JSON file. Cache faults are never fatal:
reads fall back to ``None`` and writes report a success flag.
"""

from __future__ import annotations

import json
import math
import time
from pathlib import Path
from typing import Any, Callable

from core.constants import CACHE_QUOTA_BYTES, CACHE_TTL_MS
from core.errors import AtlasCacheError
from core.logging_config import get_logger
from core.types import CachePayload
from store.snapshot_payload import cache_payload_from_dict, cache_payload_to_dict

_LOGGER = get_logger(__name__)

Clock = Callable[[], float]


class SnapshotCache:
    """File-backed cache holding timestamped session payloads."""

    def __init__(
        self,
        cache_dir: Path,
        ttl_ms: int = CACHE_TTL_MS,
        quota_bytes: int = CACHE_QUOTA_BYTES,
        clock: Clock = time.time,
    ) -> None:
        """Initialize the cache.

        Args:
            cache_dir: Directory holding cache files.
            ttl_ms: Maximum entry age in milliseconds.
            quota_bytes: Largest serialized entry accepted by ``put``.
            clock: Returns current time in epoch seconds.
        """
        self._cache_dir = cache_dir
        self._ttl_ms = ttl_ms
        self._quota_bytes = quota_bytes
        self._clock = clock

    def get(self, key: str) -> CachePayload | None:
        """Return the cached payload, or ``None`` on miss, expiry, or corruption.

        Args:
            key: Cache entry key.

        Returns:
            Restored payload when a fresh valid entry exists.
        """
        entry_path = self._entry_path(key)
        if not entry_path.exists():
            return None
        try:
            entry = json.loads(entry_path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as error:
            _LOGGER.warning("cache_read_failed", key=key, error=str(error))
            self.delete(key)
            return None
        timestamp = entry.get("timestamp") if isinstance(entry, dict) else None
        if (
            not isinstance(timestamp, (int, float))
            or isinstance(timestamp, bool)
            or not math.isfinite(timestamp)
        ):
            _LOGGER.warning("cache_entry_invalid", key=key, error="missing or non-finite timestamp")
            self.delete(key)
            return None
        age_ms = self._now_ms() - timestamp
        if age_ms > self._ttl_ms:
            _LOGGER.info("cache_expired", key=key, age_ms=int(age_ms), ttl_ms=self._ttl_ms)
            self.delete(key)
            return None
        try:
            payload = _decode_entry_data(entry.get("data"))
        except AtlasCacheError as error:
            _LOGGER.warning("cache_entry_invalid", key=key, error=str(error))
            self.delete(key)
            return None
        _LOGGER.info("cache_hit", key=key, record_count=len(payload.raw_records))
        return payload

    def put(self, key: str, payload: CachePayload) -> bool:
        """Persist a payload, returning whether the write succeeded.

        Args:
            key: Cache entry key.
            payload: Raw records and aggregate snapshot.

        Returns:
            ``True`` when stored, ``False`` on quota or storage failure.
        """
        entry = {"data": cache_payload_to_dict(payload), "timestamp": self._now_ms()}
        serialized = json.dumps(entry, separators=(",", ":"))
        size_bytes = len(serialized.encode("utf-8"))
        if size_bytes > self._quota_bytes:
            _LOGGER.warning(
                "cache_write_failed",
                key=key,
                error="quota exceeded",
                size_bytes=size_bytes,
                quota_bytes=self._quota_bytes,
            )
            return False
        entry_path = self._entry_path(key)
        temp_path = entry_path.with_suffix(".json.tmp")
        try:
            self._cache_dir.mkdir(parents=True, exist_ok=True)
            temp_path.write_text(serialized, encoding="utf-8")
            temp_path.replace(entry_path)
        except OSError as error:
            _LOGGER.warning("cache_write_failed", key=key, error=str(error))
            return False
        _LOGGER.info("cache_written", key=key, size_bytes=size_bytes)
        return True

    def delete(self, key: str) -> bool:
        """Remove a cache entry, returning whether one was removed."""
        entry_path = self._entry_path(key)
        try:
            entry_path.unlink()
        except FileNotFoundError:
            return False
        except OSError as error:
            _LOGGER.warning("cache_delete_failed", key=key, error=str(error))
            return False
        return True

    def _entry_path(self, key: str) -> Path:
        return self._cache_dir / f"{key}.json"

    def _now_ms(self) -> float:
        return self._clock() * 1000


def _decode_entry_data(data: Any) -> CachePayload:
    if not isinstance(data, dict):
        raise AtlasCacheError("Invalid cached snapshot payload: expected JSON object 'data'.")
    return cache_payload_from_dict(data)
