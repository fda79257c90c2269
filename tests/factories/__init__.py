"""Test doubles and record factories."""

from __future__ import annotations

import threading
import time
from datetime import date
from decimal import Decimal

from cbar_rates.feed.base import BaseFeedClient
from cbar_rates.feed.schemas import CurrencyRecord, RawFeedEntry

FIXED_TODAY = date(2026, 10, 19)


class FakeFeed(BaseFeedClient):
    """Feed double that counts fetches and serves canned entries or errors."""

    name = "fake"

    def __init__(
        self,
        entries: list[RawFeedEntry] | None = None,
        error: Exception | None = None,
        delay: float = 0.0,
    ):
        self.entries = entries if entries is not None else []
        self.error = error
        self.delay = delay
        self.calls: list[date] = []
        self._lock = threading.Lock()

    @property
    def fetch_count(self) -> int:
        with self._lock:
            return len(self.calls)

    def fetch_and_parse(self, feed_date: date) -> list[RawFeedEntry]:
        with self._lock:
            self.calls.append(feed_date)
        if self.delay:
            time.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return list(self.entries)


class InMemorySnapshotCache:
    """Dict-backed stand-in for SnapshotCache, safe to share across threads."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._snapshots: dict[date, list[CurrencyRecord]] = {}
        self.put_calls = 0

    def has(self, snapshot_date: date) -> bool:
        with self._lock:
            return snapshot_date in self._snapshots

    def count(self, snapshot_date: date) -> int:
        with self._lock:
            return len(self._snapshots.get(snapshot_date, []))

    def get(self, snapshot_date: date) -> list[CurrencyRecord]:
        with self._lock:
            return list(self._snapshots.get(snapshot_date, []))

    def get_one(self, snapshot_date: date, code: str) -> CurrencyRecord | None:
        with self._lock:
            for record in self._snapshots.get(snapshot_date, []):
                if record.code == code.upper():
                    return record
        return None

    def put(self, snapshot_date: date, records) -> None:
        with self._lock:
            self.put_calls += 1
            self._snapshots[snapshot_date] = list(records)

    def evict_older_than(self, cutoff: date) -> int:
        with self._lock:
            stale = [key for key in self._snapshots if key < cutoff]
            deleted = sum(len(self._snapshots.pop(key)) for key in stale)
        return deleted


def make_record(code: str, rate: str = "1.000000", name: str | None = None) -> CurrencyRecord:
    return CurrencyRecord(code=code, name=name or f"1 {code}", rate=Decimal(rate))
