from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import date, timedelta
from decimal import Decimal

import pytest

from cbar_rates.errors import CurrencyNotFound, FutureDateRejected, UpstreamUnavailable
from cbar_rates.feed.schemas import RawFeedEntry
from cbar_rates.services import IngestionCoordinator, SingleFlight, SnapshotCache
from tests.factories import FIXED_TODAY, FakeFeed, InMemorySnapshotCache

DAY = date(2026, 10, 17)


def make_coordinator(feed, cache=None) -> IngestionCoordinator:
    return IngestionCoordinator(
        feed=feed,
        cache=cache if cache is not None else InMemorySnapshotCache(),
        flights=SingleFlight(),
        clock=lambda: FIXED_TODAY,
    )


def test_first_request_fetches_and_caches(fake_feed):
    cache = InMemorySnapshotCache()
    coordinator = make_coordinator(fake_feed, cache)

    records = coordinator.get_rates(DAY)

    assert [record.code for record in records] == ["USD", "EUR", "RUB", "XAU"]
    assert records[2].rate == Decimal("0.021043")
    assert fake_feed.calls == [DAY]
    assert cache.get(DAY) == records


def test_second_request_is_served_from_cache(fake_feed):
    coordinator = make_coordinator(fake_feed)

    first = coordinator.get_rates(DAY)
    second = coordinator.get_rates(DAY)

    assert first == second
    assert fake_feed.fetch_count == 1


def test_today_is_allowed(fake_feed):
    coordinator = make_coordinator(fake_feed)
    assert coordinator.get_rates(FIXED_TODAY)
    assert fake_feed.calls == [FIXED_TODAY]


def test_future_date_is_rejected_without_io(fake_feed):
    cache = InMemorySnapshotCache()
    coordinator = make_coordinator(fake_feed, cache)

    with pytest.raises(FutureDateRejected) as exc_info:
        coordinator.get_rates(FIXED_TODAY + timedelta(days=1))
    with pytest.raises(FutureDateRejected):
        coordinator.get_rate(FIXED_TODAY + timedelta(days=1), "USD")

    assert exc_info.value.payload["field"] == "date"
    assert fake_feed.fetch_count == 0
    assert cache.put_calls == 0


def test_failed_fetch_caches_nothing_and_next_call_retries(sample_entries):
    feed = FakeFeed(error=UpstreamUnavailable("CBAR feed unavailable"))
    cache = InMemorySnapshotCache()
    coordinator = make_coordinator(feed, cache)

    with pytest.raises(UpstreamUnavailable):
        coordinator.get_rates(DAY)
    assert not cache.has(DAY)

    feed.error = None
    feed.entries = sample_entries
    assert len(coordinator.get_rates(DAY)) == 4
    assert feed.fetch_count == 2


def test_empty_feed_is_not_cached():
    feed = FakeFeed(entries=[])
    cache = InMemorySnapshotCache()
    coordinator = make_coordinator(feed, cache)

    assert coordinator.get_rates(DAY) == []
    assert cache.put_calls == 0


def test_degraded_entries_are_cached_with_zero_rate():
    feed = FakeFeed(entries=[RawFeedEntry(code="EUR", name="1 Avro", nominal="1", value="n/a")])
    cache = InMemorySnapshotCache()
    coordinator = make_coordinator(feed, cache)

    records = coordinator.get_rates(DAY)

    assert records[0].degraded
    assert cache.get_one(DAY, "EUR").rate == 0


def test_get_rate_uses_cached_snapshot(fake_feed):
    coordinator = make_coordinator(fake_feed)
    coordinator.get_rates(DAY)

    record = coordinator.get_rate(DAY, " eur ")

    assert record.code == "EUR"
    assert record.rate == Decimal("1.982900")
    assert fake_feed.fetch_count == 1


def test_get_rate_populates_on_miss(fake_feed):
    coordinator = make_coordinator(fake_feed)

    assert coordinator.get_rate(DAY, "xau").rate == Decimal("2450.500000")
    assert fake_feed.fetch_count == 1


def test_get_rate_unknown_code_raises_not_found(fake_feed):
    coordinator = make_coordinator(fake_feed)

    with pytest.raises(CurrencyNotFound) as exc_info:
        coordinator.get_rate(DAY, "ZZZ")

    assert exc_info.value.payload == {"code": "ZZZ", "date": "2026-10-17"}


def test_cache_status_reports_count(fake_feed):
    coordinator = make_coordinator(fake_feed)

    before = coordinator.cache_status(DAY)
    coordinator.get_rates(DAY)
    after = coordinator.cache_status(DAY)

    assert (before.is_cached, before.cached_count) == (False, None)
    assert (after.is_cached, after.cached_count) == (True, 4)
    assert fake_feed.fetch_count == 1


def test_concurrent_misses_fetch_once(sample_entries):
    workers = 8
    feed = FakeFeed(entries=sample_entries, delay=0.2)
    cache = InMemorySnapshotCache()
    coordinator = make_coordinator(feed, cache)
    barrier = threading.Barrier(workers, timeout=5)

    def request():
        barrier.wait()
        return coordinator.get_rates(DAY)

    with ThreadPoolExecutor(max_workers=workers) as pool:
        results = [future.result(timeout=10) for future in [pool.submit(request) for _ in range(workers)]]

    assert feed.fetch_count == 1
    assert cache.put_calls == 1
    assert all(result == results[0] for result in results)


def test_concurrent_misses_share_failure():
    workers = 4
    feed = FakeFeed(error=UpstreamUnavailable("CBAR feed unavailable"), delay=0.2)
    coordinator = make_coordinator(feed)
    barrier = threading.Barrier(workers, timeout=5)

    def request():
        barrier.wait()
        return coordinator.get_rates(DAY)

    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = [pool.submit(request) for _ in range(workers)]
        errors = [future.exception(timeout=10) for future in futures]

    assert all(isinstance(error, UpstreamUnavailable) for error in errors)
    assert feed.fetch_count == 1


def test_distinct_dates_fetch_independently(fake_feed):
    coordinator = make_coordinator(fake_feed)

    coordinator.get_rates(DAY)
    coordinator.get_rates(DAY - timedelta(days=1))

    assert fake_feed.calls == [DAY, DAY - timedelta(days=1)]


def test_coordinator_with_database_cache(fake_feed, db_session):
    coordinator = make_coordinator(fake_feed, SnapshotCache())

    coordinator.get_rates(DAY)
    fresh = make_coordinator(FakeFeed(error=AssertionError("must not fetch")), SnapshotCache())

    assert [record.code for record in fresh.get_rates(DAY)] == ["USD", "EUR", "RUB", "XAU"]
    assert fresh.get_rate(DAY, "rub").rate == Decimal("0.021043")
