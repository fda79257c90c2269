"""Cache-first coordination of CBAR feed fetches."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date

from cbar_rates.errors import CurrencyNotFound, FutureDateRejected
from cbar_rates.feed.base import BaseFeedClient
from cbar_rates.feed.cbar_client import CbarFeedClient
from cbar_rates.feed.normalizer import normalize_all
from cbar_rates.feed.schemas import CurrencyRecord
from cbar_rates.utils.datetime import today

from .single_flight import SingleFlight
from .snapshot_cache import SnapshotCache

logger = logging.getLogger(__name__)

COORDINATOR_EXT_KEY = "cbar_coordinator"


@dataclass(frozen=True)
class CacheStatus:
    date: date
    is_cached: bool
    cached_count: int | None


class IngestionCoordinator:
    """Serve rates for a date from the snapshot cache, fetching the feed at most once per date."""

    def __init__(
        self,
        feed: BaseFeedClient,
        cache: SnapshotCache,
        flights: SingleFlight[list[CurrencyRecord]],
        clock: Callable[[], date] = today,
    ) -> None:
        self._feed = feed
        self._cache = cache
        self._flights = flights
        self._clock = clock

    def get_rates(self, rates_date: date) -> list[CurrencyRecord]:
        """Return every record for `rates_date`, fetching and caching it on first use."""

        self._reject_future(rates_date)
        if self._cache.has(rates_date):
            records = self._cache.get(rates_date)
            logger.info("Serving %s cached currencies for %s", len(records), rates_date)
            return records
        return self._populate(rates_date)

    def get_rate(self, rates_date: date, code: str) -> CurrencyRecord:
        """Return the record for one currency code on `rates_date`."""

        self._reject_future(rates_date)
        normalized_code = code.strip().upper()

        if self._cache.has(rates_date):
            record = self._cache.get_one(rates_date, normalized_code)
        else:
            records = self._populate(rates_date)
            record = next((item for item in records if item.code == normalized_code), None)

        if record is None:
            raise CurrencyNotFound(
                f"Currency {normalized_code} not found for {rates_date.isoformat()}",
                payload={"code": normalized_code, "date": rates_date.isoformat()},
            )
        return record

    def cache_status(self, rates_date: date) -> CacheStatus:
        count = self._cache.count(rates_date)
        return CacheStatus(
            date=rates_date,
            is_cached=count > 0,
            cached_count=count if count > 0 else None,
        )

    def _populate(self, rates_date: date) -> list[CurrencyRecord]:
        return self._flights.do(rates_date, lambda: self._fetch_and_store(rates_date))

    def _fetch_and_store(self, rates_date: date) -> list[CurrencyRecord]:
        # A caller that lost the race to a finished flight lands here after the
        # snapshot was stored.
        if self._cache.has(rates_date):
            return self._cache.get(rates_date)

        logger.info("Cache miss for %s; fetching from %s", rates_date, self._feed.name)
        entries = self._feed.fetch_and_parse(rates_date)
        records = normalize_all(entries)
        degraded = sum(1 for record in records if record.degraded)
        if degraded:
            logger.warning("%s of %s records for %s are degraded", degraded, len(records), rates_date)

        if records:
            self._cache.put(rates_date, records)
        else:
            logger.warning("CBAR feed for %s contained no currencies; nothing cached", rates_date)
        return records

    def _reject_future(self, rates_date: date) -> None:
        current = self._clock()
        if rates_date > current:
            raise FutureDateRejected(
                f"Date {rates_date.isoformat()} is in the future",
                payload={"field": "date", "date": rates_date.isoformat()},
            )


def init_coordinator(app) -> IngestionCoordinator:
    """Create the coordinator and store it on the Flask app."""

    feed = app.extensions.get("cbar_feed") or CbarFeedClient.from_config(app.config)
    coordinator = IngestionCoordinator(
        feed=feed,
        cache=SnapshotCache(),
        flights=SingleFlight(),
    )
    app.extensions[COORDINATOR_EXT_KEY] = coordinator
    return coordinator


def get_coordinator(app) -> IngestionCoordinator:
    coordinator = app.extensions.get(COORDINATOR_EXT_KEY)
    if coordinator is None:
        raise RuntimeError("Ingestion coordinator has not been initialised")
    return coordinator
