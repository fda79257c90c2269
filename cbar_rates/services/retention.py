"""Age-based eviction of cached snapshots."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date

from cbar_rates.utils.datetime import days_before, today

from .snapshot_cache import SnapshotCache

logger = logging.getLogger(__name__)

DEFAULT_RETENTION_DAYS = 30
SWEEPER_EXT_KEY = "cbar_retention_sweeper"


class RetentionSweeper:
    """Deletes snapshots older than a retention window. Never raises to its caller."""

    def __init__(
        self,
        cache: SnapshotCache,
        default_retention_days: int = DEFAULT_RETENTION_DAYS,
        clock: Callable[[], date] = today,
    ) -> None:
        self._cache = cache
        self._default_retention_days = default_retention_days
        self._clock = clock

    @property
    def default_retention_days(self) -> int:
        return self._default_retention_days

    def sweep(self, retention_days: int | None = None) -> int:
        """Evict snapshots dated before `today - retention_days`; return the rows deleted."""

        days = self._default_retention_days if retention_days is None else retention_days
        cutoff = days_before(self._clock(), days)
        logger.info("Cleaning up cache data older than %s days (cutoff date: %s)", days, cutoff)
        try:
            deleted = self._cache.evict_older_than(cutoff)
        except Exception as exc:  # noqa: BLE001
            logger.error("Error during cache cleanup: %s", exc, exc_info=True)
            return 0
        logger.info("Cache cleanup completed; %s rows removed", deleted)
        return deleted


def init_sweeper(app) -> RetentionSweeper:
    """Create the sweeper and store it on the Flask app."""

    sweeper = RetentionSweeper(
        cache=SnapshotCache(),
        default_retention_days=int(app.config.get("CACHE_RETENTION_DAYS", DEFAULT_RETENTION_DAYS)),
    )
    app.extensions[SWEEPER_EXT_KEY] = sweeper
    return sweeper


def get_sweeper(app) -> RetentionSweeper:
    sweeper = app.extensions.get(SWEEPER_EXT_KEY)
    if sweeper is None:
        raise RuntimeError("Retention sweeper has not been initialised")
    return sweeper
