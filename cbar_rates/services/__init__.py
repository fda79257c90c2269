"""Service layer modules."""

from .coordinator import (
    CacheStatus,
    IngestionCoordinator,
    get_coordinator,
    init_coordinator,
)
from .retention import RetentionSweeper, get_sweeper, init_sweeper
from .scheduler import ensure_cleanup_state, init_scheduler, run_cleanup
from .single_flight import SingleFlight
from .snapshot_cache import SnapshotCache
