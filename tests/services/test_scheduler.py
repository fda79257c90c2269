from __future__ import annotations

from datetime import timedelta

import pytest
from apscheduler.triggers.cron import CronTrigger

from cbar_rates.services.retention import SWEEPER_EXT_KEY, RetentionSweeper
from cbar_rates.services.scheduler import (
    CLEANUP_JOB_ID,
    CLEANUP_STATE_KEY,
    SCHEDULER_EXT_KEY,
    init_scheduler,
    run_cleanup,
)
from tests.factories import FIXED_TODAY, InMemorySnapshotCache, make_record


@pytest.fixture()
def fake_sweeper(app):
    original = app.extensions[SWEEPER_EXT_KEY]
    cache = InMemorySnapshotCache()
    cache.put(FIXED_TODAY - timedelta(days=40), [make_record("USD")])
    cache.put(FIXED_TODAY, [make_record("USD")])
    app.extensions[SWEEPER_EXT_KEY] = RetentionSweeper(
        cache, default_retention_days=30, clock=lambda: FIXED_TODAY
    )
    yield cache
    app.extensions[SWEEPER_EXT_KEY] = original


def test_scheduler_disabled_in_testing(app):
    assert app.config["SCHEDULER_ENABLED"] is False
    assert app.extensions.get(SCHEDULER_EXT_KEY) is None


def test_run_cleanup_records_state(app, fake_sweeper):
    deleted = run_cleanup(app)

    state = app.extensions[CLEANUP_STATE_KEY]
    assert deleted == 1
    assert state["last_deleted"] == 1
    assert state["last_run"] is not None
    assert fake_sweeper.has(FIXED_TODAY)


def test_init_scheduler_registers_daily_cleanup_job(app, monkeypatch):
    started = []

    class RecordingScheduler:
        def __init__(self, timezone):
            self.timezone = timezone
            self.jobs = {}

        def add_job(self, func, trigger, args, id, replace_existing):
            self.jobs[id] = (func, trigger, args)

        def start(self):
            started.append(True)

    monkeypatch.setattr("cbar_rates.services.scheduler.BackgroundScheduler", RecordingScheduler)
    monkeypatch.setitem(app.config, "SCHEDULER_ENABLED", True)
    monkeypatch.delitem(app.extensions, SCHEDULER_EXT_KEY, raising=False)

    try:
        scheduler = init_scheduler(app)

        assert started == [True]
        assert scheduler.timezone == app.config["SCHEDULER_TIMEZONE"]
        func, trigger, args = scheduler.jobs[CLEANUP_JOB_ID]
        assert func is run_cleanup
        assert isinstance(trigger, CronTrigger)
        assert args == [app]
        assert init_scheduler(app) is scheduler
    finally:
        app.extensions.pop(SCHEDULER_EXT_KEY, None)
