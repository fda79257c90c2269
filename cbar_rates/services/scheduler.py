"""Scheduler setup for the daily cache cleanup."""

from __future__ import annotations

import logging
from typing import Any

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from flask import Flask

from cbar_rates.utils.datetime import utc_now

from .retention import RetentionSweeper, get_sweeper

logger = logging.getLogger(__name__)

SCHEDULER_EXT_KEY = "apscheduler"
CLEANUP_STATE_KEY = "cbar_cleanup_state"
CLEANUP_JOB_ID = "cleanup_cached_currencies"


def ensure_cleanup_state(app: Flask) -> dict[str, Any]:
    """Ensure the cleanup state dict exists on app extensions."""
    state = app.extensions.setdefault(CLEANUP_STATE_KEY, {})
    if not isinstance(state, dict):
        new_state: dict[str, Any] = {}
        app.extensions[CLEANUP_STATE_KEY] = new_state
        return new_state
    return state


def run_cleanup(app: Flask) -> int:
    """Scheduled job body: sweep with the configured retention window."""

    with app.app_context():
        sweeper: RetentionSweeper = get_sweeper(app)
        state = ensure_cleanup_state(app)
        logger.info("Starting scheduled cache cleanup task")
        deleted = sweeper.sweep()
        state["last_run"] = utc_now()
        state["last_deleted"] = deleted
        return deleted


def init_scheduler(app: Flask) -> BackgroundScheduler | None:
    """Start APScheduler with the daily cleanup job if enabled."""

    ensure_cleanup_state(app)

    if not app.config.get("SCHEDULER_ENABLED", True):
        logger.info("Scheduler disabled via configuration.")
        return None

    if app.extensions.get(SCHEDULER_EXT_KEY):
        return app.extensions[SCHEDULER_EXT_KEY]

    scheduler = BackgroundScheduler(timezone=app.config.get("SCHEDULER_TIMEZONE", "UTC"))
    cron_expr = app.config.get("CLEANUP_CRON", "0 2 * * *")
    trigger = CronTrigger.from_crontab(cron_expr)
    scheduler.add_job(
        run_cleanup, trigger=trigger, args=[app], id=CLEANUP_JOB_ID, replace_existing=True
    )
    scheduler.start()

    app.extensions[SCHEDULER_EXT_KEY] = scheduler
    logger.info("APScheduler started with cron '%s'", cron_expr)
    return scheduler
