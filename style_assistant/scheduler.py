from __future__ import annotations

"""APScheduler setup for the periodic inventory refresh.

One interval job re-reads the storefront feed every REFRESH_INTERVAL_MINUTES and
writes the snapshot into the cache with the configured TTL. The first run fires
at startup so the cache is warm before the first chat request.
"""

import logging
from datetime import datetime, timezone

from apscheduler.schedulers.background import BackgroundScheduler

from .cache import InventoryCache

logger = logging.getLogger("style_assistant.scheduler")

REFRESH_JOB_ID = "inventory_refresh"


def _refresh_job(cache: InventoryCache) -> None:
    """Run one refresh cycle; failures are logged, never raised into the scheduler."""
    try:
        cache.refresh()
    except Exception:
        logger.exception("scheduled inventory refresh failed")


def create_scheduler(cache: InventoryCache, interval_minutes: int) -> BackgroundScheduler:
    scheduler = BackgroundScheduler(timezone="UTC")
    scheduler.add_job(
        func=_refresh_job,
        args=[cache],
        trigger="interval",
        minutes=interval_minutes,
        id=REFRESH_JOB_ID,
        replace_existing=True,
        max_instances=1,
        next_run_time=datetime.now(timezone.utc),
    )
    return scheduler


def start_scheduler(scheduler: BackgroundScheduler) -> None:
    scheduler.start()
    logger.info("inventory scheduler started jobs=%s", [job.id for job in scheduler.get_jobs()])


def stop_scheduler(scheduler: BackgroundScheduler) -> None:
    if not scheduler.running:
        return
    scheduler.shutdown(wait=False)
    logger.info("inventory scheduler stopped")
