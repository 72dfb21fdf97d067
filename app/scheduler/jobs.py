"""APScheduler job definitions and scheduler management.

Runs the periodic sweep that evicts expired rate-limiter entries.  A fresh
``BackgroundScheduler`` is built per application lifespan and handed back to
the caller, which owns its shutdown.
"""

from __future__ import annotations

import logging

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from app.core.config import settings
from app.core.rate_limit import SlidingWindowRateLimiter

logger = logging.getLogger(__name__)

RATE_LIMIT_SWEEP_JOB_ID = "rate_limit_sweep"


def start_scheduler(rate_limiter: SlidingWindowRateLimiter) -> BackgroundScheduler:
    """Start a background scheduler sweeping ``rate_limiter`` on an interval."""
    scheduler = BackgroundScheduler()
    scheduler.add_job(
        rate_limiter.sweep,
        IntervalTrigger(seconds=settings.RATE_LIMIT_SWEEP_INTERVAL_SECONDS),
        id=RATE_LIMIT_SWEEP_JOB_ID,
        replace_existing=True,
    )
    scheduler.start()
    logger.info(
        "scheduler_started",
        extra={"sweep_interval_seconds": settings.RATE_LIMIT_SWEEP_INTERVAL_SECONDS},
    )
    return scheduler


def shutdown_scheduler(scheduler: BackgroundScheduler | None) -> None:
    """Shutdown the scheduler gracefully; no-op when it is not running."""
    if scheduler is not None and scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("scheduler_stopped")
