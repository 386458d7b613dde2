"""APScheduler loop that re-runs the full sync on a fixed interval."""

from __future__ import annotations

import logging
from typing import Optional

from apscheduler.schedulers.base import BaseScheduler
from apscheduler.schedulers.blocking import BlockingScheduler

from scripts.identity_sync.config import SyncConfig
from scripts.identity_sync.sync_job import IdentitySyncJob

logger = logging.getLogger("identity_sync.scheduler")

JOB_ID = "identity_sync"


def _run_sync(config: SyncConfig) -> None:
    """One scheduled run. A failure is logged and the next interval still fires."""
    try:
        results = IdentitySyncJob(config).run()
        logger.info("Scheduled sync complete: %s", results)
    except Exception as exc:
        logger.error("Scheduled sync failed: %s", exc, exc_info=True)


def build_scheduler(
    config: SyncConfig, scheduler: Optional[BaseScheduler] = None
) -> BaseScheduler:
    """Register the sync job on ``scheduler`` (a new BlockingScheduler by default)."""
    scheduler = scheduler or BlockingScheduler()
    scheduler.add_job(
        _run_sync,
        "interval",
        minutes=config.scheduler.interval_min,
        args=[config],
        id=JOB_ID,
        max_instances=1,
        misfire_grace_time=config.scheduler.misfire_grace_time,
    )
    return scheduler


def start_scheduler(config: SyncConfig) -> None:
    """Block, running the sync every ``SYNC_INTERVAL_MIN`` minutes."""
    scheduler = build_scheduler(config)
    logger.info(
        "Starting scheduler: sync every %d min", config.scheduler.interval_min
    )
    scheduler.start()
