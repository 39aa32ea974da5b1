"""APScheduler setup and job registration."""

from __future__ import annotations

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from kongklang.config import settings
from kongklang.jobs.heartbeat import heartbeat
from kongklang.jobs.purge_pending import purge_pending_deletions

scheduler = AsyncIOScheduler(timezone=settings.timezone)


def register_jobs() -> None:
    """Register all periodic jobs if not already present."""
    if scheduler.get_job("heartbeat") is None:
        scheduler.add_job(
            heartbeat,
            IntervalTrigger(seconds=max(1, settings.heartbeat_interval_seconds)),
            id="heartbeat",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )

    if scheduler.get_job("purge_pending_deletions") is None:
        scheduler.add_job(
            purge_pending_deletions,
            IntervalTrigger(minutes=1),
            id="purge_pending_deletions",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
