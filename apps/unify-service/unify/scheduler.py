"""
In-process cron scheduling of sync services and webhook retries.

One job per registered sync service (``SYNC_CRON``, default every 8 hours)
plus a webhook retry job every ``WEBHOOK_RETRY_INTERVAL_SECONDS``.
"""
from __future__ import annotations

import logging
import os
import uuid
from typing import Dict, Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger

from unify.db.database import session_scope
from unify.services import webhook_service
from unify.unification.registry import sync_registry
from unify.utils.feature_flags import scheduler_enabled
from unify.verticals import bootstrap

logger = logging.getLogger(__name__)

DEFAULT_SYNC_CRON = "0 */8 * * *"

_scheduler: Optional[BackgroundScheduler] = None


def run_sync_job(vertical: str, object_name: str, user_id: Optional[uuid.UUID] = None) -> Dict[str, int]:
    service = sync_registry.get(vertical, object_name)
    with session_scope() as db:
        stats = service.sync(db, user_id=user_id)
    logger.info("Sync %s.%s finished: %s", vertical, object_name, stats)
    return stats


def run_all_syncs(user_id: Optional[uuid.UUID] = None) -> Dict[str, Dict[str, int]]:
    """Run every registered sync service once, in registration order."""
    bootstrap()
    return {f"{v}.{o}": run_sync_job(v, o, user_id) for v, o, _ in sync_registry.all()}


def retry_webhooks_job() -> None:
    with session_scope() as db:
        retried = webhook_service.retry_failed_deliveries(db)
    if retried:
        logger.info("Retried %d webhook deliveries", retried)


def _retry_interval_seconds() -> int:
    try:
        return max(10, int(os.getenv("WEBHOOK_RETRY_INTERVAL_SECONDS", "60")))
    except ValueError:
        return 60


def build_scheduler() -> BackgroundScheduler:
    bootstrap()
    scheduler = BackgroundScheduler(timezone="UTC")
    cron = os.getenv("SYNC_CRON", DEFAULT_SYNC_CRON)
    for vertical, object_name, service in sync_registry.all():
        scheduler.add_job(
            run_sync_job,
            trigger=CronTrigger.from_crontab(cron, timezone="UTC"),
            args=[vertical, object_name],
            id=service.job_name,
            name=f"Sync {vertical}.{object_name}",
            replace_existing=True,
            coalesce=True,
            max_instances=1,
        )
    scheduler.add_job(
        retry_webhooks_job,
        trigger=IntervalTrigger(seconds=_retry_interval_seconds()),
        id="webhook-retry",
        name="Webhook delivery retry",
        replace_existing=True,
        coalesce=True,
        max_instances=1,
    )
    return scheduler


def start_scheduler() -> Optional[BackgroundScheduler]:
    global _scheduler
    if not scheduler_enabled():
        logger.info("Scheduler disabled (SCHEDULER_ENABLED=false)")
        return None
    if _scheduler is None or not _scheduler.running:
        _scheduler = build_scheduler()
        _scheduler.start()
        logger.info("Sync scheduler started with %d jobs", len(_scheduler.get_jobs()))
    return _scheduler


def shutdown_scheduler() -> None:
    global _scheduler
    if _scheduler is not None and _scheduler.running:
        _scheduler.shutdown(wait=False)
        logger.info("Sync scheduler shutdown")
    _scheduler = None
