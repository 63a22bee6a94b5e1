"""Periodic job registration with rq-scheduler.

Entries are keyed by a stable id so every API process can call
``ensure_schedules`` at startup without duplicating jobs; an entry whose
interval or queue changed in config is replaced.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any

from rq_scheduler import Scheduler

from palate.core.config import settings
from palate.jobs.embeddings import backfill_dish_embeddings_job
from palate.services.task_queue import task_queue

logger = logging.getLogger("palate.jobs.schedule_registry")

MIN_INTERVAL_SECONDS = 60


def _schedule_entries() -> list[dict[str, Any]]:
    entries: list[dict[str, Any]] = []
    if settings.embedding_backfill_interval_seconds > 0:
        entries.append(
            {
                "id": "embeddings:backfill",
                "func": backfill_dish_embeddings_job,
                "kwargs": {"batch_size": settings.embedding_backfill_batch_size},
                "interval": max(MIN_INTERVAL_SECONDS, settings.embedding_backfill_interval_seconds),
                "queue_name": task_queue.resolve_queue_name("maintenance"),
            }
        )
    return entries


def _is_current(job, entry: dict[str, Any]) -> bool:
    return job.meta.get("interval") == entry["interval"] and job.origin == entry["queue_name"]


def ensure_schedules() -> None:
    """Idempotently register periodic jobs with rq-scheduler."""
    if settings.environment.lower() == "test":
        return
    if not task_queue.connection:
        logger.info("Skipping scheduler bootstrap; queue connection is unavailable")
        return
    scheduler = Scheduler(connection=task_queue.connection, queue_name=task_queue.resolve_queue_name(None))
    for entry in _schedule_entries():
        existing = scheduler.get_job(entry["id"])
        if existing and _is_current(existing, entry):
            continue
        if existing:
            scheduler.cancel(existing)
            logger.info("Replacing schedule %s with updated settings", entry["id"])
        scheduler.schedule(
            scheduled_time=datetime.utcnow(),
            func=entry["func"],
            kwargs=entry["kwargs"],
            interval=entry["interval"],
            repeat=None,
            id=entry["id"],
            queue_name=entry["queue_name"],
            result_ttl=int(timedelta(hours=1).total_seconds()),
        )
        logger.info("Scheduled job %s every %ss on queue %s", entry["id"], entry["interval"], entry["queue_name"])
