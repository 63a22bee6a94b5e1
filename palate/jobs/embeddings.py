"""Dish embedding generation and backfill jobs."""

from __future__ import annotations

import asyncio
import logging
import uuid

from palate.core.config import settings
from palate.db.session import async_session
from palate.embedding.client import get_embedding_client
from palate.models.dish import EmbeddingStatus
from palate.services import dish_service, embedding_service
from palate.services.task_queue import task_queue

logger = logging.getLogger("palate.jobs.embeddings")


async def _refresh_raters(session, dish_ids: list[uuid.UUID]) -> int:
    """Queue profile recomputes for everyone who rated a newly embedded dish."""
    user_ids: set[uuid.UUID] = set()
    for dish_id in dish_ids:
        user_ids.update(await dish_service.list_rater_ids(session, dish_id))
    for user_id in user_ids:
        await task_queue.enqueue_profile_recompute(user_id=user_id)
    return len(user_ids)


async def generate_dish_embedding_task(*, dish_id: str) -> dict[str, object]:
    async with async_session() as session:
        dish = await embedding_service.generate_dish_embedding(session, uuid.UUID(dish_id), get_embedding_client())
        if dish is None:
            return {"dish_id": dish_id, "status": None, "refreshed_users": 0}
        status = dish.embedding_status
        refreshed = 0
        if status == EmbeddingStatus.READY and dish.embedding:
            refreshed = await _refresh_raters(session, [dish.id])
    return {"dish_id": dish_id, "status": status.value, "refreshed_users": refreshed}


def generate_dish_embedding_job(dish_id: str) -> dict[str, object]:
    """RQ entrypoint for ``generate_dish_embedding_task``."""

    async def _run() -> dict[str, object]:
        result = await generate_dish_embedding_task(dish_id=dish_id)
        await task_queue.drain()
        return result

    result = asyncio.run(_run())
    logger.info("Embedding job for dish %s finished with status %s", dish_id, result["status"])
    return result


async def backfill_dish_embeddings_task(*, batch_size: int | None = None) -> dict[str, int]:
    """Retry dishes that are pending or failed with a retryable error."""
    async with async_session() as session:
        summary = await embedding_service.backfill_embeddings(
            session,
            get_embedding_client(),
            batch_size=batch_size or settings.embedding_backfill_batch_size,
        )
        refreshed = await _refresh_raters(session, summary["ready"]) if summary["ready"] else 0
    return {
        "ready": len(summary["ready"]),
        "failed": len(summary["failed"]),
        "missing": len(summary["missing"]),
        "refreshed_users": refreshed,
    }


def backfill_dish_embeddings_job(batch_size: int | None = None) -> dict[str, int]:
    """Scheduled sweep over dishes still missing an embedding."""

    async def _run() -> dict[str, int]:
        result = await backfill_dish_embeddings_task(batch_size=batch_size)
        await task_queue.drain()
        return result

    result = asyncio.run(_run())
    logger.info(
        "Embedding backfill: %d ready, %d failed, %d missing",
        result["ready"],
        result["failed"],
        result["missing"],
    )
    return result
