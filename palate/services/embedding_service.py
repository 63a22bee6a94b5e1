"""Dish semantic embedding generation and backfill.

Generation is best effort: provider failures are logged and recorded on the
dish, never raised to the caller. Retryable failures are picked up again by
``backfill_embeddings``.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from palate.embedding.client import BaseEmbeddingClient, EmbeddingError
from palate.models.dish import Dish, EmbeddingStatus

logger = logging.getLogger("palate.services.embedding_service")

BACKFILL_STATUSES = (EmbeddingStatus.PENDING, EmbeddingStatus.FAILED_RETRYABLE)
MAX_ERROR_LENGTH = 1000


def build_dish_text(name: str, description: str | None = None) -> str:
    """Text embedded for a dish: ``name`` or ``name: description``."""
    if description and description.strip():
        return f"{name}: {description.strip()}"
    return name


async def generate_dish_embedding(
    session: AsyncSession, dish_id: uuid.UUID, client: BaseEmbeddingClient
) -> Dish | None:
    """Embed a dish's current text and store the vector on it.

    Returns the dish (whatever its resulting status), or None if it no longer exists.
    """
    dish = await session.get(Dish, dish_id, populate_existing=True)
    if not dish:
        logger.warning("Dish %s not found; skipping embedding", dish_id)
        return None

    text = build_dish_text(dish.name, dish.description)
    logger.info("Generating embedding for dish %s: %r", dish_id, text[:50])
    vector: list[float] | None = None
    failure: EmbeddingError | None = None
    try:
        vector = await client.embed(text)
    except EmbeddingError as exc:
        failure = exc

    # The dish may have been edited or deleted while the provider call was in flight.
    dish = await session.get(Dish, dish_id, populate_existing=True)
    if dish is None:
        logger.warning("Dish %s was deleted during embedding; discarding result", dish_id)
        return None

    if failure is not None:
        dish.embedding_status = EmbeddingStatus.FAILED_RETRYABLE if failure.retryable else EmbeddingStatus.FAILED
        dish.embedding_error = str(failure)[:MAX_ERROR_LENGTH]
        await session.commit()
        logger.error(
            "Failed to generate embedding for dish %s (%s): %s",
            dish_id,
            "retryable" if failure.retryable else "fatal",
            failure,
        )
        return dish

    if build_dish_text(dish.name, dish.description) != text:
        logger.info("Dish %s text changed during embedding; discarding stale vector", dish_id)
        return dish

    dish.embedding = vector
    dish.embedding_status = EmbeddingStatus.READY
    dish.embedding_model = client.model
    dish.embedding_error = None
    dish.embedded_at = datetime.utcnow()
    await session.commit()
    logger.info("Saved embedding for dish %s", dish_id)
    return dish


async def list_backfill_candidates(session: AsyncSession, *, limit: int) -> list[uuid.UUID]:
    """Dishes still waiting for an embedding, oldest first."""
    result = await session.execute(
        select(Dish.id)
        .where(Dish.embedding_status.in_(BACKFILL_STATUSES))
        .order_by(Dish.updated_at.asc(), Dish.id)
        .limit(limit)
    )
    return list(result.scalars().all())


async def backfill_embeddings(
    session: AsyncSession, client: BaseEmbeddingClient, *, batch_size: int
) -> dict[str, list[uuid.UUID]]:
    """Embed up to ``batch_size`` pending or retryable dishes, one at a time."""
    summary: dict[str, list[uuid.UUID]] = {"ready": [], "failed": [], "missing": []}
    for dish_id in await list_backfill_candidates(session, limit=batch_size):
        dish = await generate_dish_embedding(session, dish_id, client)
        if dish is None:
            summary["missing"].append(dish_id)
        elif dish.embedding_status == EmbeddingStatus.READY:
            summary["ready"].append(dish_id)
        else:
            summary["failed"].append(dish_id)
    return summary
