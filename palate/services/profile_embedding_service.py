"""User profile embedding aggregation.

Invariants:
- The profile is the weighted mean of the embeddings of rated dishes that
  have one; dishes without an embedding count neither in the sum nor in the
  divisor.
- Nothing is written when no rated dish has an embedding.
- Writes are compare-and-swap on ``version`` (the user's ``rating_version``
  when the recompute started): a recompute never overwrites a profile built
  from a newer rating history.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt

from palate.core.config import settings
from palate.models.user import User, UserProfileEmbedding
from palate.services import dish_service, history_service
from palate.utils.vectors import ensure_dimension, weighted_centroid

logger = logging.getLogger("palate.services.profile_embedding_service")


def rating_weight(liked: bool) -> float:
    return settings.profile_liked_weight if liked else settings.profile_disliked_weight


async def get_profile_embedding(session: AsyncSession, user_id: uuid.UUID) -> UserProfileEmbedding | None:
    result = await session.execute(
        select(UserProfileEmbedding)
        .where(UserProfileEmbedding.user_id == user_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def recompute_profile(session: AsyncSession, user_id: uuid.UUID) -> list[float] | None:
    """Rebuild the user's profile embedding from their full rating history.

    Returns the stored vector, or None when nothing was written (no usable
    embeddings, unknown user, or a newer profile already stored).
    """
    # Read the version before the history so the history is at least that new.
    version = await session.scalar(select(User.rating_version).where(User.id == user_id))
    if version is None:
        logger.warning("User %s not found; skipping profile update", user_id)
        return None

    history = await history_service.get_user_history(session, user_id)
    if not history:
        logger.info("User %s has no history, skipping profile update", user_id)
        return None

    dishes = await dish_service.get_dishes_by_ids(session, [entry.dish_id for entry in history])
    vectors: list[list[float]] = []
    weights: list[float] = []
    for entry in history:
        dish = dishes.get(entry.dish_id)
        if dish is None or not dish.embedding:
            continue
        vectors.append(dish.embedding)
        weights.append(rating_weight(entry.liked))

    centroid = weighted_centroid(vectors, weights, settings.embedding_dimension)
    if centroid is None:
        logger.info("No valid embeddings found for dishes rated by user %s; skipping profile update", user_id)
        return None

    embedding = centroid.tolist()
    stored = await store_profile_embedding(
        session, user_id, embedding, version=version, contributing_dishes=len(vectors)
    )
    if not stored:
        return None
    logger.info("Updated profile embedding for user %s from %d dishes (version %d)", user_id, len(vectors), version)
    return embedding


async def store_profile_embedding(
    session: AsyncSession,
    user_id: uuid.UUID,
    embedding: list[float],
    *,
    version: int,
    contributing_dishes: int,
) -> bool:
    """Persist ``embedding`` unless a profile with a newer version is stored.

    Returns True when written.
    """
    ensure_dimension(embedding, settings.embedding_dimension, label="profile embedding")
    async for attempt in AsyncRetrying(
        stop=stop_after_attempt(2),
        retry=retry_if_exception_type(IntegrityError),
        reraise=True,
    ):
        with attempt:
            return await _compare_and_swap(
                session, user_id, embedding, version=version, contributing_dishes=contributing_dishes
            )
    return False


async def _compare_and_swap(
    session: AsyncSession,
    user_id: uuid.UUID,
    embedding: list[float],
    *,
    version: int,
    contributing_dishes: int,
) -> bool:
    now = datetime.utcnow()
    result = await session.execute(
        update(UserProfileEmbedding)
        .where(UserProfileEmbedding.user_id == user_id, UserProfileEmbedding.version <= version)
        .values(
            embedding=embedding,
            version=version,
            contributing_dishes=contributing_dishes,
            generated_at=now,
            updated_at=now,
        )
        .execution_options(synchronize_session=False)
    )
    if result.rowcount:
        await session.commit()
        return True

    stored_version = await session.scalar(
        select(UserProfileEmbedding.version).where(UserProfileEmbedding.user_id == user_id)
    )
    if stored_version is not None:
        await session.commit()
        logger.info(
            "Discarding stale profile for user %s (version %d < stored %d)", user_id, version, stored_version
        )
        return False

    session.add(
        UserProfileEmbedding(
            user_id=user_id,
            embedding=embedding,
            version=version,
            contributing_dishes=contributing_dishes,
            generated_at=now,
        )
    )
    try:
        await session.commit()
    except IntegrityError:
        # Another recompute inserted first; the retry re-runs the conditional update.
        await session.rollback()
        raise
    return True
