"""Dish recommendations from the user's profile embedding.

Invariants:
- Dishes the user has already rated are never recommended.
- Results are ordered nearest first and never exceed ``limit``.
- A user without a profile embedding gets an empty list, not an error.
"""

from __future__ import annotations

import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from palate.core.config import settings
from palate.models.dish import Dish
from palate.services import dish_service, history_service, profile_embedding_service
from palate.services.vector_index import DishVectorIndex, SearchFilters, VectorIndex

logger = logging.getLogger("palate.services.recommendation_service")


async def recommend(
    session: AsyncSession,
    user_id: uuid.UUID,
    *,
    limit: int | None = None,
    filters: SearchFilters | None = None,
    index: VectorIndex | None = None,
) -> list[Dish]:
    """Return up to ``limit`` unrated dishes closest to the user's profile."""
    if limit is None:
        limit = settings.recommendation_default_limit
    if limit <= 0:
        return []

    profile = await profile_embedding_service.get_profile_embedding(session, user_id)
    if not profile or not profile.embedding:
        logger.info("No profile embedding for user %s; returning no recommendations", user_id)
        return []

    index = index or DishVectorIndex(session)
    # Over-fetch so that filtering out rated dishes still leaves enough candidates.
    neighbors = await index.search(profile.embedding, limit + settings.recommendation_overfetch, filters)
    neighbors = sorted(neighbors, key=lambda neighbor: neighbor.distance)

    rated = await history_service.rated_dish_ids(session, user_id)
    candidate_ids = [neighbor.dish_id for neighbor in neighbors if neighbor.dish_id not in rated]
    dishes = await dish_service.get_dishes_by_ids(session, candidate_ids)

    results: list[Dish] = []
    for dish_id in candidate_ids:
        dish = dishes.get(dish_id)
        if dish is None:
            continue
        results.append(dish)
        if len(results) >= limit:
            break
    logger.info(
        "Recommended %d dishes for user %s (%d candidates, %d rated)",
        len(results),
        user_id,
        len(neighbors),
        len(rated),
    )
    return results
