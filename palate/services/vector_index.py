"""Nearest-neighbour search over dish embeddings."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Sequence

import numpy as np
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from palate.core.config import settings
from palate.models.dish import Dish, EmbeddingStatus
from palate.utils.vectors import cosine_distances, ensure_dimension

logger = logging.getLogger("palate.services.vector_index")


@dataclass(slots=True, frozen=True)
class Neighbor:
    dish_id: uuid.UUID
    distance: float


@dataclass(slots=True)
class SearchFilters:
    """Optional predicates applied before ranking."""
    restaurant_id: uuid.UUID | None = None
    category: str | None = None
    available_only: bool = False


class VectorIndex:
    """Abstract index interface; results are sorted by ascending distance."""

    async def search(
        self, vector: Sequence[float], limit: int, filters: SearchFilters | None = None
    ) -> list[Neighbor]:
        raise NotImplementedError


class DishVectorIndex(VectorIndex):
    """Exact cosine search over every stored dish embedding."""

    def __init__(self, session: AsyncSession, *, dimension: int | None = None) -> None:
        self._session = session
        self._dimension = dimension or settings.embedding_dimension

    async def search(
        self, vector: Sequence[float], limit: int, filters: SearchFilters | None = None
    ) -> list[Neighbor]:
        if limit <= 0:
            return []
        ensure_dimension(vector, self._dimension, label="query")
        query = select(Dish.id, Dish.embedding).where(Dish.embedding_status == EmbeddingStatus.READY)
        if filters:
            if filters.restaurant_id:
                query = query.where(Dish.restaurant_id == filters.restaurant_id)
            if filters.category:
                query = query.where(Dish.category == filters.category)
            if filters.available_only:
                query = query.where(Dish.is_available.is_(True))
        rows = (await self._session.execute(query.order_by(Dish.id))).all()

        ids: list[uuid.UUID] = []
        vectors: list[list[float]] = []
        for dish_id, embedding in rows:
            if not embedding or len(embedding) != self._dimension:
                logger.warning("Skipping dish %s with unusable embedding", dish_id)
                continue
            ids.append(dish_id)
            vectors.append(embedding)
        if not ids:
            return []

        distances = cosine_distances(vector, np.asarray(vectors, dtype=float))
        order = np.argsort(distances, kind="stable")[:limit]
        return [Neighbor(dish_id=ids[i], distance=float(distances[i])) for i in order]
