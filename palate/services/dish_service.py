"""Dish CRUD and embedding scheduling.

Invariants:
- A dish whose name or description changes loses its embedding until it is
  regenerated; the stored vector always describes the current text.
"""

from __future__ import annotations

import logging
import uuid
from typing import Iterable

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from palate.models.dish import Dish, EmbeddingStatus
from palate.models.history import UserDishHistory
from palate.models.restaurant import Restaurant
from palate.schema.dish import DishCreate, DishUpdate
from palate.services.task_queue import task_queue

logger = logging.getLogger("palate.services.dish_service")


async def get_dish(session: AsyncSession, dish_id: uuid.UUID) -> Dish:
    dish = await session.get(Dish, dish_id, populate_existing=True)
    if not dish:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Dish not found")
    return dish


async def list_for_restaurant(session: AsyncSession, restaurant_id: uuid.UUID) -> list[Dish]:
    result = await session.execute(
        select(Dish)
        .where(Dish.restaurant_id == restaurant_id)
        .order_by(Dish.created_at.desc())
        .execution_options(populate_existing=True)
    )
    return result.scalars().all()


async def get_dishes_by_ids(session: AsyncSession, dish_ids: Iterable[uuid.UUID]) -> dict[uuid.UUID, Dish]:
    """Batch fetch; ids that no longer exist are simply absent from the result."""
    ids = list(dict.fromkeys(dish_ids))
    if not ids:
        return {}
    result = await session.execute(select(Dish).where(Dish.id.in_(ids)).execution_options(populate_existing=True))
    return {dish.id: dish for dish in result.scalars().all()}


async def list_rater_ids(session: AsyncSession, dish_id: uuid.UUID) -> list[uuid.UUID]:
    """Users holding a rating for the dish."""
    result = await session.execute(
        select(UserDishHistory.user_id).where(UserDishHistory.dish_id == dish_id).distinct()
    )
    return list(result.scalars().all())


def _build_dish(restaurant: Restaurant, payload: DishCreate) -> Dish:
    return Dish(
        restaurant_id=restaurant.id,
        name=payload.name.strip(),
        description=(payload.description or "").strip() or None,
        price=payload.price,
        category=payload.category,
        dietary_flags=list(payload.dietary_flags),
        is_available=payload.is_available,
        taste_profile=payload.taste_profile.to_vector().model_dump() if payload.taste_profile else None,
        embedding_status=EmbeddingStatus.PENDING,
    )


async def create_dish(session: AsyncSession, restaurant: Restaurant, payload: DishCreate) -> Dish:
    """Create a dish and schedule its embedding."""
    dish = _build_dish(restaurant, payload)
    session.add(dish)
    await session.commit()
    await session.refresh(dish)
    await task_queue.enqueue_dish_embedding(dish_id=dish.id)
    return dish


async def create_dishes(session: AsyncSession, restaurant: Restaurant, payloads: list[DishCreate]) -> list[Dish]:
    """Save a batch of dishes (e.g. extracted from a menu) and embed each one."""
    dishes = [_build_dish(restaurant, payload) for payload in payloads]
    session.add_all(dishes)
    await session.commit()
    for dish in dishes:
        await session.refresh(dish)
    logger.info("Saved %d dishes for restaurant %s", len(dishes), restaurant.id)
    for dish in dishes:
        await task_queue.enqueue_dish_embedding(dish_id=dish.id)
    return dishes


async def update_dish(session: AsyncSession, dish: Dish, payload: DishUpdate) -> Dish:
    """Apply a partial update; text changes reset and regenerate the embedding."""
    fields = payload.model_fields_set
    text_changed = False
    if "name" in fields and payload.name is not None and payload.name.strip() != dish.name:
        dish.name = payload.name.strip()
        text_changed = True
    if "description" in fields:
        description = (payload.description or "").strip() or None
        if description != dish.description:
            dish.description = description
            text_changed = True
    if "price" in fields:
        dish.price = payload.price
    if "category" in fields:
        dish.category = payload.category
    if "dietary_flags" in fields and payload.dietary_flags is not None:
        dish.dietary_flags = list(payload.dietary_flags)
    if "is_available" in fields and payload.is_available is not None:
        dish.is_available = payload.is_available
    if "taste_profile" in fields:
        dish.taste_profile = payload.taste_profile.to_vector().model_dump() if payload.taste_profile else None
    if text_changed:
        dish.embedding = None
        dish.embedding_status = EmbeddingStatus.PENDING
        dish.embedding_error = None
        dish.embedded_at = None
    await session.commit()
    await session.refresh(dish)
    if text_changed:
        await task_queue.enqueue_dish_embedding(dish_id=dish.id)
    return dish
