"""Dish rating history: one current like/dislike per user and dish."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt

from palate.models.dish import Dish
from palate.models.history import UserDishHistory
from palate.models.user import User
from palate.services.task_queue import task_queue

logger = logging.getLogger("palate.services.history_service")


async def get_user_history(session: AsyncSession, user_id: uuid.UUID) -> list[UserDishHistory]:
    """All of a user's ratings, most recent first."""
    result = await session.execute(
        select(UserDishHistory)
        .where(UserDishHistory.user_id == user_id)
        .order_by(UserDishHistory.rated_at.desc())
    )
    return result.scalars().all()


async def rated_dish_ids(session: AsyncSession, user_id: uuid.UUID) -> set[uuid.UUID]:
    result = await session.execute(select(UserDishHistory.dish_id).where(UserDishHistory.user_id == user_id))
    return set(result.scalars().all())


async def _write_rating(
    session: AsyncSession, user_id: uuid.UUID, dish_id: uuid.UUID, liked: bool
) -> UserDishHistory:
    now = datetime.utcnow()
    result = await session.execute(
        select(UserDishHistory).where(UserDishHistory.user_id == user_id, UserDishHistory.dish_id == dish_id)
    )
    entry = result.scalar_one_or_none()
    if entry:
        logger.info("Updating rating for dish %s for user %s", dish_id, user_id)
        entry.liked = liked
        entry.rated_at = now
    else:
        logger.info("Logging new rating for dish %s for user %s", dish_id, user_id)
        entry = UserDishHistory(user_id=user_id, dish_id=dish_id, liked=liked, rated_at=now)
        session.add(entry)
    # Same transaction as the rating, so a recompute that reads version N sees at least N ratings.
    await session.execute(
        update(User)
        .where(User.id == user_id)
        .values(rating_version=User.rating_version + 1)
        .execution_options(synchronize_session=False)
    )
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise
    await session.refresh(entry)
    return entry


async def log_and_rate(session: AsyncSession, user_id: uuid.UUID, dish_id: uuid.UUID, liked: bool) -> UserDishHistory:
    """Record (or replace) the user's rating and schedule a profile recompute.

    The rating is committed before the recompute is dispatched, and the
    recompute's outcome never affects this call.
    """
    if not await session.get(Dish, dish_id):
        raise ValueError("Dish not found")

    # A concurrent first rating of the same dish loses the insert race; retry as an update.
    async for attempt in AsyncRetrying(
        stop=stop_after_attempt(2),
        retry=retry_if_exception_type(IntegrityError),
        reraise=True,
    ):
        with attempt:
            entry = await _write_rating(session, user_id, dish_id, liked)

    await task_queue.enqueue_profile_recompute(user_id=user_id)
    logger.info("Scheduled profile update for user %s", user_id)
    return entry
