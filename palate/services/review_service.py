"""Dish reviews, the recent-review stream and the "still to review" list."""

from __future__ import annotations

import logging
import uuid

from fastapi import HTTPException, status
from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from palate.models.dish import Dish
from palate.models.history import UserDishHistory
from palate.models.restaurant import Restaurant
from palate.models.review import Review
from palate.schema.restaurant import RestaurantRef
from palate.schema.review import (
    EnrichedReviewRead,
    ReviewAuthor,
    ReviewCreate,
    ReviewedDish,
    UnreviewedDishRead,
)

logger = logging.getLogger("palate.services.review_service")

UNKNOWN_AUTHOR = "Unknown User"


async def write_review(session: AsyncSession, user_id: uuid.UUID, dish_id: uuid.UUID, payload: ReviewCreate) -> Review:
    """Create the user's review of a dish, or replace the one they already wrote."""
    if not await session.get(Dish, dish_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Dish not found")
    result = await session.execute(
        select(Review)
        .where(Review.user_id == user_id, Review.dish_id == dish_id)
        .execution_options(populate_existing=True)
    )
    review = result.scalar_one_or_none()
    comment = (payload.comment or "").strip() or None
    if review:
        review.rating = payload.rating
        review.comment = comment
    else:
        review = Review(user_id=user_id, dish_id=dish_id, rating=payload.rating, comment=comment)
        session.add(review)
    await session.commit()
    await session.refresh(review)
    return review


def enrich(review: Review) -> EnrichedReviewRead | None:
    """Attach author, dish and restaurant; None when any of them is gone."""
    if review.user is None or review.dish is None or review.dish.restaurant is None:
        logger.warning("Skipping review %s due to missing related data", review.id)
        return None
    return EnrichedReviewRead(
        id=review.id,
        user_id=review.user_id,
        dish_id=review.dish_id,
        rating=review.rating,
        comment=review.comment,
        created_at=review.created_at,
        updated_at=review.updated_at,
        user=ReviewAuthor(id=review.user.id, name=review.user.display_name or UNKNOWN_AUTHOR),
        dish=ReviewedDish(id=review.dish.id, name=review.dish.name, restaurant_id=review.dish.restaurant_id),
        restaurant=RestaurantRef.model_validate(review.dish.restaurant),
    )


async def recent_reviews(session: AsyncSession, *, limit: int) -> list[EnrichedReviewRead]:
    """Newest reviews across all users."""
    result = await session.execute(
        select(Review)
        .options(selectinload(Review.user), selectinload(Review.dish).selectinload(Dish.restaurant))
        .order_by(Review.created_at.desc(), Review.id)
        .limit(limit)
        .execution_options(populate_existing=True)
    )
    enriched = (enrich(review) for review in result.scalars().all())
    return [review for review in enriched if review is not None]


async def unreviewed_dishes(session: AsyncSession, user_id: uuid.UUID) -> list[UnreviewedDishRead]:
    """History entries the user has not reviewed yet, most recent first."""
    result = await session.execute(
        select(UserDishHistory.id, UserDishHistory.rated_at, Dish.id, Dish.name, Restaurant.name)
        .join(Dish, Dish.id == UserDishHistory.dish_id)
        .join(Restaurant, Restaurant.id == Dish.restaurant_id)
        .outerjoin(Review, and_(Review.user_id == UserDishHistory.user_id, Review.dish_id == UserDishHistory.dish_id))
        .where(UserDishHistory.user_id == user_id, Review.id.is_(None))
        .order_by(UserDishHistory.rated_at.desc())
    )
    return [
        UnreviewedDishRead(
            history_id=history_id,
            dish_id=dish_id,
            dish_name=dish_name,
            restaurant_name=restaurant_name,
            rated_at=rated_at,
        )
        for history_id, rated_at, dish_id, dish_name, restaurant_name in result.all()
    ]
