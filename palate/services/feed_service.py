"""The personal feed: recent reviews interleaved with taste recommendations."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from palate.core.config import settings
from palate.models.user import User
from palate.schema.dish import DishRead
from palate.schema.feed import FeedItem, FeedItemType
from palate.services import recommendation_service, review_service

logger = logging.getLogger("palate.services.feed_service")


def _utc_naive(value: datetime) -> datetime:
    # SQLite hands back naive UTC timestamps, Postgres aware ones.
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


async def get_feed(session: AsyncSession, user: User) -> list[FeedItem]:
    """Newest first; recommendations are stamped with the time the feed was built."""
    items = [
        FeedItem(
            id=str(review.id),
            type=FeedItemType.DISH_REVIEW,
            timestamp=_utc_naive(review.created_at),
            review=review,
        )
        for review in await review_service.recent_reviews(session, limit=settings.feed_review_limit)
    ]

    if settings.feed_recommendation_count > 0:
        generated_at = datetime.utcnow()
        dishes = await recommendation_service.recommend(session, user.id, limit=settings.feed_recommendation_count)
        items.extend(
            FeedItem(
                id=f"recommendation:{dish.id}",
                type=FeedItemType.TASTE_RECOMMENDATION,
                timestamp=generated_at,
                dish=DishRead.model_validate(dish),
            )
            for dish in dishes
        )

    items.sort(key=lambda item: item.timestamp, reverse=True)
    logger.info("Returning %d feed items for user %s", len(items), user.id)
    return items
