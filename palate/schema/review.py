"""Review schemas, including the enriched shape used by the feed."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from palate.models.review import MAX_STARS, MIN_STARS
from palate.schema.base import ORMModel
from palate.schema.restaurant import RestaurantRef


class ReviewCreate(BaseModel):
    rating: int = Field(ge=MIN_STARS, le=MAX_STARS)
    comment: str | None = Field(default=None, max_length=2000)


class ReviewRead(ORMModel):
    id: UUID
    user_id: UUID
    dish_id: UUID
    rating: int
    comment: str | None = None
    created_at: datetime
    updated_at: datetime


class ReviewAuthor(BaseModel):
    id: UUID
    name: str


class ReviewedDish(BaseModel):
    id: UUID
    name: str
    restaurant_id: UUID


class EnrichedReviewRead(ReviewRead):
    """A review with the author, dish and restaurant it refers to."""
    user: ReviewAuthor
    dish: ReviewedDish
    restaurant: RestaurantRef


class UnreviewedDishRead(BaseModel):
    """A dish from the user's history they have not written a review for yet."""
    history_id: UUID
    dish_id: UUID
    dish_name: str
    restaurant_name: str
    rated_at: datetime
