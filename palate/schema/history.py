"""Rating history schemas."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from palate.schema.base import ORMModel


class RatingCreate(BaseModel):
    """Like or dislike for a dish the user has eaten."""
    liked: bool


class RatingRead(ORMModel):
    id: UUID
    user_id: UUID
    dish_id: UUID
    liked: bool
    rated_at: datetime
