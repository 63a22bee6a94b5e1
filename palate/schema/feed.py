"""Personal feed schemas."""

from __future__ import annotations

import enum
from datetime import datetime

from pydantic import BaseModel

from palate.schema.dish import DishRead
from palate.schema.review import EnrichedReviewRead


class FeedItemType(str, enum.Enum):
    DISH_REVIEW = "dish_review"
    TASTE_RECOMMENDATION = "taste_recommendation"


class FeedItem(BaseModel):
    """One card in the feed; ``review`` or ``dish`` is set depending on ``type``."""
    id: str
    type: FeedItemType
    timestamp: datetime
    review: EnrichedReviewRead | None = None
    dish: DishRead | None = None
