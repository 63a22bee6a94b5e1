"""Profile embedding summaries; vectors are summarized, not echoed."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel


class ProfileEmbeddingRead(BaseModel):
    """State of a user's taste embedding."""
    user_id: UUID
    has_embedding: bool
    dimension: int | None = None
    version: int | None = None
    contributing_dishes: int | None = None
    generated_at: datetime | None = None
