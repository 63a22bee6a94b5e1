"""Dish schemas, including batches extracted from a menu."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from palate.models.dish import EmbeddingStatus
from palate.schema.base import Timestamped
from palate.schema.taste import TasteProfileInput, TasteVector


class DishCreate(BaseModel):
    """Payload for adding a dish to a restaurant."""
    name: str = Field(min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=2000)
    price: float | None = Field(default=None, ge=0)
    category: str | None = Field(default=None, max_length=120)
    dietary_flags: list[str] = Field(default_factory=list)
    is_available: bool = True
    taste_profile: TasteProfileInput | None = None


class DishBatchCreate(BaseModel):
    """Dishes extracted from a menu upload, saved in one go."""
    dishes: list[DishCreate] = Field(min_length=1, max_length=200)


class DishUpdate(BaseModel):
    """Partial dish update; omitted fields are left unchanged."""
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=2000)
    price: float | None = Field(default=None, ge=0)
    category: str | None = Field(default=None, max_length=120)
    dietary_flags: list[str] | None = None
    is_available: bool | None = None
    taste_profile: TasteProfileInput | None = None


class DishRead(Timestamped):
    """Dish fields exposed to clients; the raw embedding is never returned."""
    restaurant_id: UUID
    name: str
    description: str | None = None
    price: float | None = None
    category: str | None = None
    dietary_flags: list[str] = Field(default_factory=list)
    is_available: bool
    taste_profile: TasteVector | None = None
    embedding_status: EmbeddingStatus
    embedded_at: datetime | None = None


class TasteMatchRead(BaseModel):
    """Similarity between the caller's taste vector and a dish's."""
    dish_id: UUID
    similarity: float | None = None
    match_percent: int | None = None
