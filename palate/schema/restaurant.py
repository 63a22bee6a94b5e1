"""Restaurant schemas."""

from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel, Field

from palate.schema.base import ORMModel, Timestamped


class RestaurantCreate(BaseModel):
    """Payload for registering the caller's restaurant."""
    name: str = Field(min_length=1, max_length=255)
    description: str = ""
    address: str = Field(min_length=1, max_length=500)
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    is_open: bool = True


class RestaurantRead(Timestamped):
    owner_id: UUID
    name: str
    description: str
    address: str
    latitude: float
    longitude: float
    is_open: bool


class RestaurantRef(ORMModel):
    """Just enough of a restaurant to label a dish in a list."""
    id: UUID
    name: str
