"""Cart schemas."""

from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel

from palate.schema.dish import DishRead
from palate.schema.restaurant import RestaurantRef


class CartItemAdd(BaseModel):
    dish_id: UUID


class CartItemUpdate(BaseModel):
    """New quantity for a line; zero or less removes it."""
    quantity: int


class CartLineRead(BaseModel):
    dish_id: UUID
    quantity: int
    dish: DishRead
    restaurant: RestaurantRef


class CartRead(BaseModel):
    items: list[CartLineRead]
    item_count: int
    subtotal: float
