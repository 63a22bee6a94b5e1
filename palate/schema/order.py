"""Order schemas."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from palate.models.order import OrderStatus
from palate.schema.base import ORMModel


class CheckoutRequest(BaseModel):
    """Turn the cart into orders; no address means pickup."""
    delivery_address: str | None = Field(default=None, max_length=500)
    special_instructions: dict[UUID, str] = Field(default_factory=dict)


class OrderItemRead(BaseModel):
    dish_id: UUID
    dish_name: str
    dish_price: float
    quantity: int
    special_instructions: str | None = None


class OrderRead(ORMModel):
    id: UUID
    user_id: UUID
    restaurant_id: UUID | None
    restaurant_name: str
    items: list[OrderItemRead]
    status: OrderStatus
    total: float
    delivery_address: str | None = None
    delivery_fee: float | None = None
    placed_at: datetime
