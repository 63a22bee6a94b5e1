"""Placed orders; line items are a snapshot of the dishes at checkout."""

from __future__ import annotations

import enum
import uuid
from datetime import datetime

from sqlalchemy import DateTime, Enum, Float, ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from palate.db.base_class import JSON_COMPATIBLE, Base


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    READY = "ready"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class Order(Base):
    """One order per restaurant; a multi-restaurant cart checks out as several."""
    __tablename__ = "orders"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    # Kept when the restaurant goes away so order history still renders.
    restaurant_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("restaurants.id", ondelete="SET NULL"))
    restaurant_name: Mapped[str] = mapped_column(String(255), nullable=False)
    # [{dish_id, dish_name, dish_price, quantity, special_instructions}]
    items: Mapped[list[dict]] = mapped_column(JSON_COMPATIBLE, nullable=False, default=list)
    status: Mapped[OrderStatus] = mapped_column(
        Enum(OrderStatus, name="order_status", values_callable=lambda enum_cls: [e.value for e in enum_cls]),
        nullable=False,
        default=OrderStatus.PENDING,
    )
    total: Mapped[float] = mapped_column(Float, nullable=False)
    delivery_address: Mapped[str | None] = mapped_column(String(500))
    delivery_fee: Mapped[float | None] = mapped_column(Float)
    placed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow, index=True)
