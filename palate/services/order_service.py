"""Checkout and order history."""

from __future__ import annotations

import logging
import uuid
from collections import defaultdict

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from palate.core.config import settings
from palate.models.cart import CartItem
from palate.models.order import Order, OrderStatus
from palate.schema.order import CheckoutRequest
from palate.services import cart_service

logger = logging.getLogger("palate.services.order_service")


async def list_for_user(session: AsyncSession, user_id: uuid.UUID) -> list[Order]:
    """The user's orders, most recent first."""
    result = await session.execute(
        select(Order)
        .where(Order.user_id == user_id)
        .order_by(Order.placed_at.desc(), Order.id)
        .execution_options(populate_existing=True)
    )
    return result.scalars().all()


def _order_line(item: CartItem, instructions: dict[uuid.UUID, str]) -> dict:
    dish = item.dish
    return {
        "dish_id": str(dish.id),
        "dish_name": dish.name,
        "dish_price": dish.price or 0.0,
        "quantity": item.quantity,
        "special_instructions": instructions.get(dish.id),
    }


async def checkout(session: AsyncSession, user_id: uuid.UUID, payload: CheckoutRequest) -> list[Order]:
    """Place one pending order per restaurant in the cart, then empty the cart.

    Prices are copied onto the order, so later menu edits leave it unchanged.
    """
    items = [item for item in await cart_service.list_items(session, user_id) if item.dish and item.dish.restaurant]
    if not items:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cart is empty")
    unavailable = [item.dish.name for item in items if not item.dish.is_available]
    if unavailable:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Dishes no longer available: {', '.join(sorted(unavailable))}",
        )

    by_restaurant: dict[uuid.UUID, list[CartItem]] = defaultdict(list)
    for item in items:
        by_restaurant[item.dish.restaurant_id].append(item)

    delivery_fee = settings.delivery_fee if payload.delivery_address else None
    orders: list[Order] = []
    for restaurant_id, restaurant_items in by_restaurant.items():
        lines = [_order_line(item, payload.special_instructions) for item in restaurant_items]
        total = sum(line["dish_price"] * line["quantity"] for line in lines) + (delivery_fee or 0.0)
        order = Order(
            user_id=user_id,
            restaurant_id=restaurant_id,
            restaurant_name=restaurant_items[0].dish.restaurant.name,
            items=lines,
            status=OrderStatus.PENDING,
            total=round(total, 2),
            delivery_address=payload.delivery_address,
            delivery_fee=delivery_fee,
        )
        session.add(order)
        orders.append(order)

    await cart_service.clear_cart(session, user_id, commit=False)
    await session.commit()
    for order in orders:
        await session.refresh(order)
    logger.info("Placed %d orders for user %s", len(orders), user_id)
    return orders
