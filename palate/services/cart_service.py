"""Per-user cart of dishes waiting to be ordered."""

from __future__ import annotations

import logging
import uuid

from fastapi import HTTPException, status
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from palate.models.cart import CartItem
from palate.models.dish import Dish
from palate.schema.cart import CartLineRead, CartRead
from palate.schema.dish import DishRead
from palate.schema.restaurant import RestaurantRef

logger = logging.getLogger("palate.services.cart_service")


async def list_items(session: AsyncSession, user_id: uuid.UUID) -> list[CartItem]:
    """Cart rows in the order they were added, with dish and restaurant loaded."""
    result = await session.execute(
        select(CartItem)
        .options(selectinload(CartItem.dish).selectinload(Dish.restaurant))
        .where(CartItem.user_id == user_id)
        .order_by(CartItem.added_at, CartItem.id)
        .execution_options(populate_existing=True)
    )
    return result.scalars().all()


async def get_cart(session: AsyncSession, user_id: uuid.UUID) -> CartRead:
    lines: list[CartLineRead] = []
    subtotal = 0.0
    for item in await list_items(session, user_id):
        dish = item.dish
        if dish is None or dish.restaurant is None:
            continue
        lines.append(
            CartLineRead(
                dish_id=dish.id,
                quantity=item.quantity,
                dish=DishRead.model_validate(dish),
                restaurant=RestaurantRef.model_validate(dish.restaurant),
            )
        )
        subtotal += (dish.price or 0.0) * item.quantity
    return CartRead(
        items=lines,
        item_count=sum(line.quantity for line in lines),
        subtotal=round(subtotal, 2),
    )


async def _find_item(session: AsyncSession, user_id: uuid.UUID, dish_id: uuid.UUID) -> CartItem | None:
    result = await session.execute(
        select(CartItem)
        .where(CartItem.user_id == user_id, CartItem.dish_id == dish_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def add_item(session: AsyncSession, user_id: uuid.UUID, dish_id: uuid.UUID) -> CartRead:
    """Add one of the dish, or bump its quantity if it is already in the cart."""
    if not await session.get(Dish, dish_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Dish not found")
    item = await _find_item(session, user_id, dish_id)
    if item:
        item.quantity += 1
    else:
        session.add(CartItem(user_id=user_id, dish_id=dish_id, quantity=1))
    await session.commit()
    logger.info("Cart updated for user %s. Item: %s", user_id, dish_id)
    return await get_cart(session, user_id)


async def update_quantity(session: AsyncSession, user_id: uuid.UUID, dish_id: uuid.UUID, quantity: int) -> CartRead:
    """Set a line's quantity; zero or less removes it, an unknown dish is ignored."""
    if quantity <= 0:
        return await remove_item(session, user_id, dish_id)
    item = await _find_item(session, user_id, dish_id)
    if item is None:
        logger.warning("Item %s not found in cart for user %s", dish_id, user_id)
        return await get_cart(session, user_id)
    item.quantity = quantity
    await session.commit()
    return await get_cart(session, user_id)


async def remove_item(session: AsyncSession, user_id: uuid.UUID, dish_id: uuid.UUID) -> CartRead:
    result = await session.execute(
        delete(CartItem).where(CartItem.user_id == user_id, CartItem.dish_id == dish_id)
    )
    await session.commit()
    if result.rowcount:
        logger.info("Cart item removed for user %s. Item: %s", user_id, dish_id)
    return await get_cart(session, user_id)


async def clear_cart(session: AsyncSession, user_id: uuid.UUID, *, commit: bool = True) -> None:
    await session.execute(delete(CartItem).where(CartItem.user_id == user_id))
    if commit:
        await session.commit()
    logger.info("Cart cleared for user %s", user_id)
