"""The caller's cart."""

import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from palate.api.deps import get_current_user, get_db
from palate.models.user import User
from palate.schema.cart import CartItemAdd, CartItemUpdate, CartRead
from palate.services import cart_service

router = APIRouter()


@router.get("", response_model=CartRead)
async def read_cart(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> CartRead:
    return await cart_service.get_cart(session, current_user.id)


@router.post("/items", response_model=CartRead)
async def add_cart_item(
    payload: CartItemAdd,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> CartRead:
    return await cart_service.add_item(session, current_user.id, payload.dish_id)


@router.patch("/items/{dish_id}", response_model=CartRead)
async def update_cart_item(
    dish_id: uuid.UUID,
    payload: CartItemUpdate,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> CartRead:
    return await cart_service.update_quantity(session, current_user.id, dish_id, payload.quantity)


@router.delete("/items/{dish_id}", response_model=CartRead)
async def remove_cart_item(
    dish_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> CartRead:
    return await cart_service.remove_item(session, current_user.id, dish_id)


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def clear_cart(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> None:
    await cart_service.clear_cart(session, current_user.id)
