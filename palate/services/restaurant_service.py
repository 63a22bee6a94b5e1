"""Restaurant registration and ownership checks."""

from __future__ import annotations

import uuid

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from palate.models.restaurant import Restaurant
from palate.models.user import User, UserRole
from palate.schema.restaurant import RestaurantCreate


async def list_restaurants(session: AsyncSession) -> list[Restaurant]:
    result = await session.execute(select(Restaurant).order_by(Restaurant.name))
    return result.scalars().all()


async def get_restaurant(session: AsyncSession, restaurant_id: uuid.UUID) -> Restaurant:
    restaurant = await session.get(Restaurant, restaurant_id)
    if not restaurant:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Restaurant not found")
    return restaurant


async def get_restaurant_for_owner(session: AsyncSession, owner_id: uuid.UUID) -> Restaurant | None:
    result = await session.execute(select(Restaurant).where(Restaurant.owner_id == owner_id))
    return result.scalar_one_or_none()


async def get_owned_restaurant(session: AsyncSession, restaurant_id: uuid.UUID, user: User) -> Restaurant:
    """Fetch a restaurant the user owns, 403 otherwise."""
    restaurant = await get_restaurant(session, restaurant_id)
    if restaurant.owner_id != user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not the owner of this restaurant")
    return restaurant


async def create_restaurant(session: AsyncSession, owner: User, payload: RestaurantCreate) -> Restaurant:
    """Register the owner's restaurant and switch the account to business mode."""
    if await get_restaurant_for_owner(session, owner.id):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User already has a restaurant")
    restaurant = Restaurant(owner_id=owner.id, **payload.model_dump())
    session.add(restaurant)
    owner.role = UserRole.BUSINESS
    await session.commit()
    await session.refresh(restaurant)
    return restaurant
