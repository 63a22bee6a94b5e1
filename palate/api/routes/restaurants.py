"""Restaurant registration and menu management endpoints."""

import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from palate.api.deps import get_current_user, get_db
from palate.models.user import User
from palate.schema.dish import DishBatchCreate, DishCreate, DishRead
from palate.schema.restaurant import RestaurantCreate, RestaurantRead
from palate.services import dish_service, restaurant_service

router = APIRouter()


@router.post("", response_model=RestaurantRead, status_code=status.HTTP_201_CREATED)
async def create_restaurant(
    payload: RestaurantCreate,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
):
    """Register the caller's restaurant; the account becomes a business account."""
    return await restaurant_service.create_restaurant(session, current_user, payload)


@router.get("", response_model=list[RestaurantRead])
async def list_restaurants(session: AsyncSession = Depends(get_db)):
    return await restaurant_service.list_restaurants(session)


@router.get("/mine", response_model=RestaurantRead)
async def read_my_restaurant(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
):
    restaurant = await restaurant_service.get_restaurant_for_owner(session, current_user.id)
    if not restaurant:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Restaurant not found")
    return restaurant


@router.get("/{restaurant_id}", response_model=RestaurantRead)
async def read_restaurant(restaurant_id: uuid.UUID, session: AsyncSession = Depends(get_db)):
    return await restaurant_service.get_restaurant(session, restaurant_id)


@router.get("/{restaurant_id}/dishes", response_model=list[DishRead])
async def list_dishes(restaurant_id: uuid.UUID, session: AsyncSession = Depends(get_db)):
    await restaurant_service.get_restaurant(session, restaurant_id)
    return await dish_service.list_for_restaurant(session, restaurant_id)


@router.post("/{restaurant_id}/dishes", response_model=DishRead, status_code=status.HTTP_201_CREATED)
async def create_dish(
    restaurant_id: uuid.UUID,
    payload: DishCreate,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
):
    """Add a dish; its embedding is generated in the background."""
    restaurant = await restaurant_service.get_owned_restaurant(session, restaurant_id, current_user)
    return await dish_service.create_dish(session, restaurant, payload)


@router.post("/{restaurant_id}/dishes/batch", response_model=list[DishRead], status_code=status.HTTP_201_CREATED)
async def create_dishes(
    restaurant_id: uuid.UUID,
    payload: DishBatchCreate,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
):
    """Save dishes extracted from a menu in one request."""
    restaurant = await restaurant_service.get_owned_restaurant(session, restaurant_id, current_user)
    return await dish_service.create_dishes(session, restaurant, payload.dishes)
