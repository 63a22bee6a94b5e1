import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from palate.api.deps import get_current_user, get_db
from palate.models.user import User
from palate.schema.dish import DishRead, DishUpdate, TasteMatchRead
from palate.schema.review import ReviewCreate, ReviewRead
from palate.services import dish_service, restaurant_service, review_service, taste_service

router = APIRouter()


@router.get("/{dish_id}", response_model=DishRead)
async def read_dish(dish_id: uuid.UUID, session: AsyncSession = Depends(get_db)):
    return await dish_service.get_dish(session, dish_id)


@router.patch("/{dish_id}", response_model=DishRead)
async def update_dish(
    dish_id: uuid.UUID,
    payload: DishUpdate,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
):
    """Edit a dish; changing its name or description re-embeds it."""
    dish = await dish_service.get_dish(session, dish_id)
    await restaurant_service.get_owned_restaurant(session, dish.restaurant_id, current_user)
    return await dish_service.update_dish(session, dish, payload)


@router.get("/{dish_id}/match", response_model=TasteMatchRead)
async def read_taste_match(
    dish_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> TasteMatchRead:
    """How closely the dish's flavor matches the caller's taste profile."""
    dish = await dish_service.get_dish(session, dish_id)
    return taste_service.dish_match(current_user, dish)


@router.put("/{dish_id}/review", response_model=ReviewRead)
async def write_review(
    dish_id: uuid.UUID,
    payload: ReviewCreate,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
):
    """Star rating and comment; writing again replaces the caller's earlier review."""
    return await review_service.write_review(session, current_user.id, dish_id, payload)
