"""User endpoints for profiles, rating history and the taste embedding."""

import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from palate.api.deps import get_current_user, get_db
from palate.models.user import User
from palate.schema.history import RatingCreate, RatingRead
from palate.schema.profile_embedding import ProfileEmbeddingRead
from palate.schema.review import UnreviewedDishRead
from palate.schema.user import UserRead, UserUpdate
from palate.services import history_service, profile_embedding_service, review_service, user_service

router = APIRouter()


@router.get("/me", response_model=UserRead)
async def read_current_user(current_user: User = Depends(get_current_user)) -> User:
    """Return the current authenticated user."""
    return current_user


@router.patch("/me", response_model=UserRead)
async def update_current_user(
    payload: UserUpdate,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> User:
    """Update display name, role, or taste profile."""
    return await user_service.update_user(session, current_user, payload)


@router.put("/me/history/{dish_id}", response_model=RatingRead)
async def rate_dish(
    dish_id: uuid.UUID,
    payload: RatingCreate,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
):
    """Like or dislike a dish; the taste embedding refreshes in the background."""
    try:
        return await history_service.log_and_rate(session, current_user.id, dish_id, payload.liked)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@router.get("/me/history", response_model=list[RatingRead])
async def list_history(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
):
    return await history_service.get_user_history(session, current_user.id)


@router.get("/me/history/unreviewed", response_model=list[UnreviewedDishRead])
async def list_unreviewed_dishes(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
):
    """Dishes the caller has eaten but not written a review for."""
    return await review_service.unreviewed_dishes(session, current_user.id)


async def _profile_summary(session: AsyncSession, user_id: uuid.UUID) -> ProfileEmbeddingRead:
    profile = await profile_embedding_service.get_profile_embedding(session, user_id)
    if not profile or not profile.embedding:
        return ProfileEmbeddingRead(user_id=user_id, has_embedding=False)
    return ProfileEmbeddingRead(
        user_id=user_id,
        has_embedding=True,
        dimension=len(profile.embedding),
        version=profile.version,
        contributing_dishes=profile.contributing_dishes,
        generated_at=profile.generated_at,
    )


@router.get("/me/profile-embedding", response_model=ProfileEmbeddingRead)
async def read_profile_embedding(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> ProfileEmbeddingRead:
    return await _profile_summary(session, current_user.id)


@router.post("/me/profile-embedding/refresh", response_model=ProfileEmbeddingRead)
async def refresh_profile_embedding(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> ProfileEmbeddingRead:
    """Recompute the taste embedding now instead of waiting for the queue."""
    user_id = current_user.id
    await profile_embedding_service.recompute_profile(session, user_id)
    return await _profile_summary(session, user_id)
