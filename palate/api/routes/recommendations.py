import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from palate.api.deps import get_current_user, get_db
from palate.core.config import settings
from palate.models.user import User
from palate.schema.dish import DishRead
from palate.services import recommendation_service
from palate.services.vector_index import SearchFilters

router = APIRouter()


@router.get("", response_model=list[DishRead])
async def list_recommendations(
    limit: int = Query(settings.recommendation_default_limit, ge=1, le=settings.recommendation_max_limit),
    restaurant_id: uuid.UUID | None = None,
    category: str | None = None,
    available_only: bool = False,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
):
    """Unrated dishes closest to the caller's taste embedding, nearest first."""
    filters = SearchFilters(restaurant_id=restaurant_id, category=category, available_only=available_only)
    return await recommendation_service.recommend(session, current_user.id, limit=limit, filters=filters)
