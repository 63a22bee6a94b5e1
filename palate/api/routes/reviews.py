from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from palate.api.deps import get_db
from palate.core.config import settings
from palate.schema.review import EnrichedReviewRead
from palate.services import review_service

router = APIRouter()

MAX_RECENT_REVIEWS = 50


@router.get("/recent", response_model=list[EnrichedReviewRead])
async def list_recent_reviews(
    limit: int = Query(settings.recent_reviews_default_limit, ge=1, le=MAX_RECENT_REVIEWS),
    session: AsyncSession = Depends(get_db),
):
    return await review_service.recent_reviews(session, limit=limit)
