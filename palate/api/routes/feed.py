from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from palate.api.deps import get_current_user, get_db
from palate.models.user import User
from palate.schema.feed import FeedItem
from palate.services import feed_service

router = APIRouter()


@router.get("", response_model=list[FeedItem])
async def read_feed(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
):
    """Recent reviews from everyone plus a few dishes picked for the caller."""
    return await feed_service.get_feed(session, current_user)
