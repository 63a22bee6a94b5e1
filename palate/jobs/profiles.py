"""Profile embedding recompute jobs."""

from __future__ import annotations

import asyncio
import logging
import uuid

from palate.db.session import async_session
from palate.services import profile_embedding_service

logger = logging.getLogger("palate.jobs.profiles")


async def recompute_profile_task(*, user_id: str) -> dict[str, object]:
    """Rebuild one user's profile embedding in a fresh session."""
    async with async_session() as session:
        embedding = await profile_embedding_service.recompute_profile(session, uuid.UUID(user_id))
    return {"user_id": user_id, "updated": embedding is not None}


def recompute_profile_job(user_id: str) -> dict[str, object]:
    """RQ entrypoint for ``recompute_profile_task``."""
    result = asyncio.run(recompute_profile_task(user_id=user_id))
    logger.info("Profile recompute for user %s finished (updated=%s)", user_id, result["updated"])
    return result
