from fastapi import Cookie, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from palate.core.config import settings
from palate.core.security import decode_access_token
from palate.db.session import get_session
from palate.models.user import User
from palate.services import user_service

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.api_prefix}/auth/login", auto_error=False)


async def get_db() -> AsyncSession:
    async for session in get_session():
        yield session


def _credentials_error(detail: str = "Invalid token") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def bearer_or_cookie(
    token: str | None = Depends(oauth2_scheme),
    access_token_cookie: str | None = Cookie(default=None, alias="access_token"),
) -> str | None:
    """Prefer the Authorization header; fall back to the session cookie set at login."""
    return token or access_token_cookie


async def resolve_access_token(session: AsyncSession, token: str) -> User | None:
    """Return the user an access token belongs to, or None when it does not verify."""
    claims = decode_access_token(token)
    if claims is None:
        return None
    return await user_service.get_user_by_id(session, claims.user_id)


async def get_current_user(
    session: AsyncSession = Depends(get_db),
    token: str | None = Depends(bearer_or_cookie),
) -> User:
    if not token:
        raise _credentials_error("Not authenticated")
    user = await resolve_access_token(session, token)
    if user is None:
        raise _credentials_error()
    return user


async def get_optional_current_user(
    session: AsyncSession = Depends(get_db),
    token: str | None = Depends(bearer_or_cookie),
) -> User | None:
    if not token:
        return None
    return await resolve_access_token(session, token)
