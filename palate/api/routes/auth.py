from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from palate.api.deps import get_db
from palate.core.config import settings
from palate.core.security import create_access_token
from palate.models.user import User
from palate.schema.auth import Token
from palate.schema.user import UserCreate, UserLogin, UserRead
from palate.services import user_service

router = APIRouter()

ACCESS_COOKIE_NAME = "access_token"


def set_auth_cookie(response: Response, access_token: str) -> None:
    response.set_cookie(
        ACCESS_COOKIE_NAME,
        access_token,
        max_age=settings.access_token_expires_minutes * 60,
        httponly=True,
        samesite="lax",
        secure=settings.environment.lower() == "production",
        path="/",
    )


def _token_response(user: User) -> Token:
    access = create_access_token(str(user.id), role=user.role.value)
    return Token(access_token=access, user=UserRead.model_validate(user))


@router.post("/register", response_model=Token, status_code=status.HTTP_201_CREATED)
async def register(payload: UserCreate, response: Response, session: AsyncSession = Depends(get_db)) -> Token:
    user = await user_service.create_user(
        session, email=payload.email, password=payload.password, display_name=payload.display_name
    )
    token = _token_response(user)
    set_auth_cookie(response, token.access_token)
    return token


@router.post("/login", response_model=Token)
async def login(payload: UserLogin, response: Response, session: AsyncSession = Depends(get_db)) -> Token:
    user = await user_service.authenticate_user(session, payload.email, payload.password)
    token = _token_response(user)
    set_auth_cookie(response, token.access_token)
    return token


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(response: Response) -> Response:
    response.delete_cookie(ACCESS_COOKIE_NAME, path="/")
    response.status_code = status.HTTP_204_NO_CONTENT
    return response
