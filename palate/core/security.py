"""Password hashing and the access tokens issued at register/login."""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from .config import settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

ACCESS_TOKEN_TYPE = "access"


@dataclass(frozen=True)
class AccessClaims:
    user_id: str
    role: str | None
    expires_at: datetime


def create_access_token(subject: str, *, role: str | None = None, ttl: timedelta | None = None) -> str:
    """Sign an access token for a user id; the role claim lets clients pick consumer or business views."""
    now = datetime.utcnow()
    expires_at = now + (ttl or timedelta(minutes=settings.access_token_expires_minutes))
    payload: Dict[str, Any] = {"sub": subject, "type": ACCESS_TOKEN_TYPE, "iat": now, "exp": expires_at}
    if role:
        payload["role"] = role
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def decode_token(token: str) -> Optional[Dict[str, Any]]:
    """Return the verified payload, or None for a bad signature or an expired token."""
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None


def decode_access_token(token: str) -> AccessClaims | None:
    payload = decode_token(token)
    if not payload or payload.get("type") != ACCESS_TOKEN_TYPE or not payload.get("sub"):
        return None
    return AccessClaims(
        user_id=str(payload["sub"]),
        role=payload.get("role"),
        expires_at=datetime.utcfromtimestamp(payload["exp"]),
    )
