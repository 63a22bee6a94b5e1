"""User request/response schemas."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from palate.models.user import UserRole
from palate.schema.base import ORMModel
from palate.schema.taste import TasteProfileInput, TasteVector


class UserCreate(BaseModel):
    """Payload for registering a new user."""
    email: EmailStr
    password: str = Field(min_length=8)
    display_name: str | None = None


class UserLogin(BaseModel):
    """Payload for user login requests."""
    email: EmailStr
    password: str


class UserRead(ORMModel):
    """User profile fields exposed in API responses."""
    id: UUID
    email: EmailStr
    display_name: str | None = None
    role: UserRole
    taste_profile: TasteVector | None = None
    created_at: datetime


class UserUpdate(BaseModel):
    """Partial update of the current user's profile."""
    display_name: str | None = None
    role: UserRole | None = None
    taste_profile: TasteProfileInput | None = None
