"""User model with authentication, taste vector, and profile embedding."""

from __future__ import annotations

import enum
import typing
import uuid
from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, Integer, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from palate.db.base_class import JSON_COMPATIBLE, Base

if typing.TYPE_CHECKING:  # pragma: no cover
    from palate.models.history import UserDishHistory
    from palate.models.restaurant import Restaurant


class UserRole(str, enum.Enum):
    """Whether the account orders food or runs a restaurant."""
    CONSUMER = "consumer"
    BUSINESS = "business"


class User(Base):
    """Primary user account record."""
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    display_name: Mapped[str | None] = mapped_column(String(255))
    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole, name="user_role", values_callable=lambda enum_cls: [e.value for e in enum_cls]),
        nullable=False,
        default=UserRole.CONSUMER,
    )
    # Canonical [0, 1] taste axes; see palate.schema.taste.TasteVector.
    taste_profile: Mapped[dict | None] = mapped_column(JSON_COMPATIBLE)
    # Bumped on every rating write; profile recomputes snapshot it as their version.
    rating_version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow
    )

    restaurant: Mapped["Restaurant | None"] = relationship(back_populates="owner", uselist=False)
    history: Mapped[list["UserDishHistory"]] = relationship(back_populates="user", cascade="all, delete-orphan")
    profile_embedding: Mapped["UserProfileEmbedding | None"] = relationship(
        back_populates="user", cascade="all, delete-orphan", uselist=False
    )


class UserProfileEmbedding(Base):
    """Weighted centroid of the embeddings of dishes a user has rated."""
    __tablename__ = "user_profile_embeddings"
    __table_args__ = (UniqueConstraint("user_id", name="uq_user_profile_embedding"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    embedding: Mapped[list[float]] = mapped_column(JSON_COMPATIBLE, nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    contributing_dishes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    generated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow
    )

    user: Mapped["User"] = relationship(back_populates="profile_embedding")
