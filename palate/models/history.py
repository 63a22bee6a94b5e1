"""Per-user dish rating history."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from palate.db.base_class import Base
from palate.models.dish import Dish
from palate.models.user import User


class UserDishHistory(Base):
    """The current like/dislike a user holds for a dish; one row per pair."""
    __tablename__ = "user_dish_history"
    __table_args__ = (UniqueConstraint("user_id", "dish_id", name="uq_user_dish"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    dish_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("dishes.id", ondelete="CASCADE"), nullable=False)
    liked: Mapped[bool] = mapped_column(Boolean, nullable=False)
    rated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)

    user: Mapped[User] = relationship(back_populates="history")
    dish: Mapped[Dish] = relationship(back_populates="ratings")
