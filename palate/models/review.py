"""Written dish reviews with a 1-5 star rating."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from palate.db.base_class import Base
from palate.models.dish import Dish
from palate.models.user import User

MIN_STARS = 1
MAX_STARS = 5


class Review(Base):
    """A user's review of a dish; writing it again replaces the previous one."""
    __tablename__ = "reviews"
    __table_args__ = (
        UniqueConstraint("user_id", "dish_id", name="uq_review_user_dish"),
        CheckConstraint(f"rating BETWEEN {MIN_STARS} AND {MAX_STARS}", name="ck_reviews_rating_range"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    dish_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("dishes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    comment: Mapped[str | None] = mapped_column(String(2000))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow
    )

    user: Mapped[User] = relationship()
    dish: Mapped[Dish] = relationship()
