"""Dish catalog model with its semantic embedding and taste vector."""

from __future__ import annotations

import enum
import typing
import uuid
from datetime import datetime

from sqlalchemy import DateTime, Enum, Float, ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from palate.db.base_class import JSON_COMPATIBLE, Base

if typing.TYPE_CHECKING:  # pragma: no cover
    from palate.models.history import UserDishHistory
    from palate.models.restaurant import Restaurant


class EmbeddingStatus(str, enum.Enum):
    """Lifecycle of a dish's semantic embedding."""
    PENDING = "pending"
    READY = "ready"
    FAILED_RETRYABLE = "failed_retryable"
    FAILED = "failed"


class Dish(Base):
    """A dish on a restaurant's menu."""
    __tablename__ = "dishes"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    restaurant_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("restaurants.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(String(2000))
    price: Mapped[float | None] = mapped_column(Float)
    category: Mapped[str | None] = mapped_column(String(120), index=True)
    dietary_flags: Mapped[list[str]] = mapped_column(JSON_COMPATIBLE, default=list)
    is_available: Mapped[bool] = mapped_column(default=True)
    taste_profile: Mapped[dict | None] = mapped_column(JSON_COMPATIBLE)

    embedding: Mapped[list[float] | None] = mapped_column(JSON_COMPATIBLE)
    embedding_status: Mapped[EmbeddingStatus] = mapped_column(
        Enum(EmbeddingStatus, name="embedding_status", values_callable=lambda enum_cls: [e.value for e in enum_cls]),
        nullable=False,
        default=EmbeddingStatus.PENDING,
        index=True,
    )
    embedding_model: Mapped[str | None] = mapped_column(String(120))
    embedding_error: Mapped[str | None] = mapped_column(String(1000))
    embedded_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow
    )

    restaurant: Mapped["Restaurant"] = relationship(back_populates="dishes")
    ratings: Mapped[list["UserDishHistory"]] = relationship(back_populates="dish", cascade="all, delete-orphan")
