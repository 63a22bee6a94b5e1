"""Import all models here for Alembic autogenerate."""

from palate.db.base_class import Base
from palate.models import cart, dish, history, order, restaurant, review, user  # noqa: F401

__all__ = ["Base"]
