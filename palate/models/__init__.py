"""SQLAlchemy ORM models for the Palate API."""

from palate.models.cart import CartItem
from palate.models.dish import Dish, EmbeddingStatus
from palate.models.history import UserDishHistory
from palate.models.order import Order, OrderStatus
from palate.models.restaurant import Restaurant
from palate.models.review import Review
from palate.models.user import User, UserProfileEmbedding, UserRole

__all__ = [
    "CartItem",
    "Dish",
    "EmbeddingStatus",
    "Order",
    "OrderStatus",
    "Restaurant",
    "Review",
    "User",
    "UserDishHistory",
    "UserProfileEmbedding",
    "UserRole",
]
