from . import (
    cart_service,
    dish_service,
    embedding_service,
    feed_service,
    history_service,
    order_service,
    profile_embedding_service,
    recommendation_service,
    restaurant_service,
    review_service,
    taste_service,
    user_service,
)

__all__ = [
    "cart_service",
    "dish_service",
    "embedding_service",
    "feed_service",
    "history_service",
    "order_service",
    "profile_embedding_service",
    "recommendation_service",
    "restaurant_service",
    "review_service",
    "taste_service",
    "user_service",
]
