"""API router composition for all route groups."""

from fastapi import APIRouter

from .routes import auth, cart, dishes, feed, orders, recommendations, restaurants, reviews, users

api_router = APIRouter()
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(users.router, tags=["users"])
api_router.include_router(cart.router, prefix="/me/cart", tags=["cart"])
api_router.include_router(orders.router, prefix="/me/orders", tags=["orders"])
api_router.include_router(restaurants.router, prefix="/restaurants", tags=["restaurants"])
api_router.include_router(dishes.router, prefix="/dishes", tags=["dishes"])
api_router.include_router(reviews.router, prefix="/reviews", tags=["reviews"])
api_router.include_router(feed.router, prefix="/feed", tags=["feed"])
api_router.include_router(recommendations.router, prefix="/recommendations", tags=["recommendations"])
