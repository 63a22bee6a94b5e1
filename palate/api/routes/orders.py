from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from palate.api.deps import get_current_user, get_db
from palate.models.user import User
from palate.schema.order import CheckoutRequest, OrderRead
from palate.services import order_service

router = APIRouter()


@router.get("", response_model=list[OrderRead])
async def list_orders(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
):
    return await order_service.list_for_user(session, current_user.id)


@router.post("", response_model=list[OrderRead], status_code=status.HTTP_201_CREATED)
async def checkout(
    payload: CheckoutRequest,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
):
    """Place the cart as one order per restaurant and empty it."""
    return await order_service.checkout(session, current_user.id, payload)
