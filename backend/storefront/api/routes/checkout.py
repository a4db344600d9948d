from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from storefront.api.deps import get_db, get_current_user
from storefront.schemas.order import CheckoutRequest, CheckoutResponse
from storefront.services.checkout_service import CheckoutService

router = APIRouter()


@router.post("", response_model=CheckoutResponse)
async def checkout(
    request: CheckoutRequest,
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    """
    Place an order for the submitted cart lines.

    Validates:
    - Cart is not empty and order fields are present
    - Every product exists and has enough stock

    Stock is decremented and the user's server cart is cleared.
    """
    order = await CheckoutService.place_order(str(current_user["_id"]), request, db)

    return CheckoutResponse(
        order_id=str(order["_id"]),
        order_number=order["order_number"]
    )
