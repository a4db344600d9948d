from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, status, Query
from motor.motor_asyncio import AsyncIOMotorDatabase

from storefront.api.deps import get_db, get_current_user
from storefront.models.user import UserRole
from storefront.schemas.order import (
    OrderDetailResponse,
    OrderItemResponse,
    OrderListResponse,
    OrderResponse
)
from storefront.utils.helpers import to_object_id

router = APIRouter()


def order_to_response(order: dict) -> OrderResponse:
    """Build the API view of an order document."""
    return OrderResponse(
        id=str(order["_id"]),
        user_id=order["user_id"],
        order_number=order["order_number"],
        items=[OrderItemResponse(**item) for item in order.get("items", [])],
        total_amount=float(order["total_amount"]),
        shipping_address=order.get("shipping_address") or {},
        payment_method=order["payment_method"],
        status=order["status"],
        payment_status=order["payment_status"],
        customer_email=order["customer_email"],
        bank_receipt_url=order.get("bank_receipt_url"),
        created_at=order["created_at"]
    )


@router.get("/my-orders", response_model=OrderListResponse)
async def get_my_orders(
    order_status: Optional[str] = Query(None, alias="status"),
    payment_status: Optional[str] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    """
    Get the current user's orders, newest first.

    Filters:
    - status: Order status, "all" for no filter
    - payment_status: Payment status, "all" for no filter
    """
    query = {"user_id": str(current_user["_id"])}

    if order_status and order_status != "all":
        query["status"] = order_status
    if payment_status and payment_status != "all":
        query["payment_status"] = payment_status

    orders = await db.orders.find(query).sort("created_at", -1).skip(skip).limit(limit).to_list(length=limit)
    response = [order_to_response(order) for order in orders]

    return OrderListResponse(orders=response, total=len(response))


@router.get("/{order_id}", response_model=OrderDetailResponse)
async def get_order(
    order_id: str,
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    """
    Get a specific order by ID. Customers only see their own orders.
    """
    order = await db.orders.find_one({"_id": to_object_id(order_id, "order ID")})

    if not order:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Order not found"
        )

    if order["user_id"] != str(current_user["_id"]) and current_user.get("role") != UserRole.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only view your own orders"
        )

    return OrderDetailResponse(order=order_to_response(order))
