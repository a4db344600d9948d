"""
Checkout service: turns the submitted cart lines into an order.
"""
import logging
from typing import List
from fastapi import HTTPException, status
from motor.motor_asyncio import AsyncIOMotorDatabase

from storefront.models.order import Order, OrderItem
from storefront.schemas.order import CheckoutRequest
from storefront.services.cart_service import CartService
from storefront.utils.helpers import generate_order_number, to_object_id

logger = logging.getLogger(__name__)


class CheckoutService:
    """Service class for order placement."""

    @staticmethod
    def validate_request(request: CheckoutRequest) -> None:
        """Reject empty carts and missing order fields before touching the database."""
        if not request.items:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cart is empty"
            )

        if not (request.shipping_address and request.payment_method
                and request.total_amount and request.email):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Missing required fields"
            )

    @staticmethod
    async def reserve_stock(order_items: List[dict], db: AsyncIOMotorDatabase) -> None:
        """
        Decrement stock for every order line.

        Each decrement only applies while enough stock remains. If any line
        cannot be reserved, lines already reserved are put back and a 400 is raised.
        """
        reserved = []

        for item in order_items:
            result = await db.products.update_one(
                {
                    "_id": to_object_id(item["product_id"]),
                    "stock_quantity": {"$gte": item["quantity"]}
                },
                {"$inc": {"stock_quantity": -item["quantity"]}}
            )

            if result.modified_count == 0:
                await CheckoutService.restore_stock(reserved, db)
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=f"Insufficient stock for product {item['product_id']}"
                )

            reserved.append(item)

    @staticmethod
    async def restore_stock(order_items: List[dict], db: AsyncIOMotorDatabase) -> None:
        """Put back stock taken by reserve_stock()."""
        for item in order_items:
            try:
                await db.products.update_one(
                    {"_id": to_object_id(item["product_id"])},
                    {"$inc": {"stock_quantity": item["quantity"]}}
                )
            except Exception as e:
                # Log error but keep restoring the remaining lines
                logger.error(f"Error restoring stock for product {item['product_id']}: {e}")

    @staticmethod
    async def place_order(
        user_id: str,
        request: CheckoutRequest,
        db: AsyncIOMotorDatabase
    ) -> dict:
        """
        Create an order from the submitted cart and clear the user's cart.

        Returns:
            The inserted order document
        """
        CheckoutService.validate_request(request)

        order_items = []
        for line in request.items:
            product = await db.products.find_one({"_id": to_object_id(line.product_id)})

            if not product:
                raise HTTPException(
                    status_code=status.HTTP_404_NOT_FOUND,
                    detail=f"Product with ID {line.product_id} not found"
                )

            if product.get("stock_quantity", 0) < line.quantity:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=f"Insufficient stock for product {line.product_id}"
                )

            unit_price = line.price if line.price else float(product["price"])
            order_items.append(OrderItem(
                product_id=line.product_id,
                quantity=line.quantity,
                unit_price=unit_price,
                total_price=unit_price * line.quantity
            ).model_dump())

        await CheckoutService.reserve_stock(order_items, db)

        order = Order(
            user_id=user_id,
            order_number=generate_order_number(),
            items=order_items,
            total_amount=request.total_amount,
            shipping_address=request.shipping_address,
            payment_method=request.payment_method,
            customer_email=request.email,
            bank_receipt_url=request.bank_receipt_url
        ).model_dump(exclude={"id"})

        try:
            result = await db.orders.insert_one(order)
        except Exception:
            await CheckoutService.restore_stock(order_items, db)
            raise
        order["_id"] = result.inserted_id

        await CartService.clear_cart(user_id, db)

        logger.info(f"Order created successfully: {order['order_number']} for user {user_id}")
        return order
