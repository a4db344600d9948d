import logging
from typing import List, Dict
from datetime import datetime
from motor.motor_asyncio import AsyncIOMotorDatabase
from fastapi import HTTPException, status
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from storefront.models.cart import Cart, CartItem
from storefront.schemas.cart import CartItemResponse
from storefront.utils.helpers import to_object_id
from storefront.utils.images import normalize_images

logger = logging.getLogger(__name__)


class CartService:
    """
    Service for server-side cart operations.

    Every mutation is a single atomic update on the user's cart document,
    so overlapping requests never overwrite each other's lines.
    """

    @staticmethod
    async def get_or_create_cart(user_id: str, db: AsyncIOMotorDatabase) -> dict:
        """Get the user's cart, creating an empty one on first access."""
        new_cart = Cart(user_id=user_id).model_dump(exclude={"id", "user_id"})

        try:
            return await db.carts.find_one_and_update(
                {"user_id": user_id},
                {"$setOnInsert": new_cart},
                upsert=True,
                return_document=ReturnDocument.AFTER
            )
        except DuplicateKeyError:
            # Lost the upsert race on the unique user_id index
            logger.debug(f"Cart for user {user_id} created concurrently, re-reading")
            return await db.carts.find_one({"user_id": user_id})

    @staticmethod
    async def add_item(
        user_id: str,
        product_id: str,
        quantity: int,
        db: AsyncIOMotorDatabase
    ) -> dict:
        """Add a product to the cart, incrementing the line if it already exists."""
        product = await db.products.find_one({"_id": to_object_id(product_id)})

        if not product:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Product not found"
            )

        await CartService.get_or_create_cart(user_id, db)

        increment = {
            "$inc": {"items.$.quantity": quantity},
            "$set": {"updated_at": datetime.utcnow()}
        }
        result = await db.carts.update_one(
            {"user_id": user_id, "items.product_id": product_id},
            increment
        )

        if result.matched_count == 0:
            result = await db.carts.update_one(
                {"user_id": user_id, "items.product_id": {"$ne": product_id}},
                {
                    "$push": {"items": CartItem(product_id=product_id, quantity=quantity).model_dump()},
                    "$set": {"updated_at": datetime.utcnow()}
                }
            )

            # Another request inserted the line in between
            if result.matched_count == 0:
                await db.carts.update_one(
                    {"user_id": user_id, "items.product_id": product_id},
                    increment
                )

        return await CartService.get_or_create_cart(user_id, db)

    @staticmethod
    async def get_cart_with_details(user_id: str, db: AsyncIOMotorDatabase) -> Dict:
        """Get cart lines joined with current product details."""
        cart = await CartService.get_or_create_cart(user_id, db)

        items_response = []

        for item in cart["items"]:
            product = await db.products.find_one({"_id": to_object_id(item["product_id"])})

            # Product removed from the catalog since it was added
            if not product:
                continue

            items_response.append(CartItemResponse(
                product_id=item["product_id"],
                quantity=item["quantity"],
                name=product["title"],
                description=product.get("description", ""),
                price=float(product["price"]),
                images=normalize_images(product.get("images"), product["title"]),
                category=product.get("category"),
                stock_quantity=product.get("stock_quantity", 0)
            ))

        return {
            "cart_id": str(cart["_id"]),
            "items": items_response,
            "total_items": sum(item.quantity for item in items_response)
        }

    @staticmethod
    async def update_item_quantity(
        user_id: str,
        product_id: str,
        quantity: int,
        db: AsyncIOMotorDatabase
    ) -> dict:
        """Set the quantity of a cart line. Zero or less removes it."""
        if quantity <= 0:
            return await CartService.remove_item(user_id, product_id, db)

        result = await db.carts.update_one(
            {"user_id": user_id, "items.product_id": product_id},
            {"$set": {"items.$.quantity": quantity, "updated_at": datetime.utcnow()}}
        )

        if result.matched_count == 0:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Item not found in cart"
            )

        return await CartService.get_or_create_cart(user_id, db)

    @staticmethod
    async def remove_item(
        user_id: str,
        product_id: str,
        db: AsyncIOMotorDatabase
    ) -> dict:
        """Remove a line from the cart. Removing an absent line is not an error."""
        await db.carts.update_one(
            {"user_id": user_id},
            {
                "$pull": {"items": {"product_id": product_id}},
                "$set": {"updated_at": datetime.utcnow()}
            }
        )

        return await CartService.get_or_create_cart(user_id, db)

    @staticmethod
    async def clear_cart(user_id: str, db: AsyncIOMotorDatabase) -> dict:
        """Clear all items from cart in a single write."""
        await db.carts.update_one(
            {"user_id": user_id},
            {"$set": {"items": [], "updated_at": datetime.utcnow()}}
        )
        logger.info(f"Cleared cart for user {user_id}")

        return await CartService.get_or_create_cart(user_id, db)

    @staticmethod
    async def validate_cart(user_id: str, db: AsyncIOMotorDatabase) -> List[str]:
        """
        Check every cart line against the catalog.

        Returns:
            Human readable error messages, empty when the cart can be checked out
        """
        cart = await CartService.get_or_create_cart(user_id, db)
        errors = []

        for item in cart["items"]:
            product = await db.products.find_one({"_id": to_object_id(item["product_id"])})

            if not product or not product.get("published", True):
                errors.append(f"Product {item['product_id']} is no longer available")
                continue

            stock = product.get("stock_quantity", 0)
            if stock <= 0:
                errors.append(f"{product['title']} is out of stock")
            elif stock < item["quantity"]:
                errors.append(
                    f"Only {stock} of {product['title']} available (requested {item['quantity']})"
                )

        return errors
