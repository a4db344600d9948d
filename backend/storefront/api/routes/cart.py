from fastapi import APIRouter, Depends, HTTPException, Query, status
from motor.motor_asyncio import AsyncIOMotorDatabase

from storefront.api.deps import get_db, get_current_user
from storefront.schemas.cart import (
    AddToCartRequest,
    UpdateCartItemRequest,
    CartResponse,
    CartActionResponse,
    CartValidationResponse
)
from storefront.services.cart_service import CartService

router = APIRouter()


@router.get("", response_model=CartResponse)
async def get_cart(
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    """
    Get the current user's cart with product details.

    Images are always returned as a list of URLs. Lines whose product
    was removed from the catalog are left out.
    """
    user_id = str(current_user["_id"])
    return await CartService.get_cart_with_details(user_id, db)


@router.post("", response_model=CartActionResponse)
async def add_to_cart(
    request: AddToCartRequest,
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    """
    Add a product to the cart.

    If the product is already in the cart its quantity is increased.
    """
    user_id = str(current_user["_id"])

    await CartService.add_item(
        user_id=user_id,
        product_id=request.product_id,
        quantity=request.quantity,
        db=db
    )

    return CartActionResponse(message="Item added to cart")


@router.delete("/remove", response_model=CartActionResponse)
async def remove_from_cart(
    product_id: str = Query(None, alias="productId"),
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    """
    Remove a product from the cart.
    """
    if not product_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Product ID is required"
        )

    user_id = str(current_user["_id"])
    await CartService.remove_item(user_id, product_id, db)

    return CartActionResponse(message="Item removed from cart")


@router.put("/update", response_model=CartActionResponse)
async def update_cart_item(
    request: UpdateCartItemRequest,
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    """
    Set the quantity of a cart line. A quantity of 0 or less removes it.
    """
    user_id = str(current_user["_id"])

    await CartService.update_item_quantity(
        user_id=user_id,
        product_id=request.product_id,
        quantity=request.quantity,
        db=db
    )

    return CartActionResponse(message="Cart updated")


@router.delete("", response_model=CartActionResponse)
async def clear_cart(
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    """
    Clear all items from the cart.
    """
    user_id = str(current_user["_id"])
    await CartService.clear_cart(user_id, db)

    return CartActionResponse(message="Cart cleared")


@router.post("/validate", response_model=CartValidationResponse)
async def validate_cart(
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    """
    Check the cart against current catalog availability and stock.
    """
    user_id = str(current_user["_id"])
    errors = await CartService.validate_cart(user_id, db)

    return CartValidationResponse(valid=not errors, errors=errors)
