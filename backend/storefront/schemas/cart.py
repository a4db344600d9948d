from typing import List, Optional
from pydantic import BaseModel, Field


class AddToCartRequest(BaseModel):
    """Schema for adding a product to cart."""
    product_id: str = Field(alias="productId", min_length=1)
    quantity: int = Field(default=1, gt=0)

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "productId": "65a1f0c2e4b0a1b2c3d4e5f6",
                "quantity": 1
            }
        }


class UpdateCartItemRequest(BaseModel):
    """Schema for updating cart item quantity. A quantity of 0 or less removes the item."""
    product_id: str = Field(alias="productId", min_length=1)
    quantity: int

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "productId": "65a1f0c2e4b0a1b2c3d4e5f6",
                "quantity": 3
            }
        }


class CartItemResponse(BaseModel):
    """Cart line joined with current product data."""
    product_id: str = Field(alias="productId")
    quantity: int
    name: str
    description: str = ""
    price: float
    images: List[str]
    category: Optional[str] = None
    stock_quantity: int = Field(alias="stockQuantity")

    class Config:
        populate_by_name = True


class CartResponse(BaseModel):
    """Schema for cart response."""
    cart_id: str = Field(alias="cartId")
    items: List[CartItemResponse]
    total_items: int = Field(alias="totalItems")

    class Config:
        populate_by_name = True


class CartActionResponse(BaseModel):
    """Acknowledgement for cart mutations."""
    success: bool = True
    message: str


class CartValidationResponse(BaseModel):
    """Result of validating the cart against the catalog."""
    valid: bool
    errors: List[str] = []
