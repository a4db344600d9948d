from typing import List, Optional
from datetime import datetime
from pydantic import BaseModel, EmailStr, Field


class CheckoutItem(BaseModel):
    """Cart line submitted at checkout."""
    product_id: str = Field(alias="productId")
    quantity: int = Field(gt=0)
    price: Optional[float] = Field(None, ge=0)

    class Config:
        populate_by_name = True


class CheckoutRequest(BaseModel):
    """Schema for placing an order from the cart."""
    items: List[CheckoutItem] = []
    shipping_address: Optional[dict] = Field(None, alias="shippingAddress")
    payment_method: Optional[str] = Field(None, alias="paymentMethod")
    total_amount: Optional[float] = Field(None, alias="totalAmount")
    email: Optional[EmailStr] = None
    bank_receipt_url: Optional[str] = Field(None, alias="bankReceiptUrl")

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "items": [{"productId": "65a1f0c2e4b0a1b2c3d4e5f6", "quantity": 2}],
                "shippingAddress": {"line1": "1 Main St", "city": "Lagos"},
                "paymentMethod": "bank_transfer",
                "totalAmount": 179.98,
                "email": "user@example.com"
            }
        }


class CheckoutResponse(BaseModel):
    """Schema for a successful checkout."""
    success: bool = True
    order_id: str = Field(alias="orderId")
    order_number: str = Field(alias="orderNumber")
    message: str = "Order placed successfully"
    clear_cart: bool = Field(True, alias="clearCart")

    class Config:
        populate_by_name = True


class OrderItemResponse(BaseModel):
    """Product line of a placed order."""
    product_id: str
    quantity: int
    unit_price: float
    total_price: float


class OrderResponse(BaseModel):
    """Placed order as returned to its owner."""
    id: str
    user_id: str
    order_number: str
    items: List[OrderItemResponse]
    total_amount: float
    shipping_address: dict
    payment_method: str
    status: str
    payment_status: str
    customer_email: str
    bank_receipt_url: Optional[str] = None
    created_at: datetime


class OrderListResponse(BaseModel):
    """The current user's orders, newest first."""
    success: bool = True
    orders: List[OrderResponse]
    total: int


class OrderDetailResponse(BaseModel):
    success: bool = True
    order: OrderResponse
