from typing import List, Optional, Union
from pydantic import BaseModel, Field, field_validator, model_validator


class ProductSnapshot(BaseModel):
    """
    Denormalized copy of catalog data kept on a cart line.

    Captured when the item is added or the cart is synced. It may be stale
    and is only used for display, totals and pre-checkout checks.
    """
    id: Optional[str] = None
    name: str = ""
    description: str = ""
    price: float = 0.0
    images: List[str] = Field(default_factory=list)
    category: Optional[str] = None
    stock_count: Optional[int] = Field(None, alias="stockCount")
    in_stock: bool = Field(True, alias="inStock")

    class Config:
        populate_by_name = True
        extra = "ignore"

    @field_validator("id", mode="before")
    @classmethod
    def _id_to_str(cls, value: Union[int, str, None]) -> Optional[str]:
        return None if value is None else str(value)


class CartItem(BaseModel):
    """One cart line. Quantity is always at least 1."""
    product_id: str = Field(alias="productId", min_length=1)
    quantity: int = Field(ge=1)
    product: Optional[ProductSnapshot] = None

    class Config:
        populate_by_name = True

    @field_validator("product_id", mode="before")
    @classmethod
    def _product_id_to_str(cls, value: Union[int, str]) -> str:
        return str(value)


class PersistedCart(BaseModel):
    """Blob written to durable storage on every cart mutation."""
    items: List[CartItem]
    timestamp: int  # milliseconds since epoch
    version: str

    @model_validator(mode="after")
    def _unique_product_ids(self) -> "PersistedCart":
        product_ids = [item.product_id for item in self.items]
        if len(product_ids) != len(set(product_ids)):
            raise ValueError("duplicate productId in persisted cart")
        return self


class PendingCartItem(BaseModel):
    """Add-to-cart attempt parked in session storage while the user logs in."""
    product_id: str = Field(alias="productId", min_length=1)
    product: Optional[ProductSnapshot] = None
    redirect_url: Optional[str] = Field(None, alias="redirectUrl")

    class Config:
        populate_by_name = True


class CartValidation(BaseModel):
    """Pre-checkout check result: a flat list of human readable errors."""
    valid: bool
    errors: List[str] = Field(default_factory=list)
