from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field


class CartItem(BaseModel):
    """Line item in a server-side cart."""
    product_id: str
    quantity: int = Field(gt=0)
    added_at: datetime = Field(default_factory=datetime.utcnow)


class Cart(BaseModel):
    """Shopping cart model for MongoDB. One cart per user."""
    id: Optional[str] = Field(None, alias="_id")
    user_id: str
    items: List[CartItem] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Config:
        populate_by_name = True
